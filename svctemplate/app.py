"""Application assembly and the command-line entry point."""

from __future__ import annotations

import argparse
import logging
import signal
import socket
import sys
import threading
from collections.abc import Callable, Sequence
from typing import Any

from svctemplate.biz import HelloUsecase
from svctemplate.config import Bootstrap, load_config
from svctemplate.data import new_data, new_hello_repo
from svctemplate.route import register_http_service
from svctemplate.server import new_all_http_server, new_grpc_server
from svctemplate.service import HelloAPIService, JobService
from svctemplate.worker import new_cron_worker

NAME = ""
VERSION = ""
_log = logging.getLogger(__name__)


class App:
    """A set of servers started and stopped together."""

    def __init__(
        self,
        servers: Sequence[Any],
        *,
        id: str = "",
        name: str = NAME,
        version: str = VERSION,
        metadata: dict[str, str] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.servers = list(servers)
        self.id = id or socket.gethostname()
        self.name = name
        self.version = version
        self.metadata = dict(metadata or {})
        self.logger = logger or _log
        self._lock = threading.Lock()
        self._started: list[Any] = []
        self._done = threading.Event()

    def start(self) -> None:
        """Start every server; on failure stop those already started."""
        with self._lock:
            self._done.clear()
            for server in self.servers:
                try:
                    server.start()
                except Exception:
                    for started in reversed(self._started):
                        started.stop()
                    self._started = []
                    raise
                self._started.append(server)

    def stop(self) -> None:
        """Stop the started servers in reverse order."""
        with self._lock:
            for server in reversed(self._started):
                server.stop()
            self._started = []
            self._done.set()

    def run(self) -> None:
        """Start, wait for SIGINT, SIGTERM or stop(), then stop."""
        self.start()
        previous: dict[int, Any] = {}
        if threading.current_thread() is threading.main_thread():
            for sig in (signal.SIGINT, signal.SIGTERM):
                previous[sig] = signal.signal(sig, lambda *_: self._done.set())
        try:
            self._done.wait()
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)
            self.stop()


def wire_app(
    bootstrap: Bootstrap, logger: logging.Logger | None = None
) -> tuple[App, Callable[[], None]]:
    """Build the application and a function that releases its resources."""
    data, cleanup = new_data(bootstrap.data, logger)
    usecase = HelloUsecase(bootstrap.data, new_hello_repo(data))
    hello_service = HelloAPIService(bootstrap.data, usecase)
    urls = register_http_service(bootstrap.data, hello_service)
    http_servers = new_all_http_server(bootstrap.server, bootstrap.data, logger, urls)
    grpc_server = new_grpc_server(bootstrap.server, logger)
    worker = new_cron_worker(bootstrap.job, JobService(usecase))
    app = App([*http_servers, grpc_server, worker], logger=logger)
    return app, cleanup


def main(argv: Sequence[str] | None = None) -> int:
    """Load the configuration, build the application and run it."""
    parser = argparse.ArgumentParser(prog="svctemplate")
    parser.add_argument(
        "-conf",
        "--conf",
        default="../../configs/config.yaml",
        help="config path, eg: -conf config.yaml",
    )
    args = parser.parse_args(sys.argv[1:] if argv is None else list(argv))
    logging.basicConfig(
        level=logging.INFO,
        stream=sys.stdout,
        format="ts=%(asctime)s caller=%(module)s:%(lineno)d msg=%(message)s",
    )
    bootstrap = load_config(args.conf)
    app, cleanup = wire_app(bootstrap, logging.getLogger("svctemplate"))
    try:
        app.run()
    finally:
        cleanup()
    return 0