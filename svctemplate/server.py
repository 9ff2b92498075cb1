"""HTTP and gRPC servers and the routed HTTP application."""

from __future__ import annotations

import json
import logging
import socketserver
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

import flask
import grpc

from svctemplate.config import DataConfig, ServerConfig, Transport
from svctemplate.gcode import CODE_NOT_FOUND
from svctemplate.route import GroupUrl, mk_handler

_log = logging.getLogger(__name__)
_DEFAULT_TIMEOUT = 1.0
_CORS_METHODS = "GET,POST,PUT,PATCH,DELETE,HEAD,OPTIONS"
_CORS_HEADERS = "Origin,Content-Length,Content-Type,*"
_CORS_MAX_AGE = str(12 * 3600)


def _split_addr(addr: str) -> tuple[str, int]:
    host, _, port = (addr or ":0").rpartition(":")
    host = host.strip("[]")
    if port and not port.isdigit():
        raise ValueError(f"invalid address: {addr!r}")
    return host, int(port or 0)


class _ThreadingWSGIServer(socketserver.ThreadingMixIn, WSGIServer):
    daemon_threads = True


def _not_found_app(environ: dict[str, Any], start_response: Any) -> list[bytes]:
    start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
    return [b"404 page not found\n"]


class HttpServer:
    """Serves a WSGI application on a TCP address in a background thread."""

    def __init__(
        self,
        app: Any = None,
        network: str = "tcp",
        addr: str = ":0",
        timeout: float | None = _DEFAULT_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        if network not in ("", "tcp", "tcp4", "tcp6"):
            raise ValueError(f"unsupported network: {network!r}")
        self.app = app if app is not None else _not_found_app
        self.network = network or "tcp"
        self.addr = addr or ":0"
        self.timeout = timeout
        self.logger = logger or _log
        self._server: _ThreadingWSGIServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def port(self) -> int:
        """The bound port; only known once started."""
        if self._server is None:
            raise RuntimeError("server is not started")
        return self._server.server_port

    def start(self) -> None:
        """Bind the address and start serving."""
        host, port = _split_addr(self.addr)
        logger = self.logger

        class _Handler(WSGIRequestHandler):
            timeout = self.timeout

            def log_message(self, format: str, *args: Any) -> None:
                logger.debug(format, *args)

        self._server = make_server(
            host, port, self.app, server_class=_ThreadingWSGIServer, handler_class=_Handler
        )
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        self.logger.info("[HTTP] server listening on: %s:%d", host, self.port)

    def stop(self) -> None:
        """Stop serving and release the address."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join()
        self._server = None
        self._thread = None
        self.logger.info("[HTTP] server stopping")


class GrpcServer:
    """A gRPC server on a TCP address."""

    def __init__(
        self,
        network: str = "tcp",
        addr: str = ":0",
        timeout: float | None = _DEFAULT_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        self.network = network or "tcp"
        self.addr = addr or ":0"
        self.timeout = timeout
        self.logger = logger or _log
        self._server: Any = None
        self._port = 0

    @property
    def port(self) -> int:
        """The bound port; only known once started."""
        if self._server is None:
            raise RuntimeError("server is not started")
        return self._port

    def start(self) -> None:
        """Bind the address and start serving."""
        host, port = _split_addr(self.addr)
        self._server = grpc.server(ThreadPoolExecutor(max_workers=10))
        self._port = self._server.add_insecure_port(f"{host or '0.0.0.0'}:{port}")
        if not self._port:
            self._server = None
            raise OSError(f"cannot listen on {self.addr}")
        self._server.start()
        self.logger.info("[gRPC] server listening on: %s:%d", host, self._port)

    def stop(self) -> None:
        """Stop serving."""
        if self._server is None:
            return
        self._server.stop(None).wait()
        self._server = None
        self.logger.info("[gRPC] server stopping")


def _json(body: Any, status: int) -> flask.Response:
    return flask.Response(
        json.dumps(body), status=status, content_type="application/json; charset=utf-8"
    )


def decorator_router(
    app: flask.Flask, data_config: DataConfig | None, urls: list[GroupUrl]
) -> None:
    """Add CORS, the health check, the route groups and the not-found handler."""

    @app.before_request
    def _preflight() -> Any:
        request = flask.request
        if request.method == "OPTIONS" and request.headers.get("Origin"):
            response = flask.Response(status=204)
            response.headers["Access-Control-Allow-Methods"] = _CORS_METHODS
            response.headers["Access-Control-Allow-Headers"] = _CORS_HEADERS
            response.headers["Access-Control-Max-Age"] = _CORS_MAX_AGE
            return response
        return None

    @app.after_request
    def _cors(response: flask.Response) -> flask.Response:
        if flask.request.headers.get("Origin"):
            response.headers["Access-Control-Allow-Origin"] = "*"
            response.headers["Access-Control-Allow-Credentials"] = "true"
        return response

    @app.get("/healthy")
    def _healthy() -> flask.Response:
        return _json({"is_alive": True}, 200)

    for gurl in urls:
        mk_handler(app, gurl)

    def _no_route(_error: Exception) -> flask.Response:
        return _json(None, int(CODE_NOT_FOUND.http_code))

    app.register_error_handler(404, _no_route)
    app.register_error_handler(405, _no_route)


def new_gin_app(data_config: DataConfig | None, urls: list[GroupUrl]) -> flask.Flask:
    """Create the routed application."""
    app = flask.Flask(__name__)

    @app.after_request
    def _access_log(response: flask.Response) -> flask.Response:
        _log.info(
            "%s %s %d", flask.request.method, flask.request.path, response.status_code
        )
        return response

    decorator_router(app, data_config, urls)
    return app


def _options(transport: Transport) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if transport.network:
        options["network"] = transport.network
    if transport.addr:
        options["addr"] = transport.addr
    if transport.timeout is not None:
        options["timeout"] = transport.timeout
    return options


def new_gin_server(
    server_config: ServerConfig,
    data_config: DataConfig | None,
    logger: logging.Logger | None,
    urls: list[GroupUrl],
) -> HttpServer:
    """Create the server of the routed application."""
    app = new_gin_app(data_config, urls)
    return HttpServer(app, logger=logger, **_options(server_config.gin))


def new_http_server(server_config: ServerConfig, logger: logging.Logger | None) -> HttpServer:
    """Create the plain HTTP server."""
    return HttpServer(None, logger=logger, **_options(server_config.http))


def new_grpc_server(server_config: ServerConfig, logger: logging.Logger | None) -> GrpcServer:
    """Create the gRPC server."""
    return GrpcServer(logger=logger, **_options(server_config.grpc))


def new_all_http_server(
    server_config: ServerConfig,
    data_config: DataConfig | None,
    logger: logging.Logger | None,
    urls: list[GroupUrl],
) -> list[HttpServer]:
    """Create the plain HTTP server and the routed one."""
    return [
        new_http_server(server_config, logger),
        new_gin_server(server_config, data_config, logger, urls),
    ]