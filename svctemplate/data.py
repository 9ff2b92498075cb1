"""Data layer: resources and repositories."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from svctemplate.config import DataConfig

_log = logging.getLogger(__name__)


@dataclass
class Data:
    """Holder for the data-layer clients."""

    closed: bool = False


@dataclass
class _HelloRepo:
    data: Data


def new_data(
    config: DataConfig | None, logger: logging.Logger | None = None
) -> tuple[Data, Callable[[], None]]:
    """Create the data resources and a function that releases them."""
    log = logger or _log
    data = Data()

    def cleanup() -> None:
        log.info("closing the data resources")
        data.closed = True

    return data, cleanup


def new_hello_repo(data: Data) -> _HelloRepo:
    """Create the hello repository backed by ``data``."""
    return _HelloRepo(data)