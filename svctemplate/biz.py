"""Business use cases."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from svctemplate.config import DataConfig

_log = logging.getLogger(__name__)


class HelloRepo(Protocol):
    """Storage used by the hello use case."""


@dataclass
class HelloUsecase:
    """The hello use case."""

    data_config: DataConfig | None
    hello_repo: HelloRepo | None
    handled: int = field(default=0, init=False, compare=False)

    def hello(self, ctx: Any, req: Any) -> str:
        """Handle a hello request; counts it and returns an empty greeting."""
        self.handled += 1
        _log.debug("hello request #%d: %r", self.handled, req)
        return ""