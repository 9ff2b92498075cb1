"""Services behind the HTTP routes and the scheduled jobs."""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from svctemplate import gerror
from svctemplate.biz import HelloUsecase
from svctemplate.config import DataConfig
from svctemplate.gcode import CODE_INVALID_REQUEST, CODE_OK, Code

_JSON_KINDS = {list: "array", str: "string", bool: "bool", int: "number", float: "number"}
_TIME_LABEL = "\u5f53\u524d\u65f6\u95f4"


@dataclass
class HelloReply:
    """The body returned by the hello endpoint."""

    code: int = 0
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the reply as a JSON-ready mapping."""
        return {"code": self.code, "message": self.message}


def _reply_for(status: Code) -> HelloReply:
    return HelloReply(status.code, status.message)


def _bind_json(body: bytes) -> dict[str, Any]:
    if not body.strip():
        raise ValueError("EOF")
    payload = json.loads(body)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        kind = _JSON_KINDS.get(type(payload), type(payload).__name__)
        raise ValueError(f"cannot unmarshal {kind} into HelloRequest")
    return payload


class HelloAPIService:
    """Serves the hello endpoint."""

    def __init__(self, data_config: DataConfig | None, hello_usecase: HelloUsecase):
        self.data_config = data_config
        self.hello_usecase = hello_usecase

    def hello(self, request: Any) -> tuple[HelloReply, gerror.GError | None]:
        """Answer a hello request; return the reply and the error, if any."""
        try:
            req = _bind_json(request.get_data())
        except ValueError as exc:
            reply = _reply_for(CODE_INVALID_REQUEST)
            reply.message = f"{reply.message}: {exc}"
            return reply, gerror.new_code(CODE_INVALID_REQUEST)
        self.hello_usecase.hello(request, req)
        return _reply_for(CODE_OK), None


class JobService:
    """Provides the functions that scheduled jobs run."""

    def __init__(self, hello_usecase: HelloUsecase):
        self.hello_usecase = hello_usecase
        self.jobs: dict[str, Callable[[], None]] = {}

    def init(self) -> dict[str, Callable[[], None]]:
        """Register the known jobs by name and return them."""
        self.jobs = {"one": self.do_my_work}
        return self.jobs

    def do_my_work(self) -> None:
        """Print the current Unix time."""
        print(f"{_TIME_LABEL} {int(time.time())} ")