"""Route tables and their registration on a Flask application."""

from __future__ import annotations

import dataclasses
import json
import posixpath
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import flask

from svctemplate.config import DataConfig
from svctemplate.gcode import CODE_INTERNAL_ERROR, CODE_NIL, Code
from svctemplate.service import HelloAPIService

Middleware = Callable[[Any], Any]
JsonHandler = Callable[[Any], "tuple[Any, BaseException | None]"]

_ANY_METHODS = ("GET", "POST", "PUT", "PATCH", "HEAD", "OPTIONS", "DELETE", "CONNECT", "TRACE")


class Method(str, Enum):
    """Route methods; WS routes are served as GET."""

    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"
    PUT = "PUT"
    ANY = "ANY"
    WS = "WS"


@dataclass
class Url:
    """One route: a path, a method and exactly one kind of handler.

    A JSON handler takes the request and returns ``(response, error)``; an
    empty handler takes the request and returns a Flask response itself.
    Middleware takes the request and returns None to go on or a response to stop.
    """

    path: str
    method: Method | str
    json_handler: JsonHandler | None = None
    empty_handler: Callable[[Any], Any] | None = None
    middleware: list[Middleware] = field(default_factory=list)


@dataclass
class GroupUrl:
    """Routes sharing a path prefix and middleware."""

    group_addr: str = ""
    urls: list[Url] = field(default_factory=list)
    middleware: list[Middleware] = field(default_factory=list)


def _join_paths(base: str, relative: str) -> str:
    if not relative:
        return base
    joined = posixpath.normpath(f"{base}/{relative}")
    if relative.endswith("/") and not joined.endswith("/"):
        joined += "/"
    return joined


def _methods_for(method: Method | str) -> tuple[str, ...]:
    try:
        kind = Method(method)
    except ValueError:
        raise ValueError("invalid http method") from None
    if kind in (Method.GET, Method.WS):
        return ("GET",)
    if kind is Method.ANY:
        return _ANY_METHODS
    return (kind.value,)


def _error_code(err: BaseException | None) -> Code:
    if err is None:
        return CODE_NIL
    attached = getattr(err, "code", None)
    return attached if isinstance(attached, Code) else CODE_NIL


def _body_of(resp: Any) -> Any:
    if resp is None:
        return None
    to_dict = getattr(resp, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(resp) and not isinstance(resp, type):
        return dataclasses.asdict(resp)
    return resp


def _json_response(resp: Any, status: int) -> flask.Response:
    return flask.Response(
        json.dumps(_body_of(resp)),
        status=status if status > 0 else 200,
        content_type="application/json; charset=utf-8",
    )


def _decorator_json(handler: JsonHandler) -> Callable[[], flask.Response]:
    def view() -> flask.Response:
        resp, err = handler(flask.request)
        result_code = _error_code(err)
        if err is not None and result_code == CODE_NIL:
            result_code = CODE_INTERNAL_ERROR
        return _json_response(resp, int(result_code.http_code))

    return view


def _decorator_normal(url: Url) -> Callable[[], Any]:
    if url.json_handler is not None:
        return _decorator_json(url.json_handler)
    if url.empty_handler is not None:
        empty = url.empty_handler
        return lambda: empty(flask.request)
    raise ValueError("param error in decorator")


def _chain(middleware: list[Middleware], view: Callable[[], Any]) -> Callable[..., Any]:
    def handle(**_params: Any) -> Any:
        for step in middleware:
            result = step(flask.request)
            if result is not None:
                return result
        return view()

    return handle


def mk_handler(app: flask.Flask, gurl: GroupUrl) -> None:
    """Register every route of ``gurl`` on ``app``."""
    for url in gurl.urls:
        view = _decorator_normal(url)
        methods = _methods_for(url.method)
        if gurl.group_addr:
            path = _join_paths(gurl.group_addr, url.path)
            middleware = [*gurl.middleware, *url.middleware]
        else:
            path = url.path
            middleware = list(url.middleware)
        endpoint = f"{path}|{','.join(methods)}|{len(app.view_functions)}"
        app.add_url_rule(
            path, endpoint=endpoint, view_func=_chain(middleware, view), methods=list(methods)
        )


def register_hello_service(
    service: HelloAPIService, data_config: DataConfig | None
) -> GroupUrl:
    """Return the routes of the hello service."""
    return GroupUrl(
        group_addr="/api",
        urls=[Url(path="hello", method=Method.GET, json_handler=service.hello, middleware=[])],
        middleware=[],
    )


def register_http_service(
    data_config: DataConfig | None, hello_service: HelloAPIService
) -> list[GroupUrl]:
    """Return all route groups of the HTTP service."""
    return [register_hello_service(hello_service, data_config)]