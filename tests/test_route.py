import flask
import pytest

from svctemplate import gerror
from svctemplate.biz import HelloUsecase
from svctemplate.data import Data, new_hello_repo
from svctemplate.gcode import CODE_NOT_FOUND
from svctemplate.route import (
    GroupUrl,
    Method,
    Url,
    mk_handler,
    register_hello_service,
    register_http_service,
)
from svctemplate.service import HelloAPIService


@pytest.fixture
def hello_service():
    return HelloAPIService(None, HelloUsecase(None, new_hello_repo(Data())))


@pytest.fixture
def app():
    return flask.Flask(__name__)


def test_register_hello_service_layout(hello_service):
    gurl = register_hello_service(hello_service, None)
    assert gurl.group_addr == "/api"
    assert len(gurl.urls) == 1
    url = gurl.urls[0]
    assert (url.path, url.method) == ("hello", Method.GET)
    assert url.json_handler == hello_service.hello


def test_register_http_service(hello_service):
    groups = register_http_service(None, hello_service)
    assert [g.group_addr for g in groups] == ["/api"]


def test_hello_endpoint_ok(app, hello_service):
    mk_handler(app, register_hello_service(hello_service, None))
    resp = app.test_client().get("/api/hello", json={})
    assert resp.status_code == 200
    assert resp.get_json() == {"code": 0, "message": "OK"}


def test_hello_endpoint_empty_body(app, hello_service):
    mk_handler(app, register_hello_service(hello_service, None))
    resp = app.test_client().get("/api/hello")
    assert resp.status_code == 400
    assert resp.get_json() == {"code": 66, "message": "Invalid Request: EOF"}


def test_error_without_code_is_internal(app):
    url = Url(path="/boom", method="POST", json_handler=lambda req: (None, ValueError("x")))
    mk_handler(app, GroupUrl(urls=[url]))
    resp = app.test_client().post("/boom")
    assert resp.status_code == 500
    assert resp.data == b"null"


def test_error_code_sets_status(app):
    url = Url(
        path="/missing",
        method=Method.GET,
        json_handler=lambda req: ({"a": 1}, gerror.new_code(CODE_NOT_FOUND)),
    )
    mk_handler(app, GroupUrl(urls=[url]))
    resp = app.test_client().get("/missing")
    assert resp.status_code == 404
    assert resp.get_json() == {"a": 1}


def test_any_accepts_several_methods(app):
    url = Url(path="/any", method=Method.ANY, json_handler=lambda req: ({"m": req.method}, None))
    mk_handler(app, GroupUrl(urls=[url]))
    client = app.test_client()
    assert client.delete("/any").get_json() == {"m": "DELETE"}
    assert client.patch("/any").get_json() == {"m": "PATCH"}


def test_ws_registers_get(app):
    url = Url(path="/ws", method=Method.WS, empty_handler=lambda req: "up")
    mk_handler(app, GroupUrl(urls=[url]))
    client = app.test_client()
    assert client.get("/ws").data == b"up"
    assert client.post("/ws").status_code == 405


def test_group_middleware_can_stop(app):
    seen = []

    def deny(req):
        return flask.Response("denied", status=403)

    url = Url(
        path="x",
        method=Method.PUT,
        json_handler=lambda req: seen.append("handler") or ({}, None),
    )
    mk_handler(app, GroupUrl(group_addr="/g", urls=[url], middleware=[deny]))
    resp = app.test_client().put("/g/x")
    assert resp.status_code == 403
    assert seen == []


def test_middleware_order(app):
    seen = []
    url = Url(
        path="y",
        method=Method.GET,
        empty_handler=lambda req: seen.append("handler") or "ok",
        middleware=[lambda req: seen.append("url")],
    )
    mk_handler(app, GroupUrl(group_addr="/g", urls=[url], middleware=[lambda req: seen.append("group")]))
    app.test_client().get("/g/y")
    assert seen == ["group", "url", "handler"]


def test_group_middleware_ignored_without_prefix(app):
    url = Url(path="/z", method=Method.GET, empty_handler=lambda req: "ok")
    deny = lambda req: flask.Response("denied", status=403)  # noqa: E731
    mk_handler(app, GroupUrl(urls=[url], middleware=[deny]))
    assert app.test_client().get("/z").data == b"ok"


def test_invalid_method(app):
    url = Url(path="/p", method="PATCH", empty_handler=lambda req: "ok")
    with pytest.raises(ValueError, match="invalid http method"):
        mk_handler(app, GroupUrl(urls=[url]))


def test_missing_handler(app):
    with pytest.raises(ValueError, match="param error in decorator"):
        mk_handler(app, GroupUrl(urls=[Url(path="/p", method=Method.GET)]))