from unittest import mock

import flask
import pytest

from svctemplate.biz import HelloUsecase
from svctemplate.gcode import CODE_INVALID_REQUEST
from svctemplate.service import HelloAPIService, HelloReply, JobService


@pytest.fixture
def service():
    return HelloAPIService(None, HelloUsecase(None, None))


def _call(service, body):
    app = flask.Flask(__name__)
    with app.test_request_context("/api/hello", method="GET", data=body):
        return service.hello(flask.request)


def test_hello_ok(service):
    reply, err = _call(service, b"{}")
    assert err is None
    assert reply == HelloReply(0, "OK")


def test_hello_null_body_is_accepted(service):
    reply, err = _call(service, b"null")
    assert err is None
    assert reply.code == 0


def test_hello_empty_body(service):
    reply, err = _call(service, b"")
    assert reply.code == 66
    assert reply.message == "Invalid Request: EOF"
    assert err.code == CODE_INVALID_REQUEST


@pytest.mark.parametrize("body", [b"{not json", b"[1, 2]", b'"text"'])
def test_hello_bad_body(service, body):
    reply, err = _call(service, body)
    assert reply.code == 66
    assert reply.message.startswith("Invalid Request: ")
    assert str(err) == CODE_INVALID_REQUEST.message


def test_reply_to_dict():
    assert HelloReply(0, "OK").to_dict() == {"code": 0, "message": "OK"}


def test_job_service_init_registers_one():
    svc = JobService(HelloUsecase(None, None))
    jobs = svc.init()
    assert list(jobs) == ["one"]
    assert jobs["one"] == svc.do_my_work
    assert svc.jobs is jobs


def test_do_my_work_prints_time(capsys):
    svc = JobService(HelloUsecase(None, None))
    with mock.patch("svctemplate.service.time.time", return_value=1700000000.7):
        svc.do_my_work()
    assert capsys.readouterr().out == "\u5f53\u524d\u65f6\u95f4 1700000000 \n"