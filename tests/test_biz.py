from svctemplate.biz import HelloUsecase
from svctemplate.config import DataConfig


def test_hello_returns_empty_string():
    usecase = HelloUsecase(DataConfig(), None)
    assert usecase.hello(None, {"name": "x"}) == ""


def test_usecase_keeps_dependencies():
    conf = DataConfig(settings={"k": "v"})
    repo = object()
    usecase = HelloUsecase(conf, repo)
    assert usecase.data_config is conf
    assert usecase.hello_repo is repo