import logging

from svctemplate.data import Data, new_data, new_hello_repo


def test_new_data_cleanup_logs(caplog):
    logger = logging.getLogger("svctemplate.test")
    data, cleanup = new_data(None, logger)
    assert data == Data()
    with caplog.at_level(logging.INFO, logger="svctemplate.test"):
        cleanup()
    assert "closing the data resources" in caplog.messages


def test_new_data_default_logger(caplog):
    _, cleanup = new_data(None)
    with caplog.at_level(logging.INFO):
        cleanup()
    assert caplog.messages == ["closing the data resources"]


def test_hello_repo_holds_data():
    data = Data()
    repo = new_hello_repo(data)
    assert repo.data is data