import pytest

from svctemplate.config import (
    Bootstrap,
    DataConfig,
    JobConfig,
    JobEntry,
    ServerConfig,
    Transport,
    load_config,
    parse_config,
)


def _with_timeout(timeout):
    return parse_config({"server": {"http": {"timeout": timeout}}}).server.http.timeout


def test_parse_full_mapping():
    conf = parse_config(
        {
            "server": {
                "http": {"network": "tcp", "addr": "0.0.0.0:8000", "timeout": "1s"},
                "grpc": {"addr": "0.0.0.0:9000"},
                "gin": {"addr": "0.0.0.0:8080"},
            },
            "data": {"database": {"driver": "mysql"}},
            "job": {"jobs": [{"name": "one", "schedule": "*/1 * * * *"}]},
        }
    )
    assert conf.server.http == Transport("tcp", "0.0.0.0:8000", 1.0)
    assert conf.server.grpc == Transport("", "0.0.0.0:9000", None)
    assert conf.server.gin.addr == "0.0.0.0:8080"
    assert conf.data.settings == {"database": {"driver": "mysql"}}
    assert conf.job.jobs == (JobEntry("one", "*/1 * * * *"),)


def test_empty_document_gives_defaults():
    assert parse_config(None) == Bootstrap(ServerConfig(), DataConfig(), JobConfig())


@pytest.mark.parametrize(
    "left,right",
    [("90s", "1m30s"), ("1000ms", "1s"), ("60m", "1h"), ("0.5s", "500ms")],
)
def test_equivalent_durations(left, right):
    assert _with_timeout(left) == pytest.approx(_with_timeout(right))


def test_zero_duration():
    assert _with_timeout("0") == 0.0


def test_negative_duration_mirrors_positive():
    assert _with_timeout("-2s") == -_with_timeout("2s")


@pytest.mark.parametrize("bad", ["", "1", "abc", "1x", "s", True])
def test_invalid_duration_rejected(bad):
    with pytest.raises(ValueError):
        _with_timeout(bad)


def test_server_must_be_mapping():
    with pytest.raises(ValueError):
        parse_config({"server": ["http"]})


def test_jobs_must_be_list():
    with pytest.raises(ValueError):
        parse_config({"job": {"jobs": "one"}})


def test_document_must_be_mapping():
    with pytest.raises(ValueError):
        parse_config(["server"])


def test_load_config_from_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "server:\n"
        "  grpc:\n"
        "    addr: 0.0.0.0:9000\n"
        "    timeout: 1s\n"
        "job:\n"
        "  jobs:\n"
        "    - name: one\n"
        "      schedule: '* * * * *'\n",
        encoding="utf-8",
    )
    conf = load_config(path)
    assert conf.server.grpc == Transport("", "0.0.0.0:9000", 1.0)
    assert [job.name for job in conf.job.jobs] == ["one"]


def test_load_empty_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == Bootstrap()


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")