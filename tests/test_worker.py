from datetime import datetime

import pytest

from svctemplate.config import JobConfig, JobEntry
from svctemplate.worker import CronSchedule, CronWorker, new_cron_worker


def test_step_matches():
    sched = CronSchedule.parse("*/15 * * * *")
    assert sched.matches(datetime(2024, 1, 1, 10, 30))
    assert not sched.matches(datetime(2024, 1, 1, 10, 31))


def test_next_after():
    sched = CronSchedule.parse("*/15 * * * *")
    assert sched.next_after(datetime(2024, 1, 1, 10, 7, 12)) == datetime(2024, 1, 1, 10, 15)


def test_next_after_is_strictly_later_and_matches():
    sched = CronSchedule.parse("5 3 * * mon")
    start = datetime(2024, 5, 5, 12, 0)
    nxt = sched.next_after(start)
    assert nxt > start
    assert sched.matches(nxt)
    assert sched.next_after(nxt) > nxt


def test_hourly_descriptor():
    assert CronSchedule.parse("@hourly") == CronSchedule.parse("0 * * * *")


def test_dom_or_dow():
    sched = CronSchedule.parse("0 0 1 * 0")
    # 2024-01-07 is a Sunday, not the 1st
    assert sched.matches(datetime(2024, 1, 7, 0, 0))
    assert sched.matches(datetime(2024, 1, 1, 0, 0))
    assert not sched.matches(datetime(2024, 1, 2, 0, 0))


@pytest.mark.parametrize("spec", ["* * * *", "61 * * * *", "@never", "*/0 * * * *", "x * * * *"])
def test_invalid(spec):
    with pytest.raises(ValueError):
        CronSchedule.parse(spec)


class _Jobs:
    def __init__(self):
        self.calls = 0

    def work(self):
        self.calls += 1

    def init(self):
        return {"one": self.work}


def test_new_cron_worker_skips_unknown():
    config = JobConfig(jobs=(JobEntry("one", "* * * * *"), JobEntry("missing", "* * * * *")))
    worker = new_cron_worker(config, _Jobs())
    assert [entry.name for entry in worker.entries] == ["one"]


def test_start_stop():
    worker = CronWorker(JobConfig())
    worker.add_func("one", "@daily", lambda: None)
    worker.start()
    worker.stop()
    assert worker._thread is None


def test_logs(caplog):
    caplog.set_level("INFO")
    worker = CronWorker(None)
    worker.run_srv("job1")
    worker.heart_beat()
    assert "run job{job1}" in caplog.text
    assert "alive..." in caplog.text