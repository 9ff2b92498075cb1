"""Cron schedules and the worker that runs the configured jobs."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from svctemplate.config import JobConfig

_log = logging.getLogger(__name__)

_MONTH_NAMES = {
    name: number
    for number, name in enumerate(
        ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"],
        start=1,
    )
}
_DOW_NAMES = {
    name: number
    for number, name in enumerate(["sun", "mon", "tue", "wed", "thu", "fri", "sat"])
}
_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}
_SEARCH_DAYS = 366 * 5


def _value(text: str, names: dict[str, int]) -> int:
    lowered = text.lower()
    if lowered in names:
        return names[lowered]
    if not text.isdigit():
        raise ValueError(f"failed to parse int from {text!r}")
    return int(text)


def _parse_field(
    text: str, low: int, high: int, names: dict[str, int]
) -> tuple[frozenset[int], bool]:
    values: set[int] = set()
    star = False
    for part in text.split(","):
        range_part, slash, step_text = part.partition("/")
        step = 1
        if slash:
            if not step_text.isdigit() or int(step_text) == 0:
                raise ValueError(f"invalid step in {part!r}")
            step = int(step_text)
        if range_part in ("*", "?"):
            start, end = low, high
            if not slash:
                star = True
        else:
            first, dash, last = range_part.partition("-")
            start = _value(first, names)
            if dash:
                end = _value(last, names)
            else:
                end = high if slash else start
        if start < low or end > high or start > end:
            raise ValueError(f"value out of range in {part!r} ({low}-{high})")
        values.update(range(start, end + 1, step))
    return frozenset(values), star


@dataclass(frozen=True)
class CronSchedule:
    """A five-field cron schedule: minute, hour, day of month, month, day of week."""

    minutes: frozenset[int]
    hours: frozenset[int]
    days: frozenset[int]
    months: frozenset[int]
    weekdays: frozenset[int]
    dom_star: bool = False
    dow_star: bool = False

    @classmethod
    def parse(cls, spec: str) -> CronSchedule:
        """Parse a cron expression or one of the @ descriptors."""
        text = spec.strip()
        if text.startswith("@"):
            if text.lower() not in _DESCRIPTORS:
                raise ValueError(f"unrecognized descriptor: {spec!r}")
            text = _DESCRIPTORS[text.lower()]
        fields = text.split()
        if len(fields) != 5:
            raise ValueError(f"expected exactly 5 fields, found {len(fields)}: {spec!r}")
        minutes, _ = _parse_field(fields[0], 0, 59, {})
        hours, _ = _parse_field(fields[1], 0, 23, {})
        days, dom_star = _parse_field(fields[2], 1, 31, {})
        months, _ = _parse_field(fields[3], 1, 12, _MONTH_NAMES)
        weekdays, dow_star = _parse_field(fields[4], 0, 6, _DOW_NAMES)
        return cls(minutes, hours, days, months, weekdays, dom_star, dow_star)

    def _day_matches(self, moment: datetime) -> bool:
        if moment.month not in self.months:
            return False
        dom = moment.day in self.days
        dow = (moment.weekday() + 1) % 7 in self.weekdays
        if self.dom_star or self.dow_star:
            return dom and dow
        return dom or dow

    def matches(self, moment: datetime) -> bool:
        """Return whether the schedule fires in the minute of ``moment``."""
        return (
            moment.minute in self.minutes
            and moment.hour in self.hours
            and self._day_matches(moment)
        )

    def next_after(self, moment: datetime) -> datetime:
        """Return the first firing time strictly after ``moment``."""
        start = moment.replace(second=0, microsecond=0) + timedelta(minutes=1)
        day = start.replace(hour=0, minute=0)
        hours = sorted(self.hours)
        minutes = sorted(self.minutes)
        for _ in range(_SEARCH_DAYS):
            if self._day_matches(day):
                for hour in hours:
                    for minute in minutes:
                        candidate = day.replace(hour=hour, minute=minute)
                        if candidate >= start:
                            return candidate
            day += timedelta(days=1)
        raise ValueError("schedule never fires")


@dataclass(frozen=True)
class _Entry:
    name: str
    schedule: CronSchedule
    func: Callable[[], Any]


class CronWorker:
    """Runs jobs on their cron schedules in a background thread."""

    def __init__(self, config: JobConfig | None, entries: Iterable[_Entry] = ()) -> None:
        self.config = config
        self.entries = list(entries)
        self.last_heartbeat: datetime | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def add_func(self, name: str, spec: str, func: Callable[[], Any]) -> None:
        """Schedule ``func`` under ``spec``."""
        self.entries.append(_Entry(name, CronSchedule.parse(spec), func))

    def _loop(self) -> None:
        pending = {entry: entry.schedule.next_after(datetime.now()) for entry in self.entries}
        while not self._stop.is_set():
            if not pending:
                self._stop.wait()
                return
            now = datetime.now()
            wait = (min(pending.values()) - now).total_seconds()
            if wait > 0:
                self._stop.wait(min(wait, 60.0))
                continue
            for entry, due in list(pending.items()):
                if due <= now:
                    threading.Thread(target=entry.func, daemon=True).start()
                    pending[entry] = entry.schedule.next_after(now)

    def start(self) -> None:
        """Start the scheduler."""
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="cron-worker", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the scheduler and wait for it to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def run_srv(self, name: str) -> None:
        """Log that the named job runs."""
        _log.info("run job{%s}", name)

    def heart_beat(self) -> datetime:
        """Record and return the time of this heartbeat, logging that the worker is alive."""
        self.last_heartbeat = datetime.now()
        _log.info("alive...")
        return self.last_heartbeat


def new_cron_worker(config: JobConfig, job_service: Any) -> CronWorker:
    """Create a worker with every configured job that the job service knows."""
    known = job_service.init()
    worker = CronWorker(config)
    for job in config.jobs:
        func = known.get(job.name)
        if func is None:
            _log.warning("can not find job: %s", job.name)
            continue
        try:
            worker.add_func(job.name, job.schedule, func)
        except ValueError as exc:
            _log.warning("invalid schedule for job %s: %s", job.name, exc)
    _log.info("加载job数量: %d", len(config.jobs))
    return worker