"""Service configuration read from a YAML file."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from os import PathLike
from typing import Any

import yaml

_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def _parse_duration(value: Any) -> float | None:
    """Turn a duration such as "1s", "500ms" or "1m30s" into seconds."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        raise ValueError(f"invalid duration: {value!r}")
    text = value.strip()
    sign = 1.0
    if text and text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if text == "0":
        return 0.0
    if not text:
        raise ValueError(f"invalid duration: {value!r}")
    total = 0.0
    pos = 0
    while pos < len(text):
        match = _PART.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration: {value!r}")
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()
    return sign * total


@dataclass(frozen=True)
class Transport:
    """Listening settings of one server."""

    network: str = ""
    addr: str = ""
    timeout: float | None = None


@dataclass(frozen=True)
class ServerConfig:
    """Settings of the HTTP, gRPC and routed HTTP servers."""

    http: Transport = field(default_factory=Transport)
    grpc: Transport = field(default_factory=Transport)
    gin: Transport = field(default_factory=Transport)


@dataclass(frozen=True)
class DataConfig:
    """Settings of the data layer, kept as given."""

    settings: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class JobEntry:
    """A named job and its cron schedule."""

    name: str = ""
    schedule: str = ""


@dataclass(frozen=True)
class JobConfig:
    """The scheduled jobs."""

    jobs: tuple[JobEntry, ...] = ()


@dataclass(frozen=True)
class Bootstrap:
    """The whole configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    data: DataConfig = field(default_factory=DataConfig)
    job: JobConfig = field(default_factory=JobConfig)


def _section(mapping: Mapping[str, Any], key: str, where: str) -> Mapping[str, Any]:
    value = mapping.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{where}{key} must be a mapping")
    return value


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _transport(server: Mapping[str, Any], key: str) -> Transport:
    section = _section(server, key, "server.")
    return Transport(
        network=_text(section.get("network")),
        addr=_text(section.get("addr")),
        timeout=_parse_duration(section.get("timeout")),
    )


def _jobs(job: Mapping[str, Any]) -> tuple[JobEntry, ...]:
    raw = job.get("jobs")
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValueError("job.jobs must be a list")
    entries = []
    for item in raw:
        if not isinstance(item, Mapping):
            raise ValueError("each entry of job.jobs must be a mapping")
        entries.append(
            JobEntry(name=_text(item.get("name")), schedule=_text(item.get("schedule")))
        )
    return tuple(entries)


def parse_config(mapping: Mapping[str, Any] | None) -> Bootstrap:
    """Build the configuration from an already parsed document."""
    if mapping is None:
        mapping = {}
    if not isinstance(mapping, Mapping):
        raise ValueError("configuration must be a mapping")
    server = _section(mapping, "server", "")
    return Bootstrap(
        server=ServerConfig(
            http=_transport(server, "http"),
            grpc=_transport(server, "grpc"),
            gin=_transport(server, "gin"),
        ),
        data=DataConfig(settings=dict(_section(mapping, "data", ""))),
        job=JobConfig(jobs=_jobs(_section(mapping, "job", ""))),
    )


def load_config(path: str | PathLike[str]) -> Bootstrap:
    """Read and parse the YAML configuration file at ``path``."""
    with open(path, encoding="utf-8") as handle:
        document = yaml.safe_load(handle)
    return parse_config(document)