"""Configuration loading and validation for sysmet."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .analyzer.thresholds import Thresholds


@dataclass
class StoreConfig:
    """Data file and lock settings."""

    database: str = "./sysmet.db"
    lock_timeout_seconds: float = 5.0
    lock_poll_interval_seconds: float = 0.1


@dataclass
class UpdateConfig:
    """Settings of the snapshot update run."""

    ignored_networks: list[str] = field(default_factory=list)
    cleanup_older_days: int | None = None
    times: int = 1


@dataclass
class DashboardConfig:
    """Settings of the dashboard's chart cache."""

    refresh_interval_seconds: float = 120.0


@dataclass
class ThresholdConfig:
    """Alerting limits, in percent. ``null`` disables a check."""

    cpu: float | None = 95
    ram: float | None = 90
    swap: float | None = 65
    memory: float | None = 75
    disk: float | None = 85
    avg_load: float | None = 85
    disk_path: str = "/"
    cooldown_seconds: float = 3600.0
    last_sent_path: str = "/tmp/sysmet-notify-last-mail.txt"

    def to_thresholds(self) -> Thresholds:
        return Thresholds(
            cpu=self.cpu,
            ram=self.ram,
            swap=self.swap,
            memory=self.memory,
            disk=self.disk,
            avg_load=self.avg_load,
        )


@dataclass
class SysmetConfig:
    """Top-level sysmet configuration."""

    log_level: str = "WARNING"
    store: StoreConfig = field(default_factory=StoreConfig)
    update: UpdateConfig = field(default_factory=UpdateConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)


def _split_names(value: str) -> list[str]:
    return [name.strip() for name in value.split(",") if name.strip()]


def _optional_float(value: str) -> float | None:
    return None if value.lower() in ("", "none", "off") else float(value)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using SYSMET_ prefix."""
    env_map = {
        "SYSMET_LOG_LEVEL": (("log_level",), str),
        "SYSMET_DATABASE": (("store", "database"), str),
        "SYSMET_LOCK_TIMEOUT": (("store", "lock_timeout_seconds"), float),
        "SYSMET_IGNORED_NETWORKS": (("update", "ignored_networks"), _split_names),
        "SYSMET_CLEANUP_OLDER": (("update", "cleanup_older_days"), int),
        "SYSMET_REFRESH_INTERVAL": (("dashboard", "refresh_interval_seconds"), float),
        "SYSMET_CPU_THRESHOLD": (("thresholds", "cpu"), _optional_float),
        "SYSMET_RAM_THRESHOLD": (("thresholds", "ram"), _optional_float),
        "SYSMET_SWAP_THRESHOLD": (("thresholds", "swap"), _optional_float),
        "SYSMET_MEMORY_THRESHOLD": (("thresholds", "memory"), _optional_float),
        "SYSMET_DISK_THRESHOLD": (("thresholds", "disk"), _optional_float),
        "SYSMET_AVG_LOAD_THRESHOLD": (("thresholds", "avg_load"), _optional_float),
        "SYSMET_COOLDOWN": (("thresholds", "cooldown_seconds"), float),
        "SYSMET_LAST_SENT_PATH": (("thresholds", "last_sent_path"), str),
    }
    for env_key, (path, coerce) in env_map.items():
        value = os.environ.get(env_key)
        if value is not None:
            obj = data
            for part in path[:-1]:
                obj = obj.setdefault(part, {})
            obj[path[-1]] = coerce(value)
    return data


def _section(cls: type, data: Any) -> Any:
    if not isinstance(data, dict):
        data = {}
    return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def _dict_to_config(data: dict[str, Any]) -> SysmetConfig:
    """Convert a raw dictionary to a SysmetConfig dataclass."""
    return SysmetConfig(
        log_level=str(data.get("log_level", "WARNING")),
        store=_section(StoreConfig, data.get("store")),
        update=_section(UpdateConfig, data.get("update")),
        dashboard=_section(DashboardConfig, data.get("dashboard")),
        thresholds=_section(ThresholdConfig, data.get("thresholds")),
    )


def load_config(path: str | Path | None = None) -> SysmetConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``sysmet.yaml`` in the current directory if *path* is None.
    """
    data: dict[str, Any] = {}
    if path is None:
        path = Path("sysmet.yaml")
    else:
        path = Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
            if isinstance(loaded, dict):
                data = loaded

    data = _apply_env_overrides(data)
    return _dict_to_config(data)
