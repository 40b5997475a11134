"""Threshold checks on a fresh single-point reading.

Alerting never reads the store: it takes one :class:`PercentSnapshot` of the
host, compares it to the configured limits, and renders a plain-text report.
Delivering the report is left to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

from ..collector.percent import cpu_usage_percent, disk_usage_percent, load_avg_percent, memory_usage_percent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PercentSnapshot:
    """Usage percentages of the host at one instant."""

    cpu: float
    ram: float
    swap: float
    memory: float
    disk: float
    avg_load: float


@dataclass
class Thresholds:
    """Maximum usage, in percent, before a check is reported. ``None`` disables it."""

    cpu: float | None = 95
    ram: float | None = 90
    swap: float | None = 65
    memory: float | None = 75
    disk: float | None = 85
    avg_load: float | None = 85


@dataclass(frozen=True)
class CrossedThreshold:
    name: str
    threshold: float
    observed: float


# (attribute, name used in the report)
_CHECKS = (
    ("cpu", "CPU"),
    ("ram", "RAM"),
    ("swap", "Swap"),
    ("memory", "RAM & Swap"),
    ("disk", "Disk"),
    ("avg_load", "Average Load"),
)


def take_percent_snapshot(disk_path: str = "/") -> PercentSnapshot:
    """Read the host once. The 15 minute load average is the one checked."""
    ram, swap = memory_usage_percent()
    return PercentSnapshot(
        cpu=cpu_usage_percent(),
        ram=ram,
        swap=swap,
        # plain mean of the two percentages, not weighted by size
        memory=(ram + swap) / 2.0,
        disk=disk_usage_percent(disk_path),
        avg_load=load_avg_percent()[2],
    )


def is_threshold_crossed(threshold: float | None, observed: float) -> bool:
    return threshold is not None and observed > threshold


def evaluate(snapshot: PercentSnapshot, thresholds: Thresholds) -> list[CrossedThreshold]:
    """Return the checks whose observed value is strictly above the limit."""
    crossed = []
    for attr, name in _CHECKS:
        limit = getattr(thresholds, attr)
        observed = getattr(snapshot, attr)
        if is_threshold_crossed(limit, observed):
            logger.debug("%s threshold crossed: threshold=%s usage=%s", name, limit, observed)
            crossed.append(CrossedThreshold(name=name, threshold=float(limit), observed=observed))
    return crossed


def _round(value: float) -> Decimal:
    return round(Decimal(str(value)), 3).normalize()


def format_threshold_crossed_msg(crossed: CrossedThreshold) -> str:
    return (
        f"- {crossed.name} threshold crossed ({_round(crossed.threshold):f}%): "
        f"observed {_round(crossed.observed):f}%\n"
    )


def format_snapshot(snapshot: PercentSnapshot) -> str:
    body = "System state:\n"
    body += f"- CPU {_round(snapshot.cpu):f}%\n"
    body += f"- RAM {_round(snapshot.ram):f}%\n"
    body += f"- Swap {_round(snapshot.swap):f}%\n"
    body += f"- Disk {_round(snapshot.disk):f}%\n"
    body += f"- Average Load (on 15min) {_round(snapshot.avg_load):f}%\n"
    return body


def format_report(snapshot: PercentSnapshot, crossed: list[CrossedThreshold]) -> str:
    body = "Thresholds crossed:\n"
    for item in crossed:
        body += format_threshold_crossed_msg(item)
    body += "\n\n"
    body += format_snapshot(snapshot)
    return body


def is_after_cooldown(last_sent_path: str | Path, cooldown: timedelta, now: datetime) -> bool:
    """Whether enough time passed since the timestamp stored in *last_sent_path*.

    A missing, empty or unparseable file counts as "never sent".
    """
    path = Path(last_sent_path)
    try:
        content = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return True
    if not content:
        return True
    try:
        last_sent = datetime.fromisoformat(content.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring unparseable last-sent timestamp in %s: %r", path, content)
        return True
    if last_sent.tzinfo is None:
        last_sent = last_sent.replace(tzinfo=timezone.utc)
    return last_sent + cooldown < now


def record_sent(last_sent_path: str | Path, now: datetime) -> None:
    path = Path(last_sent_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(now.isoformat(), encoding="utf-8")
