"""CPU time and load average collectors."""

from __future__ import annotations

import psutil

from .base import BaseCollector
from .snapshot import CpuTimes, LoadAvg

# Guest time is already accounted in user/nice on Linux.
_EXCLUDED_FROM_TOTAL = ("guest", "guest_nice")


def cpu_times_to_busy_total(times: object) -> CpuTimes:
    """Split a psutil ``scputimes`` tuple into busy and total seconds."""
    fields = times._asdict()  # type: ignore[attr-defined]
    total = sum(v for k, v in fields.items() if k not in _EXCLUDED_FROM_TOTAL)
    busy = total - fields.get("idle", 0.0) - fields.get("iowait", 0.0)
    return CpuTimes(busy=float(busy), total=float(total))


class CpuCollector(BaseCollector):
    """Collects per-core busy and total CPU time."""

    @property
    def name(self) -> str:
        return "cpus"

    def collect(self) -> tuple[CpuTimes, ...]:
        return tuple(cpu_times_to_busy_total(t) for t in psutil.cpu_times(percpu=True))


class LoadCollector(BaseCollector):
    """Collects the raw 1, 5 and 15 minute load averages."""

    @property
    def name(self) -> str:
        return "load_avg"

    def collect(self) -> LoadAvg:
        load1, load5, load15 = psutil.getloadavg()
        return LoadAvg(one=load1, five=load5, fifteen=load15)
