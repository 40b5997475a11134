"""Single-point usage percentages.

The pure helpers (:func:`busy_percent`, :func:`load_to_percent`) are shared
with the derivation layer; the ``*_usage_percent`` functions read the host
directly and are what the threshold checks use.
"""

from __future__ import annotations

import logging
import time

import psutil

from ..errors import CollectionError

logger = logging.getLogger(__name__)

# psutil recommends at least 0.1s between two cpu_percent samples.
CPU_USAGE_INTERVAL = 0.1
CPU_USAGE_MAX_ATTEMPTS = 10


def busy_percent(busy: float, total: float) -> float:
    """Busy time as a percentage of total time; 0.0 when no time elapsed."""
    if total == 0:
        return 0.0
    return busy / total * 100.0


def load_to_percent(load: float, cpu_count: int) -> float:
    """Run-queue length as a percentage of total core capacity."""
    if cpu_count <= 0:
        return 0.0
    return load / cpu_count * 100.0


def cpu_usage_percent(interval: float = CPU_USAGE_INTERVAL) -> float:
    """Sample system-wide CPU usage over *interval* seconds.

    A reading of exactly 0.0 usually means the interval was too short for
    the kernel counters to move, so the sample is retried a bounded number of
    times.
    """
    try:
        psutil.cpu_percent(interval=None)
        result = 0.0
        for _ in range(CPU_USAGE_MAX_ATTEMPTS):
            time.sleep(interval)
            result = psutil.cpu_percent(interval=None)
            if result != 0.0:
                break
            logger.debug("CPU usage read 0%%, sampling again")
    except (psutil.Error, OSError) as exc:
        raise CollectionError("cpu", exc) from exc
    logger.debug("cpu_usage_percent=%s", result)
    return float(result)


def memory_usage_percent() -> tuple[float, float]:
    """RAM and swap usage percentages."""
    try:
        ram = psutil.virtual_memory().percent
        swap = psutil.swap_memory().percent
    except (psutil.Error, OSError) as exc:
        raise CollectionError("memory", exc) from exc
    logger.debug("ram_usage_percent=%s swap_usage_percent=%s", ram, swap)
    return float(ram), float(swap)


def disk_usage_percent(path: str = "/") -> float:
    """Used capacity of the partition holding *path*."""
    try:
        result = psutil.disk_usage(path).percent
    except (psutil.Error, OSError) as exc:
        raise CollectionError("disk", exc) from exc
    logger.debug("disk_usage_percent=%s", result)
    return float(result)


def load_avg_percent() -> tuple[float, float, float]:
    """1, 5 and 15 minute load averages as a percentage of core capacity."""
    try:
        cpu_count = psutil.cpu_count() or 1
        one, five, fifteen = psutil.getloadavg()
    except (psutil.Error, OSError) as exc:
        raise CollectionError("load_avg", exc) from exc
    result = (
        load_to_percent(one, cpu_count),
        load_to_percent(five, cpu_count),
        load_to_percent(fifteen, cpu_count),
    )
    logger.debug("load_avg_percent=%s (cpu_count=%d)", result, cpu_count)
    return result
