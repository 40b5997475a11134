"""Disk I/O and partition usage collectors."""

from __future__ import annotations

import logging

import psutil

from .base import BaseCollector
from .snapshot import DiskIoCounters

logger = logging.getLogger(__name__)


class DiskIoCollector(BaseCollector):
    """Collects cumulative read/write counters per disk."""

    @property
    def name(self) -> str:
        return "disks_io"

    def collect(self) -> dict[str, DiskIoCounters]:
        # psutil returns None on hosts without any disk
        counters = psutil.disk_io_counters(perdisk=True) or {}
        return {
            disk: DiskIoCounters(
                read_bytes=int(dio.read_bytes),
                write_bytes=int(dio.write_bytes),
                read_count=int(dio.read_count),
                write_count=int(dio.write_count),
            )
            for disk, dio in counters.items()
        }


class DiskUsageCollector(BaseCollector):
    """Collects the used-capacity percentage of each physical partition."""

    @property
    def name(self) -> str:
        return "disks_usage"

    def collect(self) -> dict[str, float]:
        result: dict[str, float] = {}
        for part in psutil.disk_partitions(all=False):
            # an unreadable mountpoint fails the whole snapshot
            usage = psutil.disk_usage(part.mountpoint)
            logger.debug("Partition %s is %.1f%% used", part.mountpoint, usage.percent)
            result[part.mountpoint] = float(usage.percent)
        return result
