"""Collector manager that assembles a full snapshot."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

import psutil

from ..errors import CollectionError
from .base import BaseCollector
from .cpu import CpuCollector, LoadCollector
from .disk import DiskIoCollector, DiskUsageCollector
from .memory import MemoryCollector, SwapCollector
from .network import NetworkCollector
from .sensors import TemperatureCollector
from .snapshot import Snapshot

logger = logging.getLogger(__name__)


class SnapshotCollector:
    """Runs every collector once and builds a :class:`Snapshot`.

    Collection is all-or-nothing: the first collector that fails aborts the
    whole reading with :class:`CollectionError`, so partial snapshots never
    reach the store.
    """

    def __init__(self, ignored_networks: Iterable[str] = ()) -> None:
        self._collectors: list[BaseCollector] = [
            CpuCollector(),
            MemoryCollector(),
            SwapCollector(),
            NetworkCollector(ignored=ignored_networks),
            DiskIoCollector(),
            DiskUsageCollector(),
            TemperatureCollector(),
            LoadCollector(),
        ]

    def collect(self) -> Snapshot:
        fields = {}
        for collector in self._collectors:
            try:
                fields[collector.name] = collector.collect()
            except (psutil.Error, OSError, NotImplementedError) as exc:
                logger.error("Collector %s failed: %s", collector.name, exc)
                raise CollectionError(collector.name, exc) from exc
        snapshot = Snapshot(time=datetime.now(timezone.utc), **fields)
        logger.debug("Snapshot taken at %s with %d cpus", snapshot.time, snapshot.cpu_count())
        return snapshot


def collect_snapshot(ignored_networks: Iterable[str] = ()) -> Snapshot:
    """Take one snapshot of the host, leaving out *ignored_networks*."""
    return SnapshotCollector(ignored_networks).collect()
