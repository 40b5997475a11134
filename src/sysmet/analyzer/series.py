"""Per-snapshot derived series.

Every function takes the snapshot sequence (earliest first) and returns one
``(value, time)`` pair per snapshot, in the same order. They are pure: no
disk access, no locking.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from ..collector.percent import busy_percent, load_to_percent
from ..collector.snapshot import Snapshot

logger = logging.getLogger(__name__)

KIB = 1024
MIB = 1024 * 1024


def cpu_usage(snapshots: Sequence[Snapshot]) -> list[tuple[float, datetime]]:
    """Busy time over total time, summed across cores, in percent."""
    result = [(busy_percent(*snap.cpu_time()), snap.time) for snap in snapshots]
    logger.debug("cpu_usage_percentages=%s", result)
    return result


def ram_usage(snapshots: Sequence[Snapshot]) -> list[tuple[tuple[float, float], datetime]]:
    """RAM and swap usage percentages as stored."""
    return [(snap.ram_usage(), snap.time) for snap in snapshots]


def load_usage(
    snapshots: Sequence[Snapshot],
) -> list[tuple[tuple[float, float, float], datetime]]:
    """1, 5 and 15 minute load as a percentage of the snapshot's core count."""
    result = []
    for snap in snapshots:
        cores = snap.cpu_count()
        one, five, fifteen = snap.load()
        result.append((
            (load_to_percent(one, cores), load_to_percent(five, cores), load_to_percent(fifteen, cores)),
            snap.time,
        ))
    logger.debug("load_avg=%s", result)
    return result


def network_usage(snapshots: Sequence[Snapshot]) -> list[tuple[tuple[float, float], datetime]]:
    """Bytes received and sent across interfaces, in MiB."""
    result = []
    for snap in snapshots:
        recv, sent = snap.network_usage()
        result.append(((recv / MIB, sent / MIB), snap.time))
    return result


def disk_io_usage(snapshots: Sequence[Snapshot]) -> list[tuple[tuple[float, float], datetime]]:
    """Bytes read and written across disks, in KiB."""
    result = []
    for snap in snapshots:
        read, written = snap.disk_io_usage()
        result.append(((read / KIB, written / KIB), snap.time))
    return result


def disk_size_usage(snapshots: Sequence[Snapshot]) -> list[tuple[float, datetime]]:
    """Sum of the used-capacity percentages of every partition.

    Summing percentages is not a blended utilisation: two half-full
    partitions report 100. Weighting by partition size would need the
    partition totals, which snapshots do not record.
    """
    return [
        (sum(usage for _mountpoint, usage in snap.disks_size_usage()), snap.time)
        for snap in snapshots
    ]
