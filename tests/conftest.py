"""Shared fixtures: hand-built snapshots with known counter values."""

from datetime import datetime, timedelta, timezone

import pytest

from sysmet.collector.snapshot import (
    CpuTimes,
    DiskIoCounters,
    LoadAvg,
    MemoryReading,
    NetworkCounters,
    Snapshot,
    SwapReading,
)

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def build_snapshot(
    time=T0,
    cpus=((1.0, 4.0), (1.0, 4.0)),
    ram=40.0,
    swap=10.0,
    load=(1.0, 0.5, 0.25),
    networks=None,
    disks_io=None,
    disks_usage=None,
    temperatures=None,
):
    return Snapshot(
        cpus=tuple(CpuTimes(busy=b, total=t) for b, t in cpus),
        memory=MemoryReading(total=8 * 1024**3, used=3 * 1024**3, available=5 * 1024**3, percent=ram),
        swap=SwapReading(total=2 * 1024**3, used=1024**2, free=2 * 1024**3 - 1024**2, percent=swap),
        load_avg=LoadAvg(*load),
        time=time,
        networks=networks if networks is not None else {
            "eth0": NetworkCounters(bytes_sent=2048, bytes_recv=4096, packets_sent=2, packets_recv=4),
        },
        disks_io=disks_io if disks_io is not None else {
            "sda": DiskIoCounters(read_bytes=10240, write_bytes=20480, read_count=3, write_count=5),
        },
        disks_usage=disks_usage if disks_usage is not None else {"/": 42.5},
        temperatures=temperatures if temperatures is not None else {"coretemp/Package id 0": 51.0},
    )


@pytest.fixture
def make_snapshot():
    """Factory building a snapshot; keyword arguments override the defaults."""
    return build_snapshot


@pytest.fixture
def hourly_snapshots():
    """Three snapshots one hour apart starting at T0."""
    return [build_snapshot(time=T0 + timedelta(hours=h)) for h in range(3)]


class FakeCollector:
    """Stands in for SnapshotCollector, returning prepared snapshots in order."""

    def __init__(self, snapshots):
        self._snapshots = list(snapshots)
        self.calls = 0

    def collect(self):
        self.calls += 1
        return self._snapshots.pop(0)


@pytest.fixture
def fake_collector_cls():
    return FakeCollector
