"""Tests for the derivation layer and chart groups."""

import json
import tempfile
import time
from datetime import timedelta
from pathlib import Path

import pytest

from sysmet.analyzer import series
from sysmet.analyzer.charts import ChartCache, derive_series, save_series
from sysmet.collector.snapshot import DiskIoCounters, NetworkCounters
from sysmet.config import load_config
from sysmet.store.database import MetricsStore
from sysmet.store.lock import lock_path_for

from conftest import T0


def test_cpu_usage_busy_over_total(make_snapshot):
    snap = make_snapshot(cpus=((0.5, 2.0), (1.5, 6.0)))
    assert series.cpu_usage([snap]) == [(25.0, T0)]


def test_cpu_usage_without_elapsed_time(make_snapshot):
    snap = make_snapshot(cpus=((0.0, 0.0),))
    assert series.cpu_usage([snap]) == [(0.0, T0)]


def test_ram_usage_is_taken_as_stored(make_snapshot):
    snap = make_snapshot(ram=61.5, swap=3.25)
    assert series.ram_usage([snap]) == [((61.5, 3.25), T0)]


def test_load_normalized_by_core_count(make_snapshot):
    snap = make_snapshot(cpus=((1.0, 2.0),) * 4, load=(1.0, 2.0, 4.0))
    assert series.load_usage([snap]) == [((25.0, 50.0, 100.0), T0)]


def test_network_summed_in_mib(make_snapshot):
    snap = make_snapshot(networks={
        "eth0": NetworkCounters(bytes_sent=524288, bytes_recv=1048576),
        "wlan0": NetworkCounters(bytes_sent=524288, bytes_recv=2097152),
    })
    [((recv, sent), ts)] = series.network_usage([snap])
    assert recv == 3.0
    assert sent == 1.0
    assert ts == T0


def test_disk_io_summed_in_kib(make_snapshot):
    snap = make_snapshot(disks_io={
        "sda": DiskIoCounters(read_bytes=2048, write_bytes=4096),
        "nvme0n1": DiskIoCounters(read_bytes=1024, write_bytes=0),
    })
    assert series.disk_io_usage([snap]) == [((3.0, 4.0), T0)]


def test_disk_size_sums_partition_percentages(make_snapshot):
    snap = make_snapshot(disks_usage={"/": 50.0, "/home": 50.0, "/boot": 12.5})
    assert series.disk_size_usage([snap]) == [(112.5, T0)]


def test_series_keep_snapshot_order(make_snapshot):
    times = [T0 + timedelta(hours=2), T0, T0 + timedelta(hours=1)]
    snaps = [make_snapshot(time=t) for t in times]
    assert [ts for _, ts in series.cpu_usage(snaps)] == times
    assert [ts for _, ts in series.network_usage(snaps)] == times


def test_empty_sequence():
    assert series.cpu_usage([]) == []
    assert series.load_usage([]) == []


class TestDeriveSeries:
    def test_group_layout(self, hourly_snapshots):
        groups = derive_series(MetricsStore(snapshots=hourly_snapshots))
        assert [g.name for g in groups] == [
            "CPU Usage",
            "RAM Usage",
            "Load Average",
            "Network",
            "Disks Speed Usage",
            "Disks Memory Usage",
        ]
        assert [line.label for line in groups[2].lines] == ["1 minutes", "5 minutes", "15 minutes"]
        assert [line.color for line in groups[1].lines] == ["#0e0", "#e0e"]
        assert groups[3].unit == "MiB"
        assert groups[4].unit == "KiB"
        assert all(len(line.points) == 3 for g in groups for line in g.lines)

    def test_points_carry_unix_seconds(self, hourly_snapshots):
        groups = derive_series(MetricsStore(snapshots=hourly_snapshots))
        cpu_points = groups[0].lines[0].points
        assert [ts for _, ts in cpu_points] == [int(T0.timestamp()) + 3600 * h for h in range(3)]
        assert cpu_points[0][0] == pytest.approx(25.0)

    def test_max_value_spans_every_line(self, make_snapshot):
        store = MetricsStore(snapshots=[
            make_snapshot(ram=20.0, swap=70.0),
            make_snapshot(time=T0 + timedelta(hours=1), ram=55.0, swap=5.0),
        ])
        ram_group = derive_series(store)[1]
        assert ram_group.max_value == 70.0

    def test_empty_store(self):
        groups = derive_series(MetricsStore())
        assert len(groups) == 6
        assert all(g.max_value == 0.0 for g in groups)

    def test_save_series(self, hourly_snapshots):
        with tempfile.TemporaryDirectory() as tmpdir:
            out = Path(tmpdir) / "out" / "series.json"
            save_series(derive_series(MetricsStore(snapshots=hourly_snapshots)), out)
            data = json.loads(out.read_text())
            assert data[0]["name"] == "CPU Usage"
            assert data[0]["max_value"] == pytest.approx(25.0)
            assert len(data[1]["lines"]) == 2


class TestChartCache:
    def test_refresh_swaps_in_new_data(self, hourly_snapshots):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "metrics.db"
            MetricsStore(snapshots=hourly_snapshots[:1]).write_to_file(path)

            cache = ChartCache(path, interval=60)
            assert cache.snapshot().groups == []
            assert cache.refresh() is True
            assert len(cache.snapshot().groups[0].lines[0].points) == 1

            MetricsStore(snapshots=hourly_snapshots).write_to_file(path)
            cache.refresh()
            assert len(cache.snapshot().groups[0].lines[0].points) == 3

    def test_failed_reload_keeps_previous_data(self, hourly_snapshots):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "metrics.db"
            MetricsStore(snapshots=hourly_snapshots).write_to_file(path)
            cache = ChartCache(path)
            cache.refresh()
            before = cache.snapshot()

            path.write_bytes(b"\xff\xff")
            assert cache.refresh() is False
            assert cache.snapshot() is before
            assert not lock_path_for(path).exists()

    def test_from_config_uses_dashboard_interval(self, hourly_snapshots, monkeypatch):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "metrics.db"
            MetricsStore(snapshots=hourly_snapshots).write_to_file(path)
            monkeypatch.setenv("SYSMET_DATABASE", str(path))
            monkeypatch.setenv("SYSMET_REFRESH_INTERVAL", "15")

            cache = ChartCache.from_config(load_config(Path(tmpdir) / "missing.yaml"))
            assert cache.interval == 15.0
            assert cache.refresh() is True
            assert len(cache.snapshot().groups[0].lines[0].points) == 3

    def test_background_thread_loads_immediately(self, hourly_snapshots):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "metrics.db"
            MetricsStore(snapshots=hourly_snapshots).write_to_file(path)
            cache = ChartCache(path, interval=60)
            cache.start()
            try:
                for _ in range(50):
                    if cache.snapshot().groups:
                        break
                    time.sleep(0.05)
                assert len(cache.snapshot().groups) == 6
            finally:
                cache.stop()
