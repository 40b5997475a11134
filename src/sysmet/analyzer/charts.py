"""Chart groups built from a store, and the dashboard's reloading cache."""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import SysmetError
from ..store.database import MetricsStore
from ..store.lock import LOCK_TIMEOUT
from . import series

if TYPE_CHECKING:
    from ..config import SysmetConfig

logger = logging.getLogger(__name__)

ACTUALIZATION_INTERVAL = 120.0

CPU_USAGE_TITLE = "CPU Usage"
RAM_USAGE_TITLE = "RAM Usage"
LOAD_AVERAGE_TITLE = "Load Average"
NETWORK_TITLE = "Network"
DISKS_SPEED_TITLE = "Disks Speed Usage"
DISKS_MEMORY_TITLE = "Disks Memory Usage"


@dataclass
class SeriesLine:
    """One plotted line: ``points`` are ``(value, unix seconds)`` pairs."""

    label: str | None
    color: str
    points: list[tuple[float, int]] = field(default_factory=list)


@dataclass
class ChartGroup:
    """Lines sharing one chart and one unit."""

    name: str
    unit: str
    lines: list[SeriesLine] = field(default_factory=list)

    @property
    def max_value(self) -> float:
        """Largest value across every line, floored at 0 for axis scaling."""
        return max(0.0, max((value for line in self.lines for value, _ in line.points), default=0.0))


def _split(pairs, width: int) -> list[list[tuple[float, int]]]:
    columns: list[list[tuple[float, int]]] = [[] for _ in range(width)]
    for values, ts in pairs:
        seconds = int(ts.timestamp())
        for idx, value in enumerate(values):
            columns[idx].append((value, seconds))
    return columns


def derive_series(store: MetricsStore) -> list[ChartGroup]:
    """Turn the store's snapshots into the dashboard's chart groups."""
    snaps = store.snapshots

    cpu = [(value, int(ts.timestamp())) for value, ts in series.cpu_usage(snaps)]
    ram, swap = _split(series.ram_usage(snaps), 2)
    one, five, fifteen = _split(series.load_usage(snaps), 3)
    recv, sent = _split(series.network_usage(snaps), 2)
    read, write = _split(series.disk_io_usage(snaps), 2)
    disk_size = [(value, int(ts.timestamp())) for value, ts in series.disk_size_usage(snaps)]

    return [
        ChartGroup(CPU_USAGE_TITLE, "%", [SeriesLine(None, "#e00", cpu)]),
        ChartGroup(RAM_USAGE_TITLE, "%", [
            SeriesLine("RAM", "#0e0", ram),
            SeriesLine("Swap", "#e0e", swap),
        ]),
        ChartGroup(LOAD_AVERAGE_TITLE, "%", [
            SeriesLine("1 minutes", "#a0a", one),
            SeriesLine("5 minutes", "#0a0", five),
            SeriesLine("15 minutes", "#00e", fifteen),
        ]),
        ChartGroup(NETWORK_TITLE, "MiB", [
            SeriesLine("Received", "#faa", recv),
            SeriesLine("Sent", "#aaf", sent),
        ]),
        ChartGroup(DISKS_SPEED_TITLE, "KiB", [
            SeriesLine("Read", "#afa", read),
            SeriesLine("Write", "#faf", write),
        ]),
        ChartGroup(DISKS_MEMORY_TITLE, "%", [SeriesLine("Usage", "#a4f", disk_size)]),
    ]


def save_series(groups: list[ChartGroup], path: str | Path) -> None:
    """Write chart groups to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = [{**asdict(group), "max_value": group.max_value} for group in groups]
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2)


def print_series(groups: list[ChartGroup]) -> None:
    """Pretty-print the latest value and maximum of every line using Rich."""
    from rich.console import Console
    from rich.table import Table

    table = Table(title="sysmet series", show_lines=True)
    table.add_column("Chart", style="magenta", width=20)
    table.add_column("Line", style="green", width=12)
    table.add_column("Points", justify="right", width=8)
    table.add_column("Latest", justify="right", width=14)
    table.add_column("Max", justify="right", width=14)

    for group in groups:
        for line in group.lines:
            latest = f"{line.points[-1][0]:.2f} {group.unit}" if line.points else "-"
            peak = max((value for value, _ in line.points), default=None)
            table.add_row(
                group.name,
                line.label or "",
                str(len(line.points)),
                latest,
                f"{peak:.2f} {group.unit}" if peak is not None else "-",
            )

    Console().print(table)


@dataclass
class ChartsData:
    last_updated: float
    groups: list[ChartGroup] = field(default_factory=list)


class ChartCache:
    """Holds the dashboard's chart groups and reloads them in the background.

    Readers only ever see a fully built :class:`ChartsData`; the reload thread
    swaps the reference under a lock. A failed reload is logged and the
    previous data is kept.
    """

    def __init__(
        self,
        path: str | Path,
        interval: float = ACTUALIZATION_INTERVAL,
        lock_timeout: float = LOCK_TIMEOUT,
    ) -> None:
        self._path = Path(path)
        self._interval = interval
        self._lock_timeout = lock_timeout
        self._lock = threading.Lock()
        self._data = ChartsData(last_updated=time.time())
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    @classmethod
    def from_config(cls, cfg: SysmetConfig) -> ChartCache:
        """Cache over the configured database, reloading at the dashboard interval."""
        return cls(
            cfg.store.database,
            interval=cfg.dashboard.refresh_interval_seconds,
            lock_timeout=cfg.store.lock_timeout_seconds,
        )

    @property
    def interval(self) -> float:
        return self._interval

    def snapshot(self) -> ChartsData:
        with self._lock:
            return self._data

    def refresh(self) -> bool:
        """Reload the store once. Returns False when the load failed."""
        try:
            store = MetricsStore.from_file(self._path, timeout=self._lock_timeout)
        except SysmetError as exc:
            logger.warning("Keeping previous charts, reload of %s failed: %s", self._path, exc)
            return False
        data = ChartsData(last_updated=time.time(), groups=derive_series(store))
        with self._lock:
            self._data = data
        logger.debug("Reloaded %d snapshots from %s", len(store.snapshots), self._path)
        return True

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.refresh()
            self._stop_event.wait(self._interval)

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        logger.info("ChartCache started (interval=%.1fs)", self._interval)

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        logger.info("ChartCache stopped")
