"""Immutable snapshot of every host counter at one instant."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

_MAPPING_FIELDS = ("networks", "disks_io", "disks_usage", "temperatures")


@dataclass(frozen=True)
class CpuTimes:
    """Cumulative busy and total time of one core, in seconds."""

    busy: float
    total: float


@dataclass(frozen=True)
class MemoryReading:
    """Virtual memory figures."""

    total: int
    used: int
    available: int
    percent: float


@dataclass(frozen=True)
class SwapReading:
    """Swap memory figures."""

    total: int
    used: int
    free: int
    percent: float


@dataclass(frozen=True)
class NetworkCounters:
    """Cumulative I/O counters of one network interface."""

    bytes_sent: int
    bytes_recv: int
    packets_sent: int = 0
    packets_recv: int = 0


@dataclass(frozen=True)
class DiskIoCounters:
    """Cumulative I/O counters of one disk."""

    read_bytes: int
    write_bytes: int
    read_count: int = 0
    write_count: int = 0


@dataclass(frozen=True)
class LoadAvg:
    """Run-queue length averaged over 1, 5 and 15 minutes."""

    one: float
    five: float
    fifteen: float


@dataclass(frozen=True)
class Snapshot:
    """One reading of all host counters.

    Derived values (usage percentages, byte sums) are computed on demand by
    the methods below; nothing derived is ever stored.
    """

    cpus: tuple[CpuTimes, ...]
    memory: MemoryReading
    swap: SwapReading
    load_avg: LoadAvg
    time: datetime
    networks: Mapping[str, NetworkCounters] = field(default_factory=dict)
    disks_io: Mapping[str, DiskIoCounters] = field(default_factory=dict)
    disks_usage: Mapping[str, float] = field(default_factory=dict)
    temperatures: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "cpus", tuple(self.cpus))
        for name in _MAPPING_FIELDS:
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def cpu_count(self) -> int:
        return len(self.cpus)

    def cpu_time(self) -> tuple[float, float]:
        """Busy and total time summed across every core."""
        busy = sum(cpu.busy for cpu in self.cpus)
        total = sum(cpu.total for cpu in self.cpus)
        logger.debug("active_time=%s total_time=%s", busy, total)
        return busy, total

    def ram_usage(self) -> tuple[float, float]:
        return self.memory.percent, self.swap.percent

    def load(self) -> tuple[float, float, float]:
        return self.load_avg.one, self.load_avg.five, self.load_avg.fifteen

    def network_usage(self) -> tuple[int, int]:
        """Bytes received and sent summed across interfaces."""
        recv = sum(net.bytes_recv for net in self.networks.values())
        sent = sum(net.bytes_sent for net in self.networks.values())
        return recv, sent

    def disk_io_usage(self) -> tuple[int, int]:
        """Bytes read and written summed across disks."""
        read = sum(disk.read_bytes for disk in self.disks_io.values())
        written = sum(disk.write_bytes for disk in self.disks_io.values())
        return read, written

    def disks_size_usage(self) -> list[tuple[str, float]]:
        return list(self.disks_usage.items())

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping used by the on-disk encoding."""
        return {
            "cpus": [[cpu.busy, cpu.total] for cpu in self.cpus],
            "memory": {
                "total": self.memory.total,
                "used": self.memory.used,
                "available": self.memory.available,
                "percent": self.memory.percent,
            },
            "swap": {
                "total": self.swap.total,
                "used": self.swap.used,
                "free": self.swap.free,
                "percent": self.swap.percent,
            },
            "networks": {
                name: {
                    "bytes_sent": net.bytes_sent,
                    "bytes_recv": net.bytes_recv,
                    "packets_sent": net.packets_sent,
                    "packets_recv": net.packets_recv,
                }
                for name, net in self.networks.items()
            },
            "disks_io": {
                name: {
                    "read_bytes": disk.read_bytes,
                    "write_bytes": disk.write_bytes,
                    "read_count": disk.read_count,
                    "write_count": disk.write_count,
                }
                for name, disk in self.disks_io.items()
            },
            "disks_usage": dict(self.disks_usage),
            "temperatures": dict(self.temperatures),
            "load_avg": [self.load_avg.one, self.load_avg.five, self.load_avg.fifteen],
            "time": self.time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        if not isinstance(data["time"], datetime):
            raise TypeError(f"snapshot time must be a datetime, got {type(data['time']).__name__}")
        return cls(
            cpus=tuple(CpuTimes(busy=float(busy), total=float(total)) for busy, total in data["cpus"]),
            memory=MemoryReading(**data["memory"]),
            swap=SwapReading(**data["swap"]),
            load_avg=LoadAvg(*(float(v) for v in data["load_avg"])),
            time=data["time"],
            networks={name: NetworkCounters(**net) for name, net in data["networks"].items()},
            disks_io={name: DiskIoCounters(**disk) for name, disk in data["disks_io"].items()},
            disks_usage={name: float(v) for name, v in data["disks_usage"].items()},
            temperatures={label: float(v) for label, v in data["temperatures"].items()},
        )
