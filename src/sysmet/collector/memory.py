"""Memory resource collectors."""

from __future__ import annotations

import psutil

from .base import BaseCollector
from .snapshot import MemoryReading, SwapReading


class MemoryCollector(BaseCollector):
    """Collects virtual memory usage."""

    @property
    def name(self) -> str:
        return "memory"

    def collect(self) -> MemoryReading:
        mem = psutil.virtual_memory()
        return MemoryReading(
            total=int(mem.total),
            used=int(mem.used),
            available=int(mem.available),
            percent=float(mem.percent),
        )


class SwapCollector(BaseCollector):
    """Collects swap usage."""

    @property
    def name(self) -> str:
        return "swap"

    def collect(self) -> SwapReading:
        swap = psutil.swap_memory()
        return SwapReading(
            total=int(swap.total),
            used=int(swap.used),
            free=int(swap.free),
            percent=float(swap.percent),
        )
