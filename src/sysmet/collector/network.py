"""Network resource collector."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import psutil

from .base import BaseCollector
from .snapshot import NetworkCounters

logger = logging.getLogger(__name__)


class NetworkCollector(BaseCollector):
    """Collects cumulative I/O counters per network interface.

    Interfaces named in *ignored* are left out; every other interface is kept.
    """

    def __init__(self, ignored: Iterable[str] = ()) -> None:
        self._ignored = frozenset(ignored)

    @property
    def name(self) -> str:
        return "networks"

    def collect(self) -> dict[str, NetworkCounters]:
        counters = psutil.net_io_counters(pernic=True)
        result: dict[str, NetworkCounters] = {}
        for iface, nio in counters.items():
            if iface in self._ignored:
                logger.debug("Ignoring network interface %s", iface)
                continue
            result[iface] = NetworkCounters(
                bytes_sent=int(nio.bytes_sent),
                bytes_recv=int(nio.bytes_recv),
                packets_sent=int(nio.packets_sent),
                packets_recv=int(nio.packets_recv),
            )
        return result
