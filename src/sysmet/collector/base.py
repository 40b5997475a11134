"""Base interface for system resource collectors."""

from __future__ import annotations

import abc
from typing import Any


class BaseCollector(abc.ABC):
    """Abstract base class for system resource collectors.

    Each collector reads one family of counters and returns the value that
    fills the matching :class:`~sysmet.collector.snapshot.Snapshot` field.
    Errors from psutil or the OS propagate untouched; the manager turns them
    into :class:`~sysmet.errors.CollectionError`.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Collector name, also the snapshot field it fills."""

    @abc.abstractmethod
    def collect(self) -> Any:
        """Read the current counters."""
