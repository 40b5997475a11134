"""psutil-backed collectors that build one :class:`Snapshot` per call."""

from .manager import SnapshotCollector, collect_snapshot
from .snapshot import Snapshot

__all__ = ["Snapshot", "SnapshotCollector", "collect_snapshot"]
