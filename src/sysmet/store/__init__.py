"""Single-file snapshot store guarded by a lock sentinel."""

from .database import MetricsStore, WriteHandle, reconcile_version
from .lock import FileLock

__all__ = ["FileLock", "MetricsStore", "WriteHandle", "reconcile_version"]
