"""Exception types raised by the collectors and the metrics store."""

from __future__ import annotations

from pathlib import Path


class SysmetError(Exception):
    """Base class for every error raised by sysmet."""


class CollectionError(SysmetError):
    """An OS counter could not be read; the whole snapshot is discarded."""

    def __init__(self, source: str, cause: BaseException) -> None:
        super().__init__(f"Failed to read {source} counters: {cause}")
        self.source = source
        self.cause = cause


class InvalidPath(SysmetError):
    """The store path is empty or cannot name a file."""


class StoreIOError(SysmetError):
    """Opening, reading, writing or removing the data or lock file failed."""

    def __init__(self, action: str, path: str | Path, cause: OSError) -> None:
        super().__init__(f"Failed to {action} {path}: {cause}")
        self.action = action
        self.path = Path(path)
        self.cause = cause


class DeserializationError(SysmetError):
    """The data file does not decode to a metrics store."""


class SerializationError(SysmetError):
    """The in-memory store could not be encoded."""


class VersionParseError(SysmetError):
    """A store version string is not a valid version."""


class LockTimeout(SysmetError):
    """The lock sentinel was still present when the wait expired."""

    def __init__(self, path: str | Path, timeout: float) -> None:
        super().__init__(f"Timeout while trying to lock {path} (waited {timeout:.1f}s)")
        self.path = Path(path)
        self.timeout = timeout


class DateOverflow(SysmetError):
    """The retention cutoff date cannot be represented."""
