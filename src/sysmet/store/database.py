"""Versioned, single-file snapshot store.

The whole store is one CBOR value ``{"version": ..., "snapshots": [...]}``.
Every write re-encodes the full history and overwrites the file from offset
zero; there is no append format. Writers coordinate through
:class:`~sysmet.store.lock.FileLock`.

Typical update cycle::

    store, handle = MetricsStore.from_file_with_write("metrics.db")
    store.take_snapshot(ignored_networks=["lo"])
    store.remove_older_than(30)
    store.write_and_close(handle)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import BinaryIO

from packaging.version import InvalidVersion, Version

from .. import __version__
from ..collector.manager import SnapshotCollector
from ..collector.snapshot import Snapshot
from ..errors import DateOverflow, DeserializationError, InvalidPath, StoreIOError, VersionParseError
from . import codec
from .lock import LOCK_POLL_INTERVAL, LOCK_TIMEOUT, FileLock

logger = logging.getLogger(__name__)


def _to_path(path: str | Path) -> Path:
    if not str(path) or "\x00" in str(path):
        raise InvalidPath(f"Provided path is invalid: {path!r}")
    return Path(path)


def _parse_version(value: str) -> Version:
    try:
        return Version(value)
    except (InvalidVersion, TypeError) as exc:
        raise VersionParseError(f"Invalid store version {value!r}") from exc


@dataclass
class WriteHandle:
    """Open data file plus the lock held on it, returned by a load for write."""

    path: Path
    file: BinaryIO
    lock: FileLock

    @property
    def closed(self) -> bool:
        return self.file.closed

    def close(self) -> None:
        """Close the file and release the lock, in that order."""
        try:
            self.file.close()
        finally:
            if self.lock.held:
                self.lock.release()


@dataclass
class MetricsStore:
    """Ordered snapshot history of one data file.

    Snapshots are kept in append order, which is the intended chronological
    order; the store never re-sorts them.
    """

    version: str = __version__
    snapshots: list[Snapshot] = field(default_factory=list)

    # -- loading ---------------------------------------------------------

    @classmethod
    def from_bytes(cls, data: bytes, current_version: str = __version__) -> MetricsStore:
        """Decode file contents; empty contents give the empty store."""
        if not data:
            store = cls(version=current_version)
        else:
            payload = codec.decode(data)
            try:
                version = payload["version"]
                snapshots = [Snapshot.from_dict(item) for item in payload["snapshots"]]
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                raise DeserializationError(f"Malformed store contents: {exc!r}") from exc
            if not isinstance(version, str):
                raise DeserializationError(f"Store version must be a string, got {version!r}")
            store = cls(version=version, snapshots=snapshots)
            logger.debug("Deserialized store with %d snapshots", len(snapshots))

        logger.debug("Loaded store with version %s", store.version)
        return reconcile_version(store, current_version)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        *,
        timeout: float = LOCK_TIMEOUT,
        poll_interval: float = LOCK_POLL_INTERVAL,
    ) -> MetricsStore:
        """Load *path* read-only, holding the lock only while reading."""
        path = _to_path(path)
        with FileLock(path, timeout=timeout, poll_interval=poll_interval):
            try:
                with open(path, "rb") as fh:
                    data = fh.read()
            except OSError as exc:
                raise StoreIOError("read", path, exc) from exc
            logger.debug("Read %d bytes from %s", len(data), path)
            return cls.from_bytes(data)

    @classmethod
    def from_file_with_write(
        cls,
        path: str | Path,
        *,
        timeout: float = LOCK_TIMEOUT,
        poll_interval: float = LOCK_POLL_INTERVAL,
    ) -> tuple[MetricsStore, WriteHandle]:
        """Load *path* and keep both the lock and the file open for a later write.

        The file is created when missing. The caller must finish with
        :meth:`write_and_close` or :meth:`close_without_writing`.
        """
        path = _to_path(path)
        lock = FileLock(path, timeout=timeout, poll_interval=poll_interval)
        lock.acquire()
        try:
            fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
            fh = os.fdopen(fd, "r+b")
        except OSError as exc:
            lock.release()
            raise StoreIOError("open", path, exc) from exc

        handle = WriteHandle(path=path, file=fh, lock=lock)
        try:
            data = fh.read()
            logger.debug("Opened %s for reading and writing, file size is %d", path, len(data))
            store = cls.from_bytes(data)
            fh.seek(0)
        except OSError as exc:
            handle.close()
            raise StoreIOError("read", path, exc) from exc
        except Exception:
            handle.close()
            raise
        return store, handle

    # -- persisting ------------------------------------------------------

    def to_bytes(self) -> bytes:
        return codec.encode({
            "version": self.version,
            "snapshots": [snap.to_dict() for snap in self.snapshots],
        })

    def _write(self, fh: BinaryIO, path: Path) -> None:
        # A file written by this release is in this release's format.
        self.version = __version__
        data = self.to_bytes()
        try:
            fh.seek(0)
            fh.write(data)
            fh.truncate()
            fh.flush()
            os.fsync(fh.fileno())
        except OSError as exc:
            raise StoreIOError("write", path, exc) from exc
        logger.debug("Wrote %d snapshots (%d bytes) to %s", len(self.snapshots), len(data), path)

    def write_to_file(
        self,
        path: str | Path,
        *,
        timeout: float = LOCK_TIMEOUT,
        poll_interval: float = LOCK_POLL_INTERVAL,
    ) -> None:
        """Take a fresh lock on *path*, overwrite it with this store, unlock."""
        path = _to_path(path)
        with FileLock(path, timeout=timeout, poll_interval=poll_interval):
            try:
                fh = open(path, "wb")  # noqa: SIM115
            except OSError as exc:
                raise StoreIOError("open", path, exc) from exc
            with fh:
                self._write(fh, path)

    def write_and_close(self, handle: WriteHandle) -> None:
        """Write through a handle from :meth:`from_file_with_write`, then release it."""
        try:
            self._write(handle.file, handle.path)
        finally:
            handle.close()

    def close_without_writing(self, handle: WriteHandle) -> None:
        """Release a write handle and leave the file untouched."""
        logger.debug("Number of snapshots that would have been written %d", len(self.snapshots))
        handle.close()

    # -- mutation --------------------------------------------------------

    def append(self, snapshot: Snapshot) -> None:
        self.snapshots.append(snapshot)

    def take_snapshot(
        self,
        ignored_networks: Iterable[str] = (),
        collector: SnapshotCollector | None = None,
    ) -> Snapshot:
        """Collect one snapshot and append it. Nothing is persisted."""
        if collector is None:
            collector = SnapshotCollector(ignored_networks)
        snapshot = collector.collect()
        self.snapshots.append(snapshot)
        logger.debug("Number of snapshots after appending %d", len(self.snapshots))
        return snapshot

    def remove_older_than(self, days: int, now: datetime | None = None) -> int:
        """Drop every snapshot taken strictly before ``now - days``.

        Returns the number of snapshots removed. A naive *now* is taken as
        UTC.
        """
        if days < 0:
            raise DateOverflow(f"Retention must be zero or more days, got {days}")
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        try:
            cutoff = now - timedelta(days=days)
        except OverflowError as exc:
            raise DateOverflow(f"Cannot compute a cutoff {days} days before {now}") from exc

        before = len(self.snapshots)
        self.snapshots = [snap for snap in self.snapshots if snap.time >= cutoff]
        removed = before - len(self.snapshots)
        logger.debug("Removed %d snapshots older than %s", removed, cutoff)
        return removed


def reconcile_version(store: MetricsStore, current: str = __version__) -> MetricsStore:
    """Apply the version policy to a freshly loaded store.

    A store written by a newer release is still accepted: a warning is logged
    and its version is rewritten to *current*, so the next write stamps the
    running version. Older or equal versions are left alone. This is the only
    load-time condition that is reported without raising.
    """
    loaded = _parse_version(store.version)
    running = _parse_version(current)
    if loaded > running:
        logger.warning(
            "Database version mismatch, current version is %s, database version is %s",
            current,
            store.version,
        )
        store.version = current
    return store
