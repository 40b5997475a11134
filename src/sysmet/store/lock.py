"""Lock sentinel protocol guarding the data file.

A zero-byte ``<path>.lock`` file next to the data file means "busy". The
sentinel is created with an exclusive create, so two processes can never both
believe they created it. Waiting is a plain sleep-and-poll bounded by a
timeout. A sentinel left behind by a killed process is never broken
automatically: every later acquisition times out until it is deleted by hand.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

from ..errors import LockTimeout, StoreIOError

logger = logging.getLogger(__name__)

LOCK_POLL_INTERVAL = 0.1
LOCK_TIMEOUT = 5.0


def lock_path_for(path: str | Path) -> Path:
    return Path(f"{path}.lock")


class FileLock:
    """Advisory lock on *path* through its ``.lock`` sentinel.

    Usage::

        with FileLock("metrics.db"):
            ...
    """

    def __init__(
        self,
        path: str | Path,
        *,
        timeout: float = LOCK_TIMEOUT,
        poll_interval: float = LOCK_POLL_INTERVAL,
    ) -> None:
        self.path = Path(path)
        self.lock_path = lock_path_for(path)
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> None:
        """Block until the sentinel is ours, or raise :class:`LockTimeout`."""
        started = time.monotonic()
        while True:
            try:
                fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
            except FileExistsError:
                if time.monotonic() - started > self._timeout:
                    raise LockTimeout(self.path, self._timeout) from None
                time.sleep(self._poll_interval)
                continue
            except OSError as exc:
                raise StoreIOError("create lock file", self.lock_path, exc) from exc
            os.close(fd)
            break
        self._held = True
        logger.debug("Created lockfile %s", self.lock_path)

    def release(self) -> None:
        """Delete the sentinel, whether or not anything was written."""
        try:
            self.lock_path.unlink()
        except FileNotFoundError:
            logger.warning("Lockfile %s vanished before release", self.lock_path)
        except OSError as exc:
            raise StoreIOError("remove lock file", self.lock_path, exc) from exc
        finally:
            self._held = False
        logger.debug("Removed lockfile %s", self.lock_path)

    def __enter__(self) -> FileLock:
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()
