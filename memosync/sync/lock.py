# memos-sync Run Lock
# One sync run per folder, across threads and processes

import logging
import os
import threading
from pathlib import Path
from typing import Optional

try:
    import fcntl
except ImportError:  # pragma: no cover
    fcntl = None

from memosync.errors import SyncInProgressError

logger = logging.getLogger(__name__)

LOCK_SUFFIX = ".memosync.lock"

_registry_guard = threading.Lock()
_folder_locks: dict[Path, threading.Lock] = {}


def _thread_lock_for(folder: Path) -> threading.Lock:
    with _registry_guard:
        lock = _folder_locks.get(folder)
        if lock is None:
            lock = threading.Lock()
            _folder_locks[folder] = lock
        return lock


class RunLock:
    """
    Run-level mutual exclusion for a sync folder.

    Combines an in-process lock (one per resolved folder) with an exclusive
    ``flock`` on a lock file next to the folder. The lock file sits beside
    the folder, not inside it, so taking the lock never creates the folder.
    The file itself is left in place; only the OS lock on it matters, and
    the OS drops that lock when the owning process exits. Where ``fcntl`` is
    unavailable only the in-process lock applies.
    """

    def __init__(self, folder: Path):
        """
        Initialize run lock.

        Args:
            folder: Sync folder to protect.
        """
        self.folder = Path(folder).expanduser().resolve()
        self.lock_path = self.folder.parent / f".{self.folder.name}{LOCK_SUFFIX}"
        self._thread_lock = _thread_lock_for(self.folder)
        self._fd: Optional[int] = None
        self._held = False

    @property
    def held(self) -> bool:
        """Check if this instance currently holds the lock."""
        return self._held

    def acquire(self) -> None:
        """
        Take the lock without waiting.

        Raises:
            SyncInProgressError: If another run holds it.
            OSError: If the lock file cannot be opened.
        """
        if not self._thread_lock.acquire(blocking=False):
            raise SyncInProgressError(f"A sync is already running for {self.folder}")

        try:
            self._fd = self._lock_file()
        except BaseException:
            self._thread_lock.release()
            raise

        self._held = True

    def release(self) -> None:
        """Give the lock back. Safe to call when not held."""
        if not self._held:
            return
        self._held = False
        fd, self._fd = self._fd, None
        try:
            if fd is not None:
                try:
                    fcntl.flock(fd, fcntl.LOCK_UN)
                finally:
                    os.close(fd)
        finally:
            self._thread_lock.release()

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()

    def owner(self) -> Optional[int]:
        """Pid recorded by the last process that took the lock, if readable."""
        try:
            return int(self.lock_path.read_text(encoding="utf-8").strip())
        except (OSError, ValueError):
            return None

    def _lock_file(self) -> Optional[int]:
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        if fcntl is None:  # pragma: no cover
            return None

        fd = os.open(self.lock_path, os.O_CREAT | os.O_RDWR, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            owner = self.owner()
            detail = f" (pid {owner})" if owner else ""
            raise SyncInProgressError(f"A sync is already running for {self.folder}{detail}") from None
        except BaseException:
            os.close(fd)
            raise

        # The pid is informational; the flock is what excludes other runs
        try:
            os.ftruncate(fd, 0)
            os.write(fd, str(os.getpid()).encode("ascii"))
        except OSError as e:
            logger.debug("Could not record pid in %s: %s", self.lock_path, e)
        return fd
