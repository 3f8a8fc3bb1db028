# Tests for memosync.sync.lock
# Per-folder run lock

import os
import threading

import pytest

from memosync.errors import SyncInProgressError
from memosync.sync.lock import RunLock

fcntl = pytest.importorskip("fcntl")


def _hold_os_lock(path) -> int:
    """Take the file lock the way another process would."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_CREAT | os.O_RDWR, 0o644)
    fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    return fd


class TestRunLock:
    """Tests for RunLock."""

    def test_lock_file_sits_beside_folder(self, sync_folder):
        """Taking the lock never creates the sync folder itself."""
        with RunLock(sync_folder) as lock:
            assert lock.held
            assert lock.lock_path.parent == sync_folder.resolve().parent
            assert lock.owner() == os.getpid()
            assert not sync_folder.exists()

        assert not lock.held

    def test_second_acquire_in_process(self, sync_folder):
        with RunLock(sync_folder):
            with pytest.raises(SyncInProgressError):
                RunLock(sync_folder).acquire()

    def test_contention_from_thread(self, sync_folder):
        errors = []

        def worker():
            try:
                RunLock(sync_folder).acquire()
            except SyncInProgressError as e:
                errors.append(e)

        with RunLock(sync_folder):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert len(errors) == 1

    def test_held_os_lock_blocks_even_with_empty_file(self, sync_folder):
        """A lock file still being written by its owner is not taken over."""
        lock = RunLock(sync_folder)
        fd = _hold_os_lock(lock.lock_path)
        try:
            assert lock.lock_path.read_text(encoding="utf-8") == ""
            with pytest.raises(SyncInProgressError):
                lock.acquire()
            assert not lock.held
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
            os.close(fd)

        # The in-process lock must have been given back
        with RunLock(sync_folder) as again:
            assert again.held

    def test_leftover_file_is_reused(self, sync_folder):
        """A lock file nobody holds, from a crashed run, does not block."""
        lock = RunLock(sync_folder)
        lock.lock_path.parent.mkdir(parents=True, exist_ok=True)
        lock.lock_path.write_text("999999999", encoding="utf-8")

        with lock:
            assert lock.held
            assert lock.owner() == os.getpid()

    def test_release_lets_next_run_in(self, sync_folder):
        with RunLock(sync_folder):
            pass

        fd = _hold_os_lock(RunLock(sync_folder).lock_path)
        fcntl.flock(fd, fcntl.LOCK_UN)
        os.close(fd)

    def test_release_is_idempotent(self, sync_folder):
        lock = RunLock(sync_folder)
        lock.release()
        lock.acquire()
        lock.release()
        lock.release()
        assert not lock.held
