# memos-sync Path Utilities
# Atomic writes, flat listings, and name checks for the sync folder

import os
import tempfile
from pathlib import Path
from typing import Optional


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Read once at import, before any worker threads exist
_UMASK = _current_umask()


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path.

    Returns:
        The path that was ensured.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def is_safe_name(name: str) -> bool:
    """
    Check that a remote-provided name is a single plain path component.

    Rejects empty names, separators, and the ``.``/``..`` entries so that a
    remote item can never be written outside its category folder.
    """
    if not name or name in (".", ".."):
        return False
    if "/" in name or "\\" in name or "\x00" in name:
        return False
    return True


def atomic_write(
    path: Path, content: str | bytes, *, encoding: str = "utf-8", mode: Optional[int] = None
) -> None:
    """
    Atomically write content to file.

    Uses a temporary file in the target directory and an atomic rename, so a
    reader never sees a half-written file.

    Args:
        path: Target file path.
        content: Content to write (str or bytes).
        encoding: Encoding for string content (default utf-8).
        mode: Permission bits for the file. Defaults to 0o666 minus the
            process umask, like a plainly created file.
    """
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if isinstance(content, str):
            with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
                f.write(content)
        else:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
        os.chmod(temp_path, mode if mode is not None else 0o666 & ~_UMASK)
        os.replace(temp_path, path)
    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def list_files(directory: Path) -> list[Path]:
    """
    List regular files directly inside a directory.

    Hidden temp files left by :func:`atomic_write` are not reported.

    Args:
        directory: Directory to list.

    Returns:
        Sorted list of file paths.
    """
    results: list[Path] = []
    for entry in directory.iterdir():
        if not entry.is_file():
            continue
        if entry.name.startswith(".") and entry.name.endswith(".tmp"):
            continue
        results.append(entry)
    return sorted(results)
