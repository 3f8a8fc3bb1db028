# memos-sync Local Store
# Filesystem adapter used by the reconciler for every file operation

from pathlib import Path

from memosync.errors import StoreError
from memosync.utils.paths import atomic_write, list_files


class LocalStore:
    """
    Local Store Adapter backed by the filesystem.

    Every underlying ``OSError`` is re-raised as :class:`StoreError` with the
    offending path attached, so callers only handle one error type.
    """

    def exists(self, path: Path) -> bool:
        """Check whether a file or folder exists at path."""
        return path.exists()

    def create_folder(self, path: Path) -> None:
        """Create a folder (and missing parents). No error if it exists."""
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create folder {path}: {e}", path) from e

    def read_text(self, path: Path) -> str:
        """Read a text file."""
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Cannot read {path}: {e}", path) from e

    def read_binary(self, path: Path) -> bytes:
        """Read a binary file."""
        try:
            return path.read_bytes()
        except OSError as e:
            raise StoreError(f"Cannot read {path}: {e}", path) from e

    def write_text(self, path: Path, content: str) -> None:
        """Replace the full contents of a text file."""
        try:
            atomic_write(path, content)
        except OSError as e:
            raise StoreError(f"Cannot write {path}: {e}", path) from e

    def write_binary(self, path: Path, data: bytes) -> None:
        """Replace the full contents of a binary file."""
        try:
            atomic_write(path, data)
        except OSError as e:
            raise StoreError(f"Cannot write {path}: {e}", path) from e

    def list(self, path: Path) -> list[Path]:
        """List files directly inside a folder."""
        try:
            return list_files(path)
        except OSError as e:
            raise StoreError(f"Cannot list {path}: {e}", path) from e

    def remove(self, path: Path) -> None:
        """Delete a file."""
        try:
            path.unlink()
        except OSError as e:
            raise StoreError(f"Cannot delete {path}: {e}", path) from e
