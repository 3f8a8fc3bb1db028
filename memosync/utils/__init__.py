# memos-sync Utilities Module
# Helper functions for path handling

from memosync.utils.paths import (
    atomic_write,
    ensure_dir,
    is_safe_name,
    list_files,
)

__all__ = [
    "ensure_dir",
    "atomic_write",
    "is_safe_name",
    "list_files",
]
