# memos-sync Store Module
# Local Store Adapter

from memosync.store.local import LocalStore

__all__ = ["LocalStore"]
