# memos-sync Output Module
# Rich console output

from memosync.output.console import Console, create_console, format_timestamp

__all__ = [
    "Console",
    "create_console",
    "format_timestamp",
]
