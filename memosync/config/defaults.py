# memos-sync Default Configuration
# Default settings as Python dict and YAML generator

from typing import Any

import yaml

from memosync.remote.client import DEFAULT_TIMEOUT

DEFAULT_CONFIG: dict[str, Any] = {
    "open_api": "",
    "sync_folder": "~/Memos Sync",
    "debug": False,
    "fetch_timeout": DEFAULT_TIMEOUT,
    "max_workers": 4,
}


def generate_default_config() -> str:
    """Generate default configuration as YAML string with comments."""
    header = """# memos-sync Configuration
#
# open_api:       Your Memos OpenAPI URL, found in the Memos settings page.
#                 Example: https://memos.example.com/api/memo?openId=...
# sync_folder:    Folder that receives memos/ and resources/.
# debug:          Report every synced, skipped, and deleted item.
# fetch_timeout:  Per-request timeout in seconds.
# max_workers:    Concurrent file operations per sync step.
#
# last_sync_time is written by memosync after every successful run.

"""
    return header + yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)
