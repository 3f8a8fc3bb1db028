# memos-sync Configuration Module
# Handles YAML-based settings loading, validation, and defaults

from memosync.config.defaults import DEFAULT_CONFIG, generate_default_config
from memosync.config.loader import (
    SettingsStore,
    ensure_config_exists,
    get_config_dir,
    get_config_path,
)
from memosync.config.schema import MEMOS_DIR, RESOURCES_DIR, SyncSettings

__all__ = [
    # Schema
    "SyncSettings",
    "MEMOS_DIR",
    "RESOURCES_DIR",
    # Loader
    "SettingsStore",
    "get_config_dir",
    "get_config_path",
    "ensure_config_exists",
    # Defaults
    "DEFAULT_CONFIG",
    "generate_default_config",
]
