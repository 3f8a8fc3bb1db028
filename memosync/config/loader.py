# memos-sync Configuration Loader
# Load and save the YAML settings file (the Settings Store)

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from memosync.config.defaults import DEFAULT_CONFIG, generate_default_config
from memosync.config.schema import SyncSettings
from memosync.errors import ConfigError
from memosync.utils.paths import atomic_write, ensure_dir


def get_config_dir() -> Path:
    """Get the memos-sync configuration directory."""
    return Path.home() / ".config" / "memosync"


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    # Allow override via environment variable
    env_path = os.environ.get("MEMOSYNC_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


def _merge_with_defaults(data: dict) -> dict:
    """Merge loaded data with default values for missing keys."""
    return {**DEFAULT_CONFIG, **data}


class SettingsStore:
    """
    Persists :class:`SyncSettings` as YAML.

    The file is read on every :meth:`load`; nothing is cached, so each run
    sees the settings as they are on disk at run start.
    """

    def __init__(self, path: Optional[Path] = None):
        """
        Initialize settings store.

        Args:
            path: Path to settings file. Defaults to ``get_config_path()``.
        """
        self.path = path or get_config_path()

    def load(self) -> SyncSettings:
        """
        Load settings from file.

        Returns:
            SyncSettings (defaults if the file doesn't exist or is empty).

        Raises:
            ConfigError: If the file is not valid YAML or fails validation.
        """
        if not self.path.exists():
            return SyncSettings()

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read {self.path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root is not a mapping in {self.path}")

        try:
            return SyncSettings.model_validate(_merge_with_defaults(data))
        except ValidationError as e:
            errors = []
            for error in e.errors():
                loc = " -> ".join(str(part) for part in error["loc"])
                errors.append(f"{loc}: {error['msg']}")
            raise ConfigError(f"Invalid configuration in {self.path}: " + "; ".join(errors)) from e

    def save(self, settings: SyncSettings) -> Path:
        """
        Save settings to file, readable by the owner only (it holds the credential).

        Args:
            settings: Settings value to persist.

        Returns:
            Path where settings were saved.
        """
        ensure_dir(self.path.parent)
        data = settings.model_dump(mode="json")
        content = yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
        atomic_write(self.path, content, mode=0o600)
        return self.path


def ensure_config_exists(config_path: Optional[Path] = None) -> tuple[Path, bool]:
    """
    Ensure configuration file exists, creating default if needed.

    Returns:
        Tuple of (config_path, was_created).
    """
    config_path = config_path or get_config_path()

    if config_path.exists():
        return config_path, False

    ensure_dir(config_path.parent)
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return config_path, True
