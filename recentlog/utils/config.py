"""
Configuration management for recentlog.

Handles loading and merging configuration from:
- Default configuration file shipped with the package
- User configuration file
- Environment variables
- Command-line arguments (applied by the caller through ``set``)
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

APP_NAME = "recentlog"


def default_data_dir() -> Path:
    """Return the per-user data directory for the cache file."""
    if data_home := os.getenv("XDG_DATA_HOME"):
        return Path(data_home) / APP_NAME
    return Path.home() / ".local" / "share" / APP_NAME


def default_config_file() -> Path:
    """Return the per-user configuration file location."""
    if config_home := os.getenv("XDG_CONFIG_HOME"):
        return Path(config_home) / APP_NAME / "config.yaml"
    return Path.home() / ".config" / APP_NAME / "config.yaml"


class Config:
    """Configuration manager for recentlog."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file. If None, the per-user
                file is loaded when it exists.
        """
        self._config: Dict[str, Any] = {}
        self._load_default_config()

        if config_file:
            self._load_config_file(config_file)
        else:
            user_config = default_config_file()
            if user_config.exists():
                self._load_config_file(str(user_config))

        self._apply_env_overrides()

    def _load_default_config(self) -> None:
        """Load default configuration."""
        default_config_path = Path(__file__).parent.parent / "config" / "default.yaml"
        if default_config_path.exists():
            self._load_config_file(str(default_config_path))

    def _load_config_file(self, config_file: str) -> None:
        """
        Load configuration from YAML file.

        Args:
            config_file: Path to YAML configuration file
        """
        with open(config_file, "r") as f:
            file_config = yaml.safe_load(f)
            if file_config:
                self._merge_config(file_config)

    def _merge_config(self, new_config: Dict[str, Any]) -> None:
        """Deep merge new configuration into existing configuration."""
        self._config = self._deep_merge(self._config, new_config)

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        if cache_dir := os.getenv("RECENTLOG_DIR"):
            self.set("cache.directory", cache_dir)

        if cache_name := os.getenv("RECENTLOG_NAME"):
            self.set("cache.name", cache_name)

        if retain := os.getenv("RECENTLOG_RETAIN"):
            self.set("cache.retain", int(retain))

        if threshold := os.getenv("RECENTLOG_COMPACTION_THRESHOLD"):
            self.set("cache.compaction_threshold_bytes", int(threshold))

        if log_level := os.getenv("LOG_LEVEL"):
            self.set("logging.level", log_level)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "cache.retain")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key in dot notation
            value: Value to set
        """
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

    def validate(self) -> None:
        """
        Check the cache settings.

        Raises:
            ValueError: If a count or size is not a non-negative integer
        """
        for key in ("cache.retain", "cache.compaction_threshold_bytes"):
            value = self.get(key)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"{key} must be a non-negative integer, got {value!r}")

    def cache_path(self) -> Path:
        """
        Resolve the full path of the cache file.

        Returns:
            Cache directory joined with the cache name
        """
        directory = self.get("cache.directory")
        base = Path(directory).expanduser() if directory else default_data_dir()
        return base / self.get("cache.name", "history")

    def to_dict(self) -> Dict[str, Any]:
        """
        Get entire configuration as dictionary.

        Returns:
            Configuration dictionary
        """
        return self._config.copy()
