"""Search configuration stored in YAML."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, fields
from pathlib import Path

import yaml


@dataclass
class SearchConfig:
    """Tunable limits and timings for a search session."""

    default_limit: int = 50
    history_limit: int = 20
    suggestion_limit: int = 5
    snippet_length: int = 150
    snippet_context: int = 50
    debounce_ms: int = 300
    cache_size: int = 32
    cache_ttl_seconds: int = 60

    def to_dict(self) -> dict:
        """Serialize to dict for YAML storage."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict) -> SearchConfig:
        """Deserialize from dict, keeping defaults for missing keys.

        Raises:
            ValueError: If a value is not a non-negative integer.
        """
        known = {f.name for f in fields(cls)}
        values: dict = {}
        for key, value in data.items():
            if key not in known:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Config value {key} must be a non-negative integer: {value!r}")
            values[key] = value
        return cls(**values)


class ConfigManager:
    """Loads and saves SearchConfig under the `search:` key of a YAML file."""

    def __init__(self, config_path: Path) -> None:
        """Initialize with path to the YAML file.

        Args:
            config_path: Path to the YAML configuration file.
        """
        self._config_path = config_path

    @property
    def config_path(self) -> Path:
        """Return the configuration file path."""
        return self._config_path

    def load(self) -> SearchConfig:
        """Load configuration from the YAML file.

        Returns:
            SearchConfig. Defaults if the file doesn't exist or is empty.

        Raises:
            ValueError: If the file content is malformed.
        """
        if not self._config_path.exists():
            return SearchConfig()

        with open(self._config_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Failed to parse config {self._config_path}: {e}") from e

        if data is None:
            return SearchConfig()
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping: {self._config_path}")

        section = data.get("search") or {}
        if not isinstance(section, dict):
            raise ValueError("Config 'search' section must be a mapping")
        return SearchConfig.from_dict(section)

    def save(self, config: SearchConfig) -> None:
        """Save configuration using an atomic write (temp file + rename).

        Args:
            config: SearchConfig to save.
        """
        data = {"search": config.to_dict()}

        self._config_path.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            dir=self._config_path.parent,
            prefix=".config_",
            suffix=".yaml.tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False)
            os.replace(temp_path, self._config_path)
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
