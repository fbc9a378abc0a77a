"""JSON-backed configuration."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from syscleaner.models.target import CleanOptions
from syscleaner.utils import xdg_config_home

log = logging.getLogger(__name__)

_CONFIG_DIR = "syscleaner"
_CONFIG_FILE = "config.json"


class ConfigError(Exception):
    """Raised when the configuration cannot be written."""


@dataclass(slots=True)
class Config:
    """User configuration.

    Instances are passed explicitly to whatever needs them; there is no
    process-wide copy.
    """

    default_clean_options: CleanOptions = field(default_factory=CleanOptions)
    max_workers: int = 4
    log_file: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "default_clean_options": self.default_clean_options.to_dict(),
            "max_workers": self.max_workers,
            "log_file": self.log_file,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a Config from parsed JSON, falling back to defaults per key."""
        config = cls()
        options = data.get("default_clean_options")
        if isinstance(options, dict):
            config.default_clean_options = CleanOptions.from_dict(options)
        workers = data.get("max_workers")
        if isinstance(workers, int) and not isinstance(workers, bool) and workers > 0:
            config.max_workers = workers
        log_file = data.get("log_file")
        if isinstance(log_file, str) and log_file:
            config.log_file = log_file
        return config


def default_config_path() -> Path:
    return xdg_config_home() / _CONFIG_DIR / _CONFIG_FILE


def load_config(path: Path | None = None) -> Config:
    """Load the configuration, returning defaults if the file is missing or unreadable."""
    path = path or default_config_path()
    if not path.exists():
        return Config()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        log.warning("Could not load config from %s: %s", path, e)
        return Config()
    if not isinstance(data, dict):
        log.warning("Ignoring config at %s: expected a JSON object", path)
        return Config()
    return Config.from_dict(data)


def save_config(config: Config, path: Path | None = None) -> Path:
    """Write *config* to disk and return the path written."""
    path = path or default_config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(config.to_dict(), indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
    except OSError as e:
        raise ConfigError(f"Could not save config to {path}: {e}") from e
    log.debug("Saved config to %s", path)
    return path
