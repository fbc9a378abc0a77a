"""Shared utility functions."""

from __future__ import annotations

import os
from pathlib import Path

_UNITS = ("KB", "MB", "GB", "TB", "PB", "EB")


def xdg_cache_home() -> Path:
    """Return XDG_CACHE_HOME, defaulting to ~/.cache."""
    return Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def xdg_data_home() -> Path:
    """Return XDG_DATA_HOME, defaulting to ~/.local/share."""
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string.

    Counts below 1024 are printed as whole bytes ("512 B"); larger counts
    use the largest unit that keeps the value below 1024, with two decimals
    ("1.50 KB").
    """
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes < 1024:
        return f"{size_bytes} B"

    value = size_bytes / 1024
    for unit in _UNITS[:-1]:
        if value < 1024:
            return f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} {_UNITS[-1]}"


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m {secs:.0f}s"
