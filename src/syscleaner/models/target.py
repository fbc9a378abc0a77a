"""Clean options and resolved clean targets."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import timedelta
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class CleanOptions:
    """Per-category switches plus the global dry-run flag."""

    system_temp: bool = True
    user_temp: bool = True
    prefetch: bool = True
    thumbnail_cache: bool = True
    chrome_cache: bool = True
    firefox_cache: bool = True
    edge_cache: bool = True
    recycle_bin: bool = False
    event_logs: bool = False
    steam_cache: bool = False
    epic_cache: bool = False
    nvidia_cache: bool = False
    dry_run: bool = False

    def is_enabled(self, category_id: str) -> bool:
        """Whether the switch named *category_id* is on (unknown names are off)."""
        if category_id == "dry_run":
            return False
        return bool(getattr(self, category_id, False))

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CleanOptions:
        """Build options from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: bool(v) for k, v in data.items() if k in known})

    @classmethod
    def option_names(cls) -> list[str]:
        return [f.name for f in fields(cls) if f.name != "dry_run"]


@dataclass(frozen=True, slots=True)
class CleanTarget:
    """One directory to clean, with its age cutoff.

    A zero ``max_age`` disables the age filter.
    """

    category_id: str
    path: Path
    max_age: timedelta = timedelta(0)
    dry_run: bool = False
