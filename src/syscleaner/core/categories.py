"""Cleanup categories and their resolution into clean targets."""

from __future__ import annotations

import logging
import os
import sys
import tempfile
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Mapping

from syscleaner.models.target import CleanOptions, CleanTarget
from syscleaner.utils import xdg_cache_home, xdg_data_home

log = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True, slots=True)
class Category:
    """A named group of directories cleaned with one age cutoff.

    Directory templates are ``str.format`` patterns over the platform
    variables returned by :func:`platform_vars`.  A template referring to a
    variable that is not set is dropped.
    """

    id: str
    name: str
    description: str
    max_age: timedelta = timedelta(0)
    windows: tuple[str, ...] = ()
    posix: tuple[str, ...] = ()

    def templates(self, platform: str) -> tuple[str, ...]:
        return self.windows if platform == "win32" else self.posix

    def directories(self, platform: str, variables: Mapping[str, str]) -> list[Path]:
        """Expand this category's templates for *platform*."""
        dirs: list[Path] = []
        for template in self.templates(platform):
            try:
                dirs.append(Path(template.format_map(variables)))
            except KeyError as e:
                log.debug("Skipping %s directory %r: %s is not set", self.id, template, e)
        return dirs


CATEGORIES: tuple[Category, ...] = (
    Category(
        id="system_temp",
        name="System Temp",
        description="System-wide temporary files older than one day.",
        max_age=_ONE_DAY,
        windows=("{SYSTEMROOT}\\Temp",),
        posix=("/var/tmp",),
    ),
    Category(
        id="user_temp",
        name="User Temp",
        description="The current user's temporary files older than one day.",
        max_age=_ONE_DAY,
        windows=("{TEMP}",),
        posix=("{tmp}",),
    ),
    Category(
        id="prefetch",
        name="Prefetch",
        description="Windows prefetch traces older than one week; Windows rebuilds them on demand.",
        max_age=timedelta(days=7),
        windows=("{SYSTEMROOT}\\Prefetch",),
    ),
    Category(
        id="thumbnail_cache",
        name="Thumbnail Cache",
        description="Cached thumbnail images, regenerated when folders are browsed.",
        windows=("{LOCALAPPDATA}\\Microsoft\\Windows\\Explorer",),
        posix=("{cache}/thumbnails",),
    ),
    Category(
        id="chrome_cache",
        name="Chrome Cache",
        description="Google Chrome's disk cache.",
        windows=("{LOCALAPPDATA}\\Google\\Chrome\\User Data\\Default\\Cache",),
        posix=("{cache}/google-chrome",),
    ),
    Category(
        id="firefox_cache",
        name="Firefox Cache",
        description="Mozilla Firefox's disk cache.",
        windows=("{LOCALAPPDATA}\\Mozilla\\Firefox\\Profiles",),
        posix=("{cache}/mozilla/firefox",),
    ),
    Category(
        id="edge_cache",
        name="Edge Cache",
        description="Microsoft Edge's disk cache.",
        windows=("{LOCALAPPDATA}\\Microsoft\\Edge\\User Data\\Default\\Cache",),
        posix=("{cache}/microsoft-edge",),
    ),
    Category(
        id="recycle_bin",
        name="Recycle Bin",
        description="Files the user already deleted to the recycle bin.",
        windows=("{SYSTEMDRIVE}\\$Recycle.Bin",),
        posix=("{data}/Trash/files", "{data}/Trash/info"),
    ),
    Category(
        id="event_logs",
        name="Event Logs",
        description="Event log files not modified in 30 days.",
        max_age=timedelta(days=30),
        windows=("{SYSTEMROOT}\\System32\\winevt\\Logs",),
    ),
    Category(
        id="steam_cache",
        name="Steam Cache",
        description="Steam's web and shader caches.",
        windows=("{LOCALAPPDATA}\\Steam\\htmlcache",),
        posix=("{data}/Steam/config/htmlcache", "{data}/Steam/steamapps/shadercache"),
    ),
    Category(
        id="epic_cache",
        name="Epic Games Cache",
        description="Epic Games Launcher's web cache.",
        windows=("{LOCALAPPDATA}\\EpicGamesLauncher\\Saved\\webcache",),
    ),
    Category(
        id="nvidia_cache",
        name="NVIDIA Shader Cache",
        description="NVIDIA DirectX and OpenGL shader caches, rebuilt by the driver.",
        windows=("{LOCALAPPDATA}\\NVIDIA\\DXCache", "{LOCALAPPDATA}\\NVIDIA\\GLCache"),
        posix=("{home}/.nv/GLCache", "{cache}/nvidia/GLCache"),
    ),
)

_BY_ID = {c.id: c for c in CATEGORIES}


def get_category(category_id: str) -> Category | None:
    return _BY_ID.get(category_id)


def platform_vars(platform: str | None = None, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Variables available to directory templates on *platform*."""
    platform = platform or sys.platform
    environ = os.environ if environ is None else environ
    if platform == "win32":
        # Windows environment names are case-insensitive; templates use upper case.
        return {k.upper(): v for k, v in environ.items() if v}
    return {
        "home": str(Path.home()),
        "tmp": tempfile.gettempdir(),
        "cache": str(xdg_cache_home()),
        "data": str(xdg_data_home()),
    }


def resolve_targets(
    options: CleanOptions,
    *,
    platform: str | None = None,
    variables: Mapping[str, str] | None = None,
    existing_only: bool = True,
) -> list[CleanTarget]:
    """Turn enabled categories in *options* into clean targets.

    Targets come out in category table order.  A directory equal to, inside,
    or containing one that was already chosen is dropped, so the returned
    targets never overlap.
    """
    platform = platform or sys.platform
    if variables is None:
        variables = platform_vars(platform)

    targets: list[CleanTarget] = []
    for category in CATEGORIES:
        if not options.is_enabled(category.id):
            continue
        for directory in category.directories(platform, variables):
            if existing_only and not directory.is_dir():
                log.debug("Skipping %s: %s not found", category.id, directory)
                continue
            clash = _overlapping(directory, targets)
            if clash is not None:
                log.info("Skipping %s: %s overlaps %s target %s", category.id, directory, clash.category_id, clash.path)
                continue
            targets.append(
                CleanTarget(
                    category_id=category.id,
                    path=directory,
                    max_age=category.max_age,
                    dry_run=options.dry_run,
                )
            )
    return targets


def _overlapping(directory: Path, targets: list[CleanTarget]) -> CleanTarget | None:
    key = _normalize(directory)
    for target in targets:
        other = _normalize(target.path)
        if key == other or key.is_relative_to(other) or other.is_relative_to(key):
            return target
    return None


def _normalize(path: Path) -> Path:
    return Path(os.path.normcase(os.path.abspath(path)))
