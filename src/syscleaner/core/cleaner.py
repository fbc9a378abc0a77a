"""Age-filtered deletion of every regular file under one directory."""

from __future__ import annotations

import os
import threading
import time
from datetime import timedelta
from pathlib import Path
from typing import Iterator

from syscleaner.core.classifier import classify
from syscleaner.models.clean_error import ErrorKind
from syscleaner.models.clean_result import CleanResult


def clean_directory(
    root: Path | str,
    max_age: timedelta,
    dry_run: bool = False,
    stop: threading.Event | None = None,
) -> CleanResult:
    """Delete (or, with *dry_run*, count) old files below *root*.

    A file qualifies when *max_age* is zero or it was last modified at least
    *max_age* ago.  Files that do not qualify are ignored entirely.
    Directories are walked but never deleted, and symlinks are left alone.

    A missing or unreadable *root* yields an empty result.  Every other
    failure is classified and recorded in the returned result; nothing is
    raised to the caller.

    Setting *stop* ends the walk before the next entry; the result then
    covers exactly the files handled so far.
    """
    result = CleanResult()
    root = os.fspath(root)
    try:
        top = os.scandir(root)
    except OSError:
        return result

    cutoff = max_age.total_seconds()
    now = time.time()
    pending: list[str] = []

    with top:
        _clean_entries(root, top, pending, result, now, cutoff, dry_run, stop)

    while pending and not _stopped(stop):
        directory = pending.pop()
        try:
            it = os.scandir(directory)
        except OSError as e:
            _record_skip(result, directory, e)
            continue
        with it:
            _clean_entries(directory, it, pending, result, now, cutoff, dry_run, stop)

    return result


def _clean_entries(
    directory: str,
    entries: Iterator[os.DirEntry[str]],
    pending: list[str],
    result: CleanResult,
    now: float,
    cutoff: float,
    dry_run: bool,
    stop: threading.Event | None,
) -> None:
    """Clean the files of one open directory and queue its subdirectories."""
    while not _stopped(stop):
        try:
            entry = next(entries, None)
        except OSError as e:
            # Listing failed part-way; entries already seen are kept.
            _record_skip(result, directory, e)
            return
        if entry is None:
            return

        try:
            if entry.is_dir(follow_symlinks=False):
                pending.append(entry.path)
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            st = entry.stat(follow_symlinks=False)
        except OSError as e:
            _record_skip(result, entry.path, e)
            continue

        if cutoff > 0 and now - st.st_mtime < cutoff:
            continue

        if not dry_run:
            try:
                os.unlink(entry.path)
            except OSError as e:
                _record_failure(result, entry.path, e)
                continue

        result.files_deleted += 1
        result.space_freed += st.st_size


def _stopped(stop: threading.Event | None) -> bool:
    return stop is not None and stop.is_set()


def _record_failure(result: CleanResult, path: str, err: OSError) -> None:
    error = classify(path, err)
    if error.kind is ErrorKind.LOCKED:
        result.locked_files += 1
    elif error.kind is ErrorKind.PERMISSION_DENIED:
        result.permission_files += 1
    else:
        result.skipped_files += 1
    result.errors.append(error)


def _record_skip(result: CleanResult, path: str, err: OSError) -> None:
    """Record a traversal failure; these always count as skipped."""
    result.skipped_files += 1
    result.errors.append(classify(path, err))
