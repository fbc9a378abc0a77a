"""Cleaning result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from syscleaner.models.clean_error import CleanError


@dataclass(slots=True)
class CleanResult:
    """Additive summary of one or more directory cleans.

    ``errors`` keeps one entry per failure, in the order failures were
    recorded. Merging adds the counters and concatenates ``errors``, so the
    counters are order-independent but the error list is not.
    """

    files_deleted: int = 0
    skipped_files: int = 0
    space_freed: int = 0
    locked_files: int = 0
    permission_files: int = 0
    errors: list[CleanError] = field(default_factory=list)

    def merge(self, other: CleanResult) -> None:
        """Fold *other* into this result in place."""
        self.files_deleted += other.files_deleted
        self.skipped_files += other.skipped_files
        self.space_freed += other.space_freed
        self.locked_files += other.locked_files
        self.permission_files += other.permission_files
        self.errors.extend(other.errors)

    def __add__(self, other: CleanResult) -> CleanResult:
        if not isinstance(other, CleanResult):
            return NotImplemented
        combined = CleanResult()
        combined.merge(self)
        combined.merge(other)
        return combined

    @property
    def failed_files(self) -> int:
        """Files left in place because of a recorded failure or policy skip."""
        return self.skipped_files + self.locked_files + self.permission_files

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


def merge_results(results: Iterable[CleanResult]) -> CleanResult:
    """Fold *results* into a new CleanResult, in iteration order."""
    total = CleanResult()
    for result in results:
        total.merge(result)
    return total
