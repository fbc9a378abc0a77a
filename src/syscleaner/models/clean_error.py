"""Classified cleanup failure."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Cause of a file- or directory-level failure."""

    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    LOCKED = "locked"
    TIMEOUT = "timeout"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class CleanError:
    """One classified failure on a single path."""

    path: str
    kind: ErrorKind
    err: BaseException

    def __str__(self) -> str:
        return f"{self.path}: {self.err}"
