"""SysCleaner data models."""

from syscleaner.models.clean_error import CleanError, ErrorKind
from syscleaner.models.clean_result import CleanResult, merge_results
from syscleaner.models.target import CleanOptions, CleanTarget

__all__ = [
    "CleanError",
    "CleanOptions",
    "CleanResult",
    "CleanTarget",
    "ErrorKind",
    "merge_results",
]
