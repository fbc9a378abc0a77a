"""Classification of filesystem errors into cleanup failure kinds.

Operating systems report the same failure in different shapes: permission
and missing-file conditions arrive as structured ``OSError`` subclasses or
errno values, while locking and timeouts are sometimes only visible in the
message text.  The checks below run in a fixed order and the first match
wins, since a single message can satisfy more than one heuristic.  The
result is best-effort.
"""

from __future__ import annotations

import errno

from syscleaner.models.clean_error import CleanError, ErrorKind

_PERMISSION_ERRNOS = frozenset({errno.EACCES, errno.EPERM})

# ERROR_SHARING_VIOLATION, ERROR_LOCK_VIOLATION
_LOCKED_WINERRORS = frozenset({32, 33})
_LOCKED_PHRASES = ("used by another process", "sharing violation")

_TIMEOUT_PHRASE = "timeout"


def classify(path: str, err: BaseException) -> CleanError:
    """Wrap *err* raised on *path* in a CleanError with its ErrorKind."""
    return CleanError(path=str(path), kind=error_kind(err), err=err)


def error_kind(err: BaseException) -> ErrorKind:
    """Return the ErrorKind for *err*.

    Windows raises sharing and lock violations as PermissionError with
    errno EACCES; those carry a locking winerror and are not permission
    failures.
    """
    locked = getattr(err, "winerror", None) in _LOCKED_WINERRORS
    if not locked and (isinstance(err, PermissionError) or _errno(err) in _PERMISSION_ERRNOS):
        return ErrorKind.PERMISSION_DENIED
    if isinstance(err, FileNotFoundError) or _errno(err) == errno.ENOENT:
        return ErrorKind.NOT_FOUND

    message = str(err)
    if locked or any(p in message for p in _LOCKED_PHRASES):
        return ErrorKind.LOCKED
    if isinstance(err, TimeoutError) or _TIMEOUT_PHRASE in message:
        return ErrorKind.TIMEOUT
    return ErrorKind.OTHER


def _errno(err: BaseException) -> int | None:
    return err.errno if isinstance(err, OSError) else None
