"""Tests for error classification."""

from __future__ import annotations

import errno

import pytest

from syscleaner.core.classifier import classify, error_kind
from syscleaner.models.clean_error import CleanError, ErrorKind


class TestClassify:
    def test_permission_denied(self):
        ce = classify("/some/path", PermissionError(errno.EACCES, "Permission denied"))
        assert ce.kind is ErrorKind.PERMISSION_DENIED
        assert ce.path == "/some/path"

    def test_permission_by_errno(self):
        assert error_kind(OSError(errno.EPERM, "Operation not permitted")) is ErrorKind.PERMISSION_DENIED

    def test_not_found(self):
        ce = classify("/missing/file", FileNotFoundError(errno.ENOENT, "No such file or directory"))
        assert ce.kind is ErrorKind.NOT_FOUND

    def test_not_found_by_errno(self):
        assert error_kind(OSError(errno.ENOENT, "gone")) is ErrorKind.NOT_FOUND

    def test_locked(self):
        ce = classify("/locked/file", OSError("the file is used by another process"))
        assert ce.kind is ErrorKind.LOCKED

    def test_locked_sharing_violation(self):
        ce = classify("/locked/file2", OSError("sharing violation on resource"))
        assert ce.kind is ErrorKind.LOCKED

    def test_locked_match_is_case_sensitive(self):
        assert error_kind(OSError("Sharing Violation")) is ErrorKind.OTHER

    def test_timeout(self):
        ce = classify("/slow/file", OSError("operation timeout"))
        assert ce.kind is ErrorKind.TIMEOUT

    def test_timeout_error_type(self):
        assert error_kind(TimeoutError("timed out")) is ErrorKind.TIMEOUT

    def test_other(self):
        ce = classify("/other/file", OSError("some random failure"))
        assert ce.kind is ErrorKind.OTHER

    def test_non_os_error(self):
        assert error_kind(RuntimeError("boom")) is ErrorKind.OTHER

    @pytest.mark.parametrize(
        "err, kind",
        [
            # Without a locking winerror, structured permission beats the phrase.
            (PermissionError(errno.EACCES, "used by another process"), ErrorKind.PERMISSION_DENIED),
            (FileNotFoundError(errno.ENOENT, "timeout"), ErrorKind.NOT_FOUND),
            (OSError("sharing violation after timeout"), ErrorKind.LOCKED),
        ],
    )
    def test_first_match_wins(self, err, kind):
        assert error_kind(err) is kind

    def test_windows_sharing_violation_is_locked(self):
        err = PermissionError(
            errno.EACCES, "The process cannot access the file because it is being used by another process"
        )
        err.winerror = 32
        assert error_kind(err) is ErrorKind.LOCKED

    def test_windows_lock_violation_is_locked(self):
        err = PermissionError(errno.EACCES, "Access is denied")
        err.winerror = 33
        assert error_kind(err) is ErrorKind.LOCKED

    def test_windows_access_denied_stays_permission(self):
        err = PermissionError(errno.EACCES, "Access is denied")
        err.winerror = 5
        assert error_kind(err) is ErrorKind.PERMISSION_DENIED

    def test_deterministic(self):
        err = OSError("operation timeout")
        assert classify("/a", err) == classify("/a", err)

    def test_keeps_original_error(self):
        err = OSError("boom")
        assert classify("/x", err).err is err


class TestCleanError:
    def test_error_string(self):
        ce = CleanError(path="/test/path", kind=ErrorKind.OTHER, err=OSError("boom"))
        assert str(ce) == "/test/path: boom"

    def test_immutable(self):
        ce = CleanError(path="/test/path", kind=ErrorKind.OTHER, err=OSError("boom"))
        with pytest.raises(AttributeError):
            ce.path = "/elsewhere"  # type: ignore[misc]
