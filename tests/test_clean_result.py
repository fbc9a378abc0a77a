"""Tests for CleanResult aggregation."""

from __future__ import annotations

import pytest

from syscleaner.models.clean_error import CleanError, ErrorKind
from syscleaner.models.clean_result import CleanResult, merge_results


def _error(name: str) -> CleanError:
    return CleanError(path=f"/{name}", kind=ErrorKind.OTHER, err=OSError(name))


def _counters(result: CleanResult) -> tuple[int, ...]:
    return (
        result.files_deleted,
        result.skipped_files,
        result.space_freed,
        result.locked_files,
        result.permission_files,
    )


@pytest.fixture
def results():
    a = CleanResult(
        files_deleted=5, skipped_files=1, space_freed=1000, locked_files=1, permission_files=0,
        errors=[_error("err1")],
    )
    b = CleanResult(
        files_deleted=3, skipped_files=2, space_freed=500, locked_files=0, permission_files=1,
        errors=[_error("err2")],
    )
    c = CleanResult(
        files_deleted=7, skipped_files=0, space_freed=42, locked_files=2, permission_files=3,
        errors=[_error("err3"), _error("err4")],
    )
    return a, b, c


class TestMerge:
    def test_merge_in_place(self, results):
        a, b, _ = results
        a.merge(b)

        assert a.files_deleted == 8
        assert a.skipped_files == 3
        assert a.space_freed == 1500
        assert a.locked_files == 1
        assert a.permission_files == 1
        assert len(a.errors) == 2

    def test_merge_leaves_other_untouched(self, results):
        a, b, _ = results
        a.merge(b)
        assert _counters(b) == (3, 2, 500, 0, 1)
        assert [e.path for e in b.errors] == ["/err2"]

    def test_add_returns_new_result(self, results):
        a, b, _ = results
        combined = a + b

        assert _counters(combined) == (8, 3, 1500, 1, 1)
        assert _counters(a) == (5, 1, 1000, 1, 0)
        assert len(a.errors) == 1

    def test_associative(self, results):
        a, b, c = results
        assert _counters((a + b) + c) == _counters(a + (b + c))
        assert [e.path for e in ((a + b) + c).errors] == [e.path for e in (a + (b + c)).errors]

    def test_commutative_counters(self, results):
        a, b, c = results
        assert _counters(a + b) == _counters(b + a)
        assert _counters((b + a) + c) == _counters((a + b) + c)

    def test_errors_concatenate_in_merge_order(self, results):
        a, b, _ = results
        assert [e.path for e in (a + b).errors] == ["/err1", "/err2"]
        assert [e.path for e in (b + a).errors] == ["/err2", "/err1"]

    def test_error_count_is_sum(self, results):
        a, _, c = results
        assert len((a + c).errors) == len(a.errors) + len(c.errors)

    def test_duplicates_kept(self):
        err = _error("same")
        merged = CleanResult(errors=[err]) + CleanResult(errors=[err])
        assert merged.errors == [err, err]

    def test_empty_is_identity(self, results):
        a, _, _ = results
        assert _counters(a + CleanResult()) == _counters(a)
        assert _counters(CleanResult() + a) == _counters(a)

    def test_merge_results_folds_in_order(self, results):
        total = merge_results(results)
        assert _counters(total) == (15, 3, 1542, 3, 4)
        assert [e.path for e in total.errors] == ["/err1", "/err2", "/err3", "/err4"]

    def test_merge_results_empty(self):
        total = merge_results([])
        assert _counters(total) == (0, 0, 0, 0, 0)
        assert total.errors == []

    def test_failed_files(self, results):
        _, _, c = results
        assert c.failed_files == 5
        assert c.has_errors
