"""Cleanup orchestration over resolved targets."""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Callable

from syscleaner.core.classifier import classify
from syscleaner.core.cleaner import clean_directory
from syscleaner.models.clean_result import CleanResult, merge_results
from syscleaner.models.target import CleanTarget
from syscleaner.utils import bytes_to_human

ProgressCallback = Callable[[str, str], None]  # (category_id, status)
ResultCallback = Callable[[CleanTarget, CleanResult], None]

_DEFAULT_WORKERS = 4


@dataclass(slots=True)
class CleanReport:
    """Per-target results of one run, in target order, plus their total."""

    outcomes: list[tuple[CleanTarget, CleanResult]] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def total(self) -> CleanResult:
        return merge_results(result for _, result in self.outcomes)

    def by_category(self) -> dict[str, CleanResult]:
        """Merge outcomes per category id, keeping first-seen category order."""
        grouped: dict[str, CleanResult] = {}
        for target, result in self.outcomes:
            grouped.setdefault(target.category_id, CleanResult()).merge(result)
        return grouped


class CleanupEngine:
    """Runs the directory cleaner over a list of targets.

    Targets must not overlap.  Results are always folded in the order the
    targets were given, whether they ran sequentially or on the thread pool,
    so the merged error list is reproducible.
    """

    def __init__(self, logger: logging.Logger | None = None, max_workers: int = _DEFAULT_WORKERS) -> None:
        self.log = logger or logging.getLogger(__name__)
        self.max_workers = max(1, max_workers)

    def run(
        self,
        targets: list[CleanTarget],
        *,
        parallel: bool = True,
        deadline: float | None = None,
        on_progress: ProgressCallback | None = None,
        on_result: ResultCallback | None = None,
    ) -> CleanReport:
        """Clean every target and return the ordered report.

        Args:
            targets: Directories to clean, in the order results are folded.
            parallel: Run targets on a thread pool when there is more than one.
            deadline: Seconds the whole run may take.  Targets still running
                when it passes are recorded as a timeout on the target path.
            on_progress: Optional callback for status updates.
            on_result: Optional callback fired as each target's result is folded.
        """
        report = CleanReport()
        if not targets:
            return report

        started = time.monotonic()
        if parallel and (os.cpu_count() or 1) > 1 and len(targets) > 1:
            results = self._run_parallel(targets, deadline, on_progress)
        else:
            results = self._run_sequential(targets, deadline, on_progress)

        for target, result in zip(targets, results):
            report.outcomes.append((target, result))
            if on_result:
                on_result(target, result)

        report.elapsed = time.monotonic() - started
        total = report.total
        self.log.info(
            "Cleaned %d targets in %.2fs: %d files, %s%s",
            len(targets),
            report.elapsed,
            total.files_deleted,
            bytes_to_human(total.space_freed),
            " (dry run)" if all(t.dry_run for t in targets) else "",
        )
        if total.has_errors:
            self.log.warning(
                "%d failures: %d locked, %d permission denied, %d skipped",
                len(total.errors),
                total.locked_files,
                total.permission_files,
                total.skipped_files,
            )
        return report

    def _run_sequential(
        self,
        targets: list[CleanTarget],
        deadline: float | None,
        on_progress: ProgressCallback | None,
    ) -> list[CleanResult]:
        """Clean targets one at a time.

        The deadline is checked between targets; a target already running
        is not interrupted.
        """
        limit = None if deadline is None else time.monotonic() + deadline
        results: list[CleanResult] = []
        for target in targets:
            if limit is not None and time.monotonic() >= limit:
                results.append(self._timed_out(target, CleanResult(), deadline, on_progress))
                continue
            results.append(self._clean_one(target, on_progress))
        return results

    def _run_parallel(
        self,
        targets: list[CleanTarget],
        deadline: float | None,
        on_progress: ProgressCallback | None,
    ) -> list[CleanResult]:
        """Clean targets concurrently, collecting results in target order.

        When the deadline passes, running workers are told to stop and
        their partial results are kept alongside the timeout record.
        """
        limit = None if deadline is None else time.monotonic() + deadline
        stop = threading.Event()
        executor = ThreadPoolExecutor(max_workers=min(self.max_workers, len(targets)))
        futures: list[Future[CleanResult]] = [
            executor.submit(self._clean_one, target, on_progress, stop) for target in targets
        ]

        finished: list[CleanResult | None] = []
        try:
            for future in futures:
                remaining = None if limit is None else max(0.0, limit - time.monotonic())
                try:
                    finished.append(future.result(timeout=remaining))
                except FutureTimeoutError:
                    stop.set()
                    finished.append(None)
        finally:
            stop.set()
            executor.shutdown(wait=True, cancel_futures=True)

        results: list[CleanResult] = []
        for target, future, result in zip(targets, futures, finished):
            if result is None:
                partial = CleanResult() if future.cancelled() else future.result()
                result = self._timed_out(target, partial, deadline, on_progress)
            results.append(result)
        return results

    def _clean_one(
        self,
        target: CleanTarget,
        on_progress: ProgressCallback | None,
        stop: threading.Event | None = None,
    ) -> CleanResult:
        self._progress(on_progress, target, "cleaning")
        self.log.debug("Cleaning %s: %s (max age %s)", target.category_id, target.path, target.max_age)
        try:
            result = clean_directory(target.path, target.max_age, target.dry_run, stop)
        except Exception as e:
            self.log.exception("Cleaning '%s' failed unexpectedly", target.path)
            self._progress(on_progress, target, "error")
            return CleanResult(skipped_files=1, errors=[classify(str(target.path), e)])

        self.log.debug(
            "%s: %d files, %s, %d errors",
            target.path,
            result.files_deleted,
            bytes_to_human(result.space_freed),
            len(result.errors),
        )
        if stop is None or not stop.is_set():
            self._progress(on_progress, target, "error" if result.has_errors else "done")
        return result

    def _timed_out(
        self,
        target: CleanTarget,
        partial: CleanResult,
        deadline: float | None,
        on_progress: ProgressCallback | None,
    ) -> CleanResult:
        self.log.warning(
            "Cleaning '%s' did not finish within %ss (%d files handled before stopping)",
            target.path,
            deadline,
            partial.files_deleted,
        )
        self._progress(on_progress, target, "timeout")
        err = TimeoutError(f"clean timeout after {deadline}s")
        return partial + CleanResult(skipped_files=1, errors=[classify(str(target.path), err)])

    def _progress(self, on_progress: ProgressCallback | None, target: CleanTarget, status: str) -> None:
        if on_progress is None:
            return
        try:
            on_progress(target.category_id, status)
        except Exception:
            self.log.exception("Progress callback failed for %s (%s)", target.category_id, status)
