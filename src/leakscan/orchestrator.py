"""Obtain a root object from an external loader and check it for leaks."""

from __future__ import annotations

import gc
import logging
import time
from typing import Callable, Iterable

import psutil

from leakscan.predicates import DEFAULT_SKIP_TYPES, LeakPredicate, is_proxy
from leakscan.report import ScanResult
from leakscan.scanner import LeakScanner
from leakscan.sink import OperationType, Reporter

logger = logging.getLogger(__name__)

IMPORT_OPERATION = "Import project"
LEAK_CHECK_OPERATION = "Check for memory leaks"


def _record_memory(reporter: Reporter, suffix: str) -> None:
    """Record resident (used) and virtual (total) process memory, in bytes."""
    info = psutil.Process().memory_info()
    reporter.statistic(f"used_memory_{suffix}", int(info.rss))
    reporter.statistic(f"total_memory_{suffix}", int(info.vms))


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def check_for_leaks(
    root: object,
    reporter: Reporter,
    *,
    is_leaked: LeakPredicate = is_proxy,
    skip_types: Iterable[type] = DEFAULT_SKIP_TYPES,
) -> ScanResult:
    """Scan *root* as a reported test operation.

    Each leak and unreadable object is printed as an error line as soon as
    it is found. The operation fails when the scan's error count is
    non-zero.

    Raises:
        InvalidRootError: If root is None.
    """
    start = time.monotonic()
    reporter.start_operation(OperationType.TEST, LEAK_CHECK_OPERATION)
    scanner = LeakScanner(
        is_leaked=is_leaked,
        skip_types=skip_types,
        on_error=reporter.error,
        on_stat=reporter.statistic,
    )
    result = scanner.scan(root)
    failure = None
    if result.error_count:
        failure = f"Check for memory leaks finished with {result.error_count} errors."
    reporter.finish_operation(
        OperationType.TEST,
        LEAK_CHECK_OPERATION,
        failure_message=failure,
        duration_ms=_elapsed_ms(start),
    )
    return result


def import_and_check(
    loader: Callable[[], object],
    reporter: Reporter,
    *,
    is_leaked: LeakPredicate = is_proxy,
    skip_types: Iterable[type] = DEFAULT_SKIP_TYPES,
) -> ScanResult | None:
    """Load a root object with *loader*, then check it for leaks.

    Memory usage is recorded before the import, after it, and again after a
    full garbage collection, so a retained graph shows up in the statistics
    even when the scan is clean.

    Returns:
        The scan result, or None if the loader failed or produced nothing.
    """
    reporter.progress("Loading root object")
    start = time.monotonic()
    reporter.start_operation(OperationType.TEST, IMPORT_OPERATION)
    _record_memory(reporter, "before_import")

    try:
        root = loader()
    except Exception as e:
        logger.debug("Loader failed", exc_info=True)
        reporter.finish_operation(
            OperationType.TEST,
            IMPORT_OPERATION,
            failure_message=f"Failed to import project: {type(e).__name__}: {e}",
            duration_ms=_elapsed_ms(start),
        )
        return None

    duration = _elapsed_ms(start)
    reporter.statistic("import_duration", duration)
    if root is None:
        reporter.finish_operation(
            OperationType.TEST,
            IMPORT_OPERATION,
            failure_message="Failed to import project: loader returned nothing",
            duration_ms=duration,
        )
        return None
    reporter.finish_operation(OperationType.TEST, IMPORT_OPERATION, duration_ms=duration)

    result = check_for_leaks(root, reporter, is_leaked=is_leaked, skip_types=skip_types)

    _record_memory(reporter, "after_import")
    gc.collect()
    _record_memory(reporter, "after_import_gc")
    reporter.progress("Import done")
    return result
