"""Breadth-first leak scanner over an arbitrary object graph."""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Iterable

from leakscan.exceptions import InvalidRootError
from leakscan.introspect import introspection_scope, iter_children, type_name
from leakscan.predicates import DEFAULT_SKIP_TYPES, LeakPredicate, is_proxy
from leakscan.report import LeakReport, PathEntry, ScanResult, failure_message, leak_message

logger = logging.getLogger(__name__)

ErrorSink = Callable[[str], None]
StatSink = Callable[[str, float], None]

LEAKED_OBJECTS_STAT = "memory_number_of_leaked_objects"


def _ignore_error(message: str) -> None:
    pass


def _ignore_stat(name: str, value: float) -> None:
    pass


class LeakScanner:
    """Finds objects matching a leak predicate reachable from a root.

    Usage::

        scanner = LeakScanner(is_leaked=is_proxy, on_error=print)
        result = scanner.scan(project_model)
        if not result.ok:
            ...

    The scanner holds no state between calls; every :meth:`scan` builds its
    own queue, visited set and referrer map.
    """

    def __init__(
        self,
        is_leaked: LeakPredicate = is_proxy,
        skip_types: Iterable[type] = DEFAULT_SKIP_TYPES,
        on_error: ErrorSink = _ignore_error,
        on_stat: StatSink = _ignore_stat,
    ) -> None:
        self._is_leaked = is_leaked
        self._skip_types = frozenset(skip_types)
        self._on_error = on_error
        self._on_stat = on_stat

    def scan(self, root: object) -> ScanResult:
        """Walk everything reachable from *root* and report leaked objects.

        Args:
            root: The object to start from. Never tested against the skip set.

        Returns:
            ScanResult with one LeakReport per leaked object, in discovery
            order, and the number of leaks plus unreadable objects.

        Raises:
            InvalidRootError: If root is None.
            Exception: Whatever on_error or on_stat raise; sink errors are not
                caught.
        """
        if root is None:
            raise InvalidRootError("Cannot scan a None root")

        result = ScanResult()
        queue: deque[object] = deque([root])
        # Visited objects are held so their ids cannot be reused mid-scan.
        visited: dict[int, object] = {}
        # id -> referring object. Holding the referrer keeps its id stable.
        referrers: dict[int, object] = {}

        logger.debug("Starting leak scan from %s", type_name(root))
        with introspection_scope():
            while queue:
                node = queue.popleft()
                if id(node) in visited:
                    continue
                visited[id(node)] = node
                try:
                    leaked = self._is_leaked(node)
                    if not leaked:
                        for child in iter_children(node):
                            if child is None or type(child) in self._skip_types:
                                continue
                            if id(child) in visited:
                                continue
                            referrers.setdefault(id(child), node)
                            queue.append(child)
                except Exception as e:
                    message = failure_message(node, e)
                    logger.debug(message)
                    result.error_count += 1
                    self._on_error(message)
                    continue
                # Sink errors propagate and are never counted as introspection failures.
                if leaked:
                    self._report(node, referrers, result)

        logger.debug(
            "Leak scan visited %d objects: %d leaked, %d errors",
            len(visited),
            len(result.reports),
            result.error_count,
        )
        self._on_stat(LEAKED_OBJECTS_STAT, len(result.reports))
        return result

    def _report(self, node: object, referrers: dict[int, object], result: ScanResult) -> None:
        path = [PathEntry.of(node)]
        current = referrers.get(id(node))
        while current is not None:
            path.append(PathEntry.of(current))
            current = referrers.get(id(current))
        path.reverse()

        report = LeakReport(leaked=node, path=path)
        result.reports.append(report)
        result.error_count += 1
        self._on_error(leak_message(report))


def scan(
    root: object,
    is_leaked: LeakPredicate = is_proxy,
    skip_types: Iterable[type] = DEFAULT_SKIP_TYPES,
    on_error: ErrorSink = _ignore_error,
    on_stat: StatSink = _ignore_stat,
) -> ScanResult:
    """Scan *root* once with a throwaway :class:`LeakScanner`."""
    return LeakScanner(is_leaked, skip_types, on_error, on_stat).scan(root)
