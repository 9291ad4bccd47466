"""Ready-made leak predicates and the default skip set."""

from __future__ import annotations

import weakref
from typing import Callable, Iterable
from unittest import mock

LeakPredicate = Callable[[object], bool]

# Immutable leaf values that can never hold a reference worth following.
DEFAULT_SKIP_TYPES: frozenset[type] = frozenset({str, int, bool, float, complex, bytes})


def is_proxy(node: object) -> bool:
    """True for dynamic stand-ins: weak proxies and ``unittest.mock`` objects."""
    return isinstance(node, weakref.ProxyTypes) or isinstance(node, mock.NonCallableMock)


def instance_of(*types: type) -> LeakPredicate:
    """Match instances of any of *types*, subclasses included."""

    def predicate(node: object) -> bool:
        return isinstance(node, types)

    return predicate


def from_modules(*prefixes: str) -> LeakPredicate:
    """Match objects whose type is defined in one of the given packages.

    ``from_modules("tooling")`` matches types from ``tooling`` and
    ``tooling.model`` but not ``toolingextra``.
    """

    def predicate(node: object) -> bool:
        module = type(node).__module__ or ""
        return any(module == p or module.startswith(p + ".") for p in prefixes)

    return predicate


def any_of(predicates: Iterable[LeakPredicate]) -> LeakPredicate:
    """Combine predicates; an object leaks if any of them matches."""
    checks = tuple(predicates)

    def predicate(node: object) -> bool:
        return any(check(node) for check in checks)

    return predicate
