"""Child enumeration and rendering for arbitrary runtime objects.

The scanner never reaches into an object itself. It asks
:func:`iter_children` for the references an object holds and
:func:`render` / :func:`type_name` for what to print in a diagnostic.

Node shapes are handled by :func:`children`, a
:func:`functools.singledispatch` function keyed on the exact runtime type.
Additional shapes can be registered::

    @children.register
    def _(node: Handle) -> Iterator[object]:
        yield node.target
"""

from __future__ import annotations

import array
import gc
import reprlib
import weakref
from collections.abc import Collection, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from functools import singledispatch
from typing import Any, Iterator

_MAX_RENDER = 200

_depth: ContextVar[int] = ContextVar("leakscan_introspection", default=0)

_repr = reprlib.Repr()
_repr.maxstring = 80
_repr.maxother = _MAX_RENDER
_repr.maxlevel = 2


@contextmanager
def introspection_scope() -> Iterator[None]:
    """Hold the introspection permission for the duration of a scan.

    The cyclic garbage collector is paused while the permission is held so
    that finalizers cannot run in the middle of a field walk. The previous
    collector state is restored when the outermost scope exits, whether or
    not the body raised. Scopes nest.
    """
    depth = _depth.get()
    token = _depth.set(depth + 1)
    was_enabled = gc.isenabled()
    if depth == 0:
        gc.disable()
    try:
        yield
    finally:
        if depth == 0 and was_enabled:
            gc.enable()
        _depth.reset(token)


def has_introspection_permission() -> bool:
    """Return True while inside :func:`introspection_scope`."""
    return _depth.get() > 0


def type_name(node: object) -> str:
    """Qualified name of the node's runtime type, e.g. ``pkg.mod.Cls``."""
    cls = type(node)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def render(node: object) -> str:
    """Short, bounded description of a node for diagnostics. Never raises."""
    text = _repr.repr(node)
    if len(text) > _MAX_RENDER:
        text = text[: _MAX_RENDER - 3] + "..."
    return text


def _slot_names(cls: type) -> tuple[str, ...]:
    names: list[str] = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__"):
                continue
            # Private slots are stored under their mangled name.
            if name.startswith("__") and not name.endswith("__"):
                name = f"_{klass.__name__.lstrip('_')}{name}"
            names.append(name)
    return tuple(names)


def fields(node: object) -> Iterator[object]:
    """Yield the instance field values of a plain object.

    ``__dict__`` entries come first in insertion order, then ``__slots__``
    declared anywhere in the MRO. Unset slots are skipped. Properties are
    never evaluated.
    """
    state = getattr(node, "__dict__", None)
    if state is not None:
        yield from state.values()
    for name in _slot_names(type(node)):
        try:
            yield getattr(node, name)
        except AttributeError:
            continue


def _plain(node: object) -> Iterator[object]:
    for value in fields(node):
        if is_container(value):
            yield from iter_children(value)
        else:
            yield value


@singledispatch
def children(node: object) -> Iterator[object]:
    """Yield the objects directly referenced by a plain object.

    A field holding a container is transparent: its elements are yielded
    in its place. Container shapes yield their elements followed by their
    own instance fields (a ``dict`` subclass with attributes, a tree node
    that iterates over its children); those fields are not flattened again.
    """
    return _plain(node)


@children.register(weakref.ProxyType)
@children.register(weakref.CallableProxyType)
def _proxy(node: Any) -> Iterator[object]:
    # Proxies pose as sequences; walk the referent's fields instead.
    yield from _plain(node)


@children.register(str)
@children.register(bytes)
@children.register(bytearray)
@children.register(memoryview)
def _text(node: Any) -> Iterator[object]:
    return iter(())


@children.register(Mapping)
def _mapping(node: Mapping[Any, Any]) -> Iterator[object]:
    for key, value in node.items():
        yield key
        yield value
    yield from fields(node)


@children.register(tuple)
@children.register(array.array)
def _array_like(node: Any) -> Iterator[object]:
    for i in range(len(node)):
        yield node[i]
    yield from fields(node)


@children.register(Collection)
def _collection(node: Collection[Any]) -> Iterator[object]:
    yield from node
    yield from fields(node)


_CONTAINER_SHAPES = frozenset({_mapping, _array_like, _collection})


def iter_children(node: object) -> Iterator[object]:
    """Enumerate a node's child references according to its shape.

    Dispatch uses ``type(node)`` rather than ``node.__class__`` so that
    objects lying about their class (proxies, mocks) are walked as what
    they are.
    """
    return children.dispatch(type(node))(node)


def is_container(value: object) -> bool:
    """True if *value* is a mapping, collection or array-like shape."""
    return children.dispatch(type(value)) in _CONTAINER_SHAPES
