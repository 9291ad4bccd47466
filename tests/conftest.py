"""Shared fixtures for leakscan tests."""

from __future__ import annotations

import gc

import pytest


@pytest.fixture(autouse=True)
def _gc_state_restored() -> None:  # type: ignore[misc]
    """Fail any test that leaves the garbage collector switched off."""
    was_enabled = gc.isenabled()
    yield  # type: ignore[misc]
    assert gc.isenabled() == was_enabled
