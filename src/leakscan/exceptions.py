"""Exceptions for the leakscan package."""

from __future__ import annotations


class LeakscanError(Exception):
    """Something went wrong while setting up or running a leak scan."""


class InvalidRootError(LeakscanError):
    """The scan was asked to start from a missing root object."""


class ConfigError(LeakscanError):
    """The scan configuration is invalid or names something that cannot be imported."""
