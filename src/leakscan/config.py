"""Scan configuration loaded from ``leakscan.toml``.

Example::

    [leakscan]
    leak_types = ["tooling.model.RemoteHandle"]
    leak_modules = ["tooling.internal"]
    skip_types = ["str", "int", "decimal.Decimal"]
    include_proxies = true
"""

from __future__ import annotations

import builtins
import importlib
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from leakscan.exceptions import ConfigError
from leakscan.predicates import DEFAULT_SKIP_TYPES, LeakPredicate, any_of, from_modules, instance_of, is_proxy

DEFAULT_CONFIG_NAME = "leakscan.toml"
CONFIG_ENV_VAR = "LEAKSCAN_CONFIG"


def resolve_type(name: str) -> type:
    """Import a type from a dotted name.

    Accepts ``str`` (a builtin), ``pkg.mod.Cls`` and ``pkg.mod:Outer.Inner``.

    Raises:
        ConfigError: If the name does not resolve to a class.
    """
    if ":" in name:
        module_name, _, attr_path = name.partition(":")
    elif "." in name:
        module_name, _, attr_path = name.rpartition(".")
    else:
        module_name, attr_path = "builtins", name

    try:
        obj: Any = builtins if module_name == "builtins" else importlib.import_module(module_name)
        for part in attr_path.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as e:
        raise ConfigError(f"Cannot resolve type {name!r}: {e}") from None
    if not isinstance(obj, type):
        raise ConfigError(f"{name!r} is not a type")
    return obj


def _name_list(section: dict[str, Any], key: str) -> list[str] | None:
    value = section.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"[leakscan] {key} must be a string or a list of strings")


@dataclass
class ScanConfig:
    """What counts as a leak and which types are never followed."""

    leak_types: list[str] = field(default_factory=list)
    leak_modules: list[str] = field(default_factory=list)
    skip_types: list[str] | None = None
    include_proxies: bool = True

    def predicate(self) -> LeakPredicate:
        """Build the leak predicate. Always matches proxies unless disabled."""
        checks: list[LeakPredicate] = []
        if self.include_proxies:
            checks.append(is_proxy)
        if self.leak_types:
            checks.append(instance_of(*(resolve_type(n) for n in self.leak_types)))
        if self.leak_modules:
            checks.append(from_modules(*self.leak_modules))
        if not checks:
            raise ConfigError("Nothing would be reported: proxies are disabled and no leak types are configured")
        return any_of(checks)

    def skip_set(self) -> frozenset[type]:
        if self.skip_types is None:
            return DEFAULT_SKIP_TYPES
        return frozenset(resolve_type(n) for n in self.skip_types)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanConfig:
        section = data.get("leakscan", {})
        if not isinstance(section, dict):
            raise ConfigError("[leakscan] must be a table")
        include_proxies = section.get("include_proxies", True)
        if not isinstance(include_proxies, bool):
            raise ConfigError("[leakscan] include_proxies must be a boolean")
        return cls(
            leak_types=_name_list(section, "leak_types") or [],
            leak_modules=_name_list(section, "leak_modules") or [],
            skip_types=_name_list(section, "skip_types"),
            include_proxies=include_proxies,
        )


def config_path(path: Path | None = None) -> Path:
    """The config file to use: explicit path, then $LEAKSCAN_CONFIG, then ./leakscan.toml."""
    if path is not None:
        return path
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env)
    return Path.cwd() / DEFAULT_CONFIG_NAME


def load_config(path: Path | None = None) -> ScanConfig:
    """Load the scan configuration; a missing file gives the defaults.

    Raises:
        ConfigError: If the file is not valid TOML or has bad values.
    """
    p = config_path(path)
    if not p.exists():
        return ScanConfig()
    try:
        data = tomllib.loads(p.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file {p}: {e}") from None
    return ScanConfig.from_dict(data)
