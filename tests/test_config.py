"""Tests for leakscan.toml loading."""

from __future__ import annotations

from collections import OrderedDict
from decimal import Decimal
from pathlib import Path
from unittest import mock

import pytest

from leakscan.config import CONFIG_ENV_VAR, ScanConfig, load_config, resolve_type
from leakscan.exceptions import ConfigError
from leakscan.predicates import DEFAULT_SKIP_TYPES


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "leakscan.toml"
    p.write_text(text)
    return p


class TestResolveType:
    def test_builtin(self) -> None:
        assert resolve_type("str") is str
        assert resolve_type("builtins.int") is int

    def test_dotted(self) -> None:
        assert resolve_type("decimal.Decimal") is Decimal
        assert resolve_type("collections.OrderedDict") is OrderedDict

    def test_colon_with_nested_attribute(self) -> None:
        assert resolve_type("unittest:mock.Mock") is mock.Mock

    def test_missing(self) -> None:
        with pytest.raises(ConfigError, match="Cannot resolve"):
            resolve_type("no_such_module.Thing")
        with pytest.raises(ConfigError, match="Cannot resolve"):
            resolve_type("decimal.NoSuchThing")

    def test_not_a_type(self) -> None:
        with pytest.raises(ConfigError, match="not a type"):
            resolve_type("os.path.join")


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "absent.toml")
        assert config == ScanConfig()
        assert config.skip_set() == DEFAULT_SKIP_TYPES

    def test_full_file(self, tmp_path: Path) -> None:
        p = _write(
            tmp_path,
            '[leakscan]\n'
            'leak_types = ["decimal.Decimal"]\n'
            'leak_modules = "tooling"\n'
            'skip_types = ["str"]\n'
            'include_proxies = false\n',
        )
        config = load_config(p)
        assert config.leak_types == ["decimal.Decimal"]
        assert config.leak_modules == ["tooling"]
        assert config.skip_set() == frozenset({str})

        pred = config.predicate()
        assert pred(Decimal(1))
        assert not pred(mock.Mock())

    def test_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        p = _write(tmp_path, '[leakscan]\nleak_modules = ["decimal"]\n')
        monkeypatch.setenv(CONFIG_ENV_VAR, str(p))
        assert load_config().leak_modules == ["decimal"]

    def test_cwd_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write(tmp_path, '[leakscan]\ninclude_proxies = false\nleak_types = ["int"]\n')
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)
        assert load_config().include_proxies is False

    def test_invalid_toml(self, tmp_path: Path) -> None:
        p = _write(tmp_path, "[leakscan\n")
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_config(p)

    def test_bad_values(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="list of strings"):
            load_config(_write(tmp_path, "[leakscan]\nleak_types = [1, 2]\n"))
        with pytest.raises(ConfigError, match="boolean"):
            load_config(_write(tmp_path, '[leakscan]\ninclude_proxies = "yes"\n'))


class TestPredicate:
    def test_proxies_by_default(self) -> None:
        assert ScanConfig().predicate()(mock.Mock())

    def test_nothing_to_report(self) -> None:
        with pytest.raises(ConfigError, match="Nothing would be reported"):
            ScanConfig(include_proxies=False).predicate()
