"""leakscan CLI."""

from __future__ import annotations

import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from typing import Any, Callable

import click

from leakscan.config import load_config
from leakscan.exceptions import LeakscanError
from leakscan.orchestrator import import_and_check
from leakscan.sink import Reporter


def _load_target(target: str) -> Callable[[], object]:
    """Turn ``file.py:attr`` or ``package.module:attr`` into a root loader.

    A callable attribute is called to produce the root; anything else is
    the root itself.
    """
    location, sep, attr = target.rpartition(":")
    if not sep or not location or not attr:
        raise LeakscanError(f"Target must look like 'file.py:name' or 'module:name', got {target!r}")

    def loader() -> object:
        module = _import_location(location)
        obj: Any = module
        for part in attr.split("."):
            obj = getattr(obj, part)
        return obj() if callable(obj) and not isinstance(obj, type) else obj

    return loader


def _import_location(location: str) -> Any:
    if location.endswith(".py"):
        path = Path(location).resolve()
        if not path.exists():
            raise LeakscanError(f"No such file: {location}")
        spec = importlib.util.spec_from_file_location("_leakscan_target", path)
        if spec is None or spec.loader is None:
            raise LeakscanError(f"Cannot load {location}")
        module = importlib.util.module_from_spec(spec)
        # dataclasses and typing resolve annotations through sys.modules.
        sys.modules[spec.name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(spec.name, None)
            raise
        return module
    return importlib.import_module(location)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log scan internals to stderr.")
def cli(verbose: bool) -> None:
    """leakscan CLI."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.argument("target")
@click.option("--config", "config_file", type=click.Path(dir_okay=False, path_type=Path), help="Path to leakscan.toml.")
@click.option("--leak-type", "leak_types", multiple=True, help="Dotted name of a type that must not be retained.")
@click.option("--leak-module", "leak_modules", multiple=True, help="Package whose objects must not be retained.")
@click.option("--skip-type", "skip_types", multiple=True, help="Dotted name of a leaf type to never follow.")
@click.option("--no-proxies", is_flag=True, help="Do not report weak proxies and mocks.")
@click.option("--quiet", "-q", is_flag=True, help="Only set the exit code.")
def check(
    target: str,
    config_file: Path | None,
    leak_types: tuple[str, ...],
    leak_modules: tuple[str, ...],
    skip_types: tuple[str, ...],
    no_proxies: bool,
    quiet: bool,
) -> None:
    """Check the object graph behind TARGET for leaked objects.

    TARGET is ``path/to/file.py:name`` or ``package.module:name``. If the
    named attribute is a function it is called and its return value is
    scanned.
    """
    try:
        config = load_config(config_file)
        config.leak_types.extend(leak_types)
        config.leak_modules.extend(leak_modules)
        if skip_types:
            config.skip_types = list(skip_types)
        if no_proxies:
            config.include_proxies = False
        predicate = config.predicate()
        skip = config.skip_set()
        loader = _load_target(target)
    except LeakscanError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    reporter = Reporter(quiet=quiet)
    result = import_and_check(loader, reporter, is_leaked=predicate, skip_types=skip)
    if result is None:
        sys.exit(1)

    if not quiet:
        click.echo("")
        if result.ok:
            click.echo(click.style("PASSED: No leaked objects found.", fg="green", bold=True))
        else:
            click.echo(
                click.style(
                    f"FAILED: {len(result.reports)} leaked object(s), {result.error_count} error(s).",
                    fg="red",
                    bold=True,
                )
            )
    if not result.ok:
        sys.exit(1)
