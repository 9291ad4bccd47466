"""Status lines and named statistics for scan runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import click


class MessageStatus(Enum):
    NORMAL = "normal"
    WARNING = "warning"
    ERROR = "error"
    FAILURE = "failure"


class OperationType(Enum):
    TEST = "test"
    COMPILATION = "compilation"


_STATUS_COLORS = {
    MessageStatus.WARNING: "yellow",
    MessageStatus.ERROR: "red",
    MessageStatus.FAILURE: "red",
}


@dataclass
class Reporter:
    """Prints progress and status lines and records statistics.

    ``error`` and ``statistic`` have the signatures the scanner expects for
    its error and statistics sinks, so a reporter can be wired in directly::

        LeakScanner(on_error=reporter.error, on_stat=reporter.statistic)

    Everything printed is also kept: ``statistics`` maps each statistic
    name to its last value and ``failures`` lists failed operations.
    """

    quiet: bool = False
    statistics: dict[str, float] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    def progress(self, text: str) -> None:
        self._echo(click.style(text, dim=True))

    def message(self, text: str, status: MessageStatus = MessageStatus.NORMAL) -> None:
        color = _STATUS_COLORS.get(status)
        styled = click.style(text, fg=color) if color else text
        self._echo(styled, err=status in (MessageStatus.ERROR, MessageStatus.FAILURE))

    def error(self, text: str) -> None:
        self.errors.append(text)
        self.message(text, MessageStatus.ERROR)

    def statistic(self, name: str, value: float) -> None:
        self.statistics[name] = value
        self._echo(f"  {click.style(name, bold=True)}: {value}")

    def start_operation(self, kind: OperationType, name: str) -> None:
        self._echo(f"Started {kind.value} {click.style(name, fg='blue', bold=True)}")

    def finish_operation(
        self,
        kind: OperationType,
        name: str,
        failure_message: str | None = None,
        duration_ms: int | None = None,
    ) -> None:
        """Close an operation started with :meth:`start_operation`.

        A non-empty *failure_message* marks the operation as failed.
        """
        took = f" in {duration_ms}ms" if duration_ms is not None else ""
        if failure_message:
            self.failures.append(f"{name}: {failure_message}")
            cross = click.style("✘", fg="red", bold=True)
            self._echo(f"  {cross} {kind.value} {name} failed{took}: {failure_message}", err=True)
        else:
            check = click.style("✔", fg="green", bold=True)
            self._echo(f"  {check} {kind.value} {name} finished{took}")

    def _echo(self, text: str, err: bool = False) -> None:
        if not self.quiet:
            click.echo(text, err=err)
