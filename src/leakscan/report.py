"""Leak reports and the diagnostic messages built from them."""

from __future__ import annotations

from dataclasses import dataclass, field

from leakscan.introspect import render, type_name


@dataclass(frozen=True)
class PathEntry:
    """One hop of a witness path: the rendered node and its type."""

    value: str
    type_name: str

    @classmethod
    def of(cls, node: object) -> PathEntry:
        return cls(value=render(node), type_name=type_name(node))

    def __str__(self) -> str:
        return f"{self.value} ({self.type_name})"


@dataclass
class LeakReport:
    """A leaked object and the chain of references that reached it.

    ``path[0]`` describes the scan root and ``path[-1]`` the leaked object
    itself. The path is the first one discovered in breadth-first order,
    not necessarily the only one.
    """

    leaked: object
    path: list[PathEntry]

    def chain(self) -> str:
        """Render the path as ``value (type) -> value (type) -> ...``."""
        return " -> ".join(str(entry) for entry in self.path)

    def message(self) -> str:
        return leak_message(self)


@dataclass
class ScanResult:
    """Outcome of one scan.

    ``error_count`` covers both leaks and objects that could not be
    introspected, so it is never smaller than ``len(reports)``.
    """

    reports: list[LeakReport] = field(default_factory=list)
    error_count: int = 0

    @property
    def leaked_objects(self) -> list[object]:
        return [r.leaked for r in self.reports]

    @property
    def ok(self) -> bool:
        return self.error_count == 0


def leak_message(report: LeakReport) -> str:
    """Diagnostic line pushed to the error sink for each leak."""
    return (
        f"Object [{report.path[-1].value}] is a retained marker object "
        f"(it may lead to memory leaks). Referencing path: {report.chain()}"
    )


def failure_message(node: object, exc: BaseException) -> str:
    """Diagnostic line pushed to the error sink when a node cannot be read."""
    return (
        f"Could not process object [{render(node)}] with type [{type_name(node)}]. "
        f"{type(exc).__name__} Error message: [{exc}]"
    )
