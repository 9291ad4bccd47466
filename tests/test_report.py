"""Tests for leak reports and diagnostic messages."""

from __future__ import annotations

from leakscan.report import LeakReport, PathEntry, ScanResult, failure_message, leak_message


def _report() -> LeakReport:
    return LeakReport(
        leaked="leak",
        path=[PathEntry("Root", "app.Root"), PathEntry("Child", "app.Child"), PathEntry("'leak'", "str")],
    )


class TestPathEntry:
    def test_of(self) -> None:
        entry = PathEntry.of([1])
        assert entry == PathEntry("[1]", "list")

    def test_str(self) -> None:
        assert str(PathEntry("v", "t")) == "v (t)"


class TestLeakReport:
    def test_chain(self) -> None:
        assert _report().chain() == "Root (app.Root) -> Child (app.Child) -> 'leak' (str)"

    def test_message(self) -> None:
        message = leak_message(_report())
        assert message.startswith("Object ['leak'] is a retained marker object")
        assert message.endswith("Referencing path: Root (app.Root) -> Child (app.Child) -> 'leak' (str)")
        assert _report().message() == message


class TestScanResult:
    def test_empty_is_ok(self) -> None:
        result = ScanResult()
        assert result.ok
        assert result.leaked_objects == []

    def test_errors_not_ok(self) -> None:
        result = ScanResult(reports=[_report()], error_count=1)
        assert not result.ok
        assert result.leaked_objects == ["leak"]


def test_failure_message() -> None:
    message = failure_message([1, 2], KeyError("gone"))
    assert message == "Could not process object [[1, 2]] with type [list]. KeyError Error message: ['gone']"
