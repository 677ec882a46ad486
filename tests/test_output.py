"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode suppression rules
- Verbose mode debug output
- print_json, print_table and print_fields in each mode
- Global instance management
- Convenience functions
"""

from __future__ import annotations

import json

import pytest

from specdeck import output as output_module
from specdeck.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture(autouse=True)
def _reset_global_output():
    """Ensure the global output instance is reset between tests."""
    reset_output()
    yield
    reset_output()


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("specdeck.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("specdeck.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    """Test that AUTO resolves correctly based on environment."""

    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty):
        mgr = OutputManager(format=OutputFormat.JSON)
        assert mgr.format == OutputFormat.JSON


# ------------------------------------------------------------------ #
# Color disabling
# ------------------------------------------------------------------ #


class TestColorDisabling:
    """Test NO_COLOR and TERM=dumb detection."""

    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout / stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Data goes to stdout, diagnostics to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(no_color=True)
        mgr.print_data("payload")
        captured = capfd.readouterr()
        assert captured.out == "payload\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(no_color=True)
        getattr(mgr, method)("message")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "message" in captured.err


# ------------------------------------------------------------------ #
# Quiet and verbose
# ------------------------------------------------------------------ #


class TestQuietMode:
    """--quiet hides chatter but never warnings, errors or data."""

    @pytest.mark.parametrize("method", ["info", "success", "suggest"])
    def test_quiet_suppresses(self, capfd, non_tty, method):
        mgr = OutputManager(no_color=True, quiet=True)
        getattr(mgr, method)("hidden")
        assert capfd.readouterr().err == ""

    def test_quiet_does_not_suppress_warning(self, capfd, non_tty):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.warning("careful")
        assert "careful" in capfd.readouterr().err

    def test_quiet_does_not_suppress_error(self, capfd, non_tty):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.error("broken")
        assert "broken" in capfd.readouterr().err

    def test_quiet_does_not_suppress_stdout_data(self, capfd, non_tty):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.print_data("data")
        assert capfd.readouterr().out == "data\n"


class TestVerboseMode:
    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(no_color=True).debug("trace")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        OutputManager(no_color=True, verbose=True).debug("trace")
        assert capfd.readouterr().err == "[debug] trace\n"

    def test_verbose_property(self, non_tty):
        assert OutputManager(verbose=True).is_verbose is True
        assert OutputManager().is_verbose is False


# ------------------------------------------------------------------ #
# print_json
# ------------------------------------------------------------------ #


class TestPrintJson:
    def test_json_mode_is_parseable(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_json({"name": "Petstore", "folders": 2})
        captured = capfd.readouterr()
        assert json.loads(captured.out) == {"name": "Petstore", "folders": 2}
        assert captured.err == ""

    def test_output_is_indented(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_json({"a": 1})
        assert capfd.readouterr().out == '{\n  "a": 1\n}\n'

    def test_unicode_not_escaped(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_json({"title": "Café"})
        assert "Café" in capfd.readouterr().out

    def test_rich_mode_highlights(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_json({"key": "value"})
        out = capfd.readouterr().out
        assert "key" in out
        assert "value" in out


# ------------------------------------------------------------------ #
# print_table
# ------------------------------------------------------------------ #


class TestPrintTable:
    """Test print_table in all three output modes."""

    def test_table_json_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_table(["Folder", "Requests"], [["Pets", "4"], ["Store", "2"]])
        parsed = json.loads(capfd.readouterr().out)
        assert parsed == [
            {"Folder": "Pets", "Requests": "4"},
            {"Folder": "Store", "Requests": "2"},
        ]

    def test_table_plain_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_table(["Folder", "Requests"], [["Pets", "4"]], title="Folders")
        lines = capfd.readouterr().out.strip().split("\n")
        assert lines == ["Folder\tRequests", "Pets\t4"]

    def test_table_rich_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_table(["Folder", "Requests"], [["Pets", "4"]], title="Folders")
        out = capfd.readouterr().out
        assert "Folder" in out
        assert "Pets" in out
        assert "Folders" in out

    def test_table_empty_rows(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_table(["col1"], [])
        assert json.loads(capfd.readouterr().out) == []


# ------------------------------------------------------------------ #
# print_fields
# ------------------------------------------------------------------ #


class TestPrintFields:
    def test_aligned_labels(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_fields([("Title", "Petstore"), ("Endpoints", "6")])
        assert capfd.readouterr().out.splitlines() == [
            "Title:     Petstore",
            "Endpoints: 6",
        ]

    def test_empty_values_skipped(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_fields([("Title", "API"), ("Description", "")])
        assert capfd.readouterr().out == "Title: API\n"

    def test_nothing_to_print(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_fields([("Servers", "")])
        assert capfd.readouterr().out == ""

    def test_rich_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_fields([("Name", "Petstore API")])
        assert "Name:" in capfd.readouterr().out


# ------------------------------------------------------------------ #
# Diagnostic formatting
# ------------------------------------------------------------------ #


class TestDiagnosticFormatting:
    def test_warning_prefix(self, capfd, non_tty):
        OutputManager(no_color=True).warning("no servers")
        assert capfd.readouterr().err == "Warning: no servers\n"

    def test_error_prefix(self, capfd, non_tty):
        OutputManager(no_color=True).error("bad file")
        assert capfd.readouterr().err == "Error: bad file\n"

    def test_suggest_has_arrow(self, capfd, non_tty):
        OutputManager(no_color=True).suggest("try --dry-run")
        assert capfd.readouterr().err == "→ try --dry-run\n"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        assert isinstance(get_output(), OutputManager)

    def test_set_output_overrides(self):
        mgr = OutputManager(format=OutputFormat.JSON)
        set_output(mgr)
        assert get_output() is mgr

    def test_reset_output_clears(self):
        mgr = OutputManager()
        set_output(mgr)
        reset_output()
        assert get_output() is not mgr


class TestConvenienceFunctions:
    """Module-level helpers delegate to the global manager."""

    @pytest.fixture(autouse=True)
    def _plain(self, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True))

    def test_print_json(self, capfd):
        output_module.print_json([1, 2])
        assert json.loads(capfd.readouterr().out) == [1, 2]

    def test_print_fields(self, capfd):
        output_module.print_fields([("File", "api.json")])
        assert capfd.readouterr().out == "File: api.json\n"

    def test_print_table(self, capfd):
        output_module.print_table(["a"], [["1"]])
        assert capfd.readouterr().out == "a\n1\n"

    @pytest.mark.parametrize(
        ("func", "expected"),
        [
            ("info", "msg\n"),
            ("success", "msg\n"),
            ("warning", "Warning: msg\n"),
            ("error", "Error: msg\n"),
            ("suggest", "→ msg\n"),
            ("debug", "[debug] msg\n"),
        ],
    )
    def test_diagnostics(self, capfd, func, expected):
        getattr(output_module, func)("msg")
        assert capfd.readouterr().err == expected
