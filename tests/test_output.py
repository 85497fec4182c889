"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- Command printing in plain and JSON modes
- Log handler selection
- Global instance management
"""

from __future__ import annotations

import json
import logging

import pytest
from rich.logging import RichHandler

from protocrun.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)
from protocrun import output as output_module


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
    monkeypatch.setattr("protocrun.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("protocrun.output._is_tty", lambda: True)


@pytest.fixture()
def plain(non_tty) -> OutputManager:
    return OutputManager(format=OutputFormat.PLAIN, no_color=True)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    """Test that AUTO format resolves correctly based on environment."""

    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.RICH

    def test_no_color_flag_forces_plain(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO, no_color=True)
        assert mgr.format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, non_tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


# ------------------------------------------------------------------ #
# NO_COLOR / TERM=dumb detection
# ------------------------------------------------------------------ #


class TestColorDisabling:
    """Test that NO_COLOR and TERM=dumb are respected."""

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
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Test that data goes to stdout and diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, plain):
        plain.print_data("hello world")
        captured = capfd.readouterr()
        assert "hello world" in captured.out
        assert captured.err == ""

    def test_print_raw_adds_no_newline(self, capfd, plain):
        plain.print_raw("generated")
        assert capfd.readouterr().out == "generated"

    def test_error_raw_goes_to_stderr_unchanged(self, capfd, plain):
        plain.error_raw("a.proto:1:1: oops\n")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == "a.proto:1:1: oops\n"

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, plain, method):
        getattr(plain, method)("message text")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "message text" in captured.err

    def test_error_prefixed(self, capfd, plain):
        plain.error("something broke")
        assert "Error: something broke" in capfd.readouterr().err


# ------------------------------------------------------------------ #
# Quiet and verbose
# ------------------------------------------------------------------ #


class TestQuietMode:
    """Test that --quiet suppresses info/success/suggest but not warning/error."""

    @pytest.mark.parametrize("method", ["info", "success", "suggest"])
    def test_quiet_suppresses(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("should not appear")
        assert capfd.readouterr().err == ""

    @pytest.mark.parametrize("method", ["warning", "error"])
    def test_quiet_keeps(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("important")
        assert "important" in capfd.readouterr().err

    def test_quiet_does_not_suppress_stdout_data(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.print_data("important data")
        assert "important data" in capfd.readouterr().out


class TestVerboseMode:
    def test_debug_hidden_by_default(self, capfd, plain):
        plain.debug("hidden")
        assert capfd.readouterr().err == ""

    def test_debug_shown_when_verbose(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
        mgr.debug("visible")
        assert "debug: visible" in capfd.readouterr().err


# ------------------------------------------------------------------ #
# Command printing
# ------------------------------------------------------------------ #


class TestPrintCommand:
    COMMAND = ["protoc", "--proto_path=/p", "--java_out=/out", "/p/a.proto"]

    def test_plain_one_argument_per_line(self, capfd, plain):
        plain.print_command(self.COMMAND)
        assert capfd.readouterr().out.splitlines() == self.COMMAND

    def test_json_array(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_command(self.COMMAND)
        assert json.loads(capfd.readouterr().out) == self.COMMAND


# ------------------------------------------------------------------ #
# Logging
# ------------------------------------------------------------------ #


class TestLogHandler:
    def test_plain_handler_without_color(self, plain):
        handler = plain.log_handler()
        assert isinstance(handler, logging.StreamHandler)
        assert not isinstance(handler, RichHandler)

    def test_rich_handler_with_color(self, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.PLAIN)
        assert isinstance(mgr.log_handler(), RichHandler)


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        assert isinstance(get_output(), OutputManager)

    def test_set_output_installs_instance(self):
        mgr = OutputManager(quiet=True)
        set_output(mgr)
        assert get_output() is mgr

    def test_reset_output_clears(self):
        mgr = OutputManager()
        set_output(mgr)
        reset_output()
        assert get_output() is not mgr

    def test_convenience_functions_use_global(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.print_data("data line")
        output_module.warning("careful")
        captured = capfd.readouterr()
        assert "data line" in captured.out
        assert "careful" in captured.err
