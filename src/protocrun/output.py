"""Console output for the protocrun CLI.

Two streams, two purposes:

* **stdout** carries data only: the rendered command line for ``show`` and
  whatever protoc itself printed for ``run``. It stays pipeable.
* **stderr** carries every diagnostic: status lines, warnings, errors,
  next-step hints, and the records of the ``protocrun`` logger.

Colour is dropped when ``NO_COLOR`` is set, ``TERM=dumb``, or ``--no-color``
is passed; stdout is rendered with Rich only on an interactive terminal.

:class:`OutputManager` owns the consoles. The CLI installs one instance per
invocation with :func:`set_output`; library-side code calls the module
helpers (:func:`info`, :func:`error`, ...), which forward to it.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax


class OutputFormat(str, Enum):
    """How stdout data is rendered.

    ``AUTO`` picks ``RICH`` on a colour-capable TTY and ``PLAIN`` elsewhere.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        format: Rendering of stdout data; ``AUTO`` is resolved immediately.
        no_color: Strip colour and markup from both streams.
        quiet: Hide info, success and suggestion lines.
        verbose: Show debug lines.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._plain_text = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._plain_text:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._plain_text,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._plain_text, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print one line of data to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_raw(self, text: str) -> None:
        """Write *text* to stdout as-is (no newline appended)."""
        sys.stdout.write(text)
        sys.stdout.flush()

    def print_command(self, command: list[str]) -> None:
        """Print a command line.

        ``JSON`` prints an array, ``PLAIN`` one argument per line, and
        ``RICH`` a highlighted block with the same layout.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(json.dumps(command, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.RICH:
            self._stdout.print(
                Syntax("\n".join(command), "bash", theme="monokai", word_wrap=True)
            )
            return
        for argument in command:
            self.print_data(argument)

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def _emit(self, message: str, style: Optional[str] = None, label: str = "") -> None:
        if self._plain_text:
            print(f"{label}{message}", file=sys.stderr, flush=True)
            return
        if label:
            label = f"[{style}]{label}[/{style}]" if style else label
            self._stderr.print(f"{label}{message}")
        elif style:
            self._stderr.print(f"[{style}]{message}[/{style}]")
        else:
            self._stderr.print(message)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._emit(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._emit(message, "green")

    def warning(self, message: str) -> None:
        """Always shown, even with ``--quiet``."""
        self._emit(message, "yellow", "Warning: ")

    def error(self, message: str) -> None:
        """Always shown, even with ``--quiet``."""
        self._emit(message, "bold red", "Error: ")

    def error_raw(self, text: str) -> None:
        """Write compiler diagnostics to stderr as-is."""
        sys.stderr.write(text)
        sys.stderr.flush()

    def suggest(self, message: str) -> None:
        """Print a next-step hint such as ``→ protocrun show``."""
        if not self._quiet:
            self._emit(f"→ {message}", "dim")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._emit(message, "dim", "debug: ")

    def log_handler(self) -> logging.Handler:
        """Return a logging handler bound to this manager's stderr."""
        if self._plain_text:
            handler: logging.Handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
            return handler
        return RichHandler(console=self._stderr, show_time=False, show_path=False, markup=False)


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (tests swap streams between runs)."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
