"""Typer application and console-script entry point.

The root callback installs a fresh :class:`~protocrun.output.OutputManager`
and points the ``protocrun`` logger at its stderr console, so the
``[PROTOC]`` diagnostics and retry warnings show up next to the CLI's own
messages. ``--verbose`` lowers the logger to DEBUG.

:func:`main` is what ``protocrun`` on the command line runs. It turns a
stray :class:`~protocrun.exceptions.ProtocRunError` into its exit code and
anything else into a crash log.
"""

from __future__ import annotations

import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path

import typer

from protocrun import __version__
from protocrun.commands.init import init_command
from protocrun.commands.run import run_command, show_command
from protocrun.exceptions import ProtocRunError
from protocrun.exit_codes import EXIT_GENERIC_FAILURE
from protocrun.output import OutputManager, error, set_output

EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="protocrun",
    help="Build, inspect and run protoc invocations described by protocrun.json.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("init")(init_command)
app.command("show")(show_command)
app.command("run")(run_command)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"protocrun {__version__}")
        raise typer.Exit()


def _route_logging(output: OutputManager, verbose: bool) -> None:
    """Send ``protocrun.*`` log records to *output*'s stderr only."""
    package_logger = logging.getLogger("protocrun")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.addHandler(output.log_handler())
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Print the protocrun version and exit.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log the resolved invocation before acting."
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print data, warnings and errors."),
    no_color: bool = typer.Option(False, "--no-color", help="Plain, uncoloured output."),
) -> None:
    """Configure output and logging for the sub-command that follows."""
    output = OutputManager(no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _route_logging(output, verbose)


def _write_crash_log() -> Path:
    """Save the traceback being handled under ``<data dir>/logs``."""
    from protocrun.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    path.write_text(traceback.format_exc(), encoding="utf-8")
    return path


def main() -> None:
    """Run the CLI and exit.

    Raises:
        SystemExit: Always; Typer raises it on normal completion too.
    """
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except ProtocRunError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
