"""Run and show commands -- build an invocation from the project config.

* ``protocrun show`` prints the full protoc command line without running it.
* ``protocrun run`` executes protoc, relays its output, and exits with
  :data:`~protocrun.exit_codes.EXIT_COMPILER_FAILURE` when protoc reports
  errors.

Both resolve the project config via :func:`~protocrun.config.resolve_config`
and feed it through :func:`~protocrun.config.builder_from_config`, so every
configuration error is reported before protoc is launched.
"""

from __future__ import annotations

from typing import Optional

import typer

from protocrun.exceptions import LaunchError, ProtocRunError
from protocrun.exit_codes import EXIT_COMPILER_FAILURE
from protocrun.invocation import Invocation
from protocrun.output import (
    OutputFormat,
    OutputManager,
    debug,
    error,
    get_output,
    success,
    suggest,
)


def _build_invocation(
    config_path: Optional[str],
    executable: Optional[str] = None,
    use_argument_file: Optional[bool] = None,
) -> Invocation:
    """Resolve config and build the invocation.

    Raises:
        typer.Exit: With the error's exit code when the config cannot be
            loaded or the builder rejects a setting.
    """
    from protocrun.config import builder_from_config, resolve_config

    try:
        config = resolve_config(
            cli_config=config_path,
            cli_executable=executable,
            cli_use_argument_file=use_argument_file,
        )
        invocation = builder_from_config(config).build()
    except ProtocRunError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    debug(f"Resolved {len(invocation.config.proto_files)} proto file(s)")
    return invocation


def show_command(
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to protocrun.json."
    ),
    executable: Optional[str] = typer.Option(
        None, "--executable", "-e", help="protoc executable to use."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print a JSON array."),
) -> None:
    """Print the protoc command line without running it."""
    invocation = _build_invocation(config_path, executable)
    invocation.log_execution_parameters()

    command = invocation.command_line()
    if json_output:
        OutputManager(format=OutputFormat.JSON).print_command(command)
    else:
        get_output().print_command(command)


def run_command(
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to protocrun.json."
    ),
    executable: Optional[str] = typer.Option(
        None, "--executable", "-e", help="protoc executable to use."
    ),
    use_argument_file: Optional[bool] = typer.Option(
        None,
        "--argument-file/--no-argument-file",
        help="Pass arguments through an @file (overrides the config).",
    ),
) -> None:
    """Compile the configured .proto files with protoc."""
    invocation = _build_invocation(config_path, executable, use_argument_file)
    invocation.log_execution_parameters()

    try:
        exit_code = invocation.execute()
    except LaunchError as exc:
        error(str(exc))
        suggest("Check the protoc path, or set PROTOCRUN_EXECUTABLE")
        raise typer.Exit(code=exc.exit_code) from None

    output = get_output()
    if invocation.output:
        output.print_raw(invocation.output)
    if invocation.error:
        output.error_raw(invocation.error)

    if exit_code != 0:
        error(f"protoc exited with code {exit_code}")
        raise typer.Exit(code=EXIT_COMPILER_FAILURE)

    success(f"Compiled {len(invocation.config.proto_files)} proto file(s)")
