"""Init command -- write a starter ``protocrun.json``.

Implements the ``protocrun init`` top-level command. It scaffolds a
project config in the working directory pointing at a ``proto`` import
path and a Java output directory, ready to be edited.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from protocrun.exit_codes import EXIT_INVALID_USAGE
from protocrun.output import error, info, success, suggest


def init_command(
    executable: str = typer.Option(
        "protoc", "--executable", "-e", help="protoc executable to record."
    ),
    proto_path: str = typer.Option(
        "proto", "--proto-path", help="Import path, relative to the config file."
    ),
    java_out: Optional[str] = typer.Option(
        "build/generated/java", "--java-out", help="Java output directory."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing protocrun.json."
    ),
) -> None:
    """Create a protocrun.json in the current directory.

    Raises:
        typer.Exit: With ``EXIT_INVALID_USAGE`` if the file exists and
            ``--force`` was not given.
    """
    from protocrun.config import PROJECT_CONFIG_FILENAME, save_project_config
    from protocrun.models import OutputLanguage, ProjectConfig

    path = Path.cwd() / PROJECT_CONFIG_FILENAME
    if path.exists() and not force:
        error(f"{PROJECT_CONFIG_FILENAME} already exists at {path}")
        suggest("Re-run with --force to overwrite it")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    outputs = {OutputLanguage.JAVA: java_out} if java_out else {}
    config = ProjectConfig(
        executable=executable,
        proto_paths=[proto_path],
        outputs=outputs,
    )
    save_project_config(config, path)

    success(f"Wrote {path}")
    info("List your .proto files under 'proto_files' before running.")
    suggest("protocrun show")
