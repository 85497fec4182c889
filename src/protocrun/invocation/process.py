"""Process launch seam for the compiler.

:func:`launch` runs a command to completion with no standard input and
both output streams captured as bytes. Process-creation failures are
translated into :class:`~protocrun.exceptions.LaunchError`; the retry
policy lives in :meth:`~protocrun.invocation.Invocation.execute`.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Sequence

from protocrun.exceptions import LaunchError


@dataclass(frozen=True)
class CompletedLaunch:
    """Outcome of a process that started and exited."""

    exit_code: int
    stdout: bytes
    stderr: bytes


def launch(command: Sequence[str]) -> CompletedLaunch:
    """Run *command* and wait for it to exit.

    Args:
        command: Executable followed by its arguments. No shell is involved.

    Returns:
        A :class:`CompletedLaunch` with the exit status and raw output.

    Raises:
        LaunchError: If the process could not be created. An
            :class:`OSError` from the OS is attached as ``cause`` (transient,
            retryable); a malformed command line has no cause (fatal).
    """
    try:
        result = subprocess.run(
            list(command),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
        )
    except OSError as exc:
        raise LaunchError(f"Unable to start {command[0]}: {exc}", cause=exc) from exc
    except ValueError as exc:
        raise LaunchError(f"Invalid command line for {command[0]}: {exc}") from None

    return CompletedLaunch(
        exit_code=result.returncode,
        stdout=result.stdout or b"",
        stderr=result.stderr or b"",
    )
