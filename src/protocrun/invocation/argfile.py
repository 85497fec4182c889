"""Argument files consumed through protoc's ``@file`` convention.

Long source lists can exceed the OS command-line limit. protoc accepts a
single ``@<path>`` argument instead, reading one argument per line from a
UTF-8 text file.
"""

from __future__ import annotations

import atexit
import os
import tempfile
from pathlib import Path
from typing import Iterable

_FILE_PREFIX = "protoc"


def write_argument_file(arguments: Iterable[str], directory: Path) -> Path:
    """Write *arguments* one per line into a new file inside *directory*.

    The file is registered for removal when the interpreter exits. Removal
    is best effort. A partially written file is removed immediately.

    Args:
        arguments: Rendered protoc arguments (without the executable).
        directory: Existing directory to create the file in.

    Returns:
        Absolute path of the written file.

    Raises:
        OSError: If the file cannot be created or written, including when
            an argument cannot be encoded as UTF-8 (e.g. a path holding
            undecodable bytes).
    """
    handle = tempfile.NamedTemporaryFile(
        mode="w",
        dir=directory,
        prefix=_FILE_PREFIX,
        suffix=".tmp",
        delete=False,
        encoding="utf-8",
    )
    path = Path(handle.name).absolute()
    try:
        with handle:
            for argument in arguments:
                handle.write(argument)
                handle.write("\n")
    except UnicodeError as exc:
        _remove_quietly(path)
        raise OSError(f"Cannot write {path} as UTF-8: {exc}") from exc
    except OSError:
        _remove_quietly(path)
        raise
    atexit.register(_remove_quietly, path)
    return path


def _remove_quietly(path: Path) -> None:
    try:
        os.unlink(path)
    except OSError:
        pass
