"""Shared test fixtures for protocrun.

Provides reusable fixtures for building a proto source tree on disk,
creating isolated config environments, managing output and logging state,
and running CLI commands. These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from protocrun.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_package_logger() -> None:
    """Undo the handler and propagation changes made by the CLI callback.

    The root callback attaches a handler bound to the runner's stderr and
    stops propagation, which would hide records from ``caplog`` in later
    tests.
    """
    yield
    package_logger = logging.getLogger("protocrun")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


# ---------------------------------------------------------------------------
# Source tree fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def proto_tree(tmp_path: Path) -> Path:
    """Create a small proto project under tmp_path.

    Layout::

        proto/a.proto
        proto/sub/b.proto
        proto/notes.txt
        other/c.proto
        out/java/  out/python/  out/custom/
        plugins/
        tmp/

    Returns:
        The tmp_path root directory.
    """
    (tmp_path / "proto" / "sub").mkdir(parents=True)
    (tmp_path / "proto" / "a.proto").write_text('syntax = "proto3";\n')
    (tmp_path / "proto" / "sub" / "b.proto").write_text('syntax = "proto3";\n')
    (tmp_path / "proto" / "notes.txt").write_text("not a proto\n")
    (tmp_path / "other").mkdir()
    (tmp_path / "other" / "c.proto").write_text('syntax = "proto3";\n')
    for name in ("java", "python", "custom"):
        (tmp_path / "out" / name).mkdir(parents=True)
    (tmp_path / "plugins").mkdir()
    (tmp_path / "tmp").mkdir()
    return tmp_path


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_DATA_HOME to a subdirectory of tmp_path so that crash logs
    never touch the real user directory. Clears all PROTOCRUN_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "PROTOCRUN_CONFIG",
        "PROTOCRUN_EXECUTABLE",
        "PROTOCRUN_TEMP_DIR",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
