"""Project configuration with atomic writes and precedence resolution.

This module handles the persistent configuration for protocrun:

* **Project file** -- ``protocrun.json`` in the working directory (or the
  file named by ``--config`` / ``PROTOCRUN_CONFIG``), deserialised into a
  :class:`~protocrun.models.ProjectConfig`. Relative paths inside it are
  resolved against the file's own directory.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, the project file, and defaults.
* **Builder wiring** -- :func:`builder_from_config` feeds a project config
  into an :class:`~protocrun.invocation.InvocationBuilder`, which enforces
  every invocation rule.
* **Data directory** -- XDG compliant on Linux/BSD, ``~/.protocrun/`` on
  macOS and Windows; holds crash logs.

File writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) so a crash never leaves a half-written config.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from protocrun.exceptions import ConfigError, InvocationConfigError
from protocrun.invocation import InvocationBuilder
from protocrun.models import ProjectConfig
from protocrun.plugins.descriptor import PluginDescriptor

_APP_NAME = "protocrun"
PROJECT_CONFIG_FILENAME = "protocrun.json"

ENV_CONFIG = "PROTOCRUN_CONFIG"
ENV_EXECUTABLE = "PROTOCRUN_EXECUTABLE"
ENV_TEMP_DIR = "PROTOCRUN_TEMP_DIR"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG base directory layout (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/protocrun/`` (default
    ``~/.local/share/protocrun/``). On macOS/Windows: ``~/.protocrun/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def executable_suffix() -> str:
    """Suffix of executables on this platform (``.exe`` on Windows)."""
    return ".exe" if platform.system() == "Windows" else ""


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Project config ---


def find_project_config(cli_config: Optional[str] = None) -> Path:
    """Locate the project config file.

    Precedence: ``cli_config`` > ``$PROTOCRUN_CONFIG`` > ``./protocrun.json``.
    The returned path is not required to exist.
    """
    if cli_config:
        return Path(cli_config)
    env_config = os.environ.get(ENV_CONFIG)
    if env_config:
        return Path(env_config)
    return Path.cwd() / PROJECT_CONFIG_FILENAME


def load_project_config(path: Path) -> ProjectConfig:
    """Load and validate a project config, resolving relative paths.

    Raises:
        ConfigError: If the file is missing, contains invalid JSON, or
            fails Pydantic validation.
    """
    if not path.is_file():
        raise ConfigError(f"Project config not found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        config = ProjectConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    return _resolve_relative_paths(config, path.absolute().parent)


def save_project_config(config: ProjectConfig, path: Path) -> None:
    """Persist a project config atomically."""
    data = config.model_dump(mode="json", exclude_none=True)
    _atomic_write(path, json.dumps(data, indent=2) + "\n")


def _resolve_relative_paths(config: ProjectConfig, base: Path) -> ProjectConfig:
    def resolve(value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        candidate = Path(value).expanduser()
        if not candidate.is_absolute():
            candidate = base / candidate
        return str(candidate)

    update: dict[str, object] = {
        "proto_paths": [resolve(p) for p in config.proto_paths],
        "proto_files": [resolve(p) for p in config.proto_files],
        "outputs": {lang: resolve(d) for lang, d in config.outputs.items()},
        "custom_output": resolve(config.custom_output),
        "plugin_directory": resolve(config.plugin_directory),
        "temp_directory": resolve(config.temp_directory),
    }
    if config.descriptor_set is not None:
        update["descriptor_set"] = config.descriptor_set.model_copy(
            update={"path": resolve(config.descriptor_set.path)}
        )
    # Bare executable names ("protoc") are looked up on PATH, not resolved.
    if os.sep in config.executable or (os.altsep and os.altsep in config.executable):
        update["executable"] = resolve(config.executable)
    return config.model_copy(update=update)


# --- Precedence resolution ---


def resolve_config(
    cli_config: Optional[str] = None,
    cli_executable: Optional[str] = None,
    cli_use_argument_file: Optional[bool] = None,
) -> ProjectConfig:
    """Resolve the effective project config.

    Precedence (high to low):
        1. CLI flags (``cli_executable``, ``cli_use_argument_file``)
        2. Environment variables (``PROTOCRUN_EXECUTABLE``,
           ``PROTOCRUN_TEMP_DIR``)
        3. Project config file
        4. Defaults

    Raises:
        ConfigError: If the project config cannot be loaded.
    """
    config = load_project_config(find_project_config(cli_config))

    env_executable = os.environ.get(ENV_EXECUTABLE)
    if env_executable:
        config.executable = env_executable
    env_temp_dir = os.environ.get(ENV_TEMP_DIR)
    if env_temp_dir:
        config.temp_directory = env_temp_dir

    if cli_executable is not None:
        config.executable = cli_executable
    if cli_use_argument_file is not None:
        config.use_argument_file = cli_use_argument_file

    # Argument files default to the system temp dir when none is configured.
    if config.use_argument_file and config.temp_directory is None:
        config.temp_directory = tempfile.gettempdir()

    return config


def builder_from_config(config: ProjectConfig) -> InvocationBuilder:
    """Create an :class:`InvocationBuilder` populated from *config*.

    Import paths are registered before source files so the containment
    check sees them.

    Raises:
        InvocationConfigError: On the first invalid setting.
    """
    builder = InvocationBuilder(config.executable)
    builder.add_proto_paths(config.proto_paths)
    builder.add_proto_files(config.proto_files)

    for language, directory in config.outputs.items():
        builder.set_output_directory(language, directory)

    for plugin in config.plugins:
        try:
            descriptor = PluginDescriptor(
                id=plugin.id,
                executable_suffix=plugin.executable_suffix or executable_suffix(),
            )
        except ValidationError as exc:
            raise InvocationConfigError(
                f"Invalid plugin {plugin.id!r}: {exc.errors()[0]['msg']}", field="plugin"
            ) from exc
        builder.add_plugin(descriptor)
    if config.plugin_directory is not None:
        builder.set_plugin_directory(config.plugin_directory)

    if config.custom_plugin is not None:
        builder.set_custom_plugin_id(config.custom_plugin.id)
        if config.custom_plugin.executable is not None:
            builder.set_custom_plugin_executable(config.custom_plugin.executable)
        if config.custom_plugin.parameter is not None:
            builder.set_custom_plugin_parameter(config.custom_plugin.parameter)
    if config.custom_output is not None:
        builder.set_custom_output_directory(config.custom_output)

    if config.descriptor_set is not None:
        builder.with_descriptor_set(
            config.descriptor_set.path,
            include_imports=config.descriptor_set.include_imports,
            include_source_info=config.descriptor_set.include_source_info,
        )

    if config.temp_directory is not None:
        builder.set_temp_directory(config.temp_directory)
    builder.use_argument_file(config.use_argument_file)
    return builder
