"""Fluent, fail-fast builder for :class:`~protocrun.invocation.Invocation`.

Every setter validates its argument immediately and raises
:class:`~protocrun.exceptions.InvocationConfigError` naming the offending
field. :meth:`InvocationBuilder.build` then runs the cross-field checks
and snapshots the accumulated state into a frozen
:class:`~protocrun.models.InvocationConfig`.

Source files are checked against the import paths registered *so far*,
so import paths must be added before the files that live under them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from protocrun.exceptions import InvocationConfigError
from protocrun.invocation.invocation import LOG_PREFIX, Invocation
from protocrun.models import (
    PARAMETER_SEPARATOR,
    PRIMARY_LANGUAGE,
    RESERVED_GENERATOR_IDS,
    CustomGenerator,
    DescriptorSetOptions,
    InvocationConfig,
    OutputLanguage,
)
from protocrun.plugins.descriptor import PluginDescriptor

logger = logging.getLogger(__name__)

PROTO_SUFFIX = ".proto"

PathLike = Union[str, os.PathLike]


class InvocationBuilder:
    """Accumulates protoc settings and produces an :class:`Invocation`.

    Additive operations (``add_*``) collect into insertion-ordered sets, so
    repeating a value is harmless. A builder is meant to produce a single
    invocation; later changes do not affect invocations already built.

    Args:
        executable: Path or name of the protoc binary.

    Raises:
        InvocationConfigError: If *executable* is missing or empty.
    """

    def __init__(self, executable: Optional[str]) -> None:
        if not executable:
            raise InvocationConfigError("'executable' is null or empty", field="executable")
        self._executable = str(executable)
        # dicts keep insertion order and collapse duplicates
        self._proto_paths: dict[Path, None] = {}
        self._proto_path_keys: set[str] = set()
        self._proto_files: dict[Path, None] = {}
        self._plugins: dict[PluginDescriptor, None] = {}
        self._output_directories: dict[OutputLanguage, Path] = {}
        self._custom_output_directory: Optional[Path] = None
        self._plugin_directory: Optional[Path] = None
        self._custom_plugin_id: Optional[str] = None
        self._custom_plugin_executable: Optional[str] = None
        self._custom_plugin_parameter: Optional[str] = None
        self._descriptor_set: Optional[DescriptorSetOptions] = None
        self._use_argument_file = False
        self._temp_directory: Optional[Path] = None

    # ------------------------------------------------------------------ #
    # Import paths and sources
    # ------------------------------------------------------------------ #

    def add_proto_path(self, directory: Optional[PathLike]) -> InvocationBuilder:
        """Register an import path (``--proto_path``)."""
        path = _require_directory(directory, "proto_path")
        self._proto_paths[path] = None
        self._proto_path_keys.add(_normalize(path))
        return self

    def add_proto_paths(self, directories: Iterable[PathLike]) -> InvocationBuilder:
        for directory in directories:
            self.add_proto_path(directory)
        return self

    def add_proto_file(self, proto_file: Optional[PathLike]) -> InvocationBuilder:
        """Add a ``.proto`` source file.

        The file must exist and live in a registered import path or in a
        directory nested below one.

        Raises:
            InvocationConfigError: If the file is missing, has the wrong
                extension, or is outside every import path.
        """
        path = _require_not_none(proto_file, "proto_file")
        if not path.is_file():
            raise InvocationConfigError(f"'proto_file' is not a file: {path}", field="proto_file")
        if path.suffix != PROTO_SUFFIX:
            raise InvocationConfigError(
                f"'proto_file' does not have a {PROTO_SUFFIX} extension: {path}",
                field="proto_file",
            )
        if not self._is_in_proto_path(path):
            raise InvocationConfigError(
                f"'proto_file' is not under any registered proto path: {path}",
                field="proto_file",
            )
        self._proto_files[path] = None
        return self

    def add_proto_files(self, proto_files: Iterable[PathLike]) -> InvocationBuilder:
        for proto_file in proto_files:
            self.add_proto_file(proto_file)
        return self

    def _is_in_proto_path(self, proto_file: Path) -> bool:
        directory = Path(_normalize(proto_file)).parent
        while True:
            if str(directory) in self._proto_path_keys:
                return True
            if directory.parent == directory:
                return False
            directory = directory.parent

    # ------------------------------------------------------------------ #
    # Output targets
    # ------------------------------------------------------------------ #

    def set_output_directory(
        self, language: Union[OutputLanguage, str], directory: Optional[PathLike]
    ) -> InvocationBuilder:
        """Set the output directory of a built-in generator."""
        try:
            language = OutputLanguage(language)
        except ValueError:
            raise InvocationConfigError(
                f"Unknown output language: {language!r}", field="language"
            ) from None
        field = f"{language.value}_output_directory"
        self._output_directories[language] = _require_directory(directory, field)
        return self

    def set_custom_output_directory(self, directory: Optional[PathLike]) -> InvocationBuilder:
        """Set the output directory of the custom plugin."""
        self._custom_output_directory = _require_directory(directory, "custom_output_directory")
        return self

    # ------------------------------------------------------------------ #
    # Plugins
    # ------------------------------------------------------------------ #

    def add_plugin(self, plugin: Optional[PluginDescriptor]) -> InvocationBuilder:
        """Bind a plugin to the primary output directory."""
        if plugin is None:
            raise InvocationConfigError("'plugin' is null", field="plugin")
        if not isinstance(plugin, PluginDescriptor):
            raise InvocationConfigError(
                f"'plugin' is not a PluginDescriptor: {plugin!r}", field="plugin"
            )
        self._plugins[plugin] = None
        return self

    def add_plugins(self, plugins: Iterable[PluginDescriptor]) -> InvocationBuilder:
        for plugin in plugins:
            self.add_plugin(plugin)
        return self

    def set_plugin_directory(self, directory: Optional[PathLike]) -> InvocationBuilder:
        """Set the directory plugin executables are resolved in."""
        self._plugin_directory = _require_directory(directory, "plugin_directory")
        return self

    def set_custom_plugin_id(self, plugin_id: Optional[str]) -> InvocationBuilder:
        """Set the generator id of the custom plugin.

        Raises:
            InvocationConfigError: If the id is empty or names a built-in
                generator.
        """
        if plugin_id is None:
            raise InvocationConfigError("'custom_plugin_id' is null", field="custom_plugin_id")
        if not plugin_id:
            raise InvocationConfigError("'custom_plugin_id' is empty", field="custom_plugin_id")
        if plugin_id in RESERVED_GENERATOR_IDS:
            raise InvocationConfigError(
                f"'custom_plugin_id' matches one of the built-in protoc plugins: {plugin_id}",
                field="custom_plugin_id",
            )
        self._custom_plugin_id = plugin_id
        return self

    def set_custom_plugin_executable(self, executable: Optional[PathLike]) -> InvocationBuilder:
        if executable is None or not str(executable):
            raise InvocationConfigError(
                "'custom_plugin_executable' is null or empty",
                field="custom_plugin_executable",
            )
        self._custom_plugin_executable = str(executable)
        return self

    def set_custom_plugin_parameter(self, parameter: Optional[str]) -> InvocationBuilder:
        """Set the parameter passed to the custom plugin (and ``javanano``).

        Raises:
            InvocationConfigError: If the parameter contains ``:``.
        """
        if parameter is None:
            raise InvocationConfigError(
                "'custom_plugin_parameter' is null", field="custom_plugin_parameter"
            )
        if PARAMETER_SEPARATOR in parameter:
            raise InvocationConfigError(
                "'custom_plugin_parameter' contains illegal characters: "
                f"{PARAMETER_SEPARATOR!r}",
                field="custom_plugin_parameter",
            )
        self._custom_plugin_parameter = parameter
        return self

    # ------------------------------------------------------------------ #
    # Descriptor set and execution options
    # ------------------------------------------------------------------ #

    def with_descriptor_set(
        self,
        descriptor_set_file: Optional[PathLike],
        include_imports: bool = False,
        include_source_info: bool = False,
    ) -> InvocationBuilder:
        """Also write a descriptor set to *descriptor_set_file*.

        Raises:
            InvocationConfigError: If the file's parent directory does not
                exist.
        """
        path = _require_not_none(descriptor_set_file, "descriptor_set_file")
        if not path.absolute().parent.is_dir():
            raise InvocationConfigError(
                f"'descriptor_set_file' parent directory does not exist: {path.parent}",
                field="descriptor_set_file",
            )
        self._descriptor_set = DescriptorSetOptions(
            path=path,
            include_imports=include_imports,
            include_source_info=include_source_info,
        )
        return self

    def set_temp_directory(self, directory: Optional[PathLike]) -> InvocationBuilder:
        """Set the directory argument files are written to."""
        self._temp_directory = _require_directory(directory, "temp_directory")
        return self

    def use_argument_file(self, use_argument_file: bool = True) -> InvocationBuilder:
        """Pass arguments to protoc through an ``@file`` instead of argv."""
        self._use_argument_file = use_argument_file
        return self

    # ------------------------------------------------------------------ #
    # Build
    # ------------------------------------------------------------------ #

    def build(self) -> Invocation:
        """Validate cross-field constraints and create the invocation.

        Raises:
            InvocationConfigError: If no source file or no output target is
                configured, a custom output lacks a plugin id, or argument
                file mode lacks a temp directory.
        """
        self._validate_state()
        config = InvocationConfig(
            executable=self._executable,
            proto_paths=tuple(self._proto_paths),
            proto_files=tuple(self._proto_files),
            output_directories=tuple(
                (language, self._output_directories[language])
                for language in OutputLanguage
                if language in self._output_directories
            ),
            custom_output_directory=self._custom_output_directory,
            plugins=tuple(self._plugins),
            plugin_directory=self._plugin_directory,
            custom_generator=CustomGenerator(
                id=self._custom_plugin_id,
                executable=self._custom_plugin_executable,
                parameter=self._custom_plugin_parameter,
            ),
            descriptor_set=self._descriptor_set,
            use_argument_file=self._use_argument_file,
            temp_directory=self._temp_directory,
        )
        return Invocation(config)

    def _validate_state(self) -> None:
        if not self._proto_files:
            raise InvocationConfigError("No proto files to compile", field="proto_files")
        if not self._output_directories and self._custom_output_directory is None:
            names = ", ".join(f"'{language.value}'" for language in OutputLanguage)
            raise InvocationConfigError(
                f"At least one output directory must be set: {names} or 'custom'",
                field="output_directories",
            )
        if self._custom_output_directory is not None and self._custom_plugin_id is None:
            raise InvocationConfigError(
                "'custom_output_directory' requires 'custom_plugin_id'",
                field="custom_plugin_id",
            )
        if self._use_argument_file and self._temp_directory is None:
            raise InvocationConfigError(
                "Argument file mode requires 'temp_directory'", field="temp_directory"
            )
        if self._plugins and PRIMARY_LANGUAGE not in self._output_directories:
            logger.warning(
                "%sPlugins %s are ignored without a %s output directory",
                LOG_PREFIX,
                ", ".join(plugin.id for plugin in self._plugins),
                PRIMARY_LANGUAGE.value,
            )


def _require_not_none(value: Any, field: str) -> Path:
    if value is None:
        raise InvocationConfigError(f"'{field}' is null", field=field)
    return Path(value)


def _require_directory(value: Any, field: str) -> Path:
    path = _require_not_none(value, field)
    if not path.is_dir():
        raise InvocationConfigError(f"'{field}' is not a directory: {path}", field=field)
    return path


def _normalize(path: Path) -> str:
    return os.path.normcase(os.path.abspath(path))
