"""Canonical Pydantic models shared across all protocrun modules.

The models fall into two groups:

**Invocation models** -- the immutable result of
:meth:`~protocrun.invocation.InvocationBuilder.build`:
    :class:`OutputLanguage`, :class:`CustomGenerator`,
    :class:`DescriptorSetOptions`, and :class:`InvocationConfig`.

**Project config models** -- serialised as ``protocrun.json`` next to the
sources and loaded by :mod:`protocrun.config`:
    :class:`PluginConfig`, :class:`CustomPluginConfig`,
    :class:`DescriptorSetConfig`, and :class:`ProjectConfig`.

Invocation models are frozen and use tuples for every collection so that a
built invocation cannot be changed through a shared reference. Project
config models are plain, mutable Pydantic v2 models; they carry raw user
input and are validated again by the builder.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from protocrun.plugins.descriptor import PluginDescriptor


# --- Invocation models ---


class OutputLanguage(str, enum.Enum):
    """Built-in ``protoc`` generators, declared in rendering order.

    ``JAVA`` is the primary output: bound plugins write into its directory.
    ``JAVANANO`` accepts the custom plugin parameter as an option prefix.
    """

    JAVA = "java"
    JAVANANO = "javanano"
    CPP = "cpp"
    PYTHON = "python"
    CSHARP = "csharp"
    JS = "js"
    OBJC = "objc"
    PHP = "php"
    RUBY = "ruby"
    KOTLIN = "kotlin"

    @property
    def flag(self) -> str:
        """The ``--<lang>_out=`` flag prefix for this generator."""
        return f"--{self.value}_out="


PRIMARY_LANGUAGE = OutputLanguage.JAVA
"""The generator whose output directory is shared with bound plugins."""

RESERVED_GENERATOR_IDS = frozenset(
    [language.value for language in OutputLanguage] + ["descriptor_set"]
)
"""Ids a custom generator may not use because protoc owns them."""

PARAMETER_SEPARATOR = ":"
"""Joins a generator parameter and its output directory in ``--x_out``."""


class CustomGenerator(BaseModel):
    """A single native generator invoked through the plugin protocol.

    When ``executable`` is ``None`` protoc looks up ``protoc-gen-<id>`` on
    the search path itself.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    executable: Optional[str] = None
    parameter: Optional[str] = None


class DescriptorSetOptions(BaseModel):
    """Where to write a ``FileDescriptorSet`` and what to bundle in it."""

    model_config = ConfigDict(frozen=True)

    path: Path
    include_imports: bool = False
    include_source_info: bool = False


class InvocationConfig(BaseModel):
    """Fully validated configuration of one ``protoc`` run.

    Produced by :meth:`~protocrun.invocation.InvocationBuilder.build`.
    Can also be constructed directly when the caller has already validated
    its inputs (the builder's filesystem checks are skipped in that case).
    """

    model_config = ConfigDict(frozen=True)

    executable: str = Field(min_length=1)
    proto_paths: tuple[Path, ...] = ()
    proto_files: tuple[Path, ...] = ()
    output_directories: tuple[tuple[OutputLanguage, Path], ...] = ()
    custom_output_directory: Optional[Path] = None
    plugins: tuple[PluginDescriptor, ...] = ()
    plugin_directory: Optional[Path] = None
    custom_generator: CustomGenerator = Field(default_factory=CustomGenerator)
    descriptor_set: Optional[DescriptorSetOptions] = None
    use_argument_file: bool = False
    temp_directory: Optional[Path] = None

    def output_directory(self, language: OutputLanguage) -> Optional[Path]:
        """Return the directory configured for *language*, or ``None``."""
        for configured, directory in self.output_directories:
            if configured == language:
                return directory
        return None


# --- Project config models ---


class PluginConfig(BaseModel):
    """A plugin entry in ``protocrun.json``."""

    id: str
    executable_suffix: str = ""


class CustomPluginConfig(BaseModel):
    """The ``custom_plugin`` section of ``protocrun.json``."""

    id: str
    executable: Optional[str] = Field(
        default=None, description="Explicit plugin executable (else found on PATH)"
    )
    parameter: Optional[str] = Field(
        default=None, description="Generator parameter, joined to the output dir with ':'"
    )


class DescriptorSetConfig(BaseModel):
    """The ``descriptor_set`` section of ``protocrun.json``."""

    path: str
    include_imports: bool = False
    include_source_info: bool = False


class ProjectConfig(BaseModel):
    """Project-local configuration persisted as ``protocrun.json``.

    Paths may be relative; :func:`~protocrun.config.load_project_config`
    resolves them against the directory holding the file. Every value is
    checked again by :class:`~protocrun.invocation.InvocationBuilder`.

    Example::

        {
          "proto_paths": ["src/main/proto"],
          "proto_files": ["src/main/proto/greeter.proto"],
          "outputs": {"java": "build/generated/java"},
          "plugins": [{"id": "grpc-java"}],
          "plugin_directory": "build/protoc-plugins"
        }
    """

    executable: str = Field(default="protoc", description="Path or name of protoc")
    proto_paths: list[str] = Field(default_factory=list)
    proto_files: list[str] = Field(default_factory=list)
    outputs: dict[OutputLanguage, str] = Field(
        default_factory=dict, description="Output directory per built-in generator"
    )
    custom_output: Optional[str] = Field(
        default=None, description="Output directory of the custom plugin"
    )
    plugins: list[PluginConfig] = Field(default_factory=list)
    plugin_directory: Optional[str] = None
    custom_plugin: Optional[CustomPluginConfig] = None
    descriptor_set: Optional[DescriptorSetConfig] = None
    use_argument_file: bool = False
    temp_directory: Optional[str] = None
