"""Descriptor for a custom ``protoc`` code-generator plugin.

``protoc`` locates a generator named ``<id>`` through a
``--plugin=protoc-gen-<id>=<path>`` flag and writes its output through a
``--<id>_out=<dir>`` flag. A :class:`PluginDescriptor` carries the ``id``
and knows how to join it with a plugin directory to find the executable.
It does not download, install, or probe the file.

Example::

    grpc = PluginDescriptor(id="grpc-java")
    grpc.executable_path(Path("/opt/protoc-plugins"))
    # PosixPath('/opt/protoc-plugins/protoc-gen-grpc-java')
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PLUGIN_PREFIX = "protoc-gen-"
"""File-name prefix ``protoc`` expects for every plugin executable."""

_INVALID_ID_RE = re.compile(r"[\s=:/\\]")


class PluginDescriptor(BaseModel):
    """A single plugin bound to the primary output directory.

    Two descriptors are equal (and hash equally) when their ``id`` matches,
    so a set of descriptors never holds the same generator twice.

    Attributes:
        id: Generator token used in ``--<id>_out`` and
            ``--plugin=protoc-gen-<id>=...``.
        executable_suffix: Platform file suffix appended to the executable
            name (e.g. ``".exe"`` on Windows). Chosen by the caller.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Generator name passed to protoc")
    executable_suffix: str = Field(
        default="", description="Suffix appended to the executable file name"
    )

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: str) -> str:
        if not value:
            raise ValueError("plugin id must not be empty")
        if _INVALID_ID_RE.search(value):
            raise ValueError(f"plugin id contains illegal characters: {value!r}")
        return value

    @property
    def plugin_name(self) -> str:
        """The executable base name, ``protoc-gen-<id>``."""
        return f"{PLUGIN_PREFIX}{self.id}"

    def executable_path(self, plugin_directory: Optional[Path]) -> Path:
        """Resolve the plugin executable inside *plugin_directory*.

        Args:
            plugin_directory: Directory holding plugin executables. When
                ``None`` the bare file name is returned and the OS search
                path is left to find it.

        Returns:
            The joined path. The file is not required to exist.
        """
        file_name = self.plugin_name + self.executable_suffix
        if plugin_directory is None:
            return Path(file_name)
        return Path(plugin_directory) / file_name

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, PluginDescriptor):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return self.id
