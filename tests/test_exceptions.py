"""Tests for the exception hierarchy and exit-code mapping."""

from __future__ import annotations

import pytest

from protocrun.exceptions import (
    ConfigError,
    InvocationConfigError,
    LaunchError,
    ProtocRunError,
)
from protocrun.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_LAUNCH_FAILURE,
)


class TestExitCodes:
    @pytest.mark.parametrize(
        "exc_class, expected",
        [
            (ProtocRunError, EXIT_GENERIC_FAILURE),
            (InvocationConfigError, EXIT_CONFIG_ERROR),
            (ConfigError, EXIT_CONFIG_ERROR),
            (LaunchError, EXIT_LAUNCH_FAILURE),
        ],
    )
    def test_class_exit_code(self, exc_class, expected: int) -> None:
        assert exc_class("boom").exit_code == expected

    def test_override(self) -> None:
        assert ProtocRunError("boom", exit_code=42).exit_code == 42

    def test_override_does_not_leak_to_class(self) -> None:
        ProtocRunError("boom", exit_code=42)
        assert ProtocRunError.exit_code == EXIT_GENERIC_FAILURE


class TestHierarchy:
    @pytest.mark.parametrize("exc_class", [InvocationConfigError, ConfigError, LaunchError])
    def test_subclasses_base(self, exc_class) -> None:
        assert issubclass(exc_class, ProtocRunError)

    def test_message_preserved(self) -> None:
        assert str(ConfigError("Project config not found")) == "Project config not found"


class TestAttributes:
    def test_invocation_config_error_field(self) -> None:
        exc = InvocationConfigError("'proto_path' is null", field="proto_path")
        assert exc.field == "proto_path"

    def test_invocation_config_error_field_optional(self) -> None:
        assert InvocationConfigError("bad").field is None

    def test_launch_error_cause(self) -> None:
        cause = FileNotFoundError("protoc")
        exc = LaunchError("Unable to start protoc", cause=cause)
        assert exc.cause is cause

    def test_launch_error_without_cause(self) -> None:
        assert LaunchError("Invalid command line").cause is None
