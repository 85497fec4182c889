"""Exception hierarchy for protocrun.

All exceptions inherit from :class:`ProtocRunError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`protocrun.exit_codes`.
The top-level error handler in :func:`protocrun.app.main` catches
``ProtocRunError`` and exits with the appropriate code.

Subclass hierarchy::

    ProtocRunError (exit 1)
    +-- InvocationConfigError (exit 3)
    +-- ConfigError           (exit 3)
    +-- LaunchError           (exit 4)

A non-zero exit of a compiler that *did* start is not an exception: it is
returned by :meth:`~protocrun.invocation.Invocation.execute` as-is.
"""

from __future__ import annotations

from typing import Optional

from protocrun.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_LAUNCH_FAILURE,
)


class ProtocRunError(Exception):
    """Base exception for all protocrun errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvocationConfigError(ProtocRunError):
    """Raised by :class:`~protocrun.invocation.InvocationBuilder` when a
    setting is missing or structurally invalid.

    Raised at the moment the offending value is supplied (or at
    ``build()`` for cross-field checks), never deferred to execution.

    Args:
        message: Human-readable error description.
        field: Name of the offending builder field, if any.
    """

    exit_code = EXIT_CONFIG_ERROR

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ConfigError(ProtocRunError):
    """Raised when the project config file cannot be read or fails validation."""

    exit_code = EXIT_CONFIG_ERROR


class LaunchError(ProtocRunError):
    """Raised when the compiler process could not be created.

    A launch error with an underlying ``cause`` (typically an
    :class:`OSError` from process creation) is considered transient and
    is retried by :meth:`~protocrun.invocation.Invocation.execute`. One
    without a cause is fatal.
    """

    exit_code = EXIT_LAUNCH_FAILURE

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
