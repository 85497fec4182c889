"""Numeric process exit codes returned by the ``protocrun`` CLI.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~protocrun.exceptions.ProtocRunError` subclass.
Build scripts can inspect the exit code to tell a configuration mistake
apart from a compiler that ran and reported errors.

Example::

    $ protocrun run
    $ echo $?
    5   # EXIT_COMPILER_FAILURE -- protoc ran and rejected the sources
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_CONFIG_ERROR = 3
"""The invocation configuration was rejected (bad path, reserved id, ...)."""

EXIT_LAUNCH_FAILURE = 4
"""The compiler process could not be started."""

EXIT_COMPILER_FAILURE = 5
"""The compiler started but exited with a non-zero status."""
