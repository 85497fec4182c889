"""An invokable, immutable configuration of the ``protoc`` compiler.

:class:`Invocation` wraps an :class:`~protocrun.models.InvocationConfig` and
provides three operations:

* :meth:`Invocation.render_command` -- the exact protoc argument list, a
  pure function of the configuration.
* :meth:`Invocation.log_execution_parameters` -- debug diagnostics for
  operators.
* :meth:`Invocation.execute` -- run protoc (directly or through an
  argument file), retrying transient process-creation failures.

Instances are normally created by
:meth:`~protocrun.invocation.builder.InvocationBuilder.build`.
"""

from __future__ import annotations

import enum
import logging
import time
from typing import Optional

from protocrun.exceptions import LaunchError
from protocrun.invocation import process
from protocrun.invocation.argfile import write_argument_file
from protocrun.models import (
    PARAMETER_SEPARATOR,
    PRIMARY_LANGUAGE,
    InvocationConfig,
    OutputLanguage,
)
from protocrun.plugins.descriptor import PLUGIN_PREFIX

logger = logging.getLogger(__name__)

LOG_PREFIX = "[PROTOC] "
"""Prefix of every diagnostic line emitted by this module."""

MAX_ATTEMPTS = 3
"""Total launch attempts before a transient failure is surfaced."""

RETRY_DELAY_SECONDS = 1.0
"""Pause between launch attempts."""


class ExecutionState(str, enum.Enum):
    """Lifecycle of the most recent :meth:`Invocation.execute` call."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class Invocation:
    """A configured protoc run.

    The configuration is frozen; the command can be rendered any number of
    times with identical results. The only mutable state is the captured
    output, which :meth:`execute` appends to.

    Args:
        config: The validated configuration.

    Example::

        invocation = (
            InvocationBuilder("protoc")
            .add_proto_path(Path("src/main/proto"))
            .add_proto_file(Path("src/main/proto/greeter.proto"))
            .set_output_directory(OutputLanguage.JAVA, Path("build/gen"))
            .build()
        )
        if invocation.execute() != 0:
            print(invocation.error)
    """

    def __init__(self, config: InvocationConfig) -> None:
        self._config = config
        self._stdout = bytearray()
        self._stderr = bytearray()
        self._state = ExecutionState.NOT_STARTED
        self._exit_code: Optional[int] = None

    @property
    def config(self) -> InvocationConfig:
        """The immutable configuration."""
        return self._config

    @property
    def executable(self) -> str:
        return self._config.executable

    @property
    def state(self) -> ExecutionState:
        return self._state

    @property
    def exit_code(self) -> Optional[int]:
        """Exit status of the last completed run, ``None`` before that."""
        return self._exit_code

    @property
    def output(self) -> str:
        """Everything protoc wrote to stdout, decoded as UTF-8."""
        return _decode(self._stdout)

    @property
    def error(self) -> str:
        """Everything protoc wrote to stderr, decoded as UTF-8."""
        return _decode(self._stderr)

    # ------------------------------------------------------------------ #
    # Command rendering
    # ------------------------------------------------------------------ #

    def render_command(self) -> list[str]:
        """Build the protoc argument list, excluding the executable.

        Order: import paths, primary output with its plugins, the other
        built-in outputs, the custom generator, source files, and finally
        the descriptor-set options.

        Returns:
            A new list on every call.
        """
        config = self._config
        generator = config.custom_generator
        command: list[str] = []

        for proto_path in config.proto_paths:
            command.append(f"--proto_path={proto_path}")

        primary_directory = config.output_directory(PRIMARY_LANGUAGE)
        if primary_directory is not None:
            command.append(f"{PRIMARY_LANGUAGE.flag}{primary_directory}")
            # All bound plugins share the primary output directory.
            for plugin in config.plugins:
                plugin_executable = plugin.executable_path(config.plugin_directory)
                command.append(f"--plugin={plugin.plugin_name}={plugin_executable}")
                command.append(f"--{plugin.id}_out={primary_directory}")

        for language in OutputLanguage:
            if language == PRIMARY_LANGUAGE:
                continue
            directory = config.output_directory(language)
            if directory is None:
                continue
            option = language.flag
            if language == OutputLanguage.JAVANANO and generator.parameter is not None:
                option += generator.parameter + PARAMETER_SEPARATOR
            command.append(f"{option}{directory}")

        if config.custom_output_directory is not None:
            if generator.executable is not None:
                command.append(
                    f"--plugin={PLUGIN_PREFIX}{generator.id}={generator.executable}"
                )
            option = f"--{generator.id}_out="
            if generator.parameter is not None:
                option += generator.parameter + PARAMETER_SEPARATOR
            command.append(f"{option}{config.custom_output_directory}")

        for proto_file in config.proto_files:
            command.append(str(proto_file))

        descriptor_set = config.descriptor_set
        if descriptor_set is not None:
            command.append(f"--descriptor_set_out={descriptor_set.path}")
            if descriptor_set.include_imports:
                command.append("--include_imports")
            if descriptor_set.include_source_info:
                command.append("--include_source_info")

        return command

    def command_line(self) -> list[str]:
        """Return the executable followed by :meth:`render_command`."""
        return [self._config.executable, *self.render_command()]

    # ------------------------------------------------------------------ #
    # Diagnostics
    # ------------------------------------------------------------------ #

    def log_execution_parameters(self, log: Optional[logging.Logger] = None) -> None:
        """Log the resolved configuration and command line at DEBUG level.

        Does nothing unless *log* is enabled for DEBUG.

        Args:
            log: Destination logger. Defaults to this module's logger.
        """
        log = log or logger
        if not log.isEnabledFor(logging.DEBUG):
            return

        config = self._config

        def emit(message: object) -> None:
            log.debug("%s%s", LOG_PREFIX, message)

        emit("Executable:")
        emit(f" {config.executable}")

        if config.proto_paths:
            emit("Protobuf import paths:")
            for proto_path in config.proto_paths:
                emit(f" {proto_path}")

        for language, directory in config.output_directories:
            emit(f"{language.value} output directory:")
            emit(f" {directory}")
            if language == PRIMARY_LANGUAGE and config.plugins:
                emit(f"Plugins for {language.value} output:")
                for plugin in config.plugins:
                    emit(f" {plugin.id}")

        if config.plugin_directory is not None:
            emit("Plugin directory:")
            emit(f" {config.plugin_directory}")

        if config.custom_output_directory is not None:
            generator = config.custom_generator
            emit(f"Custom plugin '{generator.id}' output directory:")
            emit(f" {config.custom_output_directory}")
            if generator.executable is not None:
                emit("Custom plugin executable:")
                emit(f" {generator.executable}")
            if generator.parameter is not None:
                emit("Custom plugin parameter:")
                emit(f" {generator.parameter}")

        if config.descriptor_set is not None:
            emit("Descriptor set output file:")
            emit(f" {config.descriptor_set.path}")
            emit("Include imports:")
            emit(f" {config.descriptor_set.include_imports}")
            emit("Include source info:")
            emit(f" {config.descriptor_set.include_source_info}")

        emit("Protobuf descriptors:")
        for proto_file in config.proto_files:
            emit(f" {proto_file}")

        command = self.render_command()
        if command:
            emit("Command line options:")
            emit(" ".join(command))

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #

    def execute(self) -> int:
        """Run protoc and wait for it to exit.

        In argument-file mode the rendered arguments are written to a
        temporary file and protoc receives ``@<file>``. If that file cannot
        be created the error is logged and the arguments are passed
        directly instead.

        Process creation is attempted up to :data:`MAX_ATTEMPTS` times.
        Only failures carrying an underlying cause are retried, with a
        :data:`RETRY_DELAY_SECONDS` pause between attempts. A process that
        started and exited non-zero is not retried.

        Returns:
            The protoc exit code.

        Raises:
            LaunchError: If protoc could not be started.
        """
        arguments = self.render_command()
        if self._config.use_argument_file:
            arguments = self._indirect_through_file(arguments)
        command = [self._config.executable, *arguments]

        self._state = ExecutionState.RUNNING
        attempts_left = MAX_ATTEMPTS
        while True:
            try:
                result = process.launch(command)
            except LaunchError as exc:
                attempts_left -= 1
                if attempts_left == 0 or exc.cause is None:
                    self._state = ExecutionState.FAILED
                    raise
                logger.warning(
                    "%sUnable to invoke protoc, will retry %d time(s): %s",
                    LOG_PREFIX,
                    attempts_left,
                    exc,
                )
                try:
                    time.sleep(RETRY_DELAY_SECONDS)
                except BaseException:
                    self._state = ExecutionState.FAILED
                    raise
                continue

            self._stdout.extend(result.stdout)
            self._stderr.extend(result.stderr)
            self._exit_code = result.exit_code
            self._state = ExecutionState.COMPLETED
            return result.exit_code

    def _indirect_through_file(self, arguments: list[str]) -> list[str]:
        temp_directory = self._config.temp_directory
        if temp_directory is None:
            logger.error(
                "%sNo temp directory configured for the arguments file, "
                "passing arguments directly",
                LOG_PREFIX,
            )
            return arguments
        try:
            arguments_file = write_argument_file(arguments, temp_directory)
        except OSError:
            logger.error(
                "%sError creating file with protoc arguments", LOG_PREFIX, exc_info=True
            )
            return arguments
        logger.debug("%sUsing arguments file %s", LOG_PREFIX, arguments_file)
        return [f"@{arguments_file}"]

    def __repr__(self) -> str:
        return f"Invocation(executable={self._config.executable!r}, state={self._state.value})"


def _decode(data: bytes | bytearray) -> str:
    return bytes(data).decode("utf-8", errors="replace")


