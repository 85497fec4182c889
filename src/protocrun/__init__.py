"""protocrun -- build and run ``protoc`` compiler invocations.

This package turns a validated set of build options (import paths, source
files, per-language output directories, plugins, descriptor-set options)
into the exact ``protoc`` command line, and runs it as a subprocess with
bounded retry and captured output.

Typical workflow::

    protocrun init        # scaffold protocrun.json
    protocrun show        # print the protoc command line
    protocrun run         # compile

Modules:
    invocation: :class:`InvocationBuilder` and :class:`Invocation`.
    plugins: :class:`PluginDescriptor` for ``protoc-gen-<id>`` plugins.
    models: Pydantic models shared across the package.
    config: Project config loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting with Rich.
    app: Typer application and CLI entry point.
"""

__version__ = "0.1.0"
