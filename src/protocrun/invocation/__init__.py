"""Building and running ``protoc`` invocations.

Key classes:

* :class:`InvocationBuilder` -- accumulates and validates settings.
* :class:`Invocation` -- immutable configuration that renders the protoc
  command line and executes it with bounded retry.

Example::

    from protocrun.invocation import InvocationBuilder
    from protocrun.models import OutputLanguage

    invocation = (
        InvocationBuilder("protoc")
        .add_proto_path("proto")
        .add_proto_file("proto/greeter.proto")
        .set_output_directory(OutputLanguage.PYTHON, "gen")
        .build()
    )
    exit_code = invocation.execute()
"""

from protocrun.invocation.builder import InvocationBuilder
from protocrun.invocation.invocation import ExecutionState, Invocation

__all__ = ["ExecutionState", "Invocation", "InvocationBuilder"]
