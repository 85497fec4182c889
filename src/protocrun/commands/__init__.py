"""Built-in CLI sub-commands for protocrun.

* :mod:`~protocrun.commands.init` -- scaffold a ``protocrun.json``.
* :mod:`~protocrun.commands.run` -- ``show`` the protoc command line or
  ``run`` it.

Each module exports plain callback functions registered directly on the
root app in :mod:`protocrun.app`.
"""
