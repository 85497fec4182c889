"""Code-generator plugin descriptors for protocrun.

* :class:`PluginDescriptor` -- identifies one ``protoc-gen-<id>`` plugin
  and resolves its executable inside a plugin directory.
"""

from protocrun.plugins.descriptor import PLUGIN_PREFIX, PluginDescriptor

__all__ = ["PLUGIN_PREFIX", "PluginDescriptor"]
