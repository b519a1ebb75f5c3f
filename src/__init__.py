"""
mdpp - MD++ extended Markdown converter

Converts MD++ documents to HTML plus structured side-channels (AI
context, AI placeholders, script blocks, style blocks).
"""

__version__ = "1.0.0"

from .lib import (
    Parser,
    Compiler,
    ComponentRegistry,
    PluginLoader,
    PluginManifestError,
    admonitions_plugin,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "Parser",
    "Compiler",
    "ComponentRegistry",
    "PluginLoader",
    "PluginManifestError",
    "admonitions_plugin",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
