"""
mdpp - MD++ extended Markdown converter

Directive-based Markdown with plugin components, AI context and
placeholders, script and style blocks.
"""

__version__ = "1.0.0"

from .parser import Parser
from .compiler import Compiler, ConversionContext
from .registry import ComponentRegistry
from .loader import PluginLoader
from .errors import PluginManifestError
from .bundled import admonitions_plugin, plugins_bundled
from .log import LOG, state_connectToLogger

__all__ = [
    "Parser",
    "Compiler",
    "ConversionContext",
    "ComponentRegistry",
    "PluginLoader",
    "PluginManifestError",
    "admonitions_plugin",
    "plugins_bundled",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
