"""
Models package for mdpp

Contains data structures and type definitions for the conversion pipeline.
"""

from .state import ProgramState, pipeline
from .directives import DirectiveSpec, DirectiveCategory, RESERVED_DIRECTIVES
from .parser import ProtectedSource, DirectiveHead
from .nodes import DirectiveKind, DirectiveNode
from .elements import Element, Text, Raw, Comment, HNode, ResolvedElement, Wrapper
from .plugins import ComponentDefinition, PluginDefinition
from .formats import (
    FileFormat,
    FormatCapabilities,
    FORMAT_CAPABILITIES,
    format_detect,
    format_resolve,
)
from .records import (
    AIContextRecord,
    AIPlaceholderRecord,
    ErrorKind,
    PlaceholderFormat,
    PlaceholderStatus,
    PlaceholderType,
    RenderError,
    ScriptBlockRecord,
    ScriptMode,
    StyleBlockRecord,
    StyleType,
    Visibility,
)
from .options import ParserOptions, RenderResult, FullRenderResult, PresentationResult
from .slides import Presentation, RevealOptions, Slide
from .security import SecurityConfig, SecurityProfile, SECURITY_PROFILES

__all__ = [
    "ProgramState",
    "pipeline",
    "DirectiveSpec",
    "DirectiveCategory",
    "RESERVED_DIRECTIVES",
    "ProtectedSource",
    "DirectiveHead",
    "DirectiveKind",
    "DirectiveNode",
    "Element",
    "Text",
    "Raw",
    "Comment",
    "HNode",
    "ResolvedElement",
    "Wrapper",
    "ComponentDefinition",
    "PluginDefinition",
    "FileFormat",
    "FormatCapabilities",
    "FORMAT_CAPABILITIES",
    "format_detect",
    "format_resolve",
    "AIContextRecord",
    "AIPlaceholderRecord",
    "ErrorKind",
    "PlaceholderFormat",
    "PlaceholderStatus",
    "PlaceholderType",
    "RenderError",
    "ScriptBlockRecord",
    "ScriptMode",
    "StyleBlockRecord",
    "StyleType",
    "Visibility",
    "ParserOptions",
    "RenderResult",
    "FullRenderResult",
    "PresentationResult",
    "Presentation",
    "RevealOptions",
    "Slide",
    "SecurityConfig",
    "SecurityProfile",
    "SECURITY_PROFILES",
]
