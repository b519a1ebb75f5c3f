"""
File formats and their capability table

The declared format of a document decides which conversion stages are
wired in. md is plain GitHub-flavoured Markdown, mdplus adds components
and AI features, mdsc adds scripts, styles and variables on top.
"""

from enum import Enum
from dataclasses import dataclass, fields
from pathlib import PurePath
from typing import Dict, Optional, Union


class FileFormat(Enum):
    MD = "md"
    MDPLUS = "mdplus"
    MDSC = "mdsc"


@dataclass(frozen=True)
class FormatCapabilities:
    """
    Immutable stage switches for one conversion

    Attributes:
        gfm: Tables and strikethrough
        math: math/latex/katex fences
        mermaid: mermaid fences
        components: Generic plugin component resolution
        callouts: > [!TYPE] callout conversion
        ai_context: :::ai-context blocks
        ai_placeholders: :::ai-generate blocks and :ai inline placeholders
        scripts: :::script blocks
        styles: :::style and :::link-css blocks
        variables: {{var}} interpolation of placeholder prompts
        icons: ![icon](google:name) Material Icons images
    """
    gfm: bool = True
    math: bool = True
    mermaid: bool = True
    components: bool = True
    callouts: bool = True
    ai_context: bool = True
    ai_placeholders: bool = True
    scripts: bool = True
    styles: bool = True
    variables: bool = True
    icons: bool = True

    @property
    def directives(self) -> bool:
        """True when any stage that consumes directive syntax is enabled"""
        return (
            self.components
            or self.ai_context
            or self.ai_placeholders
            or self.scripts
            or self.styles
        )

    def intersect(self, other: "FormatCapabilities") -> "FormatCapabilities":
        """Flag-wise AND of two capability sets"""
        return FormatCapabilities(
            **{f.name: getattr(self, f.name) and getattr(other, f.name) for f in fields(self)}
        )


FORMAT_CAPABILITIES: Dict[FileFormat, FormatCapabilities] = {
    FileFormat.MD: FormatCapabilities(
        components=False,
        callouts=False,
        ai_placeholders=False,
        scripts=False,
        styles=False,
        variables=False,
        icons=False,
    ),
    FileFormat.MDPLUS: FormatCapabilities(
        scripts=False,
        styles=False,
        variables=False,
    ),
    FileFormat.MDSC: FormatCapabilities(),
}

EXTENSION_FORMATS: Dict[str, FileFormat] = {
    ".md": FileFormat.MD,
    ".markdown": FileFormat.MD,
    ".mdplus": FileFormat.MDPLUS,
    ".mdp": FileFormat.MDPLUS,
    ".mdsc": FileFormat.MDSC,
}

DEFAULT_FORMAT = FileFormat.MDPLUS


def format_detect(filename: Optional[str]) -> FileFormat:
    """
    Detect the file format from a filename extension.

    Unknown or missing extensions fall back to mdplus.

    Example:
        >>> format_detect("notes.mdsc")
        <FileFormat.MDSC: 'mdsc'>
    """
    if not filename:
        return DEFAULT_FORMAT
    return EXTENSION_FORMATS.get(PurePath(filename).suffix.lower(), DEFAULT_FORMAT)


def format_resolve(
    format: Union[FileFormat, str, None] = None, filename: Optional[str] = None
) -> FileFormat:
    """
    Resolve the effective format: explicit override first, then filename.

    Raises:
        ValueError: if an explicit format string names no known format
    """
    if isinstance(format, FileFormat):
        return format
    if format:
        return FileFormat(format.lower().lstrip("."))
    return format_detect(filename)


def capabilities_get(format: FileFormat) -> FormatCapabilities:
    """Capability set for a format"""
    return FORMAT_CAPABILITIES[format]
