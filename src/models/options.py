"""
Conversion options and results
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .formats import FileFormat, FormatCapabilities
from .records import (
    AIContextRecord,
    AIPlaceholderRecord,
    RenderError,
    ScriptBlockRecord,
    StyleBlockRecord,
)


@dataclass
class ParserOptions:
    """
    Per-parser feature toggles and rendering switches

    The enable_* toggles are ANDed with the format's capability table; a
    toggle can switch a stage off, never on where the format forbids it.

    Attributes:
        enable_gfm .. enable_icons: Stage toggles, all on by default
        enable_kroki: Render kroki diagram fences/directives as Kroki URLs
        show_ai_context: Reveal hidden AI context blocks in the HTML
        suppress_errors: Omit error banners (errors are still returned)
        include_assets: Prefix plugin CSS/JS tags to the HTML
        highlight_code: Highlight fenced code with Pygments
        kroki_server_url: Override the configured Kroki server
        variables: Values for {{var}} interpolation of placeholder prompts
    """
    enable_gfm: bool = True
    enable_math: bool = True
    enable_mermaid: bool = True
    enable_directives: bool = True
    enable_callouts: bool = True
    enable_ai_context: bool = True
    enable_ai_placeholders: bool = True
    enable_scripts: bool = True
    enable_styles: bool = True
    enable_variables: bool = True
    enable_icons: bool = True

    enable_kroki: bool = False
    show_ai_context: bool = False
    suppress_errors: bool = False
    include_assets: bool = False
    highlight_code: bool = False
    kroki_server_url: Optional[str] = None
    variables: Dict[str, Any] = field(default_factory=dict)

    def capabilities_toggled(self) -> FormatCapabilities:
        """The toggles expressed as a capability set"""
        return FormatCapabilities(
            gfm=self.enable_gfm,
            math=self.enable_math,
            mermaid=self.enable_mermaid,
            components=self.enable_directives,
            callouts=self.enable_callouts,
            ai_context=self.enable_ai_context,
            ai_placeholders=self.enable_ai_placeholders,
            scripts=self.enable_scripts,
            styles=self.enable_styles,
            variables=self.enable_variables,
            icons=self.enable_icons,
        )


@dataclass
class RenderResult:
    """
    Output of Parser.convert()

    Attributes:
        html: Rendered HTML (error banners first unless suppressed)
        ai_contexts: One record per ai-context block, in document order
        frontmatter: Frontmatter passed in by the caller, None when empty
        errors: Non-fatal diagnostics
    """
    html: str
    ai_contexts: List[AIContextRecord] = field(default_factory=list)
    frontmatter: Optional[Dict[str, Any]] = None
    errors: List[RenderError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "html": self.html,
            "aiContexts": [c.to_dict() for c in self.ai_contexts],
            "frontmatter": self.frontmatter,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass
class FullRenderResult(RenderResult):
    """
    Output of Parser.convert_full(): RenderResult plus every side-channel
    """
    scripts: List[ScriptBlockRecord] = field(default_factory=list)
    placeholders: List[AIPlaceholderRecord] = field(default_factory=list)
    styles: List[StyleBlockRecord] = field(default_factory=list)
    format: FileFormat = FileFormat.MDPLUS

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "scripts": [s.to_dict() for s in self.scripts],
            "placeholders": [p.to_dict() for p in self.placeholders],
            "styles": [s.to_dict() for s in self.styles],
            "format": self.format.value,
        })
        return data


@dataclass
class PresentationResult(FullRenderResult):
    """
    Output of Parser.convert_presentation()

    ``html`` is a reveal.js document (or an embeddable preview); the
    side-channels cover every slide.
    """
    slide_count: int = 0
    theme: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"slideCount": self.slide_count, "theme": self.theme})
        return data
