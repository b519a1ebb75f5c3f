"""
Side-channel records and diagnostics

Every conversion returns, next to its HTML, the structured records the
side-channel extractors collected and the non-fatal errors the resolver
reported. All of them serialize to plain dicts for JSON export.
"""

from enum import Enum
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional


class Visibility(Enum):
    """Human visibility of an AI context block"""
    VISIBLE = "visible"
    HIDDEN = "hidden"
    HTML_HIDDEN = "html-hidden"


class PlaceholderType(Enum):
    INLINE = "inline"
    BLOCK = "block"


class PlaceholderFormat(Enum):
    PARAGRAPH = "paragraph"
    LIST = "list"
    TABLE = "table"
    INLINE = "inline"


class PlaceholderStatus(Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


class ScriptMode(Enum):
    EXECUTE = "execute"
    OUTPUT = "output"


class StyleType(Enum):
    INLINE = "inline"
    EXTERNAL = "external"


class ErrorKind(Enum):
    """
    Non-fatal diagnostic categories

    Banner style is "danger" for INVALID_SYNTAX and SECURITY_BLOCKED,
    "warning" for the rest.
    """
    MISSING_PLUGIN = "missing-plugin"
    UNKNOWN_COMPONENT = "unknown-component"
    INVALID_SYNTAX = "invalid-syntax"
    NESTING_ERROR = "nesting-error"
    SECURITY_BLOCKED = "security-blocked"

    @property
    def severity(self) -> str:
        if self in (ErrorKind.INVALID_SYNTAX, ErrorKind.SECURITY_BLOCKED):
            return "danger"
        return "warning"

    @property
    def title(self) -> str:
        return _ERROR_TITLES[self]


_ERROR_TITLES: Dict[ErrorKind, str] = {
    ErrorKind.MISSING_PLUGIN: "Plugin Not Found",
    ErrorKind.UNKNOWN_COMPONENT: "Unknown Component",
    ErrorKind.INVALID_SYNTAX: "Invalid Syntax",
    ErrorKind.NESTING_ERROR: "Nesting Error",
    ErrorKind.SECURITY_BLOCKED: "Security Blocked",
}


def _enums_flatten(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in data.items()}


@dataclass
class RenderError:
    """
    A non-fatal conversion diagnostic

    Attributes:
        kind: Error category
        message: Human-readable message
        title: Banner title (defaults per kind)
        details: Optional extra text shown in a collapsible block
        line: Source line, if known
    """
    kind: ErrorKind
    message: str
    title: Optional[str] = None
    details: Optional[str] = None
    line: Optional[int] = None

    def __post_init__(self) -> None:
        if self.title is None:
            self.title = self.kind.title

    def to_dict(self) -> Dict[str, Any]:
        return _enums_flatten(asdict(self))


@dataclass
class AIContextRecord:
    """
    Content authored for AI consumption

    Attributes:
        visibility: Human visibility of the block
        content: Plain text of the block's children
        metadata: Directive attributes plus the resolved visibility
        line: Source line of the directive
    """
    visibility: Visibility
    content: str
    metadata: Dict[str, str] = field(default_factory=dict)
    line: Optional[int] = None

    @property
    def visible(self) -> bool:
        return self.visibility is Visibility.VISIBLE

    def to_dict(self) -> Dict[str, Any]:
        data = _enums_flatten(asdict(self))
        data["visible"] = self.visible
        return data


@dataclass
class AIPlaceholderRecord:
    """
    A location marked for downstream AI generation

    Attributes:
        id: Unique within one conversion
        type: Inline (span) or block (div)
        prompt: Generation prompt, may contain {{var}} tokens
        format: Expected output shape
        fallback: Text shown until content is generated
        status: Lifecycle state, pending at conversion time
        variables: Variables used to interpolate the prompt, if any
        line: Source line of the directive
    """
    id: str
    type: PlaceholderType
    prompt: str
    format: PlaceholderFormat = PlaceholderFormat.PARAGRAPH
    fallback: Optional[str] = None
    status: PlaceholderStatus = PlaceholderStatus.PENDING
    variables: Optional[Dict[str, Any]] = None
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _enums_flatten(asdict(self))


@dataclass
class ScriptBlockRecord:
    """
    An executable script block for a downstream sandboxed executor

    Attributes:
        id: Unique within one conversion
        code: Verbatim script source
        mode: execute (run for effect) or output (render the result)
        lang: Language tag, "js" by default
        is_async: Run asynchronously
        cache: Cache the result between runs
        line: Source line of the directive
    """
    id: str
    code: str
    mode: ScriptMode = ScriptMode.EXECUTE
    lang: str = "js"
    is_async: bool = False
    cache: bool = True
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _enums_flatten(asdict(self))


@dataclass
class StyleBlockRecord:
    """
    A stylesheet contributed by the document

    Attributes:
        id: Unique within one conversion
        type: inline (CSS text) or external (URL)
        content: CSS text or stylesheet URL
        scoped: Whether the <style> carries the scoped flag
    """
    id: str
    type: StyleType
    content: str
    scoped: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return _enums_flatten(asdict(self))
