"""
AI context blocks

:::ai-context marks content written for AI consumption. Human visibility
is controlled independently:

    :::ai-context[visible]        rendered like normal content
    :::ai-context{visibility=hidden}
                                  rendered with display: none (default)
    :::ai-context[html-hidden]    replaced by an HTML comment

Every block, whatever its visibility, is recorded as an AIContextRecord.
The source-level helpers below scan raw markdown without a full
conversion.
"""

import re
from typing import Any, Dict, List, Optional

from ..models.elements import Comment, Element, Raw
from ..models.records import AIContextRecord, ErrorKind, Visibility
from .html import node_serialize
from .syntax import attributes_parse


AI_CONTEXT_PATTERN = re.compile(
    r"^:::ai-context(?:\[([^\]\n]*)\])?(?:\{([^}\n]*)\})?[ \t]*\n([\s\S]*?)^:::[ \t]*$",
    re.MULTILINE,
)

METADATA_LINE_PATTERN = re.compile(r"^[-*]?\s*(\w+):\s*(.+)$")

HTML_HIDDEN_COMMENT = "AI Context (html-hidden)"


def visibility_resolve(label: Optional[str], attributes: Dict[str, str]) -> Optional[Visibility]:
    """
    Visibility from the label first, then the ``visibility`` attribute.

    Returns:
        The visibility, HIDDEN when neither is given, or None when the
        given value is not a known visibility
    """
    raw = (label or "").strip() or str(attributes.get("visibility") or "").strip()
    if not raw:
        return Visibility.HIDDEN
    try:
        return Visibility(raw.lower())
    except ValueError:
        return None


def aiContext_render(node: Any, compiler: Any) -> str:
    """Handle one :::ai-context directive and record it"""
    context = compiler.context
    visibility = visibility_resolve(node.label, node.attributes)
    if visibility is None:
        raw = (node.label or "").strip() or node.attributes.get("visibility", "")
        context.errors.add(
            ErrorKind.INVALID_SYNTAX,
            f'Unknown AI context visibility "{raw}", treating the block as hidden',
            details="Valid values: visible, hidden, html-hidden",
            line=node.line,
        )
        visibility = Visibility.HIDDEN

    context.ai_contexts.append(AIContextRecord(
        visibility=visibility,
        content=compiler.text_extract(node),
        metadata={**node.attributes, "visibility": visibility.value},
        line=node.line,
    ))

    if visibility is Visibility.HTML_HIDDEN:
        return node_serialize(Comment(HTML_HIDDEN_COMMENT))

    classes = ["mdpp-ai-context"]
    properties: Dict[str, Any] = {"data-ai-context": "true", "data-visibility": visibility.value}
    if visibility is Visibility.HIDDEN and not context.options.show_ai_context:
        classes.append("mdpp-ai-hidden")
        properties["style"] = "display: none;"
    else:
        classes.append("mdpp-ai-visible")
    properties["class"] = classes

    return node_serialize(Element("div", properties, [Raw(compiler.children_render(node))]))


def metadata_parse(content: str) -> Dict[str, str]:
    """``key: value`` (optionally bulleted) lines of a block, keys lowercased"""
    metadata: Dict[str, str] = {}
    for line in content.split("\n"):
        match = METADATA_LINE_PATTERN.match(line)
        if match:
            metadata[match.group(1).lower()] = match.group(2).strip()
    return metadata


def aiContext_extract(markdown: str) -> List[AIContextRecord]:
    """
    Scan raw markdown for :::ai-context blocks without converting it.

    Metadata comes from ``key: value`` lines in the block body rather
    than from directive attributes.

    Args:
        markdown: MD++ source

    Returns:
        One record per block, in document order, with 1-based lines
    """
    contexts: List[AIContextRecord] = []
    for match in AI_CONTEXT_PATTERN.finditer(markdown):
        attributes = attributes_parse(match.group(2) or "") or {}
        visibility = visibility_resolve(match.group(1), attributes) or Visibility.HIDDEN
        content = match.group(3).strip()
        contexts.append(AIContextRecord(
            visibility=visibility,
            content=content,
            metadata=metadata_parse(content),
            line=markdown.count("\n", 0, match.start()) + 1,
        ))
    return contexts


def contexts_visible(contexts: List[AIContextRecord]) -> List[AIContextRecord]:
    return [context for context in contexts if context.visible]


def contexts_hidden(contexts: List[AIContextRecord]) -> List[AIContextRecord]:
    return [context for context in contexts if not context.visible]


def aiContext_format(contexts: List[AIContextRecord]) -> str:
    """
    Plain-text summary of AI context records.

    Example:
        [Hidden AI Context]
        audience: developers
        Metadata:
          audience: developers
    """
    sections: List[str] = []
    for context in contexts:
        lines = ["[Visible AI Context]" if context.visible else "[Hidden AI Context]", context.content]
        if context.metadata:
            lines.append("Metadata:")
            lines.extend(f"  {key}: {value}" for key, value in context.metadata.items())
        sections.append("\n".join(lines))
    return "\n\n".join(sections)


def aiContext_has(markdown: str) -> bool:
    return ":::ai-context" in markdown
