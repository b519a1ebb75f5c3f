"""
HTML serializer for element trees

Writes the closed node set of models/elements.py (Element, Text, Raw,
Comment) as HTML. Text and attribute values are escaped; Raw is written
verbatim.
"""

from html import escape
from typing import Any, Dict, Iterable

from ..models.elements import Comment, Element, HNode, Raw, Text


VOID_ELEMENTS = frozenset({
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'link', 'meta', 'source', 'track', 'wbr',
})


def attribute_render(key: str, value: Any) -> str:
    """
    Render one attribute, with a leading space.

    Returns an empty string for None/False values; True renders as a
    bare boolean attribute.
    """
    if value is None or value is False:
        return ''
    if value is True:
        return f' {key}'
    if isinstance(value, (list, tuple)):
        if not value:
            return ''
        value = ' '.join(str(item) for item in value)
    return f' {key}="{escape(str(value), quote=True)}"'


def properties_render(properties: Dict[str, Any]) -> str:
    """Render a property bag; id and class come first"""
    ordered = []
    for key in ('id', 'class'):
        if key in properties:
            ordered.append((key, properties[key]))
    ordered.extend((k, v) for k, v in properties.items() if k not in ('id', 'class'))
    return ''.join(attribute_render(k, v) for k, v in ordered)


def node_serialize(node: HNode) -> str:
    """
    Serialize a single node.

    Raises:
        TypeError: node is not one of the element-tree types
    """
    if isinstance(node, Element):
        attributes = properties_render(node.properties)
        if node.tag in VOID_ELEMENTS:
            return f'<{node.tag}{attributes}>'
        return f'<{node.tag}{attributes}>{nodes_serialize(node.children)}</{node.tag}>'
    if isinstance(node, Text):
        return escape(node.value, quote=False)
    if isinstance(node, Raw):
        return node.html
    if isinstance(node, Comment):
        return f'<!-- {node.value.replace("--", "- -")} -->'
    raise TypeError(f"Cannot serialize {type(node).__name__}")


def nodes_serialize(nodes: Iterable[HNode]) -> str:
    """Serialize a sequence of nodes back to back"""
    return ''.join(node_serialize(node) for node in nodes)
