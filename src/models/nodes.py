"""
Directive node model

The structural parser produces markdown-it syntax trees. Directive
subtrees are lifted out of those trees into ``DirectiveNode`` values, a
closed set of node kinds that the resolver dispatches on.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class DirectiveKind(Enum):
    """
    The three directive forms

    CONTAINER:  :::name[label]{attrs} ... :::
    LEAF:       ::name[label]{attrs}
    TEXT:       :name[label]{attrs}   (inline)
    """
    CONTAINER = "container"
    LEAF = "leaf"
    TEXT = "text"


@dataclass
class DirectiveNode:
    """
    A directive lifted out of the structural syntax tree

    Attributes:
        kind: Container, leaf or text form
        name: Raw name, possibly ``framework_component`` after preprocessing
        attributes: Attribute bag in source order
        label: Bracketed label text, if any
        children: Child syntax-tree nodes (markdown-it SyntaxTreeNode)
        line: 1-based source line, if known
        source: Verbatim body between a container's fences, if known

    Example:
        ":::bootstrap_alert[Heads up]{variant=info}" →
        DirectiveNode(kind=CONTAINER, name="bootstrap_alert",
                      attributes={"variant": "info"}, label="Heads up")
    """
    kind: DirectiveKind
    name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    label: Optional[str] = None
    children: List[Any] = field(default_factory=list)
    line: Optional[int] = None
    source: Optional[str] = None

    def attributes_replace(self, attributes: Dict[str, str]) -> "DirectiveNode":
        """Return a copy of this node carrying a different attribute bag"""
        return DirectiveNode(
            kind=self.kind,
            name=self.name,
            attributes=dict(attributes),
            label=self.label,
            children=self.children,
            line=self.line,
            source=self.source,
        )
