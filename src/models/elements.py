"""
Element models

ResolvedElement is what the element builder produces for a directive:
a tag, a property bag and an optional wrapper. The HTML tree types
(Element, Text, Raw, Comment) form the closed set of nodes the
serializer in lib/html.py knows how to write.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class Element:
    """
    An HTML element

    Property conventions:
        "class": list of class names (joined with spaces)
        True:    boolean attribute (written bare)
        None/False: attribute omitted
        anything else: written as a quoted, escaped string
    """
    tag: str
    properties: Dict[str, Any] = field(default_factory=dict)
    children: List["HNode"] = field(default_factory=list)


@dataclass
class Text:
    """Text content, escaped on output"""
    value: str


@dataclass
class Raw:
    """Pre-rendered HTML, written verbatim"""
    html: str


@dataclass
class Comment:
    """An HTML comment"""
    value: str


HNode = Union[Element, Text, Raw, Comment]


@dataclass
class Wrapper:
    """Outer element declared by a component's wrapperTag"""
    tag: str
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ResolvedElement:
    """
    Tag/property/wrapper triple produced by the element builder

    Attributes:
        tag: HTML tag name
        properties: id, class list and pass-through attributes
        wrapper: Optional wrapper; when present the resolver nests the
                 resolved element inside it

    Example:
        ResolvedElement(
            tag="div",
            properties={"class": ["alert", "alert-success"], "role": "alert"},
        )
    """
    tag: str
    properties: Dict[str, Any] = field(default_factory=dict)
    wrapper: Optional[Wrapper] = None

    @property
    def classes(self) -> List[str]:
        return list(self.properties.get("class", []))

    def element_make(self, children: List[HNode]) -> HNode:
        """
        Build a fresh element graph around the given children.

        Without a wrapper this is a single element. With a wrapper the
        wrapper is the outer element and the resolved tag/properties become
        its only child, holding the original children.
        """
        inner = Element(self.tag, dict(self.properties), list(children))
        if self.wrapper is None:
            return inner
        return Element(self.wrapper.tag, dict(self.wrapper.properties), [inner])
