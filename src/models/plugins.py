"""
Plugin and component definition models

A plugin (one "framework") exposes a set of named components. Each
component definition tells the element builder which tag and classes a
directive resolves to.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class ComponentDefinition:
    """
    Render definition for a single component

    Attributes:
        tag: HTML tag the directive resolves to
        classes: Base classes always applied
        variants: Variant name -> extra classes (selected via variant/type)
        wrapper_tag: Optional outer element wrapping the resolved element
        wrapper_classes: Classes for the wrapper element
        default_attributes: Attributes applied before user attributes
        allow_nesting: Whether nested directives are permitted inside
        hidden: Render with the boolean ``hidden`` attribute
        ai_visible: Mark the element as AI-readable (``data-ai-visible``)

    Example:
        ComponentDefinition(
            tag="div",
            classes=["alert"],
            variants={"success": ["alert-success"]},
        )
    """
    tag: str = "div"
    classes: List[str] = field(default_factory=list)
    variants: Dict[str, List[str]] = field(default_factory=dict)
    wrapper_tag: Optional[str] = None
    wrapper_classes: List[str] = field(default_factory=list)
    default_attributes: Dict[str, str] = field(default_factory=dict)
    allow_nesting: bool = True
    hidden: bool = False
    ai_visible: bool = False


@dataclass
class PluginDefinition:
    """
    A validated plugin manifest

    Attributes:
        framework: Unique framework key (``bootstrap`` in ``bootstrap:alert``)
        components: Component name -> definition
        version: Manifest version string
        author: Optional author
        description: Optional description
        css: Stylesheet URLs the plugin needs
        js: Script URLs the plugin needs
        code_block_languages: Fence languages the plugin claims
    """
    framework: str
    components: Dict[str, ComponentDefinition] = field(default_factory=dict)
    version: str = "1.0.0"
    author: Optional[str] = None
    description: Optional[str] = None
    css: List[str] = field(default_factory=list)
    js: List[str] = field(default_factory=list)
    code_block_languages: List[str] = field(default_factory=list)

    def component_get(self, name: str) -> Optional[ComponentDefinition]:
        """Get a component definition by name"""
        return self.components.get(name)

    def componentNames_list(self) -> List[str]:
        """Component names in manifest order"""
        return list(self.components.keys())
