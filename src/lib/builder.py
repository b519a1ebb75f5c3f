"""
Element builder

Turns a component definition plus a (filtered) attribute bag into a
ResolvedElement: tag, property bag and optional wrapper.
"""

from typing import Any, Dict, List, Optional

from ..models.elements import ResolvedElement, Wrapper
from ..models.nodes import DirectiveKind
from ..models.plugins import ComponentDefinition


def _tokens_split(value: Any) -> List[str]:
    return [token for token in str(value).split() if token]


class ElementBuilder:
    """
    Builds ResolvedElements from component definitions

    Class resolution order:
        1. definition.classes
        2. classes of each variant named in ``variant``/``type``
           (space-separated, combinable); an unmatched ``type`` token
           falls back to ``{first base class}-{token}``
        3. class/className/.shorthand attributes

    Example:
        alert = ComponentDefinition(classes=["alert"], variants={"success": ["alert-success"]})
        ElementBuilder().element_build(alert, {"variant": "success", "id": "a1"})
        → ResolvedElement(tag="div", properties={"id": "a1", "class": ["alert", "alert-success"]})
    """

    def element_build(
        self,
        definition: Optional[ComponentDefinition],
        attributes: Dict[str, str],
        kind: DirectiveKind = DirectiveKind.CONTAINER,
    ) -> ResolvedElement:
        """
        Build the element for one directive.

        Args:
            definition: Component definition, or None for an undefined name
            attributes: Attribute bag, already passed through the security filter
            kind: Directive form (undefined text directives become spans)

        Returns:
            ResolvedElement with de-duplicated classes
        """
        if definition is not None:
            tag = definition.tag
        else:
            tag = "span" if kind is DirectiveKind.TEXT else "div"

        classes: List[str] = list(definition.classes) if definition else []
        classes.extend(self.variantClasses_resolve(definition, attributes))

        properties: Dict[str, Any] = {}
        if definition is not None:
            self.attributes_apply(definition.default_attributes, properties, classes)
        self.attributes_apply(attributes, properties, classes)

        if definition is not None:
            if definition.hidden:
                properties["hidden"] = True
            if definition.ai_visible:
                properties["data-ai-visible"] = "true"

        unique_classes = list(dict.fromkeys(classes))
        if unique_classes:
            properties["class"] = unique_classes

        wrapper = None
        if definition is not None and definition.wrapper_tag:
            wrapper_properties: Dict[str, Any] = {}
            if definition.wrapper_classes:
                wrapper_properties["class"] = list(definition.wrapper_classes)
            wrapper = Wrapper(tag=definition.wrapper_tag, properties=wrapper_properties)

        return ResolvedElement(tag=tag, properties=properties, wrapper=wrapper)

    def variantClasses_resolve(
        self, definition: Optional[ComponentDefinition], attributes: Dict[str, str]
    ) -> List[str]:
        """Classes contributed by the variant/type attribute"""
        if definition is None:
            return []

        if attributes.get("variant"):
            source, tokens = "variant", _tokens_split(attributes["variant"])
        elif attributes.get("type"):
            source, tokens = "type", _tokens_split(attributes["type"])
        else:
            return []

        resolved: List[str] = []
        for token in tokens:
            if token in definition.variants:
                resolved.extend(definition.variants[token])
            elif source == "type" and definition.classes:
                resolved.append(f"{definition.classes[0]}-{token}")
        return resolved

    def attributes_apply(
        self, attributes: Dict[str, str], properties: Dict[str, Any], classes: List[str]
    ) -> None:
        """Walk one attribute bag into the property bag and class list"""
        for key, value in attributes.items():
            if key == "variant":
                continue

            if key in ("class", "className"):
                classes.extend(_tokens_split(value))
            elif key == "id":
                properties["id"] = value
            elif key.startswith(".") and len(key) > 1:
                classes.append(key[1:])
            elif key.startswith("#") and len(key) > 1:
                properties["id"] = key[1:]
            elif value == "" or value is True:
                properties[key] = True
            else:
                properties[key] = value
