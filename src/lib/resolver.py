"""
Directive resolver

Single entry point for every directive lifted out of the syntax tree:

1. the attribute bag passes through the security filter;
2. built-in directives (AI context, placeholders, scripts, styles,
   kroki) go to their handlers, or stay unresolved when their capability
   is off;
3. everything else is resolved against the component registry and built
   into an element.

Resolution problems are recorded on the conversion context and never
raised: content is always rendered.
"""

from dataclasses import replace
from typing import Any, List, Optional, Tuple

from ..config import appsettings
from ..models.elements import Element, HNode, Raw
from ..models.nodes import DirectiveKind, DirectiveNode
from ..models.plugins import ComponentDefinition
from ..models.records import ErrorKind
from .builder import ElementBuilder
from .directives import BuiltinDirectives
from .html import node_serialize
from .log import LOG
from .registry import ComponentRegistry
from .security import SecurityFilter


class DirectiveResolver:
    """
    Resolves DirectiveNodes to HTML

    Holds only long-lived collaborators (registry, builder, security
    filter, built-in table); everything per-document lives on the
    compiler's conversion context.

    Example:
        resolver = DirectiveResolver(registry)
        html = resolver.directive_resolve(node, compiler)
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        security: Optional[SecurityFilter] = None,
        builder: Optional[ElementBuilder] = None,
        directives: Optional[BuiltinDirectives] = None,
    ) -> None:
        self.registry = registry
        self.security = security or SecurityFilter()
        self.builder = builder or ElementBuilder()
        self.directives = directives or BuiltinDirectives()

    @staticmethod
    def name_split(name: str) -> Tuple[Optional[str], str]:
        """
        Split a canonical name on its first underscore.

        Example:
            >>> DirectiveResolver.name_split("bootstrap_list_group")
            ('bootstrap', 'list_group')
            >>> DirectiveResolver.name_split("alert")
            (None, 'alert')
        """
        if "_" not in name:
            return None, name
        framework, component = name.split("_", 1)
        return framework, component

    @classmethod
    def name_display(cls, name: str) -> str:
        """
        Name as the author wrote it.

        Example:
            >>> DirectiveResolver.name_display("bootstrap_alert")
            'bootstrap:alert'
        """
        framework, component = cls.name_split(name)
        return f"{framework}:{component}" if framework else component

    def directive_resolve(self, node: DirectiveNode, compiler: Any) -> str:
        """
        Resolve one directive to HTML.

        Args:
            node: Directive lifted from the syntax tree
            compiler: The active conversion (context, child rendering)

        Returns:
            Serialized HTML for the directive
        """
        outcome = self.security.attributes_filter(node.attributes)
        if outcome.blocked:
            compiler.context.errors.add(
                ErrorKind.SECURITY_BLOCKED,
                f"Removed unsafe attribute(s) from \"{self.name_display(node.name)}\": {', '.join(outcome.blocked)}",
                line=node.line,
            )
            node = node.attributes_replace(outcome.attributes)

        spec = self.directives.spec_get(node.name, node.kind)
        if spec is not None:
            if compiler.capability_isEnabled(spec.capability):
                LOG(f"Built-in directive {node.name} → {spec.category.value}", level=3)
                return spec.handler(node, compiler)
            LOG(f"Directive {node.name} left unresolved ({spec.capability} disabled)", level=2)
            return self.unresolved_render(node, compiler)

        if not compiler.capability_isEnabled("components"):
            return self.unresolved_render(node, compiler)

        return self.component_render(node, compiler)

    def definition_find(self, node: DirectiveNode, compiler: Any) -> Optional[ComponentDefinition]:
        """
        Look up the component definition, recording missing plugins and
        unknown components.
        """
        framework, component = self.name_split(node.name)
        if not framework:
            return self.registry.lookup(node.name)

        plugin = self.registry.plugin_get(framework)
        if plugin is None:
            compiler.context.errors.add(
                ErrorKind.MISSING_PLUGIN,
                f'Plugin "{framework}" is not registered',
                line=node.line,
            )
            return None

        definition = plugin.component_get(component)
        if definition is None:
            available = plugin.componentNames_list()[:appsettings.component_list_limit]
            compiler.context.errors.add(
                ErrorKind.UNKNOWN_COMPONENT,
                f'Component "{component}" not found in plugin "{framework}".',
                details=f"Available components: {', '.join(available)}" if available else None,
                line=node.line,
            )
        return definition

    def component_render(self, node: DirectiveNode, compiler: Any) -> str:
        """Generic resolution: registry lookup, element build, children"""
        definition = self.definition_find(node, compiler)
        if definition is not None and definition.default_attributes:
            definition = self.defaults_filter(node, definition, compiler)

        if definition is not None and not definition.allow_nesting and compiler.directives_contain(node.children):
            compiler.context.errors.add(
                ErrorKind.NESTING_ERROR,
                f'Component "{self.name_split(node.name)[1]}" does not allow nested directives',
                line=node.line,
            )

        resolved = self.builder.element_build(definition, node.attributes, node.kind)
        return node_serialize(resolved.element_make(self.children_make(node, compiler)))

    def defaults_filter(
        self, node: DirectiveNode, definition: ComponentDefinition, compiler: Any
    ) -> ComponentDefinition:
        """Definition whose default attributes passed the security filter"""
        outcome = self.security.attributes_filter(definition.default_attributes)
        if not outcome.blocked:
            return definition
        compiler.context.errors.add(
            ErrorKind.SECURITY_BLOCKED,
            f"Removed unsafe default attribute(s) of \"{self.name_display(node.name)}\": {', '.join(outcome.blocked)}",
            line=node.line,
        )
        return replace(definition, default_attributes=outcome.attributes)

    def unresolved_render(self, node: DirectiveNode, compiler: Any) -> str:
        """Bare div/span around the rendered children, no attributes"""
        tag = "span" if node.kind is DirectiveKind.TEXT else "div"
        return node_serialize(Element(tag, {}, self.children_make(node, compiler)))

    def children_make(self, node: DirectiveNode, compiler: Any) -> List[HNode]:
        """Container label as a leading paragraph, then the rendered children"""
        children: List[HNode] = []
        if node.kind is DirectiveKind.CONTAINER and node.label:
            children.append(Raw(f"<p>{compiler.label_render(node.label)}</p>\n"))
        content = compiler.children_render(node)
        if content:
            children.append(Raw(content))
        return children
