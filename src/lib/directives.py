"""
Built-in directive table for MD++

Side-channel directives are intercepted by name before generic component
resolution. Each one is described by a DirectiveSpec naming its handler
and the capability flag that wires it into a conversion.
"""

from typing import Dict, List, Optional

from ..models.directives import BLOCK_KINDS, DirectiveCategory, DirectiveSpec
from ..models.nodes import DirectiveKind
from .ai_context import aiContext_render
from .ai_placeholder import blockPlaceholder_render, inlinePlaceholder_render
from .kroki import krokiDirective_render
from .script_block import scriptBlock_render
from .style_block import cssLink_render, styleBlock_render


CONTAINER_ONLY = frozenset({DirectiveKind.CONTAINER})
TEXT_ONLY = frozenset({DirectiveKind.TEXT})


class BuiltinDirectives:
    """
    Registry of built-in directive specifications

    Lookup is by directive name and form. Specs registered first win, so
    the order of the *_register() calls is the interception order.

    Example:
        directives = BuiltinDirectives()
        directives.spec_get("script_output", DirectiveKind.CONTAINER).category
        → DirectiveCategory.SCRIPT
    """

    def __init__(self) -> None:
        """Initialize the table and register every built-in directive"""
        self.specs: List[DirectiveSpec] = []
        self.contextDirectives_register()
        self.placeholderDirectives_register()
        self.scriptDirectives_register()
        self.styleDirectives_register()
        self.diagramDirectives_register()

    def register(self, spec: DirectiveSpec) -> None:
        """Register a directive specification"""
        self.specs.append(spec)

    def spec_get(self, name: str, kind: DirectiveKind) -> Optional[DirectiveSpec]:
        """
        Find the built-in spec handling a directive.

        Args:
            name: Raw directive name (``framework_component`` allowed)
            kind: Directive form

        Returns:
            The matching spec, or None for ordinary components
        """
        component = name.split("_", 1)[1] if "_" in name else name
        for spec in self.specs:
            candidate = component if spec.match_component else name
            if spec.matches(candidate, kind):
                return spec
        return None

    def directives_listByCategory(self, category: DirectiveCategory) -> List[DirectiveSpec]:
        """Get all directives in a category"""
        return [spec for spec in self.specs if spec.category == category]

    def names_list(self) -> Dict[str, List[str]]:
        """Directive names and aliases, by category value"""
        names: Dict[str, List[str]] = {}
        for spec in self.specs:
            names.setdefault(spec.category.value, []).extend([spec.name] + spec.aliases)
        return names

    def contextDirectives_register(self) -> None:
        """Register :::ai-context"""
        self.register(DirectiveSpec(
            name='ai-context',
            category=DirectiveCategory.CONTEXT,
            description='Content for AI consumption with independent human visibility',
            handler=aiContext_render,
            capability='ai_context',
            kinds=BLOCK_KINDS,
            match_component=True,
            examples=[
                ':::ai-context[hidden]\nAudience: platform engineers\n:::',
                ':::ai-context{visibility=html-hidden}\nNever shown in markup\n:::',
            ],
        ))

    def placeholderDirectives_register(self) -> None:
        """Register block and inline AI placeholders"""
        self.register(DirectiveSpec(
            name='ai-generate',
            category=DirectiveCategory.PLACEHOLDER,
            description='Block location for downstream AI generation',
            handler=blockPlaceholder_render,
            capability='ai_placeholders',
            kinds=BLOCK_KINDS,
            aliases=['ai_generate'],
            examples=[':::ai-generate{prompt="Summarize the release" format="list"}\n:::'],
        ))

        self.register(DirectiveSpec(
            name='ai',
            category=DirectiveCategory.PLACEHOLDER,
            description='Inline value for downstream AI generation',
            handler=inlinePlaceholder_render,
            capability='ai_placeholders',
            kinds=TEXT_ONLY,
            examples=['Founded in :ai{prompt="founding year" fallback="19xx"}.'],
        ))

    def scriptDirectives_register(self) -> None:
        """Register :::script and its mode variants (script:output)"""
        self.register(DirectiveSpec(
            name='script*',
            category=DirectiveCategory.SCRIPT,
            description='Script block handed to a sandboxed executor',
            handler=scriptBlock_render,
            capability='scripts',
            kinds=CONTAINER_ONLY,
            is_wildcard=True,
            examples=[
                ':::script{lang="js"}\nconsole.log("hi")\n:::',
                ':::script:output\nreturn 6 * 7;\n:::',
            ],
        ))

    def styleDirectives_register(self) -> None:
        """Register :::style and :::link-css"""
        self.register(DirectiveSpec(
            name='style',
            category=DirectiveCategory.STYLE,
            description='Inline CSS emitted as a <style> element',
            handler=styleBlock_render,
            capability='styles',
            kinds=CONTAINER_ONLY,
            examples=[':::style{scoped}\n.note { color: teal; }\n:::'],
        ))

        self.register(DirectiveSpec(
            name='link-css',
            category=DirectiveCategory.STYLE,
            description='External stylesheet emitted as <link rel="stylesheet">',
            handler=cssLink_render,
            capability='styles',
            kinds=CONTAINER_ONLY,
            aliases=['linkcss', 'css-link'],
            examples=[':::link-css\nhttps://unpkg.com/sakura.css/css/sakura.css\n:::'],
        ))

    def diagramDirectives_register(self) -> None:
        """Register :::kroki"""
        self.register(DirectiveSpec(
            name='kroki',
            category=DirectiveCategory.DIAGRAM,
            description='Diagram rendered through a Kroki server URL',
            handler=krokiDirective_render,
            capability='kroki',
            kinds=CONTAINER_ONLY,
            examples=[':::kroki{type="graphviz"}\ndigraph { a -> b }\n:::'],
        ))
