"""
Built-in directive specification and metadata models

Side-channel directives (AI context, placeholders, scripts, styles,
diagrams) are not plugin components: they are intercepted by name before
generic component resolution. Each one is described by a DirectiveSpec
that also names the format capability gating it.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List, Set

from .nodes import DirectiveKind


ALL_KINDS: FrozenSet[DirectiveKind] = frozenset(DirectiveKind)
BLOCK_KINDS: FrozenSet[DirectiveKind] = frozenset({DirectiveKind.CONTAINER, DirectiveKind.LEAF})


class DirectiveCategory(Enum):
    """
    Categories of built-in directives

    Used for organization, documentation generation, and validation.
    """
    CONTEXT = "context"          # :::ai-context
    PLACEHOLDER = "placeholder"  # :::ai-generate, :ai{}
    SCRIPT = "script"            # :::script, :::script:output
    STYLE = "style"              # :::style, :::link-css
    DIAGRAM = "diagram"          # :::kroki


@dataclass
class DirectiveSpec:
    """
    Specification for a built-in directive

    Attributes:
        name: Directive name as written after the colons
        category: Category for organization
        description: Human-readable description
        handler: Render function (node, compiler) -> HNode | None
        capability: FormatCapabilities flag that wires this directive in
        kinds: Directive forms this spec accepts
        match_component: Match on the component part of framework_component
        is_wildcard: Whether the name is a prefix pattern (e.g., script*)
        examples: Example usage strings
        aliases: Alternative names for the directive
    """
    name: str
    category: DirectiveCategory
    description: str
    handler: Callable
    capability: str
    kinds: FrozenSet[DirectiveKind] = ALL_KINDS
    match_component: bool = False
    is_wildcard: bool = False
    examples: List[str] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)

    def matches(self, directive_name: str, kind: DirectiveKind) -> bool:
        """
        Check if this spec matches a directive name and form

        Handles wildcards ('script*' matches 'script' and 'script_output';
        style names compare case-insensitively).

        Args:
            directive_name: Name (or component part) to check
            kind: Directive form

        Returns:
            True if this spec handles the directive
        """
        if kind not in self.kinds:
            return False

        candidate = directive_name.lower() if self.category is DirectiveCategory.STYLE else directive_name

        if candidate == self.name or candidate in self.aliases:
            return True

        if self.is_wildcard:
            prefix = self.name.rstrip('*')
            if candidate == prefix or candidate.startswith(prefix + ':') or candidate.startswith(prefix + '_'):
                return True

        return False


# Names that never reach generic component resolution
RESERVED_DIRECTIVES: Set[str] = {
    'ai-context',
    'ai-generate',
    'ai_generate',
    'ai',
    'script',
    'style',
    'link-css',
    'linkcss',
    'css-link',
    'kroki',
}


def reserved_is(directive_name: str) -> bool:
    """Check if a directive name is reserved"""
    return directive_name in RESERVED_DIRECTIVES or directive_name.startswith('script_')
