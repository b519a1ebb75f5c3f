"""
Compiler for MD++ documents

Runs one conversion: parses preprocessed markdown with markdown-it,
lifts every directive subtree out of the SyntaxTreeNode tree, resolves
it, and substitutes the resolved HTML back into the token stream as a
single html_block/html_inline token before rendering the whole stream
once.
"""

import textwrap
from dataclasses import dataclass, field
from html import escape
from typing import Any, Dict, List, Optional, Set

from markdown_it.token import Token
from markdown_it.tree import SyntaxTreeNode
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

from ..config import appsettings
from ..models.formats import FileFormat, FormatCapabilities
from ..models.nodes import DirectiveKind, DirectiveNode
from ..models.options import ParserOptions
from ..models.records import (
    AIContextRecord,
    AIPlaceholderRecord,
    ScriptBlockRecord,
    StyleBlockRecord,
)
from . import kroki
from .errors import ErrorAccumulator
from .lexer import MDPlusPlusLexer
from .log import LOG, WARN
from .resolver import DirectiveResolver
from .syntax import ENV_KEY, TOKEN_KINDS, markdownIt_create


MATH_LANGUAGES = ('math', 'latex', 'katex')
MDPP_LANGUAGES = ('mdpp', 'mdplus', 'mdsc', 'md++')
CODE_TYPES = ('fence', 'code_block')
TEXT_TYPES = ('text', 'code_inline')
BREAK_TYPES = ('softbreak', 'hardbreak')


@dataclass
class ConversionContext:
    """
    Everything one conversion accumulates

    Created fresh by the Parser for every call and discarded afterwards.

    Attributes:
        format: Resolved file format
        capabilities: Format table AND ParserOptions toggles
        options: Options of the calling parser
        errors: Non-fatal diagnostics
        ai_contexts .. styles: Side-channel records, in document order
        ids: Every id handed out so far
        counters: Next generated number per id prefix
    """
    format: FileFormat
    capabilities: FormatCapabilities
    options: ParserOptions
    errors: ErrorAccumulator = field(default_factory=ErrorAccumulator)
    ai_contexts: List[AIContextRecord] = field(default_factory=list)
    placeholders: List[AIPlaceholderRecord] = field(default_factory=list)
    scripts: List[ScriptBlockRecord] = field(default_factory=list)
    styles: List[StyleBlockRecord] = field(default_factory=list)
    ids: Set[str] = field(default_factory=set)
    counters: Dict[str, int] = field(default_factory=dict)

    def id_reserve(self, prefix: str, requested: Optional[str] = None) -> str:
        """
        Hand out an id that is unique within this conversion.

        A requested id is used as is unless it is already taken, in which
        case a numeric suffix is added. Without a request the next
        ``{prefix}-{n}`` is generated.

        Example:
            >>> context.id_reserve("ai")
            'ai-1'
            >>> context.id_reserve("ai", "intro"), context.id_reserve("ai", "intro")
            ('intro', 'intro-2')
        """
        if requested:
            candidate = requested
            suffix = 2
            while candidate in self.ids:
                candidate = f"{requested}-{suffix}"
                suffix += 1
            if candidate != requested:
                WARN(f'Duplicate id "{requested}" renamed to "{candidate}"')
        else:
            while True:
                self.counters[prefix] = self.counters.get(prefix, 0) + 1
                candidate = f"{prefix}-{self.counters[prefix]}"
                if candidate not in self.ids:
                    break
        self.ids.add(candidate)
        return candidate


class Compiler:
    """
    Compiles one preprocessed MD++ document to HTML

    Handlers reach the conversion through this object: the context for
    records and errors, and the rendering helpers for directive children.

    Example:
        compiler = Compiler(context, resolver)
        html = compiler.compile(":::bootstrap_alert{variant=success}\\nOK\\n:::")
    """

    def __init__(self, context: ConversionContext, resolver: DirectiveResolver) -> None:
        self.context = context
        self.resolver = resolver
        self.security = resolver.security
        highlighter = self.code_highlight if context.options.highlight_code else None
        self.md = markdownIt_create(context.capabilities, highlighter)
        self.env: Dict[str, Any] = {ENV_KEY: self}
        self.lines: List[str] = []
        self.line: Optional[int] = None

    def compile(self, text: str) -> str:
        """
        Parse, resolve and render a document.

        Args:
            text: Preprocessed markdown body

        Returns:
            Rendered HTML (without error banners)
        """
        self.lines = text.split("\n")
        tokens = self.md.parse(text, self.env)
        LOG(f"Parsed {len(tokens)} block token(s)", level=3)
        root = SyntaxTreeNode(tokens)
        return self.tokens_render(self.nodes_rebuild(root.children))

    def tokens_render(self, tokens: List[Token]) -> str:
        return self.md.renderer.render(tokens, self.md.options, self.env)

    def nodes_rebuild(self, nodes: List[SyntaxTreeNode]) -> List[Token]:
        """Flatten nodes back to tokens, resolving directive subtrees"""
        tokens: List[Token] = []
        for node in nodes:
            tokens.extend(self.node_rebuild(node))
        return tokens

    def node_rebuild(self, node: SyntaxTreeNode) -> List[Token]:
        if node.type in TOKEN_KINDS:
            return [self.directive_token(node)]

        if node.map:
            self.line = node.map[0] + 1

        if node.token is not None:
            if node.children:
                return [node.token.copy(children=self.nodes_rebuild(node.children))]
            return [node.token]

        opening, closing = node.nester_tokens
        return [opening, *self.nodes_rebuild(node.children), closing]

    def directive_token(self, node: SyntaxTreeNode) -> Token:
        """Resolve a directive subtree into one raw-HTML token"""
        opening = node.nester_tokens.opening
        meta = opening.meta
        kind: DirectiveKind = meta["kind"]
        if opening.map:
            self.line = opening.map[0] + 1

        directive = DirectiveNode(
            kind=kind,
            name=meta["name"],
            attributes=dict(meta["attributes"]),
            label=meta["label"],
            children=list(node.children),
            line=self.line,
            source=self.body_get(node) if kind is DirectiveKind.CONTAINER else None,
        )
        html = self.resolver.directive_resolve(directive, self)

        if kind is DirectiveKind.TEXT:
            return Token("html_inline", "", 0, content=html)
        if html and not html.endswith("\n"):
            html += "\n"
        return Token("html_block", "", 0, content=html, block=True, map=opening.map)

    def body_get(self, node: SyntaxTreeNode) -> Optional[str]:
        """
        Verbatim body of a container directive.

        A body that is a single fenced code block yields the fence
        content; otherwise the source lines between the colon fences,
        dedented.
        """
        if len(node.children) == 1 and node.children[0].type in CODE_TYPES:
            return node.children[0].content

        source_map = node.nester_tokens.opening.map
        if not source_map:
            return None
        start, end = source_map
        return textwrap.dedent("\n".join(self.lines[start + 1:end]))

    def capability_isEnabled(self, name: str) -> bool:
        """Capability flag by name; ``kroki`` also needs the enable_kroki option"""
        if name == "kroki":
            return self.context.options.enable_kroki and self.context.capabilities.components
        return bool(getattr(self.context.capabilities, name))

    def children_render(self, directive: DirectiveNode) -> str:
        """HTML of a directive's children (nested directives resolved)"""
        if not directive.children:
            return ""
        return self.tokens_render(self.nodes_rebuild(directive.children))

    def label_render(self, label: str) -> str:
        """Inline-rendered HTML of a label"""
        tokens = self.md.parseInline(label, self.env)
        return self.tokens_render(self.nodes_rebuild(SyntaxTreeNode(tokens).children))

    def text_extract(self, directive: DirectiveNode) -> str:
        """Plain text of a directive's children, one line per block"""
        return self.nodes_text(directive.children).strip()

    def nodes_text(self, nodes: List[SyntaxTreeNode]) -> str:
        parts: List[str] = []
        for node in nodes:
            if node.type in TEXT_TYPES:
                parts.append(node.content)
            elif node.type in BREAK_TYPES:
                parts.append("\n")
            elif node.type in CODE_TYPES:
                parts.append(node.content)
            elif node.children:
                parts.append(self.nodes_text(node.children))
                if node.block and node.type != "inline":
                    parts.append("\n")
        return "".join(parts)

    def source_extract(self, directive: DirectiveNode) -> str:
        """Verbatim body when known, plain text of the children otherwise"""
        if directive.source is not None:
            return directive.source
        return self.text_extract(directive)

    def directives_contain(self, nodes: List[SyntaxTreeNode]) -> bool:
        """True when any node in the subtrees is a directive"""
        for node in nodes:
            if node.type in TOKEN_KINDS or self.directives_contain(node.children):
                return True
        return False

    def fence_render(self, language: str, content: str) -> Optional[str]:
        """
        Fence renderers that replace markdown-it's <pre><code> output.

        Returns:
            HTML for kroki, mermaid and math fences, None for the rest
        """
        options = self.context.options
        capabilities = self.context.capabilities
        name = language.lower()

        if options.enable_kroki and kroki.fence_isKroki(name):
            return kroki.diagram_render(kroki.type_extract(name), content, options.kroki_server_url)
        if capabilities.mermaid and name == "mermaid":
            return f'<pre class="mermaid">{escape(content)}</pre>\n'
        if capabilities.math and name in MATH_LANGUAGES:
            return f'<div class="math math-display" data-math-style="display">{escape(content)}</div>\n'
        return None

    def code_highlight(self, code: str, language: str, attributes: str) -> str:
        """
        Pygments highlighter for markdown-it fences.

        Returns an empty string for fences without a language so that
        markdown-it escapes them itself.
        """
        if not language:
            return ""

        lexer: Lexer
        try:
            if language.lower() in MDPP_LANGUAGES:
                lexer = MDPlusPlusLexer()
            else:
                lexer = get_lexer_by_name(language)
        except ClassNotFound:
            lexer = TextLexer()

        formatter = HtmlFormatter(style=appsettings.pygments_style, noclasses=True, nowrap=True)
        return highlight(code, lexer, formatter)
