"""
Directive syntax for markdown-it

Extends a markdown-it-py instance with the three directive forms:

    :::name[label]{attrs}      container (3+ colons, closed by a colon line)
    ...
    :::

    ::name[label]{attrs}       leaf (one line)

    :name[label]{attrs}        text (inline; label or attributes required)

Each form becomes an open/close token pair (``container_directive_open``
etc.) whose ``meta`` carries kind, name, label and attributes. The
compiler later lifts those subtrees out of the SyntaxTreeNode tree and
resolves them.

The fence render rule hands mermaid, math and kroki fences to the
conversion in ``env["mdpp"]`` before falling back to markdown-it's own
``<pre><code>`` output.
"""

import re
from typing import Any, Callable, Dict, Optional

from markdown_it import MarkdownIt
from markdown_it.common.utils import unescapeAll
from markdown_it.rules_block import StateBlock
from markdown_it.rules_inline import StateInline

from ..models.formats import FormatCapabilities
from ..models.nodes import DirectiveKind
from ..models.parser import DirectiveHead
from .icons import icons_plugin


ENV_KEY = "mdpp"

NAME_PATTERN = re.compile(r"[A-Za-z][\w-]*")
ATTRIBUTE_KEY_PATTERN = re.compile(r"[A-Za-z_:@][\w:.\-]*")
SHORTHAND_PATTERN = re.compile(r"[^\s{}\"'=.#]+")
BARE_VALUE_PATTERN = re.compile(r"[^\s\"'=<>`{}]+")
FENCE_PATTERN = re.compile(r"^(`{3,}|~{3,})")

TOKEN_KINDS: Dict[str, DirectiveKind] = {
    "container_directive": DirectiveKind.CONTAINER,
    "leaf_directive": DirectiveKind.LEAF,
    "text_directive": DirectiveKind.TEXT,
}


def brackets_findMatching(src: str, pos: int, maximum: int) -> int:
    """
    Index of the ``]`` closing the ``[`` at ``pos``, or -1.

    Nested brackets are balanced; backslash escapes are skipped.
    """
    depth = 0
    index = pos
    while index < maximum:
        char = src[index]
        if char == "\\":
            index += 2
            continue
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return -1


def braces_findEnd(src: str, pos: int, maximum: int) -> int:
    """Index of the ``}`` closing the ``{`` at ``pos`` (quote-aware), or -1"""
    quote: Optional[str] = None
    for index in range(pos + 1, maximum):
        char = src[index]
        if quote:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == "{":
            return -1
        elif char == "}":
            return index
    return -1


def attributes_parse(text: str) -> Optional[Dict[str, str]]:
    """
    Parse the inside of a ``{...}`` attribute block.

    Values may be double-quoted, single-quoted or bare. ``.x`` and ``#x``
    shorthands are kept as keys ``.x``/``#x`` with an empty value, and a
    key without a value is a flag with an empty value.

    Returns:
        The attribute bag in source order, or None for malformed input

    Example:
        >>> attributes_parse('variant="success" .wide #main open')
        {'variant': 'success', '.wide': '', '#main': '', 'open': ''}
    """
    attributes: Dict[str, str] = {}
    pos = 0
    length = len(text)

    while pos < length:
        char = text[pos]
        if char.isspace():
            pos += 1
            continue

        if char in ".#":
            match = SHORTHAND_PATTERN.match(text, pos + 1)
            if not match:
                return None
            attributes[char + match.group(0)] = ""
            pos = match.end()
            continue

        match = ATTRIBUTE_KEY_PATTERN.match(text, pos)
        if not match:
            return None
        key = match.group(0)
        pos = match.end()

        while pos < length and text[pos].isspace():
            pos += 1
        if pos >= length or text[pos] != "=":
            attributes[key] = ""
            continue

        pos += 1
        while pos < length and text[pos].isspace():
            pos += 1
        if pos >= length:
            return None

        if text[pos] in "\"'":
            close = text.find(text[pos], pos + 1)
            if close < 0:
                return None
            attributes[key] = text[pos + 1:close]
            pos = close + 1
        else:
            match = BARE_VALUE_PATTERN.match(text, pos)
            if not match:
                return None
            attributes[key] = match.group(0)
            pos = match.end()

    return attributes


def requestedId_get(attributes: Dict[str, str]) -> Optional[str]:
    """Id given as ``id=...`` or as a ``#shorthand``, if any"""
    if attributes.get("id"):
        return attributes["id"]
    for key in attributes:
        if key.startswith("#") and len(key) > 1:
            return key[1:]
    return None


def directiveHead_parse(src: str, pos: int, maximum: int) -> Optional[DirectiveHead]:
    """
    Scan ``name[label]{attrs}`` starting at ``pos`` (just past the colons).

    Returns:
        DirectiveHead, or None when the text is not a directive head
    """
    match = NAME_PATTERN.match(src, pos, maximum)
    if not match:
        return None

    head = DirectiveHead(name=match.group(0), end=match.end())

    if head.end < maximum and src[head.end] == "[":
        close = brackets_findMatching(src, head.end, maximum)
        if close < 0:
            return None
        head.label_start = head.end + 1
        head.label_end = close
        head.label = src[head.label_start:close]
        head.end = close + 1

    if head.end < maximum and src[head.end] == "{":
        close = braces_findEnd(src, head.end, maximum)
        if close < 0:
            return None
        attributes = attributes_parse(src[head.end + 1:close])
        if attributes is None:
            return None
        head.attributes = attributes
        head.end = close + 1

    return head


def _colons_count(src: str, pos: int, maximum: int) -> int:
    count = 0
    while pos + count < maximum and src[pos + count] == ":":
        count += 1
    return count


def _meta_make(kind: DirectiveKind, head: DirectiveHead) -> Dict[str, Any]:
    return {
        "kind": kind,
        "name": head.name,
        "label": head.label,
        "attributes": dict(head.attributes),
    }


def container_directive(state: StateBlock, startLine: int, endLine: int, silent: bool) -> bool:
    """Block rule for ``:::name`` containers"""
    if state.sCount[startLine] - state.blkIndent >= 4:
        return False

    src = state.src
    start = state.bMarks[startLine] + state.tShift[startLine]
    maximum = state.eMarks[startLine]

    colons = _colons_count(src, start, maximum)
    if colons < 3:
        return False

    head = directiveHead_parse(src, start + colons, maximum)
    if head is None or src[head.end:maximum].strip():
        return False

    if silent:
        return True

    # Find the closing colon line; nested openers raise the depth and
    # fenced code is skipped
    nextLine = startLine
    depth = 0
    closed = False
    fence: Optional[str] = None

    while True:
        nextLine += 1
        if nextLine >= endLine:
            break

        lineStart = state.bMarks[nextLine] + state.tShift[nextLine]
        lineMax = state.eMarks[nextLine]
        if lineStart < lineMax and state.sCount[nextLine] < state.blkIndent:
            break

        line = src[lineStart:lineMax]
        fence_match = FENCE_PATTERN.match(line)
        if fence:
            if fence_match and fence_match.group(1).startswith(fence) and not line[fence_match.end():].strip():
                fence = None
            continue
        if fence_match:
            fence = fence_match.group(1)
            continue

        if state.sCount[nextLine] - state.blkIndent >= 4:
            continue

        count = _colons_count(line, 0, len(line))
        if count < 3:
            continue

        if not line[count:].strip():
            if depth == 0:
                if count >= colons:
                    closed = True
                    break
            else:
                depth -= 1
        elif directiveHead_parse(line, count, len(line)) is not None:
            depth += 1

    old_parent = state.parentType
    old_line_max = state.lineMax
    state.parentType = "container_directive"  # type: ignore[assignment]
    state.lineMax = nextLine

    token = state.push("container_directive_open", "div", 1)
    token.markup = ":" * colons
    token.block = True
    token.info = head.name
    token.map = [startLine, nextLine]
    token.meta = _meta_make(DirectiveKind.CONTAINER, head)

    state.md.block.tokenize(state, startLine + 1, nextLine)

    token = state.push("container_directive_close", "div", -1)
    token.markup = ":" * colons
    token.block = True

    state.parentType = old_parent
    state.lineMax = old_line_max
    state.line = nextLine + (1 if closed else 0)
    return True


def leaf_directive(state: StateBlock, startLine: int, endLine: int, silent: bool) -> bool:
    """Block rule for one-line ``::name`` leaves"""
    if state.sCount[startLine] - state.blkIndent >= 4:
        return False

    src = state.src
    start = state.bMarks[startLine] + state.tShift[startLine]
    maximum = state.eMarks[startLine]

    if _colons_count(src, start, maximum) != 2:
        return False

    head = directiveHead_parse(src, start + 2, maximum)
    if head is None or src[head.end:maximum].strip():
        return False

    if silent:
        return True

    token = state.push("leaf_directive_open", "div", 1)
    token.markup = "::"
    token.block = True
    token.info = head.name
    token.map = [startLine, startLine + 1]
    token.meta = _meta_make(DirectiveKind.LEAF, head)

    if head.label:
        token = state.push("inline", "", 0)
        token.content = head.label
        token.map = [startLine, startLine + 1]
        token.children = []

    token = state.push("leaf_directive_close", "div", -1)
    token.markup = "::"
    token.block = True

    state.line = startLine + 1
    return True


def text_directive(state: StateInline, silent: bool) -> bool:
    """Inline rule for ``:name[label]{attrs}``"""
    src = state.src
    pos = state.pos

    if src[pos] != ":":
        return False
    if pos > 0 and (src[pos - 1].isalnum() or src[pos - 1] in ":_"):
        return False
    if pos + 1 < state.posMax and src[pos + 1] == ":":
        return False

    head = directiveHead_parse(src, pos + 1, state.posMax)
    if head is None:
        return False
    # Bare ":word" is prose
    if not head.has_label and head.end == pos + 1 + len(head.name):
        return False

    if not silent:
        token = state.push("text_directive_open", "span", 1)
        token.markup = ":"
        token.info = head.name
        token.meta = _meta_make(DirectiveKind.TEXT, head)

        if head.has_label:
            old_pos, old_max = state.pos, state.posMax
            state.pos = head.label_start
            state.posMax = head.label_end
            state.md.inline.tokenize(state)
            state.pos, state.posMax = old_pos, old_max

        token = state.push("text_directive_close", "span", -1)
        token.markup = ":"

    state.pos = head.end
    return True


def directive_plugin(md: MarkdownIt) -> None:
    """Register the three directive rules on a markdown-it instance"""
    alternatives = {"alt": ["paragraph", "reference", "blockquote", "list"]}
    md.block.ruler.before("fence", "container_directive", container_directive, alternatives)
    md.block.ruler.before("fence", "leaf_directive", leaf_directive, alternatives)
    md.inline.ruler.before("emphasis", "text_directive", text_directive)


def fence_render(self, tokens, idx, options, env):
    """
    Render rule for fences: give the active conversion first refusal
    (mermaid, math, kroki), then fall back to markdown-it's output.
    """
    token = tokens[idx]
    conversion = env.get(ENV_KEY) if env else None
    if conversion is not None:
        info = unescapeAll(token.info).strip() if token.info else ""
        language = info.split(maxsplit=1)[0] if info else ""
        rendered = conversion.fence_render(language, token.content)
        if rendered is not None:
            return rendered
    return self.fence(tokens, idx, options, env)


def markdownIt_create(
    capabilities: FormatCapabilities,
    highlight: Optional[Callable[[str, str, str], str]] = None,
) -> MarkdownIt:
    """
    Build a markdown-it instance wired for one conversion.

    CommonMark with raw HTML; tables and strikethrough when the gfm
    capability is on; the directive rules whenever a directive-consuming
    stage is enabled; Material Icons images with the icons capability.

    Args:
        capabilities: Effective capability set of the conversion
        highlight: Optional fence highlighter (code, lang, attrs) -> html

    Returns:
        A fresh MarkdownIt instance
    """
    options: Dict[str, Any] = {"html": True}
    if highlight is not None:
        options["highlight"] = highlight

    md = MarkdownIt("commonmark", options)
    if capabilities.gfm:
        md.enable(["table", "strikethrough"])
    if capabilities.directives or capabilities.callouts:
        md.use(directive_plugin)
    if capabilities.icons:
        md.use(icons_plugin)
    md.add_render_rule("fence", fence_render)
    return md
