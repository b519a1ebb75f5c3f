"""
Text preprocessor for MD++ source

Runs before structural parsing. Three pure text rewrites:

1. Fenced code (``` and ~~~) and inline code spans are lifted out into
   NUL-delimited placeholders so nothing below can touch code samples.
2. ``framework:component`` directive names are rewritten to the canonical
   ``framework_component`` form (directive names may not contain colons).
3. GitHub/Obsidian callouts (``> [!NOTE] Title``) become container
   directives against the callout framework, closed where the blockquote
   ends. A fence quoted inside a callout loses its ``> `` prefixes along
   with the rest of the callout body.

Code is restored byte-for-byte at the end, apart from those prefixes.
Preprocessing always succeeds.
"""

import re
from typing import List, Optional

from ..config import appsettings
from ..models.parser import ProtectedSource
from .log import LOG


# Fences close on the same run of backticks or tildes that opened them.
CODE_PATTERN = re.compile(r"(`{3,}|~{3,})[\s\S]*?\1|`[^`\n]+`")

# :::framework:component followed by [, {, whitespace or end of input. The
# colon run may not follow a word character so clock times and URLs survive.
DIRECTIVE_NAME_PATTERN = re.compile(r"(?<![\w:])(:+)([A-Za-z][\w-]*):([\w-]+)(?=[\[{\s]|$)")

CALLOUT_PATTERN = re.compile(r"^(>[ ]?)\[!(\w+)\][ ]?(.*)$", re.MULTILINE)

BLOCKQUOTE_PREFIX = re.compile(r"^>[ ]?")

QUOTED_LINE_PREFIX = re.compile(r"^>[ ]?", re.MULTILINE)


class TextPreprocessor:
    """
    Canonicalizes directive syntax ahead of the structural parser

    Stateless apart from configuration; safe to share between conversions.

    Example:
        >>> TextPreprocessor().process(":::bootstrap:alert{variant=info}\\nHi\\n:::")
        ':::bootstrap_alert{variant=info}\\nHi\\n:::'
    """

    def __init__(self, callout_framework: Optional[str] = None) -> None:
        self.callout_framework = callout_framework or appsettings.callout_framework
        self.callout_marker = appsettings.callout_marker
        self.placeholder_pattern = re.compile(
            re.escape(appsettings.placeholder_prefix) + r"(\d+)" + re.escape(appsettings.placeholder_suffix)
        )

    def process(self, text: str, callouts: bool = True, directives: bool = True) -> str:
        """
        Run the full preprocessing pass.

        Args:
            text: Markdown body (frontmatter already removed)
            callouts: Convert callout blockquotes
            directives: Canonicalize framework:component names

        Returns:
            Preprocessed text with code fences restored verbatim
        """
        if not directives and not callouts:
            return text

        protected = self.codeblocks_protect(text)
        LOG(f"Protected {len(protected.blocks)} code span(s)", level=3)

        processed = protected.text
        blocks = list(protected.blocks)
        if directives:
            processed = self.directives_canonicalize(processed)
        if callouts:
            processed = self.callouts_convert(processed)
            processed = self.callouts_close(processed, blocks)
            processed = processed.replace(f":::{self.callout_marker}", ":::")

        return self.codeblocks_restore(processed, blocks)

    def codeblocks_protect(self, text: str) -> ProtectedSource:
        """
        Replace every fence and inline code span with an opaque placeholder.

        Returns:
            ProtectedSource with the rewritten text and the original spans
        """
        blocks: List[str] = []

        def placeholder_substitute(match: re.Match) -> str:
            blocks.append(match.group(0))
            return appsettings.placeHolder_make(len(blocks) - 1)

        return ProtectedSource(
            text=CODE_PATTERN.sub(placeholder_substitute, text),
            blocks=blocks,
        )

    def codeblocks_restore(self, text: str, blocks: List[str]) -> str:
        """Put protected code spans back, byte-for-byte"""
        if not blocks:
            return text

        def block_restore(match: re.Match) -> str:
            index = appsettings.codeIndex_extract(match.group(0))
            if index is None or index >= len(blocks):
                return match.group(0)
            return blocks[index]

        return self.placeholder_pattern.sub(block_restore, text)

    def directives_canonicalize(self, text: str) -> str:
        """
        Rewrite ``:framework:component`` directive names to ``:framework_component``.

        Applies to every colon count: containers (3+), leaves (2) and
        inline text directives (1).
        """
        return DIRECTIVE_NAME_PATTERN.sub(r"\1\2_\3", text)

    def callouts_convert(self, text: str) -> str:
        """
        Turn ``> [!TYPE] Title`` lines into marked container openers.

        Example:
            "> [!WARNING] Careful" → ":::__callout__admonitions_warning[Careful]"
        """

        def callout_substitute(match: re.Match) -> str:
            callout_type = match.group(2).lower()
            title = match.group(3).strip()
            label = f"[{title}]" if title else ""
            return f":::{self.callout_marker}{self.callout_framework}_{callout_type}{label}"

        return CALLOUT_PATTERN.sub(callout_substitute, text)

    def callouts_close(self, text: str, blocks: Optional[List[str]] = None) -> str:
        """
        Consume blockquote continuation lines of each marked callout and
        emit its closing fence.

        A blank line stays inside the callout only when the next line is
        still part of the blockquote. Any other non-blockquote line closes
        it. An unterminated callout is closed at end of input.

        Protected code referenced from a continuation line sits inside the
        quote as well, so its own ``> `` prefixes are stripped in ``blocks``.
        """
        opener = f":::{self.callout_marker}"
        lines = text.split("\n")
        result: List[str] = []
        in_callout = False

        for index, line in enumerate(lines):
            if line.startswith(opener):
                if in_callout:
                    result.append(":::")
                in_callout = True
                result.append(line)
                continue

            if not in_callout:
                result.append(line)
                continue

            if line.startswith(">"):
                result.append(BLOCKQUOTE_PREFIX.sub("", line, count=1))
                if blocks:
                    self.quotedBlocks_unquote(line, blocks)
            elif line.strip() == "":
                next_line = lines[index + 1] if index + 1 < len(lines) else ""
                if next_line.startswith(">"):
                    result.append(line)
                else:
                    result.append(":::")
                    result.append(line)
                    in_callout = False
            else:
                result.append(":::")
                result.append(line)
                in_callout = False

        if in_callout:
            result.append(":::")

        return "\n".join(result)

    def quotedBlocks_unquote(self, line: str, blocks: List[str]) -> None:
        """Strip one ``> `` level from every line of the blocks ``line`` references"""
        for match in self.placeholder_pattern.finditer(line):
            index = int(match.group(1))
            if index < len(blocks):
                blocks[index] = QUOTED_LINE_PREFIX.sub("", blocks[index])
