"""
reveal.js presentations

Cuts a markdown body into slides and wraps the rendered slides in a
reveal.js document or an embeddable preview. Slide syntax:

    # First slide
    ---
    # Second slide
    ----
    ## Stacked below the second
    <!-- .slide: data-background="#222" .center #intro -->

    Note:
    Speaker notes run to the end of the slide.

Separators inside code never cut a slide. Rendering of each slide's
markdown is left to the caller, so directives and side-channels work
per slide exactly as in a plain conversion.
"""

import json
import re
from html import escape
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..config import appsettings
from ..models.slides import (
    PRESENTATION_SWITCHES,
    REVEAL_THEMES,
    REVEAL_TRANSITIONS,
    Presentation,
    RevealOptions,
    Slide,
)
from .html import attribute_render
from .log import LOG, WARN
from .preprocessor import TextPreprocessor


SLIDE_COMMENT = re.compile(r"<!--\s*\.slide:\s*(.*?)\s*-->", re.DOTALL)
SLIDE_ATTRIBUTE = re.compile(r'([\w-]+)\s*=\s*"([^"]*)"|(\w[\w-]*)\s*=\s*(\S+)')
SLIDE_CLASS = re.compile(r"(?<![\w-])\.(\w[\w-]*)")
SLIDE_ID = re.compile(r"(?<![\w-])#(\w[\w-]*)")
SPEAKER_NOTES = re.compile(r"\n\s*Notes?:\s*([\s\S]*)$", re.IGNORECASE)

REVEAL_PLUGINS = "[RevealNotes, RevealMarkdown, RevealHighlight, RevealMath.KaTeX]"

Renderer = Callable[[str], str]


def revealOptions_fromFrontmatter(frontmatter: Optional[Mapping[str, Any]] = None) -> RevealOptions:
    """
    reveal.js options with ``theme``, ``transition`` and ``title`` taken
    from frontmatter. Unknown themes and transitions keep the default.
    """
    options = RevealOptions()
    if not frontmatter:
        return options

    theme = frontmatter.get("theme")
    if theme:
        if theme in REVEAL_THEMES:
            options.theme = theme
        else:
            WARN(f'Unknown reveal.js theme "{theme}", using "{options.theme}"')

    transition = frontmatter.get("transition")
    if transition:
        if transition in REVEAL_TRANSITIONS:
            options.transition = transition
        else:
            WARN(f'Unknown reveal.js transition "{transition}", using "{options.transition}"')

    if frontmatter.get("title"):
        options.title = str(frontmatter["title"])
    return options


def presentationSwitch_is(frontmatter: Optional[Mapping[str, Any]]) -> bool:
    """True when ``presentation``, ``reveal`` or ``slides`` is set to true"""
    return bool(frontmatter) and any(frontmatter.get(key) is True for key in PRESENTATION_SWITCHES)


def presentation_is(markdown: str, frontmatter: Optional[Mapping[str, Any]] = None) -> bool:
    """
    True for a frontmatter switch (``presentation``, ``reveal`` or
    ``slides`` set to true), or for a body with enough ``---`` separators
    outside code.

    Example:
        >>> presentation_is("# A", {"presentation": True})
        True
    """
    if presentationSwitch_is(frontmatter):
        return True
    protected = TextPreprocessor().codeblocks_protect(markdown)
    separators = re.findall(RevealOptions.horizontal_separator, protected.text, re.MULTILINE)
    return len(separators) >= appsettings.slide_separator_threshold


def slideAttributes_parse(content: str) -> Dict[str, str]:
    """
    Attributes of a ``<!-- .slide: ... -->`` comment.

    ``key="value"`` and ``key=value`` pairs are read first; ``.class``
    and ``#id`` shorthands are read from what remains.

    Example:
        >>> slideAttributes_parse('<!-- .slide: data-state="dark" .center -->')
        {'data-state': 'dark', 'class': 'center'}
    """
    match = SLIDE_COMMENT.search(content)
    if not match:
        return {}

    attributes: Dict[str, str] = {}
    for pair in SLIDE_ATTRIBUTE.finditer(match.group(1)):
        if pair.group(1):
            attributes[pair.group(1)] = pair.group(2)
        else:
            attributes[pair.group(3)] = pair.group(4)

    remainder = SLIDE_ATTRIBUTE.sub(" ", match.group(1))
    classes = SLIDE_CLASS.findall(remainder)
    if classes:
        existing = attributes.get("class")
        attributes["class"] = " ".join(([existing] if existing else []) + classes)
    identifier = SLIDE_ID.search(remainder)
    if identifier:
        attributes["id"] = identifier.group(1)
    return attributes


def speakerNotes_extract(content: str) -> Tuple[str, Optional[str]]:
    """Split a slide into its content and the ``Note:`` section, if any"""
    match = SPEAKER_NOTES.search(content)
    if not match:
        return content, None
    return content[:match.start()].strip(), match.group(1).strip()


def slide_make(part: str, preprocessor: TextPreprocessor, blocks: List[str]) -> Slide:
    """Build one slide from protected text, restoring its code"""
    attributes = slideAttributes_parse(part)
    content, notes = speakerNotes_extract(part)
    content = SLIDE_COMMENT.sub("", content).strip()
    return Slide(
        content=preprocessor.codeblocks_restore(content, blocks),
        attributes=attributes,
        notes=preprocessor.codeblocks_restore(notes, blocks) if notes else None,
    )


def slides_parse(markdown: str, options: Optional[RevealOptions] = None) -> Presentation:
    """
    Cut a markdown body into slides.

    Args:
        markdown: Body with frontmatter already removed
        options: reveal.js options (separators are read from here)

    Returns:
        Presentation; the first part of a vertical stack is the
        horizontal slide, the rest hang below it
    """
    options = options or RevealOptions()
    preprocessor = TextPreprocessor()
    protected = preprocessor.codeblocks_protect(markdown)
    horizontal = re.compile(options.horizontal_separator, re.MULTILINE)
    vertical = re.compile(options.vertical_separator, re.MULTILINE)

    slides: List[Slide] = []
    for part in horizontal.split(protected.text):
        if not part.strip():
            continue
        stack = [
            slide_make(piece.strip(), preprocessor, protected.blocks)
            for piece in vertical.split(part.strip())
            if piece.strip()
        ]
        if stack:
            stack[0].vertical_slides = stack[1:]
            slides.append(stack[0])

    presentation = Presentation(slides=slides, options=options)
    LOG(f"Parsed {len(slides)} slide(s), {presentation.slide_count} with vertical stacks", level=2)
    return presentation


def slideAttributes_render(attributes: Dict[str, str]) -> str:
    return "".join(attribute_render(key, value) for key, value in attributes.items())


def section_render(slide: Slide, render: Renderer, notes: bool) -> str:
    """One <section>, speaker notes included when asked for"""
    aside = ""
    if notes and slide.notes:
        aside = f'<aside class="notes">{render(slide.notes)}</aside>'
    separator = "\n" if notes else ""
    return (
        f"<section{slideAttributes_render(slide.attributes)}>"
        f"{separator}{render(slide.content)}{separator}{aside}</section>\n"
    )


def sections_render(presentation: Presentation, render: Renderer, notes: bool = True) -> str:
    """All slides, vertical stacks wrapped in an outer <section>"""
    html = ""
    for slide in presentation.slides:
        if slide.vertical_slides:
            html += "<section>\n"
            html += "  " + section_render(slide, render, notes)
            for below in slide.vertical_slides:
                html += "  " + section_render(below, render, notes)
            html += "</section>\n"
        else:
            html += section_render(slide, render, notes)
    return html


def revealHtml_generate(presentation: Presentation, render: Renderer, preamble: str = "") -> str:
    """
    Standalone reveal.js document.

    Args:
        presentation: Parsed slides and options
        render: Markdown to HTML for one slide body or notes section
        preamble: HTML placed ahead of the slides (error banners, assets)

    Returns:
        Complete HTML document
    """
    return revealDocument_wrap(presentation, sections_render(presentation, render), preamble)


def revealDocument_wrap(presentation: Presentation, sections: str, preamble: str = "") -> str:
    """Standalone reveal.js document around already rendered sections"""
    options = presentation.options
    cdn = escape(options.cdn_url, quote=True)
    theme = escape(options.theme, quote=True)
    config = json.dumps(options.to_dict())

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(options.title)}</title>
  <link rel="stylesheet" href="{cdn}/dist/reset.css">
  <link rel="stylesheet" href="{cdn}/dist/reveal.css">
  <link rel="stylesheet" href="{cdn}/dist/theme/{theme}.css">
  <link rel="stylesheet" href="{cdn}/plugin/highlight/monokai.css">
  <style>
    .reveal pre {{ box-shadow: none; }}
    .reveal code {{ font-family: 'Fira Code', monospace; }}
  </style>
</head>
<body>
{preamble}  <div class="reveal">
    <div class="slides">
{sections}
    </div>
  </div>
  <script src="{cdn}/dist/reveal.js"></script>
  <script src="{cdn}/plugin/notes/notes.js"></script>
  <script src="{cdn}/plugin/markdown/markdown.js"></script>
  <script src="{cdn}/plugin/highlight/highlight.js"></script>
  <script src="{cdn}/plugin/math/math.js"></script>
  <script>
    Reveal.initialize(Object.assign({config}, {{ plugins: {REVEAL_PLUGINS} }}));
  </script>
</body>
</html>
"""


def revealHtml_generateEmbedded(presentation: Presentation, render: Renderer, preamble: str = "") -> str:
    """
    Preview fragment for embedding in a page: slides without notes, a
    slide count and a start button for the host page to wire up.
    """
    return revealPreview_wrap(presentation, sections_render(presentation, render, notes=False), preamble)


def revealPreview_wrap(presentation: Presentation, sections: str, preamble: str = "") -> str:
    """Preview fragment around already rendered sections"""
    theme = escape(presentation.options.theme, quote=True)
    return f"""<div class="mdpp-reveal-container" data-theme="{theme}">
{preamble}  <div class="reveal-preview">
    <div class="slides-preview">
{sections}
    </div>
  </div>
  <div class="reveal-info">
    <span class="slide-count">{len(presentation.slides)} slides</span>
    <button class="reveal-fullscreen-btn" type="button" data-mdpp-action="present">▶ Start Presentation</button>
  </div>
</div>
"""
