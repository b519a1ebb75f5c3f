"""
Material Icons for markdown-it

Images whose URL uses a ``google:``, ``material:`` or ``md:`` scheme
become Material Icons spans:

    ![icon](google:home)                   basic icon
    ![icon](google:home){.large}           36px icon
    ![icon](google:search){.outlined}      outlined variant
    ![icon](google:star "text-warning")    extra class from the title

Hints come from a ``{...}`` group right after the image, a ``{...}``
group in the alt text, and the title. Size hints become an inline
font-size, variant hints choose the base class, anything else is an
extra class.
"""

import re
from typing import Any, Dict, Iterable, List, Tuple

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

from ..models.elements import Element, Text
from .html import node_serialize
from .log import LOG


ICON_SCHEME = re.compile(r"^(google|material|md):")
HINT_GROUP = re.compile(r"\{([^}]*)\}")
TRAILING_HINTS = re.compile(r"^\{([^}\n]*)\}")
CLASS_NAME = re.compile(r"^[A-Za-z_][\w-]*$")

ICON_SIZES: Dict[str, str] = {
    "small": "font-size: 18px;",
    "md-18": "font-size: 18px;",
    "medium": "font-size: 24px;",
    "md-24": "font-size: 24px;",
    "large": "font-size: 36px;",
    "md-36": "font-size: 36px;",
    "x-large": "font-size: 48px;",
    "md-48": "font-size: 48px;",
}

ICON_VARIANTS: Dict[str, str] = {
    "outlined": "material-icons-outlined",
    "round": "material-icons-round",
    "sharp": "material-icons-sharp",
    "two-tone": "material-icons-two-tone",
    "filled": "material-icons",
}

BASE_CLASS = "material-icons"


def iconUrl_is(url: str) -> bool:
    return bool(ICON_SCHEME.match(url))


def iconName_extract(url: str) -> str:
    """``google:home`` → ``home``"""
    return ICON_SCHEME.sub("", url).strip()


def iconHints_resolve(hints: Iterable[str]) -> Tuple[str, List[str], List[str]]:
    """
    Sort hint words into base class, extra classes and styles.

    Returns:
        (base class, extra classes, inline style declarations)

    Example:
        >>> iconHints_resolve([".large", ".outlined", "text-primary"])
        ('material-icons-outlined', ['text-primary'], ['font-size: 36px;'])
    """
    base = BASE_CLASS
    classes: List[str] = []
    styles: List[str] = []
    for hint in hints:
        name = hint.lstrip(".")
        if name in ICON_SIZES:
            styles.append(ICON_SIZES[name])
        elif name in ICON_VARIANTS:
            base = ICON_VARIANTS[name]
        elif CLASS_NAME.match(name):
            classes.append(name)
    return base, classes, styles


def icon_render(url: str, hints: Iterable[str] = ()) -> str:
    """
    Material Icons span for an icon URL.

    Example:
        >>> icon_render("google:home", [".large"])
        '<span class="material-icons mdpp-icon" style="font-size: 36px;">home</span>'
    """
    base, classes, styles = iconHints_resolve(hints)
    properties: Dict[str, Any] = {"class": list(dict.fromkeys([base, "mdpp-icon", *classes]))}
    if styles:
        properties["style"] = " ".join(styles)
    return node_serialize(Element("span", properties, [Text(iconName_extract(url))]))


def image_iconHints(token: Token) -> List[str]:
    """Hint words from an image token's alt text and title"""
    hints: List[str] = []
    for group in HINT_GROUP.findall(token.content or ""):
        hints.extend(group.split())
    title = token.attrGet("title")
    if title:
        hints.extend(str(title).split())
    return hints


def inline_iconsReplace(children: List[Token]) -> int:
    """Replace icon images in one inline token's children, in place"""
    replaced = 0
    for index, token in enumerate(children):
        if token.type != "image":
            continue
        url = str(token.attrGet("src") or "")
        if not iconUrl_is(url):
            continue

        hints = image_iconHints(token)
        following = children[index + 1] if index + 1 < len(children) else None
        if following is not None and following.type == "text":
            match = TRAILING_HINTS.match(following.content)
            if match:
                hints.extend(match.group(1).split())
                following.content = following.content[match.end():]

        children[index] = Token("html_inline", "", 0, content=icon_render(url, hints))
        replaced += 1
    return replaced


def material_icons(state: StateCore) -> None:
    """Core rule: icon images become html_inline spans"""
    replaced = 0
    for token in state.tokens:
        if token.type == "inline" and token.children:
            replaced += inline_iconsReplace(token.children)
    if replaced:
        LOG(f"Rendered {replaced} Material Icon(s)", level=3)


def icons_plugin(md: MarkdownIt) -> None:
    """Register the Material Icons core rule after inline parsing"""
    md.core.ruler.after("inline", "material_icons", material_icons)
