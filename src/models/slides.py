"""
Presentation models

A presentation is a markdown body cut into slides at ``---`` lines, with
``----`` lines stacking vertical slides under a horizontal one. The
reveal.js options come from settings, overridden by frontmatter.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import appsettings


REVEAL_THEMES = (
    'black', 'white', 'league', 'beige', 'sky',
    'night', 'serif', 'simple', 'solarized',
    'blood', 'moon', 'dracula',
)

REVEAL_TRANSITIONS = ('none', 'fade', 'slide', 'convex', 'concave', 'zoom')

# Frontmatter keys that switch a document into presentation mode
PRESENTATION_SWITCHES = ('presentation', 'reveal', 'slides')


@dataclass
class RevealOptions:
    """
    reveal.js rendering switches

    Attributes:
        theme: One of REVEAL_THEMES
        transition: One of REVEAL_TRANSITIONS
        horizontal_separator: Regex (multiline) between horizontal slides
        vertical_separator: Regex (multiline) between vertical slides
        slide_number .. center: Passed to Reveal.initialize()
        auto_slide: Auto-advance interval in ms, 0 disables
        cdn_url: reveal.js distribution base URL
        title: Document <title>
    """
    theme: str = field(default_factory=lambda: appsettings.reveal_theme)
    transition: str = field(default_factory=lambda: appsettings.reveal_transition)
    horizontal_separator: str = r"^---$"
    vertical_separator: str = r"^----$"
    slide_number: bool = True
    hash: bool = True
    controls: bool = True
    progress: bool = True
    center: bool = True
    auto_slide: int = 0
    cdn_url: str = field(default_factory=lambda: appsettings.reveal_cdn_url)
    title: str = "MD++ Presentation"

    def to_dict(self) -> Dict[str, Any]:
        """Reveal.initialize() keyword arguments"""
        return {
            "hash": self.hash,
            "slideNumber": self.slide_number,
            "transition": self.transition,
            "autoSlide": self.auto_slide,
            "controls": self.controls,
            "progress": self.progress,
            "center": self.center,
        }


@dataclass
class Slide:
    """
    One slide

    Attributes:
        content: Markdown body, slide comment and notes removed
        attributes: From a ``<!-- .slide: ... -->`` comment
        vertical_slides: Slides stacked below this one
        notes: Speaker notes (text after a trailing ``Note:`` line)
    """
    content: str
    attributes: Dict[str, str] = field(default_factory=dict)
    vertical_slides: List["Slide"] = field(default_factory=list)
    notes: Optional[str] = None


@dataclass
class Presentation:
    slides: List[Slide] = field(default_factory=list)
    options: RevealOptions = field(default_factory=RevealOptions)

    @property
    def is_presentation(self) -> bool:
        """More than one slide"""
        return len(self.slides) > 1

    @property
    def slide_count(self) -> int:
        """Horizontal and vertical slides together"""
        return sum(1 + len(slide.vertical_slides) for slide in self.slides)
