"""
Error handling for MD++ conversion

Two very different failure paths:

- PluginManifestError is fatal. It is raised while loading plugin
  manifests, a configuration mistake rather than document content.
- RenderError records are non-fatal. They are collected per conversion by
  an ErrorAccumulator and optionally rendered as alert banners above the
  document.
"""

from html import escape
from typing import Iterator, List, Optional

from ..models.records import ErrorKind, RenderError
from .log import LOG


ALERT_ICONS = {
    "danger": "❌",
    "warning": "⚠️",
}


class PluginManifestError(ValueError):
    """Raised when a plugin manifest fails validation"""


class ErrorAccumulator:
    """
    Collects the non-fatal errors of a single conversion

    Created fresh for every conversion; never shared between documents.
    """

    def __init__(self) -> None:
        self.errors: List[RenderError] = []

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[RenderError]:
        return iter(self.errors)

    def add(
        self,
        kind: ErrorKind,
        message: str,
        details: Optional[str] = None,
        line: Optional[int] = None,
        title: Optional[str] = None,
    ) -> RenderError:
        """Record an error and return it"""
        error = RenderError(kind=kind, message=message, title=title, details=details, line=line)
        self.errors.append(error)
        LOG(f"{kind.value}: {message}" + (f" (line {line})" if line else ""), level=2)
        return error

    def kinds_list(self) -> List[ErrorKind]:
        return [error.kind for error in self.errors]

    def alerts_render(self) -> str:
        """All errors as consecutive alert banners"""
        return "".join(alert_render(error) for error in self.errors)


def alert_render(error: RenderError) -> str:
    """
    Render one error as an HTML alert banner.

    Args:
        error: The error to render

    Returns:
        A ``div.mdpp-error`` banner, with a collapsible details block when
        the error carries details

    Example:
        <div class="mdpp-error mdpp-error-warning" role="alert">
          <strong>⚠️ Plugin Not Found</strong>
          <p>Plugin "unknown" is not registered</p>
        </div>
    """
    severity = error.kind.severity
    icon = ALERT_ICONS[severity]
    details = ""
    if error.details:
        details = (
            '\n  <details><summary>Details</summary>'
            f'<pre>{escape(error.details)}</pre></details>'
        )
    return (
        f'<div class="mdpp-error mdpp-error-{severity}" role="alert">\n'
        f'  <strong>{icon} {escape(error.title or error.kind.title)}</strong>\n'
        f'  <p>{escape(error.message)}</p>{details}\n'
        '</div>\n'
    )
