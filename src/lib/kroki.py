"""
Kroki diagram support

Builds Kroki GET URLs for diagram sources: ```kroki-plantuml fences and
:::kroki{type=...} containers become an <img> pointing at the Kroki
server with the escaped source in a <noscript> fallback. Only the URL is
built here; nothing is ever fetched.
"""

import base64
import zlib
from html import escape
from typing import Any, List, Optional

from ..config import appsettings
from ..models.elements import Element, Text
from ..models.records import ErrorKind
from .html import node_serialize
from .log import LOG


KROKI_DIAGRAM_TYPES: List[str] = [
    'blockdiag', 'seqdiag', 'actdiag', 'nwdiag', 'packetdiag', 'rackdiag',
    'bpmn', 'bytefield', 'c4plantuml', 'd2', 'dbml', 'ditaa', 'erd',
    'excalidraw', 'graphviz', 'mermaid', 'nomnoml', 'pikchr', 'plantuml',
    'structurizr', 'svgbob', 'symbolator', 'tikz', 'umlet',
    'vega', 'vegalite', 'wavedrom', 'wireviz',
]

KROKI_PREFIX = 'kroki-'
DEFAULT_DIAGRAM_TYPE = 'plantuml'


def diagram_encode(source: str) -> str:
    """
    Encode a diagram source for a Kroki GET URL.

    The source is deflated and written as URL-safe base64
    (``+`` → ``-``, ``/`` → ``_``) without ``=`` padding.
    """
    compressed = zlib.compress(source.encode('utf-8'), 9)
    encoded = base64.b64encode(compressed).decode('ascii')
    return encoded.replace('+', '-').replace('/', '_').replace('=', '')


def url_build(
    diagram_type: str,
    source: str,
    output_format: Optional[str] = None,
    server_url: Optional[str] = None,
) -> str:
    """
    Kroki URL for a diagram.

    Example:
        url_build("graphviz", "digraph { a -> b }")
        → "https://kroki.io/graphviz/svg/" + diagram_encode("digraph { a -> b }")
    """
    server = (server_url or appsettings.kroki_server_url).rstrip('/')
    output_format = output_format or appsettings.kroki_output_format
    return f"{server}/{diagram_type}/{output_format}/{diagram_encode(source)}"


def type_extract(language: str) -> Optional[str]:
    """Diagram type named by a fence language (``kroki-`` prefix optional)"""
    normalized = language.lower()
    if normalized.startswith(KROKI_PREFIX):
        normalized = normalized[len(KROKI_PREFIX):]
    return normalized if normalized in KROKI_DIAGRAM_TYPES else None


def language_isKroki(language: str) -> bool:
    return type_extract(language) is not None


def languages_list() -> List[str]:
    """Every fence language Kroki handles: plain types and ``kroki-`` variants"""
    return KROKI_DIAGRAM_TYPES + [KROKI_PREFIX + name for name in KROKI_DIAGRAM_TYPES]


def fence_isKroki(language: str) -> bool:
    """
    True when a fence should render through Kroki.

    A plain ``mermaid`` fence belongs to the mermaid renderer; only
    ``kroki-mermaid`` goes to Kroki.
    """
    diagram_type = type_extract(language)
    if diagram_type is None:
        return False
    if diagram_type == 'mermaid' and not language.lower().startswith(KROKI_PREFIX):
        return False
    return True


def diagram_render(diagram_type: str, source: str, server_url: Optional[str] = None) -> str:
    """HTML for one diagram: lazy <img> plus a <noscript> source fallback"""
    url = url_build(diagram_type, source, server_url=server_url)
    LOG(f"Kroki {diagram_type} diagram → {url[:60]}", level=3)
    return (
        f'<div class="mdpp-kroki-diagram" data-kroki-type="{diagram_type}">\n'
        f'  <img src="{escape(url)}" alt="{diagram_type} diagram" loading="lazy" />\n'
        f'  <noscript><pre class="kroki-fallback">{escape(source)}</pre></noscript>\n'
        '</div>\n'
    )


def krokiDirective_render(node: Any, compiler: Any) -> str:
    """
    Handle :::kroki{type=...} containers.

    The type defaults to plantuml. An unsupported type is reported as
    invalid syntax and the source is kept in a plain <pre>.
    """
    diagram_type = (node.attributes.get('type') or DEFAULT_DIAGRAM_TYPE).lower()
    source = compiler.source_extract(node)

    if diagram_type not in KROKI_DIAGRAM_TYPES:
        compiler.context.errors.add(
            ErrorKind.INVALID_SYNTAX,
            f'Kroki diagram type "{diagram_type}" is not supported',
            details=f"Supported types: {', '.join(KROKI_DIAGRAM_TYPES)}",
            line=node.line,
        )
        return node_serialize(Element(
            'div',
            {'class': ['mdpp-kroki-diagram'], 'data-kroki-type': diagram_type},
            [Element('pre', {'class': ['kroki-fallback']}, [Text(source)])],
        ))

    return diagram_render(diagram_type, source, compiler.context.options.kroki_server_url)
