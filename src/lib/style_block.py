"""
Style blocks

    :::style{scoped}
    .note { color: teal; }
    :::

    :::link-css
    https://cdn.jsdelivr.net/npm/water.css@2/out/water.css
    :::

Inline CSS becomes a <style> element, external stylesheets a
<link rel="stylesheet">. Both are recorded as StyleBlockRecords. Stylesheet
URLs go through the asset-trust check of the security filter.
"""

from typing import Any, Dict

from ..models.elements import Element, Raw
from ..models.records import ErrorKind, StyleBlockRecord, StyleType
from .html import node_serialize
from .log import LOG
from .syntax import requestedId_get


def scoped_is(attributes: Dict[str, str]) -> bool:
    """A bare ``scoped`` flag (or any value but "false") marks the style scoped"""
    if "scoped" not in attributes:
        return False
    return str(attributes["scoped"]).strip().lower() != "false"


def styleBlock_render(node: Any, compiler: Any) -> str:
    """Handle :::style containers"""
    css = compiler.source_extract(node).strip()
    record = StyleBlockRecord(
        id=compiler.context.id_reserve("mdpp-style", requestedId_get(node.attributes)),
        type=StyleType.INLINE,
        content=css,
        scoped=scoped_is(node.attributes),
    )
    compiler.context.styles.append(record)
    LOG(f"Style block {record.id} ({len(css)} chars)", level=3)

    # CSS is raw text inside <style>; only a closing tag could escape it
    css = css.replace("</style", "<\\/style")
    return node_serialize(Element("style", {"id": record.id, "scoped": record.scoped}, [Raw(css)]))


def cssLink_render(node: Any, compiler: Any) -> str:
    """
    Handle :::link-css (also linkcss, css-link).

    The URL is the first line of the body, else the ``url`` or ``href``
    attribute. Without a URL the directive renders nothing.
    """
    url = ""
    for line in compiler.source_extract(node).splitlines():
        if line.strip():
            url = line.strip()
            break
    url = url or node.attributes.get("url", "").strip() or node.attributes.get("href", "").strip()
    if not url:
        LOG(f"{node.name}: no stylesheet URL, skipping", level=2)
        return ""

    if not compiler.security.asset_isAllowed(url):
        compiler.context.errors.add(
            ErrorKind.SECURITY_BLOCKED,
            f"Stylesheet source is blocked: {url}",
            line=node.line,
        )
        return ""

    record = StyleBlockRecord(
        id=compiler.context.id_reserve("mdpp-style", requestedId_get(node.attributes)),
        type=StyleType.EXTERNAL,
        content=url,
    )
    compiler.context.styles.append(record)
    return node_serialize(Element("link", {"id": record.id, "rel": "stylesheet", "href": url})) + "\n"
