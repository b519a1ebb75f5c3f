"""
Script blocks

    :::script{lang="js" async="true"}
    const x = 1;
    :::

    :::script:output
    return `Hello ${name}!`;
    :::

Script blocks are never executed here. Each one becomes a
div.mdsc-script-block carrying its code (percent-encoded) and options in
data-script-* attributes, with an empty div.mdsc-placeholder that a
sandboxed executor downstream fills in.
"""

from typing import Any, List, Optional
from urllib.parse import quote, unquote

from bs4 import BeautifulSoup

from ..models.elements import Element, Text
from ..models.records import ScriptBlockRecord, ScriptMode
from .html import node_serialize
from .log import LOG
from .syntax import requestedId_get


TRUE_VALUES = ("true", "1", "yes")

# Characters encodeURIComponent leaves alone
URI_COMPONENT_SAFE = "-_.!~*'()"


def flag_parse(value: Optional[str], default: bool) -> bool:
    """true/1/yes are True, any other given value is False"""
    if value is None:
        return default
    return str(value).strip().lower() in TRUE_VALUES


def code_encode(code: str) -> str:
    return quote(code, safe=URI_COMPONENT_SAFE)


def code_decode(encoded: str) -> str:
    return unquote(encoded)


def scriptBlock_render(node: Any, compiler: Any) -> str:
    """Handle :::script and :::script:output containers"""
    attributes = node.attributes
    mode = ScriptMode.OUTPUT if "output" in node.name else ScriptMode.EXECUTE

    record = ScriptBlockRecord(
        id=compiler.context.id_reserve("mdsc", requestedId_get(attributes)),
        code=compiler.source_extract(node).strip(),
        mode=mode,
        lang=attributes.get("lang") or "js",
        is_async=flag_parse(attributes.get("async"), False),
        cache=flag_parse(attributes.get("cache"), True),
        line=node.line,
    )
    compiler.context.scripts.append(record)
    LOG(f"Script block {record.id} ({record.mode.value}, {len(record.code)} chars)", level=3)

    classes = ["mdsc-script-block", f"mdsc-{record.mode.value}"]
    if record.is_async:
        classes.append("mdsc-async")

    properties = {
        "class": classes,
        "data-script-id": record.id,
        "data-script-mode": record.mode.value,
        "data-script-lang": record.lang,
        "data-script-async": str(record.is_async).lower(),
        "data-script-cache": str(record.cache).lower(),
        "data-script-code": code_encode(record.code),
        "data-script-line": str(record.line) if record.line else None,
    }
    text = "/* Script output will appear here */" if mode is ScriptMode.OUTPUT else "/* Script block */"
    placeholder = Element("div", {"class": ["mdsc-placeholder"]}, [Text(text)])
    return node_serialize(Element("div", properties, [placeholder]))


def scripts_extractFromHTML(html: str) -> List[ScriptBlockRecord]:
    """Recover script records from the data-script-* attributes of rendered HTML"""
    soup = BeautifulSoup(html, "html.parser")
    scripts: List[ScriptBlockRecord] = []
    for tag in soup.select("div.mdsc-script-block[data-script-id]"):
        try:
            mode = ScriptMode(tag.get("data-script-mode", "execute"))
        except ValueError:
            mode = ScriptMode.EXECUTE
        line = tag.get("data-script-line")

        scripts.append(ScriptBlockRecord(
            id=tag["data-script-id"],
            code=code_decode(tag.get("data-script-code", "")),
            mode=mode,
            lang=tag.get("data-script-lang") or "js",
            is_async=tag.get("data-script-async") == "true",
            cache=tag.get("data-script-cache") != "false",
            line=int(line) if line and line.isdigit() else None,
        ))
    return scripts
