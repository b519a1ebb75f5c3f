"""
AI generation placeholders

Marks document locations for downstream AI generation:

    :::ai-generate{prompt="Write a summary" format="list" fallback="..."}
    :::

    Founded in :ai{prompt="founding year"}.

Each placeholder becomes a div (block) or span (inline) carrying data-ai-*
attributes and a short preview, and is recorded as an AIPlaceholderRecord.
Generation itself happens elsewhere; placeholder_replaceContent() patches
the rendered HTML once content is available.
"""

import json
import re
from dataclasses import replace
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from ..config import appsettings
from ..models.elements import Element, Text
from ..models.records import (
    AIPlaceholderRecord,
    PlaceholderFormat,
    PlaceholderStatus,
    PlaceholderType,
)
from .html import node_serialize
from .log import LOG
from .syntax import requestedId_get


VARIABLE_PATTERN = re.compile(r"\{\{(\w+)\}\}")


def format_parse(value: Optional[str]) -> PlaceholderFormat:
    """Block format from an attribute value; anything unknown is paragraph"""
    try:
        return PlaceholderFormat((value or "").strip().lower())
    except ValueError:
        return PlaceholderFormat.PARAGRAPH


def preview_make(prompt: str, length: int) -> str:
    """``[AI: prompt…]`` with the prompt cut to ``length`` characters"""
    preview = prompt[:length] + ("…" if len(prompt) > length else "")
    return f"[AI: {preview}]"


def placeholder_properties(record: AIPlaceholderRecord) -> Dict[str, Any]:
    """Class list and data-ai-* attributes shared by both forms"""
    properties: Dict[str, Any] = {
        "class": [
            "mdpp-ai-placeholder",
            f"mdpp-ai-{record.type.value}",
            f"mdpp-ai-format-{record.format.value}",
        ],
        "data-ai-id": record.id,
        "data-ai-type": record.type.value,
        "data-ai-prompt": record.prompt,
        "data-ai-format": record.format.value,
        "data-ai-status": record.status.value,
    }
    if record.fallback:
        properties["data-ai-fallback"] = record.fallback
    if record.line:
        properties["data-ai-line"] = str(record.line)
    return properties


def _record_make(node: Any, compiler: Any, placeholder_type: PlaceholderType) -> AIPlaceholderRecord:
    attributes = node.attributes
    prompt = attributes.get("prompt") or (node.label or "").strip()
    if placeholder_type is PlaceholderType.INLINE:
        placeholder_format = PlaceholderFormat.INLINE
    else:
        placeholder_format = format_parse(attributes.get("format"))

    record = AIPlaceholderRecord(
        id=compiler.context.id_reserve("ai", requestedId_get(attributes)),
        type=placeholder_type,
        prompt=prompt,
        format=placeholder_format,
        fallback=attributes.get("fallback") or None,
        line=node.line,
    )
    compiler.context.placeholders.append(record)
    LOG(f"AI placeholder {record.id} ({record.type.value})", level=3)
    return record


def blockPlaceholder_render(node: Any, compiler: Any) -> str:
    """Handle :::ai-generate / ::ai-generate"""
    record = _record_make(node, compiler, PlaceholderType.BLOCK)
    text = record.fallback or preview_make(record.prompt, appsettings.block_preview_length)
    pending = Element("div", {"class": ["mdpp-ai-pending-content"]}, [Text(text)])
    return node_serialize(Element("div", placeholder_properties(record), [pending]))


def inlinePlaceholder_render(node: Any, compiler: Any) -> str:
    """Handle the inline :ai{prompt=...} form"""
    record = _record_make(node, compiler, PlaceholderType.INLINE)
    text = record.fallback or preview_make(record.prompt, appsettings.inline_preview_length)
    return node_serialize(Element("span", placeholder_properties(record), [Text(text)]))


def prompt_interpolate(prompt: str, variables: Optional[Dict[str, Any]]) -> str:
    """
    Substitute ``{{name}}`` tokens from a variable map.

    Unknown names are left verbatim. Dicts and lists are written as
    compact JSON, everything else with str().

    Example:
        >>> prompt_interpolate("Describe {{product}}", {"product": "Widget"})
        'Describe Widget'
    """
    if not variables or "{{" not in prompt:
        return prompt

    def variable_substitute(match: re.Match) -> str:
        name = match.group(1)
        if name not in variables:
            return match.group(0)
        value = variables[name]
        if isinstance(value, (dict, list)):
            return json.dumps(value, separators=(",", ":"))
        return str(value)

    return VARIABLE_PATTERN.sub(variable_substitute, prompt)


def placeholders_interpolate(
    records: List[AIPlaceholderRecord], variables: Dict[str, Any]
) -> List[AIPlaceholderRecord]:
    """New records with interpolated prompts and ``variables`` set"""
    return [
        replace(record, prompt=prompt_interpolate(record.prompt, variables), variables=dict(variables))
        for record in records
    ]


def placeholders_extractFromHTML(html: str) -> List[AIPlaceholderRecord]:
    """
    Recover placeholder records from rendered HTML.

    Reads the data-ai-* attributes of every ``.mdpp-ai-placeholder``
    element, in document order.
    """
    soup = BeautifulSoup(html, "html.parser")
    records: List[AIPlaceholderRecord] = []
    for tag in soup.select(".mdpp-ai-placeholder[data-ai-id]"):
        try:
            placeholder_type = PlaceholderType(tag.get("data-ai-type", "block"))
        except ValueError:
            placeholder_type = PlaceholderType.BLOCK
        default_format = "inline" if placeholder_type is PlaceholderType.INLINE else "paragraph"
        try:
            status = PlaceholderStatus(tag.get("data-ai-status", "pending"))
        except ValueError:
            status = PlaceholderStatus.PENDING
        line = tag.get("data-ai-line")

        records.append(AIPlaceholderRecord(
            id=tag["data-ai-id"],
            type=placeholder_type,
            prompt=tag.get("data-ai-prompt", ""),
            format=format_parse(tag.get("data-ai-format", default_format)),
            fallback=tag.get("data-ai-fallback"),
            status=status,
            line=int(line) if line and line.isdigit() else None,
        ))
    return records


def placeholder_replaceContent(html: str, placeholder_id: str, content: str, success: bool = True) -> str:
    """
    Put generated content into a rendered placeholder.

    The content is inserted as escaped text. Block placeholders wrap it
    in ``div.mdpp-ai-content``; the status flips to completed, or error
    when ``success`` is False. HTML without the placeholder is returned
    unchanged.
    """
    soup = BeautifulSoup(html, "html.parser")
    tag = soup.find(attrs={"data-ai-id": placeholder_id})
    if tag is None:
        LOG(f"No placeholder with id {placeholder_id}", level=2)
        return html

    status = PlaceholderStatus.COMPLETED if success else PlaceholderStatus.ERROR
    tag["data-ai-status"] = status.value
    tag.clear()
    if tag.name == "div":
        wrapper = soup.new_tag("div", attrs={"class": "mdpp-ai-content"})
        wrapper.string = content
        tag.append(wrapper)
    else:
        tag.string = content
    return str(soup)
