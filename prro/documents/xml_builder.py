"""
PRRO Documents — XML Assembly
===============================
Serializes a field map into a tagged PRRO document.

Layout:
    <?xml version="1.0" encoding="windows-1251"?>
    <ROOT xmlns:xsi=... xsi:noNamespaceSchemaLocation="root01.xsd">
      <HEAD>...fields in insertion order...</HEAD>
      <SECTION>...</SECTION>*
    </ROOT>

Rules:
- None values are omitted; everything else is str()-ed and escaped
- A list section renders rows: <ROW ROWNUM="n">...</ROW>
- A list value inside a dict section renders a nested row group
- Output is deterministic for a given field map
"""

from __future__ import annotations

import html
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping, Optional

XML_DECLARATION = '<?xml version="1.0" encoding="windows-1251"?>'
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

_CENTS = Decimal("0.01")


def format_amount(amount) -> str:
    """Money with exactly two decimals, half-up ("75.50")."""
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return str(amount.quantize(_CENTS, rounding=ROUND_HALF_UP))


def escape_xml(value: Any) -> str:
    return html.escape(str(value), quote=True)


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return escape_xml(value)


def _render_fields(data: Mapping[str, Any]) -> str:
    out = []
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            out.append(f"<{key}>{_render_rows(value)}</{key}>")
        else:
            out.append(f"<{key}>{_render_value(value)}</{key}>")
    return "".join(out)


def _render_rows(rows) -> str:
    out = []
    for row in rows:
        row = dict(row)
        rownum = row.pop("ROWNUM", None)
        if rownum is None:
            out.append("<ROW>")
        else:
            out.append(f'<ROW ROWNUM="{escape_xml(rownum)}">')
        out.append(_render_fields(row))
        out.append("</ROW>")
    return "".join(out)


def build_xml(
    root_name: str,
    head_tag: str,
    head: Mapping[str, Any],
    body_sections: Optional[Mapping[str, Any]] = None,
) -> str:
    """Assemble one PRRO document from head fields and body sections."""
    parts = [
        XML_DECLARATION,
        f'<{root_name} xmlns:xsi="{XSI_NAMESPACE}" '
        f'xsi:noNamespaceSchemaLocation="{root_name.lower()}01.xsd">',
        f"<{head_tag}>{_render_fields(head)}</{head_tag}>",
    ]
    for section, content in (body_sections or {}).items():
        if isinstance(content, (list, tuple)):
            parts.append(f"<{section}>{_render_rows(content)}</{section}>")
        elif isinstance(content, Mapping):
            parts.append(f"<{section}>{_render_fields(content)}</{section}>")
        elif content is not None:
            parts.append(f"<{section}>{_render_value(content)}</{section}>")
    parts.append(f"</{root_name}>")
    return "".join(parts)


def extract_element_value(xml: str, element_name: str) -> Optional[str]:
    """Text of the first <element_name>...</element_name>, unescaped, or None."""
    name = re.escape(element_name)
    match = re.search(rf"<{name}>(.*?)</{name}>", xml, re.DOTALL)
    if match is None:
        return None
    return html.unescape(match.group(1))
