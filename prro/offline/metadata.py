"""
PRRO Offline — Chain Metadata Splice & Document Hash
======================================================
Decorates a base document with offline chain fields and hashes it.

Splice rule:
    <ORDERTAXNUM>{fiscal_num}</ORDERTAXNUM><OFFLINE>true</OFFLINE>
    [<PREVDOCHASH>{hash}</PREVDOCHASH>]
is inserted immediately before the first "<CASHREGISTERNUM>".
Head variants without a register-number field fall back to the
position just before the closing head tag. A document with neither
is rejected; metadata is never silently dropped.

The XML is treated as text: it is never parsed or re-serialized,
so the hashed bytes are exactly the bytes the caller transmits.

Document hash:
    doc_hash = SHA256(utf8(final_xml)), lowercase hex
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Optional

from prro.offline.errors import SpliceAnchorMissingError

SPLICE_ANCHOR = "<CASHREGISTERNUM>"
HEAD_CLOSING_TAGS = ("</CHECKHEAD>", "</ZREPHEAD>")


def build_offline_fields(fiscal_num: str, prev_doc_hash: Optional[str] = None) -> str:
    fields = f"<ORDERTAXNUM>{fiscal_num}</ORDERTAXNUM><OFFLINE>true</OFFLINE>"
    if prev_doc_hash:
        fields += f"<PREVDOCHASH>{prev_doc_hash}</PREVDOCHASH>"
    return fields


def _insertion_point(base_xml: str) -> int:
    position = base_xml.find(SPLICE_ANCHOR)
    if position >= 0:
        return position
    for closing_tag in HEAD_CLOSING_TAGS:
        position = base_xml.find(closing_tag)
        if position >= 0:
            return position
    raise SpliceAnchorMissingError((SPLICE_ANCHOR,) + HEAD_CLOSING_TAGS)


def apply_offline_metadata(
    base_xml: str,
    *,
    fiscal_num: str,
    prev_doc_hash: Optional[str] = None,
) -> str:
    """Return base_xml with offline chain fields spliced into its head."""
    position = _insertion_point(base_xml)
    fields = build_offline_fields(fiscal_num, prev_doc_hash)
    return base_xml[:position] + fields + base_xml[position:]


def compute_document_hash(xml: str) -> str:
    """
    SHA-256 over the UTF-8 bytes of the final document text.

    Returns: lowercase hex string, 64 characters.
    """
    return hashlib.sha256(xml.encode("utf-8")).hexdigest()


def verify_document_hash(xml: str, expected_hash: str) -> bool:
    """Constant-time comparison of the recomputed hash."""
    if not isinstance(expected_hash, str) or len(expected_hash) != 64:
        return False
    return hmac.compare_digest(compute_document_hash(xml), expected_hash.lower())
