"""
PRRO Offline — Control Number
===============================
Computes the control number embedded in an offline fiscal number.

Formula:
    source = ",".join(seed, date, time, local_num,
                      register_fiscal_num, local_register_num
                      [, total_amount as 0.00 when > 0]
                      [, prev_doc_hash when present])
    control_number = CRC32(utf8(source)) mod 10000, with 0 mapped to 1

Rules:
- Field order and the "," separator are fixed by the protocol
- CRC-32 is the standard reflected variant (polynomial 0xEDB88320)
- Same input ALWAYS produces same output
- The source string contains the seed: never log it

This module ONLY computes. It does not allocate numbers or hash documents.
"""

from __future__ import annotations

import zlib

from prro.documents.xml_builder import format_amount
from prro.offline.models import ControlNumberInput

CONTROL_NUMBER_MODULUS = 10000
MIN_CONTROL_NUMBER = 1
MAX_CONTROL_NUMBER = CONTROL_NUMBER_MODULUS - 1


def control_number_source(data: ControlNumberInput) -> str:
    """Build the exact string the checksum is computed over."""
    parts = [
        str(data.seed),
        data.date,
        data.time,
        str(data.local_num),
        str(data.register_fiscal_num),
        str(data.local_register_num),
    ]
    if data.total_amount is not None and data.total_amount > 0:
        parts.append(format_amount(data.total_amount))
    if data.prev_doc_hash:
        parts.append(data.prev_doc_hash)
    return ",".join(parts)


def crc32(text: str) -> int:
    """Unsigned CRC-32 of the UTF-8 bytes of text."""
    return zlib.crc32(text.encode("utf-8")) & 0xFFFFFFFF


def compute_control_number(data: ControlNumberInput) -> int:
    """
    Compute the control number for one offline document.

    Returns:
        int in [1, 9999]. Zero is never returned.
    """
    control_number = crc32(control_number_source(data)) % CONTROL_NUMBER_MODULUS
    if control_number == 0:
        control_number = MIN_CONTROL_NUMBER
    return control_number


def is_valid_control_number(value) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and MIN_CONTROL_NUMBER <= value <= MAX_CONTROL_NUMBER
    )
