"""
PRRO Offline — Fiscal Number Codec
====================================
Text format: "{session_id}.{local_num}.{control_number}"
ASCII digits with two literal "." separators, no whitespace.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Union

from prro.offline.control_number import (
    MAX_CONTROL_NUMBER,
    MIN_CONTROL_NUMBER,
    is_valid_control_number,
)
from prro.offline.errors import MalformedFiscalNumberError

_DIGITS = re.compile(r"[0-9]+")


class FiscalNumber(NamedTuple):
    session_id: int
    local_num: int
    control_number: int


def encode_fiscal_number(
    session_id: Union[str, int],
    local_num: int,
    control_number: int,
) -> str:
    """Compose the offline fiscal number for one document."""
    if not _DIGITS.fullmatch(str(session_id)):
        raise ValueError(f"session_id must be decimal digits, got {session_id!r}.")
    if not isinstance(local_num, int) or local_num < 0:
        raise ValueError("local_num must be int >= 0.")
    if not is_valid_control_number(control_number):
        raise ValueError(
            f"control_number must be in [{MIN_CONTROL_NUMBER}, "
            f"{MAX_CONTROL_NUMBER}], got {control_number!r}."
        )
    return f"{session_id}.{local_num}.{control_number}"


def decode_fiscal_number(text: str) -> FiscalNumber:
    """
    Split an offline fiscal number into its components.

    Raises MalformedFiscalNumberError unless there are exactly three
    digit-only segments and the control number is in [1, 9999].
    """
    if not isinstance(text, str):
        raise MalformedFiscalNumberError(text, "expected a string.")
    parts = text.split(".")
    if len(parts) != 3:
        raise MalformedFiscalNumberError(
            text, f"expected 3 segments, found {len(parts)}."
        )
    for name, part in zip(("session_id", "local_num", "control_number"), parts):
        if not _DIGITS.fullmatch(part):
            raise MalformedFiscalNumberError(
                text, f"{name} segment {part!r} is not a non-negative integer."
            )
    session_id, local_num, control_number = (int(part) for part in parts)
    if not is_valid_control_number(control_number):
        raise MalformedFiscalNumberError(
            text,
            f"control number {control_number} is outside "
            f"[{MIN_CONTROL_NUMBER}, {MAX_CONTROL_NUMBER}].",
        )
    return FiscalNumber(session_id, local_num, control_number)


def is_offline_fiscal_number(text: str) -> bool:
    try:
        decode_fiscal_number(text)
    except MalformedFiscalNumberError:
        return False
    return True
