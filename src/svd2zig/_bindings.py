# Copyright (c) 2023 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

"""
Various internal functionality used by the bindings module.
"""

from __future__ import annotations

import enum
import re
from typing import Optional

from typing_extensions import Self

# Largest value representable by the unsigned 32-bit numeric fields of the device model.
U32_MAX = 0xFFFF_FFFF

_DECIMAL_RE = re.compile(r"[0-9]+")
_HEX_RE = re.compile(r"[0-9a-fA-F]+")


class CaseInsensitiveStrEnum(enum.Enum):
    """String enum class that can be constructed from a case-insensitive string."""

    @classmethod
    def _missing_(cls, value: object) -> Optional[Self]:
        """Handler for string values with mismatched case."""
        if not isinstance(value, str):
            return None

        value_lower = value.lower()
        for member in cls:
            if member.value.lower() == value_lower:
                return member

        return None


def _to_u32(digits: str, base: int) -> Optional[int]:
    value = int(digits, base=base)
    if value > U32_MAX:
        return None
    return value


def to_int(number: str) -> Optional[int]:
    """
    Convert a decimal string representation of an unsigned 32-bit integer to its integer value.

    :param number: String representation of the integer.

    :return: Decoded integer, or None if the string is not a valid decimal u32.
    """
    if _DECIMAL_RE.fullmatch(number) is None:
        return None
    return _to_u32(number, 10)


def to_hex_literal(literal: str) -> Optional[int]:
    """
    Convert a prefixed hexadecimal literal (e.g. "0x40000000") to its integer value.
    The first two characters of the literal are taken to be the prefix and are not inspected.

    :param literal: String representation of the literal.

    :return: Decoded integer, or None if the literal is too short or not valid hexadecimal.
    """
    if len(literal) <= 2:
        return None
    digits = literal[2:]
    if _HEX_RE.fullmatch(digits) is None:
        return None
    return _to_u32(digits, 16)


def to_bool(value: str) -> Optional[bool]:
    """
    Convert a string representation of a boolean to its corresponding boolean value.

    :param value: String representation of the boolean.

    :return: Decoded boolean, or None if the value is neither "true" nor "false".
    """
    value_lower = value.lower()
    if value_lower == "true":
        return True
    if value_lower == "false":
        return False
    return None
