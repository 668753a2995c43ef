# Copyright (c) 2023 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

"""
"Low-level" representation of the line-oriented SVD input consumed by the parser.
Each input line holds at most one element, so a line can be reduced to a small structural
unit (a Chunk) without building a document tree. Only the subset of the SVD format needed
to generate register accessors is understood; everything else is left to the caller to ignore.
"""

from __future__ import annotations

import enum
import re
from typing import NamedTuple, Optional

from ._bindings import CaseInsensitiveStrEnum, to_bool, to_hex_literal, to_int

__all__ = [
    "Access",
    "Chunk",
    "get_chunk",
    "to_bool",
    "to_hex_literal",
    "to_int",
]

_DERIVED_FROM_RE = re.compile(r"""\bderivedFrom\s*=\s*(["'])(.*?)\1""", re.IGNORECASE)


@enum.unique
class Access(CaseInsensitiveStrEnum):
    """
    Access rights for a given register or field.
    See "accessType" in the SVD schema.
    """

    # Read access is permitted. Write operations have an undefined result.
    READ_ONLY = "read-only"
    # Write access is permitted. Read operations have an undefined result.
    WRITE_ONLY = "write-only"
    # Read and write accesses are permitted.
    READ_WRITE = "read-write"

    @classmethod
    def parse(cls, value: str) -> Optional[Access]:
        """
        Look up the access type matching the given text.

        :param value: Access type as written in the SVD file, in any case.

        :return: The access type, or None if the text does not name one.
        """
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def readable(self) -> bool:
        """True if the access type permits reads."""
        return self is not Access.WRITE_ONLY

    @property
    def writable(self) -> bool:
        """True if the access type permits writes."""
        return self is not Access.READ_ONLY


class Chunk(NamedTuple):
    """Structural unit extracted from a single input line."""

    # Name of the opening (or closing, prefixed with '/') tag on the line.
    tag: str

    # Text between the opening tag and the next tag on the same line, if any.
    data: Optional[str]

    # Value of the 'derivedFrom' attribute of the tag, if any.
    derived_from: Optional[str]


def get_chunk(line: str) -> Optional[Chunk]:
    """
    Extract the tag, inline text content and 'derivedFrom' attribute from one line of input.

    Lines that are empty, do not start with a tag or where the tag is never closed yield None.
    Element content is only recognized when the next tag is on the same line, since elements
    spanning multiple lines are not reconstructed.

    :param line: Line of input, with or without the line terminator.

    :return: The extracted chunk, or None if the line holds no recognizable tag.
    """
    trimmed = line.strip()
    if not trimmed or trimmed[0] != "<":
        return None

    tag_end = trimmed.find(">", 1)
    if tag_end == -1:
        return None

    tag_parts = trimmed[1:tag_end].split(None, 1)
    tag = tag_parts[0] if tag_parts else ""

    derived_from = None
    if len(tag_parts) > 1:
        match = _DERIVED_FROM_RE.search(tag_parts[1])
        if match is not None:
            derived_from = match.group(2)

    data_end = trimmed.find("<", tag_end + 1)
    data = trimmed[tag_end + 1 : data_end] if data_end != -1 else None

    return Chunk(tag=tag, data=data, derived_from=derived_from)
