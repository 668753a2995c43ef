# Copyright (c) 2023 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .device import Device


class SvdError(Exception):
    """Base class for errors raised by the library."""

    ...


class SvdParseError(SvdError):
    """
    Raised when the SVD document is invalid and parsing could not be completed.
    The device model built up to the point of failure is available in `device`.
    """

    def __init__(self, message: str, device: Optional[Device] = None) -> None:
        super().__init__(message)
        self.device: Optional[Device] = device


class SvdTruncatedError(SvdParseError):
    """Raised when the input ends before the closing device tag is seen."""

    ...


class SvdStructureError(SvdParseError):
    """Raised when a register is declared in a peripheral that has no base address."""

    def __init__(
        self, peripheral_name: str, line_number: int, device: Optional[Device] = None
    ) -> None:
        name = peripheral_name or "<unnamed>"
        super().__init__(
            f"Register declared at line {line_number} in peripheral '{name}' "
            "before its base address is known",
            device,
        )
        self.peripheral_name: str = peripheral_name
        self.line_number: int = line_number
