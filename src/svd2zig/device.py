# Copyright (c) 2023 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

"""
In-memory representation of a SVD device.
The model is filled in incrementally by the parser, one input line at a time, and is only read
after parsing has finished. It covers the subset of the SVD description needed to generate
register accessors: device and CPU metadata, peripherals, registers, fields and interrupts.

Registers and fields carry the names of the peripheral/register that contain them so that they
can be rendered without walking back up the tree.
"""

from __future__ import annotations

import dataclasses as dc
from dataclasses import dataclass
from typing import Dict, List, Optional

from typing_extensions import Self

from .bindings import Access
from .util import bit_width_to_mask

__all__ = [
    "AddressBlock",
    "Cpu",
    "Device",
    "Field",
    "Interrupt",
    "Peripheral",
    "Register",
]


@dataclass
class Cpu:
    """Description of the device processor."""

    # CPU name, such as "CM7".
    name: str = ""

    # CPU hardware revision with the format "rNpM".
    revision: str = ""

    # Default endianness of the CPU.
    endian: str = ""

    # True if the CPU has a memory protection unit (MPU).
    mpu_present: Optional[bool] = None

    # True if the CPU has a floating point unit (FPU).
    fpu_present: Optional[bool] = None

    # Bit width of interrupt priority levels in the NVIC.
    nvic_prio_bits: Optional[int] = None

    # True if the CPU has a vendor-specific SysTick Timer.
    vendor_systick_config: Optional[bool] = None


@dataclass
class AddressBlock:
    """Address range mapped to a peripheral."""

    # Start address of the address block, relative to the peripheral base address.
    offset: Optional[int] = None

    # Number of address unit bits covered by the address block.
    size: Optional[int] = None

    # Address block usage, such as "registers".
    usage: str = ""


@dataclass
class Interrupt:
    """Interrupt description."""

    name: str = ""
    description: str = ""

    # Interrupt vector number.
    value: Optional[int] = None


@dataclass
class Field:
    """Named bit range within a register."""

    # Name of the peripheral containing the field.
    peripheral_name: str = ""

    # Name of the register containing the field.
    register_name: str = ""

    name: str = ""
    description: str = ""
    bit_offset: Optional[int] = None
    bit_width: Optional[int] = None
    access: Access = Access.READ_WRITE

    def copy(self) -> Self:
        """Return an independent copy of the field."""
        return dc.replace(self)

    @property
    def is_valid(self) -> bool:
        """True if the field has enough information to be rendered."""
        return bool(self.name) and self.bit_offset is not None and self.bit_width is not None

    @property
    def base_mask(self) -> int:
        """Mask covering the bit width of the field, not shifted into position."""
        return bit_width_to_mask(self.bit_width or 0)

    @property
    def mask(self) -> int:
        """
        Mask covering the bits of the field within the register.
        Only meaningful for fields that have both an offset and a width.
        """
        return (self.base_mask << ((self.bit_offset or 0) & 0x1F)) & bit_width_to_mask(0)


@dataclass
class Register:
    """Fixed-width memory-mapped word at a peripheral base address plus an offset."""

    # Name of the peripheral containing the register.
    peripheral_name: str = ""

    name: str = ""
    display_name: str = ""
    description: str = ""

    # Offset of the register from the peripheral base address.
    address_offset: Optional[int] = None

    # Size of the register in bits.
    size: int = 32

    reset_value: int = 0
    access: Access = Access.READ_WRITE
    fields: List[Field] = dc.field(default_factory=list)

    def copy(self) -> Self:
        """Return an independent copy of the register, including copies of its fields."""
        return dc.replace(self, fields=[f.copy() for f in self.fields])

    @property
    def is_valid(self) -> bool:
        """True if the register has enough information to be rendered."""
        return bool(self.name) and self.address_offset is not None

    @property
    def write_mask(self) -> int:
        """
        Union of the bits covered by the writable fields of the register.
        Fields without an offset or width do not contribute to the mask.
        """
        write_mask = 0
        for field in self.fields:
            if field.bit_offset is None or field.bit_width is None:
                continue
            if field.access is not Access.READ_ONLY:
                write_mask |= field.mask
        return write_mask

    @property
    def effective_access(self) -> Access:
        """
        Access type used when generating accessors.
        A register without any writable bits is treated as read-only.
        """
        if self.write_mask == 0:
            return Access.READ_ONLY
        return self.access


@dataclass
class Peripheral:
    """Hardware block with a base address and a set of registers."""

    name: str = ""
    group_name: str = ""
    description: str = ""
    base_address: Optional[int] = None
    address_block: Optional[AddressBlock] = None
    registers: List[Register] = dc.field(default_factory=list)

    def copy(self) -> Self:
        """
        Return an independent copy of the peripheral, used as the starting point of a
        peripheral derived from this one.
        """
        return dc.replace(
            self,
            address_block=(
                dc.replace(self.address_block) if self.address_block is not None else None
            ),
            registers=[r.copy() for r in self.registers],
        )

    def rename(self, name: str) -> None:
        """
        Set the name of the peripheral and update the peripheral name stored in all the
        registers and fields it currently contains.
        """
        self.name = name
        for register in self.registers:
            register.peripheral_name = name
            for field in register.fields:
                field.peripheral_name = name

    @property
    def is_valid(self) -> bool:
        """True if the peripheral has enough information to be rendered."""
        return bool(self.name) and self.base_address is not None


@dataclass
class Device:
    """Representation of a SVD device."""

    name: str = ""
    version: str = ""
    description: str = ""
    cpu: Optional[Cpu] = None

    # Number of data bits corresponding to an address.
    address_unit_bits: Optional[int] = None

    # Maximum data bits supported by the data bus in a single transfer.
    max_bit_width: Optional[int] = None

    # Register properties inherited by registers that do not set them.
    reg_default_size: Optional[int] = None
    reg_default_reset_value: Optional[int] = None
    reg_default_reset_mask: Optional[int] = None

    peripherals: List[Peripheral] = dc.field(default_factory=list)

    # Interrupts indexed by vector number.
    interrupts: Dict[int, Interrupt] = dc.field(default_factory=dict)

    def find_peripheral(self, name: str) -> Optional[Peripheral]:
        """
        :param name: Exact name of the peripheral.
        :return: The first peripheral with the given name, or None.
        """
        for peripheral in self.peripherals:
            if peripheral.name == name:
                return peripheral
        return None

    def add_interrupt(self, interrupt: Interrupt) -> bool:
        """
        Add an interrupt to the device, unless an interrupt with the same vector number is
        already present. Interrupts without a vector number are not added.

        :param interrupt: Interrupt to add.
        :return: True if the interrupt was added.
        """
        if interrupt.value is None or interrupt.value in self.interrupts:
            return False
        self.interrupts[interrupt.value] = interrupt
        return True

    def interrupt_table(self) -> List[Interrupt]:
        """Interrupts of the device, ordered by ascending vector number."""
        return [self.interrupts[value] for value in sorted(self.interrupts)]
