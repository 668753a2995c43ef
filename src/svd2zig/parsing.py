# Copyright (c) 2022 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, TypeVar, Union

import svd2zig

from .bindings import Access, Chunk, get_chunk, to_bool, to_hex_literal, to_int
from .device import AddressBlock, Cpu, Device, Field, Interrupt, Peripheral, Register
from .errors import SvdStructureError, SvdTruncatedError


@dataclass(frozen=True)
class Options:
    """Options to configure the SVD parsing behavior."""

    # Size in bits of registers that don't specify a size, used when the device does not
    # declare a default register size.
    default_register_size: int = 32

    # Reset value of registers that don't specify a reset value, used when the device does not
    # declare a default reset value.
    default_reset_value: int = 0


@enum.unique
class ParseState(enum.Enum):
    """Position of the parser within the SVD element hierarchy."""

    DEVICE = enum.auto()
    CPU = enum.auto()
    PERIPHERALS = enum.auto()
    PERIPHERAL = enum.auto()
    ADDRESS_BLOCK = enum.auto()
    INTERRUPT = enum.auto()
    REGISTERS = enum.auto()
    REGISTER = enum.auto()
    FIELDS = enum.auto()
    FIELD = enum.auto()
    FINISHED = enum.auto()


def parse(svd_path: Union[str, Path], options: Options = Options()) -> Device:
    """
    Parse a device described by a SVD file.

    :param svd_path: Path to the SVD file.
    :param options: Parsing options.

    :raises FileNotFoundError: If the SVD file does not exist.
    :raises SvdParseError: If the SVD file is not a complete, valid device description.

    :return: Parsed `Device` representation of the SVD file.
    """
    svd_file = Path(svd_path)

    if not svd_file.is_file():
        raise FileNotFoundError(f"No such file: {svd_file.absolute()}")

    with open(svd_file, "r", encoding="utf-8", errors="replace") as f:
        return parse_lines(f, options=options)


def parse_lines(lines: Iterable[str], options: Options = Options()) -> Device:
    """
    Parse a device from the lines of a SVD document.
    Each line is expected to contain at most one element.

    :param lines: Lines of the document, with or without line terminators.
    :param options: Parsing options.

    :raises SvdParseError: If the lines are not a complete, valid device description.

    :return: Parsed `Device`.
    """
    parser = _Parser(options)
    for line in lines:
        parser.feed(line)
    return parser.finish()


class _Parser:
    """
    State machine that builds a Device from a sequence of lines.

    The entity currently being filled in at each level is always the last one added to the
    corresponding list in the device model.
    """

    def __init__(self, options: Options) -> None:
        self._options: Options = options
        self._device: Device = Device()
        self._state: ParseState = ParseState.DEVICE
        self._line_number: int = 0

        # Interrupt being parsed; added to the device once complete.
        self._interrupt: Optional[Interrupt] = None

        # True if the current <addressBlock> repeats one already seen for the peripheral.
        self._skip_address_block: bool = False
        self._address_block_seen: bool = False

        # True between <enumeratedValues> and </enumeratedValues> inside a field.
        self._in_enumerated_values: bool = False

        self._handlers: Dict[ParseState, Callable[[str, Chunk], None]] = {
            ParseState.DEVICE: self._on_device,
            ParseState.CPU: self._on_cpu,
            ParseState.PERIPHERALS: self._on_peripherals,
            ParseState.PERIPHERAL: self._on_peripheral,
            ParseState.ADDRESS_BLOCK: self._on_address_block,
            ParseState.INTERRUPT: self._on_interrupt,
            ParseState.REGISTERS: self._on_registers,
            ParseState.REGISTER: self._on_register,
            ParseState.FIELDS: self._on_fields,
            ParseState.FIELD: self._on_field,
            ParseState.FINISHED: self._on_finished,
        }

    def feed(self, line: str) -> None:
        """Process one line of input."""
        self._line_number += 1

        chunk = get_chunk(line)
        if chunk is None:
            return

        self._handlers[self._state](chunk.tag.lower(), chunk)

    def finish(self) -> Device:
        """
        Signal the end of the input.

        :raises SvdTruncatedError: If the closing device tag was never seen.
        :return: The completed device.
        """
        if self._state is not ParseState.FINISHED:
            raise SvdTruncatedError(
                f"Input ended after {self._line_number} lines while parsing "
                f"{self._state.name.lower()}; the document is truncated or invalid",
                self._device,
            )

        svd2zig.log.info(
            f"Parsed device '{self._device.name}' with "
            f"{len(self._device.peripherals)} peripherals and "
            f"{len(self._device.interrupts)} interrupts"
        )
        return self._device

    @property
    def _peripheral(self) -> Peripheral:
        return self._device.peripherals[-1]

    @property
    def _register(self) -> Register:
        return self._peripheral.registers[-1]

    @property
    def _field(self) -> Field:
        return self._register.fields[-1]

    def _enter(self, state: ParseState) -> None:
        svd2zig.log.debug(
            f"line {self._line_number}: {self._state.name} -> {state.name}"
        )
        self._state = state

    def _on_device(self, tag: str, chunk: Chunk) -> None:
        device = self._device
        data = chunk.data

        if tag == "/device":
            self._enter(ParseState.FINISHED)
        elif tag == "cpu":
            device.cpu = Cpu()
            self._enter(ParseState.CPU)
        elif tag == "peripherals":
            self._enter(ParseState.PERIPHERALS)
        elif data is None:
            return
        elif tag == "name":
            device.name = data
        elif tag == "version":
            device.version = data
        elif tag == "description":
            device.description = data
        elif tag == "addressunitbits":
            device.address_unit_bits = _or(to_int(data), device.address_unit_bits)
        elif tag == "width":
            device.max_bit_width = _or(to_int(data), device.max_bit_width)
        elif tag == "size":
            device.reg_default_size = _or(to_int(data), device.reg_default_size)
        elif tag == "resetvalue":
            device.reg_default_reset_value = _or(
                to_int(data), device.reg_default_reset_value
            )
        elif tag == "resetmask":
            device.reg_default_reset_mask = _or(
                to_int(data), device.reg_default_reset_mask
            )

    def _on_cpu(self, tag: str, chunk: Chunk) -> None:
        cpu = self._device.cpu
        assert cpu is not None
        data = chunk.data

        if tag == "/cpu":
            self._enter(ParseState.DEVICE)
        elif data is None:
            return
        elif tag == "name":
            cpu.name = data
        elif tag == "revision":
            cpu.revision = data
        elif tag == "endian":
            cpu.endian = data
        elif tag == "mpupresent":
            cpu.mpu_present = _or(to_bool(data), cpu.mpu_present)
        elif tag == "fpupresent":
            cpu.fpu_present = _or(to_bool(data), cpu.fpu_present)
        elif tag == "nvicpriobits":
            cpu.nvic_prio_bits = _or(to_int(data), cpu.nvic_prio_bits)
        elif tag == "vendorsystickconfig":
            cpu.vendor_systick_config = _or(to_bool(data), cpu.vendor_systick_config)

    def _on_peripherals(self, tag: str, chunk: Chunk) -> None:
        if tag == "/peripherals":
            self._enter(ParseState.DEVICE)
        elif tag == "peripheral":
            if chunk.derived_from is not None:
                base = self._device.find_peripheral(chunk.derived_from)
                if base is None:
                    svd2zig.log.warning(
                        f"line {self._line_number}: peripheral derived from unknown "
                        f"peripheral '{chunk.derived_from}' is skipped"
                    )
                    return
                peripheral = base.copy()
            else:
                peripheral = Peripheral()

            self._device.peripherals.append(peripheral)
            self._address_block_seen = False
            self._enter(ParseState.PERIPHERAL)

    def _on_peripheral(self, tag: str, chunk: Chunk) -> None:
        peripheral = self._peripheral
        data = chunk.data

        if tag == "/peripheral":
            self._enter(ParseState.PERIPHERALS)
        elif tag == "addressblock":
            self._skip_address_block = self._address_block_seen
            if not self._address_block_seen:
                peripheral.address_block = AddressBlock()
                self._address_block_seen = True
            self._enter(ParseState.ADDRESS_BLOCK)
        elif tag == "interrupt":
            self._interrupt = Interrupt()
            self._enter(ParseState.INTERRUPT)
        elif tag == "registers":
            self._enter(ParseState.REGISTERS)
        elif data is None:
            return
        elif tag == "name":
            peripheral.rename(data)
        elif tag == "description":
            peripheral.description = data
        elif tag == "groupname":
            peripheral.group_name = data
        elif tag == "baseaddress":
            peripheral.base_address = _or(to_hex_literal(data), peripheral.base_address)

    def _on_address_block(self, tag: str, chunk: Chunk) -> None:
        block = self._peripheral.address_block
        assert block is not None
        data = chunk.data

        if tag == "/addressblock":
            self._enter(ParseState.PERIPHERAL)
        elif data is None or self._skip_address_block:
            return
        elif tag == "offset":
            block.offset = _or(to_hex_literal(data), block.offset)
        elif tag == "size":
            block.size = _or(to_hex_literal(data), block.size)
        elif tag == "usage":
            block.usage = data

    def _on_interrupt(self, tag: str, chunk: Chunk) -> None:
        interrupt = self._interrupt
        assert interrupt is not None
        data = chunk.data

        if tag == "/interrupt":
            if not self._device.add_interrupt(interrupt):
                svd2zig.log.debug(
                    f"line {self._line_number}: interrupt '{interrupt.name}' "
                    f"(vector {interrupt.value}) is already defined or has no vector number"
                )
            self._interrupt = None
            self._enter(ParseState.PERIPHERAL)
        elif data is None:
            return
        elif tag == "name":
            interrupt.name = data
        elif tag == "description":
            interrupt.description = data
        elif tag == "value":
            interrupt.value = _or(to_int(data), interrupt.value)

    def _on_registers(self, tag: str, chunk: Chunk) -> None:
        if tag == "/registers":
            self._enter(ParseState.PERIPHERAL)
        elif tag == "register":
            peripheral = self._peripheral
            if peripheral.base_address is None:
                error = SvdStructureError(
                    peripheral.name, self._line_number, self._device
                )
                svd2zig.log.error(str(error))
                raise error

            device = self._device
            register = Register(
                peripheral_name=peripheral.name,
                size=_or(device.reg_default_size, self._options.default_register_size),
                reset_value=_or(
                    device.reg_default_reset_value, self._options.default_reset_value
                ),
            )
            peripheral.registers.append(register)
            self._enter(ParseState.REGISTER)

    def _on_register(self, tag: str, chunk: Chunk) -> None:
        register = self._register
        data = chunk.data

        if tag == "/register":
            self._enter(ParseState.REGISTERS)
        elif tag == "fields":
            self._enter(ParseState.FIELDS)
        elif data is None:
            return
        elif tag == "name":
            register.name = data
        elif tag == "displayname":
            register.display_name = data
        elif tag == "description":
            register.description = data
        elif tag == "addressoffset":
            register.address_offset = _or(to_hex_literal(data), register.address_offset)
        elif tag == "size":
            register.size = _or(to_hex_literal(data), register.size)
        elif tag == "resetvalue":
            register.reset_value = _or(to_hex_literal(data), register.reset_value)
        elif tag == "access":
            register.access = _or(Access.parse(data), register.access)

    def _on_fields(self, tag: str, chunk: Chunk) -> None:
        if tag == "/fields":
            self._enter(ParseState.REGISTER)
        elif tag == "field":
            register = self._register
            register.fields.append(
                Field(
                    peripheral_name=self._peripheral.name,
                    register_name=register.name,
                    access=register.access,
                )
            )
            self._enter(ParseState.FIELD)

    def _on_field(self, tag: str, chunk: Chunk) -> None:
        field = self._field
        data = chunk.data

        if tag == "/field":
            self._enter(ParseState.FIELDS)
            self._in_enumerated_values = False
        elif tag == "enumeratedvalues":
            self._in_enumerated_values = True
        elif tag == "/enumeratedvalues":
            self._in_enumerated_values = False
        elif data is None or self._in_enumerated_values:
            return
        elif tag == "name":
            field.name = data
        elif tag == "description":
            field.description = data
        elif tag == "bitoffset":
            field.bit_offset = _or(to_int(data), field.bit_offset)
        elif tag == "bitwidth":
            field.bit_width = _or(to_int(data), field.bit_width)
        elif tag == "access":
            field.access = _or(Access.parse(data), field.access)

    def _on_finished(self, tag: str, chunk: Chunk) -> None:
        # Anything after the closing device tag is ignored
        ...


T = TypeVar("T")


def _or(value: Optional[T], fallback: T) -> T:
    """Return value unless it is None, in which case return fallback."""
    return value if value is not None else fallback
