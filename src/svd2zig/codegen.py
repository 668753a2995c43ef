# Copyright (c) 2023 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

"""
Zig source generation for a parsed SVD device.

The device is rendered as a flat list of declarations, in this order: device metadata, CPU
metadata, one section per peripheral and finally a table of interrupt vector numbers.
Names are prefixed with the names of the containing peripheral and register, for example
`GPIOA_MODER_Address` or `GPIOA_MODER_MODER0_Mask`.

Entities that lack the information needed to render them are replaced by a comment instead
of failing the whole output.
"""

from __future__ import annotations

from typing import Iterator, Optional

from .device import Cpu, Device, Field, Peripheral, Register
from .util import BuildSelector

__all__ = ["render", "render_device"]

NO_DESCRIPTION = "No description"
UNKNOWN = "unknown"


def render(device: Device, selector: BuildSelector = BuildSelector()) -> str:
    """
    Render the device as Zig source.

    :param device: Parsed device.
    :param selector: Selected parts of the device.
    :return: The generated source text.
    """
    return "\n".join(render_device(device, selector)) + "\n"


def render_device(
    device: Device, selector: BuildSelector = BuildSelector()
) -> Iterator[str]:
    """
    Render the device as Zig source, one line at a time.

    :param device: Parsed device.
    :param selector: Selected parts of the device.
    :return: Iterator over the generated lines, without line terminators.
    """
    selector.log_issues(device)

    yield f"pub const device_name = {_string(device.name)};"
    yield f"pub const device_revision = {_string(device.version)};"
    yield f"pub const device_description = {_string(device.description)};"
    if device.address_unit_bits is not None:
        yield f"pub const device_address_unit_bits = {device.address_unit_bits};"
    if device.max_bit_width is not None:
        yield f"pub const device_width = {device.max_bit_width};"

    if device.cpu is not None:
        yield ""
        yield from _render_cpu(device.cpu)

    for peripheral in device.peripherals:
        if selector.is_periph_selected(peripheral):
            yield ""
            yield from _render_peripheral(peripheral)

    yield ""
    yield "pub const interrupts = struct {"
    for interrupt in device.interrupt_table():
        if not interrupt.name:
            continue
        if interrupt.description:
            yield f"    /// {interrupt.description}"
        yield f"    pub const {interrupt.name} = {interrupt.value};"
    yield "};"


def _render_cpu(cpu: Cpu) -> Iterator[str]:
    yield "pub const cpu = struct {"
    yield f"    pub const name = {_string(cpu.name)};"
    yield f"    pub const revision = {_string(cpu.revision)};"
    yield f"    pub const endian = {_string(cpu.endian)};"
    yield f"    pub const mpu_present = {_bool(cpu.mpu_present)};"
    yield f"    pub const fpu_present = {_bool(cpu.fpu_present)};"
    yield f"    pub const vendor_systick_config = {_bool(cpu.vendor_systick_config)};"
    if cpu.nvic_prio_bits is not None:
        yield f"    pub const nvic_prio_bits = {cpu.nvic_prio_bits};"
    yield "};"


def _render_peripheral(peripheral: Peripheral) -> Iterator[str]:
    if not peripheral.is_valid:
        yield "// Not enough info to print peripheral value"
        return

    base_address = peripheral.base_address
    assert base_address is not None

    yield f"/// {peripheral.description or NO_DESCRIPTION}"
    yield f"pub const {peripheral.name}_Base_Address = 0x{base_address:x};"

    for register in peripheral.registers:
        yield ""
        yield from _render_register(register, base_address)


def _render_register(register: Register, base_address: int) -> Iterator[str]:
    if not register.is_valid:
        yield "// Not enough info to print register value"
        return

    prefix = f"{register.peripheral_name}_{register.name}"
    int_type = f"u{register.size}"
    access = register.effective_access

    yield f"/// {register.description or NO_DESCRIPTION}"
    yield f"pub const {prefix}_Address = 0x{base_address:x} + 0x{register.address_offset:x};"
    yield f"pub const {prefix}_Reset_Value: {int_type} = 0x{register.reset_value:x};"

    if access.writable:
        yield f"pub inline fn {prefix}_Write(setting: {int_type}) void {{"
        yield f"    const write_mask = 0x{register.write_mask:x};"
        yield f"    const mmio_ptr = @intToPtr(*volatile {int_type}, {prefix}_Address);"
        yield "    mmio_ptr.* = setting & write_mask;"
        yield "}"

    if access.readable:
        yield f"pub inline fn {prefix}_Read() {int_type} {{"
        yield f"    const mmio_ptr = @intToPtr(*volatile {int_type}, {prefix}_Address);"
        yield "    return mmio_ptr.*;"
        yield "}"

    for field in register.fields:
        yield ""
        yield from _render_field(field)


def _render_field(field: Field) -> Iterator[str]:
    if not field.name:
        yield "// No name to print field value"
        return
    if not field.is_valid:
        yield "// Not enough info to print field"
        return

    prefix = f"{field.peripheral_name}_{field.register_name}_{field.name}"

    yield f"/// {field.description or NO_DESCRIPTION}"
    yield f"pub const {prefix}_Offset = {field.bit_offset};"
    yield f"pub const {prefix}_Mask = 0x{field.mask:x};"
    yield f"pub inline fn {prefix}(setting: u32) u32 {{"
    yield f"    return (setting & 0x{field.base_mask:x}) << {field.bit_offset};"
    yield "}"


def _string(value: str) -> str:
    """Zig string literal for the given text, or for "unknown" if the text is empty."""
    escaped = "".join(_escape_char(c) for c in (value or UNKNOWN))
    return f'"{escaped}"'


_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _escape_char(char: str) -> str:
    if char in _ESCAPES:
        return _ESCAPES[char]
    if ord(char) < 0x20 or ord(char) == 0x7F:
        return f"\\x{ord(char):02x}"
    return char


def _bool(value: Optional[bool]) -> str:
    return "true" if value else "false"
