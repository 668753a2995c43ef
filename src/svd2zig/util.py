# Copyright (c) 2024 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Optional

import svd2zig

if TYPE_CHECKING:
    from .device import Device, Peripheral, Register

MAX_SUPPORTED_BITS = 32


@lru_cache(maxsize=None)
def bit_width_to_mask(width: int) -> int:
    """
    Get the mask with the given number of low bits set.
    A width of 0 (or one larger than 32 bits) is treated as a full 32-bit width.

    :param width: Bit width of the mask.
    :returns: the mask.
    """
    if width == 0 or width > MAX_SUPPORTED_BITS:
        width = MAX_SUPPORTED_BITS
    return (1 << width) - 1


@dataclass
class BuildSelector:
    """Used to select which parts of the device to write to an output."""

    peripherals: Optional[list[str]] = None

    def is_periph_selected(self, periph: Peripheral) -> bool:
        return not self.peripherals or periph.name in self.peripherals

    def log_issues(self, device: Device) -> None:
        if self.peripherals is None:
            return

        known = {p.name for p in device.peripherals}
        nonexistent_periphs = [p for p in self.peripherals if p not in known]
        if nonexistent_periphs:
            svd2zig.log.warning(
                "Selector references peripherals that don't exist in the device: "
                + ", ".join(nonexistent_periphs)
            )


def build_dict(device: Device, selector: BuildSelector = BuildSelector()) -> dict:
    """Encode the device description as a dictionary of plain values.

    Values that were never set in the SVD file are left out.

    :param device: parsed device.
    :param selector: selected parts of the device.
    :returns: device dictionary.
    """
    selector.log_issues(device)

    config: dict[str, Any] = _pruned(
        name=device.name,
        version=device.version,
        description=device.description,
        address_unit_bits=device.address_unit_bits,
        width=device.max_bit_width,
        size=device.reg_default_size,
        reset_value=device.reg_default_reset_value,
        reset_mask=device.reg_default_reset_mask,
    )

    if device.cpu is not None:
        cpu = device.cpu
        config["cpu"] = _pruned(
            name=cpu.name,
            revision=cpu.revision,
            endian=cpu.endian,
            mpu_present=cpu.mpu_present,
            fpu_present=cpu.fpu_present,
            nvic_prio_bits=cpu.nvic_prio_bits,
            vendor_systick_config=cpu.vendor_systick_config,
        )

    peripherals = config.setdefault("peripherals", {})
    for peripheral in device.peripherals:
        if not peripheral.name or not selector.is_periph_selected(peripheral):
            continue

        cfg_periph = _pruned(
            group_name=peripheral.group_name,
            description=peripheral.description,
            base_address=peripheral.base_address,
        )
        if (block := peripheral.address_block) is not None:
            cfg_periph["address_block"] = _pruned(
                offset=block.offset, size=block.size, usage=block.usage
            )

        registers = cfg_periph.setdefault("registers", {})
        for reg in peripheral.registers:
            if reg.name:
                registers[reg.name] = _register_dict(reg)

        peripherals[peripheral.name] = cfg_periph

    if not peripherals:
        svd2zig.log.warning("No part of the device was selected")

    config["interrupts"] = {
        interrupt.name: interrupt.value
        for interrupt in device.interrupt_table()
        if interrupt.name
    }

    return config


def _register_dict(reg: Register) -> dict:
    cfg_reg = _pruned(
        display_name=reg.display_name,
        description=reg.description,
        address_offset=reg.address_offset,
        size=reg.size,
        reset_value=reg.reset_value,
        access=reg.access.value,
    )

    fields = cfg_reg.setdefault("fields", {})
    for field in reg.fields:
        if field.name:
            fields[field.name] = _pruned(
                description=field.description,
                bit_offset=field.bit_offset,
                bit_width=field.bit_width,
                access=field.access.value,
            )

    return cfg_reg


def _pruned(**values: Any) -> dict[str, Any]:
    """Drop unset values and empty strings."""
    return {k: v for k, v in values.items() if v is not None and v != ""}
