"""
Pytest configuration and shared fixtures for the svd2zig test suite.
"""

from pathlib import Path
from typing import Callable, List

import pytest

import svd2zig

RNG_SVD = """\
<?xml version="1.0" encoding="utf-8" standalone="no"?>
<device schemaVersion="1.1" xmlns:xs="http://www.w3.org/2001/XMLSchema-instance">
  <name>STM32F7x7</name>
  <version>1.0</version>
  <description>STM32F7x7</description>
  <cpu>
    <name>CM7</name>
    <revision>r0p1</revision>
    <endian>little</endian>
    <mpuPresent>true</mpuPresent>
    <fpuPresent>false</fpuPresent>
    <nvicPrioBits>4</nvicPrioBits>
    <vendorSystickConfig>false</vendorSystickConfig>
  </cpu>
  <addressUnitBits>8</addressUnitBits>
  <width>32</width>
  <size>32</size>
  <resetValue>0</resetValue>
  <resetMask>4294967295</resetMask>
  <peripherals>
    <peripheral>
      <name>RNG</name>
      <description>Random number generator</description>
      <groupName>RNG</groupName>
      <baseAddress>0x24000</baseAddress>
      <addressBlock>
        <offset>0x0</offset>
        <size>0x400</size>
        <usage>registers</usage>
      </addressBlock>
      <interrupt>
        <name>RNG</name>
        <description>RNG global interrupt</description>
        <value>80</value>
      </interrupt>
      <registers>
        <register>
          <name>CR</name>
          <displayName>CR</displayName>
          <description>control register</description>
          <addressOffset>0x100</addressOffset>
          <size>0x20</size>
          <access>read-write</access>
          <resetValue>0x00000000</resetValue>
          <fields>
            <field>
              <name>RNGEN</name>
              <description>Random number generator enable</description>
              <bitOffset>2</bitOffset>
              <bitWidth>1</bitWidth>
              <access>{field_access}</access>
            </field>
          </fields>
        </register>
      </registers>
    </peripheral>
  </peripherals>
</device>
"""

TIMERS_SVD = """\
<device>
  <name>TIMERS</name>
  <peripherals>
    <peripheral>
      <name>TIM10</name>
      <description>General purpose timer</description>
      <baseAddress>0x1000</baseAddress>
      <interrupt>
        <name>TIM1_UP_TIM10</name>
        <value>25</value>
      </interrupt>
      <registers>
        <register>
          <name>CR</name>
          <addressOffset>0x0</addressOffset>
          <fields>
            <field>
              <name>CEN</name>
              <bitOffset>0</bitOffset>
              <bitWidth>1</bitWidth>
            </field>
          </fields>
        </register>
      </registers>
    </peripheral>
    <peripheral derivedFrom="TIM10">
      <name>TIM11</name>
      <baseAddress>0x2000</baseAddress>
      <interrupt>
        <name>TIM1_UP_TIM10</name>
        <value>25</value>
      </interrupt>
      <interrupt>
        <name>TIM1_TRG_COM_TIM11</name>
        <value>26</value>
      </interrupt>
    </peripheral>
  </peripherals>
</device>
"""


@pytest.fixture
def rng_svd() -> Callable[..., str]:
    """
    Fixture that provides the text of a small SVD file with a single peripheral, register
    and field.

    Returns:
        Callable taking the access type of the RNGEN field and returning the SVD text.
    """

    def make(field_access: str = "read-only") -> str:
        return RNG_SVD.format(field_access=field_access)

    return make


@pytest.fixture
def timers_device() -> svd2zig.Device:
    """Fixture that provides a parsed device where TIM11 is derived from TIM10."""
    return svd2zig.parse_lines(TIMERS_SVD.splitlines())


@pytest.fixture
def svd_file(tmp_path: Path, rng_svd: Callable[..., str]) -> Path:
    """Fixture that provides the path to the RNG SVD file written to a temporary directory."""
    path = tmp_path / "rng.svd"
    path.write_text(rng_svd("read-write"), encoding="utf-8")
    return path


def wrap_peripheral(*peripheral_lines: str) -> List[str]:
    """Wrap the given peripheral body lines in a minimal device document."""
    return [
        "<device>",
        "<name>DEV</name>",
        "<peripherals>",
        "<peripheral>",
        *peripheral_lines,
        "</peripheral>",
        "</peripherals>",
        "</device>",
    ]
