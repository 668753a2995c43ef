# Copyright (c) 2022 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

from . import util
from .bindings import (
    Access,
    Chunk,
    get_chunk,
)
from .errors import (
    SvdError,
    SvdParseError,
    SvdTruncatedError,
    SvdStructureError,
)
from .device import (
    AddressBlock,
    Cpu,
    Device,
    Field,
    Interrupt,
    Peripheral,
    Register,
)
from .parsing import (
    parse,
    parse_lines,
    Options,
    ParseState,
)
from .codegen import (
    render,
    render_device,
)

import importlib.metadata
import logging

__version__ = importlib.metadata.version("svd2zig")


def _init_logger() -> logging.Logger:
    formatter = logging.Formatter("{message}", style="{")
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    logger = logging.getLogger("svd2zig")
    logger.setLevel(logging.ERROR)
    logger.addHandler(handler)

    return logger


# logging.Logger instance used for log output from svd2zig
log = _init_logger()

__all__ = [
    # from bindings
    "Access",
    "Chunk",
    "get_chunk",
    # from errors
    "SvdError",
    "SvdParseError",
    "SvdTruncatedError",
    "SvdStructureError",
    # from device
    "AddressBlock",
    "Cpu",
    "Device",
    "Field",
    "Interrupt",
    "Peripheral",
    "Register",
    # from parsing
    "parse",
    "parse_lines",
    "Options",
    "ParseState",
    # from codegen
    "render",
    "render_device",
    # logging
    "log",
    # version
    "__version__",
]
