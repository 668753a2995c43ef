# Copyright (c) 2024 Nordic Semiconductor ASA
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import dataclasses
import enum
import importlib.util
import json
import logging
import sys
from pathlib import Path
from textwrap import dedent
from typing import Optional, Sequence

import svd2zig
from svd2zig.util import BuildSelector, build_dict

HAS_TOMLKIT = importlib.util.find_spec("tomlkit") is not None


class Format(enum.Enum):
    JSON = enum.auto()
    TOML = enum.auto()


DUMP_FORMATS = [Format.JSON]

if HAS_TOMLKIT:
    DUMP_FORMATS.append(Format.TOML)


def cli(argv: Optional[Sequence[str]] = None) -> None:
    top = argparse.ArgumentParser(
        prog="svd2zig",
        description=dedent(
            """\
            Generate Zig register accessors from System View Description (SVD) files.
            """
        ),
        allow_abbrev=False,
    )
    top.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help=(
            "Output verbose logs. Can be given multiple times to increase the verbosity. "
            "By default only critical messages are output."
        ),
    )

    sub = top.add_subparsers(title="subcommands")

    gen = sub.add_parser(
        "generate",
        help="Generate Zig source for the registers of a device.",
        description=dedent(
            """\
            Generate Zig declarations for the device metadata, the peripheral and register
            addresses, register accessors, field masks and the interrupt vector numbers
            described by a SVD file.
            """
        ),
        allow_abbrev=False,
    )
    gen.set_defaults(_command="generate")
    _add_svd_options(gen)

    dump = sub.add_parser(
        "dump",
        help="Output the parsed device description in a structured format.",
        description=dedent(
            """\
            Output the device description as parsed from the SVD file, for inspecting what
            the generator sees.
            """
        ),
        allow_abbrev=False,
    )
    dump.set_defaults(_command="dump")
    _add_svd_options(dump)
    dump.add_argument(
        "-O",
        "--output-format",
        choices=[f.name.lower() for f in DUMP_FORMATS],
        default=Format.JSON.name.lower(),
        help="Output format.",
    )

    args = top.parse_args(argv)

    log_level = {
        0: logging.CRITICAL,
        1: logging.WARNING,
        2: logging.INFO,
        3: logging.DEBUG,
    }.get(args.verbose, logging.DEBUG)
    svd2zig.log.setLevel(log_level)

    if not hasattr(args, "_command"):
        top.print_usage()
        sys.exit(2)

    try:
        if args._command == "generate":
            cmd_generate(args)
        elif args._command == "dump":
            cmd_dump(args)
        else:
            top.print_usage()
            sys.exit(2)
    except svd2zig.SvdParseError as e:
        svd2zig.log.critical(f"Invalid SVD file {args.svd_file}: {e}")
        sys.exit(1)

    sys.exit(0)


def _add_svd_options(parser: argparse.ArgumentParser) -> None:
    svd_group = parser.add_argument_group("SVD options")
    svd_group.add_argument(
        "-s",
        "--svd-file",
        required=True,
        type=Path,
        help="Path to the device SVD file.",
    )
    svd_group.add_argument(
        "--svd-parse-options",
        type=json.loads,
        help=(
            "JSON object used to override fields in the Options object to customize svd2zig "
            "parsing behavior, e.g. the register size used when the device declares none."
        ),
    )

    sel_group = parser.add_argument_group("selection options")
    sel_group.add_argument(
        "-p",
        "--peripheral",
        metavar="NAME",
        dest="peripherals",
        action="append",
        help="Limit output to the given peripheral. May be given multiple times.",
    )

    out_group = parser.add_argument_group("output options")
    out_group.add_argument(
        "-o",
        "--output-file",
        type=Path,
        help="File to write the output to. If not given, output is written to stdout.",
    )


def _parse_device(args: argparse.Namespace) -> svd2zig.Device:
    options = svd2zig.Options()
    if args.svd_parse_options:
        options = dataclasses.replace(options, **args.svd_parse_options)

    return svd2zig.parse(args.svd_file, options=options)


def _write_output(args: argparse.Namespace, text: str) -> None:
    # Output is only produced once the whole device has been parsed successfully
    if args.output_file is None:
        sys.stdout.write(text)
    else:
        args.output_file.write_text(text, encoding="utf-8")


def cmd_generate(args: argparse.Namespace) -> None:
    device = _parse_device(args)
    selector = BuildSelector(peripherals=args.peripherals)
    _write_output(args, svd2zig.render(device, selector))


def cmd_dump(args: argparse.Namespace) -> None:
    device = _parse_device(args)
    selector = BuildSelector(peripherals=args.peripherals)
    output_dict = build_dict(device, selector)

    output_format = Format[args.output_format.upper()]
    if output_format == Format.JSON:
        text = json.dumps(output_dict, indent=2) + "\n"
    elif output_format == Format.TOML:
        import tomlkit

        text = tomlkit.dumps(output_dict)

    _write_output(args, text)


# Entry point when running with python -m svd2zig
if __name__ == "__main__":
    cli()
