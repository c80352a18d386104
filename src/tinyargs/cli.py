# SPDX-FileCopyrightText: AISEC Pentesting Team
#
# SPDX-License-Identifier: Apache-2.0

"""``tinyargs-copy``: copies a file in chunks, driven by a tinyargs parser."""

import sys
from collections.abc import Sequence
from pathlib import Path

import exitcode

from tinyargs.config import Config, load_config_file
from tinyargs.errors import ArgParserError, InvalidIntegerValue, MissingRequiredArgument
from tinyargs.log import (
    Loglevel,
    add_file_log_handler,
    get_logger,
    remove_file_log_handler,
    set_console_level,
    setup_logging,
)
from tinyargs.parser import ArgParser
from tinyargs.types import OptionSpec, ValueType

logger = get_logger(__name__)


def build_parser(config: Config) -> ArgParser:
    parser = ArgParser.from_config(config)
    parser.add_option(
        OptionSpec(
            name="input",
            short_form="i",
            required=True,
            description="Input file path to process",
        )
    )
    parser.add_option(
        OptionSpec(
            name="output",
            short_form="o",
            default_value="output.txt",
            description="Output file path",
        )
    )
    parser.add_option(
        OptionSpec(
            name="buffer-size",
            short_form="b",
            value_type=ValueType.INTEGER,
            default_value="1024",
            description="Buffer size for reading",
        )
    )
    parser.add_option(
        OptionSpec(
            name="verbose",
            short_form="v",
            value_type=ValueType.BOOLEAN,
            description="Enable verbose output",
        )
    )
    parser.add_option(
        OptionSpec(
            name="dry-run",
            short_form="d",
            value_type=ValueType.BOOLEAN,
            description="Show what would be done without actually doing it",
        )
    )
    parser.add_option(
        OptionSpec(
            name="log-file",
            short_form="l",
            description="Write json log records to this file, zstd compressed with a .zst suffix",
        )
    )
    parser.add_option(
        OptionSpec(
            name="help",
            short_form="h",
            value_type=ValueType.BOOLEAN,
            description="Show this help message and exit",
        )
    )
    return parser


def copy_file(input_path: Path, output_path: Path, buffer_size: int) -> int:
    total = 0
    with input_path.open("rb") as src, output_path.open("wb") as dst:
        while chunk := src.read(buffer_size):
            dst.write(chunk)
            total += len(chunk)
            logger.debug(f"processed {total} bytes...")
    return total


def _report_error(parser: ArgParser, error: ArgParserError) -> int:
    match error:
        case MissingRequiredArgument():
            print(f"error: {error}\n", file=sys.stderr)
            parser.generate_help(sys.stderr)
        case InvalidIntegerValue(option="buffer-size"):
            print("error: buffer size must be a valid integer", file=sys.stderr)
        case _:
            print(f"error: {error}", file=sys.stderr)
    return exitcode.USAGE


def _process(parser: ArgParser) -> int:
    input_value = parser.get_value("input")
    output_value = parser.get_value("output")
    assert input_value is not None
    assert output_value is not None
    input_path = Path(input_value)
    output_path = Path(output_value)
    try:
        buffer_size = parser.get_int_value("buffer-size")
    except InvalidIntegerValue as e:
        return _report_error(parser, e)
    if buffer_size is None:
        buffer_size = 1024

    if buffer_size <= 0:
        print("error: buffer size must be positive", file=sys.stderr)
        return exitcode.USAGE

    dry_run = parser.get_bool_value("dry-run")

    logger.debug("configuration:")
    logger.debug(f"  input file: {input_path}")
    logger.debug(f"  output file: {output_path}")
    logger.debug(f"  buffer size: {buffer_size} bytes")
    logger.debug(f"  dry run: {dry_run}")

    if dry_run:
        print(f"dry run - would process '{input_path}' to '{output_path}'")
        return exitcode.OK

    try:
        total = copy_file(input_path, output_path, buffer_size)
    except OSError as e:
        logger.error(f"error processing file: {e!r}")
        return exitcode.IOERR

    logger.notice(f"successfully processed {total} total bytes")
    return exitcode.OK


def run(argv: Sequence[str]) -> int:
    setup_logging()

    try:
        config, _ = load_config_file()
        parser = build_parser(config)
    except FileNotFoundError as e:
        print(f"config file not found: {e}", file=sys.stderr)
        return exitcode.CONFIG
    except (ValueError, ArgParserError) as e:
        print(f"invalid config: {e}", file=sys.stderr)
        return exitcode.CONFIG

    try:
        parser.parse(argv)
    except ArgParserError as e:
        # Options before the failing one are still recorded.
        if parser.get_bool_value("help"):
            parser.generate_help(sys.stdout)
            return exitcode.OK
        return _report_error(parser, e)

    if parser.get_bool_value("help"):
        parser.generate_help(sys.stdout)
        return exitcode.OK

    verbose = parser.get_bool_value("verbose")
    if verbose:
        set_console_level(Loglevel.DEBUG)

    if (log_file := parser.get_value("log-file")) is None:
        return _process(parser)

    try:
        file_handler = add_file_log_handler(
            "tinyargs", Path(log_file), Loglevel.TRACE if verbose else Loglevel.DEBUG
        )
    except OSError as e:
        print(f"error: cannot open log file: {e}", file=sys.stderr)
        return exitcode.IOERR

    try:
        return _process(parser)
    finally:
        remove_file_log_handler("tinyargs", file_handler)


def main() -> None:
    sys.exit(run(sys.argv))


if __name__ == "__main__":
    main()
