# SPDX-FileCopyrightText: AISEC Pentesting Team
#
# SPDX-License-Identifier: Apache-2.0

"""Typed command line option parsing.

The public interface is the `ArgParser` class, the option declaration
model `OptionSpec` with its `ValueType`, and the exceptions raised on
invalid input.
"""

from tinyargs.errors import (
    ArgParserError,
    DuplicateOption,
    InvalidArgumentFormat,
    InvalidDefaultForType,
    InvalidFloatValue,
    InvalidIntegerValue,
    MissingRequiredArgument,
    MissingValue,
    UnknownArgument,
)
from tinyargs.parser import ArgParser
from tinyargs.types import OptionSpec, ParsedOption, ValueType

# Public Re-Exports
__all__ = (
    "ArgParser",
    "ArgParserError",
    "DuplicateOption",
    "InvalidArgumentFormat",
    "InvalidDefaultForType",
    "InvalidFloatValue",
    "InvalidIntegerValue",
    "MissingRequiredArgument",
    "MissingValue",
    "OptionSpec",
    "ParsedOption",
    "UnknownArgument",
    "ValueType",
)
