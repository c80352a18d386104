# SPDX-FileCopyrightText: AISEC Pentesting Team
#
# SPDX-License-Identifier: Apache-2.0

import re
from enum import StrEnum, unique
from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, field_validator

from tinyargs.errors import InvalidFloatValue, InvalidIntegerValue

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_DECIMAL_INT = re.compile(r"[+-]?[0-9]+")
_DECIMAL_FLOAT = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.ASCII | re.IGNORECASE,
)

OptionValue: TypeAlias = bool | int | float | str


@unique
class ValueType(StrEnum):
    """The value type of an option. The value doubles as the
    type tag in the help text, e.g. ``<integer>``."""

    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"


def parse_int(value: str, option: str | None = None) -> int:
    """Parses ``value`` as a base-10 signed 64-bit integer.

    :param value: The raw string.
    :param option: The option name, only used for the error message.
    :raises InvalidIntegerValue: If ``value`` is malformed or out of range.
    """
    if _DECIMAL_INT.fullmatch(value) is None:
        raise InvalidIntegerValue(value, option)

    result = int(value, 10)
    if not INT64_MIN <= result <= INT64_MAX:
        raise InvalidIntegerValue(value, option, "out of the 64-bit range")
    return result


def parse_float(value: str, option: str | None = None) -> float:
    """Parses ``value`` as a 64-bit floating point number.

    :param value: The raw string.
    :param option: The option name, only used for the error message.
    :raises InvalidFloatValue: If ``value`` is malformed.
    """
    # float() also takes whitespace, underscores and non-ASCII digits.
    if _DECIMAL_FLOAT.fullmatch(value) is None:
        raise InvalidFloatValue(value, option)

    return float(value)


def coerce(value_type: ValueType, value: str, option: str | None = None) -> OptionValue:
    """Converts a raw string into the python type matching ``value_type``."""
    match value_type:
        case ValueType.BOOLEAN:
            return value == "true"
        case ValueType.INTEGER:
            return parse_int(value, option)
        case ValueType.FLOAT:
            return parse_float(value, option)
        case ValueType.STRING:
            return value


class OptionSpec(BaseModel):
    """The declaration of a single command line option.

    ``required`` takes precedence over ``default_value``: a required
    option never falls back to its default.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    short_form: str | None = None
    value_type: ValueType = ValueType.STRING
    required: bool = False
    default_value: str | None = None
    description: str = ""

    @field_validator("name")
    def non_empty(cls, v: str) -> str:
        if v == "":
            raise ValueError("option name must not be empty")
        return v

    @field_validator("short_form")
    def single_char(cls, v: str | None) -> str | None:
        if v is not None and len(v) != 1:
            raise ValueError(f"short form must be a single character: {v!r}")
        return v

    @property
    def long_form(self) -> str:
        return f"--{self.name}"

    @property
    def takes_value(self) -> bool:
        return self.value_type is not ValueType.BOOLEAN


class ParsedOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    typed: OptionValue
