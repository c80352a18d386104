# SPDX-FileCopyrightText: AISEC Pentesting Team
#
# SPDX-License-Identifier: Apache-2.0

"""Renders option declarations as usage text.

The output is deterministic and never wrapped, so it can be compared
byte by byte:

    Available arguments:
      --input, -i <string> (required)
        Input file path
      --verbose, -v (default: false)
        Verbose output
"""

import io
from collections.abc import Iterable
from typing import Protocol, TypeVar

from tinyargs.types import OptionSpec, ValueType

HELP_HEADER = "Available arguments:"


T = TypeVar("T", contravariant=True)


class SupportsWrite(Protocol[T]):
    """Any stream or writer accepting ``str`` or ``bytes``."""

    def write(self, data: T, /) -> object: ...  # noqa: D102


def format_option(spec: OptionSpec) -> str:
    line = f"  {spec.long_form}"
    if spec.short_form is not None:
        line += f", -{spec.short_form}"

    if spec.value_type is not ValueType.BOOLEAN:
        line += f" <{spec.value_type}>"

    if spec.required:
        line += " (required)"
    elif spec.default_value is not None:
        line += f" (default: {spec.default_value})"

    return f"{line}\n    {spec.description}\n"


def format_help(specs: Iterable[OptionSpec]) -> str:
    return HELP_HEADER + "\n" + "".join(format_option(spec) for spec in specs)


def _is_binary(sink: object) -> bool:
    if isinstance(sink, io.TextIOBase):
        return False
    if isinstance(sink, io.RawIOBase | io.BufferedIOBase):
        return True
    mode = getattr(sink, "mode", "")
    return isinstance(mode, str) and "b" in mode


def write_help(specs: Iterable[OptionSpec], sink: SupportsWrite[str] | SupportsWrite[bytes]) -> None:
    """Writes the help text to ``sink``. Binary sinks receive UTF-8."""
    text = format_help(specs)
    if _is_binary(sink):
        sink.write(text.encode())  # type: ignore[arg-type]
    else:
        sink.write(text)  # type: ignore[arg-type]
