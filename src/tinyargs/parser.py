# SPDX-FileCopyrightText: AISEC Pentesting Team
#
# SPDX-License-Identifier: Apache-2.0

"""The option parsing engine.

Usage::

    parser = ArgParser()
    parser.add_option(OptionSpec(name="input", short_form="i", required=True))
    parser.add_option(OptionSpec(name="count", value_type=ValueType.INTEGER, default_value="1"))
    parser.parse(sys.argv)

    parser.get_value("input")
    parser.get_int_value("count")

Tokens are consumed left to right in a single pass. Index 0 is the
program name and is skipped. Every token is either ``--name`` or ``-x``;
options which are not booleans consume the following token as their
value. After the scan, required options are enforced and defaults are
filled in, in registration order.
"""

from collections.abc import Mapping, Sequence
from typing import Self

from tinyargs.config import Config, ParserSettings
from tinyargs.errors import (
    InvalidArgumentFormat,
    InvalidValue,
    MissingRequiredArgument,
    MissingValue,
    UnknownArgument,
)
from tinyargs.help import SupportsWrite, format_help, write_help
from tinyargs.log import get_logger
from tinyargs.registry import OptionRegistry, check_default
from tinyargs.types import (
    OptionSpec,
    OptionValue,
    ParsedOption,
    coerce,
    parse_float,
    parse_int,
)

logger = get_logger(__name__)


class ArgParser:
    """Parses a token sequence against registered option declarations.

    Results are kept per parse: :meth:`parse` discards the results of a
    previous call before it starts. When parsing fails, the options
    recorded before the failing token stay visible through the accessors
    until the next call.

    An instance is not thread-safe; use one instance per owning thread.

    :param strict: Reject duplicate declarations and defaults of the
                   wrong type at registration time.
    :param extra_defaults: Defaults from external sources, such as a
                           config file. They override the declared
                           defaults but never satisfy a required option.
    """

    def __init__(
        self,
        strict: bool = False,
        extra_defaults: Mapping[str, str] | None = None,
    ) -> None:
        self.registry = OptionRegistry(strict=strict)
        self.extra_defaults = dict(extra_defaults) if extra_defaults is not None else {}
        self._results: list[ParsedOption] = []

    @classmethod
    def from_config(cls, config: Config) -> Self:
        settings = ParserSettings.from_config(config)
        return cls(strict=settings.strict, extra_defaults=settings.defaults)

    @property
    def strict(self) -> bool:
        return self.registry.strict

    @property
    def results(self) -> tuple[ParsedOption, ...]:
        return tuple(self._results)

    def add_option(self, spec: OptionSpec) -> None:
        if self.strict and (extra := self.extra_defaults.get(spec.name)) is not None:
            check_default(spec, extra)
        self.registry.add_option(spec)

    def parse(self, tokens: Sequence[str], skip_first: bool = True) -> None:
        """Parses ``tokens`` and applies defaults.

        :param tokens: The raw arguments, usually ``sys.argv``.
        :param skip_first: Skip the program name at index 0.
        :raises ArgParserError: On the first invalid token or the first
                                missing required option.
        """
        self._results.clear()

        i = 1 if skip_first else 0
        while i < len(tokens):
            token = tokens[i]
            spec = self._resolve(token)

            if not spec.takes_value:
                self._record(spec, "true", True)
                i += 1
                continue

            if i + 1 >= len(tokens) or tokens[i + 1].startswith("-"):
                raise MissingValue(spec.name, token)

            value = tokens[i + 1]
            self._record(spec, value, coerce(spec.value_type, value, spec.name))
            i += 2

        self._apply_defaults()

    def _resolve(self, token: str) -> OptionSpec:
        if token.startswith("--"):
            spec = self.registry.find_by_long_name(token[2:])
        elif token.startswith("-"):
            spec = self.registry.find_by_short_form(token[1:])
        else:
            raise InvalidArgumentFormat(token)

        if spec is None:
            raise UnknownArgument(token)

        logger.trace(f"{token} resolved to {spec.long_form}")
        return spec

    def _apply_defaults(self) -> None:
        for spec in self.registry:
            if self._find(spec.name) is not None:
                continue

            if spec.required:
                raise MissingRequiredArgument(spec.name)

            default = self.extra_defaults.get(spec.name, spec.default_value)
            if default is None:
                continue

            typed: OptionValue
            try:
                typed = coerce(spec.value_type, default, spec.name)
            except InvalidValue:
                # Only reachable in non-strict mode; typed reads raise later.
                typed = default

            logger.debug(f"{spec.long_form} defaults to {default!r}")
            self._record(spec, default, typed)

    def _record(self, spec: OptionSpec, value: str, typed: OptionValue) -> None:
        self._results.append(ParsedOption(name=spec.name, value=value, typed=typed))

    def _find(self, name: str) -> ParsedOption | None:
        for result in self._results:
            if result.name == name:
                return result
        return None

    def get_value(self, name: str) -> str | None:
        if (result := self._find(name)) is None:
            return None
        return result.value

    def get_bool_value(self, name: str) -> bool:
        return self.get_value(name) == "true"

    def get_int_value(self, name: str) -> int | None:
        """Returns the value of ``name`` as an integer, or None if it is absent.

        :raises InvalidIntegerValue: If the stored value is not an integer.
        """
        if (result := self._find(name)) is None:
            return None
        if type(result.typed) is int:
            return result.typed
        return parse_int(result.value, name)

    def get_float_value(self, name: str) -> float | None:
        """Returns the value of ``name`` as a float, or None if it is absent.

        :raises InvalidFloatValue: If the stored value is not a float.
        """
        if (result := self._find(name)) is None:
            return None
        if type(result.typed) is float:
            return result.typed
        return parse_float(result.value, name)

    def has_arg(self, name: str) -> bool:
        return self.get_value(name) is not None

    def to_dict(self) -> dict[str, OptionValue]:
        out: dict[str, OptionValue] = {}
        for result in self._results:
            out.setdefault(result.name, result.typed)
        return out

    def format_help(self) -> str:
        return format_help(self.registry)

    def generate_help(self, sink: SupportsWrite[str] | SupportsWrite[bytes]) -> None:
        write_help(self.registry, sink)
