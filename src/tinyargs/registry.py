# SPDX-FileCopyrightText: AISEC Pentesting Team
#
# SPDX-License-Identifier: Apache-2.0

from collections.abc import Iterator

from tinyargs.errors import DuplicateOption, InvalidDefaultForType, InvalidValue
from tinyargs.log import get_logger
from tinyargs.types import OptionSpec, ValueType, coerce

logger = get_logger(__name__)


def check_default(spec: OptionSpec, value: str) -> None:
    """Ensures that ``value`` is usable as a default of ``spec``.

    :raises InvalidDefaultForType: If ``value`` does not convert to the
                                   value type of ``spec``.
    """
    if spec.value_type is ValueType.BOOLEAN:
        if value not in ("true", "false"):
            raise InvalidDefaultForType(spec.name, value, spec.value_type)
        return

    try:
        coerce(spec.value_type, value, spec.name)
    except InvalidValue as e:
        raise InvalidDefaultForType(spec.name, value, spec.value_type) from e


class OptionRegistry:
    """The ordered collection of option declarations.

    Declarations are kept in registration order, which is the order
    of the help text and of the defaulting pass. Lookups are linear
    scans returning the first match.

    In the default mode nothing is validated: duplicate names or short
    forms and defaults of the wrong type are the caller's responsibility.
    With ``strict=True`` these are rejected with :class:`DuplicateOption`
    and :class:`InvalidDefaultForType` and the declaration is not added.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict
        self._options: list[OptionSpec] = []

    def add_option(self, spec: OptionSpec) -> None:
        if self.strict:
            self._validate(spec)

        if spec.required and spec.default_value is not None:
            logger.warning(
                f"{spec.long_form} is required, its default {spec.default_value!r} is never used"
            )

        self._options.append(spec)
        logger.trace(f"registered {spec.long_form} ({spec.value_type})")

    def _validate(self, spec: OptionSpec) -> None:
        if self.find_by_long_name(spec.name) is not None:
            raise DuplicateOption(spec.name)
        if spec.short_form is not None and self.find_by_short_form(spec.short_form) is not None:
            raise DuplicateOption(spec.name, spec.short_form)
        if spec.default_value is not None:
            check_default(spec, spec.default_value)

    def find_by_long_name(self, name: str) -> OptionSpec | None:
        for spec in self._options:
            if spec.name == name:
                return spec
        return None

    def find_by_short_form(self, name: str) -> OptionSpec | None:
        if len(name) != 1:
            return None

        for spec in self._options:
            if spec.short_form == name:
                return spec
        return None

    @property
    def options(self) -> tuple[OptionSpec, ...]:
        return tuple(self._options)

    def __iter__(self) -> Iterator[OptionSpec]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)
