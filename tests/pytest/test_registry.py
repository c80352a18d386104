# SPDX-FileCopyrightText: AISEC Pentesting Team
#
# SPDX-License-Identifier: Apache-2.0

import logging

import pytest

from tinyargs import ArgParser, DuplicateOption, InvalidDefaultForType, OptionSpec, ValueType
from tinyargs.registry import OptionRegistry


def test_lookup_by_long_name() -> None:
    registry = OptionRegistry()
    registry.add_option(OptionSpec(name="input", short_form="i"))
    registry.add_option(OptionSpec(name="output", short_form="o"))

    spec = registry.find_by_long_name("output")
    assert spec is not None
    assert spec.short_form == "o"
    assert registry.find_by_long_name("missing") is None


def test_lookup_by_short_form() -> None:
    registry = OptionRegistry()
    registry.add_option(OptionSpec(name="input", short_form="i"))
    registry.add_option(OptionSpec(name="verbose"))

    spec = registry.find_by_short_form("i")
    assert spec is not None
    assert spec.name == "input"
    assert registry.find_by_short_form("v") is None
    assert registry.find_by_short_form("in") is None
    assert registry.find_by_short_form("") is None


def test_registration_order_is_kept() -> None:
    registry = OptionRegistry()
    names = ["zeta", "alpha", "mid"]
    for name in names:
        registry.add_option(OptionSpec(name=name))

    assert [spec.name for spec in registry] == names
    assert [spec.name for spec in registry.options] == names
    assert len(registry) == 3


def test_duplicates_are_accepted_by_default() -> None:
    registry = OptionRegistry()
    registry.add_option(OptionSpec(name="input", short_form="i", description="first"))
    registry.add_option(OptionSpec(name="input", short_form="i", description="second"))

    assert len(registry) == 2

    by_name = registry.find_by_long_name("input")
    by_short = registry.find_by_short_form("i")
    assert by_name is not None and by_name.description == "first"
    assert by_short is not None and by_short.description == "first"


def test_strict_rejects_duplicate_name() -> None:
    registry = OptionRegistry(strict=True)
    registry.add_option(OptionSpec(name="input"))

    with pytest.raises(DuplicateOption) as exc_info:
        registry.add_option(OptionSpec(name="input"))

    assert exc_info.value.option == "input"
    assert exc_info.value.short_form is None
    assert len(registry) == 1


def test_strict_rejects_duplicate_short_form() -> None:
    registry = OptionRegistry(strict=True)
    registry.add_option(OptionSpec(name="input", short_form="i"))

    with pytest.raises(DuplicateOption) as exc_info:
        registry.add_option(OptionSpec(name="include", short_form="i"))

    assert exc_info.value.short_form == "i"
    assert str(exc_info.value) == "short form -i of --include is already registered"


@pytest.mark.parametrize(
    "value_type,default",
    [
        (ValueType.INTEGER, "ten"),
        (ValueType.INTEGER, "1.5"),
        (ValueType.FLOAT, "fast"),
        (ValueType.BOOLEAN, "yes"),
    ],
)
def test_strict_rejects_mistyped_default(value_type: ValueType, default: str) -> None:
    registry = OptionRegistry(strict=True)

    with pytest.raises(InvalidDefaultForType) as exc_info:
        registry.add_option(OptionSpec(name="opt", value_type=value_type, default_value=default))

    assert exc_info.value.value == default
    assert exc_info.value.value_type == value_type
    assert len(registry) == 0


@pytest.mark.parametrize(
    "value_type,default",
    [
        (ValueType.STRING, "anything"),
        (ValueType.INTEGER, "-10"),
        (ValueType.FLOAT, "0.25"),
        (ValueType.BOOLEAN, "false"),
    ],
)
def test_strict_accepts_valid_default(value_type: ValueType, default: str) -> None:
    registry = OptionRegistry(strict=True)
    registry.add_option(OptionSpec(name="opt", value_type=value_type, default_value=default))

    assert len(registry) == 1


def test_strict_checks_extra_defaults() -> None:
    parser = ArgParser(strict=True, extra_defaults={"count": "many"})

    with pytest.raises(InvalidDefaultForType):
        parser.add_option(OptionSpec(name="count", value_type=ValueType.INTEGER))

    assert len(parser.registry) == 0


def test_required_with_default_warns(caplog: pytest.LogCaptureFixture) -> None:
    registry = OptionRegistry()

    with caplog.at_level(logging.WARNING, logger="tinyargs"):
        registry.add_option(OptionSpec(name="input", required=True, default_value="x"))

    assert "--input is required" in caplog.text
