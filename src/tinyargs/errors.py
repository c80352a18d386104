# SPDX-FileCopyrightText: AISEC Pentesting Team
#
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

# ****************
# * Base classes *
# ****************


class ArgParserError(Exception):
    """Base class of every error raised while registering or parsing options."""

    def __init__(self, message: str | None = None):
        self.message = message

        super().__init__(message)

    def _message_core(self) -> str:
        return "argument parsing failed"

    def __str__(self) -> str:
        message = self._message_core()

        if self.message is not None:
            message = f"{message}; {self.message}"

        return message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({repr(str(self))})"


class TokenError(ArgParserError):
    def __init__(self, token: str, message: str | None = None):
        self.token = token

        super().__init__(message)


class OptionError(ArgParserError):
    def __init__(self, option: str, message: str | None = None):
        self.option = option

        super().__init__(message)


class InvalidValue(ArgParserError):
    TYPE_NAME = "value"

    def __init__(self, value: str, option: str | None = None, message: str | None = None):
        self.value = value
        self.option = option

        super().__init__(message)

    def _message_core(self) -> str:
        core = f"invalid {self.TYPE_NAME} value {self.value!r}"
        if self.option is not None:
            core += f" for --{self.option}"
        return core


class RegistryError(OptionError):
    pass


# **********************
# * Token level errors *
# **********************


class InvalidArgumentFormat(TokenError):
    def _message_core(self) -> str:
        return f"expected --name or -x, got {self.token!r}"


class UnknownArgument(TokenError):
    def _message_core(self) -> str:
        return f"unknown argument {self.token}"


# ***********************
# * Option level errors *
# ***********************


class MissingValue(OptionError):
    def __init__(self, option: str, token: str, message: str | None = None):
        self.token = token

        super().__init__(option, message)

    def _message_core(self) -> str:
        return f"expected a value after {self.token}"


class MissingRequiredArgument(OptionError):
    def _message_core(self) -> str:
        return f"missing required argument --{self.option}"


class InvalidIntegerValue(InvalidValue):
    TYPE_NAME = "integer"


class InvalidFloatValue(InvalidValue):
    TYPE_NAME = "float"


# *******************
# * Registry errors *
# *******************


class DuplicateOption(RegistryError):
    def __init__(self, option: str, short_form: str | None = None, message: str | None = None):
        self.short_form = short_form

        super().__init__(option, message)

    def _message_core(self) -> str:
        if self.short_form is not None:
            return f"short form -{self.short_form} of --{self.option} is already registered"
        return f"option --{self.option} is already registered"


class InvalidDefaultForType(RegistryError):
    def __init__(
        self, option: str, value: str, value_type: str, message: str | None = None
    ):
        self.value = value
        self.value_type = value_type

        super().__init__(option, message)

    def _message_core(self) -> str:
        return f"default {self.value!r} of --{self.option} is not a valid {self.value_type}"
