# SPDX-FileCopyrightText: AISEC Pentesting Team
#
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import atexit
import dataclasses
import datetime
import json
import logging
import os
import socket
import sys
import time
import traceback
from enum import Enum, IntEnum, unique
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any, TextIO, cast

import zstandard

if TYPE_CHECKING:
    from logging import _ExcInfoType


gmt_offset = time.localtime().tm_gmtoff
tz = datetime.timezone(datetime.timedelta(seconds=gmt_offset))


@unique
class ColorMode(Enum):
    """ColorMode is used as an argument to :func:`setup_logging`."""

    #: Colors are always turned on.
    ALWAYS = "always"
    #: Colors are turned off if the target
    #: stream (e.g. stderr) is not a tty.
    AUTO = "auto"
    #: No colors are used. In other words,
    #: no ANSI escape codes are included.
    NEVER = "never"


def resolve_color_mode(mode: ColorMode, stream: TextIO = sys.stderr) -> bool:
    """Decides whether the console log handler emits colors.

    :param mode: The available options are described in :class:`ColorMode`.
    :param stream: Used as a reference for :attr:`ColorMode.AUTO`.
    """
    if sys.platform == "win32":
        return False

    match mode:
        case ColorMode.ALWAYS:
            return True
        case ColorMode.AUTO:
            if os.getenv("NO_COLOR") is not None:
                return False
            else:
                return stream.isatty()
        case ColorMode.NEVER:
            return False


# https://stackoverflow.com/a/35804945
def _add_logging_level(level_name: str, level_num: int) -> None:
    method_name = level_name.lower()

    # Another library in this process registered the same level already.
    if getattr(logging, level_name, None) == level_num:
        return
    if hasattr(logging, level_name):
        raise AttributeError(f"{level_name} already defined in logging module")
    if hasattr(logging, method_name):
        raise AttributeError(f"{method_name} already defined in logging module")
    if hasattr(logging.getLoggerClass(), method_name):
        raise AttributeError(f"{method_name} already defined in logger class")

    def for_level(self, message, *args, **kwargs):  # type: ignore
        if self.isEnabledFor(level_num):
            self._log(
                level_num,
                message,
                args,
                **kwargs,
            )

    def to_root(message, *args, **kwargs):  # type: ignore
        logging.log(level_num, message, *args, **kwargs)

    logging.addLevelName(level_num, level_name)
    setattr(logging, level_name, level_num)
    setattr(logging.getLoggerClass(), method_name, for_level)
    setattr(logging, method_name, to_root)


_add_logging_level("TRACE", 5)
_add_logging_level("NOTICE", 25)


@unique
class Loglevel(IntEnum):
    """A type safe wrapper around the constants exposed by python's
    ``logging`` module, including the two additional levels
    ``NOTICE`` and ``TRACE``. ``TRACE`` is used by the parser
    to log every classified token.
    """

    CRITICAL = logging.CRITICAL
    ERROR = logging.ERROR
    WARNING = logging.WARNING
    NOTICE = logging.NOTICE  # type: ignore
    INFO = logging.INFO
    DEBUG = logging.DEBUG
    TRACE = logging.TRACE  # type: ignore

    @classmethod
    def from_str(cls, string: str) -> Loglevel:
        """Converts a string to an instance of Loglevel.
        ``string`` can be a numeric value (e.g. ``10``) or
        a case insensitive name of the level (e.g. ``debug``).
        """
        if string.isnumeric():
            return cls(int(string))

        try:
            return cls[string.upper()]
        except KeyError:
            raise ValueError(f"{string} not a valid loglevel") from None


_listeners: dict[str, list[tuple[QueueHandler, QueueListener]]] = {}


def setup_logging(
    level: Loglevel | None = None,
    color_mode: ColorMode = ColorMode.AUTO,
    path: Path | None = None,
    file_level: Loglevel = Loglevel.DEBUG,
    logger_name: str = "tinyargs",
) -> None:
    """Enable and configure the logging system. Calling it again
    replaces the handlers installed by a previous call.

    :param level: The loglevel to enable for the console handler.
                  If this argument is None, the env variable
                  ``TINYARGS_LOGLEVEL`` is read.
    :param color_mode: The color mode to use for the console.
    :param path: The path to the logfile containing json records.
                 A ``.zst`` suffix enables zstandard compression.
    :param file_level: The loglevel to enable for the file handler.
    :param logger_name: The logger the handlers are attached to.
    """
    if level is None:
        if (raw := os.getenv("TINYARGS_LOGLEVEL")) is not None:
            level = Loglevel.from_str(raw)
        else:
            level = Loglevel.INFO

    logging.logMultiprocessing = False
    logging.logThreads = False
    logging.logProcesses = False

    stop_logging(logger_name)

    logger = logging.getLogger(logger_name)
    # LogLevel cannot be 0 (NOTSET), because only the root logger sends it to its handlers then
    logger.setLevel(1)

    colored = resolve_color_mode(color_mode)
    add_stderr_log_handler(logger_name, level, colored)
    if path is not None:
        add_file_log_handler(logger_name, path, file_level)


def stop_logging(logger_name: str = "tinyargs") -> None:
    """Flushes and removes all handlers installed by :func:`setup_logging`."""
    logger = logging.getLogger(logger_name)

    for _, listener in _listeners.pop(logger_name, []):
        atexit.unregister(listener.stop)
        listener.stop()
        for handler in listener.handlers:
            handler.close()

    while len(logger.handlers) > 0:
        logger.handlers[0].close()
        logger.removeHandler(logger.handlers[0])


def _start_listener(logger_name: str, handler: logging.Handler) -> None:
    queue: Queue[Any] = Queue()
    queue_handler = QueueHandler(queue)
    logging.getLogger(logger_name).addHandler(queue_handler)

    queue_listener = QueueListener(queue, handler, respect_handler_level=True)
    queue_listener.start()
    atexit.register(queue_listener.stop)
    _listeners.setdefault(logger_name, []).append((queue_handler, queue_listener))


def add_stderr_log_handler(logger_name: str, level: Loglevel, colored: bool) -> None:
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    console_formatter = _ConsoleFormatter()
    console_formatter.colored = colored
    stderr_handler.terminator = ""  # We manually handle the terminator while formatting
    stderr_handler.setFormatter(console_formatter)

    _start_listener(logger_name, stderr_handler)


def add_file_log_handler(logger_name: str, path: Path, file_level: Loglevel) -> logging.Handler:
    handler: logging.Handler
    if path.suffix == ".zst":
        handler = _ZstdFileHandler(path, level=file_level)
    else:
        handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    handler.setLevel(file_level)
    handler.setFormatter(_JSONFormatter())

    _start_listener(logger_name, handler)
    return handler


def remove_file_log_handler(logger_name: str, handler: logging.Handler) -> None:
    """Flushes and detaches a handler returned by :func:`add_file_log_handler`.
    The console handler keeps running."""
    entries = _listeners.get(logger_name, [])
    for entry in list(entries):
        queue_handler, listener = entry
        if handler not in listener.handlers:
            continue

        entries.remove(entry)
        logging.getLogger(logger_name).removeHandler(queue_handler)
        atexit.unregister(listener.stop)
        listener.stop()
        handler.close()


def set_console_level(level: Loglevel, logger_name: str = "tinyargs") -> None:
    """Changes the level of the console handler installed by :func:`setup_logging`."""
    for _, listener in _listeners.get(logger_name, []):
        for handler in listener.handlers:
            if isinstance(handler.formatter, _ConsoleFormatter):
                handler.setLevel(level)


@dataclasses.dataclass
class _JSONRecord:
    module: str
    host: str
    data: str
    datetime: str
    level: int
    levelname: str
    line: str | None = None
    stacktrace: str | None = None
    tags: list[str] | None = None


@unique
class _Color(Enum):
    NOP = ""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    YELLOW = "\033[33m"
    GRAY = "\033[0;38;5;245m"


def _colorize_msg(data: str, levelno: int) -> str:
    match levelno:
        case Loglevel.TRACE | Loglevel.DEBUG:
            style = _Color.GRAY.value
        case Loglevel.NOTICE:
            style = _Color.BOLD.value
        case Loglevel.WARNING:
            style = _Color.YELLOW.value
        case Loglevel.ERROR:
            style = _Color.RED.value
        case Loglevel.CRITICAL:
            style = _Color.RED.value + _Color.BOLD.value
        case _:
            style = _Color.NOP.value

    return f"{style}{data}{_Color.RESET.value}"


def _format_record(
    dt: datetime.datetime,
    name: str,
    data: str,
    levelno: int,
    tags: list[str] | None,
    stacktrace: str | None,
    colored: bool = False,
) -> str:
    msg = dt.strftime("%b %d %H:%M:%S.%f")[:-3]
    msg += " "
    msg += name
    if tags is not None and len(tags) > 0:
        msg += f" [{', '.join(tags)}]"
    msg += ": "
    msg += _colorize_msg(data, levelno) if colored else data
    msg += "\n"

    if stacktrace is not None:
        msg += "\n"
        msg += stacktrace

    return msg


class _JSONFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__()
        self.hostname = socket.gethostname()

    def format(self, record: logging.LogRecord) -> str:
        tags = record.__dict__["tags"] if "tags" in record.__dict__ else None
        stacktrace = self.formatException(record.exc_info) if record.exc_info else None

        json_record = _JSONRecord(
            module=record.name,
            host=self.hostname,
            data=record.getMessage(),
            datetime=datetime.datetime.fromtimestamp(record.created, tz=tz).isoformat(),
            level=record.levelno,
            levelname=record.levelname,
            line=f"{record.pathname}:{record.lineno}",
            stacktrace=stacktrace,
            tags=tags,
        )
        return json.dumps(dataclasses.asdict(json_record))


class _ConsoleFormatter(logging.Formatter):
    colored: bool = False

    def format(
        self,
        record: logging.LogRecord,
    ) -> str:
        stacktrace = None

        if record.exc_info:
            exc_type, exc_value, exc_traceback = record.exc_info
            assert exc_type
            assert exc_value

            stacktrace = "".join(traceback.format_exception(exc_type, exc_value, exc_traceback))

        return _format_record(
            dt=datetime.datetime.fromtimestamp(record.created),
            name=record.name,
            data=record.getMessage(),
            levelno=record.levelno,
            tags=record.__dict__["tags"] if "tags" in record.__dict__ else None,
            stacktrace=stacktrace,
            colored=self.colored,
        )


class _ZstdFileHandler(logging.Handler):
    def __init__(self, path: Path, level: int | str = logging.NOTSET) -> None:
        super().__init__(level)
        self.file = zstandard.open(
            filename=path,
            mode="wb",
            cctx=zstandard.ZstdCompressor(
                write_checksum=True,
                write_content_size=True,
            ),
        )

    def close(self) -> None:
        if not self.file.closed:
            self.file.flush()
            self.file.close()
        super().close()

    def emit(self, record: logging.LogRecord) -> None:
        data = self.format(record)
        if not data.endswith("\n"):
            data += "\n"
        self.file.write(data.encode())


class Logger(logging.Logger):
    def trace(
        self,
        msg: Any,
        *args: Any,
        exc_info: _ExcInfoType = None,
        stack_info: bool = False,
        extra: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        if self.isEnabledFor(Loglevel.TRACE):
            self._log(
                Loglevel.TRACE,
                msg,
                args,
                exc_info=exc_info,
                extra=extra,
                stack_info=stack_info,
                **kwargs,
            )

    def notice(
        self,
        msg: Any,
        *args: Any,
        exc_info: _ExcInfoType = None,
        stack_info: bool = False,
        extra: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        if self.isEnabledFor(Loglevel.NOTICE):
            self._log(
                Loglevel.NOTICE,
                msg,
                args,
                exc_info=exc_info,
                extra=extra,
                stack_info=stack_info,
                **kwargs,
            )


logging.setLoggerClass(Logger)


def get_logger(name: str) -> Logger:
    return cast(Logger, logging.getLogger(name))
