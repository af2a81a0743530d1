"""Log level ordering shared by the factory and every logger backend."""

from __future__ import annotations

import logging
from enum import Enum, IntEnum
from typing import Union

VERBOSE_LOGGING_LEVEL = 5
logging.addLevelName(VERBOSE_LOGGING_LEVEL, "VERBOSE")

_ALIASES = {
    "TRACE": "VERBOSE",
    "WARNING": "WARN",
    "CRITICAL": "ASSERT",
    "FATAL": "ASSERT",
}


class LogLevel(IntEnum):
    """Platform log priorities; a larger value is more severe."""

    VERBOSE = 2
    DEBUG = 3
    INFO = 4
    WARN = 5
    ERROR = 6
    ASSERT = 7

    @classmethod
    def parse(cls, value: Union["LogLevel", int, str]) -> "LogLevel":
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, bool):
            raise ValueError(f"invalid log level: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(f"invalid log level: {value!r}") from None
        if isinstance(value, str):
            text = value.strip().upper()
            text = _ALIASES.get(text, text)
            member = cls.__members__.get(text)
            if member is not None:
                return member
        raise ValueError(f"invalid log level: {value!r}")

    def to_logging(self) -> int:
        return _TO_LOGGING[self]

    @property
    def letter(self) -> str:
        return "A" if self is LogLevel.ASSERT else self.name[0]


_TO_LOGGING = {
    LogLevel.VERBOSE: VERBOSE_LOGGING_LEVEL,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.ASSERT: logging.CRITICAL,
}


class Backend(str, Enum):
    """Logger implementation family chosen once per factory."""

    CONFIGURED_EXTERNAL = "configured-external"
    PLATFORM_NATIVE = "platform-native"
    CONSOLE_FALLBACK = "console-fallback"


__all__ = ["Backend", "LogLevel", "VERBOSE_LOGGING_LEVEL"]
