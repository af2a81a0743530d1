"""Logger capability and the two built-in backends."""

from __future__ import annotations

import logging
import sys
import traceback
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from ..utils.levels import LogLevel

ThresholdSource = Callable[[], LogLevel]


def _default_threshold() -> LogLevel:
    return LogLevel.WARN


def category_for_class(cls: type) -> str:
    """Logging category derived from a class: ``module.QualName``."""

    module = getattr(cls, "__module__", None)
    qualname = getattr(cls, "__qualname__", None) or getattr(cls, "__name__", "")
    if not module or module == "builtins":
        return qualname
    return f"{module}.{qualname}"


class Logger(ABC):
    """Level-gated logging bound to one category.

    When ``level`` is None the logger follows the threshold reported by
    ``threshold``, which is read again on every check.
    """

    def __init__(
        self,
        category: Optional[str],
        level: Optional[LogLevel] = None,
        threshold: Optional[ThresholdSource] = None,
    ) -> None:
        self.category = category or ""
        self.level = level
        self._threshold = threshold or _default_threshold

    @property
    def effective_level(self) -> LogLevel:
        if self.level is not None:
            return self.level
        return self._threshold()

    def is_enabled(self, level: LogLevel) -> bool:
        return level >= self.effective_level

    def is_verbose_enabled(self) -> bool:
        return self.is_enabled(LogLevel.VERBOSE)

    def is_debug_enabled(self) -> bool:
        return self.is_enabled(LogLevel.DEBUG)

    def is_info_enabled(self) -> bool:
        return self.is_enabled(LogLevel.INFO)

    def is_warn_enabled(self) -> bool:
        return self.is_enabled(LogLevel.WARN)

    def is_error_enabled(self) -> bool:
        return self.is_enabled(LogLevel.ERROR)

    def is_fatal_enabled(self) -> bool:
        return self.is_enabled(LogLevel.ASSERT)

    def log(self, level: LogLevel, msg: str, *args: Any, exc_info: Any = None) -> None:
        self._log(level, msg, args, exc_info)

    def _log(self, level: LogLevel, msg: str, args: tuple, exc_info: Any) -> None:
        # public emitters call this directly; PlatformLogger stacklevel depends on it
        if self.is_enabled(level):
            self._emit(level, msg, args, exc_info)

    def verbose(self, msg: str, *args: Any, exc_info: Any = None) -> None:
        self._log(LogLevel.VERBOSE, msg, args, exc_info)

    def debug(self, msg: str, *args: Any, exc_info: Any = None) -> None:
        self._log(LogLevel.DEBUG, msg, args, exc_info)

    def info(self, msg: str, *args: Any, exc_info: Any = None) -> None:
        self._log(LogLevel.INFO, msg, args, exc_info)

    def warn(self, msg: str, *args: Any, exc_info: Any = None) -> None:
        self._log(LogLevel.WARN, msg, args, exc_info)

    def error(self, msg: str, *args: Any, exc_info: Any = None) -> None:
        self._log(LogLevel.ERROR, msg, args, exc_info)

    def fatal(self, msg: str, *args: Any, exc_info: Any = None) -> None:
        self._log(LogLevel.ASSERT, msg, args, exc_info)

    @abstractmethod
    def _emit(self, level: LogLevel, msg: str, args: tuple, exc_info: Any) -> None:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(category={self.category!r}, level={self.effective_level.name})"


class PlatformLogger(Logger):
    """Platform-native backend: forwards to the host ``logging`` hierarchy."""

    def __init__(
        self,
        category: Optional[str],
        level: Optional[LogLevel] = None,
        threshold: Optional[ThresholdSource] = None,
    ) -> None:
        super().__init__(category, level, threshold)
        self._logger = logging.getLogger(self.category)

    def _emit(self, level: LogLevel, msg: str, args: tuple, exc_info: Any) -> None:
        # Logger._log -> Logger.log / Logger.<level> -> caller
        self._logger.log(level.to_logging(), msg, *args, exc_info=exc_info, stacklevel=4)


class ConsoleLogger(Logger):
    """Console fallback: ``W/category: message`` lines on stdout/stderr."""

    def _stream(self, level: LogLevel):
        return sys.stderr if level >= LogLevel.ERROR else sys.stdout

    def _emit(self, level: LogLevel, msg: str, args: tuple, exc_info: Any) -> None:
        text = str(msg)
        if args:
            try:
                text = text % args
            except (TypeError, ValueError):
                text = " ".join([text, *map(str, args)])
        lines = [f"{level.letter}/{self.category}: {text}\n"]
        if exc_info:
            if isinstance(exc_info, BaseException):
                exc_info = (type(exc_info), exc_info, exc_info.__traceback__)
            elif not isinstance(exc_info, tuple):
                exc_info = sys.exc_info()
            if exc_info[0] is not None:
                lines.extend(traceback.format_exception(*exc_info))
        stream = self._stream(level)
        stream.write("".join(lines))
        stream.flush()


@runtime_checkable
class LoggerConfigurator(Protocol):
    """Application hook deciding which Logger the factory hands out."""

    def get_logger(self, category: str) -> Optional[Logger]:
        ...

    def get_logger_for_class(self, cls: type) -> Optional[Logger]:
        ...


__all__ = [
    "ConsoleLogger",
    "Logger",
    "LoggerConfigurator",
    "PlatformLogger",
    "category_for_class",
]
