"""Backend selection and logger creation."""

from __future__ import annotations

import logging
import sys
import threading
from typing import Any, Callable, Optional, Union

from ..utils.config import LogBridgeConfig, build_config
from ..utils.levels import Backend, LogLevel
from .loggers import (
    ConsoleLogger,
    Logger,
    LoggerConfigurator,
    PlatformLogger,
    category_for_class,
)

logger = logging.getLogger(__name__)

ConfiguratorSource = Union[LoggerConfigurator, Callable[[], Optional[LoggerConfigurator]]]


class LoggerFactory:
    """Hands out loggers for one backend, picked on first use.

    The backend is decided once: a registered configurator wins, otherwise
    the ``logging_flag`` of the config picks the platform or console backend.
    ``get_instance`` never raises.
    """

    def __init__(
        self,
        config: Optional[LogBridgeConfig] = None,
        configurator: Optional[ConfiguratorSource] = None,
    ) -> None:
        self._config = config if config is not None else build_config(argv=[])
        self._log_level = self._config.log_level
        self._source = configurator
        self._lock = threading.Lock()
        self._backend: Optional[Backend] = None
        self._configurator: Optional[LoggerConfigurator] = None

    @property
    def config(self) -> LogBridgeConfig:
        return self._config

    @property
    def log_level(self) -> LogLevel:
        return self._log_level

    @log_level.setter
    def log_level(self, value: Union[LogLevel, int, str]) -> None:
        self._log_level = LogLevel.parse(value)

    @property
    def backend(self) -> Optional[Backend]:
        return self._backend

    @property
    def configurator(self) -> Optional[LoggerConfigurator]:
        return self._configurator

    def register_configurator(self, source: Optional[ConfiguratorSource]) -> bool:
        with self._lock:
            resolved = self._backend
            if resolved is None:
                self._source = source
                return True
        logger.warning("Ignoring configurator %r: backend already resolved to %s", source, resolved.value)
        return False

    def resolve(self) -> Backend:
        """Decide the backend if not done yet and return it."""

        backend = self._backend
        if backend is not None:
            return backend
        with self._lock:
            if self._backend is not None:
                return self._backend
            configurator = self._lookup_configurator()
            if configurator is not None:
                self._configurator = configurator
                backend = Backend.CONFIGURED_EXTERNAL
            elif self._config.platform_logging:
                backend = Backend.PLATFORM_NATIVE
            else:
                backend = Backend.CONSOLE_FALLBACK
            # publish last so the fast path never sees a half-set configurator
            self._backend = backend
        # outside the lock: handlers may themselves ask this factory for loggers
        self._announce(backend)
        return backend

    def get_instance(self, target: Any = None, level: Optional[LogLevel] = None) -> Logger:
        """Logger for a category string or a class.

        A class is looked up by class first; anything else is treated as a
        category (None means the empty category).
        """

        if isinstance(target, type):
            return self._create(None, target, level)
        category = target if isinstance(target, str) or target is None else str(target)
        return self._create(category, None, level)

    def _create(self, category: Optional[str], cls: Optional[type], level: Optional[LogLevel]) -> Logger:
        backend = self.resolve()
        if level is not None:
            try:
                level = LogLevel.parse(level)
            except ValueError:
                logger.debug("Ignoring invalid level override %r for %r", level, cls or category)
                level = None
        if cls is not None:
            category = category_for_class(cls)

        if backend is Backend.CONFIGURED_EXTERNAL:
            created = self._from_configurator(category, cls)
            if created is not None:
                return created
            return PlatformLogger(category, level, self._threshold)
        if backend is Backend.CONSOLE_FALLBACK:
            return ConsoleLogger(category, level, self._threshold)
        return PlatformLogger(category, level, self._threshold)

    def _threshold(self) -> LogLevel:
        return self._log_level

    def _lookup_configurator(self) -> Optional[LoggerConfigurator]:
        source = self._source
        if source is None:
            return None
        candidate: Any = source
        # a class is a supplier too: it gets instantiated with no arguments
        if isinstance(source, type) or (not isinstance(source, LoggerConfigurator) and callable(source)):
            try:
                candidate = source()
            except Exception as e:
                logger.debug("Configurator supplier %r failed: %s", source, e)
                return None
        if candidate is None:
            return None
        if isinstance(candidate, type) or not isinstance(candidate, LoggerConfigurator):
            logger.debug("Object %r does not implement LoggerConfigurator", candidate)
            return None
        return candidate

    def _from_configurator(self, category: Optional[str], cls: Optional[type]) -> Optional[Logger]:
        configurator = self._configurator
        if configurator is None:
            return None
        try:
            if cls is not None:
                return configurator.get_logger_for_class(cls)
            return configurator.get_logger(category or "")
        except Exception as e:
            logger.debug("Configurator %r failed for %r: %s", configurator, cls or category, e)
            return None

    def _announce(self, backend: Backend) -> None:
        if self._log_level < LogLevel.INFO:
            return
        try:
            logger.info("Using the logger '%s'", backend.value)
        except Exception as e:  # best-effort
            try:
                print(f"[logbridge] failed to announce backend: {e}", file=sys.stderr)
            except Exception:
                pass


__all__ = ["ConfiguratorSource", "LoggerFactory"]
