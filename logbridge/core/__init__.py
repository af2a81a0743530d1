"""Logger factory and built-in backends."""

from .factory import LoggerFactory
from .loggers import ConsoleLogger, Logger, LoggerConfigurator, PlatformLogger

__all__ = ["ConsoleLogger", "Logger", "LoggerConfigurator", "LoggerFactory", "PlatformLogger"]
