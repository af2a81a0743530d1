"""Backend-agnostic logger factory."""

from .core import ConsoleLogger, Logger, LoggerConfigurator, LoggerFactory, PlatformLogger
from .utils.config import build_config, get_factory, get_logger, init_runtime
from .utils.levels import Backend, LogLevel

__version__ = "0.1.0"

__all__ = [
    "Backend",
    "ConsoleLogger",
    "LogLevel",
    "Logger",
    "LoggerConfigurator",
    "LoggerFactory",
    "PlatformLogger",
    "build_config",
    "get_factory",
    "get_logger",
    "init_runtime",
]
