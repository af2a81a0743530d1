"""Runtime configuration and the process-wide logger factory."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

from .env_parser import load_env_file
from .levels import LogLevel

if TYPE_CHECKING:
    from ..core.factory import ConfiguratorSource, LoggerFactory
    from ..core.loggers import Logger

LOGGING_FLAG_ENV = "LOGBRIDGE_LOGGING"
LOG_LEVEL_ENV = "LOGBRIDGE_LOG_LEVEL"
HANDLER_LEVEL_ENV = "LOGBRIDGE_HANDLER_LEVEL"

_DEFAULT_LOGGING_FLAG = "true"
_DEFAULT_LOG_LEVEL = LogLevel.WARN
_DEFAULT_HANDLER_LEVEL = LogLevel.VERBOSE
_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_FACTORY: Optional["LoggerFactory"] = None
_FACTORY_LOCK = threading.Lock()


@dataclass(frozen=True)
class LogBridgeConfig:
    logging_flag: str = _DEFAULT_LOGGING_FLAG
    log_level: LogLevel = _DEFAULT_LOG_LEVEL
    handler_level: LogLevel = _DEFAULT_HANDLER_LEVEL

    @property
    def platform_logging(self) -> bool:
        # only the exact string "false" turns the platform backend off
        return self.logging_flag != "false"


def _parse_level(value: Optional[str], *, default: LogLevel, field_name: str) -> LogLevel:
    if value is None or not value.strip():
        return default
    try:
        return LogLevel.parse(value)
    except ValueError:
        print(f"[logbridge] invalid log level for {field_name}: '{value}', fallback to {default.name}", file=sys.stderr)
        return default


def _parse_flag(value: Optional[str], *, field_name: str) -> str:
    if value is None:
        return _DEFAULT_LOGGING_FLAG
    if value not in ("true", "false"):
        print(
            f"[logbridge] unexpected value for {field_name}: '{value}', platform logging stays enabled",
            file=sys.stderr,
        )
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False, allow_abbrev=False, exit_on_error=False)
    parser.add_argument("--logging", type=str, default=None, help='"false" routes logs to the console backend')
    parser.add_argument("--log-level", type=str, default=None, help="VERBOSE/DEBUG/INFO/WARN/ERROR/ASSERT")
    return parser


def _pick(
    cli_value: Optional[str],
    env: Mapping[str, str],
    env_key: str,
    default: Optional[str] = None,
) -> Optional[str]:
    if cli_value is not None:
        return cli_value
    return env.get(env_key, default)


def build_config(
    argv: Optional[Sequence[str]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> LogBridgeConfig:
    """Build LogBridgeConfig from argv and environment variables."""

    env_map: Mapping[str, str] = env if env is not None else os.environ
    try:
        args, _ = _build_parser().parse_known_args(list(argv) if argv is not None else None)
    except (argparse.ArgumentError, SystemExit) as e:
        print(f"[logbridge] ignoring unparsable logging arguments: {e}", file=sys.stderr)
        args = argparse.Namespace(logging=None, log_level=None)

    return LogBridgeConfig(
        logging_flag=_parse_flag(_pick(args.logging, env_map, LOGGING_FLAG_ENV), field_name=LOGGING_FLAG_ENV),
        log_level=_parse_level(
            _pick(args.log_level, env_map, LOG_LEVEL_ENV),
            default=_DEFAULT_LOG_LEVEL,
            field_name=LOG_LEVEL_ENV,
        ),
        handler_level=_parse_level(
            env_map.get(HANDLER_LEVEL_ENV),
            default=_DEFAULT_HANDLER_LEVEL,
            field_name=HANDLER_LEVEL_ENV,
        ),
    )


def setup_logging(level: LogLevel, stream: Optional[Any] = None) -> None:
    """Install the root stream handler once; later calls only adjust levels."""

    root = logging.getLogger()
    ours = [h for h in root.handlers if getattr(h, "_logbridge_handler", False)]
    if not ours:
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._logbridge_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
        ours = [handler]

    root.setLevel(level.to_logging())
    for handler in ours:
        handler.setLevel(level.to_logging())


def init_runtime(
    argv: Optional[Sequence[str]] = None,
    configurator: Optional["ConfiguratorSource"] = None,
    env_path: Optional[Path] = None,
) -> "LoggerFactory":
    """Load .env, build config, set up logging and install the process factory.

    A factory that already handed out loggers is kept: its backend stays the
    one for the rest of the process.
    """

    from ..core.factory import LoggerFactory

    global _FACTORY

    logger = logging.getLogger(__name__)
    with _FACTORY_LOCK:
        current = _FACTORY
    if current is not None and current.backend is not None:
        logger.warning("Runtime already resolved to %s; keeping the existing factory", current.backend.value)
        return current

    load_env_file(env_path if env_path is not None else Path.cwd() / ".env")
    cfg = build_config(argv=argv, env=os.environ)
    setup_logging(cfg.handler_level)
    factory = LoggerFactory(cfg, configurator=configurator)
    with _FACTORY_LOCK:
        current = _FACTORY
        if current is not None and current.backend is not None:
            factory = current
        else:
            _FACTORY = factory
    if factory is current:
        logger.warning("Runtime already resolved to %s; keeping the existing factory", current.backend.value)
        return current

    logger.debug("logging_flag=%s log_level=%s", cfg.logging_flag, cfg.log_level.name)
    return factory


def get_factory() -> "LoggerFactory":
    """Return the process factory, creating a default one on first use."""

    global _FACTORY

    factory = _FACTORY
    if factory is not None:
        return factory
    from ..core.factory import LoggerFactory

    with _FACTORY_LOCK:
        if _FACTORY is None:
            _FACTORY = LoggerFactory(build_config(argv=[], env=os.environ))
        return _FACTORY


def get_logger(target: Any = None, level: Optional[LogLevel] = None) -> "Logger":
    return get_factory().get_instance(target, level)


def _reset_runtime_for_tests() -> None:
    """Reset runtime globals for isolated tests."""

    global _FACTORY
    with _FACTORY_LOCK:
        _FACTORY = None
    root = logging.getLogger()
    root.handlers = [h for h in root.handlers if not getattr(h, "_logbridge_handler", False)]


__all__ = [
    "HANDLER_LEVEL_ENV",
    "LOGGING_FLAG_ENV",
    "LOG_LEVEL_ENV",
    "LogBridgeConfig",
    "build_config",
    "get_factory",
    "get_logger",
    "init_runtime",
    "setup_logging",
]
