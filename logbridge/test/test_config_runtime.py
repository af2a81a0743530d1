import io
import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from logbridge.core.factory import LoggerFactory
from logbridge.core.loggers import ConsoleLogger, PlatformLogger
from logbridge.utils.config import (
    LOG_LEVEL_ENV,
    LOGGING_FLAG_ENV,
    _reset_runtime_for_tests,
    build_config,
    get_factory,
    get_logger,
    init_runtime,
)
from logbridge.utils.levels import Backend, LogLevel

_MISSING_ENV = Path("logbridge/test/_no_such_dir/.env")


class BuildConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = build_config(argv=[], env={})
        self.assertEqual(cfg.logging_flag, "true")
        self.assertTrue(cfg.platform_logging)
        self.assertEqual(cfg.log_level, LogLevel.WARN)
        self.assertEqual(cfg.handler_level, LogLevel.VERBOSE)

    def test_exact_false_disables_platform_logging(self) -> None:
        self.assertFalse(build_config(argv=[], env={LOGGING_FLAG_ENV: "false"}).platform_logging)

    def test_unexpected_flag_value_keeps_platform_logging(self) -> None:
        stderr = io.StringIO()
        with patch("logbridge.utils.config.sys.stderr", stderr):
            cfg = build_config(argv=[], env={LOGGING_FLAG_ENV: "FALSE"})
        self.assertTrue(cfg.platform_logging)
        self.assertIn("unexpected value for LOGBRIDGE_LOGGING", stderr.getvalue())

    def test_cli_overrides_env(self) -> None:
        env = {LOGGING_FLAG_ENV: "true", LOG_LEVEL_ENV: "error"}
        cfg = build_config(argv=["--logging", "false", "--log-level", "debug", "--other"], env=env)
        self.assertFalse(cfg.platform_logging)
        self.assertEqual(cfg.log_level, LogLevel.DEBUG)

    def test_invalid_level_falls_back_default(self) -> None:
        stderr = io.StringIO()
        with patch("logbridge.utils.config.sys.stderr", stderr):
            cfg = build_config(argv=[], env={LOG_LEVEL_ENV: "noisy", "LOGBRIDGE_HANDLER_LEVEL": "x"})
        self.assertEqual(cfg.log_level, LogLevel.WARN)
        self.assertEqual(cfg.handler_level, LogLevel.VERBOSE)
        self.assertIn("invalid log level for LOGBRIDGE_LOG_LEVEL", stderr.getvalue())
        self.assertIn("invalid log level for LOGBRIDGE_HANDLER_LEVEL", stderr.getvalue())


class RuntimeTests(unittest.TestCase):
    def setUp(self) -> None:
        _reset_runtime_for_tests()
        self.addCleanup(_reset_runtime_for_tests)

    def test_get_factory_creates_single_default(self) -> None:
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop(LOGGING_FLAG_ENV, None)
            first = get_factory()
        self.assertIsInstance(first, LoggerFactory)
        self.assertIs(get_factory(), first)
        self.assertIsInstance(get_logger("app"), PlatformLogger)

    def test_init_runtime_reads_environment_flag(self) -> None:
        with patch.dict(os.environ, {LOGGING_FLAG_ENV: "false", LOG_LEVEL_ENV: "info"}):
            factory = init_runtime(argv=[], env_path=_MISSING_ENV)
        self.assertIs(get_factory(), factory)
        self.assertEqual(factory.log_level, LogLevel.INFO)
        self.assertIsInstance(get_logger("app"), ConsoleLogger)
        self.assertEqual(factory.backend, Backend.CONSOLE_FALLBACK)

    def test_init_runtime_wires_configurator(self) -> None:
        class _Configurator:
            def get_logger(self, category):
                return ConsoleLogger(f"custom.{category}")

            def get_logger_for_class(self, cls):
                return ConsoleLogger(f"custom.{cls.__name__}")

        init_runtime(argv=[], configurator=_Configurator, env_path=_MISSING_ENV)
        self.assertEqual(get_logger("app").category, "custom.app")
        self.assertEqual(get_logger(int).category, "custom.int")

    def test_init_runtime_loads_env_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            env_path = Path(tmp) / ".env"
            env_path.write_text(f"{LOGGING_FLAG_ENV}=false  # console for tests\n", encoding="utf-8")
            with patch.dict(os.environ, {}, clear=False):
                os.environ.pop(LOGGING_FLAG_ENV, None)
                factory = init_runtime(argv=[], env_path=env_path)
        self.assertFalse(factory.config.platform_logging)

    def test_init_runtime_is_idempotent_for_logging_handler(self) -> None:
        init_runtime(argv=[], env_path=_MISSING_ENV)
        root = logging.getLogger()
        first_count = len([h for h in root.handlers if getattr(h, "_logbridge_handler", False)])

        init_runtime(argv=[], env_path=_MISSING_ENV)
        second_count = len([h for h in root.handlers if getattr(h, "_logbridge_handler", False)])

        self.assertEqual(first_count, 1)
        self.assertEqual(second_count, 1)

    def test_init_runtime_keeps_factory_that_already_handed_out_loggers(self) -> None:
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop(LOGGING_FLAG_ENV, None)
            early = get_logger("module.level")
        resolved = get_factory()

        with patch.dict(os.environ, {LOGGING_FLAG_ENV: "false"}):
            with self.assertLogs("logbridge.utils.config", level="WARNING"):
                factory = init_runtime(argv=[], env_path=_MISSING_ENV)
        late = get_logger("module.level")

        self.assertIs(factory, resolved)
        self.assertIs(get_factory(), resolved)
        self.assertIs(type(early), type(late))
        self.assertEqual(resolved.backend, Backend.PLATFORM_NATIVE)

    def test_init_runtime_replaces_unresolved_factory(self) -> None:
        lazy = get_factory()
        self.assertIsNone(lazy.backend)
        with patch.dict(os.environ, {LOGGING_FLAG_ENV: "false"}):
            factory = init_runtime(argv=[], env_path=_MISSING_ENV)
        self.assertIsNot(factory, lazy)
        self.assertIsInstance(get_logger("app"), ConsoleLogger)

    def test_host_arguments_do_not_abort_bootstrap(self) -> None:
        for host_argv in (["app", "--log", "debug"], ["app", "--log-lev", "info"], ["app", "--logging"]):
            with self.subTest(argv=host_argv):
                _reset_runtime_for_tests()
                stderr = io.StringIO()
                with patch("logbridge.utils.config.sys.argv", host_argv), patch(
                    "logbridge.utils.config.sys.stderr", stderr
                ), patch.dict(os.environ, {LOG_LEVEL_ENV: "error"}):
                    factory = init_runtime(env_path=_MISSING_ENV)
                self.assertEqual(factory.log_level, LogLevel.ERROR)

    def test_unparsable_arguments_fall_back_to_env(self) -> None:
        stderr = io.StringIO()
        with patch("logbridge.utils.config.sys.stderr", stderr):
            cfg = build_config(argv=["--logging"], env={LOGGING_FLAG_ENV: "false"})
        self.assertFalse(cfg.platform_logging)
        self.assertIn("ignoring unparsable logging arguments", stderr.getvalue())

    def test_reset_removes_installed_handler(self) -> None:
        init_runtime(argv=[], env_path=_MISSING_ENV)
        _reset_runtime_for_tests()
        root = logging.getLogger()
        self.assertFalse([h for h in root.handlers if getattr(h, "_logbridge_handler", False)])


if __name__ == "__main__":
    unittest.main()
