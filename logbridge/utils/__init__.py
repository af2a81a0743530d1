"""Shared utilities for logbridge."""

from .env_parser import load_env_file
from .levels import Backend, LogLevel

__all__ = ["Backend", "LogLevel", "load_env_file"]
