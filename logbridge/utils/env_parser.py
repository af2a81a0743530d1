"""Minimal .env reader used to seed the logging switches at bootstrap."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import MutableMapping, Optional

_DOUBLE_QUOTE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", '"': '"'}
_SINGLE_QUOTE_ESCAPES = {"\\": "\\", "'": "'"}


def _closing_quote(text: str, quote: str) -> int:
    skip = False
    for pos, ch in enumerate(text):
        if skip:
            skip = False
        elif ch == "\\":
            skip = True
        elif ch == quote:
            return pos
    return -1


def _unescape(body: str, quote: str) -> str:
    escapes = _DOUBLE_QUOTE_ESCAPES if quote == '"' else _SINGLE_QUOTE_ESCAPES
    out: list[str] = []
    pos = 0
    while pos < len(body):
        ch = body[pos]
        if ch == "\\" and pos + 1 < len(body) and body[pos + 1] in escapes:
            out.append(escapes[body[pos + 1]])
            pos += 2
            continue
        out.append(ch)
        pos += 1
    return "".join(out)


def _drop_comment(value: str) -> str:
    skip = False
    for pos, ch in enumerate(value):
        if skip:
            skip = False
        elif ch == "\\":
            skip = True
        elif ch == "#" and (pos == 0 or value[pos - 1].isspace()):
            return value[:pos].strip()
    return value.strip()


def parse_env_text(text: str) -> dict[str, str]:
    """Parse dotenv text into an ordered mapping; later keys win."""

    values: dict[str, str] = {}
    lines = text.splitlines()
    idx = 0
    while idx < len(lines):
        raw = lines[idx].strip()
        idx += 1
        if not raw or raw.startswith("#"):
            continue
        if raw.startswith("export "):
            raw = raw[len("export ") :].lstrip()
        key, sep, rest = raw.partition("=")
        key = key.strip()
        if not sep or not key:
            continue

        rest = rest.lstrip()
        if not rest or rest[0] not in ("'", '"'):
            values[key] = _drop_comment(rest)
            continue

        quote = rest[0]
        buffer = rest[1:]
        end = _closing_quote(buffer, quote)
        # quoted values may continue over following lines
        while end < 0 and idx < len(lines):
            buffer += "\n" + lines[idx]
            idx += 1
            end = _closing_quote(buffer, quote)
        values[key] = _unescape(buffer if end < 0 else buffer[:end], quote)
    return values


def load_env_file(path: Path, environ: Optional[MutableMapping[str, str]] = None) -> dict[str, str]:
    """Apply a .env file to ``environ`` without overriding existing keys.

    Returns the keys that were actually set.
    """

    target = os.environ if environ is None else environ
    try:
        text = path.read_text(encoding="utf-8", errors="ignore")
    except FileNotFoundError:
        return {}
    except OSError as e:
        print(f"[logbridge] failed to read env file '{path}': {e}", file=sys.stderr)
        return {}

    applied: dict[str, str] = {}
    for key, value in parse_env_text(text).items():
        if key in target:
            continue
        target[key] = value
        applied[key] = value
    return applied


__all__ = ["load_env_file", "parse_env_text"]
