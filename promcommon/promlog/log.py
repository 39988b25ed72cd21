"""Leveled logfmt or JSON loggers annotated with timestamp and caller."""

from __future__ import annotations

import json
import os
import sys
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

from promcommon.model.labels import _quote

_LEVELS = {"debug": 0, "info": 1, "warn": 2, "error": 3}
_FORMATS = ("logfmt", "json")
_MISSING = "(MISSING)"
_LEVEL_KEY = "level"


class AllowedLevel:
    """The minimum level a log entry must have to be written."""

    def __init__(self) -> None:
        self._value = ""
        self._minimum: Optional[int] = None

    def __str__(self) -> str:
        return self._value

    def set(self, value: str) -> None:
        """Set the level: one of debug, info, warn, error."""
        if value not in _LEVELS:
            raise ValueError(f"unrecognized log level {_quote(value)}")
        self._value = value
        self._minimum = _LEVELS[value]


class AllowedFormat:
    """The output format of a logger: logfmt or json."""

    def __init__(self) -> None:
        self._value = ""

    def __str__(self) -> str:
        return self._value

    def set(self, value: str) -> None:
        """Set the format: one of logfmt, json."""
        if value not in _FORMATS:
            raise ValueError(f"unrecognized log format {_quote(value)}")
        self._value = value


@dataclass
class Config:
    """Settings for a logger."""

    level: Optional[AllowedLevel] = None
    format: Optional[AllowedFormat] = None


def _timestamp() -> str:
    now = datetime.now(timezone.utc)
    return f"{now:%Y-%m-%dT%H:%M:%S}.{now.microsecond // 1000:03d}Z"


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _logfmt_key(key: Any) -> str:
    return "".join(ch for ch in _text(key) if ch > " " and ch not in '="\ufffd')


_QUOTE_ESCAPES = {'"': '\\"', "\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _logfmt_quote(text: str) -> str:
    out = ['"']
    for ch in text:
        if ch in _QUOTE_ESCAPES:
            out.append(_QUOTE_ESCAPES[ch])
        elif ch < " ":
            out.append(f"\\u{ord(ch):04x}")
        elif 0xD800 <= ord(ch) <= 0xDFFF:
            out.append("\ufffd")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def _logfmt_value(value: Any) -> str:
    if value is None:
        return "null"
    text = _text(value)
    if text == "null":
        return '"null"'
    if any(ch <= " " or ch in '="\ufffd' or 0xD800 <= ord(ch) <= 0xDFFF for ch in text):
        return _logfmt_quote(text)
    return text


def _json_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool, list, dict)):
        return value
    return str(value)


class Logger:
    """Writes one line per call of ``log`` with alternating keys and values."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        fmt: str = "logfmt",
        minimum: Optional[int] = None,
    ) -> None:
        self._stream = stream
        self._json = fmt == "json"
        self._minimum = minimum
        self._lock = threading.Lock()

    def _allowed(self, args: tuple) -> bool:
        if self._minimum is None:
            return True
        for key, value in zip(args[::2], args[1::2]):
            if _text(key) == _LEVEL_KEY and _text(value) in _LEVELS:
                return _LEVELS[_text(value)] >= self._minimum
        return True

    def _format(self, keyvals: list) -> str:
        pairs = list(zip(keyvals[::2], keyvals[1::2]))
        if self._json:
            record = {_text(k): _json_value(v) for k, v in pairs}
            return json.dumps(record, sort_keys=True, default=str)
        fields = []
        for key, value in pairs:
            name = _logfmt_key(key)
            if name:
                fields.append(f"{name}={_logfmt_value(value)}")
        return " ".join(fields)

    def log(self, *args: Any) -> None:
        """Write one entry made of alternating keys and values."""
        if not self._allowed(args):
            return
        frame = sys._getframe(1)
        caller = f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno}"
        keyvals: list = ["ts", _timestamp(), "caller", caller, *args]
        if len(keyvals) % 2:
            keyvals.append(_MISSING)
        line = self._format(keyvals) + "\n"
        stream = self._stream if self._stream is not None else sys.stderr
        with self._lock:
            stream.write(line)
            flush = getattr(stream, "flush", None)
            if flush is not None:
                flush()


def new(config: Config, stream: Optional[TextIO] = None) -> Logger:
    """Return a leveled logger writing to ``stream`` (standard error by default)."""
    fmt = "json" if config.format is not None and str(config.format) == "json" else "logfmt"
    minimum = config.level._minimum if config.level is not None else None
    return Logger(stream=stream, fmt=fmt, minimum=minimum)