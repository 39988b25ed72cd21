"""Millisecond timestamps and human-friendly durations."""

from __future__ import annotations

import json
import math
import re
import time as _time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal

MILLIS_PER_SECOND = 1000
NANOS_PER_MILLI = 1_000_000
_DOT_PRECISION = 3

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _format_float(value: float) -> str:
    """Shortest decimal representation of a float, never in exponent form."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _parse_int(text: str, low: int, high: int) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid syntax: {text!r}")
    value = int(text)
    if not low <= value <= high:
        raise ValueError(f"value out of range: {text!r}")
    return value


def _delta_millis(delta: timedelta | "Duration") -> int:
    if isinstance(delta, Duration):
        return int(delta)
    if isinstance(delta, timedelta):
        return _trunc_div(delta // timedelta(microseconds=1), 1000)
    raise TypeError(f"expected timedelta or Duration, got {type(delta).__name__}")


class Time(int):
    """Milliseconds since the Unix epoch, excluding leap seconds."""

    @classmethod
    def now(cls) -> "Time":
        """Return the current time."""
        return cls.from_unix_nano(_time.time_ns())

    @classmethod
    def from_unix(cls, seconds: int) -> "Time":
        """Return the Time for a Unix time given in seconds."""
        return cls(int(seconds) * MILLIS_PER_SECOND)

    @classmethod
    def from_unix_nano(cls, nanos: int) -> "Time":
        """Return the Time for a Unix time given in nanoseconds."""
        return cls(_trunc_div(int(nanos), NANOS_PER_MILLI))

    def equal(self, other: int) -> bool:
        """Report whether both times are the same instant."""
        return int(self) == int(other)

    def before(self, other: int) -> bool:
        """Report whether this time is before ``other``."""
        return int(self) < int(other)

    def after(self, other: int) -> bool:
        """Report whether this time is after ``other``."""
        return int(self) > int(other)

    def add(self, delta: timedelta | "Duration") -> "Time":
        """Return this time shifted by ``delta`` (truncated to milliseconds)."""
        return Time(int(self) + _delta_millis(delta))

    def sub(self, other: int) -> timedelta:
        """Return the duration between ``other`` and this time."""
        return timedelta(milliseconds=int(self) - int(other))

    def to_datetime(self) -> datetime:
        """Return the time as an aware UTC datetime."""
        return _EPOCH + timedelta(milliseconds=int(self))

    def unix(self) -> int:
        """Return the number of whole seconds since the epoch."""
        return _trunc_div(int(self), MILLIS_PER_SECOND)

    def unix_nano(self) -> int:
        """Return the number of nanoseconds since the epoch."""
        return int(self) * NANOS_PER_MILLI

    def __str__(self) -> str:
        return _format_float(float(int(self)) / float(MILLIS_PER_SECOND))

    def __repr__(self) -> str:
        return f"Time({int(self)})"

    def to_json(self) -> str:
        """Encode as a JSON number of seconds with millisecond precision."""
        return str(self)

    @classmethod
    def from_json(cls, text: str | bytes) -> "Time":
        """Decode a JSON number of seconds, keeping millisecond precision."""
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8")
        parts = text.split(".")
        if len(parts) == 1:
            whole = _parse_int(parts[0], _INT64_MIN, _INT64_MAX)
            return cls(whole * MILLIS_PER_SECOND)
        if len(parts) != 2:
            raise ValueError(f"invalid time {text!r}")
        head, frac = parts
        whole = _parse_int(head, _INT64_MIN, _INT64_MAX) * MILLIS_PER_SECOND
        missing = _DOT_PRECISION - len(frac)
        if missing < 0:
            frac = frac[:_DOT_PRECISION]
        elif missing > 0:
            frac = frac + "0" * missing
        millis = _parse_int(frac, _INT32_MIN, _INT32_MAX)
        total = whole + millis
        # A value like -0.1 loses its sign in the integer part; restore it.
        if head.startswith("-") and total > 0:
            return cls(-total)
        return cls(total)


EARLIEST = Time(_INT64_MIN)
LATEST = Time(_INT64_MAX)


@dataclass(frozen=True)
class Interval:
    """An interval between two timestamps."""

    start: Time
    end: Time


_MS_SECOND = 1000
_MS_MINUTE = 60 * _MS_SECOND
_MS_HOUR = 60 * _MS_MINUTE
_MS_DAY = 24 * _MS_HOUR
_MS_WEEK = 7 * _MS_DAY
_MS_YEAR = 365 * _MS_DAY

_DURATION_RE = re.compile(
    r"(([0-9]+)y)?(([0-9]+)w)?(([0-9]+)d)?(([0-9]+)h)?"
    r"(([0-9]+)m)?(([0-9]+)s)?(([0-9]+)ms)?"
)

_PARSE_UNITS = (
    (2, _MS_YEAR),
    (4, _MS_WEEK),
    (6, _MS_DAY),
    (8, _MS_HOUR),
    (10, _MS_MINUTE),
    (12, _MS_SECOND),
    (14, 1),
)

# Years and weeks are only used when they divide the duration exactly.
_FORMAT_UNITS = (
    ("y", _MS_YEAR, True),
    ("w", _MS_WEEK, True),
    ("d", _MS_DAY, False),
    ("h", _MS_HOUR, False),
    ("m", _MS_MINUTE, False),
    ("s", _MS_SECOND, False),
    ("ms", 1, False),
)


class Duration(int):
    """A duration in milliseconds with a compact ``1w2d3h`` text form."""

    def __str__(self) -> str:
        ms = int(self)
        if ms == 0:
            return "0s"
        parts = []
        for unit, mult, exact in _FORMAT_UNITS:
            if exact and ms % mult != 0:
                continue
            count = _trunc_div(ms, mult)
            if count > 0:
                parts.append(f"{count}{unit}")
                ms -= count * mult
        return "".join(parts)

    def __repr__(self) -> str:
        return f"Duration({int(self)})"

    def to_timedelta(self) -> timedelta:
        """Return the duration as a timedelta."""
        return timedelta(milliseconds=int(self))

    def to_json(self) -> str:
        """Encode as a JSON string in the compact text form."""
        return json.dumps(str(self))

    @classmethod
    def from_json(cls, text: str | bytes) -> "Duration":
        """Decode a JSON string holding a duration."""
        value = json.loads(text)
        if not isinstance(value, str):
            raise ValueError("duration must be a JSON string")
        return parse_duration(value)


def parse_duration(text: str) -> Duration:
    """Parse a duration, taking a year as 365d, a week as 7d and a day as 24h."""
    if text == "0":
        return Duration(0)
    if text == "":
        raise ValueError("empty duration string")
    match = _DURATION_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"not a valid duration string: {text!r}")
    total = 0
    for group, mult in _PARSE_UNITS:
        digits = match.group(group)
        if digits:
            total += int(digits) * mult
    return Duration(total)