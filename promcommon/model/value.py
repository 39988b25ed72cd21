"""Sample values, samples and the result types of query evaluation."""

from __future__ import annotations

import functools
import json
import math
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from promcommon.model.labels import _quote
from promcommon.model.metric import Metric
from promcommon.model.timestamps import EARLIEST, Time, _format_float


class _Number(str):
    """The raw text of a JSON number, kept for exact decoding."""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON literal {name}")


def _decode(text: str | bytes) -> Any:
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8")
    return json.loads(
        text,
        parse_float=_Number,
        parse_int=_Number,
        parse_constant=_reject_constant,
    )


_HTML_SAFE = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)
_SURROGATE_RE = re.compile("[\ud800-\udfff]")


def _encode(obj: Any) -> str:
    """Compact JSON with sorted keys, HTML-safe escapes and raw non-ASCII."""
    text = json.dumps(obj, ensure_ascii=False, separators=(",", ":"), sort_keys=True)
    return _SURROGATE_RE.sub("\ufffd", text).translate(_HTML_SAFE)


def _parse_float(text: str) -> float:
    if not text or text != text.strip() or "_" in text:
        raise ValueError(f"invalid syntax: {text!r}")
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"invalid syntax: {text!r}") from None
    if math.isinf(value) and text.lstrip("+-").lower() not in ("inf", "infinity"):
        raise ValueError(f"value out of range: {text!r}")
    return value


def _is_json_string(obj: Any) -> bool:
    return isinstance(obj, str) and not isinstance(obj, _Number)


def _time_from(obj: Any) -> Time:
    if not isinstance(obj, _Number):
        raise ValueError("timestamp must be a JSON number")
    return Time.from_json(obj)


def _value_from(obj: Any) -> "SampleValue":
    if not _is_json_string(obj):
        raise ValueError("sample value must be a quoted string")
    return SampleValue(_parse_float(obj))


def _array(obj: Any, what: str) -> list:
    if not isinstance(obj, list):
        raise ValueError(f"{what} must be a JSON array")
    return obj


def _metric_from(obj: Any) -> Metric:
    if obj is None:
        return Metric()
    if not isinstance(obj, dict):
        raise ValueError("metric must be a JSON object")
    for name, value in obj.items():
        if not _is_json_string(value):
            raise ValueError(f"label value for {_quote(name)} must be a string")
    return Metric({name: str(value) for name, value in obj.items()})


class SampleValue(float):
    """The value of a sample at a given time."""

    def equal(self, other: float) -> bool:
        """Return True if both values are equal or both are NaN."""
        if self == other:
            return True
        return math.isnan(self) and math.isnan(other)

    def __str__(self) -> str:
        return _format_float(float(self))

    def __repr__(self) -> str:
        return f"SampleValue({float(self)!r})"

    def to_json(self) -> str:
        """Encode as a JSON string holding the decimal value."""
        return json.dumps(str(self))

    @classmethod
    def from_json(cls, text: str | bytes) -> "SampleValue":
        """Decode a JSON string holding a decimal value."""
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8")
        if len(text) < 2 or text[0] != '"' or text[-1] != '"':
            raise ValueError("sample value must be a quoted string")
        return cls(_parse_float(text[1:-1]))


@dataclass
class SamplePair:
    """A sample value paired with its timestamp."""

    timestamp: Time = Time(0)
    value: SampleValue = SampleValue(0.0)

    def __post_init__(self) -> None:
        self.timestamp = Time(self.timestamp)
        self.value = SampleValue(self.value)

    def equal(self, other: "SamplePair") -> bool:
        """Compare timestamps and values, treating NaN values as equal."""
        return self is other or (
            self.value.equal(other.value) and self.timestamp.equal(other.timestamp)
        )

    def __str__(self) -> str:
        return f"{self.value} @[{self.timestamp}]"

    def to_json(self) -> str:
        """Encode as ``[seconds,"value"]``."""
        return f"[{self.timestamp.to_json()},{self.value.to_json()}]"

    @classmethod
    def from_json(cls, text: str | bytes) -> "SamplePair":
        """Decode ``[seconds,"value"]``."""
        return cls._from_obj(_decode(text))

    @classmethod
    def _from_obj(cls, obj: Any) -> "SamplePair":
        if obj is None:
            return cls()
        items = _array(obj, "sample pair")
        timestamp = _time_from(items[0]) if len(items) > 0 else Time(0)
        value = _value_from(items[1]) if len(items) > 1 else SampleValue(0.0)
        return cls(timestamp=timestamp, value=value)


ZERO_SAMPLE_PAIR = SamplePair(timestamp=EARLIEST)


@dataclass
class Sample:
    """A sample pair associated with a metric."""

    metric: Metric = field(default_factory=Metric)
    value: SampleValue = SampleValue(0.0)
    timestamp: Time = Time(0)

    def __post_init__(self) -> None:
        if not isinstance(self.metric, Metric):
            self.metric = Metric(self.metric or {})
        self.value = SampleValue(self.value)
        self.timestamp = Time(self.timestamp)

    def equal(self, other: "Sample") -> bool:
        """Compare metrics, then timestamps, then values (NaN equals NaN)."""
        if self is other:
            return True
        if not self.metric.equal(other.metric):
            return False
        if not self.timestamp.equal(other.timestamp):
            return False
        return self.value.equal(other.value)

    def __str__(self) -> str:
        pair = SamplePair(timestamp=self.timestamp, value=self.value)
        return f"{self.metric} => {pair}"

    def to_json(self) -> str:
        """Encode as ``{"metric":{...},"value":[seconds,"value"]}``."""
        pair = SamplePair(timestamp=self.timestamp, value=self.value)
        return f'{{"metric":{_encode(dict(self.metric))},"value":{pair.to_json()}}}'

    @classmethod
    def from_json(cls, text: str | bytes) -> "Sample":
        """Decode a sample object."""
        return cls._from_obj(_decode(text))

    @classmethod
    def _from_obj(cls, obj: Any) -> "Sample":
        if obj is None:
            return cls()
        if not isinstance(obj, dict):
            raise ValueError("sample must be a JSON object")
        metric = _metric_from(obj.get("metric"))
        pair = SamplePair._from_obj(obj.get("value"))
        return cls(metric=metric, value=pair.value, timestamp=pair.timestamp)


ZERO_SAMPLE = Sample(timestamp=EARLIEST)


def sample_less(a: Sample, b: Sample) -> bool:
    """Order samples by metric first, then by timestamp."""
    if a.metric.before(b.metric):
        return True
    if b.metric.before(a.metric):
        return False
    return a.timestamp.before(b.timestamp)


def _sample_cmp(a: Sample, b: Sample) -> int:
    if sample_less(a, b):
        return -1
    if sample_less(b, a):
        return 1
    return 0


_SAMPLE_KEY = functools.cmp_to_key(_sample_cmp)


def _samples_equal(mine: list, other: Iterable[Sample]) -> bool:
    other = list(other)
    if len(mine) != len(other):
        return False
    return all(a.equal(b) for a, b in zip(mine, other))


class Samples(list):
    """A list of samples, sortable by metric and timestamp."""

    def equal(self, other: Iterable[Sample]) -> bool:
        """Return True if both lists hold pairwise equal samples."""
        return _samples_equal(self, other)

    def sort_by_metric(self) -> None:
        """Sort in place by metric, then timestamp."""
        self.sort(key=_SAMPLE_KEY)


@dataclass
class SampleStream:
    """A stream of sample pairs belonging to one metric."""

    metric: Metric = field(default_factory=Metric)
    values: list[SamplePair] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.metric, Metric):
            self.metric = Metric(self.metric or {})

    def __str__(self) -> str:
        return f"{self.metric} =>\n" + "\n".join(str(v) for v in self.values)


class ValueType(IntEnum):
    """The type of a query evaluation result."""

    NONE = 0
    SCALAR = 1
    VECTOR = 2
    MATRIX = 3
    STRING = 4

    def __str__(self) -> str:
        return _VALUE_TYPE_NAMES[self]

    @classmethod
    def from_string(cls, text: str) -> "ValueType":
        """Return the value type with the given name."""
        for member, name in _VALUE_TYPE_NAMES.items():
            if name == text:
                return member
        raise ValueError(f"unknown value type {_quote(text)}")


_VALUE_TYPE_NAMES = {
    ValueType.NONE: "<ValNone>",
    ValueType.SCALAR: "scalar",
    ValueType.VECTOR: "vector",
    ValueType.MATRIX: "matrix",
    ValueType.STRING: "string",
}


@dataclass
class Scalar:
    """A scalar value evaluated at a timestamp."""

    value: SampleValue = SampleValue(0.0)
    timestamp: Time = Time(0)

    def __post_init__(self) -> None:
        self.value = SampleValue(self.value)
        self.timestamp = Time(self.timestamp)

    def type(self) -> ValueType:
        """Return ValueType.SCALAR."""
        return ValueType.SCALAR

    def __str__(self) -> str:
        return f"scalar: {self.value} @[{self.timestamp}]"

    def to_json(self) -> str:
        """Encode as ``[seconds,"value"]``."""
        return f"[{self.timestamp.to_json()},{json.dumps(str(self.value))}]"

    @classmethod
    def from_json(cls, text: str | bytes) -> "Scalar":
        """Decode ``[seconds,"value"]``."""
        obj = _decode(text)
        if obj is None:
            obj = []
        items = _array(obj, "scalar")
        timestamp = _time_from(items[0]) if len(items) > 0 else Time(0)
        raw = items[1] if len(items) > 1 else ""
        if not _is_json_string(raw):
            raise ValueError("scalar value must be a JSON string")
        try:
            value = _parse_float(raw)
        except ValueError as err:
            raise ValueError(f"error parsing sample value: {err}") from err
        return cls(value=SampleValue(value), timestamp=timestamp)


@dataclass
class String:
    """A string value evaluated at a timestamp."""

    value: str = ""
    timestamp: Time = Time(0)

    def __post_init__(self) -> None:
        self.timestamp = Time(self.timestamp)

    def type(self) -> ValueType:
        """Return ValueType.STRING."""
        return ValueType.STRING

    def __str__(self) -> str:
        return self.value

    def to_json(self) -> str:
        """Encode as ``[seconds,"text"]``."""
        return f"[{self.timestamp.to_json()},{_encode(self.value)}]"

    @classmethod
    def from_json(cls, text: str | bytes) -> "String":
        """Decode ``[seconds,"text"]``."""
        obj = _decode(text)
        if obj is None:
            return cls()
        items = _array(obj, "string value")
        timestamp = _time_from(items[0]) if len(items) > 0 else Time(0)
        value = items[1] if len(items) > 1 else ""
        if not _is_json_string(value):
            raise ValueError("string value must be a JSON string")
        return cls(value=str(value), timestamp=timestamp)


class Vector(Samples):
    """Samples that all share the same timestamp."""

    def type(self) -> ValueType:
        """Return ValueType.VECTOR."""
        return ValueType.VECTOR

    def __str__(self) -> str:
        return "\n".join(str(s) for s in self)

    def equal(self, other: Iterable[Sample]) -> bool:
        """Return True if both vectors hold pairwise equal samples."""
        return _samples_equal(self, other)

    def sort_by_metric(self) -> None:
        """Sort in place by metric, then timestamp."""
        self.sort(key=_SAMPLE_KEY)

    def to_json(self) -> str:
        """Encode as a JSON array of sample objects."""
        return "[" + ",".join(s.to_json() for s in self) + "]"

    @classmethod
    def from_json(cls, text: str | bytes) -> "Vector":
        """Decode a JSON array of sample objects."""
        obj = _decode(text)
        if obj is None:
            return cls()
        return cls(Sample._from_obj(item) for item in _array(obj, "vector"))


def _stream_cmp(a: SampleStream, b: SampleStream) -> int:
    if a.metric.before(b.metric):
        return -1
    if b.metric.before(a.metric):
        return 1
    return 0


class Matrix(list):
    """A list of time series."""

    def type(self) -> ValueType:
        """Return ValueType.MATRIX."""
        return ValueType.MATRIX

    def __str__(self) -> str:
        ordered = sorted(self, key=functools.cmp_to_key(_stream_cmp))
        return "\n".join(str(stream) for stream in ordered)