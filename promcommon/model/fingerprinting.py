"""Fingerprints: 64-bit hashes identifying label sets."""

from __future__ import annotations

import re
from collections.abc import Iterable

_HEX_RE = re.compile(r"[0-9a-fA-F]+")
_MAX = 1 << 64


class Fingerprint(int):
    """An unsigned 64-bit hash of a metric or label set (FNV-1a)."""

    def __new__(cls, value: int = 0) -> "Fingerprint":
        value = int(value)
        if not 0 <= value < _MAX:
            raise ValueError(f"fingerprint out of range: {value}")
        return super().__new__(cls, value)

    def __str__(self) -> str:
        return f"{int(self):016x}"

    def __repr__(self) -> str:
        return f"Fingerprint({int(self)})"


def parse_fingerprint(s: str) -> Fingerprint:
    """Parse a hexadecimal string into a Fingerprint, raising ValueError."""
    if not _HEX_RE.fullmatch(s):
        raise ValueError(f"invalid fingerprint syntax: {s!r}")
    num = int(s, 16)
    if num >= _MAX:
        raise ValueError(f"fingerprint value out of range: {s!r}")
    return Fingerprint(num)


def fingerprint_from_string(s: str) -> Fingerprint:
    """Transform a hexadecimal string representation into a Fingerprint."""
    return parse_fingerprint(s)


class FingerprintSet(set):
    """A set of Fingerprints."""

    def __init__(self, items: Iterable[int] = ()) -> None:
        super().__init__(Fingerprint(i) for i in items)

    def equal(self, other: "FingerprintSet") -> bool:
        """Return True if both sets contain exactly the same elements."""
        if len(self) != len(other):
            return False
        return all(k in other for k in self)

    def intersection(self, other: "FingerprintSet") -> "FingerprintSet":  # type: ignore[override]
        """Return the elements contained in both sets."""
        if not self or not other:
            return FingerprintSet()
        small, large = (other, self) if len(other) < len(self) else (self, other)
        return FingerprintSet(k for k in small if k in large)