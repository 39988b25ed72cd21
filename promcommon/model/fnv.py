"""Inline 64-bit FNV-1a hashing over strings and single bytes."""

from __future__ import annotations

OFFSET64 = 14695981039346656037
PRIME64 = 1099511628211
_MASK64 = (1 << 64) - 1


def _as_bytes(s: str | bytes) -> bytes:
    if isinstance(s, (bytes, bytearray)):
        return bytes(s)
    # Lone surrogates stand for bytes that are not valid UTF-8.
    return s.encode("utf-8", "surrogateescape")


def hash_new() -> int:
    """Return the initial FNV-1a 64-bit hash value."""
    return OFFSET64


def hash_add(h: int, s: str | bytes) -> int:
    """Fold the bytes of ``s`` into hash ``h`` and return the new hash."""
    for b in _as_bytes(s):
        h = ((h ^ b) * PRIME64) & _MASK64
    return h


def hash_add_byte(h: int, b: int) -> int:
    """Fold a single byte into hash ``h`` and return the new hash."""
    if not 0 <= b <= 0xFF:
        raise ValueError(f"byte value out of range: {b}")
    return ((h ^ b) * PRIME64) & _MASK64