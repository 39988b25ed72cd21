"""Signatures (fingerprints) of label sets computed with FNV-1a."""

from __future__ import annotations

from collections.abc import Collection, Mapping

from promcommon.model.fingerprinting import Fingerprint
from promcommon.model.fnv import hash_add, hash_add_byte, hash_new

SEPARATOR_BYTE = 255

_EMPTY_LABEL_SIGNATURE = hash_new()


def _sorted_signature(labels: Mapping[str, str], names: list[str]) -> int:
    total = hash_new()
    for name in sorted(names):
        total = hash_add(total, name)
        total = hash_add_byte(total, SEPARATOR_BYTE)
        total = hash_add(total, labels.get(name, ""))
        total = hash_add_byte(total, SEPARATOR_BYTE)
    return total


def labels_to_signature(labels: Mapping[str, str] | None) -> int:
    """Return a quasi-unique signature for a mapping of labels."""
    if not labels:
        return _EMPTY_LABEL_SIGNATURE
    return _sorted_signature(labels, list(labels))


def label_set_to_fingerprint(labels: Mapping[str, str] | None) -> Fingerprint:
    """Like labels_to_signature, but returning a Fingerprint."""
    return Fingerprint(labels_to_signature(labels))


def label_set_to_fast_fingerprint(labels: Mapping[str, str] | None) -> Fingerprint:
    """Order-independent XOR of per-pair hashes; faster but more collision prone."""
    if not labels:
        return Fingerprint(_EMPTY_LABEL_SIGNATURE)
    result = 0
    for name, value in labels.items():
        total = hash_add(hash_new(), name)
        total = hash_add_byte(total, SEPARATOR_BYTE)
        total = hash_add(total, value)
        result ^= total
    return Fingerprint(result)


def signature_for_labels(metric: Mapping[str, str], *args: str) -> int:
    """Signature over only the given label names of ``metric``."""
    if not args:
        return _EMPTY_LABEL_SIGNATURE
    return _sorted_signature(metric, list(args))


def signature_without_labels(
    metric: Mapping[str, str], labels: Collection[str] | None
) -> int:
    """Signature over all labels of ``metric`` except the given names."""
    if not metric:
        return _EMPTY_LABEL_SIGNATURE
    excluded = labels or ()
    names = [n for n in metric if n not in excluded]
    if not names:
        return _EMPTY_LABEL_SIGNATURE
    return _sorted_signature(metric, names)