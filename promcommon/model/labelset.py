"""Label sets: mappings of label names to label values."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from promcommon.model.fingerprinting import Fingerprint
from promcommon.model.labels import LabelName, LabelValue, _quote
from promcommon.model.signature import (
    label_set_to_fast_fingerprint,
    label_set_to_fingerprint,
)


class LabelSet(dict):
    """A collection of LabelName and LabelValue pairs."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(
            (LabelName(k), LabelValue(v)) for k, v in dict(*args, **kwargs).items()
        )

    def __setitem__(self, key: str, value: str) -> None:
        super().__setitem__(LabelName(key), LabelValue(value))

    def validate(self) -> None:
        """Raise ValueError unless every name and value in the set is valid."""
        for name, value in self.items():
            if not LabelName(name).is_valid():
                raise ValueError(f"invalid name {_quote(name)}")
            if not LabelValue(value).is_valid():
                raise ValueError(f"invalid value {_quote(value)}")

    def equal(self, other: Mapping[str, str]) -> bool:
        """Return True iff both sets have exactly the same pairs."""
        if len(self) != len(other):
            return False
        for name, value in self.items():
            if name not in other or other[name] != value:
                return False
        return True

    def before(self, other: Mapping[str, str]) -> bool:
        """Return True if this set sorts before ``other``.

        Fewer labels sort first. With equal counts, the sorted union of names
        is walked and the first differing pair decides: a missing name sorts
        first, otherwise values are compared. Equal sets return False.
        """
        if len(self) < len(other):
            return True
        if len(self) > len(other):
            return False
        for name in sorted([*self, *other]):
            if name not in self:
                return True
            if name not in other:
                return False
            mine, theirs = self[name], other[name]
            if mine < theirs:
                return True
            if mine > theirs:
                return False
        return False

    def clone(self) -> "LabelSet":
        """Return a copy of the label set."""
        return type(self)(self)

    def merge(self, other: Mapping[str, str]) -> "LabelSet":
        """Return a new set holding this set's pairs overridden by ``other``'s."""
        result = type(self)(self)
        for name, value in other.items():
            result[name] = value
        return result

    def __str__(self) -> str:
        pairs = sorted(f"{name}={_quote(value)}" for name, value in self.items())
        return "{" + ", ".join(pairs) + "}"

    def fingerprint(self) -> Fingerprint:
        """Return the set's fingerprint."""
        return label_set_to_fingerprint(self)

    def fast_fingerprint(self) -> Fingerprint:
        """Return a cheaper, more collision-prone fingerprint."""
        return label_set_to_fast_fingerprint(self)

    @classmethod
    def from_json(cls, data: str | bytes) -> "LabelSet":
        """Decode a JSON object into a label set, validating its names."""
        decoded = json.loads(data)
        if decoded is None:
            return cls()
        if not isinstance(decoded, dict):
            raise ValueError("label set must be a JSON object")
        for name, value in decoded.items():
            if not isinstance(value, str):
                raise ValueError(f"label value for {_quote(name)} must be a string")
        for name in decoded:
            if not LabelName(name).is_valid():
                raise ValueError(f"{_quote(name)} is not a valid label name")
        return cls(decoded)