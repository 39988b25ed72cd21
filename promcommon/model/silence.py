"""Silences and the label matchers they are made of."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from promcommon.model.labels import LabelName, LabelValue, _quote


@dataclass
class Matcher:
    """Matches the value of a given label, literally or by regular expression."""

    name: LabelName
    value: str = ""
    is_regex: bool = False

    def __post_init__(self) -> None:
        self.name = LabelName(self.name)

    def validate(self) -> None:
        """Raise ValueError unless all fields hold valid values."""
        if not self.name.is_valid():
            raise ValueError(f"invalid name {_quote(self.name)}")
        if self.is_regex:
            try:
                re.compile(self.value)
            except re.error as err:
                raise ValueError(
                    f"invalid regular expression {_quote(self.value)}"
                ) from err
        elif not LabelValue(self.value).is_valid() or not self.value:
            raise ValueError(f"invalid value {_quote(self.value)}")

    @classmethod
    def from_json(cls, data: str | bytes) -> "Matcher":
        """Decode a JSON object with name, value and isRegex fields."""
        decoded = json.loads(data)
        if not isinstance(decoded, dict):
            raise ValueError("matcher must be a JSON object")
        name = LabelName("")
        if "name" in decoded and decoded["name"] is not None:
            name = LabelName.from_json(json.dumps(decoded["name"]))
        value = decoded.get("value") or ""
        if not isinstance(value, str):
            raise ValueError("matcher value must be a string")
        is_regex = decoded.get("isRegex") or False
        if not isinstance(is_regex, bool):
            raise ValueError("matcher isRegex must be a boolean")
        if not name:
            raise ValueError("label name in matcher must not be empty")
        if is_regex:
            try:
                re.compile(value)
            except re.error as err:
                raise ValueError(str(err)) from err
        return cls(name=name, value=value, is_regex=is_regex)


@dataclass
class Silence:
    """A silence definition: matchers plus an active time range."""

    matchers: list[Matcher] = field(default_factory=list)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    created_by: str = ""
    comment: str = ""
    id: int = 0

    def validate(self) -> None:
        """Raise ValueError unless all fields hold valid values."""
        if not self.matchers:
            raise ValueError("at least one matcher required")
        for matcher in self.matchers:
            try:
                matcher.validate()
            except ValueError as err:
                raise ValueError(f"invalid matcher: {err}") from err
        if self.starts_at is None:
            raise ValueError("start time missing")
        if self.ends_at is None:
            raise ValueError("end time missing")
        if self.ends_at < self.starts_at:
            raise ValueError("start time must be before end time")
        if not self.created_by:
            raise ValueError("creator information missing")
        if not self.comment:
            raise ValueError("comment missing")
        if self.created_at is None:
            raise ValueError("creation timestamp missing")