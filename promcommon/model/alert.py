"""Alerts and collections of alerts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from promcommon.model.fingerprinting import Fingerprint
from promcommon.model.labels import ALERT_NAME_LABEL
from promcommon.model.labelset import LabelSet


class AlertStatus(str, Enum):
    """Whether an alert is firing or resolved."""

    FIRING = "firing"
    RESOLVED = "resolved"


def _earlier(x: Optional[datetime], y: Optional[datetime]) -> bool:
    """Strict ordering where a missing time precedes every set time."""
    if x is None:
        return y is not None
    if y is None:
        return False
    return x < y


@dataclass
class Alert:
    """A generic alert; its labels must include at least one pair."""

    labels: LabelSet = field(default_factory=LabelSet)
    annotations: LabelSet = field(default_factory=LabelSet)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    generator_url: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.labels, LabelSet):
            self.labels = LabelSet(self.labels or {})
        if not isinstance(self.annotations, LabelSet):
            self.annotations = LabelSet(self.annotations or {})

    def name(self) -> str:
        """Return the value of the alertname label, or an empty string."""
        return str(self.labels.get(ALERT_NAME_LABEL, ""))

    def fingerprint(self) -> Fingerprint:
        """Return the fingerprint of the alert's label set."""
        return self.labels.fingerprint()

    def __str__(self) -> str:
        state = "resolved" if self.resolved() else "active"
        return f"{self.name()}[{str(self.fingerprint())[:7]}][{state}]"

    def resolved(self) -> bool:
        """Return True iff the activity interval ended in the past."""
        if self.ends_at is None:
            return False
        return self.resolved_at(datetime.now(self.ends_at.tzinfo))

    def resolved_at(self, ts: datetime) -> bool:
        """Return True iff the activity interval ended no later than ``ts``."""
        if self.ends_at is None:
            return False
        return not self.ends_at > ts

    def status(self) -> AlertStatus:
        """Return the status of the alert."""
        return AlertStatus.RESOLVED if self.resolved() else AlertStatus.FIRING

    def validate(self) -> None:
        """Raise ValueError if the alert data is inconsistent."""
        if self.starts_at is None:
            raise ValueError("start time missing")
        if self.ends_at is not None and self.ends_at < self.starts_at:
            raise ValueError("start time must be before end time")
        try:
            self.labels.validate()
        except ValueError as err:
            raise ValueError(f"invalid label set: {err}") from err
        if not self.labels:
            raise ValueError("at least one label pair required")
        try:
            self.annotations.validate()
        except ValueError as err:
            raise ValueError(f"invalid annotations: {err}") from err


def _alert_less(a: Alert, b: Alert) -> bool:
    if _earlier(a.starts_at, b.starts_at):
        return True
    if _earlier(a.ends_at, b.ends_at):
        return True
    return a.fingerprint() < b.fingerprint()


class Alerts(list):
    """A list of alerts that can be put in chronological order."""

    def sort_chronologically(self) -> None:
        """Sort in place by start time, then end time, then fingerprint."""
        # Insertion sort: the comparison is not a strict weak ordering, so the
        # result depends on the algorithm and is pinned to this one.
        for i in range(1, len(self)):
            j = i
            while j > 0 and _alert_less(self[j], self[j - 1]):
                self[j], self[j - 1] = self[j - 1], self[j]
                j -= 1

    def has_firing(self) -> bool:
        """Return True iff at least one alert is not resolved."""
        return any(not alert.resolved() for alert in self)

    def status(self) -> AlertStatus:
        """Return FIRING iff at least one alert is firing."""
        return AlertStatus.FIRING if self.has_firing() else AlertStatus.RESOLVED