"""Metrics: label sets that identify a single stream of samples."""

from __future__ import annotations

import re

from promcommon.model.labels import METRIC_NAME_LABEL, _quote
from promcommon.model.labelset import LabelSet

METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*\Z")


class Metric(LabelSet):
    """A label set referring to one and only one stream of samples."""

    def clone(self) -> "Metric":
        """Return a copy of the metric."""
        return Metric(self)

    def __str__(self) -> str:
        has_name = METRIC_NAME_LABEL in self
        metric_name = self.get(METRIC_NAME_LABEL, "")
        labels = sorted(
            f"{name}={_quote(value)}"
            for name, value in self.items()
            if name != METRIC_NAME_LABEL
        )
        if not labels:
            return str(metric_name) if has_name else "{}"
        return f"{metric_name}{{{', '.join(labels)}}}"


def _is_metric_name_char(ch: str, first: bool) -> bool:
    return (
        "a" <= ch <= "z"
        or "A" <= ch <= "Z"
        or ch in "_:"
        or (not first and "0" <= ch <= "9")
    )


def is_valid_metric_name(name: str) -> bool:
    """Return True iff ``name`` matches METRIC_NAME_RE."""
    if not name:
        return False
    return all(_is_metric_name_char(ch, i == 0) for i, ch in enumerate(name))