"""Label names, label values and label pairs."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass

ALERT_NAME_LABEL = "alertname"
EXPORTED_LABEL_PREFIX = "exported_"
METRIC_NAME_LABEL = "__name__"
SCHEME_LABEL = "__scheme__"
ADDRESS_LABEL = "__address__"
METRICS_PATH_LABEL = "__metrics_path__"
RESERVED_LABEL_PREFIX = "__"
META_LABEL_PREFIX = "__meta_"
TMP_LABEL_PREFIX = "__tmp_"
PARAM_LABEL_PREFIX = "__param_"
JOB_LABEL = "job"
INSTANCE_LABEL = "instance"
BUCKET_LABEL = "le"
QUANTILE_LABEL = "quantile"

LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*\Z")

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def _quote(s: str) -> str:
    """Return ``s`` as a double-quoted, escaped string literal."""
    out = ['"']
    for ch in s:
        code = ord(ch)
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif 0xDC80 <= code <= 0xDCFF:
            # A byte that was not valid UTF-8.
            out.append(f"\\x{code - 0xDC00:02x}")
        elif ch.isprintable():
            out.append(ch)
        elif code < 0x80:
            out.append(f"\\x{code:02x}")
        elif code < 0x10000:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


def _is_name_char(ch: str, first: bool) -> bool:
    return (
        "a" <= ch <= "z"
        or "A" <= ch <= "Z"
        or ch == "_"
        or (not first and "0" <= ch <= "9")
    )


class LabelName(str):
    """A key of a label set or metric."""

    def is_valid(self) -> bool:
        """Return True iff the name matches LABEL_NAME_RE."""
        if not self:
            return False
        return all(_is_name_char(ch, i == 0) for i, ch in enumerate(self))

    @classmethod
    def from_json(cls, data: str | bytes) -> "LabelName":
        """Decode a JSON string into a validated LabelName."""
        value = json.loads(data)
        if not isinstance(value, str):
            raise ValueError("label name must be a JSON string")
        name = cls(value)
        if not name.is_valid():
            raise ValueError(f"{_quote(value)} is not a valid label name")
        return name


class LabelValue(str):
    """A value associated with a LabelName."""

    def is_valid(self) -> bool:
        """Return True iff the value is valid UTF-8."""
        try:
            self.encode("utf-8")
        except UnicodeEncodeError:
            return False
        return True


@dataclass(frozen=True, order=True)
class LabelPair:
    """A label name paired with a value; orders by name, then value."""

    name: LabelName
    value: LabelValue


def format_label_names(names: Iterable[str]) -> str:
    """Join label names with ", "."""
    return ", ".join(str(n) for n in names)