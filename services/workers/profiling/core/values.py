"""Field-level value resolution shared by ingestion, inference and statistics."""
from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass
from typing import Any, Optional

from .constants import _UNKNOWN_GROUP_LABEL

MISSING = "missing"
NUMBER = "number"
TEXT = "text"

# Plain decimal literals only: no underscores, no hex, no "inf"/"nan" spellings.
_DECIMAL_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    # dataframe-style decoders emit NaN for empty cells
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def parse_numeric(value: Any) -> Optional[float]:
    """Return the finite float a raw field converts to, or ``None``."""
    if is_missing(value):
        return None
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, numbers.Number):
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return None
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        text = value.strip()
        if not _DECIMAL_LITERAL.fullmatch(text):
            return None
        number = float(text)
        return number if math.isfinite(number) else None
    return None


def display_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class FieldValue:
    kind: str
    text: Optional[str] = None
    number: Optional[float] = None

    @classmethod
    def resolve(cls, raw: Any) -> "FieldValue":
        if is_missing(raw):
            return MISSING_FIELD
        number = parse_numeric(raw)
        if number is None:
            return cls(kind=TEXT, text=display_text(raw))
        return cls(kind=NUMBER, text=display_text(raw), number=number)

    @property
    def is_missing(self) -> bool:
        return self.kind == MISSING

    @property
    def is_numeric(self) -> bool:
        return self.kind == NUMBER

    def group_label(self) -> str:
        if self.text is None:
            return _UNKNOWN_GROUP_LABEL
        return self.text

    def numeric_or_zero(self) -> float:
        if self.number is None:
            return 0.0
        return self.number


MISSING_FIELD = FieldValue(kind=MISSING)
