"""Map model-produced day records onto canonical Monday=1 ... Sunday=7 ordinals.

Model output mixes three conventions inside a single response: a numeric
"day", a numeric "dayOfWeek", or a weekday name. Position in the list is
only used when none of them is usable.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

from normalization_config import DAY_NAMES

WEEKDAY_KEYS = tuple(name.lower() for name in DAY_NAMES)

ORDINAL_FIELDS = ("day",)
DAY_OF_WEEK_FIELDS = ("dayOfWeek", "day_of_week")
DAY_NAME_FIELDS = ("dayName", "day_name", "day")

_MIN_PREFIX = 3
_LETTERS = re.compile(r"[a-z]+")


def day_name_for(ordinal: int) -> str:
    """English weekday name for a 1-7 ordinal."""
    return DAY_NAMES[ordinal - 1]


def _as_ordinal(value: Any) -> Optional[int]:
    """Return value as an int in 1..7, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return None
        number = int(value)
    elif isinstance(value, str) and value.strip().isdecimal():
        try:
            number = int(value.strip())
        except ValueError:
            # longer than the interpreter's int digit limit
            return None
    else:
        return None
    return number if 1 <= number <= 7 else None


def match_weekday(value: Any) -> Optional[int]:
    """Match a weekday name or 3+ letter prefix ("Mon", "tues") to its ordinal."""
    if not isinstance(value, str):
        return None
    match = _LETTERS.search(value.strip().lower())
    if not match:
        return None
    token = match.group(0)
    if len(token) < _MIN_PREFIX:
        return None
    for index, key in enumerate(WEEKDAY_KEYS):
        if key.startswith(token) or token.startswith(key):
            return index + 1
    return None


def _wrap(fallback_ordinal: int) -> int:
    return (fallback_ordinal - 1) % 7 + 1


def resolve_day_index(record: Any, fallback_ordinal: int) -> int:
    """Resolve the canonical ordinal of a raw day record.

    Order (first match wins): numeric "day" in 1-7, numeric "dayOfWeek"
    in 1-7, weekday name, then fallback_ordinal. Fallbacks outside 1-7 wrap
    around so the result is always a valid ordinal.

    Args:
        record: Raw day record from the parsed model response (any shape)
        fallback_ordinal: 1-based position of the record in the source list

    Returns:
        Ordinal in 1..7
    """
    if isinstance(record, dict):
        for field in ORDINAL_FIELDS:
            ordinal = _as_ordinal(record.get(field))
            if ordinal is not None:
                return ordinal

        for field in DAY_OF_WEEK_FIELDS:
            ordinal = _as_ordinal(record.get(field))
            if ordinal is not None:
                return ordinal

        for field in DAY_NAME_FIELDS:
            ordinal = match_weekday(record.get(field))
            if ordinal is not None:
                return ordinal

    return _wrap(fallback_ordinal)
