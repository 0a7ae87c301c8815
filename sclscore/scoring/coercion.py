"""Permissive coercion of raw item responses.

Scores that cannot be read as integers become 0 rather than failing the
submission. Item ids are normalized to plain integers.
"""

import math
import re

_INT_PREFIX = re.compile(r"^\s*([+-]?[0-9]+)")
_DIGITS = re.compile(r"^[0-9]+$")


def coerce_score(value: object) -> int:
    """Coerce a raw score to an integer.

    - int: unchanged
    - bool, None, NaN, infinity: 0
    - float: truncated toward zero
    - str: leading integer prefix (" 3x" -> 3), else 0
    - anything else: 0
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return int(value)
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        if match is None:
            return 0
        try:
            return int(match.group(1))
        except ValueError:
            # Longer than the interpreter's integer string conversion limit
            return 0
    return 0


def is_exact_score(value: object) -> bool:
    """Whether a raw score is already a plain integer."""
    return isinstance(value, int) and not isinstance(value, bool)


def normalize_item_id(value: object) -> int | None:
    """Normalize a raw item id to an integer, or None if it isn't one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        stripped = value.strip()
        if _DIGITS.match(stripped):
            try:
                return int(stripped)
            except ValueError:
                return None
    return None
