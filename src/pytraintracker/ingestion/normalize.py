"""Normalization helpers.

Centralizes defensive parsing of numeric and text fields.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(round(parsed))


def safe_str(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text if text else None


def normalize_train_id(value: Any) -> str | None:
    """Normalize a train identity to its canonical string form.

    Integer ids and their decimal string form are the same identity
    (``7``, ``7.0`` and ``"7"`` all become ``"7"``).
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if math.isnan(value) or not value.is_integer():
            return str(value)
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    return safe_str(value)
