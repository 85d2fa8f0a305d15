"""Base model for live-location API payloads.

Every response model inherits from :class:`TrackerBaseModel` which
provides:

* A ``model_validator(mode="before")`` that strips sentinel values
  (``""``, ``"--"``, NaN) so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Sentinel strings the API uses for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan"})


class TrackerBaseModel(BaseModel):
    """Base for live-location response models.

    Handles:
    * Sentinel values (``""``, ``"--"``, NaN) → dropped so the field
      default is used instead
    * Stashes the original API dict in ``raw``
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
    """Original API response dict."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip sentinel values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = TrackerBaseModel._clean_dict(values)
        # Keep an explicitly passed raw= (e.g. model_copy or kwargs construction).
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
