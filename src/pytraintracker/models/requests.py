"""Pydantic request models for tracker entrypoints.

These models provide a consistent "validate → normalize → execute" flow.
They are used internally by :class:`pytraintracker.tracker.FleetTracker`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from pytraintracker.ingestion.normalize import normalize_train_id


class TrainIdRequest(BaseModel):
    """Request referencing a train by identity."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    train_id: str

    @field_validator("train_id", mode="before")
    @classmethod
    def _canonical_train_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float, str)) and not isinstance(value, bool):
            return normalize_train_id(value) or ""
        return value

    @field_validator("train_id")
    @classmethod
    def _train_id_non_empty(cls, value: str) -> str:
        train_id = value.strip()
        if not train_id:
            raise ValueError("train_id must be non-empty")
        return train_id


class SearchRequest(BaseModel):
    """Free-text search for a train by number or name."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    query: str

    @field_validator("query")
    @classmethod
    def _query_non_empty(cls, value: str) -> str:
        query = value.strip()
        if not query:
            raise ValueError("query must be non-empty")
        return query
