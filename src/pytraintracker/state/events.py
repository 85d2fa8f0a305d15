"""Normalized fleet updates.

Every external result (poll, search, user selection) is converted into one
of these updates. Only the state/store layer is allowed to apply them.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pytraintracker.models.search import SearchFailure
from pytraintracker.models.train import TrainPosition


def _utcnow() -> datetime:
    return datetime.now(UTC)


class _Update(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class FleetSnapshotReceived(_Update):
    """A successful fleet poll. The snapshot is authoritative."""

    trains: tuple[TrainPosition, ...] = ()
    received_at: datetime = Field(default_factory=_utcnow)

    @field_validator("received_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class SearchResolved(_Update):
    """A search matched; ``train`` is the first result."""

    train: TrainPosition
    query: str


class SearchFailed(_Update):
    """A search failed or matched nothing."""

    failure: SearchFailure


class TrainSelected(_Update):
    """The user picked a train from the current fleet."""

    train_id: str


class SelectionCleared(_Update):
    """The user dropped the current selection."""


FleetUpdate = FleetSnapshotReceived | SearchResolved | SearchFailed | TrainSelected | SelectionCleared
