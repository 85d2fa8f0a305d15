"""Train position snapshot models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from pytraintracker.ingestion.normalize import normalize_train_id, safe_float, safe_int, safe_str
from pytraintracker.models._base import TrackerBaseModel


class GeoPosition(TrackerBaseModel):
    """A latitude/longitude pair in degrees."""

    lat: float | None = Field(default=None, validation_alias=AliasChoices("lat", "latitude", "currentLat"))
    lon: float | None = Field(
        default=None,
        validation_alias=AliasChoices("lon", "lng", "longitude", "currentLon"),
    )

    @field_validator("lat", "lon", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)


class RouteStop(TrackerBaseModel):
    """One stop on a train's route."""

    stop_name: str = Field(default="", validation_alias=AliasChoices("station", "stopName", "stop_name", "name"))
    """Display name of the stop."""
    lat: float | None = Field(default=None, validation_alias=AliasChoices("lat", "latitude"))
    lon: float | None = Field(default=None, validation_alias=AliasChoices("lon", "lng", "longitude"))
    scheduled_time: str = Field(
        default="",
        validation_alias=AliasChoices("time", "scheduledTime", "scheduled_time"),
    )
    """Scheduled time as reported by the server (opaque)."""
    distance_km: float | None = Field(
        default=None,
        validation_alias=AliasChoices("distance", "distanceKm", "distance_km"),
    )
    """Distance from the origin in km."""

    @field_validator("lat", "lon", "distance_km", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("stop_name", "scheduled_time", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return safe_str(value) or ""


def _route_sort_key(stop: RouteStop) -> tuple[bool, float]:
    # Stops without a distance keep their relative order at the end.
    return (stop.distance_km is None, stop.distance_km or 0.0)


class TrainPosition(TrackerBaseModel):
    """One reported position record for a train.

    Accepts both the live-location wire names (``trainId``, ``currentLat``,
    ``lastStation`` ...) and the descriptive names used by this library.
    ``id`` is the only field used to identify a train across snapshots;
    ``name`` and ``number`` are display-only.
    """

    id: str = Field(validation_alias=AliasChoices("trainId", "id", "train_id"))
    """Stable identity, normalized to a string."""
    name: str = Field(default="", validation_alias=AliasChoices("trainName", "name"))
    number: str = Field(default="", validation_alias=AliasChoices("trainNumber", "number"))
    position: GeoPosition = Field(default_factory=GeoPosition)
    speed_kmh: float | None = Field(default=None, validation_alias=AliasChoices("speed", "speedKmh", "speed_kmh"))
    heading_deg: float | None = Field(
        default=None,
        validation_alias=AliasChoices("heading", "headingDeg", "heading_deg"),
    )
    last_stop: str = Field(default="", validation_alias=AliasChoices("lastStation", "lastStop", "last_stop"))
    next_stop: str = Field(default="", validation_alias=AliasChoices("nextStation", "nextStop", "next_stop"))
    distance_to_next_km: float | None = Field(
        default=None,
        validation_alias=AliasChoices("distanceToNext", "distanceToNextKm", "distance_to_next_km"),
    )
    total_distance_km: float | None = Field(
        default=None,
        validation_alias=AliasChoices("totalDistance", "totalDistanceKm", "total_distance_km"),
    )
    distance_covered_km: float | None = Field(
        default=None,
        validation_alias=AliasChoices("distanceCovered", "distanceCoveredKm", "distance_covered_km"),
    )
    delay_minutes: int = Field(default=0, validation_alias=AliasChoices("delay", "delayMinutes", "delay_minutes"))
    """Signed delay; negative means early."""
    status: str = Field(default="unknown", validation_alias=AliasChoices("status"))
    """Open status string (``"proceed"``, ``"delayed"``, ``"hold"`` ...)."""
    estimated_arrival: str = Field(
        default="",
        validation_alias=AliasChoices("estimatedArrival", "estimated_arrival"),
    )
    progress_percent: float | None = Field(
        default=None,
        validation_alias=AliasChoices("progress", "progressPercent", "progress_percent"),
    )
    route: list[RouteStop] = Field(default_factory=list)
    """Stops ordered by increasing distance from the origin."""

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_position(cls, values: Any) -> Any:
        """Build ``position`` from the flat ``currentLat``/``currentLon`` wire fields."""
        if not isinstance(values, dict) or isinstance(values.get("position"), dict):
            return values
        if "currentLat" in values or "currentLon" in values:
            merged = dict(values)
            merged["position"] = {"lat": values.get("currentLat"), "lon": values.get("currentLon")}
            merged.setdefault("raw", dict(values))
            return merged
        return values

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        train_id = normalize_train_id(value)
        if train_id is None:
            raise ValueError("train id must be a non-empty string or integer")
        return train_id

    @field_validator("name", "number", "last_stop", "next_stop", "estimated_arrival", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return safe_str(value) or ""

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> str:
        return safe_str(value) or "unknown"

    @field_validator(
        "speed_kmh",
        "heading_deg",
        "distance_to_next_km",
        "total_distance_km",
        "distance_covered_km",
        "progress_percent",
        mode="before",
    )
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("delay_minutes", mode="before")
    @classmethod
    def _coerce_delay(cls, value: Any) -> int:
        parsed = safe_int(value)
        return 0 if parsed is None else parsed

    @field_validator("route", mode="before")
    @classmethod
    def _drop_malformed_stops(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, (dict, RouteStop))]

    @field_validator("route", mode="after")
    @classmethod
    def _sort_route(cls, value: list[RouteStop]) -> list[RouteStop]:
        return sorted(value, key=_route_sort_key)

    @property
    def is_delayed(self) -> bool:
        return self.delay_minutes > 0

    @property
    def is_early(self) -> bool:
        return self.delay_minutes < 0
