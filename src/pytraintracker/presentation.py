"""Pure projections of fleet state into display fields.

Nothing here touches state or I/O; every function maps its arguments to a
value and can be called from any rendering layer.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from enum import StrEnum
from typing import NamedTuple

from pytraintracker.models.train import RouteStop, TrainPosition


class StatusClass(StrEnum):
    SUCCESS = "success"
    CAUTION = "caution"
    DANGER = "danger"
    INFO = "info"
    NEUTRAL = "neutral"


class StopRole(StrEnum):
    LAST = "last"
    NEXT = "next"
    PASSED = "passed"
    UPCOMING = "upcoming"


_STATUS_CLASSES: dict[str, StatusClass] = {
    "proceed": StatusClass.SUCCESS,
    "on time": StatusClass.SUCCESS,
    "on-time": StatusClass.SUCCESS,
    "ontime": StatusClass.SUCCESS,
    "warning": StatusClass.CAUTION,
    "delayed": StatusClass.CAUTION,
    "hold": StatusClass.DANGER,
    "stopped": StatusClass.DANGER,
    "early": StatusClass.INFO,
}


def status_class(status: str | None) -> StatusClass:
    """Map a server status string to its color class (case-insensitive)."""
    if not status:
        return StatusClass.NEUTRAL
    return _STATUS_CLASSES.get(status.strip().lower(), StatusClass.NEUTRAL)


def format_timestamp(value: datetime, tz: tzinfo | None = None) -> str:
    """Format *value* as ``HH:MM:SS``, converted to *tz* when given."""
    if tz is not None:
        value = value.astimezone(tz)
    return value.strftime("%H:%M:%S")


def format_delay(minutes: int) -> str:
    """``+5min`` for late, ``-3min`` for early, empty when on time."""
    if minutes == 0:
        return ""
    return f"{minutes:+d}min"


def format_coordinates(lat: float | None, lon: float | None) -> str:
    if lat is None or lon is None:
        return ""
    lat_hemi = "N" if lat >= 0 else "S"
    lon_hemi = "E" if lon >= 0 else "W"
    return f"{abs(lat):.4f}°{lat_hemi}, {abs(lon):.4f}°{lon_hemi}"


def stop_role(train: TrainPosition, stop: RouteStop) -> StopRole:
    """Classify *stop* relative to the train's current progress.

    The last and next stops are matched by name; other stops are passed
    when the covered distance is beyond them.
    """
    if stop.stop_name and stop.stop_name == train.last_stop:
        return StopRole.LAST
    if stop.stop_name and stop.stop_name == train.next_stop:
        return StopRole.NEXT
    covered = train.distance_covered_km
    if covered is not None and stop.distance_km is not None and covered > stop.distance_km:
        return StopRole.PASSED
    return StopRole.UPCOMING


class RouteStopView(NamedTuple):
    stop: RouteStop
    role: StopRole


def route_view(train: TrainPosition) -> list[RouteStopView]:
    return [RouteStopView(stop, stop_role(train, stop)) for stop in train.route]


def progress_fraction(train: TrainPosition) -> float:
    """Journey progress clamped to ``[0.0, 1.0]``."""
    if train.progress_percent is None:
        return 0.0
    return min(max(train.progress_percent, 0.0), 100.0) / 100.0
