"""Data models for live-location API responses."""

from pytraintracker.models._base import TrackerBaseModel
from pytraintracker.models.requests import SearchRequest, TrainIdRequest
from pytraintracker.models.search import SearchFailure, SearchFailureKind
from pytraintracker.models.train import GeoPosition, RouteStop, TrainPosition

__all__ = [
    "GeoPosition",
    "RouteStop",
    "SearchFailure",
    "SearchFailureKind",
    "SearchRequest",
    "TrackerBaseModel",
    "TrainIdRequest",
    "TrainPosition",
]
