"""pytraintracker - Async Python client for live train location tracking."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pytraintracker")
except PackageNotFoundError:
    __version__ = "0+local"
from pytraintracker.config import TrackerConfig
from pytraintracker.exceptions import (
    FetchError,
    NoResultsError,
    SearchError,
    TrackerConfigError,
    TrackerError,
    TrackerTransportError,
)
from pytraintracker.models import (
    GeoPosition,
    RouteStop,
    SearchFailure,
    SearchFailureKind,
    TrainPosition,
)
from pytraintracker.presentation import StatusClass, StopRole, format_timestamp, status_class
from pytraintracker.scheduler import PollingScheduler
from pytraintracker.state.store import FleetState, FleetStore
from pytraintracker.tracker import FleetTracker

__all__ = [
    "__version__",
    "FetchError",
    "FleetState",
    "FleetStore",
    "FleetTracker",
    "GeoPosition",
    "NoResultsError",
    "PollingScheduler",
    "RouteStop",
    "SearchError",
    "SearchFailure",
    "SearchFailureKind",
    "StatusClass",
    "StopRole",
    "TrackerConfig",
    "TrackerConfigError",
    "TrackerError",
    "TrackerTransportError",
    "TrainPosition",
    "format_timestamp",
    "status_class",
]
