"""Custom exception hierarchy for pytraintracker."""

from __future__ import annotations


class TrackerError(Exception):
    """Base exception for all pytraintracker errors."""


class TrackerConfigError(TrackerError):
    """Invalid or missing configuration."""


class TrackerTransportError(TrackerError):
    """HTTP-level failure (network, non-200, invalid JSON, timeout)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)

    @property
    def is_connection_error(self) -> bool:
        """Whether the request never produced an HTTP status."""
        return self.status_code is None


class FetchError(TrackerTransportError):
    """The fleet snapshot poll failed.

    Recovered by the tracker: existing state is kept and polling continues
    on the next tick.
    """


class SearchError(TrackerTransportError):
    """A search request failed at the transport or server level."""


class NoResultsError(TrackerError):
    """A search succeeded but matched no train."""

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"No trains found matching {query!r}")
