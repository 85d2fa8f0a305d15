"""Client configuration for pytraintracker."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pytraintracker._constants import DEFAULT_POLL_INTERVAL
from pytraintracker.exceptions import TrackerConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_optional_int(value: str) -> int | None:
    normalized = value.strip().lower()
    if normalized in {"", "none", "forever", "-1"}:
        return None
    return int(normalized)


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Tracker configuration.

    Parameters
    ----------
    base_url : str
        Base URL of the live-location API.
    fleet_endpoint : str
        Path returning the full fleet snapshot.
    search_endpoint : str
        Path accepting a ``query`` parameter and returning matches.
    poll_interval : float
        Seconds between fleet polls.  Defaults to 5 seconds.
    request_timeout : float
        Total timeout in seconds applied to every HTTP request.
        Set to ``0`` to wait indefinitely.
    api_token : str or None
        Optional bearer token sent in the ``Authorization`` header.
    selection_absence_tolerance : int or None
        Number of consecutive successful polls the selected train may be
        missing from before the selection is cleared.  ``None`` keeps the
        last-known data forever; ``0`` clears on the first miss.
    api_trace_enabled : bool
        Emit DEBUG logs summarizing every request and response.
    """

    base_url: str = "http://localhost:3000"
    fleet_endpoint: str = "/api/live-location/trains"
    search_endpoint: str = "/api/live-location/search"
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float = 10.0
    api_token: str | None = None
    selection_absence_tolerance: int | None = None
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not self.base_url:
            raise TrackerConfigError("base_url must be non-empty")
        if self.poll_interval <= 0:
            raise TrackerConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.request_timeout < 0:
            raise TrackerConfigError(f"request_timeout must not be negative, got {self.request_timeout}")
        if self.selection_absence_tolerance is not None and self.selection_absence_tolerance < 0:
            raise TrackerConfigError(
                f"selection_absence_tolerance must be None or >= 0, got {self.selection_absence_tolerance}"
            )
        # Normalize the trailing slash so endpoint paths can be appended.
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from environment variables.

        Reads optional ``TRAINTRACKER_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TrackerConfig
            Populated configuration.

        Raises
        ------
        TrackerConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "TRAINTRACKER_BASE_URL": "base_url",
            "TRAINTRACKER_FLEET_ENDPOINT": "fleet_endpoint",
            "TRAINTRACKER_SEARCH_ENDPOINT": "search_endpoint",
            "TRAINTRACKER_API_TOKEN": "api_token",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            interval_env = env.get("TRAINTRACKER_POLL_INTERVAL")
            if interval_env is not None and "poll_interval" not in overrides:
                config_kwargs["poll_interval"] = float(interval_env)

            timeout_env = env.get("TRAINTRACKER_REQUEST_TIMEOUT")
            if timeout_env is not None and "request_timeout" not in overrides:
                config_kwargs["request_timeout"] = float(timeout_env)

            tolerance_env = env.get("TRAINTRACKER_SELECTION_ABSENCE_TOLERANCE")
            if tolerance_env is not None and "selection_absence_tolerance" not in overrides:
                config_kwargs["selection_absence_tolerance"] = _env_optional_int(tolerance_env)
        except ValueError as exc:
            raise TrackerConfigError(f"Invalid numeric environment value: {exc}") from exc

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("TRAINTRACKER_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
