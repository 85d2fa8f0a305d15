"""Fleet snapshot endpoint.

Endpoint:
  - GET /api/live-location/trains → ``{"trains": [...]}``
"""

from __future__ import annotations

import logging

from pytraintracker._api._common import extract_list, parse_trains
from pytraintracker._constants import FLEET_LIST_KEY
from pytraintracker._transport import Transport
from pytraintracker.config import TrackerConfig
from pytraintracker.exceptions import FetchError, TrackerTransportError
from pytraintracker.models.train import TrainPosition

_logger = logging.getLogger(__name__)


async def fetch_fleet(config: TrackerConfig, transport: Transport) -> list[TrainPosition]:
    """Fetch the full current fleet snapshot.

    Parameters
    ----------
    config : TrackerConfig
        Client configuration.
    transport : Transport
        HTTP transport.

    Returns
    -------
    list[TrainPosition]
        Every reported train, possibly empty.

    Raises
    ------
    FetchError
        On network failure or a non-success response.
    """
    endpoint = config.fleet_endpoint
    try:
        body = await transport.get_json(endpoint)
    except TrackerTransportError as exc:
        raise FetchError(str(exc), status_code=exc.status_code, endpoint=endpoint) from exc

    trains = parse_trains(extract_list(body, FLEET_LIST_KEY, endpoint=endpoint), endpoint=endpoint)
    _logger.debug("Fleet snapshot: %d trains", len(trains))
    return trains
