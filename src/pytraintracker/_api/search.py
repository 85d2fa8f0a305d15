"""Train search endpoint.

Endpoint:
  - GET /api/live-location/search?query=<text> → ``{"results": [...]}``
"""

from __future__ import annotations

import logging

from pytraintracker._api._common import extract_list, parse_trains
from pytraintracker._constants import SEARCH_LIST_KEY, SEARCH_QUERY_PARAM
from pytraintracker._transport import Transport
from pytraintracker.config import TrackerConfig
from pytraintracker.exceptions import NoResultsError, SearchError, TrackerTransportError
from pytraintracker.models.requests import SearchRequest
from pytraintracker.models.train import TrainPosition

_logger = logging.getLogger(__name__)


async def search_fleet(config: TrackerConfig, transport: Transport, query: str) -> list[TrainPosition]:
    """Search trains by number or name.

    The query is trimmed first; an empty query raises :class:`ValueError`
    before any request is made.  Zero matches is a valid, empty result.

    Raises
    ------
    ValueError
        If *query* is empty after trimming.
    SearchError
        On network failure or a non-success response.
    """
    request = SearchRequest(query=query)
    endpoint = config.search_endpoint
    try:
        # aiohttp URL-encodes params.
        body = await transport.get_json(endpoint, {SEARCH_QUERY_PARAM: request.query})
    except TrackerTransportError as exc:
        raise SearchError(str(exc), status_code=exc.status_code, endpoint=endpoint) from exc

    results = parse_trains(extract_list(body, SEARCH_LIST_KEY, endpoint=endpoint), endpoint=endpoint)
    _logger.debug("Search %r: %d results", request.query, len(results))
    return results


async def resolve_first(config: TrackerConfig, transport: Transport, query: str) -> TrainPosition:
    """Return the first search match; the remaining matches are discarded.

    Raises
    ------
    ValueError
        If *query* is empty after trimming.
    NoResultsError
        If the search succeeded but matched nothing.
    SearchError
        On network failure or a non-success response.
    """
    results = await search_fleet(config, transport, query)
    if not results:
        raise NoResultsError(query.strip())
    return results[0]
