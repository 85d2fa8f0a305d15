"""Shared helpers for live-location endpoint modules.

It is internal to pytraintracker and may change at any time.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pytraintracker.models.train import TrainPosition

_logger = logging.getLogger(__name__)


def extract_list(body: Any, key: str, *, endpoint: str) -> list[Any]:
    """Return ``body[key]`` when it is a list, otherwise an empty list.

    An absent or malformed list field is an empty result, not an error.
    """
    if not isinstance(body, dict):
        _logger.debug("%s returned a non-object body (%s); treating as empty", endpoint, type(body).__name__)
        return []
    items = body.get(key)
    if not isinstance(items, list):
        if items is not None:
            _logger.debug("%s field %r is %s, not a list; treating as empty", endpoint, key, type(items).__name__)
        return []
    return items


def parse_trains(items: list[Any], *, endpoint: str) -> list[TrainPosition]:
    """Validate train records, skipping the ones that cannot be parsed."""
    trains: list[TrainPosition] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            _logger.debug("%s item %d is not an object; skipped", endpoint, index)
            continue
        try:
            trains.append(TrainPosition.model_validate(item))
        except ValidationError as exc:
            _logger.debug("%s item %d skipped: %s", endpoint, index, exc.errors(include_url=False))
    return trains
