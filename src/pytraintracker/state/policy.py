"""Deterministic reconciliation policy.

This module contains no I/O. Given the same inputs it always produces the
same outputs, which keeps re-binding and snapshot replay reproducible.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import NamedTuple

from pytraintracker.models.train import TrainPosition

_logger = logging.getLogger(__name__)


class SelectionBinding(NamedTuple):
    selected_id: str | None
    snapshot: TrainPosition | None
    missed_polls: int


UNSELECTED = SelectionBinding(None, None, 0)


def index_snapshot(trains: Iterable[TrainPosition]) -> dict[str, TrainPosition]:
    """Key a fleet snapshot by train id.

    Ids are unique within a well-formed snapshot; on a duplicate the later
    record wins.
    """
    entities: dict[str, TrainPosition] = {}
    for train in trains:
        if train.id in entities:
            _logger.debug("Duplicate train id %s in snapshot; keeping the later record", train.id)
        entities[train.id] = train
    return entities


def exceeds_tolerance(missed_polls: int, tolerance: int | None) -> bool:
    """Whether a selection missing for *missed_polls* polls should be dropped.

    ``None`` tolerates absence forever.
    """
    if tolerance is None:
        return False
    return missed_polls > tolerance


def rebind_selection(
    current: SelectionBinding,
    entities: dict[str, TrainPosition],
    *,
    tolerance: int | None,
    count_miss: bool = True,
) -> SelectionBinding:
    """Re-bind the selection to the record with the same id in *entities*.

    When the id is missing the last-known snapshot is kept and the miss is
    counted, until *tolerance* is exceeded.
    """
    if current.selected_id is None:
        return UNSELECTED

    fresh = entities.get(current.selected_id)
    if fresh is not None:
        return SelectionBinding(current.selected_id, fresh, 0)

    missed = current.missed_polls + 1 if count_miss else current.missed_polls
    if exceeds_tolerance(missed, tolerance):
        _logger.info(
            "Train %s missing from %d consecutive snapshots; clearing selection",
            current.selected_id,
            missed,
        )
        return UNSELECTED
    return SelectionBinding(current.selected_id, current.snapshot, missed)
