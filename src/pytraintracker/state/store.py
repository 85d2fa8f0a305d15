"""Deterministic in-memory fleet store.

This is the only component allowed to mutate fleet state. Updates are
applied one at a time; each one produces a new immutable :class:`FleetState`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from pytraintracker.models.search import SearchFailure
from pytraintracker.models.train import TrainPosition
from pytraintracker.state.events import (
    FleetSnapshotReceived,
    FleetUpdate,
    SearchFailed,
    SearchResolved,
    SelectionCleared,
    TrainSelected,
)
from pytraintracker.state.policy import UNSELECTED, SelectionBinding, index_snapshot, rebind_selection

_logger = logging.getLogger(__name__)

StateListener = Callable[["FleetState"], None]


class FleetState(BaseModel):
    """Immutable view of the tracked fleet.

    ``selected_id`` is a reference by identity. ``selected_snapshot`` is the
    record currently bound to it: the latest snapshot containing that id,
    or the search result that created the selection, or the last-known
    record while the train is missing from polls.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    entities: dict[str, TrainPosition] = Field(default_factory=dict)
    selected_id: str | None = None
    selected_snapshot: TrainPosition | None = None
    selection_missed_polls: int = 0
    last_refreshed_at: datetime | None = None
    search_error: SearchFailure | None = None
    last_query: str | None = None

    @property
    def selected(self) -> TrainPosition | None:
        if self.selected_id is None:
            return None
        if self.selected_snapshot is not None:
            return self.selected_snapshot
        return self.entities.get(self.selected_id)

    @property
    def trains(self) -> list[TrainPosition]:
        """Trains in snapshot order."""
        return list(self.entities.values())

    @property
    def is_selection_stale(self) -> bool:
        """Whether the selection shows last-known data for a train missing from the latest poll."""
        return self.selected_id is not None and self.selected_id not in self.entities

    def _binding(self) -> SelectionBinding:
        return SelectionBinding(self.selected_id, self.selected_snapshot, self.selection_missed_polls)


def _with_binding(state: FleetState, binding: SelectionBinding, **changes: object) -> FleetState:
    return state.model_copy(
        update={
            "selected_id": binding.selected_id,
            "selected_snapshot": binding.snapshot,
            "selection_missed_polls": binding.missed_polls,
            **changes,
        }
    )


class FleetStore:
    """Single-writer reconciliation engine.

    Given the same sequence of updates it always produces the same state.
    Listeners are only notified when an update actually changes the state.
    """

    def __init__(self, *, selection_absence_tolerance: int | None = None) -> None:
        self._tolerance = selection_absence_tolerance
        self._state = FleetState()
        self._listeners: list[StateListener] = []
        self._closed = False

    @property
    def state(self) -> FleetState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop accepting updates. Later updates are discarded."""
        self._closed = True
        self._listeners.clear()

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def apply(self, update: FleetUpdate) -> bool:
        """Apply one update. Returns ``True`` when the state changed."""
        if self._closed:
            _logger.debug("Store closed; discarding %s", type(update).__name__)
            return False

        current = self._state
        new_state = self._reduce(current, update)
        if new_state == current:
            return False

        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                _logger.warning("Fleet state listener failed", exc_info=True)
        return True

    def _reduce(self, state: FleetState, update: FleetUpdate) -> FleetState:
        if isinstance(update, FleetSnapshotReceived):
            return self._apply_snapshot(state, update)

        if isinstance(update, SearchResolved):
            train = update.train
            binding = SelectionBinding(train.id, train, 0)
            return _with_binding(state, binding, search_error=None, last_query=update.query)

        if isinstance(update, SearchFailed):
            return state.model_copy(
                update={"search_error": update.failure, "last_query": update.failure.query},
            )

        if isinstance(update, TrainSelected):
            train = state.entities.get(update.train_id)
            if train is None:
                _logger.debug("Ignoring selection of unknown train %s", update.train_id)
                return state
            return _with_binding(state, SelectionBinding(train.id, train, 0), search_error=None)

        if isinstance(update, SelectionCleared):
            return _with_binding(state, UNSELECTED)

        raise TypeError(f"Unsupported fleet update: {type(update).__name__}")

    def _apply_snapshot(self, state: FleetState, update: FleetSnapshotReceived) -> FleetState:
        entities = index_snapshot(update.trains)
        # A replay of the poll already applied must not count as another miss.
        replayed = state.last_refreshed_at == update.received_at
        binding = rebind_selection(
            state._binding(),
            entities,
            tolerance=self._tolerance,
            count_miss=not replayed,
        )
        _logger.debug(
            "Snapshot applied: %d trains, selection=%s missed=%d",
            len(entities),
            binding.selected_id,
            binding.missed_polls,
        )
        return _with_binding(state, binding, entities=entities, last_refreshed_at=update.received_at)
