from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from pytraintracker.models.search import SearchFailure, SearchFailureKind
from pytraintracker.models.train import TrainPosition
from pytraintracker.state.events import (
    FleetSnapshotReceived,
    SearchFailed,
    SearchResolved,
    SelectionCleared,
    TrainSelected,
)
from pytraintracker.state.store import FleetState, FleetStore

_T0 = datetime(2026, 1, 1, tzinfo=UTC)


def _train(train_id: int, **fields: Any) -> TrainPosition:
    return TrainPosition.model_validate({"trainId": train_id, "trainName": f"Train {train_id}", **fields})


def _snapshot(*trains: TrainPosition, tick: int = 0) -> FleetSnapshotReceived:
    return FleetSnapshotReceived(trains=trains, received_at=_T0 + timedelta(seconds=5 * tick))


def test_snapshot_replaces_entities_instead_of_merging() -> None:
    store = FleetStore()

    store.apply(_snapshot(_train(1), _train(2), _train(3), tick=0))
    store.apply(_snapshot(_train(1), _train(3), tick=1))

    assert set(store.state.entities) == {"1", "3"}
    assert store.state.last_refreshed_at == _T0 + timedelta(seconds=5)


def test_selection_survives_one_missing_snapshot_and_rebinds_later() -> None:
    store = FleetStore()
    store.apply(_snapshot(_train(7, speed=80), _train(8), tick=0))
    store.apply(TrainSelected(train_id="7"))

    store.apply(_snapshot(_train(8), tick=1))

    assert store.state.selected_id == "7"
    assert store.state.selected is not None
    assert store.state.selected.speed_kmh == 80
    assert store.state.is_selection_stale is True
    assert store.state.selection_missed_polls == 1

    store.apply(_snapshot(_train(7, speed=95), _train(8), tick=2))

    assert store.state.selected is not None
    assert store.state.selected.speed_kmh == 95
    assert store.state.is_selection_stale is False
    assert store.state.selection_missed_polls == 0


def test_selection_rebinds_by_id_not_display_identity() -> None:
    store = FleetStore()
    store.apply(_snapshot(_train(5, trainName="Rajdhani", trainNumber="12951"), tick=0))
    store.apply(TrainSelected(train_id="5"))

    store.apply(_snapshot(_train(5, trainName="Rajdhani Exp", trainNumber="12951A", speed=60), tick=1))

    assert store.state.selected is not None
    assert store.state.selected.name == "Rajdhani Exp"
    assert store.state.selected.speed_kmh == 60


def test_search_overrides_selection_and_survives_next_poll() -> None:
    store = FleetStore()
    store.apply(_snapshot(_train(5), _train(9), tick=0))
    store.apply(TrainSelected(train_id="5"))

    store.apply(SearchResolved(train=_train(9, speed=40), query="9"))
    assert store.state.selected_id == "9"

    store.apply(_snapshot(_train(5), _train(9, speed=42), tick=1))

    assert store.state.selected_id == "9"
    assert store.state.selected is not None
    assert store.state.selected.speed_kmh == 42


def test_search_result_not_in_fleet_is_kept_as_selection() -> None:
    store = FleetStore()
    store.apply(_snapshot(_train(1), tick=0))

    store.apply(SearchResolved(train=_train(42), query="42"))

    assert store.state.selected_id == "42"
    assert "42" not in store.state.entities
    assert store.state.selected == _train(42)


def test_no_match_keeps_selection_and_entities() -> None:
    store = FleetStore()
    store.apply(_snapshot(_train(1), _train(2), tick=0))
    store.apply(TrainSelected(train_id="2"))
    before = store.state

    store.apply(SearchFailed(failure=SearchFailure.of(SearchFailureKind.NO_MATCH, "zzz")))

    assert store.state.entities == before.entities
    assert store.state.selected_id == "2"
    assert store.state.search_error is not None
    assert store.state.search_error.is_no_match is True
    assert store.state.last_query == "zzz"


def test_search_failure_does_not_alter_selection_and_is_cleared_by_next_selection() -> None:
    store = FleetStore()
    store.apply(_snapshot(_train(1), _train(2), tick=0))
    store.apply(TrainSelected(train_id="1"))

    store.apply(SearchFailed(failure=SearchFailure.of(SearchFailureKind.FAILED, "1")))
    assert store.state.selected_id == "1"
    assert store.state.search_error is not None

    store.apply(TrainSelected(train_id="2"))
    assert store.state.selected_id == "2"
    assert store.state.search_error is None


def test_identical_snapshot_replay_is_a_no_op() -> None:
    store = FleetStore()
    events: list[FleetState] = []
    store.add_listener(events.append)
    update = _snapshot(_train(1), _train(2), tick=0)

    assert store.apply(update) is True
    first = store.state
    assert store.apply(update) is False

    assert store.state == first
    assert len(events) == 1


def test_replay_does_not_count_as_another_miss() -> None:
    store = FleetStore(selection_absence_tolerance=1)
    store.apply(_snapshot(_train(1), tick=0))
    store.apply(TrainSelected(train_id="1"))
    missing = _snapshot(_train(2), tick=1)

    store.apply(missing)
    assert store.apply(missing) is False

    assert store.state.selected_id == "1"
    assert store.state.selection_missed_polls == 1


@pytest.mark.parametrize(("tolerance", "polls_until_cleared"), [(0, 1), (2, 3)])
def test_absence_tolerance_clears_selection(tolerance: int, polls_until_cleared: int) -> None:
    store = FleetStore(selection_absence_tolerance=tolerance)
    store.apply(_snapshot(_train(1), tick=0))
    store.apply(TrainSelected(train_id="1"))

    for tick in range(1, polls_until_cleared):
        store.apply(_snapshot(_train(2), tick=tick))
        assert store.state.selected_id == "1"

    store.apply(_snapshot(_train(2), tick=polls_until_cleared))
    assert store.state.selected_id is None
    assert store.state.selected is None


def test_unbounded_tolerance_keeps_selection_forever() -> None:
    store = FleetStore(selection_absence_tolerance=None)
    store.apply(_snapshot(_train(1), tick=0))
    store.apply(TrainSelected(train_id="1"))

    for tick in range(1, 50):
        store.apply(_snapshot(tick=tick))

    assert store.state.selected_id == "1"
    assert store.state.selection_missed_polls == 49


def test_selecting_unknown_train_is_ignored() -> None:
    store = FleetStore()
    store.apply(_snapshot(_train(1), tick=0))

    assert store.apply(TrainSelected(train_id="99")) is False
    assert store.state.selected_id is None


def test_clear_selection() -> None:
    store = FleetStore()
    store.apply(_snapshot(_train(1), tick=0))
    store.apply(TrainSelected(train_id="1"))

    assert store.apply(SelectionCleared()) is True
    assert store.state.selected is None
    assert store.apply(SelectionCleared()) is False


def test_duplicate_ids_in_snapshot_keep_the_later_record() -> None:
    store = FleetStore()

    store.apply(_snapshot(_train(1, speed=10), _train(1, speed=20), tick=0))

    assert len(store.state.entities) == 1
    assert store.state.entities["1"].speed_kmh == 20


def test_closed_store_discards_updates() -> None:
    store = FleetStore()
    store.close()

    assert store.apply(_snapshot(_train(1), tick=0)) is False
    assert store.state.entities == {}


def test_failing_listener_does_not_break_apply() -> None:
    store = FleetStore()
    seen: list[int] = []

    def _boom(_state: FleetState) -> None:
        raise RuntimeError("listener bug")

    store.add_listener(_boom)
    store.add_listener(lambda state: seen.append(len(state.entities)))

    assert store.apply(_snapshot(_train(1), tick=0)) is True
    assert seen == [1]


def test_remove_listener() -> None:
    store = FleetStore()
    seen: list[FleetState] = []
    remove = store.add_listener(seen.append)

    remove()
    store.apply(_snapshot(_train(1), tick=0))

    assert seen == []
