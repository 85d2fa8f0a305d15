"""High-level async tracker for the live-location API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import aiohttp

from pytraintracker._api.fleet import fetch_fleet
from pytraintracker._api.search import resolve_first
from pytraintracker._transport import HttpTransport, Transport
from pytraintracker.config import TrackerConfig
from pytraintracker.exceptions import FetchError, NoResultsError, SearchError, TrackerError
from pytraintracker.models.requests import SearchRequest, TrainIdRequest
from pytraintracker.models.search import SearchFailure, SearchFailureKind
from pytraintracker.models.train import TrainPosition
from pytraintracker.scheduler import PollingScheduler
from pytraintracker.state.events import (
    FleetSnapshotReceived,
    FleetUpdate,
    SearchFailed,
    SearchResolved,
    SelectionCleared,
    TrainSelected,
)
from pytraintracker.state.store import FleetState, FleetStore, StateListener

_logger = logging.getLogger(__name__)

_PendingUpdate = tuple[FleetUpdate, "asyncio.Future[bool]"]


class FleetTracker:
    """Async tracker session for a fleet of trains.

    Usage::

        async with FleetTracker(config) as tracker:
            await tracker.search("12951")
            print(tracker.selected_train)

    Entering the context starts polling (first poll immediately, then every
    ``config.poll_interval`` seconds). Every result is funnelled through a
    single apply queue, so poll, search and selection updates never
    interleave. Leaving the context stops polling and discards any result
    that arrives afterwards.
    """

    def __init__(
        self,
        config: TrackerConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        autostart_polling: bool = True,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None
        self._autostart_polling = autostart_polling
        self._store = FleetStore(selection_absence_tolerance=config.selection_absence_tolerance)
        self._queue: asyncio.Queue[_PendingUpdate] | None = None
        self._apply_task: asyncio.Task[None] | None = None
        self._scheduler: PollingScheduler | None = None
        self._poll_lock = asyncio.Lock()
        self._open = False

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FleetTracker:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        self._queue = asyncio.Queue()
        self._apply_task = asyncio.create_task(self._apply_loop(), name="pytraintracker-apply")
        self._scheduler = PollingScheduler(self._scheduled_poll, interval=self._config.poll_interval)
        self._open = True
        if self._autostart_polling:
            self._scheduler.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self._open = False
        if self._scheduler is not None:
            self._scheduler.stop()
        # Results landing after this point are discarded by the closed store.
        self._store.close()

        if self._scheduler is not None:
            grace = self._config.request_timeout if self._config.request_timeout > 0 else None
            await self._scheduler.aclose(grace)
            self._scheduler = None

        await self._stop_apply_loop()

        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def state(self) -> FleetState:
        return self._store.state

    @property
    def trains(self) -> list[TrainPosition]:
        return self._store.state.trains

    @property
    def selected_train(self) -> TrainPosition | None:
        return self._store.state.selected

    @property
    def search_error(self) -> SearchFailure | None:
        return self._store.state.search_error

    @property
    def last_refreshed_at(self) -> datetime | None:
        return self._store.state.last_refreshed_at

    @property
    def is_polling(self) -> bool:
        return self._scheduler is not None and self._scheduler.is_running

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* with the new state after every change."""
        return self._store.add_listener(listener)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start_polling(self) -> None:
        """Start polling when the tracker was created with ``autostart_polling=False``."""
        self._require_open()
        assert self._scheduler is not None  # noqa: S101
        self._scheduler.start()

    async def refresh(self) -> bool:
        """Poll the fleet once now.

        Waits for a poll already in flight to finish first. Returns
        ``True`` when a snapshot was fetched and applied; a failed fetch
        leaves the state untouched and returns ``False``.
        """
        self._require_open()
        async with self._poll_lock:
            return await self._poll_once()

    async def search(self, query: str) -> TrainPosition | None:
        """Search by train number or name and select the first match.

        A blank query is ignored without any request. Failures and empty
        results are recorded in :attr:`search_error` and leave the current
        selection untouched.
        """
        self._require_open()
        try:
            request = SearchRequest(query=query)
        except ValueError:
            _logger.debug("Ignoring blank search query")
            return None

        transport = self._require_transport()
        try:
            train = await resolve_first(self._config, transport, request.query)
        except NoResultsError:
            await self._submit(SearchFailed(failure=SearchFailure.of(SearchFailureKind.NO_MATCH, request.query)))
            return None
        except SearchError as exc:
            _logger.warning("Search for %r failed: %s", request.query, exc)
            kind = SearchFailureKind.CONNECTION if exc.is_connection_error else SearchFailureKind.FAILED
            await self._submit(SearchFailed(failure=SearchFailure.of(kind, request.query)))
            return None

        await self._submit(SearchResolved(train=train, query=request.query))
        return train if self._open else None

    async def select(self, train: TrainPosition | str | int | float) -> bool:
        """Select a train from the current fleet by id.

        Numeric ids are matched by value (``7`` and ``7.0`` are the same
        train). Returns ``False`` when the id is not in the current fleet.

        Raises
        ------
        ValueError
            If the id is blank.
        """
        self._require_open()
        train_id = train.id if isinstance(train, TrainPosition) else train
        request = TrainIdRequest(train_id=train_id)
        await self._submit(TrainSelected(train_id=request.train_id))
        return self._store.state.selected_id == request.train_id

    async def clear_selection(self) -> bool:
        self._require_open()
        return await self._submit(SelectionCleared())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_open(self) -> None:
        if not self._open:
            raise TrackerError("Tracker not started. Use 'async with FleetTracker(...) as tracker:'")

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise TrackerError("Tracker not started. Use 'async with FleetTracker(...) as tracker:'")
        return self._transport

    async def _scheduled_poll(self) -> None:
        if self._poll_lock.locked():
            _logger.debug("Previous poll still in flight; dropping scheduled poll")
            return
        async with self._poll_lock:
            await self._poll_once()

    async def _poll_once(self) -> bool:
        transport = self._require_transport()
        try:
            trains = await fetch_fleet(self._config, transport)
        except FetchError as exc:
            # Stale-but-present data is preferred over a blank fleet.
            _logger.warning("Fleet poll failed: %s", exc)
            return False

        if not self._open:
            _logger.debug("Tracker closed during poll; discarding snapshot")
            return False
        await self._submit(FleetSnapshotReceived(trains=tuple(trains)))
        return self._open

    async def _submit(self, update: FleetUpdate) -> bool:
        """Queue *update* for the single writer and wait until it is applied."""
        queue = self._queue
        if not self._open or queue is None:
            _logger.debug("Tracker closed; discarding %s", type(update).__name__)
            return False
        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()
        queue.put_nowait((update, future))
        return await future

    async def _apply_loop(self) -> None:
        assert self._queue is not None  # noqa: S101
        while True:
            update, future = await self._queue.get()
            try:
                changed = self._store.apply(update)
            except Exception as exc:
                if not future.done():
                    future.set_exception(exc)
            else:
                if not future.done():
                    future.set_result(changed)
            finally:
                self._queue.task_done()

    async def _stop_apply_loop(self) -> None:
        task = self._apply_task
        self._apply_task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        queue = self._queue
        self._queue = None
        if queue is None:
            return
        # Pending submitters are released without applying their update.
        while not queue.empty():
            _update, future = queue.get_nowait()
            if not future.done():
                future.set_result(False)
