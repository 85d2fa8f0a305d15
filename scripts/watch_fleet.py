#!/usr/bin/env python3
"""Watch a live-location endpoint and print fleet updates.

Polls the fleet, optionally searches for a train to select, and prints a
line for every state change until interrupted.

Usage
-----
Install the package, then::

    export TRAINTRACKER_BASE_URL="http://localhost:3000"
    python scripts/watch_fleet.py --search 12951

Options::

    --search QUERY       Select the first train matching QUERY
    --select ID          Select a train id from the first snapshot
    --duration SECONDS   Stop after SECONDS (default: run until Ctrl+C)
    --debug              Enable DEBUG logging with request tracing
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pytraintracker import FleetState, FleetTracker, TrackerConfig, format_timestamp, status_class
from pytraintracker.presentation import format_coordinates, format_delay


def _describe(state: FleetState) -> str:
    stamp = format_timestamp(state.last_refreshed_at.astimezone()) if state.last_refreshed_at else "--:--:--"
    line = f"[{stamp}] {len(state.entities)} trains"
    train = state.selected
    if train is not None:
        stale = " (last known)" if state.is_selection_stale else ""
        delay = format_delay(train.delay_minutes)
        line += (
            f" | {train.number} {train.name}{stale}: {train.status} {delay} [{status_class(train.status)}]"
            f" {train.speed_kmh or 0:.0f} km/h {train.last_stop} → {train.next_stop}"
            f" @ {format_coordinates(train.position.lat, train.position.lon)}"
        )
    if state.search_error is not None:
        line += f" | {state.search_error.message}"
    return line


async def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--search", help="Select the first train matching this query")
    parser.add_argument("--select", help="Select this train id from the first snapshot")
    parser.add_argument("--duration", type=float, default=None, help="Stop after this many seconds")
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = TrackerConfig.from_env(api_trace_enabled=args.debug)

    async with FleetTracker(config, autostart_polling=False) as tracker:
        tracker.add_listener(lambda state: print(_describe(state)))
        if not await tracker.refresh():
            print(f"Initial fleet poll against {config.base_url} failed", file=sys.stderr)
        if args.select:
            await tracker.select(args.select)
        if args.search:
            await tracker.search(args.search)
        tracker.start_polling()

        try:
            if args.duration is not None:
                await asyncio.sleep(args.duration)
            else:
                await asyncio.Event().wait()
        except asyncio.CancelledError:
            pass
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)
