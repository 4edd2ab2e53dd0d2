"""Refresh scheduling and aggregation driven by a single-consumer event loop.

One ``Monitor`` owns the aggregation state and is its only writer. Every
event is handled to completion (including any adapter fetches it triggers)
before the next frame is rendered, so the renderer always sees a settled
snapshot and never needs a lock.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .comms import CONNECTED, INITIALIZING, REFRESHING, CommsGenerator
from .commands import Command, command_for_key
from .events import Event, EventSource, KeyPress, Tick
from .feeds import Feed, Fetcher
from .media import MediaPlayer, NullMediaPlayer
from .models import FeedValue, default_value
from .scheduler import RefreshScheduler, Source
from .state import AggregationState, DashboardSnapshot

logger = logging.getLogger(__name__)

Renderer = Callable[[DashboardSnapshot], Any]


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class LoopState(str, Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


class Monitor:
    def __init__(
        self,
        feeds: list[Feed],
        state: AggregationState | None = None,
        player: MediaPlayer | None = None,
        comms: CommsGenerator | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.feeds = list(feeds)
        self.state = state or AggregationState()
        self.player = player or NullMediaPlayer()
        self.comms = comms
        self.scheduler = RefreshScheduler([Source(feed.name, feed.interval) for feed in self.feeds])
        self.loop_state = LoopState.RUNNING
        self.show_help = False
        if not len(self.state.notices):
            self.state.notice(INITIALIZING)
        self._clock = clock
        self._wall_clock = wall_clock

    @property
    def running(self) -> bool:
        return self.loop_state is LoopState.RUNNING

    def snapshot(self) -> DashboardSnapshot:
        return self.state.snapshot(
            source_ages=self.scheduler.ages(self._clock()),
            show_help=self.show_help,
        )

    async def _call(self, feed: Feed, fetcher: Fetcher) -> Any:
        try:
            return await asyncio.to_thread(fetcher)
        except Exception:
            logger.exception("Adapter for %s raised; using its empty value", feed.name)
            return default_value(feed.kind)

    async def fetch(self, feed: Feed) -> FeedValue:
        results = [await self._call(feed, fetcher) for fetcher in feed.fetchers]
        return feed.combine(results)

    def _store(self, feed: Feed, value: FeedValue, now: float) -> None:
        if not self.state.apply(feed.kind, value):
            logger.debug("%s came back empty; keeping previous data", feed.name)
        self.scheduler.mark_refreshed(feed.name, now)

    async def load_all(self) -> list[str]:
        """Fetch every feed concurrently and wait for all of them."""
        for feed in self.feeds:
            self.scheduler.begin(feed.name)

        calls = [self._call(feed, fetcher) for feed in self.feeds for fetcher in feed.fetchers]
        try:
            results = await asyncio.gather(*calls)
        except BaseException:
            for feed in self.feeds:
                self.scheduler.abandon(feed.name)
            raise

        now = self._clock()
        offset = 0
        for feed in self.feeds:
            count = len(feed.fetchers)
            self._store(feed, feed.combine(list(results[offset : offset + count])), now)
            offset += count
        self.state.notice(CONNECTED)
        logger.info("Initial load finished for %d feeds", len(self.feeds))
        return [feed.name for feed in self.feeds]

    async def refresh_due(self) -> list[str]:
        """Refresh each due feed in turn, one fetch at a time."""
        refreshed: list[str] = []
        for feed in self.feeds:
            if not self.scheduler.is_due(feed.name, self._clock()):
                continue
            self.scheduler.begin(feed.name)
            try:
                value = await self.fetch(feed)
            except BaseException:
                self.scheduler.abandon(feed.name)
                raise
            self._store(feed, value, self._clock())
            refreshed.append(feed.name)
        return refreshed

    async def on_tick(self) -> list[str]:
        wall_now = self._wall_clock()
        self.state.last_tick = wall_now
        if self.comms is not None:
            message = self.comms.maybe_message(wall_now)
            if message:
                self.state.notice(message)

        if self.scheduler.needs_full_load():
            return await self.load_all()
        return await self.refresh_due()

    async def on_command(self, command: Command) -> None:
        if command is Command.QUIT:
            self.loop_state = LoopState.TERMINATED
        elif command is Command.TOGGLE_PLAY:
            await asyncio.to_thread(self.player.toggle_play)
        elif command is Command.NEXT:
            await asyncio.to_thread(self.player.next_track)
        elif command is Command.PREVIOUS:
            await asyncio.to_thread(self.player.previous_track)
        elif command is Command.REFRESH:
            self.scheduler.reset_all()
            self.state.notice(REFRESHING)
        elif command is Command.TOGGLE_HELP:
            self.show_help = not self.show_help

    async def handle(self, event: Event) -> None:
        if isinstance(event, Tick):
            await self.on_tick()
        elif isinstance(event, KeyPress):
            command = command_for_key(event.key)
            if command is not None:
                await self.on_command(command)

    async def run(self, events: EventSource, render: Renderer) -> None:
        """Render, wait for one event, handle it; repeat until quit.

        Errors from ``render`` or from the input side of ``events`` are not
        caught here and end the loop.
        """
        while self.running:
            render(self.snapshot())
            event = await events.next()
            await self.handle(event)
