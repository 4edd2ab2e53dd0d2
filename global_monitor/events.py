from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import sys
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Union

from .commands import decode_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tick:
    at: float


@dataclass(frozen=True)
class KeyPress:
    key: str


Event = Union[Tick, KeyPress]


class EventSource:
    """Merges a periodic timer with keyboard input for a single consumer.

    The timer never queues more than one tick: if the consumer is still busy
    when the next tick is due, that tick is dropped. Keypresses are queued in
    arrival order. ``next`` prefers a pending keypress over a pending tick.
    """

    def __init__(self, tick_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        if tick_seconds <= 0:
            raise ValueError("tick interval must be > 0")
        self.tick_seconds = tick_seconds
        self._clock = clock
        self._ticks: asyncio.Queue[Tick] = asyncio.Queue(maxsize=1)
        self._input: asyncio.Queue[KeyPress | BaseException] = asyncio.Queue()
        self._timer: asyncio.Task[None] | None = None

    def start(self) -> None:
        if self._timer is None:
            self._timer = asyncio.create_task(self._run_timer())

    async def close(self) -> None:
        if self._timer is None:
            return
        self._timer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._timer
        self._timer = None

    async def _run_timer(self) -> None:
        while True:
            self.push_tick()
            await asyncio.sleep(self.tick_seconds)

    def push_tick(self) -> None:
        if self._ticks.empty():
            self._ticks.put_nowait(Tick(self._clock()))

    def push_key(self, key: str) -> None:
        self._input.put_nowait(KeyPress(key))

    def fail(self, exc: BaseException) -> None:
        """Hand an input failure to the consumer; ``next`` re-raises it."""
        self._input.put_nowait(exc)

    def _take_input(self, item: KeyPress | BaseException) -> KeyPress:
        if isinstance(item, BaseException):
            raise item
        return item

    async def next(self) -> Event:
        if not self._input.empty():
            return self._take_input(self._input.get_nowait())
        if not self._ticks.empty():
            return self._ticks.get_nowait()

        input_get = asyncio.ensure_future(self._input.get())
        tick_get = asyncio.ensure_future(self._ticks.get())
        try:
            done, _ = await asyncio.wait({input_get, tick_get}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            input_get.cancel()
            tick_get.cancel()

        if input_get in done and tick_get in done and self._ticks.empty():
            # Both arrived together; the tick goes back to its slot unless the
            # timer has already refilled it.
            self._ticks.put_nowait(tick_get.result())
        # A cancelled Queue.get leaves its item in the queue.
        await asyncio.gather(input_get, tick_get, return_exceptions=True)

        if input_get in done:
            return self._take_input(input_get.result())
        return tick_get.result()


def _escape_end(chunk: str, start: int) -> int:
    """Index just past the escape sequence beginning at ``chunk[start]``."""
    index = start + 1
    if index >= len(chunk) or chunk[index] == "\x1b":
        return index
    if chunk[index] not in "[O":
        # ESC followed by a plain key is an Alt chord.
        return index + 1
    index += 1
    while index < len(chunk):
        # CSI/SS3 sequences end at the first byte in 0x40-0x7E.
        if "@" <= chunk[index] <= "~":
            return index + 1
        index += 1
    return index


def split_keys(chunk: str) -> list[str]:
    """Split one read from the terminal into individual key names.

    A read can hold several keypresses, escape sequences included; ``ESC``
    is only reported for an escape byte that ends the read or is followed
    by another escape byte.
    """
    keys: list[str] = []
    index = 0
    while index < len(chunk):
        if chunk[index] == "\x1b":
            end = _escape_end(chunk, index)
        else:
            end = index + 1
        keys.append(decode_key(chunk[index:end]))
        index = end
    return keys


@contextlib.contextmanager
def terminal_input(events: EventSource) -> Iterator[bool]:
    """Feed stdin keypresses into ``events`` while the block runs.

    Puts an interactive terminal into cbreak mode and registers a
    non-blocking reader on the running loop; yields False when stdin is not
    a terminal and nothing was registered.
    """
    if not sys.stdin.isatty():
        yield False
        return

    import termios
    import tty

    loop = asyncio.get_running_loop()
    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd)

    def _on_stdin() -> None:
        try:
            data = os.read(fd, 16)
        except OSError as exc:
            loop.remove_reader(fd)
            events.fail(exc)
            return
        if not data:
            loop.remove_reader(fd)
            return
        for key in split_keys(data.decode("utf-8", errors="ignore")):
            events.push_key(key)

    tty.setcbreak(fd)
    loop.add_reader(fd, _on_stdin)
    try:
        yield True
    finally:
        loop.remove_reader(fd)
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
