from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class Source:
    name: str
    interval: float
    last_success: float | None = None

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"interval for source '{self.name}' must be > 0, got {self.interval}")


class RefreshScheduler:
    """Tracks when each source last refreshed and which ones are due.

    Times are plain floats on a single monotonic clock supplied by the
    caller. A source that has never refreshed is always due; otherwise it is
    due once its interval has fully elapsed. Sources are independent and are
    reported in registration order.

    A source marked in flight with ``begin`` is never due until its fetch is
    settled with ``mark_refreshed`` or ``abandon``.
    """

    def __init__(self, sources: list[Source]) -> None:
        self._sources: dict[str, Source] = {}
        for source in sources:
            if source.name in self._sources:
                raise ValueError(f"duplicate source '{source.name}'")
            self._sources[source.name] = source
        self._in_flight: set[str] = set()

    @property
    def names(self) -> list[str]:
        return list(self._sources)

    def source(self, name: str) -> Source:
        try:
            return self._sources[name]
        except KeyError:
            raise KeyError(f"unknown source '{name}'") from None

    def is_due(self, name: str, now: float) -> bool:
        source = self.source(name)
        if name in self._in_flight:
            return False
        if source.last_success is None:
            return True
        return now - source.last_success >= source.interval

    def due(self, now: float) -> list[str]:
        return [name for name in self._sources if self.is_due(name, now)]

    def needs_full_load(self) -> bool:
        return all(source.last_success is None for source in self._sources.values())

    def begin(self, name: str) -> None:
        self.source(name)
        self._in_flight.add(name)

    def abandon(self, name: str) -> None:
        self._in_flight.discard(name)

    def in_flight(self, name: str) -> bool:
        return name in self._in_flight

    def mark_refreshed(self, name: str, now: float) -> None:
        source = self.source(name)
        self._in_flight.discard(name)
        if source.last_success is None or now > source.last_success:
            source.last_success = now
        elif now < source.last_success:
            logger.debug(
                "Ignoring refresh of %s at %.3f; already refreshed at %.3f",
                name,
                now,
                source.last_success,
            )

    def reset_all(self) -> None:
        for source in self._sources.values():
            source.last_success = None

    def last_success(self, name: str) -> float | None:
        return self.source(name).last_success

    def ages(self, now: float) -> dict[str, float | None]:
        return {
            name: None if source.last_success is None else max(now - source.last_success, 0.0)
            for name, source in self._sources.items()
        }
