from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime

from .models import (
    FeedKind,
    FeedValue,
    Flight,
    MapEvent,
    MediaStatus,
    NewsItem,
    PizzaIndex,
    Prediction,
    Quote,
    SportsGame,
    TradeItem,
    build_map_events,
    curated_predictions,
    curated_trade_data,
    default_value,
    is_default,
)

DEFAULT_HISTORY_SIZE = 40
DEFAULT_NOTICE_LIMIT = 5
MIN_NOTICE_LIMIT = 5
MAX_NOTICE_LIMIT = 10


class BoundedHistory:
    """The most recent ``capacity`` values of one series, oldest first."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE) -> None:
        if capacity < 1:
            raise ValueError("history capacity must be >= 1")
        self._values: deque[float] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._values.maxlen or 0

    def append(self, value: float) -> None:
        self._values.append(value)

    def values(self) -> tuple[float, ...]:
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)


class NoticeLog:
    """Human-readable notices, newest at index 0."""

    def __init__(self, capacity: int = DEFAULT_NOTICE_LIMIT) -> None:
        if not MIN_NOTICE_LIMIT <= capacity <= MAX_NOTICE_LIMIT:
            raise ValueError(
                f"notice capacity must be between {MIN_NOTICE_LIMIT} and {MAX_NOTICE_LIMIT}"
            )
        self._messages: deque[str] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._messages.maxlen or 0

    def push(self, message: str) -> None:
        # appendleft on a full deque drops from the right, i.e. the oldest.
        self._messages.appendleft(message)

    def messages(self) -> tuple[str, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __getitem__(self, index: int) -> str:
        return self._messages[index]


@dataclass(frozen=True)
class DashboardSnapshot:
    sports: tuple[SportsGame, ...]
    news: tuple[NewsItem, ...]
    finance: tuple[Quote, ...]
    finance_history: tuple[float, ...]
    flights: tuple[Flight, ...]
    pizza: PizzaIndex
    media: MediaStatus
    predictions: tuple[Prediction, ...]
    trade: tuple[TradeItem, ...]
    map_events: tuple[MapEvent, ...]
    notices: tuple[str, ...]
    show_help: bool
    last_tick: datetime | None
    source_ages: tuple[tuple[str, float | None], ...] = ()


@dataclass
class AggregationState:
    history_size: int = DEFAULT_HISTORY_SIZE
    notice_limit: int = DEFAULT_NOTICE_LIMIT
    keep_stale: bool = False
    sports: list[SportsGame] = field(default_factory=list)
    news: list[NewsItem] = field(default_factory=list)
    finance: list[Quote] = field(default_factory=list)
    flights: list[Flight] = field(default_factory=list)
    pizza: PizzaIndex = field(default_factory=PizzaIndex)
    media: MediaStatus = field(default_factory=MediaStatus)
    predictions: list[Prediction] = field(default_factory=curated_predictions)
    trade: list[TradeItem] = field(default_factory=curated_trade_data)
    map_events: list[MapEvent] = field(default_factory=list)
    last_tick: datetime | None = None

    def __post_init__(self) -> None:
        self.finance_history = BoundedHistory(self.history_size)
        self.notices = NoticeLog(self.notice_limit)
        self.map_events = build_map_events(self.flights, self.trade)

    def entry(self, kind: FeedKind) -> FeedValue:
        return getattr(self, kind.value)

    def apply(self, kind: FeedKind, value: FeedValue) -> bool:
        """Replace the entry for ``kind`` with a freshly fetched value.

        Returns False when the value was discarded: with ``keep_stale`` an
        empty/default result never overwrites a populated entry.
        """
        if self.keep_stale and is_default(kind, value) and not is_default(kind, self.entry(kind)):
            return False

        if kind is FeedKind.FINANCE:
            quotes = list(value)
            if quotes:
                self.finance_history.append(quotes[0].price)
            self.finance = quotes
        elif kind is FeedKind.FLIGHTS:
            self.flights = list(value)
            self.map_events = build_map_events(self.flights, self.trade)
        elif kind is FeedKind.PIZZA:
            self.pizza = value if isinstance(value, PizzaIndex) else default_value(kind)
        elif kind is FeedKind.MEDIA:
            self.media = value if isinstance(value, MediaStatus) else default_value(kind)
        else:
            setattr(self, kind.value, list(value))
        return True

    def notice(self, message: str) -> None:
        self.notices.push(message)

    def snapshot(
        self,
        source_ages: dict[str, float | None] | None = None,
        show_help: bool = False,
    ) -> DashboardSnapshot:
        return DashboardSnapshot(
            sports=tuple(self.sports),
            news=tuple(self.news),
            finance=tuple(self.finance),
            finance_history=self.finance_history.values(),
            flights=tuple(self.flights),
            pizza=self.pizza,
            media=self.media,
            predictions=tuple(self.predictions),
            trade=tuple(self.trade),
            map_events=tuple(self.map_events),
            notices=self.notices.messages(),
            show_help=show_help,
            last_tick=self.last_tick,
            source_ages=tuple((source_ages or {}).items()),
        )
