from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union


class FeedKind(str, Enum):
    SPORTS = "sports"
    NEWS = "news"
    FINANCE = "finance"
    FLIGHTS = "flights"
    PIZZA = "pizza"
    MEDIA = "media"


class EventCategory(str, Enum):
    GEOPOLITICS = "geopolitics"
    NEWS = "news"
    SPORTS = "sports"
    FLIGHT = "flight"
    TRADE = "trade"


@dataclass(frozen=True)
class SportsGame:
    league: str
    match_up: str
    score: str
    status: str


@dataclass(frozen=True)
class NewsItem:
    source: str
    headline: str
    published_at: datetime | None = None


@dataclass(frozen=True)
class Quote:
    symbol: str
    price: float
    change: float
    percent: float


@dataclass(frozen=True)
class Flight:
    callsign: str
    route: str
    status: str
    lat: float | None = None
    lon: float | None = None


@dataclass(frozen=True)
class PizzaIndex:
    index: int = 0
    doughcon: int = 5
    status: str = "Offline"


@dataclass(frozen=True)
class MediaStatus:
    track: str = "OFFLINE"
    artist: str = "NO SIGNAL"
    is_playing: bool = False


@dataclass(frozen=True)
class Prediction:
    platform: str
    question: str
    odds: str


@dataclass(frozen=True)
class TradeItem:
    entity: str
    location: str
    status: str
    lat: float | None = None
    lon: float | None = None


@dataclass(frozen=True)
class MapEvent:
    lat: float
    lon: float
    category: EventCategory
    description: str


# What a single adapter hands back: a record list for list-shaped feeds, or a
# single record for the pizza index and the media player.
FeedValue = Union[
    list[SportsGame],
    list[NewsItem],
    list[Quote],
    list[Flight],
    PizzaIndex,
    MediaStatus,
]


def default_value(kind: FeedKind) -> FeedValue:
    if kind is FeedKind.PIZZA:
        return PizzaIndex()
    if kind is FeedKind.MEDIA:
        return MediaStatus()
    return []


def is_default(kind: FeedKind, value: FeedValue) -> bool:
    return value == default_value(kind)


def curated_predictions() -> list[Prediction]:
    return [
        Prediction(platform="Poly", question="Fed Rate Cut Q1", odds="42%"),
        Prediction(platform="Kalshi", question="BTC > 100k", odds="35%"),
        Prediction(platform="Poly", question="AI Regulation", odds="28%"),
    ]


def curated_trade_data() -> list[TradeItem]:
    return [
        TradeItem(entity="Suez Canal", location="Egypt", status="Open", lat=30.58, lon=32.27),
        TradeItem(entity="Panama Canal", location="Panama", status="Operating", lat=9.08, lon=-79.68),
        TradeItem(entity="Singapore", location="Port", status="Active", lat=1.26, lon=103.84),
    ]


def build_map_events(flights: list[Flight], trade: list[TradeItem]) -> list[MapEvent]:
    events: list[MapEvent] = []
    for flight in flights:
        if flight.lat is None or flight.lon is None:
            continue
        events.append(
            MapEvent(
                lat=flight.lat,
                lon=flight.lon,
                category=EventCategory.FLIGHT,
                description=flight.callsign,
            )
        )
    for item in trade:
        if item.lat is None or item.lon is None:
            continue
        events.append(
            MapEvent(
                lat=item.lat,
                lon=item.lon,
                category=EventCategory.TRADE,
                description=item.entity,
            )
        )
    return events
