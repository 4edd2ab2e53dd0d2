from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from typing import Any

from . import sources
from .config import MonitorConfig
from .media import MediaPlayer
from .models import FeedKind, FeedValue, default_value

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Any]


@dataclass(frozen=True)
class Feed:
    """One polled source: its kind, cadence and the adapters that fill it.

    A feed with several fetchers (finance: crypto + equities) concatenates
    their list results in fetcher order.
    """

    kind: FeedKind
    interval: float
    fetchers: tuple[Fetcher, ...]

    @property
    def name(self) -> str:
        return self.kind.value

    def combine(self, results: list[Any]) -> FeedValue:
        if len(results) == 1:
            return results[0]
        combined: list[Any] = []
        for result in results:
            if isinstance(result, list):
                combined.extend(result)
        return combined if combined else default_value(self.kind)


def build_feeds(config: MonitorConfig, player: MediaPlayer) -> list[Feed]:
    timeout = config.http_timeout
    if not config.finnhub_api_key:
        logger.info("FINNHUB_API_KEY not set; equities feed disabled, crypto only.")

    return [
        Feed(
            kind=FeedKind.FINANCE,
            interval=config.finance_interval,
            fetchers=(
                partial(sources.fetch_crypto, timeout=timeout),
                partial(sources.fetch_stocks, config.finnhub_api_key, timeout=timeout),
            ),
        ),
        Feed(
            kind=FeedKind.SPORTS,
            interval=config.sports_interval,
            fetchers=(partial(sources.fetch_all_sports, timeout=timeout),),
        ),
        Feed(
            kind=FeedKind.NEWS,
            interval=config.news_interval,
            fetchers=(partial(sources.fetch_news, config.news_feeds, timeout=timeout),),
        ),
        Feed(
            kind=FeedKind.FLIGHTS,
            interval=config.flights_interval,
            fetchers=(partial(sources.fetch_flights, timeout=timeout),),
        ),
        Feed(
            kind=FeedKind.PIZZA,
            interval=config.pizza_interval,
            fetchers=(partial(sources.fetch_pizza_index, timeout=timeout),),
        ),
        Feed(
            kind=FeedKind.MEDIA,
            interval=config.media_interval,
            fetchers=(player.status,),
        ),
    ]
