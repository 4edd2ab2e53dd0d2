from __future__ import annotations

import argparse
import os
from dataclasses import dataclass

from .comms import DEFAULT_COMMS_CHANCE
from .sources import DEFAULT_TIMEOUT_SECONDS
from .state import DEFAULT_HISTORY_SIZE, DEFAULT_NOTICE_LIMIT, MAX_NOTICE_LIMIT, MIN_NOTICE_LIMIT

DEFAULT_TICK_MS = 250
SPORTS_REFRESH_SECS = 30.0
NEWS_REFRESH_SECS = 60.0
FINANCE_REFRESH_SECS = 15.0
FLIGHTS_REFRESH_SECS = 30.0
PIZZA_REFRESH_SECS = 60.0
MEDIA_REFRESH_SECS = 5.0

FINNHUB_KEY_ENV = "FINNHUB_API_KEY"
SPOTIFY_TOKEN_ENV = "SPOTIFY_ACCESS_TOKEN"
NEWS_FEEDS_ENV = "GLOBAL_MONITOR_NEWS_FEEDS"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class MonitorConfig:
    tick_seconds: float = DEFAULT_TICK_MS / 1000.0
    sports_interval: float = SPORTS_REFRESH_SECS
    news_interval: float = NEWS_REFRESH_SECS
    finance_interval: float = FINANCE_REFRESH_SECS
    flights_interval: float = FLIGHTS_REFRESH_SECS
    pizza_interval: float = PIZZA_REFRESH_SECS
    media_interval: float = MEDIA_REFRESH_SECS
    history_size: int = DEFAULT_HISTORY_SIZE
    notice_limit: int = DEFAULT_NOTICE_LIMIT
    keep_stale: bool = False
    http_timeout: float = DEFAULT_TIMEOUT_SECONDS
    comms_chance: float = DEFAULT_COMMS_CHANCE
    news_feeds: tuple[str, ...] = ()
    finnhub_api_key: str = ""
    spotify_token: str = ""
    log_file: str = ""
    log_level: str = "INFO"
    once: bool = False


def parse_feed_list(raw: str) -> tuple[str, ...]:
    return tuple(piece.strip() for piece in raw.split(",") if piece.strip())


def parse_args(argv: list[str]) -> MonitorConfig:
    parser = argparse.ArgumentParser(
        description="Global Monitor: live sports, markets, news, flights and more in one terminal dashboard."
    )
    parser.add_argument("--tick-ms", type=int, default=DEFAULT_TICK_MS)
    parser.add_argument("--sports-interval", type=float, default=SPORTS_REFRESH_SECS)
    parser.add_argument("--news-interval", type=float, default=NEWS_REFRESH_SECS)
    parser.add_argument("--finance-interval", type=float, default=FINANCE_REFRESH_SECS)
    parser.add_argument("--flights-interval", type=float, default=FLIGHTS_REFRESH_SECS)
    parser.add_argument("--pizza-interval", type=float, default=PIZZA_REFRESH_SECS)
    parser.add_argument("--media-interval", type=float, default=MEDIA_REFRESH_SECS)
    parser.add_argument("--history-size", type=int, default=DEFAULT_HISTORY_SIZE)
    parser.add_argument("--notice-limit", type=int, default=DEFAULT_NOTICE_LIMIT)
    parser.add_argument(
        "--keep-stale",
        action="store_true",
        help="Keep the last good data on a panel when its feed comes back empty.",
    )
    parser.add_argument("--http-timeout", type=float, default=DEFAULT_TIMEOUT_SECONDS)
    parser.add_argument("--comms-chance", type=float, default=DEFAULT_COMMS_CHANCE)
    parser.add_argument(
        "--news-feeds",
        default=os.getenv(NEWS_FEEDS_ENV, ""),
        help="Comma-separated RSS feed URLs used when GDELT returns nothing.",
    )
    parser.add_argument("--log-file", default="")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="INFO")
    parser.add_argument("--once", action="store_true")

    args = parser.parse_args(argv)

    if args.tick_ms < 50:
        raise ValueError("--tick-ms must be >= 50")
    for flag, value in (
        ("--sports-interval", args.sports_interval),
        ("--news-interval", args.news_interval),
        ("--finance-interval", args.finance_interval),
        ("--flights-interval", args.flights_interval),
        ("--pizza-interval", args.pizza_interval),
        ("--media-interval", args.media_interval),
    ):
        if value <= 0:
            raise ValueError(f"{flag} must be > 0")
    if args.history_size < 1:
        raise ValueError("--history-size must be >= 1")
    if not MIN_NOTICE_LIMIT <= args.notice_limit <= MAX_NOTICE_LIMIT:
        raise ValueError(f"--notice-limit must be between {MIN_NOTICE_LIMIT} and {MAX_NOTICE_LIMIT}")
    if args.http_timeout <= 0:
        raise ValueError("--http-timeout must be > 0")
    if not 0.0 <= args.comms_chance <= 1.0:
        raise ValueError("--comms-chance must be between 0 and 1")

    return MonitorConfig(
        tick_seconds=args.tick_ms / 1000.0,
        sports_interval=args.sports_interval,
        news_interval=args.news_interval,
        finance_interval=args.finance_interval,
        flights_interval=args.flights_interval,
        pizza_interval=args.pizza_interval,
        media_interval=args.media_interval,
        history_size=args.history_size,
        notice_limit=args.notice_limit,
        keep_stale=args.keep_stale,
        http_timeout=args.http_timeout,
        comms_chance=args.comms_chance,
        news_feeds=parse_feed_list(args.news_feeds),
        finnhub_api_key=os.getenv(FINNHUB_KEY_ENV, "").strip(),
        spotify_token=os.getenv(SPOTIFY_TOKEN_ENV, "").strip(),
        log_file=args.log_file,
        log_level=args.log_level,
        once=args.once,
    )
