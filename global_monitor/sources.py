"""Fetch-and-normalize adapters for every polled feed.

Each public ``fetch_*`` function is synchronous and never raises: a network
error, a non-success status or a payload that does not parse yields the
feed's empty/default value instead.
"""
from __future__ import annotations

import html
import logging
import re
from datetime import datetime, timezone
from time import struct_time
from urllib.parse import urlparse
from typing import Any

import feedparser
import requests
from dateutil import parser as date_parser

from .models import Flight, NewsItem, PizzaIndex, Quote, SportsGame

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0"
DEFAULT_TIMEOUT_SECONDS = 20.0

ESPN_BASE_URL = "https://site.api.espn.com/apis/site/v2/sports"
GDELT_URL = "https://api.gdeltproject.org/api/v2/doc/doc"
COINGECKO_URL = "https://api.coingecko.com/api/v3/simple/price"
FINNHUB_QUOTE_URL = "https://finnhub.io/api/v1/quote"
OPENSKY_URL = "https://opensky-network.org/api/states/all"
PIZZINT_URL = "https://www.pizzint.watch/api/dashboard-data"

SPORTS_LEAGUES: tuple[tuple[str, str, str], ...] = (
    ("basketball", "nba", "NBA"),
    ("football", "nfl", "NFL"),
    ("hockey", "nhl", "NHL"),
    ("soccer", "eng.1", "EPL"),
    ("racing", "f1", "F1"),
)
GAMES_PER_LEAGUE = 2
MAX_GAMES = 8

NEWS_QUERY = '(geopolitics OR military OR "national security" OR intelligence) sourcelang:english'
MAX_NEWS_ITEMS = 5
HEADLINE_MAX = 80

COINS: tuple[tuple[str, str], ...] = (
    ("bitcoin", "BTC"),
    ("ethereum", "ETH"),
    ("solana", "SOL"),
)

# Finnhub's free tier has no index quotes, so ETFs stand in for them.
INDEX_ETFS: tuple[tuple[str, str], ...] = (
    ("SPY", "S&P 500"),
    ("DIA", "DOW"),
    ("QQQ", "NASDAQ"),
    ("GLD", "GOLD"),
)

NOTABLE_CALLSIGNS: tuple[str, ...] = ("AF1", "AF2", "SAM", "EXEC", "NAVY", "RCH", "EVAC")
HIGH_ALTITUDE_FEET = 35000.0
MAX_FLIGHTS = 5
METERS_TO_FEET = 3.28084

DOUGHCON_LABELS = {
    1: "MAXIMUM READINESS",
    2: "FAST PACE",
    3: "INCREASED VIGILANCE",
    4: "NORMAL READINESS",
    5: "LOW READINESS",
}

HTML_TAG_RE = re.compile(r"<[^>]+>")
WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(raw: Any) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raw = str(raw)
    unescaped = html.unescape(raw)
    no_html = HTML_TAG_RE.sub(" ", unescaped)
    return WHITESPACE_RE.sub(" ", no_html).strip()


def parse_date(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        parsed = raw
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    if isinstance(raw, (tuple, struct_time)):
        try:
            parsed = datetime(*list(raw)[:6], tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)
        except (TypeError, ValueError):
            return None
    try:
        parsed = date_parser.parse(str(raw))
    except (TypeError, ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def truncate_headline(title: str, width: int = HEADLINE_MAX) -> str:
    if len(title) <= width:
        return title
    return f"{title[: width - 3]}..."


def _get_json(
    url: str,
    params: dict[str, Any] | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Any:
    """GET ``url`` and decode JSON, or return None on any transport/status/parse problem."""
    try:
        response = requests.get(
            url,
            params=params,
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
        )
        response.raise_for_status()
        return response.json()
    except requests.RequestException as exc:
        logger.debug("GET %s failed: %s", url, exc)
        return None
    except ValueError as exc:
        logger.debug("GET %s returned malformed JSON: %s", url, exc)
        return None


# ---------------------------------------------------------------------------
# Sports (ESPN scoreboard, no key)
# ---------------------------------------------------------------------------

def parse_scoreboard(payload: dict[str, Any], league_display: str) -> list[SportsGame]:
    games: list[SportsGame] = []
    for event in payload.get("events") or []:
        competitions = event.get("competitions") or []
        if not competitions:
            continue
        competitors = competitions[0].get("competitors") or []
        if len(competitors) < 2:
            continue
        home, away = competitors[0], competitors[1]
        home_abbr = (home.get("team") or {}).get("abbreviation", "?")
        away_abbr = (away.get("team") or {}).get("abbreviation", "?")
        status_type = (event.get("status") or {}).get("type") or {}
        status = status_type.get("shortDetail") or status_type.get("description") or "Scheduled"
        games.append(
            SportsGame(
                league=league_display,
                match_up=f"{away_abbr} vs {home_abbr}",
                score=f"{away.get('score') or '0'}-{home.get('score') or '0'}",
                status=status,
            )
        )
    return games


def fetch_league_scores(
    sport: str,
    league: str,
    league_display: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[SportsGame]:
    payload = _get_json(f"{ESPN_BASE_URL}/{sport}/{league}/scoreboard", timeout=timeout)
    if not isinstance(payload, dict):
        return []
    try:
        return parse_scoreboard(payload, league_display)
    except (AttributeError, TypeError) as exc:
        logger.debug("Unexpected %s scoreboard shape: %s", league_display, exc)
        return []


def fetch_all_sports(timeout: float = DEFAULT_TIMEOUT_SECONDS) -> list[SportsGame]:
    all_games: list[SportsGame] = []
    for sport, league, display in SPORTS_LEAGUES:
        games = fetch_league_scores(sport, league, display, timeout=timeout)
        all_games.extend(games[:GAMES_PER_LEAGUE])
    return all_games[:MAX_GAMES]


# ---------------------------------------------------------------------------
# News (GDELT, optional RSS fallback)
# ---------------------------------------------------------------------------

def clean_domain(domain: str | None) -> str:
    if not domain:
        return "News"
    stripped = domain.removeprefix("www.")
    return stripped.split(".")[0] or domain


def parse_gdelt_articles(payload: dict[str, Any]) -> list[NewsItem]:
    items: list[NewsItem] = []
    for article in (payload.get("articles") or [])[:MAX_NEWS_ITEMS]:
        title = normalize_text(article.get("title"))
        if not title:
            continue
        items.append(
            NewsItem(
                source=clean_domain(article.get("domain")),
                headline=truncate_headline(title),
                published_at=parse_date(article.get("seendate")),
            )
        )
    return items


def fetch_gdelt_news(timeout: float = DEFAULT_TIMEOUT_SECONDS) -> list[NewsItem]:
    params = {
        "query": NEWS_QUERY,
        "timespan": "24h",
        "mode": "artlist",
        "maxrecords": 10,
        "format": "json",
        "sort": "date",
    }
    try:
        response = requests.get(
            GDELT_URL,
            params=params,
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.debug("GDELT request failed: %s", exc)
        return []

    # GDELT answers rate-limited or malformed queries with a plain-text page.
    if "application/json" not in response.headers.get("content-type", ""):
        return []
    try:
        payload = response.json()
    except ValueError as exc:
        logger.debug("GDELT returned malformed JSON: %s", exc)
        return []
    if not isinstance(payload, dict):
        return []
    return parse_gdelt_articles(payload)


def fetch_rss_news(feed_urls: tuple[str, ...], timeout: float = DEFAULT_TIMEOUT_SECONDS) -> list[NewsItem]:
    items: list[NewsItem] = []
    for feed_url in feed_urls:
        try:
            response = requests.get(feed_url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.debug("RSS feed %s failed: %s", feed_url, exc)
            continue

        parsed = feedparser.parse(response.text)
        if parsed.bozo and not parsed.entries:
            continue
        feed_title = normalize_text(parsed.feed.get("title")) or clean_domain(urlparse(feed_url).hostname)
        for entry in parsed.entries[: MAX_NEWS_ITEMS * 2]:
            title = normalize_text(entry.get("title", ""))
            if not title:
                continue
            items.append(
                NewsItem(
                    source=feed_title,
                    headline=truncate_headline(title),
                    published_at=parse_date(
                        entry.get("published")
                        or entry.get("updated")
                        or entry.get("published_parsed")
                    ),
                )
            )

    epoch = datetime.min.replace(tzinfo=timezone.utc)
    items.sort(key=lambda item: item.published_at or epoch, reverse=True)
    return items[:MAX_NEWS_ITEMS]


def fetch_news(
    rss_feeds: tuple[str, ...] = (),
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> list[NewsItem]:
    news = fetch_gdelt_news(timeout=timeout)
    if news or not rss_feeds:
        return news
    return fetch_rss_news(rss_feeds, timeout=timeout)


# ---------------------------------------------------------------------------
# Finance (CoinGecko, Finnhub)
# ---------------------------------------------------------------------------

def parse_coin_prices(payload: dict[str, Any]) -> list[Quote]:
    quotes: list[Quote] = []
    for coin_id, symbol in COINS:
        price_data = payload.get(coin_id)
        if not isinstance(price_data, dict) or price_data.get("usd") is None:
            continue
        price = float(price_data["usd"])
        change_pct = float(price_data.get("usd_24h_change") or 0.0)
        quotes.append(
            Quote(
                symbol=symbol,
                price=price,
                change=price * (change_pct / 100.0),
                percent=change_pct,
            )
        )
    return quotes


def fetch_crypto(timeout: float = DEFAULT_TIMEOUT_SECONDS) -> list[Quote]:
    params = {
        "ids": ",".join(coin_id for coin_id, _ in COINS),
        "vs_currencies": "usd",
        "include_24hr_change": "true",
    }
    payload = _get_json(COINGECKO_URL, params=params, timeout=timeout)
    if not isinstance(payload, dict):
        return []
    try:
        return parse_coin_prices(payload)
    except (TypeError, ValueError) as exc:
        logger.debug("Unexpected CoinGecko payload: %s", exc)
        return []


def fetch_stocks(api_key: str = "", timeout: float = DEFAULT_TIMEOUT_SECONDS) -> list[Quote]:
    if not api_key:
        return []

    quotes: list[Quote] = []
    for symbol, display_name in INDEX_ETFS:
        payload = _get_json(
            FINNHUB_QUOTE_URL,
            params={"symbol": symbol, "token": api_key},
            timeout=timeout,
        )
        if not isinstance(payload, dict):
            continue
        try:
            current = float(payload.get("c") or 0.0)
            previous_close = float(payload.get("pc") or 0.0)
            if current == 0.0 and previous_close == 0.0:
                continue
            quotes.append(
                Quote(
                    symbol=display_name,
                    price=current,
                    change=float(payload.get("d") or 0.0),
                    percent=float(payload.get("dp") or 0.0),
                )
            )
        except (TypeError, ValueError) as exc:
            logger.debug("Unexpected Finnhub quote for %s: %s", symbol, exc)
    return quotes


# ---------------------------------------------------------------------------
# Flights (OpenSky state vectors, anonymous)
# ---------------------------------------------------------------------------
# A state is a positional array:
# [icao24, callsign, origin_country, time_position, last_contact,
#  longitude, latitude, baro_altitude, on_ground, ...]

def _state_value(state: list[Any], index: int) -> Any:
    return state[index] if len(state) > index else None


def _state_float(state: list[Any], index: int) -> float | None:
    value = _state_value(state, index)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _callsign(state: list[Any]) -> str:
    value = _state_value(state, 1)
    return value.strip() if isinstance(value, str) else ""


def _altitude_feet(state: list[Any]) -> float | None:
    meters = _state_float(state, 7)
    return meters * METERS_TO_FEET if meters is not None else None


def is_notable_callsign(callsign: str) -> bool:
    upper = callsign.upper()
    return any(upper.startswith(prefix) for prefix in NOTABLE_CALLSIGNS)


def _flight_from_state(state: list[Any], callsign: str) -> Flight:
    origin = _state_value(state, 2)
    altitude = _altitude_feet(state)
    if _state_value(state, 8) is True:
        status = "On Ground"
    elif altitude is not None:
        status = f"FL{altitude / 100.0:.0f}"
    else:
        status = "In Flight"
    return Flight(
        callsign=callsign,
        route=f"Origin: {origin if isinstance(origin, str) else 'Unknown'}",
        status=status,
        lat=_state_float(state, 6),
        lon=_state_float(state, 5),
    )


def select_flights(states: list[list[Any]]) -> list[Flight]:
    notable = [
        _flight_from_state(state, _callsign(state))
        for state in states
        if _callsign(state) and is_notable_callsign(_callsign(state))
    ]
    if notable:
        return notable[:MAX_FLIGHTS]

    # Nothing notable airborne: show a sample of long-haul cruise traffic instead.
    cruising: list[Flight] = []
    for state in states:
        callsign = _callsign(state)
        altitude = _altitude_feet(state)
        if not callsign or altitude is None or altitude < HIGH_ALTITUDE_FEET:
            continue
        cruising.append(_flight_from_state(state, callsign))
        if len(cruising) >= MAX_FLIGHTS:
            break
    return cruising


def fetch_flights(timeout: float = DEFAULT_TIMEOUT_SECONDS) -> list[Flight]:
    payload = _get_json(OPENSKY_URL, timeout=timeout)
    if not isinstance(payload, dict):
        return []
    states = [state for state in payload.get("states") or [] if isinstance(state, list)]
    return select_flights(states)


# ---------------------------------------------------------------------------
# Pentagon Pizza Index (pizzint.watch)
# ---------------------------------------------------------------------------

def doughcon_status(level: int) -> str:
    return DOUGHCON_LABELS.get(level, "UNKNOWN")


def parse_pizza_index(payload: dict[str, Any]) -> PizzaIndex:
    if not payload.get("success"):
        return PizzaIndex()
    index = payload.get("overall_index")
    doughcon = payload.get("defcon_level")
    index = int(index) if index is not None else 0
    doughcon = int(doughcon) if doughcon is not None else 5
    return PizzaIndex(index=index, doughcon=doughcon, status=doughcon_status(doughcon))


def fetch_pizza_index(timeout: float = DEFAULT_TIMEOUT_SECONDS) -> PizzaIndex:
    payload = _get_json(PIZZINT_URL, timeout=timeout)
    if not isinstance(payload, dict):
        return PizzaIndex()
    try:
        return parse_pizza_index(payload)
    except (TypeError, ValueError) as exc:
        logger.debug("Unexpected pizza index payload: %s", exc)
        return PizzaIndex()
