from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

from .models import MediaStatus

logger = logging.getLogger(__name__)

SPOTIFY_API_URL = "https://api.spotify.com/v1/me/player"


class MediaPlayer(Protocol):
    def status(self) -> MediaStatus: ...

    def toggle_play(self) -> None: ...

    def next_track(self) -> None: ...

    def previous_track(self) -> None: ...


class NullMediaPlayer:
    """Stand-in used when no player credentials are configured."""

    def status(self) -> MediaStatus:
        return MediaStatus()

    def toggle_play(self) -> None:
        return None

    def next_track(self) -> None:
        return None

    def previous_track(self) -> None:
        return None


def parse_currently_playing(payload: dict[str, Any]) -> MediaStatus:
    is_playing = bool(payload.get("is_playing"))
    item = payload.get("item") or {}
    item_type = payload.get("currently_playing_type") or item.get("type")
    if item_type == "track":
        artists = item.get("artists") or []
        artist = artists[0].get("name", "Unknown") if artists else "Unknown"
        return MediaStatus(track=item.get("name") or "Unknown", artist=artist, is_playing=is_playing)
    if item_type == "episode":
        return MediaStatus(track=item.get("name") or "Unknown", artist="Podcast", is_playing=is_playing)
    return MediaStatus(track="Unknown Media", artist="", is_playing=is_playing)


class SpotifyPlayer:
    """Spotify Web API client driven by a pre-issued user access token.

    ``status`` keeps the last known value when the API call fails, so a
    transient error never blanks the panel; playback commands log and
    continue.
    """

    def __init__(self, access_token: str, timeout: float = 10.0) -> None:
        self._headers = {"Authorization": f"Bearer {access_token}"}
        self._timeout = timeout
        self._last = MediaStatus(track="CONNECTED", artist="WAITING FOR DATA", is_playing=False)

    def status(self) -> MediaStatus:
        try:
            response = requests.get(
                f"{SPOTIFY_API_URL}/currently-playing",
                params={"additional_types": "track,episode"},
                headers=self._headers,
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.debug("Spotify status failed: %s", exc)
            return self._last

        if response.status_code == 204 or not response.content:
            self._last = MediaStatus(track="IDLE", artist="", is_playing=False)
            return self._last
        try:
            payload = response.json()
        except ValueError as exc:
            logger.debug("Spotify status returned malformed JSON: %s", exc)
            return self._last
        if isinstance(payload, dict):
            self._last = parse_currently_playing(payload)
        return self._last

    def _send(self, method: str, action: str) -> None:
        try:
            response = requests.request(
                method,
                f"{SPOTIFY_API_URL}/{action}",
                headers=self._headers,
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Spotify %s failed: %s", action, exc)

    def toggle_play(self) -> None:
        if self._last.is_playing:
            self._send("PUT", "pause")
            self._last = MediaStatus(self._last.track, self._last.artist, is_playing=False)
        else:
            self._send("PUT", "play")
            self._last = MediaStatus(self._last.track, self._last.artist, is_playing=True)

    def next_track(self) -> None:
        self._send("POST", "next")

    def previous_track(self) -> None:
        self._send("POST", "previous")


def build_media_player(access_token: str, timeout: float = 10.0) -> MediaPlayer:
    if not access_token:
        return NullMediaPlayer()
    return SpotifyPlayer(access_token, timeout=timeout)
