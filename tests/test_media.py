import requests
from conftest import FakeResponse

from global_monitor.media import (
    NullMediaPlayer,
    SpotifyPlayer,
    build_media_player,
    parse_currently_playing,
)
from global_monitor.models import MediaStatus

TRACK_PAYLOAD = {
    "is_playing": True,
    "currently_playing_type": "track",
    "item": {"type": "track", "name": "Paranoid Android", "artists": [{"name": "Radiohead"}]},
}


class RecordingRequests:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[str, str]] = []
        self.error = error

    def __call__(self, method, url, headers=None, timeout=None):
        self.calls.append((method, url.rsplit("/", 1)[-1]))
        if self.error is not None:
            raise self.error
        return FakeResponse(status_code=204)


def test_parse_track():
    assert parse_currently_playing(TRACK_PAYLOAD) == MediaStatus("Paranoid Android", "Radiohead", True)


def test_parse_episode_and_unknown():
    episode = {"is_playing": False, "item": {"type": "episode", "name": "Daily Brief"}}
    assert parse_currently_playing(episode) == MediaStatus("Daily Brief", "Podcast", False)
    assert parse_currently_playing({"is_playing": True, "currently_playing_type": "ad"}) == MediaStatus(
        "Unknown Media", "", True
    )


def test_build_media_player_without_token():
    player = build_media_player("")
    assert isinstance(player, NullMediaPlayer)
    assert player.status() == MediaStatus("OFFLINE", "NO SIGNAL", False)


def test_status_reads_current_track(fake_http):
    fake_http.add("currently-playing", FakeResponse(TRACK_PAYLOAD))
    player = SpotifyPlayer("token")
    assert player.status() == MediaStatus("Paranoid Android", "Radiohead", True)


def test_status_idle_on_no_content(fake_http):
    fake_http.add("currently-playing", FakeResponse(status_code=204))
    assert SpotifyPlayer("token").status() == MediaStatus("IDLE", "", False)


def test_status_keeps_last_value_on_error(fake_http):
    responses = [FakeResponse(TRACK_PAYLOAD), FakeResponse(status_code=401)]
    fake_http.add("currently-playing", lambda url, params: responses.pop(0))
    player = SpotifyPlayer("token")

    first = player.status()
    second = player.status()

    assert second == first
    assert second.track == "Paranoid Android"


def test_toggle_play_pauses_a_playing_track(fake_http, monkeypatch):
    fake_http.add("currently-playing", FakeResponse(TRACK_PAYLOAD))
    recorder = RecordingRequests()
    monkeypatch.setattr(requests, "request", recorder)
    player = SpotifyPlayer("token")
    player.status()

    player.toggle_play()
    player.toggle_play()
    player.next_track()
    player.previous_track()

    assert recorder.calls == [("PUT", "pause"), ("PUT", "play"), ("POST", "next"), ("POST", "previous")]


def test_commands_survive_api_errors(monkeypatch):
    recorder = RecordingRequests(error=requests.ConnectionError("offline"))
    monkeypatch.setattr(requests, "request", recorder)
    player = SpotifyPlayer("token")

    player.next_track()
    player.toggle_play()

    assert recorder.calls == [("POST", "next"), ("PUT", "play")]
