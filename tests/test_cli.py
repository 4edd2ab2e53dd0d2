import io

import pytest
from conftest import CountingFetcher, make_feed
from rich.console import Console

from global_monitor import cli
from global_monitor.config import MonitorConfig
from global_monitor.media import NullMediaPlayer
from global_monitor.models import FeedKind, PizzaIndex, Quote


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    monkeypatch.setattr(cli, "load_dotenv", lambda: False)


def recording_console() -> Console:
    return Console(record=True, width=160, height=50, file=io.StringIO(), color_system=None)


def test_invalid_configuration_exits_with_2(monkeypatch):
    console = recording_console()
    monkeypatch.setattr(cli, "Console", lambda: console)

    assert cli.main(["--notice-limit", "20"]) == 2
    assert "Configuration error" in console.export_text()


def test_build_monitor_wires_feeds_in_order():
    config = MonitorConfig(notice_limit=7, keep_stale=True, finance_interval=9.0)
    monitor = cli.build_monitor(config)

    assert [feed.name for feed in monitor.feeds] == ["finance", "sports", "news", "flights", "pizza", "media"]
    assert len(monitor.feeds[0].fetchers) == 2
    assert monitor.feeds[0].interval == 9.0
    assert isinstance(monitor.player, NullMediaPlayer)
    assert monitor.state.notices.capacity == 7
    assert monitor.state.keep_stale is True


def test_run_once_renders_one_frame(monkeypatch):
    feeds = [
        make_feed(FeedKind.FINANCE, 15.0, CountingFetcher([Quote("ETH", 2000.0, 10.0, 0.5)])),
        make_feed(FeedKind.PIZZA, 60.0, CountingFetcher(PizzaIndex(12, 4, "NORMAL READINESS"))),
    ]
    monkeypatch.setattr(cli, "build_feeds", lambda config, player: feeds)
    console = recording_console()

    assert cli.run(MonitorConfig(once=True, comms_chance=0.0), console) == 0

    output = console.export_text()
    assert "GLOBAL MONITOR" in output
    assert "ETH" in output
    assert "NORMAL READINESS" in output
    assert all(fetcher.calls == 1 for feed in feeds for fetcher in feed.fetchers)
