import io
from datetime import datetime, timezone

from rich.console import Console

from global_monitor.dashboard import build_dashboard, human_age, sparkline, truncate
from global_monitor.models import FeedKind, Flight, PizzaIndex, Quote
from global_monitor.state import AggregationState


def render(snapshot) -> str:
    console = Console(record=True, width=160, height=50, file=io.StringIO(), color_system=None)
    console.print(build_dashboard(snapshot, terminal_width=160))
    return console.export_text()


def populated_state() -> AggregationState:
    state = AggregationState()
    state.apply(FeedKind.FINANCE, [Quote("BTC", 97000.0, 1200.0, 1.25)])
    state.apply(FeedKind.FLIGHTS, [Flight("RCH864", "Origin: United States", "FL300", 38.9, -77.0)])
    state.apply(FeedKind.PIZZA, PizzaIndex(84, 2, "FAST PACE"))
    state.notice("Data feeds connected")
    state.last_tick = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    return state


def test_sparkline_scales_between_min_and_max():
    assert sparkline((1.0, 2.0, 3.0)) == "▁▅█"
    assert sparkline((5.0, 5.0)) == "▄▄"
    assert sparkline(()) == ""


def test_sparkline_keeps_most_recent_values():
    assert sparkline((9.0, 1.0, 2.0), width=2) == "▁█"


def test_truncate_and_age():
    assert truncate("abcdef", 5) == "ab..."
    assert truncate("abc", 5) == "abc"
    assert human_age(None) == "--"
    assert human_age(12.7) == "12s"
    assert human_age(130) == "2m"


def test_dashboard_shows_every_panel():
    output = render(populated_state().snapshot())

    for title in (
        "GLOBAL MONITOR",
        "SPORTS",
        "GEOPOLITICS",
        "FINANCIAL",
        "AVIATION",
        "WORLD MAP",
        "PIZZA INDEX",
        "FORECASTS",
        "LOGISTICS",
        "OFFICIAL COMMS",
        "NOW PLAYING",
    ):
        assert title in output
    assert "03:04:05 UTC" in output
    assert "BTC" in output
    assert "RCH864" in output
    assert "FAST PACE" in output
    assert "Suez Canal" in output
    assert "Data feeds connected" in output


def test_empty_panels_say_no_data():
    output = render(AggregationState().snapshot())
    assert "No data" in output
    assert "--:--:-- UTC" in output
    assert "OFFLINE" in output


def test_help_replaces_right_column():
    output = render(AggregationState().snapshot(show_help=True))
    assert "Help" in output
    assert "toggle this help" in output
    assert "PIZZA INDEX" not in output


def test_footer_lists_source_ages():
    snapshot = AggregationState().snapshot(source_ages={"finance": 3.0, "news": None})
    output = render(snapshot)
    assert "finance:3s" in output
    assert "news:--" in output
