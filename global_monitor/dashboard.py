from __future__ import annotations

from rich.console import Group
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .commands import HELP_LINES
from .models import MediaStatus, PizzaIndex
from .state import DashboardSnapshot

TITLE = "GLOBAL MONITOR"
SPARK_BLOCKS = "▁▂▃▄▅▆▇█"

DOUGHCON_STYLES = {
    1: "bold white on red",
    2: "bold red",
    3: "bold yellow",
    4: "green",
    5: "dim green",
}


def truncate(value: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(value) <= width:
        return value
    if width <= 3:
        return value[:width]
    return f"{value[: width - 3]}..."


def sparkline(values: tuple[float, ...], width: int | None = None) -> str:
    if width is not None and width > 0:
        values = values[-width:]
    if not values:
        return ""
    lo = min(values)
    hi = max(values)
    if hi <= lo:
        return SPARK_BLOCKS[3] * len(values)
    scale = len(SPARK_BLOCKS) - 1
    return "".join(SPARK_BLOCKS[round((value - lo) / (hi - lo) * scale)] for value in values)


def human_age(seconds: float | None) -> str:
    if seconds is None:
        return "--"
    if seconds < 60:
        return f"{int(seconds)}s"
    return f"{int(seconds // 60)}m"


def render_header(snapshot: DashboardSnapshot) -> Panel:
    clock = snapshot.last_tick.strftime("%H:%M:%S UTC") if snapshot.last_tick else "--:--:-- UTC"
    title = Text(f" {TITLE} - CLASSIFIED | {clock} ", style="bold green", justify="center")
    return Panel(title, border_style="green")


def render_sports_table(snapshot: DashboardSnapshot) -> Table:
    table = Table(expand=True, show_header=False, box=None, padding=(0, 1))
    table.add_column("League", style="yellow", width=4)
    table.add_column("Match", no_wrap=True, overflow="ellipsis")
    table.add_column("Score", justify="right", width=7)
    table.add_column("Status", style="dim", no_wrap=True, overflow="ellipsis")
    for game in snapshot.sports:
        table.add_row(game.league, game.match_up, game.score, game.status)
    if not snapshot.sports:
        table.add_row("-", "No data", "", "")
    return table


def render_news_table(snapshot: DashboardSnapshot) -> Table:
    table = Table(expand=True, show_header=False, box=None, padding=(0, 1))
    table.add_column("Source", style="red", width=12, no_wrap=True, overflow="ellipsis")
    table.add_column("Headline", overflow="fold")
    for item in snapshot.news:
        table.add_row(item.source, item.headline)
    if not snapshot.news:
        table.add_row("-", "No data")
    return table


def render_finance(snapshot: DashboardSnapshot) -> Group:
    table = Table(expand=True, show_header=False, box=None, padding=(0, 1))
    table.add_column("Symbol", style="bold")
    table.add_column("Price", justify="right")
    table.add_column("Change", justify="right")
    for quote in snapshot.finance:
        style = "green" if quote.percent >= 0 else "red"
        arrow = "▲" if quote.percent >= 0 else "▼"
        table.add_row(
            quote.symbol,
            f"{quote.price:,.2f}",
            Text(f"{arrow} {quote.percent:+.2f}%", style=style),
        )
    if not snapshot.finance:
        table.add_row("-", "No data", "")
    trend = sparkline(snapshot.finance_history, width=40) or "·"
    return Group(table, Text(f"Trend {trend}", style="green"))


def render_flights_table(snapshot: DashboardSnapshot) -> Table:
    table = Table(expand=True, show_header=False, box=None, padding=(0, 1))
    table.add_column("Callsign", style="cyan", width=9)
    table.add_column("Route", no_wrap=True, overflow="ellipsis")
    table.add_column("Status", justify="right", width=9)
    for flight in snapshot.flights:
        table.add_row(flight.callsign, flight.route, flight.status)
    if not snapshot.flights:
        table.add_row("-", "No data", "")
    return table


def render_map_table(snapshot: DashboardSnapshot) -> Table:
    table = Table(expand=True, padding=(0, 1))
    table.add_column("Type", width=7)
    table.add_column("Marker", no_wrap=True, overflow="ellipsis")
    table.add_column("Lat", justify="right", width=7)
    table.add_column("Lon", justify="right", width=8)
    for event in snapshot.map_events:
        table.add_row(event.category.value, event.description, f"{event.lat:.2f}", f"{event.lon:.2f}")
    if not snapshot.map_events:
        table.add_row("-", "No markers", "", "")
    return table


def render_pizza(pizza: PizzaIndex) -> Text:
    style = DOUGHCON_STYLES.get(pizza.doughcon, "white")
    text = Text()
    text.append(f"INDEX {pizza.index:>3}/100\n", style="bold")
    text.append(f"DOUGHCON {pizza.doughcon}\n", style=style)
    text.append(pizza.status, style=style)
    return text


def render_predictions_table(snapshot: DashboardSnapshot) -> Table:
    table = Table(expand=True, show_header=False, box=None, padding=(0, 1))
    table.add_column("Platform", style="magenta", width=6)
    table.add_column("Question", no_wrap=True, overflow="ellipsis")
    table.add_column("Odds", justify="right", width=5)
    for prediction in snapshot.predictions:
        table.add_row(prediction.platform, prediction.question, prediction.odds)
    return table


def render_trade_table(snapshot: DashboardSnapshot) -> Table:
    table = Table(expand=True, show_header=False, box=None, padding=(0, 1))
    table.add_column("Entity", style="blue", no_wrap=True)
    table.add_column("Location", no_wrap=True, overflow="ellipsis")
    table.add_column("Status", justify="right")
    for item in snapshot.trade:
        table.add_row(item.entity, item.location, item.status)
    return table


def render_notices(snapshot: DashboardSnapshot) -> Text:
    text = Text()
    for index, message in enumerate(snapshot.notices):
        if index:
            text.append("\n")
        text.append(f"> {message}", style="bold white" if index == 0 else "dim")
    return text


def render_media(media: MediaStatus) -> Text:
    icon = "▶" if media.is_playing else "❚❚"
    text = Text()
    text.append(f"{icon} {media.track}\n", style="bold green" if media.is_playing else "bold")
    text.append(media.artist or "-", style="dim")
    return text


def render_help_panel() -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold cyan")
    table.add_column("Action")
    for key, action in HELP_LINES:
        table.add_row(key, action)
    return Panel(table, title="Help", border_style="bright_cyan")


def render_footer(snapshot: DashboardSnapshot, terminal_width: int) -> Text:
    ages = " ".join(f"{name}:{human_age(age)}" for name, age in snapshot.source_ages)
    hint = "q quit | space play/pause | n/p track | r refresh | ? help"
    line = f"{hint} | {ages}" if ages else hint
    return Text(truncate(line, max(40, terminal_width - 4)), style="dim")


def build_dashboard(snapshot: DashboardSnapshot, terminal_width: int = 120) -> Layout:
    left = Layout(name="left", ratio=3)
    left.split_column(
        Layout(Panel(render_sports_table(snapshot), title="SPORTS", border_style="yellow"), name="sports"),
        Layout(Panel(render_news_table(snapshot), title="GEOPOLITICS", border_style="red"), name="news"),
        Layout(Panel(render_finance(snapshot), title="FINANCIAL", border_style="green"), name="finance"),
    )

    middle = Layout(name="middle", ratio=3)
    middle.split_column(
        Layout(Panel(render_flights_table(snapshot), title="AVIATION", border_style="cyan"), name="flights"),
        Layout(Panel(render_map_table(snapshot), title="WORLD MAP", border_style="cyan"), name="map"),
    )

    right = Layout(name="right", ratio=2)
    right.split_column(
        Layout(Panel(render_pizza(snapshot.pizza), title="PIZZA INDEX", border_style="yellow"), name="pizza", size=5),
        Layout(Panel(render_predictions_table(snapshot), title="FORECASTS", border_style="magenta"), name="forecasts"),
        Layout(Panel(render_trade_table(snapshot), title="LOGISTICS", border_style="blue"), name="trade"),
        Layout(Panel(render_notices(snapshot), title="OFFICIAL COMMS", border_style="white"), name="comms"),
        Layout(Panel(render_media(snapshot.media), title="NOW PLAYING", border_style="green"), name="media", size=4),
    )

    body = Layout(name="body")
    if snapshot.show_help:
        body.split_row(left, middle, Layout(render_help_panel(), name="help", ratio=2))
    else:
        body.split_row(left, middle, right)

    root = Layout(name="root")
    root.split_column(
        Layout(render_header(snapshot), name="header", size=3),
        body,
        Layout(render_footer(snapshot, terminal_width), name="footer", size=1),
    )
    return root
