from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live

from .comms import CommsGenerator
from .config import MonitorConfig, parse_args
from .dashboard import build_dashboard
from .events import EventSource, terminal_input
from .feeds import build_feeds
from .media import build_media_player
from .monitor import Monitor
from .state import AggregationState, DashboardSnapshot

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_file: str, level: str) -> None:
    # The dashboard owns the screen, so without a log file logging stays silent.
    if not log_file:
        return
    logging.basicConfig(filename=log_file, level=getattr(logging, level), format=LOG_FORMAT)


def build_monitor(config: MonitorConfig) -> Monitor:
    if not config.spotify_token:
        logger.info("SPOTIFY_ACCESS_TOKEN not set; media panel stays offline.")
    player = build_media_player(config.spotify_token, timeout=config.http_timeout)
    state = AggregationState(
        history_size=config.history_size,
        notice_limit=config.notice_limit,
        keep_stale=config.keep_stale,
    )
    return Monitor(
        feeds=build_feeds(config, player),
        state=state,
        player=player,
        comms=CommsGenerator(chance=config.comms_chance),
    )


async def run_once(config: MonitorConfig, console: Console) -> int:
    monitor = build_monitor(config)
    await monitor.on_tick()
    console.print(build_dashboard(monitor.snapshot(), terminal_width=console.size.width))
    return 0


async def run_live(config: MonitorConfig, console: Console) -> int:
    monitor = build_monitor(config)
    events = EventSource(config.tick_seconds)

    with Live(
        console=console,
        screen=True,
        auto_refresh=False,
        vertical_overflow="crop",
    ) as live:

        def render(snapshot: DashboardSnapshot) -> None:
            live.update(build_dashboard(snapshot, terminal_width=console.size.width), refresh=True)

        with terminal_input(events):
            events.start()
            try:
                await monitor.run(events, render)
            finally:
                await events.close()
    logger.info("Monitor stopped")
    return 0


def run(config: MonitorConfig, console: Console) -> int:
    if config.once:
        return asyncio.run(run_once(config, console))
    return asyncio.run(run_live(config, console))


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    console = Console()
    try:
        config = parse_args(argv if argv is not None else sys.argv[1:])
    except ValueError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        return 2

    configure_logging(config.log_file, config.log_level)
    try:
        return run(config, console)
    except KeyboardInterrupt:
        console.print("\n[bold]Stopped.[/bold]")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
