"""Sync Radio: entry point."""
import asyncio
import logging
import sys
import time

import uvicorn
from rich.logging import RichHandler

from syncradio.clock import PlaybackState, build_playlist
from syncradio.config import BASE_URL, HOST, LOG_LEVEL, PORT, TRACK_NAMES
from syncradio.durations import build_duration_table
from syncradio.engine import RadioEngine
from syncradio.errors import format_error
from syncradio.preflight import run_preflight
from syncradio.ui import console, print_durations, print_header, print_listening
from syncradio.web.server import create_app

logger = logging.getLogger("syncradio")


def setup_logging(level: str = LOG_LEVEL):
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


async def main() -> int:
    print_header()

    ok = await run_preflight()
    if not ok:
        return 1

    playlist = build_playlist(BASE_URL, TRACK_NAMES)

    # Nothing listens or ticks until every duration is known
    try:
        durations = await build_duration_table(playlist)
    except Exception as e:
        console.print(f"\n[red]{format_error('duration_table', BASE_URL, repr(e))}[/red]")
        return 1
    print_durations(playlist, durations)

    state = PlaybackState.create(playlist, durations, now=time.time())
    engine = RadioEngine(state)
    logger.info("On air: %s", state.current_track)
    app = create_app(engine)

    server = uvicorn.Server(uvicorn.Config(app, host=HOST, port=PORT, log_config=None))
    print_listening(HOST, PORT)
    try:
        await server.serve()
    except Exception as e:
        console.print(f"\n[red]{format_error('startup', f'{HOST}:{PORT}', repr(e))}[/red]")
        return 1

    # serve() returns without starting when lifespan startup fails
    if not server.started:
        console.print(f"\n[red]{format_error('startup', f'{HOST}:{PORT}', 'listener failed to start')}[/red]")
        return 1
    return 0


def run():
    setup_logging()
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        console.print("\n  [bold]Radio off.[/bold] Goodbye.\n")
        sys.exit(0)


if __name__ == "__main__":
    run()
