"""Console output: header, duration table, listening banner."""
from rich.console import Console
from rich.table import Table

from .config import APP_VERSION, FALLBACK_DURATION
from .utils import fmt_time

console = Console()


def print_header():
    console.print(
        f"\n  [bold cyan]♪  Sync Radio[/bold cyan]"
        f"  [dim]v{APP_VERSION}[/dim]"
    )


def print_durations(playlist, durations: dict[str, float]):
    """Show what the clock will use for every track."""
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("#", style="dim", justify="right")
    table.add_column("Track")
    table.add_column("Length", justify="right")

    for i, track in enumerate(playlist):
        if track in durations:
            length = f"{fmt_time(durations[track])} [dim]({durations[track]:.2f}s)[/dim]"
        else:
            length = f"[yellow]{FALLBACK_DURATION:.1f}s default[/yellow]"
        table.add_row(str(i + 1), track, length)

    console.print(table)
    console.print("")


def print_listening(host: str, port: int, ws_path: str = "/ws"):
    console.print(
        f"  [green]▶[/green]  Server running on [bold]http://{host}:{port}[/bold]"
        f"  [dim](clients: ws://{host}:{port}{ws_path})[/dim]\n"
    )
