"""Startup preflight check. Any failure stops the server before it listens."""
from urllib.parse import urlparse

from rich.panel import Panel
from rich.table import Table

from .config import ALLOWED_ORIGINS, APP_VERSION, BASE_URL, TICK_INTERVAL
from .ui import console


async def run_preflight(
    base_url: str = BASE_URL,
    allowed_origins: list[str] = ALLOWED_ORIGINS,
    tick_interval: float = TICK_INTERVAL,
) -> bool:
    """
    Run all startup checks. Print results. Return True only if ALL pass.
    """
    console.print(f"\n  [bold]♪  Sync Radio v{APP_VERSION}[/bold] preflight check\n")

    checks = [
        ("Python deps", _check_python_deps),
        ("Media base URL", lambda: _check_base_url(base_url)),
        ("Allowed origins", lambda: _check_origins(allowed_origins)),
        ("Tick interval", lambda: _check_tick_interval(tick_interval)),
    ]

    table = Table(box=None, show_header=False, padding=(0, 1))
    table.add_column(justify="right", style="dim")
    table.add_column()
    table.add_column()

    fixes: dict[str, str] = {}
    for step, (label, fn) in enumerate(checks, 1):
        ok, msg, fix = await fn()
        mark = "[green]✓[/green]" if ok else "[red]✗[/red]"
        colour = "green" if ok else "red"
        table.add_row(f"{step}/{len(checks)}", label, f"{mark} [{colour}]{msg}[/{colour}]")
        if not ok:
            fixes[label] = fix

    console.print(table)
    console.print("")

    for label, fix in fixes.items():
        console.print(Panel(fix.strip(), title=f"[yellow]{label}[/yellow]", border_style="yellow", expand=False))
    if fixes:
        console.print("  Then start again: [bold]python radio.py[/bold]\n")
    return not fixes


async def _check_python_deps() -> tuple[bool, str, str]:
    missing = []
    versions = []
    try:
        import httpx as hx
        versions.append(f"httpx {hx.__version__}")
    except ImportError:
        missing.append("httpx")

    try:
        import mutagen
        versions.append(f"mutagen {mutagen.version_string}")
    except ImportError:
        missing.append("mutagen")

    try:
        import starlette
        versions.append(f"starlette {starlette.__version__}")
    except ImportError:
        missing.append("starlette")

    try:
        import uvicorn
        versions.append(f"uvicorn {uvicorn.__version__}")
    except ImportError:
        missing.append("uvicorn")

    if missing:
        return False, f"missing: {', '.join(missing)}", "Run: pip install -e ."
    return True, ", ".join(versions), ""


async def _check_base_url(base_url: str) -> tuple[bool, str, str]:
    if not base_url:
        return False, "not set", "Set R2_BASE_URL in .env to the folder holding 1.mp3, 2.mp3 and 3.mp3"
    parsed = urlparse(base_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False, f"not an http(s) URL: {base_url}", "R2_BASE_URL must look like https://media.example.com/radio"
    return True, base_url, ""


async def _check_origins(allowed_origins: list[str]) -> tuple[bool, str, str]:
    if not allowed_origins:
        return False, "empty", "Set ALLOWED_ORIGINS to a comma-separated list, e.g. http://localhost:5173"
    return True, ", ".join(allowed_origins), ""


async def _check_tick_interval(tick_interval: float) -> tuple[bool, str, str]:
    if tick_interval <= 0:
        return False, f"{tick_interval}s", "TICK_INTERVAL must be a positive number of seconds (default 0.1)"
    return True, f"{tick_interval * 1000:.0f} ms", ""
