"""CLI entry point for the type-ahead product search.

Provides commands:
  - search: Fetch one or more result pages for a query and print them
  - tui: Launch the interactive search box
  - logs: Browse the JSON-lines logs written by the TUI
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from typeahead.config import SearchConfig, load_config
from typeahead.exceptions import NetworkError
from typeahead.models import Page
from typeahead.telemetry import Telemetry, get_telemetry, set_telemetry

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Type-ahead product search - debounced, paginated search from the terminal",
    rich_markup_mode="rich",
)
console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to a JSON search config file"),
]


def _load(config_path: Path | None) -> SearchConfig:
    try:
        return load_config(config_path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(code=1)


async def _fetch_pages(config: SearchConfig, query: str, first_page: int, pages: int) -> list[Page]:
    """Fetch up to *pages* pages starting at *first_page*, stopping at end-of-data."""
    from typeahead.search import CachingPageExecutor, ProductSearchClient

    async with ProductSearchClient(
        config.base_url,
        page_size=config.page_size,
        timeout=config.request_timeout_seconds,
    ) as client:
        executor = CachingPageExecutor(client.fetch_page, stale_time=config.stale_time_seconds)
        fetched: list[Page] = []
        for number in range(first_page, first_page + pages):
            with get_telemetry().span(
                "search.fetch_page", **{"fetch.query": query, "fetch.page": number}
            ) as span:
                page = await executor.execute(query, number)
                span.set_attribute("fetch.item_count", len(page))
            fetched.append(page)
            if page.is_final(config.page_size):
                break
        return fetched


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Search text")],
    page: Annotated[int, typer.Option("--page", "-p", min=1, help="First page to fetch")] = 1,
    pages: Annotated[
        int, typer.Option("--pages", "-n", min=1, help="Maximum number of pages to fetch")
    ] = 1,
    config_path: ConfigOption = None,
    trace: Annotated[
        bool, typer.Option("--trace", help="Print OpenTelemetry spans to stderr")
    ] = False,
) -> None:
    """Search products and print the matching rows."""
    query = query.strip()
    if not query:
        console.print("[dim]Empty query - nothing to search.[/dim]")
        return

    config = _load(config_path)
    if trace:
        set_telemetry(Telemetry.for_console())
    try:
        fetched = asyncio.run(_fetch_pages(config, query, page, pages))
    except NetworkError as e:
        logger.warning("search %r failed: %s", query, e)
        console.print(f"[red]Search failed:[/red] {e}")
        raise typer.Exit(code=1)

    rows = [(p.number, item) for p in fetched for item in p.items]
    if not rows:
        console.print("No results found")
        return

    table = Table(title=f"Results for {query!r}", show_header=True, header_style="bold")
    table.add_column("Page", style="dim", justify="right")
    table.add_column("ID", justify="right")
    table.add_column("Title", overflow="fold")
    table.add_column("Category", style="cyan")
    table.add_column("Price", justify="right", style="green")
    for number, item in rows:
        price = f"${item.price:,.2f}" if item.price is not None else "-"
        table.add_row(str(number), str(item.id), item.title, item.category or "-", price)
    console.print(table)

    last = fetched[-1]
    more = not last.is_final(config.page_size)
    console.print(
        f"[dim]{len(rows)} results across {len(fetched)} page(s)"
        + (f"; more available from page {last.number + 1}" if more else "")
        + "[/dim]"
    )


@app.command()
def tui(
    config_path: ConfigOption = None,
    debounce_ms: Annotated[
        int | None, typer.Option("--debounce-ms", min=0, help="Quiet period before searching")
    ] = None,
    page_size: Annotated[
        int | None, typer.Option("--page-size", min=1, help="Results per page")
    ] = None,
) -> None:
    """Launch the interactive search box."""
    from dataclasses import replace

    from typeahead.tui import run_tui

    config = _load(config_path)
    overrides = {
        k: v for k, v in {"debounce_ms": debounce_ms, "page_size": page_size}.items()
        if v is not None
    }
    run_tui(replace(config, **overrides) if overrides else config)


_LEVEL_ORDER = {"DEBUG": 0, "INFO": 1, "WARNING": 2, "ERROR": 3, "CRITICAL": 4}
_LEVEL_STYLES = {
    "DEBUG": "dim",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "bold red",
    "CRITICAL": "bold red on white",
}


@app.command(name="logs")
def logs_cmd(
    level: Annotated[
        str | None,
        typer.Option("--level", "-l", help="Minimum log level to show (DEBUG, INFO, WARNING, ERROR)"),
    ] = None,
    tail: Annotated[
        int, typer.Option("--tail", "-n", help="Show only the last N entries (0 = all)")
    ] = 0,
    log_dir: Annotated[
        Path, typer.Option("--dir", help="Directory holding search-*.log files")
    ] = Path("logs"),
) -> None:
    """Browse TUI session logs.

    Reads all JSON-lines files matching ``search-*.log`` and renders them
    as a Rich table.
    """
    import json

    min_level = 0
    if level:
        if level.upper() not in _LEVEL_ORDER:
            console.print(
                f"[red]Unknown level '{level}'. Choose from: DEBUG, INFO, WARNING, ERROR[/red]"
            )
            raise typer.Exit(1)
        min_level = _LEVEL_ORDER[level.upper()]

    log_files = sorted(log_dir.glob("search-*.log")) if log_dir.exists() else []
    if not log_files:
        console.print(f"[dim]No log files found in {log_dir}/[/dim]")
        return

    rows: list[dict] = []
    for log_file in log_files:
        with log_file.open(encoding="utf-8") as fh:
            for raw_line in fh:
                raw_line = raw_line.strip()
                if not raw_line:
                    continue
                try:
                    entry = json.loads(raw_line)
                except json.JSONDecodeError:
                    continue
                if _LEVEL_ORDER.get(entry.get("level", "INFO"), 0) < min_level:
                    continue
                rows.append(entry)

    if not rows:
        console.print("[dim]No log entries matched the given filters.[/dim]")
        return
    if tail > 0:
        rows = rows[-tail:]

    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("Timestamp", style="dim", no_wrap=True, min_width=19)
    table.add_column("Level", no_wrap=True, min_width=7)
    table.add_column("Trace", style="dim", no_wrap=True, min_width=8)
    table.add_column("Message", overflow="fold")
    for entry in rows:
        entry_level = entry.get("level", "INFO")
        table.add_row(
            entry.get("ts", ""),
            f"[{_LEVEL_STYLES.get(entry_level, 'white')}]{entry_level}[/]",
            entry.get("trace", "")[:8],
            entry.get("msg", ""),
        )
    console.print(table)


if __name__ == "__main__":
    app()
