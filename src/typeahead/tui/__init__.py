"""Interactive product search TUI.

Provides a Textual-based terminal search box with a debounced,
incrementally loaded suggestion dropdown and a detail panel for the
chosen product.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typeahead.config import SearchConfig


def run_tui(config: SearchConfig | None = None) -> None:
    """Build the HTTP client, cache executor and app, then run the TUI.

    All imports are deferred for fast module loading.

    Args:
        config: Search configuration; loaded from disk/env when None.
    """
    from typeahead.config import load_config
    from typeahead.search import CachingPageExecutor, ProductSearchClient
    from typeahead.telemetry import configure_file_logging, remove_file_logging
    from typeahead.tui.app import SearchApp

    if config is None:
        config = load_config()
    configure_file_logging(config.log_dir)

    client = ProductSearchClient(
        config.base_url,
        page_size=config.page_size,
        timeout=config.request_timeout_seconds,
    )
    executor = CachingPageExecutor(client.fetch_page, stale_time=config.stale_time_seconds)
    app = SearchApp(executor=executor, config=config, search_client=client)
    try:
        app.run()
    finally:
        remove_file_logging()
