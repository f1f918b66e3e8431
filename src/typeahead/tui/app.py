"""Product Search TUI Application.

Textual App wiring the SearchBar, the SuggestionList dropdown and the
ProductDetail panel to a SearchController. Widgets post messages; the App
forwards them to the controller and re-renders from every snapshot the
controller publishes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.widgets import Footer, Header, Input, OptionList, Static

from typeahead.config import SearchConfig
from typeahead.controller import SearchController
from typeahead.models import DropdownView, SearchSnapshot
from typeahead.search.executor import PageExecutor
from typeahead.telemetry import Telemetry, set_telemetry
from typeahead.tui.messages import NavigationKey, ScrolledNearEnd
from typeahead.tui.widgets import ProductDetail, SearchBar, SuggestionList

if TYPE_CHECKING:
    from typeahead.search.client import ProductSearchClient

STATUS_TEXT: dict[DropdownView, str] = {
    DropdownView.LOADING: "Loading...",
    DropdownView.POPULAR: "Popular Searches",
    DropdownView.EMPTY: "No results found",
}


class SearchApp(App):
    """Type-ahead product search terminal application."""

    TITLE = "Product Search"
    SUB_TITLE = "Type to search, arrows to choose"

    CSS = """
    #dropdown {
        height: auto;
        max-height: 14;
        margin: 0 1;
        border: round $primary;
    }

    #dropdown.-hidden {
        display: none;
    }

    #dropdown-status {
        height: auto;
        padding: 0 1;
        text-align: center;
        color: $text-muted;
    }

    #dropdown-status.-error {
        color: $error;
    }

    #loading-more {
        height: 1;
        text-align: center;
        color: $text-muted;
    }
    """

    BINDINGS = [
        ("ctrl+f", "focus_search", "Search"),
        ("ctrl+r", "retry", "Retry"),
    ]

    def __init__(
        self,
        executor: PageExecutor,
        config: SearchConfig | None = None,
        telemetry: Telemetry | None = None,
        search_client: ProductSearchClient | None = None,
    ) -> None:
        """Initialize the app around a page executor.

        Args:
            executor: Page source handed to the SearchController.
            config: Search configuration. Defaults to SearchConfig().
            telemetry: OTel tracing facade. Defaults to no-op if not provided.
            search_client: HTTP client to close on unmount, if the caller built one.
        """
        super().__init__()
        self.config = config if config is not None else SearchConfig()
        self.telemetry = telemetry if telemetry is not None else Telemetry.noop()
        set_telemetry(self.telemetry)
        self.controller = SearchController(executor, self.config)
        self._search_client = search_client
        self._snapshot_subscription = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield SearchBar()
        with Vertical(id="dropdown", classes="-hidden"):
            yield Static("", id="dropdown-status")
            yield SuggestionList()
            yield Static("", id="loading-more")
        yield ProductDetail()
        yield Footer()

    def on_mount(self) -> None:
        self.controller.start()
        self._snapshot_subscription = self.controller.snapshots.subscribe(
            on_next=self._render_snapshot,
        )
        self.query_one(SearchBar).focus()
        self.telemetry.log.info("app mounted")

    async def on_unmount(self) -> None:
        """Dispose the snapshot subscription, the controller and the HTTP client."""
        if self._snapshot_subscription is not None:
            self._snapshot_subscription.dispose()
            self._snapshot_subscription = None
        self.controller.close()
        if self._search_client is not None:
            await self._search_client.aclose()

    # ------------------------------------------------------------------
    # Widget messages -> controller
    # ------------------------------------------------------------------

    def on_input_changed(self, event: Input.Changed) -> None:
        # Programmatic updates (commit) already match the controller's text
        if event.value == self.controller.snapshot.raw_query:
            return
        self.controller.on_text_change(event.value)

    def on_navigation_key(self, event: NavigationKey) -> None:
        self.controller.on_key_down(event.key)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.controller.on_row_click(event.option_index)

    def on_scrolled_near_end(self, event: ScrolledNearEnd) -> None:
        self.controller.on_scroll_near_end(
            event.scroll_top, event.scroll_height, event.client_height
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render_snapshot(self, snapshot: SearchSnapshot) -> None:
        search_bar = self.query_one(SearchBar)
        if search_bar.value != snapshot.raw_query:
            search_bar.value = snapshot.raw_query
            search_bar.cursor_position = len(snapshot.raw_query)

        view = snapshot.view
        dropdown = self.query_one("#dropdown", Vertical)
        dropdown.set_class(view is DropdownView.HIDDEN, "-hidden")

        status = self.query_one("#dropdown-status", Static)
        suggestions = self.query_one(SuggestionList)
        if snapshot.error is not None:
            status.update(f"Error: {snapshot.error.message}")
        else:
            status.update(STATUS_TEXT.get(view, ""))
        status.set_class(snapshot.error is not None, "-error")
        status.display = bool(STATUS_TEXT.get(view)) or snapshot.error is not None

        suggestions.show_products(snapshot.results)
        suggestions.display = view is DropdownView.RESULTS
        suggestions.show_highlight(snapshot.selection.highlighted_index)

        loading_more = self.query_one("#loading-more", Static)
        loading_more.update("Loading more..." if snapshot.is_fetching_more else "")
        loading_more.display = snapshot.is_fetching_more

        self.query_one(ProductDetail).show_product(snapshot.selection.committed)

    # ------------------------------------------------------------------
    # Key binding actions
    # ------------------------------------------------------------------

    def action_focus_search(self) -> None:
        """Focus the search input bar."""
        self.query_one(SearchBar).focus()

    def action_retry(self) -> None:
        """Retry the page fetch that last failed."""
        if not self.controller.retry():
            self.notify("Nothing to retry")
