"""SearchController: the single contract the presentation layer talks to.

Composes the Debouncer, the PaginatedQueryOrchestrator and the
ResultSelection. Every state-changing event recomputes a ``SearchSnapshot``
and pushes it to the ``snapshots`` BehaviorSubject; renderers subscribe to
that subject instead of reading controller internals.
"""

from __future__ import annotations

from enum import Enum

from reactivex.abc import DisposableBase, SchedulerBase
from reactivex.subject import BehaviorSubject

from typeahead.config import SearchConfig
from typeahead.controller.debounce import Debouncer
from typeahead.controller.orchestrator import PaginatedQueryOrchestrator
from typeahead.controller.selection import ResultSelection
from typeahead.models import Product, SearchSnapshot
from typeahead.search.executor import PageExecutor
from typeahead.telemetry import get_telemetry


class Key(str, Enum):
    """Key names understood by ``on_key_down`` (Textual's key names)."""

    ARROW_DOWN = "down"
    ARROW_UP = "up"
    ENTER = "enter"
    ESCAPE = "escape"
    TAB = "tab"


class SearchController:
    """Type-ahead search controller facade.

    Call ``start()`` from inside the running event loop before feeding
    events, and ``close()`` on teardown.

    Args:
        executor: Page source used by the orchestrator.
        config: Debounce delay, page size and scroll threshold.
        scheduler: Optional reactivex scheduler for the debounce timers.
    """

    def __init__(
        self,
        executor: PageExecutor,
        config: SearchConfig | None = None,
        scheduler: SchedulerBase | None = None,
    ) -> None:
        self.config = config if config is not None else SearchConfig()
        self._debouncer = Debouncer(self.config.debounce_seconds, scheduler=scheduler)
        self._orchestrator = PaginatedQueryOrchestrator(
            executor,
            page_size=self.config.page_size,
            on_change=self._on_results_changed,
        )
        self._selection = ResultSelection()
        self._raw_query = ""
        self._result_generation = self._orchestrator.generation
        self._debounce_subscription: DisposableBase | None = None
        self.snapshots: BehaviorSubject = BehaviorSubject(self._compute_snapshot())

    @property
    def snapshot(self) -> SearchSnapshot:
        return self.snapshots.value

    @property
    def orchestrator(self) -> PaginatedQueryOrchestrator:
        return self._orchestrator

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> DisposableBase:
        """Subscribe to settled queries; returns the debounce disposer."""
        if self._debounce_subscription is None:
            self._debounce_subscription = self._debouncer.subscribe(self._on_settled)
        return self._debounce_subscription

    def close(self) -> None:
        """Cancel the pending debounce timer and any in-flight fetch."""
        self._debouncer.dispose()
        self._debounce_subscription = None
        self._orchestrator.dispose()
        self.snapshots.on_completed()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def on_text_change(self, text: str) -> None:
        """The user edited the search text."""
        self._raw_query = text
        self._selection.edit()
        self._debouncer.observe(text)
        self._publish()

    def on_key_down(self, key: str) -> bool:
        """Handle a navigation key.

        Returns:
            True when the dropdown consumed the key (the caller should not
            apply its default action).
        """
        was_open = self._selection.is_open
        results = self._orchestrator.results

        if key == Key.ARROW_DOWN:
            self._selection.move_down(len(results))
        elif key == Key.ARROW_UP:
            self._selection.move_up()
        elif key == Key.ENTER:
            product = self._selection.commit_highlighted(results)
            if product is not None:
                self._apply_commit(product)
        elif key == Key.ESCAPE:
            self._selection.dismiss()
        elif key == Key.TAB:
            self._selection.blur()
            self._publish()
            return False
        else:
            return False

        self._publish()
        return was_open

    def on_row_click(self, index: int) -> Product | None:
        """Pointer click on result row *index*."""
        product = self._selection.click(index, self._orchestrator.results)
        if product is not None:
            self._apply_commit(product)
            self._publish()
        return product

    def on_blur(self) -> None:
        """Focus left the search input."""
        self._selection.blur()
        self._publish()

    def on_scroll_near_end(
        self,
        scroll_top: float,
        scroll_height: float,
        client_height: float,
    ) -> bool:
        """Load the next page when the list is scrolled to its bottom.

        A list no taller than its viewport cannot scroll and never triggers.
        The bottom check allows ``config.scroll_threshold`` of slack so
        fractional scroll offsets still count as the end.

        Returns:
            True if a next-page fetch was started.
        """
        if scroll_height <= client_height:
            return False
        remaining = scroll_height - scroll_top - client_height
        if remaining > self.config.scroll_threshold:
            return False
        return self.fetch_next_page()

    def fetch_next_page(self) -> bool:
        started = self._orchestrator.fetch_next_page()
        if started:
            get_telemetry().log.info(
                f"load more query={self._orchestrator.query!r} "
                f"page={self._orchestrator.state.next_page}",
                extra={"query": self._orchestrator.query, "page": self._orchestrator.state.next_page},
            )
        return started

    def retry(self) -> bool:
        """Re-issue the fetch that last failed. No-op without an error."""
        if self._orchestrator.state.last_error is None:
            return False
        return self._orchestrator.fetch_next_page()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_settled(self, value: str) -> None:
        with get_telemetry().span("search.set_query", **{"query.raw": value}) as span:
            changed = self._orchestrator.set_query(value)
            span.set_attribute("query.changed", changed)

    def _apply_commit(self, product: Product) -> None:
        self._raw_query = product.title
        self._debouncer.observe(product.title)
        get_telemetry().log.info(
            f"product committed id={product.id} title={product.title!r}",
            extra={"product_id": product.id},
        )

    def _on_results_changed(self) -> None:
        if self._orchestrator.generation != self._result_generation:
            self._result_generation = self._orchestrator.generation
            self._selection.reset_highlight()
        self._selection.clamp(len(self._orchestrator.results))
        self._publish()

    def _compute_snapshot(self) -> SearchSnapshot:
        state = self._orchestrator.state
        return SearchSnapshot(
            raw_query=self._raw_query,
            settled_query=self._orchestrator.query,
            results=self._orchestrator.results,
            is_loading=state.is_fetching_first_page,
            is_fetching_more=state.is_fetching_next_page,
            has_more=state.has_more,
            error=state.last_error,
            selection=self._selection.snapshot(),
        )

    def _publish(self) -> None:
        if self.snapshots.is_disposed:
            return
        self.snapshots.on_next(self._compute_snapshot())
