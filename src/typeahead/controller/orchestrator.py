"""Paginated fetch orchestration for the active settled query.

Page requests flow through a reactivex ``switch_map``: a new settled query
(or an empty one) switches away from the in-flight fetch, whose task is
cancelled through ``defer_task``. Each request also carries the query
generation it was issued for, so a response that slips past the switch is
still recognised as stale and dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

import reactivex as rx
from reactivex import operators as ops
from reactivex.subject import Subject

from typeahead.controller.rx_pipeline import defer_task
from typeahead.models import ErrorInfo, Page, PaginationState, Product
from typeahead.search.executor import PageExecutor
from typeahead.telemetry import get_telemetry

DEFAULT_PAGE_SIZE = 15


@dataclass(frozen=True)
class PageRequest:
    """One page fetch, tagged with the query generation that issued it."""

    generation: int
    query: str
    page: int


@dataclass(frozen=True)
class PageOutcome:
    """Result of a PageRequest: exactly one of ``page`` or ``error`` is set."""

    request: PageRequest
    page: Page | None = None
    error: Exception | None = None


class PaginatedQueryOrchestrator:
    """Drives sequential page fetches and accumulates the ResultSet.

    At most one fetch is in flight at a time. Fetch failures are recorded
    in ``state.last_error`` and never raised; calling ``fetch_next_page()``
    again retries the page that failed (page 1 included).

    Args:
        executor: Page source implementing ``execute(query, page)``.
        page_size: Items per full page; a shorter page marks end-of-data.
        on_change: Called after every state mutation.
    """

    def __init__(
        self,
        executor: PageExecutor,
        page_size: int = DEFAULT_PAGE_SIZE,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._executor = executor
        self._page_size = page_size
        self._on_change = on_change
        self._query = ""
        self._generation = 0
        self._results: tuple[Product, ...] = ()
        self._state = PaginationState()

        self._requests: Subject = Subject()
        self._subscription = self._requests.pipe(
            ops.switch_map(self._fetch_observable),
        ).subscribe(on_next=self._apply)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def query(self) -> str:
        return self._query

    @property
    def generation(self) -> int:
        """Bumped every time the ResultSet is replaced by a new query."""
        return self._generation

    @property
    def results(self) -> tuple[Product, ...]:
        return self._results

    @property
    def state(self) -> PaginationState:
        return self._state

    @property
    def page_size(self) -> int:
        return self._page_size

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def set_query(self, settled_query: str) -> bool:
        """Make *settled_query* the active query.

        A query equal to the active one (after stripping whitespace) is a
        no-op. Otherwise the ResultSet and pagination state are reset, any
        in-flight fetch is abandoned, and page 1 is requested unless the
        query is empty.

        Returns:
            True if the active query changed.
        """
        query = settled_query.strip()
        if query == self._query:
            return False

        self._generation += 1
        self._query = query
        self._results = ()
        self._state = PaginationState()
        get_telemetry().log.info(
            f"query settled query={query!r} generation={self._generation}",
            extra={"query": query, "generation": self._generation},
        )

        if query:
            self._request(1)
        else:
            # Switch to nothing: drops whatever was in flight
            self._requests.on_next(None)
        self._notify()
        return True

    def fetch_next_page(self) -> bool:
        """Request page ``state.next_page`` for the active query.

        No-op when the query is empty, end-of-data was reached, or a fetch
        is already in flight.

        Returns:
            True if a fetch was started.
        """
        if not self._query or not self._state.has_more or self._state.is_fetching:
            return False
        self._request(self._state.next_page)
        self._notify()
        return True

    def dispose(self) -> None:
        """Cancel any in-flight fetch and stop accepting requests."""
        self._subscription.dispose()
        self._requests.on_completed()

    # ------------------------------------------------------------------
    # Pipeline internals
    # ------------------------------------------------------------------

    def _request(self, page: int) -> None:
        self._state = replace(
            self._state,
            is_fetching_first_page=page == 1,
            is_fetching_next_page=page > 1,
            last_error=None,
        )
        self._requests.on_next(PageRequest(self._generation, self._query, page))

    def _fetch_observable(self, request: PageRequest | None):
        if request is None:
            return rx.empty()
        return defer_task(lambda: self._execute(request)).pipe(
            ops.map(lambda page: PageOutcome(request, page=page)),
            ops.catch(lambda err, _source: rx.of(PageOutcome(request, error=err))),
        )

    async def _execute(self, request: PageRequest) -> Page:
        with get_telemetry().span(
            "search.fetch_page", **{"fetch.query": request.query, "fetch.page": request.page}
        ) as span:
            try:
                page = await self._executor.execute(request.query, request.page)
            except Exception as exc:
                span.set_attribute("fetch.error", str(exc))
                raise
            span.set_attribute("fetch.item_count", len(page))
            return page

    def _apply(self, outcome: PageOutcome) -> None:
        request = outcome.request
        if request.generation != self._generation or request.page != self._state.next_page:
            get_telemetry().log.debug(
                f"stale page dropped query={request.query!r} page={request.page}",
                extra={"query": request.query, "page": request.page},
            )
            return

        if outcome.error is not None:
            self._state = replace(
                self._state,
                is_fetching_first_page=False,
                is_fetching_next_page=False,
                last_error=ErrorInfo.from_exception(outcome.error),
            )
            get_telemetry().log.error(
                f"page fetch failed query={request.query!r} page={request.page} "
                f"error={outcome.error!r}",
                extra={"query": request.query, "page": request.page},
            )
        else:
            page = outcome.page
            assert page is not None
            self._results = self._results + tuple(page.items)
            self._state = PaginationState(
                next_page=request.page + 1,
                has_more=not page.is_final(self._page_size),
            )
            get_telemetry().log.info(
                f"page loaded query={request.query!r} page={request.page} "
                f"items={len(page)} total={len(self._results)} "
                f"has_more={self._state.has_more}",
                extra={"query": request.query, "page": request.page, "items": len(page)},
            )
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()
