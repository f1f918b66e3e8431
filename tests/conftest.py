"""Shared pytest fixtures for the type-ahead search tests.

Provides product/page factories, a scripted executor whose responses are
released by the test, and a polling helper for waiting on the event loop.
"""

from __future__ import annotations

import asyncio
from typing import Callable
from unittest.mock import AsyncMock

import pytest

from typeahead.config import SearchConfig
from typeahead.controller import SearchController
from typeahead.models import Page, Product


def make_products(prefix: str, count: int, start_id: int = 1) -> tuple[Product, ...]:
    """Build *count* products titled ``"<prefix> <n>"`` with sequential ids."""
    return tuple(
        Product(
            id=start_id + i,
            title=f"{prefix} {start_id + i}",
            category="electronics",
            image=f"https://img.example/{start_id + i}.png",
            price=10.0 + i,
        )
        for i in range(count)
    )


def make_page(prefix: str, number: int, count: int, page_size: int = 15) -> Page:
    """Page *number* of products, ids continuing from earlier full pages."""
    return Page(number=number, items=make_products(prefix, count, start_id=(number - 1) * page_size + 1))


class ScriptedExecutor:
    """PageExecutor whose responses are released explicitly by the test."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, int]] = []
        self._pending: dict[tuple[str, int], asyncio.Future] = {}

    async def execute(self, query: str, page: int) -> Page:
        self.calls.append((query, page))
        future = asyncio.get_running_loop().create_future()
        self._pending[(query, page)] = future
        return await future

    def is_pending(self, query: str, page: int) -> bool:
        future = self._pending.get((query, page))
        return future is not None and not future.done()

    def resolve(self, query: str, page: int, result: Page) -> None:
        future = self._pending.pop((query, page))
        if not future.done():
            future.set_result(result)

    def fail(self, query: str, page: int, exc: Exception) -> None:
        future = self._pending.pop((query, page))
        if not future.done():
            future.set_exception(exc)


@pytest.fixture
def settle() -> Callable:
    """Return an async helper that polls *predicate* until true or times out."""

    async def _settle(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met before timeout")
            await asyncio.sleep(0.005)

    return _settle


@pytest.fixture
def scripted_executor() -> ScriptedExecutor:
    return ScriptedExecutor()


@pytest.fixture
def phone_executor() -> AsyncMock:
    """Executor serving 15 items on page 1 and 7 items on page 2 for any query."""
    executor = AsyncMock()

    def respond(query: str, page: int) -> Page:
        count = {1: 15, 2: 7}.get(page, 0)
        return make_page(query, page, count)

    executor.execute.side_effect = respond
    return executor


@pytest.fixture
def fast_config() -> SearchConfig:
    """Config with a short debounce so controller tests run quickly."""
    return SearchConfig(debounce_ms=20)


@pytest.fixture
async def controller(phone_executor, fast_config):
    """Started SearchController over phone_executor, closed after the test."""
    ctl = SearchController(phone_executor, fast_config)
    ctl.start()
    yield ctl
    ctl.close()


@pytest.fixture
def page_factory() -> Callable[..., Page]:
    return make_page


@pytest.fixture
def product_factory() -> Callable[..., tuple[Product, ...]]:
    return make_products
