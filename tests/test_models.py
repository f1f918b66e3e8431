"""Tests for the snapshot view rules and model helpers."""

from __future__ import annotations

import pytest

from typeahead.exceptions import NetworkError, ResponseFormatError
from typeahead.models import (
    DropdownView,
    ErrorInfo,
    Page,
    PaginationState,
    Product,
    SearchSnapshot,
    SelectionState,
)
from typeahead.search.schemas import ProductRecord

OPEN = SelectionState(is_open=True)
ERROR = ErrorInfo(kind="network", message="down")


@pytest.mark.parametrize(
    "snapshot, expected",
    [
        (SearchSnapshot(settled_query="a", is_loading=True), DropdownView.HIDDEN),
        (SearchSnapshot(settled_query="a", is_loading=True, selection=OPEN), DropdownView.LOADING),
        (SearchSnapshot(settled_query="a", error=ERROR, selection=OPEN), DropdownView.ERROR),
        (SearchSnapshot(settled_query="", selection=OPEN), DropdownView.POPULAR),
        (SearchSnapshot(settled_query="zzz", selection=OPEN), DropdownView.EMPTY),
        (
            SearchSnapshot(settled_query="a", results=(Product(1, "a"),), error=ERROR, selection=OPEN),
            DropdownView.RESULTS,
        ),
    ],
)
def test_dropdown_view(snapshot, expected):
    assert snapshot.view == expected


def test_highlighted_product():
    results = (Product(1, "a"), Product(2, "b"))
    snap = SearchSnapshot(results=results, selection=SelectionState(highlighted_index=1, is_open=True))
    assert snap.highlighted == results[1]
    assert SearchSnapshot(results=results).highlighted is None


def test_pagination_state_is_fetching():
    assert PaginationState().is_fetching is False
    assert PaginationState(is_fetching_next_page=True).is_fetching is True


def test_error_info_kinds():
    assert ErrorInfo.from_exception(NetworkError("down")) == ErrorInfo("network", "down")
    assert ErrorInfo.from_exception(ResponseFormatError("bad")).kind == "format"
    assert ErrorInfo.from_exception(TimeoutError()).message == "TimeoutError"


def test_product_from_record():
    record = ProductRecord.model_validate({"id": 3, "title": "Cap", "price": 5, "color": "red"})
    product = Product.from_record(record)

    assert product == Product(id=3, title="Cap", price=5.0)
    assert product.extra == {"color": "red"}
    assert product.image == ""


@pytest.mark.parametrize(
    "count, is_last, final",
    [(15, False, False), (7, False, True), (0, False, True), (15, True, True)],
)
def test_page_is_final(product_factory, count, is_last, final):
    page = Page(number=1, items=product_factory("p", count), is_last=is_last)
    assert len(page) == count
    assert page.is_final(15) is final
