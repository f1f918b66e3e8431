"""Data models and enums for the type-ahead search controller."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from typeahead.exceptions import ResponseFormatError


@dataclass(frozen=True, slots=True)
class Product:
    """A single search result as shown in the dropdown and detail panel.

    Identity is by ``id``; ``extra`` carries any display fields the remote
    endpoint returns beyond the ones the UI knows about.
    """

    id: int
    title: str
    category: str = ""
    image: str = ""
    price: float | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_record(cls, record: Any) -> Product:
        """Build a Product from a validated ``ProductRecord``."""
        return cls(
            id=record.id,
            title=record.title,
            category=record.category or "",
            image=record.image or "",
            price=record.price,
            extra=dict(record.model_extra or {}),
        )


@dataclass(frozen=True, slots=True)
class Page:
    """One fetch's worth of products, tagged with its 1-based page number."""

    number: int
    items: tuple[Product, ...] = ()
    is_last: bool = False

    def __len__(self) -> int:
        return len(self.items)

    def is_final(self, page_size: int) -> bool:
        """True when no page follows this one: short page or explicit last page."""
        return self.is_last or len(self.items) < page_size


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    """User-presentable description of a failed fetch."""

    kind: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorInfo:
        kind = "format" if isinstance(exc, ResponseFormatError) else "network"
        return cls(kind=kind, message=str(exc) or type(exc).__name__)


@dataclass(frozen=True, slots=True)
class PaginationState:
    """Progress of the paginated fetch for the active settled query."""

    next_page: int = 1
    has_more: bool = True
    is_fetching_first_page: bool = False
    is_fetching_next_page: bool = False
    last_error: ErrorInfo | None = None

    @property
    def is_fetching(self) -> bool:
        return self.is_fetching_first_page or self.is_fetching_next_page


@dataclass(frozen=True, slots=True)
class SelectionState:
    """Highlight, dropdown visibility and committed product.

    ``highlighted_index == -1`` means no row is highlighted.
    """

    highlighted_index: int = -1
    is_open: bool = False
    committed: Product | None = None


class DropdownView(str, Enum):
    """What the dropdown shows for a given snapshot."""

    HIDDEN = "hidden"
    LOADING = "loading"
    ERROR = "error"
    POPULAR = "popular"
    EMPTY = "empty"
    RESULTS = "results"


@dataclass(frozen=True, slots=True)
class SearchSnapshot:
    """Everything the presentation layer needs to render one frame."""

    raw_query: str = ""
    settled_query: str = ""
    results: tuple[Product, ...] = ()
    is_loading: bool = False
    is_fetching_more: bool = False
    has_more: bool = True
    error: ErrorInfo | None = None
    selection: SelectionState = field(default_factory=SelectionState)

    @property
    def view(self) -> DropdownView:
        """Resolve the dropdown content; the first matching rule wins."""
        if not self.selection.is_open:
            return DropdownView.HIDDEN
        if self.is_loading:
            return DropdownView.LOADING
        if self.error is not None and not self.results:
            return DropdownView.ERROR
        if not self.settled_query.strip():
            return DropdownView.POPULAR
        if not self.results:
            return DropdownView.EMPTY
        return DropdownView.RESULTS

    @property
    def highlighted(self) -> Product | None:
        index = self.selection.highlighted_index
        if 0 <= index < len(self.results):
            return self.results[index]
        return None
