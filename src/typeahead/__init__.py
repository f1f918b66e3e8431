"""Type-ahead product search: debounced, paginated search controller and TUI."""

__version__ = "0.1.0"

from typeahead.config import SearchConfig
from typeahead.models import (
    DropdownView,
    ErrorInfo,
    Page,
    PaginationState,
    Product,
    SearchSnapshot,
    SelectionState,
)

__all__ = [
    "DropdownView",
    "ErrorInfo",
    "Page",
    "PaginationState",
    "Product",
    "SearchConfig",
    "SearchSnapshot",
    "SelectionState",
    "__version__",
]
