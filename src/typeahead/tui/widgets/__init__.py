"""TUI widget modules for the product search interface."""

from .detail import ProductDetail
from .search_bar import SearchBar
from .suggestions import SuggestionList

__all__ = [
    "ProductDetail",
    "SearchBar",
    "SuggestionList",
]
