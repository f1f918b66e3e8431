"""Search controller core: debouncing, paginated fetch and selection."""

from .debounce import Debouncer
from .facade import Key, SearchController
from .orchestrator import PaginatedQueryOrchestrator
from .selection import DropdownSM, ResultSelection

__all__ = [
    "Debouncer",
    "DropdownSM",
    "Key",
    "PaginatedQueryOrchestrator",
    "ResultSelection",
    "SearchController",
]
