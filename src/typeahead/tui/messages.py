"""Custom Textual Message types for inter-widget communication.

Widgets never call the controller directly: they post these messages and
the App forwards them to the SearchController.
"""

from __future__ import annotations

from textual.message import Message


class NavigationKey(Message):
    """Fired by the search bar for up/down/enter/escape/tab."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__()


class ScrolledNearEnd(Message):
    """Fired by the suggestion list whenever its vertical scroll offset changes.

    Carries the raw geometry; the controller decides whether the bottom
    threshold was reached.
    """

    def __init__(self, scroll_top: float, scroll_height: float, client_height: float) -> None:
        self.scroll_top = scroll_top
        self.scroll_height = scroll_height
        self.client_height = client_height
        super().__init__()
