"""Search bar widget forwarding navigation keys to the dropdown.

Extends Textual's Input. Typing is handled by Input itself (the App
listens for Input.Changed); up/down/enter/escape are intercepted before
Input sees them and posted as NavigationKey. Tab is reported but not
consumed, so focus still moves on.
"""

from __future__ import annotations

from textual import events
from textual.widgets import Input

from typeahead.tui.messages import NavigationKey


class SearchBar(Input):
    """Product search input."""

    DEFAULT_CSS = """
    SearchBar {
        dock: top;
        height: 3;
        margin: 0 1;
    }
    """

    CAPTURED_KEYS = frozenset({"up", "down", "enter", "escape"})

    def __init__(self) -> None:
        super().__init__(placeholder="Search products...", id="search-bar")

    def on_key(self, event: events.Key) -> None:
        if event.key in self.CAPTURED_KEYS:
            event.prevent_default()
            event.stop()
            self.post_message(NavigationKey(event.key))
        elif event.key == "tab":
            self.post_message(NavigationKey(event.key))
