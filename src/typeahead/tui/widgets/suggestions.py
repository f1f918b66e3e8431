"""Suggestion dropdown backed by Textual's OptionList.

OptionList renders only the lines in view, which makes it the windowed
list for large, incrementally loaded result sets. The list never takes
focus, so clicking a row does not blur the search bar.
"""

from __future__ import annotations

from textual.widgets import OptionList
from textual.widgets.option_list import Option

from rich.text import Text

from typeahead.models import Product
from typeahead.tui.messages import ScrolledNearEnd


def render_row(product: Product) -> Text:
    """One dropdown line: title, then category dimmed."""
    text = Text(product.title, overflow="ellipsis", no_wrap=True)
    if product.category:
        text.append(f"  {product.category}", style="dim")
    return text


class SuggestionList(OptionList):
    """Dropdown of product suggestions with scroll reporting."""

    DEFAULT_CSS = """
    SuggestionList {
        height: auto;
        max-height: 10;
        margin: 0 1;
    }
    """

    can_focus = False

    def __init__(self) -> None:
        super().__init__(id="suggestions")
        self._rendered: tuple[Product, ...] = ()

    def on_mount(self) -> None:
        self.watch(self, "scroll_y", self._report_scroll, init=False)

    def _report_scroll(self, scroll_y: float) -> None:
        self.post_message(
            ScrolledNearEnd(
                scroll_top=scroll_y,
                scroll_height=self.virtual_size.height,
                client_height=self.scrollable_content_region.height,
            )
        )

    @property
    def rendered_count(self) -> int:
        return len(self._rendered)

    def show_products(self, products: tuple[Product, ...]) -> None:
        """Sync the options with *products*, appending when only new pages arrived."""
        if products is self._rendered:
            return
        count = self.rendered_count
        if count and len(products) >= count and products[:count] == self._rendered:
            self.add_options([Option(render_row(p)) for p in products[count:]])
        else:
            self.clear_options()
            self.add_options([Option(render_row(p)) for p in products])
        self._rendered = products

    def show_highlight(self, index: int) -> None:
        target = index if 0 <= index < self.option_count else None
        if self.highlighted != target:
            self.highlighted = target
