"""Detail panel for the committed product."""

from __future__ import annotations

from textual.widgets import Static

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from typeahead.models import Product


class ProductDetail(Static):
    """Shows title, category, image reference and price of the committed product."""

    DEFAULT_CSS = """
    ProductDetail {
        margin: 1 1 0 1;
        height: auto;
    }
    ProductDetail.-empty {
        display: none;
    }
    """

    def __init__(self) -> None:
        super().__init__("", id="product-detail", classes="-empty")
        self.product: Product | None = None

    def show_product(self, product: Product | None) -> None:
        if product == self.product:
            return
        self.product = product
        if product is None:
            self.add_class("-empty")
            self.update("")
            return

        lines = [Text(f"Category: {product.category or '-'}")]
        if product.image:
            lines.append(Text(f"Image: {product.image}", style="dim"))
        if product.price is not None:
            lines.append(Text(f"Price: ${product.price:,.2f}", style="bold green"))
        self.update(Panel(Group(*lines), title=product.title, title_align="left"))
        self.remove_class("-empty")
