from typing import Optional, Tuple

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Markdown

from api.errors import user_message
from api.models import BuyerProduct
from utils.pure import format_money


class ProductDetailModal(ModalScreen[Optional[Tuple[BuyerProduct, int]]]):
    """
    Fresh copy of one product with a quantity picker. Dismissed with
    (product, quantity) when the buyer adds it to the cart, None otherwise.
    """

    def __init__(self, product: BuyerProduct):
        super().__init__()
        self.product = product

    def compose(self) -> ComposeResult:
        with Container(id="div-dialog"):
            yield Markdown(self._describe(), id="md-product")
            yield Label("Quantity", id="caption")
            yield Input("1", id="input-quantity", type="integer")
            with Horizontal(id="dialog"):
                yield Button("Close", id="btn-secondary")
                yield Button("Add to Cart", variant="primary", id="btn-primary")

    def on_mount(self):
        self.query_one("#input-quantity").focus()
        self.load_detail()

    def _describe(self) -> str:
        return f"### {self.product.description}\n\nPrice: {format_money(self.product.retail_price)}"

    @work(exclusive=True)
    async def load_detail(self) -> None:
        result = await self.app.state.buyer_catalog.detail(self.app.state.session.token, self.product.id)
        if not result.ok:
            # the listed copy stays on screen
            self.notify(user_message(result.error, "Unable to load product."), severity="error")
            return
        self.product = result.value
        await self.query_one("#md-product", Markdown).update(self._describe())

    def _submit(self) -> None:
        raw = self.query_one("#input-quantity", Input).value.strip()
        try:
            quantity = int(raw)
        except ValueError:
            self.notify("Quantity must be a whole number.", severity="error")
            return
        if quantity <= 0:
            self.notify("Quantity must be at least 1.", severity="error")
            return
        self.dismiss((self.product, quantity))

    @on(Input.Submitted, "#input-quantity")
    def handle_enter(self) -> None:
        self._submit()

    @on(Button.Pressed, "#btn-primary")
    def handle_add(self) -> None:
        self._submit()

    @on(Button.Pressed, "#btn-secondary")
    def handle_close(self) -> None:
        self.dismiss(None)
