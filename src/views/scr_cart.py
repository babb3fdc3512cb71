from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, DataTable, Label, Rule

from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal, NumberPromptModal
from utils.pure import format_money


class CartScreen(BaseScreen):
    """
    Cart lines with quantity edits, removal, and order placement.
    """

    def __init__(self) -> None:
        super().__init__(sub_title="Cart")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-cart")
        yield Label("Total Cart Value: $0.00", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Edit Quantity", id="btn-edit")
            yield Button("Remove", id="btn-remove")
            yield Button("Place Order", id="btn-checkout", variant="primary")

    async def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Product", "Unit Price", "Qty", "Subtotal")
        self.observe(self.app.state.cart.cell)
        await self.render_state()

    async def render_state(self) -> None:
        snapshot = self.app.state.cart.snapshot
        table = self.query_one(DataTable)
        table.clear()
        for item in snapshot.items:
            table.add_row(
                item.description,
                format_money(item.unit_price),
                item.quantity,
                format_money(item.subtotal),
                key=str(item.product_id),
            )
        self.query_one("#label-cart-total", Label).update(
            f"Total Cart Value: {format_money(snapshot.total)}"
        )
        self.query_one("#btn-checkout", Button).disabled = snapshot.submitting

    def _selected_product_id(self):
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(table.cursor_coordinate).row_key
        return int(row_key.value)

    @on(Button.Pressed, "#btn-edit")
    @work()
    async def handle_edit(self) -> None:
        cart = self.app.state.cart
        product_id = self._selected_product_id()
        if product_id is None:
            return
        line = cart.get(product_id)
        quantity = await self.app.push_screen_wait(
            NumberPromptModal(f"Quantity for {line.description}", line.quantity)
        )
        if quantity is not None:
            cart.update_quantity(product_id, int(quantity))

    @on(Button.Pressed, "#btn-remove")
    def handle_remove(self) -> None:
        product_id = self._selected_product_id()
        if product_id is not None:
            self.app.state.cart.remove(product_id)
            self.notify("Item removed from cart.")

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        cart = self.app.state.cart
        if cart.snapshot.is_empty:
            self.notify("Cart is empty.", severity="warning")
            return
        if await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        ):
            cart.clear()

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        cart = self.app.state.cart
        if not cart.snapshot.is_empty and not await self.app.push_screen_wait(
            DialogModal(
                f"Place order for {format_money(cart.total)}?",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
            )
        ):
            return

        result = await cart.place_order(self.token)
        if result.ok:
            self.notify(f"Order placed. Your order number is {result.value.id}.")
        else:
            self.report(cart.snapshot.error)
