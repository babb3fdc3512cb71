from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Label

from utils.messages import ModeSwitchedMessage
from utils.pure import format_money
from views.base_screen import BaseScreen
from views.scr_product_detail import ProductDetailModal


class WatchlistScreen(BaseScreen):
    """
    Products on the buyer's watchlist, with removal and add-to-cart.
    """

    def __init__(self) -> None:
        super().__init__(sub_title="Watchlist")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-watchlist")
        with Horizontal(id="hort-buttons"):
            yield Button("Refresh", id="btn-refresh")
            yield Button("Details", id="btn-details")
            yield Button("Remove", id="btn-remove", variant="error")
            yield Label("", id="label-watch-count")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Description", "Price")
        self.observe(self.app.state.watchlist.cell)
        self.handle_reload()

    @on(Button.Pressed, "#btn-refresh")
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @work(exclusive=True, group="watchlist")
    async def handle_reload(self) -> None:
        watchlist = self.app.state.watchlist
        result = await watchlist.load(self.token)
        if not result.ok:
            self.report(watchlist.cell.value.error)

    async def render_state(self) -> None:
        snapshot = self.app.state.watchlist.cell.value
        table = self.query_one(DataTable)
        table.clear()
        for product in snapshot.products:
            table.add_row(
                product.id,
                product.description,
                format_money(product.retail_price),
                key=str(product.id),
            )
        if not snapshot.products and not snapshot.loading:
            count = "Your watchlist is empty."
        else:
            count = f"{len(snapshot.products)} watched"
        self.query_one("#label-watch-count", Label).update(count)

    def _selected(self):
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        product_id = int(table.coordinate_to_cell_key(table.cursor_coordinate).row_key.value)
        products = self.app.state.watchlist.cell.value.products
        return next((p for p in products if p.id == product_id), None)

    @on(Button.Pressed, "#btn-remove")
    @work()
    async def handle_remove(self) -> None:
        product = self._selected()
        if product is None:
            return
        watchlist = self.app.state.watchlist
        result = await watchlist.remove(self.token, product.id)
        if result.ok:
            self.notify(f"Removed {product.description} from watchlist.")
        else:
            self.report(watchlist.cell.value.error)

    @on(Button.Pressed, "#btn-details")
    @on(DataTable.RowSelected)
    @work()
    async def handle_details(self) -> None:
        product = self._selected()
        if product is None:
            return
        picked = await self.app.push_screen_wait(ProductDetailModal(product))
        if picked is None:
            return
        product, quantity = picked
        self.app.state.cart.add(product, quantity)
        self.notify(f"Added {quantity} x {product.description} to cart.")
