from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input

from utils.messages import ModeSwitchedMessage
from utils.pure import format_money
from views.base_screen import BaseScreen
from views.modal_dialog import NumberPromptModal
from views.scr_product_detail import ProductDetailModal


class ProductsScreen(BaseScreen):
    """
    Buyer product listing with search, watchlist toggle and add-to-cart.
    """

    def __init__(self) -> None:
        super().__init__(sub_title="Products")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Input(placeholder="Search products", id="input-search")
        yield DataTable(id="table-products")
        with Horizontal(id="hort-buttons"):
            yield Button("Refresh", id="btn-refresh")
            yield Button("Details", id="btn-details")
            yield Button("Watch / Unwatch", id="btn-watch")
            yield Button("Add to Cart", id="btn-add", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Description", "Price", "Watching")
        self.observe(self.app.state.buyer_catalog.cell)
        self.observe(self.app.state.watchlist.cell)
        self.handle_reload()

    @on(Button.Pressed, "#btn-refresh")
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @work(exclusive=True, group="products")
    async def handle_reload(self) -> None:
        catalog = self.app.state.buyer_catalog
        result = await catalog.load(self.token)
        if not result.ok:
            self.report(catalog.cell.value.error)

    @on(Input.Changed, "#input-search")
    async def handle_search(self) -> None:
        await self.render_state()

    async def render_state(self) -> None:
        query = self.query_one("#input-search", Input).value
        watching = self.app.state.watchlist.ids
        table = self.query_one(DataTable)
        table.clear()
        for product in self.app.state.buyer_catalog.filtered(query):
            table.add_row(
                product.id,
                product.description,
                format_money(product.retail_price),
                "★" if product.id in watching else "",
                key=str(product.id),
            )

    def _selected(self):
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(table.cursor_coordinate).row_key
        product_id = int(row_key.value)
        products = self.app.state.buyer_catalog.cell.value.products
        return next((p for p in products if p.id == product_id), None)

    @on(Button.Pressed, "#btn-watch")
    @work()
    async def handle_watch(self) -> None:
        product = self._selected()
        if product is None:
            return
        watchlist = self.app.state.watchlist
        result = await watchlist.toggle(self.token, product.id, product)
        if not result.ok:
            self.report(watchlist.cell.value.error)

    @on(Button.Pressed, "#btn-add")
    @work()
    async def handle_add(self) -> None:
        product = self._selected()
        if product is None:
            return
        quantity = await self.app.push_screen_wait(
            NumberPromptModal(f"How many '{product.description}'?", 1)
        )
        if quantity is None or quantity <= 0:
            return
        self.app.state.cart.add(product, int(quantity))
        self.notify(f"Added {int(quantity)} x {product.description} to cart.")

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
