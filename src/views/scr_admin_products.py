from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label

from utils.messages import ModeSwitchedMessage
from utils.pure import format_money
from views.base_screen import BaseScreen
from views.modal_dialog import NumberPromptModal


class AdminProductsScreen(BaseScreen):
    """
    Catalog management: list, add, and edit price / stock of products.
    """

    def __init__(self) -> None:
        super().__init__(sub_title="Inventory Management")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-products")
        with Horizontal(id="hort-new-product"):
            yield Input(placeholder="Description", id="input-descr")
            yield Input(placeholder="Wholesale", id="input-wholesale", type="number")
            yield Input(placeholder="Retail", id="input-retail", type="number")
            yield Input(placeholder="Stock", id="input-stock", type="integer")
            yield Button("Add", id="btn-add", variant="primary")
        with Horizontal(id="hort-buttons"):
            yield Button("Refresh", id="btn-refresh")
            yield Button("Edit Retail Price", id="btn-edit-price")
            yield Button("Edit Stock", id="btn-edit-stock")
            yield Label("", id="label-product-count")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Description", "Wholesale", "Retail", "Stock")
        self.observe(self.app.state.admin_catalog.cell)
        self.handle_reload()

    @on(Button.Pressed, "#btn-refresh")
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @work(exclusive=True, group="products")
    async def handle_reload(self) -> None:
        catalog = self.app.state.admin_catalog
        result = await catalog.load(self.token)
        if not result.ok:
            self.report(catalog.cell.value.error)

    async def render_state(self) -> None:
        products = self.app.state.admin_catalog.products
        table = self.query_one(DataTable)
        cursor = table.cursor_row
        table.clear()
        for p in products:
            table.add_row(
                p.id,
                p.description,
                format_money(p.wholesale_price),
                format_money(p.retail_price),
                p.stock_quantity,
                key=str(p.id),
            )
        if cursor is not None and cursor < table.row_count:
            table.move_cursor(row=cursor)
        self.query_one("#label-product-count", Label).update(f"{len(products)} products")

    def _selected(self):
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        product_id = int(table.coordinate_to_cell_key(table.cursor_coordinate).row_key.value)
        return next((p for p in self.app.state.admin_catalog.products if p.id == product_id), None)

    @on(Button.Pressed, "#btn-add")
    @work(group="create")
    async def handle_add(self) -> None:
        values = [
            self.query_one(f"#input-{name}", Input).value.strip()
            for name in ("descr", "wholesale", "retail", "stock")
        ]
        if not all(values):
            self.notify("Make sure all inputs are filled.", severity="error")
            return
        descr, wholesale, retail, stock = values
        try:
            wholesale, retail, stock = float(wholesale), float(retail), int(stock)
        except ValueError:
            self.notify("Prices and stock must be numbers.", severity="error")
            return

        catalog = self.app.state.admin_catalog
        result = await catalog.create(self.token, descr, wholesale, retail, stock)
        if result.ok:
            self.notify(f"Product {result.value.id} created.")
            for name in ("descr", "wholesale", "retail", "stock"):
                self.query_one(f"#input-{name}", Input).value = ""
        else:
            self.report(catalog.cell.value.error)

    async def _edit(self, caption: str, field: str, initial, integer: bool) -> None:
        product = self._selected()
        if product is None:
            return
        value = await self.app.push_screen_wait(
            NumberPromptModal(f"{caption} for {product.description}", initial, integer=integer)
        )
        if value is None:
            return
        catalog = self.app.state.admin_catalog
        result = await catalog.update(self.token, product.id, **{field: value})
        if not result.ok:
            self.report(catalog.cell.value.error)

    @on(Button.Pressed, "#btn-edit-price")
    @work()
    async def handle_edit_price(self) -> None:
        product = self._selected()
        if product is not None:
            await self._edit("Retail price", "retail_price", product.retail_price, False)

    @on(Button.Pressed, "#btn-edit-stock")
    @work()
    async def handle_edit_stock(self) -> None:
        product = self._selected()
        if product is not None:
            await self._edit("Stock", "stock_quantity", product.stock_quantity, True)
