from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Label, MarkdownViewer

from api.models import OrderStatus
from utils.messages import ModeSwitchedMessage
from utils.pure import format_instant, format_money, generate_markdown_table
from views.base_screen import BaseScreen


class AdminOrdersScreen(BaseScreen):
    """
    Every order across all pages. Rows appear page by page while loading.
    """

    def __init__(self) -> None:
        super().__init__(sub_title="Orders")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh", id="btn-refresh")
            yield Label("", id="label-order-count")
            yield Button("Complete", id="btn-complete", variant="success")
            yield Button("Cancel", id="btn-cancel", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order No", "Placed", "Buyer", "Status")
        self.observe(self.app.state.admin_orders.cell)
        self.handle_refresh()

    @on(Button.Pressed, "#btn-refresh")
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @work(exclusive=True, group="orders")
    async def handle_refresh(self) -> None:
        orders = self.app.state.admin_orders
        result = await orders.load_all(self.token)
        if not result.ok:
            self.report(orders.cell.value.error)

    def _shown_order_id(self):
        detail = self.app.state.admin_orders.cell.value.detail
        return detail.id if detail is not None else None

    @on(DataTable.RowSelected)
    @work(exclusive=True, group="detail")
    async def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        orders = self.app.state.admin_orders
        result = await orders.load_detail(self.token, int(event.row_key.value))
        if not result.ok:
            self.report(orders.cell.value.error)

    @on(Button.Pressed, "#btn-complete")
    @work()
    async def handle_complete(self) -> None:
        order_id = self._shown_order_id()
        if order_id is None:
            return
        orders = self.app.state.admin_orders
        result = await orders.complete(self.token, order_id)
        if not result.ok:
            self.report(orders.cell.value.error)

    @on(Button.Pressed, "#btn-cancel")
    @work()
    async def handle_cancel(self) -> None:
        order_id = self._shown_order_id()
        if order_id is None:
            return
        orders = self.app.state.admin_orders
        result = await orders.cancel(self.token, order_id)
        if not result.ok:
            self.report(orders.cell.value.error)

    async def render_state(self) -> None:
        snapshot = self.app.state.admin_orders.cell.value
        table = self.query_one(DataTable)
        cursor = table.cursor_row
        table.clear()
        for order in snapshot.orders:
            table.add_row(
                order.id,
                format_instant(order.placed_at),
                order.buyer_username or "-",
                order.status.value.title(),
                key=str(order.id),
            )
        if cursor is not None and cursor < table.row_count:
            table.move_cursor(row=cursor)

        suffix = " (loading...)" if snapshot.loading else ""
        self.query_one("#label-order-count", Label).update(f"{len(snapshot.orders)} orders{suffix}")

        processing = snapshot.detail is not None and snapshot.detail.status == OrderStatus.PROCESSING
        self.query_one("#btn-complete", Button).disabled = not processing
        self.query_one("#btn-cancel", Button).disabled = not processing
        await self._render_detail(snapshot.detail)

    async def _render_detail(self, order) -> None:
        viewer = self.query_one("#md-order-detail", MarkdownViewer)
        if order is None:
            await viewer.document.update("### Select an order to view its details.")
            return
        rows = [
            [
                item.description,
                item.quantity,
                format_money(item.unit_wholesale_price),
                format_money(item.unit_retail_price),
            ]
            for item in order.items
        ]
        md = (
            f"### Order #{order.id}\n"
            f"Buyer: {order.buyer_username or '-'}  \n"
            f"Placed: {format_instant(order.placed_at)}  \n"
            f"Status: {order.status.value.title()}\n\n"
            + generate_markdown_table(
                ["Product", "Qty", "Wholesale", "Retail"], rows, ["l", "r", "r", "r"]
            )
        )
        await viewer.document.update(md)
