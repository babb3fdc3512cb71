from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, MarkdownViewer

from api.models import OrderStatus
from utils.messages import ModeSwitchedMessage
from utils.pure import bullet_list, format_instant, format_money, generate_markdown_table
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal


class BuyerOrdersScreen(BaseScreen):
    """
    Buyer's orders, the selected order's detail, and purchase insights
    (most frequent and most recent products).
    """

    def __init__(self) -> None:
        super().__init__(sub_title="My Orders")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
            yield MarkdownViewer(id="md-insights", show_table_of_contents=False)
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh", id="btn-refresh")
            yield Button("Cancel Order", id="btn-cancel", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order No", "Placed", "Status")
        self.observe(self.app.state.buyer_orders.cell)
        self.observe(self.app.state.buyer_insights.cell)
        self.handle_refresh()

    @on(Button.Pressed, "#btn-refresh")
    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @work(exclusive=True, group="orders")
    async def handle_refresh(self) -> None:
        orders = self.app.state.buyer_orders
        result = await orders.load(self.token)
        if not result.ok:
            self.report(orders.cell.value.error)
        await self.app.state.buyer_insights.load(self.token)

    @on(DataTable.RowSelected)
    @work(exclusive=True, group="detail")
    async def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        orders = self.app.state.buyer_orders
        result = await orders.load_detail(self.token, int(event.row_key.value))
        if not result.ok:
            self.report(orders.cell.value.error)

    @on(Button.Pressed, "#btn-cancel")
    @work()
    async def handle_cancel(self) -> None:
        detail = self.app.state.buyer_orders.cell.value.detail
        if detail is None:
            return
        order_id = detail.id
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Cancel order #{order_id}?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return
        orders = self.app.state.buyer_orders
        result = await orders.cancel(self.token, order_id)
        if result.ok:
            self.notify(f"Order #{order_id} is {result.value.status.value.lower()}.")
        else:
            self.report(orders.cell.value.error)

    async def render_state(self) -> None:
        snapshot = self.app.state.buyer_orders.cell.value
        table = self.query_one(DataTable)
        cursor = table.cursor_row
        table.clear()
        for order in snapshot.orders:
            table.add_row(
                order.id,
                format_instant(order.placed_at),
                order.status.value.title(),
                key=str(order.id),
            )
        if cursor is not None and cursor < table.row_count:
            table.move_cursor(row=cursor)

        can_cancel = snapshot.detail is not None and snapshot.detail.status == OrderStatus.PROCESSING
        self.query_one("#btn-cancel", Button).disabled = not can_cancel
        await self._render_detail(snapshot.detail)
        await self._render_insights()

    async def _render_detail(self, order) -> None:
        viewer = self.query_one("#md-order-detail", MarkdownViewer)
        if order is None:
            await viewer.document.update("### Select an order to view its details.")
            return
        rows = [
            [item.description, item.quantity, format_money(item.unit_retail_price), format_money(item.subtotal)]
            for item in order.items
        ]
        md = (
            f"### Order #{order.id}\n"
            f"Placed: {format_instant(order.placed_at)}  \n"
            f"Status: {order.status.value.title()}\n\n"
            + generate_markdown_table(["Product", "Qty", "Unit Price", "Line Total"], rows, ["l", "r", "r", "r"])
            + f"\n\n**Grand Total:** {format_money(order.total)}"
        )
        await viewer.document.update(md)

    async def _render_insights(self) -> None:
        values = self.app.state.buyer_insights.values
        frequent = [f"{i.description} ({i.total_quantity})" for i in values.get("frequent") or []]
        recent = [
            f"{i.description} ({format_instant(i.last_purchased_at)})"
            for i in values.get("recent") or []
        ]
        md = (
            "### Most Frequent\n\n"
            + bullet_list(frequent)
            + "\n\n### Most Recent\n\n"
            + bullet_list(recent)
        )
        await self.query_one("#md-insights", MarkdownViewer).document.update(md)
