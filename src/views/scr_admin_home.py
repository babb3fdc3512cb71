from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import Button, MarkdownViewer

from utils.messages import ModeSwitchedMessage
from utils.pure import bullet_list, format_instant, format_money
from views.base_screen import BaseScreen


class AdminHomeScreen(BaseScreen):
    """
    Admin dashboard: latest orders, catalog size, profit leader, most popular
    products and total items sold.
    """

    def __init__(self) -> None:
        super().__init__(sub_title="Dashboard")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-dashboard", show_table_of_contents=False)
            yield Button("Refresh", id="btn-refresh")

    def on_mount(self) -> None:
        self.observe(self.app.state.admin_dashboard.cell)
        self.handle_reload()

    @on(Button.Pressed, "#btn-refresh")
    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        dashboard = self.app.state.admin_dashboard
        result = await dashboard.load(self.token)
        if not result.ok:
            self.report(dashboard.cell.value.error)

    async def render_state(self) -> None:
        values = self.app.state.admin_dashboard.values
        orders = values.get("orders") or []
        products = values.get("products") or []
        profit = values.get("profit")
        popular = values.get("popular") or []
        total_sold = values.get("total_sold")

        if profit is not None:
            profit_md = f"{profit.description or '-'}: {format_money(profit.total_profit)}"
        else:
            profit_md = "_Unavailable._"

        md = (
            "### Summary\n\n"
            f"- Products in catalog: {len(products)}\n"
            f"- Total items sold: {total_sold.total_items if total_sold else '-'}\n"
            f"- Most profitable: {profit_md}\n\n"
            "### Most Popular\n\n"
            + bullet_list([f"{p.description} ({p.total_quantity} sold)" for p in popular])
            + "\n\n### Latest Orders\n\n"
            + bullet_list(
                [
                    f"#{o.id} {format_instant(o.placed_at)} "
                    f"{o.buyer_username or '-'} {o.status.value.title()}"
                    for o in orders
                ]
            )
        )
        await self.query_one("#md-dashboard", MarkdownViewer).document.update(md)
