from typing import Dict, Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from api.models import Role
from stores.guard import Decision, authorize
from utils.logger import get_logger
from utils.messages import ModeSwitchedMessage, QuitRequestedMessage, UserLogoutMessage
from utils.state import AppState
from views.scr_admin_home import AdminHomeScreen
from views.scr_admin_orders import AdminOrdersScreen
from views.scr_admin_products import AdminProductsScreen
from views.scr_cart import CartScreen
from views.scr_login import LoginScreen
from views.scr_orders import BuyerOrdersScreen
from views.scr_products import ProductsScreen
from views.scr_watchlist import WatchlistScreen

_logger = get_logger(__name__)


class MartApp(App):
    TITLE = "MyOnlineMart"

    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "products": ProductsScreen,
        "watchlist": WatchlistScreen,
        "cart": CartScreen,
        "orders": BuyerOrdersScreen,
        "admin_home": AdminHomeScreen,
        "admin_orders": AdminOrdersScreen,
        "admin_products": AdminProductsScreen,
    }

    BUYER_MODES = {
        "products": "Products",
        "watchlist": "Watchlist",
        "cart": "Cart",
        "orders": "My Orders",
    }
    ADMIN_MODES = {
        "admin_home": "Dashboard",
        "admin_orders": "Orders",
        "admin_products": "Inventory Management",
    }
    MODE_ROLES = {
        **{mode: Role.BUYER for mode in BUYER_MODES},
        **{mode: Role.ADMIN for mode in ADMIN_MODES},
    }
    HOME_MODES = {Role.BUYER: "products", Role.ADMIN: "admin_home"}

    CSS = """
    Sidebar {
        dock: left;
        width: 30;
        padding: 0 1;
    }
    DataTable {
        height: 1fr;
    }
    Horizontal {
        height: auto;
    }
    """

    state: AppState

    def __init__(self, state: Optional[AppState] = None):
        super().__init__()
        self.state = state or AppState.build()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    def modes_for(self, role: Optional[Role]) -> Dict[str, str]:
        if role == Role.ADMIN:
            return self.ADMIN_MODES
        if role == Role.BUYER:
            return self.BUYER_MODES
        return {}

    @work(group="navigation")
    async def open_mode(self, mode: str):
        """
        Switch to a mode if the session may see it, otherwise sign in first.
        """
        decision = authorize(self.state.session.session, self.MODE_ROLES.get(mode))
        if decision is Decision.REDIRECT_LOGIN:
            _logger.info(f"Navigation to '{mode}' redirected to login")
            self.main_flow()
            return
        self.post_message(ModeSwitchedMessage(self.current_mode, mode))
        await self.switch_mode(mode)

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.state.session.sign_out()
        self.state.reset()
        self.notify("Logout successful.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()

    @work(exclusive=True, group="main_flow")
    async def main_flow(self):
        session = self.state.session
        await session.restore()
        if not session.is_authenticated:
            await self.push_screen_wait(LoginScreen())
        home = self.HOME_MODES.get(session.role)
        if home is None:
            _logger.warning(f"No home mode for role {session.role}")
            return
        self.open_mode(home)


def run() -> None:
    MartApp().run()


if __name__ == "__main__":
    run()
