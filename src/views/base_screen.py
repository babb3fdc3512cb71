from typing import Callable, List

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from api.models import Role
from utils.cell import StateCell
from utils.messages import StoreChangedMessage, UserLoginMessage, UserLogoutMessage
from utils.pure import generate_markdown_table
from views.modal_dialog import DialogModal, QuitDialogModal


class Sidebar(Container):
    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        await self.show_session()

    async def show_session(self):
        session = self.app.state.session.session
        if not session.is_authenticated:
            return

        role_name = "Admin" if session.role == Role.ADMIN else "Buyer"
        table_rows = [
            ["User ID", session.user_id],
            ["Name", session.username],
            ["Role", role_name],
        ]
        await self.query_one(Markdown).update(
            generate_markdown_table(None, table_rows, ["l", "l"])
        )

        modes = self.app.modes_for(session.role)
        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [ListItem(Label(v), id="list-menu-item-" + k) for k, v in modes.items()]
        )
        self.highlight_item(self.app.current_mode)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(selected_mode)
        if self.app.current_mode != selected_mode:
            self.app.open_mode(selected_mode)

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        self.post_message(UserLogoutMessage())

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.

    Screens call `observe` in on_mount for every store cell they render; the
    subscriptions are dropped on unmount so late results never reach a
    screen that is gone.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self, sub_title: str = "", show_sidebar: bool = True):
        super().__init__()
        self.sub_title = sub_title
        self._show_sidebar = show_sidebar
        self._unsubscribers: List[Callable[[], None]] = []

    @property
    def token(self):
        return self.app.state.session.token

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    def observe(self, cell: StateCell) -> None:
        self._unsubscribers.append(
            cell.subscribe(lambda snapshot: self.post_message(StoreChangedMessage(snapshot)))
        )

    def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    async def on_store_changed_message(self, message: StoreChangedMessage) -> None:
        await self.render_state()

    async def render_state(self) -> None:
        """Redraw from the current store snapshots."""

    def report(self, error) -> None:
        if error:
            self.notify(error, severity="error")

    @on(ScreenResume)
    async def handle_sidebar_resume(self):
        # the signed-in user may have changed while this screen was hidden
        for sidebar in self.query(Sidebar):
            await sidebar.show_session()

    @on(UserLoginMessage)
    def handle_user_login(self):
        self.refresh()

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
