import asyncio
import os
import tempfile
import unittest

import httpx

from support import ORDER_JSON, FakeServer

from textual.app import App
from textual.widgets import DataTable

from api.models import BuyerProduct
from db.storage import KeyValueStore
from utils.state import AppState
from views.scr_admin_orders import AdminOrdersScreen
from views.scr_cart import CartScreen

TEA = BuyerProduct(id=1, description="Tea", retail_price=3.5)


class ScreenHostApp(App):
    """Hosts one screen alone and answers every confirmation with yes."""

    def __init__(self, state: AppState, screen_type):
        super().__init__()
        self.state = state
        self.screen_type = screen_type

    def modes_for(self, role):
        return {}

    async def push_screen_wait(self, screen):
        return True

    def on_mount(self) -> None:
        self.push_screen(self.screen_type())


class CheckoutTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.server = FakeServer()
        self.arrived = asyncio.Event()
        self.release = asyncio.Event()

        async def slow(request):
            self.arrived.set()
            await self.release.wait()
            return httpx.Response(201, json=ORDER_JSON)

        self.server.route("POST", "/api/buyer/orders", slow)
        storage = KeyValueStore(os.path.join(self.temp_dir.name, "client.sqlite"))
        self.state = AppState.build(self.server.gateway(), storage)

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_second_checkout_leaves_the_first_running(self):
        self.state.cart.add(TEA, 2)
        app = ScreenHostApp(self.state, CartScreen)

        async with app.run_test() as pilot:
            await pilot.pause()
            screen = app.screen
            self.assertIsInstance(screen, CartScreen)

            first = screen.handle_checkout()
            await self.arrived.wait()
            second = screen.handle_checkout()
            await second.wait()

            self.release.set()
            await first.wait()
            await pilot.pause()

        self.assertEqual(len(self.server.calls("POST", "/api/buyer/orders")), 1)
        snapshot = self.state.cart.snapshot
        self.assertTrue(snapshot.is_empty)
        self.assertFalse(snapshot.submitting)
        self.assertEqual(snapshot.last_order.id, 10)


class AdminOrderActionsTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.server = FakeServer()
        self.server.reply("GET", "/api/admin/orders", json=[ORDER_JSON, {**ORDER_JSON, "id": 11}])
        self.server.reply("GET", "/api/admin/orders/10", json=ORDER_JSON)
        self.server.reply(
            "PATCH", "/api/admin/orders/10/complete", json={"orderId": 10, "status": "COMPLETED"}
        )
        storage = KeyValueStore(os.path.join(self.temp_dir.name, "client.sqlite"))
        self.state = AppState.build(self.server.gateway(), storage)

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_complete_acts_on_the_order_shown(self):
        app = ScreenHostApp(self.state, AdminOrdersScreen)

        async with app.run_test() as pilot:
            await pilot.pause()
            screen = app.screen
            await screen.handle_refresh().wait()
            await self.state.admin_orders.load_detail(None, 10)
            await pilot.pause()

            table = screen.query_one(DataTable)
            table.move_cursor(row=1)
            await screen.handle_complete().wait()
            await pilot.pause()

        patches = [r.url.path for r in self.server.requests if r.method == "PATCH"]
        self.assertEqual(patches, ["/api/admin/orders/10/complete"])
        self.assertEqual(self.state.admin_orders.cell.value.detail.status.value, "COMPLETED")


if __name__ == "__main__":
    unittest.main()
