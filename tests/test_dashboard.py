import unittest

import httpx

from support import FakeServer, error_body

from api.errors import InvalidResponse, ServerError
from api.gateway import Result
from stores.dashboard import (
    DashboardAggregator,
    FailurePolicy,
    SubCall,
    admin_dashboard,
    buyer_insights,
)


def ok(value):
    async def fetch(token):
        return Result.success(value)

    return fetch


def failing(error):
    async def fetch(token):
        return Result.failure(error)

    return fetch


def raising(exc):
    async def fetch(token):
        raise exc

    return fetch


class DashboardAggregatorTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_swallowed_failure_yields_empty_slot(self):
        dash = DashboardAggregator(
            [
                SubCall("a", ok([1, 2]), FailurePolicy.PROPAGATE, empty=[]),
                SubCall("b", failing(InvalidResponse()), FailurePolicy.SWALLOW, empty=[]),
            ]
        )
        result = await dash.load("t")

        self.assertTrue(result.ok)
        self.assertEqual(dict(dash.values), {"a": [1, 2], "b": []})
        self.assertIsNone(dash.cell.value.error)

    async def test_propagated_failure_fails_the_load_but_keeps_siblings(self):
        error = ServerError("Forbidden", 403)
        dash = DashboardAggregator(
            [
                SubCall("a", failing(error), FailurePolicy.PROPAGATE, empty=[]),
                SubCall("b", ok("fine"), FailurePolicy.SWALLOW),
            ]
        )
        result = await dash.load("t")

        self.assertIs(result.error, error)
        self.assertEqual(dash.values["a"], [])
        self.assertEqual(dash.values["b"], "fine")
        self.assertEqual(dash.cell.value.error, "Forbidden (403)")
        self.assertFalse(dash.cell.value.loading)

    async def test_first_propagated_error_wins(self):
        dash = DashboardAggregator(
            [
                SubCall("a", failing(InvalidResponse()), FailurePolicy.PROPAGATE, fallback_message="A down."),
                SubCall("b", failing(ServerError("B down", 500)), FailurePolicy.PROPAGATE),
            ]
        )
        result = await dash.load("t")

        self.assertIsInstance(result.error, InvalidResponse)
        self.assertEqual(dash.cell.value.error, "A down.")

    async def test_raising_call_does_not_abort_siblings(self):
        dash = DashboardAggregator(
            [
                SubCall("a", raising(RuntimeError("boom")), FailurePolicy.SWALLOW, empty=[]),
                SubCall("b", ok("fine"), FailurePolicy.SWALLOW),
                SubCall("c", raising(RuntimeError("down")), FailurePolicy.PROPAGATE, fallback_message="C down."),
            ]
        )
        with self.assertLogs("stores.dashboard", level="ERROR"):
            result = await dash.load("t")

        self.assertIsInstance(result.error, InvalidResponse)
        self.assertEqual(dict(dash.values), {"a": [], "b": "fine", "c": None})
        self.assertEqual(dash.cell.value.error, "C down.")
        self.assertFalse(dash.cell.value.loading)

    def test_duplicate_names_rejected(self):
        with self.assertRaises(ValueError):
            DashboardAggregator(
                [
                    SubCall("a", ok(1), FailurePolicy.SWALLOW),
                    SubCall("a", ok(2), FailurePolicy.SWALLOW),
                ]
            )

    async def test_reset_restores_empty_values(self):
        dash = DashboardAggregator([SubCall("a", ok([1]), FailurePolicy.SWALLOW, empty=[])])
        await dash.load("t")
        dash.reset()
        self.assertEqual(dict(dash.values), {"a": []})


class DashboardFactoriesTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.server = FakeServer()
        self.server.reply("GET", "/api/admin/orders", json=[])
        self.server.reply("GET", "/api/admin/products", json=[])
        self.server.reply(
            "GET",
            "/api/admin/summary/profit",
            json={"productId": 1, "description": "Tea", "totalProfit": 120.5},
        )
        self.server.reply(
            "GET",
            "/api/admin/summary/popular",
            json=[{"productId": 1, "description": "Tea", "totalQuantity": 30}],
        )
        self.server.reply("GET", "/api/admin/summary/total-sold", json={"totalItems": 42})

    async def test_admin_dashboard_loads_every_slot(self):
        dash = admin_dashboard(self.server.gateway())
        result = await dash.load("t")

        self.assertTrue(result.ok)
        self.assertEqual(dash.values["total_sold"].total_items, 42)
        self.assertEqual(dash.values["profit"].total_profit, 120.5)
        self.assertEqual(dash.values["popular"][0].total_quantity, 30)
        self.assertEqual(self.server.calls("GET", "/api/admin/orders")[0].url.params["page"], "0")

    async def test_admin_summary_failure_is_swallowed(self):
        self.server.reply("GET", "/api/admin/summary/profit", status=500)
        dash = admin_dashboard(self.server.gateway())

        result = await dash.load("t")

        self.assertTrue(result.ok)
        self.assertIsNone(dash.values["profit"])
        self.assertEqual(dash.values["total_sold"].total_items, 42)

    async def test_admin_orders_failure_propagates(self):
        self.server.reply(
            "GET", "/api/admin/orders", status=403, json=error_body("Access denied", "Forbidden")
        )
        dash = admin_dashboard(self.server.gateway())

        result = await dash.load("t")

        self.assertFalse(result.ok)
        self.assertEqual(dash.values["orders"], [])
        self.assertEqual(dash.values["popular"][0].description, "Tea")
        self.assertEqual(dash.cell.value.error, "Access denied (403)")

    async def test_buyer_insights_never_fail(self):
        self.server.reply("GET", "/api/buyer/orders/top/frequent", status=500)
        self.server.reply(
            "GET",
            "/api/buyer/orders/top/recent",
            json=[{"productId": 1, "description": "Tea", "lastPurchasedAt": 1736937000000}],
        )
        insights = buyer_insights(self.server.gateway())

        result = await insights.load("t")

        self.assertTrue(result.ok)
        self.assertEqual(insights.values["frequent"], [])
        self.assertEqual(insights.values["recent"][0].last_purchased_at.hour, 10)

    async def test_unreadable_insight_keeps_its_sibling(self):
        self.server.route(
            "GET",
            "/api/buyer/orders/top/frequent",
            lambda r: httpx.Response(
                200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all"
            ),
        )
        self.server.reply(
            "GET",
            "/api/buyer/orders/top/recent",
            json=[{"productId": 1, "description": "Tea", "lastPurchasedAt": 1736937000000}],
        )
        insights = buyer_insights(self.server.gateway())

        result = await insights.load("t")

        self.assertTrue(result.ok)
        self.assertEqual(insights.values["frequent"], [])
        self.assertEqual(insights.values["recent"][0].description, "Tea")
        self.assertFalse(insights.cell.value.loading)


if __name__ == "__main__":
    unittest.main()
