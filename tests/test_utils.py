import os
import sqlite3
import tempfile
import unittest
from unittest import mock
from datetime import datetime, timezone

import support  # noqa: F401

from db.database import connect
from db.storage import KeyValueStore
from utils.cell import StateCell
from utils.logger import TokenMaskFilter
from utils.pure import bullet_list, format_instant, format_money, generate_markdown_table


class StateCellTestCase(unittest.TestCase):
    def test_subscribe_and_unsubscribe(self):
        cell = StateCell(0)
        seen = []
        unsubscribe = cell.subscribe(seen.append)
        cell.set(1)
        unsubscribe()
        cell.set(2)

        self.assertEqual(seen, [1])
        self.assertEqual(cell.value, 2)
        self.assertEqual(cell.subscriber_count, 0)
        unsubscribe()

    def test_failing_subscriber_does_not_block_others(self):
        cell = StateCell("a")
        seen = []

        def broken(value):
            raise RuntimeError("view is gone")

        cell.subscribe(broken)
        cell.subscribe(seen.append)
        with self.assertLogs("utils.cell", level="ERROR"):
            cell.set("b")
        self.assertEqual(seen, ["b"])


class KeyValueStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        path = os.path.join(self.temp_dir.name, "nested", "client.sqlite")
        self.storage = KeyValueStore(path)

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_put_get_delete(self):
        self.assertIsNone(await self.storage.get("k"))
        await self.storage.put("k", "one")
        await self.storage.put("k", "two")
        self.assertEqual(await self.storage.get("k"), "two")
        await self.storage.delete("k")
        self.assertIsNone(await self.storage.get("k"))
        await self.storage.delete("k")

    async def test_failed_schema_setup_closes_connection(self):
        path = os.path.join(self.temp_dir.name, "broken.sqlite")
        conn = mock.MagicMock()
        conn.close = mock.AsyncMock()
        failing_init = mock.AsyncMock(side_effect=sqlite3.OperationalError("disk I/O error"))
        with mock.patch("db.database.aiosqlite.connect", mock.AsyncMock(return_value=conn)):
            with mock.patch("db.database._init_db", failing_init):
                with self.assertRaises(sqlite3.OperationalError):
                    async with connect(path):
                        self.fail("connection handed out after a failed setup")
        conn.close.assert_awaited_once()


class TokenMaskTestCase(unittest.TestCase):
    def test_bearer_and_token_fields_are_masked(self):
        masked = TokenMaskFilter.mask('Authorization: Bearer eyJhbGciOi.abc-123 {"token": "s3cr3t"}')
        self.assertNotIn("eyJhbGciOi", masked)
        self.assertNotIn("s3cr3t", masked)
        self.assertIn("Bearer ***", masked)

    def test_plain_text_untouched(self):
        self.assertEqual(TokenMaskFilter.mask("GET /api/buyer/orders -> 200"), "GET /api/buyer/orders -> 200")


class PureTestCase(unittest.TestCase):
    def test_markdown_table(self):
        table = generate_markdown_table(["A", "B"], [[1, 2]], ["l", "r"])
        self.assertEqual(table, "| A | B |\n| :--- | ---: |\n| 1 | 2 |")
        self.assertEqual(generate_markdown_table(["A"], []), "")
        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [[1, 2]], ["l"])

    def test_formatting(self):
        self.assertEqual(format_money(1234.5), "$1,234.50")
        self.assertEqual(format_money(None), "-")
        self.assertEqual(format_instant(None), "-")
        self.assertRegex(
            format_instant(datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)),
            r"^2025-01-1[456] \d{2}:\d{2}$",
        )
        self.assertEqual(bullet_list([]), "_Nothing yet._")
        self.assertEqual(bullet_list(["a", "b"]), "- a\n- b")


if __name__ == "__main__":
    unittest.main()
