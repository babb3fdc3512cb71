import json
import os
import tempfile
import unittest

from support import FakeServer, error_body

from api.errors import LocalValidationError, ServerError
from api.models import AuthResponse, Role
from db.storage import KeyValueStore
from stores.guard import Decision, authorize
from stores.session import Session, SessionStore
from utils.config import SESSION_KEY

AUTH = AuthResponse(token="tok-1", role=Role.BUYER, username="ann", user_id=4)


class SessionStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Point the store to a temporary sqlite file
        self.temp_dir = tempfile.TemporaryDirectory()
        self.storage = KeyValueStore(os.path.join(self.temp_dir.name, "client.sqlite"))
        self.server = FakeServer()
        self.store = SessionStore(self.storage, self.server.gateway())

    def tearDown(self):
        self.temp_dir.cleanup()

    # ---------- persistence ----------

    async def test_sign_in_persists_and_restores(self):
        await self.store.sign_in(AUTH)
        self.assertTrue(self.store.is_authenticated)

        reopened = await SessionStore.open(self.storage, self.server.gateway())
        self.assertEqual(reopened.session, Session("tok-1", Role.BUYER, "ann", 4))
        self.assertEqual(reopened.token, "tok-1")
        self.assertEqual(reopened.role, Role.BUYER)

        record = json.loads(await self.storage.get(SESSION_KEY))
        self.assertEqual(
            record, {"token": "tok-1", "role": "BUYER", "username": "ann", "userId": 4}
        )

    async def test_nothing_persisted_restores_signed_out(self):
        session = await self.store.restore()
        self.assertFalse(session.is_authenticated)
        self.assertIsNone(self.store.token)

    async def test_incomplete_record_is_discarded(self):
        records = [
            {"token": "tok-1", "username": "ann", "userId": 4},
            {"token": "tok-1", "role": "OWNER", "username": "ann", "userId": 4},
            {"token": "", "role": "BUYER", "username": "ann", "userId": 4},
            {"token": "tok-1", "role": "BUYER", "username": "ann", "userId": "4"},
            ["tok-1", "BUYER"],
        ]
        for record in records:
            with self.subTest(record=record):
                await self.storage.put(SESSION_KEY, json.dumps(record))
                session = await self.store.restore()
                self.assertFalse(session.is_authenticated)
                self.assertIsNone(await self.storage.get(SESSION_KEY))

    async def test_malformed_json_is_discarded(self):
        await self.storage.put(SESSION_KEY, "{not json")
        session = await self.store.restore()
        self.assertFalse(session.is_authenticated)
        self.assertIsNone(await self.storage.get(SESSION_KEY))

    async def test_sign_out_clears_memory_and_storage(self):
        await self.store.sign_in(AUTH)
        await self.store.sign_out()
        self.assertFalse(self.store.is_authenticated)
        self.assertIsNone(await self.storage.get(SESSION_KEY))

    async def test_subscribers_see_sign_in(self):
        seen = []
        self.store.cell.subscribe(lambda snapshot: seen.append(snapshot.session.username))
        await self.store.sign_in(AUTH)
        self.assertIn("ann", seen)

    # ---------- auth workflows ----------

    async def test_login_requires_both_fields(self):
        result = await self.store.login("", "pw")
        self.assertIsInstance(result.error, LocalValidationError)
        self.assertEqual(self.server.requests, [])
        self.assertIsNotNone(self.store.cell.value.error)

    async def test_register_requires_every_field(self):
        result = await self.store.register("ann", "", "pw")
        self.assertIsInstance(result.error, LocalValidationError)
        self.assertEqual(self.server.requests, [])

    async def test_login_success_signs_in(self):
        self.server.reply(
            "POST",
            "/api/auth/login",
            json={"token": "tok-9", "role": "ADMIN", "username": "root", "userId": 1},
        )
        result = await self.store.login("root@example.com", "pw")

        self.assertTrue(result.ok)
        self.assertEqual(self.store.role, Role.ADMIN)
        self.assertFalse(self.store.cell.value.busy)
        self.assertIsNotNone(await self.storage.get(SESSION_KEY))

    async def test_register_success_signs_in(self):
        self.server.reply(
            "POST",
            "/api/auth/register",
            json={"token": "tok-2", "role": "BUYER", "username": "bob", "userId": 7},
        )
        result = await self.store.register("bob", "bob@example.com", "pw")
        self.assertTrue(result.ok)
        self.assertEqual(self.store.session.user_id, 7)
        body = json.loads(self.server.requests[0].content)
        self.assertEqual(body, {"username": "bob", "email": "bob@example.com", "password": "pw"})

    async def test_login_failure_keeps_signed_out(self):
        self.server.reply(
            "POST", "/api/auth/login", status=401, json=error_body("Bad credentials", "Unauthorized")
        )
        result = await self.store.login("ann", "wrong")

        self.assertIsInstance(result.error, ServerError)
        snapshot = self.store.cell.value
        self.assertFalse(snapshot.session.is_authenticated)
        self.assertFalse(snapshot.busy)
        self.assertEqual(snapshot.error, "Bad credentials (401)")
        self.assertIsNone(await self.storage.get(SESSION_KEY))


class GuardTestCase(unittest.TestCase):
    buyer = Session("t", Role.BUYER, "ann", 4)
    admin = Session("t", Role.ADMIN, "root", 1)

    def test_no_session_redirects(self):
        self.assertIs(authorize(None), Decision.REDIRECT_LOGIN)
        self.assertIs(authorize(Session()), Decision.REDIRECT_LOGIN)
        self.assertIs(authorize(Session(), Role.BUYER), Decision.REDIRECT_LOGIN)

    def test_any_signed_in_user_without_role_requirement(self):
        self.assertIs(authorize(self.buyer), Decision.ALLOW)
        self.assertIs(authorize(self.admin), Decision.ALLOW)

    def test_role_must_match(self):
        self.assertIs(authorize(self.admin, Role.ADMIN), Decision.ALLOW)
        self.assertIs(authorize(self.buyer, Role.BUYER), Decision.ALLOW)
        self.assertIs(authorize(self.buyer, Role.ADMIN), Decision.REDIRECT_LOGIN)
        self.assertIs(authorize(self.admin, Role.BUYER), Decision.REDIRECT_LOGIN)


if __name__ == "__main__":
    unittest.main()
