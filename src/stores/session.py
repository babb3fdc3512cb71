"""
Session store: the authenticated identity, persisted across launches.

The persisted record is all-or-nothing. Anything short of a complete, well-typed
record restores to the signed-out state and the record is removed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any, Optional

from api import endpoints
from api.errors import ApiError, LocalValidationError, user_message
from api.gateway import Gateway, Result
from api.models import AuthResponse, Role
from db.storage import KeyValueStore
from utils.cell import StateCell
from utils.config import SESSION_KEY
from utils.logger import get_logger

_logger = get_logger(__name__)


@dataclass(frozen=True)
class Session:
    token: Optional[str] = None
    role: Optional[Role] = None
    username: Optional[str] = None
    user_id: Optional[int] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @classmethod
    def from_auth(cls, auth: AuthResponse) -> "Session":
        return cls(
            token=auth.token, role=auth.role, username=auth.username, user_id=auth.user_id
        )

    @classmethod
    def from_record(cls, record: Any) -> Optional["Session"]:
        """A Session from a persisted record, or None unless every field is valid."""
        if not isinstance(record, dict):
            return None
        token = record.get("token")
        username = record.get("username")
        user_id = record.get("userId")
        if not isinstance(token, str) or not token:
            return None
        if not isinstance(username, str) or not username:
            return None
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            return None
        try:
            role = Role(record.get("role"))
        except ValueError:
            return None
        return cls(token=token, role=role, username=username, user_id=user_id)

    def to_record(self) -> dict:
        return {
            "token": self.token,
            "role": self.role.value if self.role else None,
            "username": self.username,
            "userId": self.user_id,
        }


@dataclass(frozen=True)
class SessionSnapshot:
    session: Session = Session()
    busy: bool = False
    error: Optional[str] = None


class SessionStore:
    """
    Sole owner of the current Session.

    Read it through `session` / `cell`; change it only through `sign_in`,
    `sign_out`, `login` and `register`.
    """

    def __init__(self, storage: KeyValueStore, gateway: Optional[Gateway] = None) -> None:
        self.storage = storage
        self.gateway = gateway or Gateway()
        self.cell: StateCell[SessionSnapshot] = StateCell(SessionSnapshot())

    @classmethod
    async def open(
        cls, storage: KeyValueStore, gateway: Optional[Gateway] = None
    ) -> "SessionStore":
        """Construct and restore the persisted session."""
        store = cls(storage, gateway)
        await store.restore()
        return store

    # ---------- reads ----------

    @property
    def session(self) -> Session:
        return self.cell.value.session

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def token(self) -> Optional[str]:
        return self.session.token

    @property
    def role(self) -> Optional[Role]:
        return self.session.role

    def _publish(self, **changes) -> None:
        self.cell.set(replace(self.cell.value, **changes))

    # ---------- persistence ----------

    async def restore(self) -> Session:
        raw = await self.storage.get(SESSION_KEY)
        if raw is None:
            self._publish(session=Session())
            return self.session

        try:
            record = json.loads(raw)
        except ValueError:
            record = None
        session = Session.from_record(record)

        if session is None:
            _logger.warning("Persisted session is incomplete or malformed, discarding it")
            await self.storage.delete(SESSION_KEY)
            session = Session()
        else:
            _logger.info(f"Restored session for {session.username} ({session.role.value})")

        self._publish(session=session)
        return session

    async def sign_in(self, auth: AuthResponse) -> Session:
        session = Session.from_auth(auth)
        self._publish(session=session, error=None)
        await self.storage.put(SESSION_KEY, json.dumps(session.to_record()))
        _logger.info(f"Signed in as {session.username} ({session.role.value})")
        return session

    async def sign_out(self) -> None:
        self._publish(session=Session(), error=None)
        await self.storage.delete(SESSION_KEY)
        _logger.info("Signed out")

    # ---------- auth workflows ----------

    async def login(self, username_or_email: str, password: str) -> Result[Session]:
        if not username_or_email or not password:
            return self._fail(
                LocalValidationError("Enter your username or email, plus your password.")
            )
        return await self._authenticate(
            endpoints.login(self.gateway, username_or_email, password),
            "Unable to sign in.",
        )

    async def register(self, username: str, email: str, password: str) -> Result[Session]:
        if not username or not email or not password:
            return self._fail(LocalValidationError("Provide a username, email, and password."))
        return await self._authenticate(
            endpoints.register(self.gateway, username, email, password),
            "Unable to register.",
        )

    async def _authenticate(self, call, fallback: str) -> Result[Session]:
        self._publish(busy=True, error=None)
        try:
            result = await call
        finally:
            self._publish(busy=False)
        if not result.ok:
            self._publish(error=user_message(result.error, fallback))
            return Result.failure(result.error)
        return Result.success(await self.sign_in(result.value))

    def _fail(self, error: ApiError) -> Result[Session]:
        self._publish(error=error.user_message)
        return Result.failure(error)
