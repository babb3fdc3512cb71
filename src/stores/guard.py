from enum import Enum
from typing import Optional

from api.models import Role
from stores.session import Session


class Decision(Enum):
    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect_login"


def authorize(session: Optional[Session], required_role: Optional[Role] = None) -> Decision:
    """
    Gate a destination on the current session.

    Pure and synchronous; evaluated before the destination fetches anything.
    """
    if session is None or not session.is_authenticated:
        return Decision.REDIRECT_LOGIN
    if required_role is not None and session.role != required_role:
        return Decision.REDIRECT_LOGIN
    return Decision.ALLOW
