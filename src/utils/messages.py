from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user asks to sign out
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Fired once the session store holds a signed-in session,
    the app then routes to the home mode of the session's role
    """

    bubble = True


class StoreChangedMessage(Message):
    """
    Posted by a screen when a store it watches published a new snapshot.
    Carries the snapshot so the handler renders exactly what was published.
    """

    bubble = False

    def __init__(self, snapshot) -> None:
        super().__init__()
        self.snapshot = snapshot


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
