from typing import Dict, Literal, Optional, Tuple

from typing_extensions import override

from textual import on
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label

from utils.messages import QuitRequestedMessage

Tone = Literal["default", "positive", "warning", "error"]


class DialogModal(ModalScreen[bool]):
    """
    Yes/no confirmation, dismissed with True for the primary button.
    """

    VARIANT_MAP: Dict[str, Tuple[str, str]] = {
        "default": ("primary", "default"),
        "positive": ("success", "default"),
        "warning": ("warning", "default"),
        "error": ("error", "primary"),
    }

    def __init__(
        self,
        caption: str,
        primary_text: str = "OK",
        secondary_text: str = "",
        tone: Tone = "default",
    ):
        super().__init__()
        self.caption = caption
        self.primary_text = primary_text
        self.secondary_text = secondary_text
        self.tone = tone

    def compose(self) -> ComposeResult:
        primary, secondary = self.VARIANT_MAP[self.tone]
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            with Horizontal(id="dialog"):
                if self.secondary_text:
                    yield Button(self.secondary_text, variant=secondary, id="btn-secondary")
                yield Button(self.primary_text, variant=primary, id="btn-primary")

    def on_mount(self):
        # destructive dialogs focus the safe choice
        if self.secondary_text and self.tone == "error":
            self.query_one("#btn-secondary").focus()
        else:
            self.query_one("#btn-primary").focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn-primary")


class QuitDialogModal(DialogModal):
    def __init__(self):
        super().__init__("Are you sure you want to quit?", "Yes", "No", "error")

    @override
    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.post_message(QuitRequestedMessage())
        self.dismiss(event.button.id == "btn-primary")


class NumberPromptModal(ModalScreen[Optional[float]]):
    """
    Asks for one number. Dismissed with the value, or None when cancelled.
    """

    def __init__(self, caption: str, initial: Optional[float] = None, integer: bool = True):
        super().__init__()
        self.caption = caption
        self.initial = initial
        self.integer = integer

    def compose(self) -> ComposeResult:
        value = "" if self.initial is None else str(self.initial)
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            yield Input(value, id="input-number", type="integer" if self.integer else "number")
            with Horizontal(id="dialog"):
                yield Button("Cancel", id="btn-secondary")
                yield Button("OK", variant="primary", id="btn-primary")

    def on_mount(self):
        self.query_one("#input-number").focus()

    def _submit(self) -> None:
        raw = self.query_one("#input-number", Input).value.strip()
        if not raw:
            self.notify("A value is required.", severity="error")
            return
        try:
            value = int(raw) if self.integer else float(raw)
        except ValueError:
            self.notify(f"'{raw}' is not a number.", severity="error")
            return
        self.dismiss(value)

    @on(Input.Submitted, "#input-number")
    def handle_enter(self) -> None:
        self._submit()

    @on(Button.Pressed, "#btn-primary")
    def handle_ok(self) -> None:
        self._submit()

    @on(Button.Pressed, "#btn-secondary")
    def handle_cancel(self) -> None:
        self.dismiss(None)
