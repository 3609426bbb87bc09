"""Cancellation reason picker modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from admin_app.constant import CANCELLATION_REASONS, MAX_CANCELLATION_REASON, OTHER_REASON
from admin_app.dashboard import resolve_cancellation_reason
from admin_app.errors import ValidationError


class CancelReasonModal(ModalScreen[str | None]):
    """Pick a preset reason or type one under "Other". Dismisses with the reason."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "choose_current", "Choose"),
    ]

    CSS = """
    CancelReasonModal {
        align: center middle;
        background: $background 60%;
    }

    #cancel-dialog {
        width: 64;
        height: auto;
        border: round $error;
        background: $panel;
        padding: 1 2;
    }

    #cancel-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #cancel-error {
        color: #ffb3b3;
        margin-top: 1;
    }

    #cancel-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self) -> None:
        super().__init__()
        self.typing_other = False
        self.other_input_value = ""
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="cancel-dialog"):
            yield Static("Cancel Order: select a reason", id="cancel-title")
            yield Static(id="cancel-body")
            yield Static(id="cancel-error")
            yield Static(id="cancel-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if not self.typing_other:
            return

        if event.key == "escape":
            self.typing_other = False
            self.other_input_value = ""
            self.error = ""
            self._refresh_content()
        elif event.key == "enter":
            self._confirm(OTHER_REASON, self.other_input_value)
        elif event.key == "backspace":
            self.other_input_value = self.other_input_value[:-1]
            self._refresh_content()
        elif event.is_printable and event.character:
            if len(self.other_input_value) < MAX_CANCELLATION_REASON:
                self.other_input_value += event.character
            self.error = ""
            self._refresh_content()

        # Every key belongs to the text field while typing.
        event.stop()

    def action_close(self) -> None:
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        self.cursor_index = (self.cursor_index + delta) % len(CANCELLATION_REASONS)
        self.error = ""
        self._refresh_content()

    def action_choose_current(self) -> None:
        selected = CANCELLATION_REASONS[self.cursor_index]
        if selected == OTHER_REASON:
            self.typing_other = True
            self.other_input_value = ""
            self._refresh_content()
            return
        self._confirm(selected)

    def _confirm(self, selected: str, other_text: str = "") -> None:
        try:
            reason = resolve_cancellation_reason(selected, other_text)
        except ValidationError as exc:
            self.error = str(exc)
            self._refresh_content()
            return
        self.dismiss(reason)

    def _refresh_content(self) -> None:
        body = self.query_one("#cancel-body", Static)
        help_text = self.query_one("#cancel-help", Static)
        self.query_one("#cancel-error", Static).update(self.error)

        content = Text(style="white")
        for idx, reason in enumerate(CANCELLATION_REASONS):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            if reason == OTHER_REASON and self.typing_other:
                content.append(f"{pointer}Other: {self.other_input_value}|", style="bold white")
            else:
                style = "bold white" if idx == self.cursor_index else "white"
                content.append(f"{pointer}{reason}", style=style)

        if self.typing_other:
            help_text.update("Type reason, Enter confirm, Esc stop typing")
        else:
            help_text.update("J/K/↑/↓ move, Enter choose, Esc/q keep order")
        body.update(content)
