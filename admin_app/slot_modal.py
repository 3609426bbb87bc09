"""Slot open/close time entry modal screen."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Input, Static

from admin_app.models import TimeSlot
from admin_app.schedule import is_valid_time


class SlotEditModal(ModalScreen[tuple[str, str] | None]):
    """Edit one slot; dismisses with (open, close) as HH:MM strings."""

    BINDINGS = [
        ("escape", "close", "Close"),
    ]

    CSS = """
    SlotEditModal {
        align: center middle;
        background: $background 60%;
    }

    #slot-dialog {
        width: 48;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #slot-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #slot-error {
        color: #ffb3b3;
        margin-top: 1;
    }

    #slot-help {
        color: #dddddd;
        margin-top: 1;
    }
    """

    def __init__(self, day: str, index: int, slot: TimeSlot) -> None:
        super().__init__()
        self.slot_day = day
        self.slot_index = index
        self.current_slot = slot

    def compose(self) -> ComposeResult:
        with Container(id="slot-dialog"):
            yield Static(f"{self.slot_day.capitalize()} slot {self.slot_index + 1}", id="slot-title")
            yield Input(value=self.current_slot.open, placeholder="Open HH:MM", id="slot-open")
            yield Input(value=self.current_slot.close, placeholder="Close HH:MM", id="slot-close")
            yield Static(id="slot-error")
            yield Static("24h times. A close before open runs overnight. Enter save, Esc cancel.", id="slot-help")

    def on_mount(self) -> None:
        self.query_one("#slot-open", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "slot-open":
            self.query_one("#slot-close", Input).focus()
            return
        self._confirm()

    def action_close(self) -> None:
        self.dismiss(None)

    def _confirm(self) -> None:
        open_time = self.query_one("#slot-open", Input).value.strip()
        close_time = self.query_one("#slot-close", Input).value.strip()
        for label, value in (("Open", open_time), ("Close", close_time)):
            if not is_valid_time(value):
                self.query_one("#slot-error", Static).update(f"{label} time must be HH:MM (00:00-23:59)")
                return
        self.dismiss((open_time, close_time))
