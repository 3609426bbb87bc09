"""Date range entry modal screen."""

from __future__ import annotations

from datetime import date

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Input, Static

EARLIEST_DATE = date(2023, 1, 1)


def parse_date_range(start_text: str, end_text: str, today: date) -> tuple[date, date]:
    """Parse YYYY-MM-DD bounds; raises ValueError with an operator-facing message."""
    try:
        start = date.fromisoformat(start_text.strip())
        end = date.fromisoformat(end_text.strip())
    except ValueError:
        raise ValueError("Dates must be YYYY-MM-DD") from None
    if end < start:
        raise ValueError("End date must not be before start date")
    if start < EARLIEST_DATE or end > today:
        raise ValueError(f"Dates must fall between {EARLIEST_DATE.isoformat()} and {today.isoformat()}")
    return (start, end)


class DateRangeModal(ModalScreen[tuple[date, date] | None]):
    """Prompt for an inclusive start/end date pair."""

    BINDINGS = [
        ("escape", "close", "Close"),
    ]

    CSS = """
    DateRangeModal {
        align: center middle;
        background: $background 60%;
    }

    #range-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #range-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #range-error {
        color: #ffb3b3;
        margin-top: 1;
    }

    #range-help {
        color: #dddddd;
        margin-top: 1;
    }
    """

    def __init__(self, start: date | None = None, end: date | None = None) -> None:
        super().__init__()
        today = date.today()
        self.initial_start = start or today
        self.initial_end = end or today

    def compose(self) -> ComposeResult:
        with Container(id="range-dialog"):
            yield Static("Filter by date", id="range-title")
            yield Input(value=self.initial_start.isoformat(), placeholder="Start YYYY-MM-DD", id="range-start")
            yield Input(value=self.initial_end.isoformat(), placeholder="End YYYY-MM-DD", id="range-end")
            yield Static(id="range-error")
            yield Static("Enter confirm. Esc cancel.", id="range-help")

    def on_mount(self) -> None:
        self.query_one("#range-start", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "range-start":
            self.query_one("#range-end", Input).focus()
            return
        self._confirm()

    def action_close(self) -> None:
        self.dismiss(None)

    def _confirm(self) -> None:
        start_text = self.query_one("#range-start", Input).value
        end_text = self.query_one("#range-end", Input).value
        try:
            selected = parse_date_range(start_text, end_text, date.today())
        except ValueError as exc:
            self.query_one("#range-error", Static).update(str(exc))
            return
        self.dismiss(selected)
