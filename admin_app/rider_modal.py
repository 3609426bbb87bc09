"""Live rider picker modal screen."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from admin_app.bridge import LiveBridge
from admin_app.context import AdminContext
from admin_app.dashboard import filter_rider_candidates
from admin_app.models import Driver
from admin_app.queries import rider_candidates_query
from admin_app.rendering import format_driver, render_pointer_list, visible_rows


class RiderSelectModal(ModalScreen[str | None]):
    """Available online riders of the order's branches, updated live."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "choose_current", "Assign"),
    ]

    CSS = """
    RiderSelectModal {
        align: center middle;
        background: $background 60%;
    }

    #rider-dialog {
        width: 60;
        height: 20;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #rider-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #rider-list {
        height: 1fr;
        color: white;
    }

    #rider-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, context: AdminContext, branch_ids: list[str]) -> None:
        super().__init__()
        self.context = context
        self.branch_ids = list(branch_ids)
        self.bridge = LiveBridge(self)
        self.drivers: list[Driver] = []
        self.fetching = True
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="rider-dialog"):
            yield Static("Assign Rider", id="rider-title")
            yield Static(id="rider-list")
            yield Static("J/K/↑/↓ move, Enter assign, Esc/q close", id="rider-help")

    def on_mount(self) -> None:
        self.bridge.start()
        self.bridge.listen(
            "riders", self.context.store, rider_candidates_query(), self._apply_drivers, self._listen_failed
        )
        self._refresh_content()

    def on_unmount(self) -> None:
        self.bridge.close()

    def action_close(self) -> None:
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        if not self.drivers:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.drivers)
        self._refresh_content()

    def action_choose_current(self) -> None:
        if not self.drivers:
            return
        self.dismiss(self.drivers[self.cursor_index].driver_id)

    def _apply_drivers(self, documents: list[Any]) -> None:
        drivers = [Driver.from_document(doc.id, doc.to_dict()) for doc in documents]
        self.drivers = filter_rider_candidates(drivers, self.branch_ids)
        self.fetching = False
        self.error = ""
        if self.cursor_index >= len(self.drivers):
            self.cursor_index = max(0, len(self.drivers) - 1)
        self._refresh_content()

    def _listen_failed(self, exc: Exception) -> None:
        self.fetching = False
        self.error = f"Error loading riders: {exc}"
        self._refresh_content()

    def _refresh_content(self) -> None:
        widget = self.query_one("#rider-list", Static)
        if self.error:
            widget.update(Text(self.error, style="#ffb3b3"))
            return
        if self.fetching:
            widget.update("Loading riders...")
            return
        if not self.drivers:
            widget.update("No available riders for this branch.")
            return

        lines = [Text(format_driver(driver)) for driver in self.drivers]
        widget.update(render_pointer_list(lines, self.cursor_index, visible_rows(widget.size.height)))
