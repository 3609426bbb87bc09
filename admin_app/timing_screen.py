"""Branch working-hours editor screen."""

from __future__ import annotations

import logging
from typing import Any

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.screen import Screen
from textual.widgets import Header, Static

from admin_app.banner import ConnectivityBanner
from admin_app.bridge import LiveBridge
from admin_app.confirm_modal import ConfirmModal
from admin_app.constant import COLLECTION_BRANCH, WEEKDAYS
from admin_app.context import AdminContext
from admin_app.errors import ScheduleError, ScopeError
from admin_app.rendering import format_day_header, format_slot, render_pointer_list, visible_rows
from admin_app.schedule import TimingEditor
from admin_app.slot_modal import SlotEditModal

logger = logging.getLogger(__name__)

# (kind, day, slot index); day rows carry index -1.
Row = tuple[str, str, int]


class TimingScreen(Screen):
    """Edit the weekly schedule of one branch and merge it back into the branch document."""

    CSS = """
    #timing-branch {
        padding: 0 1;
        text-style: bold;
    }

    #timing-pane {
        height: 1fr;
        border: round $primary;
        padding: 0 1;
    }

    #timing-list {
        height: 1fr;
    }

    #timing-status {
        padding: 0 1;
    }

    #timing-help {
        color: #dddddd;
        padding: 0 1;
    }
    """

    BINDINGS = [
        ("escape", "back", "Back"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("up", "move_cursor(-1)", "Previous"),
        ("space", "toggle_day", "Open/close day"),
        ("a", "add_slot", "Add slot"),
        ("d", "delete_slot", "Delete slot"),
        ("e", "edit_slot", "Edit slot"),
        ("enter", "edit_slot", "Edit slot"),
        ("c", "copy_monday", "Monday to all"),
        ("b", "switch_branch", "Branch"),
        ("r", "retry", "Retry"),
        Binding("ctrl+s", "save", "Save", priority=True),
    ]

    cursor_index = reactive(0)

    def __init__(self, context: AdminContext) -> None:
        super().__init__()
        self.context = context
        self.editor = TimingEditor()
        self.bridge = LiveBridge(self)
        self.branch_ids = list(context.scope.branch_ids)
        self.branch_index = 0
        self.branch_names: dict[str, str] = {}
        self.fetching = False
        self.saving = False
        self.error = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield ConnectivityBanner()
        yield Static(id="timing-branch")
        with Vertical(id="timing-pane"):
            yield Static(id="timing-list")
        yield Static(id="timing-status")
        yield Static(
            "J/K move, Space open/close, A add, D delete, E edit, C Monday to all, B branch, "
            "R retry, Ctrl+S save, Esc back",
            id="timing-help",
        )

    def on_mount(self) -> None:
        self.bridge.start()
        if not self.branch_ids:
            self.error = str(ScopeError("No branch is assigned to this account."))
            self._refresh_content()
            return
        self._load_names()
        self._load_branch(self.branch_index)

    def on_unmount(self) -> None:
        self.bridge.close()

    @property
    def busy(self) -> bool:
        return self.fetching or self.saving or self.editor.branch_id is None

    def _load_branch(self, index: int) -> None:
        """Fetch the hours of branch ``index``; the header follows only once they arrive."""
        self.fetching = True
        self.error = ""
        self._refresh_content()
        self._fetch_hours(index, self.branch_ids[index])

    @work(thread=True, exclusive=True, group="timing-load")
    def _fetch_hours(self, index: int, branch_id: str) -> None:
        try:
            document = self.context.store.get_document(COLLECTION_BRANCH, branch_id)
        except Exception as exc:
            logger.warning("working hours load failed branch=%s error=%r", branch_id, exc)
            self.bridge.dispatch(self._load_failed, f"Error loading working hours: {exc}")
            return
        self.bridge.dispatch(self._loaded, index, branch_id, document)

    def _loaded(self, index: int, branch_id: str, document: dict[str, Any] | None) -> None:
        self.branch_index = index
        self.editor.load(branch_id, document)
        self.fetching = False
        self.cursor_index = 0
        if self.editor.generated_default:
            self.app.notify("No working hours saved yet; showing defaults.", severity="information")
        self._refresh_content()

    def _load_failed(self, message: str) -> None:
        self.fetching = False
        if self.editor.branch_id is None:
            self.error = message
        else:
            self.app.notify(message, severity="error")
        self._refresh_content()

    def action_retry(self) -> None:
        if not self.error or self.fetching or not self.branch_ids:
            return
        self._load_branch(self.branch_index)

    @work(thread=True, exclusive=True, group="timing-names")
    def _load_names(self) -> None:
        names = self.context.branches.load_names(self.branch_ids)
        self.bridge.dispatch(self._apply_names, names)

    def _apply_names(self, names: dict[str, str]) -> None:
        self.branch_names = names
        self._refresh_content()

    def _rows(self) -> list[Row]:
        rows: list[Row] = []
        for day in WEEKDAYS:
            rows.append(("day", day, -1))
            schedule = self.editor.working.day(day)
            if schedule.is_open:
                rows.extend(("slot", day, idx) for idx in range(len(schedule.slots)))
        return rows

    def _current_row(self) -> Row | None:
        rows = self._rows()
        if not rows:
            return None
        return rows[min(self.cursor_index, len(rows) - 1)]

    def action_move_cursor(self, delta: int) -> None:
        rows = self._rows()
        if not rows or self.busy:
            return
        self.cursor_index = (self.cursor_index + delta) % len(rows)
        self._refresh_content()

    def action_toggle_day(self) -> None:
        row = self._current_row()
        if row is None or self.busy:
            return
        _, day, _ = row
        self.editor.toggle_day(day)
        self.cursor_index = self._rows().index(("day", day, -1))
        self._refresh_content()

    def action_add_slot(self) -> None:
        row = self._current_row()
        if row is None or self.busy:
            return
        _, day, _ = row
        if not self.editor.working.day(day).is_open:
            self.app.notify(f"{day.capitalize()} is closed. Open it first.", severity="warning")
            return
        self.editor.add_slot(day)
        self.cursor_index = self._rows().index(("slot", day, len(self.editor.working.day(day).slots) - 1))
        self._refresh_content()

    def action_delete_slot(self) -> None:
        row = self._current_row()
        if row is None or self.busy or row[0] != "slot":
            return
        _, day, index = row
        try:
            self.editor.remove_slot(day, index)
        except ScheduleError as exc:
            self.app.notify(str(exc), severity="warning")
            return
        self._refresh_content()

    def action_edit_slot(self) -> None:
        row = self._current_row()
        if row is None or self.busy or row[0] != "slot":
            return
        _, day, index = row
        slot = self.editor.working.day(day).slots[index]

        def _apply(times: tuple[str, str] | None) -> None:
            if times is None:
                return
            try:
                self.editor.set_slot_time(day, index, "open", times[0])
                overnight = self.editor.set_slot_time(day, index, "close", times[1])
            except ScheduleError as exc:
                self.app.notify(str(exc), severity="error")
                return
            if overnight:
                self.app.notify("Overnight slot: closes the next day.", severity="information")
            self._refresh_content()

        self.app.push_screen(SlotEditModal(day, index, slot), _apply)

    def action_copy_monday(self) -> None:
        if self.busy:
            return

        def _confirmed(confirmed: bool | None) -> None:
            if confirmed:
                self.editor.apply_to_all("monday")
                self.app.notify("Monday's hours applied to every day.")
                self._refresh_content()

        self.app.push_screen(
            ConfirmModal("Apply to all days", "Copy Monday's hours to every other day?"), _confirmed
        )

    def action_switch_branch(self) -> None:
        if len(self.branch_ids) < 2 or self.saving or self.fetching:
            return
        next_index = (self.branch_index + 1) % len(self.branch_ids)

        def _switch(confirmed: bool | None = True) -> None:
            if not confirmed:
                return
            self._load_branch(next_index)

        if self.editor.has_unsaved_changes:
            self.app.push_screen(
                ConfirmModal("Unsaved changes", "Switch branch and discard your changes?"), _switch
            )
            return
        _switch()

    def action_save(self) -> None:
        if self.busy or self.editor.branch_id is None:
            return
        try:
            self.editor.validate()
        except ScheduleError as exc:
            self.app.notify(str(exc), title="Invalid working hours", severity="error")
            if exc.day is not None:
                self.cursor_index = self._rows().index(("day", exc.day, -1))
                self._refresh_content()
            return
        self.saving = True
        self._refresh_content()
        self._persist(self.editor.branch_id, self.editor.payload())

    @work(thread=True, exclusive=True, group="timing-save")
    def _persist(self, branch_id: str, payload: dict[str, Any]) -> None:
        try:
            self.context.store.merge_document(COLLECTION_BRANCH, branch_id, payload)
        except Exception as exc:
            logger.warning("working hours save failed branch=%s error=%r", branch_id, exc)
            self.bridge.dispatch(self._save_failed, f"Error saving working hours: {exc}")
            return
        self.bridge.dispatch(self._saved)

    def _saved(self) -> None:
        self.editor.mark_saved()
        self.saving = False
        self.app.notify("Working hours saved")
        self.app.pop_screen()

    def _save_failed(self, message: str) -> None:
        self.saving = False
        self.app.notify(message, severity="error")
        self._refresh_content()

    def action_back(self) -> None:
        if self.saving:
            return

        def _leave(confirmed: bool | None = True) -> None:
            if confirmed:
                self.app.pop_screen()

        if self.editor.has_unsaved_changes:
            self.app.push_screen(ConfirmModal("Unsaved changes", "Leave and discard your changes?"), _leave)
            return
        _leave()

    def _refresh_content(self) -> None:
        try:
            branch_bar = self.query_one("#timing-branch", Static)
            widget = self.query_one("#timing-list", Static)
            status = self.query_one("#timing-status", Static)
        except NoMatches:
            return

        if self.branch_ids:
            branch_id = self.branch_ids[self.branch_index]
            label = f"Working hours: {self.branch_names.get(branch_id, branch_id)}"
            if len(self.branch_ids) > 1:
                label += f"  ({self.branch_index + 1}/{len(self.branch_ids)}, B to switch)"
            branch_bar.update(label)
        else:
            branch_bar.update("Working hours")

        if self.error:
            widget.update(Text(self.error, style="#ffb3b3"))
            status.update("")
            return
        if self.fetching or self.editor.branch_id is None:
            widget.update("Loading working hours...")
            status.update("")
            return

        lines: list[Text] = []
        for kind, day, index in self._rows():
            if kind == "day":
                lines.append(format_day_header(day, self.editor.working.day(day)))
            else:
                slot = self.editor.working.day(day).slots[index]
                lines.append(Text(f"    Slot {index + 1}: {format_slot(slot)}"))
        widget.update(render_pointer_list(lines, self.cursor_index, visible_rows(widget.size.height)))

        if self.saving:
            status.update("Saving...")
        elif self.editor.has_unsaved_changes:
            status.update(Text("Unsaved changes (Ctrl+S save)", style="bold #ffe08a"))
        else:
            status.update("")
