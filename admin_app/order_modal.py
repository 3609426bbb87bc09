"""Order detail modal screen with the status actions."""

from __future__ import annotations

import logging
from typing import Callable

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from admin_app.bridge import LiveBridge
from admin_app.cancel_modal import CancelReasonModal
from admin_app.constant import STATUS_CANCELLED
from admin_app.context import AdminContext
from admin_app.dashboard import ASSIGN_RIDER, CANCEL, REPRINT, OrderAction, order_actions
from admin_app.errors import ServiceError
from admin_app.models import Order
from admin_app.printer import print_receipt
from admin_app.rendering import format_order_details, order_number_label
from admin_app.rider_modal import RiderSelectModal

logger = logging.getLogger(__name__)

Job = Callable[[], str]


class OrderDetailModal(ModalScreen[None]):
    """Inspect one order and run the actions its status allows."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "run_current", "Run"),
    ]

    CSS = """
    OrderDetailModal {
        align: center middle;
        background: $background 60%;
    }

    #order-dialog {
        width: 72;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #order-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #order-body {
        color: white;
        margin-bottom: 1;
    }

    #order-actions {
        color: white;
    }

    #order-status {
        margin-top: 1;
        color: #ffe08a;
    }

    #order-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, order: Order, context: AdminContext, read_only: bool = False) -> None:
        super().__init__()
        self.order = order
        self.context = context
        self.available_actions: list[OrderAction] = [] if read_only else order_actions(order)
        self.bridge = LiveBridge(self)
        self.busy = False
        self.status_text = ""

    def compose(self) -> ComposeResult:
        with Container(id="order-dialog"):
            yield Static(f"Order {order_number_label(self.order)}", id="order-title")
            yield Static(id="order-body")
            yield Static(id="order-actions")
            yield Static(id="order-status")
            yield Static(id="order-help")

    def on_mount(self) -> None:
        self.bridge.start()
        self._refresh_content()

    def on_unmount(self) -> None:
        self.bridge.close()

    def action_close(self) -> None:
        if self.busy:
            return
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        if self.busy or not self.available_actions:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.available_actions)
        self._refresh_content()

    def action_run_current(self) -> None:
        if self.busy or not self.available_actions:
            return
        action = self.available_actions[self.cursor_index]

        if action.key == CANCEL:
            self.app.push_screen(CancelReasonModal(), self._cancel_with_reason)
            return
        if action.key == ASSIGN_RIDER:
            self.app.push_screen(RiderSelectModal(self.context, self.order.branch_ids), self._assign_rider)
            return
        if action.key == REPRINT:
            self._start("Printing...", self._reprint_job)
            return

        target = action.target_status or ""
        self._start("Updating...", lambda: self._status_job(target, action.label))

    def _cancel_with_reason(self, reason: str | None) -> None:
        if reason is None:
            return

        def job() -> str:
            self.context.orders.update_status(
                self.order.order_id, STATUS_CANCELLED, reason=reason, actor=self.context.actor
            )
            return "Order cancelled"

        self._start("Cancelling...", job)

    def _assign_rider(self, rider_id: str | None) -> None:
        if rider_id is None:
            return

        def job() -> str:
            result = self.context.riders.manual_assign(self.order.order_id, rider_id, actor=self.context.actor)
            if not result.success:
                raise ServiceError(result.message)
            return result.message

        self._start("Assigning rider...", job)

    def _status_job(self, target: str, label: str) -> str:
        self.context.orders.update_status(self.order.order_id, target, actor=self.context.actor)
        return f"{label}: done"

    def _reprint_job(self) -> str:
        branch_name = "Restaurant"
        if self.order.branch_ids:
            names = self.context.branches.load_names(self.order.branch_ids[:1])
            branch_name = names.get(self.order.branch_ids[0], branch_name)
        print_receipt(self.order, branch_name)
        return "Receipt sent to printer"

    def _start(self, label: str, job: Job) -> None:
        self.busy = True
        self.status_text = label
        self._refresh_content()
        self._execute(job)

    @work(thread=True, exclusive=True, group="order-action")
    def _execute(self, job: Job) -> None:
        try:
            message = job()
        except Exception as exc:
            logger.warning("order action failed order=%s error=%r", self.order.order_id, exc)
            self.bridge.dispatch(self._failed, str(exc))
            return
        self.bridge.dispatch(self._succeeded, message)

    def _succeeded(self, message: str) -> None:
        self.busy = False
        self.app.notify(message)
        self.dismiss(None)

    def _failed(self, message: str) -> None:
        self.busy = False
        self.status_text = message
        self.app.notify(message, severity="error")
        self._refresh_content()

    def _refresh_content(self) -> None:
        self.query_one("#order-body", Static).update(format_order_details(self.order))
        self.query_one("#order-status", Static).update(self.status_text)

        actions_widget = self.query_one("#order-actions", Static)
        help_text = self.query_one("#order-help", Static)
        if not self.available_actions:
            actions_widget.update("")
            help_text.update("Esc/q close")
            return

        if self.cursor_index >= len(self.available_actions):
            self.cursor_index = 0
        content = Text()
        for idx, action in enumerate(self.available_actions):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            style = "bold white" if idx == self.cursor_index else "white"
            if action.key == CANCEL:
                style += " on #5a1e26" if idx == self.cursor_index else ""
            content.append(f"{pointer}{action.label}", style=style)
        actions_widget.update(content)
        help_text.update("J/K/↑/↓ move, Enter run, Esc/q close")
