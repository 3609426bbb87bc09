"""Paginated order history screen."""

from __future__ import annotations

from datetime import date
from typing import Any, Callable

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.screen import Screen
from textual.widgets import Header, Static

from admin_app.banner import ConnectivityBanner
from admin_app.bridge import LiveBridge
from admin_app.context import AdminContext
from admin_app.date_range_modal import DateRangeModal
from admin_app.errors import ValidationError
from admin_app.history import OrderHistoryBrowser
from admin_app.models import BranchFilter, Order
from admin_app.order_modal import OrderDetailModal
from admin_app.rendering import format_order_row, render_pointer_list, visible_rows


class OrderHistoryScreen(Screen):
    """Delivered and cancelled orders, newest first, fetched a page at a time."""

    CSS = """
    #history-filter {
        padding: 0 1;
        color: #dddddd;
    }

    #history-pane {
        height: 1fr;
        border: round $primary;
        padding: 0 1;
    }

    #history-list {
        height: 1fr;
    }

    #history-footer {
        padding: 0 1;
    }

    #history-help {
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
        ("enter", "open_selected", "Details"),
        ("m", "load_more", "More"),
        ("f", "filter_dates", "Filter"),
        ("x", "clear_filter", "Clear filter"),
        ("r", "retry", "Retry"),
    ]

    cursor_index = reactive(0)

    def __init__(self, context: AdminContext, branch_filter: BranchFilter) -> None:
        super().__init__()
        self.context = context
        self.browser = OrderHistoryBrowser(context.store.fetch, context.scope, branch_filter)
        self.bridge = LiveBridge(self)
        self.orders: list[Order] = []
        self.busy = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield ConnectivityBanner()
        yield Static(id="history-filter")
        with Vertical(id="history-pane"):
            yield Static(id="history-list")
            yield Static(id="history-footer")
        yield Static(
            "J/K move, Enter details, M more, F filter dates, X clear filter, R retry, Esc back",
            id="history-help",
        )

    def on_mount(self) -> None:
        self.bridge.start()
        self._run(self.browser.fetch_next_page)

    def on_unmount(self) -> None:
        self.bridge.close()

    def _run(self, operation: Callable[[], Any]) -> None:
        if self.busy:
            return
        self.busy = True
        self._refresh_content()
        self._load(operation)

    @work(thread=True, exclusive=True, group="history")
    def _load(self, operation: Callable[[], Any]) -> None:
        try:
            operation()
        except ValidationError as exc:
            self.bridge.dispatch(self._finish, str(exc))
            return
        self.bridge.dispatch(self._finish, "")

    def _finish(self, problem: str) -> None:
        self.busy = False
        self.orders = self.browser.orders
        if problem:
            self.app.notify(problem, severity="warning")
        self._refresh_content()

    def action_back(self) -> None:
        self.app.pop_screen()

    def action_move_cursor(self, delta: int) -> None:
        if not self.orders:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.orders)
        # Reaching the last row pulls the next page.
        if self.cursor_index == len(self.orders) - 1 and self.browser.has_more:
            self._run(self.browser.fetch_next_page)
        self._refresh_content()

    def action_open_selected(self) -> None:
        if not self.orders:
            return
        order = self.orders[min(self.cursor_index, len(self.orders) - 1)]
        self.app.push_screen(OrderDetailModal(order, self.context, read_only=True))

    def action_load_more(self) -> None:
        if self.browser.has_more:
            self._run(self.browser.fetch_next_page)

    def action_filter_dates(self) -> None:
        modal = DateRangeModal(self.browser.start_date, self.browser.end_date)
        self.app.push_screen(modal, self._apply_range)

    def _apply_range(self, selected: tuple[date, date] | None) -> None:
        if selected is None:
            return
        start, end = selected
        self.cursor_index = 0
        self._run(lambda: self.browser.set_date_range(start, end))

    def action_clear_filter(self) -> None:
        if not self.browser.is_filtered:
            return
        self.cursor_index = 0
        self._run(self.browser.clear_date_range)

    def action_retry(self) -> None:
        self.cursor_index = 0
        self._run(self.browser.retry)

    def _refresh_content(self) -> None:
        try:
            filter_bar = self.query_one("#history-filter", Static)
            widget = self.query_one("#history-list", Static)
            footer = self.query_one("#history-footer", Static)
        except NoMatches:
            return

        browser = self.browser
        if browser.is_filtered and browser.start_date and browser.end_date:
            filter_bar.update(f"Showing {browser.start_date:%b %d, %Y} to {browser.end_date:%b %d, %Y}  (X clear)")
        else:
            filter_bar.update("All dates")

        if browser.error and not self.orders:
            widget.update(Text(f"{browser.error}\nPress R to retry.", style="#ffb3b3"))
        elif not self.orders:
            widget.update("Loading orders..." if self.busy else "No orders found.")
        else:
            if self.cursor_index >= len(self.orders):
                self.cursor_index = len(self.orders) - 1
            lines = [format_order_row(order) for order in self.orders]
            widget.update(render_pointer_list(lines, self.cursor_index, visible_rows(widget.size.height)))

        if self.busy and self.orders:
            footer.update("Loading more...")
        elif browser.error and self.orders:
            footer.update(Text(browser.error, style="#ffb3b3"))
        elif self.orders and not browser.has_more:
            footer.update(Text("No more orders.", style="dim"))
        else:
            footer.update("")
