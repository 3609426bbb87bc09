"""Live dashboard: today's stats, recent orders and navigation."""

from __future__ import annotations

import logging
from typing import Any, Callable

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.screen import Screen
from textual.timer import Timer
from textual.widgets import Header, Static

from admin_app.banner import ConnectivityBanner
from admin_app.bridge import LiveBridge
from admin_app.business_day import business_day_start, local_now, until_rollover
from admin_app.confirm_modal import ConfirmModal
from admin_app.context import AdminContext
from admin_app.dashboard import LiveStat, count_documents, revenue_total
from admin_app.history_screen import OrderHistoryScreen
from admin_app.models import ALL_BRANCHES, BranchFilter, Order, SpecificBranch
from admin_app.order_modal import OrderDetailModal
from admin_app.queries import (
    QuerySpec,
    available_drivers_query,
    menu_items_query,
    recent_orders_query,
    todays_orders_query,
)
from admin_app.rendering import format_money, format_order_row, format_stat_card, render_pointer_list, visible_rows
from admin_app.timing_screen import TimingScreen

logger = logging.getLogger(__name__)

STAT_KEYS = ("orders", "revenue", "drivers", "menu")


class DashboardScreen(Screen):
    """Four independently live figures over the current business day plus the latest orders."""

    CSS = """
    #branch-bar {
        padding: 0 1;
        color: #dddddd;
    }

    #stats {
        height: 5;
        margin: 1 0;
    }

    .stat-card {
        width: 1fr;
        border: round $secondary;
        padding: 0 1;
        margin: 0 1;
    }

    #recent-pane {
        height: 1fr;
        border: round $primary;
        padding: 0 1;
    }

    #recent-list {
        height: 1fr;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #dashboard-help {
        color: #dddddd;
        padding: 0 1;
    }
    """

    BINDINGS = [
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("up", "move_cursor(-1)", "Previous"),
        ("enter", "open_selected", "Open order"),
        ("b", "cycle_branch", "Branch"),
        ("h", "open_history", "History"),
        ("t", "open_timings", "Timings"),
        ("r", "reload", "Reload"),
        ("l", "logout", "Log out"),
        ("ctrl+q", "app.quit", "Quit"),
    ]

    cursor_index = reactive(0)

    def __init__(self, context: AdminContext, on_logout: Callable[[], None]) -> None:
        super().__init__()
        self.context = context
        self.on_logout = on_logout
        self.bridge = LiveBridge(self)
        self.branch_filter: BranchFilter = ALL_BRANCHES
        self.stats = {
            "orders": LiveStat("Today's Orders"),
            "revenue": LiveStat("Today's Revenue"),
            "drivers": LiveStat("Available Drivers"),
            "menu": LiveStat("Menu Items"),
        }
        self.recent: list[Order] = []
        self.recent_loading = True
        self.recent_error = ""
        self.branch_names: dict[str, str] = {}
        self._rollover_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield ConnectivityBanner()
        yield Static(id="branch-bar")
        with Horizontal(id="stats"):
            for key in STAT_KEYS:
                yield Static(id=f"stat-{key}", classes="stat-card")
        with Vertical(id="recent-pane"):
            yield Static("Recent Orders", classes="pane-title")
            yield Static(id="recent-list")
        yield Static(
            "J/K move, Enter open, B branch, H history, T timings, R reload, L log out, Ctrl+Q quit",
            id="dashboard-help",
        )

    def on_mount(self) -> None:
        self.bridge.start()
        self._load_branch_names()
        self._subscribe()
        self._schedule_rollover()

    def on_unmount(self) -> None:
        if self._rollover_timer is not None:
            self._rollover_timer.stop()
            self._rollover_timer = None
        self.bridge.close()

    def _schedule_rollover(self) -> None:
        delay = max(until_rollover(local_now()).total_seconds(), 1.0)
        self._rollover_timer = self.set_timer(delay, self._roll_over)

    def _roll_over(self) -> None:
        """Restart the day-bound queries at the 06:00 shift change."""
        self._subscribe()
        self._schedule_rollover()

    def _subscribe(self) -> None:
        """(Re)start every live query for the current branch filter and business day."""
        self.bridge.cancel_all()
        scope = self.context.scope
        now = local_now()
        todays = todays_orders_query(scope, self.branch_filter, now)

        self._listen_stat("orders", todays, lambda docs: str(count_documents(docs)))
        self._listen_stat(
            "revenue", todays, lambda docs: format_money(revenue_total(doc.to_dict() or {} for doc in docs))
        )
        self._listen_stat("drivers", available_drivers_query(scope, self.branch_filter), lambda docs: str(len(docs)))
        self._listen_stat("menu", menu_items_query(), lambda docs: str(len(docs)))

        recent = recent_orders_query(scope, self.branch_filter, now)
        self.recent_error = ""
        if recent is None:
            self.recent = []
            self.recent_loading = False
        else:
            self.recent_loading = True
            self.bridge.listen("recent", self.context.store, recent, self._apply_recent, self._recent_failed)

        logger.info("dashboard subscribed filter=%s day_start=%s", self.branch_filter, business_day_start(now))
        self._refresh_all()

    def _listen_stat(self, key: str, spec: QuerySpec | None, summarize: Callable[[list[Any]], str]) -> None:
        stat = self.stats[key]
        if spec is None:
            stat.resolve(summarize([]))
            return
        stat.loading()
        self.bridge.listen(
            key,
            self.context.store,
            spec,
            lambda docs: self._apply_stat(key, summarize(docs)),
            lambda exc: self._stat_failed(key, exc),
        )

    def _apply_stat(self, key: str, value: str) -> None:
        self.stats[key].resolve(value)
        self._refresh_stat(key)

    def _stat_failed(self, key: str, exc: Exception) -> None:
        logger.warning("stat %s failed: %r", key, exc)
        self.stats[key].fail(str(exc))
        self._refresh_stat(key)

    def _apply_recent(self, documents: list[Any]) -> None:
        self.recent = [Order.from_document(doc.id, doc.to_dict()) for doc in documents]
        self.recent_loading = False
        self.recent_error = ""
        self._refresh_recent()

    def _recent_failed(self, exc: Exception) -> None:
        self.recent_loading = False
        self.recent_error = f"Error loading orders: {exc}"
        self._refresh_recent()

    @work(thread=True, exclusive=True, group="branch-names")
    def _load_branch_names(self) -> None:
        names = self.context.branches.load_names(self.context.scope.branch_ids)
        self.bridge.dispatch(self._apply_branch_names, names)

    def _apply_branch_names(self, names: dict[str, str]) -> None:
        self.branch_names = names
        self._refresh_branch_bar()

    def action_move_cursor(self, delta: int) -> None:
        if not self.recent:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.recent)
        self._refresh_recent()

    def action_open_selected(self) -> None:
        if not self.recent:
            return
        order = self.recent[min(self.cursor_index, len(self.recent) - 1)]
        self.app.push_screen(OrderDetailModal(order, self.context))

    def action_cycle_branch(self) -> None:
        scope = self.context.scope
        if not scope.is_multi_branch:
            return
        options: list[BranchFilter] = [ALL_BRANCHES]
        options.extend(SpecificBranch(branch_id) for branch_id in scope.branch_ids)
        current = options.index(self.branch_filter) if self.branch_filter in options else 0
        self.branch_filter = options[(current + 1) % len(options)]
        self.cursor_index = 0
        self._subscribe()

    def action_open_history(self) -> None:
        self.app.push_screen(OrderHistoryScreen(self.context, self.branch_filter))

    def action_open_timings(self) -> None:
        self.app.push_screen(TimingScreen(self.context))

    def action_reload(self) -> None:
        self._subscribe()

    def action_logout(self) -> None:
        def _confirmed(confirmed: bool | None) -> None:
            if confirmed:
                self.on_logout()

        self.app.push_screen(ConfirmModal("Log out", "End this session?"), _confirmed)

    def _branch_label(self) -> str:
        if isinstance(self.branch_filter, SpecificBranch):
            branch_id = self.branch_filter.branch_id
            return self.branch_names.get(branch_id, branch_id)
        scope = self.context.scope
        if scope.is_super_admin:
            return "All branches"
        if not scope.branch_ids:
            return "No branch assigned"
        return ", ".join(self.branch_names.get(b, b) for b in scope.branch_ids)

    def _refresh_all(self) -> None:
        self._refresh_branch_bar()
        for key in STAT_KEYS:
            self._refresh_stat(key)
        self._refresh_recent()

    def _refresh_branch_bar(self) -> None:
        try:
            bar = self.query_one("#branch-bar", Static)
        except NoMatches:
            return
        text = Text()
        text.append(f"{self.context.scope.email}  ", style="bold")
        text.append(f"Branch: {self._branch_label()}")
        if self.context.scope.is_multi_branch:
            text.append("  (B to switch)", style="dim")
        bar.update(text)

    def _refresh_stat(self, key: str) -> None:
        try:
            card = self.query_one(f"#stat-{key}", Static)
        except NoMatches:
            return
        card.update(format_stat_card(self.stats[key]))

    def _refresh_recent(self) -> None:
        try:
            widget = self.query_one("#recent-list", Static)
        except NoMatches:
            return
        if self.recent_error:
            widget.update(Text(f"{self.recent_error}\nPress R to retry.", style="#ffb3b3"))
            return
        if self.recent_loading:
            widget.update("Loading orders...")
            return
        if not self.recent:
            widget.update("No orders yet today.")
            return

        if self.cursor_index >= len(self.recent):
            self.cursor_index = len(self.recent) - 1
        lines = [format_order_row(order) for order in self.recent]
        widget.update(render_pointer_list(lines, self.cursor_index, visible_rows(widget.size.height)))
