"""Main Textual app class."""

from __future__ import annotations

import logging

from textual import work
from textual.app import App
from textual.binding import Binding
from textual.timer import Timer

from admin_app.banner import ConnectivityBanner
from admin_app.config import CONNECTIVITY_POLL_SECONDS, CONNECTIVITY_SETTLE_SECONDS, LOCAL_STATE_DB_PATH
from admin_app.connectivity import ConnectivityMonitor
from admin_app.context import AdminContext
from admin_app.dashboard_screen import DashboardScreen
from admin_app.errors import AdminError
from admin_app.login_screen import LoginScreen
from admin_app.logs import configure_logging
from admin_app.persistence import LocalStateStore
from admin_app.printer import check_printer_dependencies
from admin_app.services import AuthService, load_user_scope
from admin_app.session import LOCAL_STATE_ERRORS, LoginGate
from admin_app.store import RemoteStore

logger = logging.getLogger(__name__)

NETWORK_WATCH_SECONDS = 5.0


class BranchAdminApp(App):
    """Restaurant branch administration console."""

    TITLE = "Branch Admin"
    SUB_TITLE = "Orders / Riders / Working hours"

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    BINDINGS = [
        Binding("f5", "retry_connection", "Retry connection", priority=True),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, local_state_path: str = LOCAL_STATE_DB_PATH) -> None:
        super().__init__()
        configure_logging()
        self.local_state = LocalStateStore(local_state_path)
        self.auth = AuthService()
        self.gate = LoginGate(self.local_state, self.auth.sign_in)
        self.monitor = ConnectivityMonitor(on_change=self._on_connectivity_change)
        self.store: RemoteStore | None = None
        self.context: AdminContext | None = None
        self.system_status = ""
        self._timers: list[Timer] = []
        self._settle_timer: Timer | None = None

    def on_mount(self) -> None:
        try:
            self.local_state.bootstrap_schema()
        except LOCAL_STATE_ERRORS:
            logger.exception("local state store unavailable at %s", self.local_state.db_path)
            self.notify("Local session state is unavailable.", severity="error")
        _, msg = check_printer_dependencies()
        self.system_status = msg
        logger.info("on_mount printer_status=%r", msg)

        self._timers = [
            self.set_interval(CONNECTIVITY_POLL_SECONDS, self.action_retry_connection),
            self.set_interval(NETWORK_WATCH_SECONDS, self._watch_network),
        ]
        self.action_retry_connection()
        self.push_screen(self._login_screen())

    def on_unmount(self) -> None:
        for timer in self._timers:
            timer.stop()
        self._timers = []
        if self._settle_timer is not None:
            self._settle_timer.stop()
            self._settle_timer = None

    def _login_screen(self) -> LoginScreen:
        return LoginScreen(self.gate, on_signed_in=self._load_scope)

    @work(thread=True, exclusive=True, group="scope")
    def _load_scope(self, email: str) -> None:
        """Resolve the staff profile once credentials are accepted."""
        try:
            if self.store is None:
                self.store = RemoteStore.from_config()
            scope = load_user_scope(self.store, email)
        except AdminError as exc:
            self.call_from_thread(self._scope_failed, str(exc))
            return
        except Exception as exc:
            logger.exception("staff profile load failed for %s", email)
            self.call_from_thread(self._scope_failed, f"Could not load your profile: {exc}")
            return

        if scope is None:
            self.call_from_thread(self._scope_failed, "Access denied: no active staff profile for this account.")
            return
        self.call_from_thread(self._enter_dashboard, AdminContext.build(self.store, scope))

    def _scope_failed(self, message: str) -> None:
        self.auth.sign_out()
        if isinstance(self.screen, LoginScreen):
            self.screen.show_error(message)
        self.notify(message, severity="error")

    def _enter_dashboard(self, context: AdminContext) -> None:
        self.context = context
        logger.info(
            "signed in as %s role=%s branches=%s", context.scope.email, context.scope.role, context.scope.branch_ids
        )
        if not context.scope.branch_ids and not context.scope.is_super_admin:
            self.notify("No branch is assigned to this account.", severity="warning")
        self.switch_screen(DashboardScreen(context, on_logout=self.logout))

    def logout(self) -> None:
        logger.info("signed out %s", self.context.scope.email if self.context else "<none>")
        self.auth.sign_out()
        self.context = None
        while len(self.screen_stack) > 2:
            self.pop_screen()
        self.switch_screen(self._login_screen())

    def action_retry_connection(self) -> None:
        self._probe_connectivity()

    @work(thread=True, exclusive=True, group="connectivity")
    def _probe_connectivity(self) -> None:
        self.monitor.check()

    def _watch_network(self) -> None:
        if self.monitor.network_changed():
            logger.info("network interfaces changed, re-checking in %.0fs", CONNECTIVITY_SETTLE_SECONDS)
            if self._settle_timer is not None:
                self._settle_timer.stop()
            self._settle_timer = self.set_timer(CONNECTIVITY_SETTLE_SECONDS, self._settled)

    def _settled(self) -> None:
        self._settle_timer = None
        self.action_retry_connection()

    def _on_connectivity_change(self, online: bool) -> None:
        # Runs on the probe worker thread.
        try:
            self.call_from_thread(self._apply_connectivity, online)
        except RuntimeError as exc:
            logger.debug("connectivity change dropped: %r", exc)

    def _apply_connectivity(self, online: bool) -> None:
        for screen in self.screen_stack:
            for banner in screen.query(ConnectivityBanner):
                banner.set_online(online)
        if online:
            self.notify("Back online")
