"""Sign-in screen guarded by the local lockout."""

from __future__ import annotations

import logging
from typing import Callable

from textual import work
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Button, Header, Input, Static

from admin_app.banner import ConnectivityBanner
from admin_app.bridge import LiveBridge
from admin_app.session import UNEXPECTED_ERROR_MESSAGE, LoginGate, LoginOutcome, LoginState

logger = logging.getLogger(__name__)


class LoginScreen(Screen):
    """Email/password form. Submissions run off the UI thread."""

    CSS = """
    LoginScreen {
        align: center middle;
    }

    #login-dialog {
        width: 60;
        height: auto;
        border: round $primary;
        background: $panel;
        padding: 1 2;
    }

    #login-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #login-error {
        color: #ffb3b3;
        margin: 1 0;
    }

    #login-help {
        color: #dddddd;
        margin-top: 1;
    }
    """

    BINDINGS = [
        ("ctrl+q", "app.quit", "Quit"),
    ]

    def __init__(self, gate: LoginGate, on_signed_in: Callable[[str], None]) -> None:
        super().__init__()
        self.gate = gate
        self.on_signed_in = on_signed_in
        self.bridge = LiveBridge(self)
        self.submitting = False
        self.status_text = ""
        self.external_error = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield ConnectivityBanner()
        with Container(id="login-dialog"):
            yield Static("Branch Admin Sign In", id="login-title")
            yield Input(placeholder="Email", id="login-email")
            yield Input(placeholder="Password", password=True, id="login-password")
            yield Static(id="login-error")
            yield Button("Sign In", id="login-submit", variant="primary")
            yield Static("Enter submit. Ctrl+Q quit.", id="login-help")

    def on_mount(self) -> None:
        self.bridge.start()
        self.gate.refresh()
        self.set_interval(1.0, self._tick_lockout)
        self._refresh_content()
        self.query_one("#login-email", Input).focus()

    def on_unmount(self) -> None:
        self.bridge.close()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "login-email":
            self.query_one("#login-password", Input).focus()
            return
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "login-submit":
            self._submit()

    def show_error(self, message: str) -> None:
        """Report a failure after the credentials were accepted (profile load)."""
        self.submitting = False
        self.status_text = ""
        self.external_error = message
        self._refresh_content()

    def _submit(self) -> None:
        if self.submitting or self.gate.state == LoginState.LOCKED:
            return
        email = self.query_one("#login-email", Input).value
        password = self.query_one("#login-password", Input).value
        self.submitting = True
        self.status_text = "Signing in..."
        self.external_error = ""
        self._refresh_content()
        self._sign_in(email, password)

    @work(thread=True, exclusive=True, group="login")
    def _sign_in(self, email: str, password: str) -> None:
        try:
            outcome = self.gate.submit(email, password)
        except Exception:
            logger.exception("sign-in worker failed for %s", email.strip())
            outcome = LoginOutcome(False, UNEXPECTED_ERROR_MESSAGE)
        self.bridge.dispatch(self._finish, email.strip(), outcome)

    def _finish(self, email: str, outcome: LoginOutcome) -> None:
        if outcome.success:
            self.status_text = "Loading profile..."
            self.query_one("#login-password", Input).value = ""
            self._refresh_content()
            self.on_signed_in(email)
            return
        self.submitting = False
        self.status_text = ""
        self.external_error = "" if outcome.message is None else outcome.message
        self._refresh_content()

    def _tick_lockout(self) -> None:
        if self.gate.state != LoginState.LOCKED:
            return
        self.gate.refresh()
        self._refresh_content()

    def _refresh_content(self) -> None:
        error_widget = self.query_one("#login-error", Static)
        button = self.query_one("#login-submit", Button)
        locked = self.gate.state == LoginState.LOCKED

        if locked:
            error_widget.update(self.gate.lockout_message())
        else:
            error_widget.update(self.external_error or self.gate.error or self.status_text)

        button.disabled = self.submitting or locked
        button.label = self.status_text if self.submitting else "Sign In"
        for input_id in ("#login-email", "#login-password"):
            self.query_one(input_id, Input).disabled = locked
