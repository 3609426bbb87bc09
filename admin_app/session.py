"""Login form validation and the locally rate-limited sign-in gate."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from admin_app.config import LOGIN_LOCKOUT, MAX_LOGIN_ATTEMPTS
from admin_app.models import LoginAttempts
from admin_app.persistence import LocalStateStore

logger = logging.getLogger(__name__)

# Returns None on success, otherwise a message fit for the operator.
Authenticator = Callable[[str, str], "str | None"]

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."
LOCAL_STATE_ERROR_MESSAGE = "Could not access local session state."

LOCAL_STATE_ERRORS = (sqlite3.Error, OSError)


class LoginState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    LOCKED = "locked"
    ERROR = "error"


@dataclass(frozen=True)
class LoginOutcome:
    success: bool
    message: str | None = None
    locked_until: datetime | None = None


def validate_login_form(email: str, password: str) -> dict[str, str]:
    """Structural checks only; returns field name -> problem."""
    errors: dict[str, str] = {}
    if not email or "@" not in email:
        errors["email"] = "Invalid email address"
    if not password:
        errors["password"] = "Password is required"
    return errors


def format_remaining(delta: timedelta) -> str:
    seconds = max(0, int(delta.total_seconds()))
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes}m {seconds:02d}s"


class LoginGate:
    """
    State machine over IDLE / SUBMITTING / LOCKED / ERROR.

    The failed-attempt count and lockout deadline live in the local state
    store, so they survive restarts. Expiry is checked lazily, whenever the
    gate is refreshed (screen entry) or a submission arrives.
    """

    def __init__(
        self,
        store: LocalStateStore,
        authenticator: Authenticator,
        clock: Callable[[], datetime] = datetime.now,
        max_attempts: int = MAX_LOGIN_ATTEMPTS,
        lockout: timedelta = LOGIN_LOCKOUT,
    ) -> None:
        self.store = store
        self.authenticator = authenticator
        self.clock = clock
        self.max_attempts = max_attempts
        self.lockout = lockout
        self.state = LoginState.IDLE
        self.error: str | None = None
        self.attempts = LoginAttempts()

    def refresh(self) -> LoginState:
        try:
            return self._reload()
        except LOCAL_STATE_ERRORS:
            return self._local_state_failed()

    def _reload(self) -> LoginState:
        self.attempts = self.store.load_login_attempts()
        now = self.clock()
        if self.attempts.is_expired(now):
            logger.info("login lockout expired, clearing failed attempts")
            self.store.clear_login_attempts()
            self.attempts = LoginAttempts()
            self.error = None

        if self.attempts.is_locked(now):
            self.state = LoginState.LOCKED
        elif self.state == LoginState.LOCKED:
            self.state = LoginState.IDLE
        return self.state

    def remaining(self) -> timedelta | None:
        if self.attempts.locked_until is None:
            return None
        return max(timedelta(0), self.attempts.locked_until - self.clock())

    def lockout_message(self) -> str:
        remaining = self.remaining() or timedelta(0)
        return f"Too many failed attempts. Try again in {format_remaining(remaining)}."

    def submit(self, email: str, password: str) -> LoginOutcome:
        try:
            return self._submit(email, password)
        except LOCAL_STATE_ERRORS:
            self._local_state_failed()
            return LoginOutcome(False, self.error)

    def _local_state_failed(self) -> LoginState:
        logger.exception("local session state unavailable at %s", self.store.db_path)
        self.state = LoginState.ERROR
        self.error = LOCAL_STATE_ERROR_MESSAGE
        return self.state

    def _submit(self, email: str, password: str) -> LoginOutcome:
        if self._reload() == LoginState.LOCKED:
            self.error = self.lockout_message()
            return LoginOutcome(False, self.error, self.attempts.locked_until)

        problems = validate_login_form(email, password)
        if problems:
            self.state = LoginState.IDLE
            self.error = next(iter(problems.values()))
            return LoginOutcome(False, self.error)

        now = self.clock()
        self.state = LoginState.SUBMITTING
        self.error = None
        try:
            failure = self.authenticator(email.strip(), password.strip())
        except Exception:
            logger.exception("sign-in raised for %s", email.strip())
            self.state = LoginState.ERROR
            self.error = UNEXPECTED_ERROR_MESSAGE
            return LoginOutcome(False, self.error)

        if failure is None:
            self.store.clear_login_attempts()
            self.attempts = LoginAttempts()
            self.state = LoginState.IDLE
            logger.info("sign-in succeeded for %s", email.strip())
            return LoginOutcome(True)

        return self._record_failure(failure, now)

    def _record_failure(self, message: str, now: datetime) -> LoginOutcome:
        count = self.attempts.failed_count + 1
        if count >= self.max_attempts:
            self.attempts = LoginAttempts(failed_count=count, locked_until=now + self.lockout)
            self.store.save_login_attempts(self.attempts)
            self.state = LoginState.LOCKED
            self.error = self.lockout_message()
            logger.warning("login locked until %s after %d failures", self.attempts.locked_until, count)
            return LoginOutcome(False, self.error, self.attempts.locked_until)

        self.attempts = LoginAttempts(failed_count=count)
        self.store.save_login_attempts(self.attempts)
        self.state = LoginState.IDLE
        left = self.max_attempts - count
        self.error = f"{message} ({left} attempt{'s' if left != 1 else ''} left)"
        logger.info("sign-in failed (%d/%d)", count, self.max_attempts)
        return LoginOutcome(False, self.error)
