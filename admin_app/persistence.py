"""SQLite persistence for device-local session state."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from admin_app.config import LOCAL_STATE_DB_PATH
from admin_app.models import LoginAttempts

FAILED_ATTEMPTS_KEY = "failed_login_attempts"
LOCKOUT_UNTIL_KEY = "login_lockout_until"


class LocalStateStore:
    """Small key/value table kept outside the remote store."""

    def __init__(self, db_path: str | Path = LOCAL_STATE_DB_PATH) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def bootstrap_schema(self) -> None:
        """Create the key/value table if it does not already exist."""
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS local_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    def get(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM local_state WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._connect() as conn:
            with conn:
                conn.execute(
                    "INSERT INTO local_state (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )

    def delete(self, *keys: str) -> None:
        with self._connect() as conn:
            with conn:
                conn.executemany("DELETE FROM local_state WHERE key = ?", [(key,) for key in keys])

    def load_login_attempts(self) -> LoginAttempts:
        raw_count = self.get(FAILED_ATTEMPTS_KEY)
        raw_until = self.get(LOCKOUT_UNTIL_KEY)
        try:
            count = int(raw_count) if raw_count is not None else 0
        except ValueError:
            count = 0
        try:
            locked_until = datetime.fromisoformat(raw_until) if raw_until else None
        except ValueError:
            locked_until = None
        return LoginAttempts(failed_count=count, locked_until=locked_until)

    def save_login_attempts(self, attempts: LoginAttempts) -> None:
        self.set(FAILED_ATTEMPTS_KEY, str(attempts.failed_count))
        if attempts.locked_until is None:
            self.delete(LOCKOUT_UNTIL_KEY)
        else:
            self.set(LOCKOUT_UNTIL_KEY, attempts.locked_until.isoformat())

    def clear_login_attempts(self) -> None:
        self.delete(FAILED_ATTEMPTS_KEY, LOCKOUT_UNTIL_KEY)
