from datetime import datetime

from admin_app.models import LoginAttempts
from admin_app.persistence import FAILED_ATTEMPTS_KEY, LocalStateStore


def test_login_attempts_round_trip(tmp_path):
    store = LocalStateStore(tmp_path / "nested" / "state.db")
    store.bootstrap_schema()

    assert store.load_login_attempts() == LoginAttempts()

    locked = LoginAttempts(failed_count=5, locked_until=datetime(2024, 5, 1, 12, 15))
    store.save_login_attempts(locked)
    assert store.load_login_attempts() == locked

    store.save_login_attempts(LoginAttempts(failed_count=2))
    assert store.load_login_attempts() == LoginAttempts(failed_count=2)

    store.clear_login_attempts()
    assert store.load_login_attempts() == LoginAttempts()


def test_corrupt_values_read_as_defaults(tmp_path):
    store = LocalStateStore(tmp_path / "state.db")
    store.bootstrap_schema()
    store.set(FAILED_ATTEMPTS_KEY, "many")

    assert store.load_login_attempts().failed_count == 0
