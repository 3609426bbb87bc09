from datetime import datetime, timezone

import pytest
from textual.app import App
from textual.widgets import Button, Input

from admin_app import dashboard_screen
from admin_app.context import AdminContext
from admin_app.dashboard_screen import DashboardScreen
from admin_app.login_screen import LoginScreen
from admin_app.models import UserScope
from admin_app.persistence import LocalStateStore
from admin_app.rendering import format_money
from admin_app.session import LOCAL_STATE_ERROR_MESSAGE, LoginGate
from admin_app.timing_screen import TimingScreen


class ScreenHost(App):
    def __init__(self, hosted):
        super().__init__()
        self.hosted = hosted

    def on_mount(self):
        self.push_screen(self.hosted)


async def settle(pilot):
    await pilot.app.workers.wait_for_complete()
    await pilot.pause()


class FakeBranches:
    def load_names(self, branch_ids):
        return {branch_id: branch_id.upper() for branch_id in branch_ids}


class FlakyBranchStore:
    def __init__(self, failing):
        self.failing = dict(failing)
        self.reads = []

    def get_document(self, collection, doc_id):
        self.reads.append(doc_id)
        if self.failing.get(doc_id, 0) > 0:
            self.failing[doc_id] -= 1
            raise RuntimeError("deadline exceeded")
        return None


class ListenStore:
    def __init__(self):
        self.specs = []

    def listen(self, spec, on_change, on_error):
        self.specs.append(spec)
        return lambda: None

    def day_starts(self):
        return [
            spec.filter_for("timestamp", ">=").value
            for spec in self.specs
            if spec.filter_for("timestamp", ">=") is not None
        ]


def make_context(store, branch_ids, role="branch_admin"):
    return AdminContext(
        store=store,
        scope=UserScope("admin@example.com", role, tuple(branch_ids)),
        branches=FakeBranches(),
        orders=None,
        riders=None,
    )


@pytest.mark.asyncio
async def test_login_with_unusable_local_state_returns_to_idle(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    gate = LoginGate(LocalStateStore(blocker / "state.db"), lambda email, password: None)
    signed_in = []
    screen = LoginScreen(gate, on_signed_in=signed_in.append)

    async with ScreenHost(screen).run_test() as pilot:
        await pilot.pause()
        screen.query_one("#login-email", Input).value = "a@b.com"
        screen.query_one("#login-password", Input).value = "secret"
        screen._submit()
        await settle(pilot)

        assert signed_in == []
        assert not screen.submitting
        assert not screen.query_one("#login-submit", Button).disabled
        assert screen.external_error == LOCAL_STATE_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_failed_hours_load_can_be_retried():
    store = FlakyBranchStore({"b1": 1})
    screen = TimingScreen(make_context(store, ["b1"]))

    async with ScreenHost(screen).run_test() as pilot:
        await settle(pilot)
        assert screen.editor.branch_id is None
        assert "deadline exceeded" in screen.error

        await pilot.press("r")
        await settle(pilot)

        assert store.reads == ["b1", "b1"]
        assert screen.editor.branch_id == "b1"
        assert screen.error == ""


@pytest.mark.asyncio
async def test_failed_branch_switch_keeps_current_branch():
    store = FlakyBranchStore({"b2": 1})
    screen = TimingScreen(make_context(store, ["b1", "b2"]))

    async with ScreenHost(screen).run_test() as pilot:
        await settle(pilot)
        assert screen.editor.branch_id == "b1"

        await pilot.press("b")
        await settle(pilot)

        assert store.reads == ["b1", "b2"]
        assert screen.branch_index == 0
        assert screen.editor.branch_id == "b1"

        await pilot.press("b")
        await settle(pilot)

        assert screen.branch_index == 1
        assert screen.editor.branch_id == "b2"


@pytest.mark.asyncio
async def test_dashboard_moves_to_new_business_day(monkeypatch):
    clock = {"now": datetime(2024, 5, 2, 5, 30, tzinfo=timezone.utc)}
    monkeypatch.setattr(dashboard_screen, "local_now", lambda: clock["now"])
    store = ListenStore()
    screen = DashboardScreen(make_context(store, ["b1"]), on_logout=lambda: None)

    async with ScreenHost(screen).run_test() as pilot:
        await settle(pilot)
        assert store.day_starts()[-1] == datetime(2024, 5, 1, 6, 0, tzinfo=timezone.utc)
        assert screen._rollover_timer is not None

        clock["now"] = datetime(2024, 5, 2, 7, 0, tzinfo=timezone.utc)
        screen._roll_over()

        assert store.day_starts()[-1] == datetime(2024, 5, 2, 6, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_revenue_without_branch_shows_zero_amount():
    screen = DashboardScreen(make_context(ListenStore(), []), on_logout=lambda: None)

    async with ScreenHost(screen).run_test() as pilot:
        await settle(pilot)
        assert screen.stats["revenue"].value == format_money(0.0)
        assert screen.stats["orders"].value == "0"
