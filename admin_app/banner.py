"""Offline banner shown at the top of every screen."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static


class ConnectivityBanner(Static):
    """Hidden while online; the app flips it on every connectivity change."""

    DEFAULT_CSS = """
    ConnectivityBanner {
        display: none;
        height: 1;
        padding: 0 1;
        background: #b23a48;
        color: white;
        text-style: bold;
    }

    ConnectivityBanner.-offline {
        display: block;
    }
    """

    def on_mount(self) -> None:
        self.update(Text("⚠ No Internet Connection.  F5 retry"))
        monitor = getattr(self.app, "monitor", None)
        self.set_online(True if monitor is None else monitor.online)

    def set_online(self, online: bool) -> None:
        self.set_class(not online, "-offline")
