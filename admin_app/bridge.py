"""Hand-off of listener and worker results onto the UI thread."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from textual.app import App
from textual.dom import DOMNode

from admin_app.queries import QuerySpec

logger = logging.getLogger(__name__)


class LiveBridge:
    """
    Owns the live subscriptions of one screen.

    Callbacks arriving from listener or worker threads are replayed on the
    UI thread, and only while the owner is still displayed.
    """

    def __init__(self, owner: DOMNode) -> None:
        self.owner = owner
        self.active = False
        self._app: App | None = None
        self._stops: dict[str, Callable[[], None]] = {}

    def start(self) -> None:
        """Call on the UI thread once the owner is mounted."""
        self._app = self.owner.app
        self.active = True

    def listen(
        self,
        key: str,
        store: Any,
        spec: QuerySpec,
        on_change: Callable[[list[Any]], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        """Replace the subscription registered under ``key``."""
        self.cancel(key)
        self._stops[key] = store.listen(
            spec,
            lambda docs: self.dispatch(on_change, docs),
            lambda exc: self.dispatch(on_error, exc),
        )

    def dispatch(self, callback: Callable[..., None], *args: Any) -> None:
        if not self.active or self._app is None:
            return
        if threading.current_thread() is threading.main_thread():
            self._guarded(callback, *args)
            return
        try:
            self._app.call_from_thread(self._guarded, callback, *args)
        except RuntimeError as exc:
            # The app is shutting down; the result has nowhere to go.
            logger.debug("dropped callback %s: %r", getattr(callback, "__name__", callback), exc)

    def _guarded(self, callback: Callable[..., None], *args: Any) -> None:
        if self.active:
            callback(*args)

    def cancel(self, key: str) -> None:
        stop = self._stops.pop(key, None)
        if stop is None:
            return
        try:
            stop()
        except Exception as exc:
            logger.warning("unsubscribe failed key=%s error=%r", key, exc)

    def cancel_all(self) -> None:
        for key in list(self._stops):
            self.cancel(key)

    def close(self) -> None:
        self.active = False
        self.cancel_all()
