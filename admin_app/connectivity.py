"""Internet reachability probe and the online/offline state it drives."""

from __future__ import annotations

import logging
import socket
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from admin_app.config import CONNECTIVITY_PROBE_HOST, CONNECTIVITY_PROBE_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

# getaddrinfo has no timeout of its own; a lookup that hangs keeps its worker.
_LOOKUP_POOL = ThreadPoolExecutor(max_workers=2, thread_name_prefix="dns-probe")


def has_internet_connection(
    host: str = CONNECTIVITY_PROBE_HOST,
    timeout: float = CONNECTIVITY_PROBE_TIMEOUT_SECONDS,
) -> bool:
    """True when ``host`` resolves to at least one address within ``timeout``."""
    try:
        future = _LOOKUP_POOL.submit(socket.getaddrinfo, host, 443)
        addresses = future.result(timeout=timeout)
    except Exception as exc:
        logger.info("connectivity probe failed host=%s error=%r", host, exc)
        return False
    return any(info[4] and info[4][0] for info in addresses)


def network_signature() -> tuple[str, ...]:
    """Names of the host's network interfaces; changes hint at a reachability change."""
    try:
        return tuple(sorted(name for _, name in socket.if_nameindex()))
    except (OSError, AttributeError):
        return ()


class ConnectivityMonitor:
    """
    Tracks whether the device is online.

    ``check`` runs the probe and reports transitions through ``on_change``.
    ``network_changed`` compares interface snapshots so callers can schedule
    a settled re-check when the network layer moves.
    """

    def __init__(
        self,
        probe: Callable[[], bool] = has_internet_connection,
        signature: Callable[[], tuple[str, ...]] = network_signature,
        on_change: Callable[[bool], None] | None = None,
    ) -> None:
        self.probe = probe
        self.signature = signature
        self.on_change = on_change
        self.online = True
        self._last_signature = signature()

    def check(self) -> bool:
        try:
            online = bool(self.probe())
        except Exception as exc:
            logger.info("connectivity probe raised: %r", exc)
            online = False

        if online != self.online:
            self.online = online
            logger.info("connectivity changed online=%s", online)
            if self.on_change is not None:
                self.on_change(online)
        return online

    def network_changed(self) -> bool:
        current = self.signature()
        if current == self._last_signature:
            return False
        self._last_signature = current
        return True
