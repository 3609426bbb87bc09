"""Runtime configuration defaults for the store, session and printing."""

from __future__ import annotations

import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return int(raw, 0)


FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH", "serviceAccountKey.json")
FIREBASE_WEB_API_KEY = os.getenv("FIREBASE_WEB_API_KEY", "")
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID") or None

LOCAL_STATE_DB_PATH = os.getenv("LOCAL_STATE_DB_PATH", "data/session.db")
DEBUG_LOG_PATH = os.getenv("DEBUG_LOG_PATH", "/tmp/branch-admin-debug.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Login rate limiting.
MAX_LOGIN_ATTEMPTS = _env_int("MAX_LOGIN_ATTEMPTS", 5)
LOGIN_LOCKOUT = timedelta(minutes=_env_int("LOGIN_LOCKOUT_MINUTES", 15))

BUSINESS_DAY_START_HOUR = 6

ORDER_HISTORY_PAGE_SIZE = 10
RECENT_ORDERS_LIMIT = 5

CONNECTIVITY_PROBE_HOST = os.getenv("CONNECTIVITY_PROBE_HOST", "google.com")
CONNECTIVITY_PROBE_TIMEOUT_SECONDS = 5.0
CONNECTIVITY_POLL_SECONDS = 30.0
CONNECTIVITY_SETTLE_SECONDS = 2.0

FIRESTORE_READ_TIMEOUT_SECONDS = 10.0
FIRESTORE_WRITE_TIMEOUT_SECONDS = 15.0
BRANCH_CACHE_EXPIRY = timedelta(minutes=30)

CURRENCY = "QAR"

# Receipt printer, same hardware profile as the counter printer.
PRINTER_USB_VENDOR_ID = _env_int("PRINTER_USB_VENDOR_ID", 0x28E9)
PRINTER_USB_PRODUCT_ID = _env_int("PRINTER_USB_PRODUCT_ID", 0x0289)
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 28
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_LEFT_INDENT_PX = 8
