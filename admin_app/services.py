"""Remote collaborators: sign-in, staff scope, order status, riders, branch names."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable

import requests
from firebase_admin import firestore

from admin_app.config import (
    BRANCH_CACHE_EXPIRY,
    FIREBASE_WEB_API_KEY,
    FIRESTORE_READ_TIMEOUT_SECONDS,
    FIRESTORE_WRITE_TIMEOUT_SECONDS,
)
from admin_app.constant import (
    ASSIGNMENT_BLOCKED_STATUSES,
    COLLECTION_BRANCH,
    COLLECTION_DRIVERS,
    COLLECTION_ORDERS,
    COLLECTION_RIDER_ASSIGNMENTS,
    COLLECTION_STAFF,
    STATUS_CANCELLED,
    STATUS_DELIVERED,
    STATUS_PICKED_UP,
    STATUS_RIDER_ASSIGNED,
)
from admin_app.data import is_delivery_order, normalize_status, status_equals
from admin_app.errors import ServiceError
from admin_app.models import UserScope

logger = logging.getLogger(__name__)

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."
_AUTH_ERROR_MESSAGES = {
    "EMAIL_NOT_FOUND": INVALID_CREDENTIALS_MESSAGE,
    "INVALID_PASSWORD": INVALID_CREDENTIALS_MESSAGE,
    "INVALID_LOGIN_CREDENTIALS": INVALID_CREDENTIALS_MESSAGE,
    "INVALID_EMAIL": "Invalid email address.",
    "USER_DISABLED": "This account has been disabled.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Please try again later.",
}


class AuthService:
    """Email/password sign-in against the Firebase Auth REST endpoint."""

    def __init__(
        self,
        api_key: str = FIREBASE_WEB_API_KEY,
        session: requests.Session | None = None,
        timeout: float = FIRESTORE_READ_TIMEOUT_SECONDS,
    ) -> None:
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user_email: str | None = None
        self.id_token: str | None = None

    def sign_in(self, email: str, password: str) -> str | None:
        """Return None on success, otherwise an operator-facing message."""
        if not self.api_key:
            return "Sign-in is not configured (missing FIREBASE_WEB_API_KEY)."

        try:
            response = self.session.post(
                SIGN_IN_URL,
                params={"key": self.api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("sign-in request failed: %r", exc)
            return "Network error. Please check your connection."

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.ok:
            self.user_email = payload.get("email") or email
            self.id_token = payload.get("idToken")
            return None

        code = str((payload.get("error") or {}).get("message") or "")
        code = code.split(" ")[0].strip()
        logger.info("sign-in rejected code=%s status=%s", code or "<none>", response.status_code)
        return _AUTH_ERROR_MESSAGES.get(code, "Sign-in failed. Please try again.")

    def sign_out(self) -> None:
        self.user_email = None
        self.id_token = None


def load_user_scope(store: Any, email: str) -> UserScope | None:
    """Read the staff profile for ``email``; inactive or missing profiles give None."""
    data = store.get_document(COLLECTION_STAFF, email)
    if data is None or not data.get("isActive", False):
        return None
    branch_ids = tuple(str(b) for b in data.get("branchIds") or [])
    return UserScope(email=email, role=str(data.get("role") or ""), branch_ids=branch_ids)


class OrderService:
    """Order status transitions with the side effects each one carries."""

    def __init__(self, db: Any) -> None:
        self.db = db

    def update_status(self, order_id: str, new_status: str, reason: str | None = None, actor: str | None = None) -> None:
        if status_equals(new_status, STATUS_CANCELLED):
            self.cancel(order_id, reason, actor)
            return

        order_ref = self.db.collection(COLLECTION_ORDERS).document(order_id)
        updates: dict[str, Any] = {"status": new_status}
        batch = self.db.batch()

        if status_equals(new_status, STATUS_DELIVERED):
            updates["timestamps.delivered"] = firestore.SERVER_TIMESTAMP
            snapshot = order_ref.get(timeout=FIRESTORE_READ_TIMEOUT_SECONDS)
            data = snapshot.to_dict() or {}
            rider_id = data.get("riderId")
            if rider_id and is_delivery_order(data.get("Order_type")):
                driver_ref = self.db.collection(COLLECTION_DRIVERS).document(rider_id)
                batch.update(driver_ref, {"assignedOrderId": "", "isAvailable": True})
        elif status_equals(new_status, STATUS_PICKED_UP):
            updates["timestamps.pickedUp"] = firestore.SERVER_TIMESTAMP
        elif status_equals(new_status, STATUS_RIDER_ASSIGNED):
            updates["timestamps.riderAssigned"] = firestore.SERVER_TIMESTAMP

        batch.update(order_ref, updates)
        batch.commit(timeout=FIRESTORE_WRITE_TIMEOUT_SECONDS)
        logger.info("order %s -> %s", order_id, new_status)

    def cancel(self, order_id: str, reason: str | None, actor: str | None) -> None:
        """Cancel atomically, releasing any assigned rider. Delivered orders are refused."""
        order_ref = self.db.collection(COLLECTION_ORDERS).document(order_id)
        drivers = self.db.collection(COLLECTION_DRIVERS)

        @firestore.transactional
        def _cancel(transaction: Any) -> None:
            snapshot = order_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise ServiceError("Order does not exist.")
            data = snapshot.to_dict() or {}
            if status_equals(data.get("status"), STATUS_DELIVERED):
                raise ServiceError("Cannot cancel an order that is already delivered.")

            updates: dict[str, Any] = {
                "status": STATUS_CANCELLED,
                "timestamps.cancelled": firestore.SERVER_TIMESTAMP,
                "riderId": firestore.DELETE_FIELD,
                "cancelledBy": actor or "Admin",
            }
            if reason:
                updates["cancellationReason"] = reason
            transaction.update(order_ref, updates)

            rider_id = data.get("riderId")
            if rider_id:
                transaction.update(drivers.document(rider_id), {"assignedOrderId": "", "isAvailable": True})

        _cancel(self.db.transaction())
        logger.info("order %s cancelled by %s", order_id, actor or "Admin")
        _clear_auto_assignment(self.db, order_id)


@dataclass(frozen=True)
class AssignmentResult:
    success: bool
    message: str


class RiderAssignmentService:
    """Manual rider assignment, overriding any automatic assignment in flight."""

    def __init__(self, db: Any) -> None:
        self.db = db

    def manual_assign(self, order_id: str, rider_id: str, actor: str | None = None) -> AssignmentResult:
        order_ref = self.db.collection(COLLECTION_ORDERS).document(order_id)
        driver_ref = self.db.collection(COLLECTION_DRIVERS).document(rider_id)

        @firestore.transactional
        def _assign(transaction: Any) -> str:
            order = order_ref.get(transaction=transaction)
            if not order.exists:
                raise ServiceError("Order not found.")
            order_data = order.to_dict() or {}
            status = normalize_status(order_data.get("status"))
            if status in ASSIGNMENT_BLOCKED_STATUSES:
                raise ServiceError(f"Cannot assign rider to an order with status: {status}")

            driver = driver_ref.get(transaction=transaction)
            if not driver.exists:
                raise ServiceError("Rider not found.")
            driver_data = driver.to_dict() or {}
            if not driver_data.get("isAvailable", False):
                raise ServiceError("Rider is no longer available.")

            transaction.update(
                order_ref,
                {
                    "riderId": rider_id,
                    "status": STATUS_RIDER_ASSIGNED,
                    "timestamps.riderAssigned": firestore.SERVER_TIMESTAMP,
                    "assignmentNotes": f"Manually assigned by {actor or 'Admin'}",
                    "autoAssignStarted": firestore.DELETE_FIELD,
                },
            )
            transaction.update(driver_ref, {"assignedOrderId": order_id, "isAvailable": False})
            return str(driver_data.get("name") or rider_id)

        try:
            rider_name = _assign(self.db.transaction())
        except ServiceError as exc:
            logger.info("manual assign refused order=%s rider=%s: %s", order_id, rider_id, exc)
            return AssignmentResult(False, str(exc))
        except Exception as exc:
            logger.exception("manual assign failed order=%s rider=%s", order_id, rider_id)
            return AssignmentResult(False, f"Failed to assign rider: {exc}")

        _clear_auto_assignment(self.db, order_id)
        logger.info("order %s assigned to rider %s", order_id, rider_id)
        return AssignmentResult(True, f"Assigned to {rider_name}")


def _clear_auto_assignment(db: Any, order_id: str) -> None:
    """Drop the pending auto-assignment record; failures are logged only."""
    try:
        db.collection(COLLECTION_RIDER_ASSIGNMENTS).document(order_id).delete(
            timeout=FIRESTORE_WRITE_TIMEOUT_SECONDS
        )
    except Exception as exc:
        logger.warning("could not clear auto assignment for %s: %r", order_id, exc)


class BranchDirectory:
    """Branch id -> display name, cached per session with expiry."""

    def __init__(
        self,
        store: Any,
        clock: Callable[[], datetime] = datetime.now,
        expiry: timedelta = BRANCH_CACHE_EXPIRY,
    ) -> None:
        self.store = store
        self.clock = clock
        self.expiry = expiry
        self._cache: dict[str, tuple[str, datetime]] = {}

    def load_names(self, branch_ids: list[str] | tuple[str, ...]) -> dict[str, str]:
        now = self.clock()
        for branch_id in branch_ids:
            cached = self._cache.get(branch_id)
            if cached is not None and now - cached[1] < self.expiry:
                continue
            try:
                data = self.store.get_document(COLLECTION_BRANCH, branch_id)
            except Exception as exc:
                logger.warning("branch name lookup failed id=%s error=%r", branch_id, exc)
                continue
            name = str((data or {}).get("name") or branch_id)
            self._cache[branch_id] = (name, now)

        return {branch_id: self.name_for(branch_id) for branch_id in branch_ids}

    def name_for(self, branch_id: str) -> str:
        cached = self._cache.get(branch_id)
        return cached[0] if cached is not None else branch_id

    def clear(self) -> None:
        self._cache.clear()
