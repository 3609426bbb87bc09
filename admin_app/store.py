"""Firestore access behind the QuerySpec descriptions."""

from __future__ import annotations

import logging
from typing import Any, Callable

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from admin_app.config import (
    FIREBASE_CREDENTIALS_PATH,
    FIREBASE_PROJECT_ID,
    FIRESTORE_READ_TIMEOUT_SECONDS,
    FIRESTORE_WRITE_TIMEOUT_SECONDS,
)
from admin_app.errors import ServiceError
from admin_app.queries import QuerySpec

logger = logging.getLogger(__name__)

SnapshotHandler = Callable[[list[Any]], None]
ErrorHandler = Callable[[Exception], None]


def initialize_firebase(credentials_path: str = FIREBASE_CREDENTIALS_PATH, project_id: str | None = FIREBASE_PROJECT_ID):
    """Initialize the default firebase app once and return a Firestore client."""
    if not firebase_admin._apps:
        try:
            cred = credentials.Certificate(credentials_path)
        except (OSError, ValueError) as exc:
            raise ServiceError(f"Firebase credentials unavailable: {exc}") from exc
        options = {"projectId": project_id} if project_id else None
        firebase_admin.initialize_app(cred, options)
        logger.info("firebase initialized project=%s", project_id or "<from credentials>")
    return firestore.client()


def build_query(db: Any, spec: QuerySpec) -> Any:
    """Translate a QuerySpec into a Firestore query on ``db``."""
    query = db.collection(spec.collection)
    for item in spec.filters:
        query = query.where(filter=FieldFilter(item.field, item.op, item.value))
    if spec.order_by:
        direction = firestore.Query.DESCENDING if spec.descending else firestore.Query.ASCENDING
        query = query.order_by(spec.order_by, direction=direction)
    if spec.limit:
        query = query.limit(spec.limit)
    return query


class RemoteStore:
    """Thin wrapper over a Firestore client used by every screen."""

    def __init__(self, db: Any) -> None:
        self.db = db

    @classmethod
    def from_config(cls) -> RemoteStore:
        return cls(initialize_firebase())

    def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        snapshot = self.db.collection(collection).document(doc_id).get(timeout=FIRESTORE_READ_TIMEOUT_SECONDS)
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def merge_document(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self.db.collection(collection).document(doc_id).set(
            data, merge=True, timeout=FIRESTORE_WRITE_TIMEOUT_SECONDS
        )
        logger.info("merged %s/%s keys=%s", collection, doc_id, sorted(data))

    def fetch(self, spec: QuerySpec, start_after: Any = None) -> list[Any]:
        """Run a one-shot query, continuing after ``start_after`` when given."""
        query = build_query(self.db, spec)
        if start_after is not None:
            query = query.start_after(start_after)
        return list(query.get(timeout=FIRESTORE_READ_TIMEOUT_SECONDS))

    def listen(self, spec: QuerySpec, on_change: SnapshotHandler, on_error: ErrorHandler) -> Callable[[], None]:
        """
        Subscribe to a live query.

        ``on_change`` receives the full result set on every update and runs on
        the SDK's listener thread. The returned callable stops the listener.
        """

        def _callback(snapshots: list[Any], _changes: Any, _read_time: Any) -> None:
            try:
                on_change(list(snapshots))
            except Exception as exc:
                logger.exception("listener callback failed collection=%s", spec.collection)
                on_error(exc)

        try:
            watch = build_query(self.db, spec).on_snapshot(_callback)
        except Exception as exc:
            logger.warning("listen failed collection=%s error=%r", spec.collection, exc)
            on_error(exc)
            return _noop

        return watch.unsubscribe


def _noop() -> None:
    return None
