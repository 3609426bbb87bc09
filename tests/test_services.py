from datetime import datetime, timedelta

import requests
from firebase_admin import firestore

from admin_app.services import (
    INVALID_CREDENTIALS_MESSAGE,
    AuthService,
    BranchDirectory,
    OrderService,
    RiderAssignmentService,
    load_user_scope,
)


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def test_sign_in_success_records_user():
    session = FakeSession(FakeResponse(200, {"email": "a@b.com", "idToken": "tok"}))
    auth = AuthService(api_key="key", session=session)

    assert auth.sign_in("a@b.com", "pw") is None
    assert auth.user_email == "a@b.com"
    _, kwargs = session.calls[0]
    assert kwargs["params"] == {"key": "key"}
    assert kwargs["json"]["email"] == "a@b.com"

    auth.sign_out()
    assert auth.user_email is None


def test_sign_in_maps_error_codes():
    for code in ("INVALID_LOGIN_CREDENTIALS", "EMAIL_NOT_FOUND", "INVALID_PASSWORD"):
        session = FakeSession(FakeResponse(400, {"error": {"message": code}}))
        assert AuthService(api_key="key", session=session).sign_in("a@b.com", "pw") == INVALID_CREDENTIALS_MESSAGE

    throttled = FakeSession(
        FakeResponse(400, {"error": {"message": "TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled"}})
    )
    assert AuthService(api_key="key", session=throttled).sign_in("a@b.com", "pw").startswith("Too many attempts")


def test_sign_in_network_error():
    session = FakeSession(error=requests.ConnectionError("down"))
    assert AuthService(api_key="key", session=session).sign_in("a@b.com", "pw").startswith("Network error")


def test_sign_in_without_api_key_is_refused():
    session = FakeSession()
    assert AuthService(api_key="", session=session).sign_in("a@b.com", "pw").startswith("Sign-in is not configured")
    assert session.calls == []


class FakeDocStore:
    def __init__(self, documents):
        self.documents = documents
        self.reads = []

    def get_document(self, collection, doc_id):
        self.reads.append((collection, doc_id))
        value = self.documents.get((collection, doc_id))
        if isinstance(value, Exception):
            raise value
        return value


def test_load_user_scope():
    store = FakeDocStore(
        {
            ("staff", "boss@x.com"): {"isActive": True, "role": "super_admin", "branchIds": ["b1", "b2"]},
            ("staff", "gone@x.com"): {"isActive": False, "role": "branch_admin", "branchIds": ["b1"]},
        }
    )

    scope = load_user_scope(store, "boss@x.com")
    assert scope.is_super_admin
    assert scope.branch_ids == ("b1", "b2")
    assert scope.is_multi_branch
    assert load_user_scope(store, "gone@x.com") is None
    assert load_user_scope(store, "who@x.com") is None


def test_branch_directory_caches_with_expiry():
    store = FakeDocStore({("Branch", "b1"): {"name": "Downtown"}, ("Branch", "b2"): RuntimeError("offline")})
    now = [datetime(2024, 5, 1, 12, 0)]
    directory = BranchDirectory(store, clock=lambda: now[0], expiry=timedelta(minutes=30))

    assert directory.load_names(["b1", "b2"]) == {"b1": "Downtown", "b2": "b2"}
    directory.load_names(["b1"])
    assert store.reads.count(("Branch", "b1")) == 1

    now[0] += timedelta(minutes=31)
    directory.load_names(["b1"])
    assert store.reads.count(("Branch", "b1")) == 2


class FakeSnapshot:
    def __init__(self, data):
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeRef:
    def __init__(self, path, data=None):
        self.path = path
        self.data = data

    def get(self, timeout=None, transaction=None):
        return FakeSnapshot(self.data)


class FakeBatch:
    def __init__(self):
        self.updates = []
        self.committed = False

    def update(self, ref, data):
        self.updates.append((ref.path, data))

    def commit(self, timeout=None):
        self.committed = True


class FakeCollection:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    def document(self, doc_id):
        key = f"{self.name}/{doc_id}"
        return self.db.refs.setdefault(key, FakeRef(key))


class FakeFirestore:
    def __init__(self):
        self.refs = {}
        self.batches = []

    def collection(self, name):
        return FakeCollection(self, name)

    def batch(self):
        batch = FakeBatch()
        self.batches.append(batch)
        return batch

    def transaction(self):
        raise RuntimeError("transactions unavailable")


def test_status_update_is_a_single_batch():
    db = FakeFirestore()

    OrderService(db).update_status("o1", "preparing")

    batch = db.batches[0]
    assert batch.committed
    assert batch.updates == [("Orders/o1", {"status": "preparing"})]


def test_delivered_delivery_order_frees_its_rider():
    db = FakeFirestore()
    db.refs["Orders/o1"] = FakeRef("Orders/o1", {"riderId": "d1", "Order_type": "delivery"})

    OrderService(db).update_status("o1", "delivered")

    updates = dict(db.batches[0].updates)
    assert updates["Drivers/d1"] == {"assignedOrderId": "", "isAvailable": True}
    assert updates["Orders/o1"]["status"] == "delivered"
    assert updates["Orders/o1"]["timestamps.delivered"] is firestore.SERVER_TIMESTAMP


def test_picked_up_stamps_its_timestamp():
    db = FakeFirestore()

    OrderService(db).update_status("o1", "pickedUp")

    _, updates = db.batches[0].updates[0]
    assert updates["timestamps.pickedUp"] is firestore.SERVER_TIMESTAMP


def test_manual_assign_reports_failure_instead_of_raising():
    result = RiderAssignmentService(FakeFirestore()).manual_assign("o1", "d1")

    assert not result.success
    assert result.message.startswith("Failed to assign rider:")
