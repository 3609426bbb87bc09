from firebase_admin import firestore

from admin_app.queries import QuerySpec
from admin_app.store import RemoteStore, build_query


class RecordingQuery:
    def __init__(self, fail_listen=False):
        self.calls = []
        self.fail_listen = fail_listen
        self.callback = None
        self.unsubscribed = False

    def collection(self, name):
        self.calls.append(("collection", name))
        return self

    def where(self, filter=None):
        self.calls.append(("where", filter.field_path, filter.op_string, filter.value))
        return self

    def order_by(self, field, direction=None):
        self.calls.append(("order_by", field, direction))
        return self

    def limit(self, count):
        self.calls.append(("limit", count))
        return self

    def on_snapshot(self, callback):
        if self.fail_listen:
            raise PermissionError("denied")
        self.callback = callback
        return self

    def unsubscribe(self):
        self.unsubscribed = True


def test_build_query_translates_every_clause():
    spec = (
        QuerySpec("Orders")
        .where("status", "in", ["delivered", "cancelled"])
        .where("branchIds", "array_contains", "b1")
        .ordered("timestamp", descending=True)
        .limited(10)
    )
    recorder = RecordingQuery()

    build_query(recorder, spec)

    assert recorder.calls == [
        ("collection", "Orders"),
        ("where", "status", "in", ["delivered", "cancelled"]),
        ("where", "branchIds", "array_contains", "b1"),
        ("order_by", "timestamp", firestore.Query.DESCENDING),
        ("limit", 10),
    ]


def test_listen_forwards_snapshots_and_returns_unsubscribe():
    recorder = RecordingQuery()
    received = []
    stop = RemoteStore(recorder).listen(QuerySpec("Drivers"), received.append, lambda exc: None)

    recorder.callback(("doc1", "doc2"), [], None)
    stop()

    assert received == [["doc1", "doc2"]]
    assert recorder.unsubscribed


def test_listen_setup_failure_reports_error():
    errors = []
    stop = RemoteStore(RecordingQuery(fail_listen=True)).listen(QuerySpec("Drivers"), lambda docs: None, errors.append)

    assert isinstance(errors[0], PermissionError)
    assert stop() is None
