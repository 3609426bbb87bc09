from admin_app.bridge import LiveBridge
from admin_app.queries import QuerySpec


class FakeOwner:
    app = object()


class FakeStore:
    def __init__(self):
        self.on_change = None
        self.on_error = None
        self.stopped = 0

    def listen(self, spec, on_change, on_error):
        self.on_change = on_change
        self.on_error = on_error
        return self.stop

    def stop(self):
        self.stopped += 1


def test_callbacks_stop_after_close():
    store = FakeStore()
    received = []
    bridge = LiveBridge(FakeOwner())
    bridge.start()
    bridge.listen("orders", store, QuerySpec("Orders"), received.append, lambda exc: None)

    store.on_change(["a"])
    bridge.close()
    store.on_change(["b"])

    assert received == [["a"]]
    assert store.stopped == 1


def test_relisten_replaces_previous_subscription():
    store = FakeStore()
    bridge = LiveBridge(FakeOwner())
    bridge.start()

    bridge.listen("orders", store, QuerySpec("Orders"), lambda docs: None, lambda exc: None)
    bridge.listen("orders", store, QuerySpec("Orders"), lambda docs: None, lambda exc: None)

    assert store.stopped == 1


def test_nothing_is_delivered_before_start():
    received = []
    bridge = LiveBridge(FakeOwner())
    bridge.dispatch(received.append, 1)
    assert received == []
