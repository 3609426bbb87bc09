from datetime import date

import pytest

from admin_app.errors import ValidationError
from admin_app.history import OrderHistoryBrowser
from admin_app.models import UserScope

SCOPE = UserScope("m@example.com", "branch_admin", ("b1",))


class FakeDoc:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    def to_dict(self):
        return dict(self._data)


class FakeFetcher:
    def __init__(self, docs):
        self.docs = docs
        self.calls = []
        self.error = None

    def __call__(self, spec, start_after):
        self.calls.append((spec, start_after))
        if self.error is not None:
            raise self.error
        start = 0 if start_after is None else self.docs.index(start_after) + 1
        return self.docs[start : start + spec.limit]


def make_docs(count):
    return [FakeDoc(f"o{i}", {"status": "delivered", "totalAmount": i}) for i in range(count)]


def test_pages_accumulate_until_a_short_page():
    docs = make_docs(25)
    fetcher = FakeFetcher(docs)
    browser = OrderHistoryBrowser(fetcher, SCOPE, page_size=10)

    browser.fetch_next_page()
    assert len(browser.documents) == 10
    assert browser.has_more
    assert browser.cursor is docs[9]

    browser.fetch_next_page()
    browser.fetch_next_page()
    assert len(browser.documents) == 25
    assert not browser.has_more
    assert fetcher.calls[1][1] is docs[9]

    assert browser.fetch_next_page() == []
    assert len(fetcher.calls) == 3


def test_exact_multiple_needs_one_empty_fetch():
    fetcher = FakeFetcher(make_docs(20))
    browser = OrderHistoryBrowser(fetcher, SCOPE, page_size=10)

    browser.fetch_next_page()
    browser.fetch_next_page()
    assert browser.has_more

    assert browser.fetch_next_page() == []
    assert not browser.has_more
    assert len(browser.documents) == 20


def test_date_range_resets_pages():
    fetcher = FakeFetcher(make_docs(15))
    browser = OrderHistoryBrowser(fetcher, SCOPE, page_size=10)
    browser.fetch_next_page()

    browser.set_date_range(date(2024, 5, 1), date(2024, 5, 1))

    spec, start_after = fetcher.calls[-1]
    assert start_after is None
    assert spec.filter_for("timestamp", "<=") is not None
    assert len(browser.documents) == 10
    assert browser.is_filtered


def test_reversed_date_range_is_rejected():
    browser = OrderHistoryBrowser(FakeFetcher([]), SCOPE)
    with pytest.raises(ValidationError):
        browser.set_date_range(date(2024, 5, 2), date(2024, 5, 1))


def test_fetch_error_is_kept_for_retry():
    fetcher = FakeFetcher(make_docs(5))
    fetcher.error = RuntimeError("offline")
    browser = OrderHistoryBrowser(fetcher, SCOPE, page_size=10)

    assert browser.fetch_next_page() == []
    assert browser.error == "Error fetching orders: offline"
    assert not browser.loading

    fetcher.error = None
    browser.retry()
    assert browser.error == ""
    assert [order.order_id for order in browser.orders] == ["o0", "o1", "o2", "o3", "o4"]


def test_unassigned_scope_never_queries():
    fetcher = FakeFetcher(make_docs(5))
    browser = OrderHistoryBrowser(fetcher, UserScope("n@example.com", "branch_admin", ()))

    assert browser.fetch_next_page() == []
    assert not browser.has_more
    assert fetcher.calls == []
