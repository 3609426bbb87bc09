"""Paginated, date-filterable order history state."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable

from admin_app.config import ORDER_HISTORY_PAGE_SIZE
from admin_app.errors import ValidationError
from admin_app.models import ALL_BRANCHES, BranchFilter, Order, UserScope
from admin_app.queries import QuerySpec, order_history_query

logger = logging.getLogger(__name__)

# (query, exclusive start-after document or None) -> page of document snapshots
PageFetcher = Callable[[QuerySpec, Any], list[Any]]


class OrderHistoryBrowser:
    """
    Accumulates delivered/cancelled orders newest first, one page at a time.

    The last document of each page is the exclusive cursor of the next one.
    Any change to the date range throws the accumulated pages away.
    """

    def __init__(
        self,
        fetch_page: PageFetcher,
        scope: UserScope,
        branch_filter: BranchFilter = ALL_BRANCHES,
        page_size: int = ORDER_HISTORY_PAGE_SIZE,
    ) -> None:
        self.fetch_page = fetch_page
        self.scope = scope
        self.branch_filter = branch_filter
        self.page_size = page_size
        self.documents: list[Any] = []
        self.cursor: Any = None
        self.has_more = True
        self.loading = False
        self.error = ""
        self.start_date: date | None = None
        self.end_date: date | None = None

    @property
    def orders(self) -> list[Order]:
        return [Order.from_document(doc.id, doc.to_dict()) for doc in self.documents]

    @property
    def is_filtered(self) -> bool:
        return self.start_date is not None

    def current_query(self) -> QuerySpec | None:
        return order_history_query(self.scope, self.branch_filter, self.start_date, self.end_date, self.page_size)

    def reset(self) -> None:
        self.documents = []
        self.cursor = None
        self.has_more = True
        self.error = ""

    def fetch_next_page(self) -> list[Any]:
        if self.loading or not self.has_more:
            return []

        spec = self.current_query()
        if spec is None:
            # No branch assigned: nothing to show, nothing to ask for.
            self.has_more = False
            return []

        self.loading = True
        self.error = ""
        try:
            page = list(self.fetch_page(spec, self.cursor))
        except Exception as exc:
            logger.warning("order history fetch failed: %s", exc)
            self.error = f"Error fetching orders: {exc}"
            return []
        finally:
            self.loading = False

        if page:
            self.cursor = page[-1]
        self.documents.extend(page)
        self.has_more = len(page) == self.page_size
        return page

    def set_date_range(self, start: date, end: date) -> list[Any]:
        if end < start:
            raise ValidationError("End date must not be before start date")
        self.start_date = start
        self.end_date = end
        self.reset()
        return self.fetch_next_page()

    def clear_date_range(self) -> list[Any]:
        self.start_date = None
        self.end_date = None
        self.reset()
        return self.fetch_next_page()

    def retry(self) -> list[Any]:
        self.reset()
        return self.fetch_next_page()
