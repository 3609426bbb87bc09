"""Declarative descriptions of every remote query the screens issue."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Any

from admin_app.business_day import business_day_start
from admin_app.config import ORDER_HISTORY_PAGE_SIZE, RECENT_ORDERS_LIMIT
from admin_app.constant import (
    COLLECTION_DRIVERS,
    COLLECTION_MENU_ITEMS,
    COLLECTION_ORDERS,
    DRIVER_STATUS_ONLINE,
    HISTORY_STATUSES,
)
from admin_app.models import AllBranches, BranchFilter, SpecificBranch, UserScope


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class QuerySpec:
    """Collection query independent of any client library."""

    collection: str
    filters: tuple[Filter, ...] = ()
    order_by: str | None = None
    descending: bool = False
    limit: int | None = None

    def where(self, field: str, op: str, value: Any) -> QuerySpec:
        return replace(self, filters=self.filters + (Filter(field, op, value),))

    def ordered(self, field: str, descending: bool = False) -> QuerySpec:
        return replace(self, order_by=field, descending=descending)

    def limited(self, count: int) -> QuerySpec:
        return replace(self, limit=count)

    def filter_for(self, field: str, op: str) -> Filter | None:
        for item in self.filters:
            if item.field == field and item.op == op:
                return item
        return None


def branch_scope_ids(scope: UserScope, branch_filter: BranchFilter = AllBranches()) -> list[str] | None:
    """
    Branch ids a query must be restricted to.

    None means unrestricted (super admin, all branches). An empty list means
    the caller may see nothing and no query should be issued.
    """
    if isinstance(branch_filter, SpecificBranch):
        if scope.is_super_admin or branch_filter.branch_id in scope.branch_ids:
            return [branch_filter.branch_id]
        return []
    if scope.is_super_admin:
        return None
    return list(scope.branch_ids)


def scoped(spec: QuerySpec, branch_ids: list[str] | None) -> QuerySpec | None:
    if branch_ids is None:
        return spec
    if not branch_ids:
        return None
    if len(branch_ids) == 1:
        return spec.where("branchIds", "array_contains", branch_ids[0])
    return spec.where("branchIds", "array_contains_any", list(branch_ids))


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time(0, 0, 0)).astimezone()


def inclusive_end_of_day(day: date) -> datetime:
    return datetime.combine(day, time(23, 59, 59)).astimezone()


def order_history_query(
    scope: UserScope,
    branch_filter: BranchFilter = AllBranches(),
    start_date: date | None = None,
    end_date: date | None = None,
    page_size: int = ORDER_HISTORY_PAGE_SIZE,
) -> QuerySpec | None:
    spec = scoped(QuerySpec(COLLECTION_ORDERS), branch_scope_ids(scope, branch_filter))
    if spec is None:
        return None

    spec = spec.where("status", "in", list(HISTORY_STATUSES)).ordered("timestamp", descending=True)
    if start_date is not None:
        spec = spec.where("timestamp", ">=", start_of_day(start_date))
    if end_date is not None:
        spec = spec.where("timestamp", "<=", inclusive_end_of_day(end_date))
    return spec.limited(page_size)


def todays_orders_query(scope: UserScope, branch_filter: BranchFilter, now: datetime) -> QuerySpec | None:
    spec = QuerySpec(COLLECTION_ORDERS).where("timestamp", ">=", business_day_start(now))
    return scoped(spec, branch_scope_ids(scope, branch_filter))


def recent_orders_query(
    scope: UserScope, branch_filter: BranchFilter, now: datetime, limit: int = RECENT_ORDERS_LIMIT
) -> QuerySpec | None:
    spec = todays_orders_query(scope, branch_filter, now)
    if spec is None:
        return None
    return spec.ordered("timestamp", descending=True).limited(limit)


def available_drivers_query(scope: UserScope, branch_filter: BranchFilter) -> QuerySpec | None:
    spec = (
        QuerySpec(COLLECTION_DRIVERS)
        .where("isAvailable", "==", True)
        .where("status", "==", DRIVER_STATUS_ONLINE)
    )
    return scoped(spec, branch_scope_ids(scope, branch_filter))


def menu_items_query() -> QuerySpec:
    return QuerySpec(COLLECTION_MENU_ITEMS).where("isAvailable", "==", True)


def rider_candidates_query() -> QuerySpec:
    # Branch membership is matched client-side against the order's branch.
    return QuerySpec(COLLECTION_DRIVERS).where("isAvailable", "==", True)
