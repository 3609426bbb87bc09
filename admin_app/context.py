"""Signed-in session collaborators handed to every screen."""

from __future__ import annotations

from dataclasses import dataclass

from admin_app.models import UserScope
from admin_app.services import BranchDirectory, OrderService, RiderAssignmentService
from admin_app.store import RemoteStore


@dataclass
class AdminContext:
    store: RemoteStore
    scope: UserScope
    branches: BranchDirectory
    orders: OrderService
    riders: RiderAssignmentService

    @classmethod
    def build(cls, store: RemoteStore, scope: UserScope) -> AdminContext:
        return cls(
            store=store,
            scope=scope,
            branches=BranchDirectory(store),
            orders=OrderService(store.db),
            riders=RiderAssignmentService(store.db),
        )

    @property
    def actor(self) -> str:
        return self.scope.email
