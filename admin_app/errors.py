"""Exception types raised by admin console modules."""

from __future__ import annotations


class AdminError(Exception):
    """Base class for errors the console reports to the operator."""


class ValidationError(AdminError, ValueError):
    """Input rejected locally; never sent to the store."""


class ScheduleError(ValidationError):
    """Working-hours edit or save rejected."""

    def __init__(self, message: str, day: str | None = None) -> None:
        super().__init__(message)
        self.day = day


class ScopeError(AdminError):
    """The signed-in staff member has no branch to work with."""


class ServiceError(AdminError):
    """A remote collaborator refused or failed an operation."""
