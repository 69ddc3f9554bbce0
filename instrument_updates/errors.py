"""Error types raised by the instrument updates run."""

from __future__ import annotations

from typing import Any


class InstrumentUpdatesError(Exception):
    """Base class for every fatal run error."""


class FetchError(InstrumentUpdatesError):
    """Upstream unreachable or answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ValidationError(InstrumentUpdatesError):
    """
    Upstream payload violates the instrument schema.

    `invalid_element` is the offending value (the whole data field, a row,
    or a single field) so the failure can be diagnosed without refetching.
    """

    def __init__(self, message: str, invalid_element: Any = None, issues: list | None = None) -> None:
        super().__init__(message)
        self.invalid_element = invalid_element
        self.issues = issues or []

    def __str__(self) -> str:
        if self.invalid_element is None:
            return str(self.args[0])
        return f"{self.args[0]}: {self.invalid_element!r}"


class StorageError(InstrumentUpdatesError):
    """Store read, write or existence check failed (not-found excluded)."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class RenderError(InstrumentUpdatesError):
    """Changelog rendering failed. State has already been committed."""
