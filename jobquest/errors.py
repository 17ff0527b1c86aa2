"""Exceptions raised by the JobQuest client."""
from __future__ import annotations

from typing import Any


class ApiError(Exception):
    """Backend answered non-2xx, or the request never got an answer."""

    def __init__(self, message: str, status: int | None = None, payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload

    @property
    def transient(self) -> bool:
        return self.status is None or self.status >= 500

    def mentions(self, *phrases: str) -> bool:
        low = self.message.lower()
        return any(p in low for p in phrases)

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (HTTP {self.status})"


class RequestCancelled(Exception):
    """The view that issued the request was closed or superseded."""


class ValidationError(Exception):
    """Client-side form validation failed; nothing was sent."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("; ".join(errors.values()))
        self.errors = errors


class PermissionDenied(Exception):
    """Client-side role gate. The backend enforces the real check."""
