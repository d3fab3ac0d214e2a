"""SponsorError — base exception class for all relay and client errors."""

from __future__ import annotations

from typing import Any


class SponsorError(Exception):
    """Base error for sponsorship operations.

    Attributes:
        message: Human-readable error description.
        status_code: Suggested HTTP status code.
        code: Machine-readable error code string.
        details: Structured detail entries (upstream error list, etc.).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        code: str = "sponsor-error",
        details: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = list(details) if details else []
