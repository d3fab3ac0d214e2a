"""Errors raised by outbound services — the Enoki API and the Sui full node."""

from __future__ import annotations

from typing import Any

from aidchain_sponsor.errors.sponsor_errors import SponsorError


class EnokiError(SponsorError):
    """Error from the Enoki sponsorship API.

    ``status_code`` is the upstream HTTP status so the relay can forward it.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 502,
        details: list[Any] | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, code="enoki-error", details=details)


class LedgerRPCError(SponsorError):
    """Error from the Sui JSON-RPC full node."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 502,
        rpc_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, code="ledger-rpc-error")
        self.rpc_code = rpc_code
