"""Relay HTTP client — the orchestrator's side of ``/api/sponsor`` and ``/api/execute``.

Every call resolves to a tagged variant; HTTP errors and unreachable relays
become ``RelayFailure`` rather than exceptions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from aidchain_sponsor.client.results import ExecutionReceipt, RelayFailure, SponsorGrant
from aidchain_sponsor.utils.crypto import b64decode

if TYPE_CHECKING:
    from aidchain_sponsor.client.results import ExecuteOutcome, SponsorOutcome, TransactionIntent

logger = logging.getLogger(__name__)


class RelayClient:
    """Async HTTP client for the sponsor relay.

    Usage::

        relay = RelayClient("http://localhost:3001")
        await relay.connect()
        try:
            outcome = await relay.sponsor(intent)
        finally:
            await relay.close()
    """

    def __init__(self, base_url: str, *, timeout: float = 30.0) -> None:
        """Initialize the relay client.

        Args:
            base_url: Relay root URL.
            timeout: Per-request network timeout in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = self._new_client()

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Content-Type": "application/json"},
            timeout=self._timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def sponsor(self, intent: TransactionIntent) -> SponsorOutcome:
        """Request sponsorship for *intent*."""
        body = {
            "network": intent.network,
            "transactionKindBytes": intent.kind_b64,
            "sender": intent.sender,
        }
        data = await self._post("/api/sponsor", body, "Sponsor request failed")
        if isinstance(data, RelayFailure):
            return data

        tx_b64 = data.get("bytes")
        digest = data.get("digest")
        if not isinstance(tx_b64, str) or not isinstance(digest, str) or not digest:
            return RelayFailure("Relay returned an incomplete sponsor grant", status_code=502)
        try:
            tx_bytes = b64decode(tx_b64)
        except ValueError:
            return RelayFailure("Relay returned malformed transaction bytes", status_code=502)
        return SponsorGrant(tx_bytes=tx_bytes, digest=digest)

    async def execute(self, digest: str, signature: str) -> ExecuteOutcome:
        """Execute a sponsored transaction with the user's signature."""
        body = {"digest": digest, "signature": signature}
        data = await self._post("/api/execute", body, "Execute request failed")
        if isinstance(data, RelayFailure):
            return data

        executed = data.get("digest")
        if not isinstance(executed, str) or not executed:
            return RelayFailure("Relay returned no transaction digest", status_code=502)
        return ExecutionReceipt(digest=executed)

    async def health(self) -> bool:
        """Return True if the relay answers ``GET /health`` with status ok."""
        client = self._ensure_connected()
        try:
            response = await client.get("/health")
        except httpx.HTTPError:
            return False
        if not response.is_success:
            return False
        try:
            data = response.json()
        except ValueError:
            return False
        return isinstance(data, dict) and data.get("status") == "ok"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_connected(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = self._new_client()
        return self._client

    async def _post(
        self, path: str, body: dict[str, Any], fallback_error: str
    ) -> dict[str, Any] | RelayFailure:
        client = self._ensure_connected()
        try:
            response = await client.post(path, json=body)
        except httpx.HTTPError as exc:
            logger.warning("Relay %s unreachable: %s", path, exc)
            return RelayFailure(str(exc) or type(exc).__name__)

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            error = data.get("error") if isinstance(data, dict) else None
            details = data.get("details") if isinstance(data, dict) else None
            return RelayFailure(
                error or fallback_error,
                status_code=response.status_code,
                details=tuple(details) if isinstance(details, list) else (),
            )

        if not isinstance(data, dict):
            return RelayFailure("Relay returned a non-JSON response", status_code=502)
        return data
