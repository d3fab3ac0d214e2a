"""Enoki HTTP client — create and execute sponsored transactions.

Provides an async HTTP client for the Enoki v1 API:
- POST /v1/transaction-blocks/sponsor — sponsor a transaction kind
- POST /v1/transaction-blocks/sponsor/{digest} — execute with the user's signature

The private API key is the sponsor credential; it is only ever sent to Enoki.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from aidchain_sponsor.errors.upstream_errors import EnokiError
from aidchain_sponsor.upstream.enoki.models import ExecutedTransaction, SponsoredTransaction

if TYPE_CHECKING:
    from aidchain_sponsor.config.settings import EnokiConfig


class EnokiService:
    """Async HTTP client for the Enoki sponsorship API.

    Usage::

        enoki = EnokiService(config)
        await enoki.connect()
        try:
            grant = await enoki.create_sponsored_transaction(...)
        finally:
            await enoki.close()
    """

    def __init__(self, config: EnokiConfig) -> None:
        """Initialize the Enoki service.

        Args:
            config: Enoki configuration (url, private_key, timeout).
        """
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._config.private_key.get_secret_value()}",
        }
        self._client = httpx.AsyncClient(
            base_url=self._config.url.rstrip("/"),
            headers=headers,
            timeout=self._config.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create_sponsored_transaction(
        self,
        *,
        network: str,
        transaction_kind_bytes: str,
        sender: str,
        allowed_move_call_targets: list[str] | None = None,
        allowed_addresses: list[str] | None = None,
    ) -> SponsoredTransaction:
        """Ask Enoki to attach sponsor gas data to a transaction kind.

        Args:
            network: Sui network name.
            transaction_kind_bytes: Base64 transaction-kind bytes.
            sender: The user's address.
            allowed_move_call_targets: Move targets the sponsor will pay for.
            allowed_addresses: Addresses the transaction may transfer to.

        Returns:
            SponsoredTransaction with the full bytes and digest.

        Raises:
            EnokiError: On transport or API errors (status preserved).
        """
        body: dict[str, Any] = {
            "network": network,
            "transactionBlockKindBytes": transaction_kind_bytes,
            "sender": sender,
        }
        if allowed_move_call_targets is not None:
            body["allowedMoveCallTargets"] = allowed_move_call_targets
        if allowed_addresses:
            body["allowedAddresses"] = allowed_addresses

        response = await self._post("/v1/transaction-blocks/sponsor", body, "sponsor")
        grant = SponsoredTransaction.from_dict(response)
        if not grant.tx_bytes or not grant.digest:
            msg = "Enoki returned an incomplete sponsored transaction"
            raise EnokiError(msg)
        return grant

    async def execute_sponsored_transaction(
        self,
        *,
        digest: str,
        signature: str,
    ) -> ExecutedTransaction:
        """Submit the user's signature for a previously sponsored transaction.

        Raises:
            EnokiError: On transport or API errors (status preserved).
        """
        response = await self._post(
            f"/v1/transaction-blocks/sponsor/{digest}",
            {"signature": signature},
            "execute",
        )
        result = ExecutedTransaction.from_dict(response)
        if not result.digest:
            msg = "Enoki returned no transaction digest"
            raise EnokiError(msg)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_connected(self) -> httpx.AsyncClient:
        """Return the HTTP client, raising if not connected."""
        if self._client is None:
            msg = "Enoki service not connected. Call connect() first."
            raise EnokiError(msg, status_code=500)
        return self._client

    async def _post(self, path: str, body: dict[str, Any], operation: str) -> dict[str, Any]:
        client = self._ensure_connected()
        try:
            response = await client.post(path, json=body)
        except httpx.HTTPError as exc:
            raise EnokiError(f"Enoki {operation} request failed: {exc}", status_code=500) from exc

        if response.is_success:
            try:
                data = response.json()
            except ValueError as exc:
                msg = "Enoki returned a non-JSON response"
                raise EnokiError(msg, status_code=502) from exc
            return data if isinstance(data, dict) else {}

        self._raise_for_status(response, operation)
        return {}  # unreachable, satisfies type checker

    def _raise_for_status(self, response: httpx.Response, operation: str) -> None:
        """Raise an EnokiError carrying the upstream status and error list."""
        status = response.status_code
        errors: list[Any] = []
        message = ""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            raw_errors = body.get("errors")
            if isinstance(raw_errors, list):
                errors = raw_errors
            first = errors[0] if errors else {}
            if isinstance(first, dict):
                message = first.get("message", "")
            message = message or body.get("message", "") or body.get("error", "")

        if not message:
            message = response.text or f"Enoki {operation} failed ({status})"
        raise EnokiError(message, status_code=status, details=errors)
