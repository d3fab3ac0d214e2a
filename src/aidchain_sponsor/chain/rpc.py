"""Sui JSON-RPC client — coins, gas price, objects, execution, confirmation.

Async HTTP client for the Sui full-node JSON-RPC API:
- suix_getCoins — coins owned by an address
- suix_getReferenceGasPrice — current reference gas price
- sui_getObject — object version/digest/owner
- sui_executeTransactionBlock — submit signed transaction bytes
- sui_getTransactionBlock — look up an executed transaction
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any

import httpx

from aidchain_sponsor.chain.models import SUI_COIN_TYPE, Coin, CoinPage, SuiObject, TransactionBlock
from aidchain_sponsor.errors.upstream_errors import LedgerRPCError

logger = logging.getLogger(__name__)

# JSON-RPC error code for "transaction not found yet"
_NOT_FOUND_CODES = (-32602, -32000)


class SuiRPCClient:
    """Async JSON-RPC client for a Sui full node.

    Usage::

        rpc = SuiRPCClient("https://fullnode.testnet.sui.io:443")
        await rpc.connect()
        try:
            coins = await rpc.get_all_coins(address)
        finally:
            await rpc.close()
    """

    def __init__(self, url: str, *, timeout: float = 30.0) -> None:
        self._url = url
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._ids = itertools.count(1)

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._url,
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

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_coins(
        self,
        owner: str,
        *,
        coin_type: str = SUI_COIN_TYPE,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> CoinPage:
        """Fetch one page of coins of *coin_type* owned by *owner*."""
        result = await self.call("suix_getCoins", [owner, coin_type, cursor, limit])
        return CoinPage.from_dict(result)

    async def get_all_coins(self, owner: str, *, coin_type: str = SUI_COIN_TYPE) -> list[Coin]:
        """Fetch every coin of *coin_type* owned by *owner*, following cursors."""
        coins: list[Coin] = []
        cursor: str | None = None
        while True:
            page = await self.get_coins(owner, coin_type=coin_type, cursor=cursor)
            coins.extend(page.data)
            if not page.has_next_page or not page.next_cursor:
                return coins
            cursor = page.next_cursor

    async def get_reference_gas_price(self) -> int:
        return int(await self.call("suix_getReferenceGasPrice", []))

    async def get_object(self, object_id: str) -> SuiObject:
        """Fetch object metadata.

        Raises:
            LedgerRPCError: If the object does not exist.
        """
        result = await self.call("sui_getObject", [object_id, {"showOwner": True}])
        data = result.get("data") if isinstance(result, dict) else None
        if not isinstance(data, dict):
            error = result.get("error") if isinstance(result, dict) else None
            raise LedgerRPCError(f"Object {object_id} not found: {error}", status_code=404)
        return SuiObject.from_dict(data)

    async def execute_transaction_block(
        self,
        tx_bytes_b64: str,
        signatures: list[str],
    ) -> TransactionBlock:
        """Submit signed transaction bytes and wait for local execution."""
        result = await self.call(
            "sui_executeTransactionBlock",
            [tx_bytes_b64, signatures, {"showEffects": True}, "WaitForLocalExecution"],
        )
        return TransactionBlock.from_dict(result)

    async def get_transaction_block(self, digest: str) -> TransactionBlock:
        result = await self.call("sui_getTransactionBlock", [digest, {"showEffects": True}])
        return TransactionBlock.from_dict(result)

    async def wait_for_transaction(
        self,
        digest: str,
        *,
        timeout: float = 60.0,
        poll_interval: float = 2.0,
    ) -> TransactionBlock:
        """Poll until *digest* is visible on the full node.

        Raises:
            LedgerRPCError: If the transaction is still unknown after *timeout*.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            try:
                return await self.get_transaction_block(digest)
            except LedgerRPCError as exc:
                if exc.rpc_code not in _NOT_FOUND_CODES:
                    raise
            if loop.time() >= deadline:
                msg = f"Timed out waiting for transaction {digest}"
                raise LedgerRPCError(msg, status_code=504)
            logger.debug("Transaction %s not yet available, retrying", digest)
            await asyncio.sleep(poll_interval)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_connected(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "Sui RPC client not connected. Call connect() first."
            raise LedgerRPCError(msg, status_code=500)
        return self._client

    async def call(self, method: str, params: list[Any]) -> Any:
        """Perform a raw JSON-RPC call and return its ``result``.

        Raises:
            LedgerRPCError: On transport errors, HTTP errors, or RPC errors.
        """
        client = self._ensure_connected()
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = await client.post("", json=payload)
        except httpx.HTTPError as exc:
            raise LedgerRPCError(f"Sui RPC {method} failed: {exc}") from exc

        if not response.is_success:
            raise LedgerRPCError(
                f"Sui RPC {method} failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )

        body = response.json()
        if "error" in body:
            error = body["error"] or {}
            raise LedgerRPCError(
                f"Sui RPC {method} error: {error.get('message', error)}",
                rpc_code=error.get("code"),
            )
        return body.get("result")
