"""Tests for the Sui JSON-RPC client — uses httpx mock transport."""

from __future__ import annotations

import json

import httpx
import pytest

from aidchain_sponsor.chain.models import (
    ExecutionStatus,
    SuiObject,
    TransactionBlock,
    mist_to_sui,
    sui_to_mist,
)
from aidchain_sponsor.chain.rpc import SuiRPCClient
from aidchain_sponsor.errors.upstream_errors import LedgerRPCError

_URL = "http://fullnode.test"
_OWNER = "0x" + "a1" * 32
_DIGEST = "4vJ9JU1bJJE96FWSJKvHsmmFADCg4gpZQff4P3bkLKi"


def _inject_transport(rpc: SuiRPCClient, handler) -> list[dict]:
    """Replace the internal httpx client; returns the list of captured payloads."""
    calls: list[dict] = []

    def _record(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        calls.append(payload)
        return handler(payload)

    rpc._client = httpx.AsyncClient(transport=httpx.MockTransport(_record), base_url=_URL)
    return calls


def _result(payload: dict, result) -> httpx.Response:
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})


def _coin(object_id: str, balance: int) -> dict:
    return {
        "coinType": "0x2::sui::SUI",
        "coinObjectId": object_id,
        "version": "12",
        "digest": _DIGEST,
        "balance": str(balance),
    }


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestSuiRPCLifecycle:
    @pytest.mark.asyncio
    async def test_connect_and_close(self) -> None:
        rpc = SuiRPCClient(_URL)
        assert rpc.is_connected is False
        await rpc.connect()
        assert rpc.is_connected is True
        await rpc.close()
        assert rpc.is_connected is False

    @pytest.mark.asyncio
    async def test_not_connected_raises(self) -> None:
        with pytest.raises(LedgerRPCError, match="not connected"):
            await SuiRPCClient(_URL).get_reference_gas_price()


# ---------------------------------------------------------------------------
# Calls
# ---------------------------------------------------------------------------


class TestSuiRPCCalls:
    @pytest.mark.asyncio
    async def test_get_all_coins_follows_cursor(self) -> None:
        def handler(payload: dict) -> httpx.Response:
            assert payload["method"] == "suix_getCoins"
            cursor = payload["params"][2]
            if cursor is None:
                page = {"data": [_coin("0x1", 5)], "nextCursor": "c1", "hasNextPage": True}
            else:
                page = {"data": [_coin("0x2", 7)], "nextCursor": None, "hasNextPage": False}
            return _result(payload, page)

        rpc = SuiRPCClient(_URL)
        calls = _inject_transport(rpc, handler)
        coins = await rpc.get_all_coins(_OWNER)
        assert [c.balance for c in coins] == [5, 7]
        assert [c["params"][2] for c in calls] == [None, "c1"]
        assert calls[0]["params"][:2] == [_OWNER, "0x2::sui::SUI"]

    @pytest.mark.asyncio
    async def test_reference_gas_price(self) -> None:
        rpc = SuiRPCClient(_URL)
        _inject_transport(rpc, lambda payload: _result(payload, "750"))
        assert await rpc.get_reference_gas_price() == 750

    @pytest.mark.asyncio
    async def test_get_shared_object(self) -> None:
        data = {
            "objectId": "0x7",
            "version": "99",
            "digest": _DIGEST,
            "owner": {"Shared": {"initial_shared_version": 42}},
        }
        rpc = SuiRPCClient(_URL)
        _inject_transport(rpc, lambda payload: _result(payload, {"data": data}))
        obj = await rpc.get_object("0x7")
        assert obj.initial_shared_version == 42
        assert obj.shared_ref().initial_shared_version == 42

    @pytest.mark.asyncio
    async def test_get_missing_object(self) -> None:
        rpc = SuiRPCClient(_URL)
        _inject_transport(rpc, lambda payload: _result(payload, {"error": {"code": "notExists"}}))
        with pytest.raises(LedgerRPCError, match="not found") as exc_info:
            await rpc.get_object("0x7")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_execute_transaction_block(self) -> None:
        effects = {"status": {"status": "success"}}

        def handler(payload: dict) -> httpx.Response:
            assert payload["method"] == "sui_executeTransactionBlock"
            assert payload["params"][0] == "AAEC"
            assert payload["params"][1] == ["SIG"]
            return _result(payload, {"digest": "D1", "effects": effects})

        rpc = SuiRPCClient(_URL)
        _inject_transport(rpc, handler)
        block = await rpc.execute_transaction_block("AAEC", ["SIG"])
        assert block.digest == "D1"
        assert block.succeeded is True

    @pytest.mark.asyncio
    async def test_rpc_error(self) -> None:
        def handler(payload: dict) -> httpx.Response:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": payload["id"], "error": {"code": -32602, "message": "bad"}},
            )

        rpc = SuiRPCClient(_URL)
        _inject_transport(rpc, handler)
        with pytest.raises(LedgerRPCError, match="bad") as exc_info:
            await rpc.get_transaction_block("D1")
        assert exc_info.value.rpc_code == -32602

    @pytest.mark.asyncio
    async def test_http_error(self) -> None:
        rpc = SuiRPCClient(_URL)
        _inject_transport(rpc, lambda payload: httpx.Response(503, text="unavailable"))
        with pytest.raises(LedgerRPCError) as exc_info:
            await rpc.get_reference_gas_price()
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_wait_for_transaction_retries_until_visible(self) -> None:
        attempts = {"n": 0}

        def handler(payload: dict) -> httpx.Response:
            attempts["n"] += 1
            if attempts["n"] < 3:
                return httpx.Response(
                    200,
                    json={"jsonrpc": "2.0", "id": payload["id"], "error": {"code": -32602, "message": "not found"}},
                )
            return _result(payload, {"digest": "D1", "effects": {"status": {"status": "success"}}})

        rpc = SuiRPCClient(_URL)
        _inject_transport(rpc, handler)
        block = await rpc.wait_for_transaction("D1", timeout=5.0, poll_interval=0.0)
        assert block.digest == "D1"
        assert attempts["n"] == 3

    @pytest.mark.asyncio
    async def test_wait_for_transaction_times_out(self) -> None:
        def handler(payload: dict) -> httpx.Response:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": payload["id"], "error": {"code": -32000, "message": "nope"}},
            )

        rpc = SuiRPCClient(_URL)
        _inject_transport(rpc, handler)
        with pytest.raises(LedgerRPCError, match="Timed out") as exc_info:
            await rpc.wait_for_transaction("D1", timeout=0.0, poll_interval=0.0)
        assert exc_info.value.status_code == 504


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TestModels:
    def test_mist_conversion(self) -> None:
        assert sui_to_mist(0.1) == 100_000_000
        assert mist_to_sui(2_500_000_000) == 2.5

    def test_owned_object_has_no_shared_ref(self) -> None:
        obj = SuiObject.from_dict(
            {"objectId": "0x9", "version": "3", "digest": _DIGEST, "owner": {"AddressOwner": _OWNER}}
        )
        assert obj.initial_shared_version is None
        assert obj.owned_ref().version == 3
        with pytest.raises(ValueError, match="not shared"):
            obj.shared_ref()

    def test_failed_effects(self) -> None:
        block = TransactionBlock.from_dict(
            {
                "digest": "D1",
                "effects": {"status": {"status": "failure", "error": "InsufficientCoinBalance"}},
            }
        )
        assert block.status == ExecutionStatus.FAILURE
        assert block.succeeded is False
        assert block.error == "InsufficientCoinBalance"

    def test_missing_effects(self) -> None:
        assert TransactionBlock.from_dict({"digest": "D1"}).status == ExecutionStatus.UNKNOWN
