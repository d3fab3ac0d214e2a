"""Shared fixtures for integration tests.

These fixtures run the REAL relay application in-process and point a real
orchestrator at it over ``httpx.ASGITransport``. Only the sponsorship
provider is simulated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from aidchain_sponsor.api.app import create_app
from aidchain_sponsor.client.orchestrator import SponsorshipOrchestrator
from aidchain_sponsor.client.relay_client import RelayClient
from aidchain_sponsor.client.wallet import LocalKeyWallet
from aidchain_sponsor.sui.keys import verify_transaction_signature
from aidchain_sponsor.utils.crypto import b64decode, b64encode

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

RELAY_URL = "http://relay.local"


class FakeEnoki:
    """Sponsorship provider that remembers what it sponsored.

    Execution only succeeds for a known digest whose signature verifies
    over the exact bytes that were sponsored.
    """

    def __init__(self, sponsor_grant) -> None:
        self._sponsor_grant = sponsor_grant
        self.granted: dict[str, bytes] = {}
        self.executed: list[str] = []
        self.deny: str | None = None

    def sponsor(self, request: httpx.Request, body: dict) -> httpx.Response:
        if self.deny:
            return httpx.Response(
                403, json={"errors": [{"code": "invalid_move_call", "message": self.deny}]}
            )
        tx_bytes, digest = self._sponsor_grant(
            b64decode(body["transactionBlockKindBytes"]), body["sender"]
        )
        self.granted[digest] = tx_bytes
        return httpx.Response(200, json={"data": {"bytes": b64encode(tx_bytes), "digest": digest}})

    def execute(self, request: httpx.Request, body: dict) -> httpx.Response:
        digest = request.url.path.rsplit("/", 1)[-1]
        tx_bytes = self.granted.get(digest)
        if tx_bytes is None:
            return httpx.Response(
                404, json={"errors": [{"code": "not_found", "message": "Unknown digest"}]}
            )
        if not verify_transaction_signature(tx_bytes, body["signature"]):
            return httpx.Response(
                400, json={"errors": [{"code": "invalid_signature", "message": "Invalid user signature"}]}
            )
        self.executed.append(digest)
        return httpx.Response(200, json={"data": {"digest": digest}})

    @property
    def routes(self) -> dict:
        return {
            "/v1/transaction-blocks/sponsor": self.sponsor,
            "/v1/transaction-blocks/sponsor/*": self.execute,
        }


@pytest.fixture
def fake_enoki(sponsor_grant) -> FakeEnoki:
    return FakeEnoki(sponsor_grant)


@pytest.fixture
async def orchestrator(
    app_config, enoki_factory, make_recorder, fake_enoki, keypair
) -> AsyncIterator[SponsorshipOrchestrator]:
    """Provide an orchestrator wired to a running relay app."""
    app = create_app(config=app_config, enoki=enoki_factory(make_recorder(fake_enoki.routes)))
    async with app.router.lifespan_context(app):
        relay = RelayClient(RELAY_URL)
        relay._client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=RELAY_URL)
        orch = SponsorshipOrchestrator(relay, LocalKeyWallet(keypair), network="testnet")
        yield orch
        await orch.close()
