"""Shared test fixtures for the aidchain-sponsor test suite."""

from __future__ import annotations

import json
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from aidchain_sponsor.sui.keys import Secp256k1Keypair
from aidchain_sponsor.sui.transactions import (
    GasData,
    ObjectRef,
    ProgrammableTransaction,
    build_transaction_data,
    transaction_digest,
)
from aidchain_sponsor.utils.crypto import b64decode, b64encode

if TYPE_CHECKING:
    from collections.abc import Callable

ENOKI_URL = "https://enoki.test"
TEST_PACKAGE = "0x" + "ab" * 32
SPONSOR_ADDRESS = "0x" + "5f" * 32
GAS_OBJECT_ID = "0x" + "9c" * 32
OBJECT_DIGEST = "4vJ9JU1bJJE96FWSJKvHsmmFADCg4gpZQff4P3bkLKi"


class Recorder:
    """Mock-transport handler that records requests and replays canned responses.

    ``routes`` maps a URL path to ``handler(request, json_body) -> httpx.Response``;
    a key ending in ``*`` matches any path with that prefix.
    """

    def __init__(self, routes: dict[str, Any]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self._lookup(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"error": f"no route for {request.url.path}"})
        body = json.loads(request.content) if request.content else None
        return handler(request, body)

    def _lookup(self, path: str) -> Any:
        if path in self.routes:
            return self.routes[path]
        for key, handler in self.routes.items():
            if key.endswith("*") and path.startswith(key[:-1]):
                return handler
        return None

    def calls_to(self, path: str) -> int:
        if path.endswith("*"):
            return sum(1 for r in self.requests if r.url.path.startswith(path[:-1]))
        return sum(1 for r in self.requests if r.url.path == path)

    def bodies_to(self, path: str) -> list[Any]:
        return [json.loads(r.content) for r in self.requests if r.url.path == path]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def _sponsor_grant(kind_bytes: bytes, sender: str) -> tuple[bytes, str]:
    """Attach sponsor gas data the way the sponsorship provider does."""
    gas = GasData(
        payment=(ObjectRef(GAS_OBJECT_ID, 42, OBJECT_DIGEST),),
        owner=SPONSOR_ADDRESS,
        price=1000,
        budget=10_000_000,
    )
    tx_bytes = build_transaction_data(kind_bytes, sender, gas)
    return tx_bytes, transaction_digest(tx_bytes)


def _donation_tx(coin_id: str = "0x" + "11" * 32) -> ProgrammableTransaction:
    tx = ProgrammableTransaction()
    coin = tx.object(ObjectRef(coin_id, 7, OBJECT_DIGEST))
    (donation,) = tx.split_coins(coin, [100_000_000])
    tx.move_call(
        f"{TEST_PACKAGE}::aidchain::create_aid_package",
        [tx.pure_string("Kampala"), tx.pure_string("Water filters"), donation],
    )
    return tx


def _enoki_sponsor_ok(request: httpx.Request, body: Any) -> httpx.Response:
    tx_bytes, digest = _sponsor_grant(b64decode(body["transactionBlockKindBytes"]), body["sender"])
    return httpx.Response(200, json={"data": {"bytes": b64encode(tx_bytes), "digest": digest}})


def _enoki_execute_ok(request: httpx.Request, body: Any) -> httpx.Response:
    digest = request.url.path.rsplit("/", 1)[-1]
    return httpx.Response(200, json={"data": {"digest": digest}})


# ---------------------------------------------------------------------------
# Helpers exposed as fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_recorder() -> Callable[[dict[str, Any]], Recorder]:
    return Recorder


@pytest.fixture
def sponsor_grant() -> Callable[[bytes, str], tuple[bytes, str]]:
    """``(kind_bytes, sender) -> (tx_bytes, digest)`` for a sponsor-augmented transaction."""
    return _sponsor_grant


@pytest.fixture
def donation_tx() -> Callable[..., ProgrammableTransaction]:
    """Builder for a small create_aid_package transaction splitting from a user coin."""
    return _donation_tx


@pytest.fixture
def enoki_routes() -> dict[str, Any]:
    """Upstream routes that sponsor any kind and execute any digest."""
    return {
        "/v1/transaction-blocks/sponsor": _enoki_sponsor_ok,
        "/v1/transaction-blocks/sponsor/*": _enoki_execute_ok,
    }


@pytest.fixture
def keypair() -> Secp256k1Keypair:
    return Secp256k1Keypair.from_private_key(bytes(range(1, 33)))


@pytest.fixture
def app_config():
    """Provide a test AppConfig with a sponsor credential and pinned testnet."""
    from aidchain_sponsor.config.settings import AppConfig, EnokiConfig, SponsorPolicyConfig

    return AppConfig(
        debug=True,
        enoki=EnokiConfig(url=ENOKI_URL, private_key="enoki_private_test"),
        sponsor=SponsorPolicyConfig(network="testnet", package_id=TEST_PACKAGE),
    )


@pytest.fixture
def enoki_factory(app_config):
    """Build an EnokiService whose HTTP client talks to a mock transport."""
    from aidchain_sponsor.upstream.enoki.service import EnokiService

    def _build(recorder: Recorder) -> EnokiService:
        enoki = EnokiService(app_config.enoki)
        enoki._client = httpx.AsyncClient(
            transport=recorder.transport,
            base_url=ENOKI_URL,
            headers={"Authorization": "Bearer enoki_private_test"},
        )
        return enoki

    return _build


@pytest.fixture
def relay_app(app_config, enoki_factory):
    """Start the relay app against a mocked upstream; yields a TestClient."""
    from fastapi.testclient import TestClient

    from aidchain_sponsor.api.app import create_app

    @contextmanager
    def _start(recorder: Recorder):
        app = create_app(config=app_config, enoki=enoki_factory(recorder))
        with TestClient(app, raise_server_exceptions=False) as client:
            yield client

    return _start
