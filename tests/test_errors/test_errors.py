"""Tests for error classes and pre-defined error instances."""

from __future__ import annotations

import pytest

from aidchain_sponsor.errors import definitions as defs
from aidchain_sponsor.errors.client_errors import WalletError, WalletRejectedError
from aidchain_sponsor.errors.sponsor_errors import SponsorError
from aidchain_sponsor.errors.upstream_errors import EnokiError, LedgerRPCError

# ---------------------------------------------------------------------------
# SponsorError base class
# ---------------------------------------------------------------------------


class TestSponsorError:
    def test_default_attributes(self) -> None:
        err = SponsorError("something broke")
        assert str(err) == "something broke"
        assert err.message == "something broke"
        assert err.status_code == 500
        assert err.code == "sponsor-error"
        assert err.details == []

    def test_custom_attributes(self) -> None:
        err = SponsorError("bad request", status_code=400, code="bad-req", details=[{"a": 1}])
        assert err.status_code == 400
        assert err.code == "bad-req"
        assert err.details == [{"a": 1}]

    def test_is_exception(self) -> None:
        with pytest.raises(SponsorError, match="boom"):
            raise SponsorError("boom")


# ---------------------------------------------------------------------------
# Upstream errors
# ---------------------------------------------------------------------------


class TestEnokiError:
    def test_defaults(self) -> None:
        err = EnokiError("enoki failed")
        assert isinstance(err, SponsorError)
        assert err.status_code == 502
        assert err.code == "enoki-error"

    def test_upstream_status_and_details(self) -> None:
        errors = [{"code": "invalid_move_call", "message": "Move call not allowed"}]
        err = EnokiError("Move call not allowed", status_code=403, details=errors)
        assert err.status_code == 403
        assert err.details == errors


class TestLedgerRPCError:
    def test_defaults(self) -> None:
        err = LedgerRPCError("rpc down")
        assert err.status_code == 502
        assert err.code == "ledger-rpc-error"
        assert err.rpc_code is None

    def test_rpc_code(self) -> None:
        assert LedgerRPCError("not found", rpc_code=-32602).rpc_code == -32602


# ---------------------------------------------------------------------------
# Wallet errors
# ---------------------------------------------------------------------------


class TestWalletErrors:
    def test_wallet_error(self) -> None:
        err = WalletError("device locked")
        assert err.status_code == 400
        assert err.code == "wallet-error"

    def test_rejected_default_message(self) -> None:
        err = WalletRejectedError()
        assert isinstance(err, WalletError)
        assert err.message == "UserRejected"
        assert err.code == "wallet-rejected"


# ---------------------------------------------------------------------------
# Pre-defined instances
# ---------------------------------------------------------------------------


class TestDefinitions:
    @pytest.mark.parametrize(
        ("err", "message", "status"),
        [
            (defs.ErrMissingSponsorFields, "Missing required fields", 400),
            (defs.ErrMissingExecuteFields, "Missing digest or signature", 400),
            (defs.ErrWalletNotConnected, "Wallet not connected", 400),
            (defs.ErrSponsorshipDisabled, "Sponsored transactions not enabled", 400),
            (defs.ErrNoSignature, "Failed to get signature", 400),
            (defs.ErrRelayNotReady, "Sponsor relay not initialized", 503),
        ],
    )
    def test_messages(self, err: SponsorError, message: str, status: int) -> None:
        assert err.message == message
        assert err.status_code == status

    def test_all_definitions_are_sponsor_errors(self) -> None:
        instances = [v for k, v in vars(defs).items() if k.startswith("Err")]
        assert instances
        assert all(isinstance(v, SponsorError) for v in instances)
