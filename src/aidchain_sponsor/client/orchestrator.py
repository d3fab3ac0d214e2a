"""Client-side orchestration of a sponsored transaction.

``execute_sponsored`` drives one transaction through
build → sponsor → verify → sign → execute and always returns a
:class:`SponsoredTxResult`; it never raises for an expected failure.

Example::

    orchestrator = SponsorshipOrchestrator.from_config(ClientConfig(), wallet)
    tx = ProgrammableTransaction()
    tx.move_call(f"{package}::aid_registry::donate", [...])
    result = await orchestrator.execute_sponsored(tx)
    if result.success:
        print(result.digest)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aidchain_sponsor.client.relay_client import RelayClient
from aidchain_sponsor.client.results import (
    ErrorCategory,
    RelayFailure,
    SponsoredTxResult,
    TransactionIntent,
)
from aidchain_sponsor.errors.client_errors import WalletError
from aidchain_sponsor.errors.definitions import (
    ErrDigestMismatch,
    ErrGasCoinNotAllowed,
    ErrGrantMismatch,
    ErrInsufficientBalance,
    ErrNoSignature,
    ErrSponsorshipDisabled,
    ErrWalletNotConnected,
)
from aidchain_sponsor.sui.transactions import embeds_kind, transaction_digest

if TYPE_CHECKING:
    from aidchain_sponsor.client.results import SponsorGrant
    from aidchain_sponsor.client.wallet import Wallet
    from aidchain_sponsor.config.settings import ClientConfig
    from aidchain_sponsor.sui.transactions import ProgrammableTransaction

logger = logging.getLogger(__name__)

TRANSPORT_ERROR_MESSAGE = "Cannot connect to sponsor backend"

_BALANCE_MARKERS = ("insufficient", "balance")


def friendly_error(message: str) -> str:
    """Map ledger balance errors to a user-facing message."""
    lowered = message.lower()
    if any(marker in lowered for marker in _BALANCE_MARKERS):
        return ErrInsufficientBalance.message
    return message


class SponsorshipOrchestrator:
    """Runs the sponsored-transaction flow for one connected wallet.

    Args:
        relay: Relay client; connected lazily on first use.
        wallet: Connected wallet, or None when no wallet is attached.
        network: Network label sent to the relay.
        enabled: Feature flag; when False no network calls are made.
        verify_grant: Check that the sponsor grant carries our transaction
            kind and sender, and that its digest matches its bytes, before
            asking the wallet to sign.
    """

    def __init__(
        self,
        relay: RelayClient,
        wallet: Wallet | None = None,
        *,
        network: str = "testnet",
        enabled: bool = True,
        verify_grant: bool = True,
    ) -> None:
        self._relay = relay
        self._wallet = wallet
        self._network = network
        self._enabled = enabled
        self._verify_grant = verify_grant
        self._in_flight = 0
        self._last_result: SponsoredTxResult | None = None

    @classmethod
    def from_config(cls, config: ClientConfig, wallet: Wallet | None = None) -> SponsorshipOrchestrator:
        relay = RelayClient(config.relay_url, timeout=config.timeout)
        return cls(
            relay,
            wallet,
            network=config.network.value,
            enabled=config.sponsored_tx_enabled,
            verify_grant=config.verify_grant,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def relay(self) -> RelayClient:
        return self._relay

    @property
    def wallet(self) -> Wallet | None:
        return self._wallet

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def is_loading(self) -> bool:
        """True while at least one ``execute_sponsored`` call is in progress."""
        return self._in_flight > 0

    @property
    def last_error(self) -> str | None:
        if self._last_result is None or self._last_result.success:
            return None
        return self._last_result.error

    def attach_wallet(self, wallet: Wallet | None) -> None:
        self._wallet = wallet

    async def close(self) -> None:
        await self._relay.close()

    # ------------------------------------------------------------------
    # Flow
    # ------------------------------------------------------------------

    async def execute_sponsored(self, tx: ProgrammableTransaction) -> SponsoredTxResult:
        """Sponsor, sign and execute *tx*.

        Preconditions are checked before any network call: a wallet must be
        attached and sponsorship enabled.
        """
        wallet = self._wallet
        if wallet is None:
            return self._finish(
                SponsoredTxResult.failure(ErrWalletNotConnected.message, ErrorCategory.PRECONDITION)
            )
        if not self._enabled:
            return self._finish(
                SponsoredTxResult.failure(ErrSponsorshipDisabled.message, ErrorCategory.PRECONDITION)
            )

        self._in_flight += 1
        try:
            result = await self._run(tx, wallet)
        except Exception as exc:
            logger.exception("Sponsored transaction failed unexpectedly")
            result = SponsoredTxResult.failure(
                str(exc) or "Sponsored transaction failed", ErrorCategory.EXECUTION
            )
        finally:
            self._in_flight -= 1
        return self._finish(result)

    async def _run(self, tx: ProgrammableTransaction, wallet: Wallet) -> SponsoredTxResult:
        try:
            kind_bytes = tx.to_kind_bytes()
        except ValueError as exc:
            return SponsoredTxResult.failure(str(exc), ErrorCategory.VALIDATION)
        # The sponsor owns the gas coin.
        if tx.uses_gas_coin:
            return SponsoredTxResult.failure(ErrGasCoinNotAllowed.message, ErrorCategory.VALIDATION)

        intent = TransactionIntent(kind_bytes=kind_bytes, sender=wallet.address, network=self._network)
        logger.info(
            "Requesting sponsorship for %s on %s: %d commands, calls %s",
            intent.sender,
            intent.network,
            len(tx.commands),
            ", ".join(tx.move_call_targets) or "none",
        )

        sponsored = await self._relay.sponsor(intent)
        if isinstance(sponsored, RelayFailure):
            return self._relay_failure(sponsored, ErrorCategory.SPONSORSHIP_DENIED, friendly=False)

        if self._verify_grant and not self._grant_matches(sponsored, intent):
            return SponsoredTxResult.failure(ErrGrantMismatch.message, ErrorCategory.DIGEST_MISMATCH)

        try:
            signature = await wallet.sign_transaction(sponsored.tx_bytes)
        except WalletError as exc:
            logger.info("Wallet declined to sign %s: %s", sponsored.digest, exc.message)
            return SponsoredTxResult.failure(exc.message, ErrorCategory.SIGNATURE)
        except Exception as exc:
            logger.warning("Wallet signing failed for %s: %r", sponsored.digest, exc)
            return SponsoredTxResult.failure(str(exc) or type(exc).__name__, ErrorCategory.SIGNATURE)
        if not signature:
            return SponsoredTxResult.failure(ErrNoSignature.message, ErrorCategory.SIGNATURE)

        executed = await self._relay.execute(sponsored.digest, signature)
        if isinstance(executed, RelayFailure):
            return self._relay_failure(executed, ErrorCategory.EXECUTION, friendly=True)

        if executed.digest != sponsored.digest:
            logger.error(
                "Executed digest %s differs from sponsored digest %s", executed.digest, sponsored.digest
            )
            return SponsoredTxResult.failure(
                ErrDigestMismatch.message,
                ErrorCategory.DIGEST_MISMATCH,
                details=({"sponsored": sponsored.digest, "executed": executed.digest},),
            )

        logger.info("Sponsored transaction executed: %s", executed.digest)
        return SponsoredTxResult.ok(executed.digest)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _finish(self, result: SponsoredTxResult) -> SponsoredTxResult:
        self._last_result = result
        return result

    def _grant_matches(self, grant: SponsorGrant, intent: TransactionIntent) -> bool:
        if not embeds_kind(grant.tx_bytes, intent.kind_bytes, intent.sender):
            logger.error("Sponsor grant %s does not carry the requested transaction", grant.digest)
            return False
        if transaction_digest(grant.tx_bytes) != grant.digest:
            logger.error("Sponsor grant digest %s does not match its bytes", grant.digest)
            return False
        return True

    @staticmethod
    def _relay_failure(
        failure: RelayFailure, category: ErrorCategory, *, friendly: bool
    ) -> SponsoredTxResult:
        if failure.is_transport:
            return SponsoredTxResult.failure(
                TRANSPORT_ERROR_MESSAGE, ErrorCategory.TRANSPORT, raw_error=failure.message
            )
        error = friendly_error(failure.message) if friendly else failure.message
        return SponsoredTxResult.failure(
            error, category, raw_error=failure.message, details=failure.details
        )
