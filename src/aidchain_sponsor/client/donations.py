"""AidChain donation flows on top of the sponsorship orchestrator.

Builds ``aidchain::create_aid_package`` and ``aidchain::assign_recipient``
transactions and runs them either sponsored (through
:class:`SponsorshipOrchestrator`) or paid by the wallet itself.

A sponsored transaction pays gas from the sponsor's coins, so the donation
must be split from one of the user's own coins rather than the gas coin.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from aidchain_sponsor.chain.models import mist_to_sui, sui_to_mist
from aidchain_sponsor.client.orchestrator import friendly_error
from aidchain_sponsor.errors.definitions import ErrInsufficientBalance
from aidchain_sponsor.errors.sponsor_errors import SponsorError
from aidchain_sponsor.sui.transactions import (
    GasData,
    ObjectRef,
    ProgrammableTransaction,
    SharedObjectRef,
    build_transaction_data,
)
from aidchain_sponsor.utils.crypto import b64encode

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from aidchain_sponsor.chain.models import Coin
    from aidchain_sponsor.chain.rpc import SuiRPCClient
    from aidchain_sponsor.client.orchestrator import SponsorshipOrchestrator
    from aidchain_sponsor.client.wallet import Wallet
    from aidchain_sponsor.config.settings import ClientConfig
    from aidchain_sponsor.sui.transactions import Argument

logger = logging.getLogger(__name__)

# Sui caps the number of gas payment objects per transaction
MAX_GAS_COINS = 256


def build_donate_tx(
    config: ClientConfig,
    description: str,
    location: str,
    amount_mist: int,
    coin: ObjectRef | None = None,
) -> ProgrammableTransaction:
    """Build a donation that locks *amount_mist* into a new aid package.

    Args:
        coin: Coin to split the donation from. Required for sponsored
            transactions; when omitted the donation comes out of the gas coin.
    """
    tx = ProgrammableTransaction()
    source = tx.object(coin) if coin is not None else tx.gas
    (donation,) = tx.split_coins(source, [amount_mist])
    registry = tx.shared_object(
        SharedObjectRef(config.registry_id, config.registry_initial_shared_version, mutable=True)
    )
    tx.move_call(
        f"{config.package_id}::aidchain::create_aid_package",
        [registry, tx.pure_string(location), tx.pure_string(description), donation],
    )
    return tx


def build_assign_recipient_tx(
    config: ClientConfig,
    aid_package: SharedObjectRef,
    recipient_profile: ObjectRef,
) -> ProgrammableTransaction:
    """Assign a verified recipient profile to an existing aid package."""
    tx = ProgrammableTransaction()
    tx.move_call(
        f"{config.package_id}::aidchain::assign_recipient",
        [tx.shared_object(aid_package), tx.object(recipient_profile)],
    )
    return tx


def build_move_call_tx(
    target: str,
    arguments: Callable[[ProgrammableTransaction], Sequence[Argument]] | None = None,
) -> ProgrammableTransaction:
    """Build a single Move call; *arguments* adds the inputs to the new transaction."""
    tx = ProgrammableTransaction()
    tx.move_call(target, arguments(tx) if arguments is not None else ())
    return tx


def select_coin(coins: list[Coin], amount_mist: int) -> Coin | None:
    """Return the first coin that alone covers *amount_mist*."""
    for coin in coins:
        if coin.balance >= amount_mist:
            return coin
    return None


@dataclass(frozen=True)
class DonationResult:
    success: bool
    message: str
    digest: str = ""
    sponsored: bool = False


class DonationService:
    """Runs AidChain donation transactions for one wallet.

    Args:
        config: Client settings (package, registry and gas budget).
        rpc: Connected Sui RPC client, used for coin lookups and the
            wallet-paid path.
        wallet: The donor's wallet.
        orchestrator: Sponsorship orchestrator; sponsored mode is used when
            it is enabled.
    """

    def __init__(
        self,
        config: ClientConfig,
        rpc: SuiRPCClient,
        wallet: Wallet,
        orchestrator: SponsorshipOrchestrator,
    ) -> None:
        self._config = config
        self._rpc = rpc
        self._wallet = wallet
        self._orchestrator = orchestrator

    async def balance(self) -> int:
        """Total SUI balance of the wallet, in MIST."""
        coins = await self._rpc.get_all_coins(self._wallet.address)
        return sum(c.balance for c in coins)

    async def donate(self, description: str, location: str, amount_sui: float) -> DonationResult:
        amount_mist = sui_to_mist(amount_sui)
        if amount_mist <= 0:
            return DonationResult(False, "Please enter a valid SUI amount.")

        try:
            if not self._orchestrator.is_enabled:
                tx = build_donate_tx(self._config, description, location, amount_mist)
                return await self._execute_wallet_paid(tx, "Donation successful!")

            coins = await self._rpc.get_all_coins(self._wallet.address)
            coin = select_coin(coins, amount_mist)
            if coin is None:
                total = mist_to_sui(sum(c.balance for c in coins))
                return DonationResult(
                    False,
                    f"Insufficient balance! You have {total:.4f} SUI "
                    f"but need {amount_sui} SUI in a single coin.",
                )
        except SponsorError as exc:
            logger.warning("Donation failed: %s", exc.message)
            return DonationResult(False, f"Transaction failed: {friendly_error(exc.message)}")

        tx = build_donate_tx(self._config, description, location, amount_mist, coin.ref)
        return await self._execute_sponsored(tx, "Donation successful! (Gas-free)")

    async def assign_recipient(self, aid_package_id: str, recipient_profile_id: str) -> DonationResult:
        try:
            aid_package = await self._rpc.get_object(aid_package_id)
            profile = await self._rpc.get_object(recipient_profile_id)
            tx = build_assign_recipient_tx(
                self._config, aid_package.shared_ref(), profile.owned_ref()
            )
        except (SponsorError, ValueError) as exc:
            message = exc.message if isinstance(exc, SponsorError) else str(exc)
            logger.warning("Cannot assign recipient: %s", message)
            return DonationResult(False, f"Transaction failed: {message}")

        if self._orchestrator.is_enabled:
            return await self._execute_sponsored(tx, "Recipient assigned! (Gas-free)")
        try:
            return await self._execute_wallet_paid(tx, "Recipient assigned!")
        except SponsorError as exc:
            logger.warning("Recipient assignment failed: %s", exc.message)
            return DonationResult(False, f"Transaction failed: {friendly_error(exc.message)}")

    # ------------------------------------------------------------------
    # Execution paths
    # ------------------------------------------------------------------

    async def _execute_sponsored(self, tx: ProgrammableTransaction, success: str) -> DonationResult:
        result = await self._orchestrator.execute_sponsored(tx)
        if result.success:
            return DonationResult(True, success, digest=result.digest, sponsored=True)
        return DonationResult(False, f"Transaction failed: {result.error}", sponsored=True)

    async def _execute_wallet_paid(self, tx: ProgrammableTransaction, success: str) -> DonationResult:
        """Sign and submit *tx* with gas paid from the wallet's own coins."""
        sender = self._wallet.address
        coins = await self._rpc.get_all_coins(sender)
        if not coins:
            return DonationResult(False, ErrInsufficientBalance.message)

        gas = GasData(
            payment=tuple(c.ref for c in coins[:MAX_GAS_COINS]),
            owner=sender,
            price=await self._rpc.get_reference_gas_price(),
            budget=self._config.gas_budget,
        )
        tx_bytes = build_transaction_data(tx.to_kind_bytes(), sender, gas)
        signature = await self._wallet.sign_transaction(tx_bytes)
        block = await self._rpc.execute_transaction_block(b64encode(tx_bytes), [signature])

        if not block.succeeded:
            logger.warning("Transaction %s failed on chain: %s", block.digest, block.error)
            return DonationResult(
                False, f"Transaction failed: {friendly_error(block.error or 'unknown error')}"
            )
        return DonationResult(True, success, digest=block.digest)
