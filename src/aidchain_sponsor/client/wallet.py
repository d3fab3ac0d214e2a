"""Wallet connector interface and a local-key implementation.

The orchestrator only needs two capabilities from a wallet: the connected
address and "sign these exact bytes". Browser or hardware wallets plug in by
implementing :class:`Wallet`; :class:`LocalKeyWallet` signs with an
in-process Secp256k1 key (CLI tools, tests, server-side bots).
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from aidchain_sponsor.errors.client_errors import WalletRejectedError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from aidchain_sponsor.sui.keys import Secp256k1Keypair

logger = logging.getLogger(__name__)


@runtime_checkable
class Wallet(Protocol):
    """Anything that can sign serialized transaction data for one address."""

    @property
    def address(self) -> str: ...

    async def sign_transaction(self, tx_bytes: bytes) -> str:
        """Sign *tx_bytes* verbatim and return a serialized Sui signature.

        Raises:
            WalletError: If signing fails or the user declines.
        """
        ...


class LocalKeyWallet:
    """Wallet backed by an in-process Secp256k1 keypair.

    Args:
        keypair: The signing key.
        approve: Optional confirmation hook called with the bytes about to be
            signed. Returning False (or an awaitable resolving to False)
            rejects the request with :class:`WalletRejectedError`.
    """

    def __init__(
        self,
        keypair: Secp256k1Keypair,
        *,
        approve: Callable[[bytes], bool | Awaitable[bool]] | None = None,
    ) -> None:
        self._keypair = keypair
        self._approve = approve

    @property
    def address(self) -> str:
        return self._keypair.address

    async def sign_transaction(self, tx_bytes: bytes) -> str:
        if self._approve is not None:
            decision = self._approve(tx_bytes)
            if inspect.isawaitable(decision):
                decision = await decision
            if not decision:
                logger.info("Signature request declined for %s", self.address)
                raise WalletRejectedError
        return self._keypair.sign_transaction(tx_bytes)
