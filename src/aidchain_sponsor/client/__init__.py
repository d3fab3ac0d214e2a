"""Client side of the sponsored-transaction flow."""

from aidchain_sponsor.client.orchestrator import SponsorshipOrchestrator
from aidchain_sponsor.client.relay_client import RelayClient
from aidchain_sponsor.client.results import ErrorCategory, SponsoredTxResult
from aidchain_sponsor.client.wallet import LocalKeyWallet, Wallet

__all__ = [
    "ErrorCategory",
    "LocalKeyWallet",
    "RelayClient",
    "SponsoredTxResult",
    "SponsorshipOrchestrator",
    "Wallet",
]
