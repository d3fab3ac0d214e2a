"""Chain access — Sui full-node JSON-RPC."""

from aidchain_sponsor.chain.models import Coin, SuiObject, TransactionBlock
from aidchain_sponsor.chain.rpc import SuiRPCClient

__all__ = ["Coin", "SuiObject", "SuiRPCClient", "TransactionBlock"]
