"""Sui primitives — BCS codec, programmable transactions, Secp256k1 keys."""

from aidchain_sponsor.sui.keys import Secp256k1Keypair, verify_transaction_signature
from aidchain_sponsor.sui.transactions import (
    GAS_COIN,
    Argument,
    GasData,
    MoveCallTarget,
    ObjectRef,
    ProgrammableTransaction,
    SharedObjectRef,
    build_transaction_data,
    embeds_kind,
    transaction_digest,
)

__all__ = [
    "GAS_COIN",
    "Argument",
    "GasData",
    "MoveCallTarget",
    "ObjectRef",
    "ProgrammableTransaction",
    "Secp256k1Keypair",
    "SharedObjectRef",
    "build_transaction_data",
    "embeds_kind",
    "transaction_digest",
    "verify_transaction_signature",
]
