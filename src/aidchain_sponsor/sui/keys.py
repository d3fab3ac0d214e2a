"""Secp256k1 keys for Sui — address derivation, transaction signing, verification.

Sui signs the *intent message* of a transaction: a 3-byte intent prefix
(scope=TransactionData, version=0, app=Sui) followed by the BCS transaction
bytes, hashed with BLAKE2b-256. Secp256k1 then signs SHA-256 of that digest.

Serialized signatures are ``flag || signature(64) || compressed pubkey(33)``
encoded as Base64, where ``flag`` is ``0x01`` for Secp256k1.
"""

from __future__ import annotations

import hashlib
from typing import Self

from ecdsa import SECP256k1, BadSignatureError, MalformedPointError, SigningKey, VerifyingKey
from ecdsa.util import sigdecode_string, sigencode_string_canonize

from aidchain_sponsor.utils.crypto import b64decode, b64encode, blake2b256

SECP256K1_FLAG = 0x01

_CURVE = SECP256k1
_INTENT_TRANSACTION = bytes([0, 0, 0])
_SIGNATURE_LENGTH = 64
_PUBKEY_LENGTH = 33


def intent_digest(tx_bytes: bytes) -> bytes:
    """BLAKE2b-256 of the transaction intent message."""
    return blake2b256(_INTENT_TRANSACTION + tx_bytes)


def public_key_to_address(public_key: bytes) -> str:
    """Derive the Sui address of a compressed Secp256k1 public key."""
    return "0x" + blake2b256(bytes([SECP256K1_FLAG]) + public_key).hex()


class Secp256k1Keypair:
    """A Secp256k1 signing key with Sui address and signature helpers."""

    def __init__(self, signing_key: SigningKey) -> None:
        self._sk = signing_key

    @classmethod
    def generate(cls) -> Self:
        """Create a keypair from fresh randomness."""
        return cls(SigningKey.generate(curve=_CURVE))

    @classmethod
    def from_private_key(cls, private_key: bytes) -> Self:
        """Load a keypair from a 32-byte private scalar.

        Raises:
            ValueError: If *private_key* is not 32 bytes.
        """
        if len(private_key) != 32:  # noqa: PLR2004
            msg = f"Invalid private key length: {len(private_key)}"
            raise ValueError(msg)
        return cls(SigningKey.from_string(private_key, curve=_CURVE))

    @classmethod
    def from_hex(cls, private_key_hex: str) -> Self:
        return cls.from_private_key(bytes.fromhex(private_key_hex.removeprefix("0x")))

    @property
    def private_key(self) -> bytes:
        return self._sk.to_string()

    @property
    def public_key(self) -> bytes:
        """33-byte compressed public key."""
        return self._sk.get_verifying_key().to_string("compressed")

    @property
    def address(self) -> str:
        return public_key_to_address(self.public_key)

    def sign_transaction(self, tx_bytes: bytes) -> str:
        """Sign serialized ``TransactionData`` and return the Base64 Sui signature."""
        signature = self._sk.sign_deterministic(
            intent_digest(tx_bytes),
            hashfunc=hashlib.sha256,
            sigencode=sigencode_string_canonize,
        )
        return b64encode(bytes([SECP256K1_FLAG]) + signature + self.public_key)


def parse_signature(serialized: str) -> tuple[bytes, bytes]:
    """Split a serialized Secp256k1 signature into ``(signature, public_key)``.

    Raises:
        ValueError: If the payload is not a Base64 Secp256k1 signature.
    """
    raw = b64decode(serialized)
    if len(raw) != 1 + _SIGNATURE_LENGTH + _PUBKEY_LENGTH or raw[0] != SECP256K1_FLAG:
        msg = "Not a serialized Secp256k1 signature"
        raise ValueError(msg)
    return raw[1 : 1 + _SIGNATURE_LENGTH], raw[1 + _SIGNATURE_LENGTH :]


def verify_transaction_signature(tx_bytes: bytes, serialized: str) -> bool:
    """Verify a serialized signature over *tx_bytes*.

    Returns False for malformed signatures as well as for mismatches.
    """
    try:
        signature, public_key = parse_signature(serialized)
        vk = VerifyingKey.from_string(public_key, curve=_CURVE)
        return vk.verify(
            signature,
            intent_digest(tx_bytes),
            hashfunc=hashlib.sha256,
            sigdecode=sigdecode_string,
        )
    except (BadSignatureError, MalformedPointError, ValueError):
        return False
