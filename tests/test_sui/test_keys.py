"""Tests for Secp256k1 Sui keys — addresses, signing and verification."""

from __future__ import annotations

import pytest

from aidchain_sponsor.sui.keys import (
    SECP256K1_FLAG,
    Secp256k1Keypair,
    intent_digest,
    parse_signature,
    public_key_to_address,
    verify_transaction_signature,
)
from aidchain_sponsor.utils.crypto import b64decode, b64encode, blake2b256

TX_BYTES = b"\x00" + bytes(range(64))


class TestKeypair:
    def test_from_private_key_roundtrip(self, keypair: Secp256k1Keypair) -> None:
        assert keypair.private_key == bytes(range(1, 33))
        assert Secp256k1Keypair.from_hex(keypair.private_key.hex()).address == keypair.address

    def test_from_hex_accepts_prefix(self, keypair: Secp256k1Keypair) -> None:
        loaded = Secp256k1Keypair.from_hex("0x" + keypair.private_key.hex())
        assert loaded.public_key == keypair.public_key

    def test_invalid_private_key_length(self) -> None:
        with pytest.raises(ValueError, match="Invalid private key length"):
            Secp256k1Keypair.from_private_key(b"\x01" * 31)

    def test_compressed_public_key(self, keypair: Secp256k1Keypair) -> None:
        assert len(keypair.public_key) == 33
        assert keypair.public_key[0] in (2, 3)

    def test_address_derivation(self, keypair: Secp256k1Keypair) -> None:
        expected = "0x" + blake2b256(bytes([SECP256K1_FLAG]) + keypair.public_key).hex()
        assert keypair.address == expected
        assert public_key_to_address(keypair.public_key) == expected
        assert len(keypair.address) == 66

    def test_generate_unique(self) -> None:
        assert Secp256k1Keypair.generate().address != Secp256k1Keypair.generate().address


class TestSigning:
    def test_signature_layout(self, keypair: Secp256k1Keypair) -> None:
        raw = b64decode(keypair.sign_transaction(TX_BYTES))
        assert len(raw) == 1 + 64 + 33
        assert raw[0] == SECP256K1_FLAG
        assert raw[65:] == keypair.public_key

    def test_signature_is_deterministic(self, keypair: Secp256k1Keypair) -> None:
        assert keypair.sign_transaction(TX_BYTES) == keypair.sign_transaction(TX_BYTES)

    def test_signature_is_low_s(self, keypair: Secp256k1Keypair) -> None:
        from ecdsa import SECP256k1

        signature, _ = parse_signature(keypair.sign_transaction(TX_BYTES))
        s = int.from_bytes(signature[32:], "big")
        assert s <= SECP256k1.order // 2

    def test_verify(self, keypair: Secp256k1Keypair) -> None:
        serialized = keypair.sign_transaction(TX_BYTES)
        assert verify_transaction_signature(TX_BYTES, serialized) is True

    def test_verify_rejects_other_bytes(self, keypair: Secp256k1Keypair) -> None:
        serialized = keypair.sign_transaction(TX_BYTES)
        assert verify_transaction_signature(TX_BYTES + b"\x00", serialized) is False

    def test_verify_rejects_malformed(self) -> None:
        assert verify_transaction_signature(TX_BYTES, "AAEC") is False
        assert verify_transaction_signature(TX_BYTES, "not base64!") is False

    def test_parse_signature_wrong_flag(self, keypair: Secp256k1Keypair) -> None:
        raw = b64decode(keypair.sign_transaction(TX_BYTES))
        with pytest.raises(ValueError, match="Secp256k1"):
            parse_signature(b64encode(b"\x00" + raw[1:]))

    def test_intent_digest(self) -> None:
        assert intent_digest(TX_BYTES) == blake2b256(b"\x00\x00\x00" + TX_BYTES)
