"""Cryptographic helpers — hashing and Base58/Base64 encoding."""

from __future__ import annotations

import base64
import hashlib

_B58_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def sha256(data: bytes) -> bytes:
    """Single SHA-256 hash."""
    return hashlib.sha256(data).digest()


def blake2b256(data: bytes) -> bytes:
    """BLAKE2b hash with a 32-byte digest, as used for Sui digests and addresses."""
    return hashlib.blake2b(data, digest_size=32).digest()


def base58_encode(payload: bytes) -> str:
    """Encode raw bytes to Base58 (no checksum)."""
    n = int.from_bytes(payload, "big")
    result: list[int] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(_B58_ALPHABET[remainder])
    # Preserve leading zero bytes
    for byte in payload:
        if byte == 0:
            result.append(_B58_ALPHABET[0])
        else:
            break
    return bytes(reversed(result)).decode("ascii")


def base58_decode(s: str) -> bytes:
    """Decode a Base58 string to raw bytes (no checksum).

    Raises:
        ValueError: If *s* contains a character outside the Base58 alphabet.
    """
    n = 0
    for char in s:
        n = n * 58 + _B58_ALPHABET.index(char.encode("ascii"))
    result = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    pad_count = 0
    for char in s:
        if char == "1":
            pad_count += 1
        else:
            break
    return b"\x00" * pad_count + result


def b64encode(data: bytes) -> str:
    """Standard Base64 encoding to ``str``."""
    return base64.b64encode(data).decode("ascii")


def b64decode(data: str) -> bytes:
    """Strict standard Base64 decoding.

    Raises:
        ValueError: If *data* is not valid Base64.
    """
    return base64.b64decode(data, validate=True)
