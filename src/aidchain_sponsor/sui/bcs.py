"""BCS (Binary Canonical Serialization) writer for Sui transaction payloads.

Only the subset needed to serialize transaction kinds and transaction data:
- ULEB128 lengths and enum variant tags
- little-endian fixed-width unsigned integers (u8, u16, u64)
- booleans, byte vectors, UTF-8 strings
- 32-byte account/object addresses
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

ADDRESS_LENGTH = 32

_U8_MAX = 0xFF
_U16_MAX = 0xFFFF
_U64_MAX = 0xFFFF_FFFF_FFFF_FFFF


def normalize_address(address: str) -> str:
    """Return *address* as ``0x`` + 64 lowercase hex chars.

    Short addresses (e.g. ``0x2``) are left-padded with zeros.

    Raises:
        ValueError: If the address is not valid hex or is longer than 32 bytes.
    """
    raw = address.lower().removeprefix("0x")
    if not raw or len(raw) > ADDRESS_LENGTH * 2:
        msg = f"Invalid Sui address: {address!r}"
        raise ValueError(msg)
    try:
        int(raw, 16)
    except ValueError:
        msg = f"Invalid Sui address: {address!r}"
        raise ValueError(msg) from None
    return "0x" + raw.rjust(ADDRESS_LENGTH * 2, "0")


def address_to_bytes(address: str) -> bytes:
    """Decode a hex address into its 32-byte BCS form."""
    return bytes.fromhex(normalize_address(address)[2:])


def uleb128(value: int) -> bytes:
    """Encode a non-negative integer as ULEB128."""
    if value < 0:
        msg = "ULEB128 cannot encode negative values"
        raise ValueError(msg)
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


class BcsWriter:
    """Append-only BCS encoder.

    Usage::

        w = BcsWriter()
        w.write_variant(0).write_u64(1000).write_string("aidchain")
        payload = w.to_bytes()
    """

    def __init__(self) -> None:
        self._buf = bytearray()

    def to_bytes(self) -> bytes:
        """Return the encoded payload."""
        return bytes(self._buf)

    def write_raw(self, data: bytes) -> Self:
        """Append already-encoded bytes verbatim."""
        self._buf.extend(data)
        return self

    def write_uleb128(self, value: int) -> Self:
        self._buf.extend(uleb128(value))
        return self

    def write_variant(self, index: int) -> Self:
        """Write an enum variant tag."""
        return self.write_uleb128(index)

    def write_u8(self, value: int) -> Self:
        _check_range(value, _U8_MAX, "u8")
        self._buf.append(value)
        return self

    def write_u16(self, value: int) -> Self:
        _check_range(value, _U16_MAX, "u16")
        self._buf.extend(value.to_bytes(2, "little"))
        return self

    def write_u64(self, value: int) -> Self:
        _check_range(value, _U64_MAX, "u64")
        self._buf.extend(value.to_bytes(8, "little"))
        return self

    def write_bool(self, value: bool) -> Self:  # noqa: FBT001
        self._buf.append(1 if value else 0)
        return self

    def write_bytes(self, data: bytes) -> Self:
        """Write a length-prefixed byte vector."""
        self.write_uleb128(len(data))
        self._buf.extend(data)
        return self

    def write_string(self, value: str) -> Self:
        return self.write_bytes(value.encode("utf-8"))

    def write_address(self, address: str) -> Self:
        """Write a fixed 32-byte address (no length prefix)."""
        self._buf.extend(address_to_bytes(address))
        return self

    def write_vector(
        self, items: Iterable[Any], write_item: Callable[[BcsWriter, Any], object]
    ) -> Self:
        """Write a length-prefixed sequence using *write_item* for each element."""
        values = list(items)
        self.write_uleb128(len(values))
        for item in values:
            write_item(self, item)
        return self


def encode_u64(value: int) -> bytes:
    """BCS-encode a single u64 (for pure inputs)."""
    return BcsWriter().write_u64(value).to_bytes()


def encode_byte_vector(data: bytes) -> bytes:
    """BCS-encode ``vector<u8>`` (for pure inputs)."""
    return BcsWriter().write_bytes(data).to_bytes()


def encode_address(address: str) -> bytes:
    """BCS-encode an ``address`` (for pure inputs)."""
    return BcsWriter().write_address(address).to_bytes()


def _check_range(value: int, maximum: int, name: str) -> None:
    if not 0 <= value <= maximum:
        msg = f"Value {value} out of range for {name}"
        raise ValueError(msg)
