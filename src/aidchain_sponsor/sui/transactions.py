"""Sui programmable transactions — building, kind serialization, digests.

Builds the programmable-transaction subset used by AidChain:
- inputs: pure BCS values, owned object refs, shared object refs
- commands: MoveCall, TransferObjects, SplitCoins, MergeCoins
- arguments: GasCoin, Input, Result, NestedResult

``ProgrammableTransaction.to_kind_bytes()`` produces the *transaction kind*
(no sender, no gas data), which is what gets sent for sponsorship.
``build_transaction_data()`` wraps a kind into a full ``TransactionData``
for the wallet-paid path.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from aidchain_sponsor.sui.bcs import (
    ADDRESS_LENGTH,
    BcsWriter,
    address_to_bytes,
    encode_address,
    encode_byte_vector,
    encode_u64,
    normalize_address,
)
from aidchain_sponsor.utils.crypto import base58_decode, base58_encode, blake2b256

if TYPE_CHECKING:
    from collections.abc import Sequence

_TRANSACTION_DATA_SALT = b"TransactionData::"

# Enum variant tags
_KIND_PROGRAMMABLE = 0
_TX_DATA_V1 = 0
_CALL_ARG_PURE = 0
_CALL_ARG_OBJECT = 1
_OBJECT_ARG_OWNED = 0
_OBJECT_ARG_SHARED = 1
_EXPIRATION_NONE = 0
_EXPIRATION_EPOCH = 1


class CommandKind(enum.IntEnum):
    """Programmable transaction command variants (BCS tag order)."""

    MOVE_CALL = 0
    TRANSFER_OBJECTS = 1
    SPLIT_COINS = 2
    MERGE_COINS = 3


class ArgumentKind(enum.IntEnum):
    """Command argument variants (BCS tag order)."""

    GAS_COIN = 0
    INPUT = 1
    RESULT = 2
    NESTED_RESULT = 3


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Argument:
    """Reference to a value available to a command."""

    kind: ArgumentKind
    index: int = 0
    sub_index: int = 0

    def write(self, w: BcsWriter) -> None:
        w.write_variant(self.kind)
        if self.kind in (ArgumentKind.INPUT, ArgumentKind.RESULT):
            w.write_u16(self.index)
        elif self.kind == ArgumentKind.NESTED_RESULT:
            w.write_u16(self.index).write_u16(self.sub_index)


GAS_COIN = Argument(ArgumentKind.GAS_COIN)


@dataclass(frozen=True)
class ObjectRef:
    """An owned object reference (id, version, Base58 digest)."""

    object_id: str
    version: int
    digest: str

    def write(self, w: BcsWriter) -> None:
        w.write_address(self.object_id).write_u64(self.version)
        w.write_bytes(base58_decode(self.digest))


@dataclass(frozen=True)
class SharedObjectRef:
    """A shared object reference (id, initial shared version, mutability)."""

    object_id: str
    initial_shared_version: int
    mutable: bool = True


@dataclass(frozen=True)
class MoveCallTarget:
    """A fully qualified Move entry point ``package::module::function``."""

    package: str
    module: str
    function: str

    @classmethod
    def parse(cls, target: str) -> MoveCallTarget:
        """Parse ``0xpkg::module::function``.

        Raises:
            ValueError: If the target does not have exactly three non-empty parts.
        """
        parts = target.split("::")
        if len(parts) != 3 or not all(parts):  # noqa: PLR2004
            msg = f"Invalid Move call target: {target!r}"
            raise ValueError(msg)
        return cls(package=normalize_address(parts[0]), module=parts[1], function=parts[2])

    def __str__(self) -> str:
        return f"{self.package}::{self.module}::{self.function}"


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


@dataclass
class _Command:
    kind: CommandKind
    target: MoveCallTarget | None = None
    arguments: list[Argument] = field(default_factory=list)
    extra: list[Argument] = field(default_factory=list)


class ProgrammableTransaction:
    """Mutable builder for a Sui programmable transaction.

    Usage::

        tx = ProgrammableTransaction()
        [coin] = tx.split_coins(tx.object(coin_ref), [amount])
        tx.move_call(f"{pkg}::aidchain::create_aid_package", [registry, coin])
        kind_bytes = tx.to_kind_bytes()
    """

    def __init__(self) -> None:
        self._inputs: list[bytes] = []
        self._object_inputs: dict[str, int] = {}
        self._commands: list[_Command] = []

    @property
    def gas(self) -> Argument:
        """The gas coin argument (only valid when the sender pays gas)."""
        return GAS_COIN

    @property
    def commands(self) -> list[CommandKind]:
        return [c.kind for c in self._commands]

    @property
    def move_call_targets(self) -> list[str]:
        """Fully qualified targets of every MoveCall, in command order."""
        return [str(c.target) for c in self._commands if c.target is not None]

    @property
    def uses_gas_coin(self) -> bool:
        """Whether any command consumes the gas coin."""
        return any(
            arg.kind == ArgumentKind.GAS_COIN
            for c in self._commands
            for arg in (*c.arguments, *c.extra)
        )

    # -- Inputs --

    def pure(self, encoded: bytes) -> Argument:
        """Add a pure input from already BCS-encoded bytes."""
        w = BcsWriter().write_variant(_CALL_ARG_PURE).write_bytes(encoded)
        return self._add_input(w.to_bytes())

    def pure_u64(self, value: int) -> Argument:
        return self.pure(encode_u64(value))

    def pure_bytes(self, value: bytes) -> Argument:
        """Add a ``vector<u8>`` pure input."""
        return self.pure(encode_byte_vector(value))

    def pure_string(self, value: str) -> Argument:
        """Add UTF-8 text as a ``vector<u8>`` pure input."""
        return self.pure_bytes(value.encode("utf-8"))

    def pure_address(self, address: str) -> Argument:
        return self.pure(encode_address(address))

    def object(self, ref: ObjectRef) -> Argument:
        """Add an owned (or immutable) object input."""
        w = BcsWriter().write_variant(_CALL_ARG_OBJECT).write_variant(_OBJECT_ARG_OWNED)
        ref.write(w)
        return self._add_object_input(ref.object_id, w.to_bytes())

    def shared_object(self, ref: SharedObjectRef) -> Argument:
        """Add a shared object input."""
        w = BcsWriter().write_variant(_CALL_ARG_OBJECT).write_variant(_OBJECT_ARG_SHARED)
        w.write_address(ref.object_id)
        w.write_u64(ref.initial_shared_version)
        w.write_bool(ref.mutable)
        return self._add_object_input(ref.object_id, w.to_bytes())

    # -- Commands --

    def move_call(self, target: str, arguments: Sequence[Argument] = ()) -> Argument:
        """Call a Move function; returns the command result argument."""
        parsed = MoveCallTarget.parse(target)
        return self._add_command(
            _Command(CommandKind.MOVE_CALL, target=parsed, arguments=list(arguments)),
        )

    def split_coins(self, coin: Argument, amounts: Sequence[int | Argument]) -> list[Argument]:
        """Split *coin* into one new coin per amount; returns the new coins."""
        amount_args = [a if isinstance(a, Argument) else self.pure_u64(a) for a in amounts]
        result = self._add_command(
            _Command(CommandKind.SPLIT_COINS, arguments=[coin], extra=amount_args),
        )
        return [
            Argument(ArgumentKind.NESTED_RESULT, result.index, i) for i in range(len(amounts))
        ]

    def transfer_objects(self, objects: Sequence[Argument], recipient: str | Argument) -> None:
        address = recipient if isinstance(recipient, Argument) else self.pure_address(recipient)
        self._add_command(
            _Command(CommandKind.TRANSFER_OBJECTS, arguments=list(objects), extra=[address]),
        )

    def merge_coins(self, destination: Argument, sources: Sequence[Argument]) -> None:
        self._add_command(
            _Command(CommandKind.MERGE_COINS, arguments=[destination], extra=list(sources)),
        )

    # -- Serialization --

    def to_kind_bytes(self) -> bytes:
        """Serialize as ``TransactionKind::ProgrammableTransaction``.

        Raises:
            ValueError: If the transaction has no commands.
        """
        if not self._commands:
            msg = "Transaction has no commands"
            raise ValueError(msg)
        w = BcsWriter().write_variant(_KIND_PROGRAMMABLE)
        w.write_vector(self._inputs, lambda bw, raw: bw.write_raw(raw))
        w.write_vector(self._commands, _write_command)
        return w.to_bytes()

    # -- Internal helpers --

    def _add_input(self, encoded: bytes) -> Argument:
        self._inputs.append(encoded)
        return Argument(ArgumentKind.INPUT, len(self._inputs) - 1)

    def _add_object_input(self, object_id: str, encoded: bytes) -> Argument:
        key = normalize_address(object_id)
        if key in self._object_inputs:
            return Argument(ArgumentKind.INPUT, self._object_inputs[key])
        arg = self._add_input(encoded)
        self._object_inputs[key] = arg.index
        return arg

    def _add_command(self, command: _Command) -> Argument:
        self._commands.append(command)
        return Argument(ArgumentKind.RESULT, len(self._commands) - 1)


def _write_command(w: BcsWriter, command: _Command) -> None:
    w.write_variant(command.kind)
    if command.kind == CommandKind.MOVE_CALL:
        target = command.target
        if target is None:
            msg = "MoveCall command has no target"
            raise ValueError(msg)
        w.write_address(target.package)
        w.write_string(target.module)
        w.write_string(target.function)
        w.write_uleb128(0)  # no type arguments
        w.write_vector(command.arguments, lambda bw, a: a.write(bw))
    elif command.kind == CommandKind.TRANSFER_OBJECTS:
        w.write_vector(command.arguments, lambda bw, a: a.write(bw))
        command.extra[0].write(w)
    else:
        # SplitCoins / MergeCoins: (Argument, vector<Argument>)
        command.arguments[0].write(w)
        w.write_vector(command.extra, lambda bw, a: a.write(bw))


# ---------------------------------------------------------------------------
# TransactionData (wallet-paid path) and digests
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GasData:
    """Gas payment for a transaction paid by *owner*."""

    payment: tuple[ObjectRef, ...]
    owner: str
    price: int
    budget: int


def build_transaction_data(
    kind_bytes: bytes,
    sender: str,
    gas_data: GasData,
    *,
    expiration_epoch: int | None = None,
) -> bytes:
    """Wrap transaction-kind bytes into ``TransactionData::V1`` bytes."""
    w = BcsWriter().write_variant(_TX_DATA_V1).write_raw(kind_bytes).write_address(sender)
    w.write_vector(gas_data.payment, lambda bw, ref: ref.write(bw))
    w.write_address(gas_data.owner).write_u64(gas_data.price).write_u64(gas_data.budget)
    if expiration_epoch is None:
        w.write_variant(_EXPIRATION_NONE)
    else:
        w.write_variant(_EXPIRATION_EPOCH).write_u64(expiration_epoch)
    return w.to_bytes()


def transaction_digest(tx_bytes: bytes) -> str:
    """Compute the Base58 digest of serialized ``TransactionData``."""
    return base58_encode(blake2b256(_TRANSACTION_DATA_SALT + tx_bytes))


def embeds_kind(tx_bytes: bytes, kind_bytes: bytes, sender: str) -> bool:
    """Check that *tx_bytes* is V1 transaction data for exactly *kind_bytes* from *sender*.

    Sponsorship only appends gas data; the kind and sender must come through
    unchanged, so they sit verbatim right after the version tag.
    """
    start = 1
    end = start + len(kind_bytes)
    if len(tx_bytes) < end + ADDRESS_LENGTH or tx_bytes[0] != _TX_DATA_V1:
        return False
    try:
        sender_bytes = address_to_bytes(sender)
    except ValueError:
        return False
    return tx_bytes[start:end] == kind_bytes and tx_bytes[end : end + ADDRESS_LENGTH] == sender_bytes
