"""Sui JSON-RPC data models — coins, objects, execution results."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from aidchain_sponsor.sui.transactions import ObjectRef, SharedObjectRef

SUI_COIN_TYPE = "0x2::sui::SUI"
MIST_PER_SUI = 1_000_000_000


def sui_to_mist(amount_sui: float) -> int:
    """Convert a SUI amount to MIST, truncating sub-MIST fractions."""
    return int(amount_sui * MIST_PER_SUI)


def mist_to_sui(amount_mist: int) -> float:
    return amount_mist / MIST_PER_SUI


@dataclass(frozen=True)
class Coin:
    """A coin object owned by an address."""

    coin_object_id: str
    version: int
    digest: str
    balance: int
    coin_type: str = SUI_COIN_TYPE

    @property
    def ref(self) -> ObjectRef:
        return ObjectRef(self.coin_object_id, self.version, self.digest)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Coin:
        return cls(
            coin_object_id=data["coinObjectId"],
            version=int(data["version"]),
            digest=data["digest"],
            balance=int(data["balance"]),
            coin_type=data.get("coinType", SUI_COIN_TYPE),
        )


@dataclass(frozen=True)
class CoinPage:
    """One page of ``suix_getCoins`` results."""

    data: list[Coin]
    next_cursor: str | None = None
    has_next_page: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CoinPage:
        return cls(
            data=[Coin.from_dict(c) for c in data.get("data", [])],
            next_cursor=data.get("nextCursor"),
            has_next_page=bool(data.get("hasNextPage", False)),
        )


@dataclass(frozen=True)
class SuiObject:
    """Object metadata from ``sui_getObject``.

    Attributes:
        initial_shared_version: Set only for shared objects.
    """

    object_id: str
    version: int
    digest: str
    initial_shared_version: int | None = None

    def owned_ref(self) -> ObjectRef:
        return ObjectRef(self.object_id, self.version, self.digest)

    def shared_ref(self, *, mutable: bool = True) -> SharedObjectRef:
        if self.initial_shared_version is None:
            msg = f"Object {self.object_id} is not shared"
            raise ValueError(msg)
        return SharedObjectRef(self.object_id, self.initial_shared_version, mutable)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SuiObject:
        owner = data.get("owner")
        initial: int | None = None
        if isinstance(owner, dict) and isinstance(owner.get("Shared"), dict):
            initial = int(owner["Shared"]["initial_shared_version"])
        return cls(
            object_id=data["objectId"],
            version=int(data["version"]),
            digest=data["digest"],
            initial_shared_version=initial,
        )


class ExecutionStatus(enum.StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TransactionBlock:
    """Executed transaction summary (digest + effects status)."""

    digest: str
    status: ExecutionStatus = ExecutionStatus.UNKNOWN
    error: str = ""
    raw_effects: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == ExecutionStatus.SUCCESS

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransactionBlock:
        effects = data.get("effects") or {}
        status_info = effects.get("status") or {}
        try:
            status = ExecutionStatus(status_info.get("status", "unknown"))
        except ValueError:
            status = ExecutionStatus.UNKNOWN
        return cls(
            digest=data.get("digest", ""),
            status=status,
            error=status_info.get("error", ""),
            raw_effects=effects,
        )
