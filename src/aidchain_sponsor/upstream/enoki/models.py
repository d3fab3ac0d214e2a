"""Enoki data models — sponsored and executed transactions.

Enoki wraps successful payloads in a ``{"data": {...}}`` envelope; both
enveloped and bare dicts are accepted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _unwrap(data: dict[str, Any]) -> dict[str, Any]:
    inner = data.get("data")
    return inner if isinstance(inner, dict) else data


@dataclass(frozen=True)
class SponsoredTransaction:
    """Sponsor grant: full transaction bytes (Base64) and their digest.

    Attributes:
        tx_bytes: Base64 ``TransactionData`` including the sponsor's gas data.
        digest: Base58 digest binding the grant to ``tx_bytes``.
    """

    tx_bytes: str
    digest: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SponsoredTransaction:
        body = _unwrap(data)
        return cls(tx_bytes=body.get("bytes", ""), digest=body.get("digest", ""))


@dataclass(frozen=True)
class ExecutedTransaction:
    """Result of executing a sponsored transaction."""

    digest: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExecutedTransaction:
        return cls(digest=_unwrap(data).get("digest", ""))
