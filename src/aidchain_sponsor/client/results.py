"""Tagged result types at the relay/orchestrator boundary.

Raw relay JSON is turned into one of these variants inside ``RelayClient``;
nothing past that boundary inspects response bodies.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from aidchain_sponsor.utils.crypto import b64encode


class ErrorCategory(enum.StrEnum):
    """Why a sponsored transaction failed."""

    PRECONDITION = "precondition"
    VALIDATION = "validation"
    SPONSORSHIP_DENIED = "sponsorship_denied"
    SIGNATURE = "signature"
    EXECUTION = "execution"
    TRANSPORT = "transport"
    DIGEST_MISMATCH = "digest_mismatch"


@dataclass(frozen=True)
class TransactionIntent:
    """Unsigned transaction kind plus declared sender and network.

    Built fresh for every orchestration and never reused.
    """

    kind_bytes: bytes
    sender: str
    network: str

    @property
    def kind_b64(self) -> str:
        return b64encode(self.kind_bytes)


@dataclass(frozen=True)
class SponsorGrant:
    """Sponsor-augmented transaction bytes and the digest bound to them."""

    tx_bytes: bytes
    digest: str

    @property
    def tx_b64(self) -> str:
        return b64encode(self.tx_bytes)


@dataclass(frozen=True)
class ExecutionReceipt:
    digest: str


@dataclass(frozen=True)
class RelayFailure:
    """A relay call that did not succeed.

    Attributes:
        message: The relay's ``error`` text, or the transport error.
        status_code: HTTP status, or None when the relay was unreachable.
        details: The relay's ``details`` list.
    """

    message: str
    status_code: int | None = None
    details: tuple[Any, ...] = ()

    @property
    def is_transport(self) -> bool:
        return self.status_code is None

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500  # noqa: PLR2004


SponsorOutcome = SponsorGrant | RelayFailure
ExecuteOutcome = ExecutionReceipt | RelayFailure


@dataclass(frozen=True)
class SponsoredTxResult:
    """Uniform outcome of ``execute_sponsored``.

    ``success=True`` carries ``digest``; ``success=False`` carries a
    human-readable ``error``, its ``category`` and the raw diagnostics.
    """

    success: bool
    digest: str = ""
    error: str | None = None
    category: ErrorCategory | None = None
    raw_error: str | None = None
    details: tuple[Any, ...] = ()

    @classmethod
    def ok(cls, digest: str) -> SponsoredTxResult:
        return cls(success=True, digest=digest)

    @classmethod
    def failure(
        cls,
        error: str,
        category: ErrorCategory,
        *,
        raw_error: str | None = None,
        details: tuple[Any, ...] = (),
    ) -> SponsoredTxResult:
        return cls(
            success=False,
            error=error,
            category=category,
            raw_error=raw_error if raw_error is not None else error,
            details=details,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the ``{success, digest, error}`` shape UIs consume."""
        data: dict[str, Any] = {"success": self.success, "digest": self.digest}
        if not self.success:
            data["error"] = self.error
            data["category"] = self.category.value if self.category else None
        return data
