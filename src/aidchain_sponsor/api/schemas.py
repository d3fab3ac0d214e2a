"""Relay API request/response schemas (Pydantic models).

Request fields are optional at the schema level so that a missing field
reaches the relay's own check and produces a 400, not a schema error.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SponsorRequest(BaseModel):
    """Body of ``POST /api/sponsor``."""

    network: str | None = None
    transaction_kind_bytes: str | None = Field(
        None,
        alias="transactionKindBytes",
        description="Base64 transaction-kind bytes (no sender or gas data)",
    )
    sender: str | None = None

    model_config = {"populate_by_name": True}


class SponsorResponse(BaseModel):
    """Sponsor grant returned to the client for signing."""

    tx_bytes: str = Field(alias="bytes", description="Base64 sponsored transaction bytes")
    digest: str

    model_config = {"populate_by_name": True}


class ExecuteRequest(BaseModel):
    """Body of ``POST /api/execute``."""

    digest: str | None = None
    signature: str | None = None


class ExecuteResponse(BaseModel):
    digest: str


class ErrorResponse(BaseModel):
    """Error body for every non-2xx relay response."""

    error: str
    details: list[Any] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    timestamp: str
