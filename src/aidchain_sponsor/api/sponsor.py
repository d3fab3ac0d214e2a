"""Sponsorship endpoints — sponsor a transaction kind, execute a signed grant."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from aidchain_sponsor.api.dependencies import get_relay
from aidchain_sponsor.api.schemas import (
    ErrorResponse,
    ExecuteRequest,
    ExecuteResponse,
    SponsorRequest,
    SponsorResponse,
)
from aidchain_sponsor.relay.service import SponsorRelay  # noqa: TC001

router = APIRouter(
    prefix="/api",
    tags=["sponsor"],
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)


@router.post("/sponsor")
async def sponsor(
    body: SponsorRequest,
    relay: Annotated[SponsorRelay, Depends(get_relay)],
) -> SponsorResponse:
    """Attach sponsor gas data to a transaction kind and return it for signing."""
    grant = await relay.sponsor(
        transaction_kind_bytes=body.transaction_kind_bytes,
        sender=body.sender,
        network=body.network,
    )
    return SponsorResponse(tx_bytes=grant.tx_bytes, digest=grant.digest)


@router.post("/execute")
async def execute(
    body: ExecuteRequest,
    relay: Annotated[SponsorRelay, Depends(get_relay)],
) -> ExecuteResponse:
    """Execute a sponsored transaction with the user's signature."""
    result = await relay.execute(digest=body.digest, signature=body.signature)
    return ExecuteResponse(digest=result.digest)
