"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from aidchain_sponsor.errors.definitions import ErrRelayNotReady
from aidchain_sponsor.relay.service import SponsorRelay  # noqa: TC001


def get_relay(request: Request) -> SponsorRelay:
    """Retrieve the relay from ``app.state``.

    The relay is stored on ``app.state.relay`` during lifespan startup.

    Raises:
        ErrRelayNotReady: If the lifespan has not run.
    """
    relay: SponsorRelay | None = getattr(request.app.state, "relay", None)
    if relay is None:
        raise ErrRelayNotReady
    return relay
