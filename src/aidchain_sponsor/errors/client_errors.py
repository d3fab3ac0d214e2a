"""Client-side errors raised by wallet connectors.

Relay failures are not exceptions: ``RelayClient`` returns them as
``RelayFailure`` values.
"""

from __future__ import annotations

from aidchain_sponsor.errors.sponsor_errors import SponsorError


class WalletError(SponsorError):
    """The wallet failed to produce a signature."""

    def __init__(self, message: str, *, code: str = "wallet-error") -> None:
        super().__init__(message, status_code=400, code=code)


class WalletRejectedError(WalletError):
    """The user declined the signature request."""

    def __init__(self, message: str = "UserRejected") -> None:
        super().__init__(message, code="wallet-rejected")
