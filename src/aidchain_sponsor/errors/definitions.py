"""Pre-defined error instances shared by the relay and the client."""

from __future__ import annotations

from aidchain_sponsor.errors.sponsor_errors import SponsorError

# -- Relay validation ------------------------------------------------------

ErrMissingSponsorFields = SponsorError(
    "Missing required fields", status_code=400, code="missing-fields"
)
ErrMissingExecuteFields = SponsorError(
    "Missing digest or signature", status_code=400, code="missing-fields"
)
ErrNetworkNotAllowed = SponsorError(
    "Requested network does not match the sponsor network",
    status_code=400,
    code="network-not-allowed",
)

# -- Relay lifecycle -------------------------------------------------------

ErrRelayNotReady = SponsorError("Sponsor relay not initialized", status_code=503, code="not-ready")
ErrMissingCredential = SponsorError(
    "ENOKI_PRIVATE_KEY environment variable is required!",
    status_code=500,
    code="missing-credential",
)

# -- Client preconditions --------------------------------------------------

ErrWalletNotConnected = SponsorError("Wallet not connected", status_code=400, code="no-wallet")
ErrSponsorshipDisabled = SponsorError(
    "Sponsored transactions not enabled", status_code=400, code="sponsorship-disabled"
)
ErrGasCoinNotAllowed = SponsorError(
    "Sponsored transactions cannot use the gas coin", status_code=400, code="gas-coin"
)

# -- Client flow -----------------------------------------------------------

ErrNoSignature = SponsorError("Failed to get signature", status_code=400, code="no-signature")
ErrGrantMismatch = SponsorError(
    "Sponsored transaction does not match the requested transaction",
    status_code=502,
    code="grant-mismatch",
)
ErrDigestMismatch = SponsorError(
    "Transaction digest does not match the sponsored transaction",
    status_code=502,
    code="digest-mismatch",
)
ErrInsufficientBalance = SponsorError(
    "Insufficient balance! Not enough SUI in your wallet.",
    status_code=422,
    code="insufficient-balance",
)
