"""Sponsor relay — server-side sponsorship proxy."""

from aidchain_sponsor.relay.service import SponsorRelay

__all__ = ["SponsorRelay"]
