"""Enoki — gas sponsorship API."""

from aidchain_sponsor.upstream.enoki.models import ExecutedTransaction, SponsoredTransaction
from aidchain_sponsor.upstream.enoki.service import EnokiService

__all__ = ["EnokiService", "ExecutedTransaction", "SponsoredTransaction"]
