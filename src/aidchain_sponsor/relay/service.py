"""Sponsor relay — validates client requests and proxies them to Enoki.

The relay is stateless: every call is one validated round-trip to the
upstream sponsorship API. It owns the sponsor credential (inside
``EnokiService``), the allow-list of Move call targets and the pinned
network. None of these can be influenced by request input.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aidchain_sponsor.errors.definitions import (
    ErrMissingExecuteFields,
    ErrMissingSponsorFields,
    ErrNetworkNotAllowed,
)
from aidchain_sponsor.errors.upstream_errors import EnokiError
from aidchain_sponsor.metrics.collector import (
    OP_EXECUTE,
    OP_SPONSOR,
    OUTCOME_OK,
    OUTCOME_REJECTED,
    OUTCOME_UPSTREAM_ERROR,
    RelayMetrics,
)

if TYPE_CHECKING:
    from aidchain_sponsor.config.settings import SponsorPolicyConfig
    from aidchain_sponsor.upstream.enoki.models import ExecutedTransaction, SponsoredTransaction
    from aidchain_sponsor.upstream.enoki.service import EnokiService

logger = logging.getLogger(__name__)


class SponsorRelay:
    """Sponsor-and-execute proxy in front of Enoki.

    Usage::

        relay = SponsorRelay(enoki, config.sponsor)
        grant = await relay.sponsor(transaction_kind_bytes=kind_b64, sender=addr)
        result = await relay.execute(digest=grant.digest, signature=sig)
    """

    def __init__(
        self,
        enoki: EnokiService,
        policy: SponsorPolicyConfig,
        *,
        metrics: RelayMetrics | None = None,
    ) -> None:
        self._enoki = enoki
        self._network = policy.network.value
        self._allowed_targets = tuple(policy.allowed_move_call_targets)
        self._allowed_addresses = tuple(policy.allowed_addresses)
        self._metrics = metrics or RelayMetrics()

    @property
    def network(self) -> str:
        """The network the sponsor credential is pinned to."""
        return self._network

    @property
    def allowed_move_call_targets(self) -> tuple[str, ...]:
        return self._allowed_targets

    async def sponsor(
        self,
        *,
        transaction_kind_bytes: str | None,
        sender: str | None,
        network: str | None = None,
    ) -> SponsoredTransaction:
        """Obtain a sponsor grant (full bytes + digest) for a transaction kind.

        Raises:
            SponsorError: 400 if a required field is missing or the network
                differs from the pinned one. No upstream call is made.
            EnokiError: Upstream rejection, with its status and details.
        """
        logger.info("Sponsor request: sender=%s network=%s", sender, network)

        if not transaction_kind_bytes or not sender:
            self._metrics.record(OP_SPONSOR, OUTCOME_REJECTED)
            raise ErrMissingSponsorFields

        effective_network = self._resolve_network(network)

        try:
            with self._metrics.track_upstream(OP_SPONSOR):
                grant = await self._enoki.create_sponsored_transaction(
                    network=effective_network,
                    transaction_kind_bytes=transaction_kind_bytes,
                    sender=sender,
                    allowed_move_call_targets=list(self._allowed_targets),
                    allowed_addresses=list(self._allowed_addresses),
                )
        except EnokiError as exc:
            self._metrics.record(OP_SPONSOR, OUTCOME_UPSTREAM_ERROR)
            logger.warning("Sponsor error (%d): %s", exc.status_code, exc.message)
            logger.debug("Sponsor error details: %s", exc.details)
            raise

        self._metrics.record(OP_SPONSOR, OUTCOME_OK)
        logger.info("Sponsor success: %s", grant.digest)
        return grant

    async def execute(
        self,
        *,
        digest: str | None,
        signature: str | None,
    ) -> ExecutedTransaction:
        """Submit the user's signature for a sponsored transaction.

        Raises:
            SponsorError: 400 if digest or signature is missing.
            EnokiError: Upstream rejection, with its status and details.
        """
        if not digest or not signature:
            self._metrics.record(OP_EXECUTE, OUTCOME_REJECTED)
            raise ErrMissingExecuteFields

        try:
            with self._metrics.track_upstream(OP_EXECUTE):
                result = await self._enoki.execute_sponsored_transaction(
                    digest=digest,
                    signature=signature,
                )
        except EnokiError as exc:
            self._metrics.record(OP_EXECUTE, OUTCOME_UPSTREAM_ERROR)
            logger.warning("Execute error for %s (%d): %s", digest, exc.status_code, exc.message)
            raise

        self._metrics.record(OP_EXECUTE, OUTCOME_OK)
        logger.info("Execute success: %s", result.digest)
        return result

    def _resolve_network(self, requested: str | None) -> str:
        """Return the pinned network, refusing any other requested network."""
        if not requested or requested.strip().lower() == self._network:
            return self._network
        self._metrics.record(OP_SPONSOR, OUTCOME_REJECTED)
        logger.warning(
            "Refusing sponsorship on network %r (pinned to %r)", requested, self._network
        )
        raise ErrNetworkNotAllowed
