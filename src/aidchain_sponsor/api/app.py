"""FastAPI application factory for the sponsor relay."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.responses import Response

from aidchain_sponsor import __version__
from aidchain_sponsor.api.middleware.cors import setup_cors
from aidchain_sponsor.api.schemas import HealthResponse
from aidchain_sponsor.api.sponsor import router as sponsor_router
from aidchain_sponsor.config.settings import AppConfig
from aidchain_sponsor.errors.definitions import ErrMissingCredential
from aidchain_sponsor.errors.sponsor_errors import SponsorError
from aidchain_sponsor.metrics.collector import RelayMetrics
from aidchain_sponsor.metrics.middleware import PrometheusMiddleware
from aidchain_sponsor.relay.service import SponsorRelay
from aidchain_sponsor.upstream.enoki.service import EnokiService

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


def _error_body(message: str, details: list | None = None) -> dict:
    return {"error": message, "details": jsonable_encoder(details or [])}


def _validation_details(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle hooks.

    Refuses to start without a sponsor credential. Connects the Enoki client
    and builds the relay on startup; closes the client on exit.
    """
    config: AppConfig = app.state.config
    enoki: EnokiService = app.state.enoki
    if not config.enoki.has_credential:
        logger.error(ErrMissingCredential.message)
        raise ErrMissingCredential
    if not enoki.is_connected:
        await enoki.connect()

    app.state.relay = SponsorRelay(enoki, config.sponsor, metrics=app.state.metrics)
    logger.info(
        "Sponsor relay ready: network=%s, %d allowed targets",
        config.sponsor.network,
        len(app.state.relay.allowed_move_call_targets),
    )
    try:
        yield
    finally:
        await enoki.close()
        logger.info("Sponsor relay shut down")


def create_app(
    *,
    config: AppConfig | None = None,
    enoki: EnokiService | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.
        enoki: Optional pre-built upstream client. If it is already
            connected, startup reuses it as is.
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="aidchain-sponsor",
        version=__version__,
        description="Gas sponsorship relay for AidChain on Sui",
        lifespan=_lifespan,
    )

    app.state.config = config
    app.state.enoki = enoki or EnokiService(config.enoki)
    app.state.metrics = RelayMetrics()

    # -- Middleware --
    setup_cors(app)
    if config.metrics.enabled:
        app.add_middleware(PrometheusMiddleware, registry=app.state.metrics.registry)

    # -- Error handlers --
    @app.exception_handler(SponsorError)
    async def _sponsor_error_handler(request: Request, exc: SponsorError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=_error_body("Invalid request body", _validation_details(exc)),
        )

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=_error_body(str(exc)))

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health() -> HealthResponse:
        timestamp = datetime.now(UTC).isoformat(timespec="milliseconds")
        return HealthResponse(status="ok", timestamp=timestamp.replace("+00:00", "Z"))

    if config.metrics.enabled:

        @app.get("/metrics", tags=["base"], include_in_schema=False)
        async def metrics_endpoint() -> Response:
            """Prometheus metrics endpoint."""
            return Response(
                content=generate_latest(app.state.metrics.registry),
                media_type="text/plain; version=0.0.4; charset=utf-8",
            )

    # -- Mount sponsorship API --
    app.include_router(sponsor_router)

    return app
