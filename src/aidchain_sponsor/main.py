"""Application entry point for the sponsor relay server."""

from __future__ import annotations

import logging
import os
import sys

import uvicorn

from aidchain_sponsor.api.app import create_app
from aidchain_sponsor.config.settings import AppConfig

logger = logging.getLogger(__name__)


def main() -> None:
    """Start the sponsor relay, refusing to run without a sponsor credential."""
    config = AppConfig()
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not config.enoki.has_credential:
        logger.error("ENOKI_PRIVATE_KEY environment variable is required!")
        sys.exit(1)

    logger.info("Sponsor relay starting on port %d", config.server.port)
    reload = os.getenv("AIDCHAIN_RELOAD", "false").lower() in ("1", "true", "yes")
    if reload:
        # The reloader re-imports the factory, which reads the environment again.
        uvicorn.run(
            "aidchain_sponsor.api.app:create_app",
            factory=True,
            host=config.server.host,
            port=config.server.port,
            reload=True,
            log_level="info",
        )
        return

    uvicorn.run(
        create_app(config=config),
        host=config.server.host,
        port=config.server.port,
        log_level="debug" if config.debug else "info",
    )


if __name__ == "__main__":
    main()
