"""py-aidchain-sponsor: gas-sponsorship relay and client orchestrator for AidChain on Sui."""

__version__ = "0.1.0"
