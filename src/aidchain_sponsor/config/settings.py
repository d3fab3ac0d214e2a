"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``AIDCHAIN_``, nested via ``__``)
2. YAML config file (``AIDCHAIN_CONFIG_PATH`` env var)
3. Defaults defined here

The relay only reads ``server``, ``enoki``, ``sponsor`` and ``metrics``;
client-side code only reads ``client``.
"""

from __future__ import annotations

import enum
import os
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# AidChain deployment on Sui testnet
DEFAULT_PACKAGE_ID = "0x39a75e291a9eb2f71678d6908ca45fb65016961dffe7d344b233a07780bfb721"
DEFAULT_CLIENT_PACKAGE_ID = "0xc974b1f31dc9afdbe11f7b08ca15155f4d1a9aed8524138f42ee82833065f07d"
DEFAULT_REGISTRY_ID = "0x7a170f06ef97d0254b5a08f694f54db71dcaf767f090ef1edade366e5e311889"
DEFAULT_REGISTRY_INITIAL_SHARED_VERSION = 670251442

DEFAULT_ALLOWED_FUNCTIONS = (
    "aidchain::register_recipient",
    "aidchain::create_verification_proposal",
    "aidchain::vote_on_proposal",
    "aidchain::execute_proposal",
    "aidchain::create_aid_package",
    "aidchain::assign_recipient",
    "aidchain::mark_delivered",
    "aidchain::release_funds",
    "impact_nft::mint_impact_nft",
)

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class Network(enum.StrEnum):
    """Sui networks the sponsorship provider serves."""

    MAINNET = "mainnet"
    TESTNET = "testnet"
    DEVNET = "devnet"


_RPC_URLS = {
    Network.MAINNET: "https://fullnode.mainnet.sui.io:443",
    Network.TESTNET: "https://fullnode.testnet.sui.io:443",
    Network.DEVNET: "https://fullnode.devnet.sui.io:443",
}


def default_rpc_url(network: Network) -> str:
    """Public full-node JSON-RPC URL for *network*."""
    return _RPC_URLS[network]


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class ServerConfig(BaseSettings):
    """Relay HTTP server settings."""

    model_config = SettingsConfigDict(
        env_prefix="AIDCHAIN_SERVER__",
        case_sensitive=False,
    )

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3001

    @model_validator(mode="before")
    @classmethod
    def _bare_port(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to the conventional ``PORT`` variable."""
        if values.get("port") is None and os.getenv("PORT"):
            values["port"] = os.environ["PORT"]
        return values


class EnokiConfig(BaseSettings):
    """Upstream sponsorship provider (Enoki) settings.

    ``private_key`` is the sponsor credential. It also accepts the bare
    ``ENOKI_PRIVATE_KEY`` variable.
    """

    model_config = SettingsConfigDict(
        env_prefix="AIDCHAIN_ENOKI__",
        case_sensitive=False,
    )

    url: str = "https://api.enoki.mystenlabs.com"
    private_key: SecretStr = SecretStr("")
    timeout: float = 30.0

    @model_validator(mode="before")
    @classmethod
    def _bare_private_key(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to ``ENOKI_PRIVATE_KEY`` when no prefixed key is set."""
        if not values.get("private_key") and os.getenv("ENOKI_PRIVATE_KEY"):
            values["private_key"] = os.environ["ENOKI_PRIVATE_KEY"]
        return values

    @property
    def has_credential(self) -> bool:
        return bool(self.private_key.get_secret_value())


class SponsorPolicyConfig(BaseSettings):
    """What the relay is willing to pay gas for.

    The allow-list is server-side configuration only; requests cannot add to it.
    """

    model_config = SettingsConfigDict(
        env_prefix="AIDCHAIN_SPONSOR__",
        case_sensitive=False,
    )

    network: Network = Field(
        default=Network.TESTNET,
        description="Network the sponsor credential is pinned to",
    )
    package_id: str = DEFAULT_PACKAGE_ID
    allowed_functions: list[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_FUNCTIONS))
    extra_targets: list[str] = Field(
        default_factory=list,
        description="Additional fully qualified pkg::module::function targets",
    )
    allowed_addresses: list[str] = Field(default_factory=list)

    @property
    def allowed_move_call_targets(self) -> list[str]:
        """Fully qualified Move call targets, package functions first."""
        targets = [f"{self.package_id}::{fn}" for fn in self.allowed_functions]
        for target in self.extra_targets:
            if target not in targets:
                targets.append(target)
        return targets


class ClientConfig(BaseSettings):
    """Client-side (orchestrator) settings."""

    model_config = SettingsConfigDict(
        env_prefix="AIDCHAIN_CLIENT__",
        case_sensitive=False,
    )

    relay_url: str = "http://localhost:3001"
    sponsored_tx_enabled: bool = False
    verify_grant: bool = True
    network: Network = Network.TESTNET
    rpc_url: str = ""
    timeout: float = 30.0
    package_id: str = DEFAULT_CLIENT_PACKAGE_ID
    registry_id: str = DEFAULT_REGISTRY_ID
    registry_initial_shared_version: int = DEFAULT_REGISTRY_INITIAL_SHARED_VERSION
    gas_budget: int = 50_000_000

    @property
    def effective_rpc_url(self) -> str:
        return self.rpc_url or default_rpc_url(self.network)


class MetricsConfig(BaseSettings):
    """Prometheus metrics settings."""

    model_config = SettingsConfigDict(
        env_prefix="AIDCHAIN_METRICS__",
        case_sensitive=False,
    )

    enabled: bool = True


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Built once at process start and injected into the relay app factory
    and the client orchestrator.
    """

    model_config = SettingsConfigDict(
        env_prefix="AIDCHAIN_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    config_path: str = ""

    server: ServerConfig = Field(default_factory=ServerConfig)
    enoki: EnokiConfig = Field(default_factory=EnokiConfig)
    sponsor: SponsorPolicyConfig = Field(default_factory=SponsorPolicyConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "") or os.getenv("AIDCHAIN_CONFIG_PATH", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))
