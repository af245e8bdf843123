"""Configuration management for chaincompare."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from chaincompare.errors import ConfigurationError
from chaincompare.logging_utils import LogProfile


class Settings(BaseSettings):
    """Application settings."""

    # Server
    host: str = Field(default="127.0.0.1", description="Bind address for the HTTP server")
    port: int = Field(default=8000, description="Port for the HTTP server")

    # XRPL (ledger network)
    xrpl_ws_url: str = Field(default="wss://s.altnet.rippletest.net:51233", description="XRPL websocket endpoint")
    xrpl_faucet_host: str | None = Field(None, description="Optional faucet host override")
    xrpl_connect_timeout_seconds: float = Field(default=15.0, description="Timeout for the websocket handshake")
    xrpl_fund_timeout_seconds: float = Field(default=25.0, description="Timeout for faucet funding")
    xrpl_submit_timeout_seconds: float = Field(default=30.0, description="Timeout for submit-and-wait")
    xrpl_payment_xrp: int = Field(default=10, description="Payment amount in XRP")
    xrpl_confirmation_delay_seconds: float = Field(default=0.0, description="Extra simulated confirmation wait")

    # Ethereum (smart-contract network)
    ethereum_rpc_urls: list[str] = Field(
        default=[
            "https://rpc.sepolia.org",
            "https://eth-sepolia.public.blastapi.io",
            "https://ethereum-sepolia-rpc.publicnode.com",
        ],
        description="JSON-RPC endpoints tried in order",
    )
    ethereum_request_timeout_seconds: float = Field(default=10.0, description="Timeout for one JSON-RPC call")
    ethereum_gas_estimate: int = Field(default=65_000, description="Gas units for an ERC-20 transfer")
    ethereum_fallback_gas_price_gwei: float = Field(default=25.0, description="Gas price used when the node has none")
    ethereum_build_delay_seconds: float = Field(default=1.0, description="Simulated transaction build time")
    ethereum_broadcast_delay_seconds: float = Field(default=2.0, description="Simulated broadcast time")
    ethereum_confirmation_delay_seconds: float = Field(default=15.0, description="Simulated block confirmation time")

    # Tron (resource-metered network)
    tron_api_url: str = Field(default="https://api.trongrid.io", description="TronGrid HTTP API base")
    tron_request_timeout_seconds: float = Field(default=10.0, description="Timeout for one TronGrid call")
    tron_fee_trx: float = Field(default=1.2, description="Quoted fee for a TRC-20 transfer in TRX")
    tron_energy_units: int = Field(default=31_895, description="Energy consumed by a TRC-20 transfer")
    tron_bandwidth_bytes: int = Field(default=345, description="Bandwidth consumed by a TRC-20 transfer")
    tron_build_delay_seconds: float = Field(default=1.0, description="Simulated transaction build time")
    tron_resource_delay_seconds: float = Field(default=1.0, description="Simulated resource check time")
    tron_broadcast_delay_seconds: float = Field(default=2.0, description="Simulated broadcast time")
    tron_confirmation_delay_seconds: float = Field(default=3.0, description="Simulated block confirmation time")

    # Approximate USD prices used to normalize fees
    xrp_usd: float = Field(default=2.5, gt=0, description="XRP price in USD")
    eth_usd: float = Field(default=3000.0, gt=0, description="ETH price in USD")
    trx_usd: float = Field(default=0.1, gt=0, description="TRX price in USD")

    # Quick estimate endpoint
    estimate_timeout_seconds: float = Field(default=10.0, description="Timeout for one estimate ping")
    xrpl_estimate_url: str = Field(default="https://xrplcluster.com/", description="XRPL ping target")
    ethereum_estimate_url: str = Field(default="https://rpc.sepolia.org", description="Ethereum ping target")
    tron_estimate_url: str = Field(default="https://api.shasta.trongrid.io", description="Tron ping target")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_profile: LogProfile = Field(default="default", description="Log profile (default or cli)")

    model_config = SettingsConfigDict(
        env_prefix="CHAINCOMPARE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get process-wide application settings.

    pydantic-settings loads values from the environment and the ``.env`` file.
    """
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc
