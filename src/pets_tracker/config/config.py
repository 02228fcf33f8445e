# -*- coding: utf-8 -*-
"""Configuration loaded from environment via Pydantic Settings.

Nested env vars use <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, BSC__RPC_URL,
TELEGRAM__API_KEY.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """General application configuration and branding used in alerts."""

    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "pets-tracker"
    service_name: Optional[str] = None
    service_version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"

    brand_name: str = "MicroPets"
    token_symbol: str = "PETS"
    bot_handle: str = "@MicroPetsBuy_bot"
    # Market cap is not computed; this label is rendered as-is.
    market_cap_label: str = "$10M"
    staking_url: str = "https://pets.micropets.io/petdex"
    merch_url: str = "https://micropets.store/"


class LoggingSettings(BaseSettings):
    """Structured logging configuration for structlog/stdlib/Logfire."""

    model_config = SettingsConfigDict(extra="ignore")

    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    logfire_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/pets_tracker.log"
    # TimedRotatingFileHandler: when to rotate (S/M/H/D/W0–W6/midnight), interval, backups to keep
    log_file_when: Literal[
        "S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"
    ] = "midnight"
    log_file_interval: int = 1
    log_file_backup_count: int = 30
    log_file_utc: bool = True

    # Main output format: JSONRenderer if True, ConsoleRenderer if False
    json_format: bool = False

    logfire_enabled: bool = False
    logfire_token: Optional[str] = None


class ApiSettings(BaseSettings):
    """Shared HTTP client configuration (chain RPC and price source)."""

    model_config = SettingsConfigDict(extra="ignore")

    timeout_seconds: float = Field(
        default=10.0,
        ge=1.0,
        le=120.0,
        description="Per-request HTTP timeout in seconds.",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Attempts per request for connection errors and 5xx responses.",
    )


class ChainSettings(BaseSettings):
    """Per-chain configuration: endpoint, tracked token, liquidity pool and cadence."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    enabled: bool = True
    key: str = Field(description="Short chain id used in records and logs (e.g. bsc).")
    name: str = Field(description="Display name (e.g. BSC).")
    pair_label: str = Field(description="Pair label rendered in alerts (e.g. BNB Pair).")
    native_symbol: str = "ETH"
    rpc_url: str = ""
    token_address: str = ""
    pool_address: str = ""
    # Raw string from env so pydantic-settings does not try to JSON-decode it.
    routers_raw: str = Field(
        default="",
        description="DEX router addresses, comma-separated. Env: <CHAIN>__ROUTERS.",
        validation_alias="routers",
    )
    token_decimals: int = Field(default=18, ge=0, le=36)
    price_asset: str = Field(
        default="micropets",
        description="Price source asset id for the tracked token.",
    )
    explorer_name: str = "Etherscan"
    explorer_tx_url: str = "https://etherscan.io/tx/"
    chart_url: str = ""
    swap_url: str = ""
    poll_seconds: float = Field(default=60.0, ge=1.0, le=3600.0)
    lookback_blocks: int = Field(default=50, ge=0, le=100_000)
    max_blocks_per_poll: int = Field(default=2000, ge=1, le=100_000)

    @computed_field
    @property
    def router_addresses(self) -> frozenset[str]:
        """Parse comma-separated routers_raw into a set of lower-cased addresses."""
        if not self.routers_raw or not self.routers_raw.strip():
            return frozenset()
        return frozenset(s.strip().lower() for s in self.routers_raw.split(",") if s.strip())

    def tx_url(self, transaction_hash: str) -> str:
        """Return the block explorer URL for a transaction."""
        return f"{self.explorer_tx_url}{transaction_hash}"


class BscChainSettings(ChainSettings):
    """BNB Smart Chain defaults (env BSC__*)."""

    key: str = "bsc"
    name: str = "BSC"
    pair_label: str = "BNB Pair"
    native_symbol: str = "BNB"
    rpc_url: str = "https://bsc-dataseed.binance.org"
    token_address: str = "0x2466858ab5edad0bb597fe9f008f568b00d25fe3"
    pool_address: str = "0x4bdece4e422fa015336234e4fc4d39ae6dd75b01"
    routers_raw: str = Field(
        default=(
            "0x10ed43c718714eb63d5aa57b78b54704e256024e,"  # PancakeSwap v2
            "0x13f4ea83d0bd40e75c8222255bc855a974568dd4,"  # PancakeSwap smart router
            "0x1111111254eeb25477b68fb85ed929f73a960582"  # 1inch v5
        ),
        validation_alias="routers",
    )
    explorer_name: str = "BscScan"
    explorer_tx_url: str = "https://bscscan.com/tx/"
    chart_url: str = (
        "https://www.dextools.io/app/en/bnb/pair-explorer/"
        "0x4bdece4e422fa015336234e4fc4d39ae6dd75b01"
    )
    swap_url: str = (
        "https://pancakeswap.finance/swap?outputCurrency="
        "0x2466858ab5edad0bb597fe9f008f568b00d25fe3"
    )
    # ~3 s blocks
    lookback_blocks: int = Field(default=100, ge=0, le=100_000)


class EthereumChainSettings(ChainSettings):
    """Ethereum mainnet defaults (env ETHEREUM__*)."""

    key: str = "ethereum"
    name: str = "Ethereum"
    pair_label: str = "ETH Pair"
    native_symbol: str = "ETH"
    rpc_url: str = "https://rpc.ankr.com/eth"
    token_address: str = "0x2466858ab5edad0bb597fe9f008f568b00d25fe3"
    pool_address: str = "0x98b794be9c4f49900c6193aaff20876e1f36043e"
    routers_raw: str = Field(
        default=(
            "0x7a250d5630b4cf539739df2c5dacb4c659f2488d,"  # Uniswap v2
            "0x3fc91a3afd70395cd496c647d5a6cc9d4b2b7fad,"  # Uniswap universal router
            "0x1111111254eeb25477b68fb85ed929f73a960582"  # 1inch v5
        ),
        validation_alias="routers",
    )
    explorer_name: str = "Etherscan"
    explorer_tx_url: str = "https://etherscan.io/tx/"
    chart_url: str = (
        "https://www.dextools.io/app/en/ether/pair-explorer/"
        "0x98b794be9c4f49900c6193aaff20876e1f36043e"
    )
    swap_url: str = (
        "https://app.uniswap.org/swap?chain=mainnet&inputCurrency=NATIVE&outputCurrency="
        "0x2466858ab5edad0bb597fe9f008f568b00d25fe3"
    )
    # ~12 s blocks
    lookback_blocks: int = Field(default=25, ge=0, le=100_000)


class SchedulerSettings(BaseSettings):
    """Retry/backoff policy shared by the per-chain poll schedulers."""

    model_config = SettingsConfigDict(extra="ignore")

    max_attempts: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Attempts per upstream call within one tick before the tick is given up.",
    )
    backoff_floor_seconds: float = Field(default=2.0, gt=0.0, le=60.0)
    backoff_ceiling_seconds: float = Field(default=60.0, ge=0.0, le=600.0)
    rate_limit_floor_seconds: float = Field(default=5.0, gt=0.0, le=120.0)
    rate_limit_ceiling_seconds: float = Field(default=120.0, ge=0.0, le=900.0)
    shutdown_grace_seconds: float = Field(
        default=30.0,
        ge=0.0,
        le=600.0,
        description="How long an in-flight tick may run after shutdown is requested.",
    )


class PriceSettings(BaseSettings):
    """Spot price source (CoinGecko-style simple price API)."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    base_url: str = "https://api.coingecko.com/api/v3"
    vs_currency: str = "usd"
    refresh_seconds: float = Field(
        default=60.0,
        ge=1.0,
        le=3600.0,
        description="Minimum interval between upstream price requests.",
    )
    # Served until the first successful fetch; override with PRICE__DEFAULT_PRICES.
    default_prices_raw: str = Field(
        default="micropets:0.0001,binancecoin:600,ethereum:2600",
        description="Fallback prices 'asset:price,...'. Env: PRICE__DEFAULT_PRICES.",
        validation_alias="default_prices",
    )

    @computed_field
    @property
    def default_prices(self) -> dict[str, Decimal]:
        """Parse 'asset:price' pairs. Malformed entries are ignored."""
        prices: dict[str, Decimal] = {}
        for chunk in (self.default_prices_raw or "").split(","):
            asset, sep, raw_price = chunk.partition(":")
            if not sep or not asset.strip():
                continue
            try:
                prices[asset.strip()] = Decimal(raw_price.strip())
            except InvalidOperation:
                continue
        return prices


class HistorySettings(BaseSettings):
    """Bounded trade history (the ring exposed to the status API)."""

    model_config = SettingsConfigDict(extra="ignore")

    capacity: int = Field(default=100, ge=1, le=10_000)


class FanoutSettings(BaseSettings):
    """Notification fan-out limits."""

    model_config = SettingsConfigDict(extra="ignore")

    max_concurrency: int = Field(
        default=8,
        ge=1,
        le=256,
        description="Maximum simultaneous deliveries across all subscribers.",
    )
    queue_size: int = Field(default=500, ge=1, le=10_000)


class TradeSignalSettings(BaseSettings):
    """How a pool transfer is recognised as a DEX trade."""

    model_config = SettingsConfigDict(extra="ignore")

    strategy: Literal["router", "always"] = "router"


class MediaSettings(BaseSettings):
    """Cloudinary-hosted videos attached to alerts, one per size category."""

    model_config = SettingsConfigDict(extra="ignore")

    cloud_name: str = "da4k3yxhu"
    small_video_id: str = "SMALLBUY_b3px1p"
    medium_video_id: str = "MEDIUMBUY_MPEG_e02zdz"
    whale_video_id: str = "micropets_big_msapxz"


class TelegramNotificationSettings(BaseSettings):
    """Telegram delivery and bot commands (from env TELEGRAM__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = False
    commands_enabled: bool = True
    api_key: Optional[str] = Field(default=None, description="Telegram bot API key.")
    messages_per_minute: int = Field(default=30, ge=1, le=120)
    max_retries: int = Field(default=3, ge=1, le=20)
    backoff_base_seconds: float = Field(default=1.0, ge=0.1, le=60.0)
    connect_timeout: float = Field(default=10.0, ge=0.1, le=60.0)
    read_timeout: float = Field(default=20.0, ge=0.1, le=120.0)
    write_timeout: float = Field(default=20.0, ge=0.1, le=120.0)
    pool_timeout: float = Field(default=10.0, ge=0.1, le=60.0)


class ConsoleNotificationSettings(BaseSettings):
    """Console notification settings."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = True


class StatusApiSettings(BaseSettings):
    """Read-only HTTP status endpoint (last N trade records)."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)


class Settings(BaseSettings):
    """Root application configuration.

    Groups all sub-configurations so the rest of the code does not
    read environment variables directly. Nested overrides use
    <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, ETHEREUM__RPC_URL.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    bsc: BscChainSettings = Field(default_factory=BscChainSettings)
    ethereum: EthereumChainSettings = Field(default_factory=EthereumChainSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    price: PriceSettings = Field(default_factory=PriceSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    fanout: FanoutSettings = Field(default_factory=FanoutSettings)
    trade_signal: TradeSignalSettings = Field(default_factory=TradeSignalSettings)
    media: MediaSettings = Field(default_factory=MediaSettings)
    telegram: TelegramNotificationSettings = Field(default_factory=TelegramNotificationSettings)
    console: ConsoleNotificationSettings = Field(default_factory=ConsoleNotificationSettings)
    status_api: StatusApiSettings = Field(default_factory=StatusApiSettings)

    @property
    def chains(self) -> list[ChainSettings]:
        """Enabled chains, BSC first."""
        return [c for c in (self.bsc, self.ethereum) if c.enabled]

    def chain(self, key: str) -> ChainSettings:
        """Return the chain settings for a key (enabled or not)."""
        for c in (self.bsc, self.ethereum):
            if c.key == key:
                return c
        raise KeyError(key)

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Build settings from environment (and .env), with optional overrides.

        Nested overrides can be passed as nested dicts, e.g.:
        - from_env(scheduler={"max_attempts": 10})
        - from_env(bsc={"enabled": False})

        Returns:
            A new Settings instance.
        """
        return cls(**overrides)


@lru_cache
def get_settings() -> Settings:
    """Return a single cached instance of Settings.

    Typical usage:

        from pets_tracker.config import get_settings

        settings = get_settings()
        poll = settings.bsc.poll_seconds
    """
    return Settings()
