"""
Configuration module for HighBuy Monitor.
Loads environment variables and provides application settings.
"""
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


def to_ws_url(rpc_url: str) -> str:
    """
    Convert an HTTP(S) RPC URL to its websocket endpoint.

    "https://rpc.example.com/" -> "wss://rpc.example.com/websocket"
    """
    if rpc_url.startswith("https://"):
        rpc_url = "wss://" + rpc_url[len("https://"):]
    elif rpc_url.startswith("http://"):
        rpc_url = "ws://" + rpc_url[len("http://"):]
    return rpc_url.rstrip("/") + "/websocket"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Chain endpoints
    rpc_url: str
    rest_url: str = ""

    # Telegram Bot Configuration
    telegram_bot_token: str
    # Comma separated chat ids that always receive alerts
    telegram_chat_ids: str = ""

    # Alert threshold in whole native units
    high_buy_min_zig: float = 100

    # Native asset
    native_denom: str = "uzig"
    native_symbol: str = "ZIG"
    native_decimals: int = 6

    # CoinMarketCap quotes
    cmc_api_key: str = ""
    cmc_base_url: str = "https://pro-api.coinmarketcap.com"
    cmc_zig_id: str = ""
    cmc_zig_symbol: str = "ZIG"

    # Pools API and alert links
    degenter_api_url: str = "https://dev-api.degenter.io"
    explorer_tx_url: str = "https://www.zigscan.org/tx"
    pools_url: str = "https://app.degenter.io/token"

    default_banner: str = "banner.png"

    # Database Configuration
    database_path: str = "./data/highbuy.db"

    # WebSocket Configuration
    ws_reconnect_delay: float = 1
    ws_max_reconnect_delay: float = 30
    ws_ping_interval: int = 30
    ws_ping_timeout: int = 20

    # External lookups
    http_timeout: float = 10
    price_ttl: float = 30

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def ws_url(self) -> str:
        return to_ws_url(self.rpc_url)

    @property
    def chat_ids(self) -> List[str]:
        """Statically configured subscriber chat ids."""
        return [s.strip() for s in self.telegram_chat_ids.split(",") if s.strip()]


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


def ensure_data_directory(settings: Settings):
    """Ensure the data directory exists for the database."""
    db_path = Path(settings.database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
