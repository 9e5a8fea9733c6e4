"""Application configuration using pydantic-settings.

All values come from environment variables (or a local .env file).
"""

import logging
from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Telegram
    # ======================
    telegram_bot_token: str = Field(default="", description="Telegram bot token from BotFather")
    telegram_chats_ids: str = Field(
        default="", description="Comma-separated list of chat IDs allowed to issue commands"
    )

    # ======================
    # Wallet
    # ======================
    wallet_path: str = Field(default="wallet.json", description="Path to the encrypted keystore file")
    wallet_password: Optional[str] = Field(default=None, description="Keystore passphrase")

    # ======================
    # MultiversX endpoints
    # ======================
    gateway_url: str = Field(
        default="https://gateway.multiversx.com", description="Proxy gateway used for queries and sends"
    )
    api_url: str = Field(default="https://api.multiversx.com", description="Public API used for balances")
    explorer_url: str = Field(
        default="https://explorer.multiversx.com", description="Explorer base URL for transaction links"
    )
    chain_id: str = Field(default="1", description="Chain ID (1 = mainnet, D = devnet)")
    query_timeout: float = Field(default=10.0, description="Contract query timeout in seconds")
    api_timeout: float = Field(default=40.0, description="Balance API timeout in seconds")

    # ======================
    # Bonding contracts
    # ======================
    master_contract_address: str = Field(
        default="erd1qqqqqqqqqqqqqpgqg0sshhkwaxz8fxu47z4svrmp48mzydjlptzsdhxjpd",
        description="Master contract holding the bonding metadata registry",
    )
    bonding_abi_path: str = Field(default="master.abi.json", description="ABI of the master contract")

    # ======================
    # Trading
    # ======================
    base_token: str = Field(default="ONE-f9954f", description="Token paid on buys and received on sells")
    base_token_decimals: int = Field(default=18, description="Decimals used to scale explicit buy amounts")
    swap_gas_limit: int = Field(default=10_000_000, description="Gas limit for swap calls")
    min_amount_to_receive: int = Field(
        default=1,
        description="Minimum output passed to swap (smallest unit). 1 means no slippage protection.",
    )
    balance_fraction: Decimal = Field(
        default=Decimal("0.98"), description="Share of the wallet balance traded when no amount is given"
    )
    serialize_submissions: bool = Field(
        default=True, description="Serialize transaction submissions per wallet"
    )

    # ======================
    # Logging
    # ======================
    log_level: str = Field(default="INFO", description="Root log level")

    @property
    def authorized_chat_ids(self) -> frozenset[int]:
        """Parse the allow-list into a set of chat IDs, skipping malformed entries."""
        chat_ids = set()
        for raw in self.telegram_chats_ids.split(","):
            raw = raw.strip()
            if not raw:
                continue
            try:
                chat_ids.add(int(raw))
            except ValueError:
                logger.warning(f"Ignoring malformed chat ID in TELEGRAM_CHATS_IDS: {raw!r}")
        return frozenset(chat_ids)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "telegram_bot_token": "***" if self.telegram_bot_token else "(not set)",
            "authorized_chats": sorted(self.authorized_chat_ids) or "(everyone)",
            "wallet_path": self.wallet_path,
            "wallet_password": "***" if self.wallet_password else "(not set)",
            "gateway_url": self.gateway_url,
            "api_url": self.api_url,
            "chain_id": self.chain_id,
            "master_contract": self.master_contract_address,
            "base_token": self.base_token,
            "swap": {
                "gas_limit": self.swap_gas_limit,
                "min_amount_to_receive": self.min_amount_to_receive,
                "balance_fraction": str(self.balance_fraction),
                "serialize_submissions": self.serialize_submissions,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
