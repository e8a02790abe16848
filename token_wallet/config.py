"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

from .wallet import U64_MAX


class WalletConfig(BaseSettings):
    """Token wallet configuration"""

    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Ledger configuration
    max_balance: int = U64_MAX  # Credits past this ceiling are rejected

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090
    api_debug: bool = False
    cors_allow_origins: List[str] = ["*"]

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr


# Global configuration instance
config = WalletConfig()


def get_config() -> WalletConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> WalletConfig:
    """Reload configuration from environment"""
    global config
    config = WalletConfig()
    return config
