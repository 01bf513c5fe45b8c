# portfolio_engine/config.py
"""
Engine configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- QUOTE_CURRENCY: Currency holdings are priced in (default: USDT)
- DUST_THRESHOLD: Holdings worth this much or less are hidden (default: 1)
- STABLECOINS: Assets never valued as holdings of their own
- LOG_LEVEL / LOG_FORMAT: Logging setup

Configuration is validated when Settings is constructed. Invalid
configuration raises a pydantic ValidationError with a descriptive message.

Usage:
    from portfolio_engine.config import settings

    symbol = f"{asset}{settings.quote_currency}"
"""
from decimal import Decimal
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from portfolio_engine.services.constants import (
    DEFAULT_DUST_THRESHOLD,
    DEFAULT_QUOTE_CURRENCY,
    DEFAULT_STABLECOINS,
)


# .env in the project root (parent of the package directory)
_PACKAGE_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _PACKAGE_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Environment variables:
        - QUOTE_CURRENCY: Quote asset for pricing and valuation (default: "USDT")
        - DUST_THRESHOLD: Minimum value for a holding to be shown (default: 1)
        - STABLECOINS: JSON list of stable assets (default: USDT, USDC, BUSD)
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
    """

    quote_currency: str = Field(
        default=DEFAULT_QUOTE_CURRENCY,
        min_length=1,
        description="Currency every holding is priced and valued in"
    )

    dust_threshold: Decimal = Field(
        default=DEFAULT_DUST_THRESHOLD,
        ge=0,
        description="Holdings with current value <= this are excluded"
    )

    stablecoins: list[str] = Field(
        default=list(DEFAULT_STABLECOINS),
        description="Stable-value assets that are not valued as holdings"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("quote_currency")
    @classmethod
    def normalize_quote_currency(cls, value: str) -> str:
        """Asset symbols are upper-case on the exchange."""
        value = value.strip().upper()
        if not value:
            raise ValueError("QUOTE_CURRENCY must not be blank")
        return value

    @field_validator("stablecoins")
    @classmethod
    def normalize_stablecoins(cls, value: list[str]) -> list[str]:
        return [symbol.strip().upper() for symbol in value if symbol.strip()]


# Create single instance
settings = Settings()
