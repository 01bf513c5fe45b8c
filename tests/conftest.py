# tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Settings and service fixtures (USDT quote, default dust threshold)
- Factories for raw exchange records with sensible defaults
"""

from decimal import Decimal

import pytest

from portfolio_engine.config import Settings
from portfolio_engine.schemas.exchange import (
    Balance,
    RawAutoInvestTransaction,
    RawDividend,
    RawTrade,
    TickerPrice,
)
from portfolio_engine.services.portfolio import PortfolioService

# 2024-01-01T00:00:00Z
BASE_TIME_MS = 1704067200000
DAY_MS = 24 * 60 * 60 * 1000


# =============================================================================
# SETTINGS & SERVICE FIXTURES
# =============================================================================

@pytest.fixture
def test_settings() -> Settings:
    """Default engine settings, independent of the environment."""
    return Settings(
        quote_currency="USDT",
        dust_threshold=Decimal("1"),
        stablecoins=["USDT", "USDC", "BUSD"],
        log_level="WARNING",
        log_format="text",
    )


@pytest.fixture
def service(test_settings: Settings) -> PortfolioService:
    """Portfolio service wired to the test settings."""
    return PortfolioService(settings=test_settings)


# =============================================================================
# RECORD FACTORIES
# =============================================================================

def create_trade(
        id: int = 1,
        symbol: str = "BTCUSDT",
        price: str = "100",
        qty: str = "1",
        quote_qty: str | None = None,
        commission: str = "0",
        commission_asset: str = "BNB",
        time: int = BASE_TIME_MS,
        is_buyer: bool = True,
) -> RawTrade:
    """Create a spot fill. quote_qty defaults to price × qty."""
    if quote_qty is None:
        quote_qty = str(Decimal(price) * Decimal(qty))
    return RawTrade(
        id=id,
        symbol=symbol,
        price=Decimal(price),
        quantity=Decimal(qty),
        quote_qty=Decimal(quote_qty),
        commission=Decimal(commission),
        commission_asset=commission_asset,
        time=time,
        is_buyer=is_buyer,
    )


def create_auto_invest(
        id: int = 1,
        target_asset: str = "BTC",
        source_asset: str = "USDT",
        source_amount: str = "100",
        target_amount: str = "1",
        execution_price: str = "100",
        fee: str = "0",
        fee_unit: str = "USDT",
        time: int = BASE_TIME_MS,
        status: str = "SUCCESS",
) -> RawAutoInvestTransaction:
    """Create an auto-invest execution."""
    return RawAutoInvestTransaction(
        id=id,
        target_asset=target_asset,
        source_asset=source_asset,
        source_asset_amount=Decimal(source_amount),
        target_asset_amount=Decimal(target_amount),
        execution_price=Decimal(execution_price),
        transaction_fee=Decimal(fee),
        transaction_fee_unit=fee_unit,
        transaction_date_time=time,
        transaction_status=status,
    )


def create_dividend(
        id: int = 1,
        asset: str = "BTC",
        amount: str = "0.001",
        time: int = BASE_TIME_MS,
) -> RawDividend:
    """Create an earn reward distribution."""
    return RawDividend(id=id, asset=asset, amount=Decimal(amount), div_time=time)


def create_balance(asset: str = "BTC", free: str = "1", locked: str = "0") -> Balance:
    """Create a live balance."""
    return Balance(asset=asset, free=Decimal(free), locked=Decimal(locked))


def create_price(symbol: str = "BTCUSDT", price: str = "100") -> TickerPrice:
    """Create a ticker price."""
    return TickerPrice(symbol=symbol, price=Decimal(price))
