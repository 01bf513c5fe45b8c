# portfolio_engine/services/constants.py
"""
Centralized constants for the portfolio engine.

This module provides a single source of truth for the business constants
used across the engine. Values that users may want to tune (quote currency,
dust threshold) are exposed through settings; the constants below are their
defaults.

Usage:
    from portfolio_engine.services.constants import (
        DEFAULT_QUOTE_CURRENCY,
        DEFAULT_DUST_THRESHOLD,
    )
"""

from decimal import Decimal


# =============================================================================
# QUOTE CURRENCY
# =============================================================================

# Currency every holding is priced and valued in.
# Trading pair symbols are built as <asset><quote>, e.g. "BTCUSDT".
DEFAULT_QUOTE_CURRENCY: str = "USDT"

# Stable-value assets that are never valued as holdings of their own.
DEFAULT_STABLECOINS: tuple[str, ...] = ("USDT", "USDC", "BUSD")


# =============================================================================
# PORTFOLIO FILTERS
# =============================================================================

# Holdings worth this much or less (in quote currency) are treated as dust
# and left out of the portfolio view and its totals.
DEFAULT_DUST_THRESHOLD: Decimal = Decimal("1")


# =============================================================================
# TRANSACTION SOURCES
# =============================================================================

# Only auto-invest executions with this status represent completed purchases.
AUTO_INVEST_SUCCESS_STATUS: str = "SUCCESS"

# Prefixes that keep unified transaction ids unique across sources.
SPOT_ID_PREFIX: str = "spot"
AUTO_INVEST_ID_PREFIX: str = "auto"
EARN_ID_PREFIX: str = "earn"


# =============================================================================
# PAGINATION
# =============================================================================

# Maximum rows the exchange returns for one trade-history request.
TRADE_PAGE_LIMIT: int = 1000

# Page size for page-numbered endpoints (earn positions, auto-invest history).
DEFAULT_PAGE_SIZE: int = 100

# The auto-invest history endpoint only accepts windows of up to 30 days.
AUTO_INVEST_WINDOW_MS: int = 30 * 24 * 60 * 60 * 1000

# Earliest point worth querying (exchange launch, 2017-07-01 UTC).
EXCHANGE_EPOCH_MS: int = 1498867200000


# =============================================================================
# DISPLAY PRECISION
# =============================================================================

# Currency amounts are always shown with 2 decimals.
CURRENCY_DISPLAY_PLACES: int = 2

# Percentages are always shown with 2 decimals.
PERCENT_DISPLAY_PLACES: int = 2
