# portfolio_engine/schemas/__init__.py
"""
Pydantic schemas for the records the engine consumes.
"""

from portfolio_engine.schemas.exchange import (
    ExchangeRecord,
    Balance,
    TickerPrice,
    FlexibleEarnPosition,
    LockedEarnPosition,
    RawTrade,
    RawAutoInvestTransaction,
    RawDividend,
    parse_records,
)

__all__ = [
    "ExchangeRecord",
    "Balance",
    "TickerPrice",
    "FlexibleEarnPosition",
    "LockedEarnPosition",
    "RawTrade",
    "RawAutoInvestTransaction",
    "RawDividend",
    "parse_records",
]
