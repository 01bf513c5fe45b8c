# portfolio_engine/services/__init__.py
"""
Service layer for the portfolio engine.

Services:
- Have NO knowledge of transport (no HTTP, no exchange client)
- Raise domain-specific exceptions only at their boundaries
- Receive all data as parameters

Usage:
    from portfolio_engine.services.portfolio import PortfolioService
    from portfolio_engine.services.collection import merge_balances
    from portfolio_engine.services import DataSourceError, RecordParseError

Architecture:
    services/
    ├── __init__.py          # This file - exception exports
    ├── exceptions.py        # Domain exceptions
    ├── constants.py         # Business constants
    ├── protocols.py         # Fetch callables (Protocol classes)
    ├── collection.py        # Pagination, balance merging, grouping
    ├── formatting.py        # Display formatting
    └── portfolio/           # Portfolio engine
        ├── service.py       # Main entry point
        ├── types.py         # Result data types
        ├── unification.py   # Ledger unification
        └── calculators.py   # Cost basis, valuation, totals, stats

Note:
    Sub-packages are not imported here: portfolio_engine.config depends on
    services.constants, and the portfolio package depends on config.
"""

from portfolio_engine.services.exceptions import (
    ServiceError,
    ValidationError,
    RecordParseError,
    DataSourceError,
    SourceUnavailableError,
    RateLimitError,
)

__all__ = [
    "ServiceError",
    "ValidationError",
    "RecordParseError",
    "DataSourceError",
    "SourceUnavailableError",
    "RateLimitError",
]
