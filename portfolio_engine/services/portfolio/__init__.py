# portfolio_engine/services/portfolio/__init__.py
"""
Portfolio Engine Package.

This package turns exchange records into a portfolio view:
- Unified ledger per asset (unify_transactions)
- DCA timeline (compute_dca_timeline)
- Holding valuation (calculate_holding)
- Portfolio totals (build_portfolio)
- Ledger statistics (compute_holding_stats)
- DCA analysis (build_dca_analysis)

Usage:
    from portfolio_engine.services.portfolio import PortfolioService

    service = PortfolioService()
    portfolio = service.build_portfolio(balances, trades_by_symbol, auto_invest_by_asset, prices)

Architecture:
    portfolio/
    ├── __init__.py        # This file - package exports
    ├── types.py           # Result data classes and enums
    ├── unification.py     # Raw records → UnifiedTransaction ledger
    ├── calculators.py     # Stateless calculators
    └── service.py         # PortfolioService (entry point)

Data Flow:
    RawTrade / RawAutoInvestTransaction / RawDividend → TransactionUnifier → ledger
    ledger → DcaTimelineCalculator → DcaPoint timeline
    ledger → HoldingStatsCalculator → HoldingStats
    RawTrade + RawAutoInvestTransaction + Balance + price → HoldingCalculator → Holding
    Balances + histories + prices → PortfolioAggregator → PortfolioData
"""

from portfolio_engine.services.portfolio.calculators import (
    DcaAnalysisCalculator,
    DcaTimelineCalculator,
    HoldingCalculator,
    HoldingStatsCalculator,
    PortfolioAggregator,
)
from portfolio_engine.services.portfolio.service import PortfolioService
from portfolio_engine.services.portfolio.types import (
    DcaPoint,
    DcaSummary,
    Holding,
    HoldingStats,
    PortfolioData,
    TransactionSource,
    TransactionType,
    UnifiedTransaction,
)
from portfolio_engine.services.portfolio.unification import TransactionUnifier

__all__ = [
    # Main service
    "PortfolioService",

    # Data types
    "TransactionType",
    "TransactionSource",
    "UnifiedTransaction",
    "DcaPoint",
    "Holding",
    "PortfolioData",
    "HoldingStats",
    "DcaSummary",

    # Calculators (for testing)
    "TransactionUnifier",
    "DcaTimelineCalculator",
    "HoldingCalculator",
    "PortfolioAggregator",
    "HoldingStatsCalculator",
    "DcaAnalysisCalculator",
]
