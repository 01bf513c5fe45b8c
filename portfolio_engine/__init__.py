# portfolio_engine/__init__.py
"""
Exchange portfolio engine.

Turns exchange balances, spot fills, auto-invest executions, earn rewards
and live prices into a portfolio view with cost basis and unrealized P&L.

Usage:
    from portfolio_engine import PortfolioService
    from portfolio_engine.schemas import Balance, RawTrade, TickerPrice

    portfolio = PortfolioService().build_portfolio(
        balances, trades_by_symbol, auto_invest_by_asset, prices
    )
"""

from portfolio_engine.services.portfolio import PortfolioService

__version__ = "0.1.0"

__all__ = ["PortfolioService", "__version__"]
