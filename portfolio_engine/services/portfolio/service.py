# portfolio_engine/services/portfolio/service.py
"""
Portfolio Service - Main entry point of the engine.

All engine operations go through this service:
- unify_transactions(): One asset's ledger from its three record sources
- compute_dca_timeline(): Running cost basis of spot buys
- calculate_holding(): Point-in-time valuation of one asset
- build_portfolio(): All holdings plus portfolio totals
- compute_holding_stats(): Descriptive aggregates over a ledger
- build_dca_analysis(): DCA summary rows for a built portfolio
- tradeable_assets(): Balances whose trade history is worth collecting

Design Principles:
- Configuration Injection: Settings passed via constructor
- No I/O: Callers fetch data, the service only calculates
- Composable: Uses specialized calculators for each task
- Referentially transparent: same inputs, same outputs

Usage:
    from portfolio_engine.services.portfolio import PortfolioService

    service = PortfolioService()
    portfolio = service.build_portfolio(
        balances=balances,
        trades_by_symbol=trades_by_symbol,
        auto_invest_by_asset=auto_invest_by_asset,
        prices=prices,
    )
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from portfolio_engine.config import Settings, settings as default_settings
from portfolio_engine.schemas.exchange import (
    Balance,
    RawAutoInvestTransaction,
    RawDividend,
    RawTrade,
    TickerPrice,
)
from portfolio_engine.services.collection import tradeable_assets
from portfolio_engine.services.portfolio.calculators import (
    DcaAnalysisCalculator,
    DcaTimelineCalculator,
    HoldingCalculator,
    HoldingStatsCalculator,
    PortfolioAggregator,
)
from portfolio_engine.services.portfolio.types import (
    DcaPoint,
    DcaSummary,
    Holding,
    HoldingStats,
    PortfolioData,
    UnifiedTransaction,
)
from portfolio_engine.services.portfolio.unification import TransactionUnifier

logger = logging.getLogger(__name__)


class PortfolioService:
    """
    Main service for portfolio calculations.

    Holds only configuration and stateless calculators, so one instance can
    serve any number of concurrent calls with different input snapshots.

    Attributes:
        _settings: Engine settings (quote currency, dust threshold)
        _unifier: Builds ledgers from raw records
        _timeline_calc: Running cost basis of spot buys
        _holding_calc: Valuation of one asset
        _aggregator: Portfolio totals, dust filter, ordering
        _stats_calc: Ledger statistics
        _dca_calc: DCA analysis rows
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """
        Initialize the portfolio service.

        Args:
            settings: Engine settings. If None, uses the settings loaded
                      from the environment.
        """
        self._settings = settings or default_settings
        quote_currency = self._settings.quote_currency

        self._unifier = TransactionUnifier()
        self._timeline_calc = DcaTimelineCalculator()
        self._holding_calc = HoldingCalculator(quote_currency=quote_currency)
        self._aggregator = PortfolioAggregator(
            holding_calc=self._holding_calc,
            dust_threshold=self._settings.dust_threshold,
        )
        self._stats_calc = HoldingStatsCalculator(quote_currency=quote_currency)
        self._dca_calc = DcaAnalysisCalculator(
            unifier=self._unifier,
            timeline_calc=self._timeline_calc,
        )

    @property
    def quote_currency(self) -> str:
        return self._settings.quote_currency

    def symbol_for(self, asset: str) -> str:
        """Trading pair of an asset against the quote currency."""
        return f"{asset}{self.quote_currency}"

    def tradeable_assets(self, balances: Iterable[Balance]) -> list[Balance]:
        """Balances to collect trade history for: not the quote currency, not a stablecoin."""
        return tradeable_assets(
            balances,
            quote_currency=self._settings.quote_currency,
            stablecoins=self._settings.stablecoins,
        )

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def unify_transactions(
            self,
            asset: str,
            symbol: str,
            trades: Iterable[RawTrade],
            auto_invest_txs: Iterable[RawAutoInvestTransaction],
            dividends: Iterable[RawDividend] = (),
    ) -> list[UnifiedTransaction]:
        """
        Merge one asset's spot, auto-invest and earn records into a ledger.

        Unsuccessful auto-invest executions are dropped.

        Returns:
            Ledger entries, newest first
        """
        return self._unifier.unify(
            asset=asset,
            symbol=symbol,
            trades=trades,
            auto_invest_txs=auto_invest_txs,
            dividends=dividends,
        )

    def compute_dca_timeline(
            self,
            unified: Iterable[UnifiedTransaction],
    ) -> list[DcaPoint]:
        """
        Running average cost over spot buys, oldest first.

        Returns:
            DCA points; empty when there are no spot buys
        """
        return self._timeline_calc.calculate(unified)

    def calculate_holding(
            self,
            asset: str,
            symbol: str,
            trades: Iterable[RawTrade],
            auto_invest_txs: Iterable[RawAutoInvestTransaction],
            current_price: Decimal,
            balance: Balance,
    ) -> Holding:
        """Value one asset from its buy history, live price and live balance."""
        return self._holding_calc.calculate(
            asset=asset,
            symbol=symbol,
            trades=trades,
            auto_invest_txs=auto_invest_txs,
            current_price=current_price,
            balance=balance,
        )

    def build_portfolio(
            self,
            balances: Iterable[Balance],
            trades_by_symbol: Mapping[str, Sequence[RawTrade]],
            auto_invest_by_asset: Mapping[str, Sequence[RawAutoInvestTransaction]],
            prices: Iterable[TickerPrice],
    ) -> PortfolioData:
        """
        Value every priced, non-dust balance and total the portfolio.

        Args:
            balances: Live balances (spot and earn, merged)
            trades_by_symbol: Spot fills keyed by trading pair
            auto_invest_by_asset: Auto-invest executions keyed by target asset
            prices: Latest prices of the trading pairs

        Returns:
            PortfolioData with holdings sorted by current value (descending)
        """
        return self._aggregator.calculate(
            balances=balances,
            trades_by_symbol=trades_by_symbol,
            auto_invest_by_asset=auto_invest_by_asset,
            prices=prices,
        )

    def compute_holding_stats(
            self,
            unified: Sequence[UnifiedTransaction],
    ) -> HoldingStats:
        """Counts, fee estimate, buy price extremes and date range of a ledger."""
        return self._stats_calc.calculate(unified)

    def summarize_dca(
            self,
            holding: Holding,
            unified: Sequence[UnifiedTransaction],
    ) -> DcaSummary | None:
        """DCA summary of one holding, or None without spot buys."""
        return self._dca_calc.summarize(holding, unified)

    def build_dca_analysis(
            self,
            portfolio: PortfolioData,
            trades_by_symbol: Mapping[str, Sequence[RawTrade]],
            auto_invest_by_asset: Mapping[str, Sequence[RawAutoInvestTransaction]],
            dividends_by_asset: Mapping[str, Sequence[RawDividend]] | None = None,
    ) -> list[DcaSummary]:
        """
        DCA summary rows for every holding of a built portfolio.

        Returns:
            Rows sorted by DCA invested capital (descending)
        """
        rows = self._dca_calc.calculate(
            portfolio=portfolio,
            trades_by_symbol=trades_by_symbol,
            auto_invest_by_asset=auto_invest_by_asset,
            dividends_by_asset=dividends_by_asset or {},
        )
        logger.debug(f"Built DCA analysis with {len(rows)} rows")
        return rows
