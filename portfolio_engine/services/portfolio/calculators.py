# portfolio_engine/services/portfolio/calculators.py
"""
Portfolio calculators.

Each calculator follows the Single Responsibility Principle:
- DcaTimelineCalculator: Running average cost over spot buys
- HoldingCalculator: Point-in-time valuation of one asset
- PortfolioAggregator: Holdings for all balances plus portfolio totals
- HoldingStatsCalculator: Descriptive aggregates over a ledger
- DcaAnalysisCalculator: One DCA summary row per holding

Design Principles:
- Stateless (configuration only, no per-call instance state)
- Receives all inputs explicitly, performs no I/O
- Missing data degrades to "excluded" or "empty", never to an exception
- Uses Decimal for ALL financial calculations, no rounding

Usage:
    holding_calc = HoldingCalculator(quote_currency="USDT")
    holding = holding_calc.calculate(
        asset="BTC",
        symbol="BTCUSDT",
        trades=[...],
        auto_invest_txs=[...],
        current_price=Decimal("64000"),
        balance=balance,
    )
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from portfolio_engine.schemas.exchange import (
    Balance,
    RawAutoInvestTransaction,
    RawDividend,
    RawTrade,
    TickerPrice,
)
from portfolio_engine.services.constants import (
    DEFAULT_DUST_THRESHOLD,
    DEFAULT_QUOTE_CURRENCY,
)
from portfolio_engine.services.portfolio.types import (
    DcaPoint,
    DcaSummary,
    Holding,
    HoldingStats,
    PortfolioData,
    TransactionType,
    UnifiedTransaction,
)
from portfolio_engine.services.portfolio.unification import TransactionUnifier

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole × 100, or 0 when whole is not positive."""
    if whole <= _ZERO:
        return _ZERO
    return part / whole * _HUNDRED


# =============================================================================
# DCA TIMELINE CALCULATOR
# =============================================================================

class DcaTimelineCalculator:
    """
    Calculates the running cost basis of pure spot dollar-cost averaging.

    Only spot buys are considered: auto-invest purchases and rewards are
    left out so the timeline shows what manual DCA alone looked like.

    Formula (after each buy, oldest first):
        cumulative_quantity += quantity
        cumulative_invested += quote_amount
        avg_cost = cumulative_invested / cumulative_quantity
    """

    def calculate(self, unified: Iterable[UnifiedTransaction]) -> list[DcaPoint]:
        """
        Build the DCA timeline from a ledger.

        Args:
            unified: Ledger entries in any order (typically newest first)

        Returns:
            One DcaPoint per spot buy, oldest first. Empty if there are no
            spot buys, which callers treat as "no DCA data".
        """
        timeline: list[DcaPoint] = []
        cumulative_quantity = _ZERO
        cumulative_invested = _ZERO

        for tx in self.spot_buys(unified):
            cumulative_quantity += tx.quantity
            cumulative_invested += tx.quote_amount

            # A zero-quantity fill cannot define an average yet
            if cumulative_quantity <= _ZERO:
                continue

            timeline.append(DcaPoint(
                timestamp=tx.timestamp,
                cumulative_quantity=cumulative_quantity,
                cumulative_invested=cumulative_invested,
                avg_cost=cumulative_invested / cumulative_quantity,
            ))

        return timeline

    @staticmethod
    def spot_buys(unified: Iterable[UnifiedTransaction]) -> list[UnifiedTransaction]:
        """Spot buys of a ledger, oldest first (stable on equal timestamps)."""
        return sorted(
            (tx for tx in unified if tx.is_spot_buy),
            key=lambda tx: tx.timestamp,
        )


# =============================================================================
# HOLDING CALCULATOR
# =============================================================================

class HoldingCalculator:
    """
    Values one asset from its lifetime buy history and live balance.

    Uses Weighted Average Cost over all recorded buys:
    - avg_buy_cost = total_cost / total_qty_bought
    - total_invested = avg_buy_cost × live quantity

    Fee normalization (spot fills, buyer side only):
    - Commission paid in the asset itself reduces the quantity received
    - Commission paid in the quote currency increases the cost
    - Commission paid in any third currency is ignored (known approximation)

    Fee normalization (auto-invest, SUCCESS only):
    - Fee paid in the source currency increases the cost

    Note:
        Quantity comes from the live balance, not from summing history, so
        the valuation stays right when history is incomplete.
    """

    def __init__(self, quote_currency: str = DEFAULT_QUOTE_CURRENCY) -> None:
        self._quote_currency = quote_currency

    @property
    def quote_currency(self) -> str:
        return self._quote_currency

    def calculate(
            self,
            asset: str,
            symbol: str,
            trades: Iterable[RawTrade],
            auto_invest_txs: Iterable[RawAutoInvestTransaction],
            current_price: Decimal,
            balance: Balance,
    ) -> Holding:
        """
        Calculate the holding snapshot for one asset.

        Args:
            asset: Asset symbol (e.g., "BTC")
            symbol: Trading pair (e.g., "BTCUSDT")
            trades: Spot fills for the pair (sells are ignored)
            auto_invest_txs: Auto-invest executions targeting the asset
            current_price: Latest pair price
            balance: Live balance of the asset

        Returns:
            Holding with cost basis, value and unrealized P&L
        """
        total_qty_bought = _ZERO
        total_cost = _ZERO

        for trade in trades:
            if not trade.is_buyer:
                continue

            effective_qty = trade.quantity
            effective_cost = trade.quote_qty

            if trade.commission_asset == asset:
                effective_qty -= trade.commission
            elif trade.commission_asset == self._quote_currency:
                effective_cost += trade.commission

            total_qty_bought += effective_qty
            total_cost += effective_cost

        for tx in auto_invest_txs:
            if not tx.is_successful:
                continue

            effective_cost = tx.source_asset_amount
            if tx.transaction_fee_unit == tx.source_asset:
                effective_cost += tx.transaction_fee

            total_qty_bought += tx.target_asset_amount
            total_cost += effective_cost

        quantity = balance.total

        # No recorded buys (e.g. airdrops) → zero cost basis
        if total_qty_bought > _ZERO:
            avg_buy_cost = total_cost / total_qty_bought
        else:
            avg_buy_cost = _ZERO

        total_invested = avg_buy_cost * quantity
        current_value = current_price * quantity
        unrealized_pnl = current_value - total_invested

        return Holding(
            asset=asset,
            symbol=symbol,
            quantity=quantity,
            avg_buy_cost=avg_buy_cost,
            total_invested=total_invested,
            current_price=current_price,
            current_value=current_value,
            unrealized_pnl=unrealized_pnl,
            pnl_percent=_percent(unrealized_pnl, total_invested),
        )


# =============================================================================
# PORTFOLIO AGGREGATOR
# =============================================================================

class PortfolioAggregator:
    """
    Combines per-asset holdings into the portfolio view.

    For each balance:
    - the quote currency itself is skipped
    - assets without a <asset><quote> price are skipped (cannot be valued)
    - holdings worth dust_threshold or less are left out

    Totals are straight sums over the included holdings.
    """

    def __init__(
            self,
            holding_calc: HoldingCalculator,
            dust_threshold: Decimal = DEFAULT_DUST_THRESHOLD,
    ) -> None:
        self._holding_calc = holding_calc
        self._dust_threshold = dust_threshold

    def calculate(
            self,
            balances: Iterable[Balance],
            trades_by_symbol: Mapping[str, Sequence[RawTrade]],
            auto_invest_by_asset: Mapping[str, Sequence[RawAutoInvestTransaction]],
            prices: Iterable[TickerPrice],
    ) -> PortfolioData:
        """
        Build the portfolio from balances, histories and prices.

        Args:
            balances: Live balances (spot and earn, already merged)
            trades_by_symbol: Spot fills keyed by trading pair
            auto_invest_by_asset: Auto-invest executions keyed by target asset
            prices: Latest prices; the last entry wins on duplicate symbols

        Returns:
            PortfolioData sorted by current value (descending)

        Note:
            A symbol or asset missing from the history maps simply has no
            history. This keeps a partially failed fetch usable.
        """
        quote_currency = self._holding_calc.quote_currency

        price_map: dict[str, Decimal] = {}
        for ticker in prices:
            price_map[ticker.symbol] = ticker.price

        holdings: list[Holding] = []

        for balance in balances:
            asset = balance.asset
            if asset == quote_currency:
                continue

            symbol = f"{asset}{quote_currency}"
            current_price = price_map.get(symbol)
            if current_price is None:
                logger.debug(f"No price for {symbol}, skipping {asset}")
                continue

            holding = self._holding_calc.calculate(
                asset=asset,
                symbol=symbol,
                trades=trades_by_symbol.get(symbol, ()),
                auto_invest_txs=auto_invest_by_asset.get(asset, ()),
                current_price=current_price,
                balance=balance,
            )

            if holding.current_value > self._dust_threshold:
                holdings.append(holding)
            else:
                logger.debug(
                    f"{asset} worth {holding.current_value} {quote_currency} "
                    f"is dust, skipping"
                )

        holdings.sort(key=lambda h: h.current_value, reverse=True)

        total_invested = sum((h.total_invested for h in holdings), _ZERO)
        total_current_value = sum((h.current_value for h in holdings), _ZERO)
        total_pnl = total_current_value - total_invested

        logger.info(
            f"Built portfolio with {len(holdings)} holdings",
            extra={
                "holdings": len(holdings),
                "total_current_value": str(total_current_value),
            },
        )

        return PortfolioData(
            holdings=tuple(holdings),
            total_invested=total_invested,
            total_current_value=total_current_value,
            total_pnl=total_pnl,
            total_pnl_percent=_percent(total_pnl, total_invested),
        )


# =============================================================================
# HOLDING STATS CALCULATOR
# =============================================================================

class HoldingStatsCalculator:
    """
    Descriptive aggregates over one asset's ledger, independent of pricing.

    Fee estimate (buys and sells):
        fee_quote = fee              if fee_currency == quote currency
                  = fee × price      otherwise

    The second branch treats the fee currency as trading near the entry's
    own unit price. It is a rough estimate kept for parity with historical
    output; it is not converted through real prices.

    Rewards only count towards the reward aggregates.
    """

    def __init__(self, quote_currency: str = DEFAULT_QUOTE_CURRENCY) -> None:
        self._quote_currency = quote_currency

    def calculate(self, unified: Sequence[UnifiedTransaction]) -> HoldingStats:
        buy_count = 0
        sell_count = 0
        reward_count = 0
        total_bought = _ZERO
        total_sold = _ZERO
        total_rewards = _ZERO
        total_cost_basis = _ZERO
        total_fees = _ZERO
        highest_buy: Decimal = _ZERO
        lowest_buy: Decimal | None = None
        weighted_price_sum = _ZERO
        weighted_qty_sum = _ZERO
        first_date: int | None = None
        last_date = 0

        for tx in unified:
            if first_date is None or tx.timestamp < first_date:
                first_date = tx.timestamp
            if tx.timestamp > last_date:
                last_date = tx.timestamp

            if tx.type is TransactionType.REWARD:
                reward_count += 1
                total_rewards += tx.quantity
                continue

            if tx.fee_currency == self._quote_currency:
                total_fees += tx.fee
            else:
                total_fees += tx.fee * tx.price

            if tx.type is TransactionType.BUY:
                buy_count += 1
                total_bought += tx.quantity
                total_cost_basis += tx.quote_amount
                weighted_price_sum += tx.price * tx.quantity
                weighted_qty_sum += tx.quantity
                if tx.price > highest_buy:
                    highest_buy = tx.price
                if lowest_buy is None or tx.price < lowest_buy:
                    lowest_buy = tx.price
            else:
                sell_count += 1
                total_sold += tx.quantity

        if weighted_qty_sum > _ZERO:
            avg_buy_price = weighted_price_sum / weighted_qty_sum
        else:
            avg_buy_price = _ZERO

        return HoldingStats(
            total_transactions=len(unified),
            total_buy_transactions=buy_count,
            total_sell_transactions=sell_count,
            total_reward_transactions=reward_count,
            avg_buy_price=avg_buy_price,
            highest_buy_price=highest_buy,
            lowest_buy_price=lowest_buy if lowest_buy is not None else _ZERO,
            total_fees_paid=total_fees,
            total_bought=total_bought,
            total_sold=total_sold,
            total_rewards=total_rewards,
            total_cost_basis=total_cost_basis,
            first_trade_date=first_date if first_date is not None else 0,
            last_trade_date=last_date,
        )


# =============================================================================
# DCA ANALYSIS CALCULATOR
# =============================================================================

class DcaAnalysisCalculator:
    """
    Summarizes the DCA timeline of every holding.

    Holdings without spot buys have no timeline and produce no row.
    Rows are sorted by DCA invested capital (descending).
    """

    def __init__(
            self,
            unifier: TransactionUnifier,
            timeline_calc: DcaTimelineCalculator,
    ) -> None:
        self._unifier = unifier
        self._timeline_calc = timeline_calc

    def summarize(
            self,
            holding: Holding,
            unified: Sequence[UnifiedTransaction],
    ) -> DcaSummary | None:
        """
        Build one DCA row for a holding from its ledger.

        Returns:
            DcaSummary, or None when the ledger has no spot buys
        """
        timeline = self._timeline_calc.calculate(unified)
        if not timeline:
            return None

        last = timeline[-1]
        # Leading zero-quantity fills emit no point; the rest map 1:1 to points
        buys = self._timeline_calc.spot_buys(unified)
        prices = [tx.price for tx in buys[len(buys) - len(timeline):]]
        pnl_percent = _percent(holding.current_price - last.avg_cost, last.avg_cost)

        return DcaSummary(
            asset=holding.asset,
            symbol=holding.symbol,
            num_buys=len(timeline),
            total_invested=last.cumulative_invested,
            total_quantity=last.cumulative_quantity,
            avg_cost=last.avg_cost,
            current_price=holding.current_price,
            pnl_percent=pnl_percent,
            first_buy_date=timeline[0].timestamp,
            last_buy_date=last.timestamp,
            lowest_price=min(prices),
            highest_price=max(prices),
            timeline=tuple(timeline),
        )

    def calculate(
            self,
            portfolio: PortfolioData,
            trades_by_symbol: Mapping[str, Sequence[RawTrade]],
            auto_invest_by_asset: Mapping[str, Sequence[RawAutoInvestTransaction]],
            dividends_by_asset: Mapping[str, Sequence[RawDividend]],
    ) -> list[DcaSummary]:
        rows: list[DcaSummary] = []

        for holding in portfolio.holdings:
            unified = self._unifier.unify(
                asset=holding.asset,
                symbol=holding.symbol,
                trades=trades_by_symbol.get(holding.symbol, ()),
                auto_invest_txs=auto_invest_by_asset.get(holding.asset, ()),
                dividends=dividends_by_asset.get(holding.asset, ()),
            )
            row = self.summarize(holding, unified)
            if row is not None:
                rows.append(row)

        rows.sort(key=lambda r: r.total_invested, reverse=True)
        return rows
