# portfolio_engine/services/portfolio/types.py
"""
Internal data types for the portfolio engine.

These dataclasses are the engine's outputs. They are NOT Pydantic schemas:
raw inbound records live in portfolio_engine/schemas/exchange.py.

Design Principles:
- Immutable value objects (frozen=True), rebuilt from scratch on every call
- Use Decimal for ALL financial values (never float)
- Timestamps are integer milliseconds since epoch, as the exchange reports
- No back-references between objects

Type Hierarchy:
    TransactionType     - buy / sell / reward
    TransactionSource   - spot / auto-invest / earn
    UnifiedTransaction  - One ledger entry, whatever its source
    DcaPoint            - One step of the running average cost
    Holding             - Point-in-time valuation of one asset
    PortfolioData       - Holdings plus portfolio totals
    HoldingStats        - Descriptive aggregates over a ledger
    DcaSummary          - One row of the DCA analysis
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Economic direction of a ledger entry."""

    BUY = "buy"
    SELL = "sell"
    REWARD = "reward"


class TransactionSource(str, Enum):
    """Exchange product a ledger entry came from."""

    SPOT = "spot"
    AUTO_INVEST = "auto-invest"
    EARN = "earn"


# =============================================================================
# LEDGER
# =============================================================================

@dataclass(frozen=True)
class UnifiedTransaction:
    """
    Canonical ledger entry built from any of the three record shapes.

    Attributes:
        id: Source-namespaced id ("spot-<id>", "auto-<id>", "earn-<id>")
        timestamp: Execution/distribution time, ms since epoch
        type: buy, sell or reward
        source: spot, auto-invest or earn
        price: Unit price in quote currency (0 for rewards)
        quantity: Units of the asset moved
        quote_amount: Quote currency spent or received (0 for rewards)
        fee: Fee amount, in fee_currency
        fee_currency: Currency the fee was charged in ("" for rewards)
    """

    id: str
    timestamp: int
    type: TransactionType
    source: TransactionSource
    price: Decimal
    quantity: Decimal
    quote_amount: Decimal
    fee: Decimal
    fee_currency: str

    @property
    def is_spot_buy(self) -> bool:
        return self.source is TransactionSource.SPOT and self.type is TransactionType.BUY


# =============================================================================
# COST BASIS TIMELINE
# =============================================================================

@dataclass(frozen=True)
class DcaPoint:
    """
    Running cost basis right after one spot buy.

    Attributes:
        timestamp: Time of the buy
        cumulative_quantity: Units bought so far (non-decreasing)
        cumulative_invested: Quote currency spent so far (non-decreasing)
        avg_cost: cumulative_invested / cumulative_quantity
    """

    timestamp: int
    cumulative_quantity: Decimal
    cumulative_invested: Decimal
    avg_cost: Decimal


# =============================================================================
# VALUATION
# =============================================================================

@dataclass(frozen=True)
class Holding:
    """
    Point-in-time valuation of one asset.

    Attributes:
        asset: Asset symbol (e.g., "BTC")
        symbol: Trading pair against the quote currency (e.g., "BTCUSDT")
        quantity: Live balance, free + locked
        avg_buy_cost: Weighted average cost per unit over all recorded buys
        total_invested: avg_buy_cost × quantity
        current_price: Latest pair price
        current_value: current_price × quantity
        unrealized_pnl: current_value - total_invested
        pnl_percent: unrealized_pnl as % of total_invested (0 if nothing invested)

    Note:
        total_invested follows the live quantity, so partial sells reduce
        invested capital proportionally instead of realizing P&L.
    """

    asset: str
    symbol: str
    quantity: Decimal
    avg_buy_cost: Decimal
    total_invested: Decimal
    current_price: Decimal
    current_value: Decimal
    unrealized_pnl: Decimal
    pnl_percent: Decimal


@dataclass(frozen=True)
class PortfolioData:
    """
    All included holdings and portfolio-level totals.

    Attributes:
        holdings: Included holdings, sorted by current value (descending)
        total_invested: Sum of holdings' total_invested
        total_current_value: Sum of holdings' current_value
        total_pnl: total_current_value - total_invested
        total_pnl_percent: total_pnl as % of total_invested (0 if nothing invested)

    Note:
        Totals only cover included holdings; dust and unpriced assets
        contribute nothing.
    """

    holdings: tuple[Holding, ...] = ()
    total_invested: Decimal = Decimal("0")
    total_current_value: Decimal = Decimal("0")
    total_pnl: Decimal = Decimal("0")
    total_pnl_percent: Decimal = Decimal("0")

    @property
    def is_empty(self) -> bool:
        return not self.holdings

    def get_holding(self, asset: str) -> Holding | None:
        """Included holding for an asset, or None."""
        return next((h for h in self.holdings if h.asset == asset), None)


# =============================================================================
# STATISTICS
# =============================================================================

@dataclass(frozen=True)
class HoldingStats:
    """
    Descriptive aggregates over one asset's ledger.

    Attributes:
        total_transactions: Number of ledger entries
        total_buy_transactions / total_sell_transactions / total_reward_transactions:
            Counts by type
        avg_buy_price: Quantity-weighted average buy price (0 if no buys)
        highest_buy_price / lowest_buy_price: Extremes over buys (0 if no buys)
        total_fees_paid: Fees as a quote-currency estimate
        total_bought / total_sold / total_rewards: Quantities by type
        total_cost_basis: Sum of quote_amount over buys
        first_trade_date / last_trade_date: Min/max timestamp (0 if empty)
    """

    total_transactions: int = 0
    total_buy_transactions: int = 0
    total_sell_transactions: int = 0
    total_reward_transactions: int = 0
    avg_buy_price: Decimal = Decimal("0")
    highest_buy_price: Decimal = Decimal("0")
    lowest_buy_price: Decimal = Decimal("0")
    total_fees_paid: Decimal = Decimal("0")
    total_bought: Decimal = Decimal("0")
    total_sold: Decimal = Decimal("0")
    total_rewards: Decimal = Decimal("0")
    total_cost_basis: Decimal = Decimal("0")
    first_trade_date: int = 0
    last_trade_date: int = 0


@dataclass(frozen=True)
class DcaSummary:
    """
    One row of the DCA analysis: how pure spot dollar-cost averaging went.

    Attributes:
        asset / symbol: Holding identity
        num_buys: Number of spot buys in the timeline
        total_invested: Quote currency spent on spot buys
        total_quantity: Units acquired by spot buys
        avg_cost: Final running average cost
        current_price: Latest pair price
        pnl_percent: (current_price - avg_cost) / avg_cost × 100 (0 if avg_cost is 0)
        first_buy_date / last_buy_date: Timeline bounds
        lowest_price / highest_price: Spot-buy price extremes
    """

    asset: str
    symbol: str
    num_buys: int
    total_invested: Decimal
    total_quantity: Decimal
    avg_cost: Decimal
    current_price: Decimal
    pnl_percent: Decimal
    first_buy_date: int
    last_buy_date: int
    lowest_price: Decimal
    highest_price: Decimal
    timeline: tuple[DcaPoint, ...] = field(default=(), repr=False)
