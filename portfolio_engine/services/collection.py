# portfolio_engine/services/collection.py
"""
Input collection helpers.

Everything the engine needs arrives as flat, in-memory collections. This
module prepares those collections from what the exchange endpoints return:

- Pagination walkers (trade-id cursor, page numbers, 30-day windows)
- Per-symbol collection that tolerates partial failure
- Balance merging (spot wallet + earn positions)
- Grouping of auto-invest and reward records per asset

None of these functions perform I/O themselves. The fetch callables are
injected (see portfolio_engine.services.protocols), so the same code runs
against a live client, a cache or a test fake.

Usage:
    trades_by_symbol = collect_trades_by_symbol(["BTCUSDT", "ETHUSDT"], client.my_trades)
    balances = merge_balances(spot_balances, earn_balances(flexible, locked))
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Sequence

from portfolio_engine.schemas.exchange import (
    Balance,
    FlexibleEarnPosition,
    LockedEarnPosition,
    RawAutoInvestTransaction,
    RawDividend,
    RawTrade,
)
from portfolio_engine.services.constants import (
    AUTO_INVEST_WINDOW_MS,
    DEFAULT_PAGE_SIZE,
    DEFAULT_QUOTE_CURRENCY,
    DEFAULT_STABLECOINS,
    EXCHANGE_EPOCH_MS,
    TRADE_PAGE_LIMIT,
)
from portfolio_engine.services.exceptions import ServiceError
from portfolio_engine.services.protocols import (
    AutoInvestWindowFetcher,
    PageFetcher,
    TradePageFetcher,
)

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


# =============================================================================
# PAGINATION
# =============================================================================

def collect_trades(
        fetch_page: TradePageFetcher,
        symbol: str,
        limit: int = TRADE_PAGE_LIMIT,
) -> list[RawTrade]:
    """
    Collect every fill of a symbol by walking the trade-id cursor.

    Each follow-up request starts at the last id already seen (inclusive),
    so a page whose first fill carries the cursor id repeats that fill and
    it is dropped. Collection stops on an empty page or on a page shorter
    than limit - 1, which can only be the last one.

    Args:
        fetch_page: Returns up to `limit` fills starting at from_id
        symbol: Trading pair (e.g., "BTCUSDT")
        limit: Page size requested from the exchange

    Returns:
        All fills, ascending by id, without duplicates
    """
    all_trades: list[RawTrade] = []
    from_id: int | None = None

    while True:
        trades = list(fetch_page(symbol, from_id, limit))
        if not trades:
            break

        if from_id is not None and trades[0].id == from_id:
            trades = trades[1:]

        if not trades:
            break

        all_trades.extend(trades)

        if len(trades) < limit - 1:
            break

        from_id = trades[-1].id

    return all_trades


def collect_pages(
        fetch_page: PageFetcher,
        page_size: int = DEFAULT_PAGE_SIZE,
) -> list:
    """
    Collect every row of a page-numbered endpoint.

    Pages are 1-based. Stops once page × page_size reaches the reported
    total, or when a page comes back empty.
    """
    rows: list = []
    page = 1

    while True:
        batch, total = fetch_page(page, page_size)
        if not batch:
            break

        rows.extend(batch)

        if page * page_size >= total:
            break
        page += 1

    return rows


def collect_auto_invest_history(
        fetch_window: AutoInvestWindowFetcher,
        end_ms: int,
        earliest_ms: int = EXCHANGE_EPOCH_MS,
        window_ms: int = AUTO_INVEST_WINDOW_MS,
        page_size: int = DEFAULT_PAGE_SIZE,
) -> list[RawAutoInvestTransaction]:
    """
    Collect auto-invest executions by walking backwards in time windows.

    The history endpoint only accepts short windows, so the range
    [earliest_ms, end_ms] is split into consecutive windows of window_ms,
    newest first, each one paginated.

    The endpoint treats both window bounds as inclusive. Every window but
    the newest therefore ends 1 ms before the start of the window after it,
    so an execution stamped on a boundary is returned once.

    Returns:
        SUCCESS executions only, newest window first
    """
    executions: list[RawAutoInvestTransaction] = []
    window_end = end_ms

    while window_end > earliest_ms:
        window_start = max(window_end - window_ms, earliest_ms)
        query_end = window_end if window_end == end_ms else window_end - 1

        batch = collect_pages(
            lambda page, size, start=window_start, end=query_end: fetch_window(
                start, end, page, size
            ),
            page_size=page_size,
        )
        executions.extend(tx for tx in batch if tx.is_successful)

        window_end = window_start

    return executions


def collect_trades_by_symbol(
        symbols: Iterable[str],
        fetch_page: TradePageFetcher,
        limit: int = TRADE_PAGE_LIMIT,
) -> dict[str, list[RawTrade]]:
    """
    Collect fills for several symbols, tolerating per-symbol failures.

    A symbol whose collection raises a ServiceError (the fetch failed, or a
    page could not be parsed into records) is logged and left out of the
    result. The engine reads a missing symbol as "no history", so the
    rest of the portfolio stays usable.

    Returns:
        Fills keyed by symbol, for the symbols that could be collected
    """
    trades_by_symbol: dict[str, list[RawTrade]] = {}

    for symbol in symbols:
        try:
            trades_by_symbol[symbol] = collect_trades(fetch_page, symbol, limit=limit)
        except ServiceError as e:
            logger.warning(
                f"Could not collect trades for {symbol}: {e}",
                extra={"symbol": symbol, "error": type(e).__name__},
            )

    return trades_by_symbol


# =============================================================================
# BALANCES
# =============================================================================

def earn_balances(
        flexible: Iterable[FlexibleEarnPosition],
        locked: Iterable[LockedEarnPosition],
) -> list[Balance]:
    """
    Sum earn positions per asset into balances.

    Earn quantities are reported as free; zero positions are ignored.
    """
    amounts: dict[str, Decimal] = {}

    for position in flexible:
        if position.total_amount > _ZERO:
            amounts[position.asset] = amounts.get(position.asset, _ZERO) + position.total_amount

    for position in locked:
        if position.amount > _ZERO:
            amounts[position.asset] = amounts.get(position.asset, _ZERO) + position.amount

    return [
        Balance(asset=asset, free=amount, locked=_ZERO)
        for asset, amount in amounts.items()
    ]


def merge_balances(
        spot: Iterable[Balance],
        earn: Iterable[Balance],
) -> list[Balance]:
    """
    Merge spot and earn balances into one balance per asset.

    Free and locked amounts are summed separately. Assets whose merged
    free and locked are both zero are dropped. Order follows first
    appearance (spot first).
    """
    merged: dict[str, tuple[Decimal, Decimal]] = {}

    for balance in (*spot, *earn):
        free, locked = merged.get(balance.asset, (_ZERO, _ZERO))
        merged[balance.asset] = (free + balance.free, locked + balance.locked)

    return [
        Balance(asset=asset, free=free, locked=locked)
        for asset, (free, locked) in merged.items()
        if free > _ZERO or locked > _ZERO
    ]


def tradeable_assets(
        balances: Iterable[Balance],
        quote_currency: str = DEFAULT_QUOTE_CURRENCY,
        stablecoins: Sequence[str] = DEFAULT_STABLECOINS,
) -> list[Balance]:
    """Balances worth looking up trade history for (not quote, not stable)."""
    excluded = {quote_currency, *stablecoins}
    return [b for b in balances if b.asset not in excluded]


# =============================================================================
# GROUPING
# =============================================================================

def group_auto_invest_by_asset(
        transactions: Iterable[RawAutoInvestTransaction],
) -> dict[str, list[RawAutoInvestTransaction]]:
    """SUCCESS executions keyed by target asset, input order preserved."""
    grouped: dict[str, list[RawAutoInvestTransaction]] = {}
    for tx in transactions:
        if not tx.is_successful:
            continue
        grouped.setdefault(tx.target_asset, []).append(tx)
    return grouped


def group_dividends_by_asset(
        dividends: Iterable[RawDividend],
) -> dict[str, list[RawDividend]]:
    """Reward distributions keyed by asset, input order preserved."""
    grouped: dict[str, list[RawDividend]] = {}
    for dividend in dividends:
        grouped.setdefault(dividend.asset, []).append(dividend)
    return grouped
