# portfolio_engine/services/portfolio/unification.py
"""
Unification of the three transaction sources into one ledger.

Spot fills, auto-invest executions and earn distributions each have their
own record shape. TransactionUnifier maps every record onto a
UnifiedTransaction and merges the result newest-first.

Auto-invest status policy:
    Executions whose status is not SUCCESS are dropped here, so callers may
    pass the provider's output filtered or unfiltered.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from portfolio_engine.schemas.exchange import (
    RawAutoInvestTransaction,
    RawDividend,
    RawTrade,
)
from portfolio_engine.services.constants import (
    AUTO_INVEST_ID_PREFIX,
    EARN_ID_PREFIX,
    SPOT_ID_PREFIX,
)
from portfolio_engine.services.portfolio.types import (
    TransactionSource,
    TransactionType,
    UnifiedTransaction,
)

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


class TransactionUnifier:
    """
    Builds one asset's ledger from its spot, auto-invest and earn records.

    Stateless: every call works only on its arguments.
    """

    def unify(
            self,
            asset: str,
            symbol: str,
            trades: Iterable[RawTrade],
            auto_invest_txs: Iterable[RawAutoInvestTransaction],
            dividends: Iterable[RawDividend] = (),
    ) -> list[UnifiedTransaction]:
        """
        Merge all records of one asset into a ledger.

        Args:
            asset: Asset symbol (e.g., "BTC")
            symbol: Trading pair the spot trades belong to (e.g., "BTCUSDT")
            trades: Spot fills for the pair
            auto_invest_txs: Auto-invest executions targeting the asset
            dividends: Earn distributions of the asset

        Returns:
            One UnifiedTransaction per valid record, newest first.
            Entries sharing a timestamp keep their input order.
        """
        unified: list[UnifiedTransaction] = [self._from_trade(t) for t in trades]

        skipped = 0
        for tx in auto_invest_txs:
            if not tx.is_successful:
                skipped += 1
                continue
            unified.append(self._from_auto_invest(tx))

        unified.extend(self._from_dividend(d) for d in dividends)

        if skipped:
            logger.debug(
                f"Dropped {skipped} unsuccessful auto-invest executions for {asset}"
            )

        # sorted() is stable, also with reverse=True
        unified = sorted(unified, key=lambda t: t.timestamp, reverse=True)

        logger.debug(f"Unified {len(unified)} transactions for {asset} ({symbol})")
        return unified

    @staticmethod
    def _from_trade(trade: RawTrade) -> UnifiedTransaction:
        return UnifiedTransaction(
            id=f"{SPOT_ID_PREFIX}-{trade.id}",
            timestamp=trade.time,
            type=TransactionType.BUY if trade.is_buyer else TransactionType.SELL,
            source=TransactionSource.SPOT,
            price=trade.price,
            quantity=trade.quantity,
            quote_amount=trade.quote_qty,
            fee=trade.commission,
            fee_currency=trade.commission_asset,
        )

    @staticmethod
    def _from_auto_invest(tx: RawAutoInvestTransaction) -> UnifiedTransaction:
        # Auto-invest plans only ever buy
        return UnifiedTransaction(
            id=f"{AUTO_INVEST_ID_PREFIX}-{tx.id}",
            timestamp=tx.transaction_date_time,
            type=TransactionType.BUY,
            source=TransactionSource.AUTO_INVEST,
            price=tx.execution_price,
            quantity=tx.target_asset_amount,
            quote_amount=tx.source_asset_amount,
            fee=tx.transaction_fee,
            fee_currency=tx.transaction_fee_unit,
        )

    @staticmethod
    def _from_dividend(dividend: RawDividend) -> UnifiedTransaction:
        return UnifiedTransaction(
            id=f"{EARN_ID_PREFIX}-{dividend.id}",
            timestamp=dividend.div_time,
            type=TransactionType.REWARD,
            source=TransactionSource.EARN,
            price=_ZERO,
            quantity=dividend.amount,
            quote_amount=_ZERO,
            fee=_ZERO,
            fee_currency="",
        )
