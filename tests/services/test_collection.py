# tests/services/test_collection.py
"""
Tests for input collection helpers.

Fetch callables are plain fakes: the Protocol interfaces accept any
callable with the right signature.
"""

import logging
from decimal import Decimal

import pytest

from portfolio_engine.schemas.exchange import FlexibleEarnPosition, LockedEarnPosition
from portfolio_engine.services.collection import (
    collect_auto_invest_history,
    collect_pages,
    collect_trades,
    collect_trades_by_symbol,
    earn_balances,
    group_auto_invest_by_asset,
    group_dividends_by_asset,
    merge_balances,
    tradeable_assets,
)
from portfolio_engine.services.exceptions import RecordParseError, SourceUnavailableError
from tests.conftest import (
    create_auto_invest,
    create_balance,
    create_dividend,
    create_trade,
)


class FakeTradeEndpoint:
    """Serves fills by trade-id cursor, inclusive of from_id."""

    def __init__(self, trades_by_symbol):
        self.trades_by_symbol = trades_by_symbol
        self.calls = []

    def __call__(self, symbol, from_id, limit):
        self.calls.append((symbol, from_id, limit))
        trades = self.trades_by_symbol.get(symbol, [])
        if from_id is not None:
            trades = [t for t in trades if t.id >= from_id]
        return trades[:limit]


# =============================================================================
# PAGINATION
# =============================================================================

class TestCollectTrades:
    """Tests for the trade-id cursor walker."""

    def test_walks_all_pages_without_duplicates(self):
        trades = [create_trade(id=i) for i in range(1, 8)]
        endpoint = FakeTradeEndpoint({"BTCUSDT": trades})

        collected = collect_trades(endpoint, "BTCUSDT", limit=3)

        assert [t.id for t in collected] == [1, 2, 3, 4, 5, 6, 7]
        assert [call[1] for call in endpoint.calls] == [None, 3, 5, 7]

    def test_short_first_page_stops(self):
        endpoint = FakeTradeEndpoint({"BTCUSDT": [create_trade(id=1)]})

        collected = collect_trades(endpoint, "BTCUSDT", limit=1000)

        assert [t.id for t in collected] == [1]
        assert len(endpoint.calls) == 1

    def test_no_trades(self):
        endpoint = FakeTradeEndpoint({})

        assert collect_trades(endpoint, "BTCUSDT") == []


class TestCollectPages:
    """Tests for the page-number walker."""

    def test_collects_until_total(self):
        rows = list(range(25))
        calls = []

        def fetch_page(page, size):
            calls.append(page)
            start = (page - 1) * size
            return rows[start:start + size], len(rows)

        assert collect_pages(fetch_page, page_size=10) == rows
        assert calls == [1, 2, 3]

    def test_empty_page_stops(self):
        assert collect_pages(lambda page, size: ([], 50), page_size=10) == []


class TestCollectAutoInvestHistory:
    """Tests for the backwards time-window walker."""

    def test_walks_windows_newest_first(self):
        window = 1000
        executions = {
            (2000, 3000): [create_auto_invest(id=3)],
            (1000, 1999): [create_auto_invest(id=2, status="FAILURE")],
            (0, 999): [create_auto_invest(id=1)],
        }
        windows = []

        def fetch_window(start_ms, end_ms, page, size):
            windows.append((start_ms, end_ms))
            batch = executions[(start_ms, end_ms)]
            return batch, len(batch)

        collected = collect_auto_invest_history(
            fetch_window, end_ms=3000, earliest_ms=0, window_ms=window,
        )

        assert windows == [(2000, 3000), (1000, 1999), (0, 999)]
        # Unsuccessful executions never leave collection
        assert [tx.id for tx in collected] == [3, 1]

    def test_last_window_clamped_to_earliest(self):
        windows = []

        def fetch_window(start_ms, end_ms, page, size):
            windows.append((start_ms, end_ms))
            return [], 0

        collect_auto_invest_history(fetch_window, end_ms=2500, earliest_ms=0, window_ms=1000)

        assert windows == [(1500, 2500), (500, 1499), (0, 499)]

    def test_execution_on_window_boundary_collected_once(self):
        """The endpoint includes both bounds; boundary runs must not repeat."""
        history = [
            create_auto_invest(id=1, time=500),
            create_auto_invest(id=2, time=1000),
            create_auto_invest(id=3, time=2000),
            create_auto_invest(id=4, time=3000),
        ]

        def fetch_window(start_ms, end_ms, page, size):
            batch = [
                tx for tx in history
                if start_ms <= tx.transaction_date_time <= end_ms
            ]
            return batch, len(batch)

        collected = collect_auto_invest_history(
            fetch_window, end_ms=3000, earliest_ms=0, window_ms=1000,
        )

        assert sorted(tx.id for tx in collected) == [1, 2, 3, 4]


class TestCollectTradesBySymbol:
    """Per-symbol collection tolerates partial failure."""

    def test_failing_symbol_is_left_out(self, caplog):
        endpoint = FakeTradeEndpoint({
            "BTCUSDT": [create_trade(id=1, symbol="BTCUSDT")],
            "SOLUSDT": [create_trade(id=1, symbol="SOLUSDT")],
        })

        def fetch_page(symbol, from_id, limit):
            if symbol == "ETHUSDT":
                raise SourceUnavailableError(f"trades:{symbol}", "HTTP 503")
            return endpoint(symbol, from_id, limit)

        collected = collect_trades_by_symbol(["BTCUSDT", "ETHUSDT", "SOLUSDT"], fetch_page)

        assert set(collected) == {"BTCUSDT", "SOLUSDT"}
        assert "ETHUSDT" in caplog.text

    def test_unparseable_page_leaves_symbol_out(self, caplog):
        endpoint = FakeTradeEndpoint({"BTCUSDT": [create_trade(id=1, symbol="BTCUSDT")]})

        def fetch_page(symbol, from_id, limit):
            if symbol == "ETHUSDT":
                raise RecordParseError("RawTrade", 0, [{"loc": ("price",)}])
            return endpoint(symbol, from_id, limit)

        with caplog.at_level(logging.WARNING, logger="portfolio_engine.services.collection"):
            collected = collect_trades_by_symbol(["BTCUSDT", "ETHUSDT"], fetch_page)

        assert list(collected) == ["BTCUSDT"]
        assert "Could not collect trades for ETHUSDT" in caplog.text

    def test_other_errors_propagate(self):
        def fetch_page(symbol, from_id, limit):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            collect_trades_by_symbol(["BTCUSDT"], fetch_page)


# =============================================================================
# BALANCES
# =============================================================================

class TestBalances:
    """Tests for earn and merged balances."""

    def test_earn_balances_summed_per_asset(self):
        balances = earn_balances(
            flexible=[
                FlexibleEarnPosition(asset="BTC", total_amount=Decimal("0.1")),
                FlexibleEarnPosition(asset="ETH", total_amount=Decimal("0")),
            ],
            locked=[LockedEarnPosition(asset="BTC", amount=Decimal("0.2"))],
        )

        assert len(balances) == 1
        assert balances[0].asset == "BTC"
        assert balances[0].free == Decimal("0.3")
        assert balances[0].locked == Decimal("0")

    def test_merge_sums_free_and_locked(self):
        merged = merge_balances(
            spot=[create_balance("BTC", "1", "0.5"), create_balance("ETH", "2")],
            earn=[create_balance("BTC", "0.25"), create_balance("SOL", "3")],
        )

        assert [b.asset for b in merged] == ["BTC", "ETH", "SOL"]
        assert merged[0].free == Decimal("1.25")
        assert merged[0].locked == Decimal("0.5")
        assert merged[0].total == Decimal("1.75")

    def test_merge_drops_empty_assets(self):
        merged = merge_balances(
            spot=[create_balance("BTC", "0"), create_balance("ETH", "1")],
            earn=[],
        )

        assert [b.asset for b in merged] == ["ETH"]

    def test_tradeable_assets_skip_quote_and_stables(self):
        balances = [
            create_balance("BTC"),
            create_balance("USDT"),
            create_balance("USDC"),
            create_balance("ETH"),
        ]

        assert [b.asset for b in tradeable_assets(balances)] == ["BTC", "ETH"]

    def test_tradeable_assets_custom_quote(self):
        balances = [create_balance("BTC"), create_balance("EUR")]

        result = tradeable_assets(balances, quote_currency="EUR", stablecoins=())

        assert [b.asset for b in result] == ["BTC"]


# =============================================================================
# GROUPING
# =============================================================================

class TestGrouping:
    """Tests for per-asset grouping."""

    def test_auto_invest_grouped_by_target_asset(self):
        grouped = group_auto_invest_by_asset([
            create_auto_invest(id=1, target_asset="BTC"),
            create_auto_invest(id=2, target_asset="ETH"),
            create_auto_invest(id=3, target_asset="BTC"),
            create_auto_invest(id=4, target_asset="BTC", status="FAILURE"),
        ])

        assert [tx.id for tx in grouped["BTC"]] == [1, 3]
        assert [tx.id for tx in grouped["ETH"]] == [2]

    def test_dividends_grouped_by_asset(self):
        grouped = group_dividends_by_asset([
            create_dividend(id=1, asset="BTC"),
            create_dividend(id=2, asset="BNB"),
            create_dividend(id=3, asset="BTC"),
        ])

        assert [d.id for d in grouped["BTC"]] == [1, 3]
        assert [d.id for d in grouped["BNB"]] == [2]
