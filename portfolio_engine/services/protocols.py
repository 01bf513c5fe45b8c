# portfolio_engine/services/protocols.py
"""
Protocol interfaces for the data-fetching collaborators.

The engine never talks to the exchange. Whatever does (an HTTP client, a
cache, a test double) hands the collection helpers one of these callables.

Using typing.Protocol enables structural subtyping:
- Plain functions and lambdas satisfy the protocols
- Test fakes work without explicit inheritance
"""

from __future__ import annotations

from typing import Protocol, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from portfolio_engine.schemas.exchange import RawAutoInvestTransaction, RawTrade


class TradePageFetcher(Protocol):
    """
    Returns up to `limit` fills of a symbol, ascending by id.

    With from_id set, the page starts at that trade id (inclusive).
    """

    def __call__(
        self,
        symbol: str,
        from_id: int | None,
        limit: int,
    ) -> Sequence[RawTrade]:
        ...


class PageFetcher(Protocol):
    """Returns one 1-based page of rows plus the total row count."""

    def __call__(self, page: int, size: int) -> tuple[Sequence, int]:
        ...


class AutoInvestWindowFetcher(Protocol):
    """Returns one page of auto-invest executions inside [start_ms, end_ms]."""

    def __call__(
        self,
        start_ms: int,
        end_ms: int,
        page: int,
        size: int,
    ) -> tuple[Sequence[RawAutoInvestTransaction], int]:
        ...
