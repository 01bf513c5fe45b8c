# portfolio_engine/schemas/exchange.py
"""
Pydantic schemas for raw exchange records.

These schemas describe what the exchange's account, trade, auto-invest,
earn-reward and ticker endpoints return. Field aliases match the exchange's
camelCase JSON so payloads can be validated as-is:

    trade = RawTrade.model_validate({"id": 1, "qty": "0.5", ...})

Snake_case names are accepted too (populate_by_name) which keeps test
factories readable.

Every record is immutable. Amounts arrive as decimal strings and are parsed
into Decimal. Never use float for money!
"""

from decimal import Decimal
from typing import Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from portfolio_engine.services.constants import AUTO_INVEST_SUCCESS_STATUS
from portfolio_engine.services.exceptions import RecordParseError


# =============================================================================
# BASE SCHEMA
# =============================================================================

class ExchangeRecord(BaseModel):
    """
    Base for all raw exchange records.

    Unknown fields are ignored: the exchange adds fields over time and the
    engine only depends on the ones declared here.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )


def _normalize_symbol(value: str) -> str:
    return value.strip().upper()


# =============================================================================
# BALANCES & PRICES
# =============================================================================

class Balance(ExchangeRecord):
    """Exchange-held quantity of one asset (spot wallet or earn positions)."""

    asset: str = Field(
        ...,
        min_length=1,
        description="Asset symbol",
        examples=["BTC", "ETH"]
    )
    free: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Quantity available for trading",
        examples=["0.01250000"]
    )
    locked: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Quantity reserved by open orders",
        examples=["0.00000000"]
    )

    @field_validator("asset")
    @classmethod
    def normalize_asset(cls, v: str) -> str:
        return _normalize_symbol(v)

    @property
    def total(self) -> Decimal:
        """Free plus locked quantity."""
        return self.free + self.locked


class TickerPrice(ExchangeRecord):
    """Latest price of one trading pair."""

    symbol: str = Field(..., min_length=1, examples=["BTCUSDT"])
    price: Decimal = Field(..., ge=0, examples=["64250.12000000"])

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return _normalize_symbol(v)


class FlexibleEarnPosition(ExchangeRecord):
    """Flexible (redeemable any time) earn position."""

    asset: str = Field(..., min_length=1)
    total_amount: Decimal = Field(..., ge=0, alias="totalAmount")
    product_id: str | None = Field(default=None, alias="productId")

    @field_validator("asset")
    @classmethod
    def normalize_asset(cls, v: str) -> str:
        return _normalize_symbol(v)


class LockedEarnPosition(ExchangeRecord):
    """Fixed-term earn position."""

    asset: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)
    position_id: int | None = Field(default=None, alias="positionId")

    @field_validator("asset")
    @classmethod
    def normalize_asset(cls, v: str) -> str:
        return _normalize_symbol(v)


# =============================================================================
# TRANSACTION SOURCES
# =============================================================================

class RawTrade(ExchangeRecord):
    """
    One spot fill.

    quote_qty is price × quantity as reported by the exchange; it may differ
    from the product by rounding and is used verbatim.
    """

    id: int = Field(..., description="Trade id, unique per symbol")
    symbol: str = Field(..., min_length=1, examples=["BTCUSDT"])
    order_id: int | None = Field(default=None, alias="orderId")
    price: Decimal = Field(..., ge=0)
    quantity: Decimal = Field(..., ge=0, alias="qty")
    quote_qty: Decimal = Field(..., ge=0, alias="quoteQty")
    commission: Decimal = Field(default=Decimal("0"), ge=0)
    commission_asset: str = Field(default="", alias="commissionAsset")
    time: int = Field(..., ge=0, description="Execution time, ms since epoch")
    is_buyer: bool = Field(..., alias="isBuyer")
    is_maker: bool = Field(default=False, alias="isMaker")

    @field_validator("symbol", "commission_asset")
    @classmethod
    def normalize_symbols(cls, v: str) -> str:
        return _normalize_symbol(v)


class RawAutoInvestTransaction(ExchangeRecord):
    """
    One execution of a recurring auto-invest plan.

    Only executions with status SUCCESS are completed purchases.
    """

    id: int
    target_asset: str = Field(..., min_length=1, alias="targetAsset")
    source_asset: str = Field(..., min_length=1, alias="sourceAsset")
    source_asset_amount: Decimal = Field(..., ge=0, alias="sourceAssetAmount")
    target_asset_amount: Decimal = Field(..., ge=0, alias="targetAssetAmount")
    execution_price: Decimal = Field(..., ge=0, alias="executionPrice")
    transaction_fee: Decimal = Field(default=Decimal("0"), ge=0, alias="transactionFee")
    transaction_fee_unit: str = Field(default="", alias="transactionFeeUnit")
    transaction_date_time: int = Field(..., ge=0, alias="transactionDateTime")
    transaction_status: str = Field(..., alias="transactionStatus")

    @field_validator("target_asset", "source_asset", "transaction_fee_unit")
    @classmethod
    def normalize_assets(cls, v: str) -> str:
        return _normalize_symbol(v)

    @property
    def is_successful(self) -> bool:
        return self.transaction_status.upper() == AUTO_INVEST_SUCCESS_STATUS


class RawDividend(ExchangeRecord):
    """One interest/reward distribution. Quantity only, no price or cost."""

    id: int
    asset: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)
    div_time: int = Field(..., ge=0, alias="divTime")
    en_info: str | None = Field(default=None, alias="enInfo")
    tran_id: int | None = Field(default=None, alias="tranId")

    @field_validator("asset")
    @classmethod
    def normalize_asset(cls, v: str) -> str:
        return _normalize_symbol(v)


# =============================================================================
# BATCH PARSING
# =============================================================================

RecordT = TypeVar("RecordT", bound=ExchangeRecord)


def parse_records(model: type[RecordT], payloads: Sequence[dict]) -> list[RecordT]:
    """
    Validate a batch of raw payloads into record models.

    Args:
        model: Record schema to validate against (e.g., RawTrade)
        payloads: Decoded JSON objects as returned by the exchange

    Returns:
        Parsed records, in input order

    Raises:
        RecordParseError: On the first payload that fails validation
    """
    records: list[RecordT] = []
    for index, payload in enumerate(payloads):
        try:
            records.append(model.model_validate(payload))
        except ValidationError as exc:
            raise RecordParseError(
                record_kind=model.__name__,
                index=index,
                errors=exc.errors(include_url=False),
            ) from exc
    return records
