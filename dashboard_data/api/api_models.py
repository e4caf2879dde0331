"""
Backend Payload Models

Models for the JSON the dashboard backend returns, plus the decode functions
that turn loosely-typed payloads into them. Decoding never fails on missing
optional fields: it substitutes the documented defaults and reports the
mismatch as a ShapeWarning.
"""

import logging
import math
import warnings
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .api_errors import ShapeWarning

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Binance kline array layout: [openTime, open, high, low, close, volume, closeTime,
# quoteAssetVolume, count, takerBuyBaseAssetVolume, takerBuyQuoteAssetVolume, ignore]
KLINE_ARRAY_FIELDS = (
    "openTime", "open", "high", "low", "close", "volume", "closeTime",
    "quoteAssetVolume", "count", "takerBuyBaseAssetVolume", "takerBuyQuoteAssetVolume",
)


class PayloadModel(BaseModel):
    """Base for backend payloads: camelCase aliases, unknown keys ignored."""
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
        frozen=True,
    )


class TradeSideEnum(str, Enum):
    """Trade side enumeration."""
    BUY = "BUY"
    SELL = "SELL"


class Position(PayloadModel):
    """One held asset and its share of the portfolio value."""
    asset: str = Field(..., description="Asset ticker, e.g. BTC")
    free: float = Field(0.0, description="Free balance")
    locked: float = Field(0.0, description="Locked balance")
    total: float = Field(0.0, description="free + locked, computed by the backend")
    price_usdt: float = Field(0.0, alias="priceUSDT", description="Price in USDT")
    value_usdt: float = Field(0.0, alias="valueUSDT", description="Position value in USDT")
    pct: float = Field(0.0, description="Share of total portfolio value, in percent")

    @field_validator("free", "locked", "total", "price_usdt", "value_usdt", "pct", mode="before")
    @classmethod
    def _null_is_zero(cls, value):
        return 0.0 if value is None else value


class Portfolio(PayloadModel):
    """Total USDT value and the ordered list of positions."""
    total_usdt: float = Field(0.0, alias="totalUSDT", description="Total value in USDT")
    positions: List[Position] = Field(default_factory=list, description="Held positions")
    status: Optional[str] = Field(None, description="Backend status flag")
    testnet: Optional[bool] = Field(None, description="Whether the backend trades on testnet")
    position_count: Optional[int] = Field(None, alias="positionCount", description="Backend position count")
    timestamp: Optional[str] = Field(None, description="Backend snapshot time")


class Trade(PayloadModel):
    """One past execution. Amounts stay numeric strings as the backend sends them."""
    symbol: str = Field(..., description="Trading pair")
    id: int = Field(..., description="Trade ID")
    order_id: int = Field(..., alias="orderId", description="Order ID")
    side: TradeSideEnum = Field(..., description="BUY or SELL")
    qty: str = Field(..., description="Executed quantity")
    price: str = Field(..., description="Execution price")
    realized_pnl: str = Field("0", alias="realizedPnl", description="Realized PnL")
    time: int = Field(..., description="Execution time, epoch millis")
    commission: str = Field("0", description="Commission amount")
    commission_asset: str = Field("", alias="commissionAsset", description="Commission asset")

    @field_validator("side", mode="before")
    @classmethod
    def _upper_side(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("qty", "price", "realized_pnl", "commission")
    @classmethod
    def _numeric_amounts(cls, value):
        return _require_numeric(value)


class Kline(PayloadModel):
    """One OHLCV candlestick bar."""
    open_time: int = Field(..., alias="openTime", description="Bar open time, epoch millis")
    open: str = Field(..., description="Open price")
    high: str = Field(..., description="High price")
    low: str = Field(..., description="Low price")
    close: str = Field(..., description="Close price")
    volume: str = Field(..., description="Base asset volume")
    close_time: int = Field(..., alias="closeTime", description="Bar close time, epoch millis")
    quote_asset_volume: str = Field("0", alias="quoteAssetVolume", description="Quote asset volume")
    count: int = Field(0, description="Number of trades")
    taker_buy_base_asset_volume: str = Field("0", alias="takerBuyBaseAssetVolume")
    taker_buy_quote_asset_volume: str = Field("0", alias="takerBuyQuoteAssetVolume")

    @model_validator(mode="before")
    @classmethod
    def _from_array(cls, data):
        if isinstance(data, (list, tuple)):
            return dict(zip(KLINE_ARRAY_FIELDS, data))
        return data

    @field_validator("open", "high", "low", "close", "volume", "quote_asset_volume",
                     "taker_buy_base_asset_volume", "taker_buy_quote_asset_volume")
    @classmethod
    def _numeric_prices(cls, value):
        return _require_numeric(value)


class HealthStatus(PayloadModel):
    """Backend liveness signal. Fields are passed through without normalization."""
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    status: Any = Field(None, description="Backend status string")
    timestamp: Any = Field(None, description="Backend time, epoch millis")


def warn_shape(message: str) -> None:
    """Report a shape mismatch that was absorbed with a default."""
    logger.warning(message)
    warnings.warn(message, ShapeWarning, stacklevel=3)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def _require_numeric(value: str) -> str:
    if _as_number(value) is None:
        raise ValueError(f"not a finite number: {value!r}")
    return value


def decode_items(model: Type[ModelT], payload: Any, what: str) -> List[ModelT]:
    """
    Decode a JSON array into models.

    A non-array payload yields an empty list; entries that fail validation
    are skipped. Both cases emit a ShapeWarning.
    """
    if not isinstance(payload, list):
        warn_shape(f"{what} is not an array ({type(payload).__name__}), returning empty list")
        return []

    items = []
    for index, entry in enumerate(payload):
        try:
            items.append(model.model_validate(entry))
        except ValidationError as e:
            warn_shape(f"Skipping malformed {what} entry #{index}: {e.error_count()} validation error(s)")
    return items


def decode_portfolio(payload: Any) -> Portfolio:
    """Decode the portfolio payload, defaulting totalUSDT to 0 and positions to []."""
    if not isinstance(payload, dict):
        warn_shape(f"Portfolio payload is not an object ({type(payload).__name__}), using empty portfolio")
        return Portfolio()

    raw_total = payload.get("totalUSDT")
    total = _as_number(raw_total)
    if total is None:
        if raw_total is not None:
            warn_shape(f"Portfolio totalUSDT is not numeric ({raw_total!r}), using 0")
        total = 0.0

    raw_positions = payload.get("positions")
    if raw_positions is None:
        positions = []
    else:
        positions = decode_items(Position, raw_positions, "Portfolio positions")

    extras = {}
    for key in ("status", "testnet", "positionCount", "timestamp"):
        if payload.get(key) is not None:
            extras[key] = payload[key]
    try:
        return Portfolio(totalUSDT=total, positions=positions, **extras)
    except ValidationError:
        warn_shape("Portfolio metadata fields are malformed, ignoring them")
        return Portfolio(totalUSDT=total, positions=positions)


def decode_price_map(payload: Any) -> Dict[str, str]:
    """Decode a symbol -> price mapping; prices are kept as numeric strings."""
    if not isinstance(payload, dict):
        warn_shape(f"Prices payload is not an object ({type(payload).__name__}), returning empty mapping")
        return {}

    prices = {}
    for symbol, price in payload.items():
        if _as_number(price) is None:
            warn_shape(f"Skipping non-numeric price for {symbol}: {price!r}")
            continue
        prices[str(symbol)] = str(price)
    return prices


def decode_health(payload: Any) -> HealthStatus:
    """Wrap the health payload as-is; shape checks are the caller's business."""
    if isinstance(payload, dict):
        return HealthStatus.model_construct(**payload)
    return HealthStatus.model_construct(status=payload)
