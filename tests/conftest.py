from unittest.mock import AsyncMock, Mock

import pytest

from dashboard_data.api.api_models import Kline, Portfolio, Trade, decode_health


def make_kline(open_time=1699999200000, close="45000.00"):
    return {
        "openTime": open_time,
        "open": "44900.00",
        "high": "45100.00",
        "low": "44800.00",
        "close": close,
        "volume": "12.5",
        "closeTime": open_time + 3599999,
        "quoteAssetVolume": "562500.00",
        "count": 340,
        "takerBuyBaseAssetVolume": "6.1",
        "takerBuyQuoteAssetVolume": "274500.00",
    }


def make_trade(trade_id=1, side="BUY", symbol="BTCUSDT"):
    return {
        "symbol": symbol,
        "id": trade_id,
        "orderId": 1000 + trade_id,
        "side": side,
        "qty": "0.01",
        "price": "45000.00",
        "realizedPnl": "0",
        "time": 1700000000000,
        "commission": "0.045",
        "commissionAsset": "USDT",
    }


def make_portfolio_payload():
    return {
        "status": "success",
        "testnet": True,
        "totalUSDT": 12345.67,
        "positions": [
            {"asset": "BTC", "free": 0.2, "locked": 0.0, "total": 0.2,
             "priceUSDT": 45000.0, "valueUSDT": 9000.0, "pct": 72.9},
            {"asset": "USDT", "free": 3345.67, "locked": 0.0, "total": 3345.67,
             "priceUSDT": 1.0, "valueUSDT": 3345.67, "pct": 27.1},
        ],
        "positionCount": 2,
        "timestamp": "2024-01-01T00:00:00Z",
    }


@pytest.fixture
def mock_api():
    """BackendAPI stand-in whose accessors return decoded sample data."""
    api = Mock()
    api.fetch_portfolio = AsyncMock(return_value=Portfolio.model_validate(make_portfolio_payload()))
    api.fetch_health = AsyncMock(return_value=decode_health({"status": "OK", "timestamp": 1700000000000}))
    api.fetch_market_data = AsyncMock(return_value=[Kline.model_validate(make_kline())])
    api.fetch_trades = AsyncMock(return_value=[Trade.model_validate(make_trade())])
    api.fetch_prices = AsyncMock(return_value={"BTCUSDT": "45000.00", "ETHUSDT": "3000.00"})
    api.close = AsyncMock()
    return api
