import logging
from typing import Any, Dict, List, Optional, Sequence

from .api_client import BackendClient
from .api_errors import BackendError
from .api_models import (
    HealthStatus, Kline, Portfolio, Trade,
    decode_health, decode_items, decode_portfolio, decode_price_map,
)

logger = logging.getLogger(__name__)

PORTFOLIO_PATH = "/api/binance/portfolio"
MARKET_DATA_PATH = "/api/binance/market-data"
TRADES_PATH = "/api/binance/trades"
PRICES_PATH = "/api/binance/prices"
EXCHANGE_INFO_PATH = "/api/binance/exchange-info"
HEALTH_PATH = "/health"


class BackendAPI:
    """One accessor per backend resource, normalizing each response once at this boundary."""

    def __init__(self, client: Optional[BackendClient] = None):
        self.client = client or BackendClient()

    async def fetch_portfolio(self) -> Portfolio:
        """
        Get portfolio information including total USDT balance and positions.

        Missing or malformed totalUSDT/positions fall back to 0 and [];
        only network and HTTP failures propagate.
        """
        try:
            data = await self.client.request(PORTFOLIO_PATH)
        except BackendError as e:
            logger.error(f"Error fetching portfolio: {e}")
            raise e.add_context("Failed to fetch portfolio")

        portfolio = decode_portfolio(data)
        logger.info(f"Portfolio: {len(portfolio.positions)} positions, total {portfolio.total_usdt} USDT")
        return portfolio

    async def fetch_market_data(self, symbol: str, interval: str = "1h", limit: int = 100) -> List[Kline]:
        """
        Get klines (candlestick data) for a symbol.

        Args:
            symbol: Trading pair symbol (e.g., 'BTCUSDT'); sent upper-cased
            interval: Kline interval (e.g., '1m', '5m', '1h', '1d')
            limit: Number of klines to return (default: 100, max: 1000)

        Returns:
            Klines in backend order; [] when the payload is not an array
        """
        params = {
            "symbol": symbol.upper(),
            "interval": interval,
            "limit": str(limit),
        }
        try:
            data = await self.client.request(MARKET_DATA_PATH, params)
        except BackendError as e:
            logger.error(f"Error fetching market data: {e}")
            raise e.add_context(f"Failed to fetch market data for {symbol}")

        klines = decode_items(Kline, data, "Market data")
        logger.info(f"Market data received for {params['symbol']} {interval}: {len(klines)} klines")
        return klines

    async def fetch_trades(self, symbol: str, limit: int = 50) -> List[Trade]:
        """
        Get recent trades for a symbol.

        Args:
            symbol: Trading pair symbol (e.g., 'BTCUSDT'); sent upper-cased
            limit: Number of trades to return (default: 50, max: 1000)

        Returns:
            Trades in backend order; [] when the payload is not an array
        """
        params = {
            "symbol": symbol.upper(),
            "limit": str(limit),
        }
        try:
            data = await self.client.request(TRADES_PATH, params)
        except BackendError as e:
            logger.error(f"Error fetching trades: {e}")
            raise e.add_context(f"Failed to fetch trades for {symbol}")

        trades = decode_items(Trade, data, "Trades data")
        logger.info(f"Trades data received for {params['symbol']}: {len(trades)} trades")
        return trades

    async def fetch_prices(self, symbols: Optional[Sequence[str]] = None) -> Dict[str, str]:
        """Get current prices; all symbols when none are given."""
        params = {"symbols": ",".join(symbols)} if symbols is not None else None
        try:
            data = await self.client.request(PRICES_PATH, params)
        except BackendError as e:
            logger.error(f"Error fetching prices: {e}")
            raise e.add_context("Failed to fetch prices")

        return decode_price_map(data)

    async def fetch_exchange_info(self) -> Any:
        """Get exchange information (opaque JSON)."""
        try:
            return await self.client.request(EXCHANGE_INFO_PATH)
        except BackendError as e:
            logger.error(f"Error fetching exchange info: {e}")
            raise e.add_context("Failed to fetch exchange info")

    async def fetch_health(self) -> HealthStatus:
        """Health check for the API."""
        try:
            data = await self.client.request(HEALTH_PATH)
        except BackendError as e:
            logger.error(f"Error in health check: {e}")
            raise e.add_context("Health check failed")

        return decode_health(data)

    async def close(self):
        await self.client.close()
