"""
Per-resource state containers.

Each container owns its FetchState exclusively; a refetch in one never
triggers another. Portfolio and health keep their last good data on failure,
trades and market data reset to [] so a failed symbol switch never shows
entries for the previous symbol.
"""

from typing import Dict, List, Optional, Sequence

from ..api.api_models import HealthStatus, Kline, Portfolio, Trade
from ..api.backend_api import BackendAPI
from .async_resource import AsyncResource
from .price_poller import PollingResource
from .state_models import FetchState


class PortfolioResource(AsyncResource):
    def __init__(self, api: BackendAPI, **kwargs):
        super().__init__(
            "portfolio",
            default_error="Failed to fetch portfolio",
            **kwargs
        )
        self.api = api

    async def fetch(self) -> Portfolio:
        return await self.api.fetch_portfolio()

    @property
    def portfolio(self) -> Optional[Portfolio]:
        return self.data


class HealthResource(AsyncResource):
    def __init__(self, api: BackendAPI, **kwargs):
        super().__init__(
            "health",
            default_error="Health check failed",
            **kwargs
        )
        self.api = api

    async def fetch(self) -> HealthStatus:
        return await self.api.fetch_health()

    @property
    def health(self) -> Optional[HealthStatus]:
        return self.data


class TradesResource(AsyncResource):
    """Recent trades keyed by (symbol, limit)."""

    def __init__(self, api: BackendAPI, symbol: str, limit: int = 50, **kwargs):
        super().__init__(
            "trades",
            dependencies=(symbol, limit),
            empty_data=list,
            reset_data_on_error=True,
            default_error="Failed to fetch trades",
            **kwargs
        )
        self.api = api

    async def fetch(self, symbol: str, limit: int) -> List[Trade]:
        return await self.api.fetch_trades(symbol, limit)

    def can_fetch(self, dependencies) -> bool:
        return bool(dependencies[0])

    @property
    def trades(self) -> List[Trade]:
        return self.data

    async def set_symbol(self, symbol: str) -> FetchState:
        return await self.set_dependencies(symbol, self.dependencies[1])

    async def set_limit(self, limit: int) -> FetchState:
        return await self.set_dependencies(self.dependencies[0], limit)


class MarketDataResource(AsyncResource):
    """Klines keyed by (symbol, interval, limit)."""

    def __init__(self, api: BackendAPI, symbol: str, interval: str = "1h", limit: int = 100, **kwargs):
        super().__init__(
            "market-data",
            dependencies=(symbol, interval, limit),
            empty_data=list,
            reset_data_on_error=True,
            default_error="Failed to fetch market data",
            **kwargs
        )
        self.api = api

    async def fetch(self, symbol: str, interval: str, limit: int) -> List[Kline]:
        return await self.api.fetch_market_data(symbol, interval, limit)

    def can_fetch(self, dependencies) -> bool:
        return bool(dependencies[0])

    @property
    def klines(self) -> List[Kline]:
        return self.data

    async def set_symbol(self, symbol: str) -> FetchState:
        _, interval, limit = self.dependencies
        return await self.set_dependencies(symbol, interval, limit)

    async def set_interval(self, interval: str) -> FetchState:
        symbol, _, limit = self.dependencies
        return await self.set_dependencies(symbol, interval, limit)


class PricesResource(PollingResource):
    """Price map for a fixed symbol set, re-polled every PRICE_POLL_INTERVAL seconds."""

    def __init__(self, api: BackendAPI, symbols: Optional[Sequence[str]] = None,
                 interval: Optional[float] = None, **kwargs):
        super().__init__(
            "prices",
            dependencies=(tuple(symbols) if symbols is not None else None,),
            empty_data=dict,
            default_error="Failed to fetch prices",
            interval=interval,
            **kwargs
        )
        self.api = api

    async def fetch(self, symbols) -> Dict[str, str]:
        return await self.api.fetch_prices(symbols)

    @property
    def prices(self) -> Dict[str, str]:
        return self.data

    async def set_symbols(self, symbols: Optional[Sequence[str]]) -> FetchState:
        return await self.set_dependencies(tuple(symbols) if symbols is not None else None)
