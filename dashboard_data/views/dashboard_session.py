"""
Dashboard session: one container per resource plus a plain-text snapshot.

Containers are activated together but stay independent: a failing resource
only affects its own section of the snapshot.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from config import settings
from ..api.backend_api import BackendAPI
from ..state.async_resource import AsyncResource
from ..state.resources import (
    HealthResource, MarketDataResource, PortfolioResource, PricesResource, TradesResource
)
from .chart_data import build_close_series, health_indicator, HealthIndicator
from .formatters import format_pct, format_price, format_quantity, format_time

logger = logging.getLogger(__name__)


class DashboardSession:
    """Wires the resource containers for one dashboard view."""

    def __init__(self, api: Optional[BackendAPI] = None, symbol: Optional[str] = None,
                 interval: Optional[str] = None, price_symbols: Optional[Sequence[str]] = None,
                 chart_limit: Optional[int] = None, trades_limit: Optional[int] = None,
                 poll_interval: Optional[float] = None):
        self._owns_api = api is None
        self.api = api or BackendAPI()
        self.symbol = (symbol or settings.DEFAULT_SYMBOL).upper()
        self.interval = interval or settings.DEFAULT_INTERVAL

        self.portfolio = PortfolioResource(self.api)
        self.health = HealthResource(self.api)
        self.market_data = MarketDataResource(
            self.api, self.symbol, self.interval,
            settings.CHART_LIMIT if chart_limit is None else chart_limit
        )
        self.trades = TradesResource(
            self.api, self.symbol,
            settings.TRADES_LIMIT if trades_limit is None else trades_limit
        )
        self.prices = PricesResource(
            self.api,
            settings.PRICE_SYMBOLS if price_symbols is None else price_symbols,
            interval=poll_interval
        )

    @property
    def resources(self) -> List[AsyncResource]:
        return [self.health, self.portfolio, self.prices, self.market_data, self.trades]

    async def start(self):
        logger.info(f"Starting dashboard session for {self.symbol} ({self.interval})")
        await asyncio.gather(*(resource.activate() for resource in self.resources))

    async def stop(self):
        await asyncio.gather(*(resource.close() for resource in self.resources))
        logger.info("Dashboard session stopped")

    async def select_symbol(self, symbol: str):
        """Switch the charted symbol; only trades and market data re-key."""
        self.symbol = symbol.upper()
        await asyncio.gather(
            self.market_data.set_symbol(self.symbol),
            self.trades.set_symbol(self.symbol),
        )

    async def select_interval(self, interval: str):
        self.interval = interval
        await self.market_data.set_interval(interval)

    async def __aenter__(self) -> "DashboardSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
        if self._owns_api:
            await self.api.close()

    def _health_lines(self) -> List[str]:
        indicator = health_indicator(self.health.state)
        if indicator == HealthIndicator.CHECKING:
            return ["API: checking..."]
        if indicator == HealthIndicator.OFFLINE:
            return [f"API: offline ({self.health.error or 'no response'})"]
        return [f"API: online (status {self.health.health.status})"]

    def _portfolio_lines(self) -> List[str]:
        state = self.portfolio.state
        if state.loading:
            return ["Portfolio: loading..."]
        if state.error:
            return [f"Portfolio: error - {state.error} (retry available)"]

        portfolio = state.data
        lines = [f"Portfolio: {format_price(portfolio.total_usdt)}"]
        if not portfolio.positions:
            lines.append("  No positions found")
        for position in portfolio.positions:
            lines.append(
                f"  {position.asset:<8} {format_quantity(position.total, 6):>16} "
                f"{format_price(position.value_usdt):>14} {format_pct(position.pct):>8}"
            )
        return lines

    def _price_lines(self) -> List[str]:
        state = self.prices.state
        if state.loading and not state.data:
            return ["Prices: loading..."]
        quoted = " | ".join(f"{symbol} {format_price(price)}" for symbol, price in state.data.items())
        line = f"Prices: {quoted or 'none'}"
        if state.error:
            line += f" (last refresh failed: {state.error})"
        return [line]

    def _chart_lines(self) -> List[str]:
        state = self.market_data.state
        if state.loading:
            return ["Chart: loading..."]
        if state.error:
            return [f"Chart: error - {state.error}"]

        series = build_close_series(state.data, self.symbol, self.interval)
        if series.empty:
            return [f"Chart: {series.title}: no data"]
        return [
            f"Chart: {series.title}: {len(series.values)} points, "
            f"{series.labels[0]} -> {series.labels[-1]}, last close {format_price(series.values[-1])}"
        ]

    def _trade_lines(self) -> List[str]:
        state = self.trades.state
        if state.loading:
            return ["Trades: loading..."]
        if state.error:
            return [f"Trades: error - {state.error}"]
        if not state.data:
            return [f"Trades ({self.symbol}): no recent trades"]

        lines = [f"Trades ({self.symbol}):"]
        for trade in state.data:
            lines.append(
                f"  {trade.side.value:<4} {format_quantity(trade.qty)} @ {format_price(trade.price)}"
                f"  {format_time(trade.time)}"
            )
        return lines

    def snapshot(self) -> str:
        """Render every section from the containers' current state."""
        lines = []
        for section in (self._health_lines, self._portfolio_lines, self._price_lines,
                        self._chart_lines, self._trade_lines):
            lines.extend(section())
        return "\n".join(lines)
