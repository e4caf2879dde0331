from .state_models import FetchState, ResourceStatus
from .async_resource import AsyncResource
from .price_poller import PollingResource
from .resources import (
    HealthResource, MarketDataResource, PortfolioResource, PricesResource, TradesResource
)

__all__ = [
    'FetchState',
    'ResourceStatus',
    'AsyncResource',
    'PollingResource',
    'PortfolioResource',
    'TradesResource',
    'MarketDataResource',
    'HealthResource',
    'PricesResource'
]
