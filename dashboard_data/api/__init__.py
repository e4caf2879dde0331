from .api_client import BackendClient
from .api_errors import ApiError, BackendError, NetworkError, ResponseDecodeError, ShapeWarning
from .api_models import HealthStatus, Kline, Portfolio, Position, Trade, TradeSideEnum
from .backend_api import BackendAPI

__all__ = [
    'BackendClient',
    'BackendAPI',
    'BackendError',
    'NetworkError',
    'ApiError',
    'ResponseDecodeError',
    'ShapeWarning',
    'Position',
    'Portfolio',
    'Trade',
    'TradeSideEnum',
    'Kline',
    'HealthStatus'
]
