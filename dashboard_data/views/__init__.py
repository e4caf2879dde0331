from .chart_data import ChartSeries, HealthIndicator, build_close_series, health_indicator
from .dashboard_session import DashboardSession
from .formatters import format_pct, format_price, format_quantity, format_time

__all__ = [
    'ChartSeries',
    'HealthIndicator',
    'build_close_series',
    'health_indicator',
    'DashboardSession',
    'format_price',
    'format_quantity',
    'format_pct',
    'format_time'
]
