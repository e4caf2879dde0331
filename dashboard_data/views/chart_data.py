from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
from typing import List, Optional, Sequence

from ..api.api_models import Kline
from ..state.state_models import FetchState


class HealthIndicator(str, Enum):
    CHECKING = "checking"
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass
class ChartSeries:
    """Close-price line series ready for a charting widget."""
    title: str
    labels: List[str] = field(default_factory=list)
    values: List[float] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.values


def build_close_series(klines: Sequence[Kline], symbol: str, interval: str,
                       tz: Optional[tzinfo] = None) -> ChartSeries:
    """
    Build the close-price series for a chart.

    Accessors return klines in backend order; sorting by open time is done
    here, on the consuming side. Daily bars are labelled by date, all other
    intervals by HH:MM.
    """
    series = ChartSeries(title=f"{symbol} Price Chart ({interval})")
    label_format = "%Y-%m-%d" if interval == "1d" else "%H:%M"

    for kline in sorted(klines, key=lambda k: k.open_time):
        opened = datetime.fromtimestamp(kline.open_time / 1000, tz)
        series.labels.append(opened.strftime(label_format))
        series.values.append(float(kline.close))
    return series


def health_indicator(state: FetchState) -> HealthIndicator:
    if state.loading:
        return HealthIndicator.CHECKING
    if state.error or state.data is None:
        return HealthIndicator.OFFLINE
    return HealthIndicator.ONLINE
