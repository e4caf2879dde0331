from datetime import datetime, tzinfo
from typing import Optional, Union

Number = Union[str, int, float]


def format_price(value: Number) -> str:
    """'45000' -> '$45,000.00'"""
    return f"${float(value):,.2f}"


def format_quantity(value: Number, digits: int = 4) -> str:
    return f"{float(value):.{digits}f}"


def format_pct(value: Number) -> str:
    return f"{float(value):.2f}%"


def format_time(epoch_ms: int, tz: Optional[tzinfo] = None) -> str:
    """Epoch millis to 'YYYY-MM-DD HH:MM:SS' in local time (or tz)."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz).strftime("%Y-%m-%d %H:%M:%S")
