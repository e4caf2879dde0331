"""Data-fetching, polling and normalization layer for the portfolio dashboard."""

__version__ = "0.1.0"
