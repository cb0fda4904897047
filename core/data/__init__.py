"""
Data access: OHLCV frame conversions and market-data fetchers.
"""
from .frames import OHLCV_COLUMNS, bars_to_frame, frame_to_bars, ensure_frame, normalize_history
from .fetcher import MarketDataFetcher, YahooFinanceFetcher, CsvFetcher

__all__ = [
    "OHLCV_COLUMNS",
    "bars_to_frame",
    "frame_to_bars",
    "ensure_frame",
    "normalize_history",
    "MarketDataFetcher",
    "YahooFinanceFetcher",
    "CsvFetcher",
]
