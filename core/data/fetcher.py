"""
Market-data fetchers: the upstream collaborator that supplies daily bars.

The engine only depends on the MarketDataFetcher protocol. Two implementations
are provided:
- YahooFinanceFetcher: downloads daily bars with yfinance
- CsvFetcher: reads cached {symbol}.csv files (Date index, OHLCV columns)

Any provider failure, including an empty result, is raised as UpstreamFetchError
so the per-symbol boundary can turn it into an error-flagged result.
"""
import logging
import warnings
from pathlib import Path
from typing import Protocol, Union

import pandas as pd
import yfinance as yf

from ..shared.errors import UpstreamFetchError
from .frames import normalize_history

# Suppress yfinance's pandas deprecation warnings
warnings.filterwarnings('ignore', message='.*Timestamp.utcnow.*')

logger = logging.getLogger(__name__)


class MarketDataFetcher(Protocol):
    """Protocol for a source of daily OHLCV history."""

    def fetch(self, symbol: str, days: int) -> pd.DataFrame:
        """
        Fetch roughly `days` trading days of history for `symbol`.

        Returns:
            OHLCV DataFrame sorted ascending by date

        Raises:
            UpstreamFetchError: If the provider fails or returns no bars
        """
        ...


class YahooFinanceFetcher:
    """Fetches daily bars from Yahoo Finance via yfinance."""

    def __init__(self, calendar_factor: int = 2):
        """
        Args:
            calendar_factor: Calendar days requested per trading day, to cover
                weekends and holidays (default: 2)
        """
        self.calendar_factor = calendar_factor

    def fetch(self, symbol: str, days: int) -> pd.DataFrame:
        end = pd.Timestamp.now().normalize() + pd.Timedelta(days=1)
        start = end - pd.Timedelta(days=days * self.calendar_factor)
        logger.debug("Downloading %s from %s to %s", symbol, start.date(), end.date())
        try:
            df = yf.download(
                symbol,
                start=start.strftime("%Y-%m-%d"),
                end=end.strftime("%Y-%m-%d"),
                interval="1d",
                auto_adjust=False,
                progress=False,
            )
        except Exception as e:
            logger.error("Error fetching data for %s: %s", symbol, e)
            raise UpstreamFetchError(symbol, cause=e) from e

        if df is None or df.empty:
            raise UpstreamFetchError(symbol, message=f"No data returned for {symbol}")
        return normalize_history(df)


class CsvFetcher:
    """Reads history from {directory}/{symbol}.csv (Date index, OHLCV columns)."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def fetch(self, symbol: str, days: int) -> pd.DataFrame:
        path = self.directory / f"{symbol}.csv"
        if not path.exists():
            raise UpstreamFetchError(symbol, message=f"Data file not found for '{symbol}': {path}")
        try:
            df = pd.read_csv(path, index_col=0, parse_dates=True)
            df = normalize_history(df)
        except (OSError, ValueError) as e:
            raise UpstreamFetchError(symbol, cause=e) from e
        if df.empty:
            raise UpstreamFetchError(symbol, message=f"No data in {path}")
        return df.iloc[-days:]
