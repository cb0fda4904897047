"""
Shared CLI helpers: logging setup and fetcher selection.
"""
import logging
import sys
from pathlib import Path
from typing import List, Optional

from core.data.fetcher import CsvFetcher, MarketDataFetcher, YahooFinanceFetcher

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that stay at WARNING even with --verbose
QUIET_LOGGERS = ('yfinance', 'urllib3', 'peewee')


def setup_logging(log_path: Optional[Path] = None, verbose: bool = False):
    """
    Route all logging to stderr, plus `log_path` when given.

    Reports go to stdout, so log lines never end up in JSON output.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.getLogger().handlers.clear()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=handlers,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def make_fetcher(data_dir: Optional[Path] = None) -> MarketDataFetcher:
    """CSV fetcher when a data directory is given, Yahoo Finance otherwise."""
    if data_dir is not None:
        return CsvFetcher(data_dir)
    return YahooFinanceFetcher()
