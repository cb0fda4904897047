"""
Error types raised by the analysis engine.

Indicator functions never raise for short input; these errors exist for the
per-symbol boundary, where they are converted into error-flagged results.
"""
from typing import Optional


class AnalysisError(Exception):
    """Base class for per-symbol analysis failures."""

    def __init__(self, symbol: str, message: str):
        self.symbol = symbol
        super().__init__(message)


class InsufficientDataError(AnalysisError):
    """Fewer bars than a component requires."""

    def __init__(self, symbol: str, available: int, required: int):
        self.available = available
        self.required = required
        super().__init__(
            symbol,
            f"Insufficient data for analysis: {available} days (need {required})",
        )


class UpstreamFetchError(AnalysisError):
    """The market-data provider failed or returned no bars."""

    def __init__(self, symbol: str, cause: Optional[BaseException] = None, message: Optional[str] = None):
        self.cause = cause
        if message is None:
            message = f"Failed to fetch history for {symbol}"
            if cause is not None:
                message = f"{message}: {cause}"
        super().__init__(symbol, message)
