"""
Conversions between Bar sequences and OHLCV DataFrames.

The engine works on DataFrames with a DatetimeIndex and Open/High/Low/Close/Volume
columns. Conversions always build new frames; inputs are never modified.
"""
from typing import List, Sequence, Union

import pandas as pd

from ..shared.types import Bar

OHLCV_COLUMNS = ["Open", "High", "Low", "Close", "Volume"]


def bars_to_frame(bars: Sequence[Bar]) -> pd.DataFrame:
    """Build an OHLCV DataFrame (ascending DatetimeIndex named Date) from bars."""
    index = pd.DatetimeIndex([pd.Timestamp(b.date) for b in bars], name="Date")
    return pd.DataFrame(
        {
            "Open": [float(b.open) for b in bars],
            "High": [float(b.high) for b in bars],
            "Low": [float(b.low) for b in bars],
            "Close": [float(b.close) for b in bars],
            "Volume": [float(b.volume) for b in bars],
        },
        index=index,
        columns=OHLCV_COLUMNS,
    )


def frame_to_bars(df: pd.DataFrame) -> List[Bar]:
    """Convert an OHLCV DataFrame back into a list of Bar (one per row)."""
    df = ensure_frame(df)
    return [
        Bar(
            date=pd.Timestamp(ts).date(),
            open=float(row.Open),
            high=float(row.High),
            low=float(row.Low),
            close=float(row.Close),
            volume=float(row.Volume),
        )
        for ts, row in zip(df.index, df.itertuples(index=False))
    ]


def ensure_frame(bars: Union[pd.DataFrame, Sequence[Bar]]) -> pd.DataFrame:
    """
    Return `bars` as an OHLCV DataFrame.

    Lowercase column names (open, high, ...) are accepted and renamed.

    Raises:
        ValueError: If a required OHLCV column is missing
    """
    if not isinstance(bars, pd.DataFrame):
        return bars_to_frame(list(bars))

    if all(c in bars.columns for c in OHLCV_COLUMNS):
        return bars
    renamed = bars.rename(columns={c.lower(): c for c in OHLCV_COLUMNS})
    missing = [c for c in OHLCV_COLUMNS if c not in renamed.columns]
    if missing:
        raise ValueError(f"Missing OHLCV columns: {missing}. Available: {list(bars.columns)}")
    return renamed


def normalize_history(df: pd.DataFrame) -> pd.DataFrame:
    """
    Clean a provider frame: OHLCV columns only, ascending by date, no duplicate
    dates (last one wins), no rows without a close.
    """
    if isinstance(df.columns, pd.MultiIndex):
        df = df.copy()
        df.columns = df.columns.get_level_values(0)
    df = ensure_frame(df)[OHLCV_COLUMNS].copy()
    if not isinstance(df.index, pd.DatetimeIndex):
        df.index = pd.to_datetime(df.index)
    if df.index.tz is not None:
        df.index = df.index.tz_localize(None)
    df = df[~df.index.duplicated(keep="last")].sort_index()
    df = df.dropna(subset=["Close"]).copy()
    df["Volume"] = df["Volume"].fillna(0.0)
    df.index.name = "Date"
    return df.astype(float)
