"""
YAML configuration loader for the symbol report.

Loads the watchlist and report parameters from a YAML file, so the basket of
symbols can change without code changes. See configs/report.yaml.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

import yaml

from .backtest.hypothesis import resolve_condition
from .shared.defaults import (
    DEFAULT_FETCH_DAYS,
    HYPOTHESIS_DEFAULT_WINDOW,
    HYPOTHESIS_WINDOWS,
    RETROSPECTIVE_LOOKBACK_DAYS,
)
from .shared.types import HypothesisCondition


@dataclass
class ReportConfig:
    """Watchlist and parameters for one report run."""
    name: str = "report"
    symbols: List[str] = field(default_factory=list)
    fetch_days: int = DEFAULT_FETCH_DAYS
    workers: int = 4
    data_dir: Optional[Path] = None  # Read {symbol}.csv from here instead of Yahoo Finance
    hypothesis_condition: HypothesisCondition = HypothesisCondition.PRICE_ABOVE_MA20
    hypothesis_window: int = HYPOTHESIS_DEFAULT_WINDOW
    retrospective_lookback: int = RETROSPECTIVE_LOOKBACK_DAYS


def load_report_config(yaml_path: Union[str, Path]) -> ReportConfig:
    """
    Load report configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        ReportConfig object

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is empty or has invalid values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty config file: {yaml_path}")

    data = config_dict.get('data', {})
    hypothesis = config_dict.get('hypothesis', {})
    retrospective = config_dict.get('retrospective', {})

    symbols = config_dict.get('symbols') or []
    if isinstance(symbols, str):
        symbols = [symbols]
    if not symbols:
        raise ValueError(f"No symbols configured in {yaml_path}")

    window = int(hypothesis.get('window', HYPOTHESIS_DEFAULT_WINDOW))
    if window not in HYPOTHESIS_WINDOWS:
        raise ValueError(f"Invalid hypothesis window {window}. Available: {list(HYPOTHESIS_WINDOWS)}")

    data_dir = data.get('data_dir')
    return ReportConfig(
        name=config_dict.get('name', yaml_path.stem),
        symbols=[str(s) for s in symbols],
        fetch_days=int(data.get('fetch_days', DEFAULT_FETCH_DAYS)),
        workers=int(config_dict.get('workers', 4)),
        data_dir=Path(data_dir) if data_dir else None,
        hypothesis_condition=resolve_condition(
            hypothesis.get('condition', HypothesisCondition.PRICE_ABOVE_MA20.value)
        ),
        hypothesis_window=window,
        retrospective_lookback=int(retrospective.get('lookback_days', RETROSPECTIVE_LOOKBACK_DAYS)),
    )
