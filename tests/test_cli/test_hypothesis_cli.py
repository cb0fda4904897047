import json
import sys

import numpy as np
import pandas as pd

from cli import hypothesis as cli_hypothesis


def _write_uptrend(directory, symbol, days):
    closes = 100.0 + np.arange(days, dtype=float)
    df = pd.DataFrame({
        "Open": closes,
        "High": closes + 1,
        "Low": closes - 1,
        "Close": closes,
        "Volume": np.full(days, 1000.0),
    }, index=pd.date_range("2023-01-02", periods=days, freq="B", name="Date"))
    df.to_csv(directory / f"{symbol}.csv")
    return df


def test_cli_hypothesis_json_from_csv(monkeypatch, tmp_path, capsys):
    df = _write_uptrend(tmp_path, "UP", 60)
    monkeypatch.setattr(sys, "argv", [
        "hypothesis", "UP",
        "--condition", "Price > MA-20",
        "--window", "125",
        "--data-dir", str(tmp_path),
        "--json",
    ])

    assert cli_hypothesis.main() == 0

    out = json.loads(capsys.readouterr().out)
    assert out["totalSignals"] == 1
    assert out["positiveOutcomes"] == 1
    assert out["details"][0]["date"] == df.index[19].date().isoformat()


def test_cli_hypothesis_text_output(monkeypatch, tmp_path, capsys):
    _write_uptrend(tmp_path, "UP", 60)
    monkeypatch.setattr(sys, "argv", [
        "hypothesis", "UP", "--window", "125", "--data-dir", str(tmp_path),
    ])

    assert cli_hypothesis.main() == 0

    out = capsys.readouterr().out
    assert "Signals:" in out
    assert "'Price > MA-20'" in out


def test_cli_hypothesis_missing_symbol(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(sys, "argv", ["hypothesis", "NOPE", "--data-dir", str(tmp_path)])

    assert cli_hypothesis.main() == 1
    assert capsys.readouterr().out == ""
