"""Test ``kinfit`` cli."""

import io
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from _reference import CONC, KOFF, KON, RMAX, T0
from click.testing import CliRunner

from kinfit.__main__ import kinfit
from kinfit.fitting.models import binding_1to1


@pytest.fixture
def runner() -> CliRunner:
    """Fixture for invoking command-line interfaces."""
    return CliRunner()


def _table(output: str) -> pd.DataFrame:
    return pd.read_csv(io.StringIO(output))


def test_sim1(runner: CliRunner) -> None:
    """It prints the 1:1 trace with default tmax = 2*t0."""
    result = runner.invoke(kinfit, ["sim1", "500", "6e-7", "1e4", "0.01", "0.8"])
    assert result.exit_code == 0
    df = _table(result.output)
    assert list(df.columns) == ["t", "response"]
    assert len(df) == 1001
    assert int(df["response"].idxmax()) == 500
    expected = binding_1to1(df["t"].to_numpy(), T0, CONC, KON, KOFF, RMAX)
    np.testing.assert_allclose(df["response"], expected, rtol=1e-5)


def test_sim1_options(runner: CliRunner) -> None:
    """Step, tmax and drift options are honoured."""
    args = ["sim1", "100", "1e-6", "1e4", "0.01", "1"]
    args += ["--tmax", "150", "--step", "50", "--drift", "0.001"]
    result = runner.invoke(kinfit, args)
    assert result.exit_code == 0
    df = _table(result.output)
    np.testing.assert_array_equal(df["t"], [0, 50, 100, 150])


def test_sim1_invalid(runner: CliRunner) -> None:
    """An invalid rate constant gives a clean error."""
    result = runner.invoke(kinfit, ["sim1", "500", "6e-7", "0", "0.01", "0.8"])
    assert result.exit_code == 1
    assert "Invalid parameter kon" in result.output


def test_sim2(runner: CliRunner) -> None:
    """It prints the 2:1 trace."""
    args = ["sim2", "100", "1e-6", "1e4", "0.01", "0.5", "1e5", "0.001", "0.3"]
    result = runner.invoke(kinfit, args)
    assert result.exit_code == 0
    df = _table(result.output)
    assert len(df) == 201
    assert df["response"].iloc[0] == 0


def test_tteq(runner: CliRunner) -> None:
    """It prints one equilibrium time per concentration."""
    args = ["tteq", "1e4", "0.01", "6e-7", "3e-7", "1.75e-7", "8.75e-8", "2.916e-8"]
    result = runner.invoke(kinfit, args)
    assert result.exit_code == 0
    df = _table(result.output)
    assert list(df.columns) == ["conc", "tteq"]
    assert df["tteq"].iloc[0] == pytest.approx(187.233, abs=1e-3)
    assert df["tteq"].is_monotonic_increasing


def test_tteq_invalid_threshold(runner: CliRunner) -> None:
    """Threshold outside (0, 1) fails."""
    result = runner.invoke(kinfit, ["tteq", "1e4", "0.01", "6e-7", "-f", "1.2"])
    assert result.exit_code == 1
    assert "threshold" in result.output


def test_fit(runner: CliRunner, tmp_path: Path) -> None:
    """It fits a trace from a CSV file."""
    t = np.arange(0.0, 1001.0, 2.0)
    rng = np.random.default_rng(1)
    y = binding_1to1(t, T0, CONC, KON, KOFF, RMAX) + rng.normal(0, 0.001, t.size)
    csv_f = tmp_path / "trace.csv"
    pd.DataFrame({"t": t, "y": y}).to_csv(csv_f, index=False)
    result = runner.invoke(
        kinfit, ["fit", str(csv_f), "--t0", "500", "--conc", "6e-7", "--weight"]
    )
    assert result.exit_code == 0, result.output
    assert "[[Fit Statistics]]" in result.output
    assert "kon = " in result.output
    assert "KD = " in result.output


def test_fit_bad_columns(runner: CliRunner, tmp_path: Path) -> None:
    """A CSV without the t and y columns is reported."""
    csv_f = tmp_path / "bad.csv"
    pd.DataFrame({"time": [0, 1], "signal": [0.0, 0.1]}).to_csv(csv_f, index=False)
    result = runner.invoke(kinfit, ["fit", str(csv_f), "--t0", "1", "--conc", "1e-7"])
    assert result.exit_code == 1
    assert "Missing column(s): t, y" in result.output


def test_fit_too_few_points(runner: CliRunner, tmp_path: Path) -> None:
    """Too few points is reported as a fit failure."""
    csv_f = tmp_path / "short.csv"
    pd.DataFrame({"t": [0, 10], "y": [0.0, 0.1]}).to_csv(csv_f, index=False)
    result = runner.invoke(kinfit, ["fit", str(csv_f), "--t0", "5", "--conc", "1e-7"])
    assert result.exit_code == 1
    assert "Fit failed" in result.output


def test_fit_non_numeric(runner: CliRunner, tmp_path: Path) -> None:
    """A non-numeric cell gives a clean error instead of a traceback."""
    csv_f = tmp_path / "text.csv"
    csv_f.write_text("t,y\n0,0.0\n1,a\n2,0.1\n3,0.05\n")
    result = runner.invoke(kinfit, ["fit", str(csv_f), "--t0", "2", "--conc", "1e-7"])
    assert result.exit_code == 1
    assert not isinstance(result.exception, ValueError)
    assert "Non-numeric value" in result.output
    assert "text.csv" in result.output
