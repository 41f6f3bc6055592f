import csv

import pytest

from elosscal.results import (
    ModelComparison,
    RunResult,
    read_comparisons,
    read_run_results,
    write_comparisons,
    write_run_results,
)


def _run(n, pressure):
    return RunResult(n, pressure, 3.25, 0.1, 1.2, 0.05, 8500.5, 2.5, 90.1, 1.9)


def test_run_results_round_trip(tmp_path):
    path = tmp_path / "runs.csv"
    runs = [_run(25, 0.0), _run(26, 20.0), _run(27, 40.0)]
    write_run_results(path, runs)
    assert read_run_results(path) == runs


def test_run_results_header(tmp_path):
    path = tmp_path / "runs.csv"
    write_run_results(path, [_run(25, 0.0)])
    with open(path, newline="") as handle:
        header = next(csv.reader(handle))
    assert header[:3] == ["RunNumber", "GasPressure", "DeltaE"]
    assert header[-1] == "Sigma_Error"


def test_run_number_is_int(tmp_path):
    path = tmp_path / "runs.csv"
    write_run_results(path, [_run(30, 100.0)])
    (result,) = read_run_results(path)
    assert result.run_number == 30 and isinstance(result.run_number, int)


def test_comparisons_round_trip(tmp_path):
    path = tmp_path / "cmp.csv"
    items = [
        ModelComparison(4.5, (1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0)),
        ModelComparison(0.1, (0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7)),
    ]
    write_comparisons(path, items)
    assert read_comparisons(path) == items


def test_comparison_header_uses_model_names(tmp_path):
    path = tmp_path / "cmp.csv"
    write_comparisons(path, [ModelComparison(1.0, (0.0,) * 7)])
    with open(path, newline="") as handle:
        header = next(csv.reader(handle))
    assert header[0] == "DeltaE"
    assert "DeltaE_Model2_ATIMA12LS" in header
    assert len(header) == 8


def test_comparison_requires_seven_models():
    with pytest.raises(ValueError):
        ModelComparison(1.0, (1.0, 2.0))


def test_missing_column_rejected(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("RunNumber,GasPressure\n25,0\n")
    with pytest.raises(ValueError):
        read_run_results(path)