"""Calibration results and model comparisons stored as CSV tables."""

from __future__ import annotations

import csv
from dataclasses import astuple, dataclass, fields
from pathlib import Path
from typing import Iterable, Union

from elosscal.lise import MODEL_COUNT

PathLike = Union[str, Path]

RUN_COLUMNS = (
    "RunNumber",
    "GasPressure",
    "DeltaE",
    "DeltaE_Error",
    "FWHM_Percent",
    "FWHM_Percent_Error",
    "Centroid",
    "Centroid_Error",
    "Sigma",
    "Sigma_Error",
)

MODEL_COLUMNS = (
    "DeltaE_Model0_Hubert",
    "DeltaE_Model1_Ziegler",
    "DeltaE_Model2_ATIMA12LS",
    "DeltaE_Model3_ATIMA12NoLS",
    "DeltaE_Model4_ATIMA14Weick",
    "DeltaE_Model5_Electrical",
    "DeltaE_Model6_Nuclear",
)

COMPARISON_COLUMNS = ("DeltaE", *MODEL_COLUMNS)


@dataclass(frozen=True)
class RunResult:
    """Silicon-detector calibration result for one run."""

    run_number: int
    gas_pressure: float
    delta_e: float
    delta_e_error: float
    fwhm_percent: float
    fwhm_percent_error: float
    centroid: float
    centroid_error: float
    sigma: float
    sigma_error: float


@dataclass(frozen=True)
class ModelComparison:
    """Measured energy loss next to the loss predicted by each model."""

    delta_e: float
    models: tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.models) != MODEL_COUNT:
            raise ValueError(f"expected {MODEL_COUNT} model values, got {len(self.models)}")
        object.__setattr__(self, "models", tuple(float(v) for v in self.models))


def _read_rows(path: PathLike, columns: tuple[str, ...]) -> list[dict[str, str]]:
    with open(path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        missing = [c for c in columns if c not in (reader.fieldnames or ())]
        if missing:
            raise ValueError(f"{path}: missing columns {', '.join(missing)}")
        return list(reader)


def write_run_results(path: PathLike, results: Iterable[RunResult]) -> None:
    """Write calibration results, one row per run."""
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(RUN_COLUMNS)
        writer.writerows(astuple(result) for result in results)


def read_run_results(path: PathLike) -> list[RunResult]:
    """Read calibration results written by write_run_results."""
    names = [f.name for f in fields(RunResult)]
    results = []
    for row in _read_rows(path, RUN_COLUMNS):
        values = [row[c] for c in RUN_COLUMNS]
        kwargs = {names[0]: int(values[0])}
        kwargs.update({n: float(v) for n, v in zip(names[1:], values[1:])})
        results.append(RunResult(**kwargs))
    return results


def write_comparisons(path: PathLike, comparisons: Iterable[ModelComparison]) -> None:
    """Write measured and model energy losses, one row per run."""
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(COMPARISON_COLUMNS)
        writer.writerows((c.delta_e, *c.models) for c in comparisons)


def read_comparisons(path: PathLike) -> list[ModelComparison]:
    """Read model comparisons written by write_comparisons."""
    return [
        ModelComparison(
            float(row["DeltaE"]), tuple(float(row[c]) for c in MODEL_COLUMNS)
        )
        for row in _read_rows(path, COMPARISON_COLUMNS)
    ]