"""Energy calibration of the silicon detector from its peak positions."""

from __future__ import annotations

import argparse
import csv
import math
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

import numpy as np
from scipy.optimize import curve_fit

from elosscal.results import RunResult, write_run_results

PathLike = Union[str, Path]

SI_CHANNEL = 11
ADC_BINS = 600
ADC_MAX = 16384.0
FIT_HALF_WIDTH = 2000.0
SIGMA_GUESS = 200.0
FWHM_PER_SIGMA = 2.355
P0_LIMITS = (-10.0, 10.0)

BEAM_ENERGY = 92.00  # MeV
BEAM_ENERGY_ERROR = 0.05  # MeV

RUNS = range(21, 37)

# Runs whose beam energy was measured by time of flight, with that energy in MeV.
CALIBRATION_ENERGIES = {21: 91.87, 22: 71.35}
CALIBRATION_ENERGY_ERROR = 0.01

MU_GUESSES = {
    21: 15300.0,
    22: 10000.0,
    23: 9500.0,
    24: 13200.0,
    25: 10150.0,
    26: 9200.0,
    27: 8500.0,
    28: 7800.0,
    29: 6800.0,
    30: 6000.0,
    31: 5100.0,
    32: 4200.0,
    33: 3400.0,
    34: 2520.0,
    35: 1760.0,
    36: 1500.0,
}

GAS_PRESSURES = {
    25: 0.0,
    26: 20.0,
    27: 40.0,
    28: 60.0,
    29: 80.0,
    30: 100.0,
    31: 120.0,
    32: 140.0,
    33: 160.0,
    34: 180.0,
    35: 200.0,
    36: 220.0,
}

_EFFECTIVE_VARIANCE_ITERATIONS = 10


@dataclass(frozen=True)
class PeakFit:
    """Gaussian fitted to the silicon-detector peak of one run."""

    amplitude: float
    mu: float
    sigma: float
    mu_error: float
    sigma_error: float


@dataclass(frozen=True)
class CalibrationFit:
    """Quadratic conversion from ADC channel to energy in MeV."""

    p0: float
    p1: float
    p2: float
    p0_error: float
    p1_error: float
    p2_error: float

    def energy(self, adc: float) -> float:
        """Energy in MeV for an ADC channel."""
        return self.p0 + self.p1 * adc + self.p2 * adc * adc

    def energy_error(self, adc: float, adc_error: float) -> float:
        """Uncertainty of the energy for an ADC channel with its own uncertainty."""
        return math.sqrt(
            self.p0_error**2 + (adc * self.p1_error) ** 2 + (self.p1 * adc_error) ** 2
        )


def read_events(path: PathLike) -> np.ndarray:
    """Read the energies recorded on the silicon channel from a CSV event file.

    The file needs the columns Channel and Energy.
    """
    with open(path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        missing = [c for c in ("Channel", "Energy") if c not in (reader.fieldnames or ())]
        if missing:
            raise ValueError(f"{path}: missing columns {', '.join(missing)}")
        energies = [
            float(row["Energy"]) for row in reader if int(row["Channel"]) == SI_CHANNEL
        ]
    return np.asarray(energies, dtype=float)


def histogram(
    energies: Sequence[float],
    bins: int = ADC_BINS,
    low: float = 0.0,
    high: float = ADC_MAX,
) -> tuple[np.ndarray, np.ndarray]:
    """Bin values into [low, high); values outside that range are dropped."""
    values = np.asarray(energies, dtype=float)
    values = values[(values >= low) & (values < high)]
    counts, edges = np.histogram(values, bins=bins, range=(low, high))
    return counts.astype(float), edges


def _gaussian(x: np.ndarray, amplitude: float, mu: float, sigma: float) -> np.ndarray:
    return amplitude * np.exp(-0.5 * ((x - mu) / sigma) ** 2)


def fit_peak(energies: Sequence[float], mu_guess: float) -> PeakFit:
    """Fit a Gaussian to the histogrammed energies around a guessed centroid."""
    counts, edges = histogram(energies)
    centres = 0.5 * (edges[:-1] + edges[1:])
    fit_min = max(0.0, mu_guess - FIT_HALF_WIDTH)
    fit_max = min(ADC_MAX, mu_guess + FIT_HALF_WIDTH)
    mask = (centres >= fit_min) & (centres <= fit_max) & (counts > 0)
    if np.count_nonzero(mask) < 3:
        raise ValueError("too few filled bins in the fit range")
    x = centres[mask]
    y = counts[mask]
    try:
        params, covariance = curve_fit(
            _gaussian,
            x,
            y,
            p0=(float(y.max()), mu_guess, SIGMA_GUESS),
            sigma=np.sqrt(y),
            absolute_sigma=True,
            maxfev=10000,
        )
    except (RuntimeError, ValueError) as exc:
        raise ValueError(f"peak fit failed: {exc}") from exc
    errors = np.sqrt(np.abs(np.diag(covariance)))
    return PeakFit(
        amplitude=float(params[0]),
        mu=float(params[1]),
        sigma=abs(float(params[2])),
        mu_error=float(errors[1]),
        sigma_error=float(errors[2]),
    )


def _floor_errors(errors: np.ndarray) -> np.ndarray:
    positive = errors[errors > 0]
    floor = float(positive.min()) if positive.size else 1.0
    return np.where(errors > 0, errors, floor)


def _weighted_solve(
    design: np.ndarray, y: np.ndarray, errors: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    weights = 1.0 / errors
    a = design * weights[:, None]
    b = y * weights
    params = np.linalg.lstsq(a, b, rcond=None)[0]
    low, high = P0_LIMITS
    if low <= params[0] <= high:
        return params, np.linalg.pinv(a.T @ a)
    p0 = min(max(params[0], low), high)
    free = a[:, 1:]
    rest = np.linalg.lstsq(free, b - p0 * a[:, 0], rcond=None)[0]
    covariance = np.zeros((3, 3))
    covariance[1:, 1:] = np.linalg.pinv(free.T @ free)
    return np.concatenate(([p0], rest)), covariance


def fit_calibration(points: Sequence[Sequence[float]]) -> CalibrationFit:
    """Fit energy = p0 + p1*x + p2*x^2 to (adc, adc_error, energy, energy_error) points.

    The x uncertainties enter through the effective variance; p0 is held
    within P0_LIMITS. Points without any uncertainty are weighted like the
    most precise of the others.
    """
    data = np.asarray(points, dtype=float)
    if data.ndim != 2 or data.shape[1] != 4:
        raise ValueError("points must be (adc, adc_error, energy, energy_error) tuples")
    if data.shape[0] < 3:
        raise ValueError("at least three calibration points are needed")
    x, ex, y, ey = data.T
    design = np.column_stack((np.ones_like(x), x, x * x))
    params, covariance = _weighted_solve(design, y, _floor_errors(np.abs(ey)))
    for _ in range(_EFFECTIVE_VARIANCE_ITERATIONS):
        slope = params[1] + 2.0 * params[2] * x
        errors = np.sqrt(ey**2 + (slope * ex) ** 2)
        params, covariance = _weighted_solve(design, y, _floor_errors(errors))
    errors = np.sqrt(np.abs(np.diag(covariance)))
    return CalibrationFit(
        p0=float(params[0]),
        p1=float(params[1]),
        p2=float(params[2]),
        p0_error=float(errors[0]),
        p1_error=float(errors[1]),
        p2_error=float(errors[2]),
    )


def resolution_percent(peak: PeakFit) -> tuple[float, float]:
    """Energy resolution as FWHM in percent of the centroid, with its uncertainty."""
    fwhm = FWHM_PER_SIGMA * peak.sigma
    fwhm_error = FWHM_PER_SIGMA * peak.sigma_error
    resolution = fwhm / peak.mu * 100.0
    error = 100.0 * math.sqrt(
        (fwhm_error / peak.mu) ** 2 + (fwhm * peak.mu_error / peak.mu**2) ** 2
    )
    return resolution, error


def analyse_runs(
    peaks: Mapping[int, PeakFit],
    beam_energy: float = BEAM_ENERGY,
    beam_energy_error: float = BEAM_ENERGY_ERROR,
) -> tuple[CalibrationFit, list[RunResult]]:
    """Calibrate from the reference runs and derive energy losses for the gas runs."""
    missing = [run for run in CALIBRATION_ENERGIES if run not in peaks]
    if missing:
        raise ValueError(
            f"calibration runs missing: {', '.join(str(r) for r in missing)}"
        )
    points = [(0.0, 0.0, 0.0, 0.0)] + [
        (peaks[run].mu, peaks[run].mu_error, energy, CALIBRATION_ENERGY_ERROR)
        for run, energy in CALIBRATION_ENERGIES.items()
    ]
    fit = fit_calibration(points)

    results = []
    for run in sorted(peaks):
        if run not in GAS_PRESSURES:
            continue
        peak = peaks[run]
        energy = fit.energy(peak.mu)
        energy_error = fit.energy_error(peak.mu, peak.mu_error)
        resolution, resolution_error = resolution_percent(peak)
        results.append(
            RunResult(
                run_number=run,
                gas_pressure=GAS_PRESSURES[run],
                delta_e=beam_energy - energy,
                delta_e_error=math.hypot(beam_energy_error, energy_error),
                fwhm_percent=resolution,
                fwhm_percent_error=resolution_error,
                centroid=peak.mu,
                centroid_error=peak.mu_error,
                sigma=peak.sigma,
                sigma_error=peak.sigma_error,
            )
        )
    return fit, results


def run_file(data_dir: PathLike, run: int) -> Path:
    """Path of the event file for a run below the data directory."""
    return Path(data_dir) / f"run_{run}" / f"DataR_run_{run}.csv"


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Calibrate the silicon detector and derive energy losses."
    )
    parser.add_argument("--data-dir", default="data")
    parser.add_argument("--output", default="SiCalibration_Results.csv")
    args = parser.parse_args(argv)

    peaks: dict[int, PeakFit] = {}
    for run in RUNS:
        try:
            energies = read_events(run_file(args.data_dir, run))
            peaks[run] = fit_peak(energies, MU_GUESSES[run])
        except (OSError, ValueError) as exc:
            print(f"Error for run {run}: {exc}", file=sys.stderr)

    try:
        fit, results = analyse_runs(peaks)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    for run in sorted(peaks):
        print(f"Energy (MeV): {fit.energy(peaks[run].mu):g}")
    for result in results:
        print(f"Run number: {result.run_number}")
        print(f"Delta E (MeV): {result.delta_e:g}")

    try:
        write_run_results(args.output, results)
    except OSError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0