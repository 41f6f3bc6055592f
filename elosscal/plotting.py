"""Figures of the silicon calibration and of the stopping-power comparison."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence, Union

import numpy as np
from matplotlib.figure import Figure

from elosscal.calibration import (
    ADC_MAX,
    FIT_HALF_WIDTH,
    CalibrationFit,
    PeakFit,
    histogram,
    resolution_percent,
)
from elosscal.results import ModelComparison, RunResult, read_comparisons, read_run_results

PathLike = Union[str, Path]

DPI = 100
DELTA_E_ERROR = 0.5

MODEL_LABELS = (
    "Hubert (He-base)",
    "Ziegler (H-base)",
    "ATIMA 1.2 LS-theory",
    "ATIMA 1.2 no LS-correction",
    "ATIMA 1.4 Weick",
    "Electrical component",
    "Nuclear component",
)
MODEL_COLORS = ("red", "blue", "green", "magenta", "cyan", "orange", "darkviolet")
MODEL_MARKERS = ("o", "s", "^", "D", "P", "*", "v")


def _figure(width: int, height: int) -> Figure:
    return Figure(figsize=(width / DPI, height / DPI), dpi=DPI)


def _save(fig: Figure, output: PathLike) -> Path:
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=DPI, format="png")
    return path


def _style_axes(ax) -> None:
    ax.grid(True, linestyle=":")
    ax.tick_params(direction="in", top=True, right=True)


def plot_peak(
    energies: Sequence[float], peak: PeakFit, label_lines: Iterable[str], output: PathLike
) -> Path:
    """Draw the ADC spectrum of a run with its fitted Gaussian and a text box."""
    counts, edges = histogram(energies)
    fig = _figure(1200, 800)
    ax = fig.add_subplot()
    ax.stairs(counts, edges, color="blue", fill=False)
    ax.stairs(counts, edges, color="blue", fill=True, alpha=0.2)

    low = max(0.0, peak.mu - FIT_HALF_WIDTH)
    high = min(ADC_MAX, peak.mu + FIT_HALF_WIDTH)
    x = np.linspace(low, high, 500)
    ax.plot(x, peak.amplitude * np.exp(-0.5 * ((x - peak.mu) / peak.sigma) ** 2), color="red")

    if counts.size and counts.max() > 10:
        ax.set_ylim(bottom=10)
    ax.set_xlabel("ADC Channel")
    ax.set_ylabel("Counts")
    _style_axes(ax)

    text = "\n".join(label_lines)
    if text:
        ax.text(
            0.62,
            0.88,
            text,
            transform=ax.transAxes,
            va="top",
            bbox={"facecolor": "white", "edgecolor": "black"},
        )
    return _save(fig, output)


def plot_calibration(
    points: Sequence[Sequence[float]], fit: CalibrationFit, output: PathLike
) -> Path:
    """Draw the calibration points with the fitted quadratic."""
    data = np.asarray(points, dtype=float)
    if data.ndim != 2 or data.shape[1] != 4 or data.shape[0] == 0:
        raise ValueError("points must be (adc, adc_error, energy, energy_error) tuples")
    x, ex, y, ey = data.T

    fig = _figure(1200, 800)
    ax = fig.add_subplot()
    ax.errorbar(x, y, xerr=ex, yerr=ey, fmt="o", color="blue", label="Calibration points")
    curve_x = np.linspace(0.0, ADC_MAX, 500)
    ax.plot(
        curve_x,
        fit.p0 + fit.p1 * curve_x + fit.p2 * curve_x**2,
        color="red",
        label="Fit: E = $p_0 + p_1x + p_2x^2$",
    )
    for text in (
        f"$p_0$ = {fit.p0:.2f} ± {fit.p0_error:.3f}",
        f"$p_1$ = {fit.p1:.5f} ± {fit.p1_error:.6f}",
        f"$p_2$ = {fit.p2:.7f} ± {fit.p2_error:.8f}",
    ):
        ax.plot([], [], " ", label=text)
    ax.set_xlim(-1, ADC_MAX)
    ax.set_xlabel("ADC Channel")
    ax.set_ylabel("TOF Energy (MeV)")
    _style_axes(ax)
    ax.legend(loc="upper left", edgecolor="black")
    return _save(fig, output)


def plot_delta_e_vs_pressure(results: Sequence[RunResult], output: PathLike) -> Path:
    """Draw the measured energy loss against gas pressure."""
    if not results:
        raise ValueError("no results to plot")
    fig = _figure(1200, 800)
    ax = fig.add_subplot()
    ax.errorbar(
        [r.gas_pressure for r in results],
        [r.delta_e for r in results],
        yerr=[r.delta_e_error for r in results],
        fmt="o",
        color="blue",
    )
    ax.set_title("Energy Loss vs. Gas Pressure")
    ax.set_xlabel("Pressure (Torr)")
    ax.set_ylabel(r"$\Delta E$ (MeV)")
    _style_axes(ax)
    return _save(fig, output)


def plot_resolution(peaks: Mapping[int, PeakFit], output: PathLike) -> Path:
    """Draw the energy resolution (% FWHM) of each run."""
    if not peaks:
        raise ValueError("no peaks to plot")
    runs = sorted(peaks)
    resolutions = [resolution_percent(peaks[run]) for run in runs]
    fig = _figure(1200, 800)
    ax = fig.add_subplot()
    ax.errorbar(
        runs,
        [value for value, _ in resolutions],
        yerr=[error for _, error in resolutions],
        fmt="o",
        color="red",
    )
    ax.set_xticks(runs)
    ax.set_title("Energy Resolution vs. Run Number")
    ax.set_xlabel("Run Number")
    ax.set_ylabel("Resolution (% FWHM)")
    _style_axes(ax)
    return _save(fig, output)


def plot_model_comparison(
    comparisons: Sequence[ModelComparison], pressures: Sequence[float], output: PathLike
) -> Path:
    """Draw measured and predicted energy losses against gas pressure."""
    if len(comparisons) != len(pressures):
        raise ValueError("number of comparisons and pressures differs")
    if not comparisons:
        raise ValueError("no comparisons to plot")
    x = list(pressures)
    errors = [DELTA_E_ERROR] * len(x)

    fig = _figure(1800, 900)
    fig.subplots_adjust(left=0.12, right=0.6, top=0.92, bottom=0.2)
    ax = fig.add_subplot()
    ax.errorbar(
        x,
        [c.delta_e for c in comparisons],
        yerr=errors,
        fmt="-o",
        color="black",
        markersize=9,
        linewidth=2,
        label="Si Data",
    )
    for index, (label, color, marker) in enumerate(
        zip(MODEL_LABELS, MODEL_COLORS, MODEL_MARKERS)
    ):
        ax.errorbar(
            x,
            [c.models[index] for c in comparisons],
            yerr=errors,
            fmt="-" + marker,
            color=color,
            markerfacecolor="none",
            markersize=7,
            label=label,
        )
    ax.set_xlabel("Gas Pressure (Torr)")
    ax.set_ylabel(r"$\Delta E$ (MeV)")
    _style_axes(ax)
    ax.legend(
        loc="center left",
        bbox_to_anchor=(1.02, 0.5),
        edgecolor="black",
        framealpha=0.85,
    )
    return _save(fig, output)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Plot measured energy losses against the stopping-power models."
    )
    parser.add_argument("--results", default="SiCalibration_Results.csv")
    parser.add_argument("--comparisons", default="StoppingPower.csv")
    parser.add_argument("--output", default="plots/DeltaE_vs_Pressure_Comparison.png")
    args = parser.parse_args(argv)

    try:
        runs = read_run_results(args.results)
        comparisons = read_comparisons(args.comparisons)
    except (OSError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    if len(runs) != len(comparisons):
        print("Number of entries in two trees differs. Quitting...")
        return 1
    try:
        plot_model_comparison(comparisons, [r.gas_pressure for r in runs], args.output)
    except (OSError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    print("Plot saved!")
    return 0