"""Predicted energy loss of the beam through the windows and gas of the detector."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from elosscal.lise import StoppingModel, StoppingPowerTable, LiseError, load_table
from elosscal.results import ModelComparison, RunResult, read_run_results, write_comparisons

PathLike = Union[str, Path]

WINDOW_TABLE_NAME = "37Cl_in_Ti_NOT_MICRON.lise"


@dataclass(frozen=True)
class Setup:
    """Beam and detector parameters."""

    beam_energy: float = 92.0
    mass_number: int = 37
    detector_length_cm: float = 30.0
    segment_micron: float = 1000.0
    window_entrance: float = 0.9  # mg/cm2
    window_exit: float = 1.3  # mg/cm2
    window_model: StoppingModel = StoppingModel.ATIMA12_LS

    @property
    def detector_length_micron(self) -> float:
        return self.detector_length_cm * 10000


def gas_table_path(directory: PathLike, pressure_torr: float) -> Path:
    """Path of the LISE table for the gas at the given pressure."""
    return Path(directory) / f"37Cl_in_He4_{pressure_torr:03.0f}Torr_293K.lise"


def window_loss(
    table: StoppingPowerTable, energy_mev: float, thickness: float, setup: Optional[Setup] = None
) -> float:
    """Energy lost in a window of the given areal thickness (mg/cm2)."""
    setup = setup or Setup()
    dedx = table.stopping_power(setup.window_model, energy_mev / setup.mass_number)
    return dedx * thickness


def gas_loss(
    table: StoppingPowerTable, model: int, energy_mev: float, setup: Optional[Setup] = None
) -> float:
    """Energy lost along the gas, stepping segment by segment."""
    setup = setup or Setup()
    length = setup.detector_length_micron
    current = energy_mev
    total = 0.0
    distance = 0.0
    while distance < length:
        segment = min(setup.segment_micron, length - distance)
        d_e = table.stopping_power(model, current / setup.mass_number) * segment
        total += d_e
        current -= d_e
        distance += setup.segment_micron
    return total


def total_energy_loss(
    window_table: StoppingPowerTable,
    gas_table: Optional[StoppingPowerTable],
    model: int,
    pressure_torr: float,
    setup: Optional[Setup] = None,
) -> float:
    """Energy lost through entrance window, gas and exit window."""
    setup = setup or Setup()
    entrance = window_loss(window_table, setup.beam_energy, setup.window_entrance, setup)
    if pressure_torr == 0:
        gas = 0.0
    else:
        if gas_table is None:
            raise ValueError("a gas table is needed at non-zero pressure")
        gas = gas_loss(gas_table, model, setup.beam_energy - entrance, setup)
    exit_loss = window_loss(
        window_table, setup.beam_energy - entrance - gas, setup.window_exit, setup
    )
    return entrance + gas + exit_loss


def compare_models(
    runs: Iterable[RunResult], lise_dir: PathLike, setup: Optional[Setup] = None
) -> list[ModelComparison]:
    """Predict the energy loss of every model for each measured run."""
    setup = setup or Setup()
    window_table = load_table(Path(lise_dir) / WINDOW_TABLE_NAME)
    comparisons = []
    for run in runs:
        gas_table = (
            None
            if run.gas_pressure == 0
            else load_table(gas_table_path(lise_dir, run.gas_pressure))
        )
        losses = tuple(
            total_energy_loss(window_table, gas_table, model, run.gas_pressure, setup)
            for model in StoppingModel
        )
        comparisons.append(ModelComparison(run.delta_e, losses))
    return comparisons


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Compare measured energy losses with stopping-power models."
    )
    parser.add_argument("--input", default="SiCalibration_Results.csv")
    parser.add_argument("--lise-dir", default="lise")
    parser.add_argument("--output", default="StoppingPower.csv")
    args = parser.parse_args(argv)

    try:
        runs = read_run_results(args.input)
        for run in runs:
            print(f"Run number: {run.run_number} with gas pressure: {run.gas_pressure:g}")
        comparisons = compare_models(runs, args.lise_dir)
        write_comparisons(args.output, comparisons)
    except (LiseError, OSError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    print("Stopping power comparison complete!")
    return 0