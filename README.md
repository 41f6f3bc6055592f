# elosscal

Tools for a gas-filled ionisation-chamber energy-loss measurement with a
37Cl beam:

1. calibrate a silicon detector from beam runs and derive the measured
   energy loss at each gas pressure,
2. compute the expected energy loss from LISE stopping-power tables for
   seven stopping models (entrance window, gas, exit window),
3. plot the measured values against every model.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Command-line use

The three steps map onto three commands, run in order. Each accepts
`--help`.

```
elosscal-calibrate     # fit peaks, energy calibration, per-run results
elosscal-energyloss    # model energy losses from LISE tables
elosscal-plot          # comparison plot of data and models
```

### elosscal-calibrate

Options: `--data-dir` (default `data`), `--output` (default
`SiCalibration_Results.csv`).

Reads the event file of each run 21 to 36 from
`<data-dir>/run_<N>/DataR_run_<N>.csv`. An event file is CSV with the
columns `Channel` and `Energy`; only events on channel 11 are used. For
every run a Gaussian is fitted to the 600-bin ADC spectrum within ±2000
channels of a preset guess. Runs 21 (91.87 MeV) and 22 (71.35 MeV),
together with the origin, give the quadratic calibration
`E = p0 + p1*x + p2*x^2` (with `p0` held within ±10). Runs that cannot be
read or fitted are reported and skipped; the command fails if a
calibration run is missing. For the gas runs 25 to 36 (0 to 220 Torr in
20 Torr steps) it writes one row per run: run number, gas pressure,
energy loss relative to a 92.00 ± 0.05 MeV beam, FWHM resolution in
percent, centroid and sigma, each with its uncertainty.

### elosscal-energyloss

Options: `--input` (default `SiCalibration_Results.csv`), `--lise-dir`
(default `lise`), `--output` (default `StoppingPower.csv`).

Needs the window table `37Cl_in_Ti_NOT_MICRON.lise` and, for each non-zero
pressure, `37Cl_in_He4_<PPP>Torr_293K.lise` (pressure as three digits) in
the LISE directory. For each run and each of the seven models it adds the
loss in the 0.9 mg/cm² entrance window, the loss along 30 cm of gas
stepped in 1 mm segments, and the loss in the 1.3 mg/cm² exit window. The
windows always use the ATIMA 1.2 LS column. The output holds the measured
`DeltaE` and one column per model.

### elosscal-plot

Options: `--results` (default `SiCalibration_Results.csv`),
`--comparisons` (default `StoppingPower.csv`), `--output` (default
`plots/DeltaE_vs_Pressure_Comparison.png`).

Draws the measured energy loss and all seven model predictions against
gas pressure. It refuses to plot if the two files hold different numbers
of rows.

## Library use

```python
from elosscal.lise import load_table, StoppingModel

table = load_table("lise/37Cl_in_Ti_NOT_MICRON.lise")
dedx = table.stopping_power(StoppingModel.ATIMA12_LS, 92.0 / 37)
```

- `elosscal.lise`: `load_table`, `StoppingPowerTable` (with
  `stopping_power`), `StoppingModel`, `stopping_power_from_lise`, and
  `LiseError` for tables that cannot be opened or have fewer than two
  rows.
- `elosscal.calibration`: `read_events`, `histogram`, `fit_peak` →
  `PeakFit`, `fit_calibration` → `CalibrationFit` (with `energy` and
  `energy_error`), `resolution_percent`, `analyse_runs`, `run_file`.
- `elosscal.energyloss`: `Setup` (beam energy, mass number, detector
  length, segment length, window thicknesses, window model),
  `gas_table_path`, `window_loss`, `gas_loss`, `total_energy_loss`,
  `compare_models`.
- `elosscal.results`: `RunResult` and `ModelComparison` records stored
  as CSV with `write_run_results`, `read_run_results`,
  `write_comparisons` and `read_comparisons`.
- `elosscal.plotting`: `plot_peak`, `plot_calibration`,
  `plot_delta_e_vs_pressure`, `plot_resolution` and
  `plot_model_comparison`, each writing a PNG file and returning its path.

## LISE table format

Tab-separated text: three header lines, then rows of energy (MeV/u)
followed by stopping-power columns, one pair of columns per model (the
first of each pair is used). Empty lines, lines starting with `!`, rows
that do not parse and rows repeating the previous energy are skipped.
Energies outside the table are extrapolated linearly from the last
interval.

## What it does not do

- Event data is read from CSV files only; there is no reader for other
  acquisition formats.
- `elosscal-calibrate` writes the results table but draws no figures.
  The per-run spectra, the calibration curve, energy loss against
  pressure and resolution against run are available only by calling the
  functions in `elosscal.plotting` from Python.
- The run numbers, peak guesses, calibration energies and gas pressures
  are fixed in `elosscal.calibration`; there is no option to change them.