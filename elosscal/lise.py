"""Reading LISE++ stopping-power tables and interpolating them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from itertools import islice
from pathlib import Path
from typing import Iterable, Union

HEADER_LINES = 3
MODEL_COUNT = 7

_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

PathLike = Union[str, Path]


class LiseError(Exception):
    """Raised when a LISE table cannot be read or holds too little data."""


class StoppingModel(IntEnum):
    """The stopping-power models tabulated side by side in a LISE file."""

    HUBERT = 0
    ZIEGLER = 1
    ATIMA12_LS = 2
    ATIMA12_NO_LS = 3
    ATIMA14_WEICK = 4
    ELECTRICAL = 5
    NUCLEAR = 6


@dataclass(frozen=True)
class StoppingPowerTable:
    """Stopping powers for each model, tabulated against energy per nucleon."""

    energies: tuple[float, ...]
    dedx: tuple[tuple[float, ...], ...]

    def __post_init__(self) -> None:
        if len(self.energies) != len(self.dedx):
            raise LiseError("energies and stopping powers differ in length")
        if len(self.energies) < 2:
            raise LiseError("not enough data points in table")

    def stopping_power(self, model: int, energy_per_u: float) -> float:
        """Linearly interpolate (or extrapolate) the stopping power of a model."""
        column = StoppingModel(model)
        energies = self.energies
        idx = next(
            (
                i
                for i, (low, high) in enumerate(zip(energies, energies[1:]))
                if low <= energy_per_u <= high
            ),
            len(energies) - 2,
        )
        e1, e2 = energies[idx], energies[idx + 1]
        d1 = self.dedx[idx][column]
        d2 = self.dedx[idx + 1][column]
        return d1 + (energy_per_u - e1) / (e2 - e1) * (d2 - d1)


def _parse_number(text: str) -> float:
    match = _LEADING_NUMBER.match(text)
    if match is None:
        raise ValueError(f"not a number: {text!r}")
    return float(match.group())


def _parse_rows(lines: Iterable[str]) -> tuple[list[float], list[tuple[float, ...]]]:
    energies: list[float] = []
    dedx: list[tuple[float, ...]] = []
    for raw in lines:
        line = raw.rstrip("\n")
        if not line or line.startswith("!"):
            continue
        tokens = line.split("\t")
        if tokens and tokens[-1] == "":
            tokens.pop()
        if len(tokens) < 2:
            continue
        try:
            energy = _parse_number(tokens[0])
            if energies and energies[-1] == energy:
                continue
            row = tuple(
                _parse_number(tokens[col]) if col < len(tokens) else 0.0
                for col in (1 + 2 * m for m in range(MODEL_COUNT))
            )
        except ValueError:
            continue
        energies.append(energy)
        dedx.append(row)
    return energies, dedx


def load_table(path: PathLike) -> StoppingPowerTable:
    """Read a tab-separated LISE stopping-power file."""
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            energies, dedx = _parse_rows(islice(handle, HEADER_LINES, None))
    except OSError as exc:
        raise LiseError(f"could not open file {path}") from exc
    if len(energies) < 2:
        raise LiseError(f"not enough data points in {path}")
    return StoppingPowerTable(tuple(energies), tuple(dedx))


def stopping_power_from_lise(path: PathLike, model: int, energy_per_u: float) -> float:
    """Load a LISE table and return the interpolated stopping power."""
    return load_table(path).stopping_power(model, energy_per_u)