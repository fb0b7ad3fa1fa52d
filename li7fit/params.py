"""Fit parameter files: reading, writing and logging fit results."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np

MAX_PARAMETERS = 30


@dataclass(frozen=True)
class ParameterSet:
    """A full parameter vector with a use flag for each entry.

    The first ``npeaks`` entries are peak amplitudes, kept as the square roots
    of the yields written in parameter files. Entries whose flag is false stay
    fixed during a fit.
    """

    values: tuple[float, ...]
    used: tuple[bool, ...]
    npeaks: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(float(v) for v in self.values))
        object.__setattr__(self, "used", tuple(bool(u) for u in self.used))
        if len(self.values) != len(self.used):
            raise ValueError("parameters and their use flags differ in length")
        if self.npeaks < 0:
            raise ValueError(f"number of peaks must not be negative, got {self.npeaks}")

    def __len__(self) -> int:
        return len(self.values)

    @property
    def free_count(self) -> int:
        """Number of parameters varied by a fit."""
        return sum(self.used)

    @property
    def yields(self) -> tuple[float, ...]:
        """Values as written to parameter files: peak amplitudes squared."""
        return tuple(
            v * v if i < self.npeaks else v for i, v in enumerate(self.values)
        )

    def free_values(self) -> np.ndarray:
        """The entries that a fit varies, in order."""
        return np.array([v for v, u in zip(self.values, self.used) if u], dtype=float)

    def with_free_values(self, values: Sequence[float]) -> ParameterSet:
        """Copy with the free entries replaced by ``values``, in order."""
        new = [float(v) for v in values]
        if len(new) != self.free_count:
            raise ValueError(f"expected {self.free_count} free values, got {len(new)}")
        replacements = iter(new)
        merged = tuple(
            next(replacements) if u else v for v, u in zip(self.values, self.used)
        )
        return ParameterSet(merged, self.used, self.npeaks)


def _parse_flag(token: str) -> bool:
    if token == "1":
        return True
    if token == "0":
        return False
    raise ValueError(f"use flag must be 0 or 1, got {token!r}")


def read_parameters(path: str | Path, npeaks: int) -> ParameterSet:
    """Read ``value flag`` pairs from a parameter file.

    The first ``npeaks`` values are peak yields and are stored as their square
    roots. A trailing value without a flag is ignored.
    """
    tokens = Path(path).read_text().split()
    values: list[float] = []
    used: list[bool] = []
    for value_token, flag_token in zip(tokens[0::2], tokens[1::2]):
        value = float(value_token)
        flag = _parse_flag(flag_token)
        if len(values) < npeaks:
            if value < 0:
                raise ValueError(f"peak yield must not be negative, got {value}")
            value = math.sqrt(value)
        values.append(value)
        used.append(flag)
        if len(values) > MAX_PARAMETERS:
            raise ValueError(f"at most {MAX_PARAMETERS} parameters are allowed")
    return ParameterSet(tuple(values), tuple(used), npeaks)


def write_parameters(path: str | Path, params: ParameterSet) -> None:
    """Write ``value flag`` lines, peak amplitudes squared back into yields."""
    lines = [f"{v:g} {int(u)}" for v, u in zip(params.yields, params.used)]
    Path(path).write_text("".join(line + "\n" for line in lines))


def append_record(path: str | Path, chisq: float, filenames: Iterable[str]) -> None:
    """Append one line with the chi-square and the simulation files it came from."""
    names = "    ".join(f"f{k}:{name}" for k, name in enumerate(filenames, start=1))
    with open(path, "a") as stream:
        stream.write(f"{chisq:g}\t{names}\n")