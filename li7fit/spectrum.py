"""Chi-square fit of simulated peak shapes plus a background to a measured spectrum."""

from __future__ import annotations

import math
from enum import Enum
from pathlib import Path
from typing import Sequence

import numpy as np
from scipy import optimize

from li7fit.histogram import Histogram, load_histogram

PEAK_UNIT = 1e-6  # peak templates are scaled by amplitude**2 * 1e-6
NEGATIVE_BACKGROUND_PENALTY = 200.0


class BackgroundModel(Enum):
    """Shape of the smooth background under the peaks."""

    LINEAR = "linear"
    THRESHOLD = "threshold"

    @property
    def nparams(self) -> int:
        """Number of parameters the background takes."""
        return 2 if self is BackgroundModel.LINEAR else 5

    def evaluate(self, x: float, params: Sequence[float]) -> float:
        """Background at ``x`` for its own parameters ``params``."""
        if len(params) < self.nparams:
            raise ValueError(
                f"{self.value} background needs {self.nparams} parameters, got {len(params)}"
            )
        if self is BackgroundModel.LINEAR:
            return float(params[0] + params[1] * (x - 10.0))
        p0, p1, p2, p3, p4 = (float(p) for p in params[:5])
        d = x - p1
        numerator = p0 + p3 * d + p4 * d * d
        with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
            denominator = 1.0 + np.exp(-np.float64(d) / np.float64(p2))
            return float(np.float64(numerator) / denominator)

    def combine(self, peaks: float, back: float) -> float:
        """Total model value from the summed peaks and the background."""
        value = peaks + back
        if back < 0.0:
            if self is BackgroundModel.LINEAR:
                return 0.0
            return value + NEGATIVE_BACKGROUND_PENALTY
        return value


def efficiency_from_uniform(hist: Histogram, nbins: int) -> np.ndarray:
    """Efficiency correction factors from a spectrum simulated with uniform excitation.

    For the first ``nbins`` bins the factor is the largest content divided by the
    bin's content, or zero for empty bins.
    """
    contents = np.array([hist.content(i) for i in range(nbins)])
    peak = contents.max(initial=0.0)
    factors = np.zeros(nbins)
    filled = contents > 0
    factors[filled] = peak / contents[filled]
    return factors


def apply_efficiency(hist: Histogram, eff: Sequence[float]) -> Histogram:
    """Copy of ``hist`` with bin ``i`` multiplied by ``eff[i]``.

    Bins beyond the end of ``eff`` keep their content.
    """
    corrected = hist.copy()
    for i, factor in enumerate(eff):
        corrected.set_content(i, corrected.content(i) * factor)
    return corrected


class SpectrumFit:
    """Fit of ``npeaks`` simulated line shapes plus a background to a spectrum.

    The full parameter vector holds one amplitude per peak (a peak contributes
    ``amplitude**2 * 1e-6`` times its template) followed by the background
    parameters. Entries whose ``used`` flag is false stay fixed during the fit.
    """

    def __init__(
        self,
        data: Histogram,
        efficiency: Sequence[float],
        npeaks: int,
        params: Sequence[float],
        used: Sequence[bool],
        xlow: float = 9.98,
        xhigh: float = 13.0,
        background: BackgroundModel = BackgroundModel.LINEAR,
    ) -> None:
        if npeaks < 0:
            raise ValueError(f"number of peaks must not be negative, got {npeaks}")
        self.npeaks = npeaks
        self.background_model = background
        self.efficiency = np.asarray(efficiency, dtype=float)
        self.params = np.array(params, dtype=float)
        self.used = np.array(used, dtype=bool)
        if self.params.shape != self.used.shape:
            raise ValueError("parameters and their use flags differ in length")
        needed = npeaks + background.nparams
        if len(self.params) < needed:
            raise ValueError(f"need at least {needed} parameters, got {len(self.params)}")

        self.xlow = xlow
        self.xhigh = xhigh
        corrected = apply_efficiency(data, self.efficiency)
        self.low = corrected.find_bin(xlow)
        self.high = corrected.find_bin(xhigh) + 1
        bins = range(self.low, self.high)

        y = np.array([max(corrected.content(j), 0.0) for j in bins])
        x = np.array([corrected.bin_center(j) for j in bins])
        sigma = np.array(
            [math.sqrt(max(data.content(j), 0.0)) * self._eff_at(j) for j in bins]
        )
        sigma[y <= 0] = 1.0
        self.ymax = float(y.max(initial=0.0))

        # The last point of the range is left out of the fit.
        self.x = x[:-1]
        self.y = y[:-1]
        self.sigma = sigma[:-1]
        if len(self.x) == 0:
            raise ValueError(f"no points between {xlow} and {xhigh}")
        self.peaks = np.zeros((npeaks, len(self.x)))
        self.sources: list[str] = []

    def _eff_at(self, j: int) -> float:
        return float(self.efficiency[j]) if 0 <= j < len(self.efficiency) else 0.0

    @property
    def free_count(self) -> int:
        """Number of parameters varied by the fit."""
        return int(self.used.sum())

    def load_peaks(self, *args: Histogram | str | Path) -> None:
        """Take one simulated spectrum per peak, as histograms or histogram files."""
        if len(args) != self.npeaks:
            raise ValueError(f"expected {self.npeaks} peak spectra, got {len(args)}")
        sources = []
        for k, source in enumerate(args):
            if isinstance(source, Histogram):
                hist = source
                sources.append("<histogram>")
            else:
                hist = load_histogram(source)
                sources.append(str(source))
            corrected = apply_efficiency(hist, self.efficiency)
            self.peaks[k] = [
                corrected.content(j) for j in range(self.low, self.low + len(self.x))
            ]
        self.sources = sources

    def background(self, i: int, params: Sequence[float]) -> float:
        """Background at point ``i`` for the full parameter vector ``params``."""
        model = self.background_model
        return model.evaluate(
            float(self.x[i]), params[self.npeaks : self.npeaks + model.nparams]
        )

    def value(self, i: int, params: Sequence[float]) -> float:
        """Model value at point ``i`` for the full parameter vector ``params``."""
        back = self.background(i, params)
        peaks = sum(
            params[k] ** 2 * self.peaks[k][i] * PEAK_UNIT for k in range(self.npeaks)
        )
        return self.background_model.combine(float(peaks), back)

    def _expand(self, free_params: Sequence[float]) -> np.ndarray:
        free = np.asarray(free_params, dtype=float)
        if free.shape != (self.free_count,):
            raise ValueError(
                f"expected {self.free_count} free parameters, got {free.size}"
            )
        full = self.params.copy()
        full[self.used] = free
        return full

    def chi_square(self, free_params: Sequence[float]) -> float:
        """Chi-square of the data against the model for the free parameters."""
        full = self._expand(free_params)
        total = 0.0
        for i, (y, sigma) in enumerate(zip(self.y, self.sigma)):
            if y == 0:
                continue
            total += ((y - self.value(i, full)) / sigma) ** 2
        if math.isnan(total):
            raise FloatingPointError(f"chi-square is NaN for parameters {list(full)}")
        return total

    def minimize(
        self, start: Sequence[float], ftol: float = 1e-6
    ) -> tuple[float, np.ndarray]:
        """Minimise the chi-square by Powell's method from ``start``.

        Returns the minimum and the best free parameters; the full parameter
        vector is updated to the best values.
        """
        initial = np.asarray(start, dtype=float)
        self._expand(initial)
        if initial.size == 0:
            return self.chi_square(initial), initial
        result = optimize.minimize(
            self.chi_square,
            initial,
            method="Powell",
            options={"ftol": ftol, "xtol": 1e-8, "maxfev": 200000},
        )
        best = np.asarray(result.x, dtype=float).reshape(initial.shape)
        self.params = self._expand(best)
        return float(result.fun), best

    def components(
        self, params: Sequence[float]
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Total model, background and scaled peaks (one row each) at every point."""
        full = np.asarray(params, dtype=float)
        total = np.array([self.value(i, full) for i in range(len(self.x))])
        back = np.array([self.background(i, full) for i in range(len(self.x))])
        amplitudes = full[: self.npeaks].reshape(-1, 1)
        scaled = self.peaks * amplitudes**2 * PEAK_UNIT
        return total, back, scaled

    def write_table(self, path: str | Path, params: Sequence[float]) -> None:
        """Write x, data, error, total, background and each peak, one point per line."""
        total, back, scaled = self.components(params)
        lines = []
        for i in range(len(self.x)):
            columns = [self.x[i], self.y[i], self.sigma[i], total[i], back[i]]
            columns.extend(scaled[:, i])
            lines.append("".join(f"{float(v):g} " for v in columns))
        Path(path).write_text("\n".join(lines) + "\n")