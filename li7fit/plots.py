"""Reading fit tables and energy-loss files, plotting fits and estimating rates."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from li7fit.kinematics import production_rate

SECONDS_PER_HOUR = 3600.0
FRESCO_SIGMA = 104.57  # mb, total cross section from the reaction calculation

_BASE_COLUMNS = 5


@dataclass
class FitTable:
    """Columns of a fit table: x, data, error, total, background and each peak."""

    x: np.ndarray
    y: np.ndarray
    sigma: np.ndarray
    total: np.ndarray
    background: np.ndarray
    peaks: list[np.ndarray] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.x)

    @property
    def npeaks(self) -> int:
        """Number of peak columns."""
        return len(self.peaks)


def read_fit_table(path: str | Path) -> FitTable:
    """Read a whitespace-separated fit table, one point per line.

    Every line holds x, data, error, total and background, then one column
    per peak; all lines must have the same number of columns.
    """
    rows: list[list[float]] = []
    for number, line in enumerate(Path(path).read_text().splitlines(), start=1):
        tokens = line.split()
        if not tokens:
            continue
        if len(tokens) < _BASE_COLUMNS:
            raise ValueError(
                f"{path}:{number}: expected at least {_BASE_COLUMNS} columns, "
                f"found {len(tokens)}"
            )
        if rows and len(tokens) != len(rows[0]):
            raise ValueError(
                f"{path}:{number}: expected {len(rows[0])} columns, found {len(tokens)}"
            )
        rows.append([float(token) for token in tokens])
    if not rows:
        raise ValueError(f"{path}: no data in fit table")
    columns = np.array(rows).T
    return FitTable(
        x=columns[0],
        y=columns[1],
        sigma=columns[2],
        total=columns[3],
        background=columns[4],
        peaks=[column.copy() for column in columns[_BASE_COLUMNS:]],
    )


def plot_fit_table(
    table: FitTable,
    path: str | Path,
    xlim: tuple[float, float] | None = None,
    ylim: tuple[float, float] | None = None,
) -> None:
    """Draw the data with errors, the total fit, background and peaks into ``path``.

    The image format follows the file suffix.
    """
    figure = Figure(figsize=(8, 6))
    FigureCanvasAgg(figure)
    axes = figure.add_subplot()
    axes.errorbar(
        table.x, table.y, yerr=table.sigma, fmt="o", color="black",
        markersize=5, capsize=0, label="Data",
    )
    axes.plot(table.x, table.total, color="red", linewidth=2, label="Fit")
    axes.plot(
        table.x, table.background, color="blue", linestyle="-.", label="Background"
    )
    for k, peak in enumerate(table.peaks):
        axes.plot(
            table.x, peak, color="green", linestyle="--",
            label="Peaks" if k == 0 else None,
        )
    if xlim is not None:
        axes.set_xlim(*xlim)
    if ylim is not None:
        axes.set_ylim(*ylim)
    axes.set_xlabel("E* (MeV)")
    axes.set_ylabel("Counts")
    axes.tick_params(top=True, right=True, direction="in")
    axes.legend(frameon=False)
    figure.savefig(str(path))


def hourly_rate(efficiency: float, sigma: float = FRESCO_SIGMA) -> float:
    """Detected events per hour for cross section ``sigma`` (mb) and detector efficiency."""
    return production_rate(sigma) * SECONDS_PER_HOUR * efficiency


def read_loss_file(path: str | Path) -> tuple[str, np.ndarray, np.ndarray]:
    """Read an energy-loss table.

    The first line is a title, the next token the number of points, followed by
    that many pairs of energy and stopping power. Returns the title, energies
    and stopping powers.
    """
    text = Path(path).read_text()
    title, _, rest = text.partition("\n")
    tokens = rest.split()
    if not tokens:
        raise ValueError(f"{path}: missing number of points")
    count = int(tokens[0])
    if count < 0:
        raise ValueError(f"{path}: negative number of points {count}")
    values = tokens[1 : 1 + 2 * count]
    if len(values) < 2 * count:
        raise ValueError(
            f"{path}: expected {count} points, found {len(values) // 2}"
        )
    pairs = np.array([float(v) for v in values]).reshape(count, 2)
    return title.rstrip("\r"), pairs[:, 0].copy(), pairs[:, 1].copy()