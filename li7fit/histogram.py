"""One-dimensional fixed-width histogram with under- and overflow bins."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np


@dataclass
class Histogram:
    """Binned counts over ``[xmin, xmax)``.

    Bin 0 holds the underflow, bins ``1..nbins`` the regular range and bin
    ``nbins + 1`` the overflow. An integer histogram truncates every stored
    value towards zero.
    """

    nbins: int
    xmin: float
    xmax: float
    contents: np.ndarray | None = None
    integer: bool = False

    def __post_init__(self) -> None:
        if self.nbins < 1:
            raise ValueError(f"a histogram needs at least one bin, got {self.nbins}")
        if not self.xmax > self.xmin:
            raise ValueError(f"xmax ({self.xmax}) must exceed xmin ({self.xmin})")
        if self.contents is None:
            self.contents = np.zeros(self.nbins + 2)
        else:
            values = np.array(self.contents, dtype=float)
            if values.shape != (self.nbins + 2,):
                raise ValueError(
                    f"expected {self.nbins + 2} contents including under- and "
                    f"overflow, got shape {values.shape}"
                )
            if self.integer:
                values = np.trunc(values)
            self.contents = values

    @property
    def width(self) -> float:
        """Width of one bin."""
        return (self.xmax - self.xmin) / self.nbins

    @property
    def values(self) -> np.ndarray:
        """Contents of the regular bins, without under- and overflow."""
        return self.contents[1 : self.nbins + 1].copy()

    def find_bin(self, x: float) -> int:
        """Index of the bin that holds ``x``."""
        if x < self.xmin:
            return 0
        if x >= self.xmax:
            return self.nbins + 1
        index = 1 + int(self.nbins * (x - self.xmin) / (self.xmax - self.xmin))
        return min(index, self.nbins)

    def bin_center(self, i: int) -> float:
        """Centre of bin ``i``."""
        return self.xmin + (i - 0.5) * self.width

    def content(self, i: int) -> float:
        """Content of bin ``i``; bins outside the histogram read as zero."""
        if 0 <= i <= self.nbins + 1:
            return float(self.contents[i])
        return 0.0

    def set_content(self, i: int, value: float) -> None:
        """Store ``value`` in bin ``i``; bins outside the histogram are ignored."""
        if 0 <= i <= self.nbins + 1:
            self.contents[i] = np.trunc(value) if self.integer else value

    def rebin(self, factor: int) -> Histogram:
        """Return a histogram whose bins merge ``factor`` neighbouring bins.

        Regular bins left over when ``nbins`` is not a multiple of ``factor``
        are added to the overflow, and the upper edge shrinks to match.
        """
        if factor < 1 or factor > self.nbins:
            raise ValueError(f"rebin factor must lie in 1..{self.nbins}, got {factor}")
        newbins = self.nbins // factor
        used = newbins * factor
        merged = np.zeros(newbins + 2)
        merged[0] = self.contents[0]
        merged[1 : newbins + 1] = self.contents[1 : used + 1].reshape(newbins, factor).sum(axis=1)
        merged[newbins + 1] = self.contents[used + 1 : self.nbins + 2].sum()
        return Histogram(
            nbins=newbins,
            xmin=self.xmin,
            xmax=self.xmin + used * self.width,
            contents=merged,
            integer=self.integer,
        )

    def copy(self) -> Histogram:
        """Independent copy of this histogram."""
        return Histogram(
            nbins=self.nbins,
            xmin=self.xmin,
            xmax=self.xmax,
            contents=self.contents.copy(),
            integer=self.integer,
        )

    def to_file(self, path: str | Path) -> None:
        """Write the histogram as text: a header line, then one content per line."""
        kind = "int" if self.integer else "float"
        lines = [f"{self.nbins} {self.xmin!r} {self.xmax!r} {kind}"]
        lines.extend(repr(float(value)) for value in self.contents)
        Path(path).write_text("\n".join(lines) + "\n")


def load_histogram(path: str | Path) -> Histogram:
    """Read a histogram written by :meth:`Histogram.to_file`."""
    lines = [line for line in Path(path).read_text().splitlines() if line.strip()]
    if not lines:
        raise ValueError(f"{path}: empty histogram file")
    header = lines[0].split()
    if len(header) != 4 or header[3] not in ("int", "float"):
        raise ValueError(f"{path}: malformed header {lines[0]!r}")
    nbins = int(header[0])
    contents = [float(line) for line in lines[1:]]
    if len(contents) != nbins + 2:
        raise ValueError(f"{path}: expected {nbins + 2} contents, found {len(contents)}")
    return Histogram(
        nbins=nbins,
        xmin=float(header[1]),
        xmax=float(header[2]),
        contents=np.array(contents),
        integer=header[3] == "int",
    )