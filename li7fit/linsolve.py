"""Small linear solves and a single-template chi-square fit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass
class LinearSystem:
    """The system ``matrix @ x = rhs``."""

    matrix: np.ndarray
    rhs: np.ndarray

    def __post_init__(self) -> None:
        self.matrix = np.array(self.matrix, dtype=float)
        self.rhs = np.array(self.rhs, dtype=float)
        n = self.rhs.shape[0] if self.rhs.ndim == 1 else -1
        if self.matrix.shape != (n, n):
            raise ValueError(
                f"matrix of shape {self.matrix.shape} does not match "
                f"right-hand side of shape {self.rhs.shape}"
            )

    @classmethod
    def zeros(cls, n: int) -> LinearSystem:
        """An ``n`` by ``n`` system with every coefficient zero."""
        return cls(np.zeros((n, n)), np.zeros(n))

    def solve(self) -> np.ndarray:
        """Solve by Gauss-Jordan elimination without pivoting."""
        m = self.matrix.copy()
        y = self.rhs.copy()
        n = len(y)
        for j in range(n):
            pivot = m[j, j]
            if pivot == 0.0:
                raise ValueError(f"zero pivot in row {j}")
            m[j, j:] /= pivot
            y[j] /= pivot
            for i in range(n):
                if i != j:
                    factor = m[i, j]
                    m[i, j:] -= factor * m[j, j:]
                    y[i] -= factor * y[j]
        return y


@dataclass
class ChiSquare:
    """Chi-square of data against a scaled model over bins ``low`` to ``high - 1``."""

    data: Sequence[float]
    model: Sequence[float]
    low: int
    high: int

    def value(self, scale: float) -> float:
        """Chi-square using the data itself as variance, or 1 where it is zero."""
        total = 0.0
        for y, a in zip(self.data[self.low : self.high], self.model[self.low : self.high]):
            variance = y if y != 0 else 1.0
            total += (y - scale * a) ** 2 / variance
        return total


def fit_scale(
    data: Sequence[float], model: Sequence[float], low: int, high: int
) -> float:
    """Least-squares scale of ``model`` to ``data`` over bins ``low`` to ``high`` inclusive."""
    y = np.asarray(data[low : high + 1], dtype=float)
    a = np.asarray(model[low : high + 1], dtype=float)
    system = LinearSystem([[float(np.dot(a, a))]], [float(np.dot(y, a))])
    return float(system.solve()[0])