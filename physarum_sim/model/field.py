"""Trail field storage and boundary addressing for the physarum simulation."""

import math
from enum import Enum
from typing import Tuple

import numpy as np


class BoundaryPolicy(Enum):
    """How coordinates outside the grid are mapped back onto it."""
    TOROIDAL = "toroidal"
    CLAMPED = "clamped"


def wrap(n, m):
    """
    True mathematical modulo of n into [0, m).

    Works for ints and floats, including negative inputs. A float result that
    rounds up to exactly m (e.g. wrap(-1e-18, 10)) is mapped to 0.
    """
    r = n % m
    if r >= m:
        return r - m
    return r


def clamp(n, m):
    """Saturate n into [0, m - 1]."""
    return min(max(n, 0), m - 1)


class Field:
    """
    Scalar trail grid agents deposit into and sense from.

    Coordinate convention: (x, y) for API, [y, x] for array indexing.
    Every coordinate is floored and passed through the boundary policy
    before the array is touched, so lookups never leave the storage.
    """

    def __init__(self, width: int, height: int,
                 boundary: BoundaryPolicy = BoundaryPolicy.TOROIDAL):
        self.width = width
        self.height = height
        self.boundary = BoundaryPolicy(boundary)
        self.field = np.zeros((height, width), dtype=np.float64)

    def cell(self, x: float, y: float) -> Tuple[int, int]:
        """Map arbitrary coordinates to an in-bounds integer cell."""
        ix = math.floor(x)
        iy = math.floor(y)
        if self.boundary is BoundaryPolicy.TOROIDAL:
            return wrap(ix, self.width), wrap(iy, self.height)
        return clamp(ix, self.width), clamp(iy, self.height)

    def get(self, x: float, y: float) -> float:
        """Return trail intensity at the cell addressed by (x, y)."""
        cx, cy = self.cell(x, y)
        return float(self.field[cy, cx])

    def set(self, x: float, y: float, value: float) -> None:
        cx, cy = self.cell(x, y)
        self.field[cy, cx] = value

    def add(self, x: float, y: float, delta: float) -> None:
        """Additive write used by agent deposits."""
        cx, cy = self.cell(x, y)
        self.field[cy, cx] += delta

    def decay_all(self, rate: float) -> None:
        """Subtract rate from every cell, flooring at zero."""
        np.subtract(self.field, rate, out=self.field)
        np.maximum(self.field, 0.0, out=self.field)

    def replace(self, values: np.ndarray) -> None:
        """Swap in a freshly computed buffer of the same shape."""
        if values.shape != self.field.shape:
            raise ValueError(
                f"Buffer shape {values.shape} does not match field "
                f"shape {self.field.shape}")
        self.field = np.asarray(values, dtype=np.float64)

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the underlying [y, x] array."""
        view = self.field.view()
        view.flags.writeable = False
        return view

    def max_value(self) -> float:
        return float(self.field.max())

    def total(self) -> float:
        return float(self.field.sum())

    def normalized(self) -> np.ndarray:
        """
        Field scaled into [0, 1] by its current maximum.

        An all-zero field normalizes to all zeros instead of dividing by 0.
        """
        peak = self.field.max()
        if peak <= 0:
            return np.zeros_like(self.field)
        return self.field / peak

    def copy(self) -> "Field":
        other = Field(self.width, self.height, self.boundary)
        other.field = self.field.copy()
        return other

    def reset(self) -> None:
        """Reset the trail field to zero."""
        self.field.fill(0.0)
