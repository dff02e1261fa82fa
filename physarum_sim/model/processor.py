"""Per-step decay and diffusion of the trail field."""

import logging
from enum import Enum

import numpy as np
from scipy.ndimage import convolve

from .field import BoundaryPolicy, Field

logger = logging.getLogger(__name__)


class ProcessOrder(Enum):
    """Fixed order in which decay and diffusion are applied each step."""
    DIFFUSE_THEN_DECAY = "diffuse_then_decay"
    DECAY_THEN_DIFFUSE = "decay_then_diffuse"


def _window_offsets(kernel_half_width: int):
    span = range(-kernel_half_width, kernel_half_width + 1)
    return [(dy, dx) for dy in span for dx in span if (dy, dx) != (0, 0)]


def neighbor_delta(values: np.ndarray, kernel_half_width: int,
                   boundary: BoundaryPolicy) -> np.ndarray:
    """
    Return mean(D) - D for the (1 + 2k) x (1 + 2k) box around each cell.

    Accumulated as a sum of neighbor differences divided by the window
    size, so a constant field yields exactly zero everywhere.

    Toroidal grids read wrapped neighbors. Clamped grids use a halo:
    neighbors outside the grid are left out of both the sum and the divisor,
    so edge cells average over fewer samples.
    """
    k = kernel_half_width
    size = 1 + 2 * k
    delta = np.zeros_like(values, dtype=np.float64)

    if BoundaryPolicy(boundary) is BoundaryPolicy.TOROIDAL:
        for dy, dx in _window_offsets(k):
            delta += np.roll(values, (-dy, -dx), axis=(0, 1)) - values
        return delta / (size * size)

    height, width = values.shape
    padded = np.pad(values, k, mode='constant')
    inside = np.pad(np.ones(values.shape, dtype=bool), k, mode='constant')
    for dy, dx in _window_offsets(k):
        window = (slice(k + dy, k + dy + height), slice(k + dx, k + dx + width))
        delta += np.where(inside[window], padded[window] - values, 0.0)
    # Counts are small integers, so the halo divisor is exact
    counts = convolve(np.ones_like(values, dtype=np.float64),
                      np.ones((size, size)), mode='constant', cval=0.0)
    return delta / counts


def mean_filter(values: np.ndarray, kernel_half_width: int,
                boundary: BoundaryPolicy) -> np.ndarray:
    """Unweighted box mean; always returns a new array."""
    return values + neighbor_delta(values, kernel_half_width, boundary)


class FieldProcessor:
    """
    Applies decay and diffusion to a Field once per step.

    Decay:     D = max(0, D - decay_rate)
    Diffusion: D(t+1) = (1 - r) * D(t) + r * mean(D(t))

    Diffusion reads a stable snapshot and writes a separate buffer, so the
    result for step t+1 depends only on the field at the end of step t.
    """

    def __init__(self, decay_rate: float, diffusion_rate: float,
                 kernel_half_width: int = 1,
                 order: ProcessOrder = ProcessOrder.DIFFUSE_THEN_DECAY):
        self.decay_rate = decay_rate
        self.diffusion_rate = diffusion_rate
        self.kernel_half_width = kernel_half_width
        self.order = ProcessOrder(order)

    def decay(self, field: Field) -> None:
        if self.decay_rate > 0:
            field.decay_all(self.decay_rate)

    def diffuse(self, field: Field) -> None:
        r = self.diffusion_rate
        if r <= 0:
            return
        snapshot = field.field
        delta = neighbor_delta(snapshot, self.kernel_half_width,
                               field.boundary)
        # (1 - r) * D + r * mean(D), written as D + r * (mean(D) - D)
        blended = snapshot + min(r, 1.0) * delta
        # Rounding in the difference sum can dip a hair below zero
        np.maximum(blended, 0.0, out=blended)
        field.replace(blended)

    def process(self, field: Field) -> None:
        """Run decay and diffusion in the configured order."""
        if self.order is ProcessOrder.DIFFUSE_THEN_DECAY:
            self.diffuse(field)
            self.decay(field)
        else:
            self.decay(field)
            self.diffuse(field)
        logger.debug("Processed field: max=%.4f total=%.4f",
                     field.max_value(), field.total())
