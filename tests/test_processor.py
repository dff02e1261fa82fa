"""Tests for decay and double-buffered diffusion."""

import numpy as np
import pytest

from physarum_sim.model.field import BoundaryPolicy, Field
from physarum_sim.model.processor import FieldProcessor, ProcessOrder, mean_filter


def _spike(width, height, x, y, value, boundary="toroidal"):
    field = Field(width, height, boundary)
    field.set(x, y, value)
    return field


@pytest.mark.parametrize("boundary", ["toroidal", "clamped"])
@pytest.mark.parametrize("half_width", [1, 2, 3])
@pytest.mark.parametrize("value", [2.0, 0.1, 0.7, 1 / 3, 5.3, 123.456])
def test_uniform_field_is_exactly_unchanged_by_diffusion(boundary, half_width,
                                                         value):
    field = Field(11, 7, boundary)
    field.field.fill(value)
    processor = FieldProcessor(0.0, 1.0, half_width)
    for _ in range(3):
        processor.diffuse(field)
    assert np.all(field.values == value)


@pytest.mark.parametrize("rate", [0.25, 0.5, 0.9])
def test_uniform_field_is_exactly_unchanged_by_partial_diffusion(rate):
    field = Field(6, 6, "clamped")
    field.field.fill(0.7)
    FieldProcessor(0.0, rate, 2).diffuse(field)
    assert np.all(field.values == 0.7)


def test_zero_rate_diffusion_is_a_no_op():
    field = _spike(5, 5, 2, 2, 9.0)
    before = field.values.copy()
    FieldProcessor(0.0, 0.0).process(field)
    assert np.array_equal(field.values, before)


def test_spike_spreads_evenly_over_window():
    field = _spike(5, 5, 2, 2, 9.0)
    FieldProcessor(0.0, 1.0).diffuse(field)
    expected = np.zeros((5, 5))
    expected[1:4, 1:4] = 1.0
    assert np.allclose(field.values, expected)


def test_diffusion_has_no_directional_bias():
    field = _spike(9, 9, 4, 4, 10.0)
    processor = FieldProcessor(0.0, 1.0)
    for _ in range(3):
        processor.diffuse(field)
    values = field.values
    assert np.allclose(values, values.T)
    assert np.allclose(values, np.flipud(values))
    assert np.allclose(values, np.fliplr(values))


def test_diffusion_reads_snapshot_not_updated_cells():
    # A row of [9, 0, 0, ...]: in-place sweeps would leak more than one cell
    field = Field(7, 1, "clamped")
    field.set(0, 0, 9.0)
    FieldProcessor(0.0, 1.0).diffuse(field)
    values = field.values[0]
    assert values[0] == pytest.approx(9.0 / 2)
    assert values[1] == pytest.approx(9.0 / 3)
    assert np.all(values[2:] == 0.0)


def test_toroidal_diffusion_wraps_across_edges():
    field = _spike(5, 5, 0, 0, 9.0)
    FieldProcessor(0.0, 1.0).diffuse(field)
    assert field.get(4, 4) == pytest.approx(1.0)
    assert field.get(4, 0) == pytest.approx(1.0)
    assert field.get(2, 2) == 0.0


def test_clamped_halo_divides_by_in_grid_neighbors():
    field = _spike(5, 5, 0, 0, 4.0, "clamped")
    FieldProcessor(0.0, 1.0).diffuse(field)
    assert field.get(0, 0) == pytest.approx(4.0 / 4)
    assert field.get(1, 0) == pytest.approx(4.0 / 6)
    assert field.get(1, 1) == pytest.approx(4.0 / 9)
    assert field.get(4, 4) == 0.0


def test_partial_blend():
    field = _spike(5, 5, 2, 2, 9.0)
    FieldProcessor(0.0, 0.5).diffuse(field)
    assert field.get(2, 2) == pytest.approx(0.5 * 9.0 + 0.5 * 1.0)
    assert field.get(1, 2) == pytest.approx(0.5 * 1.0)


def test_toroidal_full_diffusion_conserves_mass():
    rng = np.random.default_rng(3)
    field = Field(12, 9)
    field.field[:] = rng.random((9, 12))
    total = field.total()
    FieldProcessor(0.0, 1.0, 2).diffuse(field)
    assert field.total() == pytest.approx(total)


@pytest.mark.parametrize("boundary", ["toroidal", "clamped"])
def test_mean_filter_matches_box_average(boundary):
    rng = np.random.default_rng(8)
    values = rng.random((6, 5))
    mean = mean_filter(values, 1, boundary)
    if boundary == "toroidal":
        padded = np.pad(values, 1, mode='wrap')
        expected = sum(padded[1 + dy:7 + dy, 1 + dx:6 + dx]
                       for dy in (-1, 0, 1) for dx in (-1, 0, 1)) / 9
    else:
        expected = np.array([[values[max(0, y - 1):y + 2,
                                     max(0, x - 1):x + 2].mean()
                              for x in range(5)] for y in range(6)])
    assert np.allclose(mean, expected)


def test_mean_filter_does_not_touch_input():
    values = np.zeros((4, 4))
    values[1, 1] = 8.0
    before = values.copy()
    mean_filter(values, 1, BoundaryPolicy.TOROIDAL)
    assert np.array_equal(values, before)


def test_processing_order_matters():
    diffuse_first = _spike(5, 5, 2, 2, 9.0)
    FieldProcessor(1.0, 1.0, order=ProcessOrder.DIFFUSE_THEN_DECAY).process(
        diffuse_first)
    assert np.all(diffuse_first.values == 0.0)

    decay_first = _spike(5, 5, 2, 2, 9.0)
    FieldProcessor(1.0, 1.0, order="decay_then_diffuse").process(decay_first)
    assert decay_first.get(2, 2) == pytest.approx(8.0 / 9)
    assert decay_first.get(1, 1) == pytest.approx(8.0 / 9)


def test_processed_field_stays_non_negative():
    rng = np.random.default_rng(0)
    field = Field(10, 10, "clamped")
    field.field[:] = rng.random((10, 10))
    processor = FieldProcessor(0.3, 0.7)
    for _ in range(10):
        processor.process(field)
        assert field.values.min() >= 0.0
