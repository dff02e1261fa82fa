"""Tests for trail field storage and boundary addressing."""

import numpy as np
import pytest

from physarum_sim.model.field import BoundaryPolicy, Field, clamp, wrap


@pytest.mark.parametrize("m", [1, 3, 7, 10])
def test_wrap_stays_in_range_and_is_periodic(m):
    for n in range(-35, 36):
        r = wrap(n, m)
        assert 0 <= r < m
        for k in (-3, -1, 1, 4):
            assert wrap(n + k * m, m) == r


def test_wrap_negative_is_true_modulo():
    assert wrap(-1, 10) == 9
    assert wrap(-10, 10) == 0
    assert wrap(-11, 10) == 9


def test_wrap_float_never_returns_modulus():
    r = wrap(-1e-18, 10)
    assert 0 <= r < 10
    assert wrap(-0.5, 10) == pytest.approx(9.5)
    assert wrap(10.25, 10) == pytest.approx(0.25)


def test_clamp_saturates():
    assert clamp(-4, 10) == 0
    assert clamp(3, 10) == 3
    assert clamp(10, 10) == 9
    assert clamp(8.75, 10) == 8.75
    assert clamp(9.75, 10) == 9


def test_new_field_is_zero():
    field = Field(8, 6)
    assert field.values.shape == (6, 8)
    assert field.total() == 0.0
    assert field.max_value() == 0.0


def test_toroidal_get_handles_negative_and_overflow():
    field = Field(10, 10, BoundaryPolicy.TOROIDAL)
    field.set(9, 9, 3.0)
    assert field.get(-1, -1) == 3.0
    assert field.get(19, 29) == 3.0
    assert field.get(-0.5, -0.5) == 3.0


def test_clamped_get_saturates_to_edge():
    field = Field(10, 10, "clamped")
    field.set(0, 9, 2.5)
    assert field.get(-5, 20) == 2.5
    assert field.cell(42.7, -3.1) == (9, 0)


def test_set_uses_floored_cell():
    field = Field(5, 5)
    field.set(2.9, 1.1, 4.0)
    assert field.values[1, 2] == 4.0


def test_deposit_accumulation():
    field = Field(6, 6)
    for _ in range(7):
        field.add(2, 3, 1.5)
    assert field.get(2, 3) == pytest.approx(7 * 1.5)
    mask = np.ones_like(field.values, dtype=bool)
    mask[3, 2] = False
    assert np.all(field.values[mask] == 0.0)


@pytest.mark.parametrize("value,rate", [(5.0, 1.0), (0.3, 0.5), (0.0, 0.2),
                                        (2.0, 0.0), (1.0, 1.0)])
def test_decay_floor(value, rate):
    field = Field(3, 3)
    field.set(1, 1, value)
    field.decay_all(rate)
    assert field.get(1, 1) == max(0.0, value - rate)


def test_repeated_decay_reaches_and_stays_at_zero():
    field = Field(4, 4)
    field.set(0, 0, 1.0)
    field.set(3, 2, 0.35)
    for _ in range(50):
        field.decay_all(0.1)
    assert np.all(field.values == 0.0)
    field.decay_all(0.1)
    assert np.all(field.values == 0.0)


def test_normalized_guards_empty_field():
    field = Field(4, 4)
    normalized = field.normalized()
    assert np.all(normalized == 0.0)
    assert not np.any(np.isnan(normalized))


def test_normalized_scales_by_max():
    field = Field(4, 4)
    field.set(1, 1, 4.0)
    field.set(2, 2, 1.0)
    normalized = field.normalized()
    assert normalized[1, 1] == 1.0
    assert normalized[2, 2] == 0.25


def test_values_view_is_read_only():
    field = Field(3, 3)
    with pytest.raises(ValueError):
        field.values[0, 0] = 1.0


def test_copy_is_independent():
    field = Field(3, 3)
    field.set(1, 1, 2.0)
    other = field.copy()
    other.add(1, 1, 1.0)
    assert field.get(1, 1) == 2.0
    assert other.get(1, 1) == 3.0
    assert other.boundary is field.boundary


def test_replace_rejects_wrong_shape():
    field = Field(3, 3)
    with pytest.raises(ValueError):
        field.replace(np.zeros((4, 4)))


def test_reset_clears_values():
    field = Field(3, 3)
    field.add(0, 0, 1.0)
    field.reset()
    assert field.total() == 0.0
