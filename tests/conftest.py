"""Shared fixtures for physarum_sim tests."""

import math

import pytest

from physarum_sim.config import (
    AgentConfig,
    GridConfig,
    SimulationConfig,
    TrailConfig,
)
from physarum_sim.model.agent import Agent


def build_config(width=10, height=10, boundary="toroidal", count=1,
                 step_size=1.0, sensor_offset=1.0, sensor_angle=math.pi / 4,
                 rotation_angle=math.pi / 4, deposit_value=5.0,
                 collision=False, decay_rate=0.0, diffusion_rate=0.0,
                 kernel_half_width=1, order="diffuse_then_decay",
                 steering="random_tie", deposit_mode="immediate",
                 max_steps=50, seed=1234):
    return SimulationConfig(
        grid=GridConfig(width=width, height=height, boundary=boundary),
        agents=AgentConfig(
            count=count,
            step_size=step_size,
            sensor_offset=sensor_offset,
            sensor_angle=sensor_angle,
            rotation_angle=rotation_angle,
            deposit_value=deposit_value,
            collision=collision,
        ),
        trail=TrailConfig(
            decay_rate=decay_rate,
            diffusion_rate=diffusion_rate,
            kernel_half_width=kernel_half_width,
            order=order,
        ),
        steering=steering,
        deposit_mode=deposit_mode,
        max_steps=max_steps,
        seed=seed,
    )


@pytest.fixture
def make_config():
    """Factory for small, quiet simulation configs."""
    return build_config


@pytest.fixture
def make_agent():
    def _make(agent_id=0, x=5.0, y=5.0, angle=0.0, step_size=1.0,
              sensor_offset=1.0, sensor_angle=math.pi / 4,
              deposit_value=5.0):
        return Agent(agent_id=agent_id, x=x, y=y, angle=angle,
                     step_size=step_size, sensor_offset=sensor_offset,
                     sensor_angle=sensor_angle, deposit_value=deposit_value)
    return _make


class NoRandom:
    """Generator stand-in that fails the test if any draw is made."""

    def random(self, *args, **kwargs):
        raise AssertionError("random draw not expected in this branch")

    uniform = random


class FixedRandom:
    """Generator stand-in whose random() always returns the same value."""

    def __init__(self, value):
        self.value = value
        self.calls = 0

    def random(self, *args, **kwargs):
        self.calls += 1
        return self.value
