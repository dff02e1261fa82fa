"""Steering policies: turn sensor readings into a heading change."""

from abc import ABC, abstractmethod
from typing import Dict, Type

import numpy as np


class SteeringPolicy(ABC):
    """Strategy interface for the sense -> heading update."""

    name = ""

    @abstractmethod
    def turn(self, front: float, left: float, right: float,
             rotation_angle: float, rng: np.random.Generator) -> float:
        """Return the heading delta in radians (0.0 for no change)."""


class RandomTieSteering(SteeringPolicy):
    """
    Reference steering rule, evaluated in this exact order:

    1. front >= left and front >= right  -> keep heading
    2. front < left and front < right    -> +/- rotation, sign by coin flip
    3. right < left                      -> +rotation (toward left sensor)
    4. left < right                      -> -rotation (toward right sensor)
    5. otherwise                         -> keep heading

    Branch 2 flips a coin even when left and right differ a lot.
    GradientSteering is the deterministic alternative.
    """

    name = "random_tie"

    def turn(self, front, left, right, rotation_angle, rng):
        if front >= left and front >= right:
            return 0.0
        if front < left and front < right:
            return rotation_angle if rng.random() < 0.5 else -rotation_angle
        if right < left:
            return rotation_angle
        if left < right:
            return -rotation_angle
        return 0.0


class GradientSteering(SteeringPolicy):
    """
    Turn toward the stronger side sensor whenever front is not the strongest.

    The RNG is consulted only when left and right read exactly the same and
    both beat front.
    """

    name = "gradient"

    def turn(self, front, left, right, rotation_angle, rng):
        if front >= left and front >= right:
            return 0.0
        if left > right:
            return rotation_angle
        if right > left:
            return -rotation_angle
        return rotation_angle if rng.random() < 0.5 else -rotation_angle


STEERING_POLICIES: Dict[str, Type[SteeringPolicy]] = {
    RandomTieSteering.name: RandomTieSteering,
    GradientSteering.name: GradientSteering,
}


def make_steering(name: str) -> SteeringPolicy:
    """Instantiate a registered steering policy by name."""
    try:
        return STEERING_POLICIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown steering policy: {name!r} "
            f"(expected one of {sorted(STEERING_POLICIES)})") from None
