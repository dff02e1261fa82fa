"""Model package for the physarum simulation."""

from .field import BoundaryPolicy, Field, clamp, wrap
from .processor import FieldProcessor, ProcessOrder, mean_filter, neighbor_delta
from .grid import OccupancyMap
from .agent import Agent, SensorPositions, SensorReadings
from .steering import (
    SteeringPolicy,
    RandomTieSteering,
    GradientSteering,
    make_steering,
)
from .state import AgentSnapshot, SimulationState
from .engine import Simulation

__all__ = [
    'BoundaryPolicy',
    'Field',
    'clamp',
    'wrap',
    'FieldProcessor',
    'ProcessOrder',
    'mean_filter',
    'neighbor_delta',
    'OccupancyMap',
    'Agent',
    'SensorPositions',
    'SensorReadings',
    'SteeringPolicy',
    'RandomTieSteering',
    'GradientSteering',
    'make_steering',
    'AgentSnapshot',
    'SimulationState',
    'Simulation',
]
