"""Physarum (slime mold) agent-based trail simulation."""

from .errors import ConfigurationError
from .config import (
    AgentConfig,
    GridConfig,
    SimulationConfig,
    TrailConfig,
    load_config,
)
from .model import Simulation

__version__ = "0.1.0"

__all__ = [
    'ConfigurationError',
    'AgentConfig',
    'GridConfig',
    'SimulationConfig',
    'TrailConfig',
    'load_config',
    'Simulation',
]
