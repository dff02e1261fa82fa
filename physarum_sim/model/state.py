"""State snapshot dataclasses for the physarum simulation."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import numpy as np

from .agent import SensorPositions


@dataclass(frozen=True)
class AgentSnapshot:
    """Immutable snapshot of an agent's state at a given time step."""
    agent_id: int
    x: float
    y: float
    angle: float
    sensors: Optional[SensorPositions]
    deposited: bool


@dataclass
class SimulationState:
    """Complete snapshot of simulation state at a given time step."""
    step: int
    agents: Tuple[AgentSnapshot, ...]
    trail_field: np.ndarray                # Copy of trail field, [y, x]
    occupancy: Optional[np.ndarray]        # Copy of occupancy map, if any
    metrics: Dict[str, float]              # deposits, bounces, trail stats

    def normalized_field(self) -> np.ndarray:
        """Trail field scaled by its maximum; zeros if the field is empty."""
        peak = self.trail_field.max() if self.trail_field.size else 0.0
        if peak <= 0:
            return np.zeros_like(self.trail_field)
        return self.trail_field / peak

    def to_csv_rows(self) -> List[Dict]:
        """Convert to CSV-compatible format."""
        return [
            {
                "step": self.step,
                "agent_id": a.agent_id,
                "x": round(a.x, 4),
                "y": round(a.y, 4),
                "angle": round(a.angle, 6),
                "deposited": int(a.deposited)
            }
            for a in self.agents
        ]
