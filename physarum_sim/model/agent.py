"""Agent record and sensor geometry for the physarum model."""

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .field import Field

Cell = Tuple[int, int]


@dataclass(frozen=True)
class SensorPositions:
    """Integer cells probed by the three sensors during one step."""
    front: Cell
    left: Cell
    right: Cell


@dataclass(frozen=True)
class SensorReadings:
    front: float
    left: float
    right: float


@dataclass
class Agent:
    """
    One point particle of the slime mold.

    Position is continuous and keeps its sub-cell part; field interaction
    uses the floored cell. The heading is in radians and is never wrapped.

    Sensors sit at sensor_offset from the position, straight ahead and at
    +/- sensor_angle from the heading:

        front = position + offset * (cos(a), sin(a))
        left  = position + offset * (cos(a + s), sin(a + s))
        right = position + offset * (cos(a - s), sin(a - s))
    """
    agent_id: int
    x: float
    y: float
    angle: float
    step_size: float = 1.0
    sensor_offset: float = 9.0
    sensor_angle: float = math.pi / 4
    deposit_value: float = 5.0
    sensors: Optional[SensorPositions] = field(default=None, compare=False)

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def cell(self) -> Cell:
        """Truncated grid cell of the current position."""
        return (math.floor(self.x), math.floor(self.y))

    def candidate_position(self) -> Tuple[float, float]:
        """Position one step ahead along the current heading."""
        return (self.x + self.step_size * math.cos(self.angle),
                self.y + self.step_size * math.sin(self.angle))

    def _probe(self, theta: float, trail: Field) -> Cell:
        px = self.x + self.sensor_offset * math.cos(theta)
        py = self.y + self.sensor_offset * math.sin(theta)
        return trail.cell(px, py)

    def update_sensors(self, trail: Field) -> SensorPositions:
        """Recompute sensor cells from the current position and heading."""
        self.sensors = SensorPositions(
            front=self._probe(self.angle, trail),
            left=self._probe(self.angle + self.sensor_angle, trail),
            right=self._probe(self.angle - self.sensor_angle, trail),
        )
        return self.sensors

    def sense(self, trail: Field) -> SensorReadings:
        """Read the field at the cached sensor cells."""
        if self.sensors is None:
            self.update_sensors(trail)
        s = self.sensors
        return SensorReadings(
            front=trail.get(*s.front),
            left=trail.get(*s.left),
            right=trail.get(*s.right),
        )

    def __repr__(self) -> str:
        return (f"Agent(id={self.agent_id}, pos=({self.x:.2f}, {self.y:.2f}), "
                f"angle={self.angle:.3f})")
