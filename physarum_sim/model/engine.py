"""Simulation engine for the physarum trail model."""

import copy
import logging
import math
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np

from ..errors import ConfigurationError
from .agent import Agent
from .field import BoundaryPolicy, Field, clamp, wrap
from .grid import OccupancyMap
from .processor import FieldProcessor
from .state import AgentSnapshot, SimulationState
from .steering import SteeringPolicy, make_steering

if TYPE_CHECKING:
    from ..config import SimulationConfig

logger = logging.getLogger(__name__)

TWO_PI = 2 * math.pi


class Simulation:
    """
    Orchestrates the discrete-time simulation loop.

    Owns the trail Field, the FieldProcessor, the optional OccupancyMap and
    the agent collection. Each call to step():

    1. Moves every agent along its current heading
    2. Resolves the boundary (wrap, or clamp + bounce)
    3. Rejects moves into cells held by other agents (collision mode)
    4. Deposits trail unless the move bounced or was rejected
    5. Recomputes sensors, senses the field and steers
    6. Processes the field (decay, diffusion) once
    7. Returns a state snapshot

    With deposit_mode "immediate" agents are processed in list order and
    sense deposits made earlier in the same step. With "deferred" all
    sensing reads the field as it was at the start of the step and deposits
    land after every agent has moved.
    """

    def __init__(self, config: "SimulationConfig",
                 agents: Optional[Sequence[Agent]] = None,
                 steering: Optional[SteeringPolicy] = None):
        config.validate()
        self.config = config
        self.width = config.grid.width
        self.height = config.grid.height
        self.boundary = BoundaryPolicy(config.grid.boundary)
        self.deferred = config.deposit_mode == "deferred"

        self.steering = steering if steering is not None \
            else make_steering(config.steering)
        self.processor = FieldProcessor(
            config.trail.decay_rate,
            config.trail.diffusion_rate,
            config.trail.kernel_half_width,
            config.trail.order
        )

        # Kept so reset() can restore caller-supplied agents
        self._initial_agents = (
            [copy.deepcopy(a) for a in agents] if agents is not None else None)

        self.field = Field(self.width, self.height, self.boundary)
        self.occupancy: Optional[OccupancyMap] = None
        self.agents: List[Agent] = []
        self._initialize()

        logger.info(
            "Initialized %dx%d %s grid with %d agents (steering=%s, "
            "deposit_mode=%s, collision=%s)",
            self.width, self.height, self.boundary.value, len(self.agents),
            type(self.steering).__name__, config.deposit_mode,
            config.agents.collision)

    def _initialize(self) -> None:
        self.current_step = 0
        self.rng = np.random.default_rng(self.config.seed)
        self.field.reset()
        self.occupancy = (OccupancyMap(self.width, self.height)
                          if self.config.agents.collision else None)
        self._last_counts = {'deposits': 0, 'bounces': 0, 'collisions': 0}

        if self._initial_agents is not None:
            self.agents = [copy.deepcopy(a) for a in self._initial_agents]
            self._place_given_agents()
        else:
            self.agents = self._spawn_agents()

        for agent in self.agents:
            agent.update_sensors(self.field)

    def _resolve_coordinate(self, value: float, size: int) -> float:
        if self.boundary is BoundaryPolicy.TOROIDAL:
            return wrap(value, size)
        # In-bounds positions keep their sub-cell part
        if 0 <= value < size:
            return value
        return clamp(value, size)

    def _place_given_agents(self) -> None:
        """Bring caller-supplied agents into bounds and register their cells."""
        for agent in self.agents:
            agent.x = self._resolve_coordinate(agent.x, self.width)
            agent.y = self._resolve_coordinate(agent.y, self.height)
            if self.occupancy is not None:
                cx, cy = agent.cell
                if self.occupancy.is_blocked_for(agent.agent_id, cx, cy):
                    raise ConfigurationError(
                        f"Agents {self.occupancy.occupant(cx, cy)} and "
                        f"{agent.agent_id} start in the same cell {(cx, cy)}")
                self.occupancy.place_agent(agent.agent_id, cx, cy)

    def _spawn_agents(self) -> List[Agent]:
        """Create agents with random positions and headings."""
        params = self.config.agents
        count = params.count

        if self.occupancy is not None:
            # One agent per distinct cell, random offset inside the cell
            cells = self.rng.choice(self.width * self.height, size=count,
                                    replace=False)
            xs = (cells % self.width) + self.rng.random(count)
            ys = (cells // self.width) + self.rng.random(count)
        else:
            xs = self.rng.uniform(0, self.width, count)
            ys = self.rng.uniform(0, self.height, count)
        angles = self.rng.uniform(0, TWO_PI, count)

        agents = []
        for i in range(count):
            agent = Agent(
                agent_id=i,
                x=wrap(float(xs[i]), self.width),
                y=wrap(float(ys[i]), self.height),
                angle=float(angles[i]),
                step_size=params.step_size,
                sensor_offset=params.sensor_offset,
                sensor_angle=params.sensor_angle,
                deposit_value=params.deposit_value
            )
            if self.occupancy is not None:
                self.occupancy.place_agent(agent.agent_id, *agent.cell)
            agents.append(agent)
        return agents

    def _random_heading(self) -> float:
        return float(self.rng.uniform(0, TWO_PI))

    def _move(self, agent: Agent) -> Tuple[bool, str]:
        """
        Advance one agent by one step.

        Returns (deposit_allowed, outcome) where outcome is "moved",
        "bounced" or "blocked".
        """
        nx, ny = agent.candidate_position()
        outcome = "moved"

        if self.boundary is BoundaryPolicy.TOROIDAL:
            nx = wrap(nx, self.width)
            ny = wrap(ny, self.height)
        elif not (0 <= nx < self.width and 0 <= ny < self.height):
            nx = clamp(nx, self.width)
            ny = clamp(ny, self.height)
            agent.angle = self._random_heading()
            outcome = "bounced"

        if self.occupancy is not None:
            new_cell = (math.floor(nx), math.floor(ny))
            if self.occupancy.is_blocked_for(agent.agent_id, *new_cell):
                # Avoid, never displace: keep position, pick a new heading
                agent.angle = self._random_heading()
                return False, "blocked"
            self.occupancy.move_agent(agent.agent_id, agent.cell, new_cell)

        agent.x = nx
        agent.y = ny
        return outcome == "moved", outcome

    def step(self) -> SimulationState:
        """Execute one discrete time step and return the resulting state."""
        self.current_step += 1
        counts = {'deposits': 0, 'bounces': 0, 'collisions': 0}

        sensed = self.field.copy() if self.deferred else self.field
        pending: List[Tuple[int, int, float]] = []
        deposited = []

        for agent in self.agents:
            can_deposit, outcome = self._move(agent)
            if outcome == "bounced":
                counts['bounces'] += 1
            elif outcome == "blocked":
                counts['collisions'] += 1

            if can_deposit:
                cx, cy = agent.cell
                if self.deferred:
                    pending.append((cx, cy, agent.deposit_value))
                else:
                    self.field.add(cx, cy, agent.deposit_value)
                counts['deposits'] += 1
            deposited.append(can_deposit)

            agent.update_sensors(self.field)
            readings = agent.sense(sensed)
            agent.angle += self.steering.turn(
                readings.front, readings.left, readings.right,
                self.config.agents.rotation_angle, self.rng)

        for cx, cy, amount in pending:
            self.field.add(cx, cy, amount)

        self.processor.process(self.field)

        self._last_counts = counts
        logger.debug("Step %d: %s", self.current_step, counts)
        return self._create_state_snapshot(deposited)

    def run(self, steps: int) -> Optional[SimulationState]:
        """Advance by a number of steps, returning the last state."""
        state = None
        for _ in range(steps):
            state = self.step()
        return state

    def reset(self) -> None:
        """Re-initialize field, occupancy and agents from config and seed."""
        self._initialize()

    def normalized_field(self) -> np.ndarray:
        return self.field.normalized()

    def snapshot(self) -> SimulationState:
        """Snapshot of the current state without advancing."""
        return self._create_state_snapshot()

    def _create_state_snapshot(
            self, deposited: Optional[List[bool]] = None) -> SimulationState:
        """Create immutable snapshot of current simulation state."""
        if deposited is None:
            deposited = [False] * len(self.agents)
        agent_snapshots = tuple(
            AgentSnapshot(
                agent_id=a.agent_id,
                x=a.x,
                y=a.y,
                angle=a.angle,
                sensors=a.sensors,
                deposited=d
            )
            for a, d in zip(self.agents, deposited)
        )

        trail = self.field.field
        metrics = {
            'trail_total': float(trail.sum()),
            'trail_max': float(trail.max()),
            'trail_mean': float(trail.mean()),
            'agents': len(self.agents),
            **self._last_counts
        }
        if self.occupancy is not None:
            metrics['occupied_cells'] = self.occupancy.count()

        return SimulationState(
            step=self.current_step,
            agents=agent_snapshots,
            trail_field=trail.copy(),
            occupancy=(self.occupancy.occupancy.copy()
                       if self.occupancy is not None else None),
            metrics=metrics
        )

    def is_finished(self) -> bool:
        """Check if simulation should terminate."""
        return self.current_step >= self.config.max_steps
