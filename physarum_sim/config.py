"""Configuration dataclasses and YAML loader for the physarum simulation."""

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from pathlib import Path
import yaml

from .errors import ConfigurationError
from .model.field import BoundaryPolicy
from .model.processor import ProcessOrder
from .model.steering import STEERING_POLICIES

DEPOSIT_MODES = ("immediate", "deferred")


@dataclass
class GridConfig:
    width: int
    height: int
    boundary: str = "toroidal"  # "toroidal" or "clamped"


@dataclass
class AgentConfig:
    count: int
    step_size: float = 1.0
    sensor_offset: float = 9.0
    sensor_angle: float = math.pi / 4    # half-angle, radians
    rotation_angle: float = math.pi / 4  # radians
    deposit_value: float = 5.0
    collision: bool = False


@dataclass
class TrailConfig:
    decay_rate: float = 0.1
    diffusion_rate: float = 1.0     # r (0.0-1.0), 1.0 = full box mean
    kernel_half_width: int = 1      # 1 -> 3x3 window
    order: str = "diffuse_then_decay"


@dataclass
class SimulationConfig:
    grid: GridConfig
    agents: AgentConfig
    trail: TrailConfig = field(default_factory=TrailConfig)
    steering: str = "random_tie"
    deposit_mode: str = "immediate"  # "immediate" or "deferred"
    max_steps: int = 500

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = False
    snapshot_enabled: bool = True
    gif_enabled: bool = False
    gif_every: int = 5
    quiet: bool = False
    seed: Optional[int] = None
    out_dir: Path = field(default_factory=lambda: Path("./output"))

    def _check_types(self) -> None:
        grid, agents, trail = self.grid, self.agents, self.trail
        for name, value in (('grid.width', grid.width),
                            ('grid.height', grid.height),
                            ('agents.count', agents.count),
                            ('trail.kernel_half_width',
                             trail.kernel_half_width),
                            ('max_steps', self.max_steps),
                            ('gif_every', self.gif_every)):
            if not _is_int(value):
                raise ConfigurationError(
                    f"{name} must be an integer, got {value!r}")
        for name, value in (('agents.step_size', agents.step_size),
                            ('agents.sensor_offset', agents.sensor_offset),
                            ('agents.sensor_angle', agents.sensor_angle),
                            ('agents.rotation_angle', agents.rotation_angle),
                            ('agents.deposit_value', agents.deposit_value),
                            ('trail.decay_rate', trail.decay_rate),
                            ('trail.diffusion_rate', trail.diffusion_rate)):
            if not _is_number(value):
                raise ConfigurationError(
                    f"{name} must be a number, got {value!r}")
        if not isinstance(agents.collision, bool):
            raise ConfigurationError(
                f"agents.collision must be true or false, "
                f"got {agents.collision!r}")
        if self.seed is not None and not _is_int(self.seed):
            raise ConfigurationError(
                f"seed must be an integer, got {self.seed!r}")

    def validate(self) -> "SimulationConfig":
        """Fail fast on parameters the engine cannot run with."""
        self._check_types()
        grid, agents, trail = self.grid, self.agents, self.trail

        if grid.width <= 0 or grid.height <= 0:
            raise ConfigurationError(
                f"Grid dimensions must be positive, got "
                f"{grid.width}x{grid.height}")
        _check_choice("boundary", grid.boundary,
                      [b.value for b in BoundaryPolicy])

        if agents.count <= 0:
            raise ConfigurationError(
                f"Agent count must be positive, got {agents.count}")
        for name in ('step_size', 'sensor_offset', 'deposit_value'):
            if getattr(agents, name) < 0:
                raise ConfigurationError(f"agents.{name} must be >= 0")
        if agents.collision and agents.count > grid.width * grid.height:
            raise ConfigurationError(
                f"Cannot place {agents.count} colliding agents on "
                f"{grid.width * grid.height} cells")

        if trail.decay_rate < 0:
            raise ConfigurationError("trail.decay_rate must be >= 0")
        if not 0.0 <= trail.diffusion_rate <= 1.0:
            raise ConfigurationError(
                f"trail.diffusion_rate must be in [0, 1], "
                f"got {trail.diffusion_rate}")
        if trail.kernel_half_width < 1:
            raise ConfigurationError("trail.kernel_half_width must be >= 1")
        _check_choice("order", trail.order, [o.value for o in ProcessOrder])

        _check_choice("steering", self.steering, sorted(STEERING_POLICIES))
        _check_choice("deposit_mode", self.deposit_mode, DEPOSIT_MODES)

        if self.max_steps < 0:
            raise ConfigurationError("max_steps must be >= 0")
        if self.gif_every < 1:
            raise ConfigurationError("gif_every must be >= 1")
        return self


def _is_int(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _degrees(raw: Dict, key: str, default: float) -> float:
    value = raw.get(key, default)
    if not _is_number(value):
        raise ConfigurationError(
            f"agents.{key} must be a number, got {value!r}")
    return math.radians(value)


def _check_choice(name: str, value: Any, allowed) -> None:
    if value not in allowed:
        raise ConfigurationError(
            f"Unknown {name}: {value!r} (expected one of {list(allowed)})")


def _parse_agents(agents_raw: Dict) -> AgentConfig:
    """Parse agent parameters; angles are given in degrees in YAML."""
    defaults = AgentConfig(count=0)
    return AgentConfig(
        count=agents_raw['count'],
        step_size=agents_raw.get('step_size', defaults.step_size),
        sensor_offset=agents_raw.get('sensor_offset', defaults.sensor_offset),
        sensor_angle=_degrees(agents_raw, 'sensor_angle_deg', 45.0),
        rotation_angle=_degrees(agents_raw, 'rotation_angle_deg', 45.0),
        deposit_value=agents_raw.get('deposit_value', defaults.deposit_value),
        collision=agents_raw.get('collision', defaults.collision)
    )


def _parse_trail(trail_raw: Dict) -> TrailConfig:
    defaults = TrailConfig()
    return TrailConfig(
        decay_rate=trail_raw.get('decay_rate', defaults.decay_rate),
        diffusion_rate=trail_raw.get('diffusion_rate', defaults.diffusion_rate),
        kernel_half_width=trail_raw.get('kernel_half_width',
                                        defaults.kernel_half_width),
        order=trail_raw.get('order', defaults.order)
    )


def config_from_dict(raw: Dict) -> SimulationConfig:
    """Build and validate a SimulationConfig from parsed YAML data."""
    if not isinstance(raw, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    try:
        grid = GridConfig(
            width=raw['grid']['width'],
            height=raw['grid']['height'],
            boundary=raw['grid'].get('boundary', 'toroidal')
        )
        agents = _parse_agents(raw['agents'])
        trail = _parse_trail(raw.get('trail') or {})
    except KeyError as e:
        raise ConfigurationError(f"Missing required key: {e}") from e
    except (TypeError, AttributeError) as e:
        raise ConfigurationError(
            "grid, agents and trail must be mappings") from e

    # Parse simulation config
    sim_raw = raw.get('simulation', {})

    # Parse export config (optional)
    export_raw = raw.get('export', {})

    config = SimulationConfig(
        grid=grid,
        agents=agents,
        trail=trail,
        steering=sim_raw.get('steering', 'random_tie'),
        deposit_mode=sim_raw.get('deposit_mode', 'immediate'),
        max_steps=sim_raw.get('max_steps', 500),
        seed=sim_raw.get('seed'),
        csv_enabled=export_raw.get('csv', False),
        snapshot_enabled=export_raw.get('snapshot', True),
        gif_enabled=export_raw.get('gif', False),
        gif_every=export_raw.get('gif_every', 5)
    )
    return config.validate()


def load_config(config_path: Path) -> SimulationConfig:
    """Load and validate YAML configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f)
    return config_from_dict(raw)
