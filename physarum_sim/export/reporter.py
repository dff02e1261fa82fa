"""Summary report generation for the physarum simulation."""

from typing import Optional, TYPE_CHECKING
from pathlib import Path

import numpy as np

if TYPE_CHECKING:
    from ..model.state import SimulationState

# Cells above this fraction of the peak count as part of the trail network
NETWORK_THRESHOLD = 0.1


class Reporter:
    """Accumulates per-step metrics and formats a text report."""

    def __init__(self, config_path: str, seed: Optional[int]):
        self.config_path = config_path
        self.seed = seed
        self.peak_trail = 0.0
        self.total_deposits = 0
        self.total_bounces = 0
        self.total_collisions = 0

    def update(self, state: "SimulationState") -> None:
        """Accumulate metrics per step."""
        metrics = state.metrics
        self.peak_trail = max(self.peak_trail, metrics.get('trail_max', 0.0))
        self.total_deposits += int(metrics.get('deposits', 0))
        self.total_bounces += int(metrics.get('bounces', 0))
        self.total_collisions += int(metrics.get('collisions', 0))

    @staticmethod
    def network_coverage(state: "SimulationState") -> float:
        """Fraction of cells whose normalized trail exceeds the threshold."""
        normalized = state.normalized_field()
        if normalized.size == 0:
            return 0.0
        return float(np.count_nonzero(normalized > NETWORK_THRESHOLD)
                     / normalized.size)

    def generate_summary(self, final_state: "SimulationState",
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool) -> str:
        """Returns formatted text report."""
        metrics = final_state.metrics
        coverage = self.network_coverage(final_state) * 100

        lines = [
            "",
            "=" * 80,
            "                      PHYSARUM SIMULATION REPORT",
            "=" * 80,
            f"Configuration: {self.config_path}",
            f"Random Seed: {self.seed if self.seed is not None else 'None (random)'}",
            "",
            "SIMULATION METRICS",
            "-" * 40,
            f"Total Steps:           {final_state.step}",
            f"Agents:                {int(metrics.get('agents', 0))}",
            f"Deposits:              {self.total_deposits}",
            f"Boundary Bounces:      {self.total_bounces}",
            f"Collisions Avoided:    {self.total_collisions}",
            f"Final Trail Total:     {metrics.get('trail_total', 0):.2f}",
            f"Final Trail Max:       {metrics.get('trail_max', 0):.4f}",
            f"Peak Trail Max:        {self.peak_trail:.4f}",
            f"Network Coverage:      {coverage:.1f}% of cells",
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'simulation_log.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshot:   {output_dir / 'final_state.png'}")
        else:
            lines.append("Snapshot:   (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'simulation.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
