"""
Physarum Trail Simulation

Slime-mold style agents deposit trail on a grid, sense it with three
forward sensors and steer toward higher concentrations while the trail
decays and diffuses.

Usage:
    physarum-sim --config configs/default.yaml [options]

Examples:
    physarum-sim --config configs/default.yaml
    physarum-sim --config configs/clamped_collision.yaml --gif --out-dir results/
    physarum-sim --config configs/default.yaml --no-snapshot --csv --quiet
    physarum-sim --config configs/default.yaml --seed 42 --steps 1000
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import load_config
from .errors import ConfigurationError
from .model.engine import Simulation
from .export.csv_writer import CSVWriter
from .export.visualizer import Visualizer
from .export.reporter import Reporter

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Physarum Trail Simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    physarum-sim --config configs/default.yaml
    physarum-sim --config configs/clamped_collision.yaml --gif --out-dir results/
    physarum-sim --config configs/default.yaml --no-snapshot --csv --quiet
    physarum-sim --config configs/default.yaml --seed 42 --steps 1000
        """
    )

    # Required arguments
    parser.add_argument('--config', type=Path, required=True,
                        help='Path to YAML configuration file')

    # Optional overrides
    parser.add_argument('--steps', type=int, default=None,
                        help='Override max simulation steps')
    parser.add_argument('--out-dir', type=Path, default=Path('./output'),
                        help='Output directory for exports (default: ./output)')

    # Export toggles
    parser.add_argument('--csv', dest='csv', action='store_true', default=None,
                        help='Enable CSV trajectory export')
    parser.add_argument('--no-csv', dest='csv', action='store_false',
                        help='Disable CSV trajectory export')

    parser.add_argument('--snapshot', dest='snapshot', action='store_true', default=None,
                        help='Enable final snapshot (default)')
    parser.add_argument('--no-snapshot', dest='snapshot', action='store_false',
                        help='Disable final snapshot')

    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')

    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')

    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level for library messages')

    return parser.parse_args(argv)


def apply_overrides(config, args: argparse.Namespace) -> None:
    """Layer CLI flags over the loaded configuration, then re-check it."""
    if args.steps is not None:
        config.max_steps = args.steps
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.snapshot is not None:
        config.snapshot_enabled = args.snapshot
    config.gif_enabled = config.gif_enabled or args.gif
    config.quiet = args.quiet
    if args.seed is not None:
        config.seed = args.seed
    config.out_dir = args.out_dir
    config.validate()


def run(sim: Simulation, config, reporter: Reporter, visualizer: Visualizer,
        csv_writer: Optional[CSVWriter]):
    """Drive the simulation to max_steps; returns the last state or None."""
    final_state = None
    while not sim.is_finished():
        final_state = sim.step()
        reporter.update(final_state)
        if csv_writer is not None:
            csv_writer.append(final_state)
        # Only every gif_every-th frame is kept, plus the last one
        if config.gif_enabled and (final_state.step % config.gif_every == 0
                                   or sim.is_finished()):
            visualizer.buffer_frame(final_state)
        if final_state.step % 100 == 0:
            logger.info("step %d: trail max %.3f, %d deposits",
                        final_state.step, final_state.metrics['trail_max'],
                        final_state.metrics['deposits'])
            if not config.quiet:
                print(f"  Step {final_state.step}: trail max "
                      f"{final_state.metrics['trail_max']:.2f}")
    return final_state


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    try:
        config = load_config(args.config)
        apply_overrides(config, args)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}",
              file=sys.stderr)
        return 1
    except ConfigurationError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    quiet = config.quiet
    if not quiet:
        print(f"Physarum run: {config.grid.width}x{config.grid.height} "
              f"{config.grid.boundary} grid, {config.agents.count} agents, "
              f"{config.max_steps} steps ({config.steering} steering, "
              f"{config.deposit_mode} deposits)")

    sim = Simulation(config)
    visualizer = Visualizer(config.grid.width, config.grid.height)
    reporter = Reporter(str(args.config), config.seed)
    csv_path = config.out_dir / 'simulation_log.csv'
    csv_writer = CSVWriter(csv_path) if config.csv_enabled else None

    final_state = None
    try:
        final_state = run(sim, config, reporter, visualizer, csv_writer)
    except KeyboardInterrupt:
        final_state = sim.snapshot() if sim.current_step else None
        if not quiet:
            print(f"\nInterrupted at step {sim.current_step}.")
    finally:
        if csv_writer is not None:
            csv_writer.close()

    if final_state is None:
        return 0

    if csv_writer is not None and not quiet:
        print(f"CSV saved: {csv_path}")
    if config.snapshot_enabled:
        png_path = config.out_dir / 'final_state.png'
        visualizer.save_snapshot(final_state, png_path)
        if not quiet:
            print(f"Snapshot saved: {png_path}")
    if config.gif_enabled and visualizer.frames:
        gif_path = config.out_dir / 'simulation.gif'
        visualizer.generate_gif(gif_path, fps=10)
        if not quiet:
            print(f"Animation saved: {gif_path} "
                  f"({len(visualizer.frames)} frames)")

    if not quiet:
        print(reporter.generate_summary(final_state, config.out_dir,
                                        config.csv_enabled,
                                        config.snapshot_enabled,
                                        config.gif_enabled))
    return 0


if __name__ == '__main__':
    sys.exit(main())
