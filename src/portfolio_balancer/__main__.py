# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Entry point for running the simulation as a module: python -m portfolio_balancer
"""

import argparse
import logging
import sys

from .simulation import (
    ConfigurationError,
    MonteCarloConfig,
    MonteCarloRunner,
    PortfolioSimulator,
    SimulationConfig,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='portfolio_balancer',
        description='Simulate daily rebalancing of a multi-asset portfolio under random exchange rates',
    )
    parser.add_argument('--days', type=int, default=None,
                        help='Number of days to simulate (default: run until interrupted)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducible runs')
    parser.add_argument('--simulations', type=int, default=None,
                        help='Run a Monte Carlo batch of this many paths instead of printing days')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: WARNING)')
    return parser


def print_monte_carlo_summary(runner: MonteCarloRunner) -> None:
    results = runner.run()
    stats = results.get_statistics('total_value')
    effect = results.get_statistics('trading_effect')

    print(f"Simulations: {results.num_simulations} x {runner.config.num_days} days")
    print("Final total value:")
    for name in ('p5', 'p25', 'p50', 'p75', 'p95'):
        print(f"  {name}: {stats[name]:.2f}")
    print(f"Median trading effect: {effect['p50']:.5f}")
    print(f"Rebalancing beat holding in {results.probability_rebalancing_wins():.1%} of paths")


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.days is not None and args.days < 0:
        parser.error("--days cannot be negative")
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    runner = None
    try:
        config = SimulationConfig.create_default(random_seed=args.seed)

        if args.simulations is not None:
            mc_config = MonteCarloConfig(
                num_simulations=args.simulations,
                num_days=args.days if args.days is not None else MonteCarloConfig.num_days,
                random_seed=args.seed,
            )
            runner = MonteCarloRunner(config, mc_config)
        else:
            simulator = PortfolioSimulator(config)
    except (ConfigurationError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    if runner is not None:
        print_monte_carlo_summary(runner)
        return 0

    try:
        if args.days is None:
            simulator.run_forever()
        else:
            simulator.run(args.days)
    except KeyboardInterrupt:
        logger.info("Interrupted after day %d", simulator.day)
    return 0


if __name__ == '__main__':
    sys.exit(main())
