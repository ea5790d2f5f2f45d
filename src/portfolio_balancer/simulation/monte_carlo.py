# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Monte Carlo orchestration over independent simulation paths.

Each path is a fresh PortfolioSimulator with its own seed, run silently for
a fixed number of days. Results are aggregated into MonteCarloResults.
"""

import logging
from typing import Callable, List, Optional
import numpy as np

from .config import MonteCarloConfig, SimulationConfig
from .results import MonteCarloResults
from .sampling import NormalSampler, NumpyNormalSampler
from .simulator import PortfolioSimulator

logger = logging.getLogger(__name__)


class MonteCarloRunner:
    """Runs many independent rebalancing simulations.

    Example:
        >>> runner = MonteCarloRunner(
        ...     SimulationConfig.create_default(),
        ...     MonteCarloConfig(num_simulations=200, num_days=365, random_seed=1)
        ... )
        >>> results = runner.run()
        >>> print(f"Rebalancing wins: {results.probability_rebalancing_wins():.1%}")
    """

    def __init__(self,
                 simulation_config: Optional[SimulationConfig] = None,
                 config: Optional[MonteCarloConfig] = None,
                 sampler_factory: Optional[Callable[[Optional[int]], NormalSampler]] = None):
        """Initialize the runner.

        Args:
            simulation_config: Configuration shared by every path. If None,
                              uses the default portfolio.
            config: Batch configuration. If None, uses defaults.
            sampler_factory: Builds the sampler of a path from its seed.
                            Defaults to NumpyNormalSampler.
        """
        self.simulation_config = simulation_config or SimulationConfig.create_default()
        self.config = config or MonteCarloConfig()
        self.sampler_factory = sampler_factory or NumpyNormalSampler

    def path_seeds(self) -> List[Optional[int]]:
        """Seed of every path, derived from the batch seed."""
        if self.config.random_seed is None:
            return [None] * self.config.num_simulations
        seed_sequence = np.random.SeedSequence(self.config.random_seed)
        return [int(child.generate_state(1)[0]) for child in seed_sequence.spawn(self.config.num_simulations)]

    def run(self) -> MonteCarloResults:
        """Run every path and aggregate the results."""
        logger.info("Running %d simulations of %d days",
                    self.config.num_simulations, self.config.num_days)

        all_results = []
        for sim_idx, seed in enumerate(self.path_seeds()):
            path_config = self.simulation_config.with_seed(seed)
            simulator = PortfolioSimulator(path_config, sampler=self.sampler_factory(seed))
            results = simulator.run(self.config.num_days, emit=False)
            all_results.append(results.to_dataframe())
            logger.debug("Simulation %d finished with total value %s",
                         sim_idx, results.final_day().total_value)

        return MonteCarloResults(all_results)
