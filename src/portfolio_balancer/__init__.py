# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Portfolio Balancer

Simulates a portfolio of currencies, crypto and equity under random exchange
rate movements and shows what daily rebalancing to fixed proportions does to
its value compared to simply holding.

Example usage:
    from portfolio_balancer import PortfolioSimulator, SimulationConfig

    simulator = PortfolioSimulator(SimulationConfig.create_default(random_seed=1))
    results = simulator.run(365, emit=False)
    df = results.to_dataframe()
"""

from .simulation import (
    Asset,
    AssetConfig,
    SimulationConfig,
    MonteCarloConfig,
    NormalSampler,
    NumpyNormalSampler,
    FixedSampler,
    RollingMean,
    ShockGenerator,
    NoShockGenerator,
    RateEngine,
    ConfigurationError,
    Portfolio,
    PortfolioSimulator,
    DayResult,
    SimulationResults,
    MonteCarloRunner,
    MonteCarloResults,
)

# Version
from .__meta__ import __version__

__all__ = [
    # Configuration
    'Asset', 'AssetConfig', 'SimulationConfig', 'MonteCarloConfig',
    # Randomness
    'NormalSampler', 'NumpyNormalSampler', 'FixedSampler',
    # Model
    'RollingMean', 'ShockGenerator', 'NoShockGenerator', 'RateEngine',
    'ConfigurationError', 'Portfolio',
    # Simulation
    'PortfolioSimulator', 'DayResult', 'SimulationResults',
    'MonteCarloRunner', 'MonteCarloResults',
    # Version
    '__version__',
]
