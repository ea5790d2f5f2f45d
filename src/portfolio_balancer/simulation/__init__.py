# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Rebalancing simulation under stochastic exchange rates.

This module simulates a multi-asset portfolio whose rates follow
mean-reverting random walks with occasional shocks, rebalancing the holdings
back to fixed value proportions every day.
"""

from .config import Asset, AssetConfig, SimulationConfig, MonteCarloConfig
from .sampling import NormalSampler, NumpyNormalSampler, FixedSampler
from .moving_average import RollingMean
from .shocks import ShockState, ShockGenerator, NoShockGenerator, create_shock_generator
from .rate_engine import EngineState, RateEngine, RateUpdate
from .portfolio import (
    ConfigurationError,
    Portfolio,
    compute_proportions,
    rebalance,
    total_value,
    trading_effect,
)
from .display import display_decimal, display_mapping
from .results import SimulationResults, MonteCarloResults
from .simulator import PortfolioSimulator, DayResult
from .monte_carlo import MonteCarloRunner

__all__ = [
    'Asset', 'AssetConfig', 'SimulationConfig', 'MonteCarloConfig',
    'NormalSampler', 'NumpyNormalSampler', 'FixedSampler',
    'RollingMean',
    'ShockState', 'ShockGenerator', 'NoShockGenerator', 'create_shock_generator',
    'EngineState', 'RateEngine', 'RateUpdate',
    'ConfigurationError', 'Portfolio', 'compute_proportions', 'rebalance',
    'total_value', 'trading_effect',
    'display_decimal', 'display_mapping',
    'SimulationResults', 'MonteCarloResults',
    'PortfolioSimulator', 'DayResult',
    'MonteCarloRunner',
]
