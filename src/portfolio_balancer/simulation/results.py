# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Simulation results aggregation and analysis.

This module provides SimulationResults for a single simulated path and
MonteCarloResults for percentile analysis across many paths.
"""

from typing import TYPE_CHECKING, Dict, Hashable, List, Sequence
import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from .simulator import DayResult


class SimulationResults:
    """Day-by-day record of one simulated path.

    Example:
        >>> results = simulator.run(365, emit=False)
        >>> df = results.to_dataframe()
        >>> print(df[['day', 'total_value', 'trading_effect']].tail())
    """

    SUMMARY_COLUMNS = ['total_value', 'unrebalanced_value', 'trading_effect', 'base_growth']

    def __init__(self, days: Sequence['DayResult'], keys: Sequence[Hashable]):
        """Initialize with simulated days.

        Args:
            days: DayResults in simulation order
            keys: Asset keys, in the order columns should appear
        """
        self.days = list(days)
        self.keys = list(keys)

    @property
    def num_days(self) -> int:
        return len(self.days)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per day, with per-asset rate and amount columns.

        Decimal values are converted to floats. Per-asset columns are named
        'rate_<key>' and 'amount_<key>' (holdings after rebalancing).
        """
        rows = []
        for day in self.days:
            row = {'day': day.day}
            for column in self.SUMMARY_COLUMNS:
                row[column] = float(getattr(day, column))
            for key in self.keys:
                row[f'rate_{key}'] = float(day.rates[key])
                row[f'amount_{key}'] = float(day.amounts_after[key])
            row['shocks'] = len(day.shocked)
            rows.append(row)
        return pd.DataFrame(rows, columns=self._columns())

    def _columns(self) -> List[str]:
        columns = ['day'] + self.SUMMARY_COLUMNS
        for key in self.keys:
            columns += [f'rate_{key}', f'amount_{key}']
        return columns + ['shocks']

    def shock_counts(self) -> Dict[Hashable, int]:
        """Number of shock days per asset."""
        counts = {key: 0 for key in self.keys}
        for day in self.days:
            for key in day.shocked:
                counts[key] += 1
        return counts

    def final_day(self) -> 'DayResult':
        """Last simulated day.

        Raises:
            ValueError: If no day was simulated
        """
        if not self.days:
            raise ValueError("No days were simulated")
        return self.days[-1]

    def __repr__(self) -> str:
        return f"SimulationResults(num_days={self.num_days})"


class MonteCarloResults:
    """Aggregates and analyzes results of many independent paths.

    Example:
        >>> results = MonteCarloRunner(config).run()
        >>> results.get_percentile_df('total_value').tail()
        >>> results.get_statistics('trading_effect')
    """

    # Standard percentile levels for analysis
    PERCENTILES = {
        "Top 5%": 0.95,
        "Top 25%": 0.75,
        "Median": 0.50,
        "Bottom 25%": 0.25,
        "Bottom 5%": 0.05,
    }

    def __init__(self, simulation_results: List[pd.DataFrame]):
        """Initialize with simulation results.

        Args:
            simulation_results: List of DataFrames, one per path, as
                               produced by SimulationResults.to_dataframe()
        """
        self.raw_results = simulation_results
        self.num_simulations = len(simulation_results)
        self._days = simulation_results[0]['day'].tolist() if simulation_results else []

    def _check_column(self, column: str):
        if column not in self.raw_results[0].columns:
            available = list(self.raw_results[0].columns)
            raise ValueError(f"Column '{column}' not found. Available: {available}")

    def _values(self, column: str) -> np.ndarray:
        """Matrix of shape (num_simulations, num_days) for a column."""
        return np.array([sim[column].to_numpy(dtype=float) for sim in self.raw_results])

    def get_percentile_df(self, column: str = 'total_value') -> pd.DataFrame:
        """Percentile bands of a metric per day.

        Returns:
            DataFrame with days as index and percentile names as columns

        Raises:
            ValueError: If column not found in results
        """
        if self.num_simulations == 0:
            return pd.DataFrame(columns=list(self.PERCENTILES))

        self._check_column(column)
        values = self._values(column)
        data = {name: np.percentile(values, pct * 100, axis=0) for name, pct in self.PERCENTILES.items()}
        df = pd.DataFrame(data)
        df['day'] = self._days
        return df.set_index('day')

    def get_final_values(self, column: str = 'total_value') -> np.ndarray:
        """Last day's value of a column from every path."""
        if self.num_simulations == 0:
            return np.array([])
        self._check_column(column)
        return np.array([sim[column].iloc[-1] for sim in self.raw_results], dtype=float)

    def get_statistics(self, column: str = 'total_value', day_idx: int = -1) -> Dict[str, float]:
        """Summary statistics of a column on one day across paths.

        Args:
            column: Column to analyze
            day_idx: Day position (-1 for the final day, 0 for the first)

        Returns:
            Dict with mean, std, min, max and percentile values
        """
        if self.num_simulations == 0:
            return {}

        self._check_column(column)
        values = np.array([sim[column].iloc[day_idx] for sim in self.raw_results], dtype=float)

        return {
            'mean': float(np.mean(values)),
            'std': float(np.std(values)),
            'min': float(np.min(values)),
            'max': float(np.max(values)),
            'p5': float(np.percentile(values, 5)),
            'p25': float(np.percentile(values, 25)),
            'p50': float(np.percentile(values, 50)),
            'p75': float(np.percentile(values, 75)),
            'p95': float(np.percentile(values, 95)),
        }

    def probability_rebalancing_wins(self) -> float:
        """Share of paths where rebalancing beat holding on the final day."""
        if self.num_simulations == 0:
            return 0.0
        return float(np.mean(self.get_final_values('trading_effect') > 0))

    def __repr__(self) -> str:
        return (f"MonteCarloResults(num_simulations={self.num_simulations}, "
                f"num_days={len(self._days)})")
