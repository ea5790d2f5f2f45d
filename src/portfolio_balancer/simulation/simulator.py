# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Daily rebalancing simulation orchestrator.

This module provides the PortfolioSimulator class which moves exchange rates
forward one day at a time and rebalances the portfolio back to its target
proportions after every move.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, Hashable, Iterator, Optional, Tuple

from .config import SimulationConfig
from .display import format_day, format_proportions
from .portfolio import Portfolio, trading_effect
from .rate_engine import RateEngine
from .results import SimulationResults
from .sampling import NormalSampler, NumpyNormalSampler

logger = logging.getLogger(__name__)

Sink = Callable[[str], None]


@dataclass(frozen=True)
class DayResult:
    """Observable state of one simulated day.

    Attributes:
        day: Day index, starting at 1
        amounts_before: Holdings at the start of the day
        rates: Rates after the day's market movements
        shocked: Assets that had a shock this day
        total_value: Value of amounts_before at the new rates
        unrebalanced_value: Value of the initial holdings at the new rates
        trading_effect: total_value / unrebalanced_value - 1
        base_growth: Base currency holdings relative to the initial holdings
        amounts_after: Holdings after rebalancing
    """
    day: int
    amounts_before: Dict[Hashable, Decimal]
    rates: Dict[Hashable, Decimal]
    shocked: Tuple[Hashable, ...]
    total_value: Decimal
    unrebalanced_value: Decimal
    trading_effect: Decimal
    base_growth: Decimal
    amounts_after: Dict[Hashable, Decimal]


class PortfolioSimulator:
    """Runs the day-by-day market and rebalancing loop.

    Each day:
    1. Move every asset's rate with the RateEngine
    2. Value the current holdings at the new rates
    3. Rebalance the holdings back to the fixed proportions

    step() applies exactly one day and returns its DayResult without printing
    anything; run() and run_forever() also write report lines to the sink.

    Example:
        >>> simulator = PortfolioSimulator(SimulationConfig.create_default(random_seed=3))
        >>> results = simulator.run(30)
        >>> results.to_dataframe()['total_value'].iloc[-1]
    """

    def __init__(self,
                 config: Optional[SimulationConfig] = None,
                 sampler: Optional[NormalSampler] = None,
                 shock_sampler: Optional[NormalSampler] = None,
                 sink: Optional[Sink] = None):
        """Initialize the simulator.

        Args:
            config: Simulation configuration. If None, uses the default
                   four-asset portfolio.
            sampler: Source of rate perturbations. If None, a numpy sampler
                    seeded with config.random_seed.
            shock_sampler: Source of shock intervals. Defaults to sampler.
            sink: Receives report lines. Defaults to print.

        Raises:
            ConfigurationError: If the initial holdings have no positive value
        """
        self.config = config or SimulationConfig.create_default()
        self.sampler = sampler or NumpyNormalSampler(self.config.random_seed)
        self.sink = sink or print

        self.portfolio = Portfolio(
            self.config.initial_amounts(),
            self.config.initial_rates(),
            self.config.decimal_places,
        )
        self.rates: Dict[Hashable, Decimal] = self.config.initial_rates()
        self.rate_engine = RateEngine(self.config, self.sampler, shock_sampler)
        self.day = 0

    @property
    def amounts(self) -> Dict[Hashable, Decimal]:
        return dict(self.portfolio.amounts)

    @property
    def proportions(self):
        return self.portfolio.proportions

    def step(self) -> DayResult:
        """Simulate one day.

        A day either completes or leaves no trace: rates, holdings, the day
        counter and the rate engine's trend, rolling mean and shock state are
        all as before when any part of the day raises. The simulation can be
        stopped safely between any two calls.

        Returns:
            DayResult describing the day
        """
        day = self.day + 1
        base = self.config.base_asset
        amounts_before = self.amounts

        engine_state = self.rate_engine.snapshot()
        try:
            update = self.rate_engine.update(self.rates)
            rates = update.rates

            total = self.portfolio.value_at(rates)
            unrebalanced = self.portfolio.initial_value_at(rates)
            base_growth = amounts_before[base] / self.portfolio.initial_amounts[base]
            amounts_after = self.portfolio.rebalanced(total, rates)
            effect = trading_effect(total, unrebalanced)
        except BaseException:
            self.rate_engine.restore(engine_state)
            raise

        result = DayResult(
            day=day,
            amounts_before=amounts_before,
            rates=dict(rates),
            shocked=update.shocked,
            total_value=total,
            unrebalanced_value=unrebalanced,
            trading_effect=effect,
            base_growth=base_growth,
            amounts_after=amounts_after,
        )

        self.rates = rates
        self.portfolio.amounts = amounts_after
        self.day = day
        logger.debug("Day %d done, total value %s", day, total)
        return result

    def emit(self, result: DayResult) -> None:
        """Write the report lines of a day to the sink."""
        for line in format_day(result, self.config.base_asset):
            self.sink(line)

    def iter_days(self, num_days: Optional[int] = None) -> Iterator[DayResult]:
        """Yield DayResults, forever when num_days is None."""
        count = 0
        while num_days is None or count < num_days:
            yield self.step()
            count += 1

    def run(self, num_days: int, emit: bool = True) -> SimulationResults:
        """Simulate a fixed number of days.

        Args:
            num_days: Number of days to simulate
            emit: Whether to write report lines to the sink

        Returns:
            SimulationResults holding every simulated day
        """
        if num_days < 0:
            raise ValueError("num_days cannot be negative")

        logger.info("Simulating %d days from day %d", num_days, self.day)
        if emit:
            self.sink(format_proportions(self.proportions))

        days = []
        for result in self.iter_days(num_days):
            if emit:
                self.emit(result)
            days.append(result)
        return SimulationResults(days, self.config.keys)

    def run_forever(self) -> None:
        """Simulate and report days until interrupted."""
        logger.info("Simulating indefinitely from day %d", self.day)
        self.sink(format_proportions(self.proportions))
        for result in self.iter_days():
            self.emit(result)
