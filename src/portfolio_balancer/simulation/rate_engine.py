# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Daily exchange rate model.

Each asset's rate follows a random walk whose step size is scaled by a
rolling mean of recent rates, with occasional shock days of ten times the
usual volatility. Every day the rate is also pulled a fixed fraction of the
way toward an ideal value that compounds along the asset's long term trend.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Hashable, Mapping, Optional, Tuple, Union

from .config import SimulationConfig
from .decimals import round_places
from .moving_average import RollingMean
from .sampling import NormalSampler, to_decimal
from .shocks import NoShockGenerator, ShockGenerator, ShockState, create_shock_generator

logger = logging.getLogger(__name__)

# Volatility multiplier on shock days
SHOCK_VOLATILITY_FACTOR = 10


@dataclass(frozen=True)
class RateUpdate:
    """Outcome of one day of market movements.

    Attributes:
        rates: New rate for every asset
        shocked: Assets that had a shock this day, in processing order
    """
    rates: Dict[Hashable, Decimal]
    shocked: Tuple[Hashable, ...] = ()


@dataclass(frozen=True)
class EngineState:
    """Per-asset engine state between days.

    Attributes:
        ideal_values: Ideal trend value per asset
        moving_averages: (count, total) of each rolling mean
        shock_states: (state, days_until_next) of each shock generator
    """
    ideal_values: Dict[Hashable, Decimal]
    moving_averages: Dict[Hashable, Tuple[int, Decimal]]
    shock_states: Dict[Hashable, Tuple[ShockState, float]]


class RateEngine:
    """Produces the next day's rate for each configured asset.

    The engine owns the per-asset state the model needs between days: the
    rolling mean of rates, the ideal trend value and the shock generator.

    Example:
        >>> config = SimulationConfig.create_default()
        >>> engine = RateEngine(config, NumpyNormalSampler(seed=7))
        >>> update = engine.update(config.initial_rates())
        >>> update.rates[Asset.SEK]
        Decimal('1.0000000000')
    """

    def __init__(self,
                 config: SimulationConfig,
                 sampler: NormalSampler,
                 shock_sampler: Optional[NormalSampler] = None):
        """Initialize per-asset state from the configuration.

        Args:
            config: Simulation configuration
            sampler: Source of the daily rate perturbations
            shock_sampler: Source of the shock intervals. Defaults to sampler.
        """
        self.config = config
        self._sampler = sampler
        shock_sampler = shock_sampler or sampler

        self.ideal_values: Dict[Hashable, Decimal] = {}
        self.daily_growth: Dict[Hashable, Decimal] = {}
        self.moving_averages: Dict[Hashable, RollingMean] = {}
        self.shock_generators: Dict[Hashable, Union[ShockGenerator, NoShockGenerator]] = {}

        exponent = Decimal(1) / Decimal(config.days_per_year)
        for asset in config.assets:
            self.ideal_values[asset.key] = asset.initial_rate
            self.daily_growth[asset.key] = asset.annual_growth ** exponent

            ma = RollingMean(config.moving_average_period, config.decimal_places)
            ma.append(asset.initial_rate)
            self.moving_averages[asset.key] = ma

            self.shock_generators[asset.key] = create_shock_generator(
                asset.shock_interval_mean, asset.shock_interval_std_dev, shock_sampler
            )

    def snapshot(self) -> EngineState:
        """Capture the per-asset state that a day of updates changes."""
        shock_states = {}
        for key, generator in self.shock_generators.items():
            if isinstance(generator, ShockGenerator):
                shock_states[key] = (generator.state, generator.days_until_next)
        return EngineState(
            ideal_values=dict(self.ideal_values),
            moving_averages={key: (ma.count, ma.total) for key, ma in self.moving_averages.items()},
            shock_states=shock_states,
        )

    def restore(self, state: EngineState) -> None:
        """Put back state captured by snapshot()."""
        self.ideal_values = dict(state.ideal_values)
        for key, (count, total) in state.moving_averages.items():
            self.moving_averages[key].count = count
            self.moving_averages[key].total = total
        for key, (shock_state, days_until_next) in state.shock_states.items():
            generator = self.shock_generators[key]
            generator.state = shock_state
            generator.days_until_next = days_until_next

    def update(self, rates: Mapping[Hashable, Decimal]) -> RateUpdate:
        """Move every asset's rate forward by one day.

        The update is all or nothing: if any asset fails, the state of the
        assets already moved is restored before the error propagates.

        Args:
            rates: Current rate per asset. Not modified.

        Returns:
            RateUpdate with the new rates and the assets that shocked
        """
        state = self.snapshot()
        new_rates = {}
        shocked = []
        try:
            for key in self.config.keys:
                new_rates[key], is_shock = self.next_rate(key, rates[key])
                if is_shock:
                    shocked.append(key)
        except BaseException:
            self.restore(state)
            raise
        return RateUpdate(rates=new_rates, shocked=tuple(shocked))

    def next_rate(self, key: Hashable, previous_rate: Decimal) -> Tuple[Decimal, bool]:
        """Compute tomorrow's rate for a single asset.

        Returns:
            Tuple of (new rate, whether the asset had a shock)
        """
        asset = self.config.asset(key)
        floor = self.config.rate_floor

        # 1: ideal value according to the long term trend
        ideal = self.ideal_values[key] * self.daily_growth[key]
        self.ideal_values[key] = ideal

        # 2: random perturbation relative to the rolling mean price
        generator = self.shock_generators[key]
        generator.advance()
        is_shock = generator.is_shock()
        std_dev = asset.daily_std_dev * SHOCK_VOLATILITY_FACTOR if is_shock else asset.daily_std_dev
        if is_shock:
            logger.info("Shock to rate of %s", key)
        s = to_decimal(self._sampler.sample(0.0, float(std_dev)))

        m = self.moving_averages[key].current_value()
        t1 = previous_rate + m * s
        if t1 <= 0:
            t1 = floor

        # 3: close in on the ideal value
        adjustment_rate = self.config.adjustment_rate
        if t1 > ideal:
            t1 = t1 - adjustment_rate * (t1 - ideal)
        else:
            t1 = t1 + adjustment_rate * (ideal - t1)

        t1 = round_places(t1, self.config.decimal_places)
        # An ideal value below the floor could otherwise drag the rate under it
        t1 = max(t1, floor)

        self.moving_averages[key].append(t1)
        logger.debug("Rate of %s: %s -> %s (ideal %s, mean %s, s %s)",
                     key, previous_rate, t1, ideal, m, s)
        return t1, is_shock
