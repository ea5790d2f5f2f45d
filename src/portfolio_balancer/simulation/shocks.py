# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Shock timing for asset rates.

A shock is a single day on which an asset's rate moves with ten times its
usual volatility. The days between shocks are drawn from a normal
distribution, so each asset carries a small state machine that is advanced
once per simulated day.
"""

from enum import Enum
from typing import Union

from .sampling import NormalSampler


class ShockState(Enum):
    NORMAL = "normal"
    SHOCK = "shock"


class ShockGenerator:
    """State machine that triggers shocks at random times.

    Example:
        >>> gen = ShockGenerator(interval_mean=100, interval_std_dev=20,
        ...                      sampler=NumpyNormalSampler(seed=1))
        >>> gen.advance()
        >>> gen.is_shock()
        False
    """

    def __init__(self, interval_mean: float, interval_std_dev: float, sampler: NormalSampler):
        """Initialize the generator and draw the first countdown.

        Args:
            interval_mean: Mean number of days between shocks
            interval_std_dev: Standard deviation of the days between shocks
            sampler: Source of normally distributed draws
        """
        self.interval_mean = interval_mean
        self.interval_std_dev = interval_std_dev
        self._sampler = sampler
        self.days_until_next = self._draw_interval()
        self.state = ShockState.NORMAL

    def _draw_interval(self) -> float:
        return self._sampler.sample(self.interval_mean, self.interval_std_dev)

    def advance(self) -> None:
        """Advance the state by one day."""
        if self.days_until_next <= 0:
            self.state = ShockState.SHOCK
            self.days_until_next = self._draw_interval()
        else:
            self.state = ShockState.NORMAL
            self.days_until_next -= 1

    def is_shock(self) -> bool:
        return self.state is ShockState.SHOCK

    def __repr__(self) -> str:
        return (f"ShockGenerator(state={self.state.value}, "
                f"days_until_next={self.days_until_next:.1f})")


class NoShockGenerator:
    """Generator for assets that never shock, such as the base currency."""

    state = ShockState.NORMAL

    def advance(self) -> None:
        pass

    def is_shock(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NoShockGenerator()"


def create_shock_generator(interval_mean: float,
                           interval_std_dev: float,
                           sampler: NormalSampler) -> Union[ShockGenerator, NoShockGenerator]:
    """Build the shock generator for an asset.

    Interval parameters of (0, 0) mean the asset has no shock process.
    """
    if interval_mean == 0 and interval_std_dev == 0:
        return NoShockGenerator()
    return ShockGenerator(interval_mean, interval_std_dev, sampler)
