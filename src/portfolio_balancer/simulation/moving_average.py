# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Constant-memory rolling mean used as the reference price for volatility."""

from decimal import Decimal

from .decimals import round_places


class RollingMean:
    """Approximate moving average over a fixed number of samples.

    Until `period` samples have been seen this is an exact running mean.
    After that each new sample replaces one average-sized slot of the total
    instead of the oldest sample, so the mean decays exponentially rather
    than sliding. Memory use is constant regardless of the period.

    Example:
        >>> ma = RollingMean(3)
        >>> for v in (1, 2, 3):
        ...     ma.append(Decimal(v))
        >>> ma.current_value()
        Decimal('2')
    """

    def __init__(self, period: int, decimal_places: int = 10):
        """Initialize an empty rolling mean.

        Args:
            period: Number of samples in the window
            decimal_places: Rounding precision applied to the decayed total

        Raises:
            ValueError: If period is less than 1
        """
        if period < 1:
            raise ValueError(f"period must be at least 1, got {period}")
        self.period = period
        self.count = 0
        self.total = Decimal(0)
        self.decimal_places = decimal_places

    def append(self, value: Decimal) -> None:
        """Record one sample."""
        if self.count >= self.period:
            decayed = (self.total / self.period) * (self.period - 1) + value
            self.total = round_places(decayed, self.decimal_places)
        else:
            self.count += 1
            self.total += value

    def current_value(self) -> Decimal:
        """Current mean of the recorded samples.

        Raises:
            RuntimeError: If no sample has been appended yet
        """
        if self.count == 0:
            raise RuntimeError("RollingMean has no samples; append a value before reading it")
        return self.total / self.count

    def __repr__(self) -> str:
        return f"RollingMean(period={self.period}, count={self.count}, total={self.total})"
