# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Sources of normally distributed random samples.

The simulation never calls a random number generator directly. Every draw
goes through a NormalSampler so that tests can replace randomness with a
fixed sequence.
"""

from decimal import Decimal
from typing import Iterable, List, Optional, Protocol, Union, runtime_checkable
import numpy as np


@runtime_checkable
class NormalSampler(Protocol):
    """Protocol for anything that can draw from a normal distribution."""

    def sample(self, mean: float, std_dev: float) -> float:
        """Draw one value from Normal(mean, std_dev)."""
        ...


class NumpyNormalSampler:
    """Normal sampler backed by a numpy random Generator.

    Example:
        >>> sampler = NumpyNormalSampler(seed=42)
        >>> sampler.sample(0.0, 0.07)  # e.g., 0.0213
    """

    def __init__(self, seed: Optional[int] = None):
        """Initialize the sampler.

        Args:
            seed: Optional seed for reproducible draws
        """
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def sample(self, mean: float, std_dev: float) -> float:
        """Draw one value from Normal(mean, std_dev).

        A std_dev of zero returns the mean exactly.

        Raises:
            ValueError: If std_dev is negative
        """
        return float(self._rng.normal(float(mean), float(std_dev)))


class FixedSampler:
    """Sampler that ignores the distribution and replays given values.

    With a single number, every draw returns that number. With a sequence,
    draws are returned in order and the sampler raises once it runs out.
    Zero-variance draws return the mean without consuming a value, matching
    what a real normal distribution does.
    """

    def __init__(self, values: Union[float, Iterable[float]] = 0.0):
        if isinstance(values, (int, float, Decimal)):
            self._constant: Optional[float] = float(values)
            self._values: List[float] = []
        else:
            self._constant = None
            self._values = [float(v) for v in values]
        self._position = 0
        self.calls = []

    def sample(self, mean: float, std_dev: float) -> float:
        self.calls.append((mean, std_dev))
        if std_dev == 0:
            return float(mean)
        if self._constant is not None:
            return self._constant
        if self._position >= len(self._values):
            raise RuntimeError(f"FixedSampler exhausted after {len(self._values)} samples")
        value = self._values[self._position]
        self._position += 1
        return value


def to_decimal(sample: float) -> Decimal:
    """Convert a float sample to Decimal via its shortest repr."""
    return Decimal(repr(float(sample)))
