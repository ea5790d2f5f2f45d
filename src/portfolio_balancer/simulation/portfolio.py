# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Portfolio valuation and rebalancing.

Rebalancing restores fixed value proportions across assets, assuming zero
transaction costs and no slippage.
"""

import logging
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Hashable, Iterable, Mapping, Optional

from .decimals import round_places

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a configuration cannot produce a valid simulation."""


def total_value(amounts: Mapping[Hashable, Decimal],
                rates: Mapping[Hashable, Decimal],
                keys: Optional[Iterable[Hashable]] = None) -> Decimal:
    """Value of the holdings in the base currency."""
    keys = amounts.keys() if keys is None else keys
    return sum((amounts[key] * rates[key] for key in keys), Decimal(0))


def compute_proportions(amounts: Mapping[Hashable, Decimal],
                        rates: Mapping[Hashable, Decimal],
                        keys: Optional[Iterable[Hashable]] = None) -> Dict[Hashable, Decimal]:
    """Fraction of total value held in each asset.

    Args:
        amounts: Units held per asset
        rates: Rate per asset in the base currency
        keys: Assets to include, in order. Defaults to the keys of amounts.

    Returns:
        Dict mapping each asset to its share of total value

    Raises:
        ConfigurationError: If the total value is not positive
    """
    keys = list(amounts.keys() if keys is None else keys)
    values = {key: amounts[key] * rates[key] for key in keys}
    total = sum(values.values(), Decimal(0))
    if total <= 0:
        raise ConfigurationError(
            f"Total portfolio value must be positive to derive proportions, got {total}"
        )
    return {key: value / total for key, value in values.items()}


def rebalance(total: Decimal,
              rates: Mapping[Hashable, Decimal],
              proportions: Mapping[Hashable, Decimal],
              decimal_places: int = 10) -> Dict[Hashable, Decimal]:
    """Amounts that split `total` across assets by the given proportions."""
    return {
        key: round_places(total * (proportion / rates[key]), decimal_places)
        for key, proportion in proportions.items()
    }


def trading_effect(actual_value: Decimal, unrebalanced_value: Decimal) -> Decimal:
    """Relative gain of the rebalanced portfolio over untouched holdings."""
    return actual_value / unrebalanced_value - 1


class Portfolio:
    """Holdings of a portfolio with fixed target proportions.

    Proportions are derived once from the initial holdings and rates and do
    not change afterwards.

    Example:
        >>> portfolio = Portfolio({"a": Decimal(100), "b": Decimal(1)},
        ...                       {"a": Decimal(1), "b": Decimal(100)})
        >>> portfolio.proportions["a"]
        Decimal('0.5')
    """

    def __init__(self,
                 amounts: Mapping[Hashable, Decimal],
                 rates: Mapping[Hashable, Decimal],
                 decimal_places: int = 10):
        """Initialize the portfolio.

        Args:
            amounts: Initial units held per asset
            rates: Initial rate per asset, used to fix the proportions
            decimal_places: Rounding precision of rebalanced amounts

        Raises:
            ConfigurationError: If the initial holdings have no positive value
        """
        self.keys = tuple(amounts.keys())
        self.initial_amounts = MappingProxyType(dict(amounts))
        self.amounts: Dict[Hashable, Decimal] = dict(amounts)
        self.decimal_places = decimal_places
        self._proportions = MappingProxyType(compute_proportions(amounts, rates, self.keys))

    @property
    def proportions(self) -> Mapping[Hashable, Decimal]:
        """Target share of value per asset (read-only)."""
        return self._proportions

    def value_at(self, rates: Mapping[Hashable, Decimal]) -> Decimal:
        """Current holdings valued at the given rates."""
        return total_value(self.amounts, rates, self.keys)

    def initial_value_at(self, rates: Mapping[Hashable, Decimal]) -> Decimal:
        """What the initial holdings would be worth at the given rates."""
        return total_value(self.initial_amounts, rates, self.keys)

    def rebalanced(self, total: Decimal, rates: Mapping[Hashable, Decimal]) -> Dict[Hashable, Decimal]:
        """Amounts restoring the target proportions, without applying them."""
        return rebalance(total, rates, self._proportions, self.decimal_places)

    def rebalance(self, total: Decimal, rates: Mapping[Hashable, Decimal]) -> Dict[Hashable, Decimal]:
        """Replace the holdings with amounts restoring the target proportions.

        Returns:
            The new holdings
        """
        self.amounts = self.rebalanced(total, rates)
        logger.debug("Rebalanced holdings: %s", self.amounts)
        return dict(self.amounts)

    def __repr__(self) -> str:
        return f"Portfolio(amounts={self.amounts})"
