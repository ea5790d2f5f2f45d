# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Configuration for portfolio rebalancing simulations.

All constants of a run (the asset set, starting holdings and rates, growth
and volatility assumptions, shock timing) live in immutable dataclasses that
are passed to the simulator. Nothing here is process-wide state.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Dict, Hashable, Optional, Tuple


class Asset(str, Enum):
    """Asset classes of the default portfolio."""
    SEK = "sek"
    BTC = "btc"
    USD = "usd"
    GOOG = "goog"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AssetConfig:
    """Starting state and stochastic assumptions for a single asset.

    Attributes:
        key: Asset identifier (e.g., Asset.BTC)
        initial_amount: Units held at the start of the run
        initial_rate: Price of one unit in the domestic currency
        annual_growth: Year-over-year growth multiplier of the long term
            trend (e.g., Decimal("1.05") for 5% a year)
        daily_std_dev: Daily standard deviation of the rate relative to its
            rolling mean price
        shock_interval_mean: Mean number of days between shocks. Together
            with shock_interval_std_dev == 0 this disables shocks.
        shock_interval_std_dev: Standard deviation of the days between shocks
    """
    key: Hashable
    initial_amount: Decimal
    initial_rate: Decimal
    annual_growth: Decimal = Decimal(1)
    daily_std_dev: Decimal = Decimal(0)
    shock_interval_mean: float = 0
    shock_interval_std_dev: float = 0

    def __post_init__(self):
        if self.initial_amount < 0:
            raise ValueError(f"Initial amount of {self.key} cannot be negative: {self.initial_amount}")
        if self.initial_rate <= 0:
            raise ValueError(f"Initial rate of {self.key} must be positive: {self.initial_rate}")
        if self.annual_growth <= 0:
            raise ValueError(f"Annual growth of {self.key} must be positive: {self.annual_growth}")
        if self.daily_std_dev < 0:
            raise ValueError(f"Daily std dev of {self.key} cannot be negative: {self.daily_std_dev}")
        if self.shock_interval_std_dev < 0:
            raise ValueError(
                f"Shock interval std dev of {self.key} cannot be negative: "
                f"{self.shock_interval_std_dev}"
            )

    @property
    def has_shocks(self) -> bool:
        """Whether this asset has a shock process at all."""
        return not (self.shock_interval_mean == 0 and self.shock_interval_std_dev == 0)


@dataclass(frozen=True)
class SimulationConfig:
    """Configuration for a single rebalancing simulation.

    Attributes:
        assets: Per-asset configuration, in the order assets are processed
        base_asset: Key of the domestic currency all rates are expressed in
        moving_average_period: Window of the rolling mean used to scale
            daily volatility. Default 90.
        adjustment_rate: Fraction of the gap to the trend value closed each
            day. Default 0.01.
        rate_floor: Smallest rate an asset may take. Default 0.01.
        decimal_places: Rounding precision of rates and amounts. Default 10.
        days_per_year: Days used to derive daily growth. Default 365.
        random_seed: Optional seed for reproducible runs. Default None.
    """
    assets: Tuple[AssetConfig, ...]
    base_asset: Hashable
    moving_average_period: int = 90
    adjustment_rate: Decimal = Decimal("0.01")
    rate_floor: Decimal = Decimal("0.01")
    decimal_places: int = 10
    days_per_year: int = 365
    random_seed: Optional[int] = None

    def __post_init__(self):
        # Accept any sequence but store a tuple so the config stays hashable
        object.__setattr__(self, 'assets', tuple(self.assets))

        if not self.assets:
            raise ValueError("At least one asset must be configured")

        keys = [asset.key for asset in self.assets]
        duplicates = sorted({str(key) for key in keys if keys.count(key) > 1})
        if duplicates:
            raise ValueError(f"Duplicate asset keys: {duplicates}")

        if self.base_asset not in keys:
            raise ValueError(f"Base asset {self.base_asset} is not among the configured assets")

        base = self.asset(self.base_asset)
        if base.initial_rate != 1:
            raise ValueError(f"Base asset rate must be 1, got {base.initial_rate}")
        if base.daily_std_dev != 0:
            raise ValueError(f"Base asset std dev must be 0, got {base.daily_std_dev}")
        # Base currency growth is reported relative to the initial holding
        if base.initial_amount <= 0:
            raise ValueError(f"Base asset amount must be positive, got {base.initial_amount}")

        if self.moving_average_period < 1:
            raise ValueError("moving_average_period must be at least 1")
        if not 0 < self.adjustment_rate <= 1:
            raise ValueError(f"adjustment_rate must be in (0, 1], got {self.adjustment_rate}")
        if self.rate_floor <= 0:
            raise ValueError(f"rate_floor must be positive, got {self.rate_floor}")
        if self.decimal_places < 0:
            raise ValueError("decimal_places cannot be negative")
        if self.days_per_year < 1:
            raise ValueError("days_per_year must be at least 1")

    @property
    def keys(self) -> Tuple[Hashable, ...]:
        """Asset keys in processing order."""
        return tuple(asset.key for asset in self.assets)

    def asset(self, key: Hashable) -> AssetConfig:
        """Look up the configuration of a single asset.

        Raises:
            KeyError: If the asset is not configured
        """
        for asset in self.assets:
            if asset.key == key:
                return asset
        raise KeyError(key)

    def initial_amounts(self) -> Dict[Hashable, Decimal]:
        return {asset.key: asset.initial_amount for asset in self.assets}

    def initial_rates(self) -> Dict[Hashable, Decimal]:
        return {asset.key: asset.initial_rate for asset in self.assets}

    def with_seed(self, random_seed: Optional[int]) -> 'SimulationConfig':
        """Copy of this configuration with a different random seed."""
        return replace(self, random_seed=random_seed)

    @classmethod
    def create_default(cls, random_seed: Optional[int] = None) -> 'SimulationConfig':
        """Create the default SEK based four-asset portfolio.

        Returns:
            SimulationConfig holding 10000 SEK, 1000 USD, 0.2 BTC and one
            GOOG share, with rates quoted in SEK.
        """
        usd_sek = Decimal("8.04")
        assets = (
            AssetConfig(Asset.SEK, Decimal(10000), Decimal(1)),
            AssetConfig(
                Asset.BTC, Decimal("0.2"), Decimal("90594.66"),
                # Bitcoin has historically grown by a factor of ~3.2 a year
                annual_growth=Decimal("3.2"),
                daily_std_dev=Decimal("0.07"),
                shock_interval_mean=180, shock_interval_std_dev=60,
            ),
            AssetConfig(
                Asset.USD, Decimal(1000), usd_sek,
                daily_std_dev=Decimal("0.005"),
                shock_interval_mean=250, shock_interval_std_dev=60,
            ),
            AssetConfig(
                Asset.GOOG, Decimal(1), Decimal("1137.51") * usd_sek,
                annual_growth=Decimal("1.05"),
                daily_std_dev=Decimal("0.01"),
                shock_interval_mean=100, shock_interval_std_dev=20,
            ),
        )
        return cls(assets=assets, base_asset=Asset.SEK, random_seed=random_seed)


@dataclass
class MonteCarloConfig:
    """Configuration for a batch of independent simulation paths.

    Attributes:
        num_simulations: Number of paths to run. Default 100.
        num_days: Days simulated per path. Default 365.
        random_seed: Optional seed for reproducible batches. Default None.
    """
    num_simulations: int = 100
    num_days: int = 365
    random_seed: Optional[int] = None

    def __post_init__(self):
        if self.num_simulations < 1:
            raise ValueError("num_simulations must be at least 1")
        if self.num_days < 1:
            raise ValueError("num_days must be at least 1")
