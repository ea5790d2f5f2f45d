# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Human readable formatting of simulation state."""

from decimal import Decimal, ROUND_DOWN
from typing import TYPE_CHECKING, Hashable, List, Mapping

from .decimals import round_places

if TYPE_CHECKING:
    from .simulator import DayResult

SMALL_VALUE_THRESHOLD = Decimal("0.01")


def display_decimal(value) -> str:
    """Format a value with 2 decimals, or 5 for small non-zero magnitudes.

    Digits are truncated toward zero, never rounded.

    Example:
        >>> display_decimal(Decimal("1.239"))
        '1.23'
        >>> display_decimal(Decimal("-0.004567891"))
        '-0.00456'
    """
    value = Decimal(value) if not isinstance(value, Decimal) else value
    if 0 < abs(value) < SMALL_VALUE_THRESHOLD:
        return f"{round_places(value, 5, ROUND_DOWN):.5f}"
    return f"{round_places(value, 2, ROUND_DOWN):.2f}"


def display_mapping(values: Mapping[Hashable, Decimal]) -> str:
    """Format a per-asset mapping, e.g. '{sek: 10000.00, btc: 0.20}'."""
    return "{" + ", ".join(f"{key}: {display_decimal(value)}" for key, value in values.items()) + "}"


def format_proportions(proportions: Mapping[Hashable, Decimal]) -> str:
    return f"Proportions: {display_mapping(proportions)}"


def format_day(result: 'DayResult', base_asset: Hashable) -> List[str]:
    """Report lines for one simulated day."""
    lines = ["", "", f"start of day {result.day} balance: {display_mapping(result.amounts_before)}"]
    lines.extend(f"SHOCK to rate of {key}!!!" for key in result.shocked)
    lines.append(f"market movements done, new rates: {display_mapping(result.rates)}")
    lines.append(
        f"Total value: {display_decimal(result.total_value)} | "
        f"If no trading had happened: {display_decimal(result.unrebalanced_value)} | "
        f"Trading effect: {display_decimal(result.trading_effect)}"
    )
    lines.append(f"{str(base_asset).upper()} growth: {display_decimal(result.base_growth)}")
    return lines
