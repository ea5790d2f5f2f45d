# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Decimal rounding helpers shared by the simulation."""

from decimal import Context, Decimal, ROUND_HALF_UP

# quantize() fails when the result needs more digits than the context allows,
# which long runs with fast-growing assets eventually hit at 28 digits
_ROUNDING_CONTEXT = Context(prec=100)


def round_places(value: Decimal, decimal_places: int, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Round value to a fixed number of decimal places."""
    quantum = Decimal(1).scaleb(-decimal_places)
    return value.quantize(quantum, rounding=rounding, context=_ROUNDING_CONTEXT)
