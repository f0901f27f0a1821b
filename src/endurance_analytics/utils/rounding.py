"""Rounding used for every reported metric.

Exact halves round toward positive infinity (2.5 -> 3, -2.5 -> -2), the
convention the dashboard figures have always used. Python's built-in
round() sends halves to the nearest even digit instead.
"""

from decimal import ROUND_FLOOR, Decimal
from typing import Union


def round_half_up(value: float, ndigits: int = 0) -> Union[int, float]:
    """
    Round ``value`` to ``ndigits`` decimals with halves rounded up.

    The value is taken at its shortest decimal representation, so 1.005
    rounds to 1.01 rather than to the 1.00 its binary form would give.

    Returns:
        An int when ``ndigits`` is 0, otherwise a float
    """
    quantum = Decimal(1).scaleb(-ndigits)
    rounded = (Decimal(repr(value)) + quantum / 2).quantize(quantum, rounding=ROUND_FLOOR)
    if ndigits == 0:
        return int(rounded)
    return float(rounded)
