"""Display width of matrix entries.

A matrix caches the widest formatted entry so a renderer can lay out
columns without formatting every value twice.
"""

import math
from typing import Iterable, Optional

from ._config import config

__all__ = ['format_entry', 'entry_width', 'max_entry_width']


def format_entry(value: float, precision: Optional[int] = None) -> str:
    """Format an entry the way its width is measured.

    Integral values print without a fractional part; other values print
    with ``precision`` decimals, trailing zeros and a dangling point removed.

    Examples:
        >>> format_entry(-3.0)
        '-3'
        >>> format_entry(-425.73)
        '-425.73'
    """
    if precision is None:
        precision = config.format.precision
    if not math.isfinite(value):
        return "%f" % value
    if value == math.floor(value):
        return "%d" % value
    text = "%.*f" % (precision, value)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def entry_width(value: float, precision: Optional[int] = None) -> int:
    """Number of characters ``value`` occupies when formatted."""
    return len(format_entry(value, precision))


def max_entry_width(values: Iterable[float], precision: Optional[int] = None) -> int:
    """Widest formatted entry of ``values`` (1 when empty)."""
    if precision is None:
        precision = config.format.precision
    return max((entry_width(v, precision) for v in values), default=1)
