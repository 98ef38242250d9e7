"""Numeric helpers shared by the aggregators and feed adapters."""

from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves upward: 0.25 -> 0.3 and 2.5 -> 3.0, unlike round()."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale
