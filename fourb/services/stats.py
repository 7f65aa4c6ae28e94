"""
Statistics Helpers

Small numeric helpers shared by the scoring services. Standard
deviations are population (ddof=0) throughout.
"""

import math
from typing import Iterable, Sequence

import numpy as np


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation, 0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=0))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """
    Ratio std / mean (not a percentage).

    Returns 0 for fewer than two values or a non-positive mean.
    """
    if len(values) < 2:
        return 0.0
    avg = mean(values)
    if avg <= 0:
        return 0.0
    return population_std(values) / avg


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round with ties going towards +infinity.

    Python's round() uses banker's rounding (round(70.5) == 70); scores
    and reported metrics round 0.5 upwards instead.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_score(value: float) -> int:
    return int(round_half_up(value))


def positive_values(values: Iterable) -> list[float]:
    """Drop missing and non-positive values."""
    return [float(v) for v in values if v is not None and v > 0]


def present_values(values: Iterable) -> list[float]:
    """Drop missing values only."""
    return [float(v) for v in values if v is not None]
