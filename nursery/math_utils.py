"""Closed-form helpers for linearly changing consumption rates.

Growing creatures eat less as they mature: their appetite falls linearly
from the newborn rate to the adult rate across the maturation period. Every
consumption question in the nursery therefore reduces to integrating (or
inverting the integral of) ``rate(t) = rate0 + slope * t`` over a window.
"""

from __future__ import annotations

import math


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def linear_integral(rate: float, slope: float, duration: float) -> float:
    """Points consumed over ``duration`` seconds starting at ``rate``."""
    return rate * duration + 0.5 * slope * duration * duration


def linear_depletion_time(points: float, rate: float, slope: float) -> float:
    """Seconds until ``points`` are consumed by a linearly changing rate.

    Solves ``rate * t + slope * t**2 / 2 == points`` for the smallest
    non-negative ``t``. Returns ``math.inf`` when the rate reaches zero first.

    Args:
        points: Amount to consume (>= 0).
        rate: Consumption rate at t=0 (points per second, >= 0).
        slope: Rate change per second (usually <= 0 for growing creatures).
    """
    if points <= 0:
        return 0.0
    if slope == 0:
        return points / rate if rate > 0 else math.inf

    discriminant = rate * rate + 2.0 * slope * points
    if discriminant < 0:
        return math.inf
    denominator = rate + math.sqrt(discriminant)
    if denominator <= 0:
        return math.inf
    # Rationalised root, stable when slope is tiny.
    return 2.0 * points / denominator
