"""Stability model and review scheduling.

Stability is a bounded proxy for durable mastery. It maps onto a review
interval through a step table; wrong answers bypass the table and come back
after a short retry delay.
"""

import math

from .config import (
    MIN_STABILITY, MAX_STABILITY, STABILITY_GAIN, STABILITY_LOSS,
    INTERVAL_TABLE, DEFAULT_INTERVAL_DAYS, RETRY_MINUTES, MINUTE_MS, DAY_MS
)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def interval_days(stability: float) -> float:
    """Review interval for a stability value (highest threshold not above it)."""
    level = clamp(math.floor(stability + 0.5), MIN_STABILITY, MAX_STABILITY)
    days = DEFAULT_INTERVAL_DAYS
    for threshold, interval in INTERVAL_TABLE:
        if level >= threshold:
            days = interval
        else:
            break
    return days


def next_due_at(now: int, stability: float, was_correct: bool) -> int:
    """Next review timestamp in epoch ms."""
    if not was_correct:
        return now + RETRY_MINUTES * MINUTE_MS
    return now + int(round(interval_days(stability) * DAY_MS))


def next_stability(prev: float, was_correct: bool) -> float:
    """Correct answers build stability slowly; mistakes decay it faster."""
    if was_correct:
        value = prev + STABILITY_GAIN
    else:
        value = prev - STABILITY_LOSS
    # 4 decimal places: repeated 0.15 steps must land on exact thresholds
    return clamp(round(value, 4), MIN_STABILITY, MAX_STABILITY)
