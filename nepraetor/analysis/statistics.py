"""
Statistics Module - Robust combination of the per-view point counts.
"""

from typing import Iterable

import numpy as np


def coefficient_of_variation(counts: Iterable[int]) -> float:
    """
    Population standard deviation divided by the mean.

    Args:
        counts: Point counts, one per view

    Returns:
        Coefficient of variation, 0.0 for empty input or a zero mean
    """
    values = np.asarray(list(counts), dtype=np.float64)
    if values.size == 0:
        return 0.0
    mean = float(values.mean())
    if mean == 0.0:
        return 0.0
    return float(values.std()) / mean


def aggregate_counts(counts: Iterable[int]) -> int:
    """
    Combine per-view point counts into one, rejecting outliers.

    Counts further than one population standard deviation from the mean
    are dropped; the remaining counts are averaged and truncated.

    Args:
        counts: Point counts, one per view

    Returns:
        Aggregated point count (0 for empty input)

    Example:
        >>> aggregate_counts([10, 10, 40])
        10
    """
    values = np.asarray(list(counts), dtype=np.float64)
    if values.size == 0:
        return 0

    mean = values.mean()
    std_dev = values.std()

    retained = values[np.abs(values - mean) <= std_dev]
    if retained.size == 0:
        # All counts disagree: trust the highest
        return int(values.max())

    return int(retained.mean())
