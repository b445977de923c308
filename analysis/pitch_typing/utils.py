"""Statistical utility functions for pitch typing."""

from __future__ import annotations

import math
from typing import Iterable, List, Mapping, Optional, Sequence

import numpy as np


def min_max_normalize(values: Sequence[float]) -> List[float]:
    """Scale values to [0, 1] across the batch.

    A constant batch maps to all zeros (range treated as 1).

    Args:
        values: Values to normalize

    Returns:
        Normalized values in input order
    """
    if len(values) == 0:
        return []
    arr = np.asarray(values, dtype=np.float64)
    low = arr.min()
    span = arr.max() - low or 1.0
    return [float(v) for v in (arr - low) / span]


def finite_values(feature_maps: Iterable[Mapping[str, float]], name: str) -> List[float]:
    """Finite values of one feature across maps, skipping missing entries."""
    values = []
    for features in feature_maps:
        value = features.get(name)
        if value is not None and math.isfinite(value):
            values.append(float(value))
    return values


def feature_value(features: Mapping[str, float], name: str) -> Optional[float]:
    """Feature value, or None when missing or non-finite."""
    value = features.get(name)
    if value is None:
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def welch_t_statistic(a: Sequence[float], b: Sequence[float]) -> float:
    """Absolute Welch t-statistic between two samples (population variances).

    Returns 0.0 when the standard error is zero.
    """
    a_arr = np.asarray(a, dtype=np.float64)
    b_arr = np.asarray(b, dtype=np.float64)
    if a_arr.size == 0 or b_arr.size == 0:
        return 0.0
    se = math.sqrt(a_arr.var() / a_arr.size + b_arr.var() / b_arr.size)
    if se == 0:
        return 0.0
    return abs(float(a_arr.mean() - b_arr.mean())) / se


__all__ = [
    "min_max_normalize",
    "finite_values",
    "feature_value",
    "welch_t_statistic",
]
