"""Relative velocity estimate from glove-pop loudness.

Harder pitches pop louder. Without radar there is no absolute scale, so
each pitch is placed around a baseline speed by its amplitude z-score within
the session. The result is a coarse ranking aid, not a measurement.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from configs.settings import VelocityConfig
from contracts import VelocityEstimate


def estimate_velocities(
    amplitudes: Sequence[float],
    config: Optional[VelocityConfig] = None,
) -> List[VelocityEstimate]:
    """Estimate pitch speed for every pop amplitude in a session.

    Args:
        amplitudes: Glove-pop envelope amplitudes, one per pitch
        config: Baseline speed, gain, clamp and range (default: built-in)

    Returns:
        One VelocityEstimate per amplitude, in input order
    """
    config = config or VelocityConfig()
    if len(amplitudes) == 0:
        return []

    values = np.asarray(amplitudes, dtype=np.float64)
    mean = values.mean()
    std = values.std() or 1.0

    estimates = []
    for value in values:
        z_score = (value - mean) / std
        adjust = float(np.clip(z_score * config.z_gain, -config.max_adjust_mph, config.max_adjust_mph))
        mph = round(config.baseline_mph + adjust, 1)
        estimates.append(
            VelocityEstimate(
                mph=mph,
                low_mph=round(mph - config.range_mph, 1),
                high_mph=round(mph + config.range_mph, 1),
            )
        )
    return estimates


__all__ = ["estimate_velocities"]
