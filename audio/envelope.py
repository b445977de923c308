"""Amplitude envelope of a PCM buffer."""

from __future__ import annotations

import numpy as np

from audio.utils import as_samples


def compute_envelope(samples, sample_rate: int = 44100, window_ms: float = 2.0) -> np.ndarray:
    """Causal moving average of absolute amplitude.

    ``envelope[i]`` averages ``|samples|`` over the trailing window ending at
    ``i``. The first ``window - 1`` values average over the samples seen so
    far, so there is no look-ahead and no second pass over the clip.

    Args:
        samples: Mono PCM samples
        sample_rate: Samples per second
        window_ms: Averaging window in milliseconds

    Returns:
        Float64 array with the same length as ``samples``, all values >= 0
    """
    x = as_samples(samples)
    if x.size == 0:
        return np.zeros(0, dtype=np.float64)

    window = max(1, int(round(sample_rate * window_ms / 1000)))
    running = np.cumsum(np.abs(x))
    sums = running.copy()
    sums[window:] -= running[:-window]

    counts = np.minimum(np.arange(1, x.size + 1), window)
    return sums / counts
