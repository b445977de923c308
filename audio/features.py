"""Acoustic descriptors around the glove pop.

Two extractors with deliberately different windows live here:

* ``extract_acoustic_features`` feeds the combined audio+video feature
  maps used by the k-NN classifier (energy ratio, raw crossing count).
* ``analyze_pop_signature`` feeds the session-level k-means typing
  (RMS ratio, crossings per second).

Stored features from one extractor are not comparable with the other.
"""

from __future__ import annotations

import numpy as np

from audio.utils import as_samples
from contracts import AcousticFeatures, PopSignature
from contracts.types import round_half_up
from exceptions import DegenerateInputError


def count_sign_changes(window: np.ndarray) -> int:
    """Adjacent pairs that straddle zero (0 counts as positive)."""
    if window.size < 2:
        return 0
    positive = window >= 0
    return int(np.count_nonzero(positive[1:] != positive[:-1]))


def _check_pop_index(n: int, pop_index: int) -> None:
    if not 0 <= pop_index < n:
        raise DegenerateInputError(f"Pop index {pop_index} outside buffer of {n} samples")


def extract_acoustic_features(samples, pop_index: int, sample_rate: int = 44100) -> AcousticFeatures:
    """Peak amplitude, decay ratio and zero crossings around a pop.

    Windows: pop window ±5 ms; decay window of 10 ms starting 10 ms after
    the pop; crossing window ±10 ms.

    Args:
        samples: Mono int16 PCM samples
        pop_index: Sample index of the glove pop
        sample_rate: Samples per second

    Returns:
        AcousticFeatures for the pop
    """
    x = as_samples(samples)
    n = x.size
    _check_pop_index(n, pop_index)

    half = round_half_up(sample_rate * 0.005)
    pop = x[max(0, pop_index - half):min(n, pop_index + half)]
    peak_amp = int(np.abs(pop).max()) if pop.size else 0
    pop_energy = int(np.sum(pop * pop))

    decay_start = min(n, pop_index + round_half_up(sample_rate * 0.01))
    decay = x[decay_start:min(n, decay_start + 2 * half)]
    decay_energy = int(np.sum(decay * decay))
    decay_ratio = decay_energy / pop_energy if pop_energy > 0 else 0.0

    zcr_half = round_half_up(sample_rate * 0.01)
    zcr_start = max(1, pop_index - zcr_half)
    zcr_end = min(n, pop_index + zcr_half)
    # Pairs (i-1, i) for i in [zcr_start, zcr_end)
    zcr = count_sign_changes(x[zcr_start - 1:zcr_end]) if zcr_end > zcr_start else 0

    return AcousticFeatures(peak_amp=peak_amp, decay_ratio=decay_ratio, zcr=zcr)


def analyze_pop_signature(samples, pop_index: int, sample_rate: int = 44100) -> PopSignature:
    """Pop loudness, RMS decay and crossing rate for session clustering.

    Windows: pop window ±5 ms; decay window from 5 ms to 50 ms after the pop.

    Args:
        samples: Mono int16 PCM samples
        pop_index: Sample index of the glove pop
        sample_rate: Samples per second

    Returns:
        PopSignature for the pop
    """
    x = as_samples(samples)
    n = x.size
    _check_pop_index(n, pop_index)

    half = int(sample_rate * 0.005)
    pop_start = max(0, pop_index - half)
    pop_end = min(n, pop_index + half)
    pop = x[pop_start:pop_end]
    if pop.size == 0:
        raise DegenerateInputError(f"Empty pop window at sample {pop_index}")

    peak_abs = int(np.abs(pop).max())
    rms = float(np.sqrt(np.sum(pop * pop) / pop.size))

    decay_start = pop_index + half
    decay_end = min(n, pop_index + int(sample_rate * 0.05))
    if decay_end > decay_start:
        decay = x[decay_start:decay_end]
        decay_rms = float(np.sqrt(np.sum(decay * decay) / decay.size))
    else:
        decay_rms = 0.0
    decay_ratio = decay_rms / rms if rms > 0 else 0.0

    zc_rate = count_sign_changes(pop) / (pop.size / sample_rate)

    return PopSignature(peak_abs=peak_abs, rms=rms, decay_ratio=decay_ratio, zc_rate=zc_rate)


__all__ = ["count_sign_changes", "extract_acoustic_features", "analyze_pop_signature"]
