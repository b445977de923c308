"""Sample-buffer helpers shared by the audio stages."""

from __future__ import annotations

import numpy as np

from exceptions import DegenerateInputError


def as_samples(samples) -> np.ndarray:
    """View a mono PCM buffer as int64 so squares and sums cannot overflow."""
    arr = np.asarray(samples)
    if arr.ndim != 1:
        raise DegenerateInputError(f"Expected a mono 1-D sample buffer, got shape {arr.shape}")
    if arr.size and not np.issubdtype(arr.dtype, np.integer):
        raise DegenerateInputError(f"Expected integer PCM samples, got dtype {arr.dtype}")
    return arr.astype(np.int64, copy=False)


def ms_to_samples(ms: float, sample_rate: int) -> int:
    """Whole samples covered by ``ms`` milliseconds (truncated)."""
    return int(sample_rate * ms / 1000)


def frame_rms(
    samples: np.ndarray,
    start: int,
    end: int,
    frame_size: int,
    hop_size: int,
) -> np.ndarray:
    """RMS of every full frame that starts at ``start + m*hop`` and ends by ``end``.

    Args:
        samples: int64 sample buffer
        start: First frame start (inclusive)
        end: Frames must satisfy ``frame_start + frame_size <= end``
        frame_size: Frame length in samples
        hop_size: Distance between frame starts

    Returns:
        Float64 array of frame RMS values (empty when no frame fits)
    """
    start = max(0, start)
    end = min(end, samples.size)
    if frame_size <= 0 or hop_size <= 0 or start + frame_size > end:
        return np.empty(0, dtype=np.float64)

    starts = np.arange(start, end - frame_size + 1, hop_size)
    energy = np.concatenate(([0], np.cumsum(samples[start:end] * samples[start:end])))
    offsets = starts - start
    frame_energy = energy[offsets + frame_size] - energy[offsets]
    return np.sqrt(frame_energy / frame_size)


def upper_median(values: np.ndarray) -> float:
    """Element at ``len // 2`` of the sorted values."""
    return float(np.sort(values)[values.size // 2])


def sorted_quantile(values: np.ndarray, q: float) -> float:
    """Element at ``int(len * q)`` of the sorted values (no interpolation)."""
    ordered = np.sort(values)
    return float(ordered[min(int(ordered.size * q), ordered.size - 1)])
