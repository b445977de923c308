"""Glove-pop detection from the audio envelope."""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from audio.envelope import compute_envelope
from audio.utils import as_samples, ms_to_samples, upper_median
from configs.settings import AudioConfig, PopDetectionConfig
from contracts import GlovePopEvent
from exceptions import DegenerateInputError
from log_config.logger import get_logger

logger = get_logger(__name__)


def estimate_noise_floor(envelope: np.ndarray, trim_fraction: float = 0.1) -> float:
    """Median envelope value over the middle of the clip.

    The first and last ``trim_fraction`` of the clip are excluded so that
    recording start/stop artifacts do not raise the floor.
    """
    start = int(envelope.size * trim_fraction)
    end = int(envelope.size * (1.0 - trim_fraction))
    if end <= start:
        return 0.0
    return upper_median(envelope[start:end])


def find_pop_candidates(
    envelope: np.ndarray,
    threshold: float,
    isolation: int,
    rise_lookback: int,
    sample_rate: int,
) -> List[GlovePopEvent]:
    """Envelope peaks above threshold that dominate their isolation window.

    Args:
        envelope: Amplitude envelope
        threshold: Minimum envelope value (inclusive)
        isolation: Half-width of the non-maximum suppression window, in samples
        rise_lookback: Distance back to the reference value for rise ratio
        sample_rate: Samples per second

    Returns:
        Candidates in sample order
    """
    n = envelope.size
    if n <= 2 * isolation:
        return []

    # Zero amplitude is never a pop, even when the threshold is zero
    above = (envelope >= threshold) & (envelope > 0)
    above[:isolation] = False
    above[n - isolation:] = False

    candidates: List[GlovePopEvent] = []
    for i in np.flatnonzero(above):
        value = envelope[i]
        if envelope[i - isolation:i + isolation + 1].max() > value:
            continue
        prior = envelope[max(0, i - rise_lookback)]
        candidates.append(
            GlovePopEvent(
                sample_index=int(i),
                time_s=i / sample_rate,
                amplitude=float(value),
                rise_ratio=float(value / (prior + 1)),
            )
        )
    return candidates


def detect_glove_pop(
    samples,
    config: Optional[PopDetectionConfig] = None,
    audio: Optional[AudioConfig] = None,
) -> Optional[GlovePopEvent]:
    """Find the single most probable glove-pop instant.

    Candidates are ranked by ``amplitude * rise_ratio`` so that a sharp
    transient beats sustained loud noise (crowd, wind) of similar level.

    Args:
        samples: Mono int16 PCM samples
        config: Detection tuning (default: built-in defaults)
        audio: Audio format (default: 44.1 kHz)

    Returns:
        The top-ranked GlovePopEvent, or None when no candidate qualifies

    Raises:
        DegenerateInputError: If the buffer is empty
    """
    config = config or PopDetectionConfig()
    sample_rate = (audio or AudioConfig()).sample_rate

    x = as_samples(samples)
    if x.size == 0:
        raise DegenerateInputError("Cannot detect a glove pop in an empty sample buffer")

    envelope = compute_envelope(x, sample_rate, config.envelope_window_ms)
    noise_floor = estimate_noise_floor(envelope, config.noise_trim_fraction)
    threshold = noise_floor * config.threshold_multiplier

    candidates = find_pop_candidates(
        envelope,
        threshold=threshold,
        isolation=ms_to_samples(config.isolation_ms, sample_rate),
        rise_lookback=ms_to_samples(config.rise_lookback_ms, sample_rate),
        sample_rate=sample_rate,
    )
    logger.debug(
        f"Glove pop scan: noise floor {noise_floor:.1f}, threshold {threshold:.1f}, "
        f"{len(candidates)} candidates"
    )
    if not candidates:
        return None

    # sorted() is stable: the earliest candidate wins ties
    return sorted(candidates, key=lambda c: c.amplitude * c.rise_ratio, reverse=True)[0]


__all__ = ["estimate_noise_floor", "find_pop_candidates", "detect_glove_pop"]
