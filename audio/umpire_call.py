"""Ball/strike call from post-pop acoustic energy.

The umpire's verbal call is the evidence: a strike is usually announced
loudly within a couple of seconds of the glove pop, a ball is usually not
announced at all. The scorer compares post-pop frame RMS against the
pre-pop ambient level and adds up tiered points from a fixed table
(``UmpireCallConfig``). It is a rule ensemble, not a trained model, so it
behaves the same on a five-pitch session as on a five-hundred-pitch one.

A clip that ends shortly after the pop is treated as *insufficient*
evidence rather than *negative* evidence: the call may simply not have
been recorded.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from audio.utils import as_samples, frame_rms, sorted_quantile, upper_median
from configs.settings import AudioConfig, ScoreTiers, UmpireCallConfig
from contracts import Call, CallConfidence, UmpireCallResult
from exceptions import DegenerateInputError
from log_config.logger import get_logger

logger = get_logger(__name__)


def tier_points(value: float, tiers: ScoreTiers) -> int:
    """Points for the first tier whose threshold ``value`` exceeds."""
    for threshold, points in tiers:
        if value > threshold:
            return points
    return 0


def longest_active_run(rms: np.ndarray, level: float) -> int:
    """Length of the longest run of consecutive frames with RMS above ``level``."""
    longest = 0
    run = 0
    for active in rms > level:
        if active:
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return longest


def decide_call(
    score: int,
    peak_ratio: float,
    sustained_ms: float,
    available_s: float,
    config: UmpireCallConfig,
) -> tuple:
    """Map a score and evidence duration to (Call, CallConfidence)."""
    if score >= config.strike_high_score:
        return Call.STRIKE, CallConfidence.HIGH
    if score >= config.strike_medium_score:
        return Call.STRIKE, CallConfidence.MEDIUM
    if available_s < config.short_clip_s:
        # Not enough post-pop audio: fall back to a lenient test
        if peak_ratio > config.short_clip_peak_ratio or sustained_ms > config.short_clip_sustained_ms:
            return Call.STRIKE, CallConfidence.LOW
        return Call.BALL, CallConfidence.LOW
    if available_s >= config.ball_high_confidence_s:
        return Call.BALL, CallConfidence.HIGH
    return Call.BALL, CallConfidence.MEDIUM


def score_umpire_call(
    samples,
    pop_index: int,
    config: Optional[UmpireCallConfig] = None,
    audio: Optional[AudioConfig] = None,
) -> UmpireCallResult:
    """Score the umpire's reaction after a glove pop.

    Args:
        samples: Mono int16 PCM samples for the whole clip
        pop_index: Sample index of the glove pop
        config: Scoring table and windows (default: built-in defaults)
        audio: Audio format (default: 44.1 kHz)

    Returns:
        UmpireCallResult; confidence NONE when no post-pop frame is available

    Raises:
        DegenerateInputError: If pop_index is outside the buffer
    """
    config = config or UmpireCallConfig()
    sample_rate = (audio or AudioConfig()).sample_rate

    x = as_samples(samples)
    n = x.size
    if not 0 <= pop_index < n:
        raise DegenerateInputError(f"Pop index {pop_index} outside buffer of {n} samples")

    available_s = (n - pop_index) / sample_rate
    frame_size = int(sample_rate * config.frame_ms / 1000)
    hop_size = frame_size // 2

    pre_start = max(0, pop_index - int(sample_rate * config.baseline_start_s))
    pre_end = max(0, pop_index - int(sample_rate * config.baseline_end_s))
    pre_rms = frame_rms(x, pre_start, pre_end, frame_size, hop_size)
    baseline = upper_median(pre_rms) if pre_rms.size else float(config.default_baseline)

    post_start = pop_index + int(sample_rate * config.reaction_start_s)
    post_end = min(n - frame_size, pop_index + int(sample_rate * config.reaction_end_s))
    post_rms = (
        frame_rms(x, post_start, post_end, frame_size, hop_size)
        if post_start < post_end
        else np.empty(0)
    )

    if post_rms.size == 0:
        logger.debug(f"No post-pop audio after sample {pop_index} ({available_s:.2f}s left)")
        return UmpireCallResult(
            call=Call.BALL,
            confidence=CallConfidence.NONE,
            score=0,
            peak_ratio=0.0,
            p75_ratio=0.0,
            mean_ratio=0.0,
            sustained_ms=0,
            available_s=available_s,
            baseline=baseline,
            post_max=0.0,
        )

    post_max = float(post_rms.max())
    denominator = baseline + 1
    peak_ratio = post_max / denominator
    p75_ratio = sorted_quantile(post_rms, 0.75) / denominator
    mean_ratio = float(post_rms.mean()) / denominator

    hop_ms = hop_size / sample_rate * 1000
    sustained_ms = int(round(longest_active_run(post_rms, baseline * config.active_multiplier) * hop_ms))

    score = (
        tier_points(peak_ratio, config.peak_ratio_tiers)
        + tier_points(p75_ratio, config.p75_ratio_tiers)
        + tier_points(mean_ratio, config.mean_ratio_tiers)
        + tier_points(sustained_ms, config.sustained_ms_tiers)
    )
    call, confidence = decide_call(score, peak_ratio, sustained_ms, available_s, config)

    logger.debug(
        f"Umpire call {call.value}/{confidence.value}: score={score} peak={peak_ratio:.1f} "
        f"p75={p75_ratio:.1f} mean={mean_ratio:.1f} sustained={sustained_ms}ms"
    )
    return UmpireCallResult(
        call=call,
        confidence=confidence,
        score=score,
        peak_ratio=peak_ratio,
        p75_ratio=p75_ratio,
        mean_ratio=mean_ratio,
        sustained_ms=sustained_ms,
        available_s=available_s,
        baseline=baseline,
        post_max=post_max,
    )


__all__ = ["tier_points", "longest_active_run", "decide_call", "score_umpire_call"]
