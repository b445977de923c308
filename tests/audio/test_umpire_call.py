"""Tests for ball/strike scoring from post-pop audio."""

from __future__ import annotations

import numpy as np
import pytest

from audio.umpire_call import decide_call, longest_active_run, score_umpire_call, tier_points
from configs.settings import UmpireCallConfig
from contracts import Call, CallConfidence
from exceptions import DegenerateInputError

SAMPLE_RATE = 44100
POP_INDEX = int(1.5 * SAMPLE_RATE)


def test_loud_sustained_call_is_high_confidence_strike(make_pitch_clip):
    samples = make_pitch_clip(call_amplitude=3000)

    result = score_umpire_call(samples, POP_INDEX)

    assert result.call is Call.STRIKE
    assert result.confidence is CallConfidence.HIGH
    assert result.score >= 4
    assert result.peak_ratio > 8
    assert result.sustained_ms > 150
    assert result.is_strike


def test_flat_ambient_noise_is_ball(make_noise):
    samples = make_noise(4.0, amplitude=100)

    result = score_umpire_call(samples, POP_INDEX)

    assert result.call is Call.BALL
    assert result.confidence is CallConfidence.HIGH
    assert result.score == 0
    assert result.sustained_ms == 0
    assert result.available_s == pytest.approx(2.5, abs=1e-3)


def test_short_clip_without_reaction_is_low_confidence_ball(make_noise):
    samples = make_noise(2.0, amplitude=100)
    pop_index = samples.size - int(0.3 * SAMPLE_RATE)

    result = score_umpire_call(samples, pop_index)

    assert result.call is Call.BALL
    assert result.confidence is CallConfidence.LOW


def test_no_post_pop_frames_gives_no_confidence(make_noise):
    samples = make_noise(2.0, amplitude=100)

    result = score_umpire_call(samples, samples.size - 1000)

    assert result.call is Call.BALL
    assert result.confidence is CallConfidence.NONE
    assert result.score == 0
    assert result.post_max == 0.0


def test_missing_pre_pop_audio_uses_default_baseline(make_noise):
    samples = make_noise(3.0, amplitude=100)

    result = score_umpire_call(samples, 100)

    assert result.baseline == 200.0


def test_pop_outside_buffer_is_rejected(make_noise):
    samples = make_noise(1.0)

    with pytest.raises(DegenerateInputError):
        score_umpire_call(samples, samples.size)
    with pytest.raises(DegenerateInputError):
        score_umpire_call(samples, -1)


def test_to_dict_rounds_report_values(make_pitch_clip):
    result = score_umpire_call(make_pitch_clip(call_amplitude=3000), POP_INDEX)

    report = result.to_dict()

    assert report["call"] == "Strike"
    assert report["confidence"] == "high"
    assert report["peak_ratio"] == round(result.peak_ratio, 1)
    assert isinstance(report["baseline"], int)


@pytest.mark.parametrize(
    "value,expected",
    [(9.0, 3), (8.0, 2), (4.5, 2), (2.6, 1), (2.5, 0), (0.0, 0)],
)
def test_tier_points_use_strict_thresholds(value, expected):
    assert tier_points(value, UmpireCallConfig().peak_ratio_tiers) == expected


def test_longest_active_run():
    rms = np.array([1.0, 5.0, 5.0, 1.0, 5.0, 5.0, 5.0, 1.0])

    assert longest_active_run(rms, 2.0) == 3
    assert longest_active_run(rms, 10.0) == 0


@pytest.mark.parametrize(
    "score,peak_ratio,sustained_ms,available_s,expected",
    [
        (4, 0.0, 0, 2.0, (Call.STRIKE, CallConfidence.HIGH)),
        (2, 0.0, 0, 2.0, (Call.STRIKE, CallConfidence.MEDIUM)),
        (0, 2.0, 0, 0.3, (Call.STRIKE, CallConfidence.LOW)),
        (0, 1.0, 50, 0.3, (Call.STRIKE, CallConfidence.LOW)),
        (1, 1.0, 0, 0.3, (Call.BALL, CallConfidence.LOW)),
        (1, 1.0, 0, 0.6, (Call.BALL, CallConfidence.MEDIUM)),
        (0, 1.0, 0, 0.8, (Call.BALL, CallConfidence.HIGH)),
    ],
)
def test_decide_call(score, peak_ratio, sustained_ms, available_s, expected):
    assert decide_call(score, peak_ratio, sustained_ms, available_s, UmpireCallConfig()) == expected
