"""Synthetic audio and video fixtures shared across test packages."""

from __future__ import annotations

import numpy as np
import pytest

SAMPLE_RATE = 44100
BURST_SAMPLES = 200


@pytest.fixture
def make_noise():
    """Factory for low-level uniform int16 noise."""

    def _make(seconds: float, amplitude: int = 100, seed: int = 0) -> np.ndarray:
        rng = np.random.default_rng(seed)
        n = int(SAMPLE_RATE * seconds)
        return rng.integers(-amplitude, amplitude + 1, size=n).astype(np.int16)

    return _make


@pytest.fixture
def make_pitch_clip(make_noise):
    """Factory for a pitch clip: ambient noise, a glove-pop burst, optional umpire call.

    The pop is a 200-sample alternating-sign burst centred on ``pop_s``. The
    call is loud noise from 0.2 s after the pop to 2.5 s after it.
    """

    def _make(
        seconds: float = 4.0,
        pop_s: float = 1.5,
        pop_amplitude: int = 20000,
        call_amplitude: int = 0,
        noise_amplitude: int = 100,
        seed: int = 0,
    ) -> np.ndarray:
        clip = make_noise(seconds, noise_amplitude, seed).astype(np.int64)
        pop = int(pop_s * SAMPLE_RATE)
        signs = np.where(np.arange(BURST_SAMPLES) % 2 == 0, 1, -1)
        clip[pop - BURST_SAMPLES // 2:pop + BURST_SAMPLES // 2] += pop_amplitude * signs
        if call_amplitude:
            rng = np.random.default_rng(seed + 1)
            start = pop + int(0.2 * SAMPLE_RATE)
            end = min(clip.size, pop + int(2.5 * SAMPLE_RATE))
            clip[start:end] += rng.integers(-call_amplitude, call_amplitude + 1, size=end - start)
        return np.clip(clip, -32768, 32767).astype(np.int16)

    return _make


@pytest.fixture
def make_frames():
    """Factory for RGB frames with a bright square moving down one row per frame."""

    def _make(count: int = 20, width: int = 64, height: int = 48, moving: bool = True):
        frames = []
        for i in range(count):
            frame = np.zeros((height, width, 3), dtype=np.uint8)
            top = 4 + (i if moving else 0)
            frame[top:top + 8, 28:36] = 255
            frames.append(frame)
        return frames

    return _make
