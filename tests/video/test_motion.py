"""Tests for frame-differencing video features."""

from __future__ import annotations

import math

import numpy as np
import pytest

from configs.settings import VideoConfig
from exceptions import VideoFeatureError
from video.motion import (
    edge_density,
    extract_video_features,
    flight_descriptors,
    frame_window,
    split_rgb24,
)
from video.zones import PixelZone, resolve_zones

ZONE_METRICS = ("peakPos", "lateFlight", "flightAvg", "flightCV")


def test_too_few_frames_gives_empty_map(make_frames):
    assert extract_video_features(make_frames(count=9), pop_offset_s=0.2) == {}
    assert extract_video_features([], pop_offset_s=0.0) == {}


def test_moving_object_produces_every_zone_feature(make_frames):
    features = extract_video_features(make_frames(count=20), pop_offset_s=0.5)

    for zone in ("center", "pitchLane", "catchZone"):
        for metric in ZONE_METRICS:
            assert f"{zone}_{metric}" in features
            assert math.isfinite(features[f"{zone}_{metric}"])
        assert 0.0 <= features[f"{zone}_peakPos"] <= 1.0
    assert features["center_flightAvg"] > 0
    assert features["edgeDensityPrePop"] > 0
    assert features["edgeDensityAtPop"] > 0


def test_static_scene_has_no_motion(make_frames):
    features = extract_video_features(make_frames(count=20, moving=False), pop_offset_s=0.5)

    assert features["center_peakPos"] == 0.0
    assert features["center_flightAvg"] == 0.0
    assert features["center_lateFlight"] == 1.0
    assert features["center_flightCV"] == 0.0


def test_pop_outside_frames_skips_edge_density(make_frames):
    features = extract_video_features(make_frames(count=12), pop_offset_s=5.0)

    assert "edgeDensityAtPop" not in features
    assert "center_peakPos" in features


def test_mismatched_frames_are_rejected(make_frames):
    frames = make_frames(count=12)
    frames[5] = np.zeros((10, 10, 3), dtype=np.uint8)

    with pytest.raises(VideoFeatureError):
        extract_video_features(frames, pop_offset_s=0.2)


def test_grayscale_frames_are_rejected():
    frames = [np.zeros((48, 64), dtype=np.uint8)] * 12

    with pytest.raises(VideoFeatureError):
        extract_video_features(frames, pop_offset_s=0.2)


def test_edge_density_is_zero_on_flat_image():
    zone = PixelZone("all", 0, 20, 0, 20)

    assert edge_density(np.full((20, 20), 80, dtype=np.float32), zone) == 0.0


def test_edge_density_sees_vertical_step():
    gray = np.zeros((20, 20), dtype=np.float32)
    gray[:, 10:] = 100.0

    density = edge_density(gray, PixelZone("all", 0, 20, 0, 20))

    # Central difference puts 100 on the two columns either side of the step
    assert density == pytest.approx(2 * 18 * 100.0 / (18 * 18))


def test_flight_descriptors_measure_late_motion():
    timeline = np.array([0.0, 1.0, 1.0, 3.0, 3.0, 0.0])

    descriptors = flight_descriptors(timeline, pop_index=5, flight_frames=4)

    assert descriptors["lateFlight"] == pytest.approx(3.0)
    assert descriptors["flightAvg"] == pytest.approx(2.0)
    assert descriptors["flightCV"] == pytest.approx(0.5)


def test_flight_descriptors_empty_window():
    assert flight_descriptors(np.ones(5), pop_index=0, flight_frames=4) == {}


def test_frame_window_clamps_at_clip_start():
    window = frame_window(0.4)

    assert window.start_s == 0.0
    assert window.pop_offset_s == pytest.approx(0.4)
    assert window.duration_s == pytest.approx(0.55)


def test_frame_window_spans_pre_and_post_pop():
    window = frame_window(2.5, VideoConfig(pre_pop_s=1.0, post_pop_s=0.15))

    assert window.start_s == pytest.approx(1.5)
    assert window.pop_offset_s == pytest.approx(1.0)
    assert window.duration_s == pytest.approx(1.15)


def test_split_rgb24_drops_partial_frame():
    raw = bytes(range(4 * 2 * 3)) * 2 + b"\x00\x01"

    frames = split_rgb24(raw, width=4, height=2)

    assert len(frames) == 2
    assert frames[0].shape == (2, 4, 3)
    assert frames[1][0, 0].tolist() == [0, 1, 2]


def test_resolve_zones_scales_to_pixels():
    zones = resolve_zones(VideoConfig().zones, width=100, height=50)

    assert list(zones) == ["center", "pitchLane", "catchZone"]
    assert zones["center"] == PixelZone("center", 30, 70, 10, 35)
    assert zones["center"].area == 40 * 25


def test_resolve_zones_rounds_half_pixels_up():
    zones = resolve_zones(VideoConfig().zones, width=642, height=360)

    # 642 * 0.25 = 160.5 and 642 * 0.75 = 481.5
    assert zones["catchZone"].x1 == 161
    assert zones["catchZone"].x2 == 482
