"""Frame-differencing motion features around the glove pop.

Video is optional enrichment for pitch typing. The decoder supplies RGB24
frames covering roughly one second before the pop to a few frames after it;
this module turns them into a flat ``{zone}_{metric}`` feature map.
Too few frames yields an empty map, never an error.
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence

import cv2
import numpy as np

from configs.settings import VideoConfig
from contracts import FrameWindow, VideoFeatureMap
from exceptions import VideoFeatureError
from log_config.logger import get_logger
from video.zones import PixelZone, resolve_zones

logger = get_logger(__name__)

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float32)


def frame_window(pop_time_s: float, config: Optional[VideoConfig] = None) -> FrameWindow:
    """Frame range to request from the decoder for a pop at ``pop_time_s``."""
    config = config or VideoConfig()
    start = max(0.0, pop_time_s - config.pre_pop_s)
    return FrameWindow(
        start_s=start,
        duration_s=pop_time_s + config.post_pop_s - start,
        pop_offset_s=pop_time_s - start,
    )


def split_rgb24(raw: bytes, width: int, height: int) -> List[np.ndarray]:
    """Split a raw rgb24 byte stream into HxWx3 frames, dropping a partial tail."""
    frame_size = width * height * 3
    data = np.frombuffer(raw, dtype=np.uint8)
    count = data.size // frame_size
    return [data[i * frame_size:(i + 1) * frame_size].reshape(height, width, 3) for i in range(count)]


def to_grayscale(frame: np.ndarray) -> np.ndarray:
    """Luma-weighted grayscale (float32)."""
    return frame.astype(np.float32, copy=False) @ LUMA_WEIGHTS


def motion_timelines(
    grays: Sequence[np.ndarray],
    zones: Dict[str, PixelZone],
    threshold: float,
) -> Dict[str, np.ndarray]:
    """Per-zone motion energy for each consecutive frame pair.

    Motion energy is the sum of absolute intensity differences over the
    zone's pixels whose difference exceeds ``threshold``.

    Returns:
        Zone name -> array of length ``len(grays) - 1``
    """
    timelines = {name: np.zeros(max(0, len(grays) - 1)) for name in zones}
    for i in range(1, len(grays)):
        diff = np.abs(grays[i] - grays[i - 1])
        for name, zone in zones.items():
            region = zone.crop(diff)
            timelines[name][i - 1] = float(region[region > threshold].sum(dtype=np.float64))
    return timelines


def edge_density(gray: np.ndarray, zone: PixelZone) -> float:
    """Mean central-difference gradient magnitude inside a zone.

    Border pixels of the zone are skipped so every gradient uses neighbours
    from within the zone.
    """
    region = np.ascontiguousarray(zone.crop(gray))
    if region.shape[0] < 3 or region.shape[1] < 3:
        return 0.0
    gx = cv2.Sobel(region, cv2.CV_32F, 1, 0, ksize=1)
    gy = cv2.Sobel(region, cv2.CV_32F, 0, 1, ksize=1)
    magnitude = cv2.magnitude(gx, gy)[1:-1, 1:-1]
    return float(magnitude.mean(dtype=np.float64))


def flight_descriptors(timeline: np.ndarray, pop_index: int, flight_frames: int) -> Dict[str, float]:
    """Descriptors of the ball-flight window just before the pop.

    Returns an empty dict when the window is empty. ``lateFlight`` compares
    the second half's mean motion with the first half's (a deceleration or
    break proxy); ``flightCV`` is the coefficient of variation.
    """
    n = timeline.size
    start = max(0, pop_index - flight_frames)
    end = min(n, pop_index - 1)
    if end <= start:
        return {}

    flight = timeline[start:end + 1]
    descriptors: Dict[str, float] = {}
    mid = flight.size // 2
    if mid > 0:
        early = float(flight[:mid].mean())
        late = float(flight[-mid:].mean())
        descriptors["lateFlight"] = late / early if early > 0 else 1.0

    average = float(flight.mean())
    descriptors["flightAvg"] = average
    descriptors["flightCV"] = float(flight.std()) / average if average > 0 else 0.0
    return descriptors


def _check_frames(frames: Sequence[np.ndarray]) -> None:
    shape = np.shape(frames[0])
    if len(shape) != 3 or shape[2] != 3:
        raise VideoFeatureError(f"Expected HxWx3 RGB frames, got shape {shape}")
    for index, frame in enumerate(frames):
        if np.shape(frame) != shape:
            raise VideoFeatureError(
                f"Frame {index} has shape {np.shape(frame)}, expected {shape}"
            )


def extract_video_features(
    frames: Sequence[np.ndarray],
    pop_offset_s: float,
    config: Optional[VideoConfig] = None,
) -> VideoFeatureMap:
    """Motion and edge descriptors for the frames around a glove pop.

    Args:
        frames: RGB24 frames in time order, starting at the requested window
        pop_offset_s: Pop time relative to the first frame, in seconds
        config: Zones, thresholds and frame rate (default: built-in)

    Returns:
        Feature map; empty when fewer than ``config.min_frames`` frames

    Raises:
        VideoFeatureError: If frames are not same-sized RGB images
    """
    config = config or VideoConfig()
    if len(frames) < config.min_frames:
        logger.debug(f"Only {len(frames)} frames supplied, skipping video features")
        return {}

    _check_frames(frames)
    height, width = np.shape(frames[0])[:2]
    zones = resolve_zones(config.zones, width, height)
    grays = [to_grayscale(np.asarray(frame)) for frame in frames]

    n = len(grays) - 1
    pop_index = int(math.floor(pop_offset_s * config.fps + 0.5))

    features: VideoFeatureMap = {}
    for name, timeline in motion_timelines(grays, zones, config.motion_threshold).items():
        features[f"{name}_peakPos"] = int(np.argmax(timeline)) / n
        for metric, value in flight_descriptors(timeline, pop_index, config.flight_frames).items():
            features[f"{name}_{metric}"] = value

    if 0 < pop_index < len(grays):
        edge_zone = zones[config.edge_zone]
        features["edgeDensityPrePop"] = edge_density(
            grays[max(0, pop_index - config.edge_lookback_frames)], edge_zone
        )
        features["edgeDensityAtPop"] = edge_density(grays[pop_index], edge_zone)

    return features


__all__ = [
    "frame_window",
    "split_rgb24",
    "to_grayscale",
    "motion_timelines",
    "edge_density",
    "flight_descriptors",
    "extract_video_features",
]
