"""Configuration loading for the pitch analyzer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

import yaml

from configs.validator import validate_config
from exceptions import ConfigError, InvalidConfigError
from log_config.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("default.yaml")

# (threshold, points) pairs, highest threshold first
ScoreTiers = Tuple[Tuple[float, int], ...]


@dataclass(frozen=True)
class AudioConfig:
    sample_rate: int = 44100


@dataclass(frozen=True)
class PopDetectionConfig:
    envelope_window_ms: float = 2.0
    noise_trim_fraction: float = 0.1  # Trimmed from each end for the noise floor
    threshold_multiplier: float = 4.0
    isolation_ms: float = 50.0
    rise_lookback_ms: float = 5.0


@dataclass(frozen=True)
class UmpireCallConfig:
    frame_ms: float = 20.0
    baseline_start_s: float = 1.0  # Seconds before the pop
    baseline_end_s: float = 0.3
    reaction_start_s: float = 0.15  # Seconds after the pop
    reaction_end_s: float = 3.0
    default_baseline: float = 200.0
    active_multiplier: float = 1.3
    peak_ratio_tiers: ScoreTiers = ((8.0, 3), (4.0, 2), (2.5, 1))
    p75_ratio_tiers: ScoreTiers = ((2.5, 2), (1.8, 1))
    mean_ratio_tiers: ScoreTiers = ((2.0, 2), (1.4, 1))
    sustained_ms_tiers: ScoreTiers = ((150.0, 2), (80.0, 1))
    strike_high_score: int = 4
    strike_medium_score: int = 2
    short_clip_s: float = 0.5
    short_clip_peak_ratio: float = 1.8
    short_clip_sustained_ms: float = 40.0
    ball_high_confidence_s: float = 0.8


@dataclass(frozen=True)
class ZoneConfig:
    """Rectangular zone in normalized frame coordinates."""

    name: str
    x1: float
    x2: float
    y1: float
    y2: float


DEFAULT_ZONES: Tuple[ZoneConfig, ...] = (
    ZoneConfig("center", 0.3, 0.7, 0.2, 0.7),
    ZoneConfig("pitchLane", 0.35, 0.65, 0.1, 0.6),
    ZoneConfig("catchZone", 0.25, 0.75, 0.4, 0.85),
)


@dataclass(frozen=True)
class VideoConfig:
    fps: float = 30.0
    pre_pop_s: float = 1.0
    post_pop_s: float = 0.15
    min_frames: int = 10
    motion_threshold: float = 12.0
    flight_frames: int = 16
    edge_lookback_frames: int = 5
    edge_zone: str = "center"
    zones: Tuple[ZoneConfig, ...] = DEFAULT_ZONES


@dataclass(frozen=True)
class ClassifierConfig:
    amplitude_weight: float = 0.6
    decay_weight: float = 0.2
    zcr_weight: float = 0.2
    kmeans_max_iter: int = 50
    cluster_labels: Tuple[str, str, str] = ("Fastball", "Changeup", "Curveball")
    k_values: Tuple[int, ...] = (1, 3, 5, 7)
    default_k: int = 7
    session_features: Tuple[str, ...] = (
        "audio_amplitude",
        "audio_fbScore",
        "center_lateFlight",
        "pitchLane_lateFlight",
    )
    separation_labels: Tuple[str, str] = ("Fastball", "Curveball")
    top_video_features: int = 4


@dataclass(frozen=True)
class VelocityConfig:
    baseline_mph: float = 79.0
    z_gain: float = 1.5
    max_adjust_mph: float = 3.0
    range_mph: float = 4.0


@dataclass(frozen=True)
class AnalyzerConfig:
    audio: AudioConfig = field(default_factory=AudioConfig)
    pop_detection: PopDetectionConfig = field(default_factory=PopDetectionConfig)
    umpire_call: UmpireCallConfig = field(default_factory=UmpireCallConfig)
    video: VideoConfig = field(default_factory=VideoConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    velocity: VelocityConfig = field(default_factory=VelocityConfig)


def default_config() -> AnalyzerConfig:
    """Built-in defaults, identical to configs/default.yaml."""
    return AnalyzerConfig()


def _tiers(raw) -> ScoreTiers:
    return tuple((float(threshold), int(points)) for threshold, points in raw)


def load_config(path: Optional[Path] = None) -> AnalyzerConfig:
    """Load and validate configuration from YAML file.

    Missing sections and keys fall back to the schema defaults.

    Args:
        path: Path to configuration file (default: configs/default.yaml)

    Returns:
        Validated AnalyzerConfig instance

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    try:
        logger.info(f"Loading configuration from {path}")
        if not path.exists():
            raise InvalidConfigError(f"Configuration file not found: {path}")

        data = yaml.safe_load(path.read_text()) or {}
        if not isinstance(data, dict):
            raise InvalidConfigError(f"Configuration root must be a mapping: {path}")

        # Validate against JSON Schema (fills defaults in place)
        validate_config(data)

    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration: {e}")
        raise InvalidConfigError(f"Failed to parse configuration file: {e}")

    try:
        umpire = dict(data["umpire_call"])
        for key in ("peak_ratio_tiers", "p75_ratio_tiers", "mean_ratio_tiers", "sustained_ms_tiers"):
            umpire[key] = _tiers(umpire[key])

        video = dict(data["video"])
        video["zones"] = tuple(
            ZoneConfig(name=name, **bounds) for name, bounds in video["zones"].items()
        )
        if video["edge_zone"] not in {zone.name for zone in video["zones"]}:
            raise InvalidConfigError(f"Edge zone '{video['edge_zone']}' is not a configured zone")

        classifier = dict(data["classifier"])
        for key in ("cluster_labels", "k_values", "session_features", "separation_labels"):
            classifier[key] = tuple(classifier[key])

        config = AnalyzerConfig(
            audio=AudioConfig(**data["audio"]),
            pop_detection=PopDetectionConfig(**data["pop_detection"]),
            umpire_call=UmpireCallConfig(**umpire),
            video=VideoConfig(**video),
            classifier=ClassifierConfig(**classifier),
            velocity=VelocityConfig(**data["velocity"]),
        )

        logger.info(
            f"Configuration loaded successfully: {config.audio.sample_rate} Hz audio, "
            f"{len(config.video.zones)} video zones @ {config.video.fps}fps"
        )
        return config

    except ConfigError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Failed to construct configuration objects: {e}")
        raise InvalidConfigError(f"Failed to construct configuration: {e}")


__all__ = [
    "AudioConfig",
    "PopDetectionConfig",
    "UmpireCallConfig",
    "ZoneConfig",
    "VideoConfig",
    "ClassifierConfig",
    "VelocityConfig",
    "AnalyzerConfig",
    "default_config",
    "load_config",
]
