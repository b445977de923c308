"""Configuration validation using JSON Schema."""

from __future__ import annotations

import copy
from typing import Any, Dict

import jsonschema
from jsonschema import Draft7Validator, validators

from exceptions import ConfigValidationError
from log_config.logger import get_logger

logger = get_logger(__name__)

_TIERS = {
    "type": "array",
    "items": {
        "type": "array",
        "items": [{"type": "number", "minimum": 0}, {"type": "integer", "minimum": 0, "maximum": 9}],
        "minItems": 2,
        "maxItems": 2,
    },
    "minItems": 1,
}

_ZONE = {
    "type": "object",
    "required": ["x1", "x2", "y1", "y2"],
    "properties": {
        "x1": {"type": "number", "minimum": 0.0, "maximum": 1.0},
        "x2": {"type": "number", "minimum": 0.0, "maximum": 1.0},
        "y1": {"type": "number", "minimum": 0.0, "maximum": 1.0},
        "y2": {"type": "number", "minimum": 0.0, "maximum": 1.0},
    },
}

# JSON Schema for default.yaml configuration
CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "audio": {
            "type": "object",
            "default": {},
            "properties": {
                "sample_rate": {"type": "integer", "minimum": 8000, "maximum": 192000, "default": 44100},
            },
        },
        "pop_detection": {
            "type": "object",
            "default": {},
            "properties": {
                "envelope_window_ms": {"type": "number", "exclusiveMinimum": 0, "maximum": 100, "default": 2},
                "noise_trim_fraction": {"type": "number", "minimum": 0.0, "maximum": 0.45, "default": 0.1},
                "threshold_multiplier": {"type": "number", "minimum": 0.0, "default": 4.0},
                "isolation_ms": {"type": "number", "minimum": 1, "maximum": 1000, "default": 50},
                "rise_lookback_ms": {"type": "number", "minimum": 0, "maximum": 100, "default": 5},
            },
        },
        "umpire_call": {
            "type": "object",
            "default": {},
            "properties": {
                "frame_ms": {"type": "number", "minimum": 2, "maximum": 200, "default": 20},
                "baseline_start_s": {"type": "number", "minimum": 0, "default": 1.0},
                "baseline_end_s": {"type": "number", "minimum": 0, "default": 0.3},
                "reaction_start_s": {"type": "number", "minimum": 0, "default": 0.15},
                "reaction_end_s": {"type": "number", "minimum": 0, "default": 3.0},
                "default_baseline": {"type": "number", "minimum": 0, "default": 200},
                "active_multiplier": {"type": "number", "minimum": 0, "default": 1.3},
                "peak_ratio_tiers": dict(_TIERS, default=[[8.0, 3], [4.0, 2], [2.5, 1]]),
                "p75_ratio_tiers": dict(_TIERS, default=[[2.5, 2], [1.8, 1]]),
                "mean_ratio_tiers": dict(_TIERS, default=[[2.0, 2], [1.4, 1]]),
                "sustained_ms_tiers": dict(_TIERS, default=[[150, 2], [80, 1]]),
                "strike_high_score": {"type": "integer", "minimum": 0, "maximum": 9, "default": 4},
                "strike_medium_score": {"type": "integer", "minimum": 0, "maximum": 9, "default": 2},
                "short_clip_s": {"type": "number", "minimum": 0, "default": 0.5},
                "short_clip_peak_ratio": {"type": "number", "minimum": 0, "default": 1.8},
                "short_clip_sustained_ms": {"type": "number", "minimum": 0, "default": 40},
                "ball_high_confidence_s": {"type": "number", "minimum": 0, "default": 0.8},
            },
        },
        "video": {
            "type": "object",
            "default": {},
            "properties": {
                "fps": {"type": "number", "minimum": 1, "maximum": 240, "default": 30},
                "pre_pop_s": {"type": "number", "minimum": 0, "maximum": 10, "default": 1.0},
                "post_pop_s": {"type": "number", "minimum": 0, "maximum": 10, "default": 0.15},
                "min_frames": {"type": "integer", "minimum": 2, "default": 10},
                "motion_threshold": {"type": "number", "minimum": 0, "maximum": 255, "default": 12},
                "flight_frames": {"type": "integer", "minimum": 2, "maximum": 240, "default": 16},
                "edge_lookback_frames": {"type": "integer", "minimum": 0, "maximum": 240, "default": 5},
                "edge_zone": {"type": "string", "default": "center"},
                "zones": {
                    "type": "object",
                    "minProperties": 1,
                    "additionalProperties": _ZONE,
                    "default": {
                        "center": {"x1": 0.3, "x2": 0.7, "y1": 0.2, "y2": 0.7},
                        "pitchLane": {"x1": 0.35, "x2": 0.65, "y1": 0.1, "y2": 0.6},
                        "catchZone": {"x1": 0.25, "x2": 0.75, "y1": 0.4, "y2": 0.85},
                    },
                },
            },
        },
        "classifier": {
            "type": "object",
            "default": {},
            "properties": {
                "amplitude_weight": {"type": "number", "minimum": 0, "maximum": 1, "default": 0.6},
                "decay_weight": {"type": "number", "minimum": 0, "maximum": 1, "default": 0.2},
                "zcr_weight": {"type": "number", "minimum": 0, "maximum": 1, "default": 0.2},
                "kmeans_max_iter": {"type": "integer", "minimum": 1, "maximum": 10000, "default": 50},
                "cluster_labels": {
                    "type": "array",
                    "items": {"type": "string"},
                    "minItems": 3,
                    "maxItems": 3,
                    "default": ["Fastball", "Changeup", "Curveball"],
                },
                "k_values": {
                    "type": "array",
                    "items": {"type": "integer", "minimum": 1},
                    "minItems": 1,
                    "default": [1, 3, 5, 7],
                },
                "default_k": {"type": "integer", "minimum": 1, "default": 7},
                "session_features": {
                    "type": "array",
                    "items": {"type": "string"},
                    "minItems": 1,
                    "default": ["audio_amplitude", "audio_fbScore", "center_lateFlight", "pitchLane_lateFlight"],
                },
                "separation_labels": {
                    "type": "array",
                    "items": {"type": "string"},
                    "minItems": 2,
                    "maxItems": 2,
                    "default": ["Fastball", "Curveball"],
                },
                "top_video_features": {"type": "integer", "minimum": 0, "default": 4},
            },
        },
        "velocity": {
            "type": "object",
            "default": {},
            "properties": {
                "baseline_mph": {"type": "number", "minimum": 20, "maximum": 110, "default": 79},
                "z_gain": {"type": "number", "minimum": 0, "default": 1.5},
                "max_adjust_mph": {"type": "number", "minimum": 0, "default": 3.0},
                "range_mph": {"type": "number", "minimum": 0, "default": 4.0},
            },
        },
    },
}


def extend_with_default(validator_class):
    """Extend JSON Schema validator to set default values."""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if isinstance(instance, dict):
            for prop, subschema in properties.items():
                if "default" in subschema:
                    instance.setdefault(prop, copy.deepcopy(subschema["default"]))

        for error in validate_properties(validator, properties, instance, schema):
            yield error

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultValidatingValidator = extend_with_default(Draft7Validator)


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration against JSON Schema, filling in defaults.

    Args:
        config: Configuration dictionary (updated in place with defaults)

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    try:
        validator = DefaultValidatingValidator(CONFIG_SCHEMA)
        errors = list(validator.iter_errors(config))

        if errors:
            error_messages = []
            for error in errors:
                path = " -> ".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            logger.error(f"Configuration validation failed with {len(errors)} errors")
            for msg in error_messages:
                logger.error(f"  - {msg}")

            raise ConfigValidationError(
                f"Configuration validation failed with {len(errors)} error(s). See logs for details.",
                validation_errors=error_messages,
            )

        logger.debug("Configuration validation passed")

    except jsonschema.exceptions.SchemaError as e:
        logger.error(f"Invalid schema: {e}")
        raise ConfigValidationError(f"Invalid schema definition: {e}")


__all__ = ["CONFIG_SCHEMA", "validate_config"]
