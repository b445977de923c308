"""Shared data contracts for pitch analysis."""

from .types import (
    AcousticFeatures,
    Call,
    CallConfidence,
    ClassificationResult,
    FrameWindow,
    GlovePopEvent,
    LooPrediction,
    LooResult,
    PopSignature,
    TrainingExample,
    UmpireCallResult,
    VelocityEstimate,
    VideoFeatureMap,
)

__all__ = [
    "AcousticFeatures",
    "Call",
    "CallConfidence",
    "ClassificationResult",
    "FrameWindow",
    "GlovePopEvent",
    "LooPrediction",
    "LooResult",
    "PopSignature",
    "TrainingExample",
    "UmpireCallResult",
    "VelocityEstimate",
    "VideoFeatureMap",
]
