"""Core data contracts for pop detection, umpire calls, features and classification."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

# Open-schema video descriptors keyed "{zone}_{metric}"
VideoFeatureMap = Dict[str, float]


def round_half_up(value: float) -> int:
    """Nearest integer, halves rounded up."""
    return int(math.floor(value + 0.5))


class Call(str, Enum):
    STRIKE = "Strike"
    BALL = "Ball"


class CallConfidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


@dataclass(frozen=True)
class GlovePopEvent:
    sample_index: int
    time_s: float
    amplitude: float  # Envelope value at the pop
    rise_ratio: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sample_index": self.sample_index,
            "time_s": round(self.time_s, 3),
            "amplitude": round_half_up(self.amplitude),
            "rise_ratio": round(self.rise_ratio, 1),
        }


@dataclass(frozen=True)
class UmpireCallResult:
    call: Call
    confidence: CallConfidence
    score: int
    peak_ratio: float
    p75_ratio: float
    mean_ratio: float
    sustained_ms: int
    available_s: float
    baseline: float
    post_max: float

    @property
    def is_strike(self) -> bool:
        return self.call is Call.STRIKE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "call": self.call.value,
            "confidence": self.confidence.value,
            "score": self.score,
            "peak_ratio": round(self.peak_ratio, 1),
            "p75_ratio": round(self.p75_ratio, 1),
            "mean_ratio": round(self.mean_ratio, 1),
            "sustained_ms": self.sustained_ms,
            "available_s": round(self.available_s, 2),
            "baseline": round_half_up(self.baseline),
            "post_max": round_half_up(self.post_max),
        }


@dataclass(frozen=True)
class AcousticFeatures:
    peak_amp: int
    decay_ratio: float
    zcr: int  # Sign changes in the window, not a rate

    def to_dict(self) -> Dict[str, Any]:
        return {
            "peak_amp": self.peak_amp,
            "decay_ratio": round(self.decay_ratio, 3),
            "zcr": self.zcr,
        }


@dataclass(frozen=True)
class PopSignature:
    peak_abs: int
    rms: float
    decay_ratio: float
    zc_rate: float  # Sign changes per second

    def to_dict(self) -> Dict[str, Any]:
        return {
            "peak_abs": self.peak_abs,
            "rms": round(self.rms, 1),
            "decay_ratio": round(self.decay_ratio, 3),
            "zc_rate": round_half_up(self.zc_rate),
        }


@dataclass(frozen=True)
class FrameWindow:
    """Frame range to request from the video decoder for one pitch."""

    start_s: float
    duration_s: float
    pop_offset_s: float  # Pop time relative to start_s


@dataclass(frozen=True)
class VelocityEstimate:
    mph: float
    low_mph: float
    high_mph: float

    def to_dict(self) -> Dict[str, Any]:
        return {"mph": self.mph, "low_mph": self.low_mph, "high_mph": self.high_mph}


@dataclass(frozen=True)
class TrainingExample:
    label: str
    features: Mapping[str, float]
    pitch_id: Optional[str] = None


@dataclass(frozen=True)
class ClassificationResult:
    predicted: str
    votes: Dict[str, int]  # Descending vote count, ties in first-seen order

    def to_dict(self) -> Dict[str, Any]:
        return {"predicted": self.predicted, "votes": dict(self.votes)}


@dataclass(frozen=True)
class LooPrediction:
    actual: str
    predicted: str

    @property
    def correct(self) -> bool:
        return self.actual == self.predicted


@dataclass(frozen=True)
class LooResult:
    accuracy: float
    correct: int
    total: int
    predictions: List[LooPrediction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accuracy": round(self.accuracy, 3),
            "correct": self.correct,
            "total": self.total,
            "predictions": [
                {"actual": p.actual, "predicted": p.predicted} for p in self.predictions
            ],
        }
