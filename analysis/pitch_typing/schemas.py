"""Data schemas for pitch-type classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from contracts import LooResult

# Feature names contributed by the audio stage to combined feature maps
AUDIO_AMPLITUDE = "audio_amplitude"
AUDIO_FB_SCORE = "audio_fbScore"
AUDIO_DECAY_RATIO = "audio_decayRatio"
AUDIO_POP_ZCR = "audio_popZcr"
AUDIO_FEATURES: Tuple[str, ...] = (AUDIO_AMPLITUDE, AUDIO_FB_SCORE, AUDIO_DECAY_RATIO, AUDIO_POP_ZCR)


@dataclass(frozen=True)
class KMeansResult:
    """Outcome of 1-D k-means."""

    assignments: List[int]
    centroids: List[float]
    iterations: int
    converged: bool  # Centroids unchanged between two rounds


@dataclass(frozen=True)
class PitchTypeAssignment:
    """Unsupervised pitch type for one pitch of a batch."""

    label: str
    fb_score: float  # Fastball-likeness, 0-1 within the batch
    cluster_id: int

    def to_dict(self) -> Dict:
        return {
            "pitch_type": self.label,
            "fb_score": round(self.fb_score, 3),
            "cluster_id": self.cluster_id,
        }


@dataclass(frozen=True)
class FeatureRanking:
    """Separation of one feature between two labels."""

    name: str
    t_statistic: float


@dataclass(frozen=True)
class ModelEvaluation:
    """Leave-one-out result for one (feature set, k) combination."""

    feature_set: str
    feature_names: Tuple[str, ...]
    k: int
    result: LooResult

    def to_dict(self) -> Dict:
        return {
            "feature_set": self.feature_set,
            "feature_names": list(self.feature_names),
            "k": self.k,
            "accuracy": round(self.result.accuracy, 3),
            "correct": self.result.correct,
            "total": self.result.total,
        }


@dataclass(frozen=True)
class ModelSelection:
    """Best combination of a leave-one-out sweep plus every evaluation."""

    best: ModelEvaluation
    evaluations: List[ModelEvaluation] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "best": self.best.to_dict(),
            "evaluations": [evaluation.to_dict() for evaluation in self.evaluations],
        }


__all__ = [
    "AUDIO_AMPLITUDE",
    "AUDIO_FB_SCORE",
    "AUDIO_DECAY_RATIO",
    "AUDIO_POP_ZCR",
    "AUDIO_FEATURES",
    "KMeansResult",
    "PitchTypeAssignment",
    "FeatureRanking",
    "ModelEvaluation",
    "ModelSelection",
]
