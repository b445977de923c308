"""Unsupervised pitch typing from glove-pop acoustics.

Every pitch of a session gets a single fastball-likeness score (louder pop,
faster decay, denser zero crossings => more fastball-like). The scores are
clustered into three groups with percentile-seeded 1-D k-means, and clusters
are named by centroid order: highest is Fastball, then Changeup, then
Curveball. Seeding is deterministic so the same session always yields the
same labels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from analysis.pitch_typing.schemas import (
    AUDIO_AMPLITUDE,
    AUDIO_DECAY_RATIO,
    AUDIO_POP_ZCR,
    KMeansResult,
    PitchTypeAssignment,
)
from analysis.pitch_typing.utils import finite_values, min_max_normalize
from configs.settings import ClassifierConfig
from contracts import PopSignature, TrainingExample
from exceptions import DegenerateInputError
from log_config.logger import get_logger

logger = get_logger(__name__)

SEED_QUANTILES: Tuple[float, float, float] = (0.2, 0.5, 0.8)


def compute_fb_score(
    norm_amp: float,
    norm_decay: float,
    norm_zcr: float,
    config: Optional[ClassifierConfig] = None,
) -> float:
    """Weighted fastball-likeness from normalized (0-1) pop descriptors."""
    config = config or ClassifierConfig()
    return (
        config.amplitude_weight * norm_amp
        + config.decay_weight * (1.0 - norm_decay)
        + config.zcr_weight * norm_zcr
    )


def kmeans_1d(
    values: Sequence[float],
    max_iter: int = 50,
    seed_quantiles: Sequence[float] = SEED_QUANTILES,
) -> KMeansResult:
    """Cluster scalar values with k-means, k = len(seed_quantiles).

    Centroids start at the given quantiles of the sorted input. Each round
    assigns every value to its nearest centroid (lowest index on ties) and
    moves centroids to their cluster means; an empty cluster keeps its
    centroid. Iteration stops as soon as the centroid vector is unchanged.

    Args:
        values: Values to cluster
        max_iter: Maximum assign/update rounds
        seed_quantiles: Quantiles used for the initial centroids

    Returns:
        KMeansResult with per-value cluster ids and final centroids

    Raises:
        DegenerateInputError: If values is empty
    """
    if len(values) == 0:
        raise DegenerateInputError("Cannot cluster an empty set of values")

    data = np.asarray(values, dtype=np.float64)
    ordered = np.sort(data)
    centroids = [float(ordered[int(data.size * q)]) for q in seed_quantiles]
    assignments = np.zeros(data.size, dtype=int)

    iterations = 0
    converged = False
    for _ in range(max_iter):
        iterations += 1
        distances = np.abs(data[:, None] - np.asarray(centroids)[None, :])
        assignments = np.argmin(distances, axis=1)

        updated = []
        for cluster, centroid in enumerate(centroids):
            members = data[assignments == cluster]
            updated.append(float(members.mean()) if members.size else centroid)

        if updated == centroids:
            converged = True
            break
        centroids = updated

    logger.debug(f"k-means: {iterations} iterations, converged={converged}, centroids={centroids}")
    return KMeansResult(
        assignments=[int(a) for a in assignments],
        centroids=centroids,
        iterations=iterations,
        converged=converged,
    )


def map_clusters_to_types(
    centroids: Sequence[float],
    labels: Sequence[str] = ("Fastball", "Changeup", "Curveball"),
) -> Dict[int, str]:
    """Name clusters by descending centroid.

    Args:
        centroids: Final cluster centroids
        labels: Names for the highest, middle and lowest centroid

    Returns:
        Cluster id -> pitch type label
    """
    ranked = sorted(range(len(centroids)), key=lambda i: centroids[i], reverse=True)
    return {cluster: labels[rank] for rank, cluster in enumerate(ranked)}


def compute_batch_fb_scores(
    signatures: Sequence[PopSignature],
    config: Optional[ClassifierConfig] = None,
) -> List[float]:
    """Fastball-likeness of each pop, normalized across the batch."""
    norm_amps = min_max_normalize([s.peak_abs for s in signatures])
    norm_decays = min_max_normalize([s.decay_ratio for s in signatures])
    norm_zcrs = min_max_normalize([s.zc_rate for s in signatures])
    return [
        compute_fb_score(amp, decay, zcr, config)
        for amp, decay, zcr in zip(norm_amps, norm_decays, norm_zcrs)
    ]


def classify_pitch_types(
    signatures: Sequence[PopSignature],
    config: Optional[ClassifierConfig] = None,
) -> List[PitchTypeAssignment]:
    """Label every pitch of a batch without training data.

    Args:
        signatures: Pop signatures, one per pitch
        config: Weights, iteration cap and labels (default: built-in)

    Returns:
        One PitchTypeAssignment per signature, in input order

    Raises:
        DegenerateInputError: If signatures is empty
    """
    config = config or ClassifierConfig()
    if not signatures:
        raise DegenerateInputError("Cannot type an empty batch of pitches")

    fb_scores = compute_batch_fb_scores(signatures, config)
    clusters = kmeans_1d(fb_scores, max_iter=config.kmeans_max_iter)
    mapping = map_clusters_to_types(clusters.centroids, config.cluster_labels)

    logger.info(
        f"Typed {len(signatures)} pitches: "
        + ", ".join(
            f"{label}={clusters.assignments.count(cluster)}" for cluster, label in sorted(mapping.items())
        )
    )
    return [
        PitchTypeAssignment(label=mapping[cluster], fb_score=score, cluster_id=cluster)
        for cluster, score in zip(clusters.assignments, fb_scores)
    ]


def _scale(value: float, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    return float(np.clip((value - low) / ((high - low) or 1.0), 0.0, 1.0))


@dataclass(frozen=True)
class FbScoreCalibration:
    """Fastball-likeness scale of a labeled training session.

    A new session is too small to normalize on its own, so its acoustic
    features are placed on the training session's min/max ranges instead,
    clamped to [0, 1].
    """

    amplitude_range: Tuple[float, float]
    decay_range: Tuple[float, float]
    zcr_range: Tuple[float, float]

    @classmethod
    def fit(cls, examples: Sequence[TrainingExample]) -> "FbScoreCalibration":
        """Fit ranges from training examples' audio features.

        Raises:
            DegenerateInputError: If any of the three audio features is absent
                from every example
        """
        ranges = []
        for name in (AUDIO_AMPLITUDE, AUDIO_DECAY_RATIO, AUDIO_POP_ZCR):
            values = finite_values((e.features for e in examples), name)
            if not values:
                raise DegenerateInputError(f"No training example provides '{name}'")
            ranges.append((min(values), max(values)))
        return cls(amplitude_range=ranges[0], decay_range=ranges[1], zcr_range=ranges[2])

    def score(
        self,
        amplitude: float,
        decay_ratio: float,
        zcr: float,
        config: Optional[ClassifierConfig] = None,
    ) -> float:
        return compute_fb_score(
            _scale(amplitude, self.amplitude_range),
            _scale(decay_ratio, self.decay_range),
            _scale(zcr, self.zcr_range),
            config,
        )


__all__ = [
    "compute_fb_score",
    "kmeans_1d",
    "map_clusters_to_types",
    "compute_batch_fb_scores",
    "classify_pitch_types",
    "FbScoreCalibration",
]
