"""Supervised pitch typing with z-scored k-nearest neighbours."""

from __future__ import annotations

import math
from typing import List, Mapping, Optional, Sequence

import numpy as np
from sklearn.model_selection import LeaveOneOut
from sklearn.preprocessing import StandardScaler

from contracts import ClassificationResult, LooPrediction, LooResult, TrainingExample
from exceptions import DegenerateInputError, EmptyTrainingSetError
from log_config.logger import get_logger

logger = get_logger(__name__)


class FeatureScaler:
    """Z-score scaling restricted to a named feature subset.

    Statistics come from finite training values only (population std, a zero
    std becomes 1). A feature no training example provides keeps mean 0 and
    std 1. Missing or non-finite values scale to 0, the neutral z-score.
    """

    def __init__(self, feature_names: Sequence[str]):
        if not feature_names:
            raise DegenerateInputError("At least one feature name is required")
        self.feature_names = list(feature_names)
        self._scaler: Optional[StandardScaler] = None
        self._observed = np.zeros(len(self.feature_names), dtype=bool)

    def _matrix(self, feature_maps: Sequence[Mapping[str, float]]) -> np.ndarray:
        matrix = np.full((len(feature_maps), len(self.feature_names)), np.nan)
        for row, features in enumerate(feature_maps):
            for col, name in enumerate(self.feature_names):
                value = features.get(name)
                if value is not None and math.isfinite(value):
                    matrix[row, col] = value
        return matrix

    def fit(self, feature_maps: Sequence[Mapping[str, float]]) -> "FeatureScaler":
        matrix = self._matrix(feature_maps)
        self._observed = ~np.isnan(matrix).all(axis=0)
        self._scaler = StandardScaler()
        if self._observed.any():
            # StandardScaler ignores NaN entries while fitting
            self._scaler.fit(matrix[:, self._observed])
        return self

    def transform(self, feature_maps: Sequence[Mapping[str, float]]) -> np.ndarray:
        if self._scaler is None:
            raise RuntimeError("FeatureScaler.transform called before fit")
        matrix = self._matrix(feature_maps)
        scaled = matrix.copy()
        if self._observed.any():
            scaled[:, self._observed] = self._scaler.transform(matrix[:, self._observed])
        return np.nan_to_num(scaled, nan=0.0)


def tally_votes(labels: Sequence[str]) -> dict:
    """Vote counts ordered by descending count, ties in first-seen order."""
    counts: dict = {}
    for label in labels:
        counts[label] = counts.get(label, 0) + 1
    # sorted() is stable, so equal counts keep first-seen order
    return dict(sorted(counts.items(), key=lambda item: item[1], reverse=True))


def classify_knn(
    query: Mapping[str, float],
    training: Sequence[TrainingExample],
    feature_names: Sequence[str],
    k: int,
) -> ClassificationResult:
    """Predict a pitch type by majority vote of the k nearest examples.

    Both the query and the training examples are z-scored with statistics
    from the training examples. Distance is squared Euclidean; examples at
    equal distance keep training-set order, and a vote tie goes to the label
    seen first among the neighbours.

    Args:
        query: Feature map of the pitch to classify
        training: Labeled examples (not modified)
        feature_names: Features to compare
        k: Number of neighbours (all examples when fewer)

    Returns:
        ClassificationResult with the winning label and the vote tally

    Raises:
        EmptyTrainingSetError: If training is empty
        DegenerateInputError: If k < 1 or feature_names is empty
    """
    if not training:
        raise EmptyTrainingSetError("k-NN needs at least one training example")
    if k < 1:
        raise DegenerateInputError(f"k must be at least 1, got {k}")

    scaler = FeatureScaler(feature_names).fit([example.features for example in training])
    train_z = scaler.transform([example.features for example in training])
    query_z = scaler.transform([query])[0]

    distances = ((train_z - query_z) ** 2).sum(axis=1)
    nearest = np.argsort(distances, kind="stable")[:k]
    votes = tally_votes([training[i].label for i in nearest])

    predicted = next(iter(votes))
    return ClassificationResult(predicted=predicted, votes=votes)


def leave_one_out(
    examples: Sequence[TrainingExample],
    feature_names: Sequence[str],
    k: int,
) -> LooResult:
    """Leave-one-out accuracy of ``classify_knn`` on a labeled set.

    Each example is classified against all the others (scaling statistics
    are refit without it).

    Args:
        examples: Labeled examples
        feature_names: Features to compare
        k: Number of neighbours

    Returns:
        LooResult with accuracy and per-example predictions in input order

    Raises:
        DegenerateInputError: If fewer than two examples are given
    """
    if len(examples) < 2:
        raise DegenerateInputError(f"Leave-one-out needs at least 2 examples, got {len(examples)}")

    predictions: List[LooPrediction] = []
    for train_idx, test_idx in LeaveOneOut().split(np.arange(len(examples))):
        held_out = examples[int(test_idx[0])]
        rest = [examples[int(i)] for i in train_idx]
        result = classify_knn(held_out.features, rest, feature_names, k)
        predictions.append(LooPrediction(actual=held_out.label, predicted=result.predicted))

    correct = sum(1 for p in predictions if p.correct)
    return LooResult(
        accuracy=correct / len(examples),
        correct=correct,
        total=len(examples),
        predictions=predictions,
    )


__all__ = ["FeatureScaler", "tally_votes", "classify_knn", "leave_one_out"]
