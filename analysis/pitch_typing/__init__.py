"""Pitch-type classification.

Unsupervised k-means typing for sessions without labels, and z-scored k-NN
with leave-one-out model selection when a labeled session is available.
"""

from .knn import FeatureScaler, classify_knn, leave_one_out
from .model_selection import default_feature_sets, rank_features_by_separation, select_best_model
from .pitch_classifier import (
    FbScoreCalibration,
    classify_pitch_types,
    compute_fb_score,
    kmeans_1d,
    map_clusters_to_types,
)
from .schemas import KMeansResult, ModelEvaluation, ModelSelection, PitchTypeAssignment

__all__ = [
    "FeatureScaler",
    "classify_knn",
    "leave_one_out",
    "default_feature_sets",
    "rank_features_by_separation",
    "select_best_model",
    "FbScoreCalibration",
    "classify_pitch_types",
    "compute_fb_score",
    "kmeans_1d",
    "map_clusters_to_types",
    "KMeansResult",
    "ModelEvaluation",
    "ModelSelection",
    "PitchTypeAssignment",
]
