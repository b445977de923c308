"""Feature-set and k selection for the k-NN pitch typer."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from analysis.pitch_typing.knn import leave_one_out
from analysis.pitch_typing.schemas import (
    AUDIO_AMPLITUDE,
    AUDIO_FB_SCORE,
    AUDIO_FEATURES,
    FeatureRanking,
    ModelEvaluation,
    ModelSelection,
)
from analysis.pitch_typing.utils import finite_values, welch_t_statistic
from configs.settings import ClassifierConfig
from contracts import TrainingExample
from exceptions import DegenerateInputError
from log_config.logger import get_logger

logger = get_logger(__name__)


def rank_features_by_separation(
    examples: Sequence[TrainingExample],
    feature_names: Sequence[str],
    label_a: str = "Fastball",
    label_b: str = "Curveball",
    min_count: int = 3,
) -> List[FeatureRanking]:
    """Rank features by how well they separate two pitch types.

    Features with fewer than ``min_count`` finite values for either label
    score 0.

    Returns:
        Rankings, most separating first (ties keep input order)
    """
    group_a = [e.features for e in examples if e.label == label_a]
    group_b = [e.features for e in examples if e.label == label_b]

    rankings = []
    for name in feature_names:
        a_values = finite_values(group_a, name)
        b_values = finite_values(group_b, name)
        if len(a_values) < min_count or len(b_values) < min_count:
            t_statistic = 0.0
        else:
            t_statistic = welch_t_statistic(a_values, b_values)
        rankings.append(FeatureRanking(name=name, t_statistic=t_statistic))

    return sorted(rankings, key=lambda r: r.t_statistic, reverse=True)


def video_feature_names(examples: Sequence[TrainingExample]) -> List[str]:
    """Non-audio feature names across examples, in first-seen order."""
    names: Dict[str, None] = {}
    for example in examples:
        for name in example.features:
            if not name.startswith("audio_"):
                names.setdefault(name, None)
    return list(names)


def default_feature_sets(
    examples: Sequence[TrainingExample],
    config: Optional[ClassifierConfig] = None,
) -> Dict[str, List[str]]:
    """Candidate feature sets: audio only, and audio with the best video features."""
    config = config or ClassifierConfig()
    label_a, label_b = config.separation_labels
    ranked = rank_features_by_separation(examples, video_feature_names(examples), label_a, label_b)
    top_video = [r.name for r in ranked[:config.top_video_features]]

    feature_sets = {"audio": list(AUDIO_FEATURES)}
    if top_video:
        feature_sets["audio_amp_fb_top2_video"] = [AUDIO_AMPLITUDE, AUDIO_FB_SCORE] + top_video[:2]
        feature_sets["audio_top_video"] = list(AUDIO_FEATURES) + top_video
    return feature_sets


def select_best_model(
    examples: Sequence[TrainingExample],
    feature_sets: Mapping[str, Sequence[str]],
    k_values: Sequence[int] = (1, 3, 5, 7),
) -> ModelSelection:
    """Sweep feature sets x k with leave-one-out and keep the best.

    The first combination reaching the highest accuracy wins.

    Args:
        examples: Labeled examples
        feature_sets: Name -> feature names
        k_values: Neighbour counts to try

    Returns:
        ModelSelection with the best evaluation and the full sweep

    Raises:
        DegenerateInputError: If the grid is empty or examples are too few
    """
    if not feature_sets or not k_values:
        raise DegenerateInputError("Model selection needs at least one feature set and one k")

    evaluations: List[ModelEvaluation] = []
    best: Optional[ModelEvaluation] = None
    for name, names in feature_sets.items():
        for k in k_values:
            evaluation = ModelEvaluation(
                feature_set=name,
                feature_names=tuple(names),
                k=k,
                result=leave_one_out(examples, names, k),
            )
            evaluations.append(evaluation)
            marker = ""
            if best is None or evaluation.result.accuracy > best.result.accuracy:
                best = evaluation
                marker = " *** BEST"
            logger.info(
                f"LOO {name:<28} k={k}  {evaluation.result.correct}/{evaluation.result.total} "
                f"({evaluation.result.accuracy:.0%}){marker}"
            )

    return ModelSelection(best=best, evaluations=evaluations)


__all__ = [
    "rank_features_by_separation",
    "video_feature_names",
    "default_feature_sets",
    "select_best_model",
]
