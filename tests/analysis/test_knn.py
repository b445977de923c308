"""Tests for z-scored k-NN pitch typing and leave-one-out evaluation."""

from __future__ import annotations

import copy

import numpy as np
import pytest

from analysis.pitch_typing.knn import FeatureScaler, classify_knn, leave_one_out, tally_votes
from contracts import TrainingExample
from exceptions import DegenerateInputError, EmptyTrainingSetError

FEATURES = ["audio_amplitude", "center_lateFlight"]


@pytest.fixture
def training():
    return [
        TrainingExample("Fastball", {"audio_amplitude": 20000.0, "center_lateFlight": 1.1}),
        TrainingExample("Fastball", {"audio_amplitude": 19000.0, "center_lateFlight": 1.0}),
        TrainingExample("Fastball", {"audio_amplitude": 21000.0, "center_lateFlight": 1.2}),
        TrainingExample("Curveball", {"audio_amplitude": 6000.0, "center_lateFlight": 2.4}),
        TrainingExample("Curveball", {"audio_amplitude": 5000.0, "center_lateFlight": 2.6}),
        TrainingExample("Curveball", {"audio_amplitude": 7000.0, "center_lateFlight": 2.2}),
    ]


class TestFeatureScaler:
    def test_population_z_scores(self):
        scaler = FeatureScaler(["a"]).fit([{"a": 1.0}, {"a": 3.0}])

        np.testing.assert_allclose(scaler.transform([{"a": 2.0}, {"a": 3.0}]), [[0.0], [1.0]])

    def test_missing_and_non_finite_values_scale_to_zero(self):
        scaler = FeatureScaler(["a", "b"]).fit([{"a": 1.0, "b": 0.0}, {"a": 3.0, "b": 4.0}])

        scaled = scaler.transform([{"a": float("nan")}])

        np.testing.assert_array_equal(scaled, [[0.0, 0.0]])

    def test_constant_feature_keeps_unit_scale(self):
        scaler = FeatureScaler(["a"]).fit([{"a": 5.0}, {"a": 5.0}])

        np.testing.assert_allclose(scaler.transform([{"a": 7.0}]), [[2.0]])

    def test_statistics_skip_missing_training_values(self):
        scaler = FeatureScaler(["a"]).fit([{"a": 1.0}, {}, {"a": 3.0}])

        np.testing.assert_allclose(scaler.transform([{"a": 3.0}]), [[1.0]])

    def test_requires_feature_names(self):
        with pytest.raises(DegenerateInputError):
            FeatureScaler([])


def test_tally_votes_orders_by_count_then_first_seen():
    votes = tally_votes(["Curveball", "Fastball", "Fastball", "Changeup", "Curveball"])

    assert list(votes.items()) == [("Curveball", 2), ("Fastball", 2), ("Changeup", 1)]


def test_k1_on_duplicate_reproduces_label(training):
    for example in training:
        result = classify_knn(example.features, training, FEATURES, k=1)

        assert result.predicted == example.label


def test_majority_vote(training):
    query = {"audio_amplitude": 18000.0, "center_lateFlight": 1.3}

    result = classify_knn(query, training, FEATURES, k=5)

    assert result.predicted == "Fastball"
    assert result.votes == {"Fastball": 3, "Curveball": 2}
    assert list(result.votes) == ["Fastball", "Curveball"]


def test_vote_tie_goes_to_nearest_label():
    training = [
        TrainingExample("Curveball", {"x": 0.0}),
        TrainingExample("Fastball", {"x": 10.0}),
    ]

    result = classify_knn({"x": 4.0}, training, ["x"], k=2)

    assert result.predicted == "Curveball"
    assert list(result.votes.items()) == [("Curveball", 1), ("Fastball", 1)]


def test_equal_distances_keep_training_order():
    training = [
        TrainingExample("Fastball", {"x": 0.0}),
        TrainingExample("Curveball", {"x": 0.0}),
        TrainingExample("Curveball", {"x": 10.0}),
    ]

    result = classify_knn({"x": 0.0}, training, ["x"], k=1)

    assert result.predicted == "Fastball"


def test_k_larger_than_training_uses_all_examples(training):
    result = classify_knn({"audio_amplitude": 20000.0}, training, FEATURES, k=50)

    assert sum(result.votes.values()) == len(training)


def test_missing_query_feature_is_neutral(training):
    result = classify_knn({"audio_amplitude": 20500.0}, training, FEATURES, k=3)

    assert result.predicted == "Fastball"


def test_training_set_is_not_modified(training):
    before = copy.deepcopy(training)

    classify_knn({"audio_amplitude": 1.0}, training, FEATURES, k=3)

    assert training == before


def test_empty_training_set_is_rejected():
    with pytest.raises(EmptyTrainingSetError):
        classify_knn({"x": 1.0}, [], ["x"], k=1)


def test_invalid_k_is_rejected(training):
    with pytest.raises(DegenerateInputError):
        classify_knn({"audio_amplitude": 1.0}, training, FEATURES, k=0)


class TestLeaveOneOut:
    def test_duplicated_examples_are_perfect_for_every_k(self):
        fastball = {"audio_amplitude": 20000.0, "center_lateFlight": 1.0}
        curveball = {"audio_amplitude": 6000.0, "center_lateFlight": 2.5}
        examples = [TrainingExample("Fastball", fastball)] * 8 + [TrainingExample("Curveball", curveball)] * 8

        for k in (1, 3, 5, 7):
            result = leave_one_out(examples, FEATURES, k)

            assert result.accuracy == 1.0
            assert result.correct == result.total == 16

    def test_predictions_follow_input_order(self, training):
        result = leave_one_out(training, FEATURES, k=3)

        assert [p.actual for p in result.predictions] == [e.label for e in training]
        assert result.correct == sum(1 for p in result.predictions if p.correct)
        assert result.accuracy == pytest.approx(result.correct / len(training))

    def test_separable_classes(self, training):
        assert leave_one_out(training, FEATURES, k=1).accuracy == 1.0

    def test_needs_two_examples(self, training):
        with pytest.raises(DegenerateInputError):
            leave_one_out(training[:1], FEATURES, k=1)

    def test_to_dict(self, training):
        report = leave_one_out(training, FEATURES, k=1).to_dict()

        assert report["accuracy"] == 1.0
        assert report["total"] == 6
        assert report["predictions"][0] == {"actual": "Fastball", "predicted": "Fastball"}
