import dataclasses

import pytest

from contracts import (
    AcousticFeatures,
    Call,
    CallConfidence,
    ClassificationResult,
    GlovePopEvent,
    LooPrediction,
    LooResult,
    PopSignature,
    UmpireCallResult,
    VelocityEstimate,
)
from contracts.types import round_half_up
from contracts.versioning import APP_VERSION, SCHEMA_VERSION, make_envelope


def test_glove_pop_to_dict_rounding() -> None:
    pop = GlovePopEvent(sample_index=66150, time_s=1.5000001, amplitude=12345.6, rise_ratio=42.66)

    assert pop.to_dict() == {"sample_index": 66150, "time_s": 1.5, "amplitude": 12346, "rise_ratio": 42.7}


def test_umpire_call_to_dict_rounding() -> None:
    result = UmpireCallResult(
        call=Call.STRIKE,
        confidence=CallConfidence.MEDIUM,
        score=3,
        peak_ratio=5.55,
        p75_ratio=1.94,
        mean_ratio=1.26,
        sustained_ms=90,
        available_s=2.4567,
        baseline=57.6,
        post_max=320.2,
    )

    report = result.to_dict()

    assert report["call"] == "Strike"
    assert report["confidence"] == "medium"
    assert report["p75_ratio"] == 1.9
    assert report["available_s"] == 2.46
    assert report["baseline"] == 58
    assert report["post_max"] == 320
    assert result.is_strike


def test_enums_compare_as_strings() -> None:
    assert Call.BALL == "Ball"
    assert CallConfidence.NONE == "none"


def test_records_are_frozen() -> None:
    features = AcousticFeatures(peak_amp=1000, decay_ratio=0.1234, zcr=12)

    with pytest.raises(dataclasses.FrozenInstanceError):
        features.zcr = 5  # type: ignore[misc]
    assert features.to_dict() == {"peak_amp": 1000, "decay_ratio": 0.123, "zcr": 12}


def test_classification_and_loo_reports() -> None:
    result = ClassificationResult(predicted="Fastball", votes={"Fastball": 2, "Curveball": 1})
    loo = LooResult(
        accuracy=0.5,
        correct=1,
        total=2,
        predictions=[LooPrediction("Fastball", "Fastball"), LooPrediction("Curveball", "Fastball")],
    )

    assert result.to_dict() == {"predicted": "Fastball", "votes": {"Fastball": 2, "Curveball": 1}}
    assert [p.correct for p in loo.predictions] == [True, False]
    assert loo.to_dict()["predictions"][1] == {"actual": "Curveball", "predicted": "Fastball"}


def test_velocity_to_dict() -> None:
    assert VelocityEstimate(80.1, 76.1, 84.1).to_dict() == {"mph": 80.1, "low_mph": 76.1, "high_mph": 84.1}


def test_make_envelope() -> None:
    envelope = make_envelope({"pitches": []})

    assert envelope == {"schema_version": SCHEMA_VERSION, "app_version": APP_VERSION, "payload": {"pitches": []}}
    assert make_envelope({}, kind="session_analysis")["kind"] == "session_analysis"


def test_integer_report_fields_round_halves_up() -> None:
    pop = GlovePopEvent(sample_index=0, time_s=0.0, amplitude=12344.5, rise_ratio=1.0)
    signature = PopSignature(peak_abs=1000, rms=500.0, decay_ratio=0.1, zc_rate=2500.5)

    assert pop.to_dict()["amplitude"] == 12345
    assert signature.to_dict()["zc_rate"] == 2501
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
