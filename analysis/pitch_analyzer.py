"""Main pitch analysis facade."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from analysis.pitch_typing.knn import classify_knn
from analysis.pitch_typing.model_selection import default_feature_sets, select_best_model
from analysis.pitch_typing.pitch_classifier import FbScoreCalibration, classify_pitch_types
from analysis.pitch_typing.schemas import (
    AUDIO_AMPLITUDE,
    AUDIO_DECAY_RATIO,
    AUDIO_FB_SCORE,
    AUDIO_POP_ZCR,
    ModelSelection,
)
from audio import (
    analyze_pop_signature,
    detect_glove_pop,
    estimate_velocities,
    extract_acoustic_features,
    score_umpire_call,
)
from audio.utils import as_samples
from configs.settings import AnalyzerConfig
from contracts import (
    AcousticFeatures,
    ClassificationResult,
    GlovePopEvent,
    PopSignature,
    TrainingExample,
    UmpireCallResult,
    VelocityEstimate,
    VideoFeatureMap,
)
from contracts.versioning import make_envelope
from exceptions import DegenerateInputError
from log_config.logger import get_logger, log_performance
from video import extract_video_features, frame_window

logger = get_logger(__name__)

NO_POP_ERROR = "No glove pop detected"


@dataclass(frozen=True)
class PitchInput:
    """Raw media for one pitch."""

    pitch_id: str
    samples: np.ndarray
    frames: Optional[Sequence[np.ndarray]] = None
    pop_offset_s: Optional[float] = None  # Pop time relative to the first frame


@dataclass(frozen=True)
class PitchAnalysis:
    """Everything derived from one pitch's audio and video."""

    pitch_id: str
    duration_s: float = 0.0
    pop: Optional[GlovePopEvent] = None
    umpire_call: Optional[UmpireCallResult] = None
    acoustic_features: Optional[AcousticFeatures] = None
    pop_signature: Optional[PopSignature] = None
    video_features: VideoFeatureMap = field(default_factory=dict)
    fb_score: Optional[float] = None
    pitch_type: Optional[str] = None
    velocity: Optional[VelocityEstimate] = None
    error: Optional[str] = None

    @property
    def has_pop(self) -> bool:
        return self.pop is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"pitch_id": self.pitch_id, "error": self.error}
        return {
            "pitch_id": self.pitch_id,
            "duration_s": round(self.duration_s, 3),
            "glove_pop": self.pop.to_dict() if self.pop else None,
            "umpire_call": self.umpire_call.to_dict() if self.umpire_call else None,
            "acoustic_features": self.acoustic_features.to_dict() if self.acoustic_features else None,
            "pop_signature": self.pop_signature.to_dict() if self.pop_signature else None,
            "fb_score": round(self.fb_score, 3) if self.fb_score is not None else None,
            "pitch_type": self.pitch_type,
            "velocity": self.velocity.to_dict() if self.velocity else None,
            "video_features": dict(self.video_features),
        }


@dataclass(frozen=True)
class SessionAnalysis:
    """Per-pitch analyses of a session, in input order."""

    pitches: List[PitchAnalysis] = field(default_factory=list)

    @property
    def detected(self) -> List[PitchAnalysis]:
        return [p for p in self.pitches if p.has_pop]

    @property
    def not_found(self) -> List[PitchAnalysis]:
        return [p for p in self.pitches if p.error == NO_POP_ERROR]

    @property
    def failed(self) -> List[PitchAnalysis]:
        return [p for p in self.pitches if p.error is not None and p.error != NO_POP_ERROR]

    def to_dict(self) -> Dict[str, Any]:
        strikes = sum(1 for p in self.detected if p.umpire_call and p.umpire_call.is_strike)
        return make_envelope(
            {
                "summary": {
                    "total_pitches": len(self.pitches),
                    "pops_detected": len(self.detected),
                    "pops_not_found": len(self.not_found),
                    "strikes": strikes,
                    "errors": len(self.failed),
                },
                "pitches": [p.to_dict() for p in self.pitches],
            },
            kind="session_analysis",
        )


class PitchAnalyzer:
    """Runs the audio and video stages for single pitches and whole sessions."""

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        """Initialize pitch analyzer.

        Args:
            config: Analyzer configuration (default: built-in defaults)
        """
        self.config = config or AnalyzerConfig()

    def analyze_pitch(
        self,
        pitch_id: str,
        samples,
        frames: Optional[Sequence[np.ndarray]] = None,
        pop_offset_s: Optional[float] = None,
    ) -> PitchAnalysis:
        """Analyze one pitch.

        Args:
            pitch_id: Caller's identifier for the pitch
            samples: Mono int16 PCM at the configured sample rate
            frames: RGB frames around the pop, if video is available
            pop_offset_s: Pop time relative to the first frame
                (default: offset of the standard frame window)

        Returns:
            PitchAnalysis; without a glove pop only the duration and the
            error are set

        Raises:
            DegenerateInputError: If samples are empty or malformed
        """
        started = time.perf_counter()
        samples = as_samples(samples)
        sample_rate = self.config.audio.sample_rate
        duration_s = samples.size / sample_rate

        pop = detect_glove_pop(samples, self.config.pop_detection, self.config.audio)
        if pop is None:
            logger.info(f"{pitch_id}: {NO_POP_ERROR.lower()}")
            return PitchAnalysis(pitch_id=pitch_id, duration_s=duration_s, error=NO_POP_ERROR)

        umpire_call = score_umpire_call(samples, pop.sample_index, self.config.umpire_call, self.config.audio)
        acoustic = extract_acoustic_features(samples, pop.sample_index, sample_rate)
        signature = analyze_pop_signature(samples, pop.sample_index, sample_rate)

        video_features: VideoFeatureMap = {}
        if frames is not None:
            video_features = self._video_features(pitch_id, frames, pop, pop_offset_s)

        log_performance(f"analyze_pitch {pitch_id}", (time.perf_counter() - started) * 1000.0)
        logger.debug(
            f"{pitch_id}: pop at {pop.time_s:.3f}s, {umpire_call.call.value} "
            f"({umpire_call.confidence.value}, score {umpire_call.score})"
        )
        return PitchAnalysis(
            pitch_id=pitch_id,
            duration_s=duration_s,
            pop=pop,
            umpire_call=umpire_call,
            acoustic_features=acoustic,
            pop_signature=signature,
            video_features=video_features,
        )

    def _video_features(
        self,
        pitch_id: str,
        frames: Sequence[np.ndarray],
        pop: GlovePopEvent,
        pop_offset_s: Optional[float],
    ) -> VideoFeatureMap:
        if pop_offset_s is None:
            pop_offset_s = frame_window(pop.time_s, self.config.video).pop_offset_s
        try:
            return extract_video_features(frames, pop_offset_s, self.config.video)
        except Exception as e:
            # Video problems never cost us the audio results
            logger.warning(f"{pitch_id}: video feature extraction failed: {e}")
            return {}

    def analyze_session(self, inputs: Sequence[PitchInput]) -> SessionAnalysis:
        """Analyze every pitch of a session, then type and time them together.

        A pitch that raises is recorded with its error and the batch goes on.
        Pitch typing and velocity estimation run over the pitches with a pop.

        Args:
            inputs: Pitches in session order

        Returns:
            SessionAnalysis with one PitchAnalysis per input
        """
        started = time.perf_counter()
        pitches: List[PitchAnalysis] = []
        for item in inputs:
            try:
                pitches.append(
                    self.analyze_pitch(item.pitch_id, item.samples, item.frames, item.pop_offset_s)
                )
            except Exception as e:
                logger.error(f"{item.pitch_id}: analysis failed: {e}")
                pitches.append(PitchAnalysis(pitch_id=item.pitch_id, error=str(e)))

        detected = [i for i, p in enumerate(pitches) if p.has_pop]
        if detected:
            assignments = classify_pitch_types(
                [pitches[i].pop_signature for i in detected], self.config.classifier
            )
            velocities = estimate_velocities(
                [pitches[i].pop.amplitude for i in detected], self.config.velocity
            )
            for i, assignment, velocity in zip(detected, assignments, velocities):
                pitches[i] = replace(
                    pitches[i],
                    fb_score=assignment.fb_score,
                    pitch_type=assignment.label,
                    velocity=velocity,
                )

        log_performance("analyze_session", (time.perf_counter() - started) * 1000.0, threshold_ms=1000.0)
        logger.info(f"Session analyzed: {len(detected)}/{len(pitches)} pitches with a glove pop")
        return SessionAnalysis(pitches=pitches)

    def feature_map(self, analysis: PitchAnalysis, fb_score: Optional[float] = None) -> Dict[str, float]:
        """Combined video and audio feature map of an analyzed pitch.

        Args:
            analysis: Analyzed pitch with a glove pop
            fb_score: Fastball-likeness to use (default: the session score)

        Raises:
            DegenerateInputError: If the pitch has no acoustic features
        """
        if analysis.acoustic_features is None:
            raise DegenerateInputError(
                f"Pitch {analysis.pitch_id} has no acoustic features", pitch_id=analysis.pitch_id
            )
        features: Dict[str, float] = dict(analysis.video_features)
        features[AUDIO_AMPLITUDE] = float(analysis.acoustic_features.peak_amp)
        if fb_score is None:
            fb_score = analysis.fb_score
        if fb_score is not None:
            features[AUDIO_FB_SCORE] = float(fb_score)
        features[AUDIO_DECAY_RATIO] = analysis.acoustic_features.decay_ratio
        features[AUDIO_POP_ZCR] = float(analysis.acoustic_features.zcr)
        return features

    def build_training_set(
        self,
        analyses: Sequence[PitchAnalysis],
        labels: Dict[str, str],
    ) -> List[TrainingExample]:
        """Labeled examples from analyzed pitches.

        Pitches without a label or without a glove pop are skipped.

        Args:
            analyses: Analyzed pitches
            labels: Pitch id -> pitch type
        """
        examples = []
        for analysis in analyses:
            label = labels.get(analysis.pitch_id)
            if label is None or not analysis.has_pop:
                continue
            examples.append(
                TrainingExample(label=label, features=self.feature_map(analysis), pitch_id=analysis.pitch_id)
            )
        logger.info(f"Built {len(examples)} training examples from {len(analyses)} pitches")
        return examples

    def select_model(self, examples: Sequence[TrainingExample]) -> ModelSelection:
        """Pick the feature set and k with the best leave-one-out accuracy."""
        feature_sets = default_feature_sets(examples, self.config.classifier)
        selection = select_best_model(examples, feature_sets, self.config.classifier.k_values)
        logger.info(
            f"Best model: {selection.best.feature_set} k={selection.best.k} "
            f"({selection.best.result.accuracy:.0%})"
        )
        return selection

    def classify(
        self,
        analysis: PitchAnalysis,
        examples: Sequence[TrainingExample],
        feature_names: Optional[Sequence[str]] = None,
        k: Optional[int] = None,
        calibration: Optional[FbScoreCalibration] = None,
    ) -> ClassificationResult:
        """Type a pitch from a new session against a labeled training session.

        The pitch's fastball-likeness is placed on the training session's
        scale before the k-NN vote.

        Args:
            analysis: Analyzed pitch with a glove pop
            examples: Labeled training examples
            feature_names: Features to compare (default: configured session features)
            k: Number of neighbours (default: configured k)
            calibration: Training-session scale (default: fitted on examples)

        Returns:
            ClassificationResult with the predicted type and vote tally
        """
        classifier = self.config.classifier
        if analysis.acoustic_features is None:
            raise DegenerateInputError(
                f"Pitch {analysis.pitch_id} has no acoustic features", pitch_id=analysis.pitch_id
            )
        calibration = calibration or FbScoreCalibration.fit(examples)
        acoustic = analysis.acoustic_features
        fb_score = calibration.score(acoustic.peak_amp, acoustic.decay_ratio, acoustic.zcr, classifier)

        if feature_names is None:
            feature_names = classifier.session_features
        if k is None:
            k = classifier.default_k
        result = classify_knn(self.feature_map(analysis, fb_score), examples, feature_names, k)
        logger.debug(f"{analysis.pitch_id}: {result.predicted} {result.votes}")
        return result


__all__ = [
    "NO_POP_ERROR",
    "PitchInput",
    "PitchAnalysis",
    "SessionAnalysis",
    "PitchAnalyzer",
]
