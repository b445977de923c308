"""Custom exception classes for the pitch analyzer."""

from __future__ import annotations

from typing import Optional


class PitchAnalyzerError(Exception):
    """Base exception for all pitch analyzer errors."""

    pass


class AnalysisError(PitchAnalyzerError):
    """Base exception for signal-analysis errors."""

    def __init__(self, message: str, pitch_id: Optional[str] = None):
        self.pitch_id = pitch_id
        super().__init__(message)


class DegenerateInputError(AnalysisError):
    """Raised when input is empty or malformed enough that a stage cannot run."""

    pass


class EmptyTrainingSetError(DegenerateInputError):
    """Raised when a classifier is asked to predict without labeled examples."""

    pass


class VideoFeatureError(AnalysisError):
    """Raised when supplied video frames cannot be analyzed."""

    pass


class ConfigError(PitchAnalyzerError):
    """Base exception for configuration errors."""

    pass


class InvalidConfigError(ConfigError):
    """Raised when configuration file is invalid or corrupted."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration fails schema validation."""

    def __init__(self, message: str, validation_errors: Optional[list] = None):
        self.validation_errors = validation_errors or []
        super().__init__(message)
