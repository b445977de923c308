"""Pitch analysis: per-pitch audio/video stages and pitch typing."""

from .pitch_analyzer import PitchAnalysis, PitchAnalyzer, PitchInput, SessionAnalysis

__all__ = ["PitchAnalysis", "PitchAnalyzer", "PitchInput", "SessionAnalysis"]
