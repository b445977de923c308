"""Audio stages: envelope, glove pop, umpire call, pop descriptors, velocity."""

from .envelope import compute_envelope
from .features import analyze_pop_signature, extract_acoustic_features
from .glove_pop import detect_glove_pop
from .umpire_call import score_umpire_call
from .velocity import estimate_velocities

__all__ = [
    "compute_envelope",
    "detect_glove_pop",
    "score_umpire_call",
    "extract_acoustic_features",
    "analyze_pop_signature",
    "estimate_velocities",
]
