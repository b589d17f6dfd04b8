"""
pitchcoach: scores the intonation of a recorded spoken utterance.
"""

from .config import DEFAULT_CONFIG, IntonationConfig
from .intonation import (FeatureSet, analyze_intonation,
                         analyze_intonation_file, compute_features,
                         synthesize_score)
from .pitch import extract_pitch_contour

__all__ = [
    "DEFAULT_CONFIG",
    "FeatureSet",
    "IntonationConfig",
    "analyze_intonation",
    "analyze_intonation_file",
    "compute_features",
    "extract_pitch_contour",
    "synthesize_score",
]
