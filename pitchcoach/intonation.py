"""
Intonation analyzer module.

This module reduces a pitch contour to summary statistics (range, mean,
standard deviation and an end-of-utterance slope) and maps them through a
fixed rubric into a 0-100 score with templated feedback. It relies on
`audio_utils` for amplitude normalization and on `pitch` for the contour.
"""

import math
from dataclasses import dataclass
from os import PathLike
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .audio_utils import load_audio, normalize_amplitude
from .config import DEFAULT_CONFIG, IntonationConfig
from .events import EventSink, emit
from .pitch import extract_pitch_contour
from .response import IntonationResponse

INSUFFICIENT_FEEDBACK = (
    "Could not analyze your intonation. Please check that you:\n"
    "• Speak louder\n"
    "• Record for longer (at least 3-5 seconds)\n"
    "• Make sure your microphone is working"
)


@dataclass(frozen=True)
class FeatureSet:
    """Summary statistics of a pitch contour."""

    min: float
    max: float
    range: float
    mean: float
    variance: float
    standard_deviation: float
    slope: float
    count: int


def compute_features(contour: Sequence[float],
                     min_count: int = DEFAULT_CONFIG.min_pitch_count) -> FeatureSet:
    """
    Compute summary statistics of a pitch contour.

    The slope is `(last - first) / count`, a crude trend over the whole
    utterance rather than a regression slope. The rubric breakpoints are
    tuned against this exact formula.

    Raises:
        ValueError: If the contour has fewer than `min_count` points.
    """
    if len(contour) < max(1, min_count):
        raise ValueError(
            f"At least {max(1, min_count)} pitch values are "
            f"required, got {len(contour)}")

    pitches = np.asarray(contour, dtype=np.float64)
    lowest = float(pitches.min())
    highest = float(pitches.max())
    mean = float(pitches.mean())
    variance = float(np.mean((pitches - mean) ** 2))

    return FeatureSet(
        min=lowest,
        max=highest,
        range=highest - lowest,
        mean=mean,
        variance=variance,
        standard_deviation=math.sqrt(variance),
        slope=float(pitches[-1] - pitches[0]) / len(pitches),
        count=len(pitches),
    )


def _bucket_points(value: float,
                   breakpoints: Tuple[float, float],
                   points: Tuple[int, int, int]) -> int:
    low, high = breakpoints
    if value < low:
        return points[0]
    if value < high:
        return points[1]
    return points[2]


def score_features(features: FeatureSet,
                   config: Optional[IntonationConfig] = None) -> int:
    """Sum the range, stability and declination points, clamped to [0, 100]."""
    config = config or DEFAULT_CONFIG

    score = 0
    # Range: distance between the highest and lowest notes
    score += _bucket_points(features.range,
                            config.range_breakpoints, config.range_points)
    # Stability: moderate variation beats both robotic and shaky voices
    score += _bucket_points(features.standard_deviation,
                            config.sd_breakpoints, config.sd_points)
    # Declination: how the voice ends the sentence
    score += _bucket_points(features.slope,
                            config.slope_breakpoints, config.slope_points)

    return int(min(100, max(0, score)))


def build_feedback(features: FeatureSet,
                   config: Optional[IntonationConfig] = None) -> str:
    config = config or DEFAULT_CONFIG
    sentences: List[str] = []

    range_low, range_high = config.range_breakpoints
    if features.range < range_low:
        sentences.append("Your intonation is very flat (monotone). "
                         "Try varying the pitch of your voice more.")
    elif features.range < range_high:
        sentences.append("Good intonation variation.")
    else:
        sentences.append("Great tonal variation!")

    if features.standard_deviation > config.feedback_shaky_sd:
        sentences.append("Your voice sounds shaky or unstable.")
    elif features.standard_deviation < config.feedback_robotic_sd:
        sentences.append("Your voice sounds too robotic. "
                         "Try to be more expressive.")
    else:
        sentences.append("Great vocal stability.")

    if features.slope > config.feedback_rising_slope:
        sentences.append("You ended the sentence going up "
                         "(it sounds like a question).")
    elif features.slope < config.feedback_falling_slope:
        sentences.append("You ended the sentence going down "
                         "(natural for statements).")
    else:
        sentences.append("Neutral ending.")

    return " ".join(sentences).strip()


def synthesize_score(features: Optional[FeatureSet],
                     config: Optional[IntonationConfig] = None) -> IntonationResponse:
    """
    Turn contour statistics into a scored `IntonationResponse`.

    Args:
        features (FeatureSet | None):
            Statistics of the contour, or None when too few pitch values
            were found.
        config (IntonationConfig, optional):
            Rubric breakpoints and points.

    Returns:
        IntonationResponse:
            Score and feedback, plus the rounded statistics on success. When
            `features` is None the score is 0 and the feedback explains how
            to record a usable sample.
    """
    if features is None:
        return IntonationResponse(score=0, feedback=INSUFFICIENT_FEEDBACK)

    return IntonationResponse(
        score=score_features(features, config),
        feedback=build_feedback(features, config),
        range=features.range,
        sd=features.standard_deviation,
        slope=features.slope,
        pitch_count=features.count,
        mean_pitch=features.mean,
    )


def analyze_intonation(
    y: np.ndarray,
    sampling_rate: int = DEFAULT_CONFIG.sampling_rate,
    config: Optional[IntonationConfig] = None,
    on_event: Optional[EventSink] = None,
) -> IntonationResponse:
    """
    Analyze the intonation of a mono waveform.

    Workflow:
        1. Amplify the waveform if it is too quiet.
        2. Extract the pitch contour with the two-phase scan.
        3. Compute contour statistics when enough pitch values were found.
        4. Score the statistics and build feedback.

    Args:
        y (np.ndarray):
            Float waveform in [-1.0, 1.0].
        sampling_rate (int):
            Sampling rate of the waveform.
        config (IntonationConfig, optional):
            Pipeline constants, defaults to `DEFAULT_CONFIG`.
        on_event (EventSink, optional):
            Receives progress events, e.g. `events.log_event`.

    Returns:
        IntonationResponse:
            Always well formed; a recording without enough pitch data
            yields score 0 and guidance feedback.
    """
    config = config or DEFAULT_CONFIG

    samples = normalize_amplitude(y, config=config, on_event=on_event)
    contour = extract_pitch_contour(
        samples, sampling_rate, config=config, on_event=on_event)

    if len(contour) < max(1, config.min_pitch_count):
        return synthesize_score(None, config)

    features = compute_features(contour, config.min_pitch_count)
    emit(on_event, "features_computed", pitch_count=features.count,
         range=round(features.range, 2),
         sd=round(features.standard_deviation, 2),
         slope=round(features.slope, 4))

    return synthesize_score(features, config)


def analyze_intonation_file(
    audio_file_path: str | PathLike,
    config: Optional[IntonationConfig] = None,
    on_event: Optional[EventSink] = None,
) -> IntonationResponse:
    """Load an audio file at the analysis rate and analyze its intonation."""
    config = config or DEFAULT_CONFIG
    y, sampling_rate = load_audio(audio_file_path,
                                  sampling_rate=config.sampling_rate)

    return analyze_intonation(y, sampling_rate, config=config,
                              on_event=on_event)
