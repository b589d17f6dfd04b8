"""
Pitch contour extraction.

This module slides a fixed analysis window across a waveform and runs a
YIN fundamental-frequency estimator on every window. Estimates outside an
acceptance band are discarded. When the primary band leaves too few
estimates, the whole waveform is scanned again with a relaxed band and the
new estimates are appended to the first ones.
"""

from typing import Callable, Iterator, List, Optional, Tuple

import librosa
import numpy as np

from .config import DEFAULT_CONFIG, IntonationConfig
from .events import EventSink, emit

PitchEstimator = Callable[[np.ndarray, int], Optional[float]]


def yin_pitch(
    frame: np.ndarray,
    sampling_rate: int,
    threshold: float = DEFAULT_CONFIG.yin_threshold,
    probability_threshold: float = DEFAULT_CONFIG.yin_probability_threshold,
) -> Optional[float]:
    """
    Estimate the fundamental frequency of a single window with YIN.

    The difference function is evaluated over the first half of the window,
    normalized by its cumulative mean, and the first lag whose value dips
    below `threshold` is followed down to its local minimum. The lag is
    refined with parabolic interpolation.

    Args:
        frame (np.ndarray):
            One analysis window of float samples.
        sampling_rate (int):
            Sampling rate of the audio.
        threshold (float):
            Absolute threshold on the normalized difference.
        probability_threshold (float):
            Minimum periodicity (1 - normalized difference) to report a pitch.

    Returns:
        Optional[float]:
            The F0 estimate in Hz, or None for silent, unvoiced or noisy
            windows.
    """
    half = len(frame) // 2
    if half < 3:
        return None

    x = np.asarray(frame, dtype=np.float64)

    # d[tau] = sum_j (x[j] - x[j + tau]) ** 2 for tau in [0, half)
    lagged = np.lib.stride_tricks.sliding_window_view(x, half)[:half]
    diff = np.sum((x[:half] - lagged) ** 2, axis=1)

    # Cumulative mean normalized difference, d'[0] = 1
    running = np.cumsum(diff[1:])
    taus = np.arange(1, half)
    cmnd = np.ones(half)
    np.divide(diff[1:] * taus, running, out=cmnd[1:], where=running > 0)

    below = np.flatnonzero(cmnd[2:] < threshold)
    if below.size == 0:
        return None

    tau = int(below[0]) + 2
    while tau + 1 < half and cmnd[tau + 1] < cmnd[tau]:
        tau += 1

    if 1.0 - cmnd[tau] < probability_threshold:
        return None

    better_tau = _parabolic_interpolation(cmnd, tau)
    if better_tau <= 0:
        return None

    return float(sampling_rate / better_tau)


def _parabolic_interpolation(cmnd: np.ndarray, tau: int) -> float:
    x0 = tau - 1 if tau >= 1 else tau
    x2 = tau + 1 if tau + 1 < len(cmnd) else tau

    if x0 == tau:
        return float(tau if cmnd[tau] <= cmnd[x2] else x2)
    if x2 == tau:
        return float(tau if cmnd[tau] <= cmnd[x0] else x0)

    s0, s1, s2 = cmnd[x0], cmnd[tau], cmnd[x2]
    denominator = 2 * (2 * s1 - s2 - s0)
    if denominator == 0:
        return float(tau)

    return float(tau + (s2 - s0) / denominator)


def count_windows(length: int, window_size: int, hop_length: int) -> int:
    """Number of full windows that fit in `length` samples."""
    if length < window_size:
        return 0
    return (length - window_size) // hop_length + 1


def iter_windows(
    y: np.ndarray,
    window_size: int,
    hop_length: int,
) -> Iterator[np.ndarray]:
    """Yield windows starting at 0, hop, 2*hop, ... while they fit in `y`."""
    if count_windows(len(y), window_size, hop_length) == 0:
        return

    frames = librosa.util.frame(
        np.ascontiguousarray(y), frame_length=window_size, hop_length=hop_length)
    for i in range(frames.shape[-1]):
        yield frames[:, i]


def scan_pitch(
    y: np.ndarray,
    sampling_rate: int,
    window_size: int,
    hop_length: int,
    band: Tuple[float, float],
    estimator: PitchEstimator = yin_pitch,
) -> List[float]:
    """
    Estimate F0 for every window and keep those strictly inside `band`.

    Returns:
        List[float]:
            Accepted estimates in window order.
    """
    low, high = band
    accepted = []
    for frame in iter_windows(y, window_size, hop_length):
        f0 = estimator(frame, sampling_rate)
        if f0 is not None and low < f0 < high:
            accepted.append(f0)

    return accepted


def extract_pitch_contour(
    y: np.ndarray,
    sampling_rate: int = DEFAULT_CONFIG.sampling_rate,
    config: Optional[IntonationConfig] = None,
    on_event: Optional[EventSink] = None,
    estimator: Optional[PitchEstimator] = None,
) -> List[float]:
    """
    Build the pitch contour of an utterance with a two-phase scan.

    Phase 1 keeps estimates in `config.primary_band`. If that yields fewer
    than `config.min_pitch_count` estimates, phase 2 rescans the waveform
    with `config.relaxed_band` and appends everything it accepts. Windows
    accepted by both phases therefore appear twice.

    Args:
        y (np.ndarray):
            Waveform, usually after `normalize_amplitude`.
        sampling_rate (int):
            Sampling rate of the waveform.
        config (IntonationConfig, optional):
            Window, hop and band settings.
        on_event (EventSink, optional):
            Receives progress events.
        estimator (PitchEstimator, optional):
            Per-window F0 estimator. Defaults to YIN with the thresholds
            from `config`.

    Returns:
        List[float]:
            The contour in window order, or an empty list when fewer than
            `config.min_pitch_count` estimates were found in total.
    """
    config = config or DEFAULT_CONFIG
    if estimator is None:
        def estimator(frame, rate):
            return yin_pitch(frame, rate,
                             threshold=config.yin_threshold,
                             probability_threshold=config.yin_probability_threshold)

    # 1) Strict scan
    pitches = scan_pitch(y, sampling_rate, config.window_size,
                         config.hop_length, config.primary_band, estimator)
    emit(on_event, "phase1_complete", pitch_count=len(pitches),
         band=config.primary_band)

    # 2) Relaxed rescan, appended without deduplication
    if len(pitches) < config.min_pitch_count:
        emit(on_event, "phase2_started", band=config.relaxed_band)
        pitches += scan_pitch(y, sampling_rate, config.window_size,
                              config.hop_length, config.relaxed_band, estimator)
        emit(on_event, "phase2_complete", pitch_count=len(pitches))

    if len(pitches) < config.min_pitch_count:
        emit(on_event, "insufficient_pitch", pitch_count=len(pitches),
             required=config.min_pitch_count)
        return []

    return pitches
