"""
Configuration for the intonation analyzer.

`IntonationConfig` holds every tuning constant of the analysis pipeline
(windowing, amplification, acceptance bands and the scoring rubric) so
tests and callers can exercise boundary values directly. `Settings` holds
the environment-driven options of the CLI and HTTP server.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Tuple


@dataclass(frozen=True)
class IntonationConfig:
    """Tuning constants of the intonation pipeline."""

    # Audio
    sampling_rate: int = 16000

    # Windowing: 512 samples (32 ms at 16 kHz) with 50% overlap
    window_size: int = 512
    hop_length: int = 256

    # Quiet recordings are amplified before pitch detection
    quiet_peak_threshold: float = 0.1
    quiet_gain: float = 3.0

    # Open intervals (Hz) an estimate must fall in to be accepted
    primary_band: Tuple[float, float] = (40.0, 600.0)
    relaxed_band: Tuple[float, float] = (30.0, 800.0)
    min_pitch_count: int = 5

    # YIN estimator
    yin_threshold: float = 0.10
    yin_probability_threshold: float = 0.10

    # Rubric breakpoints, points are (low, middle, high) bucket
    range_breakpoints: Tuple[float, float] = (20.0, 60.0)
    range_points: Tuple[int, int, int] = (10, 30, 40)
    sd_breakpoints: Tuple[float, float] = (10.0, 40.0)
    sd_points: Tuple[int, int, int] = (10, 30, 20)
    slope_breakpoints: Tuple[float, float] = (-0.1, 0.05)
    slope_points: Tuple[int, int, int] = (30, 20, 10)

    # Feedback wording thresholds
    feedback_shaky_sd: float = 40.0
    feedback_robotic_sd: float = 10.0
    feedback_rising_slope: float = 0.1
    feedback_falling_slope: float = -0.1

    def with_overrides(self, **kwargs) -> "IntonationConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **kwargs)


DEFAULT_CONFIG = IntonationConfig()


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Environment based settings for the CLI and HTTP server."""

    host: str = os.getenv("PITCHCOACH_HOST", "0.0.0.0")
    port: int = int(os.getenv("PITCHCOACH_PORT", "8000"))
    log_level: str = os.getenv("PITCHCOACH_LOG_LEVEL", "INFO")

    # Empty string disables archival of uploaded recordings
    archive_dir: str = os.getenv("PITCHCOACH_ARCHIVE_DIR", "")

    # Language passed to the speech recognizer
    language: str = os.getenv("PITCHCOACH_LANGUAGE", "en-US")

    cors_origins: list[str] = field(default_factory=lambda: _split_csv(
        os.getenv("PITCHCOACH_CORS_ORIGINS", "http://localhost:5173")))


settings = Settings()
