"""Shared fixtures: synthetic voiced signals at the analysis rate."""

import io

import numpy as np
import pytest
import soundfile as sf

SR = 16000


def sine(freq_hz: float, seconds: float = 2.0, amplitude: float = 0.5,
         sampling_rate: int = SR) -> np.ndarray:
    t = np.arange(int(seconds * sampling_rate)) / sampling_rate
    return (amplitude * np.sin(2 * np.pi * freq_hz * t)).astype(np.float32)


def glide(start_hz: float, end_hz: float, seconds: float = 2.0,
          amplitude: float = 0.5, sampling_rate: int = SR) -> np.ndarray:
    """Phase-continuous linear pitch glide."""
    n = int(seconds * sampling_rate)
    freqs = np.linspace(start_hz, end_hz, n)
    phase = 2 * np.pi * np.cumsum(freqs) / sampling_rate
    return (amplitude * np.sin(phase)).astype(np.float32)


def wav_bytes(y: np.ndarray, sampling_rate: int = SR) -> bytes:
    buf = io.BytesIO()
    sf.write(buf, y, sampling_rate, format="WAV", subtype="PCM_16")
    return buf.getvalue()


def block_signal(values, block: int = 256) -> np.ndarray:
    """Signal whose n-th hop block holds `values[n]`.

    With 512-sample windows and a 256-sample hop, window i starts with
    block i, so `first_sample_estimator` reports `values[i]` for it.
    """
    return np.repeat(np.asarray(values, dtype=np.float32), block)


def first_sample_estimator(frame, sampling_rate):
    value = float(frame[0])
    return value if value != 0 else None


@pytest.fixture
def events():
    """Collects (name, payload) pairs emitted by the pipeline."""
    received = []

    def sink(name, payload):
        received.append((name, payload))

    sink.received = received
    return sink


@pytest.fixture
def voiced_200hz() -> np.ndarray:
    return sine(200.0)


@pytest.fixture
def silence() -> np.ndarray:
    return np.zeros(2 * SR, dtype=np.float32)
