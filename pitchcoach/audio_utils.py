"""
Common audio utilities for pitchcoach.

Provides small helpers to load audio at the analysis sampling rate,
convert raw 16-bit PCM into float samples, amplify quiet recordings and
perform STT via `speech_recognition` (using a normalized temporary WAV).
"""
from __future__ import annotations

import io
import os
import tempfile
import wave
from os import PathLike
from typing import Any, Optional, Tuple

import librosa
import numpy as np
import soundfile as sf
import speech_recognition as sr

from .config import DEFAULT_CONFIG, IntonationConfig
from .events import EventSink, emit

PCM16_SCALE = 32768.0


def load_audio(
        audio_file_path: str | PathLike,
        sampling_rate: int = DEFAULT_CONFIG.sampling_rate) -> Tuple[np.ndarray, int]:
    """Load audio as mono float32, resampled to `sampling_rate`.

    Raises FileNotFoundError if `audio_file_path` does not exist. Other
    exceptions from `librosa.load` are propagated to the caller.
    """
    if not os.path.exists(audio_file_path):
        raise FileNotFoundError(audio_file_path)

    y, sr_loaded = librosa.load(audio_file_path, sr=sampling_rate, mono=True)
    return y.astype(np.float32, copy=False), int(sr_loaded)


def pcm16_to_float(data: bytes) -> np.ndarray:
    """Convert 16-bit little-endian PCM into float32 samples in [-1.0, 1.0).

    Each sample is divided by 32768 with no dithering. A trailing odd byte
    is ignored.
    """
    usable = len(data) - (len(data) % 2)
    samples = np.frombuffer(data[:usable], dtype="<i2")
    return samples.astype(np.float32) / PCM16_SCALE


def wav_bytes_to_float(data: bytes) -> Tuple[np.ndarray, int]:
    """Decode an in-memory mono PCM16 WAV file.

    Returns the float samples and the sampling rate declared in the header.
    Raises ValueError for WAV files that are not mono 16-bit PCM.
    """
    with wave.open(io.BytesIO(data), "rb") as wav_file:
        if wav_file.getnchannels() != 1 or wav_file.getsampwidth() != 2:
            raise ValueError(
                "Expected mono 16-bit PCM, got "
                f"{wav_file.getnchannels()} channel(s) of "
                f"{wav_file.getsampwidth() * 8}-bit samples")
        frames = wav_file.readframes(wav_file.getnframes())
        return pcm16_to_float(frames), wav_file.getframerate()


def decode_audio_bytes(
        data: bytes,
        suffix: str = ".wav",
        sampling_rate: int = DEFAULT_CONFIG.sampling_rate) -> np.ndarray:
    """Decode an uploaded recording into a mono waveform at `sampling_rate`.

    Mono PCM16 WAV at the analysis rate is converted directly; anything else
    goes through a temporary file and `load_audio`.
    """
    if data[:4] == b"RIFF" and data[8:12] == b"WAVE":
        try:
            y, file_rate = wav_bytes_to_float(data)
        except (ValueError, wave.Error):
            pass
        else:
            if file_rate == sampling_rate:
                return y

    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = os.path.join(temp_dir, "upload" + (suffix or ".wav"))
        with open(temp_path, "wb") as fp:
            fp.write(data)
        y, _ = load_audio(temp_path, sampling_rate=sampling_rate)
        return y


def normalize_amplitude(
        y: np.ndarray,
        config: Optional[IntonationConfig] = None,
        on_event: Optional[EventSink] = None) -> np.ndarray:
    """Amplify a quiet waveform so pitch detection has something to work with.

    When the peak absolute amplitude is below `config.quiet_peak_threshold`
    every sample is multiplied by `config.quiet_gain` and hard clipped to
    [-1.0, 1.0]. Louder waveforms are returned unchanged.
    """
    config = config or DEFAULT_CONFIG
    if y.size == 0:
        return y

    peak = float(np.max(np.abs(y)))
    if peak >= config.quiet_peak_threshold:
        return y

    emit(on_event, "amplified", peak=round(peak, 4), gain=config.quiet_gain)
    return np.clip(y * config.quiet_gain, -1.0, 1.0)


def parse_recognition_result(result: Any) -> Tuple[str, float]:
    """Pick the top alternative of a `recognize_google(show_all=True)` result.

    Returns the stripped transcript and its confidence as a percentage with
    2 decimals, 0 when the service did not report one. Raises
    `UnknownValueError` when nothing was recognized.
    """
    alternatives = result.get("alternative") if isinstance(result, dict) else None
    if not alternatives:
        raise sr.UnknownValueError()

    best = alternatives[0]
    confidence = best.get("confidence") or 0.0
    return best.get("transcript", "").strip(), round(float(confidence) * 100, 2)


def transcribe_audio_file(
        audio_file_path: str | PathLike,
        language: str = "en-US") -> Tuple[str, float]:
    """Transcribe audio using `speech_recognition` + Google Web Speech.

    The audio is loaded and normalized, written to a temporary WAV and fed to
    the recognizer. Returns the transcript and its confidence percentage.
    This function re-raises the same exceptions from `speech_recognition`
    so callers can decide how to handle them.
    """
    y, sr_native = load_audio(audio_file_path)
    r = sr.Recognizer()
    with tempfile.TemporaryDirectory() as temp_dir:
        normalized_y = librosa.util.normalize(y)
        temp_full_wav_path = os.path.join(temp_dir, "full_audio.wav")
        sf.write(temp_full_wav_path, normalized_y, sr_native)

        with sr.AudioFile(temp_full_wav_path) as source:
            r.adjust_for_ambient_noise(source, duration=1)

        with sr.AudioFile(temp_full_wav_path) as source:
            audio_data = r.record(source)
            # Let caller handle UnknownValueError / RequestError
            result = r.recognize_google(
                audio_data, language=language, show_all=True)

    return parse_recognition_result(result)
