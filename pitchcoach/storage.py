"""
On-disk archival of analyzed recordings.

Uploads are stored in one directory per day, next to the mono waveform
that was actually analyzed.
"""

import os
import time
from datetime import date
from os import PathLike
from pathlib import Path
from typing import Dict, Optional

import numpy as np
import soundfile as sf


def archive_recording(
        raw: bytes,
        y: np.ndarray,
        sampling_rate: int,
        base_dir: str | PathLike,
        suffix: str = ".webm",
        today: Optional[date] = None) -> Dict[str, str]:
    """Store the original upload and the processed waveform.

    Files are written as `<base_dir>/<YYYY-MM-DD>/original-<ms><suffix>` and
    `processed-<ms>.wav` (16-bit PCM). Returns both paths as strings. OS
    errors propagate to the caller.
    """
    save_dir = Path(base_dir) / (today or date.today()).isoformat()
    os.makedirs(save_dir, exist_ok=True)

    time_tag = int(time.time() * 1000)
    original_path = save_dir / f"original-{time_tag}{suffix or '.bin'}"
    processed_path = save_dir / f"processed-{time_tag}.wav"

    original_path.write_bytes(raw)
    sf.write(processed_path, y, sampling_rate, subtype="PCM_16")

    return {"original": str(original_path), "processed": str(processed_path)}
