"""Simple FastAPI server exposing an /analyze endpoint for pitchcoach.

This wraps the intonation analysis so the browser recorder (or any client)
can upload a recording and receive the analysis results as JSON.

Usage:
  POST /analyze
    - multipart form-data
      - audio: recording (.wav, .webm, ...)
      - transcribe: optional boolean flag (form field)

The endpoint decodes the upload to 16 kHz mono, runs the intonation
analysis and the optional transcription concurrently in a worker thread,
and returns
  {"intonation": {...}, "transcript": str | null, "confidence": float,
   "archived": {...} | null}
"""

import concurrent.futures
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .audio_utils import decode_audio_bytes, transcribe_audio_file
from .config import DEFAULT_CONFIG, Settings, settings
from .events import log_event
from .intonation import analyze_intonation
from .response import ErrorResponse
from .storage import archive_recording

logger = logging.getLogger(name="pitchcoach")


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings

    app = FastAPI(title="Pitchcoach Intonation API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def process_upload(contents: bytes, filename: str,
                       transcribe: bool) -> JSONResponse:
        """Decode, archive and analyze one upload. Runs in a worker thread."""
        suffix = Path(filename).suffix or ".wav"
        sampling_rate = DEFAULT_CONFIG.sampling_rate

        try:
            y = decode_audio_bytes(contents, suffix=suffix,
                                   sampling_rate=sampling_rate)
        except Exception as e:
            logger.exception("Could not decode upload '%s'", filename)
            return JSONResponse(
                status_code=422,
                content={"intonation": ErrorResponse.from_exception(e).get_data(),
                         "transcript": None,
                         "confidence": 0,
                         "archived": None})

        results = {"transcript": None, "confidence": 0, "archived": None}

        if app_settings.archive_dir:
            results["archived"] = archive_recording(
                contents, y, sampling_rate, app_settings.archive_dir,
                suffix=suffix)

        # Save uploaded file to a temporary path for the recognizer
        tmp_path = None
        if transcribe:
            tmp = tempfile.NamedTemporaryFile(delete=False, suffix=suffix)
            try:
                tmp.write(contents)
                tmp.flush()
                tmp_path = Path(tmp.name)
            finally:
                tmp.close()

        tasks = {"intonation": lambda: analyze_intonation(
            y, sampling_rate, on_event=log_event)}
        if tmp_path is not None:
            tasks["transcript"] = lambda: transcribe_audio_file(
                tmp_path, language=app_settings.language)

        status_code = 200
        # run in threads so transcription overlaps the pitch analysis
        try:
            with concurrent.futures.ThreadPoolExecutor(max_workers=len(tasks)) as ex:
                fut_to_name = {ex.submit(func): name for name, func in tasks.items()}

                for fut in concurrent.futures.as_completed(fut_to_name):
                    name = fut_to_name[fut]
                    try:
                        res = fut.result()
                    except Exception as e:
                        logger.exception("Task %s failed", name)
                        error = ErrorResponse.from_exception(e).get_data()
                        if name == "intonation":
                            results["intonation"] = error
                            status_code = 500
                        else:
                            results["transcription_error"] = error
                        continue

                    if name == "intonation":
                        results["intonation"] = res.get_data()
                    else:
                        results["transcript"], results["confidence"] = res
        finally:
            if tmp_path is not None:
                os.unlink(tmp_path)

        return JSONResponse(status_code=status_code, content=results)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/analyze")
    async def analyze(
        audio: Optional[UploadFile] = File(None),
        transcribe: bool = Form(False),
    ):
        if audio is None:
            raise HTTPException(status_code=400, detail="No file uploaded")

        contents = await audio.read()
        if not contents:
            raise HTTPException(status_code=400, detail="Uploaded file is empty")

        # decoding and pitch analysis are CPU bound, keep them off the event loop
        return await run_in_threadpool(
            process_upload, contents, audio.filename or "", transcribe)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
