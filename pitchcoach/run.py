"""
run.py

This script is the command line entry point of pitchcoach.

Usage:
    pitchcoach [-h] [-t] [--language LANGUAGE] [--sample-rate RATE] input_file

    Score the intonation of a recorded utterance.

    positional arguments:
    input_file          Input sound file to analyze.

    options:
    -h, --help          show this help message and exit
    -t, --transcribe    Also transcribe the recording.
    --language          Language for transcription. (default: en-US)
    --sample-rate       Analysis sampling rate in Hz. (default: 16000)
"""

import argparse
import logging
import sys
from pathlib import Path

from speech_recognition import RequestError, UnknownValueError

from .audio_utils import transcribe_audio_file
from .config import DEFAULT_CONFIG, settings
from .events import log_event
from .intonation import analyze_intonation_file
from .response import ErrorResponse, Response

SUPPORTED_EXTENSIONS = {
    ".wav", ".flac", ".ogg", ".mp3", ".webm"
}

logger = logging.getLogger(name="pitchcoach")


def setup_logging(level: str = "DEBUG") -> None:
    logger.setLevel(level)

    log_handler = logging.StreamHandler(sys.stdout)
    log_handler.setLevel(level)
    log_formatter = logging.Formatter(
        "[%(asctime)s] [%(name)s] [%(levelname)s]\t%(message)s")
    log_handler.setFormatter(log_formatter)
    logger.addHandler(log_handler)


def parse_args(parser: argparse.ArgumentParser, argv=None) -> argparse.Namespace:
    parser.add_argument(
        "input_file",
        help="Input sound file to analyze."
    )
    parser.add_argument(
        "-t", "--transcribe",
        action="store_true",
        default=False,
        help="Also transcribe the recording."
    )
    parser.add_argument(
        "--language",
        type=str,
        default=settings.language,
        help="Language for transcription."
    )
    parser.add_argument(
        "--sample-rate",
        type=int,
        default=DEFAULT_CONFIG.sampling_rate,
        help="Analysis sampling rate in Hz."
    )

    return parser.parse_args(argv)


def check_input_file(file_path: Path) -> ErrorResponse | None:
    """Return an ErrorResponse when `file_path` cannot be analyzed."""
    if not file_path.exists():
        logger.error("File '%s' does not exists.", file_path.name)
        return ErrorResponse(
            error_name="File Not Found",
            error_details=f"File '{file_path.name}' does not exists."
        )

    if not file_path.is_file():
        logger.error("'%s' is not a file.", file_path.absolute())
        return ErrorResponse(
            error_name="Not A File",
            error_details=f"'{file_path.absolute()}' is not a file."
        )

    if file_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        ext_str = ", ".join(sorted(SUPPORTED_EXTENSIONS))
        logger.error("File '%s' is not supported.\nSupports:\n%s",
                     file_path.name, ext_str)
        return ErrorResponse(
            error_name="File Not Supported",
            error_details=f"File '{file_path.name}' is not supported. Supports: {ext_str}"
        )

    return None


def main(argv=None) -> str:
    # init argument parser
    parser = argparse.ArgumentParser(
        prog="pitchcoach",
        description="Score the intonation of a recorded utterance."
    )
    args = parse_args(parser, argv)
    logger.debug("Arguments parsed: %s", str(args))

    file_path = Path(args.input_file)
    error = check_input_file(file_path)
    if error is not None:
        return error.to_json()

    config = DEFAULT_CONFIG.with_overrides(sampling_rate=args.sample_rate)
    response = Response()

    logger.info("Starts to process intonation")
    try:
        intonation = analyze_intonation_file(
            file_path, config=config, on_event=log_event)
        logger.debug("Intonation response: %s", intonation)
    except Exception as e:
        logger.exception("Intonation analysis failed")
        intonation = ErrorResponse.from_exception(e)
    response.set_value("intonation", intonation.get_data())

    if args.transcribe:
        logger.info("Starts to transcribe")
        try:
            transcript, confidence = transcribe_audio_file(
                file_path, language=args.language)
            response.set_value("transcript", transcript)
            response.set_value("confidence", confidence)
        except (UnknownValueError, RequestError) as e:
            logger.warning("Transcription failed: %s", e.__class__.__name__)
            response.set_value(
                "transcript", ErrorResponse.from_exception(e).get_data())
            response.set_value("confidence", 0)

    return response.to_json()


def cli() -> None:
    if len(sys.argv) == 1:
        sys.argv.append("--help")

    setup_logging(settings.log_level)
    print(main())


if __name__ == "__main__":
    cli()
