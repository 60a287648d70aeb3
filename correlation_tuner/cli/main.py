"""Main entry point for the Correlation Tuner CLI."""

import sys
import argparse
import time
from typing import List, Optional

from ..errors import InvalidConfiguration
from ..frequency_table import (
    DEFAULT_BASE_FREQUENCY,
    DEFAULT_MICRO_STEP,
    DEFAULT_SEMITONE_COUNT,
    build_candidate_table,
)
from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_types import Analysis
from ..presentation import (
    NoteChangeTracker,
    confidence_percent,
    format_announcement,
    format_confidence,
)
from ..core.config import ConfigManager
from ..core.factory import ComponentFactory

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog="correlation-tuner",
        description="Correlation Tuner - monophonic note detection",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config-dir",
        default=None,
        help="Configuration directory (default: ~/.config/correlation_tuner)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Candidate table
    table_parser = subparsers.add_parser("table", help="Print the candidate frequency table")
    table_parser.add_argument(
        "--base-frequency",
        type=float,
        default=DEFAULT_BASE_FREQUENCY,
        help=f"Frequency of the lowest note in Hz (default: {DEFAULT_BASE_FREQUENCY})",
    )
    table_parser.add_argument(
        "--semitones",
        type=int,
        default=DEFAULT_SEMITONE_COUNT,
        help=f"Number of semitones (default: {DEFAULT_SEMITONE_COUNT})",
    )
    table_parser.add_argument(
        "--micro-step",
        type=float,
        default=DEFAULT_MICRO_STEP,
        help="Flat/sharp offset in octaves (default: 1/48)",
    )

    # Offline file analysis
    analyze_parser = subparsers.add_parser("analyze", help="Detect notes in a sound file")
    analyze_parser.add_argument("file", help="Path of the sound file")
    analyze_parser.add_argument(
        "--window-ms", type=float, default=None, help="Window length in milliseconds"
    )
    analyze_parser.add_argument(
        "--hop-ms", type=float, default=None, help="Distance between windows in milliseconds"
    )
    analyze_parser.add_argument(
        "--threshold", type=float, default=None, help="Confidence threshold"
    )

    # Live detection
    listen_parser = subparsers.add_parser("listen", help="Detect notes from a microphone")
    listen_parser.add_argument(
        "--device", type=int, default=None, help="Audio input device ID"
    )
    listen_parser.add_argument(
        "--duration", type=float, default=None, help="Stop after this many seconds"
    )
    listen_parser.add_argument(
        "--sample-rate", type=int, default=None, help="Preferred sample rate in Hz"
    )
    listen_parser.add_argument(
        "--threshold", type=float, default=None, help="Confidence threshold"
    )

    subparsers.add_parser("devices", help="List audio input devices")

    return parser


def print_table(args) -> int:
    table = build_candidate_table(args.base_frequency, args.semitones, args.micro_step)
    for index, candidate in enumerate(table):
        print(f"{index:3d}  {candidate.frequency:9.2f} Hz  {candidate.scientific_name:<4} {candidate.name}")
    return 0


def describe(analysis: Analysis, threshold: float) -> str:
    """One line describing an analysis, '-' when nothing was detected."""
    outcome = analysis.outcome
    if not outcome.detected:
        return f"{analysis.timestamp:8.3f}s  -"
    return (
        f"{analysis.timestamp:8.3f}s  {outcome.candidate.scientific_name:<4} "
        f"{outcome.candidate.name:<18} {outcome.candidate.frequency:8.2f} Hz  "
        f"confidence {outcome.confidence:7.1f} ({confidence_percent(outcome.confidence, threshold)}%)"
    )


def analyze_file(args, factory: ComponentFactory) -> int:
    import soundfile as sf

    from ..audio.wav_input import read_windows

    windowing = factory.config_manager.windowing_settings()
    detector = factory.create_pitch_detector(confidence_threshold=args.threshold)

    window_ms = windowing.window_duration_ms if args.window_ms is None else args.window_ms
    hop_ms = windowing.process_interval_ms if args.hop_ms is None else args.hop_ms

    detections = 0
    try:
        for window in read_windows(args.file, window_ms, hop_ms):
            analysis = detector.analyze(window)
            if analysis.outcome.detected:
                detections += 1
            print(describe(analysis, detector.confidence_threshold))
    except ValueError as e:
        logger.error(f"Invalid analysis options: {e}")
        return 1
    except (OSError, sf.LibsndfileError) as e:
        logger.error(f"Error reading {args.file}: {e}")
        return 1

    logger.info(f"Analysis of {args.file} complete: {detections} windows with a note")
    return 0


def listen(args, factory: ComponentFactory) -> int:
    detector = factory.create_pitch_detector(confidence_threshold=args.threshold)
    audio_input = factory.create_audio_input(
        device_id=args.device, sample_rate=args.sample_rate
    )
    service = factory.create_note_detection_service(
        audio_input=audio_input, detector=detector
    )
    tracker = NoteChangeTracker()

    def on_note(analysis: Analysis, elapsed: float) -> None:
        if tracker.update(analysis.outcome):
            outcome = analysis.outcome
            print(
                f"[{elapsed:6.2f}s] {format_announcement(outcome.candidate)}  "
                f"{format_confidence(outcome.confidence, detector.confidence_threshold)}",
                flush=True,
            )

    service.events.on_note_detected(on_note)

    if not service.start():
        logger.error("Could not start listening")
        return 1

    print("Listening for notes... (Ctrl+C to stop)", flush=True)
    try:
        if args.duration is None:
            while service.is_running():
                time.sleep(0.25)
        else:
            time.sleep(args.duration)
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    finally:
        service.stop()
    return 0


def list_devices() -> int:
    from ..audio.audio_input import default_input_device, list_input_devices

    default = default_input_device()
    for device in list_input_devices():
        marker = "*" if device["id"] == default else " "
        print(
            f"{marker} {device['id']:3d}  {device['name']}  "
            f"({device['max_input_channels']} ch, {device['default_samplerate']:.0f} Hz)"
        )
    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    parsed_args = parser.parse_args(args)

    setup_logging(level="DEBUG" if parsed_args.debug else None)

    if parsed_args.command is None:
        parser.print_help()
        return 1

    try:
        if parsed_args.command == "table":
            return print_table(parsed_args)
        if parsed_args.command == "devices":
            return list_devices()

        factory = ComponentFactory(ConfigManager(parsed_args.config_dir))
        if parsed_args.command == "analyze":
            return analyze_file(parsed_args, factory)
        return listen(parsed_args, factory)
    except InvalidConfiguration as e:
        logger.error(f"Invalid configuration: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
