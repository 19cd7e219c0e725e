"""Punch Tracker - CLI entry point."""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional, Tuple

from .analysis.engine import StepResult, StrikeEngine
from .config.engine_config import DEFAULT_CONFIG, EngineConfig
from .core.frame import KeypointFrame
from .core.recording import KeypointRecorder, read_keypoint_frames
from .storage.history_store import JsonHistoryStore
from .utils import setup_logger


def build_config(
    alpha: Optional[float] = None,
    cooldown: Optional[float] = None,
    allow_simultaneous: bool = False,
) -> EngineConfig:
    """Apply the CLI overrides to ``DEFAULT_CONFIG``."""
    config = DEFAULT_CONFIG
    if alpha is not None:
        config = dataclasses.replace(config, filter=dataclasses.replace(config.filter, alpha=alpha))
    if cooldown is not None:
        config = dataclasses.replace(config, strike=dataclasses.replace(config.strike, cooldown_s=cooldown))
    if allow_simultaneous:
        config = dataclasses.replace(
            config,
            arbitration=dataclasses.replace(config.arbitration, allow_simultaneous=True),
        )
    return config


def build_engine(args: argparse.Namespace) -> StrikeEngine:
    config = build_config(args.alpha, args.cooldown, args.allow_simultaneous)
    store = JsonHistoryStore(args.history_file) if args.history_file else None
    return StrikeEngine(config, history_store=store)


def report_strikes(result: StepResult, frame_idx: int) -> None:
    for event in result.strikes:
        stats = result.stats(event.side)
        print(
            f"  [{event.timestamp:8.3f}s] frame {frame_idx:5d}  {event.side:<5} strike #{stats.total}"
            f"  speed={event.speed:.2f}  power={event.power:.2f}  {stats.last_percent}%"
        )


def print_summary(engine: StrikeEngine, frames: int) -> None:
    print(f"\nProcessed {frames} frames")
    print(f"Calibration: {engine.calibration_status.value}")
    for side in ("left", "right"):
        stats = engine.stats[side]
        print(
            f"  {side:<5}: {stats.total} strikes, last {stats.last_percent}%, "
            f"baseline {stats.baseline:.2f}, avg {stats.average_percent}%"
        )


def run_frames(engine: StrikeEngine, frames: Iterable[KeypointFrame]) -> Tuple[int, int]:
    """Feed recorded frames through the engine.

    Returns:
        (frames processed, strikes accepted)
    """
    count = 0
    strikes = 0
    for frame in frames:
        result = engine.step(frame)
        report_strikes(result, count)
        strikes += len(result.strikes)
        count += 1
    return count, strikes


def replay(args: argparse.Namespace) -> int:
    """Re-run the engine on a JSONL keypoint recording (no model needed)."""
    print(f"Replaying keypoints: {args.input}")
    engine = build_engine(args)
    frames, _ = run_frames(engine, read_keypoint_frames(args.input, limit=args.max_frames))
    print_summary(engine, frames)
    return 0


def track_video(args: argparse.Namespace, camera: bool) -> int:
    """Run pose estimation and the strike engine on a video file or camera."""
    import cv2

    from .core.pose_estimator import PoseEstimator
    from .core.video_processor import CameraSource, VideoProcessor, VideoWriter
    from .visualization.overlay import OverlayRenderer

    video = writer = recorder = None
    frames = 0
    try:
        if camera:
            print(f"Opening camera: {args.camera}")
            video = CameraSource(args.camera, mirror=not args.no_mirror)
        else:
            print(f"Loading video: {args.input}")
            video = VideoProcessor(args.input)
        print(f"  Resolution: {video.width}x{video.height}")
        print(f"  FPS: {video.fps:.2f}")

        print(f"\nLoading model: {args.model}")
        estimator = PoseEstimator(args.model, args.device)
        print(f"  Device: {estimator.device}")

        engine = build_engine(args)
        renderer = OverlayRenderer()
        if args.output:
            writer = VideoWriter(args.output, video.width, video.height, video.fps)
        if args.record_keypoints:
            recorder = KeypointRecorder(args.record_keypoints)

        print("\nTracking strikes... (press q to stop)" if args.show else "\nTracking strikes...")
        for frame_idx, timestamp, frame in video.read_frames():
            keypoints = estimator.keypoint_frame(frame, timestamp, conf=args.confidence)
            if recorder is not None:
                recorder.write(keypoints)

            result = engine.step(keypoints)
            report_strikes(result, frame_idx)
            frames += 1

            if writer is not None or args.show:
                annotated = renderer.render(frame, keypoints, result)
                if writer is not None:
                    writer.write(annotated)
                if args.show:
                    cv2.imshow("punch-tracker", annotated)
                    if cv2.waitKey(1) & 0xFF == ord("q"):
                        break

            if args.max_frames is not None and frames >= args.max_frames:
                break
    finally:
        if video is not None:
            video.release()
        if writer is not None:
            writer.release()
            print(f"\nOutput saved to: {args.output}")
        if recorder is not None:
            recorder.close()
        if args.show:
            cv2.destroyAllWindows()

    print_summary(engine, frames)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="punch-tracker",
        description="Punch Tracker - Count and score punches from pose keypoints",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  punch-tracker analyze session.mp4 -o annotated.mp4 --record-keypoints session.jsonl
  punch-tracker live --camera 0 --show --history-file ~/.punch_history.json
  punch-tracker replay session.jsonl --cooldown 0.3
        """
    )
    subparsers = parser.add_subparsers(dest="mode", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--alpha", type=float, default=None, help="Hand smoothing factor (0-1, default 0.6)")
    common.add_argument("--cooldown", type=float, default=None, help="Seconds between strikes of one hand (default 0.25)")
    common.add_argument("--allow-simultaneous", action="store_true", help="Count both hands when they strike on the same frame")
    common.add_argument("--history-file", default=None, help="JSON file keeping strike history between sessions")
    common.add_argument("--max-frames", type=int, default=None, help="Stop after this many frames")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    video = argparse.ArgumentParser(add_help=False)
    video.add_argument("-o", "--output", help="Annotated output video path")
    video.add_argument("-m", "--model", default="yolo11n-pose.pt", help="YOLO pose model")
    video.add_argument("-d", "--device", default="auto", choices=["auto", "cpu", "cuda", "mps"])
    video.add_argument("-c", "--confidence", type=float, default=0.5)
    video.add_argument("--record-keypoints", default=None, help="Write keypoints to a JSONL file for replay")
    video.add_argument("--show", action="store_true", help="Show the annotated frames in a window")

    analyze = subparsers.add_parser("analyze", parents=[common, video], help="Analyze a video file")
    analyze.add_argument("input", help="Input video file path")

    live = subparsers.add_parser("live", parents=[common, video], help="Track punches from a camera")
    live.add_argument("--camera", type=int, default=0, help="Camera index")
    live.add_argument("--no-mirror", action="store_true", help="Do not mirror the camera image")

    replay_parser = subparsers.add_parser("replay", parents=[common], help="Replay a JSONL keypoint recording")
    replay_parser.add_argument("input", help="Keypoint recording (.jsonl)")

    return parser


def validate_args(args: argparse.Namespace) -> Optional[str]:
    """Return an error message for invalid arguments, else None."""
    if args.alpha is not None and not 0.0 <= args.alpha < 1.0:
        return "Smoothing factor must be in [0, 1)"
    if args.cooldown is not None and args.cooldown < 0:
        return "Cooldown must not be negative"
    if args.max_frames is not None and args.max_frames <= 0:
        return "--max-frames must be positive"
    if args.mode in ("analyze", "replay") and not Path(args.input).exists():
        return f"Input file not found: {args.input}"
    return None


def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logger("punch_tracker", logging.DEBUG if args.verbose else logging.INFO)

    error = validate_args(args)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.mode == "replay":
            return replay(args)
        return track_video(args, camera=args.mode == "live")
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)
    except (FileNotFoundError, ValueError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    sys.exit(main())
