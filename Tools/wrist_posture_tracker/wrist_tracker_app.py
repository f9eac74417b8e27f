#!/usr/bin/env python3
"""
Wrist Posture Tracker

Main entry point: runs the webcam -> MediaPipe -> pipeline loop and
reports calibrated wrist angles.

Usage:
    python -m wrist_posture_tracker.wrist_tracker_app [--camera <index>] [--settings <path>] [--preview] [--debug]

Preview window keys:
    Tab     start / finish a typing session (keys typed meanwhile are recorded)
    c       reset calibration (outside a typing session)
    q, Esc  quit

Exit Codes:
    0 - Success
    1 - Settings error
    2 - Camera error
    3 - Runtime error
"""

import argparse
import json
import signal
import sys
import time
from typing import Optional

import cv2
import numpy as np

from .camera_manager import CameraError, CameraManager
from .config import (
    ANGLE_LOG_INTERVAL_SEC,
    EXIT_CAMERA_ERROR,
    EXIT_RUNTIME_ERROR,
    EXIT_SETTINGS_ERROR,
    EXIT_SUCCESS,
    PipelineSettings,
)
from .landmarks import HandLandmarks, HandSide
from .logger import get_logger, setup_logging
from .pipeline import WristPosturePipeline
from .settings_loader import SettingsLoadError, load_settings
from .typing_session import TypingSession

KEY_TAB = 9
KEY_ESC = 27

# Hand connections (same as MediaPipe)
HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),  # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),  # Index
    (0, 9), (9, 10), (10, 11), (11, 12),  # Middle
    (0, 13), (13, 14), (14, 15), (15, 16),  # Ring
    (0, 17), (17, 18), (18, 19), (19, 20),  # Pinky
    (5, 9), (9, 13), (13, 17)  # Palm
]


def _format_angle(value: Optional[float]) -> str:
    return "--" if value is None else f"{value:+.0f}"


class WristTrackerApp:
    """
    Real-time wrist posture tracking loop.

    Integrates camera capture, landmark detection and the wrist posture
    pipeline, with an optional preview window.
    """

    def __init__(
        self,
        settings: PipelineSettings,
        preview: bool = False,
        log_interval: float = ANGLE_LOG_INTERVAL_SEC
    ):
        """
        Initialize application.

        Args:
            settings: Pipeline and camera settings.
            preview: Show a preview window with angle overlay.
            log_interval: Seconds between angle log lines (0 disables).
        """
        self.settings = settings
        self.preview = preview
        self.log_interval = log_interval

        self._logger = get_logger("App")
        self._running = False

        self._camera: Optional[CameraManager] = None
        self._source = None  # LandmarkSource, imported lazily with mediapipe
        self.pipeline = WristPosturePipeline(settings)
        self.session = TypingSession(self.pipeline)

        self._frame_count = 0
        self._start_time = 0.0
        self._last_log_time = 0.0

    def initialize(self) -> None:
        """
        Open the camera and load MediaPipe models.

        Raises:
            CameraError: If the camera cannot be opened.
        """
        from .landmark_source import LandmarkSource

        self._logger.info("Initializing wrist tracker...")
        self._camera = CameraManager(self.settings.camera)
        self._camera.open()

        self._source = LandmarkSource()
        self._source.initialize()
        self._logger.info("Wrist tracker initialized, hold a neutral typing posture to calibrate")

    def run(self) -> None:
        """Run the main tracking loop."""
        self._running = True
        self._start_time = time.perf_counter()
        self._last_log_time = self._start_time

        self._logger.info("Starting tracking loop...")

        try:
            while self._running:
                self._process_frame()
                if self.preview:
                    self._handle_key(cv2.waitKey(1) & 0xFF)
        except KeyboardInterrupt:
            self._logger.info("Interrupted by user")
        finally:
            self.stop()

    def _process_frame(self) -> None:
        """Capture one frame and push its landmarks through the pipeline."""
        if self._camera is None or self._source is None:
            return

        frame = self._camera.read_frame()
        if frame is None:
            return

        self._frame_count += 1
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        landmarks = self._source.process(rgb)

        self.pipeline.on_pose_frame(landmarks.pose)
        self.pipeline.on_hand_frame(landmarks.hands)

        self._log_angles()

        if self.preview:
            self._show_preview(frame, landmarks.hands)

    def _log_angles(self) -> None:
        if self.log_interval <= 0:
            return
        now = time.perf_counter()
        if now - self._last_log_time < self.log_interval:
            return
        self._last_log_time = now

        angles = self.pipeline.get_angles()
        self._logger.info(
            "dev L/R %s/%s | pron L/R %s/%s | ext L/R %s/%s | calibrated=%s",
            _format_angle(angles.left_deviation), _format_angle(angles.right_deviation),
            _format_angle(angles.left_pronation), _format_angle(angles.right_pronation),
            _format_angle(angles.left_extension), _format_angle(angles.right_extension),
            self.pipeline.is_calibrated
        )

    def _handle_key(self, key: int) -> None:
        if key == 0xFF:
            return

        if key == KEY_ESC:
            self._logger.info("Quit key pressed")
            self._running = False
        elif key == KEY_TAB:
            self._toggle_session()
        elif self.pipeline.session_active:
            if 32 <= key < 127:
                snapshot = self.session.record_keystroke(chr(key))
                self._logger.debug(f"Key {snapshot.key!r} -> {snapshot.finger.value}")
            elif key == 8:
                self.session.record_keystroke("backspace")
        elif key == ord("c"):
            self.pipeline.reset_calibration()
        elif key == ord("q"):
            self._logger.info("Quit key pressed")
            self._running = False

    def _toggle_session(self) -> None:
        if self.pipeline.session_active:
            self.session.finish()
            self._logger.info(f"Session summary: {json.dumps(self.session.summary(), indent=2)}")
        else:
            self.session.start()

    def _show_preview(self, frame: np.ndarray, hands: list[HandLandmarks]) -> None:
        """Show mirrored preview with landmarks and angle readout."""
        h, w = frame.shape[:2]
        display = frame.copy()

        for hand in hands:
            if not hand.is_valid:
                continue
            for start_idx, end_idx in HAND_CONNECTIONS:
                start = hand.landmarks[start_idx]
                end = hand.landmarks[end_idx]
                cv2.line(
                    display,
                    (int(start.x * w), int(start.y * h)),
                    (int(end.x * w), int(end.y * h)),
                    (0, 255, 0), 2
                )

        for side, color in ((HandSide.LEFT, (255, 170, 0)), (HandSide.RIGHT, (0, 200, 255))):
            limb = self.pipeline.get_limb_state(side)
            if limb.is_complete:
                cv2.line(
                    display,
                    (int(limb.elbow.x * w), int(limb.elbow.y * h)),
                    (int(limb.wrist.x * w), int(limb.wrist.y * h)),
                    color, 4
                )

        # Mirror the display (more intuitive for posture feedback)
        display = cv2.flip(display, 1)

        angles = self.pipeline.get_angles()
        travel = self.pipeline.get_finger_travel()
        lines = [
            f"Deviation  L {_format_angle(angles.left_deviation)}  R {_format_angle(angles.right_deviation)}",
            f"Pronation  L {_format_angle(angles.left_pronation)}  R {_format_angle(angles.right_pronation)}",
            f"Extension  L {_format_angle(angles.left_extension)}  R {_format_angle(angles.right_extension)}",
            f"Travel     L {travel.left:.2f}  R {travel.right:.2f}",
            "Calibrated" if self.pipeline.is_calibrated else "Calibrating...",
            "SESSION ACTIVE (Tab to finish)" if self.pipeline.session_active else "Tab: start session",
        ]
        for i, text in enumerate(lines):
            cv2.putText(
                display, text, (10, 30 + i * 26),
                cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2
            )

        cv2.imshow("Wrist Posture Tracker", display)

    def stop(self) -> None:
        """Stop the tracking loop and cleanup."""
        if not self._running and self._camera is None:
            return
        self._running = False
        self._logger.info("Stopping wrist tracker...")

        if self._source is not None:
            self._source.close()
            self._source = None

        if self._camera is not None:
            self._camera.close()
            self._camera = None

        if self.preview:
            cv2.destroyAllWindows()

        if self._frame_count > 0:
            elapsed = time.perf_counter() - self._start_time
            avg_fps = self._frame_count / elapsed if elapsed > 0 else 0
            self._logger.info(
                f"Tracking stopped. Processed {self._frame_count} frames "
                f"in {elapsed:.1f}s ({avg_fps:.1f} FPS average), "
                f"{self.pipeline.discarded_hands} hands discarded"
            )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Wrist Posture Tracker - calibrated wrist angles from a webcam",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
  0  Success
  1  Settings error (file not found, invalid JSON or values)
  2  Camera error (camera not available)
  3  Runtime error (unexpected error)

Examples:
  wrist-posture-tracker --preview
  wrist-posture-tracker --camera 1 --settings settings.json
"""
    )

    parser.add_argument(
        "--camera", "-c",
        type=int,
        default=None,
        help="Camera index (default: from settings, else 0)"
    )

    parser.add_argument(
        "--settings", "-s",
        default=None,
        help="Path to JSON settings file"
    )

    parser.add_argument(
        "--preview", "-p",
        action="store_true",
        help="Show preview window with angle overlay"
    )

    parser.add_argument(
        "--log-interval",
        type=float,
        default=ANGLE_LOG_INTERVAL_SEC,
        help="Seconds between angle log lines, 0 to disable"
    )

    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for the rotating log file (default: per-user log directory)"
    )

    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Log to the console only"
    )

    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code.
    """
    args = parse_args(argv)

    logger = setup_logging(
        debug=args.debug,
        log_to_file=not args.no_log_file,
        log_dir=args.log_dir
    )
    logger.info("Wrist Posture Tracker starting...")

    try:
        settings = load_settings(args.settings) if args.settings else PipelineSettings()
    except SettingsLoadError as e:
        logger.error(f"Failed to load settings: {e}")
        return EXIT_SETTINGS_ERROR

    if args.camera is not None:
        settings.camera.index = args.camera

    app = WristTrackerApp(settings, preview=args.preview, log_interval=args.log_interval)

    def signal_handler(sig, frame):
        logger.info("Received shutdown signal")
        app._running = False

    signal.signal(signal.SIGINT, signal_handler)
    # SIGTERM is not available on Windows
    if sys.platform != "win32":
        signal.signal(signal.SIGTERM, signal_handler)

    try:
        app.initialize()
        app.run()
        return EXIT_SUCCESS
    except CameraError as e:
        logger.error(f"Camera error: {e}")
        return EXIT_CAMERA_ERROR
    except Exception as e:
        logger.exception(f"Runtime error: {e}")
        return EXIT_RUNTIME_ERROR
    finally:
        app.stop()


if __name__ == "__main__":
    sys.exit(main())
