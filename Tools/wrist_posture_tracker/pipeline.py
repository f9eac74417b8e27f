"""
Landmark-to-metric pipeline for WristPostureTracker.

Single entry point for the host's frame loop: ingests pose and hand
landmarks, keeps all per-session filter and calibration state, and
answers angle, finger travel and press queries.
"""

import threading
import time
from typing import Callable, Iterable, Optional

from .angle_engine import AngleEngine
from .calibration import AngleReadings, CalibrationController
from .config import PipelineSettings
from .finger_travel import FingerTravel, FingerTravelIntegrator
from .landmarks import FingerLabel, HandLandmarks, HandSide, PoseLandmarks
from .limb_tracker import LimbState, LimbTracker
from .logger import get_logger
from .press_detector import PressFingerDetector

logger = get_logger("Pipeline")


class WristPosturePipeline:
    """
    Owns one session's landmark processing state.

    Data flows one way per frame: pose -> limb tracker -> angle engine ->
    calibration. Finger travel and press histories are fed from the hand
    landmarks directly. All public methods hold one lock, so a press
    query or reset never sees a half-updated frame.

    Usage:
        pipeline = WristPosturePipeline()

        # Each frame:
        pipeline.on_pose_frame(pose)
        pipeline.on_hand_frame(hands)

        # On demand:
        angles = pipeline.get_angles()
        finger = pipeline.detect_pressing_finger()
    """

    def __init__(
        self,
        settings: Optional[PipelineSettings] = None,
        clock: Callable[[], float] = time.time,
        mirrored_labels: bool = True
    ):
        """
        Initialize pipeline.

        Args:
            settings: Pipeline settings. Uses defaults if None.
            clock: Time source in seconds.
            mirrored_labels: Whether detector handedness labels are mirrored
                relative to the user (true for MediaPipe on an unflipped webcam).
        """
        self.settings = settings or PipelineSettings()
        self._clock = clock
        self._mirrored_labels = mirrored_labels
        self._lock = threading.RLock()

        self._limbs = LimbTracker(self.settings.filters)
        self._engine = AngleEngine(self.settings.filters)
        self._calibration = CalibrationController(
            self._engine,
            now=self._clock(),
            settings=self.settings.calibration
        )
        self._travel = FingerTravelIntegrator(self.settings.filters.jitter_threshold)
        self._presses = PressFingerDetector(self.settings.press_detection)

        self._session_active = False
        self._discarded_hands = 0
        self._frames_processed = 0

        logger.debug("WristPosturePipeline initialized")

    # ----- Ingest -----

    def on_pose_frame(self, pose: Optional[PoseLandmarks]) -> None:
        """
        Ingest one frame's pose landmarks.

        Args:
            pose: Pose landmarks, or None if no pose was detected.
        """
        if pose is None:
            return
        with self._lock:
            self._limbs.update(pose)

    def on_hand_frame(self, hands: Optional[Iterable[HandLandmarks]]) -> None:
        """
        Ingest one frame's hand landmarks.

        Hands with invalid coordinates or an unknown handedness label are
        discarded before touching any history.

        Args:
            hands: Detected hands with raw detector labels, or None.
        """
        if not hands:
            return

        with self._lock:
            now = self._clock()
            for hand, side in self._resolve_sides(hands):
                self._process_hand(hand, side, now)
            self._frames_processed += 1

    def _resolve_sides(self, hands: Iterable[HandLandmarks]) -> list[tuple[HandLandmarks, HandSide]]:
        """Validate hands and convert detector labels to anatomical sides."""
        resolved = []
        for hand in hands:
            if not hand.is_valid:
                self._discarded_hands += 1
                logger.debug(
                    f"Discarding hand with invalid landmarks "
                    f"({self._discarded_hands} discarded so far)"
                )
                continue
            try:
                side = HandSide.from_detector_label(hand.handedness, self._mirrored_labels)
            except ValueError as e:
                self._discarded_hands += 1
                logger.debug(f"Discarding hand: {e}")
                continue
            resolved.append((hand, side))
        return resolved

    def _process_hand(self, hand: HandLandmarks, side: HandSide, now: float) -> None:
        limb = self._limbs.get_state(side)
        smoothed = self._engine.process(hand, side, limb)
        was_calibrated = self._calibration.is_calibrated
        self._calibration.apply(side, smoothed, now)
        if not was_calibrated and self._calibration.is_calibrated:
            logger.info("Calibration complete")

        self._travel.update(hand, side, self._session_active)
        self._presses.record(hand, side, now)

    # ----- Query -----

    def get_angles(self) -> AngleReadings:
        """Get the latest reported angle of every channel."""
        with self._lock:
            return self._calibration.readings()

    def get_finger_travel(self) -> FingerTravel:
        """Get cumulative fingertip travel per hand."""
        with self._lock:
            return self._travel.totals()

    def detect_pressing_finger(self, now: Optional[float] = None) -> FingerLabel:
        """
        Infer which finger caused a key press happening now.

        Args:
            now: Press time in seconds. Uses the pipeline clock if None.

        Returns:
            Detected finger label, or FingerLabel.UNKNOWN.
        """
        with self._lock:
            return self._presses.detect(self._clock() if now is None else now)

    def get_limb_state(self, side: HandSide) -> LimbState:
        """Get the smoothed forearm state for a side."""
        with self._lock:
            return self._limbs.get_state(side)

    def get_baselines(self) -> dict[str, Optional[float]]:
        """Get the captured baseline of every channel."""
        with self._lock:
            return self._calibration.baselines()

    def calibration_progress(self, side: HandSide) -> float:
        """Fraction of the smoothing window filled for a side, in [0, 1]."""
        with self._lock:
            return self._calibration.calibration_progress(side)

    @property
    def is_calibrated(self) -> bool:
        """True once any channel on either hand has captured a baseline."""
        with self._lock:
            return self._calibration.is_calibrated

    @property
    def session_active(self) -> bool:
        """Whether finger travel is being accumulated."""
        return self._session_active

    @property
    def frames_processed(self) -> int:
        """Hand frames ingested since creation."""
        return self._frames_processed

    @property
    def discarded_hands(self) -> int:
        """Hands dropped for invalid landmarks or labels."""
        return self._discarded_hands

    # ----- Control -----

    def reset_calibration(self) -> None:
        """Start a new calibration epoch (clears baselines and histories)."""
        with self._lock:
            self._calibration.reset(self._clock())

    def set_session_active(self, active: bool) -> None:
        """Enable or disable finger travel accumulation."""
        with self._lock:
            if active != self._session_active:
                logger.info(f"Session {'started' if active else 'stopped'}")
            self._session_active = active

    def reset(self) -> None:
        """
        Reset session state for a fresh measurement.

        Clears calibration, finger travel and fingertip histories.
        Forearm state is kept.
        """
        with self._lock:
            self._calibration.reset(self._clock())
            self._travel.reset()
            self._presses.reset()
