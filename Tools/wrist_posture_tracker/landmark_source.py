"""
Landmark source using MediaPipe Hands and Pose.

Produces one LandmarkFrame (up to two hands plus one body pose) per RGB
image. Supports both Solutions API (Python 3.9-3.12) and Tasks API
(newer releases without mp.solutions).
"""

import time
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .logger import get_logger

logger = get_logger("LandmarkSource")

# Detect which MediaPipe API is available
USING_TASKS_API = False
_mp_hands = None
_mp_pose = None

try:
    import mediapipe as mp

    if hasattr(mp, "solutions") and hasattr(mp.solutions, "hands"):
        _mp_hands = mp.solutions.hands
        _mp_pose = mp.solutions.pose
        USING_TASKS_API = False
    elif hasattr(mp, "tasks"):
        USING_TASKS_API = True
    else:
        raise ImportError(
            "MediaPipe installation incomplete. "
            "Neither Solutions API nor Tasks API found."
        )
except ImportError as e:
    raise ImportError(
        "MediaPipe is required for live capture. Install with: pip install mediapipe"
    ) from e

from .config import (
    MEDIAPIPE_MODEL_COMPLEXITY,
    MEDIAPIPE_MAX_NUM_HANDS,
    MEDIAPIPE_MIN_DETECTION_CONFIDENCE,
    MEDIAPIPE_MIN_TRACKING_CONFIDENCE,
)
from .landmarks import HandLandmarks, PoseLandmarks, hand_from_points, pose_from_points


@dataclass
class LandmarkFrame:
    """All landmarks detected in one video frame."""
    hands: list[HandLandmarks] = field(default_factory=list)
    pose: Optional[PoseLandmarks] = None


class LandmarkSource:
    """
    Hand and pose landmark detector.

    Handedness labels are passed through unchanged; the pipeline
    converts them to anatomical sides.
    """

    def __init__(
        self,
        model_complexity: int = MEDIAPIPE_MODEL_COMPLEXITY,
        max_num_hands: int = MEDIAPIPE_MAX_NUM_HANDS,
        min_detection_confidence: float = MEDIAPIPE_MIN_DETECTION_CONFIDENCE,
        min_tracking_confidence: float = MEDIAPIPE_MIN_TRACKING_CONFIDENCE
    ):
        """
        Initialize landmark source.

        Args:
            model_complexity: Model complexity (0=Lite, 1=Full).
            max_num_hands: Maximum number of hands to detect.
            min_detection_confidence: Minimum detection confidence.
            min_tracking_confidence: Minimum tracking confidence.
        """
        self.model_complexity = model_complexity
        self.max_num_hands = max_num_hands
        self.min_detection_confidence = min_detection_confidence
        self.min_tracking_confidence = min_tracking_confidence

        self._hands = None  # Solutions API objects
        self._pose = None
        self._hand_landmarker = None  # Tasks API objects
        self._pose_landmarker = None
        self._last_timestamp_ms = 0
        self._is_initialized = False
        self._using_tasks_api = USING_TASKS_API

        api_type = "Tasks API" if self._using_tasks_api else "Solutions API"
        logger.info(
            f"LandmarkSource created ({api_type}, complexity={model_complexity}, "
            f"max_hands={max_num_hands})"
        )

    def initialize(self) -> None:
        """Initialize MediaPipe models."""
        if self._is_initialized:
            return

        if self._using_tasks_api:
            self._initialize_tasks_api()
        else:
            self._initialize_solutions_api()

        self._is_initialized = True

    def _initialize_solutions_api(self) -> None:
        self._hands = _mp_hands.Hands(
            static_image_mode=False,
            model_complexity=self.model_complexity,
            max_num_hands=self.max_num_hands,
            min_detection_confidence=self.min_detection_confidence,
            min_tracking_confidence=self.min_tracking_confidence
        )
        self._pose = _mp_pose.Pose(
            model_complexity=self.model_complexity,
            smooth_landmarks=True,
            enable_segmentation=False,
            min_detection_confidence=self.min_detection_confidence,
            min_tracking_confidence=self.min_tracking_confidence
        )
        logger.info("MediaPipe Hands and Pose initialized (Solutions API)")

    def _initialize_tasks_api(self) -> None:
        from mediapipe.tasks import python as mp_python
        from mediapipe.tasks.python import vision as mp_vision

        from .model_manager import HAND_LANDMARKER, POSE_LANDMARKER, ensure_model

        hand_options = mp_vision.HandLandmarkerOptions(
            base_options=mp_python.BaseOptions(model_asset_path=ensure_model(HAND_LANDMARKER)),
            running_mode=mp_vision.RunningMode.VIDEO,
            num_hands=self.max_num_hands,
            min_hand_detection_confidence=self.min_detection_confidence,
            min_hand_presence_confidence=self.min_detection_confidence,
            min_tracking_confidence=self.min_tracking_confidence
        )
        pose_options = mp_vision.PoseLandmarkerOptions(
            base_options=mp_python.BaseOptions(model_asset_path=ensure_model(POSE_LANDMARKER)),
            running_mode=mp_vision.RunningMode.VIDEO,
            num_poses=1,
            min_pose_detection_confidence=self.min_detection_confidence,
            min_pose_presence_confidence=self.min_detection_confidence,
            min_tracking_confidence=self.min_tracking_confidence
        )

        self._hand_landmarker = mp_vision.HandLandmarker.create_from_options(hand_options)
        self._pose_landmarker = mp_vision.PoseLandmarker.create_from_options(pose_options)
        logger.info("MediaPipe Hands and Pose initialized (Tasks API, VIDEO mode)")

    def close(self) -> None:
        """Release MediaPipe resources."""
        for resource in (self._hands, self._pose, self._hand_landmarker, self._pose_landmarker):
            if resource is not None:
                resource.close()
        self._hands = None
        self._pose = None
        self._hand_landmarker = None
        self._pose_landmarker = None
        self._is_initialized = False
        logger.debug("LandmarkSource closed")

    def process(self, rgb_image: np.ndarray) -> LandmarkFrame:
        """
        Detect hand and pose landmarks in an RGB image.

        Args:
            rgb_image: RGB image as numpy array (H, W, 3).

        Returns:
            LandmarkFrame, empty if nothing was detected.
        """
        if not self._is_initialized:
            self.initialize()

        if self._using_tasks_api:
            return self._process_tasks_api(rgb_image)
        return self._process_solutions_api(rgb_image)

    def _process_solutions_api(self, rgb_image: np.ndarray) -> LandmarkFrame:
        frame = LandmarkFrame()

        pose_results = self._pose.process(rgb_image)
        if pose_results.pose_landmarks:
            frame.pose = pose_from_points(pose_results.pose_landmarks.landmark)

        hand_results = self._hands.process(rgb_image)
        if hand_results.multi_hand_landmarks and hand_results.multi_handedness:
            for hand_landmarks, handedness in zip(
                hand_results.multi_hand_landmarks, hand_results.multi_handedness
            ):
                classification = handedness.classification[0]
                frame.hands.append(hand_from_points(
                    hand_landmarks.landmark,
                    handedness=classification.label,
                    score=classification.score
                ))

        return frame

    def _process_tasks_api(self, rgb_image: np.ndarray) -> LandmarkFrame:
        frame = LandmarkFrame()

        if not rgb_image.flags["C_CONTIGUOUS"]:
            rgb_image = np.ascontiguousarray(rgb_image)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_image)

        # VIDEO mode needs strictly increasing timestamps
        timestamp_ms = max(int(time.monotonic() * 1000), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        pose_result = self._pose_landmarker.detect_for_video(mp_image, timestamp_ms)
        if pose_result.pose_landmarks:
            frame.pose = pose_from_points(pose_result.pose_landmarks[0])

        hand_result = self._hand_landmarker.detect_for_video(mp_image, timestamp_ms)
        for hand_landmarks, handedness in zip(hand_result.hand_landmarks, hand_result.handedness):
            category = handedness[0]
            frame.hands.append(hand_from_points(
                hand_landmarks,
                handedness=category.category_name,
                score=category.score
            ))

        return frame

    def __enter__(self) -> "LandmarkSource":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
