"""
Forearm tracking from MediaPipe Pose landmarks.

Assigns the pose elbow/wrist pairs to the user's anatomical left and
right arm, then smooths each side with its own median filters.
"""

from dataclasses import dataclass
from typing import Optional

from .config import FilterSettings
from .landmarks import HandSide, Landmark, Point3D, PoseLandmarks, PoseLandmarkIndex
from .logger import get_logger
from .median_filter import MedianPointFilter

logger = get_logger("LimbTracker")


@dataclass
class LimbState:
    """Smoothed elbow and wrist for one arm. None until first seen."""
    elbow: Optional[Point3D] = None
    wrist: Optional[Point3D] = None

    @property
    def is_complete(self) -> bool:
        """Check whether both elbow and wrist are known."""
        return self.elbow is not None and self.wrist is not None


class LimbTracker:
    """
    Disambiguates and smooths both forearms.

    Camera view is mirrored, so the user's left arm appears on the
    image's right (higher x). When both shoulders are visible their mean
    x is the body midline; otherwise the two wrists are compared directly.

    A side keeps its last smoothed value when its landmarks are missing.
    """

    def __init__(self, settings: Optional[FilterSettings] = None):
        """
        Initialize limb tracker.

        Args:
            settings: Filter settings. Uses defaults if None.
        """
        self.settings = settings or FilterSettings()
        self._elbow_filters = {side: self._make_filter() for side in HandSide}
        self._wrist_filters = {side: self._make_filter() for side in HandSide}
        self._states = {side: LimbState() for side in HandSide}
        self._fallback_count = 0

    def _make_filter(self) -> MedianPointFilter:
        return MedianPointFilter(
            window_size=self.settings.pose_window,
            max_delta=self.settings.max_pose_delta
        )

    def _present(self, pose: PoseLandmarks, index: int) -> Optional[Landmark]:
        lm = pose.get_landmark(index)
        if lm is None or not lm.is_finite:
            return None
        if lm.visibility < self.settings.pose_min_visibility:
            return None
        return lm

    def update(self, pose: Optional[PoseLandmarks]) -> None:
        """
        Update limb state from one frame's pose landmarks.

        Args:
            pose: Pose landmarks, or None if no pose was detected.
        """
        if pose is None:
            return

        left_shoulder = self._present(pose, PoseLandmarkIndex.LEFT_SHOULDER)
        right_shoulder = self._present(pose, PoseLandmarkIndex.RIGHT_SHOULDER)
        elbow13 = self._present(pose, PoseLandmarkIndex.LEFT_ELBOW)
        elbow14 = self._present(pose, PoseLandmarkIndex.RIGHT_ELBOW)
        wrist15 = self._present(pose, PoseLandmarkIndex.LEFT_WRIST)
        wrist16 = self._present(pose, PoseLandmarkIndex.RIGHT_WRIST)

        arms = (elbow13, elbow14, wrist15, wrist16)
        if all(lm is not None for lm in arms):
            if left_shoulder is not None and right_shoulder is not None:
                midline = (left_shoulder.x + right_shoulder.x) / 2
                wrist15_is_left = wrist15.x > midline
            else:
                self._fallback_count += 1
                logger.debug("Shoulders missing, assigning arms by wrist position")
                wrist15_is_left = wrist15.x > wrist16.x

            if wrist15_is_left:
                self._assign(HandSide.LEFT, elbow13, wrist15)
                self._assign(HandSide.RIGHT, elbow14, wrist16)
            else:
                self._assign(HandSide.LEFT, elbow14, wrist16)
                self._assign(HandSide.RIGHT, elbow13, wrist15)
        else:
            # Only one arm (or part of one): trust the detector's own sides
            self._assign(HandSide.LEFT, elbow13, wrist15)
            self._assign(HandSide.RIGHT, elbow14, wrist16)

    def _assign(
        self,
        side: HandSide,
        elbow: Optional[Landmark],
        wrist: Optional[Landmark]
    ) -> None:
        state = self._states[side]
        if elbow is not None:
            state.elbow = self._elbow_filters[side].update(elbow)
        if wrist is not None:
            state.wrist = self._wrist_filters[side].update(wrist)

    def get_state(self, side: HandSide) -> LimbState:
        """Get the current smoothed limb state for a side."""
        return self._states[side]

    @property
    def fallback_count(self) -> int:
        """Frames where shoulders were missing and wrists were compared directly."""
        return self._fallback_count
