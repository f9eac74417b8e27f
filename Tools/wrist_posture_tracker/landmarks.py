"""
Landmark data model for WristPostureTracker.

Hand and pose landmark containers, MediaPipe landmark indices, and the
enums that index per-side, per-finger and per-angle state.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional


HAND_LANDMARK_COUNT = 21
POSE_LANDMARK_COUNT = 33


# MediaPipe landmark indices
class LandmarkIndex:
    """MediaPipe hand landmark indices."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


class PoseLandmarkIndex:
    """MediaPipe pose landmark indices used for forearm tracking."""
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16


class HandSide(Enum):
    """The user's anatomical side."""
    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def from_detector_label(cls, label: str, mirrored: bool = True) -> "HandSide":
        """
        Convert a detector handedness label to the user's anatomical side.

        MediaPipe labels hands as seen in a mirrored (selfie) image, so for an
        unflipped webcam frame its "Left" is the user's right hand.

        Args:
            label: Detector label, "Left" or "Right" (case-insensitive).
            mirrored: Whether detector labels are mirrored relative to the user.

        Returns:
            Anatomical HandSide.

        Raises:
            ValueError: If the label is not recognized.
        """
        normalized = label.strip().lower()
        if normalized not in ("left", "right"):
            raise ValueError(f"Unknown handedness label: {label!r}")

        detector_left = normalized == "left"
        if mirrored:
            return cls.RIGHT if detector_left else cls.LEFT
        return cls.LEFT if detector_left else cls.RIGHT

    @property
    def prefix(self) -> str:
        return "L" if self is HandSide.LEFT else "R"


class Finger(Enum):
    """Fingers, valued by their fingertip landmark index."""
    THUMB = LandmarkIndex.THUMB_TIP
    INDEX = LandmarkIndex.INDEX_TIP
    MIDDLE = LandmarkIndex.MIDDLE_TIP
    RING = LandmarkIndex.RING_TIP
    PINKY = LandmarkIndex.PINKY_TIP

    @property
    def tip_index(self) -> int:
        return self.value


class AngleType(Enum):
    """Wrist angle measured per hand."""
    DEVIATION = "deviation"
    PRONATION = "pronation"
    EXTENSION = "extension"


class FingerLabel(Enum):
    """Finger attributed to a key press."""
    L_THUMB = "L-Thumb"
    L_INDEX = "L-Index"
    L_MIDDLE = "L-Middle"
    L_RING = "L-Ring"
    L_PINKY = "L-Pinky"
    R_THUMB = "R-Thumb"
    R_INDEX = "R-Index"
    R_MIDDLE = "R-Middle"
    R_RING = "R-Ring"
    R_PINKY = "R-Pinky"
    UNKNOWN = "Unknown"

    @classmethod
    def for_finger(cls, side: HandSide, finger: Finger) -> "FingerLabel":
        """Get the label for a finger on the given side."""
        return cls[f"{side.prefix}_{finger.name}"]

    @property
    def is_known(self) -> bool:
        return self is not FingerLabel.UNKNOWN


@dataclass(frozen=True)
class Point3D:
    """Smoothed 3D point in normalized image coordinates."""
    x: float
    y: float
    z: float


@dataclass
class Landmark:
    """Single landmark with 3D coordinates and visibility."""
    x: float  # Normalized x [0, 1]
    y: float  # Normalized y [0, 1]
    z: float  # Relative depth
    visibility: float = 1.0

    @property
    def is_finite(self) -> bool:
        """Check that x, y and z are all finite numbers."""
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)


@dataclass
class HandLandmarks:
    """
    Complete hand landmark data.

    Attributes:
        landmarks: List of 21 hand landmarks.
        handedness: Raw detector label, 'Left' or 'Right'.
        score: Detection confidence score.
    """
    landmarks: list[Landmark]
    handedness: str
    score: float = 1.0

    @property
    def is_valid(self) -> bool:
        """Check for a complete set of 21 finite landmarks."""
        return (
            len(self.landmarks) == HAND_LANDMARK_COUNT
            and all(lm.is_finite for lm in self.landmarks)
        )

    @property
    def wrist(self) -> Landmark:
        """Get wrist landmark."""
        return self.landmarks[LandmarkIndex.WRIST]

    @property
    def middle_mcp(self) -> Landmark:
        """Get middle finger base knuckle."""
        return self.landmarks[LandmarkIndex.MIDDLE_MCP]

    @property
    def index_mcp(self) -> Landmark:
        """Get index finger base knuckle."""
        return self.landmarks[LandmarkIndex.INDEX_MCP]

    @property
    def pinky_mcp(self) -> Landmark:
        """Get pinky base knuckle."""
        return self.landmarks[LandmarkIndex.PINKY_MCP]

    def fingertip(self, finger: Finger) -> Landmark:
        """Get the tip landmark of a finger."""
        return self.landmarks[finger.tip_index]

    def get_fingertips(self) -> list[Landmark]:
        """Get all fingertip landmarks, thumb to pinky."""
        return [self.fingertip(finger) for finger in Finger]


@dataclass
class PoseLandmarks:
    """Body pose landmarks (33 points, MediaPipe Pose topology)."""
    landmarks: list[Optional[Landmark]]

    def get_landmark(self, index: int) -> Optional[Landmark]:
        """Get landmark by index, or None when absent."""
        if 0 <= index < len(self.landmarks):
            return self.landmarks[index]
        return None


def _landmark_from(point: Any) -> Landmark:
    visibility = getattr(point, "visibility", None)
    return Landmark(
        x=float(point.x),
        y=float(point.y),
        z=float(point.z),
        visibility=1.0 if visibility is None else float(visibility)
    )


def hand_from_points(points: Iterable[Any], handedness: str, score: float = 1.0) -> HandLandmarks:
    """
    Build HandLandmarks from any sequence of objects with x/y/z attributes.

    Works with MediaPipe NormalizedLandmark (Solutions and Tasks API alike).
    """
    return HandLandmarks(
        landmarks=[_landmark_from(p) for p in points],
        handedness=handedness,
        score=score
    )


def pose_from_points(points: Iterable[Any]) -> PoseLandmarks:
    """Build PoseLandmarks from any sequence of objects with x/y/z attributes."""
    return PoseLandmarks(landmarks=[_landmark_from(p) for p in points])
