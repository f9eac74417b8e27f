"""
Configuration constants for WristPostureTracker.

This module contains all tunable parameters for landmark filtering,
angle calibration, finger press detection, camera capture and logging.
"""

from dataclasses import dataclass, field
from typing import Final


# Camera configuration
CAMERA_WIDTH: Final[int] = 1280
CAMERA_HEIGHT: Final[int] = 720
CAMERA_FPS: Final[int] = 30
DEFAULT_CAMERA_INDEX: Final[int] = 0

# MediaPipe configuration
MEDIAPIPE_MODEL_COMPLEXITY: Final[int] = 1
MEDIAPIPE_MAX_NUM_HANDS: Final[int] = 2
MEDIAPIPE_MIN_DETECTION_CONFIDENCE: Final[float] = 0.5
MEDIAPIPE_MIN_TRACKING_CONFIDENCE: Final[float] = 0.5

# =============================================================================
# Median Filters
# =============================================================================
# Pose (elbow/wrist) positions are smoothed with a per-axis median.
POSE_SMOOTHING_WINDOW: Final[int] = 10  # Frames kept for forearm smoothing
MAX_POSE_DELTA: Final[float] = 0.15  # Max 2D jump per frame (normalized units)

# Raw angles are smoothed with a median over the last N accepted values.
ANGLE_SMOOTHING_WINDOW: Final[int] = 15  # Frames kept per angle channel
MAX_ANGLE_DELTA: Final[float] = 50.0  # Max wrap-aware jump per frame (degrees)

# Pose landmarks below this visibility are treated as missing (0 = accept all)
POSE_MIN_VISIBILITY: Final[float] = 0.0

# =============================================================================
# Angle Geometry
# =============================================================================
MIN_HAND_WIDTH: Final[float] = 0.01  # Index MCP to pinky MCP, below this pronation is 0
EXTENSION_LIMIT_DEG: Final[float] = 90.0  # Extension folded into (-90, 90]

# =============================================================================
# Calibration
# =============================================================================
# Baselines are captured once the window is full and this much time has
# passed since the last reset.
CALIBRATION_DELAY_SEC: Final[float] = 0.5

# =============================================================================
# Finger Travel
# =============================================================================
FINGER_JITTER_THRESHOLD: Final[float] = 0.005  # Per-fingertip movement ignored below this

# =============================================================================
# Press Finger Detection
# =============================================================================
FINGERTIP_HISTORY_SIZE: Final[int] = 10  # Samples kept per fingertip
PRESS_LOOKBACK_START_SEC: Final[float] = 0.200  # Early window: older edge
PRESS_LOOKBACK_END_SEC: Final[float] = 0.050  # Early/late window boundary
PRESS_MIN_SAMPLES: Final[int] = 3  # Fingers with fewer samples are skipped
PRESS_Y_WEIGHT: Final[float] = 0.3  # Downward drift
PRESS_Z_WEIGHT: Final[float] = 0.7  # Motion toward the keyboard plane

# Logging
LOG_FILENAME: Final[str] = "wrist_posture_tracker.log"
LOG_MAX_BYTES: Final[int] = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT: Final[int] = 3
ANGLE_LOG_INTERVAL_SEC: Final[float] = 2.0  # Periodic angle report in the runner

# Exit codes
EXIT_SUCCESS: Final[int] = 0
EXIT_SETTINGS_ERROR: Final[int] = 1
EXIT_CAMERA_ERROR: Final[int] = 2
EXIT_RUNTIME_ERROR: Final[int] = 3


@dataclass
class FilterSettings:
    """Container for median filter parameters."""

    pose_window: int = POSE_SMOOTHING_WINDOW
    max_pose_delta: float = MAX_POSE_DELTA
    angle_window: int = ANGLE_SMOOTHING_WINDOW
    max_angle_delta: float = MAX_ANGLE_DELTA
    pose_min_visibility: float = POSE_MIN_VISIBILITY
    jitter_threshold: float = FINGER_JITTER_THRESHOLD


@dataclass
class CalibrationSettings:
    """Container for baseline capture parameters."""

    delay_sec: float = CALIBRATION_DELAY_SEC


@dataclass
class PressDetectionSettings:
    """Container for press finger detection parameters."""

    history_size: int = FINGERTIP_HISTORY_SIZE
    lookback_start_sec: float = PRESS_LOOKBACK_START_SEC
    lookback_end_sec: float = PRESS_LOOKBACK_END_SEC
    min_samples: int = PRESS_MIN_SAMPLES
    y_weight: float = PRESS_Y_WEIGHT
    z_weight: float = PRESS_Z_WEIGHT


@dataclass
class CameraSettings:
    """Container for camera capture parameters."""

    index: int = DEFAULT_CAMERA_INDEX
    width: int = CAMERA_WIDTH
    height: int = CAMERA_HEIGHT
    fps: int = CAMERA_FPS


@dataclass
class PipelineSettings:
    """All tunable settings for one pipeline instance."""

    filters: FilterSettings = field(default_factory=FilterSettings)
    calibration: CalibrationSettings = field(default_factory=CalibrationSettings)
    press_detection: PressDetectionSettings = field(default_factory=PressDetectionSettings)
    camera: CameraSettings = field(default_factory=CameraSettings)
