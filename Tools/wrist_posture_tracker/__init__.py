"""
WristPostureTracker - Wrist posture metrics from MediaPipe hand and pose landmarks.

Turns per-frame landmarks into calibrated wrist deviation, pronation and
extension angles, fingertip travel, and the finger behind each key press.
The core imports only numpy; live capture (landmark_source, camera_manager,
wrist_tracker_app) needs mediapipe and opencv.
"""

__version__ = "1.0.0"
__author__ = "AROverlay Team"

from .config import (
    PipelineSettings,
    FilterSettings,
    CalibrationSettings,
    PressDetectionSettings,
    CameraSettings,
)
from .settings_loader import SettingsLoadError, load_settings
from .landmarks import (
    AngleType,
    Finger,
    FingerLabel,
    HandLandmarks,
    HandSide,
    Landmark,
    PoseLandmarks,
)
from .calibration import AngleReadings
from .finger_travel import FingerTravel
from .limb_tracker import LimbState
from .pipeline import WristPosturePipeline
from .typing_session import KeystrokeSnapshot, TypingSession

__all__ = [
    "PipelineSettings",
    "FilterSettings",
    "CalibrationSettings",
    "PressDetectionSettings",
    "CameraSettings",
    "SettingsLoadError",
    "load_settings",
    "AngleType",
    "Finger",
    "FingerLabel",
    "HandLandmarks",
    "HandSide",
    "Landmark",
    "PoseLandmarks",
    "AngleReadings",
    "FingerTravel",
    "LimbState",
    "WristPosturePipeline",
    "KeystrokeSnapshot",
    "TypingSession",
]
