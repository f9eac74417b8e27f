"""
Settings loader for WristPostureTracker.

Loads and validates optional JSON settings files. Properties use
camelCase; any section or key left out keeps its default from config.
"""

import json
from pathlib import Path
from typing import Any

from .config import (
    CalibrationSettings,
    CameraSettings,
    FilterSettings,
    PipelineSettings,
    PressDetectionSettings,
)
from .logger import get_logger

logger = get_logger("SettingsLoader")


class SettingsLoadError(Exception):
    """Raised when settings loading or validation fails."""
    pass


# camelCase JSON key -> dataclass attribute, per section
_FILTER_KEYS = {
    "poseWindow": "pose_window",
    "maxPoseDelta": "max_pose_delta",
    "angleWindow": "angle_window",
    "maxAngleDelta": "max_angle_delta",
    "poseMinVisibility": "pose_min_visibility",
    "jitterThreshold": "jitter_threshold",
}
_CALIBRATION_KEYS = {
    "delaySec": "delay_sec",
}
_PRESS_KEYS = {
    "historySize": "history_size",
    "lookbackStartSec": "lookback_start_sec",
    "lookbackEndSec": "lookback_end_sec",
    "minSamples": "min_samples",
    "yWeight": "y_weight",
    "zWeight": "z_weight",
}
_CAMERA_KEYS = {
    "index": "index",
    "width": "width",
    "height": "height",
    "fps": "fps",
}


def load_settings(settings_path: str | Path) -> PipelineSettings:
    """
    Load and validate settings from a JSON file.

    Args:
        settings_path: Path to the JSON settings file.

    Returns:
        Validated PipelineSettings instance.

    Raises:
        SettingsLoadError: If file cannot be read or validation fails.
    """
    path = Path(settings_path)
    logger.info(f"Loading settings from: {path}")

    if not path.exists():
        raise SettingsLoadError(f"Settings file not found: {path}")

    if not path.is_file():
        raise SettingsLoadError(f"Settings path is not a file: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SettingsLoadError(f"Invalid JSON in settings: {e}")
    except IOError as e:
        raise SettingsLoadError(f"Cannot read settings file: {e}")

    return parse_settings(data)


def parse_settings(data: Any) -> PipelineSettings:
    """
    Parse and validate settings data from a dictionary.

    Args:
        data: Dictionary with camelCase sections and keys.

    Returns:
        Validated PipelineSettings instance.

    Raises:
        SettingsLoadError: If values are missing, mistyped or out of range.
    """
    if not isinstance(data, dict):
        raise SettingsLoadError("Settings root must be a JSON object")

    settings = PipelineSettings(
        filters=_parse_section(data, "filters", FilterSettings(), _FILTER_KEYS),
        calibration=_parse_section(data, "calibration", CalibrationSettings(), _CALIBRATION_KEYS),
        press_detection=_parse_section(data, "pressDetection", PressDetectionSettings(), _PRESS_KEYS),
        camera=_parse_section(data, "camera", CameraSettings(), _CAMERA_KEYS),
    )
    _validate(settings)
    return settings


def _parse_section(data: dict[str, Any], name: str, target: Any, keys: dict[str, str]) -> Any:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise SettingsLoadError(f"Settings section '{name}' must be an object")

    for json_key, value in section.items():
        attr = keys.get(json_key)
        if attr is None:
            logger.warning(f"Ignoring unknown setting: {name}.{json_key}")
            continue

        default = getattr(target, attr)
        # bool is an int subclass; never accept it for numeric settings
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SettingsLoadError(f"Setting {name}.{json_key} must be a number, got {value!r}")
        if isinstance(default, int) and not isinstance(value, int):
            raise SettingsLoadError(f"Setting {name}.{json_key} must be an integer, got {value!r}")

        setattr(target, attr, type(default)(value))
        logger.debug(f"Setting {name}.{json_key} = {value}")

    return target


def _validate(settings: PipelineSettings) -> None:
    filters = settings.filters
    if filters.pose_window < 1 or filters.angle_window < 1:
        raise SettingsLoadError("Smoothing windows must be at least 1 frame")
    if filters.max_pose_delta < 0 or filters.max_angle_delta < 0:
        raise SettingsLoadError("Outlier deltas must not be negative")
    if filters.jitter_threshold < 0:
        raise SettingsLoadError("Jitter threshold must not be negative")

    if settings.calibration.delay_sec < 0:
        raise SettingsLoadError("Calibration delay must not be negative")

    press = settings.press_detection
    if press.history_size < 1:
        raise SettingsLoadError("Fingertip history size must be at least 1")
    if not 1 <= press.min_samples <= press.history_size:
        raise SettingsLoadError(
            "Press minSamples must be between 1 and historySize"
        )
    if not 0 < press.lookback_end_sec < press.lookback_start_sec:
        raise SettingsLoadError(
            "Press lookback windows must satisfy 0 < lookbackEndSec < lookbackStartSec"
        )

    camera = settings.camera
    if camera.width <= 0 or camera.height <= 0 or camera.fps <= 0:
        raise SettingsLoadError("Camera width, height and fps must be positive")
