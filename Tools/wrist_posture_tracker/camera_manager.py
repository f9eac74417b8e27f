"""
Camera manager for WristPostureTracker.

Provides OpenCV VideoCapture wrapper with configuration and frame capture.
"""

import sys
from typing import Optional

import cv2
import numpy as np

from .config import CameraSettings
from .logger import get_logger

logger = get_logger("CameraManager")


class CameraError(Exception):
    """Raised when camera operations fail."""
    pass


class CameraManager:
    """
    Manages webcam capture using OpenCV VideoCapture.

    Attributes:
        settings: Camera index, resolution and frame rate.
    """

    def __init__(self, settings: Optional[CameraSettings] = None):
        """
        Initialize camera manager.

        Args:
            settings: Camera settings. Uses defaults if None.
        """
        self.settings = settings or CameraSettings()

        self._capture: Optional[cv2.VideoCapture] = None
        self._frame_count = 0

    @property
    def is_open(self) -> bool:
        """Check if camera is currently open."""
        return self._capture is not None and self._capture.isOpened()

    def open(self) -> None:
        """
        Open the camera for capture.

        Raises:
            CameraError: If camera cannot be opened.
        """
        if self._capture is not None:
            logger.warning("Camera already open, closing first")
            self.close()

        index = self.settings.index
        logger.info(f"Opening camera {index}...")

        # DirectShow opens faster on Windows; other platforms use the default backend
        if sys.platform == "win32":
            self._capture = cv2.VideoCapture(index, cv2.CAP_DSHOW)
            if not self._capture.isOpened():
                logger.debug("DirectShow failed, trying default backend")
                self._capture = cv2.VideoCapture(index)
        else:
            self._capture = cv2.VideoCapture(index)

        if not self._capture.isOpened():
            self._capture = None
            raise CameraError(f"Failed to open camera {index}")

        self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.settings.width)
        self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.settings.height)
        self._capture.set(cv2.CAP_PROP_FPS, self.settings.fps)
        self._capture.set(cv2.CAP_PROP_BUFFERSIZE, 1)  # Minimize latency

        actual_w = int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_h = int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        actual_fps = self._capture.get(cv2.CAP_PROP_FPS)
        logger.info(f"Camera opened: {actual_w}x{actual_h} @ {actual_fps:.1f} FPS")

        if actual_w != self.settings.width or actual_h != self.settings.height:
            logger.warning(
                f"Requested {self.settings.width}x{self.settings.height}, "
                f"got {actual_w}x{actual_h}"
            )

        self._frame_count = 0

    def close(self) -> None:
        """Close the camera and release resources."""
        if self._capture is not None:
            logger.info("Closing camera")
            self._capture.release()
            self._capture = None

    def read_frame(self) -> Optional[np.ndarray]:
        """
        Read a single frame from the camera.

        Returns:
            BGR image as numpy array, or None if read failed.

        Raises:
            CameraError: If camera is not open.
        """
        if self._capture is None:
            raise CameraError("Camera is not open")

        ret, frame = self._capture.read()
        if not ret or frame is None:
            logger.warning("Failed to read frame from camera")
            return None

        self._frame_count += 1
        return frame

    @property
    def frame_count(self) -> int:
        """Total frames captured since opening."""
        return self._frame_count

    def __enter__(self) -> "CameraManager":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
