"""
MediaPipe model file manager for the Tasks API.

Downloads and caches the hand and pose landmarker models used when the
legacy Solutions API is not available.
"""

import os
import sys
import time
import urllib.request
from dataclasses import dataclass
from pathlib import Path

from .logger import get_logger

logger = get_logger("ModelManager")


@dataclass(frozen=True)
class ModelSpec:
    """Downloadable MediaPipe Tasks model."""
    url: str
    filename: str
    size_mb: float  # Approximate, for log messages


HAND_LANDMARKER = ModelSpec(
    url="https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/latest/hand_landmarker.task",
    filename="hand_landmarker.task",
    size_mb=7.8,
)
POSE_LANDMARKER = ModelSpec(
    url="https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_full/float16/latest/pose_landmarker_full.task",
    filename="pose_landmarker_full.task",
    size_mb=9.4,
)

# Download settings
DOWNLOAD_TIMEOUT = 120  # seconds
DOWNLOAD_CHUNK_SIZE = 8192  # bytes
MAX_RETRIES = 3
RETRY_DELAY = 2  # seconds


def get_model_cache_dir() -> Path:
    """
    Get the model cache directory.

    Returns:
        Path to model cache directory (creates if needed).
    """
    if sys.platform == "win32":
        base = os.environ.get("LOCALAPPDATA", os.path.expanduser("~"))
    else:
        base = os.environ.get("XDG_CACHE_HOME", os.path.expanduser("~/.cache"))

    cache_dir = Path(base) / "WristPostureTracker" / "mediapipe_models"
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def ensure_model(spec: ModelSpec) -> str:
    """
    Ensure a model is available, downloading it if not cached.

    Args:
        spec: Model to fetch.

    Returns:
        Path to the model file.

    Raises:
        RuntimeError: If download fails after retries.
    """
    model_path = get_model_cache_dir() / spec.filename

    if model_path.exists():
        logger.debug(f"Using cached model: {model_path}")
        return str(model_path)

    logger.info(f"Downloading {spec.filename} (~{spec.size_mb} MB) from {spec.url}")

    for attempt in range(1, MAX_RETRIES + 1):
        try:
            _download_model(spec.url, model_path)
            logger.info(f"Model downloaded: {model_path}")
            return str(model_path)
        except OSError as e:
            logger.warning(f"Download attempt {attempt}/{MAX_RETRIES} failed: {e}")
            if attempt < MAX_RETRIES:
                time.sleep(RETRY_DELAY * attempt)
            else:
                raise RuntimeError(
                    f"Failed to download {spec.filename} after {MAX_RETRIES} attempts. "
                    f"Please check your internet connection and try again."
                ) from e

    raise RuntimeError("Model download failed")


def _download_model(url: str, dest_path: Path) -> None:
    """
    Download a model file to a temp file, then move it into place.

    Args:
        url: URL to download from.
        dest_path: Destination file path.
    """
    temp_path = dest_path.with_suffix(".tmp")

    try:
        request = urllib.request.Request(
            url,
            headers={"User-Agent": "WristPostureTracker/1.0"}
        )

        with urllib.request.urlopen(request, timeout=DOWNLOAD_TIMEOUT) as response:
            with open(temp_path, "wb") as f:
                while True:
                    chunk = response.read(DOWNLOAD_CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)

        temp_path.rename(dest_path)

    except Exception:
        # Clean up temp file on failure
        if temp_path.exists():
            temp_path.unlink()
        raise
