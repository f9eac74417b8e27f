"""
Outlier-gated median filters for angles and 3D points.

A median over a short window suppresses single-frame misdetections
without the lag of a moving average. New samples that jump too far from
the last accepted sample are dropped before they reach the window.
"""

import math
from collections import deque
from typing import Any, MutableSequence, Sequence

import numpy as np

from .config import (
    ANGLE_SMOOTHING_WINDOW,
    MAX_ANGLE_DELTA,
    POSE_SMOOTHING_WINDOW,
    MAX_POSE_DELTA,
)
from .landmarks import Point3D


def angle_diff(a: float, b: float) -> float:
    """
    Wrap-aware difference a - b in degrees.

    Args:
        a: Angle in degrees.
        b: Angle in degrees.

    Returns:
        Difference folded into (-180, 180].

    Raises:
        ValueError: If either angle is not finite.
    """
    if not (math.isfinite(a) and math.isfinite(b)):
        raise ValueError(f"Cannot compare non-finite angles: {a}, {b}")

    diff = a - b
    while diff > 180.0:
        diff -= 360.0
    while diff <= -180.0:
        diff += 360.0
    return diff


def median(values: Sequence[float]) -> float:
    """Median of a sequence, 0.0 when empty. Even lengths average the middle pair."""
    if len(values) == 0:
        return 0.0
    return float(np.median(np.asarray(values, dtype=np.float64)))


def median_point(history: Sequence[Any]) -> Point3D:
    """Per-axis median of a non-empty sequence of points."""
    coords = np.asarray([(p.x, p.y, p.z) for p in history], dtype=np.float64)
    x, y, z = np.median(coords, axis=0)
    return Point3D(float(x), float(y), float(z))


def _push(history: MutableSequence, value: Any, window_size: int) -> None:
    history.append(value)
    while len(history) > window_size:
        del history[0]


def reject_outlier_scalar(
    new_value: float,
    history: Sequence[float],
    max_delta: float
) -> bool:
    """
    Check whether an angle jumped too far from the last accepted one.

    Args:
        new_value: Candidate angle in degrees.
        history: Accepted angles, oldest first.
        max_delta: Largest allowed wrap-aware jump in degrees.

    Returns:
        True if the value should be rejected. Empty history never rejects.
    """
    if len(history) == 0:
        return False
    return abs(angle_diff(new_value, history[-1])) > max_delta


def smooth_scalar(
    new_value: float,
    history: MutableSequence[float],
    window_size: int,
    max_delta: float
) -> float:
    """
    Push an angle through an outlier gate and return the window median.

    Args:
        new_value: Raw angle in degrees.
        history: Accepted angles, mutated in place.
        window_size: Maximum number of accepted angles kept.
        max_delta: Outlier gate in degrees.

    Returns:
        Median of the (possibly unchanged) history, or 0.0 if it is empty.
    """
    if not reject_outlier_scalar(new_value, history, max_delta):
        _push(history, new_value, window_size)
    return median(history)


def smooth_point3d(
    new_point: Any,
    history: MutableSequence[Point3D],
    window_size: int,
    max_delta: float
) -> Point3D:
    """
    Push a 3D point through a 2D distance gate and return the per-axis median.

    Only x and y take part in the gate; depth is too noisy to gate on.

    Args:
        new_point: Raw point with x, y, z attributes.
        history: Accepted points, mutated in place.
        window_size: Maximum number of accepted points kept.
        max_delta: Largest allowed 2D jump from the last accepted point.

    Returns:
        Per-axis median of the history after the update.
    """
    point = Point3D(float(new_point.x), float(new_point.y), float(new_point.z))

    if len(history) > 0:
        last = history[-1]
        dist = math.hypot(point.x - last.x, point.y - last.y)
        if dist > max_delta:
            return median_point(history)

    _push(history, point, window_size)
    return median_point(history)


class MedianAngleFilter:
    """
    Outlier-gated median filter for one angle stream.

    Attributes:
        window_size: Number of accepted samples kept.
        max_delta: Outlier gate in degrees.
    """

    def __init__(
        self,
        window_size: int = ANGLE_SMOOTHING_WINDOW,
        max_delta: float = MAX_ANGLE_DELTA
    ):
        self.window_size = window_size
        self.max_delta = max_delta
        self._history: deque[float] = deque()

    def update(self, value: float) -> float:
        """Filter one raw angle and return the smoothed angle."""
        return smooth_scalar(value, self._history, self.window_size, self.max_delta)

    def reset(self) -> None:
        """Forget all accepted samples."""
        self._history.clear()

    @property
    def history(self) -> tuple[float, ...]:
        """Accepted samples, oldest first."""
        return tuple(self._history)

    @property
    def is_full(self) -> bool:
        """Check whether the window holds window_size samples."""
        return len(self._history) >= self.window_size

    def __len__(self) -> int:
        return len(self._history)


class MedianPointFilter:
    """
    Outlier-gated per-axis median filter for one 3D point stream.

    Attributes:
        window_size: Number of accepted samples kept.
        max_delta: Outlier gate as 2D distance in normalized units.
    """

    def __init__(
        self,
        window_size: int = POSE_SMOOTHING_WINDOW,
        max_delta: float = MAX_POSE_DELTA
    ):
        self.window_size = window_size
        self.max_delta = max_delta
        self._history: deque[Point3D] = deque()

    def update(self, point: Any) -> Point3D:
        """Filter one raw point and return the smoothed point."""
        return smooth_point3d(point, self._history, self.window_size, self.max_delta)

    @property
    def history(self) -> tuple[Point3D, ...]:
        """Accepted samples, oldest first."""
        return tuple(self._history)

    def __len__(self) -> int:
        return len(self._history)
