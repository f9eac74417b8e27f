"""
Cumulative fingertip travel per hand.

Sums the 2D movement of the five fingertips between frames, ignoring
sub-threshold jitter, while a session is active.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from .config import FINGER_JITTER_THRESHOLD
from .landmarks import HandLandmarks, HandSide
from .logger import get_logger

logger = get_logger("FingerTravel")


@dataclass
class FingerTravel:
    """Cumulative fingertip travel per hand, in normalized image units."""
    left: float = 0.0
    right: float = 0.0

    def get(self, side: HandSide) -> float:
        return self.left if side is HandSide.LEFT else self.right


@dataclass
class TravelAccumulator:
    """Running total and last fingertip positions for one hand."""
    total: float = 0.0
    previous: Optional[list[tuple[float, float]]] = field(default=None)


def frame_travel(
    current: list[tuple[float, float]],
    previous: Optional[list[tuple[float, float]]],
    jitter_threshold: float = FINGER_JITTER_THRESHOLD
) -> float:
    """
    Sum fingertip displacements between two frames.

    Args:
        current: Fingertip (x, y) positions this frame.
        previous: Fingertip (x, y) positions last frame, or None.
        jitter_threshold: Displacements at or below this count as zero.

    Returns:
        Total displacement, 0.0 without a previous frame.
    """
    if previous is None:
        return 0.0

    total = 0.0
    for (x, y), (px, py) in zip(current, previous):
        dist = math.hypot(x - px, y - py)
        if dist > jitter_threshold:
            total += dist
    return total


class FingerTravelIntegrator:
    """
    Accumulates fingertip travel while the session is active.

    Previous positions are always updated, so toggling the session
    flag never turns movement made while inactive into a jump.
    """

    def __init__(self, jitter_threshold: float = FINGER_JITTER_THRESHOLD):
        """
        Initialize integrator.

        Args:
            jitter_threshold: Per-fingertip movement ignored below this.
        """
        self.jitter_threshold = jitter_threshold
        self._accumulators = {side: TravelAccumulator() for side in HandSide}

    def update(self, hand: HandLandmarks, side: HandSide, session_active: bool) -> float:
        """
        Process one frame of hand landmarks.

        Args:
            hand: Validated hand landmarks.
            side: Anatomical side of the hand.
            session_active: Whether travel should be accumulated.

        Returns:
            This frame's travel (counted or not).
        """
        accumulator = self._accumulators[side]
        current = [(tip.x, tip.y) for tip in hand.get_fingertips()]

        delta = frame_travel(current, accumulator.previous, self.jitter_threshold)
        accumulator.previous = current

        if session_active:
            accumulator.total += delta
        return delta

    def totals(self) -> FingerTravel:
        """Get cumulative travel for both hands."""
        return FingerTravel(
            left=self._accumulators[HandSide.LEFT].total,
            right=self._accumulators[HandSide.RIGHT].total
        )

    def reset(self) -> None:
        """Zero both totals and forget previous positions."""
        self._accumulators = {side: TravelAccumulator() for side in HandSide}
        logger.debug("Finger travel reset")
