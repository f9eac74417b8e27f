"""
Wrist angle computation from hand and forearm landmarks.

Three angles are measured per hand:
- Deviation: side-to-side bend toward thumb (radial, +) or pinky (ulnar, -).
- Pronation: palm rotation from the depth difference across the knuckles.
- Extension: up/down bend of the hand relative to the forearm.

Signs are flipped for the left hand so the same anatomical direction
reads the same on both hands. Every raw angle is smoothed on its own
channel before leaving the engine.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from .config import FilterSettings, MIN_HAND_WIDTH, EXTENSION_LIMIT_DEG
from .landmarks import AngleType, HandLandmarks, HandSide
from .limb_tracker import LimbState
from .logger import get_logger
from .median_filter import MedianAngleFilter

logger = get_logger("AngleEngine")


def _finite_or_zero(angle: float) -> float:
    return angle if math.isfinite(angle) else 0.0


def compute_deviation(hand: HandLandmarks, limb: LimbState, side: HandSide) -> float:
    """
    Compute radial/ulnar deviation in degrees.

    Signed angle in the image (x, y) plane between the forearm
    (elbow -> wrist, from pose) and the hand (wrist -> middle MCP).

    Returns:
        Angle in degrees, 0.0 without a complete limb state.
    """
    if not limb.is_complete:
        return 0.0

    forearm_x = limb.wrist.x - limb.elbow.x
    forearm_y = limb.wrist.y - limb.elbow.y
    hand_x = hand.middle_mcp.x - hand.wrist.x
    hand_y = hand.middle_mcp.y - hand.wrist.y

    cross = forearm_x * hand_y - forearm_y * hand_x
    dot = forearm_x * hand_x + forearm_y * hand_y
    angle = math.degrees(math.atan2(cross, dot))

    return _finite_or_zero(angle if side is HandSide.RIGHT else -angle)


def compute_pronation(hand: HandLandmarks, side: HandSide) -> float:
    """
    Compute palm rotation in degrees.

    The depth difference between index and pinky knuckles is normalized
    by their apparent 2D distance, which keeps the angle independent of
    distance to the camera.

    Returns:
        Angle in degrees, 0.0 when the hand is too small to measure.
    """
    index_mcp = hand.index_mcp
    pinky_mcp = hand.pinky_mcp

    z_diff = index_mcp.z - pinky_mcp.z  # negative z = closer to camera
    width = math.hypot(index_mcp.x - pinky_mcp.x, index_mcp.y - pinky_mcp.y)
    if width < MIN_HAND_WIDTH:
        return 0.0

    angle = math.degrees(math.atan2(z_diff, width))
    return _finite_or_zero(angle if side is HandSide.RIGHT else -angle)


def compute_extension(hand: HandLandmarks, limb: LimbState, side: HandSide) -> float:
    """
    Compute wrist extension (+) / flexion (-) in degrees.

    Forearm and hand vectors are taken in the (y, z) plane and the
    difference of their directions is folded once by 180 degrees when
    it is above 90 or at or below -90, so exactly -90 reads as 90.

    Returns:
        Angle in degrees, 0.0 without a complete limb state.
    """
    if not limb.is_complete:
        return 0.0

    forearm_angle = math.atan2(limb.wrist.z - limb.elbow.z, limb.wrist.y - limb.elbow.y)
    hand_angle = math.atan2(
        hand.middle_mcp.z - hand.wrist.z,
        hand.middle_mcp.y - hand.wrist.y
    )
    angle = math.degrees(hand_angle - forearm_angle)

    if angle > EXTENSION_LIMIT_DEG:
        angle -= 180.0
    if angle <= -EXTENSION_LIMIT_DEG:
        angle += 180.0

    return _finite_or_zero(angle if side is HandSide.RIGHT else -angle)


@dataclass
class AngleChannel:
    """
    Smoothing and calibration state for one angle on one hand.

    Attributes:
        angle_type: Which angle this channel measures.
        side: Which hand.
        filter: Median filter holding the accepted raw values.
        baseline: Captured rest angle, None until calibrated.
        last_value: Last reported (calibrated when possible) value.
    """
    angle_type: AngleType
    side: HandSide
    filter: MedianAngleFilter
    baseline: Optional[float] = None
    last_value: Optional[float] = None
    last_smoothed: Optional[float] = field(default=None, repr=False)

    @property
    def key(self) -> str:
        """Channel key, e.g. 'left_deviation'."""
        return f"{self.side.value}_{self.angle_type.value}"

    def clear(self) -> None:
        """Clear history, baseline and last values."""
        self.filter.reset()
        self.baseline = None
        self.last_value = None
        self.last_smoothed = None


class AngleEngine:
    """
    Computes and smooths the six wrist angle channels.

    Usage:
        engine = AngleEngine()
        smoothed = engine.process(hand, HandSide.LEFT, limb_tracker.get_state(HandSide.LEFT))
    """

    def __init__(self, settings: Optional[FilterSettings] = None):
        """
        Initialize angle engine.

        Args:
            settings: Filter settings. Uses defaults if None.
        """
        self.settings = settings or FilterSettings()
        self.channels: dict[tuple[AngleType, HandSide], AngleChannel] = {}
        for angle_type in AngleType:
            for side in HandSide:
                self.channels[(angle_type, side)] = AngleChannel(
                    angle_type=angle_type,
                    side=side,
                    filter=MedianAngleFilter(
                        window_size=self.settings.angle_window,
                        max_delta=self.settings.max_angle_delta
                    )
                )

    def channel(self, angle_type: AngleType, side: HandSide) -> AngleChannel:
        """Get the channel for an angle type and side."""
        return self.channels[(angle_type, side)]

    @staticmethod
    def compute_raw(hand: HandLandmarks, side: HandSide, limb: LimbState) -> dict[AngleType, float]:
        """Compute the three unsmoothed angles for one hand."""
        return {
            AngleType.DEVIATION: compute_deviation(hand, limb, side),
            AngleType.PRONATION: compute_pronation(hand, side),
            AngleType.EXTENSION: compute_extension(hand, limb, side),
        }

    def process(self, hand: HandLandmarks, side: HandSide, limb: LimbState) -> dict[AngleType, float]:
        """
        Compute and smooth all three angles for one hand.

        Args:
            hand: Validated hand landmarks.
            side: Anatomical side of the hand.
            limb: Current smoothed forearm state for that side.

        Returns:
            Smoothed angle per AngleType, in degrees.
        """
        smoothed = {}
        for angle_type, raw in self.compute_raw(hand, side, limb).items():
            channel = self.channel(angle_type, side)
            value = channel.filter.update(raw)
            channel.last_smoothed = value
            smoothed[angle_type] = value
        return smoothed

    def reset(self) -> None:
        """Clear every channel."""
        for channel in self.channels.values():
            channel.clear()
