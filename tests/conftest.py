"""
Shared fixtures and synthetic landmark builders.

Hands default to a flat, upright hand: wrist below the middle knuckle,
index and pinky knuckles level and 0.1 apart, all depths 0.
"""

import math

import pytest

from wrist_posture_tracker.config import PipelineSettings
from wrist_posture_tracker.landmarks import (
    Finger,
    HandLandmarks,
    Landmark,
    LandmarkIndex,
    PoseLandmarks,
)
from wrist_posture_tracker.pipeline import WristPosturePipeline


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


DEFAULT_TIPS = {
    Finger.THUMB: (0.40, 0.45, 0.0),
    Finger.INDEX: (0.45, 0.35, 0.0),
    Finger.MIDDLE: (0.50, 0.33, 0.0),
    Finger.RING: (0.55, 0.35, 0.0),
    Finger.PINKY: (0.60, 0.40, 0.0),
}


def make_hand(
    handedness="Left",
    wrist=(0.5, 0.6, 0.0),
    middle_mcp=(0.5, 0.5, 0.0),
    index_mcp=(0.45, 0.5, 0.0),
    pinky_mcp=(0.55, 0.5, 0.0),
    tips=None,
    overrides=None,
):
    """
    Build a 21-landmark hand.

    Args:
        handedness: Raw detector label.
        tips: Optional {Finger: (x, y, z)} replacing default fingertips.
        overrides: Optional {index: (x, y, z)} applied last.
    """
    points = [(0.5, 0.5, 0.0)] * 21
    points[LandmarkIndex.WRIST] = wrist
    points[LandmarkIndex.MIDDLE_MCP] = middle_mcp
    points[LandmarkIndex.INDEX_MCP] = index_mcp
    points[LandmarkIndex.PINKY_MCP] = pinky_mcp

    all_tips = dict(DEFAULT_TIPS)
    all_tips.update(tips or {})
    for finger, point in all_tips.items():
        points[finger.tip_index] = point

    for index, point in (overrides or {}).items():
        points[index] = point

    return HandLandmarks(
        landmarks=[Landmark(x, y, z) for x, y, z in points],
        handedness=handedness,
    )


def make_pronation_hand(angle_deg, handedness="Right"):
    """
    Hand whose pronation reads angle_deg for the side the label maps to.

    With mirrored labels "Right" is the user's left hand, where the sign
    is flipped, so the knuckle depth difference is negated for it.
    """
    width = 0.1
    z_diff = width * math.tan(math.radians(angle_deg))
    if handedness == "Right":
        z_diff = -z_diff
    return make_hand(
        handedness=handedness,
        index_mcp=(0.45, 0.5, z_diff),
        pinky_mcp=(0.55, 0.5, 0.0),
    )


def make_pose(points=None, visibility=1.0):
    """
    Build a 33-landmark pose where only the given indices are present.

    Args:
        points: {index: (x, y, z)}; every other landmark is None.
    """
    landmarks = [None] * 33
    for index, (x, y, z) in (points or {}).items():
        landmarks[index] = Landmark(x, y, z, visibility)
    return PoseLandmarks(landmarks=landmarks)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def pipeline(clock):
    return WristPosturePipeline(PipelineSettings(), clock=clock)
