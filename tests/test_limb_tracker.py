"""Tests for forearm side assignment and smoothing."""

import math

import pytest

from conftest import make_pose
from wrist_posture_tracker.config import FilterSettings
from wrist_posture_tracker.landmarks import HandSide, PoseLandmarkIndex as P
from wrist_posture_tracker.limb_tracker import LimbTracker


def both_arms(wrist15_x, wrist16_x, shoulders=True):
    points = {
        P.LEFT_ELBOW: (wrist15_x, 0.8, 0.0),
        P.LEFT_WRIST: (wrist15_x, 0.6, 0.0),
        P.RIGHT_ELBOW: (wrist16_x, 0.8, 0.0),
        P.RIGHT_WRIST: (wrist16_x, 0.6, 0.0),
    }
    if shoulders:
        points[P.LEFT_SHOULDER] = (0.6, 0.3, 0.0)
        points[P.RIGHT_SHOULDER] = (0.4, 0.3, 0.0)
    return make_pose(points)


def test_state_empty_before_first_pose():
    tracker = LimbTracker()
    for side in HandSide:
        assert not tracker.get_state(side).is_complete
    tracker.update(None)
    assert tracker.get_state(HandSide.LEFT).wrist is None


def test_shoulder_midline_assigns_high_x_arm_to_left():
    tracker = LimbTracker()
    tracker.update(both_arms(wrist15_x=0.3, wrist16_x=0.7))

    assert tracker.get_state(HandSide.LEFT).wrist.x == pytest.approx(0.7)
    assert tracker.get_state(HandSide.RIGHT).wrist.x == pytest.approx(0.3)
    assert tracker.fallback_count == 0


def test_shoulder_midline_keeps_detector_order_when_consistent():
    tracker = LimbTracker()
    tracker.update(both_arms(wrist15_x=0.7, wrist16_x=0.3))

    assert tracker.get_state(HandSide.LEFT).wrist.x == pytest.approx(0.7)
    assert tracker.get_state(HandSide.LEFT).elbow.x == pytest.approx(0.7)
    assert tracker.get_state(HandSide.RIGHT).wrist.x == pytest.approx(0.3)


def test_without_shoulders_wrists_are_compared():
    tracker = LimbTracker()
    tracker.update(both_arms(wrist15_x=0.2, wrist16_x=0.8, shoulders=False))

    assert tracker.get_state(HandSide.LEFT).wrist.x == pytest.approx(0.8)
    assert tracker.get_state(HandSide.RIGHT).wrist.x == pytest.approx(0.2)
    assert tracker.fallback_count == 1


def test_single_arm_uses_detector_sides():
    tracker = LimbTracker()
    tracker.update(make_pose({
        P.LEFT_ELBOW: (0.3, 0.8, 0.0),
        P.LEFT_WRIST: (0.3, 0.6, 0.0),
    }))

    assert tracker.get_state(HandSide.LEFT).is_complete
    assert tracker.get_state(HandSide.LEFT).wrist.x == pytest.approx(0.3)
    assert tracker.get_state(HandSide.RIGHT).elbow is None


def test_missing_side_keeps_last_value():
    tracker = LimbTracker()
    tracker.update(both_arms(wrist15_x=0.7, wrist16_x=0.3))
    before = tracker.get_state(HandSide.RIGHT).wrist

    tracker.update(make_pose({
        P.LEFT_ELBOW: (0.7, 0.8, 0.0),
        P.LEFT_WRIST: (0.7, 0.6, 0.0),
    }))

    assert tracker.get_state(HandSide.RIGHT).wrist == before


def test_non_finite_pose_point_is_ignored():
    tracker = LimbTracker()
    tracker.update(make_pose({
        P.LEFT_ELBOW: (0.3, 0.8, 0.0),
        P.LEFT_WRIST: (math.nan, 0.6, 0.0),
    }))

    state = tracker.get_state(HandSide.LEFT)
    assert state.elbow is not None
    assert state.wrist is None


def test_low_visibility_is_ignored_when_threshold_set():
    tracker = LimbTracker(FilterSettings(pose_min_visibility=0.5))
    tracker.update(make_pose({
        P.LEFT_ELBOW: (0.3, 0.8, 0.0),
        P.LEFT_WRIST: (0.3, 0.6, 0.0),
    }, visibility=0.2))

    assert tracker.get_state(HandSide.LEFT).elbow is None


def test_wrist_jump_is_rejected():
    tracker = LimbTracker()
    tracker.update(both_arms(wrist15_x=0.7, wrist16_x=0.3))
    tracker.update(make_pose({
        P.LEFT_ELBOW: (0.7, 0.8, 0.0),
        P.LEFT_WRIST: (0.7, 0.1, 0.0),
    }))

    assert tracker.get_state(HandSide.LEFT).wrist.y == pytest.approx(0.6)
