"""Tests for movement-based press finger detection."""

import pytest

from conftest import DEFAULT_TIPS, make_hand
from wrist_posture_tracker.config import PressDetectionSettings
from wrist_posture_tracker.landmarks import Finger, FingerLabel, HandSide
from wrist_posture_tracker.press_detector import PressFingerDetector

# Binary fractions keep the window boundaries exact
NOW = 1.0
TIMES = (0.75, 0.875, 0.9375, 0.96875)  # ages 0.25, 0.125, 0.0625, 0.03125


def tip_track(finger, positions):
    """One hand per (dy, dz) offset applied to a single fingertip."""
    x, y, z = DEFAULT_TIPS[finger]
    return [make_hand(tips={finger: (x, y + dy, z + dz)}) for dy, dz in positions]


def record_all(detector, hands, side=HandSide.RIGHT, times=TIMES):
    for hand, t in zip(hands, times):
        detector.record(hand, side, t)


def test_moving_finger_is_detected():
    detector = PressFingerDetector()
    hands = tip_track(Finger.INDEX, [(0.0, 0.0), (0.0, 0.0), (0.01, 0.0), (0.02, 0.03)])
    record_all(detector, hands, HandSide.RIGHT)

    assert detector.detect(NOW) is FingerLabel.R_INDEX
    # early[0] is the sample aged 0.125, late[-1] the one aged 0.03125
    assert detector.score(HandSide.RIGHT, Finger.INDEX, NOW) == pytest.approx(0.3 * 0.02 + 0.7 * 0.03)


def test_samples_outside_lookback_are_ignored():
    detector = PressFingerDetector()
    # Only the oldest sample (age 0.25) differs
    hands = tip_track(Finger.RING, [(-0.1, -0.1), (0.0, 0.0), (0.0, 0.0), (0.0, 0.0)])
    record_all(detector, hands, HandSide.LEFT)

    assert detector.score(HandSide.LEFT, Finger.RING, NOW) == pytest.approx(0.0)
    assert detector.detect(NOW) is FingerLabel.UNKNOWN


def test_strongest_finger_wins():
    detector = PressFingerDetector()
    for t, (dz_middle, dz_pinky) in zip(TIMES, [(0, 0), (0, 0), (0.01, 0.02), (0.02, 0.05)]):
        x_m, y_m, z_m = DEFAULT_TIPS[Finger.MIDDLE]
        x_p, y_p, z_p = DEFAULT_TIPS[Finger.PINKY]
        hand = make_hand(tips={
            Finger.MIDDLE: (x_m, y_m, z_m + dz_middle),
            Finger.PINKY: (x_p, y_p, z_p + dz_pinky),
        })
        detector.record(hand, HandSide.LEFT, t)

    assert detector.detect(NOW) is FingerLabel.L_PINKY


def test_upward_motion_never_wins():
    detector = PressFingerDetector()
    hands = tip_track(Finger.INDEX, [(0.0, 0.0), (0.0, 0.0), (-0.01, -0.01), (-0.02, -0.02)])
    record_all(detector, hands)

    assert detector.detect(NOW) is FingerLabel.UNKNOWN


def test_too_few_samples():
    detector = PressFingerDetector()
    hands = tip_track(Finger.INDEX, [(0.0, 0.0), (0.05, 0.05)])
    record_all(detector, hands, times=(0.875, 0.96875))

    assert detector.score(HandSide.RIGHT, Finger.INDEX, NOW) is None
    assert detector.detect(NOW) is FingerLabel.UNKNOWN


def test_empty_late_window():
    detector = PressFingerDetector()
    hands = tip_track(Finger.INDEX, [(0.0, 0.0), (0.01, 0.01), (0.02, 0.02)])
    record_all(detector, hands, times=(0.8125, 0.875, 0.9375))

    assert detector.score(HandSide.RIGHT, Finger.INDEX, NOW) is None


def test_history_is_bounded():
    detector = PressFingerDetector(PressDetectionSettings(history_size=4))
    hand = make_hand()
    for i in range(10):
        detector.record(hand, HandSide.RIGHT, i * 0.1)

    history = detector.history(HandSide.RIGHT, Finger.THUMB)
    assert len(history) == 4
    assert history[-1].timestamp == pytest.approx(0.9)


def test_reset_clears_history():
    detector = PressFingerDetector()
    record_all(detector, tip_track(Finger.INDEX, [(0, 0)] * 4))
    detector.reset()

    assert detector.history(HandSide.RIGHT, Finger.INDEX) == ()
