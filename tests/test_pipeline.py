"""End-to-end tests for the landmark-to-metric pipeline."""

import math

import pytest

from conftest import DEFAULT_TIPS, make_hand, make_pose, make_pronation_hand
from wrist_posture_tracker.config import FilterSettings, PipelineSettings
from wrist_posture_tracker.landmarks import Finger, FingerLabel, HandSide, PoseLandmarkIndex as P
from wrist_posture_tracker.pipeline import WristPosturePipeline

FRAME = 0.1


def run_frames(pipeline, clock, hands, count):
    for _ in range(count):
        clock.advance(FRAME)
        pipeline.on_hand_frame(hands)


def test_pronation_self_baselines_then_tracks_change(pipeline, clock):
    # "Right" from the detector is the user's left hand
    hand_30 = make_pronation_hand(30.0, "Right")
    hand_45 = make_pronation_hand(45.0, "Right")

    run_frames(pipeline, clock, [hand_30], 15)
    angles = pipeline.get_angles()
    assert pipeline.is_calibrated
    assert angles.left_pronation == pytest.approx(0.0)
    assert angles.left_deviation == pytest.approx(0.0)
    assert angles.left_extension == pytest.approx(0.0)
    assert pipeline.get_baselines()["left_pronation"] == pytest.approx(30.0)

    for _ in range(5):
        run_frames(pipeline, clock, [hand_30], 1)
        assert pipeline.get_angles().left_pronation == pytest.approx(0.0)

    # The window median only moves once 45 holds the majority (8 of 15)
    run_frames(pipeline, clock, [hand_45], 7)
    assert pipeline.get_angles().left_pronation == pytest.approx(0.0)
    run_frames(pipeline, clock, [hand_45], 1)
    assert pipeline.get_angles().left_pronation == pytest.approx(15.0, abs=1.0)

    assert pipeline.get_angles().right_pronation is None
    assert pipeline.get_finger_travel().left == 0.0


def test_detector_labels_are_de_mirrored(pipeline, clock):
    run_frames(pipeline, clock, [make_hand(handedness="Left")], 1)

    angles = pipeline.get_angles()
    assert angles.right_pronation is not None
    assert angles.left_pronation is None


def test_unmirrored_labels(clock):
    pipeline = WristPosturePipeline(clock=clock, mirrored_labels=False)
    run_frames(pipeline, clock, [make_hand(handedness="Left")], 1)

    assert pipeline.get_angles().left_pronation is not None


def test_non_finite_hand_is_discarded(pipeline, clock):
    bad = make_hand(overrides={3: (math.nan, 0.5, 0.0)})
    run_frames(pipeline, clock, [bad], 1)

    assert pipeline.discarded_hands == 1
    assert pipeline.get_angles().right_pronation is None
    assert pipeline.calibration_progress(HandSide.RIGHT) == 0.0


def test_unknown_label_and_short_hand_are_discarded(pipeline, clock):
    unknown = make_hand(handedness="Both")
    short = make_hand()
    short.landmarks = short.landmarks[:20]

    run_frames(pipeline, clock, [unknown, short, make_hand(handedness="Right")], 1)

    assert pipeline.discarded_hands == 2
    assert pipeline.get_angles().left_pronation is not None


def test_empty_frames_are_ignored(pipeline):
    pipeline.on_hand_frame([])
    pipeline.on_hand_frame(None)
    pipeline.on_pose_frame(None)

    assert pipeline.frames_processed == 0
    assert all(value is None for value in pipeline.get_angles().to_dict().values())


def test_deviation_uses_forearm_from_pose(clock):
    pipeline = WristPosturePipeline(
        PipelineSettings(filters=FilterSettings(angle_window=1)), clock=clock
    )
    # Left arm drawn on the image's high-x side
    pipeline.on_pose_frame(make_pose({
        P.LEFT_ELBOW: (0.7, 0.8, 0.0),
        P.LEFT_WRIST: (0.7, 0.6, 0.0),
    }))
    tilted = make_hand(handedness="Right", wrist=(0.7, 0.6, 0.0), middle_mcp=(0.8, 0.5, 0.0))
    run_frames(pipeline, clock, [tilted], 1)

    assert pipeline.get_limb_state(HandSide.LEFT).is_complete
    # Baseline needs the calibration delay, so the raw smoothed angle is reported
    assert pipeline.get_angles().left_deviation == pytest.approx(-45.0)


def test_reset_calibration_starts_new_epoch(pipeline, clock):
    run_frames(pipeline, clock, [make_hand()], 15)
    assert pipeline.is_calibrated

    pipeline.reset_calibration()
    assert not pipeline.is_calibrated
    assert pipeline.get_angles().right_pronation is None

    run_frames(pipeline, clock, [make_hand()], 15)
    assert pipeline.is_calibrated


def test_session_travel_and_reset(pipeline, clock):
    x, y, z = DEFAULT_TIPS[Finger.INDEX]
    start = make_hand(tips={Finger.INDEX: (x, y, z)})
    moved = make_hand(tips={Finger.INDEX: (x + 0.1, y, z)})

    run_frames(pipeline, clock, [start], 1)
    run_frames(pipeline, clock, [moved], 1)
    assert pipeline.get_finger_travel().right == 0.0

    pipeline.set_session_active(True)
    run_frames(pipeline, clock, [start], 1)
    assert pipeline.session_active
    assert pipeline.get_finger_travel().right == pytest.approx(0.1)

    pipeline.reset()
    assert pipeline.get_finger_travel().right == 0.0
    assert pipeline.detect_pressing_finger() is FingerLabel.UNKNOWN


def test_reset_keeps_limb_state(pipeline):
    pipeline.on_pose_frame(make_pose({
        P.LEFT_ELBOW: (0.3, 0.8, 0.0),
        P.LEFT_WRIST: (0.3, 0.6, 0.0),
    }))
    pipeline.reset()

    assert pipeline.get_limb_state(HandSide.LEFT).is_complete


def test_detect_pressing_finger_uses_clock(pipeline, clock):
    x, y, z = DEFAULT_TIPS[Finger.MIDDLE]
    for dz in (0.0, 0.0, 0.0, 0.02, 0.04):
        clock.advance(0.05)
        pipeline.on_hand_frame([make_hand(handedness="Left", tips={Finger.MIDDLE: (x, y, z + dz)})])

    assert pipeline.detect_pressing_finger() is FingerLabel.R_MIDDLE
