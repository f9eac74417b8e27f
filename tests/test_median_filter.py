"""Tests for the wrap-aware angle difference and the median filters."""

import math
from types import SimpleNamespace

import pytest

from wrist_posture_tracker.landmarks import Point3D
from wrist_posture_tracker.median_filter import (
    MedianAngleFilter,
    MedianPointFilter,
    angle_diff,
    median,
    reject_outlier_scalar,
    smooth_point3d,
    smooth_scalar,
)


def test_angle_diff_takes_short_way_round():
    assert angle_diff(170, -170) == pytest.approx(-20)
    assert angle_diff(-170, 170) == pytest.approx(20)
    assert angle_diff(10, 350) == pytest.approx(20)


def test_angle_diff_range_and_identity():
    for a in range(-180, 181, 15):
        assert angle_diff(a, a) == 0
        for b in range(-180, 181, 15):
            d = angle_diff(a, b)
            assert -180 < d <= 180


def test_angle_diff_half_turn_is_positive():
    assert angle_diff(180, 0) == 180
    assert angle_diff(-180, 0) == 180
    assert angle_diff(0, 180) == 180


def test_angle_diff_rejects_non_finite():
    with pytest.raises(ValueError):
        angle_diff(math.nan, 0)
    with pytest.raises(ValueError):
        angle_diff(0, math.inf)


def test_median_empty_and_even():
    assert median([]) == 0.0
    assert median([1.0, 3.0]) == 2.0
    assert median([5.0, 1.0, 3.0]) == 3.0


def test_outlier_spike_is_dropped_not_averaged():
    history = [10.0, 12.0, 11.0]
    result = smooth_scalar(40.0, history, window_size=15, max_delta=5)

    assert result == 11.0
    assert history == [10.0, 12.0, 11.0]


def test_outlier_gate_compares_against_last_accepted():
    assert reject_outlier_scalar(40.0, [], max_delta=5) is False
    assert reject_outlier_scalar(14.0, [10.0, 12.0, 11.0], max_delta=5) is False
    assert reject_outlier_scalar(17.0, [10.0, 12.0, 11.0], max_delta=5) is True


def test_outlier_gate_is_wrap_aware():
    history = [178.0]
    smooth_scalar(-179.0, history, window_size=5, max_delta=5)
    assert history == [178.0, -179.0]


def test_window_keeps_most_recent_values():
    history = []
    window = 5
    for value in range(window + 3):
        smooth_scalar(float(value), history, window_size=window, max_delta=50)

    assert history == [3.0, 4.0, 5.0, 6.0, 7.0]


def test_angle_filter_fills_and_resets():
    f = MedianAngleFilter(window_size=3, max_delta=50)
    assert f.update(10.0) == 10.0
    assert not f.is_full
    f.update(20.0)
    assert f.update(30.0) == 20.0
    assert f.is_full
    assert len(f) == 3

    f.reset()
    assert len(f) == 0
    assert f.history == ()


def test_point_gate_uses_xy_distance_only():
    history = []
    smooth_point3d(Point3D(0.5, 0.5, 0.0), history, window_size=10, max_delta=0.15)

    # Large depth change alone passes the gate
    smooth_point3d(Point3D(0.5, 0.5, 0.9), history, window_size=10, max_delta=0.15)
    assert len(history) == 2

    result = smooth_point3d(Point3D(0.9, 0.5, 0.0), history, window_size=10, max_delta=0.15)
    assert len(history) == 2
    assert (result.x, result.y, result.z) == pytest.approx((0.5, 0.5, 0.45))


def test_point_filter_per_axis_median():
    f = MedianPointFilter(window_size=3, max_delta=1.0)
    f.update(SimpleNamespace(x=0.1, y=0.9, z=0.0))
    f.update(SimpleNamespace(x=0.3, y=0.7, z=0.2))
    smoothed = f.update(SimpleNamespace(x=0.2, y=0.8, z=0.1))

    assert smoothed.x == pytest.approx(0.2)
    assert smoothed.y == pytest.approx(0.8)
    assert smoothed.z == pytest.approx(0.1)
