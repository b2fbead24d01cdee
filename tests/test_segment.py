import datetime as dt

import pytest

from gpssplit.analyze.segment import PAUSE_THRESHOLD_MPS, Segment
from gpssplit.errors import DegenerateDurationError, InsufficientPointsError

from conftest import at, pt


def test_distance(workout):
    assert workout.whole().distance() == pytest.approx(157_000, abs=1_000)


def test_distance_of_short_segments_is_zero():
    assert Segment([]).distance() == 0
    assert Segment([pt(1, 1, 0)]).distance() == 0


def test_duration(workout):
    assert workout.whole().duration() == 60


def test_duration_of_empty_segment():
    with pytest.raises(InsufficientPointsError):
        Segment([]).duration()


def test_speed(workout):
    whole = workout.whole()
    speed = whole.speed(False)
    assert speed == pytest.approx(157_000 / 60, abs=1_000 / 60)
    # nothing below the pause threshold, so autopause changes nothing
    assert whole.speed(True) == speed


def test_paused_duration(paused):
    assert paused.whole().paused_duration(5) == 60


def test_speed_autopause_ignores_standing_still(paused):
    whole = paused.whole()
    assert whole.speed(True) == pytest.approx(157_000 / 60, abs=1_000 / 60)
    assert whole.speed(False) == pytest.approx(whole.speed(True) / 2)


def test_same_second_pairs_are_neither_moving_nor_paused():
    seg = Segment([pt(1, 1, 0), pt(1, 1, 0), pt(1, 1, 30)])
    assert seg.paused_duration(5) == 30


def test_paused_duration_threshold_is_strict():
    # 111.19 m in 30 s is 3.7 m/s
    seg = Segment([pt(47.0, 8.0, 0), pt(47.001, 8.0, 30)])
    assert seg.paused_duration(3.0) == 0
    assert seg.paused_duration(4.0) == 30


def test_single_point_speed_is_degenerate():
    seg = Segment([pt(1, 1, 0)])
    with pytest.raises(DegenerateDurationError):
        seg.speed(False)
    with pytest.raises(DegenerateDurationError):
        seg.speed(True)


def test_fully_paused_segment_has_no_autopause_speed():
    seg = Segment([pt(1, 1, 0), pt(1, 1, 60)])
    assert seg.speed(False) == 0
    with pytest.raises(DegenerateDurationError):
        seg.speed(True)


def test_paused_time_exceeding_duration_is_surfaced():
    # out-of-order timestamps: 60 s paused inside a 30 s span
    seg = Segment([pt(1, 1, 0), pt(1, 1, 60), pt(1, 1, 30)])
    assert seg.paused_duration(PAUSE_THRESHOLD_MPS) > seg.duration()
    with pytest.raises(DegenerateDurationError):
        seg.speed(True)


def test_between_keeps_points_inside_window(altitude):
    seg = Segment.between(altitude.points, at(1), at(61))
    assert len(seg) == 1
    assert seg.points[0].elevation == 100


def test_between_includes_both_boundaries(altitude):
    seg = Segment.between(altitude.points, at(60), at(120))
    assert [p.elevation for p in seg] == [100, 0]


def test_between_compares_whole_seconds():
    points = [pt(0, 0, 60.7), pt(0, 0, 61.2)]
    seg = Segment.between(points, at(0.5), at(60.9))
    assert len(seg) == 1
    assert seg.points[0].timestamp == at(60.7)


def test_explicit_points_are_not_filtered():
    points = [pt(0, 0, 120), pt(0, 0, 0)]
    seg = Segment(points)
    assert list(seg) == points
    assert seg.start == at(120)
    assert seg.end == at(0)


def test_metrics_follow_points_not_a_cache(workout):
    seg = workout.whole()
    assert seg.distance() == seg.distance()
    assert Segment([]).start is None


def test_summary(workout):
    text = workout.whole().summary()
    assert text.startswith("distance=157")
    assert "duration=60 s" in text
    assert "speed=" in text and "speed_autopause=" in text


def test_summary_of_single_point_marks_missing_metrics():
    text = str(Segment([pt(1, 1, 0)]))
    assert "distance=0.0 m" in text
    assert "speed=n/a" in text
    assert "(1 points)" in text


def test_between_accepts_timezone_shifted_window(altitude):
    cet = dt.timezone(dt.timedelta(hours=2))
    seg = Segment.between(altitude.points, at(1).astimezone(cet), at(61).astimezone(cet))
    assert len(seg) == 1
