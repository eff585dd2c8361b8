import pytest

from physiopoint.engine.session_quality import (
    CheatDetected, GoodFormHeld, SessionMetrics, SessionQualityTracker, control_label_for
)
from physiopoint.engine.zone_classifier import Zone


def test_quality_score_is_time_in_target():
    metrics = SessionMetrics(total_frames=100, frames_in_good_form=80)
    assert metrics.quality_score == pytest.approx(0.8)


def test_empty_session_defaults():
    metrics = SessionMetrics()
    assert metrics.quality_score == 0.0
    assert metrics.control_rating == 1.0


@pytest.mark.parametrize("total,good,jitter", [
    (1, 0, 0.0),
    (2, 2, 500.0),
    (10, 50, 0.0),
    (1000, 0, 1e9),
    (3, 1, 2.5),
])
def test_scores_stay_in_unit_interval(total, good, jitter):
    metrics = SessionMetrics(total_frames=total, frames_in_good_form=good, jitter_accumulated=jitter)
    assert 0.0 <= metrics.quality_score <= 1.0
    assert 0.0 <= metrics.control_rating <= 1.0


def test_control_rating_from_average_jitter():
    # 11 frames, 10 deltas averaging 3° -> 1 - 3/15
    metrics = SessionMetrics(total_frames=11, jitter_accumulated=30.0)
    assert metrics.control_rating == pytest.approx(0.8)


@pytest.mark.parametrize("rating,label", [
    (1.0, "Excellent"),
    (0.8, "Excellent"),
    (0.79, "Good"),
    (0.6, "Good"),
    (0.4, "Fair"),
    (0.39, "Keep practicing"),
    (0.0, "Keep practicing"),
])
def test_control_label_boundaries_are_inclusive(rating, label):
    assert control_label_for(rating) == label


def test_tracker_accumulates_frames():
    tracker = SessionQualityTracker(frame_rate=10)
    tracker.record_frame(Zone.BELOW_TARGET, 100.0, 100.0)
    tracker.record_frame(Zone.TARGET, 104.0, 102.0)
    tracker.record_frame(Zone.TARGET, 101.0, 101.5)

    m = tracker.metrics
    assert m.total_frames == 3
    assert m.frames_in_good_form == 2
    assert m.jitter_accumulated == pytest.approx(7.0)
    assert m.best_angle == pytest.approx(102.0)
    assert m.good_form_seconds == pytest.approx(0.2)


def test_good_form_event_once_per_streak():
    tracker = SessionQualityTracker(frame_rate=10, good_form_streak_seconds=2.0)
    for _ in range(50):
        tracker.record_frame(Zone.TARGET, 90.0, 90.0)
    assert tracker.events == [GoodFormHeld(seconds=2.0)]

    tracker.record_frame(Zone.BELOW_TARGET, 60.0, 60.0)
    for _ in range(20):
        tracker.record_frame(Zone.TARGET, 90.0, 90.0)
    assert len(tracker.events) == 2
    assert tracker.held_good_form


def test_cheats_recorded_once_per_joint_in_order():
    tracker = SessionQualityTracker()
    assert tracker.record_cheat("spine_4_joint")
    assert not tracker.record_cheat("spine_4_joint")
    assert tracker.record_cheat("hips_joint")
    assert tracker.events == [CheatDetected("spine_4_joint"), CheatDetected("hips_joint")]
    assert tracker.first_cheat_joint == "spine_4_joint"


def test_break_continuity_skips_gap_jitter():
    tracker = SessionQualityTracker()
    tracker.record_frame(Zone.TARGET, 90.0, 90.0)
    tracker.break_continuity()
    tracker.record_frame(Zone.TARGET, 150.0, 150.0)
    assert tracker.metrics.jitter_accumulated == 0.0


def test_reset_clears_everything():
    tracker = SessionQualityTracker()
    tracker.record_frame(Zone.TARGET, 90.0, 90.0)
    tracker.record_cheat("hips_joint")
    tracker.reset()
    assert tracker.metrics.total_frames == 0
    assert tracker.events == []
    assert tracker.record_cheat("hips_joint")
