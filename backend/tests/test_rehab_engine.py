import pytest

from physiopoint.engine.angle_math import JointTriple, Position
from physiopoint.engine.catalog import UnknownExerciseError
from physiopoint.engine.rehab_engine import (
    MSG_ALMOST, MSG_BODY_LOST, MSG_CLOSER, MSG_FURTHER, MSG_HOLD_DONE, MSG_IN_RANGE,
    MSG_OVERSHOOT, RehabEngine, create_rehab_engine
)
from physiopoint.engine.rep_counter import RepDirection, RepState
from physiopoint.engine.session_quality import CheatDetected
from physiopoint.engine.tracking_config import BodyArea, FormCue, TrackingConfig
from physiopoint.engine.tracking_guard import REPOSITION_HINT
from physiopoint.engine.zone_classifier import TargetRange, Zone

from conftest import invalid_triple, triple_at


SPINE_CUE = FormCue("Torso stays upright", watched_joint="spine_4_joint", max_deviation=8.0)
BELOW_CUE = FormCue("Keep straightening", zone=Zone.BELOW_TARGET)
TARGET_CUE = FormCue("Hold it there", zone=Zone.TARGET)

KNEE_CONFIG = TrackingConfig(
    proximal_joint="right_upLeg_joint",
    middle_joint="right_leg_joint",
    distal_joint="right_foot_joint",
    target_range=TargetRange(150, 180),
    hold_seconds=1.0,
    rep_direction=RepDirection.INCREASING,
    rest_angle=90,
    form_cues=(SPINE_CUE, BELOW_CUE, TARGET_CUE),
    body_area=BodyArea.KNEE
)


@pytest.fixture
def engine():
    return RehabEngine(KNEE_CONFIG, "Seated Knee Extension", frame_rate=10)


def feed(engine, angle, frames=1, skeleton=None):
    snapshot = None
    for _ in range(frames):
        snapshot = engine.process_frame(triple_at(angle), skeleton)
    return snapshot


def test_no_angle_before_first_valid_frame(engine):
    snapshot = engine.process_frame(None)
    assert snapshot.angle_state is None
    assert engine.snapshot.angle_state is None
    assert engine.metrics.total_frames == 0


def test_full_repetition(engine):
    feed(engine, 90, frames=5)
    snapshot = feed(engine, 170, frames=20)
    assert snapshot.angle_state.zone == Zone.TARGET
    assert snapshot.rep_state.reps_completed == 0
    assert snapshot.live_message == MSG_HOLD_DONE

    snapshot = feed(engine, 90, frames=10)
    assert snapshot.rep_state.reps_completed == 1
    assert snapshot.angle_state.degrees == pytest.approx(90)
    assert engine.metrics.total_frames == 35


def test_four_invalid_frames_hold_last_state_silently(engine):
    last = feed(engine, 120, frames=3).angle_state
    for _ in range(4):
        snapshot = engine.process_frame(invalid_triple())
        assert snapshot.angle_state is last
        assert snapshot.is_tracking_good

    snapshot = feed(engine, 120)
    assert snapshot.is_tracking_good
    assert snapshot.invalid_streak == 0


def test_freeze_reports_exact_last_state(engine):
    last = feed(engine, 120, frames=3).angle_state
    for _ in range(5):
        snapshot = engine.process_frame(invalid_triple())

    assert snapshot.angle_state == last
    assert not snapshot.is_tracking_good
    assert snapshot.tracking_hint == REPOSITION_HINT
    assert snapshot.live_message == REPOSITION_HINT
    assert engine.metrics.total_frames == 3


def test_recovery_restarts_smoothing(engine):
    feed(engine, 100, frames=5)
    for _ in range(5):
        engine.process_frame(None)
    snapshot = feed(engine, 160)
    assert snapshot.is_tracking_good
    assert snapshot.angle_state.degrees == pytest.approx(160)
    # No jitter is accumulated across the gap
    assert engine.metrics.jitter_accumulated == pytest.approx(0.0, abs=1e-6)


def test_degenerate_sample_never_reports_zero(engine):
    feed(engine, 120, frames=2)
    collapsed = JointTriple(Position(0, 0, 0), Position(0, 0, 0), Position(0.3, 0, 0))
    snapshot = engine.process_frame(collapsed)
    assert snapshot.angle_state.degrees == pytest.approx(120)


def test_compensation_cue_and_single_cheat_event(engine):
    upright = {"spine_4_joint": Position(0.0, 1.0, 0.0)}
    leaning = {"spine_4_joint": Position(0.12, 1.0, 0.0)}

    snapshot = feed(engine, 100, skeleton=upright)
    assert snapshot.cue_text == "Keep straightening"

    snapshot = feed(engine, 100, frames=3, skeleton=leaning)
    assert snapshot.cue_text == "Torso stays upright"
    assert engine.events == [CheatDetected("spine_4_joint")]


def test_cue_changes_are_gated(engine):
    assert feed(engine, 100).cue_changed
    assert not feed(engine, 100).cue_changed
    assert engine.snapshot.cue_text == "Keep straightening"


def test_live_message_tiers(engine):
    idle = RepState()
    assert engine.live_message(90, Zone.BELOW_TARGET, idle) == MSG_FURTHER
    assert engine.live_message(140, Zone.BELOW_TARGET, idle) == MSG_CLOSER
    assert engine.live_message(147, Zone.BELOW_TARGET, idle) == MSG_ALMOST
    assert engine.live_message(165, Zone.TARGET, idle) == MSG_IN_RANGE
    assert engine.live_message(165, Zone.TARGET, RepState(hold_complete=True)) == MSG_HOLD_DONE
    assert engine.live_message(190, Zone.ABOVE_TARGET, idle) == MSG_OVERSHOOT


def test_live_message_for_decreasing_exercise():
    engine = create_rehab_engine("Heel Slides")
    idle = RepState()
    assert engine.live_message(170, Zone.ABOVE_TARGET, idle) == MSG_FURTHER
    assert engine.live_message(123, Zone.ABOVE_TARGET, idle) == MSG_ALMOST
    assert engine.live_message(50, Zone.BELOW_TARGET, idle) == MSG_OVERSHOOT


def test_body_lost_resets_smoother(engine):
    feed(engine, 100, frames=5)
    assert engine.body_lost().live_message == MSG_BODY_LOST
    assert feed(engine, 140).angle_state.degrees == pytest.approx(140)


def test_reset_clears_session(engine):
    feed(engine, 90, frames=5)
    feed(engine, 170, frames=20)
    feed(engine, 90, frames=10)
    engine.reset()

    assert engine.snapshot.angle_state is None
    assert engine.snapshot.rep_state.reps_completed == 0
    assert engine.metrics.total_frames == 0
    assert engine.events == []


def test_session_feedback(engine):
    feed(engine, 90, frames=5)
    feed(engine, 178, frames=40)
    result = engine.generate_feedback()
    assert "knee" in result.journey_message
    assert "held good form" in result.positive_observation


def test_factory_applies_settings(settings):
    engine = create_rehab_engine("Heel Slides", settings=settings)
    assert engine.hold_seconds == settings.default_hold_seconds
    assert engine.frame_rate == settings.frame_rate
    assert engine.exercise_name == "Heel Slides"

    balance = create_rehab_engine("Single Leg Balance", settings=settings)
    assert balance.hold_seconds == 15


@pytest.mark.parametrize("exercise", ["Elbow Flexion & Extension", "Active Elbow Flexion"])
def test_curl_cycles_each_count_one_rep(settings, exercise):
    # Rest at 170° sits at or near the top of the elbow target range
    engine = create_rehab_engine(exercise, settings=settings)
    for _ in range(10):
        feed(engine, 170, frames=30)
        feed(engine, 40, frames=90)
        snapshot = feed(engine, 170, frames=30)
    assert snapshot.rep_state.reps_completed == 10


def test_curl_too_short_to_hold_is_not_counted(settings):
    engine = create_rehab_engine("Elbow Flexion & Extension", settings=settings)
    for _ in range(3):
        feed(engine, 170, frames=30)
        feed(engine, 40, frames=30)
    snapshot = feed(engine, 170, frames=30)
    assert snapshot.rep_state.reps_completed == 0


def test_factory_mirrors_side(settings):
    engine = create_rehab_engine("Active Elbow Flexion", side="left", settings=settings)
    assert engine.config.middle_joint == "left_forearm_joint"


def test_factory_accepts_custom_config(settings):
    engine = create_rehab_engine(KNEE_CONFIG, exercise_name="Custom Knee", settings=settings)
    assert engine.exercise_name == "Custom Knee"


def test_factory_rejects_timer_only_and_unknown(settings):
    with pytest.raises(ValueError):
        create_rehab_engine("Towel Squeeze", settings=settings)
    with pytest.raises(UnknownExerciseError):
        create_rehab_engine("Cartwheels", settings=settings)
