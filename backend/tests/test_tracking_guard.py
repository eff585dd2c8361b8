import pytest

from physiopoint.engine.angle_math import JointTriple, Position
from physiopoint.engine.tracking_guard import REPOSITION_HINT, TrackingGuard, TrackingStatus

from conftest import invalid_triple, triple_at


def test_valid_triple_passes():
    guard = TrackingGuard()
    decision = guard.check(triple_at(120))
    assert decision.status == TrackingStatus.OK
    assert decision.is_tracking_good
    assert decision.hint == ""


@pytest.mark.parametrize("triple", [
    None,
    invalid_triple(),
    JointTriple(Position(0, 0.01, 0), Position(0, 0, 0), Position(0.3, 0, 0)),
    JointTriple(Position(0, 0.4, 0), Position(0, 0, 0), Position(float("inf"), 0, 0)),
])
def test_invalid_triples_rejected(triple):
    assert not TrackingGuard().validate(triple)


def test_four_bad_frames_do_not_freeze():
    guard = TrackingGuard(max_invalid_frames=5)
    for _ in range(4):
        decision = guard.check(None)
        assert decision.status == TrackingStatus.DEGRADED
        assert decision.is_tracking_good

    decision = guard.check(triple_at(90))
    assert decision.status == TrackingStatus.OK
    assert not decision.recovered
    assert guard.invalid_streak == 0


def test_five_bad_frames_freeze_and_recover_immediately():
    guard = TrackingGuard(max_invalid_frames=5)
    for _ in range(4):
        guard.check(invalid_triple())

    decision = guard.check(invalid_triple())
    assert decision.status == TrackingStatus.FROZEN
    assert not decision.is_tracking_good
    assert decision.hint == REPOSITION_HINT
    assert guard.is_frozen

    decision = guard.check(triple_at(90))
    assert decision.status == TrackingStatus.OK
    assert decision.recovered
    assert not guard.is_frozen
