import math

import pytest

from physiopoint.engine.angle_math import (
    JointTriple, Position, compute_joint_angle, triple_angle
)


ORIGIN = Position(0.0, 0.0, 0.0)


def test_right_angle():
    assert compute_joint_angle(Position(0, 1, 0), ORIGIN, Position(1, 0, 0)) == pytest.approx(90.0)


def test_straight_line_is_180():
    assert compute_joint_angle(Position(0, 1, 0), ORIGIN, Position(0, -1, 0)) == pytest.approx(180.0)


def test_folded_onto_itself_is_zero():
    p = Position(0.3, 0.2, -0.1)
    angle = compute_joint_angle(p, ORIGIN, p)
    assert angle == pytest.approx(0.0, abs=1e-6)
    assert not math.isnan(angle)


def test_zero_length_segment_falls_back_to_zero():
    assert compute_joint_angle(ORIGIN, ORIGIN, Position(1, 0, 0)) == 0.0
    assert compute_joint_angle(Position(1, 0, 0), ORIGIN, ORIGIN) == 0.0


@pytest.mark.parametrize("proximal,middle,distal", [
    (Position(0.1, 0.9, 0.0), Position(0.0, 0.5, 0.0), Position(0.4, 0.1, 0.2)),
    (Position(-1.0, 2.0, 0.5), Position(0.2, 0.1, 0.0), Position(3.0, -1.0, 1.0)),
])
def test_outer_points_are_order_independent(proximal, middle, distal):
    forward = compute_joint_angle(proximal, middle, distal)
    backward = compute_joint_angle(distal, middle, proximal)
    assert forward == pytest.approx(backward)


def test_nearly_colinear_points_never_produce_nan():
    angle = compute_joint_angle(
        Position(0.0, 1e6, 0.0), ORIGIN, Position(1e-9, -1e6, 0.0)
    )
    assert angle == pytest.approx(180.0)


def test_triple_angle(make_triple):
    triple = make_triple(120.0)
    assert triple_angle(triple) == pytest.approx(120.0)
    assert triple_angle(triple) == compute_joint_angle(triple.proximal, triple.middle, triple.distal)


def test_segment_length():
    triple = JointTriple(Position(0, 0.5, 0), ORIGIN, Position(1, 0, 0))
    assert triple.segment_length == pytest.approx(0.5)


def test_position_from_sequence():
    assert Position.from_sequence([1, 2, 3]) == Position(1.0, 2.0, 3.0)
