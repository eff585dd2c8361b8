"""Shared fixtures for the engine and API tests."""

import math

import pytest

from physiopoint.config import Settings
from physiopoint.engine.angle_math import JointTriple, Position


SEGMENT_LENGTH = 0.4  # metres, roughly a thigh


def triple_at(angle_degrees: float, length: float = SEGMENT_LENGTH) -> JointTriple:
    """Joint triple whose angle at the middle joint is `angle_degrees`."""
    theta = math.radians(angle_degrees)
    return JointTriple(
        proximal=Position(0.0, length, 0.0),
        middle=Position(0.0, 0.0, 0.0),
        distal=Position(length * math.sin(theta), length * math.cos(theta), 0.0)
    )


def invalid_triple() -> JointTriple:
    return JointTriple(
        proximal=Position(float("nan"), 0.0, 0.0),
        middle=Position(0.0, 0.0, 0.0),
        distal=Position(0.0, 0.3, 0.0)
    )


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def make_triple():
    return triple_at
