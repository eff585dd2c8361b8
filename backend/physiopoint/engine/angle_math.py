"""
Joint angle geometry.

Every exercise is measured as the bend angle at the middle of a joint
triple (proximal -> middle -> distal):

    (hip, knee, ankle)          knee flexion/extension
    (shoulder, elbow, wrist)    elbow flexion/extension
    (pelvis, shoulder, arm)     shoulder flexion
    (spine, hip, thigh)         hip flexion

180° means the limb is fully extended (the three points are colinear with
the middle joint between the outer two). 0° means the two segments are
folded onto each other.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class Position:
    """One tracked landmark at one instant (world coordinates, metres)."""
    x: float
    y: float
    z: float

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def distance_to(self, other: "Position") -> float:
        return float(np.linalg.norm(self.to_array() - other.to_array()))

    @classmethod
    def from_sequence(cls, values) -> "Position":
        x, y, z = values
        return cls(float(x), float(y), float(z))


@dataclass(frozen=True)
class JointTriple:
    """Three landmarks defining one angle measurement at `middle`."""
    proximal: Position
    middle: Position
    distal: Position

    @property
    def positions(self) -> Tuple[Position, Position, Position]:
        return (self.proximal, self.middle, self.distal)

    @property
    def segment_length(self) -> float:
        """Length of the proximal -> middle segment."""
        return self.proximal.distance_to(self.middle)


def compute_joint_angle(proximal: Position, middle: Position, distal: Position) -> float:
    """
    Calculate the angle at `middle` formed by proximal-middle-distal.

    Args:
        proximal: Landmark on the body side of the joint (e.g. hip)
        middle: Joint vertex (e.g. knee)
        distal: Landmark on the far side of the joint (e.g. ankle)

    Returns:
        Angle in degrees in [0, 180]. Returns 0.0 when either segment has
        zero length (duplicate points); this is a defined fallback, not an
        error signal.
    """
    a = proximal.to_array() - middle.to_array()
    b = distal.to_array() - middle.to_array()

    len_a = np.linalg.norm(a)
    len_b = np.linalg.norm(b)

    if len_a == 0 or len_b == 0:
        return 0.0

    cos_angle = np.dot(a, b) / (len_a * len_b)
    cos_angle = np.clip(cos_angle, -1.0, 1.0)  # Rounding can push |cos| past 1

    return float(np.degrees(np.arccos(cos_angle)))


def triple_angle(triple: JointTriple) -> float:
    """Angle at the middle joint of a JointTriple."""
    return compute_joint_angle(triple.proximal, triple.middle, triple.distal)
