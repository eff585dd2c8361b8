"""
Per-exercise tracking configuration.

A TrackingConfig tells the engine which three skeleton joints form the
measured angle, what the target range is, which way the angle travels
during the active phase, where the limb rests, and which form cues to
watch. Exercises whose motion cannot be captured by a 3-point angle (grip
force, axial rotation, toe movements) have no TrackingConfig at all and run
in timer-only mode.

Joint names follow the body-tracking skeleton naming with a side prefix
(e.g. "right_leg_joint"); `for_side()` mirrors them for the other side.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from physiopoint.engine.rep_counter import RepDirection
from physiopoint.engine.zone_classifier import TargetRange, Zone


class TrackingMode(Enum):
    """How the angle measurement is interpreted for an exercise."""
    ANGLE_BASED = "angle_based"                    # Count reps when held in zone
    HOLD_DURATION = "hold_duration"                # Isometric hold for N seconds
    RANGE_OF_MOTION = "range_of_motion"            # Track range through an arc
    REPETITION_COUNTING = "repetition_counting"    # Full bend/extend cycles


class CameraPosition(Enum):
    SIDE = "side"    # Sagittal plane movements (knee, elbow, shoulder)
    FRONT = "front"  # Frontal plane movements (balance)


class TrackingReliability(Enum):
    RELIABLE = "reliable"  # ~3-8° error on device
    MARGINAL = "marginal"  # ~10-20° error, wider tolerance


class BodyArea(Enum):
    KNEE = "knee"
    ELBOW = "elbow"
    SHOULDER = "shoulder"
    HIP = "hip"
    ANKLE = "ankle"


@dataclass(frozen=True)
class FormCue:
    """
    A good-form check shown during the exercise.

    Attributes:
        description: Text shown to the user
        watched_joint: Secondary joint to monitor for compensation
        max_deviation: Allowed displacement of the watched joint (cm)
        zone: Zone in which this cue applies
    """
    description: str
    watched_joint: Optional[str] = None
    max_deviation: Optional[float] = None
    zone: Optional[Zone] = None

    @property
    def is_compensation_check(self) -> bool:
        return self.watched_joint is not None and self.max_deviation is not None

    @property
    def is_fallback(self) -> bool:
        return self.watched_joint is None and self.zone is None


def mirror_joint_name(name: Optional[str], side: str) -> Optional[str]:
    """Swap the side prefix of a joint name ("right_arm_joint" -> "left_arm_joint")."""
    if name is None:
        return None
    other = "left" if side == "right" else "right"
    prefix = f"{other}_"
    if name.startswith(prefix):
        return f"{side}_{name[len(prefix):]}"
    return name


@dataclass(frozen=True)
class TrackingConfig:
    """Joint triple + targets for one tracked exercise."""
    proximal_joint: str
    middle_joint: str
    distal_joint: str
    target_range: TargetRange
    hold_seconds: float
    rep_direction: RepDirection
    rest_angle: float
    form_cues: Tuple[FormCue, ...] = ()
    mode: TrackingMode = TrackingMode.ANGLE_BASED
    camera_position: CameraPosition = CameraPosition.SIDE
    reliability: TrackingReliability = TrackingReliability.RELIABLE
    body_area: Optional[BodyArea] = None

    @property
    def joints(self) -> Tuple[str, str, str]:
        return (self.proximal_joint, self.middle_joint, self.distal_joint)

    @property
    def camera_hint(self) -> str:
        return f"Best results: place camera to your {self.camera_position.value}"

    @property
    def reliability_badge(self) -> str:
        if self.reliability == TrackingReliability.RELIABLE:
            return "High accuracy tracking"
        return "Approximate tracking - wider tolerance applied"

    def for_side(self, side: str) -> "TrackingConfig":
        """Return a copy with every joint name mirrored to `side`."""
        if side not in ("left", "right"):
            raise ValueError(f"side must be 'left' or 'right', got {side!r}")

        cues = tuple(
            replace(cue, watched_joint=mirror_joint_name(cue.watched_joint, side))
            for cue in self.form_cues
        )
        return replace(
            self,
            proximal_joint=mirror_joint_name(self.proximal_joint, side),
            middle_joint=mirror_joint_name(self.middle_joint, side),
            distal_joint=mirror_joint_name(self.distal_joint, side),
            form_cues=cues
        )
