"""
Exercise catalog.

The device-validated exercise library and its tracking configurations.
Tracked exercises map to a TrackingConfig; exercises whose movement a
3-joint angle cannot capture (grip force, forearm rotation, small ankle and
toe movements, subtle pelvic tilt) map to None and run in timer-only mode.

Joint triples used:
    KNEE      right_upLeg_joint → right_leg_joint → right_foot_joint
    ELBOW     right_arm_joint → right_forearm_joint → right_hand_joint
    SHOULDER  hips_joint → right_shoulder_1_joint → right_arm_joint
              (pelvis as proximal point gives a ~150° arc; spine_7 is too
              close to the shoulder and only swings ~40°)
    HIP       spine_4_joint → hips_joint → right_upLeg_joint (flexion)
              spine_7_joint → right_upLeg_joint → right_leg_joint (hinge)

Non-isometric exercises use a 2 second hold; HOLD_DURATION exercises use
the exercise's own hold time.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging

from physiopoint.engine.rep_counter import RepDirection
from physiopoint.engine.tracking_config import (
    BodyArea, CameraPosition, FormCue, TrackingConfig, TrackingMode, TrackingReliability
)
from physiopoint.engine.zone_classifier import TargetRange, Zone

logger = logging.getLogger(__name__)


DEFAULT_HOLD_SECONDS = 2.0

KNEE_TRIPLE = ("right_upLeg_joint", "right_leg_joint", "right_foot_joint")
ELBOW_TRIPLE = ("right_arm_joint", "right_forearm_joint", "right_hand_joint")
SHOULDER_TRIPLE = ("hips_joint", "right_shoulder_1_joint", "right_arm_joint")
HIP_FLEXION_TRIPLE = ("spine_4_joint", "hips_joint", "right_upLeg_joint")
HIP_HINGE_TRIPLE = ("spine_7_joint", "right_upLeg_joint", "right_leg_joint")


class UnknownExerciseError(KeyError):
    """Raised when an exercise name is not in the catalog."""


@dataclass(frozen=True)
class Exercise:
    """One catalog entry."""
    name: str
    body_area: BodyArea
    description: str
    hold_seconds: int
    reps: int
    tracking_config: Optional[TrackingConfig] = None

    @property
    def is_tracked(self) -> bool:
        return self.tracking_config is not None


def _tracked(
    name: str,
    body_area: BodyArea,
    description: str,
    joints: Tuple[str, str, str],
    target: Tuple[float, float],
    hold_seconds: int,
    reps: int,
    mode: TrackingMode,
    direction: RepDirection,
    rest_angle: float,
    cues: Tuple[FormCue, ...],
    camera: CameraPosition = CameraPosition.SIDE,
    reliability: TrackingReliability = TrackingReliability.RELIABLE,
) -> Exercise:
    hold = float(hold_seconds) if mode == TrackingMode.HOLD_DURATION else DEFAULT_HOLD_SECONDS
    config = TrackingConfig(
        proximal_joint=joints[0],
        middle_joint=joints[1],
        distal_joint=joints[2],
        target_range=TargetRange(*target),
        hold_seconds=hold,
        rep_direction=direction,
        rest_angle=rest_angle,
        form_cues=cues,
        mode=mode,
        camera_position=camera,
        reliability=reliability,
        body_area=body_area,
    )
    return Exercise(
        name=name,
        body_area=body_area,
        description=description,
        hold_seconds=hold_seconds,
        reps=reps,
        tracking_config=config,
    )


def _timer_only(name: str, body_area: BodyArea, description: str, hold_seconds: int, reps: int) -> Exercise:
    return Exercise(
        name=name,
        body_area=body_area,
        description=description,
        hold_seconds=hold_seconds,
        reps=reps,
    )


_EXERCISES: List[Exercise] = [
    # ── KNEE ──────────────────────────────────────────────
    _tracked(
        "Seated Knee Extension", BodyArea.KNEE,
        "Straighten your knee fully while seated.",
        KNEE_TRIPLE, (150, 180), hold_seconds=3, reps=12,
        mode=TrackingMode.ANGLE_BASED, direction=RepDirection.INCREASING, rest_angle=90,
        cues=(
            FormCue("Torso stays upright - don't lean back", watched_joint="spine_4_joint", max_deviation=8.0),
            FormCue("Keep straightening - push the heel forward", zone=Zone.BELOW_TARGET),
            FormCue("Hold it there, thigh stays on the chair", zone=Zone.TARGET),
        ),
    ),
    _tracked(
        "Straight Leg Raises", BodyArea.KNEE,
        "Lift your leg with knee locked straight.",
        KNEE_TRIPLE, (160, 180), hold_seconds=3, reps=10,
        mode=TrackingMode.ANGLE_BASED, direction=RepDirection.INCREASING, rest_angle=170,
        cues=(
            FormCue("Keep knee locked straight during lift", watched_joint="hips_joint", max_deviation=6.0),
            FormCue("Lock the knee before lifting", zone=Zone.BELOW_TARGET),
        ),
    ),
    _tracked(
        "Heel Slides", BodyArea.KNEE,
        "Slide your heel toward your buttock to bend the knee.",
        KNEE_TRIPLE, (60, 120), hold_seconds=2, reps=10,
        mode=TrackingMode.RANGE_OF_MOTION, direction=RepDirection.DECREASING, rest_angle=170,
        cues=(
            FormCue("Back stays flat on the surface", watched_joint="hips_joint", max_deviation=6.0),
            FormCue("Slide the heel a little closer", zone=Zone.ABOVE_TARGET),
        ),
    ),
    _tracked(
        "Terminal Knee Extension", BodyArea.KNEE,
        "From a slight bend, push to full knee extension.",
        KNEE_TRIPLE, (155, 180), hold_seconds=3, reps=12,
        mode=TrackingMode.ANGLE_BASED, direction=RepDirection.INCREASING, rest_angle=150,
        cues=(
            FormCue("Knee tracks over second toe", watched_joint="hips_joint", max_deviation=8.0),
            FormCue("Squeeze the thigh to finish the extension", zone=Zone.BELOW_TARGET),
        ),
    ),
    _tracked(
        "Seated Knee Flexion", BodyArea.KNEE,
        "Bend the knee while seated by sliding the foot back.",
        KNEE_TRIPLE, (70, 120), hold_seconds=2, reps=10,
        mode=TrackingMode.RANGE_OF_MOTION, direction=RepDirection.DECREASING, rest_angle=170,
        cues=(
            FormCue("Torso stays upright", watched_joint="spine_4_joint", max_deviation=8.0),
            FormCue("Slide the foot further back under the chair", zone=Zone.ABOVE_TARGET),
        ),
    ),
    _tracked(
        "Single Leg Balance", BodyArea.KNEE,
        "Stand on one leg with the knee straight for balance.",
        KNEE_TRIPLE, (155, 180), hold_seconds=15, reps=3,
        mode=TrackingMode.HOLD_DURATION, direction=RepDirection.INCREASING, rest_angle=170,
        cues=(
            FormCue("Stand tall - opposite foot off ground", watched_joint="hips_joint", max_deviation=10.0),
        ),
        camera=CameraPosition.FRONT,
    ),

    # ── ELBOW ─────────────────────────────────────────────
    _tracked(
        "Elbow Flexion & Extension", BodyArea.ELBOW,
        "Slowly bend and straighten your elbow through full range of motion.",
        ELBOW_TRIPLE, (30, 170), hold_seconds=3, reps=10,
        mode=TrackingMode.REPETITION_COUNTING, direction=RepDirection.DECREASING, rest_angle=170,
        cues=(
            FormCue("Shoulder stays still - only elbow moves", watched_joint="right_shoulder_1_joint", max_deviation=5.0),
            FormCue("Curl a little further", zone=Zone.ABOVE_TARGET),
        ),
    ),
    _tracked(
        "Active Elbow Flexion", BodyArea.ELBOW,
        "Actively curl the forearm upward against gravity.",
        ELBOW_TRIPLE, (30, 160), hold_seconds=2, reps=12,
        mode=TrackingMode.REPETITION_COUNTING, direction=RepDirection.DECREASING, rest_angle=170,
        cues=(
            FormCue("Upper arm stays at your side", watched_joint="right_shoulder_1_joint", max_deviation=5.0),
            FormCue("Bring the hand toward the shoulder", zone=Zone.ABOVE_TARGET),
        ),
    ),
    _tracked(
        "Elbow Extension Stretch", BodyArea.ELBOW,
        "Hold the arm straight to stretch into full extension.",
        ELBOW_TRIPLE, (150, 180), hold_seconds=10, reps=5,
        mode=TrackingMode.HOLD_DURATION, direction=RepDirection.INCREASING, rest_angle=90,
        cues=(
            FormCue("Shoulder stays still - gentle pressure only", watched_joint="right_shoulder_1_joint", max_deviation=5.0),
            FormCue("Let the arm straighten gently", zone=Zone.BELOW_TARGET),
        ),
    ),

    # ── SHOULDER ──────────────────────────────────────────
    _tracked(
        "Wall Slides", BodyArea.SHOULDER,
        "Slide arms up a wall to improve overhead range of motion.",
        SHOULDER_TRIPLE, (130, 175), hold_seconds=3, reps=10,
        mode=TrackingMode.RANGE_OF_MOTION, direction=RepDirection.INCREASING, rest_angle=25,
        cues=(
            FormCue("Back stays flat against wall", watched_joint="spine_4_joint", max_deviation=6.0),
            FormCue("Slide a little higher", zone=Zone.BELOW_TARGET),
        ),
    ),
    _tracked(
        "Supine Shoulder Flexion", BodyArea.SHOULDER,
        "Lying on your back, raise the arm overhead.",
        SHOULDER_TRIPLE, (130, 175), hold_seconds=3, reps=10,
        mode=TrackingMode.RANGE_OF_MOTION, direction=RepDirection.INCREASING, rest_angle=25,
        cues=(
            FormCue("Back stays flat - no arching", watched_joint="spine_4_joint", max_deviation=6.0),
            FormCue("Reach further overhead", zone=Zone.BELOW_TARGET),
        ),
    ),
    _tracked(
        "Standing Shoulder Flexion", BodyArea.SHOULDER,
        "Standing upright, raise the arm forward and overhead.",
        SHOULDER_TRIPLE, (130, 175), hold_seconds=3, reps=10,
        mode=TrackingMode.RANGE_OF_MOTION, direction=RepDirection.INCREASING, rest_angle=25,
        cues=(
            FormCue("Torso stays upright - no leaning back", watched_joint="spine_4_joint", max_deviation=8.0),
            FormCue("Raise the arm a little higher", zone=Zone.BELOW_TARGET),
        ),
    ),

    # ── HIP ───────────────────────────────────────────────
    _tracked(
        "Standing Hip Flexion", BodyArea.HIP,
        "Standing, lift the knee toward the chest.",
        HIP_FLEXION_TRIPLE, (80, 140), hold_seconds=3, reps=10,
        mode=TrackingMode.ANGLE_BASED, direction=RepDirection.DECREASING, rest_angle=170,
        cues=(
            FormCue("Stand tall - no backward lean", watched_joint="spine_7_joint", max_deviation=8.0),
            FormCue("Lift the knee a little higher", zone=Zone.ABOVE_TARGET),
        ),
    ),
    _tracked(
        "Hip Hinge", BodyArea.HIP,
        "Bend forward at the hips keeping the spine neutral.",
        HIP_HINGE_TRIPLE, (100, 150), hold_seconds=3, reps=10,
        mode=TrackingMode.ANGLE_BASED, direction=RepDirection.DECREASING, rest_angle=175,
        cues=(
            FormCue("Spine stays neutral - no rounding", watched_joint="spine_4_joint", max_deviation=8.0),
            FormCue("Push the hips back further", zone=Zone.ABOVE_TARGET),
        ),
        # Root joint drifts during the forward bend
        reliability=TrackingReliability.MARGINAL,
    ),

    # ── Timer-only ────────────────────────────────────────
    _timer_only("Towel Squeeze", BodyArea.ELBOW, "Squeeze a rolled towel to build grip strength.", 5, 10),
    _timer_only("Forearm Rotation", BodyArea.ELBOW, "Turn the palm up and down with the elbow at your side.", 2, 10),
    _timer_only("Pelvic Tilt", BodyArea.HIP, "Flatten the lower back against the floor by tilting the pelvis.", 5, 10),
    _timer_only("Ankle Pumps", BodyArea.ANKLE, "Point and flex the foot to move the ankle.", 2, 15),
    _timer_only("Ankle Circles", BodyArea.ANKLE, "Trace slow circles with the foot.", 2, 10),
]

EXERCISE_CATALOG: Dict[str, Exercise] = {exercise.name: exercise for exercise in _EXERCISES}


def get_exercise(name: str) -> Exercise:
    """Look up an exercise by display name."""
    try:
        return EXERCISE_CATALOG[name]
    except KeyError:
        logger.warning(f"Unknown exercise requested: {name!r}")
        raise UnknownExerciseError(name) from None


def get_tracking_config(name: str) -> Optional[TrackingConfig]:
    """TrackingConfig for an exercise, or None for timer-only exercises."""
    return get_exercise(name).tracking_config


def is_tracked(name: str) -> bool:
    return get_exercise(name).is_tracked


def list_exercises(body_area: Optional[BodyArea] = None) -> List[Exercise]:
    """All exercises in catalog order, optionally filtered by body area."""
    if body_area is None:
        return list(_EXERCISES)
    return [e for e in _EXERCISES if e.body_area == body_area]
