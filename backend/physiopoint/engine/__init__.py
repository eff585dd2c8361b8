"""
Motion analysis pipeline for rehabilitation exercises.

PIPELINE COMPONENTS:
1. angle_math: Joint angle at the middle of a proximal-middle-distal triple
2. TrackingGuard: Rejects non-finite or collapsed samples, freezes output
3. AngleSmoother: 5-frame moving average
4. ZoneClassifier: Hysteretic below/target/above zone machine
5. RepCounter: Directional, hold-gated repetition state machine
6. CueSelector: Compensation > zone > fallback coaching cue priority
7. SessionQualityTracker: Quality score, control rating, session events
8. generate_feedback: Deterministic end-of-session feedback table
9. RehabEngine: Per-session orchestration of all of the above

Usage:
    from physiopoint.engine import create_rehab_engine

    engine = create_rehab_engine("Heel Slides")
    for triple in triples:
        snapshot = engine.process_frame(triple)
        print(snapshot.live_message)
    print(engine.generate_feedback().journey_message)
"""

from physiopoint.engine.angle_math import (
    Position, JointTriple, compute_joint_angle, triple_angle
)
from physiopoint.engine.angle_smoother import AngleSmoother
from physiopoint.engine.zone_classifier import Zone, AngleState, TargetRange, ZoneClassifier
from physiopoint.engine.rep_counter import (
    RepCounter, RepCycleMode, RepDirection, RepPhase, RepState, cycle_mode_for
)
from physiopoint.engine.tracking_guard import TrackingGuard, TrackingStatus, GuardDecision
from physiopoint.engine.tracking_config import (
    TrackingConfig, TrackingMode, CameraPosition, TrackingReliability, BodyArea, FormCue
)
from physiopoint.engine.form_cues import CueSelector, CueDisplay, CueSelection
from physiopoint.engine.session_quality import (
    SessionQualityTracker, SessionMetrics, SessionEvent, GoodFormHeld, CheatDetected
)
from physiopoint.engine.feedback import SessionFeedback, generate_feedback
from physiopoint.engine.catalog import (
    Exercise, UnknownExerciseError, get_exercise, get_tracking_config,
    list_exercises, is_tracked
)
from physiopoint.engine.rehab_engine import RehabEngine, EngineSnapshot, create_rehab_engine

__all__ = [
    "Position",
    "JointTriple",
    "compute_joint_angle",
    "triple_angle",
    "AngleSmoother",
    "Zone",
    "AngleState",
    "TargetRange",
    "ZoneClassifier",
    "RepCounter",
    "RepCycleMode",
    "RepDirection",
    "RepPhase",
    "RepState",
    "cycle_mode_for",
    "TrackingGuard",
    "TrackingStatus",
    "GuardDecision",
    "TrackingConfig",
    "TrackingMode",
    "CameraPosition",
    "TrackingReliability",
    "BodyArea",
    "FormCue",
    "CueSelector",
    "CueDisplay",
    "CueSelection",
    "SessionQualityTracker",
    "SessionMetrics",
    "SessionEvent",
    "GoodFormHeld",
    "CheatDetected",
    "SessionFeedback",
    "generate_feedback",
    "Exercise",
    "UnknownExerciseError",
    "get_exercise",
    "get_tracking_config",
    "list_exercises",
    "is_tracked",
    "RehabEngine",
    "EngineSnapshot",
    "create_rehab_engine",
]
