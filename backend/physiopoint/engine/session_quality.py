"""
Session quality accumulation.

Running counters fed once per validated frame:
- total_frames / frames_in_good_form -> quality score (time in target)
- accumulated |Δ raw angle|          -> control rating (smoothness)
- best smoothed angle                -> range reached (largest angle, so
                                        it measures extension, not flexion)
- continuous in-target streaks       -> GoodFormHeld events

Secondary-joint compensation is recorded here too (CheatDetected), at most
once per distinct joint per session.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set, Union, Dict, Any
import logging

from physiopoint.engine.zone_classifier import Zone

logger = logging.getLogger(__name__)


# =============================================================================
# Session events
# =============================================================================

@dataclass(frozen=True)
class GoodFormHeld:
    """User stayed in the target zone continuously for `seconds`."""
    seconds: float

    kind = "good_form_held"


@dataclass(frozen=True)
class CheatDetected:
    """A watched secondary joint moved beyond its allowed deviation."""
    joint_name: str

    kind = "cheat_detected"


SessionEvent = Union[GoodFormHeld, CheatDetected]


def event_to_dict(event: SessionEvent) -> Dict[str, Any]:
    if isinstance(event, GoodFormHeld):
        return {"kind": event.kind, "seconds": round(event.seconds, 2)}
    return {"kind": event.kind, "joint_name": event.joint_name}


# =============================================================================
# Metrics
# =============================================================================

CONTROL_LABELS = [
    (0.8, "Excellent"),
    (0.6, "Good"),
    (0.4, "Fair"),
]
CONTROL_LABEL_FLOOR = "Keep practicing"


def control_label_for(rating: float) -> str:
    """Human-readable label; thresholds are inclusive."""
    for threshold, label in CONTROL_LABELS:
        if rating >= threshold:
            return label
    return CONTROL_LABEL_FLOOR


@dataclass
class SessionMetrics:
    """Counters accumulated strictly within one session."""
    total_frames: int = 0
    frames_in_good_form: int = 0
    jitter_accumulated: float = 0.0
    good_form_seconds: float = 0.0
    best_angle: float = 0.0

    jitter_reference: float = field(default=15.0, repr=False)

    @property
    def quality_score(self) -> float:
        """Fraction of frames spent in the target zone (0-1)."""
        if self.total_frames <= 0:
            return 0.0
        return min(1.0, max(0.0, self.frames_in_good_form / self.total_frames))

    @property
    def control_rating(self) -> float:
        """Smoothness 0-1; higher means less frame-to-frame jitter."""
        if self.total_frames <= 1:
            return 1.0
        avg_jitter = self.jitter_accumulated / (self.total_frames - 1)
        return max(0.0, min(1.0, 1.0 - avg_jitter / self.jitter_reference))

    @property
    def control_label(self) -> str:
        return control_label_for(self.control_rating)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_frames": self.total_frames,
            "frames_in_good_form": self.frames_in_good_form,
            "jitter_accumulated": round(self.jitter_accumulated, 3),
            "good_form_seconds": round(self.good_form_seconds, 2),
            "best_angle": round(self.best_angle, 1),
            "quality_score": round(self.quality_score, 3),
            "control_rating": round(self.control_rating, 3),
            "control_label": self.control_label,
        }


# =============================================================================
# Tracker
# =============================================================================

class SessionQualityTracker:
    """
    Per-frame accumulator for one session.

    Args:
        frame_rate: Frame cadence, converts frame counts to seconds
        good_form_streak_seconds: Continuous in-target time that earns a
            GoodFormHeld event (once per streak)
        jitter_reference: Average per-frame jitter that maps to control 0
    """

    def __init__(
        self,
        frame_rate: float = 30.0,
        good_form_streak_seconds: float = 2.0,
        jitter_reference: float = 15.0
    ):
        self.frame_rate = frame_rate
        self.good_form_streak_seconds = good_form_streak_seconds
        self.jitter_reference = jitter_reference

        self.metrics = SessionMetrics(jitter_reference=jitter_reference)
        self.events: List[SessionEvent] = []

        self._streak_frames = 0
        self._streak_reported = False
        self._cheat_joints: Set[str] = set()
        self._last_raw_angle: Optional[float] = None

    def record_frame(self, zone: Zone, raw_angle: float, smoothed_angle: float):
        """Accumulate one validated frame."""
        m = self.metrics
        m.total_frames += 1

        if zone == Zone.TARGET:
            m.frames_in_good_form += 1
            self._streak_frames += 1

            streak = self._streak_frames / self.frame_rate
            if streak >= self.good_form_streak_seconds and not self._streak_reported:
                self._streak_reported = True
                self.events.append(GoodFormHeld(seconds=streak))
                logger.info(f"Good form held for {streak:.1f}s")
        else:
            self.break_streak()

        if self._last_raw_angle is not None:
            m.jitter_accumulated += abs(raw_angle - self._last_raw_angle)
        self._last_raw_angle = raw_angle

        if smoothed_angle > m.best_angle:
            m.best_angle = smoothed_angle

        m.good_form_seconds = m.frames_in_good_form / self.frame_rate

    def record_cheat(self, joint_name: str) -> bool:
        """
        Record a compensation event.

        Returns:
            True if this joint had not been reported before in this session
        """
        if joint_name in self._cheat_joints:
            return False
        self._cheat_joints.add(joint_name)
        self.events.append(CheatDetected(joint_name=joint_name))
        logger.info(f"Compensation detected at {joint_name}")
        return True

    def break_streak(self):
        self._streak_frames = 0
        self._streak_reported = False

    def break_continuity(self):
        """Forget the previous raw angle so a tracking gap adds no jitter."""
        self._last_raw_angle = None
        self.break_streak()

    @property
    def first_cheat_joint(self) -> Optional[str]:
        for event in self.events:
            if isinstance(event, CheatDetected):
                return event.joint_name
        return None

    @property
    def held_good_form(self) -> bool:
        return any(isinstance(e, GoodFormHeld) for e in self.events)

    def reset(self):
        self.metrics = SessionMetrics(jitter_reference=self.jitter_reference)
        self.events = []
        self._streak_frames = 0
        self._streak_reported = False
        self._cheat_joints = set()
        self._last_raw_angle = None
