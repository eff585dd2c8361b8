"""
Rehab Engine - per-session orchestration of the analysis pipeline.

One RehabEngine owns all session-scoped state for one exercise. Each frame
flows through:

    TrackingGuard ─► angle ─► AngleSmoother ─► ZoneClassifier ─► RepCounter
                                                     │
                                                     └─► CueSelector ─► SessionQualityTracker

Invalid frames stop at the guard and the previous AngleState is reported
unchanged. At session end `generate_feedback()` turns the accumulated
metrics and events into the three feedback texts.

Usage:
    engine = create_rehab_engine("Seated Knee Extension", side="left")
    for triple, skeleton in frames:
        snapshot = engine.process_frame(triple, skeleton)
        render(snapshot.live_message, snapshot.cue_text)
    feedback = engine.generate_feedback()
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union
import logging

from physiopoint.config import Settings, get_settings
from physiopoint.engine.angle_math import JointTriple, Position, triple_angle
from physiopoint.engine.angle_smoother import AngleSmoother
from physiopoint.engine.catalog import get_tracking_config
from physiopoint.engine.feedback import SessionFeedback, generate_feedback
from physiopoint.engine.form_cues import CueDisplay, CueSelector
from physiopoint.engine.rep_counter import RepCounter, RepDirection, RepState, cycle_mode_for
from physiopoint.engine.session_quality import SessionEvent, SessionMetrics, SessionQualityTracker
from physiopoint.engine.tracking_config import TrackingConfig, TrackingMode
from physiopoint.engine.tracking_guard import TrackingGuard, TrackingStatus
from physiopoint.engine.zone_classifier import AngleState, ZoneClassifier, Zone

logger = logging.getLogger(__name__)


MSG_HOLD_DONE = "Great form! Try to slowly bring it down now"
MSG_IN_RANGE = "In range, hold!"
MSG_ALMOST = "Almost there, just a bit more"
MSG_CLOSER = "Getting closer! Keep going"
MSG_FURTHER = "Slowly extend a little further"
MSG_OVERSHOOT = "Ease back slightly, past the target"
MSG_BODY_LOST = "Move back into frame"


@dataclass(frozen=True)
class EngineSnapshot:
    """Externally visible engine state after one update."""
    angle_state: Optional[AngleState]
    rep_state: RepState
    cue_text: Optional[str] = None
    cue_changed: bool = False
    is_tracking_good: bool = True
    tracking_hint: str = ""
    live_message: str = ""
    frames_processed: int = 0
    invalid_streak: int = 0

    def to_dict(self) -> Dict[str, Any]:
        angle = self.angle_state
        return {
            "angle": round(angle.degrees, 1) if angle is not None else None,
            "zone": angle.zone.value if angle is not None else None,
            "reps_completed": self.rep_state.reps_completed,
            "is_holding": self.rep_state.is_holding,
            "phase": self.rep_state.phase.value,
            "cue_text": self.cue_text,
            "cue_changed": self.cue_changed,
            "is_tracking_good": self.is_tracking_good,
            "tracking_hint": self.tracking_hint,
            "live_message": self.live_message,
            "frames_processed": self.frames_processed,
            "invalid_streak": self.invalid_streak,
        }


class RehabEngine:
    """
    Motion analysis for one exercise session.

    Args:
        config: Tracking configuration of the exercise
        exercise_name: Display name, keys the feedback copy
        hold_seconds: Required hold; defaults to config.hold_seconds
        frame_rate: Frame cadence of the tracking source (Hz)
        smoothing_window: Moving-average window (frames)
        dead_band_ratio: Zone hysteresis as a fraction of the tolerance
        rest_threshold: Degrees from rest that still count as back at rest
        min_segment_length: Guard minimum proximal-middle length (metres)
        max_invalid_frames: Consecutive invalid frames before freezing
        good_form_streak_seconds: Streak length that earns GoodFormHeld
        jitter_reference: Average jitter mapping to control rating 0
        full_range_margin: Degrees below the upper bound counted as full range
        near_miss_gap: Gap separating range coaching from a near-miss nudge
    """

    def __init__(
        self,
        config: TrackingConfig,
        exercise_name: str,
        hold_seconds: Optional[float] = None,
        frame_rate: float = 30.0,
        smoothing_window: int = 5,
        dead_band_ratio: float = 0.3,
        rest_threshold: float = 15.0,
        min_segment_length: float = 0.05,
        max_invalid_frames: int = 5,
        good_form_streak_seconds: float = 2.0,
        jitter_reference: float = 15.0,
        full_range_margin: float = 5.0,
        near_miss_gap: float = 10.0
    ):
        self.config = config
        self.exercise_name = exercise_name
        self.frame_rate = frame_rate
        self.full_range_margin = full_range_margin
        self.near_miss_gap = near_miss_gap

        target = config.target_range
        self.hold_seconds = config.hold_seconds if hold_seconds is None else hold_seconds

        self._guard = TrackingGuard(min_segment_length, max_invalid_frames)
        self._smoother = AngleSmoother(smoothing_window)
        self._classifier = ZoneClassifier.from_range(target, config.rest_angle, dead_band_ratio)
        self._reps = RepCounter(
            hold_seconds=self.hold_seconds,
            rep_direction=config.rep_direction,
            rest_angle=config.rest_angle,
            frame_rate=frame_rate,
            rest_threshold=rest_threshold,
            cycle_mode=cycle_mode_for(
                target,
                config.rest_angle,
                config.rep_direction,
                rest_threshold,
                self._classifier.dead_band
            )
        )
        self._cues = CueSelector()
        self._cue_display = CueDisplay()
        self._tracker = SessionQualityTracker(frame_rate, good_form_streak_seconds, jitter_reference)

        self._angle_state: Optional[AngleState] = None
        self._frames_processed = 0
        self._needs_resync = False
        self._snapshot = EngineSnapshot(angle_state=None, rep_state=self._reps.state)

        logger.info(
            f"RehabEngine initialized: {exercise_name!r}, target {target.lower:.0f}-{target.upper:.0f}°, "
            f"{config.rep_direction.value}, rest {config.rest_angle:.0f}°, hold {self.hold_seconds:.1f}s"
        )

    # =========================================================================
    # Frame processing
    # =========================================================================

    def process_frame(
        self,
        triple: Optional[JointTriple],
        skeleton: Optional[Dict[str, Position]] = None
    ) -> EngineSnapshot:
        """
        Run one frame through the pipeline.

        Args:
            triple: Proximal/middle/distal positions, None if the tracker
                produced no sample this frame
            skeleton: Named joint positions for compensation checks

        Returns:
            EngineSnapshot for this frame
        """
        decision = self._guard.check(triple)

        if not decision.is_valid:
            if decision.status == TrackingStatus.FROZEN:
                self._needs_resync = True
            self._snapshot = EngineSnapshot(
                angle_state=self._angle_state,
                rep_state=self._reps.state,
                cue_text=self._cue_display.text,
                is_tracking_good=decision.is_tracking_good,
                tracking_hint=decision.hint,
                live_message=decision.hint or self._snapshot.live_message,
                frames_processed=self._frames_processed,
                invalid_streak=decision.invalid_streak
            )
            return self._snapshot

        if decision.recovered or self._needs_resync:
            self._resync()

        raw = triple_angle(triple)
        smoothed = self._smoother.smooth(raw)
        zone = self._classifier.update(smoothed)
        self._angle_state = AngleState(degrees=smoothed, zone=zone)

        rep_state = self._reps.update(zone, smoothed)

        selection = self._cues.select(zone, self.config.form_cues, skeleton)
        if selection.cheat_joint is not None:
            self._tracker.record_cheat(selection.cheat_joint)
        cue_changed = self._cue_display.update(selection.text)

        self._tracker.record_frame(zone, raw, smoothed)
        self._frames_processed += 1

        if self._frames_processed % max(1, int(self.frame_rate)) == 0:
            logger.debug(
                f"Frame {self._frames_processed}: raw={raw:.1f}°, smoothed={smoothed:.1f}°, "
                f"zone={zone.value}, reps={rep_state.reps_completed}"
            )

        self._snapshot = EngineSnapshot(
            angle_state=self._angle_state,
            rep_state=rep_state,
            cue_text=self._cue_display.text,
            cue_changed=cue_changed,
            is_tracking_good=True,
            live_message=self.live_message(smoothed, zone, rep_state),
            frames_processed=self._frames_processed
        )
        return self._snapshot

    def _resync(self):
        """Start a fresh smoothing window after a tracking gap."""
        self._smoother.reset()
        self._tracker.break_continuity()
        self._needs_resync = False

    def live_message(self, angle: float, zone: Zone, rep_state: RepState) -> str:
        """Short status line for the current frame."""
        target = self.config.target_range

        if zone == Zone.TARGET:
            return MSG_HOLD_DONE if rep_state.hold_complete else MSG_IN_RANGE

        if self.config.rep_direction == RepDirection.INCREASING:
            approaching = zone == Zone.BELOW_TARGET
            gap = target.lower - angle
        else:
            approaching = zone == Zone.ABOVE_TARGET
            gap = angle - target.upper

        if not approaching:
            return MSG_OVERSHOOT
        if gap < 5:
            return MSG_ALMOST
        if gap < 15:
            return MSG_CLOSER
        return MSG_FURTHER

    def body_lost(self) -> EngineSnapshot:
        """The tracking source lost the skeleton entirely."""
        logger.info("Body lost from frame")
        self._smoother.reset()
        self._tracker.break_continuity()
        self._snapshot = EngineSnapshot(
            angle_state=self._angle_state,
            rep_state=self._reps.state,
            cue_text=self._cue_display.text,
            is_tracking_good=self._snapshot.is_tracking_good,
            tracking_hint=self._snapshot.tracking_hint,
            live_message=MSG_BODY_LOST,
            frames_processed=self._frames_processed,
            invalid_streak=self._guard.invalid_streak
        )
        return self._snapshot

    # =========================================================================
    # Session state
    # =========================================================================

    @property
    def snapshot(self) -> EngineSnapshot:
        return self._snapshot

    @property
    def metrics(self) -> SessionMetrics:
        return self._tracker.metrics

    @property
    def events(self) -> List[SessionEvent]:
        return list(self._tracker.events)

    def generate_feedback(self, exercise_name: Optional[str] = None) -> SessionFeedback:
        """Synthesize the end-of-session feedback from the accumulated telemetry."""
        return generate_feedback(
            metrics=self._tracker.metrics,
            events=self._tracker.events,
            exercise_name=exercise_name or self.exercise_name,
            target_range=self.config.target_range,
            body_area=self.config.body_area,
            full_range_margin=self.full_range_margin,
            near_miss_gap=self.near_miss_gap
        )

    def reset(self):
        """Clear all session-scoped state."""
        self._guard.reset()
        self._smoother.reset()
        self._classifier.reset()
        self._reps.reset()
        self._cues.reset()
        self._cue_display.reset()
        self._tracker.reset()
        self._angle_state = None
        self._frames_processed = 0
        self._needs_resync = False
        self._snapshot = EngineSnapshot(angle_state=None, rep_state=self._reps.state)
        logger.info(f"RehabEngine reset: {self.exercise_name!r}")


def create_rehab_engine(
    exercise: Union[str, TrackingConfig],
    exercise_name: Optional[str] = None,
    side: Optional[str] = None,
    settings: Optional[Settings] = None
) -> RehabEngine:
    """
    Factory function to create a RehabEngine with application settings.

    Args:
        exercise: Catalog exercise name, or an explicit TrackingConfig
        exercise_name: Display name when passing a TrackingConfig
        side: "left" or "right" to mirror the joint names
        settings: Settings override (defaults to get_settings())

    Returns:
        RehabEngine instance

    Raises:
        UnknownExerciseError: Exercise name not in the catalog
        ValueError: Exercise is timer-only or arguments are invalid
    """
    settings = settings or get_settings()

    if isinstance(exercise, TrackingConfig):
        config = exercise
        name = exercise_name or "Custom Exercise"
    else:
        config = get_tracking_config(exercise)
        name = exercise_name or exercise
        if config is None:
            raise ValueError(f"{exercise!r} is timer-only and has no angle tracking")

    if side is not None:
        config = config.for_side(side)

    if config.mode == TrackingMode.HOLD_DURATION:
        hold_seconds = config.hold_seconds
    else:
        hold_seconds = settings.default_hold_seconds

    return RehabEngine(
        config=config,
        exercise_name=name,
        hold_seconds=hold_seconds,
        frame_rate=settings.frame_rate,
        smoothing_window=settings.smoothing_window,
        dead_band_ratio=settings.zone_dead_band_ratio,
        rest_threshold=settings.rest_threshold_degrees,
        min_segment_length=settings.min_segment_length_m,
        max_invalid_frames=settings.max_invalid_frames,
        good_form_streak_seconds=settings.good_form_streak_seconds,
        jitter_reference=settings.jitter_reference_degrees,
        full_range_margin=settings.full_range_margin_degrees,
        near_miss_gap=settings.near_miss_gap_degrees
    )
