"""
Directional, hold-gated repetition counting.

A rep is one full cycle:

    AT_REST ──► MOVING ──► IN_TARGET (held ≥ hold_seconds) ──► RETURNING ──► AT_REST
                                                                              (+1 rep)

The rep is credited when the angle comes back past the rest angle in the
configured direction. A sustained hold is therefore one rep, not many, and
a rep that never returns to rest is never counted. Dipping out of the target
zone and back in before reaching rest continues the same cycle.

Entries into the target zone that are not held long enough are partial
attempts and are invisible to the counter.

How the return leg is detected depends on where the rest angle sits
relative to the target zone (see `cycle_mode_for`):

    ZONE_EXIT  rest lies outside the zone; the return starts when the zone
               is left toward rest (knee extension, heel slides)
    EXCURSION  rest lies inside the zone, but the range reaches further than
               `rest_threshold` past it; only time in the zone away from rest
               counts as the hold (elbow curls with rest 170° in 30-170°)
    HOLD       no reachable angle separates rest from the target (straight
               leg raise measured at the knee); one rep per completed hold,
               and the zone has to be left before the next hold counts
"""

from dataclasses import dataclass
from enum import Enum
import logging

from physiopoint.engine.zone_classifier import TargetRange, Zone

logger = logging.getLogger(__name__)


class RepDirection(Enum):
    """Which way the angle moves during the active phase of the exercise."""
    INCREASING = "increasing"  # e.g. knee extension: 90° → 180°
    DECREASING = "decreasing"  # e.g. hip flexion: 170° → 100°


class RepPhase(Enum):
    """Where the user is in the rep cycle."""
    AT_REST = "at_rest"
    MOVING = "moving"
    IN_TARGET = "in_target"
    RETURNING = "returning"


class RepCycleMode(Enum):
    """How one cycle is separated from the next."""
    ZONE_EXIT = "zone_exit"
    EXCURSION = "excursion"
    HOLD = "hold"


def cycle_mode_for(
    target_range: TargetRange,
    rest_angle: float,
    rep_direction: RepDirection,
    rest_threshold: float = 15.0,
    dead_band: float = 0.0
) -> RepCycleMode:
    """
    Pick the cycle mode for an exercise.

    Args:
        target_range: The exercise's target range
        rest_angle: Neutral angle between reps
        rep_direction: Direction of the active phase
        rest_threshold: Degrees from rest that still count as back at rest
        dead_band: Zone hysteresis; leaving the zone needs this much margin
    """
    if rep_direction == RepDirection.INCREASING:
        if rest_angle < target_range.lower - dead_band:
            return RepCycleMode.ZONE_EXIT
        if target_range.upper > rest_angle + rest_threshold:
            return RepCycleMode.EXCURSION
    else:
        if rest_angle > target_range.upper + dead_band:
            return RepCycleMode.ZONE_EXIT
        if target_range.lower < rest_angle - rest_threshold:
            return RepCycleMode.EXCURSION
    return RepCycleMode.HOLD


@dataclass(frozen=True)
class RepState:
    """Repetition status reported for one frame."""
    reps_completed: int = 0
    is_holding: bool = False
    phase: RepPhase = RepPhase.AT_REST
    hold_complete: bool = False


class RepCounter:
    """
    Rep state machine driven by the classified zone.

    Args:
        hold_seconds: Minimum continuous time in the target zone
        rep_direction: Direction of the active phase
        rest_angle: Neutral angle the limb returns to between reps
        frame_rate: Frame cadence used to convert frame counts to seconds
        rest_threshold: Degrees from rest that still count as "back at rest"
        cycle_mode: How cycles are separated
    """

    def __init__(
        self,
        hold_seconds: float,
        rep_direction: RepDirection,
        rest_angle: float,
        frame_rate: float = 30.0,
        rest_threshold: float = 15.0,
        cycle_mode: RepCycleMode = RepCycleMode.ZONE_EXIT
    ):
        if hold_seconds < 0:
            raise ValueError(f"hold_seconds must be >= 0, got {hold_seconds}")
        if frame_rate <= 0:
            raise ValueError(f"frame_rate must be > 0, got {frame_rate}")

        self.hold_seconds = hold_seconds
        self.rep_direction = rep_direction
        self.rest_angle = rest_angle
        self.frame_rate = frame_rate
        self.rest_threshold = rest_threshold
        self.cycle_mode = cycle_mode

        self.reps_completed = 0
        self.phase = RepPhase.AT_REST
        self._target_frames = 0
        self._hold_complete = False
        self._hold_credited = False

    @property
    def hold_time(self) -> float:
        """Seconds spent continuously in the target zone."""
        return self._target_frames / self.frame_rate

    def is_back_at_rest(self, angle: float) -> bool:
        """True once the angle has come back past rest from the target side."""
        if self.rep_direction == RepDirection.INCREASING:
            return angle <= self.rest_angle + self.rest_threshold
        return angle >= self.rest_angle - self.rest_threshold

    def update(self, zone: Zone, angle: float) -> RepState:
        """
        Advance the state machine by one frame.

        Args:
            zone: Zone from the ZoneClassifier
            angle: Smoothed angle for the same frame

        Returns:
            Current RepState
        """
        if self.cycle_mode == RepCycleMode.EXCURSION:
            self._update_excursion(zone, angle)
        elif self.cycle_mode == RepCycleMode.HOLD:
            self._update_hold(zone, angle)
        else:
            self._update_zone_exit(zone, angle)
        return self.state

    def _count_target_frame(self):
        self._target_frames += 1
        self.phase = RepPhase.IN_TARGET
        if not self._hold_complete and self.hold_time >= self.hold_seconds:
            self._hold_complete = True
            logger.debug(f"Hold complete after {self.hold_time:.2f}s")

    def _update_zone_exit(self, zone: Zone, angle: float):
        if zone == Zone.TARGET:
            self._count_target_frame()
            return

        self._target_frames = 0
        at_rest = self.is_back_at_rest(angle)

        if self.phase == RepPhase.IN_TARGET:
            # Without a completed hold this was a partial attempt
            self.phase = RepPhase.RETURNING if self._hold_complete else RepPhase.MOVING

        if self.phase == RepPhase.RETURNING and at_rest:
            self._credit_rep()
            self._hold_complete = False
            self.phase = RepPhase.AT_REST
        elif self.phase == RepPhase.MOVING and at_rest:
            self.phase = RepPhase.AT_REST
        elif self.phase == RepPhase.AT_REST and not at_rest:
            self.phase = RepPhase.MOVING

    def _update_excursion(self, zone: Zone, angle: float):
        if self.is_back_at_rest(angle):
            self._target_frames = 0
            if self._hold_complete:
                self._credit_rep()
                self._hold_complete = False
            self.phase = RepPhase.AT_REST
            return

        if zone == Zone.TARGET:
            self._count_target_frame()
        else:
            self._target_frames = 0
            self.phase = RepPhase.RETURNING if self._hold_complete else RepPhase.MOVING

    def _update_hold(self, zone: Zone, angle: float):
        if zone == Zone.TARGET:
            self._count_target_frame()
            if self._hold_complete and not self._hold_credited:
                self._credit_rep()
                self._hold_credited = True
            return

        self._target_frames = 0
        self._hold_complete = False
        self._hold_credited = False
        self.phase = RepPhase.AT_REST if self.is_back_at_rest(angle) else RepPhase.MOVING

    def _credit_rep(self):
        self.reps_completed += 1
        logger.info(f"Rep {self.reps_completed} completed")

    @property
    def state(self) -> RepState:
        in_target = self.phase == RepPhase.IN_TARGET
        if self.cycle_mode == RepCycleMode.HOLD:
            is_holding = in_target and not self._hold_credited
        else:
            is_holding = in_target
        return RepState(
            reps_completed=self.reps_completed,
            is_holding=is_holding,
            phase=self.phase,
            hold_complete=self._hold_complete
        )

    def reset(self):
        self.reps_completed = 0
        self.phase = RepPhase.AT_REST
        self._target_frames = 0
        self._hold_complete = False
        self._hold_credited = False
