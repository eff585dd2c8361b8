"""
Tracking confidence guard.

Every joint triple is validated before any other component sees it:
- all nine coordinates must be finite (no NaN/inf)
- the proximal -> middle segment must be longer than a plausible minimum
  (collapsed or occluded skeletons report near-duplicate joints)

Short runs of bad frames are absorbed silently: the caller keeps showing
the last validated angle. Once the run reaches `max_invalid_frames` the
guard freezes: the last good angle/zone is still reported unchanged, tracking
quality is flagged poor and a reposition hint is surfaced. The next valid
frame resumes normal flow immediately.

A bad sample never produces an angle. In particular it never produces 0°,
which is reserved for the angle calculator's degenerate-vector fallback.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging
import math

from physiopoint.engine.angle_math import JointTriple

logger = logging.getLogger(__name__)


REPOSITION_HINT = "Adjust your position so the camera can see the joint clearly."


class TrackingStatus(Enum):
    """Outcome of validating one frame."""
    OK = "ok"              # Valid frame, process normally
    DEGRADED = "degraded"  # Invalid, below threshold - hold last output silently
    FROZEN = "frozen"      # Invalid, threshold reached - hold output, warn user


@dataclass(frozen=True)
class GuardDecision:
    """Guard verdict for a single frame."""
    status: TrackingStatus
    invalid_streak: int = 0
    recovered: bool = False  # First valid frame after a freeze

    @property
    def is_valid(self) -> bool:
        return self.status == TrackingStatus.OK

    @property
    def is_tracking_good(self) -> bool:
        return self.status != TrackingStatus.FROZEN

    @property
    def hint(self) -> str:
        return REPOSITION_HINT if self.status == TrackingStatus.FROZEN else ""


class TrackingGuard:
    """
    Frame-counted validity guard.

    Args:
        min_segment_length: Minimum proximal-middle distance (metres)
        max_invalid_frames: Consecutive invalid frames before freezing
    """

    def __init__(self, min_segment_length: float = 0.05, max_invalid_frames: int = 5):
        self.min_segment_length = min_segment_length
        self.max_invalid_frames = max_invalid_frames
        self.invalid_streak = 0
        self.is_frozen = False

    def validate(self, triple: Optional[JointTriple]) -> bool:
        """Check that a joint triple is usable."""
        if triple is None:
            return False

        for position in triple.positions:
            if not all(math.isfinite(c) for c in position.to_tuple()):
                return False

        return triple.segment_length > self.min_segment_length

    def check(self, triple: Optional[JointTriple]) -> GuardDecision:
        """Validate a frame and update the invalid-frame counter."""
        if self.validate(triple):
            recovered = self.is_frozen
            if recovered:
                logger.info(f"Tracking recovered after {self.invalid_streak} invalid frames")
            self.invalid_streak = 0
            self.is_frozen = False
            return GuardDecision(status=TrackingStatus.OK, recovered=recovered)

        self.invalid_streak += 1

        if self.invalid_streak >= self.max_invalid_frames:
            if not self.is_frozen:
                logger.warning(f"Tracking frozen: {self.invalid_streak} consecutive invalid frames")
            self.is_frozen = True
            return GuardDecision(status=TrackingStatus.FROZEN, invalid_streak=self.invalid_streak)

        return GuardDecision(status=TrackingStatus.DEGRADED, invalid_streak=self.invalid_streak)

    def reset(self):
        self.invalid_streak = 0
        self.is_frozen = False
