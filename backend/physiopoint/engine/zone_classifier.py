"""
Hysteretic zone classification.

Maps a smoothed angle onto BELOW_TARGET / TARGET / ABOVE_TARGET relative to
the exercise's target range. The classifier is a three-state machine with a
dead band around each boundary:

    BELOW_TARGET ──(angle ≥ lower + db)──► TARGET
    TARGET ──(angle < lower - db)──► BELOW_TARGET
    TARGET ──(angle > upper + db)──► ABOVE_TARGET
    ABOVE_TARGET ──(angle ≤ upper - db)──► TARGET

A signal hovering within a few hundredths of a degree of a boundary would
otherwise flip zones every frame and corrupt rep counting.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class Zone(Enum):
    """Position of the measured angle relative to the target range."""
    BELOW_TARGET = "below_target"
    TARGET = "target"
    ABOVE_TARGET = "above_target"


@dataclass(frozen=True)
class AngleState:
    """Angle + zone reported for one frame."""
    degrees: float
    zone: Zone


@dataclass(frozen=True)
class TargetRange:
    """Closed interval of target degrees."""
    lower: float
    upper: float

    def __post_init__(self):
        if self.lower > self.upper:
            raise ValueError(f"Invalid target range: {self.lower} > {self.upper}")

    @property
    def midpoint(self) -> float:
        return (self.lower + self.upper) / 2.0

    @property
    def half_width(self) -> float:
        return (self.upper - self.lower) / 2.0

    def contains(self, angle: float) -> bool:
        return self.lower <= angle <= self.upper


class ZoneClassifier:
    """
    Three-state hysteretic zone machine.

    Args:
        target_angle: Centre of the target range (T)
        tolerance: Half-width of the target range (δ)
        rest_angle: Angle the limb starts at; picks the initial zone
        dead_band_ratio: Dead band as a fraction of the tolerance
    """

    def __init__(
        self,
        target_angle: float,
        tolerance: float,
        rest_angle: Optional[float] = None,
        dead_band_ratio: float = 0.3
    ):
        if tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {tolerance}")

        self.target_angle = target_angle
        self.tolerance = tolerance
        self.lower = target_angle - tolerance
        self.upper = target_angle + tolerance
        self.dead_band = dead_band_ratio * tolerance
        self.rest_angle = rest_angle

        self.initial_zone = self._static_zone(rest_angle) if rest_angle is not None else Zone.BELOW_TARGET
        self.zone = self.initial_zone

    @classmethod
    def from_range(
        cls,
        target_range: TargetRange,
        rest_angle: Optional[float] = None,
        dead_band_ratio: float = 0.3
    ) -> "ZoneClassifier":
        return cls(
            target_angle=target_range.midpoint,
            tolerance=target_range.half_width,
            rest_angle=rest_angle,
            dead_band_ratio=dead_band_ratio
        )

    def _static_zone(self, angle: float) -> Zone:
        """Plain interval comparison, no hysteresis."""
        if angle < self.lower:
            return Zone.BELOW_TARGET
        if angle > self.upper:
            return Zone.ABOVE_TARGET
        return Zone.TARGET

    def update(self, angle: float) -> Zone:
        """Feed a smoothed angle and return the (possibly unchanged) zone."""
        previous = self.zone

        if self.zone == Zone.BELOW_TARGET:
            if angle >= self.lower + self.dead_band:
                self.zone = Zone.TARGET

        elif self.zone == Zone.TARGET:
            if angle < self.lower - self.dead_band:
                self.zone = Zone.BELOW_TARGET
            elif angle > self.upper + self.dead_band:
                self.zone = Zone.ABOVE_TARGET

        elif self.zone == Zone.ABOVE_TARGET:
            if angle <= self.upper - self.dead_band:
                self.zone = Zone.TARGET

        if self.zone != previous:
            logger.debug(f"Zone {previous.value} → {self.zone.value} at {angle:.1f}°")

        return self.zone

    def reset(self):
        self.zone = self.initial_zone
