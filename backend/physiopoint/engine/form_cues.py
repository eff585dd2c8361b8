"""
Real-time coaching cue selection.

Cues are evaluated in strict priority order every frame:

1. Compensation - a watched secondary joint has drifted further from its
   neutral position than the cue allows (e.g. the shoulder hitching during
   an elbow curl). Selecting this cue also reports the joint so the session
   can record a CheatDetected event.
2. Zone match - the first cue declared for the current zone.
3. Fallback - the first cue in the list.

Neutral positions are captured the first time a watched joint is seen in a
session. Deviations are measured in centimetres (skeleton coordinates are
in metres).

The displayed cue only changes when the resolved text actually differs,
so re-evaluating every frame does not make the overlay flicker.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence
import logging

import numpy as np

from physiopoint.engine.angle_math import Position
from physiopoint.engine.tracking_config import FormCue
from physiopoint.engine.zone_classifier import Zone

logger = logging.getLogger(__name__)


METRES_TO_CM = 100.0


@dataclass(frozen=True)
class CueSelection:
    """Resolved cue for one frame."""
    text: Optional[str] = None
    cheat_joint: Optional[str] = None  # Set when a compensation check fired


class CueSelector:
    """Priority-ordered cue evaluation with per-session neutral calibration."""

    def __init__(self):
        self._neutral: Dict[str, np.ndarray] = {}

    def deviation_cm(self, joint_name: str, position: Position) -> float:
        """Displacement of a joint from its neutral position in cm."""
        current = position.to_array()
        neutral = self._neutral.get(joint_name)
        if neutral is None:
            self._neutral[joint_name] = current
            logger.debug(f"Neutral position captured for {joint_name}")
            return 0.0
        return float(np.linalg.norm(current - neutral)) * METRES_TO_CM

    def select(
        self,
        zone: Zone,
        cues: Sequence[FormCue],
        skeleton: Optional[Dict[str, Position]] = None
    ) -> CueSelection:
        """
        Resolve the cue to show for this frame.

        Args:
            zone: Current classified zone
            cues: The exercise's ordered cue list
            skeleton: Named joint positions for secondary-joint checks

        Returns:
            CueSelection (text is None when the exercise has no cues)
        """
        if not cues:
            return CueSelection()

        if skeleton:
            for cue in cues:
                if not cue.is_compensation_check:
                    continue
                position = skeleton.get(cue.watched_joint)
                if position is None or not all(np.isfinite(position.to_tuple())):
                    continue
                if self.deviation_cm(cue.watched_joint, position) > cue.max_deviation:
                    return CueSelection(text=cue.description, cheat_joint=cue.watched_joint)

        for cue in cues:
            if cue.zone is not None and cue.zone == zone:
                return CueSelection(text=cue.description)

        return CueSelection(text=cues[0].description)

    def reset(self):
        self._neutral.clear()


class CueDisplay:
    """Change-gated holder for the externally visible cue text."""

    def __init__(self):
        self.text: Optional[str] = None

    def update(self, text: Optional[str]) -> bool:
        """Set the displayed text; returns True only if it changed."""
        if text == self.text:
            return False
        self.text = text
        return True

    def reset(self):
        self.text = None
