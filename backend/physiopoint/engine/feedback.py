"""
End-of-session feedback synthesis.

A deterministic decision table turns the session counters and event log
into three short texts:

    positive_observation   what the user genuinely did well
    growth_observation     one specific thing to work on next time
    journey_message        forward-looking sentence for the recovery journey

Identical telemetry always yields identical text. All copy lives in the
tables below; the decision functions only pick a row.

Range is judged by the largest smoothed angle of the session against the
target upper bound. That reading fits exercises that extend toward the top
of their range. For decreasing exercises that rest near full extension
(heel slides, seated knee flexion, hip flexion, hip hinge, elbow curls)
the resting angle alone clears the bar, so `hit_full_range` is true for
every such session and the range-based growth rows never apply.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence
import logging

from physiopoint.engine.session_quality import (
    CheatDetected, GoodFormHeld, SessionEvent, SessionMetrics
)
from physiopoint.engine.tracking_config import BodyArea
from physiopoint.engine.zone_classifier import TargetRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionFeedback:
    positive_observation: str
    growth_observation: str
    journey_message: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "positive_observation": self.positive_observation,
            "growth_observation": self.growth_observation,
            "journey_message": self.journey_message,
        }


# =============================================================================
# Copy tables
# =============================================================================

POSITIVE_COMBINED = (
    "You reached your full target range AND held good form for multiple seconds. "
    "That's exactly the right combination."
)
POSITIVE_RANGE = "You hit your full target range today. Your {part} is moving well."
POSITIVE_HOLD = (
    "You held steady in the target zone. That controlled hold time is what builds real strength."
)
POSITIVE_CONSISTENCY = (
    "Over half your session was in good form. That consistency adds up more than you'd think."
)
POSITIVE_EFFORT = (
    "You showed up and did the work. Every session, even the hard ones, moves recovery forward."
)

GROWTH_SLOW_DOWN = (
    "Try slowing the movement down. Smoother reps build more tissue strength than fast ones."
)
GROWTH_NEAR_MISS = (
    "You were close to full range. Just a small amount more each session will get you there."
)
GROWTH_PACING = "Keep the same controlled pace next session to reinforce the movement pattern."

COMPENSATION_CUES: Dict[str, str] = {
    "spine_4_joint": (
        "Your back shifted a little during the movement. Focus on keeping your spine still "
        "while the {part} does the work."
    ),
    "spine_7_joint": (
        "Your back shifted a little during the movement. Focus on keeping your spine still "
        "while the {part} does the work."
    ),
    "right_shoulder_1_joint": (
        "Your shoulder was moving during the exercise. Try pinning your upper arm to your side "
        "so the elbow takes the load."
    ),
    "left_shoulder_1_joint": (
        "Your shoulder was moving during the exercise. Try pinning your upper arm to your side "
        "so the elbow takes the load."
    ),
    "hips_joint": (
        "Your hip shifted slightly. Try squeezing your core before each rep to keep the pelvis stable."
    ),
    "right_foot_joint": (
        "Your foot position drifted. Plant it flat and keep it still throughout the movement."
    ),
    "left_foot_joint": (
        "Your foot position drifted. Plant it flat and keep it still throughout the movement."
    ),
}
COMPENSATION_DEFAULT = (
    "There was some compensating movement. Focus on isolating the target joint next session."
)

RANGE_GROWTH_CUES: Dict[str, str] = {
    "Seated Knee Extension": (
        "You were {gap}° short of full extension. Try holding at your max point for 2 extra "
        "seconds to encourage the knee to open further."
    ),
    "Terminal Knee Extension": (
        "You were {gap}° short of full extension. Try holding at your max point for 2 extra "
        "seconds to encourage the knee to open further."
    ),
    "Heel Slides": (
        "You were {gap}° short of full bend. After each slide, hold at the deepest point "
        "before returning."
    ),
    "Seated Knee Flexion": (
        "You were {gap}° short of full bend. After each slide, hold at the deepest point "
        "before returning."
    ),
    "Wall Slides": (
        "You were {gap}° from overhead. Keep your back flat against the wall or surface and "
        "let gravity assist the last range."
    ),
    "Supine Shoulder Flexion": (
        "You were {gap}° from overhead. Keep your back flat against the wall or surface and "
        "let gravity assist the last range."
    ),
    "Standing Shoulder Flexion": (
        "You were {gap}° from overhead. Keep your back flat against the wall or surface and "
        "let gravity assist the last range."
    ),
    "Elbow Flexion & Extension": (
        "You were {gap}° from full range. Make sure you fully straighten at the bottom of each "
        "rep, not just curl at the top."
    ),
    "Active Elbow Flexion": (
        "You were {gap}° from full range. Make sure you fully straighten at the bottom of each "
        "rep, not just curl at the top."
    ),
    "Standing Hip Flexion": (
        "You were {gap}° short. Try lifting the knee a little higher each time, keeping the "
        "stance leg fully straight."
    ),
    "Hip Hinge": (
        "You were {gap}° from target depth. Focus on pushing the hips further back rather "
        "than bending the knees more."
    ),
}
RANGE_GROWTH_DEFAULT = "You were {gap}° from the target range. Aim to add just 2-3° more each session."

JOURNEY_STRONG = (
    "If you keep sessions like this up 3x per week, research shows measurable {part} "
    "strength gains within 2-3 weeks."
)
JOURNEY_STEADY = (
    "Consistent sessions like this, even imperfect ones, are what drive tissue healing in "
    "the {part}. You're on the right track."
)
JOURNEY_GENTLE = (
    "Every session reintroduces safe load to the {part}. Even short, partial efforts help "
    "maintain circulation and prevent stiffness."
)


# =============================================================================
# Decision table
# =============================================================================

def body_part_label(body_area: Optional[BodyArea]) -> str:
    """Label used in copy; exercises without a body-area tag say "joint"."""
    return body_area.value if body_area is not None else "joint"


def compensation_cue(joint_name: str, part: str) -> str:
    return COMPENSATION_CUES.get(joint_name, COMPENSATION_DEFAULT).format(part=part)


def range_growth_cue(exercise_name: str, gap_degrees: float) -> str:
    template = RANGE_GROWTH_CUES.get(exercise_name, RANGE_GROWTH_DEFAULT)
    return template.format(gap=int(gap_degrees))


def journey_message(part: str, quality_score: float, hit_full_range: bool) -> str:
    if hit_full_range and quality_score > 0.6:
        return JOURNEY_STRONG.format(part=part)
    if quality_score > 0.4:
        return JOURNEY_STEADY.format(part=part)
    return JOURNEY_GENTLE.format(part=part)


def generate_feedback(
    metrics: SessionMetrics,
    events: Sequence[SessionEvent],
    exercise_name: str,
    target_range: TargetRange,
    body_area: Optional[BodyArea] = None,
    full_range_margin: float = 5.0,
    near_miss_gap: float = 10.0
) -> SessionFeedback:
    """
    Synthesize session-end feedback.

    Args:
        metrics: Final session counters
        events: Ordered session event log
        exercise_name: Display name, keys the range-growth copy
        target_range: The exercise's target range
        body_area: Body-area tag, keys the body-part wording
        full_range_margin: Degrees below the upper bound that still count
            as full range
        near_miss_gap: Gap (degrees) separating range coaching from a
            near-miss nudge

    Returns:
        SessionFeedback with all three texts filled in
    """
    part = body_part_label(body_area)
    quality = metrics.quality_score
    control = metrics.control_rating

    hit_full_range = metrics.best_angle >= target_range.upper - full_range_margin
    gap_to_best = target_range.upper - metrics.best_angle
    held_good_form = any(isinstance(e, GoodFormHeld) for e in events)
    first_cheat = next((e.joint_name for e in events if isinstance(e, CheatDetected)), None)

    # What they genuinely did well
    if hit_full_range and held_good_form:
        positive = POSITIVE_COMBINED
    elif hit_full_range:
        positive = POSITIVE_RANGE.format(part=part)
    elif held_good_form:
        positive = POSITIVE_HOLD
    elif quality > 0.5:
        positive = POSITIVE_CONSISTENCY
    else:
        positive = POSITIVE_EFFORT

    # One specific thing to work on
    if first_cheat is not None:
        growth = compensation_cue(first_cheat, part)
    elif not hit_full_range and gap_to_best > near_miss_gap:
        growth = range_growth_cue(exercise_name, gap_to_best)
    elif control < 0.5:
        growth = GROWTH_SLOW_DOWN
    elif not hit_full_range and gap_to_best <= near_miss_gap:
        growth = GROWTH_NEAR_MISS
    else:
        growth = GROWTH_PACING

    feedback = SessionFeedback(
        positive_observation=positive,
        growth_observation=growth,
        journey_message=journey_message(part, quality, hit_full_range)
    )

    logger.info(
        f"Feedback for {exercise_name!r}: best={metrics.best_angle:.1f}°, "
        f"quality={quality:.2f}, control={control:.2f}, full_range={hit_full_range}, "
        f"cheat={first_cheat}"
    )
    return feedback
