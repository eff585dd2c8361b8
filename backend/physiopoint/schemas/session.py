"""Exercise session schemas."""

from typing import Optional, List, Dict
from pydantic import BaseModel, Field, field_validator


Coordinates = List[float]


def _check_coordinates(value: Coordinates) -> Coordinates:
    if len(value) != 3:
        raise ValueError(f"position must have exactly 3 coordinates (x, y, z), got {len(value)}")
    return value


class SessionCreate(BaseModel):
    """Schema for starting an exercise session."""
    exercise_name: str = Field(..., description="Catalog exercise name, e.g. 'Heel Slides'")
    side: Optional[str] = Field(None, description="Exercising side: left or right")

    @field_validator("side")
    @classmethod
    def validate_side(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in ("left", "right"):
            raise ValueError("side must be one of: ['left', 'right']")
        return v


class SessionCreatedResponse(BaseModel):
    id: str
    exercise_name: str
    mode: str  # "tracked" or "timer"
    side: Optional[str] = None
    camera_hint: Optional[str] = None
    reliability_badge: Optional[str] = None


class FrameInput(BaseModel):
    """
    One body-tracking frame.

    Positions are world coordinates in metres. Non-finite values are
    accepted here and rejected by the engine's tracking guard, so a noisy
    sensor never produces an HTTP error.
    """
    proximal: Optional[Coordinates] = None
    middle: Optional[Coordinates] = None
    distal: Optional[Coordinates] = None
    skeleton: Optional[Dict[str, Coordinates]] = None

    @field_validator("proximal", "middle", "distal")
    @classmethod
    def validate_position(cls, v: Optional[Coordinates]) -> Optional[Coordinates]:
        if v is None:
            return v
        return _check_coordinates(v)

    @field_validator("skeleton")
    @classmethod
    def validate_skeleton(cls, v: Optional[Dict[str, Coordinates]]) -> Optional[Dict[str, Coordinates]]:
        if v is None:
            return v
        for coords in v.values():
            _check_coordinates(coords)
        return v


class SnapshotResponse(BaseModel):
    """Live engine state after the latest update."""
    session_id: str
    angle: Optional[float] = None
    zone: Optional[str] = None
    reps_completed: int
    is_holding: bool
    phase: str
    cue_text: Optional[str] = None
    cue_changed: bool
    is_tracking_good: bool
    tracking_hint: str
    live_message: str
    frames_processed: int
    invalid_streak: int


class MetricsResponse(BaseModel):
    total_frames: int
    frames_in_good_form: int
    jitter_accumulated: float
    good_form_seconds: float
    best_angle: float
    quality_score: float
    control_rating: float
    control_label: str


class SessionEventResponse(BaseModel):
    kind: str
    seconds: Optional[float] = None
    joint_name: Optional[str] = None


class FeedbackResponse(BaseModel):
    positive_observation: str
    growth_observation: str
    journey_message: str


class SessionSummaryResponse(BaseModel):
    """Schema returned when a session is finished."""
    session_id: str
    exercise_name: str
    mode: str
    reps_completed: int
    elapsed_seconds: float
    metrics: Optional[MetricsResponse] = None
    events: List[SessionEventResponse] = []
    feedback: Optional[FeedbackResponse] = None
