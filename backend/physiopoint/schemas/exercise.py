"""Exercise catalog schemas."""

from typing import Optional, List
from pydantic import BaseModel


class FormCueResponse(BaseModel):
    """A coaching cue attached to an exercise."""
    description: str
    watched_joint: Optional[str] = None
    max_deviation: Optional[float] = None
    zone: Optional[str] = None


class TrackingConfigResponse(BaseModel):
    """Joint triple and targets of a tracked exercise."""
    proximal_joint: str
    middle_joint: str
    distal_joint: str
    target_lower: float
    target_upper: float
    hold_seconds: float
    rep_direction: str
    rest_angle: float
    mode: str
    camera_position: str
    camera_hint: str
    reliability: str
    reliability_badge: str
    form_cues: List[FormCueResponse]


class ExerciseResponse(BaseModel):
    """Schema for a catalog entry."""
    name: str
    body_area: str
    description: str
    hold_seconds: int
    reps: int
    is_tracked: bool
    tracking: Optional[TrackingConfigResponse] = None

    class Config:
        from_attributes = True


class ExerciseListResponse(BaseModel):
    items: List[ExerciseResponse]
    total: int
