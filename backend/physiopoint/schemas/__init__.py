"""Pydantic schemas for API request/response models."""

from physiopoint.schemas.exercise import (
    FormCueResponse,
    TrackingConfigResponse,
    ExerciseResponse,
    ExerciseListResponse,
)
from physiopoint.schemas.session import (
    SessionCreate,
    SessionCreatedResponse,
    FrameInput,
    SnapshotResponse,
    MetricsResponse,
    SessionEventResponse,
    FeedbackResponse,
    SessionSummaryResponse,
)

__all__ = [
    "FormCueResponse",
    "TrackingConfigResponse",
    "ExerciseResponse",
    "ExerciseListResponse",
    "SessionCreate",
    "SessionCreatedResponse",
    "FrameInput",
    "SnapshotResponse",
    "MetricsResponse",
    "SessionEventResponse",
    "FeedbackResponse",
    "SessionSummaryResponse",
]
