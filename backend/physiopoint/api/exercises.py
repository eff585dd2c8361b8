"""Exercise catalog API endpoints."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from physiopoint.engine.catalog import Exercise, UnknownExerciseError, get_exercise, list_exercises
from physiopoint.engine.tracking_config import BodyArea, TrackingConfig
from physiopoint.schemas.exercise import (
    ExerciseResponse,
    ExerciseListResponse,
    FormCueResponse,
    TrackingConfigResponse,
)

router = APIRouter()


def _tracking_response(config: TrackingConfig) -> TrackingConfigResponse:
    return TrackingConfigResponse(
        proximal_joint=config.proximal_joint,
        middle_joint=config.middle_joint,
        distal_joint=config.distal_joint,
        target_lower=config.target_range.lower,
        target_upper=config.target_range.upper,
        hold_seconds=config.hold_seconds,
        rep_direction=config.rep_direction.value,
        rest_angle=config.rest_angle,
        mode=config.mode.value,
        camera_position=config.camera_position.value,
        camera_hint=config.camera_hint,
        reliability=config.reliability.value,
        reliability_badge=config.reliability_badge,
        form_cues=[
            FormCueResponse(
                description=cue.description,
                watched_joint=cue.watched_joint,
                max_deviation=cue.max_deviation,
                zone=cue.zone.value if cue.zone else None
            )
            for cue in config.form_cues
        ]
    )


def exercise_response(exercise: Exercise) -> ExerciseResponse:
    config = exercise.tracking_config
    return ExerciseResponse(
        name=exercise.name,
        body_area=exercise.body_area.value,
        description=exercise.description,
        hold_seconds=exercise.hold_seconds,
        reps=exercise.reps,
        is_tracked=exercise.is_tracked,
        tracking=_tracking_response(config) if config is not None else None
    )


@router.get("", response_model=ExerciseListResponse)
async def get_exercises(
    body_area: Optional[str] = Query(None, description="knee, elbow, shoulder, hip or ankle")
):
    """List catalog exercises, optionally filtered by body area."""
    area = None
    if body_area:
        try:
            area = BodyArea(body_area)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"body_area must be one of: {[a.value for a in BodyArea]}"
            )

    exercises = list_exercises(area)
    return ExerciseListResponse(
        items=[exercise_response(e) for e in exercises],
        total=len(exercises)
    )


@router.get("/{name}", response_model=ExerciseResponse)
async def get_exercise_detail(name: str):
    """Get one catalog exercise with its tracking configuration."""
    try:
        exercise = get_exercise(name)
    except UnknownExerciseError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Exercise not found"
        )
    return exercise_response(exercise)
