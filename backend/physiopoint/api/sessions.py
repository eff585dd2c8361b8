"""Exercise session API endpoints."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from physiopoint.engine.angle_math import JointTriple, Position
from physiopoint.engine.catalog import UnknownExerciseError
from physiopoint.engine.rehab_engine import EngineSnapshot
from physiopoint.engine.session_quality import event_to_dict
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
from physiopoint.services.session_registry import (
    ExerciseSession,
    SessionRegistry,
    SessionNotFoundError,
    RegistryFullError,
    get_session_registry,
)

router = APIRouter()


def _get_session(registry: SessionRegistry, session_id: str) -> ExerciseSession:
    try:
        return registry.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )


def _frame_triple(frame: FrameInput) -> Optional[JointTriple]:
    """Missing positions become a None sample for the tracking guard."""
    if frame.proximal is None or frame.middle is None or frame.distal is None:
        return None
    return JointTriple(
        proximal=Position.from_sequence(frame.proximal),
        middle=Position.from_sequence(frame.middle),
        distal=Position.from_sequence(frame.distal)
    )


def _frame_skeleton(frame: FrameInput) -> Optional[Dict[str, Position]]:
    if not frame.skeleton:
        return None
    return {name: Position.from_sequence(coords) for name, coords in frame.skeleton.items()}


def _snapshot_response(session_id: str, snapshot: EngineSnapshot) -> SnapshotResponse:
    return SnapshotResponse(session_id=session_id, **snapshot.to_dict())


def _require_tracked(session: ExerciseSession):
    if session.engine is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{session.exercise.name!r} is a timer-only exercise"
        )


@router.post("", response_model=SessionCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_session(
    data: SessionCreate,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Start an exercise session."""
    try:
        session = registry.create(data.exercise_name, side=data.side)
    except UnknownExerciseError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Exercise not found"
        )
    except RegistryFullError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Too many active sessions"
        )

    config = session.engine.config if session.engine is not None else None
    return SessionCreatedResponse(
        id=session.id,
        exercise_name=session.exercise.name,
        mode=session.mode,
        side=session.side,
        camera_hint=config.camera_hint if config else None,
        reliability_badge=config.reliability_badge if config else None
    )


@router.post("/{session_id}/frames", response_model=SnapshotResponse)
def submit_frame(
    session_id: str,
    frame: FrameInput,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Feed one body-tracking frame to the session's engine."""
    session = _get_session(registry, session_id)
    _require_tracked(session)

    triple = _frame_triple(frame)
    skeleton = _frame_skeleton(frame)

    with session.lock:
        snapshot = session.engine.process_frame(triple, skeleton)

    return _snapshot_response(session.id, snapshot)


@router.post("/{session_id}/body-lost", response_model=SnapshotResponse)
def report_body_lost(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """The tracking source lost the body entirely."""
    session = _get_session(registry, session_id)
    _require_tracked(session)

    with session.lock:
        snapshot = session.engine.body_lost()

    return _snapshot_response(session.id, snapshot)


@router.get("/{session_id}", response_model=SnapshotResponse)
def get_session_state(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Current live state of a tracked session."""
    session = _get_session(registry, session_id)
    _require_tracked(session)

    with session.lock:
        snapshot = session.engine.snapshot

    return _snapshot_response(session.id, snapshot)


@router.post("/{session_id}/reset", status_code=status.HTTP_204_NO_CONTENT)
def reset_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Clear all accumulated session state and restart the clock."""
    session = _get_session(registry, session_id)

    with session.lock:
        if session.engine is not None:
            session.engine.reset()
        session.restart_clock()


@router.post("/{session_id}/finish", response_model=SessionSummaryResponse)
def finish_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """End a session and return its metrics and feedback."""
    try:
        session = registry.remove(session_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )

    summary = SessionSummaryResponse(
        session_id=session.id,
        exercise_name=session.exercise.name,
        mode=session.mode,
        reps_completed=0,
        elapsed_seconds=round(session.elapsed_seconds, 2)
    )

    if session.engine is None:
        return summary

    with session.lock:
        engine = session.engine
        metrics = engine.metrics
        events: List[SessionEventResponse] = [
            SessionEventResponse(**event_to_dict(e)) for e in engine.events
        ]
        feedback = engine.generate_feedback()
        summary.reps_completed = engine.snapshot.rep_state.reps_completed

    summary.metrics = MetricsResponse(**metrics.to_dict())
    summary.events = events
    summary.feedback = FeedbackResponse(**feedback.to_dict())
    return summary
