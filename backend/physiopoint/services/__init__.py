"""Application services."""

from physiopoint.services.session_registry import (
    ExerciseSession,
    SessionRegistry,
    SessionNotFoundError,
    RegistryFullError,
    get_session_registry,
)

__all__ = [
    "ExerciseSession",
    "SessionRegistry",
    "SessionNotFoundError",
    "RegistryFullError",
    "get_session_registry",
]
