"""
In-memory registry of active exercise sessions.

Each session owns one RehabEngine (or none, for timer-only exercises) and a
lock. Every engine call made through the HTTP layer holds the session lock,
so a reset can never interleave with an in-flight frame update. Nothing is
persisted; finishing a session removes it.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Optional
import logging
import threading
import time
import uuid

from physiopoint.config import Settings, get_settings
from physiopoint.engine.catalog import Exercise, get_exercise
from physiopoint.engine.rehab_engine import RehabEngine, create_rehab_engine

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    """Raised when a session id is not registered."""


class RegistryFullError(RuntimeError):
    """Raised when max_active_sessions would be exceeded."""


@dataclass
class ExerciseSession:
    """One active exercise session."""
    id: str
    exercise: Exercise
    side: Optional[str] = None
    engine: Optional[RehabEngine] = None
    started_at: float = field(default_factory=time.monotonic)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def mode(self) -> str:
        return "tracked" if self.engine is not None else "timer"

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self.started_at

    def restart_clock(self):
        self.started_at = time.monotonic()


class SessionRegistry:
    """Thread-safe map of session id -> ExerciseSession."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._sessions: Dict[str, ExerciseSession] = {}
        self._lock = threading.Lock()

    def create(self, exercise_name: str, side: Optional[str] = None) -> ExerciseSession:
        """
        Start a session for a catalog exercise.

        Raises:
            UnknownExerciseError: Exercise not in the catalog
            RegistryFullError: Too many active sessions
        """
        exercise = get_exercise(exercise_name)

        engine = None
        if exercise.is_tracked:
            engine = create_rehab_engine(exercise.name, side=side, settings=self.settings)

        session = ExerciseSession(
            id=str(uuid.uuid4()),
            exercise=exercise,
            side=side,
            engine=engine
        )

        with self._lock:
            if len(self._sessions) >= self.settings.max_active_sessions:
                raise RegistryFullError(
                    f"{len(self._sessions)} sessions active (max {self.settings.max_active_sessions})"
                )
            self._sessions[session.id] = session

        logger.info(f"Session {session.id} started: {exercise.name!r} ({session.mode})")
        return session

    def get(self, session_id: str) -> ExerciseSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def remove(self, session_id: str) -> ExerciseSession:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        logger.info(f"Session {session_id} ended after {session.elapsed_seconds:.1f}s")
        return session

    def clear(self):
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


@lru_cache
def get_session_registry() -> SessionRegistry:
    """FastAPI dependency returning the process-wide registry."""
    return SessionRegistry()
