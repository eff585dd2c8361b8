"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "PhysioPoint Rehab Engine"
    debug: bool = False
    api_prefix: str = "/api"

    # Frame cadence of the body-tracking source
    frame_rate: float = 30.0  # ~30 Hz body anchor updates

    # Temporal smoothing
    smoothing_window: int = 5  # ±5° raw jitter -> ±1-2°, <200ms added latency

    # Zone classification
    zone_dead_band_ratio: float = 0.3  # dead band = 0.3 * tolerance

    # Rep counting
    rest_threshold_degrees: float = 15.0  # Within this of rest = back at rest
    default_hold_seconds: float = 2.0  # Hold for non-isometric exercises

    # Tracking confidence
    min_segment_length_m: float = 0.05  # Shorter proximal-middle segment = collapsed skeleton
    max_invalid_frames: int = 5  # Consecutive bad frames before freezing output

    # Session quality
    good_form_streak_seconds: float = 2.0
    full_range_margin_degrees: float = 5.0
    near_miss_gap_degrees: float = 10.0
    jitter_reference_degrees: float = 15.0  # Avg jitter that maps to control rating 0

    # Sessions
    max_active_sessions: int = 64

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
