"""
Engine Configuration

Thresholds and tuning constants for the 4B engine, loaded from
environment variables (prefix ``FOURB_``) with defaults that reproduce
the reference scoring behaviour.

Example:
    FOURB_SWING_VELOCITY_THRESHOLD=180 FOURB_LOG_LEVEL=DEBUG python app.py
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Services take an explicit settings instance so tests can construct
    one directly; production code goes through get_settings().
    """

    # Pose extraction
    min_visibility: float = Field(
        default=0.5, ge=0.0, le=1.0,
        description="Minimum landmark visibility for a frame to count as valid"
    )
    velocity_smoothing_window: int = Field(
        default=3, ge=1,
        description="Centered moving-average window applied to angular velocities"
    )
    swing_velocity_threshold: float = Field(
        default=200.0, gt=0,
        description="Smoothed pelvis velocity (deg/s) that marks the start of a swing"
    )
    swing_min_duration_frames: int = Field(
        default=10, ge=1,
        description="Minimum frames between swing start and contact"
    )
    swing_max_duration_frames: int = Field(
        default=60, ge=1,
        description="Search span after swing start when looking for contact"
    )
    follow_through_frames: int = Field(
        default=10, ge=0,
        description="Frames after contact included in the swing window"
    )
    stride_fraction: float = Field(
        default=0.35, ge=0.0, le=1.0,
        description="Stride frame position as a fraction of start-to-contact"
    )
    velocity_noise_floor: float = Field(
        default=50.0, ge=0.0,
        description="Pelvis velocities at or below this (deg/s) are ignored for consistency CV"
    )
    min_valid_frame_fraction: float = Field(
        default=0.5, ge=0.0, le=1.0,
        description="Fraction of valid frames required for a usable extraction"
    )
    sequencing_min_gap_frames: int = Field(
        default=2, ge=0,
        description="Frames the torso peak must trail the pelvis peak for good sequencing"
    )

    # Scoring
    timing_leak_cv_percent: float = Field(
        default=12.0,
        description="Trigger-to-impact CV% above which a timing leak is flagged"
    )
    power_leak_ratio: float = Field(
        default=0.85,
        description="Mean hand:bat ratio below which a power leak is flagged"
    )
    score_floor: int = Field(default=20, description="Lower bound of every category score")
    score_ceiling: int = Field(default=80, description="Upper bound of every category score")
    default_pitch_speed_mph: float = Field(
        default=50.0, gt=0,
        description="Pitch speed assumed when neither swings nor the session supply one"
    )

    # Calibration
    min_calibration_samples: int = Field(
        default=5, ge=5,
        description="Swings required before an athlete model is fitted"
    )
    athlete_model_ttl_days: int = Field(
        default=90, ge=1,
        description="Days an athlete model stays live after calibration"
    )

    # Runtime
    session_cache_ttl_seconds: float = Field(
        default=3600.0, gt=0,
        description="Lifetime of cached session scores"
    )
    max_workers: int = Field(
        default=4, ge=1,
        description="Thread pool size for per-swing batch analysis"
    )
    log_level: str = Field(default="INFO", description="Root log level")

    model_config = SettingsConfigDict(
        env_prefix="FOURB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> EngineSettings:
    """
    Get cached settings instance.

    Using lru_cache means settings are loaded once and reused.
    Call get_settings.cache_clear() after changing the environment.
    """
    return EngineSettings()
