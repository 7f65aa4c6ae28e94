"""
Kinematics Domain Models

Per-frame rotation and velocity records and the per-swing summary the
pose kinematics extractor produces from them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SequencingQuality(Enum):
    """
    How well the torso follows the pelvis in the kinetic chain.

    - GOOD: torso peaks clearly after the pelvis and faster than it
    - AVERAGE: torso peaks with or after the pelvis at a similar speed
    - POOR: torso peaks first or lags well behind in speed
    """
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"


@dataclass(frozen=True)
class RotationFrame:
    """
    Segment rotation for a single frame.

    Attributes:
        frame_number: Source frame number
        timestamp_ms: Source timestamp
        pelvis_angle: Hip line angle in degrees, None if hips not visible
        torso_angle: Shoulder line angle in degrees, None if shoulders not visible
        x_factor: Torso minus pelvis angle (0 on invalid frames)
        confidence: Mean visibility of the hip and shoulder landmarks
        is_valid: All four landmarks visible and confidence above threshold
    """
    frame_number: int
    timestamp_ms: float
    pelvis_angle: Optional[float]
    torso_angle: Optional[float]
    x_factor: float
    confidence: float
    is_valid: bool


@dataclass(frozen=True)
class VelocityFrame:
    """
    Angular velocities for a single frame (degrees per second).

    Pelvis and torso velocities are magnitudes. X-factor velocity keeps
    its sign: positive values mean the torso is pulling away from the
    pelvis (stretch).
    """
    frame_number: int
    timestamp_ms: float
    pelvis_velocity: float
    torso_velocity: float
    x_factor_velocity: float


@dataclass(frozen=True)
class SwingWindow:
    """
    Frame indices delimiting one swing.

    Indices refer to positions in the rotation/velocity frame lists.
    Invariant: start <= stride <= contact <= end.
    """
    start: int
    stride: int
    contact: int
    end: int

    @property
    def duration_frames(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class CalibrationCoefficients:
    """
    Linear alignment of video-derived metrics to a reference capture system.

    Each metric is transformed as ``value * scale + offset``. The default
    instance is the identity.
    """
    pelvis_scale: float = 1.0
    pelvis_offset: float = 0.0
    torso_scale: float = 1.0
    torso_offset: float = 0.0
    x_factor_scale: float = 1.0
    x_factor_offset: float = 0.0
    stretch_rate_scale: float = 1.0
    stretch_rate_offset: float = 0.0


@dataclass(frozen=True)
class KinematicSummary:
    """
    Peak kinematics for one swing.

    Attributes:
        peak_pelvis_velocity: Max pelvis angular speed (deg/s, rounded)
        peak_torso_velocity: Max torso angular speed (deg/s, rounded)
        peak_x_factor: Max absolute hip-shoulder separation (deg, 1 decimal)
        stretch_rate: Max positive X-factor velocity (deg/s, rounded)
        consistency_cv: CV% of pelvis velocity through the swing (1 decimal)
        torso_pelvis_ratio: Torso / pelvis peak speed (2 decimals)
        sequencing_quality: Pelvis-to-torso sequencing grade
        pelvis_peak_frame: Frame index of the pelvis peak
        torso_peak_frame: Frame index of the torso peak
        hand_to_bat_ratio: Hand / bat speed when sensor data is merged in
    """
    peak_pelvis_velocity: float
    peak_torso_velocity: float
    peak_x_factor: float
    stretch_rate: float
    consistency_cv: float
    torso_pelvis_ratio: float
    sequencing_quality: SequencingQuality
    pelvis_peak_frame: int
    torso_peak_frame: int
    hand_to_bat_ratio: Optional[float] = None

    @property
    def sequencing_gap_frames(self) -> int:
        """Frames between the pelvis peak and the torso peak."""
        return self.torso_peak_frame - self.pelvis_peak_frame


@dataclass(frozen=True)
class ExtractionQuality:
    """
    Soft quality gate for one extraction.

    Attributes:
        is_usable: Enough valid frames and a detected swing
        issues: Human readable problems found
        valid_frame_percent: Valid frames as an integer percentage
        swing_detected: Whether a swing window was found
    """
    is_usable: bool
    valid_frame_percent: int
    swing_detected: bool
    issues: list[str] = field(default_factory=list)


@dataclass
class BodyAnalysis:
    """
    Complete result of analysing one pose batch.
    """
    rotation_frames: list[RotationFrame]
    velocity_frames: list[VelocityFrame]
    swing_window: Optional[SwingWindow]
    summary: KinematicSummary
    quality: ExtractionQuality
    frame_rate: float
    total_frames: int
