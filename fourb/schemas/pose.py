"""
Pose Schemas

Pydantic models for pose batch input and kinematics output.
These define the JSON structure exchanged with pose estimation clients.
"""

from pydantic import BaseModel, Field
from typing import Optional, List

from ..domain.pose import LANDMARK_COUNT, PoseFrame, PoseLandmark
from ..domain.kinematics import BodyAnalysis, CalibrationCoefficients, KinematicSummary, ExtractionQuality


class LandmarkSchema(BaseModel):
    """
    Single body landmark.

    Coordinates are normalized to the image; points outside the frame
    may fall slightly outside 0-1.
    """
    x: float = Field(..., description="Horizontal position (0=left, 1=right)")
    y: float = Field(..., description="Vertical position (0=top, 1=bottom)")
    z: float = Field(0.0, description="Depth (negative=closer to camera)")
    visibility: float = Field(..., ge=0.0, le=1.0, description="Detection confidence")

    class Config:
        json_schema_extra = {
            "example": {
                "x": 0.45,
                "y": 0.32,
                "z": -0.15,
                "visibility": 0.95
            }
        }

    def to_domain(self) -> PoseLandmark:
        return PoseLandmark(x=self.x, y=self.y, z=self.z, visibility=self.visibility)


class PoseFrameSchema(BaseModel):
    """
    One frame of pose estimation output.

    Contains all 33 MediaPipe landmarks in index order.
    """
    landmarks: List[LandmarkSchema] = Field(
        ..., min_length=LANDMARK_COUNT, max_length=LANDMARK_COUNT, description="33 body landmarks"
    )
    timestamp_ms: float = Field(..., ge=0, description="Capture timestamp in milliseconds")
    frame_number: int = Field(..., ge=0, description="Sequential frame number")

    def to_domain(self) -> PoseFrame:
        return PoseFrame(
            landmarks=tuple(lm.to_domain() for lm in self.landmarks),
            timestamp_ms=self.timestamp_ms,
            frame_number=self.frame_number,
        )


class CalibrationCoefficientsSchema(BaseModel):
    """Linear alignment to a reference capture system (identity by default)."""
    pelvis_scale: float = 1.0
    pelvis_offset: float = 0.0
    torso_scale: float = 1.0
    torso_offset: float = 0.0
    x_factor_scale: float = 1.0
    x_factor_offset: float = 0.0
    stretch_rate_scale: float = 1.0
    stretch_rate_offset: float = 0.0

    def to_domain(self) -> CalibrationCoefficients:
        return CalibrationCoefficients(**self.model_dump())


class PoseBatchRequest(BaseModel):
    """
    Request to extract kinematics from one swing's pose frames.
    """
    frames: List[PoseFrameSchema] = Field(..., min_length=3, description="Pose frames in capture order")
    frame_rate: float = Field(..., gt=0, description="Capture rate in frames per second")
    camera_angle_deg: Optional[float] = Field(
        None, ge=0, lt=90, description="Camera offset from the ideal view"
    )
    calibration: Optional[CalibrationCoefficientsSchema] = Field(
        None, description="Alignment to a reference capture system"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "frames": [{"landmarks": ["...33 landmarks..."], "timestamp_ms": 0, "frame_number": 0}],
                "frame_rate": 120.0,
                "camera_angle_deg": 15.0
            }
        }

    def to_domain(self) -> list[PoseFrame]:
        return [frame.to_domain() for frame in self.frames]


# =============================================================================
# Kinematics Output
# =============================================================================

class KinematicSummarySchema(BaseModel):
    """
    Peak kinematics for one swing.
    """
    peak_pelvis_velocity: float = Field(..., description="Peak pelvis angular speed (deg/s)")
    peak_torso_velocity: float = Field(..., description="Peak torso angular speed (deg/s)")
    peak_x_factor: float = Field(..., description="Peak hip-shoulder separation (deg)")
    stretch_rate: float = Field(..., description="Peak separation rate (deg/s)")
    consistency_cv: float = Field(..., description="Pelvis velocity CV (%)")
    torso_pelvis_ratio: float = Field(..., description="Torso / pelvis peak speed")
    sequencing_quality: str = Field(..., description="good, average or poor")
    sequencing_gap_frames: int = Field(..., description="Frames from pelvis peak to torso peak")
    hand_to_bat_ratio: Optional[float] = Field(None, description="Hand / bat speed when sensor data exists")

    class Config:
        json_schema_extra = {
            "example": {
                "peak_pelvis_velocity": 612,
                "peak_torso_velocity": 845,
                "peak_x_factor": 38.5,
                "stretch_rate": 410,
                "consistency_cv": 22.4,
                "torso_pelvis_ratio": 1.38,
                "sequencing_quality": "good",
                "sequencing_gap_frames": 4
            }
        }

    @classmethod
    def from_domain(cls, summary: KinematicSummary) -> "KinematicSummarySchema":
        return cls(
            peak_pelvis_velocity=summary.peak_pelvis_velocity,
            peak_torso_velocity=summary.peak_torso_velocity,
            peak_x_factor=summary.peak_x_factor,
            stretch_rate=summary.stretch_rate,
            consistency_cv=summary.consistency_cv,
            torso_pelvis_ratio=summary.torso_pelvis_ratio,
            sequencing_quality=summary.sequencing_quality.value,
            sequencing_gap_frames=summary.sequencing_gap_frames,
            hand_to_bat_ratio=summary.hand_to_bat_ratio,
        )


class QualitySchema(BaseModel):
    is_usable: bool = Field(..., description="Whether the extraction can be trusted")
    valid_frame_percent: int = Field(..., ge=0, le=100, description="Valid frames (%)")
    swing_detected: bool = Field(..., description="Whether a swing window was found")
    issues: List[str] = Field(default_factory=list, description="Problems found")

    @classmethod
    def from_domain(cls, quality: ExtractionQuality) -> "QualitySchema":
        return cls(
            is_usable=quality.is_usable,
            valid_frame_percent=quality.valid_frame_percent,
            swing_detected=quality.swing_detected,
            issues=list(quality.issues),
        )


class BodyAnalysisResponse(BaseModel):
    """
    Kinematics extraction result.
    """
    summary: KinematicSummarySchema
    quality: QualitySchema
    swing_window: Optional[dict[str, int]] = Field(
        None, description="start / stride / contact / end frame indices"
    )
    frame_rate: float
    total_frames: int

    @classmethod
    def from_domain(cls, analysis: BodyAnalysis) -> "BodyAnalysisResponse":
        window = analysis.swing_window
        return cls(
            summary=KinematicSummarySchema.from_domain(analysis.summary),
            quality=QualitySchema.from_domain(analysis.quality),
            swing_window=(
                {"start": window.start, "stride": window.stride,
                 "contact": window.contact, "end": window.end}
                if window else None
            ),
            frame_rate=analysis.frame_rate,
            total_frames=analysis.total_frames,
        )
