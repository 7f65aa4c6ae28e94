"""
Boundary Schemas

Pydantic models for request/response validation.
"""

from .pose import (
    LandmarkSchema,
    PoseFrameSchema,
    CalibrationCoefficientsSchema,
    PoseBatchRequest,
    KinematicSummarySchema,
    QualitySchema,
    BodyAnalysisResponse,
)

from .analysis import (
    SegmentEnum,
    SensorSwingSchema,
    ScoreSessionRequest,
    SessionScoresResponse,
    MotorProfileResponse,
    SegmentPeaksRequest,
    SequenceErrorSchema,
    SequenceAnalysisSchema,
    SessionSequenceSchema,
    CalibrationSampleSchema,
    CalibrateAthleteRequest,
    AthleteModelResponse,
)

__all__ = [
    # Pose schemas
    "LandmarkSchema",
    "PoseFrameSchema",
    "CalibrationCoefficientsSchema",
    "PoseBatchRequest",
    "KinematicSummarySchema",
    "QualitySchema",
    "BodyAnalysisResponse",
    # Analysis schemas
    "SegmentEnum",
    "SensorSwingSchema",
    "ScoreSessionRequest",
    "SessionScoresResponse",
    "MotorProfileResponse",
    "SegmentPeaksRequest",
    "SequenceErrorSchema",
    "SequenceAnalysisSchema",
    "SessionSequenceSchema",
    "CalibrationSampleSchema",
    "CalibrateAthleteRequest",
    "AthleteModelResponse",
]
