"""
Domain Models

Pure data structures for swing telemetry, kinematics, sequencing,
scores and athlete models.
No external dependencies - just Python dataclasses and enums.
"""

from .pose import BodyPart, Handedness, PoseLandmark, PoseFrame, LANDMARK_COUNT
from .kinematics import (
    RotationFrame,
    VelocityFrame,
    SwingWindow,
    KinematicSummary,
    ExtractionQuality,
    BodyAnalysis,
    CalibrationCoefficients,
    SequencingQuality,
)
from .sequence import (
    Segment,
    IDEAL_SEQUENCE,
    ErrorDirection,
    SegmentPeak,
    SequenceError,
    SequenceAnalysis,
    SessionSequenceSummary,
)
from .scoring import Category, LeakType, ScoreConfidence, Swing, SessionScores
from .profile import MotorProfile, MotorProfileResult
from .athlete import (
    AthleteModel,
    CalibrationSample,
    CalibrationResult,
    ModelInterpretation,
    ModelQuality,
)

__all__ = [
    "BodyPart",
    "Handedness",
    "PoseLandmark",
    "PoseFrame",
    "LANDMARK_COUNT",
    "RotationFrame",
    "VelocityFrame",
    "SwingWindow",
    "KinematicSummary",
    "ExtractionQuality",
    "BodyAnalysis",
    "CalibrationCoefficients",
    "SequencingQuality",
    "Segment",
    "IDEAL_SEQUENCE",
    "ErrorDirection",
    "SegmentPeak",
    "SequenceError",
    "SequenceAnalysis",
    "SessionSequenceSummary",
    "Category",
    "LeakType",
    "ScoreConfidence",
    "Swing",
    "SessionScores",
    "MotorProfile",
    "MotorProfileResult",
    "AthleteModel",
    "CalibrationSample",
    "CalibrationResult",
    "ModelInterpretation",
    "ModelQuality",
]
