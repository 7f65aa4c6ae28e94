"""
Analysis Schemas

Pydantic models for sensor swings, session scoring, sequence analysis
and athlete calibration requests and responses.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum
from datetime import datetime

from ..domain.sequence import Segment, SegmentPeak, SequenceAnalysis, SessionSequenceSummary
from ..domain.scoring import Swing, SessionScores
from ..domain.profile import MotorProfileResult
from ..domain.athlete import CalibrationSample, CalibrationResult


class SegmentEnum(str, Enum):
    """Kinetic chain segments for API."""
    REAR_LEG = "rear_leg"
    LEAD_LEG = "lead_leg"
    TORSO = "torso"
    BOTTOM_ARM = "bottom_arm"
    TOP_ARM = "top_arm"
    BAT = "bat"


# =============================================================================
# Scoring
# =============================================================================

class SensorSwingSchema(BaseModel):
    """
    One swing as reported by a bat sensor.

    Every metric is optional; missing values are skipped by the scorer.
    """
    swing_id: Optional[str] = Field(None, description="Unique swing ID (generated if omitted)")
    bat_speed_mph: Optional[float] = Field(None, ge=0, description="Bat speed at impact")
    hand_speed_mph: Optional[float] = Field(None, ge=0, description="Peak hand speed")
    trigger_to_impact_ms: Optional[float] = Field(None, ge=0, description="Trigger to impact time")
    hand_to_bat_ratio: Optional[float] = Field(None, ge=0, description="Hand / bat speed")
    attack_angle_deg: Optional[float] = Field(None, ge=-90, le=90, description="Attack angle")
    pitch_speed_mph: Optional[float] = Field(None, ge=0, description="Incoming pitch speed")
    exit_velocity_mph: Optional[float] = Field(None, ge=0, description="Measured exit velocity")

    class Config:
        json_schema_extra = {
            "example": {
                "bat_speed_mph": 68.4,
                "hand_speed_mph": 21.9,
                "trigger_to_impact_ms": 152,
                "attack_angle_deg": 9.5
            }
        }

    def to_domain(self) -> Swing:
        fields = self.model_dump(exclude_none=True)
        return Swing(**fields)


class ScoreSessionRequest(BaseModel):
    """
    Request to compute 4B scores for a session.
    """
    session_id: str = Field(..., min_length=1, description="Session identifier")
    swings: List[SensorSwingSchema] = Field(..., min_length=1, description="Swings in the session")
    pitch_speed_mph: Optional[float] = Field(None, gt=0, description="Session pitch speed estimate")
    force_recompute: bool = Field(False, description="Ignore cached scores")

    def to_domain(self) -> list[Swing]:
        return [swing.to_domain() for swing in self.swings]


class SessionScoresResponse(BaseModel):
    """
    Brain / Body / Bat / Ball scores for a session.
    """
    session_id: Optional[str] = Field(None, description="Session identifier")
    brain: int = Field(..., ge=20, le=80, description="Timing consistency")
    body: int = Field(..., ge=20, le=80, description="Energy transfer")
    bat: int = Field(..., ge=20, le=80, description="Path consistency")
    ball: int = Field(..., ge=20, le=80, description="Output")
    composite: int = Field(..., ge=20, le=80, description="Mean of the four scores")
    weakest_link: str = Field(..., description="Lowest scoring category")
    leaks: List[str] = Field(default_factory=list, description="Energy leaks detected")
    confidence: str = Field(..., description="measured or estimated")
    swing_count: int = Field(..., ge=1, description="Swings scored")
    projected_exit_velocity: Optional[int] = Field(None, description="Exit velocity used (mph)")
    components: dict[str, float] = Field(default_factory=dict, description="Intermediate metrics")
    missing_inputs: List[str] = Field(default_factory=list, description="Categories without data")
    estimated_inputs: List[str] = Field(default_factory=list, description="Categories scored from a proxy")
    cached: bool = Field(False, description="Served from cache")

    class Config:
        json_schema_extra = {
            "example": {
                "session_id": "session-42",
                "brain": 72,
                "body": 80,
                "bat": 66,
                "ball": 71,
                "composite": 72,
                "weakest_link": "bat",
                "leaks": [],
                "confidence": "estimated",
                "swing_count": 25,
                "projected_exit_velocity": 94
            }
        }

    @classmethod
    def from_domain(cls, scores: SessionScores) -> "SessionScoresResponse":
        return cls(
            session_id=scores.session_id,
            brain=scores.brain,
            body=scores.body,
            bat=scores.bat,
            ball=scores.ball,
            composite=scores.composite,
            weakest_link=scores.weakest_link.value,
            leaks=[leak.value for leak in scores.leaks],
            confidence=scores.confidence.value,
            swing_count=scores.swing_count,
            projected_exit_velocity=scores.projected_exit_velocity,
            components=dict(scores.components),
            missing_inputs=[category.value for category in scores.missing_inputs],
            estimated_inputs=[category.value for category in scores.estimated_inputs],
            cached=scores.cached,
        )


class MotorProfileResponse(BaseModel):
    """
    Inferred motor profile for one swing.
    """
    swing_id: str = Field(..., description="Swing identifier")
    primary: str = Field(..., description="Spinner, Slingshotter, Whipper, Titan or Unknown")
    confidence: int = Field(..., ge=0, le=100, description="Points of the primary profile")
    scores: dict[str, int] = Field(default_factory=dict, description="Points per profile")
    evidence: List[str] = Field(default_factory=list, description="Reasons for the points")

    @classmethod
    def from_domain(cls, swing_id: str, result: MotorProfileResult) -> "MotorProfileResponse":
        return cls(
            swing_id=swing_id,
            primary=result.primary.value,
            confidence=result.confidence,
            scores={profile.value: points for profile, points in result.scores.items()},
            evidence=list(result.evidence),
        )


# =============================================================================
# Sequence
# =============================================================================

class SegmentPeaksRequest(BaseModel):
    """
    Peak times for every segment of one swing.
    """
    swing_id: Optional[str] = Field(None, description="Swing identifier")
    peak_times_ms: dict[SegmentEnum, float] = Field(..., description="Segment -> peak time (ms)")

    class Config:
        json_schema_extra = {
            "example": {
                "swing_id": "swing-1",
                "peak_times_ms": {
                    "rear_leg": 0, "lead_leg": 30, "torso": 60,
                    "bottom_arm": 90, "top_arm": 120, "bat": 150
                }
            }
        }

    def to_domain(self) -> dict[Segment, SegmentPeak]:
        return {
            Segment(segment.value): SegmentPeak(time_ms=time_ms)
            for segment, time_ms in self.peak_times_ms.items()
        }


class SequenceErrorSchema(BaseModel):
    segment: SegmentEnum
    expected_position: int = Field(..., ge=1, le=6)
    actual_position: int = Field(..., ge=1, le=6)
    direction: str = Field(..., description="early or late")
    description: str


class SequenceAnalysisSchema(BaseModel):
    """
    Kinetic chain firing order result for one swing.
    """
    swing_id: Optional[str] = None
    actual_order: List[SegmentEnum]
    errors: List[SequenceErrorSchema] = Field(default_factory=list)
    inversions: int = Field(..., ge=0, le=15)
    order_score: float = Field(..., ge=0, le=100)
    timing_score: float = Field(..., ge=0, le=100)
    sequence_score: int = Field(..., ge=0, le=100)
    in_sequence: bool
    summary: str

    @classmethod
    def from_domain(cls, analysis: SequenceAnalysis) -> "SequenceAnalysisSchema":
        return cls(
            swing_id=analysis.swing_id,
            actual_order=[SegmentEnum(seg.value) for seg in analysis.actual_order],
            errors=[
                SequenceErrorSchema(
                    segment=SegmentEnum(err.segment.value),
                    expected_position=err.expected_position,
                    actual_position=err.actual_position,
                    direction=err.direction.value,
                    description=err.description,
                )
                for err in analysis.errors
            ],
            inversions=analysis.inversions,
            order_score=round(analysis.order_score, 1),
            timing_score=round(analysis.timing_score, 1),
            sequence_score=analysis.sequence_score,
            in_sequence=analysis.in_sequence,
            summary=analysis.summary,
        )


class SessionSequenceSchema(BaseModel):
    swing_count: int
    average_sequence_score: int
    in_sequence_count: int
    sequence_match: bool
    representative_order: List[SegmentEnum]
    notes: str

    @classmethod
    def from_domain(cls, summary: SessionSequenceSummary) -> "SessionSequenceSchema":
        return cls(
            swing_count=summary.swing_count,
            average_sequence_score=summary.average_sequence_score,
            in_sequence_count=summary.in_sequence_count,
            sequence_match=summary.sequence_match,
            representative_order=[SegmentEnum(seg.value) for seg in summary.representative_order],
            notes=summary.notes,
        )


# =============================================================================
# Calibration
# =============================================================================

class CalibrationSampleSchema(BaseModel):
    """One historical swing: sub-scores plus measured bat speed."""
    brain: float = Field(..., ge=0, le=100)
    body: float = Field(..., ge=0, le=100)
    bat: float = Field(..., ge=0, le=100)
    ball: float = Field(..., ge=0, le=100)
    bat_speed_mph: float = Field(..., gt=0)

    def to_domain(self) -> CalibrationSample:
        return CalibrationSample(
            brain=self.brain,
            body=self.body,
            bat=self.bat,
            ball=self.ball,
            bat_speed_mph=self.bat_speed_mph,
        )


class CalibrateAthleteRequest(BaseModel):
    athlete_id: str = Field(..., min_length=1, description="Athlete identifier")
    samples: List[CalibrationSampleSchema] = Field(..., description="Historical swings")

    def to_domain(self) -> list[CalibrationSample]:
        return [sample.to_domain() for sample in self.samples]


class AthleteModelResponse(BaseModel):
    """
    Fitted athlete model with a readable interpretation.
    """
    athlete_id: str
    coefficients: dict[str, float] = Field(..., description="beta_0 .. beta_4")
    r_squared: float = Field(..., ge=0, le=1)
    sample_count: int
    calibrated_at: datetime
    expires_at: datetime
    baseline_bat_speed: float = Field(..., description="Intercept (mph)")
    contributions: dict[str, str] = Field(..., description="mph per 10 points, per category")
    fit_quality: str = Field(..., description="Strong, Moderate or Weak")

    class Config:
        json_schema_extra = {
            "example": {
                "athlete_id": "athlete-7",
                "coefficients": {"beta_0": 31.2, "beta_1": 0.08, "beta_2": 0.21,
                                 "beta_3": 0.05, "beta_4": 0.12},
                "r_squared": 0.74,
                "sample_count": 40,
                "baseline_bat_speed": 31.2,
                "contributions": {"Body": "+2.1 mph per 10 points in Body"},
                "fit_quality": "Strong"
            }
        }

    @classmethod
    def from_domain(cls, result: CalibrationResult) -> "AthleteModelResponse":
        model = result.model
        return cls(
            athlete_id=model.athlete_id,
            coefficients={f"beta_{i}": value for i, value in enumerate(model.coefficients)},
            r_squared=model.r_squared,
            sample_count=model.sample_count,
            calibrated_at=model.calibrated_at,
            expires_at=model.expires_at,
            baseline_bat_speed=result.interpretation.baseline_bat_speed,
            contributions=dict(result.interpretation.contributions),
            fit_quality=result.interpretation.model_quality.value,
        )
