"""
Athlete Model Domain

Per-athlete linear model relating the four category sub-scores to
measured bat speed:

    bat_speed = b0 + b1*brain + b2*body + b3*bat + b4*ball
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ModelQuality(Enum):
    STRONG = "Strong"
    MODERATE = "Moderate"
    WEAK = "Weak"

    @classmethod
    def from_r_squared(cls, r_squared: float) -> "ModelQuality":
        if r_squared > 0.7:
            return cls.STRONG
        if r_squared > 0.4:
            return cls.MODERATE
        return cls.WEAK


@dataclass(frozen=True)
class CalibrationSample:
    """
    One historical swing used for calibration.

    Attributes:
        brain: Brain sub-score
        body: Body sub-score
        bat: Bat sub-score
        ball: Ball sub-score
        bat_speed_mph: Measured bat speed for that swing
    """
    brain: Optional[float]
    body: Optional[float]
    bat: Optional[float]
    ball: Optional[float]
    bat_speed_mph: Optional[float]

    @property
    def is_complete(self) -> bool:
        return None not in (self.brain, self.body, self.bat, self.ball, self.bat_speed_mph)

    def features(self) -> list[float]:
        """Design-matrix row: intercept followed by the four sub-scores."""
        return [1.0, self.brain, self.body, self.bat, self.ball]


@dataclass(frozen=True)
class AthleteModel:
    """
    Fitted bat speed model for one athlete.

    Attributes:
        athlete_id: Owner of the model
        beta_0: Intercept (baseline bat speed, mph)
        beta_1: mph per Brain point
        beta_2: mph per Body point
        beta_3: mph per Bat point
        beta_4: mph per Ball point
        r_squared: Goodness of fit in [0, 1]
        sample_count: Swings used for the fit
        calibrated_at: When the model was fitted
        expires_at: When the model stops being live
    """
    athlete_id: str
    beta_0: float
    beta_1: float
    beta_2: float
    beta_3: float
    beta_4: float
    r_squared: float
    sample_count: int
    calibrated_at: datetime
    expires_at: datetime

    @property
    def coefficients(self) -> tuple[float, float, float, float, float]:
        return (self.beta_0, self.beta_1, self.beta_2, self.beta_3, self.beta_4)

    def predict_bat_speed(self, brain: float, body: float, bat: float, ball: float) -> float:
        return (
            self.beta_0
            + self.beta_1 * brain
            + self.beta_2 * body
            + self.beta_3 * bat
            + self.beta_4 * ball
        )

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class ModelInterpretation:
    """
    Human readable reading of an athlete model.

    Attributes:
        baseline_bat_speed: Intercept in mph
        contributions: One line per category, e.g. "+1.2 mph per 10 points in Body"
        model_quality: Strong / Moderate / Weak from R²
    """
    baseline_bat_speed: float
    contributions: dict[str, str]
    model_quality: ModelQuality


@dataclass(frozen=True)
class CalibrationResult:
    model: AthleteModel
    interpretation: ModelInterpretation
