"""
4B Scoring Domain Models

Swing records fed to the composite scorer and the session-level
Brain / Body / Bat / Ball result.
"""

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .kinematics import KinematicSummary
from .sequence import SequenceAnalysis

# Reference values normalizing body-to-bat efficiency
REFERENCE_PELVIS_VELOCITY = 750.0   # deg/s, elite pelvis
REFERENCE_BAT_SPEED_MPH = 70.0


class Category(Enum):
    """
    The four scoring categories.

    Declaration order doubles as tie-break precedence for the weakest
    link: Brain beats Body beats Bat beats Ball.
    """
    BRAIN = "brain"
    BODY = "body"
    BAT = "bat"
    BALL = "ball"

    @property
    def display_name(self) -> str:
        return self.value.title()


class LeakType(Enum):
    """Energy leaks flagged by the scorer."""
    TIMING_LEAK = "TIMING_LEAK"
    POWER_LEAK = "POWER_LEAK"


class ScoreConfidence(Enum):
    """
    Whether scores rest on measured data or on heuristics.

    - MEASURED: Ball uses measured exit velocity and every category had data
    - ESTIMATED: at least one category fell back to a projection or default
    """
    MEASURED = "measured"
    ESTIMATED = "estimated"


@dataclass
class Swing:
    """
    One swing's raw sensor fields and/or derived analyses.

    Attributes:
        swing_id: Unique identifier
        bat_speed_mph: Bat speed at impact
        hand_speed_mph: Peak hand speed
        trigger_to_impact_ms: Time from swing trigger to impact
        hand_to_bat_ratio: Hand speed / bat speed if reported by the sensor
        attack_angle_deg: Bat path angle at impact
        pitch_speed_mph: Incoming pitch speed, if known
        exit_velocity_mph: Measured ball exit velocity, if ball flight data exists
        kinematics: Pose-derived kinematic summary
        sequence: Kinetic chain sequence analysis
    """
    swing_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    bat_speed_mph: Optional[float] = None
    hand_speed_mph: Optional[float] = None
    trigger_to_impact_ms: Optional[float] = None
    hand_to_bat_ratio: Optional[float] = None
    attack_angle_deg: Optional[float] = None
    pitch_speed_mph: Optional[float] = None
    exit_velocity_mph: Optional[float] = None
    kinematics: Optional[KinematicSummary] = None
    sequence: Optional[SequenceAnalysis] = None

    @property
    def effective_hand_to_bat_ratio(self) -> Optional[float]:
        """
        Reported ratio, else hand / bat speed derived from the raw speeds,
        else a ratio merged into the kinematic summary.
        """
        if self.hand_to_bat_ratio is not None:
            return self.hand_to_bat_ratio
        if self.hand_speed_mph and self.bat_speed_mph and self.bat_speed_mph > 0:
            # 2 decimals, halves round up
            return math.floor(self.hand_speed_mph / self.bat_speed_mph * 100 + 0.5) / 100
        if self.kinematics is not None:
            return self.kinematics.hand_to_bat_ratio
        return None

    @property
    def has_video_data(self) -> bool:
        return self.kinematics is not None

    @property
    def has_sensor_data(self) -> bool:
        return self.bat_speed_mph is not None

    @property
    def body_to_bat_efficiency(self) -> Optional[float]:
        """
        Bat speed relative to pelvis speed, each normalized to a reference.

        1.0 means the bat is as fast, relative to 70 mph, as the pelvis is
        relative to 750 deg/s. Needs both video and sensor data.
        """
        if not (self.has_video_data and self.bat_speed_mph):
            return None
        pelvis = self.kinematics.peak_pelvis_velocity
        if pelvis <= 0 or self.bat_speed_mph <= 0:
            return None
        efficiency = (self.bat_speed_mph / REFERENCE_BAT_SPEED_MPH) / (pelvis / REFERENCE_PELVIS_VELOCITY)
        return math.floor(efficiency * 100 + 0.5) / 100


@dataclass
class SessionScores:
    """
    Composite 4B result for a session.

    Attributes:
        brain: Timing consistency score (20-80)
        body: Energy transfer score (20-80)
        bat: Path consistency score (20-80)
        ball: Output score (20-80)
        composite: Rounded mean of the four scores
        weakest_link: Lowest scoring category
        leaks: Energy leaks detected
        confidence: Measured vs estimated
        swing_count: Swings scored
        projected_exit_velocity: Exit velocity used for Ball (mph, rounded)
        components: Intermediate metrics (timing CV, mean ratio, ...)
        missing_inputs: Categories scored without any input data
        estimated_inputs: Categories scored from a proxy (e.g. body consistency for Brain)
        session_id: Session the scores belong to
        cached: True when returned from the session cache
    """
    brain: int
    body: int
    bat: int
    ball: int
    composite: int
    weakest_link: Category
    leaks: list[LeakType]
    confidence: ScoreConfidence
    swing_count: int
    projected_exit_velocity: Optional[int] = None
    components: dict[str, float] = field(default_factory=dict)
    missing_inputs: list[Category] = field(default_factory=list)
    estimated_inputs: list[Category] = field(default_factory=list)
    session_id: Optional[str] = None
    cached: bool = False

    def score_for(self, category: Category) -> int:
        return getattr(self, category.value)

    def as_dict(self) -> dict[Category, int]:
        return {category: self.score_for(category) for category in Category}
