"""
Motor Profile Domain Models

Heuristic classification of how a hitter produces bat speed.
"""

from dataclasses import dataclass, field
from enum import Enum


class MotorProfile(Enum):
    """
    Movement archetypes.

    - SPINNER: rotational power, hard early hip turn
    - SLINGSHOTTER: elastic loading through hip-shoulder stretch
    - WHIPPER: hand and bat speed dominant
    - TITAN: strength based, steady and efficient
    - UNKNOWN: no archetype scored high enough
    """
    SPINNER = "Spinner"
    SLINGSHOTTER = "Slingshotter"
    WHIPPER = "Whipper"
    TITAN = "Titan"
    UNKNOWN = "Unknown"


@dataclass
class MotorProfileResult:
    """
    Result of motor profile inference for one swing.

    Attributes:
        primary: Highest scoring archetype, UNKNOWN below the threshold
        confidence: 0-100, the primary archetype's points
        scores: Points per archetype
        evidence: Human readable reasons for the points awarded
    """
    primary: MotorProfile
    confidence: int
    scores: dict[MotorProfile, int]
    evidence: list[str] = field(default_factory=list)
