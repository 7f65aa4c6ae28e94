"""
Kinetic Chain Sequence Models

Segments of the hitting kinetic chain, their peak timings and the
result of comparing the observed firing order against the ideal one.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Segment(Enum):
    """
    Kinetic chain segments, declared in ideal firing order.
    """
    REAR_LEG = "rear_leg"
    LEAD_LEG = "lead_leg"
    TORSO = "torso"
    BOTTOM_ARM = "bottom_arm"
    TOP_ARM = "top_arm"
    BAT = "bat"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


IDEAL_SEQUENCE: tuple[Segment, ...] = tuple(Segment)


class ErrorDirection(Enum):
    EARLY = "early"
    LATE = "late"


@dataclass(frozen=True)
class SegmentPeak:
    """
    When a segment reached its peak angular speed.

    Attributes:
        time_ms: Peak time in milliseconds from capture start
        value: Peak angular speed (deg/s) if known
    """
    time_ms: float
    value: Optional[float] = None


@dataclass(frozen=True)
class SequenceError:
    """
    A segment that fired out of its ideal position.

    Positions are 1-based.
    """
    segment: Segment
    expected_position: int
    actual_position: int
    direction: ErrorDirection

    @property
    def description(self) -> str:
        return (
            f"{self.segment.display_name} fired {self.direction.value} "
            f"(position {self.actual_position} instead of {self.expected_position})"
        )


@dataclass
class SequenceAnalysis:
    """
    Firing order analysis for one swing.

    Attributes:
        swing_id: Identifier of the analysed swing
        segment_peaks: Peak record per segment
        ideal_order: The ideal firing order
        actual_order: Segments sorted by peak time
        errors: Segments out of position
        inversions: Pairs fired in reverse relative order
        order_score: 0-100, 100 means no inversions
        timing_score: 0-100, penalizes uneven inter-peak gaps
        sequence_score: Weighted blend of order and timing, rounded
        in_sequence: True when there are no inversions
        summary: One-line human readable verdict
    """
    swing_id: Optional[str]
    segment_peaks: dict[Segment, SegmentPeak]
    ideal_order: tuple[Segment, ...]
    actual_order: tuple[Segment, ...]
    errors: list[SequenceError]
    inversions: int
    order_score: float
    timing_score: float
    sequence_score: int
    in_sequence: bool
    summary: str


@dataclass
class SessionSequenceSummary:
    """
    Roll-up of sequence analyses across a session.
    """
    swing_count: int
    average_sequence_score: int
    in_sequence_count: int
    sequence_match: bool
    representative_order: tuple[Segment, ...]
    notes: str
    in_sequence_rate: float = field(init=False)

    def __post_init__(self):
        self.in_sequence_rate = (
            self.in_sequence_count / self.swing_count if self.swing_count else 0.0
        )
