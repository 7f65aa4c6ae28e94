"""
Sequence Analyzer Service

Compares the order in which kinetic chain segments reach peak speed
against the ideal proximal-to-distal order and scores how closely the
swing follows it.
"""

import logging
import math
from typing import Mapping, Optional, Sequence

import numpy as np

from ..domain.sequence import (
    Segment,
    IDEAL_SEQUENCE,
    ErrorDirection,
    SegmentPeak,
    SequenceError,
    SequenceAnalysis,
    SessionSequenceSummary,
)
from ..errors import InvalidInputError
from . import stats

logger = logging.getLogger(__name__)


class SequenceAnalyzer:
    """
    Scores kinetic chain firing order.

    sequence_score = 0.7 * order_score + 0.3 * timing_score

    - order_score: 100 * (1 - inversions / max_inversions)
    - timing_score: 100 - 50 * CV of the gaps between consecutive peaks

    Usage:
        analyzer = SequenceAnalyzer()
        result = analyzer.analyze(peaks, swing_id="swing-1")
        print(result.summary)
    """

    ORDER_WEIGHT = 0.7
    TIMING_WEIGHT = 0.3
    TIMING_CV_PENALTY = 50.0

    def __init__(self, ideal_order: Sequence[Segment] = IDEAL_SEQUENCE):
        self.ideal_order = tuple(ideal_order)

    # -------------------------------------------------------------------------
    # Scoring Components
    # -------------------------------------------------------------------------

    def count_inversions(self, actual_order: Sequence[Segment]) -> int:
        """
        Number of segment pairs fired in reverse relative order.

        This is the Kendall tau distance between the actual and the
        ideal order.
        """
        ideal_index = {segment: i for i, segment in enumerate(self.ideal_order)}
        positions = [ideal_index[segment] for segment in actual_order]

        inversions = 0
        for i in range(len(positions)):
            for j in range(i + 1, len(positions)):
                if positions[i] > positions[j]:
                    inversions += 1
        return inversions

    def order_score(self, inversions: int) -> float:
        n = len(self.ideal_order)
        max_inversions = n * (n - 1) // 2
        if max_inversions == 0:
            return 100.0
        return (1 - inversions / max_inversions) * 100

    @classmethod
    def timing_score(cls, peak_times: Sequence[float]) -> float:
        """
        Score evenness of the gaps between consecutive peaks.

        Args:
            peak_times: Peak times in actual firing order

        Returns:
            100 for perfectly even gaps, dropping 50 points per unit CV, floored at 0
        """
        intervals = np.diff(np.asarray(peak_times, dtype=float))
        cv = stats.coefficient_of_variation(intervals)
        return max(0.0, 100.0 - cls.TIMING_CV_PENALTY * cv)

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    def analyze(
        self,
        segment_peaks: Mapping[Segment, SegmentPeak],
        swing_id: Optional[str] = None,
    ) -> SequenceAnalysis:
        """
        Analyze one swing's segment peak timings.

        Segments are sorted by peak time; ties keep their ideal order.

        Raises:
            InvalidInputError: a segment is missing or has a non-finite time
        """
        self._validate(segment_peaks)

        actual_order = tuple(sorted(self.ideal_order, key=lambda seg: segment_peaks[seg].time_ms))

        errors = []
        for actual_idx, segment in enumerate(actual_order):
            ideal_idx = self.ideal_order.index(segment)
            if actual_idx != ideal_idx:
                errors.append(SequenceError(
                    segment=segment,
                    expected_position=ideal_idx + 1,
                    actual_position=actual_idx + 1,
                    direction=ErrorDirection.EARLY if actual_idx < ideal_idx else ErrorDirection.LATE,
                ))

        inversions = self.count_inversions(actual_order)
        order = self.order_score(inversions)
        timing = self.timing_score([segment_peaks[seg].time_ms for seg in actual_order])
        score = stats.round_score(self.ORDER_WEIGHT * order + self.TIMING_WEIGHT * timing)
        in_sequence = inversions == 0

        analysis = SequenceAnalysis(
            swing_id=swing_id,
            segment_peaks=dict(segment_peaks),
            ideal_order=self.ideal_order,
            actual_order=actual_order,
            errors=errors,
            inversions=inversions,
            order_score=order,
            timing_score=timing,
            sequence_score=score,
            in_sequence=in_sequence,
            summary=self._summarize(actual_order, errors, in_sequence),
        )
        logger.debug(f"Sequence for {swing_id}: score {score}, {inversions} inversions")
        return analysis

    def summarize_session(self, analyses: Sequence[SequenceAnalysis]) -> SessionSequenceSummary:
        """Roll per-swing analyses up into a session verdict."""
        if not analyses:
            raise InvalidInputError("No sequence analyses to summarize")

        count = len(analyses)
        in_sequence = sum(1 for a in analyses if a.in_sequence)
        average = stats.round_score(stats.mean([a.sequence_score for a in analyses]))

        return SessionSequenceSummary(
            swing_count=count,
            average_sequence_score=average,
            in_sequence_count=in_sequence,
            sequence_match=in_sequence == count,
            representative_order=analyses[0].actual_order,
            notes=f"Analyzed {count} swings. {in_sequence}/{count} in sequence.",
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _validate(self, segment_peaks: Mapping[Segment, SegmentPeak]) -> None:
        missing = [seg.value for seg in self.ideal_order if seg not in segment_peaks]
        if missing:
            raise InvalidInputError(f"Missing peak times for segments: {', '.join(missing)}")
        for segment in self.ideal_order:
            time_ms = segment_peaks[segment].time_ms
            if time_ms is None or not math.isfinite(time_ms):
                raise InvalidInputError(f"Peak time for {segment.value} is not a finite number")

    @staticmethod
    def _summarize(
        actual_order: Sequence[Segment],
        errors: Sequence[SequenceError],
        in_sequence: bool,
    ) -> str:
        if in_sequence:
            chain = " → ".join(seg.display_name for seg in actual_order)
            return f"Body-to-Bat sequence: in sequence ({chain})."

        summary = "Body-to-Bat sequence: out of sequence."
        early = [e.segment.display_name for e in errors if e.direction is ErrorDirection.EARLY]
        late = [e.segment.display_name for e in errors if e.direction is ErrorDirection.LATE]
        if early:
            summary += f" {', '.join(early)} fired early."
        if late:
            summary += f" {', '.join(late)} fired late."
        return summary
