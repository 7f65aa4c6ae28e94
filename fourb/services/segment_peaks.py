"""
Segment Peak Detector

Finds when each kinetic chain segment reaches its peak angular speed
from pose frames, producing the peak timings the sequence analyzer
consumes.
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from ..config import EngineSettings, get_settings
from ..domain.pose import BodyPart, Handedness, PoseFrame
from ..domain.kinematics import SwingWindow
from ..domain.sequence import Segment, SegmentPeak, IDEAL_SEQUENCE
from ..errors import InvalidInputError
from .kinematics_extractor import KinematicsExtractor

logger = logging.getLogger(__name__)


# Landmark line (from, to) tracked for each segment of a right-handed batter.
SEGMENT_LANDMARKS: dict[Segment, tuple[BodyPart, BodyPart]] = {
    Segment.REAR_LEG: (BodyPart.RIGHT_HIP, BodyPart.RIGHT_KNEE),
    Segment.LEAD_LEG: (BodyPart.LEFT_HIP, BodyPart.LEFT_KNEE),
    Segment.TORSO: (BodyPart.RIGHT_SHOULDER, BodyPart.LEFT_SHOULDER),
    Segment.BOTTOM_ARM: (BodyPart.LEFT_SHOULDER, BodyPart.LEFT_WRIST),
    Segment.TOP_ARM: (BodyPart.RIGHT_SHOULDER, BodyPart.RIGHT_WRIST),
    Segment.BAT: (BodyPart.LEFT_WRIST, BodyPart.LEFT_INDEX),
}


class SegmentPeakDetector:
    """
    Detects per-segment peak angular speed timings.

    Each segment is tracked as the angle of a landmark line. Its angular
    speed goes through the same central difference and smoothing as the
    pelvis / torso velocities, and the peak frame's timestamp becomes
    the segment's peak time.

    The bat is approximated by the lead hand unless a sensor supplies
    the bat's peak time directly.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or get_settings()

    @staticmethod
    def landmarks_for(segment: Segment, handedness: Handedness = Handedness.RIGHT) -> tuple[BodyPart, BodyPart]:
        start, end = SEGMENT_LANDMARKS[segment]
        if handedness is Handedness.LEFT:
            return start.mirrored(), end.mirrored()
        return start, end

    def segment_angles(
        self,
        frames: Sequence[PoseFrame],
        segment: Segment,
        handedness: Handedness = Handedness.RIGHT,
    ) -> list[Optional[float]]:
        """Line angle per frame, None where either landmark is not visible."""
        start_part, end_part = self.landmarks_for(segment, handedness)
        threshold = self.settings.min_visibility

        angles = []
        for frame in frames:
            start = frame.get_landmark(start_part)
            end = frame.get_landmark(end_part)
            if start is None or end is None:
                raise InvalidInputError(
                    f"Frame {frame.frame_number} is missing landmarks for {segment.value}"
                )
            if start.is_visible(threshold) and end.is_visible(threshold):
                angles.append(KinematicsExtractor.line_angle(start, end))
            else:
                angles.append(None)
        return angles

    def segment_speeds(self, angles: Sequence[Optional[float]], frame_rate: float) -> np.ndarray:
        """Smoothed angular speed (deg/s) from per-frame angles."""
        n = len(angles)
        speeds = np.zeros(n)
        for i in range(1, n - 1):
            prev, nxt = angles[i - 1], angles[i + 1]
            if prev is None or nxt is None or angles[i] is None:
                continue
            delta = KinematicsExtractor.wrap_angle(nxt - prev)
            speeds[i] = abs(delta) * frame_rate / 2
        return KinematicsExtractor.moving_average(speeds, self.settings.velocity_smoothing_window)

    def detect(
        self,
        frames: Sequence[PoseFrame],
        frame_rate: float,
        window: Optional[SwingWindow] = None,
        handedness: Handedness = Handedness.RIGHT,
        bat_peak_time_ms: Optional[float] = None,
    ) -> dict[Segment, SegmentPeak]:
        """
        Peak time and speed for every segment.

        Args:
            frames: Pose frames in capture order
            frame_rate: Capture rate in frames per second
            window: Restrict the search to this swing window
            handedness: Batting side
            bat_peak_time_ms: Sensor-measured bat peak time, overrides the hand proxy

        Returns:
            Mapping of every segment to its SegmentPeak
        """
        if len(frames) < 3:
            raise InvalidInputError(f"Need at least 3 pose frames, got {len(frames)}")
        if frame_rate is None or not math.isfinite(frame_rate) or frame_rate <= 0:
            raise InvalidInputError(f"Frame rate must be positive, got {frame_rate}")

        lo, hi = (window.start, window.end + 1) if window else (0, len(frames))

        peaks = {}
        for segment in IDEAL_SEQUENCE:
            speeds = self.segment_speeds(self.segment_angles(frames, segment, handedness), frame_rate)
            idx = lo + int(np.argmax(speeds[lo:hi]))
            peaks[segment] = SegmentPeak(
                time_ms=float(frames[idx].timestamp_ms),
                value=float(speeds[idx]),
            )

        if bat_peak_time_ms is not None:
            peaks[Segment.BAT] = SegmentPeak(time_ms=float(bat_peak_time_ms))

        logger.debug(
            "Segment peaks: "
            + ", ".join(f"{seg.value}={peak.time_ms:.0f}ms" for seg, peak in peaks.items())
        )
        return peaks
