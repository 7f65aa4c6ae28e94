"""
Kinematics Extractor Service

Turns a sequence of pose frames into pelvis / torso rotation, angular
velocities, a detected swing window and a peak kinematics summary.

All angles are in degrees, all velocities in degrees per second.
Pure numpy - the pose frames come from an upstream estimator.
"""

import logging
import math
from dataclasses import replace
from typing import Optional, Sequence

import numpy as np

from ..config import EngineSettings, get_settings
from ..domain.pose import PoseFrame, PoseLandmark, BodyPart
from ..domain.kinematics import (
    RotationFrame,
    VelocityFrame,
    SwingWindow,
    KinematicSummary,
    ExtractionQuality,
    BodyAnalysis,
    CalibrationCoefficients,
    SequencingQuality,
)
from ..errors import InvalidInputError
from . import stats

logger = logging.getLogger(__name__)

MIN_FRAMES = 3

ISSUE_LOW_DETECTION = "Low pose detection rate - check video quality and framing"
ISSUE_NO_SWING = "Could not detect swing - ensure full swing is visible"
ISSUE_LOW_PELVIS = "Low pelvis velocity detected - may not be a full swing"


class KinematicsExtractor:
    """
    Extracts rotational kinematics from pose frames.

    Pipeline:
    1. Pelvis (hip line) and torso (shoulder line) angle per frame
    2. Central-difference angular velocity
    3. Centered moving-average smoothing
    4. Swing window detection from pelvis onset and torso peak
    5. Peak summary and quality gate

    Usage:
        extractor = KinematicsExtractor()
        analysis = extractor.analyze(frames, frame_rate=120)
        if analysis.quality.is_usable:
            print(analysis.summary.peak_pelvis_velocity)
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or get_settings()

    # -------------------------------------------------------------------------
    # Angle Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def line_angle(start: PoseLandmark, end: PoseLandmark) -> float:
        """
        Angle of the line from start to end, measured from the image x-axis.

        Returns:
            Angle in degrees in (-180, 180]
        """
        return math.degrees(math.atan2(end.y - start.y, end.x - start.x))

    @staticmethod
    def wrap_angle(delta: float) -> float:
        """Wrap an angle difference into [-180, 180)."""
        return (delta + 180.0) % 360.0 - 180.0

    @classmethod
    def unwrap_angles(cls, angles: Sequence[Optional[float]]) -> list[Optional[float]]:
        """
        Remove ±180° jumps from an angle series.

        Each present angle is placed within 180° of the previous present
        one. Missing angles stay None and do not break the series.
        """
        unwrapped: list[Optional[float]] = []
        prev_raw = prev_unwrapped = None
        for angle in angles:
            if angle is None:
                unwrapped.append(None)
                continue
            if prev_raw is None:
                current = angle
            else:
                current = prev_unwrapped + cls.wrap_angle(angle - prev_raw)
            unwrapped.append(current)
            prev_raw, prev_unwrapped = angle, current
        return unwrapped

    @staticmethod
    def moving_average(values: Sequence[float], window: int) -> np.ndarray:
        """
        Centered moving average, clipped at the boundaries.

        Edge samples average over the neighbours that exist, so the output
        has the same length as the input.
        """
        data = np.asarray(values, dtype=float)
        n = len(data)
        half = window // 2
        if n == 0 or half == 0:
            return data.copy()

        smoothed = np.empty(n)
        for i in range(n):
            lo = max(0, i - half)
            hi = min(n, i + half + 1)
            smoothed[i] = data[lo:hi].mean()
        return smoothed

    # -------------------------------------------------------------------------
    # Rotation
    # -------------------------------------------------------------------------

    def compute_rotation_frames(self, frames: Sequence[PoseFrame]) -> list[RotationFrame]:
        """
        Compute pelvis and torso rotation for every frame.

        Pelvis is the line from right hip to left hip, torso the line from
        right shoulder to left shoulder. A frame is valid when all four
        landmarks are visible.
        """
        self._validate_frames(frames)
        threshold = self.settings.min_visibility

        rotations = []
        for frame in frames:
            left_hip = frame.get_landmark(BodyPart.LEFT_HIP)
            right_hip = frame.get_landmark(BodyPart.RIGHT_HIP)
            left_shoulder = frame.get_landmark(BodyPart.LEFT_SHOULDER)
            right_shoulder = frame.get_landmark(BodyPart.RIGHT_SHOULDER)

            confidence = float(np.mean([
                left_hip.visibility,
                right_hip.visibility,
                left_shoulder.visibility,
                right_shoulder.visibility,
            ]))

            pelvis = None
            if left_hip.is_visible(threshold) and right_hip.is_visible(threshold):
                pelvis = self.line_angle(right_hip, left_hip)

            torso = None
            if left_shoulder.is_visible(threshold) and right_shoulder.is_visible(threshold):
                torso = self.line_angle(right_shoulder, left_shoulder)

            is_valid = pelvis is not None and torso is not None and confidence >= threshold
            x_factor = self.wrap_angle(torso - pelvis) if is_valid else 0.0

            rotations.append(RotationFrame(
                frame_number=frame.frame_number,
                timestamp_ms=frame.timestamp_ms,
                pelvis_angle=pelvis,
                torso_angle=torso,
                x_factor=x_factor,
                confidence=confidence,
                is_valid=is_valid,
            ))

        return rotations

    def compensate_for_camera_angle(
        self,
        rotation_frames: Sequence[RotationFrame],
        camera_angle_deg: float,
    ) -> list[RotationFrame]:
        """
        Correct apparent rotation for an off-axis camera.

        A camera rotated away from the ideal view foreshortens rotation by
        cos(angle); true rotation = apparent / cos(angle).

        Each angle series is unwrapped before scaling, so a turn across
        the ±180° seam keeps its true per-frame rotation. Compensated
        angles may therefore fall outside (-180, 180].

        Args:
            rotation_frames: Frames from compute_rotation_frames
            camera_angle_deg: Camera offset from the ideal view, in [0, 90)
        """
        if not 0 <= camera_angle_deg < 90:
            raise InvalidInputError(
                f"Camera angle must be in [0, 90) degrees, got {camera_angle_deg}"
            )
        factor = 1.0 / math.cos(math.radians(camera_angle_deg))

        def scale(angle: Optional[float]) -> Optional[float]:
            return None if angle is None else angle * factor

        pelvis = self.unwrap_angles([rf.pelvis_angle for rf in rotation_frames])
        torso = self.unwrap_angles([rf.torso_angle for rf in rotation_frames])
        x_factor = self.unwrap_angles([
            rf.x_factor if rf.is_valid else None for rf in rotation_frames
        ])

        return [
            replace(
                rf,
                pelvis_angle=scale(pelvis[i]),
                torso_angle=scale(torso[i]),
                x_factor=scale(x_factor[i]) if rf.is_valid else rf.x_factor,
            )
            for i, rf in enumerate(rotation_frames)
        ]

    # -------------------------------------------------------------------------
    # Velocity
    # -------------------------------------------------------------------------

    def compute_velocities(
        self,
        rotation_frames: Sequence[RotationFrame],
        frame_rate: float,
    ) -> list[VelocityFrame]:
        """
        Central-difference angular velocity for every rotation frame.

        velocity[i] = (angle[i+1] - angle[i-1]) / (2 * dt)

        The first and last frames, and any frame whose own or neighbouring
        rotation is invalid, get a zeroed record so the output stays
        aligned one-to-one with the input.
        """
        if frame_rate is None or not math.isfinite(frame_rate) or frame_rate <= 0:
            raise InvalidInputError(f"Frame rate must be positive, got {frame_rate}")

        dt = 1.0 / frame_rate
        n = len(rotation_frames)
        velocities = []

        for i, current in enumerate(rotation_frames):
            usable = (
                0 < i < n - 1
                and current.is_valid
                and rotation_frames[i - 1].is_valid
                and rotation_frames[i + 1].is_valid
            )
            if not usable:
                velocities.append(VelocityFrame(
                    frame_number=current.frame_number,
                    timestamp_ms=current.timestamp_ms,
                    pelvis_velocity=0.0,
                    torso_velocity=0.0,
                    x_factor_velocity=0.0,
                ))
                continue

            prev, nxt = rotation_frames[i - 1], rotation_frames[i + 1]
            pelvis_delta = self.wrap_angle(nxt.pelvis_angle - prev.pelvis_angle)
            torso_delta = self.wrap_angle(nxt.torso_angle - prev.torso_angle)
            x_factor_delta = self.wrap_angle(nxt.x_factor - prev.x_factor)

            velocities.append(VelocityFrame(
                frame_number=current.frame_number,
                timestamp_ms=current.timestamp_ms,
                pelvis_velocity=abs(pelvis_delta) / (2 * dt),
                torso_velocity=abs(torso_delta) / (2 * dt),
                x_factor_velocity=x_factor_delta / (2 * dt),
            ))

        return velocities

    def smooth_velocities(
        self,
        velocity_frames: Sequence[VelocityFrame],
        window: Optional[int] = None,
    ) -> list[VelocityFrame]:
        """Apply the centered moving average to all three velocity channels."""
        window = window or self.settings.velocity_smoothing_window

        pelvis = self.moving_average([v.pelvis_velocity for v in velocity_frames], window)
        torso = self.moving_average([v.torso_velocity for v in velocity_frames], window)
        x_factor = self.moving_average([v.x_factor_velocity for v in velocity_frames], window)

        return [
            replace(
                vf,
                pelvis_velocity=float(pelvis[i]),
                torso_velocity=float(torso[i]),
                x_factor_velocity=float(x_factor[i]),
            )
            for i, vf in enumerate(velocity_frames)
        ]

    # -------------------------------------------------------------------------
    # Swing Detection
    # -------------------------------------------------------------------------

    def detect_swing_window(self, velocity_frames: Sequence[VelocityFrame]) -> Optional[SwingWindow]:
        """
        Locate one swing in smoothed velocities.

        - start: first frame with pelvis velocity above the onset threshold
        - contact: torso velocity peak within the search span after start
        - stride: a fixed fraction of the way from start to contact
        - end: contact plus the follow-through allowance

        Returns:
            SwingWindow, or None if no onset is found or the swing is too short
        """
        s = self.settings
        n = len(velocity_frames)
        if n == 0:
            return None

        pelvis = np.array([v.pelvis_velocity for v in velocity_frames])
        torso = np.array([v.torso_velocity for v in velocity_frames])

        onsets = np.nonzero(pelvis > s.swing_velocity_threshold)[0]
        if len(onsets) == 0:
            return None
        start = int(onsets[0])

        search_end = min(start + s.swing_max_duration_frames, n)
        contact = start + int(np.argmax(torso[start:search_end]))

        span = contact - start
        if span < s.swing_min_duration_frames:
            logger.debug(f"Rejected swing window: {span} frames from start to contact")
            return None

        stride = start + int(math.floor(span * s.stride_fraction))
        end = min(contact + s.follow_through_frames, n - 1)

        return SwingWindow(start=start, stride=stride, contact=contact, end=end)

    # -------------------------------------------------------------------------
    # Summary & Quality
    # -------------------------------------------------------------------------

    def summarize(
        self,
        rotation_frames: Sequence[RotationFrame],
        velocity_frames: Sequence[VelocityFrame],
        window: Optional[SwingWindow],
    ) -> KinematicSummary:
        """
        Peak kinematics inside the swing window (whole capture without one).
        """
        lo, hi = (window.start, window.end + 1) if window else (0, len(velocity_frames))

        pelvis = np.array([v.pelvis_velocity for v in velocity_frames[lo:hi]])
        torso = np.array([v.torso_velocity for v in velocity_frames[lo:hi]])
        stretch = np.array([v.x_factor_velocity for v in velocity_frames[lo:hi]])
        x_factor = np.array([abs(r.x_factor) for r in rotation_frames[lo:hi]])

        pelvis_idx = int(np.argmax(pelvis)) if len(pelvis) else 0
        torso_idx = int(np.argmax(torso)) if len(torso) else 0
        peak_pelvis = float(pelvis[pelvis_idx]) if len(pelvis) else 0.0
        peak_torso = float(torso[torso_idx]) if len(torso) else 0.0
        peak_stretch = max(0.0, float(stretch.max())) if len(stretch) else 0.0
        peak_x_factor = float(x_factor.max()) if len(x_factor) else 0.0

        active = pelvis[pelvis > self.settings.velocity_noise_floor]
        consistency_cv = stats.coefficient_of_variation(active) * 100

        pelvis_peak_frame = lo + pelvis_idx
        torso_peak_frame = lo + torso_idx

        if window is None:
            ratio = 1.0
            quality = SequencingQuality.AVERAGE
        else:
            ratio = peak_torso / peak_pelvis if peak_pelvis > 0 else 1.0
            quality = self.grade_sequencing(torso_peak_frame - pelvis_peak_frame, ratio)

        return KinematicSummary(
            peak_pelvis_velocity=stats.round_half_up(peak_pelvis),
            peak_torso_velocity=stats.round_half_up(peak_torso),
            peak_x_factor=stats.round_half_up(peak_x_factor, 1),
            stretch_rate=stats.round_half_up(peak_stretch),
            consistency_cv=stats.round_half_up(consistency_cv, 1),
            torso_pelvis_ratio=stats.round_half_up(ratio, 2),
            sequencing_quality=quality,
            pelvis_peak_frame=pelvis_peak_frame,
            torso_peak_frame=torso_peak_frame,
        )

    def grade_sequencing(self, gap_frames: int, torso_pelvis_ratio: float) -> SequencingQuality:
        """
        Grade pelvis-to-torso sequencing.

        Good: torso peaks at least the minimum gap after the pelvis and faster.
        Average: torso peaks with or after the pelvis at >= 90% of its speed.
        """
        if gap_frames >= self.settings.sequencing_min_gap_frames and torso_pelvis_ratio > 1.0:
            return SequencingQuality.GOOD
        if gap_frames >= 0 and torso_pelvis_ratio >= 0.9:
            return SequencingQuality.AVERAGE
        return SequencingQuality.POOR

    def assess_quality(
        self,
        rotation_frames: Sequence[RotationFrame],
        window: Optional[SwingWindow],
        summary: KinematicSummary,
    ) -> ExtractionQuality:
        """Soft quality gate: usable or not, plus itemized issues."""
        s = self.settings
        total = len(rotation_frames)
        valid = sum(1 for r in rotation_frames if r.is_valid)
        valid_fraction = valid / total if total else 0.0

        issues = []
        if valid_fraction < s.min_valid_frame_fraction:
            issues.append(ISSUE_LOW_DETECTION)
        if window is None:
            issues.append(ISSUE_NO_SWING)
        if summary.peak_pelvis_velocity < s.swing_velocity_threshold:
            issues.append(ISSUE_LOW_PELVIS)

        return ExtractionQuality(
            is_usable=valid_fraction >= s.min_valid_frame_fraction and window is not None,
            valid_frame_percent=stats.round_score(valid_fraction * 100),
            swing_detected=window is not None,
            issues=issues,
        )

    # -------------------------------------------------------------------------
    # Calibration
    # -------------------------------------------------------------------------

    @staticmethod
    def apply_calibration(
        summary: KinematicSummary,
        coefficients: CalibrationCoefficients,
    ) -> KinematicSummary:
        """Map video-derived peaks onto a reference capture system."""
        c = coefficients
        return replace(
            summary,
            peak_pelvis_velocity=stats.round_half_up(
                summary.peak_pelvis_velocity * c.pelvis_scale + c.pelvis_offset
            ),
            peak_torso_velocity=stats.round_half_up(
                summary.peak_torso_velocity * c.torso_scale + c.torso_offset
            ),
            peak_x_factor=stats.round_half_up(
                summary.peak_x_factor * c.x_factor_scale + c.x_factor_offset, 1
            ),
            stretch_rate=stats.round_half_up(
                summary.stretch_rate * c.stretch_rate_scale + c.stretch_rate_offset
            ),
        )

    # -------------------------------------------------------------------------
    # Main Analysis
    # -------------------------------------------------------------------------

    def analyze(
        self,
        frames: Sequence[PoseFrame],
        frame_rate: float,
        camera_angle_deg: Optional[float] = None,
        calibration: Optional[CalibrationCoefficients] = None,
    ) -> BodyAnalysis:
        """
        Run the full extraction pipeline on one pose batch.

        Args:
            frames: Pose frames in capture order (at least 3)
            frame_rate: Capture rate in frames per second
            camera_angle_deg: Optional off-axis camera correction
            calibration: Optional alignment to a reference capture system

        Returns:
            BodyAnalysis with frames, window, summary and quality
        """
        rotations = self.compute_rotation_frames(frames)
        if camera_angle_deg is not None:
            rotations = self.compensate_for_camera_angle(rotations, camera_angle_deg)

        raw_velocities = self.compute_velocities(rotations, frame_rate)
        velocities = self.smooth_velocities(raw_velocities)

        window = self.detect_swing_window(velocities)
        summary = self.summarize(rotations, velocities, window)
        if calibration is not None:
            summary = self.apply_calibration(summary, calibration)

        quality = self.assess_quality(rotations, window, summary)
        if quality.is_usable:
            logger.info(
                f"Extracted kinematics from {len(frames)} frames: "
                f"pelvis {summary.peak_pelvis_velocity:.0f} deg/s, "
                f"torso {summary.peak_torso_velocity:.0f} deg/s, "
                f"sequencing {summary.sequencing_quality.value}"
            )
        else:
            logger.warning(f"Extraction not usable: {'; '.join(quality.issues)}")

        return BodyAnalysis(
            rotation_frames=rotations,
            velocity_frames=velocities,
            swing_window=window,
            summary=summary,
            quality=quality,
            frame_rate=frame_rate,
            total_frames=len(frames),
        )

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @staticmethod
    def _validate_frames(frames: Sequence[PoseFrame]) -> None:
        if frames is None or len(frames) < MIN_FRAMES:
            count = 0 if frames is None else len(frames)
            raise InvalidInputError(f"Need at least {MIN_FRAMES} pose frames, got {count}")

        required = max(BodyPart.LEFT_HIP, BodyPart.RIGHT_HIP,
                       BodyPart.LEFT_SHOULDER, BodyPart.RIGHT_SHOULDER)
        for frame in frames:
            if len(frame.landmarks) <= required:
                raise InvalidInputError(
                    f"Frame {frame.frame_number} has {len(frame.landmarks)} landmarks; "
                    f"hip and shoulder landmarks are missing"
                )
