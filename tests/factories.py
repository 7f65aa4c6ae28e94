"""
Synthetic data builders for tests.

Pose frames are generated from chosen segment angles so that every
landmark line has an exactly known rotation per frame.
"""

import math
from typing import Optional

import numpy as np

from fourb.domain import (
    BodyPart,
    PoseFrame,
    PoseLandmark,
    LANDMARK_COUNT,
    Segment,
    SegmentPeak,
    IDEAL_SEQUENCE,
    CalibrationSample,
    KinematicSummary,
    SequencingQuality,
    Swing,
)

HIP_CENTER = (0.5, 0.6)
SHOULDER_CENTER = (0.5, 0.35)
HIP_RADIUS = 0.1
SHOULDER_RADIUS = 0.12
LIMB_LENGTH = 0.15


def _offset(origin: tuple[float, float], angle_deg: float, length: float) -> tuple[float, float]:
    rad = math.radians(angle_deg)
    return origin[0] + length * math.cos(rad), origin[1] + length * math.sin(rad)


def build_frame(
    frame_number: int,
    fps: float,
    pelvis_deg: float = 0.0,
    torso_deg: float = 0.0,
    limbs: Optional[dict[Segment, float]] = None,
    visibility: float = 1.0,
    hip_visibility: Optional[float] = None,
) -> PoseFrame:
    """
    One frame whose hip line sits at pelvis_deg and shoulder line at torso_deg.

    limbs maps leg / arm / bat segments to the angle of their landmark line.
    """
    limbs = limbs or {}
    points: dict[int, tuple[float, float]] = {}

    points[BodyPart.LEFT_HIP] = _offset(HIP_CENTER, pelvis_deg, HIP_RADIUS)
    points[BodyPart.RIGHT_HIP] = _offset(HIP_CENTER, pelvis_deg + 180, HIP_RADIUS)
    points[BodyPart.LEFT_SHOULDER] = _offset(SHOULDER_CENTER, torso_deg, SHOULDER_RADIUS)
    points[BodyPart.RIGHT_SHOULDER] = _offset(SHOULDER_CENTER, torso_deg + 180, SHOULDER_RADIUS)

    points[BodyPart.RIGHT_KNEE] = _offset(
        points[BodyPart.RIGHT_HIP], limbs.get(Segment.REAR_LEG, 90.0), LIMB_LENGTH
    )
    points[BodyPart.LEFT_KNEE] = _offset(
        points[BodyPart.LEFT_HIP], limbs.get(Segment.LEAD_LEG, 90.0), LIMB_LENGTH
    )
    points[BodyPart.LEFT_WRIST] = _offset(
        points[BodyPart.LEFT_SHOULDER], limbs.get(Segment.BOTTOM_ARM, 60.0), LIMB_LENGTH
    )
    points[BodyPart.RIGHT_WRIST] = _offset(
        points[BodyPart.RIGHT_SHOULDER], limbs.get(Segment.TOP_ARM, 60.0), LIMB_LENGTH
    )
    points[BodyPart.LEFT_INDEX] = _offset(
        points[BodyPart.LEFT_WRIST], limbs.get(Segment.BAT, 0.0), LIMB_LENGTH / 3
    )

    hips = (BodyPart.LEFT_HIP, BodyPart.RIGHT_HIP)
    landmarks = []
    for index in range(LANDMARK_COUNT):
        x, y = points.get(index, (0.5, 0.5))
        vis = hip_visibility if hip_visibility is not None and index in hips else visibility
        landmarks.append(PoseLandmark(x=x, y=y, z=0.0, visibility=vis))

    return PoseFrame(
        landmarks=tuple(landmarks),
        timestamp_ms=frame_number * 1000.0 / fps,
        frame_number=frame_number,
    )


def build_frames(
    pelvis: list[float],
    torso: list[float],
    fps: float,
    visibility: float = 1.0,
    hip_visibility: Optional[float] = None,
) -> list[PoseFrame]:
    return [
        build_frame(i, fps, p, t, visibility=visibility, hip_visibility=hip_visibility)
        for i, (p, t) in enumerate(zip(pelvis, torso))
    ]


def tanh_profile(n: int, center: float, amplitude: float, width: float) -> list[float]:
    """Smooth ramp from 0 to 2*amplitude whose speed peaks at `center`."""
    return [amplitude * (1 + math.tanh((i - center) / width)) for i in range(n)]


def cosine_profile(n: int, amplitude: float, period_frames: float, shift: float = 0.0) -> list[float]:
    return [amplitude * math.cos(2 * math.pi * (i - shift) / period_frames) for i in range(n)]


def swing_frames(
    n: int = 70,
    fps: float = 60.0,
    pelvis_center: float = 30,
    torso_center: float = 38,
    **kwargs,
) -> list[PoseFrame]:
    """A rotational swing: pelvis speed peaks first, torso later and faster."""
    return build_frames(
        tanh_profile(n, pelvis_center, 45.0, 5.0),
        tanh_profile(n, torso_center, 40.0, 4.0),
        fps,
        **kwargs,
    )


def chain_frames(
    peak_frames: dict[Segment, int],
    n: int = 70,
    fps: float = 100.0,
) -> list[PoseFrame]:
    """Frames where each segment's line rotates fastest at its given frame."""
    profiles = {
        segment: tanh_profile(n, peak_frames[segment], 30.0, 3.0)
        for segment in IDEAL_SEQUENCE
    }
    frames = []
    for i in range(n):
        limbs = {
            Segment.REAR_LEG: 90.0 + profiles[Segment.REAR_LEG][i],
            Segment.LEAD_LEG: 90.0 + profiles[Segment.LEAD_LEG][i],
            Segment.BOTTOM_ARM: 60.0 + profiles[Segment.BOTTOM_ARM][i],
            Segment.TOP_ARM: 60.0 + profiles[Segment.TOP_ARM][i],
            Segment.BAT: profiles[Segment.BAT][i],
        }
        frames.append(build_frame(i, fps, 0.0, profiles[Segment.TORSO][i], limbs=limbs))
    return frames


def peaks_from_times(times_ms: list[float]) -> dict[Segment, SegmentPeak]:
    """Peak records in ideal segment order."""
    return {segment: SegmentPeak(time_ms=t) for segment, t in zip(IDEAL_SEQUENCE, times_ms)}


def random_sequence_peaks(
    rng: np.random.Generator,
    error_rate: float = 0.3,
    base_ms: float = 0.0,
    spacing_ms: float = 25.0,
) -> dict[Segment, SegmentPeak]:
    """
    Peak times near the ideal spacing, occasionally shuffling neighbours.
    """
    times = [base_ms + i * spacing_ms + rng.normal(0, 3.0) for i in range(len(IDEAL_SEQUENCE))]
    for i in range(len(times) - 1):
        if rng.random() < error_rate:
            times[i], times[i + 1] = times[i + 1], times[i]
    return peaks_from_times(times)


def calibration_samples(
    rng: np.random.Generator,
    betas: tuple[float, float, float, float, float],
    n: int = 40,
    noise_sd: float = 0.0,
) -> list[CalibrationSample]:
    b0, b1, b2, b3, b4 = betas
    samples = []
    for _ in range(n):
        brain, body, bat, ball = rng.uniform(20, 80, size=4)
        speed = b0 + b1 * brain + b2 * body + b3 * bat + b4 * ball + rng.normal(0, noise_sd)
        samples.append(CalibrationSample(
            brain=float(brain),
            body=float(body),
            bat=float(bat),
            ball=float(ball),
            bat_speed_mph=float(speed),
        ))
    return samples


def sensor_swings(count: int = 10, **fields) -> list[Swing]:
    return [Swing(**fields) for _ in range(count)]


def kinematic_summary(**overrides) -> KinematicSummary:
    """A plausible pose summary; override any field."""
    fields = dict(
        peak_pelvis_velocity=600.0,
        peak_torso_velocity=750.0,
        peak_x_factor=25.0,
        stretch_rate=300.0,
        consistency_cv=10.0,
        torso_pelvis_ratio=1.25,
        sequencing_quality=SequencingQuality.GOOD,
        pelvis_peak_frame=30,
        torso_peak_frame=34,
    )
    fields.update(overrides)
    return KinematicSummary(**fields)


class FakeClock:
    """Monotonic clock stand-in driven by the test."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
