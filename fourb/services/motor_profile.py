"""
Motor Profile Classifier

Awards points to each movement archetype from a swing's merged pose and
sensor inputs, then picks the strongest one. Missing pose inputs fall
back to neutral values so sensor-only swings can still be classified.
"""

import logging

from ..domain.kinematics import SequencingQuality
from ..domain.profile import MotorProfile, MotorProfileResult
from ..domain.scoring import Swing

logger = logging.getLogger(__name__)


class MotorProfileClassifier:
    """
    Rule-based motor profile inference.

    Usage:
        result = MotorProfileClassifier().infer(swing)
        print(result.primary.value, result.confidence)
    """

    # -------------------------------------------------------------------------
    # Thresholds
    # -------------------------------------------------------------------------

    SPINNER_PELVIS_VELOCITY = 650.0     # deg/s
    SPINNER_TP_RATIO = 1.1
    SLINGSHOT_STRETCH_RATE = 800.0      # deg/s
    SLINGSHOT_X_FACTOR = 40.0           # deg
    WHIPPER_BAT_SPEED = 70.0            # mph
    WHIPPER_HAND_TO_BAT = 1.6
    TITAN_CONSISTENCY_CV = 8.0          # percent
    TITAN_EFFICIENCY = 1.1

    DEFAULT_CONSISTENCY_CV = 15.0
    MIN_PRIMARY_POINTS = 30

    # Candidates in tie-break order
    ARCHETYPES = (
        MotorProfile.SPINNER,
        MotorProfile.SLINGSHOTTER,
        MotorProfile.WHIPPER,
        MotorProfile.TITAN,
    )

    def infer(self, swing: Swing) -> MotorProfileResult:
        scores = {profile: 0 for profile in MotorProfile}
        evidence = []

        kin = swing.kinematics
        pelvis_velocity = kin.peak_pelvis_velocity if kin else 0.0
        tp_ratio = kin.torso_pelvis_ratio if kin else 1.0
        sequencing = kin.sequencing_quality if kin else SequencingQuality.AVERAGE
        stretch_rate = kin.stretch_rate if kin else 0.0
        x_factor = kin.peak_x_factor if kin else 0.0
        consistency_cv = kin.consistency_cv if kin else self.DEFAULT_CONSISTENCY_CV
        hand_to_bat = swing.effective_hand_to_bat_ratio
        efficiency = swing.body_to_bat_efficiency

        # Spinner
        if pelvis_velocity > self.SPINNER_PELVIS_VELOCITY:
            scores[MotorProfile.SPINNER] += 30
            evidence.append("High pelvis velocity suggests rotational power")
        if sequencing is SequencingQuality.GOOD and tp_ratio > self.SPINNER_TP_RATIO:
            scores[MotorProfile.SPINNER] += 25
            evidence.append("Good kinetic sequence with torso catching up")

        # Slingshotter
        if stretch_rate > self.SLINGSHOT_STRETCH_RATE:
            scores[MotorProfile.SLINGSHOTTER] += 35
            evidence.append("High stretch rate indicates elastic loading")
        if x_factor > self.SLINGSHOT_X_FACTOR:
            scores[MotorProfile.SLINGSHOTTER] += 20
            evidence.append("Large X-factor supports slingshot pattern")

        # Whipper
        if swing.bat_speed_mph and swing.bat_speed_mph > self.WHIPPER_BAT_SPEED:
            scores[MotorProfile.WHIPPER] += 25
            evidence.append("High bat speed")
        if hand_to_bat and hand_to_bat > self.WHIPPER_HAND_TO_BAT:
            scores[MotorProfile.WHIPPER] += 30
            evidence.append("High hand-to-bat ratio suggests whip action")

        # Titan
        if consistency_cv < self.TITAN_CONSISTENCY_CV:
            scores[MotorProfile.TITAN] += 20
            evidence.append("Very consistent timing suggests strength-based approach")
        if efficiency and efficiency > self.TITAN_EFFICIENCY:
            scores[MotorProfile.TITAN] += 25
            evidence.append("Efficient energy transfer through strength")

        primary = MotorProfile.UNKNOWN
        best = 0
        for profile in self.ARCHETYPES:
            if scores[profile] > best:
                best = scores[profile]
                primary = profile
        if best < self.MIN_PRIMARY_POINTS:
            primary = MotorProfile.UNKNOWN

        logger.debug(f"Motor profile for {swing.swing_id}: {primary.value} ({best} points)")
        return MotorProfileResult(
            primary=primary,
            confidence=min(best, 100),
            scores=scores,
            evidence=evidence,
        )
