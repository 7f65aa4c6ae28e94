"""
Composite 4B Scorer

Scores a session of swings in four categories on a 20-80 scale:

- Brain: timing consistency (trigger-to-impact CV, else pose consistency CV)
- Body: energy transfer (hand-to-bat speed ratio)
- Bat: path consistency (attack angle spread)
- Ball: output (measured or projected exit velocity)
"""

import logging
from typing import Optional, Sequence

from ..config import EngineSettings, get_settings
from ..domain.scoring import Category, LeakType, ScoreConfidence, Swing, SessionScores
from ..errors import InvalidInputError
from . import stats

logger = logging.getLogger(__name__)


class FourBScorer:
    """
    Computes Brain / Body / Bat / Ball scores for a session.

    All category scores are clamped to [score_floor, score_ceiling] and
    rounded half-up. A category with no usable input gets the floor
    score and is reported in missing_inputs; one scored from a proxy is
    reported in estimated_inputs and makes the result estimated.

    Usage:
        scorer = FourBScorer()
        scores = scorer.score(swings, pitch_speed_mph=62)
        print(scores.composite, scores.weakest_link)
    """

    # -------------------------------------------------------------------------
    # Scoring constants
    # -------------------------------------------------------------------------

    BRAIN_BASE = 80.0
    BRAIN_CV_PENALTY = 2.5      # points per CV percent
    BAT_BASE = 70.0
    EV_BAT_FACTOR = 1.2
    EV_PITCH_FACTOR = 0.2
    BALL_EV_FACTOR = 0.75

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or get_settings()

    def _clamp_score(self, value: float) -> int:
        s = self.settings
        return stats.round_score(stats.clamp(value, s.score_floor, s.score_ceiling))

    # -------------------------------------------------------------------------
    # Category Scores
    # -------------------------------------------------------------------------

    def score_brain(self, timings_ms: Sequence[float]) -> tuple[int, float]:
        """
        Timing consistency.

        Returns:
            (score, timing CV as a percentage)
        """
        cv_percent = stats.coefficient_of_variation(timings_ms) * 100
        return self._clamp_score(self.BRAIN_BASE - self.BRAIN_CV_PENALTY * cv_percent), cv_percent

    def score_brain_from_body(self, consistency_cv_percent: float) -> int:
        """Brain from pose consistency CV% when no trigger timing exists."""
        return self._clamp_score(self.BRAIN_BASE - self.BRAIN_CV_PENALTY * consistency_cv_percent)

    def score_body(self, ratios: Sequence[float]) -> tuple[int, float]:
        """Energy transfer from the mean hand-to-bat ratio."""
        mean_ratio = stats.mean(ratios)
        return self._clamp_score(mean_ratio * 100), mean_ratio

    def score_bat(self, attack_angles: Sequence[float]) -> tuple[int, float]:
        """Path consistency: spread of attack angles."""
        spread = stats.population_std(attack_angles)
        return self._clamp_score(self.BAT_BASE - spread), spread

    def score_ball(
        self,
        bat_speeds: Sequence[float],
        pitch_speed_mph: float,
        exit_velocities: Sequence[float] = (),
    ) -> tuple[int, float, bool]:
        """
        Output score from exit velocity.

        Measured exit velocity is used when ball flight data exists,
        otherwise it is projected as bat * 1.2 + pitch * 0.2.

        Returns:
            (score, exit velocity used, whether it was measured)
        """
        if exit_velocities:
            exit_velocity = stats.mean(exit_velocities)
            measured = True
        else:
            exit_velocity = (
                stats.mean(bat_speeds) * self.EV_BAT_FACTOR
                + pitch_speed_mph * self.EV_PITCH_FACTOR
            )
            measured = False
        return self._clamp_score(exit_velocity * self.BALL_EV_FACTOR), exit_velocity, measured

    # -------------------------------------------------------------------------
    # Diagnosis
    # -------------------------------------------------------------------------

    @staticmethod
    def weakest_link(scores: dict[Category, int]) -> Category:
        """
        Lowest scoring category; ties resolve Brain > Body > Bat > Ball.
        """
        return min(Category, key=lambda category: scores[category])

    def detect_leaks(self, timing_cv_percent: Optional[float], mean_ratio: Optional[float]) -> list[LeakType]:
        leaks = []
        if timing_cv_percent is not None and timing_cv_percent > self.settings.timing_leak_cv_percent:
            leaks.append(LeakType.TIMING_LEAK)
        if mean_ratio is not None and mean_ratio < self.settings.power_leak_ratio:
            leaks.append(LeakType.POWER_LEAK)
        return leaks

    def resolve_pitch_speed(self, swings: Sequence[Swing], session_pitch_speed: Optional[float]) -> float:
        """Per-swing pitch speeds, else the session estimate, else the default."""
        per_swing = stats.positive_values(s.pitch_speed_mph for s in swings)
        if per_swing:
            return stats.mean(per_swing)
        if session_pitch_speed is not None and session_pitch_speed > 0:
            return float(session_pitch_speed)
        return self.settings.default_pitch_speed_mph

    # -------------------------------------------------------------------------
    # Main Scoring
    # -------------------------------------------------------------------------

    def score(
        self,
        swings: Sequence[Swing],
        pitch_speed_mph: Optional[float] = None,
        session_id: Optional[str] = None,
    ) -> SessionScores:
        """
        Score a session.

        Args:
            swings: Swings in the session (at least one)
            pitch_speed_mph: Session-level pitch speed estimate
            session_id: Identifier copied onto the result

        Returns:
            SessionScores with category scores, composite and diagnosis

        Raises:
            InvalidInputError: no swings supplied
        """
        if not swings:
            raise InvalidInputError("No swings to score")

        floor = self.settings.score_floor
        timings = stats.positive_values(s.trigger_to_impact_ms for s in swings)
        ratios = stats.positive_values(s.effective_hand_to_bat_ratio for s in swings)
        angles = stats.present_values(s.attack_angle_deg for s in swings)
        bat_speeds = stats.positive_values(s.bat_speed_mph for s in swings)
        exit_velocities = stats.positive_values(s.exit_velocity_mph for s in swings)
        pitch_speed = self.resolve_pitch_speed(swings, pitch_speed_mph)

        body_cvs = stats.present_values(
            s.kinematics.consistency_cv for s in swings if s.has_video_data
        )
        efficiencies = stats.positive_values(s.body_to_bat_efficiency for s in swings)

        missing = []
        estimated = []
        timing_cv = mean_ratio = angle_spread = body_cv = None

        if timings:
            brain, timing_cv = self.score_brain(timings)
        elif body_cvs:
            # No trigger timing: pose consistency CV stands in for timing CV
            body_cv = stats.mean(body_cvs)
            brain = self.score_brain_from_body(body_cv)
            estimated.append(Category.BRAIN)
        else:
            brain = floor
            missing.append(Category.BRAIN)

        if ratios:
            body, mean_ratio = self.score_body(ratios)
        else:
            body = floor
            missing.append(Category.BODY)

        if angles:
            bat, angle_spread = self.score_bat(angles)
        else:
            bat = floor
            missing.append(Category.BAT)

        exit_velocity = None
        measured = False
        if bat_speeds or exit_velocities:
            ball, exit_velocity, measured = self.score_ball(bat_speeds, pitch_speed, exit_velocities)
        else:
            ball = floor
            missing.append(Category.BALL)

        category_scores = {
            Category.BRAIN: brain,
            Category.BODY: body,
            Category.BAT: bat,
            Category.BALL: ball,
        }
        composite = stats.round_score(sum(category_scores.values()) / len(category_scores))
        confidence = (
            ScoreConfidence.MEASURED if measured and not missing and not estimated
            else ScoreConfidence.ESTIMATED
        )

        components = {"pitch_speed_mph": round(pitch_speed, 2)}
        if timing_cv is not None:
            components["timing_cv_percent"] = round(timing_cv, 2)
        if body_cv is not None:
            components["body_consistency_cv_percent"] = round(body_cv, 2)
        if efficiencies:
            components["mean_body_to_bat_efficiency"] = round(stats.mean(efficiencies), 2)
        if mean_ratio is not None:
            components["mean_hand_to_bat_ratio"] = round(mean_ratio, 3)
        if angle_spread is not None:
            components["attack_angle_std"] = round(angle_spread, 2)
        if exit_velocity is not None:
            components["exit_velocity_mph"] = round(exit_velocity, 2)

        scores = SessionScores(
            brain=brain,
            body=body,
            bat=bat,
            ball=ball,
            composite=composite,
            weakest_link=self.weakest_link(category_scores),
            leaks=self.detect_leaks(timing_cv if timing_cv is not None else body_cv, mean_ratio),
            confidence=confidence,
            swing_count=len(swings),
            projected_exit_velocity=(
                stats.round_score(exit_velocity) if exit_velocity is not None else None
            ),
            components=components,
            missing_inputs=missing,
            estimated_inputs=estimated,
            session_id=session_id,
        )

        if missing:
            logger.warning(
                f"Scored {len(swings)} swings without data for: "
                f"{', '.join(c.display_name for c in missing)}"
            )
        logger.info(
            f"4B scores for {session_id or 'session'}: brain={brain} body={body} "
            f"bat={bat} ball={ball} composite={composite} weakest={scores.weakest_link.value}"
        )
        return scores
