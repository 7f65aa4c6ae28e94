"""
Athlete Calibrator Service

Fits a per-athlete ordinary least squares model relating the four
category sub-scores to measured bat speed:

    bat_speed = b0 + b1*brain + b2*body + b3*bat + b4*ball

The normal equations (X^T X) b = X^T y are solved by Gaussian
elimination with partial pivoting.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import numpy as np

from ..config import EngineSettings, get_settings
from ..domain.athlete import (
    AthleteModel,
    CalibrationSample,
    CalibrationResult,
    ModelInterpretation,
    ModelQuality,
)
from ..errors import InsufficientDataError, SingularMatrixError
from .stores import AthleteModelStore, InMemoryAthleteModelStore

logger = logging.getLogger(__name__)

COEFFICIENT_LABELS = ("Intercept", "Brain", "Body", "Bat", "Ball")


class AthleteCalibrator:
    """
    Calibrates and interprets per-athlete bat speed models.

    Usage:
        calibrator = AthleteCalibrator(store=my_store)
        result = calibrator.calibrate("athlete-7", samples)
        print(result.interpretation.contributions["Body"])
    """

    PIVOT_TOLERANCE = 1e-9

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        store: Optional[AthleteModelStore] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store if store is not None else InMemoryAthleteModelStore()

    # -------------------------------------------------------------------------
    # Linear Algebra
    # -------------------------------------------------------------------------

    @classmethod
    def solve_normal_equations(cls, xtx: np.ndarray, xty: np.ndarray) -> np.ndarray:
        """
        Solve (X^T X) b = X^T y.

        Gaussian elimination with partial pivoting on the augmented
        matrix, followed by back substitution.

        Raises:
            SingularMatrixError: a pivot is zero relative to the matrix scale
        """
        augmented = np.column_stack([np.asarray(xtx, dtype=float), np.asarray(xty, dtype=float)])
        n = augmented.shape[0]
        scale = max(1.0, float(np.abs(augmented[:, :n]).max()))

        for col in range(n):
            pivot_row = col + int(np.argmax(np.abs(augmented[col:, col])))
            if abs(augmented[pivot_row, col]) <= cls.PIVOT_TOLERANCE * scale:
                label = COEFFICIENT_LABELS[col] if col < len(COEFFICIENT_LABELS) else f"x{col}"
                raise SingularMatrixError(col, label)

            if pivot_row != col:
                augmented[[col, pivot_row]] = augmented[[pivot_row, col]]

            for row in range(col + 1, n):
                factor = augmented[row, col] / augmented[col, col]
                augmented[row, col:] -= factor * augmented[col, col:]

        solution = np.zeros(n)
        for row in range(n - 1, -1, -1):
            remainder = augmented[row, n] - augmented[row, row + 1:n] @ solution[row + 1:]
            solution[row] = remainder / augmented[row, row]
        return solution

    @staticmethod
    def r_squared(y: np.ndarray, predictions: np.ndarray) -> float:
        """Coefficient of determination clamped to [0, 1]; 0 when y is constant."""
        ss_res = float(np.sum((y - predictions) ** 2))
        ss_tot = float(np.sum((y - y.mean()) ** 2))
        if ss_tot == 0:
            return 0.0
        return float(np.clip(1 - ss_res / ss_tot, 0.0, 1.0))

    # -------------------------------------------------------------------------
    # Calibration
    # -------------------------------------------------------------------------

    def fit(self, samples: Sequence[CalibrationSample]) -> tuple[np.ndarray, float]:
        """
        Fit coefficients to complete samples.

        Returns:
            (coefficients b0..b4, R²)

        Raises:
            InsufficientDataError: fewer complete samples than required
            SingularMatrixError: sub-scores are constant or collinear
        """
        complete = [s for s in samples if s.is_complete]
        required = self.settings.min_calibration_samples
        if len(complete) < required:
            raise InsufficientDataError(
                required=required,
                actual=len(complete),
                message=f"Need at least {required} swings to calibrate model (have {len(complete)})",
            )

        x = np.array([s.features() for s in complete], dtype=float)
        y = np.array([s.bat_speed_mph for s in complete], dtype=float)

        coefficients = self.solve_normal_equations(x.T @ x, x.T @ y)
        return coefficients, self.r_squared(y, x @ coefficients)

    def calibrate(
        self,
        athlete_id: str,
        samples: Sequence[CalibrationSample],
        now: Optional[datetime] = None,
    ) -> CalibrationResult:
        """
        Fit, store and interpret an athlete's model.

        The store is only written after a successful fit; an existing
        model for the athlete is replaced.
        """
        try:
            coefficients, r2 = self.fit(samples)
        except InsufficientDataError as e:
            logger.warning(f"Calibration skipped for {athlete_id}: {e}")
            raise

        calibrated_at = now or datetime.now(timezone.utc)
        b0, b1, b2, b3, b4 = (float(c) for c in coefficients)
        model = AthleteModel(
            athlete_id=athlete_id,
            beta_0=b0,
            beta_1=b1,
            beta_2=b2,
            beta_3=b3,
            beta_4=b4,
            r_squared=r2,
            sample_count=sum(1 for s in samples if s.is_complete),
            calibrated_at=calibrated_at,
            expires_at=calibrated_at + timedelta(days=self.settings.athlete_model_ttl_days),
        )
        self.store.upsert(model)

        interpretation = self.interpret(model)
        logger.info(
            f"Calibrated model for {athlete_id} from {model.sample_count} swings: "
            f"R²={r2:.3f} ({interpretation.model_quality.value})"
        )
        return CalibrationResult(model=model, interpretation=interpretation)

    @staticmethod
    def interpret(model: AthleteModel) -> ModelInterpretation:
        """Describe each coefficient as mph gained per 10 sub-score points."""
        contributions = {
            label: f"{beta * 10:+.1f} mph per 10 points in {label}"
            for label, beta in zip(COEFFICIENT_LABELS[1:], model.coefficients[1:])
        }
        return ModelInterpretation(
            baseline_bat_speed=round(model.beta_0, 1),
            contributions=contributions,
            model_quality=ModelQuality.from_r_squared(model.r_squared),
        )

    def live_model(self, athlete_id: str, now: Optional[datetime] = None) -> Optional[AthleteModel]:
        """The athlete's stored model, or None if absent or expired."""
        model = self.store.get(athlete_id)
        if model is None or model.is_expired(now or datetime.now(timezone.utc)):
            return None
        return model
