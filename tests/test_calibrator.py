"""
Unit tests for per-athlete regression calibration.
"""

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from fourb.domain import CalibrationSample, ModelQuality
from fourb.errors import InsufficientDataError, SingularMatrixError
from fourb.services import AthleteCalibrator

from tests.factories import calibration_samples


BETAS = (30.0, 0.1, 0.25, 0.05, 0.15)
NOW = datetime(2024, 6, 1, 12, 0, 0)


class TestNormalEquations:
    """Tests for the Gaussian elimination solver."""

    def test_solves_small_system(self):
        solution = AthleteCalibrator.solve_normal_equations(
            np.array([[2.0, 1.0], [1.0, 3.0]]), np.array([3.0, 5.0])
        )
        assert solution == pytest.approx([0.8, 1.4])

    def test_pivots_past_zero_diagonal(self):
        solution = AthleteCalibrator.solve_normal_equations(
            np.array([[0.0, 1.0], [1.0, 0.0]]), np.array([2.0, 3.0])
        )
        assert solution == pytest.approx([3.0, 2.0])

    def test_singular_system_raises(self):
        with pytest.raises(SingularMatrixError):
            AthleteCalibrator.solve_normal_equations(
                np.array([[1.0, 2.0], [2.0, 4.0]]), np.array([1.0, 2.0])
            )


class TestFit:
    """Tests for coefficient recovery."""

    def test_recovers_coefficients_from_noisy_data(self, calibrator, rng):
        samples = calibration_samples(rng, BETAS, n=40, noise_sd=0.5)
        coefficients, r_squared = calibrator.fit(samples)

        assert r_squared > 0.95
        assert coefficients[0] == pytest.approx(BETAS[0], abs=2.0)
        for fitted, expected in zip(coefficients[1:], BETAS[1:]):
            assert fitted == pytest.approx(expected, abs=0.03)

    def test_exact_data_fits_perfectly(self, calibrator, rng):
        coefficients, r_squared = calibrator.fit(calibration_samples(rng, BETAS, n=12))
        assert list(coefficients) == pytest.approx(list(BETAS), abs=1e-6)
        assert r_squared == pytest.approx(1.0)

    def test_constant_sub_score_is_singular(self, calibrator, rng):
        samples = [
            CalibrationSample(brain=60.0, body=s.body, bat=s.bat, ball=s.ball,
                              bat_speed_mph=s.bat_speed_mph)
            for s in calibration_samples(rng, BETAS, n=10)
        ]
        with pytest.raises(SingularMatrixError) as exc_info:
            calibrator.fit(samples)
        assert exc_info.value.label == "Brain"

    def test_constant_bat_speed_gives_zero_r_squared(self, calibrator, rng):
        samples = [
            CalibrationSample(brain=s.brain, body=s.body, bat=s.bat, ball=s.ball, bat_speed_mph=65.0)
            for s in calibration_samples(rng, BETAS, n=8)
        ]
        _, r_squared = calibrator.fit(samples)
        assert r_squared == 0.0


class TestCalibrate:
    """Tests for calibration with storage."""

    def test_too_few_samples_writes_nothing(self, calibrator, store, rng):
        samples = calibration_samples(rng, BETAS, n=4)
        with pytest.raises(InsufficientDataError, match="Need at least 5 swings") as exc_info:
            calibrator.calibrate("athlete-1", samples, now=NOW)

        assert exc_info.value.required == 5
        assert exc_info.value.actual == 4
        assert store.get("athlete-1") is None

    def test_incomplete_samples_do_not_count(self, calibrator, store, rng):
        samples = calibration_samples(rng, BETAS, n=4)
        samples.append(CalibrationSample(brain=50.0, body=None, bat=50.0, ball=50.0, bat_speed_mph=60.0))
        with pytest.raises(InsufficientDataError) as exc_info:
            calibrator.calibrate("athlete-1", samples, now=NOW)
        assert exc_info.value.actual == 4
        assert len(store) == 0

    def test_stores_model_with_expiry(self, calibrator, store, rng):
        result = calibrator.calibrate("athlete-1", calibration_samples(rng, BETAS, n=10), now=NOW)
        model = store.get("athlete-1")

        assert model == result.model
        assert model.sample_count == 10
        assert model.calibrated_at == NOW
        assert model.expires_at == NOW + timedelta(days=90)
        assert not model.is_expired(NOW + timedelta(days=89))
        assert model.is_expired(NOW + timedelta(days=91))

    def test_recalibration_overwrites(self, calibrator, store, rng):
        calibrator.calibrate("athlete-1", calibration_samples(rng, BETAS, n=10), now=NOW)
        later = NOW + timedelta(days=30)
        calibrator.calibrate("athlete-1", calibration_samples(rng, BETAS, n=20), now=later)

        assert len(store) == 1
        assert store.get("athlete-1").sample_count == 20
        assert store.get("athlete-1").calibrated_at == later

    def test_interpretation(self, calibrator, rng):
        result = calibrator.calibrate("athlete-1", calibration_samples(rng, BETAS, n=10), now=NOW)
        interpretation = result.interpretation

        assert interpretation.baseline_bat_speed == pytest.approx(30.0)
        assert interpretation.contributions["Body"] == "+2.5 mph per 10 points in Body"
        assert interpretation.contributions["Brain"] == "+1.0 mph per 10 points in Brain"
        assert interpretation.model_quality is ModelQuality.STRONG

    def test_prediction_uses_coefficients(self, calibrator, rng):
        model = calibrator.calibrate("athlete-1", calibration_samples(rng, BETAS, n=10), now=NOW).model
        expected = 30.0 + 0.1 * 50 + 0.25 * 60 + 0.05 * 70 + 0.15 * 40
        assert model.predict_bat_speed(50, 60, 70, 40) == pytest.approx(expected)

    def test_live_model_ignores_expired(self, calibrator, rng):
        calibrator.calibrate("athlete-1", calibration_samples(rng, BETAS, n=10), now=NOW)
        assert calibrator.live_model("athlete-1", now=NOW + timedelta(days=1)) is not None
        assert calibrator.live_model("athlete-1", now=NOW + timedelta(days=120)) is None
        assert calibrator.live_model("nobody", now=NOW) is None


@pytest.mark.parametrize("r_squared, quality", [
    (0.9, ModelQuality.STRONG),
    (0.7, ModelQuality.MODERATE),
    (0.41, ModelQuality.MODERATE),
    (0.4, ModelQuality.WEAK),
    (0.0, ModelQuality.WEAK),
])
def test_model_quality_banding(r_squared, quality):
    assert ModelQuality.from_r_squared(r_squared) is quality


def test_default_timestamps_are_utc(calibrator, rng):
    model = calibrator.calibrate("athlete-1", calibration_samples(rng, BETAS, n=10)).model

    assert model.calibrated_at.tzinfo is timezone.utc
    assert model.expires_at - model.calibrated_at == timedelta(days=90)
    assert calibrator.live_model("athlete-1") is model
