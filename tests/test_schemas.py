"""
Tests for the pydantic boundary schemas.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from fourb.domain import Category, LeakType, ScoreConfidence, Segment, SessionScores, Swing
from fourb.schemas import (
    AthleteModelResponse,
    BodyAnalysisResponse,
    CalibrateAthleteRequest,
    MotorProfileResponse,
    PoseBatchRequest,
    ScoreSessionRequest,
    SegmentPeaksRequest,
    SensorSwingSchema,
    SequenceAnalysisSchema,
    SessionScoresResponse,
)
from fourb.services import MotorProfileClassifier, SequenceAnalyzer

from tests.factories import calibration_samples, kinematic_summary, swing_frames


def frame_payload(frame):
    return {
        "landmarks": [
            {"x": lm.x, "y": lm.y, "z": lm.z, "visibility": lm.visibility}
            for lm in frame.landmarks
        ],
        "timestamp_ms": frame.timestamp_ms,
        "frame_number": frame.frame_number,
    }


class TestPoseBatchRequest:

    def test_round_trips_frames_and_analyzes(self, extractor):
        frames = swing_frames()
        request = PoseBatchRequest(frames=[frame_payload(f) for f in frames], frame_rate=60)

        analysis = extractor.analyze(request.to_domain(), request.frame_rate)
        response = BodyAnalysisResponse.from_domain(analysis)

        assert request.to_domain() == frames
        assert response.quality.is_usable
        assert response.summary.sequencing_quality == "good"
        assert response.swing_window["contact"] == 38

    def test_rejects_non_positive_frame_rate(self):
        frames = [frame_payload(f) for f in swing_frames(n=3)]
        with pytest.raises(ValidationError):
            PoseBatchRequest(frames=frames, frame_rate=0)

    def test_rejects_too_few_frames(self):
        frames = [frame_payload(f) for f in swing_frames(n=2)]
        with pytest.raises(ValidationError):
            PoseBatchRequest(frames=frames, frame_rate=60)

    def test_rejects_wrong_landmark_count(self):
        payload = [frame_payload(f) for f in swing_frames(n=3)]
        payload[1]["landmarks"] = payload[1]["landmarks"][:25]
        with pytest.raises(ValidationError):
            PoseBatchRequest(frames=payload, frame_rate=60)

    def test_rejects_visibility_out_of_range(self):
        payload = [frame_payload(f) for f in swing_frames(n=3)]
        payload[0]["landmarks"][0]["visibility"] = 1.5
        with pytest.raises(ValidationError):
            PoseBatchRequest(frames=payload, frame_rate=60)


class TestScoringSchemas:

    def test_sensor_swing_to_domain(self):
        swing = SensorSwingSchema(bat_speed_mph=68.0, hand_speed_mph=20.4).to_domain()
        assert swing.swing_id
        assert swing.bat_speed_mph == 68.0
        assert swing.effective_hand_to_bat_ratio == 0.3

    def test_score_request_requires_swings(self):
        with pytest.raises(ValidationError):
            ScoreSessionRequest(session_id="s-1", swings=[])

    def test_scores_response_from_domain(self, scorer):
        request = ScoreSessionRequest(
            session_id="s-1",
            swings=[{"bat_speed_mph": 70, "trigger_to_impact_ms": 150,
                     "hand_to_bat_ratio": 0.8, "attack_angle_deg": 10}],
        )
        scores = scorer.score(request.to_domain(), session_id=request.session_id)
        response = SessionScoresResponse.from_domain(scores)

        assert response.session_id == "s-1"
        assert response.leaks == ["POWER_LEAK"]
        assert response.confidence == "estimated"
        assert response.weakest_link == "bat"

    def test_response_rejects_out_of_range_scores(self):
        scores = SessionScores(
            brain=90, body=50, bat=50, ball=50, composite=60,
            weakest_link=Category.BODY, leaks=[LeakType.TIMING_LEAK],
            confidence=ScoreConfidence.ESTIMATED, swing_count=1,
        )
        with pytest.raises(ValidationError):
            SessionScoresResponse.from_domain(scores)

    def test_scores_response_lists_estimated_inputs(self, scorer):
        swing = Swing(kinematics=kinematic_summary(consistency_cv=8.0))
        response = SessionScoresResponse.from_domain(scorer.score([swing]))
        assert response.brain == 60
        assert response.estimated_inputs == ["brain"]
        assert response.missing_inputs == ["body", "bat", "ball"]

    def test_motor_profile_response(self):
        swing = Swing(bat_speed_mph=75.0, hand_to_bat_ratio=1.7)
        response = MotorProfileResponse.from_domain(swing.swing_id, MotorProfileClassifier().infer(swing))

        assert response.primary == "Whipper"
        assert response.confidence == 55
        assert response.scores["Whipper"] == 55
        assert set(response.scores) == {"Spinner", "Slingshotter", "Whipper", "Titan", "Unknown"}


class TestSequenceSchemas:

    def test_peaks_request_to_analysis(self):
        request = SegmentPeaksRequest(
            swing_id="swing-1",
            peak_times_ms={"rear_leg": 0, "lead_leg": 30, "torso": 60,
                           "bottom_arm": 90, "top_arm": 150, "bat": 120},
        )
        peaks = request.to_domain()
        assert set(peaks) == set(Segment)

        schema = SequenceAnalysisSchema.from_domain(SequenceAnalyzer().analyze(peaks, request.swing_id))
        assert schema.inversions == 1
        assert [e.direction for e in schema.errors] == ["early", "late"]
        assert schema.errors[0].description == "Bat fired early (position 5 instead of 6)"

    def test_unknown_segment_rejected(self):
        with pytest.raises(ValidationError):
            SegmentPeaksRequest(peak_times_ms={"elbow": 10})


class TestCalibrationSchemas:

    def test_calibration_round_trip(self, calibrator, rng):
        samples = calibration_samples(rng, (30.0, 0.1, 0.25, 0.05, 0.15), n=8)
        request = CalibrateAthleteRequest(
            athlete_id="athlete-7",
            samples=[
                {"brain": s.brain, "body": s.body, "bat": s.bat, "ball": s.ball,
                 "bat_speed_mph": s.bat_speed_mph}
                for s in samples
            ],
        )
        result = calibrator.calibrate(request.athlete_id, request.to_domain(), now=datetime(2024, 1, 1))
        response = AthleteModelResponse.from_domain(result)

        assert response.athlete_id == "athlete-7"
        assert set(response.coefficients) == {"beta_0", "beta_1", "beta_2", "beta_3", "beta_4"}
        assert response.fit_quality == "Strong"
        assert response.contributions["Bat"] == "+0.5 mph per 10 points in Bat"
        assert response.expires_at == datetime(2024, 3, 31)
