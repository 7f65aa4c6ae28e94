"""
Integration tests for the FourBEngine facade.
"""

from datetime import datetime, timedelta

import pytest

from fourb.domain import (
    Category,
    LeakType,
    MotorProfile,
    ScoreConfidence,
    Segment,
    SequencingQuality,
    Swing,
)
from fourb.errors import InsufficientDataError

from tests.factories import build_frames, calibration_samples, chain_frames, swing_frames


BETAS = (30.0, 0.1, 0.25, 0.05, 0.15)
NOW = datetime(2024, 6, 1, 12, 0, 0)


def session_swings(timing: float = 150.0, count: int = 5) -> list[Swing]:
    return [
        Swing(bat_speed_mph=70.0, hand_speed_mph=22.0, trigger_to_impact_ms=timing,
              hand_to_bat_ratio=0.9, attack_angle_deg=10.0)
        for _ in range(count)
    ]


class TestSessionScoring:
    """Tests for cached session scoring."""

    def test_second_call_returns_cached_scores(self, engine):
        first = engine.score_session("session-1", session_swings())
        second = engine.score_session("session-1", session_swings(timing=100.0, count=2))

        assert first.cached is False
        assert second.cached is True
        assert second.swing_count == first.swing_count
        assert second.composite == first.composite

    def test_caller_edits_do_not_reach_cache(self, engine):
        first = engine.score_session("session-1", session_swings())
        first.leaks.append(LeakType.TIMING_LEAK)
        first.components["pitch_speed_mph"] = -1.0
        first.missing_inputs.append(Category.BAT)

        second = engine.score_session("session-1", session_swings())
        second.leaks.append(LeakType.POWER_LEAK)
        third = engine.score_session("session-1", session_swings())

        for hit in (second, third):
            assert hit.cached is True
            assert hit.components["pitch_speed_mph"] == 50.0
            assert hit.missing_inputs == []
        assert third.leaks == []

    def test_force_recompute_bypasses_cache(self, engine):
        engine.score_session("session-1", session_swings())
        recomputed = engine.score_session("session-1", session_swings(count=2), force_recompute=True)

        assert recomputed.cached is False
        assert recomputed.swing_count == 2
        assert engine.score_session("session-1", session_swings()).swing_count == 2

    def test_cache_expires(self, engine, clock, settings):
        engine.score_session("session-1", session_swings())
        clock.advance(settings.session_cache_ttl_seconds + 1)

        refreshed = engine.score_session("session-1", session_swings(count=3))
        assert refreshed.cached is False
        assert refreshed.swing_count == 3

    def test_sessions_are_cached_independently(self, engine):
        engine.score_session("session-1", session_swings())
        other = engine.score_session("session-2", session_swings(count=2))
        assert other.cached is False
        assert other.swing_count == 2


class TestBodyPipeline:
    """Tests for pose analysis through the engine."""

    def test_batches_keep_input_order(self, engine):
        batches = [
            (swing_frames(), 60.0),
            (build_frames([0.0] * 20, [0.0] * 20, fps=60), 60.0),
            (swing_frames(), 60.0),
        ]
        results = engine.analyze_pose_batches(batches, max_workers=2)

        assert [r.quality.is_usable for r in results] == [True, False, True]
        assert results[0].summary == results[2].summary

    def test_empty_batch_list(self, engine):
        assert engine.analyze_pose_batches([]) == []

    def test_build_swing_merges_sensor_ratio(self, engine):
        body = engine.analyze_pose(swing_frames(), frame_rate=60)
        sensor = Swing(bat_speed_mph=70.0, hand_speed_mph=21.0)

        swing = engine.build_swing(sensor=sensor, body=body)

        assert swing.swing_id == sensor.swing_id
        assert swing is not sensor
        assert swing.kinematics.hand_to_bat_ratio == 0.3
        assert swing.kinematics.sequencing_quality is SequencingQuality.GOOD
        assert sensor.kinematics is None

    def test_build_swing_from_pose_only(self, engine):
        body = engine.analyze_pose(swing_frames(), frame_rate=60)
        swing = engine.build_swing(body=body)
        assert swing.kinematics.hand_to_bat_ratio is None
        assert swing.bat_speed_mph is None
        assert swing.has_video_data and not swing.has_sensor_data

    def test_pose_only_session_scores_brain_from_body(self, engine):
        body = engine.analyze_pose(swing_frames(), frame_rate=60)
        scores = engine.score_session("pose-only", [engine.build_swing(body=body)])

        expected = engine.scorer.score_brain_from_body(body.summary.consistency_cv)
        assert scores.brain == expected
        assert scores.estimated_inputs == [Category.BRAIN]
        assert Category.BRAIN not in scores.missing_inputs
        assert scores.confidence is ScoreConfidence.ESTIMATED

    def test_merged_swing_reports_efficiency(self, engine):
        body = engine.analyze_pose(swing_frames(), frame_rate=60)
        swing = engine.build_swing(sensor=Swing(bat_speed_mph=70.0), body=body)

        pelvis = body.summary.peak_pelvis_velocity
        assert swing.has_video_data and swing.has_sensor_data
        assert swing.body_to_bat_efficiency == pytest.approx(750.0 / pelvis, abs=0.005)

    def test_infer_motor_profile(self, engine):
        swing = engine.build_swing(sensor=Swing(bat_speed_mph=75.0, hand_to_bat_ratio=1.7))
        assert engine.infer_motor_profile(swing).primary is MotorProfile.WHIPPER


class TestSequencePipeline:

    def test_detect_sequence_from_pose(self, engine):
        peaks = {
            Segment.REAR_LEG: 20, Segment.LEAD_LEG: 25, Segment.TORSO: 30,
            Segment.BOTTOM_ARM: 35, Segment.TOP_ARM: 40, Segment.BAT: 45,
        }
        result = engine.detect_sequence(chain_frames(peaks), frame_rate=100, swing_id="swing-9")
        assert result.swing_id == "swing-9"
        assert result.in_sequence
        assert result.sequence_score >= 90

    def test_analyze_sequences_summarizes_session(self, engine, random_session_peaks):
        analyses, summary = engine.analyze_sequences(random_session_peaks)

        assert len(analyses) == 20
        assert [a.swing_id for a in analyses] == list(random_session_peaks)
        assert summary.swing_count == 20
        assert summary.in_sequence_count == sum(1 for a in analyses if a.in_sequence)
        assert summary.notes == f"Analyzed 20 swings. {summary.in_sequence_count}/20 in sequence."


class TestAthleteModels:

    def test_calibrate_then_project(self, engine, rng):
        engine.calibrate_athlete("athlete-7", calibration_samples(rng, BETAS, n=10), now=NOW)
        projected = engine.project_bat_speed("athlete-7", 50, 60, 70, 40, now=NOW + timedelta(days=1))
        assert projected == pytest.approx(59.5, abs=0.05)

    def test_no_projection_without_live_model(self, engine, rng):
        assert engine.project_bat_speed("athlete-7", 50, 50, 50, 50, now=NOW) is None

        engine.calibrate_athlete("athlete-7", calibration_samples(rng, BETAS, n=10), now=NOW)
        expired = NOW + timedelta(days=91)
        assert engine.project_bat_speed("athlete-7", 50, 50, 50, 50, now=expired) is None

    def test_failed_calibration_leaves_previous_model(self, engine, rng):
        engine.calibrate_athlete("athlete-7", calibration_samples(rng, BETAS, n=10), now=NOW)
        with pytest.raises(InsufficientDataError):
            engine.calibrate_athlete("athlete-7", calibration_samples(rng, BETAS, n=3), now=NOW)
        assert engine.store.get("athlete-7").sample_count == 10
