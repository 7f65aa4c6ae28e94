"""
4B Engine

High-level facade that wires pose kinematics, sequence analysis,
composite scoring and athlete calibration together.

This is the main entry point for embedding the engine.
"""

import copy
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime
from typing import Mapping, Optional, Sequence

from ..config import EngineSettings, get_settings
from ..domain.pose import Handedness, PoseFrame
from ..domain.kinematics import BodyAnalysis, CalibrationCoefficients, SwingWindow
from ..domain.sequence import Segment, SegmentPeak, SequenceAnalysis, SessionSequenceSummary
from ..domain.scoring import Swing, SessionScores
from ..domain.profile import MotorProfileResult
from ..domain.athlete import CalibrationSample, CalibrationResult
from .kinematics_extractor import KinematicsExtractor
from .segment_peaks import SegmentPeakDetector
from .sequence_analyzer import SequenceAnalyzer
from .scorer import FourBScorer
from .motor_profile import MotorProfileClassifier
from .calibrator import AthleteCalibrator
from .cache import TTLCache
from .stores import AthleteModelStore

logger = logging.getLogger(__name__)


class FourBEngine:
    """
    Runs the 4B pipeline for sessions and athletes.

    The engine holds no per-request state beyond the advisory session
    score cache and the athlete model store.

    Usage:
        engine = FourBEngine()

        body = engine.analyze_pose(frames, frame_rate=120)
        swing = engine.build_swing(sensor=sensor_swing, body=body)
        scores = engine.score_session("session-1", [swing])

        result = engine.calibrate_athlete("athlete-7", samples)
        mph = engine.project_bat_speed("athlete-7", 60, 55, 62, 58)
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        store: Optional[AthleteModelStore] = None,
        score_cache: Optional[TTLCache] = None,
    ):
        self.settings = settings or get_settings()
        self.extractor = KinematicsExtractor(self.settings)
        self.peak_detector = SegmentPeakDetector(self.settings)
        self.sequence_analyzer = SequenceAnalyzer()
        self.scorer = FourBScorer(self.settings)
        self.profiler = MotorProfileClassifier()
        self.calibrator = AthleteCalibrator(self.settings, store)
        self.score_cache = score_cache if score_cache is not None else TTLCache(
            ttl_seconds=self.settings.session_cache_ttl_seconds
        )

    @property
    def store(self) -> AthleteModelStore:
        return self.calibrator.store

    # -------------------------------------------------------------------------
    # Body
    # -------------------------------------------------------------------------

    def analyze_pose(
        self,
        frames: Sequence[PoseFrame],
        frame_rate: float,
        camera_angle_deg: Optional[float] = None,
        calibration: Optional[CalibrationCoefficients] = None,
    ) -> BodyAnalysis:
        """Extract kinematics from one swing's pose frames."""
        return self.extractor.analyze(
            frames,
            frame_rate,
            camera_angle_deg=camera_angle_deg,
            calibration=calibration,
        )

    def analyze_pose_batches(
        self,
        batches: Sequence[tuple[Sequence[PoseFrame], float]],
        max_workers: Optional[int] = None,
    ) -> list[BodyAnalysis]:
        """
        Analyze many swings in parallel.

        Args:
            batches: (frames, frame_rate) per swing
            max_workers: Thread pool size, defaults to settings.max_workers

        Returns:
            One BodyAnalysis per batch, in input order
        """
        if not batches:
            return []

        workers = max_workers or self.settings.max_workers
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self.extractor.analyze, frames, frame_rate)
                for frames, frame_rate in batches
            ]
            results = [future.result() for future in futures]

        usable = sum(1 for r in results if r.quality.is_usable)
        logger.info(f"Analyzed {len(results)} pose batches ({usable} usable) with {workers} workers")
        return results

    # -------------------------------------------------------------------------
    # Sequence
    # -------------------------------------------------------------------------

    def detect_sequence(
        self,
        frames: Sequence[PoseFrame],
        frame_rate: float,
        window: Optional[SwingWindow] = None,
        handedness: Handedness = Handedness.RIGHT,
        bat_peak_time_ms: Optional[float] = None,
        swing_id: Optional[str] = None,
    ) -> SequenceAnalysis:
        """Detect segment peaks from pose frames and analyze their order."""
        peaks = self.peak_detector.detect(
            frames,
            frame_rate,
            window=window,
            handedness=handedness,
            bat_peak_time_ms=bat_peak_time_ms,
        )
        return self.sequence_analyzer.analyze(peaks, swing_id=swing_id)

    def analyze_sequences(
        self,
        peaks_by_swing: Mapping[str, Mapping[Segment, SegmentPeak]],
    ) -> tuple[list[SequenceAnalysis], SessionSequenceSummary]:
        """
        Analyze every swing's segment peaks and summarize the session.
        """
        analyses = [
            self.sequence_analyzer.analyze(peaks, swing_id=swing_id)
            for swing_id, peaks in peaks_by_swing.items()
        ]
        summary = self.sequence_analyzer.summarize_session(analyses)
        logger.info(f"Sequence analysis: {summary.notes} Average score {summary.average_sequence_score}")
        return analyses, summary

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    @staticmethod
    def build_swing(
        sensor: Optional[Swing] = None,
        body: Optional[BodyAnalysis] = None,
        sequence: Optional[SequenceAnalysis] = None,
    ) -> Swing:
        """
        Merge a sensor swing with pose-derived analyses.

        When both sources exist the sensor hand-to-bat ratio is carried
        into the kinematic summary. The merged swing reports which sources
        it has (has_video_data / has_sensor_data) and its body-to-bat
        efficiency; the scorer falls back to the pose consistency CV for
        Brain when the swing has no trigger timing.
        """
        swing = replace(sensor) if sensor is not None else Swing()
        if body is not None:
            summary = body.summary
            ratio = swing.effective_hand_to_bat_ratio
            if ratio is not None:
                summary = replace(summary, hand_to_bat_ratio=ratio)
            swing.kinematics = summary
        if sequence is not None:
            swing.sequence = sequence
        return swing

    def infer_motor_profile(self, swing: Swing) -> MotorProfileResult:
        """Classify a merged swing into a motor profile."""
        return self.profiler.infer(swing)

    def score_session(
        self,
        session_id: str,
        swings: Sequence[Swing],
        pitch_speed_mph: Optional[float] = None,
        force_recompute: bool = False,
    ) -> SessionScores:
        """
        Score a session, reusing cached scores unless forced.

        The cache is advisory: two concurrent calls may both compute.
        Cached scores are stored and returned as private copies.
        """
        if not force_recompute:
            cached = self.score_cache.get(session_id)
            if cached is not None:
                logger.info(f"Returning cached scores for {session_id}")
                return replace(copy.deepcopy(cached), cached=True)

        scores = self.scorer.score(swings, pitch_speed_mph=pitch_speed_mph, session_id=session_id)
        self.score_cache.set(session_id, copy.deepcopy(scores))
        return scores

    # -------------------------------------------------------------------------
    # Athlete Models
    # -------------------------------------------------------------------------

    def calibrate_athlete(
        self,
        athlete_id: str,
        samples: Sequence[CalibrationSample],
        now: Optional[datetime] = None,
    ) -> CalibrationResult:
        return self.calibrator.calibrate(athlete_id, samples, now=now)

    def project_bat_speed(
        self,
        athlete_id: str,
        brain: float,
        body: float,
        bat: float,
        ball: float,
        now: Optional[datetime] = None,
    ) -> Optional[float]:
        """
        Predicted bat speed from the athlete's live model.

        Returns:
            Bat speed in mph (1 decimal), or None without a live model
        """
        model = self.calibrator.live_model(athlete_id, now=now)
        if model is None:
            logger.debug(f"No live model for {athlete_id}")
            return None
        return round(model.predict_bat_speed(brain, body, bat, ball), 1)
