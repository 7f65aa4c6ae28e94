"""
Core Services

Business logic for kinematics extraction, sequencing, scoring and
athlete calibration.
"""

from .kinematics_extractor import KinematicsExtractor
from .segment_peaks import SegmentPeakDetector, SEGMENT_LANDMARKS
from .sequence_analyzer import SequenceAnalyzer
from .scorer import FourBScorer
from .motor_profile import MotorProfileClassifier
from .calibrator import AthleteCalibrator
from .cache import TTLCache
from .stores import AthleteModelStore, InMemoryAthleteModelStore
from .engine import FourBEngine

__all__ = [
    "KinematicsExtractor",
    "SegmentPeakDetector",
    "SEGMENT_LANDMARKS",
    "SequenceAnalyzer",
    "FourBScorer",
    "MotorProfileClassifier",
    "AthleteCalibrator",
    "TTLCache",
    "AthleteModelStore",
    "InMemoryAthleteModelStore",
    "FourBEngine",
]
