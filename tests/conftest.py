"""
Shared fixtures for engine tests.

Every fixture builds its own EngineSettings so tests never depend on
the process environment or the cached global settings.
"""

import numpy as np
import pytest

from fourb.config import EngineSettings
from fourb.services import (
    AthleteCalibrator,
    FourBEngine,
    FourBScorer,
    InMemoryAthleteModelStore,
    KinematicsExtractor,
    SegmentPeakDetector,
    SequenceAnalyzer,
    TTLCache,
)

from tests.factories import FakeClock, random_sequence_peaks


@pytest.fixture
def settings():
    return EngineSettings()


@pytest.fixture
def extractor(settings):
    return KinematicsExtractor(settings)


@pytest.fixture
def peak_detector(settings):
    return SegmentPeakDetector(settings)


@pytest.fixture
def analyzer():
    return SequenceAnalyzer()


@pytest.fixture
def scorer(settings):
    return FourBScorer(settings)


@pytest.fixture
def store():
    return InMemoryAthleteModelStore()


@pytest.fixture
def calibrator(settings, store):
    return AthleteCalibrator(settings, store)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(settings, store, clock):
    cache = TTLCache(ttl_seconds=settings.session_cache_ttl_seconds, clock=clock)
    return FourBEngine(settings=settings, store=store, score_cache=cache)


@pytest.fixture
def rng():
    return np.random.default_rng(20240601)


@pytest.fixture
def random_session_peaks(rng):
    """Seeded stand-in for sensor-captured segment peaks: 20 swings."""
    return {f"swing-{i}": random_sequence_peaks(rng) for i in range(20)}
