"""
4B Scoring Engine

Turns raw swing telemetry (body pose sequences, bat sensor readings,
ball flight data) into Brain / Body / Bat / Ball category scores,
kinetic-chain sequencing diagnostics and per-athlete bat speed models.

Usage:
    from fourb import FourBEngine

    engine = FourBEngine()
    body = engine.analyze_pose(frames, frame_rate=120)
    scores = engine.score_session("session-1", swings)
"""

__version__ = "0.1.0"

from .services.engine import FourBEngine

__all__ = ["FourBEngine", "__version__"]
