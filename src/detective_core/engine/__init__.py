"""Session engine, scoring and engine wiring."""

from detective_core.engine.scoring import (
    DEFAULT_SCORING_POLICY,
    compute_outcome,
    disclosure_penalties,
    final_score,
    par_clues,
)
from detective_core.engine.session_engine import SessionEngine
from detective_core.engine.factory import build_repository, build_session_store, create_engine

__all__ = [
    "SessionEngine",
    "create_engine",
    "build_repository",
    "build_session_store",
    "DEFAULT_SCORING_POLICY",
    "compute_outcome",
    "disclosure_penalties",
    "final_score",
    "par_clues",
]
