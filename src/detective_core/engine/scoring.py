"""Final score computation.

    par                = total clues - par_offset (1 by default, never below 0)
    clue_penalty       = max(0, revealed - par) * 5
    hint_penalty       = hints_used * 8
    disclosure_penalty = min(40, clue_penalty + hint_penalty)
    final_score        = clamp(coverage * 100 - disclosure_penalty, 0, 100)

A CORRECT verdict is floored at 60 so that solving the case with extra help
never reads as a failing score.
"""

from datetime import datetime, timezone
from typing import Optional

from detective_core.config import ScoringPolicy
from detective_core.models.case import CaseDefinition
from detective_core.models.session import GradingResult, Outcome, Session, Verdict

DEFAULT_SCORING_POLICY = ScoringPolicy()


def par_clues(total_clues: int, policy: ScoringPolicy = DEFAULT_SCORING_POLICY) -> int:
    """Clues that can be revealed without penalty."""
    return max(0, total_clues - policy.par_offset)


def disclosure_penalties(
    clues_revealed: int,
    hints_used: int,
    total_clues: int,
    policy: ScoringPolicy = DEFAULT_SCORING_POLICY,
) -> tuple:
    """Return (clue_penalty, hint_penalty, capped combined penalty)."""
    par = par_clues(total_clues, policy)
    clue_penalty = max(0, clues_revealed - par) * policy.clue_penalty
    hint_penalty = hints_used * policy.hint_penalty
    combined = min(policy.max_penalty, clue_penalty + hint_penalty)
    return float(clue_penalty), float(hint_penalty), float(combined)


def final_score(
    coverage_ratio: float,
    verdict: Verdict,
    penalty: float,
    policy: ScoringPolicy = DEFAULT_SCORING_POLICY,
) -> tuple:
    """Return (score rounded to 2 decimals, whether the CORRECT floor applied)."""
    raw = coverage_ratio * 100.0 - penalty
    score = min(100.0, max(0.0, raw))

    floor_applied = False
    if verdict == Verdict.CORRECT and score < policy.correct_floor:
        score = policy.correct_floor
        floor_applied = True

    return round(score, 2), floor_applied


def compute_outcome(
    case: CaseDefinition,
    session: Session,
    grading: GradingResult,
    guess_text: str = "",
    policy: Optional[ScoringPolicy] = None,
    submitted_at: Optional[datetime] = None,
) -> Outcome:
    """Combine a grading result with the session's disclosure history."""
    policy = policy or DEFAULT_SCORING_POLICY
    submitted_at = submitted_at or datetime.now(timezone.utc)

    clue_penalty, hint_penalty, penalty = disclosure_penalties(
        clues_revealed=session.clues_revealed,
        hints_used=session.hints_used,
        total_clues=case.total_clues,
        policy=policy,
    )
    score, floor_applied = final_score(grading.coverage_ratio, grading.verdict, penalty, policy)

    return Outcome(
        final_score=score,
        verdict=grading.verdict,
        grading=grading,
        guess_text=guess_text,
        par_clues=par_clues(case.total_clues, policy),
        clues_revealed=session.clues_revealed,
        hints_used=session.hints_used,
        clue_penalty=clue_penalty,
        hint_penalty=hint_penalty,
        disclosure_penalty=penalty,
        floor_applied=floor_applied,
        submitted_at=submitted_at,
        time_taken_seconds=max(0.0, (submitted_at - session.started_at).total_seconds()),
        solution=case.solution,
    )
