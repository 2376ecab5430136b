"""Diagnosis grader.

`grade()` is a pure function: the same submission and rubric always produce
the same GradingResult, and it never raises for malformed or empty input.

Verdict policy (defaults from GradingPolicy):
    coverage >= 0.6 or similarity >= 0.75              → CORRECT
    coverage >= 0.3 or similarity >= 0.4 (not CORRECT) → PARTIAL
    otherwise                                          → INCORRECT
"""

import logging
from typing import Optional

from detective_core.config import GradingPolicy
from detective_core.grading.feedback import verdict_feedback
from detective_core.grading.matcher import find_matches
from detective_core.grading.normalizer import tokenize_text
from detective_core.grading.similarity import diagnosis_similarity
from detective_core.models.case import SolutionRubric
from detective_core.models.session import GradingResult, Verdict

logger = logging.getLogger(__name__)

DEFAULT_GRADING_POLICY = GradingPolicy()


def decide_verdict(coverage_ratio: float, similarity: float, policy: GradingPolicy = DEFAULT_GRADING_POLICY) -> Verdict:
    """Map coverage and diagnosis similarity to a verdict."""
    if coverage_ratio >= policy.correct_coverage or similarity >= policy.correct_similarity:
        return Verdict.CORRECT
    if coverage_ratio >= policy.partial_coverage or similarity >= policy.partial_similarity:
        return Verdict.PARTIAL
    return Verdict.INCORRECT


def grade(submission: str, rubric: SolutionRubric, policy: Optional[GradingPolicy] = None) -> GradingResult:
    """
    Grade a free-text diagnosis against a case rubric.

    Args:
        submission: Player's root-cause guess (any text; non-strings count as empty)
        rubric: Case solution rubric (diagnosis + keywords)
        policy: Thresholds and matching options (defaults if omitted)

    Returns:
        GradingResult with matched keywords, coverage, similarity and verdict
    """
    policy = policy or DEFAULT_GRADING_POLICY
    total = len(rubric.keywords)

    text = tokenize_text(submission if isinstance(submission, str) else "")
    if text.is_empty:
        logger.debug("[Grader] Empty submission after normalization, grading INCORRECT")
        return GradingResult(
            matched_keywords=(),
            total_keywords=total,
            coverage_ratio=0.0,
            diagnosis_similarity=0.0,
            verdict=Verdict.INCORRECT,
            feedback=verdict_feedback(Verdict.INCORRECT, 0),
        )

    matched = find_matches(rubric.keywords, text, max_gap=policy.keyword_max_gap)
    coverage = len(matched) / total if total else 0.0

    similarity = diagnosis_similarity(
        text,
        tokenize_text(rubric.diagnosis),
        metric=policy.similarity_metric,
    )

    verdict = decide_verdict(coverage, similarity, policy)

    logger.debug(
        f"[Grader] matched={len(matched)}/{total} coverage={coverage:.3f} "
        f"similarity={similarity:.3f} verdict={verdict.value}"
    )

    return GradingResult(
        matched_keywords=tuple(matched),
        total_keywords=total,
        coverage_ratio=coverage,
        diagnosis_similarity=similarity,
        verdict=verdict,
        feedback=verdict_feedback(verdict, len(matched)),
    )
