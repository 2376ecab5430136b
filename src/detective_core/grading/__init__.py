"""Diagnosis grading: normalization, keyword matching, similarity and verdicts."""

from detective_core.grading.grader import DEFAULT_GRADING_POLICY, decide_verdict, grade
from detective_core.grading.matcher import align_keyword, find_matches, match_keyword, rubric_vocabulary
from detective_core.grading.normalizer import TokenizedText, normalize, stem, tokenize_text
from detective_core.grading.similarity import cosine_similarity, diagnosis_similarity, jaccard_similarity
from detective_core.grading.feedback import investigation_nudge, verdict_feedback

__all__ = [
    "grade",
    "decide_verdict",
    "DEFAULT_GRADING_POLICY",
    "match_keyword",
    "find_matches",
    "align_keyword",
    "rubric_vocabulary",
    "normalize",
    "stem",
    "tokenize_text",
    "TokenizedText",
    "jaccard_similarity",
    "cosine_similarity",
    "diagnosis_similarity",
    "verdict_feedback",
    "investigation_nudge",
]
