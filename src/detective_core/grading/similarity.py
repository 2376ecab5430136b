"""Deterministic similarity between a submission and the rubric diagnosis."""

from collections import Counter
from typing import Sequence

import numpy as np

from detective_core.config import SimilarityMetric
from detective_core.grading.normalizer import TokenizedText


def jaccard_similarity(a: Sequence[str], b: Sequence[str]) -> float:
    """|A ∩ B| / |A ∪ B| over token sets (0.0 when both are empty)."""
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def cosine_similarity(a: Sequence[str], b: Sequence[str]) -> float:
    """Cosine similarity between term-frequency vectors."""
    counts_a, counts_b = Counter(a), Counter(b)
    vocabulary = sorted(set(counts_a) | set(counts_b))
    if not vocabulary:
        return 0.0

    vec_a = np.array([counts_a[term] for term in vocabulary], dtype=float)
    vec_b = np.array([counts_b[term] for term in vocabulary], dtype=float)

    norm = np.linalg.norm(vec_a) * np.linalg.norm(vec_b)
    if norm == 0:
        return 0.0

    value = float(np.dot(vec_a, vec_b) / norm)
    # Guard against float error pushing identical vectors past 1.0
    return min(1.0, max(0.0, value))


def diagnosis_similarity(
    submission: TokenizedText,
    diagnosis: TokenizedText,
    metric: SimilarityMetric = SimilarityMetric.JACCARD,
) -> float:
    """Compare content tokens of the submission and the rubric diagnosis."""
    if metric == SimilarityMetric.COSINE:
        return cosine_similarity(submission.content, diagnosis.content)
    return jaccard_similarity(submission.content, diagnosis.content)
