"""Tolerant keyword matching.

A rubric keyword (single word or short phrase) matches a submission when:

- its normalized form appears literally in the normalized submission, or
- its content tokens can be aligned, in their original relative order, with
  tokens of the submission where consecutive aligned tokens are separated by at
  most `max_gap` extra tokens, or
- the same alignment succeeds with one keyword token substituted: the slot of
  the substituted token must still be filled by some other submission word in
  the right place ("ttl expires" for "ttl mismatch"). Only keywords of two or
  more tokens get a substitution; a keyword token is never simply dropped.

Gaps are counted in words that belong to no rubric keyword. Rubric words
sitting between two aligned tokens do not push them apart.

When a whole rubric is graded, one submission token may back the substituted
match of at most one keyword. Exact matches claim nothing.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from detective_core.grading.normalizer import TokenizedText, tokenize_text

logger = logging.getLogger(__name__)

# Shortest stem for which a prefix counts as a match ("expir" ~ "expiration")
MIN_PREFIX_LENGTH = 4


def tokens_equivalent(a: str, b: str) -> bool:
    """Equal stems, or one stem is a prefix of the other and both are long enough."""
    if a == b:
        return True
    if len(a) < MIN_PREFIX_LENGTH or len(b) < MIN_PREFIX_LENGTH:
        return False
    return a.startswith(b) or b.startswith(a)


def edit_tolerance(keyword_length: int) -> int:
    """Number of keyword tokens that may be substituted by another word."""
    return 1 if keyword_length >= 2 else 0


def rubric_vocabulary(keywords: Iterable[str]) -> FrozenSet[str]:
    """Every stemmed token of every keyword."""
    return frozenset(token for keyword in keywords for token in tokenize_text(keyword).tokens)


def free_positions(tokens: Sequence[str], vocabulary: Iterable[str]) -> FrozenSet[int]:
    """Positions holding a rubric word; they do not count towards a gap."""
    vocabulary = tuple(vocabulary)
    return frozenset(
        p for p, token in enumerate(tokens)
        if any(tokens_equivalent(token, word) for word in vocabulary)
    )


def align_keyword(
    keyword_tokens: Sequence[str],
    submission_tokens: Sequence[str],
    max_gap: int = 2,
    edits: int = 0,
    free: FrozenSet[int] = frozenset(),
) -> Iterator[Tuple[int, ...]]:
    """
    In-order alignments of keyword tokens inside the submission.

    Yields one submission position per keyword token. At most `edits` of
    those positions may hold a word that is not equivalent to its keyword
    token. Between consecutive aligned positions there may be at most
    `max_gap` tokens outside `free`.
    """
    n = len(keyword_tokens)
    size = len(submission_tokens)
    if n == 0 or size < n:
        return

    # blocked[i]: non-free positions before i
    blocked = [0]
    for p in range(size):
        blocked.append(blocked[-1] + (0 if p in free else 1))

    def walk(j: int, p_prev: int, edits_left: int, path: Tuple[int, ...]) -> Iterator[Tuple[int, ...]]:
        if j == n:
            yield path
            return
        start = 0 if j == 0 else p_prev + 1
        for p in range(start, size - (n - j - 1)):
            if j > 0 and blocked[p] - blocked[p_prev + 1] > max_gap:
                break
            if tokens_equivalent(keyword_tokens[j], submission_tokens[p]):
                yield from walk(j + 1, p, edits_left, path + (p,))
            elif edits_left:
                yield from walk(j + 1, p, edits_left - 1, path + (p,))

    yield from walk(0, -1, edits, ())


# ============================================================
# Single keyword
# ============================================================

@dataclass
class _KeywordMatch:
    """Outcome of matching one keyword: exact, or the token sets a substituted match could claim."""

    exact: bool = False
    claims: List[FrozenSet[int]] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return self.exact or bool(self.claims)


def _match(
    keyword: str,
    submission: TokenizedText,
    max_gap: int,
    vocabulary: FrozenSet[str],
    free_cache: Dict[bool, FrozenSet[int]],
) -> _KeywordMatch:
    kw = tokenize_text(keyword)
    if kw.is_empty or submission.is_empty:
        return _KeywordMatch()

    # Literal containment on word boundaries
    if f" {kw.normalized} " in f" {submission.normalized} ":
        return _KeywordMatch(exact=True)

    # Keywords made only of stop words are compared on all tokens
    on_content = bool(kw.content)
    if on_content:
        keyword_tokens, submission_tokens = kw.content, submission.content
        to_token_index = submission.content_positions
    else:
        keyword_tokens, submission_tokens = kw.tokens, submission.tokens
        to_token_index = range(len(submission.tokens))

    if on_content not in free_cache:
        free_cache[on_content] = free_positions(submission_tokens, vocabulary)
    free = free_cache[on_content]

    if next(align_keyword(keyword_tokens, submission_tokens, max_gap, 0, free), None) is not None:
        return _KeywordMatch(exact=True)

    tolerance = edit_tolerance(len(keyword_tokens))
    if not tolerance:
        return _KeywordMatch()

    claims: List[FrozenSet[int]] = []
    seen: Set[FrozenSet[int]] = set()
    for path in align_keyword(keyword_tokens, submission_tokens, max_gap, tolerance, free):
        claim = frozenset(to_token_index[p] for p in path)
        if claim not in seen:
            seen.add(claim)
            claims.append(claim)
    return _KeywordMatch(claims=claims)


def match_keyword(
    keyword: str,
    submission: TokenizedText,
    max_gap: int = 2,
    vocabulary: Optional[Iterable[str]] = None,
) -> bool:
    """Check whether a rubric keyword is present in a tokenized submission.

    `vocabulary` lists the rubric words that do not count towards a gap;
    it defaults to the keyword's own tokens.
    """
    words = frozenset(vocabulary) if vocabulary is not None else rubric_vocabulary([keyword])
    result = _match(keyword, submission, max_gap, words, {})
    logger.debug(
        f"[Matcher] keyword='{keyword}' exact={result.exact} "
        f"substituted={len(result.claims)} matched={result.matched}"
    )
    return result.matched


# ============================================================
# Whole rubric
# ============================================================

def _select_substituted(claims: Dict[int, List[FrozenSet[int]]]) -> Set[int]:
    """Largest set of keywords whose substituted matches use disjoint tokens."""
    selected: Set[int] = set()

    # Keywords with a claim no other keyword could touch are settled up front
    touched = {index: frozenset().union(*options) for index, options in claims.items()}
    contested: List[int] = []
    for index in sorted(claims):
        others = frozenset().union(*(touched[o] for o in claims if o != index))
        if any(not (claim & others) for claim in claims[index]):
            selected.add(index)
        else:
            contested.append(index)

    best: List[int] = []

    def search(k: int, used: FrozenSet[int], chosen: List[int]) -> bool:
        nonlocal best
        if len(chosen) + len(contested) - k <= len(best):
            return False
        if k == len(contested):
            best = list(chosen)
            return len(best) == len(contested)
        index = contested[k]
        for claim in claims[index]:
            if not (claim & used) and search(k + 1, used | claim, chosen + [index]):
                return True
        return search(k + 1, used, chosen)

    search(0, frozenset(), [])
    return selected | set(best)


def find_matches(keywords: Sequence[str], submission: TokenizedText, max_gap: int = 2) -> List[str]:
    """Keywords present in the submission, in rubric order."""
    vocabulary = rubric_vocabulary(keywords)
    free_cache: Dict[bool, FrozenSet[int]] = {}

    exact: Set[int] = set()
    claims: Dict[int, List[FrozenSet[int]]] = {}
    for index, keyword in enumerate(keywords):
        result = _match(keyword, submission, max_gap, vocabulary, free_cache)
        if result.exact:
            exact.add(index)
        elif result.claims:
            claims[index] = result.claims

    substituted = _select_substituted(claims)
    if len(substituted) < len(claims):
        logger.debug(
            f"[Matcher] {len(claims) - len(substituted)} substituted match(es) dropped "
            f"for sharing submission tokens"
        )

    return [
        keyword for index, keyword in enumerate(keywords)
        if index in exact or index in substituted
    ]
