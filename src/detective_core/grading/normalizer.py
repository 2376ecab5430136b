"""Text normalization for diagnosis grading.

Submissions, rubric keywords and the rubric diagnosis all pass through the
same pipeline so that surface-form differences do not affect matching:

1. lowercase
2. punctuation → space
3. collapse whitespace
4. split into tokens and apply a fixed suffix-stripping stemmer
5. drop stop words to get the content tokens

The stemmer is intentionally crude and fixed: it only has to map both sides
of a comparison to the same form ("caches", "caching", "cache" → "cach").
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet, Tuple

_PUNCTUATION = re.compile(r"[^\w\s]|_", re.UNICODE)
_WHITESPACE = re.compile(r"\s+")

# Letters that are not un-doubled after stripping -ing/-ed ("falling", "missing")
_KEEP_DOUBLED = frozenset("lsz")
_VOWELS = frozenset("aeiouy")

STOP_WORDS: FrozenSet[str] = frozenset({
    "a", "about", "after", "all", "also", "am", "an", "and", "any", "are", "aren",
    "as", "at", "be", "because", "been", "before", "being", "but", "by", "can",
    "could", "d", "did", "didn", "do", "does", "doesn", "don", "during", "each",
    "for", "from", "get", "gets", "getting", "got", "had", "has", "have", "he",
    "her", "here", "his", "how", "i", "if", "in", "into", "is", "isn", "it",
    "its", "just", "ll", "m", "me", "my", "of", "on", "onto", "or", "our", "out",
    "re", "s", "she", "so", "some", "such", "t", "than", "that", "the", "their",
    "them", "then", "there", "these", "they", "this", "those", "through", "to",
    "too", "up", "us", "ve", "very", "via", "was", "wasn", "we", "were", "weren",
    "what", "when", "where", "which", "while", "who", "why", "will", "with",
    "won", "would", "you", "your",
})


@dataclass(frozen=True)
class TokenizedText:
    """Normalized form of a piece of text."""

    normalized: str
    tokens: Tuple[str, ...]   # Every token, stemmed
    content: Tuple[str, ...]  # Stemmed tokens minus stop words
    content_positions: Tuple[int, ...] = ()  # Index in `tokens` of each content token

    @property
    def is_empty(self) -> bool:
        return not self.tokens

    @property
    def content_set(self) -> FrozenSet[str]:
        return frozenset(self.content)


def normalize(text: str) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    lowered = text.lower()
    spaced = _PUNCTUATION.sub(" ", lowered)
    return _WHITESPACE.sub(" ", spaced).strip()


def stem(token: str) -> str:
    """Strip common English suffixes with a fixed rule set.

    Rules, applied in order:
    - "ies" → "y"; otherwise a trailing "s" unless the word ends in ss/us/is
    - "ing" or "ed" when at least three characters remain, un-doubling a
      final double consonant ("stopping" → "stop")
    - a trailing "e"

    Tokens of three characters or fewer and numbers are returned unchanged.
    """
    if len(token) <= 3 or token.isdigit():
        return token

    if token.endswith("ies") and len(token) > 4:
        token = token[:-3] + "y"
    elif token.endswith("s") and not token.endswith(("ss", "us", "is")):
        token = token[:-1]

    for suffix in ("ing", "ed"):
        if token.endswith(suffix) and len(token) - len(suffix) >= 3:
            token = token[:-len(suffix)]
            if (
                len(token) >= 4
                and token[-1] == token[-2]
                and token[-1] not in _VOWELS
                and token[-1] not in _KEEP_DOUBLED
            ):
                token = token[:-1]
            break

    if token.endswith("e") and len(token) > 3:
        token = token[:-1]

    return token


@lru_cache(maxsize=4096)
def tokenize_text(text: str) -> TokenizedText:
    """Normalize, tokenize and stem text.

    Cached: rubric keywords and diagnoses are tokenized on every submission.
    """
    normalized = normalize(text)
    if not normalized:
        return TokenizedText(normalized="", tokens=(), content=(), content_positions=())

    raw_tokens = normalized.split(" ")
    tokens = tuple(stem(token) for token in raw_tokens)
    content_positions = tuple(i for i, raw in enumerate(raw_tokens) if raw not in STOP_WORDS)
    content = tuple(tokens[i] for i in content_positions)
    return TokenizedText(
        normalized=normalized,
        tokens=tokens,
        content=content,
        content_positions=content_positions,
    )
