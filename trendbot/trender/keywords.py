"""Keyword extraction for trending topic detection."""

import re
from typing import FrozenSet, Iterable, Optional, Set

DEFAULT_MIN_KEYWORD_LENGTH = 2
DEFAULT_MAX_KEYWORD_LENGTH = 20

# Common English function words plus newsroom verbs ("said", "says")
DEFAULT_STOPWORDS: FrozenSet[str] = frozenset({
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for',
    'of', 'with', 'by', 'from', 'as', 'is', 'was', 'are', 'were', 'be',
    'been', 'being', 'has', 'have', 'had', 'do', 'does', 'did', 'will',
    'would', 'could', 'should', 'may', 'might', 'can', 'this', 'that',
    'these', 'those', 'it', 'its', 'their', 'them', 'they', 'we', 'you',
    'he', 'she', 'his', 'her', 'our', 'said', 'says', 'about', 'after',
    'also', 'more', 'when', 'where', 'which', 'while', 'who', 'into',
    'than', 'just', 'over', 'not', 'no', 'so', 'if', 'up', 'out', 'new',
    'how', 'what', 'why', 'all', 'any', 'some', 'now',
})

_NON_WORD_RE = re.compile(r'[^\w\s]')
_ALPHA_RE = re.compile(r'^[a-z]+$')


class KeywordExtractor:
    """Turns article text into a set of candidate topic keywords."""

    def __init__(self, min_length: int = DEFAULT_MIN_KEYWORD_LENGTH,
                 max_length: int = DEFAULT_MAX_KEYWORD_LENGTH,
                 stopwords: Optional[Iterable[str]] = None):
        self.min_length = min_length
        self.max_length = max_length
        self.stopwords: FrozenSet[str] = (
            frozenset(w.lower() for w in stopwords) if stopwords is not None else DEFAULT_STOPWORDS
        )

    def tokenize(self, text: str) -> list:
        """Lowercase text and split it on whitespace and punctuation."""
        if not text or not isinstance(text, str):
            return []
        return _NON_WORD_RE.sub(' ', text.lower()).split()

    def is_candidate(self, token: str) -> bool:
        return (
            self.min_length <= len(token) <= self.max_length
            and token not in self.stopwords
            and _ALPHA_RE.match(token) is not None
        )

    def extract(self, text: str) -> Set[str]:
        """
        Extract candidate keywords from text.

        Args:
            text: Article title and body

        Returns:
            Set of lowercase keywords; empty for empty or non-string input
        """
        return {token for token in self.tokenize(text) if self.is_candidate(token)}
