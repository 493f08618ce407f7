from __future__ import annotations

import logging
import re
from typing import Callable, Iterable

from nltk import pos_tag
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from .synonyms import SynonymIndex

logger = logging.getLogger(__name__)

Tagger = Callable[[list[str]], list[tuple[str, str]]]

_TOKEN_RE = re.compile(r"\w+")
_WORD_RE = re.compile(r"[A-Za-z][A-Za-z'-]*")

JACCARD_WEIGHT = 0.5
COSINE_WEIGHT = 0.3
SYNONYM_WEIGHT = 0.2

EXACT_NOUN_MATCH = 0.2
SYNONYM_NOUN_MATCH = 0.1


def tokenize(text: str | None) -> list[str]:
    if not text:
        return []
    return _TOKEN_RE.findall(text.lower())


def jaccard_similarity(a: Iterable[str], b: Iterable[str]) -> float:
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def tfidf_cosine(tokens_a: list[str], tokens_b: list[str]) -> float:
    """Cosine similarity of TF-IDF vectors fitted on exactly these two documents.

    A new vectorizer is built for every call so no corpus state is shared.
    """
    if not tokens_a or not tokens_b:
        return 0.0
    vectorizer = TfidfVectorizer(token_pattern=r"\w+", lowercase=False)
    try:
        matrix = vectorizer.fit_transform([" ".join(tokens_a), " ".join(tokens_b)])
    except ValueError:
        # empty vocabulary
        return 0.0
    return float(cosine_similarity(matrix[0], matrix[1])[0, 0])


class TextSimilarity:
    """Blends token overlap, TF-IDF cosine and noun synonym overlap."""

    def __init__(
        self,
        synonyms: SynonymIndex | None = None,
        tagger: Tagger = pos_tag,
    ) -> None:
        self.synonyms = synonyms if synonyms is not None else SynonymIndex()
        self._tagger = tagger

    def _tag(self, text: str | None) -> list[tuple[str, str]]:
        words = _WORD_RE.findall(text or "")
        if not words:
            return []
        try:
            return self._tagger(words)
        except LookupError:
            logger.warning("POS tagger data unavailable, skipping word extraction", exc_info=True)
            return []

    def extract_nouns(self, text: str | None) -> list[str]:
        return [word.lower() for word, tag in self._tag(text) if tag.startswith("NN")]

    def extract_adjectives(self, text: str | None) -> list[str]:
        return [word.lower() for word, tag in self._tag(text) if tag.startswith("JJ")]

    def synonym_score(self, text_a: str, text_b: str) -> float:
        nouns_a = self.extract_nouns(text_a)
        nouns_b = self.extract_nouns(text_b)
        pairs = len(nouns_a) * len(nouns_b)
        if pairs == 0:
            return 0.0

        total = 0.0
        for noun_a in nouns_a:
            for noun_b in nouns_b:
                if noun_a == noun_b:
                    total += EXACT_NOUN_MATCH
                elif self.synonyms.is_synonym(noun_a, noun_b):
                    total += SYNONYM_NOUN_MATCH
        return total / pairs

    def similarity(self, text_a: str | None, text_b: str | None) -> float:
        """Return a score in [0, 1]; 0 when either text is empty."""
        if not text_a or not text_b:
            return 0.0

        tokens_a = tokenize(text_a)
        tokens_b = tokenize(text_b)
        jaccard = jaccard_similarity(tokens_a, tokens_b)
        cosine = tfidf_cosine(tokens_a, tokens_b)
        synonym = self.synonym_score(text_a, text_b)

        score = JACCARD_WEIGHT * jaccard + COSINE_WEIGHT * cosine + SYNONYM_WEIGHT * synonym
        return max(0.0, min(1.0, score))
