from __future__ import annotations

import logging
import threading
from typing import Callable

from nltk.corpus import wordnet

logger = logging.getLogger(__name__)

SynonymLookup = Callable[[str], set[str]]

# WordNet is a lazy corpus whose first load is not thread-safe.
_wordnet_lock = threading.Lock()


def wordnet_synonyms(word: str) -> set[str]:
    """Return the WordNet noun lemmas sharing a synset with *word*.

    Returns an empty set when the WordNet corpus is not installed.
    """
    try:
        with _wordnet_lock:
            wordnet.ensure_loaded()
        synsets = wordnet.synsets(word, pos=wordnet.NOUN)
    except LookupError:
        logger.warning("WordNet corpus unavailable, synonym lookup disabled", exc_info=True)
        return set()
    return {
        lemma.replace("_", " ").lower()
        for synset in synsets
        for lemma in synset.lemma_names()
    }


class SynonymIndex:
    """Caches synonym checks per ordered word pair.

    Safe to share between scoring threads; two threads racing on the same
    pair both compute the answer and the last write wins.
    """

    def __init__(self, lookup: SynonymLookup = wordnet_synonyms) -> None:
        self._lookup = lookup
        self._cache: dict[tuple[str, str], bool] = {}
        self._lock = threading.Lock()

    def is_synonym(self, word: str, other: str) -> bool:
        key = (word, other)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        try:
            result = other in self._lookup(word)
        except Exception:
            # Not cached, so the next check retries the lookup.
            logger.warning("Synonym lookup failed for %r", word, exc_info=True)
            return False

        with self._lock:
            self._cache[key] = result
        return result

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
