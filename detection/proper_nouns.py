"""
Proper-noun lookup used by smart casing.

A closed, case-insensitive vocabulary (months and weekdays out of the box)
of values that are always capitalized, wherever they land in a sentence.
"""
from typing import FrozenSet, Iterable, Optional

from .services.vocabulary_service import VocabularyService, get_vocabulary_service


class ProperNounClassifier:
    """Closed-vocabulary proper-noun classifier."""

    def __init__(self, extra_words: Optional[Iterable[str]] = None,
                 vocabulary: Optional[VocabularyService] = None):
        self.vocabulary = vocabulary or get_vocabulary_service()
        self._extra: FrozenSet[str] = frozenset(
            word.strip().lower() for word in (extra_words or []) if word and word.strip()
        )
        self._words: Optional[FrozenSet[str]] = None

    @property
    def words(self) -> FrozenSet[str]:
        if self._words is None:
            self._words = self.vocabulary.get_proper_nouns() | self._extra
        return self._words

    def is_proper_noun(self, value: str) -> bool:
        """True when the whole value (ignoring case and outer whitespace) is in the vocabulary."""
        if not value or not isinstance(value, str):
            return False
        return value.strip().lower() in self.words

    __call__ = is_proper_noun
