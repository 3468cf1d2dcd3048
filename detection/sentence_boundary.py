"""
Sentence Boundary Classifiers

Two interchangeable strategies answer one question: does a character offset
in a paragraph begin a new sentence?

- HeuristicSentenceClassifier looks only at the punctuation before the
  offset. It is fast and needs no model, but it treats every period as a
  sentence end ("Contact Dr. " looks like a finished sentence).
- LinguisticSentenceClassifier segments the whole paragraph with spaCy,
  registering known abbreviations as single tokens so "Dr.", "U.S.", "e.g."
  and friends do not split sentences.
"""

import logging
import re
import threading
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from config import Config
from document_model.markers import mask_markers
from .services.vocabulary_service import VocabularyService, get_vocabulary_service

try:
    import spacy
    from spacy.language import Language
    from spacy.symbols import ORTH
    SPACY_AVAILABLE = True
except ImportError:
    SPACY_AVAILABLE = False

logger = logging.getLogger(__name__)

# Sentence-ending punctuation, optionally followed by a closing quote
SENTENCE_END_PATTERN = re.compile(r'[.!?]["\'”’]?\s*$')

TERMINAL_ABBREVIATION_COMPONENT = "terminal_abbreviation_boundaries"


class SentenceBoundaryClassifier(ABC):
    """Strategy interface: ``classify(text, offset) -> bool``."""

    name = "base"

    @abstractmethod
    def classify(self, text: str, offset: int) -> bool:
        """Return True when ``offset`` in ``text`` is the start of a sentence."""

    @staticmethod
    def _clamp(text: str, offset: int) -> int:
        return max(0, min(offset, len(text)))


class HeuristicSentenceClassifier(SentenceBoundaryClassifier):
    """Punctuation-only classifier. Wrong for abbreviations by construction."""

    name = "heuristic"

    def classify(self, text: str, offset: int) -> bool:
        text = text or ""
        preceding = mask_markers(text)[:self._clamp(text, offset)]

        # Empty = start of paragraph = sentence start
        if not preceding.strip():
            return True

        return bool(SENTENCE_END_PATTERN.search(preceding))


if SPACY_AVAILABLE:

    class TerminalAbbreviationBoundaries:
        """
        Pipeline component that lets an abbreviation close a sentence.

        "Acme Inc. is hiring" stays one sentence; "I work at Acme Inc. The
        office is new" gets a boundary before "The".
        """

        def __init__(self, abbreviations: Iterable[str]):
            self.abbreviations = frozenset(abbreviations)

        def __call__(self, doc):
            for token in doc[:-1]:
                if token.text not in self.abbreviations or not token.whitespace_:
                    continue
                following = doc[token.i + 1]
                if following.text[:1].isupper():
                    following.is_sent_start = True
            return doc

    @Language.factory(TERMINAL_ABBREVIATION_COMPONENT, default_config={"abbreviations": []})
    def create_terminal_abbreviation_boundaries(nlp, name, abbreviations):
        return TerminalAbbreviationBoundaries(abbreviations)


class LinguisticSentenceClassifier(SentenceBoundaryClassifier):
    """
    spaCy-backed classifier.

    By default a blank English pipeline with the rule sentencizer is used, so
    no trained model has to be installed; set ``SPACY_MODEL`` to segment with
    a trained parser instead. Abbreviations come from the vocabulary service.
    """

    name = "linguistic"

    def __init__(self, model_name: Optional[str] = None,
                 vocabulary: Optional[VocabularyService] = None,
                 cache_size: int = 512):
        if not SPACY_AVAILABLE:
            raise RuntimeError("spaCy is required for linguistic sentence detection. "
                               "Install with: pip install spacy")
        self.model_name = Config.SPACY_MODEL if model_name is None else model_name
        self.vocabulary = vocabulary or get_vocabulary_service()
        self._nlp = None
        self._nlp_lock = threading.Lock()
        self._sentence_starts = lru_cache(maxsize=cache_size)(self._compute_sentence_starts)

    @property
    def nlp(self):
        if self._nlp is None:
            with self._nlp_lock:
                if self._nlp is None:
                    self._nlp = self._build_pipeline()
        return self._nlp

    def _build_pipeline(self):
        nlp = None
        if self.model_name:
            try:
                nlp = spacy.load(self.model_name)
                logger.info(f"Loaded spaCy model: {self.model_name}")
            except OSError:
                logger.warning(f"spaCy model '{self.model_name}' not found, using blank English pipeline")
        if nlp is None:
            nlp = spacy.blank("en")

        abbreviations: FrozenSet[str] = self.vocabulary.get_abbreviations()
        for form in sorted(abbreviations):
            nlp.tokenizer.add_special_case(form, [{ORTH: form}])

        if not any(name in nlp.pipe_names for name in ("parser", "senter", "sentencizer")):
            nlp.add_pipe("sentencizer")

        component_config = {"abbreviations": sorted(self.vocabulary.get_terminal_abbreviations())}
        if "parser" in nlp.pipe_names:
            nlp.add_pipe(TERMINAL_ABBREVIATION_COMPONENT, before="parser", config=component_config)
        else:
            nlp.add_pipe(TERMINAL_ABBREVIATION_COMPONENT, last=True, config=component_config)

        logger.info(f"Sentence segmentation pipeline ready: {nlp.pipe_names} "
                    f"({len(abbreviations)} abbreviations)")
        return nlp

    def _compute_sentence_starts(self, text: str) -> Tuple[int, ...]:
        if not text.strip():
            return (0,)
        doc = self.nlp(text)
        starts = [sent.start_char for sent in doc.sents]
        if not starts or starts[0] != 0:
            starts.insert(0, 0)
        return tuple(starts)

    def sentence_starts(self, text: str) -> Tuple[int, ...]:
        """Character offsets where sentences begin (markers masked)."""
        return self._sentence_starts(mask_markers(text or ""))

    def classify(self, text: str, offset: int) -> bool:
        text = text or ""
        masked = mask_markers(text)
        offset = self._clamp(text, offset)

        if not masked[:offset].strip():
            return True

        # Allow whitespace between a boundary and the offset
        for start in self._sentence_starts(masked):
            if start <= offset and not masked[start:offset].strip():
                return True
        return False


_classifiers: Dict[str, SentenceBoundaryClassifier] = {}
_classifiers_lock = threading.Lock()


def get_sentence_classifier(name: Optional[str] = None) -> SentenceBoundaryClassifier:
    """
    Return the shared classifier for ``name`` ('linguistic' or 'heuristic').

    Falls back to the heuristic when spaCy is not installed.
    """
    name = (name or Config.SENTENCE_CLASSIFIER).lower()
    if name not in (LinguisticSentenceClassifier.name, HeuristicSentenceClassifier.name):
        raise ValueError(f"Unknown sentence classifier: {name}")

    if name == LinguisticSentenceClassifier.name and not SPACY_AVAILABLE:
        logger.warning("spaCy not available, falling back to heuristic sentence detection")
        name = HeuristicSentenceClassifier.name

    with _classifiers_lock:
        if name not in _classifiers:
            if name == LinguisticSentenceClassifier.name:
                _classifiers[name] = LinguisticSentenceClassifier()
            else:
                _classifiers[name] = HeuristicSentenceClassifier()
        return _classifiers[name]
