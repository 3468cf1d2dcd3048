"""
Detection: placeholder/toggle discovery, occurrence classification and the
sentence-boundary and proper-noun classifiers that feed smart casing.
"""
from .types import (
    Variable, Toggle, VariableOccurrence, OccurrenceRecord, OccurrenceIndex,
    coerce_variables, coerce_toggles
)
from .sentence_boundary import (
    SentenceBoundaryClassifier, HeuristicSentenceClassifier, LinguisticSentenceClassifier,
    get_sentence_classifier, SPACY_AVAILABLE
)
from .proper_nouns import ProperNounClassifier
from .occurrence_detector import detect_variable_occurrences, merge_occurrences_into_variables
from .content_detector import (
    detect_variables, detect_toggles, detect_variables_with_toggle_context,
    merge_variable_metadata, merge_toggle_metadata, annotate_source
)

__all__ = [
    'Variable', 'Toggle', 'VariableOccurrence', 'OccurrenceRecord', 'OccurrenceIndex',
    'coerce_variables', 'coerce_toggles',
    'SentenceBoundaryClassifier', 'HeuristicSentenceClassifier', 'LinguisticSentenceClassifier',
    'get_sentence_classifier', 'SPACY_AVAILABLE',
    'ProperNounClassifier',
    'detect_variable_occurrences', 'merge_occurrences_into_variables',
    'detect_variables', 'detect_toggles', 'detect_variables_with_toggle_context',
    'merge_variable_metadata', 'merge_toggle_metadata', 'annotate_source',
]
