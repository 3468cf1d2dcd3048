"""
Occurrence Detector

Finds every variable placeholder in a document, numbers occurrences per name
across the whole document and records whether each one opens a sentence.
The result is stored on variable definitions at authoring time so rendering
does not have to segment sentences again.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from document_model import DocumentNode, coerce_document
from document_model.markers import OccurrenceTracker, iter_block_placeholders
from .sentence_boundary import SentenceBoundaryClassifier, get_sentence_classifier
from .types import OccurrenceRecord, Variable, VariableOccurrence, coerce_variables

logger = logging.getLogger(__name__)


def detect_variable_occurrences(document: Union[DocumentNode, Dict[str, Any]],
                                classifier: Optional[SentenceBoundaryClassifier] = None,
                                copy: bool = True) -> List[VariableOccurrence]:
    """
    Scan a document for placeholder occurrences in document order.

    Args:
        document: Document tree (dictionary or DocumentNode)
        classifier: Sentence boundary strategy; defaults to the configured one
        copy: Validate and copy the input first (internal callers pass False)

    Returns:
        One VariableOccurrence per placeholder, in document order
    """
    root = coerce_document(document, stage="detection") if copy else document
    classifier = classifier or get_sentence_classifier()

    occurrences: List[VariableOccurrence] = []
    for scan in iter_block_placeholders(root, OccurrenceTracker()):
        for placeholder in scan.placeholders:
            if scan.block.is_heading():
                at_start = True
            else:
                at_start = classifier.classify(scan.text, placeholder.match.start)
            occurrences.append(VariableOccurrence(
                name=placeholder.match.name,
                occurrence_index=placeholder.occurrence_index,
                is_at_sentence_start=at_start
            ))

    logger.debug(f"Detected {len(occurrences)} placeholder occurrences "
                 f"using {classifier.name} sentence detection")
    return occurrences


def merge_occurrences_into_variables(variables: List[Any],
                                     occurrences: List[VariableOccurrence]) -> List[Variable]:
    """Attach detected occurrences to variable definitions, matched by name."""
    by_name: Dict[str, List[OccurrenceRecord]] = {}
    for occurrence in occurrences:
        by_name.setdefault(occurrence.name, []).append(
            OccurrenceRecord(index=occurrence.occurrence_index,
                             is_at_sentence_start=occurrence.is_at_sentence_start)
        )

    merged = []
    for variable in coerce_variables(variables):
        records = sorted(by_name.get(variable.name, []), key=lambda record: record.index)
        merged.append(Variable(
            name=variable.name,
            description=variable.description,
            example=variable.example,
            required=variable.required,
            occurrences=records
        ))
    return merged
