"""
Variable and toggle detection for authoring tools.

Entry points accept a document tree (dictionary or DocumentNode) or a plain
string and pick the right scan automatically. Results are flat, de-duplicated
name lists in first-appearance order with empty description/example
defaults, suitable for autocomplete and for re-deriving stored definitions
after an edit.
"""
import logging
from typing import Any, Dict, List, Optional, Set, Union

from document_model import DocumentNode, coerce_document, extract_text, iter_text_blocks
from document_model.markers import PLACEHOLDER_PATTERN, TOGGLE_OPEN_PATTERN, is_toggle_marker_name
from .occurrence_detector import detect_variable_occurrences, merge_occurrences_into_variables
from .sentence_boundary import SentenceBoundaryClassifier
from .types import Toggle, Variable, coerce_toggles, coerce_variables

logger = logging.getLogger(__name__)

Source = Union[str, DocumentNode, Dict[str, Any]]


def _source_texts(source: Source) -> List[str]:
    """Flattened text of every text block, or the string itself."""
    if isinstance(source, str):
        return [source]
    if source is None:
        return []
    root = coerce_document(source, stage="detection")
    return [extract_text(block) for block in iter_text_blocks(root)]


def detect_variables(source: Source) -> List[Variable]:
    """
    Detect ``{{name}}`` placeholders, skipping toggle markers.

    Args:
        source: Plain string or document tree

    Returns:
        Unique variables in first-appearance order
    """
    seen: Set[str] = set()
    variables: List[Variable] = []
    for text in _source_texts(source):
        for match in PLACEHOLDER_PATTERN.finditer(text):
            name = match.group(1).strip()
            if not name or is_toggle_marker_name(name) or name in seen:
                continue
            seen.add(name)
            variables.append(Variable(name=name))
    return variables


def detect_toggles(source: Source) -> List[Toggle]:
    """Detect toggle names from their opening markers."""
    seen: Set[str] = set()
    toggles: List[Toggle] = []
    for text in _source_texts(source):
        for match in TOGGLE_OPEN_PATTERN.finditer(text):
            name = match.group(1).strip()
            if not name or name in seen:
                continue
            seen.add(name)
            toggles.append(Toggle(name=name))
    return toggles


def detect_variables_with_toggle_context(source: Source) -> List[Variable]:
    """
    Detect variables and compute ``required`` from toggle context.

    A variable is required when at least one of its occurrences lies outside
    every toggle span; a variable seen only inside toggles is optional. Toggle
    spans carry over from one block to the next, and an open marker that is
    never closed runs to the end of the source.
    """
    open_toggles: List[str] = []
    required: Dict[str, bool] = {}
    order: List[str] = []

    for text in _source_texts(source):
        for match in PLACEHOLDER_PATTERN.finditer(text):
            name = match.group(1).strip()
            if not name:
                continue
            if name.startswith('toggle:'):
                open_toggles.append(name[len('toggle:'):].strip())
            elif name.startswith('/toggle:'):
                toggle_name = name[len('/toggle:'):].strip()
                if toggle_name in open_toggles:
                    # Close the innermost open span with this name
                    index = len(open_toggles) - 1 - open_toggles[::-1].index(toggle_name)
                    del open_toggles[index]
            else:
                if name not in required:
                    order.append(name)
                    required[name] = False
                if not open_toggles:
                    required[name] = True

    return [Variable(name=name, required=required[name]) for name in order]


def merge_variable_metadata(detected: List[Any], existing: Optional[List[Any]]) -> List[Variable]:
    """
    Merge re-detected variables with stored definitions by name.

    Author-supplied description and example survive; ``required`` and
    occurrences come from detection. Names that are no longer detected are
    dropped.
    """
    stored = {variable.name: variable for variable in coerce_variables(existing)}
    merged = []
    for variable in coerce_variables(detected):
        previous = stored.get(variable.name)
        merged.append(Variable(
            name=variable.name,
            description=(previous.description if previous else "") or variable.description,
            example=(previous.example if previous else "") or variable.example,
            required=variable.required,
            occurrences=variable.occurrences
        ))
    return merged


def merge_toggle_metadata(detected: List[Any], existing: Optional[List[Any]]) -> List[Toggle]:
    """Merge re-detected toggles with stored definitions, keeping descriptions."""
    stored = {toggle.name: toggle for toggle in coerce_toggles(existing)}
    merged = []
    for toggle in coerce_toggles(detected):
        previous = stored.get(toggle.name)
        merged.append(Toggle(
            name=toggle.name,
            description=(previous.description if previous else "") or toggle.description
        ))
    return merged


def annotate_source(document: Union[DocumentNode, Dict[str, Any]],
                    variables: Optional[List[Any]] = None,
                    toggles: Optional[List[Any]] = None,
                    classifier: Optional[SentenceBoundaryClassifier] = None) -> Dict[str, Any]:
    """
    Re-derive stored definitions for a source document in one call.

    Runs variable detection with toggle context, merges author metadata,
    attaches occurrence data for smart casing and re-detects toggles.

    Returns:
        ``{'variables': [Variable, ...], 'toggles': [Toggle, ...]}``
    """
    root = coerce_document(document, stage="detection")

    detected = detect_variables_with_toggle_context(root)
    merged = merge_variable_metadata(detected, variables)
    occurrences = detect_variable_occurrences(root, classifier=classifier, copy=False)
    annotated = merge_occurrences_into_variables(merged, occurrences)

    merged_toggles = merge_toggle_metadata(detect_toggles(root), toggles)

    logger.info(f"Annotated source: {len(annotated)} variables, {len(merged_toggles)} toggles, "
                f"{len(occurrences)} occurrences")
    return {'variables': annotated, 'toggles': merged_toggles}
