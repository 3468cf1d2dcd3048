"""
Smart-Case Substitution Engine

Replaces ``{{name}}`` placeholders with configured values. Occurrences are
numbered with the same block scan the occurrence detector uses, so the N-th
occurrence seen here is the N-th occurrence recorded on the variable
definition, and its stored sentence position decides whether the value's
first letter is upgraded.
"""
import copy as copy_module
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from config import Config
from detection.proper_nouns import ProperNounClassifier
from detection.types import OccurrenceIndex, coerce_variables
from document_model import DocumentNode, Mark, coerce_document, export_document, text_leaves
from document_model.errors import InvalidConfigurationError
from document_model.markers import BlockScan, OccurrenceTracker, iter_block_placeholders

logger = logging.getLogger(__name__)


def maybe_upgrade_case(value: str, is_at_sentence_start: bool, is_proper_noun: bool = False) -> str:
    """
    Upper-case the first character of ``value`` when it opens a sentence or
    names a proper noun. Values that already start with a capital (or with a
    character that has no case) are returned unchanged.
    """
    if not value or not (is_at_sentence_start or is_proper_noun):
        return value
    first = value[0]
    if not first.islower():
        return value
    return first.upper() + value[1:]


def resolve_value(values: Dict[str, Any], name: str) -> Optional[str]:
    """Configured value for ``name``; None means unresolved (keep the token)."""
    if name not in values:
        return None
    value = values[name]
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class SubstitutionEngine:
    """Rewrites placeholder occurrences block by block."""

    def __init__(self, values: Dict[str, Any], variables: Optional[List[Any]] = None,
                 disable_smart_case: bool = False,
                 proper_nouns: Optional[ProperNounClassifier] = None):
        if values is None:
            values = {}
        if not isinstance(values, dict):
            raise InvalidConfigurationError("Variable values must be a mapping of name to value",
                                            stage="substitution")
        self.values = {str(name).strip(): value for name, value in values.items()}
        self.occurrence_index = OccurrenceIndex.from_variables(coerce_variables(variables))
        self.smart_case = not disable_smart_case
        self.proper_nouns = proper_nouns or ProperNounClassifier()
        self.unset_mark = Config.UNSET_VARIABLE_MARK
        self.substituted = 0
        self.unresolved = 0

    def replacement_for(self, name: str, occurrence_index: int) -> Optional[str]:
        value = resolve_value(self.values, name)
        if value is None:
            return None
        if not self.smart_case:
            return value
        return maybe_upgrade_case(
            value,
            self.occurrence_index.is_at_sentence_start(name, occurrence_index),
            self.proper_nouns.is_proper_noun(value)
        )

    def _unset_marks(self, leaf: DocumentNode) -> List[Mark]:
        marks = copy_module.deepcopy(leaf.marks)
        if not leaf.has_mark(self.unset_mark):
            marks.append(Mark(type=self.unset_mark))
        return marks

    def rewrite_block(self, scan: BlockScan) -> None:
        if not scan.placeholders:
            return

        # Character span of every leaf within the flattened block text
        spans: List[Tuple[DocumentNode, int, int]] = []
        offset = 0
        for leaf in text_leaves(scan.block):
            length = len(leaf.text or "")
            spans.append((leaf, offset, offset + length))
            offset += length

        replacements: Dict[int, List[DocumentNode]] = {}
        for leaf, leaf_start, leaf_end in spans:
            segments: List[Tuple[str, List[Mark]]] = []
            cursor = leaf_start
            touched = False
            for placeholder in scan.placeholders:
                match = placeholder.match
                if match.end <= leaf_start or match.start >= leaf_end:
                    continue
                touched = True
                if match.start > cursor:
                    segments.append((scan.text[cursor:match.start], leaf.marks))
                if leaf_start <= match.start:
                    # The token starts in this leaf, so the replacement lives here
                    replacement = self.replacement_for(match.name, placeholder.occurrence_index)
                    if replacement is None:
                        self.unresolved += 1
                        segments.append((match.token, self._unset_marks(leaf)))
                    else:
                        self.substituted += 1
                        segments.append((replacement, leaf.marks))
                cursor = max(cursor, min(match.end, leaf_end))
            if not touched:
                continue
            if cursor < leaf_end:
                segments.append((scan.text[cursor:leaf_end], leaf.marks))
            replacements[id(leaf)] = self._build_leaves(leaf, segments)

        _replace_leaves(scan.block, replacements)

    @staticmethod
    def _build_leaves(leaf: DocumentNode, segments: List[Tuple[str, List[Mark]]]) -> List[DocumentNode]:
        merged: List[Tuple[str, List[Mark]]] = []
        for text, marks in segments:
            if not text:
                continue
            if merged and merged[-1][1] == marks:
                merged[-1] = (merged[-1][0] + text, marks)
            else:
                merged.append((text, marks))

        nodes = []
        for text, marks in merged:
            node = DocumentNode(
                type=leaf.type,
                text=text,
                marks=copy_module.deepcopy(marks),
                attrs=copy_module.deepcopy(leaf.attrs),
                extra=copy_module.deepcopy(leaf.extra)
            )
            nodes.append(node)
        return nodes


def _replace_leaves(node: DocumentNode, replacements: Dict[int, List[DocumentNode]]) -> None:
    if not replacements or not node.content:
        return
    new_content = []
    for child in node.content:
        if id(child) in replacements:
            new_content.extend(replacements[id(child)])
        else:
            _replace_leaves(child, replacements)
            new_content.append(child)
    node.content = new_content


def substitute_variables(document: Union[DocumentNode, Dict[str, Any]],
                         values: Dict[str, Any],
                         variables: Optional[List[Any]] = None,
                         disable_smart_case: bool = False,
                         proper_nouns: Optional[ProperNounClassifier] = None,
                         copy: bool = True) -> Union[DocumentNode, Dict[str, Any]]:
    """
    Substitute placeholder values in a document.

    Args:
        document: Source document tree (never modified when ``copy`` is True)
        values: Variable name -> value; names absent here stay as literal
            ``{{name}}`` tokens marked as code, while None renders as ""
        variables: Variable definitions carrying recorded occurrences
        disable_smart_case: Insert values exactly as configured
        proper_nouns: Proper-noun classifier override
        copy: Work on a validated copy (the pipeline passes False for its own copy)

    Returns:
        The substituted document, in the same form as ``document``
    """
    root = coerce_document(document, stage="substitution") if copy else document
    engine = SubstitutionEngine(values, variables, disable_smart_case, proper_nouns)

    for scan in iter_block_placeholders(root, OccurrenceTracker()):
        engine.rewrite_block(scan)

    logger.debug(f"Substitution: {engine.substituted} replaced, {engine.unresolved} left unresolved")
    return export_document(root, document) if copy else root
