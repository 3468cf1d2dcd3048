"""
Plain-text views of a document for authoring tools: a paragraph list for
picking insertion positions, and a toggle-annotated text dump for diffs.
"""
import re
from typing import Any, Dict, List, Optional, Union

from document_model import DocumentNode, NodeType, coerce_document, iter_text_blocks, paragraph_sequence, walk
from document_model.markers import TOGGLE_MARKER_PATTERN, parse_toggle_marker

LAST_SENTENCE_LENGTH = 60
SENTENCE_SPLIT_PATTERN = re.compile(r'[.!?]+')


def _block_text(block: DocumentNode) -> str:
    parts = []
    for node, _ in walk(block):
        if node.is_text():
            parts.append(node.text or "")
        elif node.type == NodeType.HARD_BREAK.value:
            parts.append("\n")
    return "".join(parts)


def _last_sentence(text: str) -> str:
    sentences = [part for part in SENTENCE_SPLIT_PATTERN.split(text) if part.strip()]
    last = sentences[-1].strip() if sentences else text.strip()
    if len(last) > LAST_SENTENCE_LENGTH:
        return last[:LAST_SENTENCE_LENGTH] + '...'
    return last


def extract_paragraphs(document: Union[DocumentNode, Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    List non-blank paragraphs as ``{index, lastSentence, fullText}``.

    ``index`` is the paragraph's position in the full paragraph sequence
    (blank paragraphs included), i.e. the value an insertion placed before
    that paragraph would use.
    """
    root = coerce_document(document, stage="text_export")
    paragraphs = []
    for index, (_, paragraph) in enumerate(paragraph_sequence(root)):
        full_text = _block_text(paragraph)
        if not full_text.strip():
            continue
        paragraphs.append({
            'index': index,
            'lastSentence': _last_sentence(full_text),
            'fullText': full_text,
        })
    return paragraphs


def extract_text_with_toggle_markers(document: Union[DocumentNode, Dict[str, Any]],
                                     toggle_states: Optional[Dict[str, bool]] = None) -> str:
    """
    Render a document as plain text with each toggle span bracketed by
    ``[ENABLED TOGGLE: name]`` / ``[DISABLED TOGGLE: name]`` lines.
    Toggles missing from ``toggle_states`` are shown as enabled.
    """
    root = coerce_document(document, stage="text_export")
    toggle_states = toggle_states or {}

    def _annotate(match) -> str:
        kind, name = parse_toggle_marker(match.group(0))
        label = 'ENABLED' if toggle_states.get(name, True) else 'DISABLED'
        if kind == 'open':
            return f"\n[{label} TOGGLE: {name}]\n"
        return f"\n[END {label} TOGGLE]\n"

    lines = []
    for block in iter_text_blocks(root):
        text = TOGGLE_MARKER_PATTERN.sub(_annotate, _block_text(block))
        if not text.strip():
            continue
        if block.is_heading():
            level = int(block.attrs.get('level') or 1)
            text = f"{'#' * level} {text.strip()}"
        lines.extend(line.rstrip() for line in text.strip('\n').split('\n'))

    return "\n".join(lines).strip() + ("\n" if lines else "")
