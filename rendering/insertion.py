"""
Insertion Engine

Inserts custom paragraphs and internal notes at positions in the document's
paragraph sequence (depth-first order, 0 = before the first paragraph).
Positions are resolved against the sequence as it was before the pass
started, so entries never shift each other; entries for the same position
keep their configured order, and positions past the end append to the
document.
"""
import logging
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from config import Config
from document_model import (
    DocumentNode, Mark, coerce_document, export_document, extract_text, paragraph_node,
    paragraph_sequence, walk
)
from .types import CustomInsertion, InternalNote, coerce_insertions, coerce_notes

logger = logging.getLogger(__name__)


def internal_note_mark() -> Mark:
    return Mark(type='textColor', attrs={'color': Config.INTERNAL_NOTE_COLOR})


def is_internal_note_paragraph(node: DocumentNode) -> bool:
    """A paragraph with at least one text leaf carrying the internal-note color."""
    if not node.is_paragraph():
        return False
    return any(
        child.is_text() and child.has_mark('textColor', color=Config.INTERNAL_NOTE_COLOR)
        for child in node.content or []
    )


def existing_note_texts(root: DocumentNode) -> Set[str]:
    return {extract_text(node) for node, _ in walk(root) if is_internal_note_paragraph(node)}


def _insert_before_positions(root: DocumentNode, entries: List[Tuple[int, DocumentNode]]) -> int:
    """Insert each node before the paragraph at its position; return how many were placed."""
    sequence = paragraph_sequence(root)
    # Stable: same-position entries keep their order
    for position, node in sorted(entries, key=lambda entry: entry[0]):
        if position < len(sequence):
            parent, anchor = sequence[position]
            index = next(i for i, child in enumerate(parent.content) if child is anchor)
            parent.content.insert(index, node)
        else:
            root.content.append(node)
    return len(entries)


def insert_custom_paragraphs(document: Union[DocumentNode, Dict[str, Any]],
                             insertions: Optional[List[Any]],
                             copy: bool = True) -> Union[DocumentNode, Dict[str, Any]]:
    """
    Insert plain paragraphs for ``{position, text}`` entries.

    Returns:
        The document with paragraphs inserted, in the same form as ``document``
    """
    root = coerce_document(document, stage="custom_insertions") if copy else document
    items = coerce_insertions(insertions)
    placed = _insert_before_positions(root, [(item.position, paragraph_node(item.text)) for item in items])
    logger.debug(f"Inserted {placed} custom paragraphs")
    return export_document(root, document) if copy else root


def adjust_note_position(note: InternalNote, custom_insertions: List[CustomInsertion]) -> int:
    """Shift a note past custom paragraphs inserted at or before its position."""
    return note.position + sum(1 for item in custom_insertions if item.position <= note.position)


def insert_internal_notes(document: Union[DocumentNode, Dict[str, Any]],
                          notes: Optional[List[Any]],
                          custom_insertions: Optional[List[Any]] = None,
                          copy: bool = True) -> Union[DocumentNode, Dict[str, Any]]:
    """
    Insert internal-note paragraphs, styled with the note text color.

    Args:
        document: Document tree, possibly output of an earlier render
        notes: ``{position, content}`` entries, positions relative to the source
        custom_insertions: Custom insertions already applied to ``document``;
            note positions are shifted past them
        copy: Work on a validated copy (the pipeline passes False for its own copy)

    A note whose text already appears as a note paragraph is skipped, so
    re-running against cached output does not duplicate notes.
    """
    root = coerce_document(document, stage="internal_notes") if copy else document
    items = coerce_notes(notes)
    applied = coerce_insertions(custom_insertions)

    present = existing_note_texts(root)
    entries = []
    skipped = 0
    for note in items:
        if note.content in present:
            skipped += 1
            continue
        entries.append((adjust_note_position(note, applied),
                        paragraph_node(note.content, [internal_note_mark()])))

    placed = _insert_before_positions(root, entries)
    if skipped:
        logger.debug(f"Skipped {skipped} internal notes already present")
    logger.debug(f"Inserted {placed} internal notes")
    return export_document(root, document) if copy else root
