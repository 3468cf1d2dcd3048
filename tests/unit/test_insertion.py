"""
Unit Tests for the Insertion Engine
Tests paragraph-sequence positions, stable ordering, internal-note styling,
position adjustment past custom paragraphs, and the duplicate-note guard.
"""

import copy

import pytest

from document_model import DocumentNode, InvalidConfigurationError
from rendering.insertion import (
    adjust_note_position, insert_custom_paragraphs, insert_internal_notes,
    is_internal_note_paragraph
)
from rendering.types import CustomInsertion, InternalNote

NOTE_MARKS = [{"type": "textColor", "attrs": {"color": "#505258"}}]


def _doc(*blocks):
    return {"type": "doc", "content": list(blocks)}


def _para(*texts):
    return {"type": "paragraph", "content": [{"type": "text", "text": t} for t in texts]}


def _texts(result):
    def flatten(node):
        if node.get("type") == "text":
            return node.get("text", "")
        return "".join(flatten(child) for child in node.get("content", []))
    return [flatten(block) for block in result["content"]]


@pytest.mark.unit
class TestCustomInsertions:
    """Tests for inserting plain paragraphs."""

    def test_insert_before_position(self):
        """Test that position N places the paragraph before paragraph N."""
        document = _doc(_para("P0"), _para("P1"), _para("P2"))
        result = insert_custom_paragraphs(document, [{"position": 1, "text": "New"}])
        assert _texts(result) == ["P0", "New", "P1", "P2"]
        assert result["content"][1] == _para("New")

    def test_position_zero_and_past_end(self):
        """Test insertion at the start and appending for positions past the end."""
        document = _doc(_para("P0"))
        result = insert_custom_paragraphs(document, [
            {"position": 5, "text": "End"},
            {"position": 0, "text": "Start"},
        ])
        assert _texts(result) == ["Start", "P0", "End"]

    def test_positions_captured_before_inserting(self):
        """Test that earlier insertions do not shift later positions."""
        document = _doc(_para("P0"), _para("P1"), _para("P2"))
        result = insert_custom_paragraphs(document, [
            {"position": 0, "text": "A"},
            {"position": 2, "text": "B"},
        ])
        assert _texts(result) == ["A", "P0", "P1", "B", "P2"]

    def test_same_position_keeps_array_order(self):
        """Test stable ordering of entries sharing a position."""
        document = _doc(_para("P0"), _para("P1"))
        result = insert_custom_paragraphs(document, [
            {"position": 1, "text": "first"},
            {"position": 0, "text": "zero"},
            {"position": 1, "text": "second"},
        ])
        assert _texts(result) == ["zero", "P0", "first", "second", "P1"]

    def test_nested_paragraph_positions(self):
        """Test that nested paragraphs count and receive siblings in their own parent."""
        document = _doc(_para("P0"), {"type": "panel", "content": [_para("P1")]})
        result = insert_custom_paragraphs(document, [{"position": 1, "text": "In panel"}])
        panel = result["content"][1]
        assert _texts(panel) == ["In panel", "P1"]

    def test_invalid_entries(self):
        """Test that negative positions and blank text are rejected."""
        document = _doc(_para("P0"))
        with pytest.raises(InvalidConfigurationError):
            insert_custom_paragraphs(document, [{"position": -1, "text": "x"}])
        with pytest.raises(InvalidConfigurationError):
            insert_custom_paragraphs(document, [{"position": 0, "text": "  "}])
        with pytest.raises(InvalidConfigurationError):
            insert_custom_paragraphs(document, [{"position": "1", "text": "x"}])

    def test_input_not_mutated(self):
        """Test that the caller's document is unchanged."""
        document = _doc(_para("P0"))
        original = copy.deepcopy(document)
        insert_custom_paragraphs(document, [CustomInsertion(position=0, text="x")])
        assert document == original


@pytest.mark.unit
class TestInternalNotes:
    """Tests for internal-note paragraphs."""

    def test_note_carries_color_mark(self):
        """Test that notes are paragraphs styled with the note color."""
        document = _doc(_para("P0"), _para("P1"))
        result = insert_internal_notes(document, [{"position": 1, "content": "Check pricing"}])
        assert result["content"][1] == {
            "type": "paragraph",
            "content": [{"type": "text", "text": "Check pricing", "marks": NOTE_MARKS}],
        }

    def test_position_adjusted_for_custom_insertions(self):
        """Test that notes shift past custom paragraphs at or before their position."""
        insertions = [CustomInsertion(0, "c0"), CustomInsertion(1, "c1"), CustomInsertion(2, "c2")]
        assert adjust_note_position(InternalNote(1, "n"), insertions) == 3
        assert adjust_note_position(InternalNote(0, "n"), insertions) == 1

    def test_notes_compose_with_custom_insertions(self):
        """Test that a note lands before the same original paragraph either way."""
        document = _doc(_para("P0"), _para("P1"), _para("P2"))
        insertions = [{"position": 1, "text": "Custom"}]
        notes = [{"position": 1, "content": "Note"}]

        with_custom = insert_custom_paragraphs(document, insertions)
        result = insert_internal_notes(with_custom, notes, insertions)
        assert _texts(result) == ["P0", "Custom", "Note", "P1", "P2"]

        without_custom = insert_internal_notes(document, notes)
        assert _texts(without_custom) == ["P0", "Note", "P1", "P2"]

    def test_rerun_does_not_duplicate_notes(self):
        """Test that running twice keeps a single copy of each note."""
        document = _doc(_para("P0"), _para("P1"))
        notes = [{"position": 1, "content": "Internal only"}]
        once = insert_internal_notes(document, notes)
        twice = insert_internal_notes(once, notes)
        assert twice == once
        assert _texts(twice).count("Internal only") == 1

    def test_plain_paragraph_with_same_text_is_not_a_note(self):
        """Test that only note-styled paragraphs count as existing notes."""
        document = _doc(_para("Internal only"))
        result = insert_internal_notes(document, [{"position": 0, "content": "Internal only"}])
        assert _texts(result) == ["Internal only", "Internal only"]
        assert is_internal_note_paragraph(DocumentNode.from_dict(result["content"][0]))
        assert not is_internal_note_paragraph(DocumentNode.from_dict(result["content"][1]))
