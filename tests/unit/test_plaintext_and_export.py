"""
Unit Tests for the Plain-String Path, Render Configuration and Text Export
"""

import pytest

from document_model import InvalidConfigurationError
from rendering import (
    RenderConfig, extract_paragraphs, extract_text_with_toggle_markers, render_embed
)
from rendering.types import CustomInsertion


def _doc(*blocks):
    return {"type": "doc", "content": list(blocks)}


def _para(*texts):
    return {"type": "paragraph", "content": [{"type": "text", "text": t} for t in texts]}


@pytest.mark.unit
class TestPlainTextRendering:
    """Tests for sources stored as plain strings."""

    def test_literal_substitution_without_smart_case(self):
        """Test that values are inserted verbatim."""
        config = {
            "variableValues": {"product": "season ticket"},
            "variables": [{"name": "product", "occurrences": [{"index": 0, "isAtSentenceStart": True}]}],
        }
        assert render_embed("{{product}} is great.", config) == "season ticket is great."

    def test_unresolved_placeholder_kept(self):
        """Test that names without a value stay as tokens."""
        assert render_embed("Hi {{name}}", {}) == "Hi {{name}}"

    def test_toggle_spans(self):
        """Test disabled spans removed, enabled and unknown kept without markers."""
        text = "A{{toggle:x}}B{{/toggle:x}}C{{toggle:y}}D{{/toggle:y}}E{{toggle:z}}F{{/toggle:z}}"
        result = render_embed(text, {"toggleStates": {"x": False, "y": True}})
        assert result == "ACDEF"

    def test_nested_spans(self):
        """Test that a disabled span nested in an enabled one is removed."""
        text = "{{toggle:o}}1{{toggle:i}}2{{/toggle:i}}3{{/toggle:o}}"
        assert render_embed(text, {"toggleStates": {"i": False}}) == "13"

    def test_stray_markers_stripped(self):
        """Test that unmatched markers are removed without error."""
        assert render_embed("x{{toggle:open}}y{{/toggle:other}}", {}) == "xy"

    def test_insertions_between_paragraphs(self):
        """Test custom paragraphs and notes placed by blank-line paragraph position."""
        text = "First.\n\nSecond.\n\nThird."
        config = {
            "customInsertions": [{"position": 1, "text": "Custom."}],
            "internalNotes": [{"position": 2, "content": "Note."}],
        }
        assert render_embed(text, config) == "First.\n\nCustom.\n\nSecond.\n\nNote.\n\nThird."

    def test_rerender_does_not_duplicate_notes(self):
        """Test that notes already present in cached plain output are not added again."""
        config = {"internalNotes": [{"position": 1, "content": "Check with legal."}]}
        first = render_embed("First.\n\nSecond.", config)
        second = render_embed(first, config)
        assert first == "First.\n\nCheck with legal.\n\nSecond."
        assert second == first


@pytest.mark.unit
class TestRenderConfig:
    """Tests for parsing the camelCase configuration object."""

    def test_from_dict(self):
        """Test that every field is read and typed."""
        config = RenderConfig.from_dict({
            "variableValues": {" name ": "Acme"},
            "toggleStates": {"pro": 0},
            "customInsertions": [{"position": 2, "text": "Hi"}],
            "internalNotes": [{"position": 0, "content": "Note"}],
            "variables": [{"name": "name"}],
            "disableSmartCase": True,
        })
        assert config.variable_values == {"name": "Acme"}
        assert config.toggle_states == {"pro": False}
        assert config.custom_insertions == [CustomInsertion(position=2, text="Hi")]
        assert config.internal_notes[0].content == "Note"
        assert config.variables[0].name == "name"
        assert config.disable_smart_case is True

    def test_defaults(self):
        """Test that a missing configuration means no changes."""
        config = RenderConfig.from_dict(None)
        assert config.to_dict() == {
            "variableValues": {}, "toggleStates": {}, "customInsertions": [],
            "internalNotes": [], "variables": [], "disableSmartCase": False,
        }

    @pytest.mark.parametrize("data", [
        "not an object",
        {"variableValues": ["a"]},
        {"toggleStates": "on"},
        {"customInsertions": [{"position": 1.5, "text": "x"}]},
        {"customInsertions": ["text"]},
        {"internalNotes": [{"position": 0, "content": ""}]},
        {"internalNotes": [{"position": True, "content": "x"}]},
    ])
    def test_invalid_configuration(self, data):
        """Test that unusable entries raise a configuration error."""
        with pytest.raises(InvalidConfigurationError):
            RenderConfig.from_dict(data)


@pytest.mark.unit
class TestTextExport:
    """Tests for paragraph listing and toggle-annotated text."""

    def test_extract_paragraphs(self):
        """Test indices, last-sentence summaries and blank paragraph skipping."""
        long_sentence = "This closing sentence is deliberately written to run past sixty characters"
        document = _doc(
            _para("First one. Second one."),
            {"type": "paragraph", "content": []},
            {"type": "panel", "content": [_para("Intro. " + long_sentence + ".")]},
        )
        paragraphs = extract_paragraphs(document)
        assert [p["index"] for p in paragraphs] == [0, 2]
        assert paragraphs[0]["lastSentence"] == "Second one"
        assert paragraphs[0]["fullText"] == "First one. Second one."
        assert paragraphs[1]["lastSentence"] == long_sentence[:60] + "..."

    def test_extract_text_with_toggle_markers(self):
        """Test that toggle spans are bracketed with their state."""
        document = _doc(
            {"type": "heading", "attrs": {"level": 2}, "content": [{"type": "text", "text": "Plans"}]},
            _para("Basic plan."),
            _para("{{toggle:pro}}Pro plan.{{/toggle:pro}}"),
            _para("{{toggle:beta}}"),
            _para("Beta plan."),
            _para("{{/toggle:beta}}"),
        )
        text = extract_text_with_toggle_markers(document, {"pro": False})
        assert text.splitlines() == [
            "## Plans",
            "Basic plan.",
            "[DISABLED TOGGLE: pro]",
            "Pro plan.",
            "[END DISABLED TOGGLE]",
            "[ENABLED TOGGLE: beta]",
            "Beta plan.",
            "[END ENABLED TOGGLE]",
        ]
