"""
Unit Tests for the Toggle Filter
Tests enabled/disabled spans within a leaf and across blocks, the fail-open
default, and the policy for unmatched markers.
"""

import copy
import logging

import pytest

from document_model import InvalidConfigurationError
from rendering import RenderConfig, render_plain_text, render_with_ghost_toggles
from rendering.toggle_filter import filter_toggles, mark_disabled_toggles

GHOST_ATTRS = {"data-disabled-toggle": True, "data-toggle-name": "t"}


def _doc(*blocks):
    return {"type": "doc", "content": list(blocks)}


def _para(*texts):
    return {"type": "paragraph", "content": [{"type": "text", "text": t} for t in texts]}


def _texts(result):
    """Flattened text of each top-level block."""
    def flatten(node):
        if node.get("type") == "text":
            return node.get("text", "")
        return "".join(flatten(child) for child in node.get("content", []))
    return [flatten(block) for block in result["content"]]


@pytest.mark.unit
class TestInlineToggles:
    """Tests for toggle spans inside a single paragraph."""

    def test_disabled_span_removed(self):
        """Test that disabled content and its markers disappear."""
        document = _doc(_para("Base {{toggle:extra}}Hidden{{/toggle:extra}}price."))
        result = filter_toggles(document, {"extra": False})
        assert _texts(result) == ["Base price."]

    def test_enabled_span_kept_without_markers(self):
        """Test that enabled content stays and marker text is stripped."""
        document = _doc(_para("Base {{toggle:extra}}Shown {{/toggle:extra}}price."))
        result = filter_toggles(document, {"extra": True})
        assert _texts(result) == ["Base Shown price."]

    def test_absent_toggle_fails_open(self):
        """Test that a toggle missing from the state map counts as enabled."""
        document = _doc(_para("{{toggle:extra}}Hidden{{/toggle:extra}}"))
        result = filter_toggles(document, {})
        assert _texts(result) == ["Hidden"]

    def test_markers_split_across_marks(self):
        """Test that spans cover leaves with different marks."""
        document = _doc({"type": "paragraph", "content": [
            {"type": "text", "text": "Keep {{toggle:t}}drop "},
            {"type": "text", "text": "bold", "marks": [{"type": "strong"}]},
            {"type": "text", "text": "{{/toggle:t}} end"},
        ]})
        result = filter_toggles(document, {"t": False})
        assert result["content"][0]["content"] == [
            {"type": "text", "text": "Keep "},
            {"type": "text", "text": " end"},
        ]


@pytest.mark.unit
class TestBlockToggles:
    """Tests for toggle spans that cross block boundaries."""

    def _document(self):
        return _doc(
            _para("Intro"),
            _para("{{toggle:advanced}}"),
            _para("Advanced one"),
            {"type": "bulletList", "content": [
                {"type": "listItem", "content": [_para("Advanced item")]},
            ]},
            _para("{{/toggle:advanced}}"),
            _para("Outro"),
        )

    def test_disabled_removes_whole_blocks(self):
        """Test that every block inside a disabled span is removed."""
        result = filter_toggles(self._document(), {"advanced": False})
        assert _texts(result) == ["Intro", "Outro"]

    def test_enabled_keeps_blocks_and_drops_marker_paragraphs(self):
        """Test that enabled spans keep content and marker-only paragraphs vanish."""
        result = filter_toggles(self._document(), {"advanced": True})
        assert _texts(result) == ["Intro", "Advanced one", "Advanced item", "Outro"]

    def test_non_text_nodes_inside_disabled_span(self):
        """Test that rules and breaks inside a disabled span are removed too."""
        document = _doc(
            _para("{{toggle:t}}"), {"type": "rule"}, _para("{{/toggle:t}}"), {"type": "rule"}
        )
        result = filter_toggles(document, {"t": False})
        assert result["content"] == [{"type": "rule"}]

    def test_nested_toggles(self):
        """Test that content is hidden when any enclosing toggle is disabled."""
        document = _doc(_para("{{toggle:outer}}A{{toggle:inner}}B{{/toggle:inner}}C{{/toggle:outer}}D"))
        assert _texts(filter_toggles(document, {"inner": False})) == ["ACD"]
        assert _texts(filter_toggles(document, {"outer": False})) == ["D"]

    def test_originally_empty_containers_kept(self):
        """Test that spacer paragraphs outside any disabled span survive."""
        document = _doc(_para("Text"), {"type": "paragraph", "content": []})
        result = filter_toggles(document, {})
        assert result["content"][1] == {"type": "paragraph", "content": []}


@pytest.mark.unit
class TestUnmatchedMarkers:
    """Tests for the unmatched-marker policy."""

    def test_unclosed_open_extends_to_end(self, caplog):
        """Test that an open marker without a close hides the rest of the document."""
        document = _doc(_para("Before {{toggle:t}}after"), _para("Later"))
        with caplog.at_level(logging.WARNING):
            result = filter_toggles(document, {"t": False})
        assert _texts(result) == ["Before "]
        assert "Unclosed toggle" in caplog.text

    def test_unclosed_enabled_keeps_content(self):
        """Test that an unclosed enabled toggle keeps everything."""
        document = _doc(_para("{{toggle:t}}Kept"), _para("Also kept"))
        assert _texts(filter_toggles(document, {"t": True})) == ["Kept", "Also kept"]

    def test_stray_close_ignored(self, caplog):
        """Test that a close marker without an open span is dropped and logged."""
        document = _doc(_para("Visible{{/toggle:t}} text"))
        with caplog.at_level(logging.WARNING):
            result = filter_toggles(document, {"t": False})
        assert _texts(result) == ["Visible text"]
        assert "no open span" in caplog.text

    def test_mismatched_close_does_not_close_other_toggle(self):
        """Test that closing one name leaves other open spans open."""
        document = _doc(_para("{{toggle:a}}x{{/toggle:b}}y{{/toggle:a}}z"))
        assert _texts(filter_toggles(document, {"a": False})) == ["z"]

    def test_unclosed_open_on_plain_string_path(self, caplog):
        """Test that plain-string sources hide an unclosed disabled span like trees do."""
        config = RenderConfig(toggle_states={"t": False})
        with caplog.at_level(logging.WARNING):
            result = render_plain_text("Intro\n\n{{toggle:t}}Secret", config)
        assert result == "Intro"
        assert "Secret" not in result
        assert "Unclosed toggle" in caplog.text

    def test_unclosed_enabled_open_on_plain_string_path(self):
        """Test that an unclosed enabled span only loses its marker."""
        config = RenderConfig(toggle_states={"t": True})
        assert render_plain_text("Intro\n\n{{toggle:t}}Shown", config) == "Intro\n\nShown"


@pytest.mark.unit
class TestFilterContract:
    """Tests for copying and validation."""

    def test_input_not_mutated(self):
        """Test that the caller's document is unchanged."""
        document = _doc(_para("{{toggle:t}}x{{/toggle:t}}"))
        original = copy.deepcopy(document)
        filter_toggles(document, {"t": False})
        assert document == original

    def test_invalid_state_map(self):
        """Test that a non-mapping state map is a configuration error."""
        with pytest.raises(InvalidConfigurationError):
            filter_toggles(_doc(_para("x")), ["t"])


@pytest.mark.unit
class TestGhostToggles:
    """Tests for tagging, rather than removing, disabled toggle content."""

    def test_block_span_tagged_not_removed(self):
        """Test that blocks inside a disabled span stay, tagged with the toggle name."""
        document = _doc(
            _para("Intro"),
            _para("{{toggle:t}}"),
            _para("Hidden"),
            {"type": "rule"},
            _para("{{/toggle:t}}"),
            _para("Outro"),
        )
        result = mark_disabled_toggles(document, {"t": False})

        assert _texts(result) == ["Intro", "Hidden", "", "Outro"]
        assert "attrs" not in result["content"][0]
        assert result["content"][1]["attrs"] == GHOST_ATTRS
        assert result["content"][2]["attrs"] == GHOST_ATTRS
        assert "attrs" not in result["content"][3]

    def test_inline_span_tags_paragraph(self):
        """Test that a paragraph with disabled inline text keeps it and is tagged."""
        result = mark_disabled_toggles(_doc(_para("Always {{toggle:t}}sometimes{{/toggle:t}}")), {"t": False})
        paragraph = result["content"][0]
        assert paragraph["content"] == [{"type": "text", "text": "Always sometimes"}]
        assert paragraph["attrs"] == GHOST_ATTRS

    def test_enabled_and_absent_toggles_untagged(self):
        """Test that enabled and unconfigured toggles only lose their markers."""
        document = _doc(
            _para("{{toggle:a}}A{{/toggle:a}}"),
            _para("{{toggle:b}}B{{/toggle:b}}"),
        )
        assert mark_disabled_toggles(document, {"a": True}) == _doc(_para("A"), _para("B"))

    def test_innermost_disabled_toggle_named(self):
        """Test that nested spans report the innermost disabled toggle."""
        document = _doc(
            _para("{{toggle:outer}}"),
            _para("{{toggle:inner}}"),
            _para("Deep"),
            _para("{{/toggle:inner}}"),
            _para("{{/toggle:outer}}"),
        )
        only_outer = mark_disabled_toggles(document, {"outer": False, "inner": True})
        assert only_outer["content"][0]["attrs"]["data-toggle-name"] == "outer"

        both = mark_disabled_toggles(document, {"outer": False, "inner": False})
        assert both["content"][0]["attrs"]["data-toggle-name"] == "inner"

    def test_ghost_render_substitutes_and_keeps_source(self):
        """Test that the ghost render fills values and leaves the source untouched."""
        document = _doc(_para("Welcome."), _para("{{toggle:t}}Hi {{name}}.{{/toggle:t}}"))
        original = copy.deepcopy(document)

        result = render_with_ghost_toggles(document, {"name": "Ada"}, {"t": False})

        assert _texts(result) == ["Welcome.", "Hi Ada."]
        assert result["content"][1]["attrs"] == GHOST_ATTRS
        assert document == original

    def test_invalid_state_map(self):
        """Test that ghost marking validates the state map like the filter."""
        with pytest.raises(InvalidConfigurationError):
            mark_disabled_toggles(_doc(_para("x")), "t")
