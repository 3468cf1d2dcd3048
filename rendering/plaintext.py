"""
Plain-string rendering for sources stored as text rather than document trees.

Simplified path: literal placeholder replacement with no smart casing,
toggles matched as whole ``{{toggle:name}}...{{/toggle:name}}`` regex spans,
and insertions placed between blank-line separated paragraphs.
"""
import logging
import re
from typing import List

from document_model.markers import (
    PLACEHOLDER_PATTERN, TOGGLE_OPEN_PATTERN, is_toggle_marker_name, strip_toggle_markers
)
from .insertion import adjust_note_position
from .substitution import resolve_value
from .types import RenderConfig

logger = logging.getLogger(__name__)

TOGGLE_SPAN_PATTERN = re.compile(r'\{\{toggle:([^}]+)\}\}([\s\S]*?)\{\{/toggle:\1\}\}')
PARAGRAPH_SPLIT_PATTERN = re.compile(r'\n[ \t]*\n')


def substitute_plain_text(text: str, values: dict) -> str:
    def _replace(match):
        name = match.group(1).strip()
        if is_toggle_marker_name(name):
            return match.group(0)
        value = resolve_value(values, name)
        return match.group(0) if value is None else value

    return PLACEHOLDER_PATTERN.sub(_replace, text)


def split_plain_paragraphs(text: str) -> List[str]:
    return [part for part in PARAGRAPH_SPLIT_PATTERN.split(text) if part.strip()]


def insert_plain_paragraphs(text: str, entries: List[tuple]) -> str:
    if not entries:
        return text
    paragraphs = split_plain_paragraphs(text)
    inserted = {}
    trailing = []
    for position, paragraph in sorted(entries, key=lambda entry: entry[0]):
        if position < len(paragraphs):
            inserted.setdefault(position, []).append(paragraph)
        else:
            trailing.append(paragraph)

    result = []
    for index, paragraph in enumerate(paragraphs):
        result.extend(inserted.get(index, []))
        result.append(paragraph)
    result.extend(trailing)
    return "\n\n".join(result)


def filter_plain_toggles(text: str, toggle_states: dict) -> str:
    def _replace(match):
        return match.group(2) if toggle_states.get(match.group(1).strip(), True) else ''

    # Re-run so spans nested inside a kept span are resolved too
    while True:
        filtered = TOGGLE_SPAN_PATTERN.sub(_replace, text)
        if filtered == text:
            break
        text = filtered

    # Opens left without a close extend to the end of the text
    for match in TOGGLE_OPEN_PATTERN.finditer(text):
        name = match.group(1).strip()
        if not toggle_states.get(name, True):
            logger.warning(f"Unclosed toggle marker '{name}' hides the rest of the text")
            text = text[:match.start()].rstrip()
            break
    return strip_toggle_markers(text)


def render_plain_text(text: str, config: RenderConfig) -> str:
    """Apply substitution, insertions and toggle filtering to a plain string."""
    result = substitute_plain_text(text, config.variable_values)
    result = insert_plain_paragraphs(
        result, [(item.position, item.text) for item in config.custom_insertions]
    )
    # Notes already present as a paragraph (re-rendered output) are skipped
    present = {paragraph.strip() for paragraph in split_plain_paragraphs(text)}
    result = insert_plain_paragraphs(
        result,
        [(adjust_note_position(note, config.custom_insertions), note.content)
         for note in config.internal_notes if note.content.strip() not in present]
    )
    result = filter_plain_toggles(result, config.toggle_states)
    logger.debug(f"Rendered plain-text source ({len(text)} -> {len(result)} characters)")
    return result
