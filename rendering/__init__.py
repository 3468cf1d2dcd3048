"""
Rendering: turns a source document plus per-embed configuration into the
final document, and fingerprints sources for staleness checks.
"""
from .types import RenderConfig, CustomInsertion, InternalNote
from .substitution import substitute_variables, maybe_upgrade_case, SubstitutionEngine
from .toggle_filter import filter_toggles, mark_disabled_toggles, ToggleFilter, GhostToggleMarker
from .insertion import insert_custom_paragraphs, insert_internal_notes, is_internal_note_paragraph
from .sanitation import sanitize_document, has_renderable_content
from .plaintext import render_plain_text
from .pipeline import RenderPipeline, render_embed, render_with_ghost_toggles
from .hashing import CanonicalHasher, calculate_content_hash
from .text_export import extract_paragraphs, extract_text_with_toggle_markers

__all__ = [
    'RenderConfig', 'CustomInsertion', 'InternalNote',
    'substitute_variables', 'maybe_upgrade_case', 'SubstitutionEngine',
    'filter_toggles', 'mark_disabled_toggles', 'ToggleFilter', 'GhostToggleMarker',
    'insert_custom_paragraphs', 'insert_internal_notes', 'is_internal_note_paragraph',
    'sanitize_document', 'has_renderable_content', 'render_plain_text',
    'RenderPipeline', 'render_embed', 'render_with_ghost_toggles',
    'CanonicalHasher', 'calculate_content_hash',
    'extract_paragraphs', 'extract_text_with_toggle_markers',
]
