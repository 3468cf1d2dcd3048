"""
Pipeline Orchestrator

Runs the rendering stages in a fixed order on a private copy of the source:

1. substitute variables
2. insert custom paragraphs
3. insert internal notes (positions shifted past step 2)
4. filter toggles
5. sanitize

Insertions run before the toggle filter so a paragraph inserted inside an
enabled toggle's span is kept; the filter only sees marker text, not where a
paragraph came from.
"""
import logging
import time
from typing import Any, Dict, Optional, Union

from detection.proper_nouns import ProperNounClassifier
from document_model import DocumentNode, coerce_document, export_document
from document_model.errors import PipelineError
from .insertion import insert_custom_paragraphs, insert_internal_notes
from .plaintext import render_plain_text
from .sanitation import has_renderable_content, sanitize_document
from .substitution import substitute_variables
from .toggle_filter import filter_toggles, mark_disabled_toggles
from .types import RenderConfig, coerce_render_config

logger = logging.getLogger(__name__)


class RenderPipeline:
    """Renders an embed from its source document and configuration."""

    STAGES = ('substitution', 'custom_insertions', 'internal_notes', 'toggle_filter', 'sanitation')

    def __init__(self, proper_nouns: Optional[ProperNounClassifier] = None):
        self.proper_nouns = proper_nouns

    def render(self, source: Union[DocumentNode, Dict[str, Any], str],
               config: Union[RenderConfig, Dict[str, Any], None] = None
               ) -> Union[DocumentNode, Dict[str, Any], str]:
        """
        Render ``source`` with ``config``.

        Args:
            source: Document tree (dictionary or DocumentNode) or a plain string
            config: RenderConfig or its camelCase dictionary form

        Returns:
            Rendered output in the same form as ``source``

        Raises:
            MalformedDocumentError: source is not a recognizable document tree
            InvalidConfigurationError: a configuration entry is unusable
            EmptyRenderError: rendering removed all content of a non-empty source
        """
        render_config = coerce_render_config(config)

        if isinstance(source, str):
            return render_plain_text(source, render_config)

        start_time = time.time()
        root = coerce_document(source, stage="pipeline")
        source_has_content = has_renderable_content(root)

        stage = self.STAGES[0]
        try:
            root = substitute_variables(
                root,
                render_config.variable_values,
                render_config.variables,
                disable_smart_case=render_config.disable_smart_case,
                proper_nouns=self.proper_nouns,
                copy=False
            )

            stage = self.STAGES[1]
            root = insert_custom_paragraphs(root, render_config.custom_insertions, copy=False)

            stage = self.STAGES[2]
            root = insert_internal_notes(root, render_config.internal_notes,
                                         render_config.custom_insertions, copy=False)

            stage = self.STAGES[3]
            root = filter_toggles(root, render_config.toggle_states, copy=False)

            stage = self.STAGES[4]
            root = sanitize_document(root, source_has_content)
        except PipelineError as e:
            if e.stage is None:
                e.stage = stage
            logger.debug(f"Render failed in stage '{e.stage}': {e}")
            raise

        logger.info(f"Rendered embed: {len(root.content)} top-level nodes "
                    f"in {time.time() - start_time:.3f}s")
        return export_document(root, source)

    def render_with_ghost_toggles(self, source: Union[DocumentNode, Dict[str, Any]],
                                  config: Union[RenderConfig, Dict[str, Any], None] = None
                                  ) -> Union[DocumentNode, Dict[str, Any]]:
        """
        Substitute variables and tag, rather than remove, disabled toggle content.

        Used by diff views that show every toggle. Insertions, notes and
        sanitation are not applied.
        """
        render_config = coerce_render_config(config)
        root = coerce_document(source, stage="pipeline")

        stage = self.STAGES[0]
        try:
            root = substitute_variables(
                root,
                render_config.variable_values,
                render_config.variables,
                disable_smart_case=render_config.disable_smart_case,
                proper_nouns=self.proper_nouns,
                copy=False
            )
            stage = self.STAGES[3]
            root = mark_disabled_toggles(root, render_config.toggle_states, copy=False)
        except PipelineError as e:
            if e.stage is None:
                e.stage = stage
            raise
        return export_document(root, source)


_default_pipeline: Optional[RenderPipeline] = None


def _shared_pipeline() -> RenderPipeline:
    global _default_pipeline
    if _default_pipeline is None:
        _default_pipeline = RenderPipeline()
    return _default_pipeline


def render_embed(source: Union[DocumentNode, Dict[str, Any], str],
                 config: Union[RenderConfig, Dict[str, Any], None] = None
                 ) -> Union[DocumentNode, Dict[str, Any], str]:
    """Render with a shared pipeline instance."""
    return _shared_pipeline().render(source, config)


def render_with_ghost_toggles(source: Union[DocumentNode, Dict[str, Any]],
                              variable_values: Optional[Dict[str, Any]] = None,
                              toggle_states: Optional[Dict[str, Any]] = None,
                              variables: Optional[list] = None
                              ) -> Union[DocumentNode, Dict[str, Any]]:
    """Ghost-mode render with a shared pipeline instance."""
    config = {
        "variableValues": variable_values or {},
        "toggleStates": toggle_states or {},
        "variables": variables or [],
    }
    return _shared_pipeline().render_with_ghost_toggles(source, config)
