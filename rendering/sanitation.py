"""
Final clean-up of a rendered document before it is handed to a renderer.
"""
import logging
from typing import List

from document_model import DocumentNode, walk
from document_model.errors import EmptyRenderError
from document_model.markers import strip_toggle_markers

logger = logging.getLogger(__name__)

# Attributes editors add that renderers reject
RENDERER_STRIPPED_ATTRS = ('localId',)


def _clean_attrs(node: DocumentNode) -> None:
    if not node.attrs:
        return
    node.attrs = {
        key: value for key, value in node.attrs.items()
        if value is not None and key not in RENDERER_STRIPPED_ATTRS
    }


def _sanitize_children(node: DocumentNode) -> List[DocumentNode]:
    result = []
    for child in node.content or []:
        _clean_attrs(child)
        if child.is_text():
            child.text = strip_toggle_markers(child.text or "")
            if child.text:
                result.append(child)
            continue
        if child.content is None:
            result.append(child)
            continue
        had_content = bool(child.content)
        child.content = _sanitize_children(child)
        if had_content and not child.content:
            continue
        result.append(child)
    return result


def sanitize_document(root: DocumentNode, source_has_content: bool = True) -> DocumentNode:
    """
    Strip leftover toggle marker text, drop empty leaves and containers this
    pass empties, and remove renderer-hostile attributes, in place.

    Raises:
        EmptyRenderError: if the result has no content but the source had some
    """
    _clean_attrs(root)
    root.content = _sanitize_children(root)
    if not root.content and source_has_content:
        raise EmptyRenderError("Rendered document is empty although the source has content",
                               stage="sanitation")
    return root


def has_renderable_content(root: DocumentNode) -> bool:
    """
    True when sanitizing ``root`` as-is would leave something behind: a text
    leaf with text besides toggle markers, or a non-text node that was empty
    to begin with (rules, hard breaks, spacer paragraphs).
    """
    for node, _ in walk(root):
        if node is root:
            continue
        if node.is_text():
            if strip_toggle_markers(node.text or ""):
                return True
        elif not node.content:
            return True
    return False
