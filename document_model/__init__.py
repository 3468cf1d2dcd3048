"""
Document tree model shared by detection and rendering.
"""
from .errors import (
    PipelineError, MalformedDocumentError, InvalidConfigurationError, EmptyRenderError
)
from .types import (
    NodeType, Mark, DocumentNode, text_node, paragraph_node, coerce_document, export_document
)
from .traversal import (
    walk, find_all, extract_text, text_leaves, iter_text_blocks, paragraph_sequence
)

__all__ = [
    'PipelineError', 'MalformedDocumentError', 'InvalidConfigurationError', 'EmptyRenderError',
    'NodeType', 'Mark', 'DocumentNode', 'text_node', 'paragraph_node', 'coerce_document',
    'export_document',
    'walk', 'find_all', 'extract_text', 'text_leaves', 'iter_text_blocks', 'paragraph_sequence',
]
