"""
Tree traversal helpers shared by every detection and rendering stage.
"""
import logging
from typing import Callable, Iterator, List, Optional, Tuple

from config import Config
from .types import DocumentNode

logger = logging.getLogger(__name__)


def walk(node: DocumentNode, max_depth: Optional[int] = None) -> Iterator[Tuple[DocumentNode, int]]:
    """
    Depth-first, pre-order traversal yielding ``(node, depth)``.

    Subtrees below ``max_depth`` are not visited; a tree that deep is
    malformed and traversal stops there instead of recursing further.
    """
    if max_depth is None:
        max_depth = Config.MAX_TRAVERSAL_DEPTH

    stack: List[Tuple[DocumentNode, int]] = [(node, 0)]
    truncated = False
    while stack:
        current, depth = stack.pop()
        if depth > max_depth:
            truncated = True
            continue
        yield current, depth
        if current.content:
            for child in reversed(current.content):
                stack.append((child, depth + 1))

    if truncated:
        logger.warning(f"Traversal stopped at maximum depth {max_depth}; deeper nodes skipped")


def find_all(node: DocumentNode, predicate: Callable[[DocumentNode], bool]) -> List[DocumentNode]:
    return [current for current, _ in walk(node) if predicate(current)]


def extract_text(node: Optional[DocumentNode], max_depth: Optional[int] = None) -> str:
    """Concatenate the text of every descendant text leaf in document order."""
    if node is None:
        return ""
    return "".join(
        current.text for current, _ in walk(node, max_depth)
        if current.is_text() and current.text
    )


def text_leaves(node: DocumentNode) -> List[DocumentNode]:
    return [current for current, _ in walk(node) if current.is_text()]


def is_text_block(node: DocumentNode) -> bool:
    """A text block is a paragraph, a heading, or any container holding text leaves directly."""
    if node.content is None:
        return False
    if node.is_paragraph() or node.is_heading():
        return True
    return any(child.is_text() for child in node.content)


def iter_text_blocks(node: DocumentNode, max_depth: Optional[int] = None) -> Iterator[DocumentNode]:
    """
    Yield text blocks in document order without descending into them.

    Detection and substitution both scan placeholders through this iterator,
    which keeps their per-name occurrence counters in lock-step.
    """
    if max_depth is None:
        max_depth = Config.MAX_TRAVERSAL_DEPTH

    def _visit(current: DocumentNode, depth: int) -> Iterator[DocumentNode]:
        if depth > max_depth:
            logger.warning(f"Text block scan stopped at maximum depth {max_depth}")
            return
        if is_text_block(current):
            yield current
            return
        for child in current.content or []:
            yield from _visit(child, depth + 1)

    yield from _visit(node, 0)


def paragraph_sequence(node: DocumentNode) -> List[Tuple[DocumentNode, DocumentNode]]:
    """
    List every paragraph in depth-first document order as ``(parent, paragraph)``.

    This ordering defines the integer positions used by custom insertions
    and internal notes.
    """
    sequence: List[Tuple[DocumentNode, DocumentNode]] = []

    def _visit(parent: DocumentNode, depth: int) -> None:
        if depth > Config.MAX_TRAVERSAL_DEPTH:
            return
        for child in parent.content or []:
            if child.is_paragraph():
                sequence.append((parent, child))
            elif child.content:
                _visit(child, depth + 1)

    _visit(node, 0)
    return sequence
